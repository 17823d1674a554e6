# jsreport/charts/linechart.py
"""
Interactive line chart with filters, colour grouping, aggregation,
Y transforms/smoothing and faceting.
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

import pandas as pd

from jsreport.charts.base import PlotlyChart, build_filter_controls, chart_loader_js
from jsreport.context import get_config
from jsreport.controls import (
    ChartHtmlControls,
    DropdownControl,
    build_axis_controls_html,
    build_facet_dropdowns,
    filter_js_config,
    generate_appearance_html,
)
from jsreport.core import (
    as_list,
    build_color_maps,
    normalize_facets,
    sanitize_chart_title,
    validate_columns,
)
from jsreport.errors import JSReportError

VALID_AGGREGATORS = ["none", "mean", "median", "count", "min", "max"]

NO_COLOR = "__no_color__"


class LineChart(PlotlyChart):
    """
    Line chart over one dataset.

    Args:
        chart_title: Unique identifier of the chart on its page.
        df: Data used to build controls (options, ranges, colours).
        data_label: Label of the dataset the browser loads.
        x_cols: Columns offered for the X axis; the first is the default.
        y_cols: Columns offered for the Y axis; the first is the default.
        color_cols: Columns offered for "Color by".
        filters: Filter columns (list) or column -> default selection (dict).
        choices: Single-value filter columns (list) or column -> default.
        facet_cols: Columns offered for faceting.
        default_facet_cols: Facets applied initially (at most 2).
        aggregator: How y is aggregated per distinct x within a line.
        title: Heading shown above the chart.
        line_width: Plotly line width.
        marker_size: Plotly marker size.
        notes: HTML shown under the heading.
    """

    def __init__(
        self,
        chart_title: str,
        df: pd.DataFrame,
        data_label: str,
        *,
        x_cols: Optional[List[str]] = None,
        y_cols: Optional[List[str]] = None,
        color_cols: Optional[List[str]] = None,
        filters: Any = None,
        choices: Any = None,
        facet_cols: Any = None,
        default_facet_cols: Any = None,
        aggregator: str = "none",
        title: str = "Line Chart",
        line_width: float = 1,
        marker_size: float = 1,
        notes: str = "",
    ):
        x_cols = as_list(x_cols) or ["x"]
        y_cols = as_list(y_cols) or ["y"]
        color_cols = as_list(color_cols)
        validate_columns(df, x_cols, "x_cols")
        validate_columns(df, y_cols, "y_cols")
        validate_columns(df, color_cols, "color_cols")
        if aggregator not in VALID_AGGREGATORS:
            raise JSReportError(f"aggregator must be one of: {', '.join(VALID_AGGREGATORS)}")
        facet_choices, default_facets = normalize_facets(facet_cols, default_facet_cols)
        validate_columns(df, facet_choices, "facet_cols")

        self.chart_title = sanitize_chart_title(chart_title)
        self.data_label = data_label
        c = self.chart_title
        update_fn = f"updateChart_{c}"

        choice_dds, filter_dds, sliders = build_filter_controls(c, df, filters, choices, update_fn)

        attribute_dds = []
        if len(color_cols) > 1:
            attribute_dds.append(
                DropdownControl(f"color_col_select_{c}", "Color by", color_cols, color_cols[0], f"{update_fn}()")
            )
        attribute_dds.append(
            DropdownControl(f"aggregator_select_{c}", "Aggregator", VALID_AGGREGATORS, aggregator, f"{update_fn}()")
        )
        axes_html = build_axis_controls_html(
            c,
            update_fn,
            x_cols=x_cols,
            y_cols=y_cols,
            default_x=x_cols[0],
            default_y=y_cols[0],
            include_y_transform=True,
            include_cumulative=True,
            include_smoothing=True,
        )
        facet_dds = build_facet_dropdowns(c, facet_choices, default_facets, update_fn)

        controls = ChartHtmlControls(
            chart_title_safe=c,
            chart_div_id=c,
            update_function_name=update_fn,
            choice_dropdowns=choice_dds,
            filter_dropdowns=filter_dds,
            filter_sliders=sliders,
            attribute_dropdowns=attribute_dds,
            axes_html=axes_html,
            facet_dropdowns=facet_dds,
            title=title,
            notes=notes,
        )
        self.appearance_html = generate_appearance_html(
            controls, aspect_ratio_default=get_config().aspect_ratio_default
        )

        default_color = color_cols[0] if color_cols else NO_COLOR
        body = f"""
        var colorMaps = {json.dumps(build_color_maps(color_cols, df))};
        var LINE_WIDTH = {json.dumps(line_width)};
        var MARKER_SIZE = {json.dumps(marker_size)};

        function aggregateValues(values, how) {{
            var valid = values.filter(function(v) {{ return typeof v === 'number' && isFinite(v); }});
            if (how === 'count') return values.length;
            if (valid.length === 0) return NaN;
            if (how === 'mean') return valid.reduce(function(a, b) {{ return a + b; }}, 0) / valid.length;
            if (how === 'min') return Math.min.apply(null, valid);
            if (how === 'max') return Math.max.apply(null, valid);
            var sorted = valid.slice().sort(function(a, b) {{ return a - b; }});
            var mid = Math.floor(sorted.length / 2);
            return sorted.length % 2 ? sorted[mid] : (sorted[mid - 1] + sorted[mid]) / 2;
        }}

        function sortValue(v) {{
            if (v instanceof Date) return v.getTime();
            return v;
        }}

        function lineTraces(rows, xCol, yCol, colorCol, aggregator, yTransform, params, ids, showLegend) {{
            var groups = {{}};
            rows.forEach(function(row) {{
                var key = colorCol === '{NO_COLOR}' ? 'all' : temporalValueToString(row[colorCol], colorCol);
                (groups[key] = groups[key] || []).push(row);
            }});
            return Object.keys(groups).sort(compareKeys).map(function(key) {{
                var groupRows = groups[key].slice().sort(function(a, b) {{
                    var va = sortValue(a[xCol]), vb = sortValue(b[xCol]);
                    if (typeof va === 'number' && typeof vb === 'number') return va - vb;
                    return String(va).localeCompare(String(vb));
                }});
                var xs = [], ys = [];
                if (aggregator === 'none') {{
                    groupRows.forEach(function(row) {{ xs.push(row[xCol]); ys.push(row[yCol]); }});
                }} else {{
                    var buckets = {{}}, firstX = {{}};
                    groupRows.forEach(function(row) {{
                        var k = temporalValueToString(row[xCol], xCol);
                        if (!(k in buckets)) {{ buckets[k] = []; firstX[k] = row[xCol]; }}
                        buckets[k].push(row[yCol]);
                    }});
                    Object.keys(buckets).sort(compareKeys).forEach(function(k) {{
                        xs.push(firstX[k]);
                        ys.push(aggregateValues(buckets[k], aggregator));
                    }});
                }}
                var color = colorCol !== '{NO_COLOR}' && colorMaps[colorCol] ? (colorMaps[colorCol][key] || '#000000') : '#000000';
                return {{
                    x: xs,
                    y: applySeriesTransform(ys, yTransform, params),
                    type: 'scatter',
                    mode: 'lines+markers',
                    name: key,
                    legendgroup: key,
                    showlegend: showLegend,
                    xaxis: ids.x,
                    yaxis: ids.y,
                    line: {{color: color, width: LINE_WIDTH}},
                    marker: {{color: color, size: MARKER_SIZE}}
                }};
            }});
        }}

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var xCol = readSelectValue('x_col_select_{c}', {json.dumps(x_cols[0])});
            var yCol = readSelectValue('y_col_select_{c}', {json.dumps(y_cols[0])});
            var colorCol = readSelectValue('color_col_select_{c}', {json.dumps(default_color)});
            var aggregator = readSelectValue('aggregator_select_{c}', {json.dumps(aggregator)});
            var yTransform = readSelectValue('y_transform_select_{c}', 'identity');
            var params = {{
                ewmaWeight: parseFloat(readSelectValue('ewma_weight_{c}', 0.1)),
                ewmstdWeight: parseFloat(readSelectValue('ewmstd_weight_{c}', 0.1)),
                smaWindow: parseInt(readSelectValue('sma_window_{c}', 10), 10)
            }};
            var facetCols = [readSelectValue('facet1_select_{c}', 'None'), readSelectValue('facet2_select_{c}', 'None')]
                .filter(function(f) {{ return f && f !== 'None'; }});
            var facets = buildFacetPanels(data, facetCols, 1.5);

            var traces = [];
            var layout = {{
                height: aspectRatioHeight('{c}'),
                hovermode: 'closest',
                showlegend: colorCol !== '{NO_COLOR}',
                margin: {{t: facets.mode === 'single' ? 30 : 60}}
            }};
            facets.panels.forEach(function(panel, i) {{
                var ids = facetAxisIds(i);
                traces = traces.concat(lineTraces(panel.rows, xCol, yCol, colorCol, aggregator, yTransform, params, ids, i === 0));
                layout[ids.xaxis] = {{title: {{text: getAxisLabel(xCol, 'identity')}}}};
                layout[ids.yaxis] = {{title: {{text: getAxisLabel(yCol, yTransform)}}}};
            }});
            applyFacetLayout(layout, facets);
            Plotly.newPlot('{c}', traces, layout, {{responsive: true}});
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
