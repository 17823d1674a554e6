# jsreport/charts/scatterplot.py
"""
Interactive scatter plot with marginal densities, 2D density contours,
colour/point-type grouping and faceting.
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

POINT_SYMBOLS = [
    "circle",
    "square",
    "diamond",
    "cross",
    "x",
    "triangle-up",
    "triangle-down",
    "triangle-left",
    "triangle-right",
    "pentagon",
    "hexagon",
    "star",
]

NO_COLOR = "__no_color__"


class ScatterPlot(PlotlyChart):
    """
    Scatter plot of two of ``dimensions``, selectable in the browser.

    The first two dimensions are the default X and Y. Without facets the
    plot carries marginal histograms and an optional density contour.
    """

    def __init__(
        self,
        chart_title: str,
        df: pd.DataFrame,
        data_label: str,
        dimensions: List[str],
        *,
        color_cols: Optional[List[str]] = None,
        filters: Any = None,
        choices: Any = None,
        facet_cols: Any = None,
        default_facet_cols: Any = None,
        show_density: bool = True,
        marker_size: float = 4,
        marker_opacity: float = 0.6,
        title: str = "Scatter Plot",
        notes: str = "",
    ):
        dimensions = as_list(dimensions)
        if len(dimensions) < 2:
            raise JSReportError("dimensions must contain at least 2 columns")
        if color_cols is None:
            color_cols = ["color"] if "color" in df.columns else []
        color_cols = as_list(color_cols)
        validate_columns(df, dimensions, "dimensions")
        validate_columns(df, color_cols, "color_cols")
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
                DropdownControl(f"color_col_select_{c}", "Color/Point type", color_cols, color_cols[0], f"{update_fn}()")
            )
        axes_html = build_axis_controls_html(
            c,
            update_fn,
            x_cols=dimensions,
            y_cols=dimensions,
            default_x=dimensions[0],
            default_y=dimensions[1],
            include_x_transform=True,
            include_y_transform=True,
            include_cumulative=False,
        )
        facet_dds = build_facet_dropdowns(c, facet_choices, default_facets, update_fn)
        toggle_text = "Hide Density Contours" if show_density else "Show Density Contours"
        density_button = (
            f'\n        <div style="margin-bottom: 8px;"><button id="{c}_density_toggle" type="button" '
            f'onclick="toggleDensity_{c}()">{toggle_text}</button></div>'
        )

        controls = ChartHtmlControls(
            chart_title_safe=c,
            chart_div_id=c,
            update_function_name=update_fn,
            choice_dropdowns=choice_dds,
            filter_dropdowns=filter_dds,
            filter_sliders=sliders,
            attribute_dropdowns=attribute_dds,
            axes_html=density_button + axes_html,
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
        var POINT_SYMBOLS = {json.dumps(POINT_SYMBOLS)};
        var showDensity = {json.dumps(bool(show_density))};

        window.toggleDensity_{c} = function() {{
            showDensity = !showDensity;
            var button = document.getElementById('{c}_density_toggle');
            if (button) button.textContent = showDensity ? 'Hide Density Contours' : 'Show Density Contours';
            window.updateChart_{c}();
        }};

        function pointTraces(rows, xCol, yCol, xTransform, yTransform, colorCol, ids, showLegend) {{
            var groups = groupTransformedPoints(rows, xCol, yCol, xTransform, yTransform,
                                                colorCol === '{NO_COLOR}' ? null : colorCol);
            var allKeys = colorCol === '{NO_COLOR}' ? ['all'] : distinctKeys(allData, colorCol);
            return Object.keys(groups).sort(compareKeys).map(function(key) {{
                var symbolIndex = Math.max(0, allKeys.indexOf(key)) % POINT_SYMBOLS.length;
                var color = colorCol !== '{NO_COLOR}' && colorMaps[colorCol] ? (colorMaps[colorCol][key] || '#636efa') : '#636efa';
                return {{
                    x: groups[key].x,
                    y: groups[key].y,
                    type: 'scatter',
                    mode: 'markers',
                    name: key,
                    legendgroup: key,
                    showlegend: showLegend,
                    xaxis: ids.x,
                    yaxis: ids.y,
                    marker: {{
                        color: color,
                        size: {json.dumps(marker_size)},
                        opacity: {json.dumps(marker_opacity)},
                        symbol: POINT_SYMBOLS[symbolIndex]
                    }}
                }};
            }});
        }}

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var xCol = readSelectValue('x_col_select_{c}', {json.dumps(dimensions[0])});
            var yCol = readSelectValue('y_col_select_{c}', {json.dumps(dimensions[1])});
            var xTransform = readSelectValue('x_transform_select_{c}', 'identity');
            var yTransform = readSelectValue('y_transform_select_{c}', 'identity');
            var colorCol = readSelectValue('color_col_select_{c}', {json.dumps(default_color)});
            var facetCols = [readSelectValue('facet1_select_{c}', 'None'), readSelectValue('facet2_select_{c}', 'None')]
                .filter(function(f) {{ return f && f !== 'None'; }});
            var xLabel = getAxisLabel(xCol, xTransform);
            var yLabel = getAxisLabel(yCol, yTransform);
            var layout = {{height: aspectRatioHeight('{c}'), hovermode: 'closest', showlegend: colorCol !== '{NO_COLOR}'}};
            var traces = [];

            if (facetCols.length === 0) {{
                traces = pointTraces(data, xCol, yCol, xTransform, yTransform, colorCol, {{x: 'x', y: 'y'}}, true);
                var allX = applyAxisTransform(data.map(function(r) {{ return r[xCol]; }}), xTransform);
                var allY = applyAxisTransform(data.map(function(r) {{ return r[yCol]; }}), yTransform);
                if (showDensity) {{
                    traces.unshift({{
                        x: allX, y: allY, type: 'histogram2dcontour', ncontours: 20,
                        colorscale: 'Hot', reversescale: true, showscale: false,
                        opacity: 0.4, hoverinfo: 'skip', showlegend: false, xaxis: 'x', yaxis: 'y'
                    }});
                }}
                traces.push({{x: allX, type: 'histogram', name: 'x density', marker: {{color: '#999999'}},
                              xaxis: 'x', yaxis: 'y2', showlegend: false}});
                traces.push({{y: allY, type: 'histogram', name: 'y density', marker: {{color: '#999999'}},
                              xaxis: 'x2', yaxis: 'y', showlegend: false}});
                layout.xaxis = {{domain: [0, 0.85], title: {{text: xLabel}}}};
                layout.yaxis = {{domain: [0, 0.85], title: {{text: yLabel}}}};
                layout.xaxis2 = {{domain: [0.85, 1], showticklabels: false}};
                layout.yaxis2 = {{domain: [0.85, 1], showticklabels: false}};
                layout.bargap = 0.05;
            }} else {{
                var facets = buildFacetPanels(data, facetCols, 1.0);
                facets.panels.forEach(function(panel, i) {{
                    var ids = facetAxisIds(i);
                    traces = traces.concat(pointTraces(panel.rows, xCol, yCol, xTransform, yTransform, colorCol, ids, i === 0));
                    layout[ids.xaxis] = {{title: {{text: xLabel}}}};
                    layout[ids.yaxis] = {{title: {{text: yLabel}}}};
                }});
                layout.margin = {{t: 60}};
                applyFacetLayout(layout, facets);
            }}
            Plotly.newPlot('{c}', traces, layout, {{responsive: true}});
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
