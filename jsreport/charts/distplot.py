# jsreport/charts/distplot.py
"""
Distribution plot: histogram, box and rug of one numeric column, split by
an optional group column.
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

import pandas as pd

from jsreport.charts.base import PlotlyChart, build_filter_controls, chart_loader_js
from jsreport.context import get_config
from jsreport.controls import (
    filter_js_config,
    generate_appearance_html_from_sections,
    generate_filter_controls_html,
    generate_group_column_dropdown_html,
    generate_value_column_dropdown_html,
)
from jsreport.core import (
    DEFAULT_COLOR_PALETTE,
    as_list,
    build_color_maps,
    sanitize_chart_title,
    validate_columns,
)
from jsreport.errors import JSReportError

MIN_BINS = 5
MAX_BINS = 100


class DistPlot(PlotlyChart):
    """
    Histogram over a horizontal box plot with a rug strip underneath.

    Args:
        value_cols: Numeric columns; with more than one a selector appears.
        group_cols: Columns to split by; the first is the default grouping
            and a selector (including "None") appears with more than one.
        show_histogram, show_box, show_rug: Initial visibility of each part.
        histogram_bins: Initial bin count, adjustable below the chart.
        show_controls: Add checkboxes that toggle the three parts.
    """

    def __init__(
        self,
        chart_title: str,
        df: pd.DataFrame,
        data_label: str,
        *,
        value_cols: Optional[List[str]] = None,
        group_cols: Optional[List[str]] = None,
        filters: Any = None,
        choices: Any = None,
        show_histogram: bool = True,
        show_box: bool = True,
        show_rug: bool = True,
        histogram_bins: int = 30,
        box_opacity: float = 0.7,
        show_controls: bool = False,
        title: str = "Distribution Plot",
        notes: str = "",
    ):
        value_cols = as_list(value_cols) or ["value"]
        group_cols = as_list(group_cols)
        validate_columns(df, value_cols, "value_cols")
        validate_columns(df, group_cols, "group_cols")
        for col in value_cols:
            if not pd.api.types.is_numeric_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
                raise JSReportError(f"Column {col} must be numeric")
        if not MIN_BINS <= int(histogram_bins) <= MAX_BINS:
            raise JSReportError(f"histogram_bins must be between {MIN_BINS} and {MAX_BINS}")

        self.chart_title = sanitize_chart_title(chart_title)
        self.data_label = data_label
        c = self.chart_title
        update_fn = f"updateChart_{c}"
        onchange = f"{update_fn}()"

        choice_dds, filter_dds, sliders = build_filter_controls(c, df, filters, choices, update_fn)
        default_group = group_cols[0] if group_cols else None
        value_html, value_js = generate_value_column_dropdown_html(c, value_cols, value_cols[0], update_fn)
        group_html, group_js = generate_group_column_dropdown_html(c, group_cols, default_group, update_fn)

        toggles_html = ""
        if show_controls:
            boxes = []
            for part, label, checked in (
                ("histogram", "Histogram", show_histogram),
                ("box", "Box plot", show_box),
                ("rug", "Rug", show_rug),
            ):
                state = " checked" if checked else ""
                boxes.append(
                    f'<label style="margin-right: 15px;"><input type="checkbox" id="{c}_show_{part}"{state} '
                    f'onchange="{onchange}"> {label}</label>'
                )
            toggles_html = f'\n        <div style="margin: 8px 0;">{"".join(boxes)}</div>'

        bins_html = f"""
    <div style="margin-top: 8px;">
        <label for="{c}_bins_slider"><strong>Bins:</strong> </label>
        <input type="range" id="{c}_bins_slider" min="{MIN_BINS}" max="{MAX_BINS}" step="1" value="{int(histogram_bins)}" oninput="{onchange}" style="width: 200px; vertical-align: middle;">
        <span id="{c}_bins_value">{int(histogram_bins)}</span>
    </div>"""
        self.appearance_html = (
            generate_appearance_html_from_sections(
                generate_filter_controls_html([], filter_dds, sliders),
                value_html + group_html + toggles_html,
                "",
                title,
                notes,
                c,
                choices_html=generate_filter_controls_html(choice_dds, [], []),
                aspect_ratio_default=get_config().aspect_ratio_default,
            )
            + bins_html
        )

        body = f"""
        var colorMaps = {json.dumps(build_color_maps(group_cols, df))};
        var PALETTE = {json.dumps(DEFAULT_COLOR_PALETTE)};
        var BOX_OPACITY = {json.dumps(box_opacity)};
        {value_js}
        {group_js}

        function partVisible(part, fallback) {{
            var el = document.getElementById('{c}_show_' + part);
            return el ? el.checked : fallback;
        }}

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var valueCol = readSelectValue('{c}_value_selector', {json.dumps(value_cols[0])});
            var groupCol = readSelectValue('{c}_group_selector', {json.dumps(default_group or "_none_")});
            if (groupCol === '_none_') groupCol = null;
            var bins = parseInt(readSelectValue('{c}_bins_slider', '{int(histogram_bins)}'), 10);
            setText('{c}_bins_value', String(bins));
            var showHistogram = partVisible('histogram', {json.dumps(bool(show_histogram))});
            var showBox = partVisible('box', {json.dumps(bool(show_box))});
            var showRug = partVisible('rug', {json.dumps(bool(show_rug))});

            var groups = {{}};
            data.forEach(function(row) {{
                var v = row[valueCol];
                if (typeof v !== 'number' || !isFinite(v)) return;
                var key = groupCol ? temporalValueToString(row[groupCol], groupCol) : valueCol;
                (groups[key] = groups[key] || []).push(v);
            }});
            var keys = Object.keys(groups).sort(compareKeys);
            var traces = [];
            keys.forEach(function(key, i) {{
                var color = groupCol && colorMaps[groupCol] ? colorMaps[groupCol][key] : null;
                color = color || PALETTE[i % PALETTE.length];
                var values = groups[key];
                if (showHistogram) {{
                    traces.push({{
                        x: values, type: 'histogram', nbinsx: bins, name: key, legendgroup: key,
                        marker: {{color: color}}, opacity: keys.length > 1 ? 0.6 : 0.8, xaxis: 'x', yaxis: 'y'
                    }});
                }}
                if (showBox) {{
                    traces.push({{
                        x: values, type: 'box', orientation: 'h', boxmean: 'sd', name: key, legendgroup: key,
                        showlegend: !showHistogram, marker: {{color: color}}, opacity: BOX_OPACITY,
                        xaxis: 'x', yaxis: 'y2'
                    }});
                }}
                if (showRug) {{
                    traces.push({{
                        x: values, y: values.map(function() {{ return i; }}), type: 'scatter', mode: 'markers',
                        name: key, legendgroup: key, showlegend: false, hoverinfo: 'x',
                        marker: {{color: color, symbol: 'line-ns-open', size: 10}}, xaxis: 'x', yaxis: 'y3'
                    }});
                }}
            }});
            var layout = {{
                height: aspectRatioHeight('{c}'),
                barmode: 'overlay',
                hovermode: 'closest',
                showlegend: keys.length > 1,
                xaxis: {{title: {{text: valueCol}}}},
                yaxis: {{domain: [0.07, 0.69], title: {{text: 'Count'}}}},
                yaxis2: {{domain: [0.7, 1], anchor: 'x', showticklabels: false}},
                yaxis3: {{domain: [0, 0.05], anchor: 'x', showticklabels: false, zeroline: false, showgrid: false}}
            }};
            Plotly.newPlot('{c}', traces, layout, {{responsive: true}});
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
