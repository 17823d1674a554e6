# jsreport/charts/boxandwhiskers.py
"""
Horizontal box-and-whisker chart with optional mean ± std markers.

Boxes span the quartiles, whiskers run from the 10th to the 90th
percentile, and min/max are drawn as separate points.
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
    filter_js_config,
    generate_appearance_html,
)
from jsreport.core import (
    DEFAULT_COLOR_PALETTE,
    as_list,
    build_color_maps,
    sanitize_chart_title,
    validate_columns,
)
from jsreport.errors import JSReportError

DEFAULT_GROUP_COL = "group"


class BoxAndWhiskers(PlotlyChart):
    """
    Horizontal box plots of one numeric column, one box per group.

    Groups come from the colour and grouping selectors (or ``group_col``).
    Checkboxes overlay the 10th/90th percentiles and mean plus or minus one
    standard deviation.
    """

    def __init__(
        self,
        chart_title: str,
        df: pd.DataFrame,
        data_label: str,
        *,
        x_cols: Optional[List[str]] = None,
        color_cols: Optional[List[str]] = None,
        grouping_cols: Optional[List[str]] = None,
        group_col: Optional[str] = DEFAULT_GROUP_COL,
        filters: Any = None,
        choices: Any = None,
        title: str = "Box and Whiskers Plot",
        notes: str = "",
    ):
        x_cols = as_list(x_cols) or ["value"]
        color_cols = as_list(color_cols)
        grouping_cols = as_list(grouping_cols)
        if group_col == DEFAULT_GROUP_COL and group_col not in df.columns:
            group_col = None
        validate_columns(df, x_cols, "x_cols")
        validate_columns(df, color_cols, "color_cols")
        validate_columns(df, grouping_cols, "grouping_cols")
        if group_col is not None:
            validate_columns(df, [group_col], "group_col")
        for col in x_cols:
            if not pd.api.types.is_numeric_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
                raise JSReportError(f"Column {col} must be numeric")

        self.chart_title = sanitize_chart_title(chart_title)
        self.data_label = data_label
        c = self.chart_title
        update_fn = f"updateChart_{c}"
        onchange = f"{update_fn}()"

        choice_dds, filter_dds, sliders = build_filter_controls(c, df, filters, choices, update_fn)

        attribute_dds = []
        if len(x_cols) > 1:
            attribute_dds.append(DropdownControl(f"value_col_select_{c}", "Value", x_cols, x_cols[0], onchange))
        if color_cols:
            attribute_dds.append(
                DropdownControl(f"color_col_select_{c}", "Color by", ["none"] + color_cols, color_cols[0], onchange)
            )
        if grouping_cols:
            attribute_dds.append(
                DropdownControl(f"grouping_col_select_{c}", "Group by", ["none"] + grouping_cols, grouping_cols[0], onchange)
            )
        checkboxes = f"""
        <div style="margin: 8px 0;">
            <label><input type="checkbox" id="show_quantiles_{c}" checked onchange="{onchange}"> Show Quantiles</label>
            <label style="margin-left: 15px;"><input type="checkbox" id="show_mean_std_{c}" checked onchange="{onchange}"> Show Mean &plusmn; Std Dev</label>
        </div>"""

        controls = ChartHtmlControls(
            chart_title_safe=c,
            chart_div_id=c,
            update_function_name=update_fn,
            choice_dropdowns=choice_dds,
            filter_dropdowns=filter_dds,
            filter_sliders=sliders,
            attribute_dropdowns=attribute_dds,
            axes_html=checkboxes,
            title=title,
            notes=notes,
        )
        self.appearance_html = generate_appearance_html(
            controls, aspect_ratio_default=get_config().aspect_ratio_default
        )

        body = f"""
        var colorMaps = {json.dumps(build_color_maps(color_cols + ([group_col] if group_col else []), df))};
        var GROUP_COL = {json.dumps(group_col)};
        var PALETTE = {json.dumps(DEFAULT_COLOR_PALETTE)};
        var BOX_HALF = 0.2, CAP_HALF = 0.075, MEAN_OFFSET = 0.35;

        function quantileSorted(sorted, p) {{
            var idx = (sorted.length - 1) * p;
            var lo = Math.floor(idx), hi = Math.ceil(idx);
            return sorted[lo] + (sorted[hi] - sorted[lo]) * (idx - lo);
        }}

        function computeStats(values) {{
            var sorted = finiteValues(values).sort(function(a, b) {{ return a - b; }});
            var n = sorted.length;
            if (n === 0) return null;
            var mean = sorted.reduce(function(a, b) {{ return a + b; }}, 0) / n;
            var variance = sorted.reduce(function(a, b) {{ return a + (b - mean) * (b - mean); }}, 0) / n;
            return {{
                n: n, min: sorted[0], max: sorted[n - 1],
                p10: quantileSorted(sorted, 0.1), q1: quantileSorted(sorted, 0.25),
                median: quantileSorted(sorted, 0.5), q3: quantileSorted(sorted, 0.75),
                p90: quantileSorted(sorted, 0.9), mean: mean, std: Math.sqrt(variance)
            }};
        }}

        function boxTraces(s, y, color, label, showQuantiles, showMeanStd) {{
            var hover = label + '<br>n=' + s.n + '<br>median=' + s.median.toFixed(3) +
                        '<br>q1=' + s.q1.toFixed(3) + ', q3=' + s.q3.toFixed(3);
            var base = {{type: 'scatter', showlegend: false, hoverinfo: 'text', text: hover}};
            var traces = [
                Object.assign({{}}, base, {{
                    x: [s.q1, s.q3, s.q3, s.q1, s.q1],
                    y: [y - BOX_HALF, y - BOX_HALF, y + BOX_HALF, y + BOX_HALF, y - BOX_HALF],
                    mode: 'lines', fill: 'toself', fillcolor: color, opacity: 0.5, line: {{color: color}}
                }}),
                Object.assign({{}}, base, {{
                    x: [s.median, s.median], y: [y - BOX_HALF, y + BOX_HALF],
                    mode: 'lines', line: {{color: '#000000', width: 3}}
                }})
            ];
            if (showQuantiles) {{
                [[s.p10, s.q1], [s.q3, s.p90]].forEach(function(seg) {{
                    traces.push(Object.assign({{}}, base, {{x: seg, y: [y, y], mode: 'lines', line: {{color: color, width: 1.5}}}}));
                }});
                [s.p10, s.p90].forEach(function(v) {{
                    traces.push(Object.assign({{}}, base, {{x: [v, v], y: [y - CAP_HALF, y + CAP_HALF], mode: 'lines', line: {{color: color, width: 1.5}}}}));
                }});
                traces.push(Object.assign({{}}, base, {{
                    x: [s.min, s.max], y: [y, y], mode: 'markers',
                    marker: {{color: color, size: 7, symbol: 'circle-open'}}
                }}));
            }}
            if (showMeanStd && s.std > 0) {{
                var yMean = y - MEAN_OFFSET;
                var lo = s.mean - 2 * s.std, hi = s.mean + 2 * s.std;
                var wx = [], wy = [];
                for (var k = 0; k <= 40; k++) {{
                    wx.push(lo + (hi - lo) * k / 40);
                    wy.push(yMean + 0.03 * Math.sin(k * Math.PI / 4));
                }}
                traces.push(Object.assign({{}}, base, {{x: wx, y: wy, mode: 'lines', line: {{color: color, width: 1, dash: 'dot'}}}}));
                traces.push(Object.assign({{}}, base, {{
                    x: [-2, -1, 0, 1, 2].map(function(m) {{ return s.mean + m * s.std; }}),
                    y: [yMean, yMean, yMean, yMean, yMean],
                    mode: 'markers', marker: {{color: color, size: [5, 6, 9, 6, 5], symbol: 'diamond'}},
                    text: ['μ-2σ', 'μ-σ', 'μ', 'μ+σ', 'μ+2σ'].map(function(t) {{ return label + ' ' + t; }})
                }}));
            }}
            return traces;
        }}

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var valueCol = readSelectValue('value_col_select_{c}', {json.dumps(x_cols[0])});
            var colorCol = readSelectValue('color_col_select_{c}', {json.dumps(color_cols[0] if color_cols else "none")});
            var groupingCol = readSelectValue('grouping_col_select_{c}', {json.dumps(grouping_cols[0] if grouping_cols else "none")});
            var showQuantiles = document.getElementById('show_quantiles_{c}').checked;
            var showMeanStd = document.getElementById('show_mean_std_{c}').checked;

            var boxes = {{}};
            data.forEach(function(row) {{
                var grouping = groupingCol === 'none' ? '' : temporalValueToString(row[groupingCol], groupingCol);
                var group = GROUP_COL ? temporalValueToString(row[GROUP_COL], GROUP_COL) : '';
                var colorKey = colorCol === 'none' ? '' : temporalValueToString(row[colorCol], colorCol);
                var label = group || colorKey || valueCol;
                if (group && colorKey && colorCol !== GROUP_COL) label = group + ' (' + colorKey + ')';
                var key = JSON.stringify([grouping, label]);
                if (!boxes[key]) boxes[key] = {{grouping: grouping, label: label, colorKey: colorKey, group: group, values: []}};
                boxes[key].values.push(row[valueCol]);
            }});
            var ordered = Object.keys(boxes).map(function(k) {{ return boxes[k]; }}).sort(function(a, b) {{
                var g = compareKeys(a.grouping, b.grouping);
                return g !== 0 ? g : compareKeys(a.label, b.label);
            }});

            var traces = [], tickVals = [], tickText = [], annotations = [];
            var y = 0, lastGrouping = null;
            ordered.forEach(function(box, i) {{
                if (box.grouping !== lastGrouping) {{
                    if (lastGrouping !== null) y -= 1;
                    if (groupingCol !== 'none') {{
                        annotations.push({{xref: 'paper', x: 0, xanchor: 'left', y: y + 0.6, yref: 'y',
                                          text: '<b>' + groupingCol + ': ' + box.grouping + '</b>', showarrow: false}});
                    }}
                    lastGrouping = box.grouping;
                }}
                var stats = computeStats(box.values);
                if (stats) {{
                    var color;
                    if (colorCol !== 'none' && colorMaps[colorCol]) color = colorMaps[colorCol][box.colorKey];
                    else if (GROUP_COL && colorMaps[GROUP_COL]) color = colorMaps[GROUP_COL][box.group];
                    color = color || PALETTE[i % PALETTE.length];
                    traces = traces.concat(boxTraces(stats, y, color, box.label, showQuantiles, showMeanStd));
                }}
                tickVals.push(y);
                tickText.push(box.label);
                y -= 1;
            }});

            var layout = {{
                height: Math.max(400, Math.abs(y) * 40, aspectRatioHeight('{c}')),
                hovermode: 'closest',
                showlegend: false,
                xaxis: {{title: {{text: valueCol}}, zeroline: false}},
                yaxis: {{tickvals: tickVals, ticktext: tickText, automargin: true, zeroline: false}},
                annotations: annotations,
                margin: {{l: 120}}
            }};
            Plotly.react('{c}', traces, layout, {{responsive: true}});
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
