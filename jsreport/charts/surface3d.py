# jsreport/charts/surface3d.py
"""
3D surface chart built from long-format (x, y, z) rows.
"""
from __future__ import annotations

import json
from typing import Any, Optional

import pandas as pd

from jsreport.charts.base import PlotlyChart, build_filter_controls, chart_loader_js
from jsreport.controls import (
    build_axis_controls_html,
    filter_js_config,
    generate_appearance_html_from_sections,
    generate_filter_controls_html,
)
from jsreport.core import sanitize_chart_title, validate_columns
from jsreport.errors import JSReportError

SURFACE_COLORSCALES = ["Viridis", "Blues", "Reds", "Greens", "YlOrRd", "Picnic", "Portland", "Electric"]


class Surface3D(PlotlyChart):
    """
    One surface per value of ``group_col`` (or a single surface).

    Rows are pivoted in the browser into a z matrix over the sorted
    distinct x and y values; grid cells without a row are left empty.
    """

    def __init__(
        self,
        chart_title: str,
        df: pd.DataFrame,
        data_label: str,
        *,
        x_col: str = "x",
        y_col: str = "y",
        z_col: str = "z",
        group_col: Optional[str] = None,
        filters: Any = None,
        choices: Any = None,
        title: str = "3D Chart",
        notes: str = "",
    ):
        validate_columns(df, [x_col, y_col, z_col], "x_col/y_col/z_col")
        if group_col is not None:
            validate_columns(df, [group_col], "group_col")
        for col in (x_col, y_col, z_col):
            if not pd.api.types.is_numeric_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
                raise JSReportError(f"Column {col} must be numeric")

        self.chart_title = sanitize_chart_title(chart_title)
        self.data_label = data_label
        c = self.chart_title
        update_fn = f"updateChart_{c}"

        choice_dds, filter_dds, sliders = build_filter_controls(c, df, filters, choices, update_fn)
        axes_html = build_axis_controls_html(
            c, update_fn, x_cols=[x_col], y_cols=[y_col], z_cols=[z_col], include_y_transform=False
        )
        self.appearance_html = generate_appearance_html_from_sections(
            generate_filter_controls_html([], filter_dds, sliders),
            axes_html,
            "",
            title,
            notes,
            c,
            choices_html=generate_filter_controls_html(choice_dds, [], []),
            aspect_ratio_default=1.0,
        )

        body = f"""
        var COLORSCALES = {json.dumps(SURFACE_COLORSCALES)};
        var X_COL = {json.dumps(x_col)}, Y_COL = {json.dumps(y_col)}, Z_COL = {json.dumps(z_col)};
        var GROUP_COL = {json.dumps(group_col)};

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var groups = {{}};
            data.forEach(function(row) {{
                var key = GROUP_COL ? temporalValueToString(row[GROUP_COL], GROUP_COL) : 'all';
                (groups[key] = groups[key] || []).push(row);
            }});
            var keys = Object.keys(groups).sort(compareKeys);
            var traces = keys.map(function(key, i) {{
                var grid = buildSurfaceGrid(groups[key], X_COL, Y_COL, Z_COL);
                return {{
                    x: grid.x, y: grid.y, z: grid.z,
                    type: 'surface',
                    name: key,
                    colorscale: COLORSCALES[i % COLORSCALES.length],
                    showscale: false,
                    opacity: keys.length > 1 ? 0.85 : 1
                }};
            }});
            var layout = {{
                height: aspectRatioHeight('{c}', 1.0),
                margin: {{l: 0, r: 0, t: 20, b: 0}},
                scene: {{
                    xaxis: {{title: {{text: X_COL}}}},
                    yaxis: {{title: {{text: Y_COL}}}},
                    zaxis: {{title: {{text: Z_COL}}}}
                }}
            }};
            Plotly.newPlot('{c}', traces, layout, {{responsive: true}});
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
