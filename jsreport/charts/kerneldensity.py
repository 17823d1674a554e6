# jsreport/charts/kerneldensity.py
"""
Gaussian kernel density estimates over the shared filters and facets.
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

import numpy as np
import pandas as pd

from jsreport.charts.base import PlotlyChart, build_filter_controls, chart_loader_js
from jsreport.context import get_config
from jsreport.controls import (
    ChartHtmlControls,
    DropdownControl,
    build_facet_dropdowns,
    filter_js_config,
    generate_appearance_html,
)
from jsreport.core import (
    DEFAULT_COLOR_PALETTE,
    as_list,
    build_color_maps,
    normalize_facets,
    sanitize_chart_title,
    validate_columns,
)
from jsreport.errors import JSReportError


def silverman_bandwidth(values: Any) -> float:
    """Silverman's rule of thumb, ``1.06 * std * n^-1/5``; 1.0 when undefined."""
    arr = pd.to_numeric(pd.Series(values), errors="coerce").to_numpy(dtype=float)
    arr = arr[np.isfinite(arr)]
    if arr.size < 2:
        return 1.0
    bw = 1.06 * float(np.std(arr)) * arr.size ** -0.2
    return bw if bw > 0 else 1.0


class KernelDensity(PlotlyChart):
    """
    Smoothed density curve per colour group.

    ``bandwidth=None`` uses Silverman's rule on the filtered values. A
    slider below the chart overrides it; its zero position means automatic.
    """

    def __init__(
        self,
        chart_title: str,
        df: pd.DataFrame,
        data_label: str,
        *,
        value_cols: Optional[List[str]] = None,
        color_cols: Optional[List[str]] = None,
        filters: Any = None,
        choices: Any = None,
        facet_cols: Any = None,
        default_facet_cols: Any = None,
        bandwidth: Optional[float] = None,
        density_opacity: float = 0.6,
        fill_density: bool = True,
        title: str = "Kernel Density Plot",
        notes: str = "",
    ):
        value_cols = as_list(value_cols) or ["value"]
        if color_cols is None:
            color_cols = ["color"] if "color" in df.columns else []
        color_cols = as_list(color_cols)
        validate_columns(df, value_cols, "value_cols")
        validate_columns(df, color_cols, "color_cols")
        for col in value_cols:
            if not pd.api.types.is_numeric_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
                raise JSReportError(f"Column {col} must be numeric")
        if bandwidth is not None and not bandwidth > 0:
            raise JSReportError("bandwidth must be positive")
        facet_choices, default_facets = normalize_facets(facet_cols, default_facet_cols)
        validate_columns(df, facet_choices, "facet_cols")

        self.chart_title = sanitize_chart_title(chart_title)
        self.data_label = data_label
        c = self.chart_title
        update_fn = f"updateChart_{c}"
        onchange = f"{update_fn}()"

        choice_dds, filter_dds, sliders = build_filter_controls(c, df, filters, choices, update_fn)

        attribute_dds = []
        if len(value_cols) > 1:
            attribute_dds.append(DropdownControl(f"value_col_select_{c}", "Value", value_cols, value_cols[0], onchange))
        if color_cols:
            attribute_dds.append(
                DropdownControl(f"color_col_select_{c}", "Color by", ["none"] + color_cols, color_cols[0], onchange)
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
            facet_dropdowns=facet_dds,
            title=title,
            notes=notes,
        )

        auto_bw = silverman_bandwidth(df[value_cols[0]])
        slider_max = max(round(3 * auto_bw, 2), 0.1)
        if bandwidth is not None:
            slider_max = max(slider_max, float(bandwidth))
        start = float(bandwidth) if bandwidth is not None else 0.0
        start_label = "auto" if bandwidth is None else f"{start:.3f}"
        bandwidth_html = f"""
    <div style="margin-top: 8px;">
        <label for="{c}_bandwidth_slider"><strong>Bandwidth:</strong> </label>
        <input type="range" id="{c}_bandwidth_slider" min="0" max="{slider_max}" step="{slider_max / 100}" value="{start}" oninput="{onchange}" style="width: 200px; vertical-align: middle;">
        <span id="{c}_bandwidth_label">{start_label}</span>
    </div>"""
        self.appearance_html = (
            generate_appearance_html(controls, aspect_ratio_default=get_config().aspect_ratio_default)
            + bandwidth_html
        )

        body = f"""
        var colorMaps = {json.dumps(build_color_maps(color_cols, df))};
        var PALETTE = {json.dumps(DEFAULT_COLOR_PALETTE)};

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var valueCol = readSelectValue('value_col_select_{c}', {json.dumps(value_cols[0])});
            var colorCol = readSelectValue('color_col_select_{c}', {json.dumps(color_cols[0] if color_cols else "none")});
            var bandwidth = parseFloat(readSelectValue('{c}_bandwidth_slider', '{start}'));
            if (!(bandwidth > 0)) bandwidth = null;
            var facetCols = [readSelectValue('facet1_select_{c}', 'None'), readSelectValue('facet2_select_{c}', 'None')]
                .filter(function(f) {{ return f && f !== 'None'; }});

            var facets = buildFacetPanels(data, facetCols, 1.0);
            var traces = [];
            var usedBandwidth = null;
            var layout = {{height: aspectRatioHeight('{c}'), hovermode: 'closest', showlegend: colorCol !== 'none'}};
            facets.panels.forEach(function(panel, i) {{
                var ids = facetAxisIds(i);
                var groups = {{}};
                panel.rows.forEach(function(row) {{
                    var key = colorCol === 'none' ? valueCol : temporalValueToString(row[colorCol], colorCol);
                    (groups[key] = groups[key] || []).push(row[valueCol]);
                }});
                Object.keys(groups).sort(compareKeys).forEach(function(key, k) {{
                    var kde = computeKernelDensity(groups[key], bandwidth, 201);
                    if (usedBandwidth === null && kde.x.length) usedBandwidth = kde.bandwidth;
                    var color = colorCol !== 'none' && colorMaps[colorCol] ? colorMaps[colorCol][key] : null;
                    color = color || PALETTE[k % PALETTE.length];
                    traces.push({{
                        x: kde.x, y: kde.y, type: 'scatter', mode: 'lines', name: key, legendgroup: key,
                        showlegend: i === 0, xaxis: ids.x, yaxis: ids.y,
                        line: {{color: color, width: 2}},
                        fill: {json.dumps("tozeroy" if fill_density else "none")},
                        opacity: {json.dumps(density_opacity)}
                    }});
                }});
                layout[ids.xaxis] = {{title: {{text: valueCol}}}};
                layout[ids.yaxis] = {{title: {{text: 'Density'}}}};
            }});
            setText('{c}_bandwidth_label', bandwidth ? bandwidth.toFixed(3) :
                    'auto' + (usedBandwidth ? ' (' + usedBandwidth.toFixed(3) + ')' : ''));
            if (facets.mode !== 'single') layout.margin = {{t: 60}};
            applyFacetLayout(layout, facets);
            Plotly.newPlot('{c}', traces, layout, {{responsive: true}});
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
