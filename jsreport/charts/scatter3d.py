# jsreport/charts/scatter3d.py
"""
3D scatter plot with principal-axis overlays and faceted scenes.
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

import pandas as pd

from jsreport.charts.base import PlotlyChart, build_filter_controls, chart_loader_js
from jsreport.charts.scatterplot import NO_COLOR
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

EIGENVECTOR_COLORS = ["red", "green", "blue"]


class Scatter3D(PlotlyChart):
    """
    Three of ``dimensions`` plotted in a rotatable 3D scene.

    Each facet panel gets its own scene. With ``show_eigenvectors`` the
    principal axes of the visible points are drawn through their centroid
    as PC1-PC3; ``shared_camera`` keeps the facet scenes rotating together.
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
        show_eigenvectors: bool = True,
        shared_camera: bool = True,
        marker_size: float = 4,
        marker_opacity: float = 0.6,
        title: str = "3D Scatter Plot",
        notes: str = "",
    ):
        dimensions = as_list(dimensions)
        if len(dimensions) < 3:
            raise JSReportError("dimensions must contain at least 3 columns")
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
                DropdownControl(f"color_col_select_{c}", "Color by", color_cols, color_cols[0], f"{update_fn}()")
            )
        axes_html = build_axis_controls_html(
            c,
            update_fn,
            x_cols=dimensions,
            y_cols=dimensions,
            z_cols=dimensions,
            default_x=dimensions[0],
            default_y=dimensions[1],
            default_z=dimensions[2],
            include_y_transform=False,
        )
        toggle_text = "Hide Eigenvectors" if show_eigenvectors else "Show Eigenvectors"
        eigen_button = (
            f'\n        <div style="margin-bottom: 8px;"><button id="{c}_eigenvector_toggle" type="button" '
            f'onclick="toggleEigenvectors_{c}()">{toggle_text}</button></div>'
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
            axes_html=eigen_button + axes_html,
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
        var EIGENVECTOR_COLORS = {json.dumps(EIGENVECTOR_COLORS)};
        var SHARED_CAMERA = {json.dumps(bool(shared_camera))};
        var showEigenvectors = {json.dumps(bool(show_eigenvectors))};
        var currentCamera = null;
        var syncingCamera = false;

        window.toggleEigenvectors_{c} = function() {{
            showEigenvectors = !showEigenvectors;
            var button = document.getElementById('{c}_eigenvector_toggle');
            if (button) button.textContent = showEigenvectors ? 'Hide Eigenvectors' : 'Show Eigenvectors';
            window.updateChart_{c}();
        }};

        function sceneId(i) {{ return i === 0 ? 'scene' : 'scene' + (i + 1); }}

        function pointTraces3D(rows, xCol, yCol, zCol, colorCol, scene, showLegend) {{
            var groups = {{}};
            rows.forEach(function(row) {{
                var key = colorCol === '{NO_COLOR}' ? 'all' : temporalValueToString(row[colorCol], colorCol);
                (groups[key] = groups[key] || []).push(row);
            }});
            return Object.keys(groups).sort(compareKeys).map(function(key) {{
                var color = colorCol !== '{NO_COLOR}' && colorMaps[colorCol] ? (colorMaps[colorCol][key] || '#636efa') : '#636efa';
                var pick = function(col) {{ return groups[key].map(function(r) {{ return r[col]; }}); }};
                return {{
                    x: pick(xCol), y: pick(yCol), z: pick(zCol),
                    type: 'scatter3d',
                    mode: 'markers',
                    name: key,
                    legendgroup: key,
                    showlegend: showLegend,
                    scene: scene,
                    marker: {{color: color, size: {json.dumps(marker_size)}, opacity: {json.dumps(marker_opacity)}}}
                }};
            }});
        }}

        function eigenvectorTraces(rows, xCol, yCol, zCol, scene, showLegend) {{
            var pick = function(col) {{ return rows.map(function(r) {{ return r[col]; }}); }};
            var pa = computePrincipalAxes3D(pick(xCol), pick(yCol), pick(zCol));
            if (!pa) return [];
            return pa.axes.map(function(axis, k) {{
                var v = axis.vector, s = pa.scale, m = pa.center;
                var name = 'PC' + (k + 1);
                return {{
                    x: [m[0] - v[0] * s, m[0] + v[0] * s],
                    y: [m[1] - v[1] * s, m[1] + v[1] * s],
                    z: [m[2] - v[2] * s, m[2] + v[2] * s],
                    type: 'scatter3d',
                    mode: 'lines',
                    name: name,
                    legendgroup: name,
                    showlegend: showLegend,
                    scene: scene,
                    hoverinfo: 'name',
                    line: {{color: EIGENVECTOR_COLORS[k], width: 6}}
                }};
            }});
        }}

        function bindCameraSync(nScenes) {{
            var el = document.getElementById('{c}');
            if (!el || !el.on) return;
            if (el.removeAllListeners) el.removeAllListeners('plotly_relayout');
            el.on('plotly_relayout', function(event) {{
                if (syncingCamera) return;
                var key = Object.keys(event).filter(function(k) {{ return /^scene\\d*\\.camera$/.test(k); }})[0];
                if (!key) return;
                currentCamera = event[key];
                var update = {{}};
                for (var i = 0; i < nScenes; i++) {{
                    if (sceneId(i) + '.camera' !== key) update[sceneId(i) + '.camera'] = currentCamera;
                }}
                syncingCamera = true;
                Promise.resolve(Plotly.relayout('{c}', update)).then(
                    function() {{ syncingCamera = false; }},
                    function() {{ syncingCamera = false; }}
                );
            }});
        }}

        window.updateChart_{c} = function() {{
{filter_js_config(c, choice_dds, filter_dds, sliders)}
            var data = applyFiltersWithCounting(allData, '{c}', categoricalCols, continuousCols,
                                                filters, rangeFilters, choiceCols, choices);
            var xCol = readSelectValue('x_col_select_{c}', {json.dumps(dimensions[0])});
            var yCol = readSelectValue('y_col_select_{c}', {json.dumps(dimensions[1])});
            var zCol = readSelectValue('z_col_select_{c}', {json.dumps(dimensions[2])});
            var colorCol = readSelectValue('color_col_select_{c}', {json.dumps(default_color)});
            var facetCols = [readSelectValue('facet1_select_{c}', 'None'), readSelectValue('facet2_select_{c}', 'None')]
                .filter(function(f) {{ return f && f !== 'None'; }});

            var facets = buildFacetPanels(data, facetCols, 1.0);
            var traces = [];
            var layout = {{
                height: aspectRatioHeight('{c}'),
                showlegend: colorCol !== '{NO_COLOR}' || showEigenvectors,
                margin: {{l: 0, r: 0, t: facets.panels.length > 1 ? 40 : 20, b: 0}},
                annotations: []
            }};
            facets.panels.forEach(function(panel, i) {{
                var scene = sceneId(i);
                traces = traces.concat(pointTraces3D(panel.rows, xCol, yCol, zCol, colorCol, scene, i === 0));
                if (showEigenvectors) {{
                    traces = traces.concat(eigenvectorTraces(panel.rows, xCol, yCol, zCol, scene, i === 0));
                }}
                var row = Math.floor(i / facets.nCols), col = i % facets.nCols;
                var domain = {{
                    x: [col / facets.nCols, (col + 1) / facets.nCols],
                    y: [1 - (row + 1) / facets.nRows, 1 - row / facets.nRows]
                }};
                layout[scene] = {{
                    domain: domain,
                    xaxis: {{title: {{text: xCol}}}},
                    yaxis: {{title: {{text: yCol}}}},
                    zaxis: {{title: {{text: zCol}}}}
                }};
                if (currentCamera && SHARED_CAMERA) layout[scene].camera = currentCamera;
                var label = panel.label || [panel.colLabel, panel.rowLabel].filter(Boolean).join(', ');
                if (facets.panels.length > 1 && label) {{
                    layout.annotations.push({{
                        x: (domain.x[0] + domain.x[1]) / 2, y: domain.y[1], xref: 'paper', yref: 'paper',
                        xanchor: 'center', yanchor: 'bottom', text: label, showarrow: false, font: {{size: 12}}
                    }});
                }}
            }});
            Plotly.newPlot('{c}', traces, layout, {{responsive: true}});
            if (SHARED_CAMERA && facets.panels.length > 1) bindCameraSync(facets.panels.length);
        }};
"""
        self.functional_html = chart_loader_js(c, data_label, body)
