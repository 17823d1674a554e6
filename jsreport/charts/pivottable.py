# jsreport/charts/pivottable.py
"""
PivotTable.js drag-and-drop pivot table over one or more datasets.
"""
from __future__ import annotations

import html
import json
from typing import Any, Dict, List, Optional, Union

from jsreport.core import (
    JS_DEP_C3,
    JS_DEP_D3,
    JS_DEP_JQUERY,
    JS_DEP_PIVOTTABLE,
    DataFormat,
    ReportItem,
    as_list,
)
from jsreport.errors import JSReportError

DEFAULT_COLOUR_MAP = {
    -2.5: "#FF9999",
    -1: "#FFFF99",
    0: "#FFFFFF",
    1: "#99FF99",
    2.5: "#99CCFF",
}

RENDERER_OPTIONS_PLACEHOLDER = "___rendererOptions___"

PIVOT_STYLE_FIX = """
<style>
    .pvtFilterBox { z-index: 10000 !important; position: fixed !important; }
    .pvtUi { font-size: 0.9em; }
</style>"""


def _safe_name(chart_title: str) -> str:
    return str(chart_title).replace(" ", "_")


def colour_scale_js(colour_map: Dict[float, str], extrapolate_colours: bool = False) -> str:
    """Heatmap ``rendererOptions`` mapping values onto ``colour_map`` with d3."""
    keys = sorted(colour_map)
    domain = json.dumps([float(k) for k in keys])
    colours = json.dumps([colour_map[k] for k in keys])
    clamp = "" if extrapolate_colours else ".clamp(true)"
    return (
        "{ heatmap: { colorScaleGenerator: function(values) { "
        f"return d3.scale.linear().domain({domain}).range({colours}){clamp}"
        " }}}"
    )


class PivotTable(ReportItem):
    """
    Interactive pivot table.

    Args:
        chart_title: Unique identifier on the page.
        data_labels: One dataset label or several; with several a selector
            lets the reader switch between them.
        rows, cols, vals: Initial pivot layout.
        inclusions, exclusions: Initial attribute filters
            (``{column: [values]}``).
        colour_map: Value -> colour stops for the heatmap renderers.
        aggregator_name: Initial PivotTable.js aggregator.
        extrapolate_colours: Let the colour scale extend past the stops.
        renderer_name: Initial renderer.
        renderer_options: Raw JS object literal overriding the colour map.
        show_totals: Whether total rows/columns start visible.
        notes: HTML shown under the heading.
    """

    STYLE = PIVOT_STYLE_FIX

    def __init__(
        self,
        chart_title: str,
        data_labels: Union[str, List[str]],
        *,
        rows: Optional[List[str]] = None,
        cols: Optional[List[str]] = None,
        vals: Optional[str] = None,
        inclusions: Optional[Dict[str, List[Any]]] = None,
        exclusions: Optional[Dict[str, List[Any]]] = None,
        colour_map: Optional[Dict[float, str]] = None,
        aggregator_name: str = "Average",
        extrapolate_colours: bool = False,
        renderer_name: str = "Heatmap",
        renderer_options: Optional[str] = None,
        show_totals: bool = False,
        notes: str = "",
    ):
        labels = as_list(data_labels)
        if not labels:
            raise JSReportError("data_labels cannot be empty")
        self.chart_title = _safe_name(chart_title)
        self.data_labels = [str(label) for label in labels]
        self.data_label = self.data_labels[0]
        n = self.chart_title

        if colour_map is None:
            colour_map = DEFAULT_COLOUR_MAP
        if renderer_options is None and colour_map:
            renderer_options = colour_scale_js(colour_map, extrapolate_colours)

        config: Dict[str, Any] = {}
        if rows:
            config["rows"] = as_list(rows)
        if cols:
            config["cols"] = as_list(cols)
        if vals:
            config["vals"] = [vals]
        if inclusions:
            config["inclusions"] = {k: [str(v) for v in vs] for k, vs in inclusions.items()}
        if exclusions:
            config["exclusions"] = {k: [str(v) for v in vs] for k, vs in exclusions.items()}
        config["aggregatorName"] = aggregator_name
        config["rendererName"] = renderer_name
        if renderer_options:
            config["rendererOptions"] = RENDERER_OPTIONS_PLACEHOLDER
        config_js = json.dumps(config, indent=4)
        if renderer_options:
            config_js = config_js.replace(f'"{RENDERER_OPTIONS_PLACEHOLDER}"', renderer_options)

        self.functional_html = f"""
    (function() {{
        window.pivotTableData_{n} = null;
        var pivotTableConfig_{n} = {config_js};

        function valueToString(v) {{
            if (v instanceof Date) {{
                var text = temporalValueToString(v);
                return text.replace('T', ' ');
            }}
            return v;
        }}

        function toArrayOfArrays(data) {{
            if (!data.length) return [[]];
            var keys = Object.keys(data[0]);
            var out = [keys];
            data.forEach(function(row) {{
                out.push(keys.map(function(k) {{ return valueToString(row[k]); }}));
            }});
            return out;
        }}

        window.toggleTotals_{n} = function() {{
            var checkbox = document.getElementById('show_totals_checkbox_{n}');
            var show = checkbox ? checkbox.checked : {json.dumps(bool(show_totals))};
            var root = $('#{n}');
            root.find('.pvtTotal, .pvtGrandTotal, .pvtTotalLabel').toggle(show);
            root.find('th').filter(function() {{ return $(this).text() === 'Totals'; }}).toggle(show);
        }};

        function loadPivotTable_{n}(dataset) {{
            var options = $.extend({{}}, pivotTableConfig_{n});
            var existing = $('#{n}').data('pivotUIOptions');
            if (existing) {{
                ['rows', 'cols', 'vals', 'aggregatorName', 'rendererName', 'inclusions', 'exclusions'].forEach(function(k) {{
                    if (existing[k] !== undefined) options[k] = existing[k];
                }});
            }}
            options.renderers = $.extend(
                {{}},
                $.pivotUtilities.renderers,
                $.pivotUtilities.c3_renderers || {{}},
                $.pivotUtilities.d3_renderers || {{}},
                $.pivotUtilities.export_renderers || {{}}
            );
            options.hiddenAttributes = [""];
            options.onRefresh = function() {{ window.toggleTotals_{n}(); }};
            loadDataset(dataset).then(function(data) {{
                window.pivotTableData_{n} = data;
                $('#{n}').pivotUI(toArrayOfArrays(data), options, true);
            }}).catch(function(error) {{
                showChartError('{n}', error);
            }});
        }}

        window.changeDataset_{n} = function() {{
            var select = document.getElementById('dataset_select_{n}');
            loadPivotTable_{n}(select ? select.value : {json.dumps(self.data_label)});
        }};

        loadPivotTable_{n}({json.dumps(self.data_label)});
    }})();
"""

        selector = ""
        if len(self.data_labels) > 1:
            options = "\n".join(
                f'            <option value="{html.escape(label, quote=True)}">{html.escape(label)}</option>'
                for label in self.data_labels
            )
            selector = f"""
    <div style="margin-bottom: 10px;">
        <label for="dataset_select_{n}"><strong>Dataset:</strong> </label>
        <select id="dataset_select_{n}" onchange="changeDataset_{n}()">
{options}
        </select>
    </div>"""
        checked = " checked" if show_totals else ""
        self.appearance_html = f"""
    <h2>{html.escape(str(chart_title))}</h2>
    <p>{notes}</p>{selector}
    <div style="margin-bottom: 10px;">
        <label><input type="checkbox" id="show_totals_checkbox_{n}"{checked} onchange="toggleTotals_{n}()"> Show Totals</label>
    </div>
    <div id="{n}"></div>"""

    def dependencies(self) -> List[str]:
        return list(self.data_labels)

    def js_dependencies(self) -> List[str]:
        return [JS_DEP_JQUERY, JS_DEP_D3, JS_DEP_C3, JS_DEP_PIVOTTABLE]

    def attribution_html(self, dataformat: DataFormat) -> str:
        from jsreport.export.data_export import ATTRIBUTION_STYLE

        dataformat = DataFormat.coerce(dataformat)
        names = [
            f"{label}.{dataformat.extension}" if dataformat.is_external else label
            for label in self.data_labels
        ]
        return f'<p style="{ATTRIBUTION_STYLE}">Data: {", ".join(names)}</p>'
