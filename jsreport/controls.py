# jsreport/controls.py
"""
HTML controls shared by the interactive charts.

Charts describe their filters, choices, attributes and facets as
``DropdownControl``/``RangeSliderControl`` values and hand them to
``generate_appearance_html``, which lays them out in the standard
Filters / Plot Attributes boxes above the chart container.
"""
from __future__ import annotations

import datetime as dt
import html
import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from jsreport.core import (
    is_continuous_column,
    unique_sorted_strings,
    value_to_string,
)

VALUE_TYPES = ("integer", "numeric", "date", "datetime", "time")

X_TRANSFORMS = ["identity", "log", "z_score", "quantile", "inverse_cdf"]
CUMULATIVE_TRANSFORMS = ["cumulative", "cumprod"]
SMOOTHING_TRANSFORMS = ["ewma", "ewmstd", "sma"]


@dataclass
class DropdownControl:
    id: str
    label: str
    options: List[str]
    default_value: Union[str, List[str], None]
    onchange: str


@dataclass
class RangeSliderControl:
    id: str
    label: str
    min_value: float
    max_value: float
    default_min: float
    default_max: float
    onchange: str
    value_type: str = "numeric"


@dataclass
class ChartHtmlControls:
    chart_title_safe: str
    chart_div_id: str
    update_function_name: str
    choice_dropdowns: List[DropdownControl] = field(default_factory=list)
    filter_dropdowns: List[DropdownControl] = field(default_factory=list)
    filter_sliders: List[RangeSliderControl] = field(default_factory=list)
    attribute_dropdowns: List[DropdownControl] = field(default_factory=list)
    axes_html: str = ""
    facet_dropdowns: List[DropdownControl] = field(default_factory=list)
    title: str = ""
    notes: str = ""


def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def _defaults_as_strings(default_value: Any) -> List[str]:
    if default_value is None:
        return []
    if isinstance(default_value, (list, tuple, set)):
        return [value_to_string(v) for v in default_value]
    return [value_to_string(default_value)]


def _options_html(options: Sequence[Any], selected: Sequence[str], labels: Optional[Dict[str, str]] = None) -> str:
    lines = []
    for opt in options:
        value = "None" if opt is None else str(opt)
        text = (labels or {}).get(value, value)
        sel = " selected" if value in selected else ""
        lines.append(f'<option value="{_esc(value)}"{sel}>{_esc(text)}</option>')
    return "\n                ".join(lines)


# ============================================================================
# DROPDOWNS AND SLIDERS
# ============================================================================


def generate_dropdown_html(dropdown: DropdownControl, multiselect: bool = False) -> str:
    multiple = " multiple" if multiselect else ""
    size = f' size="{min(max(len(dropdown.options), 2), 6)}"' if multiselect else ""
    options = _options_html(dropdown.options, _defaults_as_strings(dropdown.default_value))
    return f"""
        <div style="display: flex; gap: 10px; align-items: center; margin-bottom: 8px;">
            <div style="flex: 0 0 70%;">
                <label for="{dropdown.id}"><strong>{_esc(dropdown.label)}:</strong> </label>
                <select id="{dropdown.id}"{multiple}{size} onchange="{_esc(dropdown.onchange)}" style="min-width: 150px;">
                {options}
                </select>
            </div>
            <div style="flex: 0 0 30%;">
                <span id="{dropdown.id}_obs_count" style="color: #666; font-size: 0.9em;"></span>
            </div>
        </div>"""


def generate_choice_dropdown_html(dropdown: DropdownControl) -> str:
    options = _options_html(dropdown.options, _defaults_as_strings(dropdown.default_value))
    return f"""
        <div style="margin-bottom: 8px;">
            <label for="{dropdown.id}"><strong>{_esc(dropdown.label)}:</strong> </label>
            <select id="{dropdown.id}" onchange="{_esc(dropdown.onchange)}">
                {options}
            </select>
        </div>"""


def format_slider_value(value: float, value_type: str) -> str:
    """Server-side twin of the slider's ``formatValue_<id>`` function."""
    if value_type in ("date", "datetime"):
        stamp = dt.datetime.fromtimestamp(value / 1000.0, tz=dt.timezone.utc)
        return stamp.strftime("%Y-%m-%d" if value_type == "date" else "%Y-%m-%dT%H:%M:%S")
    if value_type == "time":
        total = int(value // 1000)
        return f"{total // 3600:02d}:{(total // 60) % 60:02d}:{total % 60:02d}"
    if value_type == "integer":
        return str(int(round(value)))
    if float(value).is_integer():
        return str(int(value))
    return str(round(float(value), 2))


_JS_FORMATTERS = {
    "date": "return new Date(x).toISOString().slice(0, 10);",
    "datetime": "return new Date(x).toISOString().slice(0, 19);",
    "time": (
        "var s = Math.floor(x / 1000); var p = function(n) { return (n < 10 ? '0' : '') + n; };\n"
        "            return p(Math.floor(s / 3600)) + ':' + p(Math.floor(s / 60) % 60) + ':' + p(s % 60);"
    ),
    "integer": "return String(Math.round(x));",
    "numeric": "return Number.isInteger(x) ? String(x) : x.toFixed(2);",
}


def generate_range_slider_html(slider: RangeSliderControl) -> str:
    if slider.value_type == "integer":
        step = 1.0
    else:
        span = slider.max_value - slider.min_value
        step = span / 1000 if span > 0 else 1.0
    display = (
        f"{format_slider_value(slider.default_min, slider.value_type)} to "
        f"{format_slider_value(slider.default_max, slider.value_type)}"
    )
    formatter = _JS_FORMATTERS.get(slider.value_type, _JS_FORMATTERS["numeric"])
    sid = slider.id
    return f"""
        <div style="display: flex; gap: 10px; align-items: center; margin-bottom: 12px;">
            <div style="flex: 0 0 70%;">
                <label><strong>{_esc(slider.label)}:</strong> </label>
                <span id="{sid}_display">{display}</span>
                <div id="{sid}_slider" style="margin: 8px 10px 0 10px;"></div>
            </div>
            <div style="flex: 0 0 30%;">
                <span id="{sid}_obs_count" style="color: #666; font-size: 0.9em;"></span>
            </div>
        </div>
        <script>
        function formatValue_{sid}(x) {{
            {formatter}
        }}
        $(function() {{
            $("#{sid}_slider").slider({{
                range: true,
                min: {json.dumps(slider.min_value)},
                max: {json.dumps(slider.max_value)},
                step: {json.dumps(step)},
                values: [{json.dumps(slider.default_min)}, {json.dumps(slider.default_max)}],
                slide: function(event, ui) {{
                    $("#{sid}_display").text(formatValue_{sid}(ui.values[0]) + " to " + formatValue_{sid}(ui.values[1]));
                }},
                change: function(event, ui) {{
                    $("#{sid}_display").text(formatValue_{sid}(ui.values[0]) + " to " + formatValue_{sid}(ui.values[1]));
                    $(this).data("minValue", ui.values[0]);
                    $(this).data("maxValue", ui.values[1]);
                    {slider.onchange}
                }}
            }});
        }});
        function get{sid}Min() {{ return $("#{sid}_slider").slider("values", 0); }}
        function get{sid}Max() {{ return $("#{sid}_slider").slider("values", 1); }}
        </script>"""


# ============================================================================
# LAYOUT
# ============================================================================

FILTERS_BOX_STYLE = "background-color: #fff5f5; border: 1px solid #ffcccc; border-radius: 5px; padding: 10px 15px; margin-bottom: 10px;"
ATTRIBUTES_BOX_STYLE = "background-color: #f0fff0; border: 1px solid #ccffcc; border-radius: 5px; padding: 10px 15px; margin-bottom: 10px;"


def generate_aspect_ratio_html(chart_div_id: str, aspect_ratio_default: float = 0.6) -> str:
    return f"""
        <div style="margin-top: 10px;">
            <label for="{chart_div_id}_aspect_ratio_slider"><strong>Aspect ratio:</strong> </label>
            <input type="range" id="{chart_div_id}_aspect_ratio_slider" min="{math.log(0.25)}" max="{math.log(2.5)}" step="0.01" value="{math.log(aspect_ratio_default)}" style="width: 200px; vertical-align: middle;">
            <span id="{chart_div_id}_aspect_ratio_label">{aspect_ratio_default:.2f}</span>
            <span style="color: #666; font-size: 0.9em;">(0.25 - 2.5)</span>
        </div>"""


def _facets_html(facet_dropdowns: List[DropdownControl]) -> str:
    if not facet_dropdowns:
        return ""
    if len(facet_dropdowns) == 1:
        body = generate_choice_dropdown_html(facet_dropdowns[0])
    else:
        cells = "".join(f"<div>{generate_choice_dropdown_html(dd)}</div>" for dd in facet_dropdowns[:2])
        body = f'<div style="display: grid; grid-template-columns: 1fr 1fr; gap: 10px;">{cells}</div>'
    return f'<h4 style="margin: 10px 0 5px 0;">Facets</h4>{body}'


def _filters_box(chart_div_id: str, body: str) -> str:
    return f"""
    <div style="{FILTERS_BOX_STYLE}">
        <h4 style="margin: 0 0 8px 0;">Filters <span id="{chart_div_id}_total_obs" style="font-weight: normal; color: #666; font-size: 0.9em;"></span></h4>
        {body}
    </div>"""


def _attributes_box(body: str) -> str:
    return f"""
    <div style="{ATTRIBUTES_BOX_STYLE}">
        <h4 style="margin: 0 0 8px 0;">Plot Attributes</h4>
        {body}
    </div>"""


def generate_filter_controls_html(
    choice_dropdowns: List[DropdownControl],
    filter_dropdowns: List[DropdownControl],
    filter_sliders: List[RangeSliderControl],
    multiselect: bool = True,
) -> str:
    parts = [generate_choice_dropdown_html(dd) for dd in choice_dropdowns]
    parts += [generate_dropdown_html(dd, multiselect) for dd in filter_dropdowns]
    parts += [generate_range_slider_html(s) for s in filter_sliders]
    return "".join(parts)


def generate_appearance_html(
    controls: ChartHtmlControls,
    multiselect_filters: bool = True,
    aspect_ratio_default: float = 0.6,
) -> str:
    """
    Lay out a chart's controls above its container div.

    Args:
        controls: Everything the chart wants to show.
        multiselect_filters: Render categorical filters as multi-selects.
        aspect_ratio_default: Initial value of the aspect ratio slider.

    Returns:
        HTML with the title, notes, Filters box, Plot Attributes box and
        the chart ``<div>``.
    """
    filters_html = generate_filter_controls_html(
        controls.choice_dropdowns, controls.filter_dropdowns, controls.filter_sliders, multiselect_filters
    )

    sections = [f"<h2>{_esc(controls.title)}</h2>", f"<p>{controls.notes}</p>"]
    if filters_html:
        sections.append(_filters_box(controls.chart_div_id, filters_html))

    attribute_parts = [generate_choice_dropdown_html(dd) for dd in controls.attribute_dropdowns]
    if controls.axes_html:
        attribute_parts.append(controls.axes_html)
    attribute_parts.append(_facets_html(controls.facet_dropdowns))
    if any(attribute_parts):
        attribute_parts.append(generate_aspect_ratio_html(controls.chart_div_id, aspect_ratio_default))
        sections.append(_attributes_box("".join(attribute_parts)))

    if controls.chart_div_id:
        sections.append(f'<div id="{controls.chart_div_id}"></div>')
    return "\n".join(sections)


def generate_appearance_html_from_sections(
    filters_html: str,
    plot_attributes_html: str,
    faceting_html: str,
    title: str,
    notes: str,
    chart_div_id: str,
    choices_html: str = "",
    aspect_ratio_default: float = 0.6,
) -> str:
    """Same layout as ``generate_appearance_html`` from pre-rendered pieces."""
    sections = [f"<h2>{_esc(title)}</h2>", f"<p>{notes}</p>"]
    if choices_html or filters_html:
        sections.append(_filters_box(chart_div_id, choices_html + filters_html))
    if plot_attributes_html or faceting_html:
        body = plot_attributes_html + faceting_html
        if chart_div_id:
            body += generate_aspect_ratio_html(chart_div_id, aspect_ratio_default)
        sections.append(_attributes_box(body))
    if chart_div_id:
        sections.append(f'<div id="{chart_div_id}"></div>')
    return "\n".join(sections)


# ============================================================================
# BUILDERS
# ============================================================================


def build_facet_dropdowns(
    chart_title_safe: str,
    facet_choices: List[str],
    default_facets: List[str],
    update_function: str,
) -> List[DropdownControl]:
    onchange = f"{update_function}()"
    if not facet_choices:
        return []
    if len(facet_choices) == 1:
        col = facet_choices[0]
        default = col if col in default_facets else "None"
        return [DropdownControl(f"facet1_select_{chart_title_safe}", "Facet by", ["None", col], default, onchange)]
    options = ["None"] + list(facet_choices)
    default1 = default_facets[0] if len(default_facets) > 0 else "None"
    default2 = default_facets[1] if len(default_facets) > 1 else "None"
    return [
        DropdownControl(f"facet1_select_{chart_title_safe}", "Facet 1", options, default1, onchange),
        DropdownControl(f"facet2_select_{chart_title_safe}", "Facet 2", options, default2, onchange),
    ]


def generate_facet_dropdowns_html(
    chart_title_safe: str,
    facet_choices: List[str],
    default_facets: List[str],
    update_function: str,
) -> str:
    return _facets_html(build_facet_dropdowns(chart_title_safe, facet_choices, default_facets, update_function))


def build_choice_dropdowns(
    chart_title_safe: str,
    choices: Dict[str, Any],
    df: pd.DataFrame,
    update_function: str,
) -> List[DropdownControl]:
    dropdowns = []
    for col, default in choices.items():
        if col not in df.columns:
            continue
        options = unique_sorted_strings(df[col])
        default_str = value_to_string(default) if default is not None else None
        if default_str not in options:
            default_str = options[0] if options else None
        dropdowns.append(
            DropdownControl(f"{col}_choice_{chart_title_safe}", str(col), options, default_str, f"{update_function}()")
        )
    return dropdowns


def slider_value_type(series: pd.Series) -> str:
    values = series.dropna()
    if pd.api.types.is_datetime64_any_dtype(series):
        all_midnight = bool((values == values.dt.normalize()).all()) if not values.empty else True
        return "date" if all_midnight else "datetime"
    if not values.empty and all(isinstance(v, dt.time) for v in values):
        return "time"
    if not values.empty and all(isinstance(v, dt.datetime) for v in values):
        ts = pd.to_datetime(values)
        return "date" if bool((ts == ts.dt.normalize()).all()) else "datetime"
    if not values.empty and all(isinstance(v, dt.date) for v in values):
        return "date"
    if pd.api.types.is_integer_dtype(series):
        return "integer"
    return "numeric"


def to_slider_number(value: Any) -> float:
    """Map a value onto the slider's numeric axis (epoch ms, ms since midnight, or itself)."""
    if isinstance(value, dt.time):
        return float(((value.hour * 60 + value.minute) * 60 + value.second) * 1000 + value.microsecond // 1000)
    if isinstance(value, (pd.Timestamp, dt.date, dt.datetime)):
        ts = pd.Timestamp(value)
        if ts.tzinfo is not None:
            ts = ts.tz_convert("UTC").tz_localize(None)
        return float(ts.value // 10**6)
    return float(value)


def build_filter_dropdowns(
    chart_title_safe: str,
    filters: Dict[str, List[Any]],
    df: pd.DataFrame,
    update_function: str,
) -> Tuple[List[DropdownControl], List[RangeSliderControl]]:
    """
    Turn normalized filters into dropdowns (categorical) and sliders (continuous).

    Returns:
        (dropdowns, sliders)
    """
    dropdowns: List[DropdownControl] = []
    sliders: List[RangeSliderControl] = []
    onchange = f"{update_function}()"
    for col, defaults in filters.items():
        if col not in df.columns:
            continue
        if is_continuous_column(df, col):
            values = [to_slider_number(v) for v in df[col].dropna()]
            lo, hi = min(values), max(values)
            sliders.append(
                RangeSliderControl(
                    id=f"{col}_range_{chart_title_safe}",
                    label=str(col),
                    min_value=lo,
                    max_value=hi,
                    default_min=lo,
                    default_max=hi,
                    onchange=onchange,
                    value_type=slider_value_type(df[col]),
                )
            )
            continue
        options = unique_sorted_strings(df[col])
        wanted = _defaults_as_strings(defaults)
        selected = [v for v in wanted if v in options] or list(options)
        dropdowns.append(DropdownControl(f"{col}_select_{chart_title_safe}", str(col), options, selected, onchange))
    return dropdowns, sliders


def _column_select(select_id: str, cols: List[str], default: Optional[str], update_function: str) -> str:
    options = _options_html(cols, [str(default)] if default is not None else [])
    return f'<select id="{select_id}" onchange="{update_function}()">\n                {options}\n            </select>'


def _axis_picker(axis: str, chart_title_safe: str, cols: List[str], default: Optional[str], update_function: str) -> str:
    if not cols:
        return ""
    label = f"<label><strong>{axis.upper()}:</strong> </label>"
    if len(cols) == 1:
        return f'<div>{label}<span style="font-weight: bold;">{_esc(cols[0])}</span></div>'
    default = default if default in cols else cols[0]
    return f"<div>{label}{_column_select(f'{axis}_col_select_{chart_title_safe}', cols, default, update_function)}</div>"


def _transform_picker(axis: str, chart_title_safe: str, options: List[str], default: str, onchange: str) -> str:
    default = default if default in options else "identity"
    opts = _options_html(options, [default])
    return (
        f"<div><label><strong>{axis.upper()} transform:</strong> </label>"
        f'<select id="{axis}_transform_select_{chart_title_safe}" onchange="{onchange}">\n                {opts}\n            </select></div>'
    )


def build_axis_controls_html(
    chart_title_safe: str,
    update_function: str,
    *,
    x_cols: Optional[List[str]] = None,
    y_cols: Optional[List[str]] = None,
    z_cols: Optional[List[str]] = None,
    default_x: Optional[str] = None,
    default_y: Optional[str] = None,
    default_z: Optional[str] = None,
    include_x_transform: bool = False,
    include_y_transform: bool = True,
    include_cumulative: bool = True,
    include_smoothing: bool = False,
    default_ewma_weight: float = 0.1,
    default_ewmstd_weight: float = 0.1,
    default_sma_window: int = 10,
    default_y_transform: str = "identity",
) -> str:
    x_cols, y_cols, z_cols = list(x_cols or []), list(y_cols or []), list(z_cols or [])
    if not (x_cols or y_cols or z_cols):
        return ""
    c = chart_title_safe
    parts = [_axis_picker("x", c, x_cols, default_x, update_function)]
    if include_x_transform and x_cols:
        parts.append(_transform_picker("x", c, X_TRANSFORMS, "identity", f"{update_function}()"))
    parts.append(_axis_picker("y", c, y_cols, default_y, update_function))

    params_html = ""
    if include_y_transform and y_cols:
        y_options = list(X_TRANSFORMS)
        if include_cumulative:
            y_options += CUMULATIVE_TRANSFORMS
        if include_smoothing:
            y_options += SMOOTHING_TRANSFORMS
        onchange = f"{update_function}()"
        if include_smoothing:
            onchange = (
                "var t = this.value; "
                f"document.getElementById('ewma_param_{c}').style.display = t === 'ewma' ? 'inline-block' : 'none'; "
                f"document.getElementById('ewmstd_param_{c}').style.display = t === 'ewmstd' ? 'inline-block' : 'none'; "
                f"document.getElementById('sma_param_{c}').style.display = t === 'sma' ? 'inline-block' : 'none'; "
                f"{update_function}()"
            )
        parts.append(_transform_picker("y", c, y_options, default_y_transform, onchange))
        if include_smoothing:
            params_html = _smoothing_params_html(
                c, update_function, default_y_transform,
                default_ewma_weight, default_ewmstd_weight, default_sma_window,
            )
    parts.append(_axis_picker("z", c, z_cols, default_z, update_function))

    row = "\n            ".join(p for p in parts if p)
    return f"""
        <h4 style="margin: 10px 0 5px 0;">Axes</h4>
        <div style="display: flex; flex-wrap: wrap; gap: 20px; align-items: center;">
            {row}{params_html}
        </div>"""


def _smoothing_params_html(
    c: str,
    update_function: str,
    current: str,
    ewma_weight: float,
    ewmstd_weight: float,
    sma_window: int,
) -> str:
    def box(kind: str, label: str, input_id: str, value: Any, extra: str) -> str:
        display = "inline-block" if current == kind else "none"
        return (
            f'\n            <div id="{kind}_param_{c}" style="display: {display};">'
            f"<label>{label}: </label>"
            f'<input type="number" id="{input_id}" value="{value}" {extra} style="width: 70px;" onchange="{update_function}()"></div>'
        )

    return (
        box("ewma", "EWMA weight", f"ewma_weight_{c}", ewma_weight, 'min="0.001" max="1" step="0.01"')
        + box("ewmstd", "EWMSTD weight", f"ewmstd_weight_{c}", ewmstd_weight, 'min="0.001" max="1" step="0.01"')
        + box("sma", "SMA window", f"sma_window_{c}", sma_window, 'min="1" step="1"')
    )


def generate_axes_section_html(axis_controls: List[DropdownControl]) -> str:
    if not axis_controls:
        return ""
    body = "".join(generate_choice_dropdown_html(dd) for dd in axis_controls)
    return f"""
    <div style="background-color: #fffaf0; border: 1px solid #ffe4b5; border-radius: 5px; padding: 10px 15px; margin-bottom: 10px;">
        <h4 style="margin: 0 0 8px 0;">Axes</h4>
        {body}
    </div>"""


def generate_value_column_dropdown_html(
    chart_title: str,
    value_cols: List[str],
    default_value_col: Optional[str],
    update_function: str,
    label: str = "Select variable",
) -> Tuple[str, str]:
    if len(value_cols) < 2:
        return "", ""
    select_id = f"{chart_title}_value_selector"
    default = default_value_col if default_value_col in value_cols else value_cols[0]
    options = _options_html(value_cols, [str(default)])
    html_out = f"""
        <div style="margin-bottom: 8px;">
            <label for="{select_id}"><strong>{_esc(label)}:</strong> </label>
            <select id="{select_id}">
                {options}
            </select>
        </div>"""
    js = f"document.getElementById('{select_id}').addEventListener('change', function() {{ {update_function}(); }});"
    return html_out, js


def generate_group_column_dropdown_html(
    chart_title: str,
    group_cols: List[str],
    default_color_col: Optional[str],
    update_function: str,
    label: str = "Group by",
) -> Tuple[str, str]:
    if len(group_cols) < 2:
        return "", ""
    select_id = f"{chart_title}_group_selector"
    selected = "_none_" if default_color_col is None else str(default_color_col)
    options = _options_html(["_none_"] + list(group_cols), [selected], labels={"_none_": "None"})
    html_out = f"""
        <div style="margin-bottom: 8px;">
            <label for="{select_id}"><strong>{_esc(label)}:</strong> </label>
            <select id="{select_id}">
                {options}
            </select>
        </div>"""
    js = f"document.getElementById('{select_id}').addEventListener('change', function() {{ {update_function}(); }});"
    return html_out, js


def filter_js_config(
    chart_title_safe: str,
    choice_dropdowns: List[DropdownControl],
    filter_dropdowns: List[DropdownControl],
    filter_sliders: List[RangeSliderControl],
) -> str:
    """
    JavaScript that reads the current control state into the arguments of
    ``applyFiltersWithCounting``.

    Defines ``choiceCols``, ``choices``, ``categoricalCols``, ``filters``,
    ``continuousCols`` and ``rangeFilters`` in the enclosing function.
    """
    suffix_choice = f"_choice_{chart_title_safe}"
    suffix_select = f"_select_{chart_title_safe}"
    suffix_range = f"_range_{chart_title_safe}"
    choice_cols = [dd.id[: -len(suffix_choice)] for dd in choice_dropdowns]
    categorical_cols = [dd.id[: -len(suffix_select)] for dd in filter_dropdowns]
    continuous_cols = [s.id[: -len(suffix_range)] for s in filter_sliders]
    return f"""
            var choiceCols = {json.dumps(choice_cols)};
            var choices = {{}};
            choiceCols.forEach(function(col) {{ choices[col] = readSelectValue(col + '{suffix_choice}', null); }});
            var categoricalCols = {json.dumps(categorical_cols)};
            var filters = {{}};
            categoricalCols.forEach(function(col) {{ filters[col] = readSelectValues(col + '{suffix_select}'); }});
            var continuousCols = {json.dumps(continuous_cols)};
            var rangeFilters = {{}};
            continuousCols.forEach(function(col) {{ rangeFilters[col] = readSliderRange(col + '{suffix_range}'); }});"""
