"""
Core types and helpers shared by every report item.
"""
from __future__ import annotations

import datetime as dt
import json
import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from jsreport.errors import JSReportError


class DataFormat(str, Enum):
    CSV_EMBEDDED = "csv_embedded"
    JSON_EMBEDDED = "json_embedded"
    CSV_EXTERNAL = "csv_external"
    JSON_EXTERNAL = "json_external"
    PARQUET = "parquet"

    @classmethod
    def coerce(cls, value: Union[str, "DataFormat"]) -> "DataFormat":
        """Accept an enum member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise JSReportError(
            "dataformat must be 'csv_embedded', 'json_embedded', 'csv_external', "
            f"'json_external', or 'parquet', got {value!r}"
        )

    @property
    def is_embedded(self) -> bool:
        return self in (DataFormat.CSV_EMBEDDED, DataFormat.JSON_EMBEDDED)

    @property
    def is_external(self) -> bool:
        return not self.is_embedded

    @property
    def is_csv(self) -> bool:
        return self in (DataFormat.CSV_EMBEDDED, DataFormat.CSV_EXTERNAL)

    @property
    def extension(self) -> str:
        if self.is_csv:
            return "csv"
        if self == DataFormat.PARQUET:
            return "parquet"
        return "json"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# CDN DEPENDENCIES
# ============================================================================

JS_DEP_JQUERY = """<script src="https://cdnjs.cloudflare.com/ajax/libs/jquery/3.7.1/jquery.min.js"></script>
    <script src="https://cdnjs.cloudflare.com/ajax/libs/jqueryui/1.13.2/jquery-ui.min.js"></script>
    <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/jqueryui/1.13.2/themes/base/jquery-ui.min.css">"""

JS_DEP_PLOTLY = '<script src="https://cdn.plot.ly/plotly-2.35.2.min.js"></script>'

JS_DEP_D3 = '<script src="https://cdnjs.cloudflare.com/ajax/libs/d3/3.5.17/d3.min.js"></script>'

JS_DEP_C3 = """<script src="https://cdnjs.cloudflare.com/ajax/libs/c3/0.4.24/c3.min.js"></script>
    <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/c3/0.4.24/c3.min.css">"""

JS_DEP_PIVOTTABLE = """<link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/pivottable/2.23.0/pivot.min.css">
    <script src="https://cdnjs.cloudflare.com/ajax/libs/pivottable/2.23.0/pivot.min.js"></script>
    <script src="https://cdnjs.cloudflare.com/ajax/libs/pivottable/2.23.0/d3_renderers.min.js"></script>
    <script src="https://cdnjs.cloudflare.com/ajax/libs/pivottable/2.23.0/c3_renderers.min.js"></script>
    <script src="https://cdnjs.cloudflare.com/ajax/libs/pivottable/2.23.0/export_renderers.min.js"></script>"""

JS_DEP_CSV = '<script src="https://cdnjs.cloudflare.com/ajax/libs/PapaParse/5.4.1/papaparse.min.js"></script>'

JS_DEP_PRISM = """<link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0/themes/prism.min.css">
    <script src="https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0/prism.min.js"></script>"""

PRISM_COMPONENT_URL = "https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0/components/prism-{language}.min.js"

JS_DEP_PARQUET = """<script type="module">
    import * as parquetWasm from "https://unpkg.com/parquet-wasm@0.6.1/esm/parquet_wasm.js";
    import * as Arrow from "https://cdn.jsdelivr.net/npm/apache-arrow@17.0.0/+esm";
    await parquetWasm.default();
    window.parquetWasm = parquetWasm;
    window.Arrow = Arrow;
    window.parquetReady = true;
</script>"""

# Plotly's default qualitative sequence
DEFAULT_COLOR_PALETTE = [
    "#636efa",
    "#EF553B",
    "#00cc96",
    "#ab63fa",
    "#FFA15A",
    "#19d3f3",
    "#FF6692",
    "#B6E880",
    "#FF97FF",
    "#FECB52",
]


# ============================================================================
# NAME SANITIZING
# ============================================================================

_CHART_TITLE_RE = re.compile(r"[\s\-\.:]")
_HTML_ID_RE = re.compile(r"[\s\-\.:/\\]")


def sanitize_chart_title(title: str) -> str:
    """Make a chart title usable as an HTML id and a JS identifier suffix."""
    return _CHART_TITLE_RE.sub("_", str(title))


def sanitize_html_id(label: str, prefix: str = "") -> str:
    """Same rule the browser-side ``loadDataset`` applies to data labels."""
    return prefix + _HTML_ID_RE.sub("_", str(label))


def sanitize_filename(title: str) -> str:
    """
    Turn a tab title into a safe HTML file stem.

    Separators become underscores, anything else that is not a word
    character is dropped, and the result is lowercased and capped at
    50 characters.
    """
    name = _HTML_ID_RE.sub("_", str(title))
    name = re.sub(r"[^\w]", "", name)
    name = name.lower()[:50]
    return name or "page"


def to_js_array(values: Iterable[Any]) -> str:
    """Render values as a JSON array of their string forms."""
    return json.dumps([str(v) for v in values])


# ============================================================================
# REPORT ITEMS
# ============================================================================


class ReportItem:
    """
    Base class for everything that can be placed on a page.

    Subclasses build ``functional_html`` (JavaScript run inside the page's
    ready block) and ``appearance_html`` (controls plus container) when
    constructed. Page rendering only talks to the methods below.
    """

    STYLE: str = ""

    chart_title: str = ""
    functional_html: str = ""
    appearance_html: str = ""
    data_label: Optional[str] = None

    def dependencies(self) -> List[str]:
        """Data labels this item reads."""
        return [self.data_label] if self.data_label else []

    def js_dependencies(self) -> List[str]:
        return []

    def render_html(self, dataformat: DataFormat, project_dir: str = "") -> str:
        """Final appearance HTML for the given data format."""
        return self.appearance_html

    def attribution_html(self, dataformat: DataFormat) -> str:
        if not self.data_label:
            return ""
        from jsreport.export.data_export import data_source_attribution_html

        return data_source_attribution_html(self.data_label, dataformat)

    def cleanup(self) -> None:
        """Release temporary resources once the page has been written."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(chart_title={self.chart_title!r})"


# ============================================================================
# DATAFRAME HELPERS
# ============================================================================


def as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        return [value]
    if isinstance(value, dict):
        return list(value.keys())
    return list(value)


def validate_columns(df: pd.DataFrame, cols: Iterable[Any], arg_name: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise JSReportError(
            f"{arg_name}: column(s) {missing} not found in DataFrame. "
            f"Available: {list(df.columns)}"
        )


def _is_temporal_object_column(series: pd.Series) -> bool:
    values = series.dropna()
    if values.empty:
        return False
    return all(isinstance(v, (dt.date, dt.time)) for v in values)


def is_continuous_column(
    df: pd.DataFrame, col: str, threshold: Optional[int] = None
) -> bool:
    """
    Decide whether a filter on ``col`` should be a range slider.

    Numeric (non-boolean) and temporal columns with more than ``threshold``
    distinct values are continuous; everything else gets a dropdown.
    """
    if threshold is None:
        from jsreport.context import get_config

        threshold = get_config().continuous_unique_threshold
    series = df[col]
    if pd.api.types.is_bool_dtype(series):
        return False
    if not (
        pd.api.types.is_numeric_dtype(series)
        or pd.api.types.is_datetime64_any_dtype(series)
        or _is_temporal_object_column(series)
    ):
        return False
    return series.nunique(dropna=True) > threshold


def unique_sorted_strings(series: pd.Series) -> List[str]:
    """Sorted distinct non-null values, as the strings the browser compares."""
    values = series.dropna().unique()
    try:
        values = sorted(values)
    except TypeError:
        values = sorted(values, key=str)
    return [value_to_string(v) for v in values]


def value_to_string(value: Any) -> str:
    """String form matching ``temporalValueToString`` in the browser."""
    if isinstance(value, (pd.Timestamp, dt.datetime)):
        if (value.hour, value.minute, value.second) == (0, 0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, dt.date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, dt.time):
        text = value.strftime("%H:%M:%S")
        if value.microsecond // 1000:
            text += f".{value.microsecond // 1000:03d}"
        return text
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_filters(filters: Any, df: pd.DataFrame) -> Dict[str, List[Any]]:
    """
    Normalize the ``filters`` argument of a chart.

    A list of columns selects every value of each column; a dict maps a
    column to its default selection (a scalar is wrapped in a list).
    """
    if not filters:
        return {}
    if isinstance(filters, dict):
        return {
            col: (list(v) if isinstance(v, (list, tuple, set)) else [v])
            for col, v in filters.items()
        }
    return {col: unique_sorted_strings(df[col]) for col in as_list(filters) if col in df.columns}


def normalize_choices(choices: Any, df: pd.DataFrame) -> Dict[str, Any]:
    """Like ``normalize_filters`` but each choice has a single default value."""
    if not choices:
        return {}
    if isinstance(choices, dict):
        return dict(choices)
    result = {}
    for col in as_list(choices):
        if col in df.columns:
            options = unique_sorted_strings(df[col])
            result[col] = options[0] if options else None
    return result


def normalize_facets(
    facet_cols: Any, default_facet_cols: Any
) -> Tuple[List[str], List[str]]:
    choices = as_list(facet_cols)
    defaults = as_list(default_facet_cols)
    if len(defaults) > 2:
        raise JSReportError("default_facet_cols can have at most 2 columns")
    for col in defaults:
        if col not in choices:
            raise JSReportError(f"Default facet column {col!r} must be in facet_cols")
    return choices, defaults


def build_color_maps(cols: Iterable[str], df: pd.DataFrame) -> Dict[str, Dict[str, str]]:
    """Assign palette colours to each distinct value of each colour column."""
    maps: Dict[str, Dict[str, str]] = {}
    for col in cols:
        if col not in df.columns:
            continue
        values = unique_sorted_strings(df[col])
        maps[col] = {
            v: DEFAULT_COLOR_PALETTE[i % len(DEFAULT_COLOR_PALETTE)] for i, v in enumerate(values)
        }
    return maps


def select_default_column(cols: List[str], fallback: Optional[str] = None) -> Optional[str]:
    return cols[0] if cols else fallback


def validate_chart_columns(df: pd.DataFrame, **groups: Iterable[str]) -> None:
    """Validate several named column groups at once."""
    for arg_name, cols in groups.items():
        validate_columns(df, cols, arg_name)
