# jsreport/charts/base.py
"""
Shared plumbing for the Plotly-based interactive charts.
"""
from __future__ import annotations

import json
from typing import Any, List, Tuple

import pandas as pd

from jsreport.controls import (
    DropdownControl,
    RangeSliderControl,
    build_choice_dropdowns,
    build_filter_dropdowns,
)
from jsreport.core import (
    JS_DEP_JQUERY,
    JS_DEP_PLOTLY,
    ReportItem,
    as_list,
    normalize_choices,
    normalize_filters,
    validate_columns,
)


def build_filter_controls(
    chart_title_safe: str,
    df: pd.DataFrame,
    filters: Any,
    choices: Any,
    update_function: str,
) -> Tuple[List[DropdownControl], List[DropdownControl], List[RangeSliderControl]]:
    """Validate and build (choice dropdowns, filter dropdowns, filter sliders)."""
    validate_columns(df, as_list(filters), "filters")
    validate_columns(df, as_list(choices), "choices")
    choice_dropdowns = build_choice_dropdowns(
        chart_title_safe, normalize_choices(choices, df), df, update_function
    )
    filter_dropdowns, filter_sliders = build_filter_dropdowns(
        chart_title_safe, normalize_filters(filters, df), df, update_function
    )
    return choice_dropdowns, filter_dropdowns, filter_sliders


def chart_loader_js(chart_title_safe: str, data_label: str, body: str) -> str:
    """
    Wrap a chart's JavaScript in an IIFE that loads its dataset, then
    draws it with ``window.updateChart_<chart>``.
    """
    return f"""
    (function() {{
        var allData = [];
{body}
        loadDataset({json.dumps(data_label)}).then(function(data) {{
            allData = data;
            window.updateChart_{chart_title_safe}();
            setupAspectRatioControl('{chart_title_safe}');
        }}).catch(function(error) {{
            showChartError('{chart_title_safe}', error);
        }});
    }})();
"""


class PlotlyChart(ReportItem):
    """Base for charts that read one dataset and draw with Plotly."""

    def js_dependencies(self) -> List[str]:
        return [JS_DEP_JQUERY, JS_DEP_PLOTLY]
