# jsreport/visualization/html_page.py
"""
Full-page HTML template and page assembly.
"""
from __future__ import annotations

import html
import re
from typing import Dict, List, Optional

import pandas as pd

from jsreport.core import (
    JS_DEP_CSV,
    JS_DEP_JQUERY,
    JS_DEP_PARQUET,
    PRISM_COMPONENT_URL,
    DataFormat,
)
from jsreport.export.data_export import dataset_to_html
from jsreport.visualization.javascript import JS_UTILITIES, PIVOT_FILTER_BOX_FIX

SEGMENT_SEPARATOR = "\n<br>\n<hr>\n<br>\n"

FULL_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>___TITLE_OF_PAGE___</title>
    <meta charset="UTF-8">
    ___JS_DEPENDENCIES___
    <style>
        body {
            margin: 0;
            padding: 20px;
            font-family: Arial, sans-serif;
        }
        #controls {
            display: flex;
            flex-wrap: wrap;
            gap: 20px;
            margin-bottom: 20px;
        }
    </style>
    ___EXTRA_STYLES___
    ___PRISM_LANGUAGES___
</head>
<body>
___PARQUET_SCRIPT___
<script>
___UTILITIES___

$(function() {
___PIVOT_FILTER_BOX_FIX___
___FUNCTIONAL_BIT___
});
</script>

<!-- DATASETS -->
___DATASETS___

<h1>___PAGE_HEADER___</h1>
<p>___NOTES___</p>

___PIVOT_TABLES___

<hr>
<p align="right"><small>This page was created using jsreport v___VERSION___.</small></p>
</body>
</html>
"""


def _unique(values: List[str]) -> List[str]:
    seen: List[str] = []
    for v in values:
        if v and v not in seen:
            seen.append(v)
    return seen


def render_page_html(
    page,
    dataframes: Optional[Dict[str, pd.DataFrame]] = None,
    dataformat: Optional[DataFormat] = None,
    project_dir: str = "",
) -> str:
    """
    Assemble the complete HTML document for ``page``.

    Args:
        page: The Page to render.
        dataframes: Datasets to embed/reference; defaults to ``page.dataframes``.
        dataformat: Overrides ``page.dataformat`` (multi-page reports share one).
        project_dir: Report folder, needed when external formats copy pictures.
    """
    from jsreport import __version__

    dataformat = DataFormat.coerce(dataformat if dataformat is not None else page.dataformat)
    if dataframes is None:
        dataframes = page.dataframes
    items = page.items

    styles = _unique([type(item).STYLE for item in items])

    languages = _unique([getattr(item, "language", "") for item in items if getattr(item, "language", "")])
    prism = "\n    ".join(
        f'<script src="{PRISM_COMPONENT_URL.format(language=lang)}"></script>' for lang in languages
    )

    js_deps = _unique([dep for item in items for dep in item.js_dependencies()])
    if JS_DEP_JQUERY not in js_deps:
        js_deps.insert(0, JS_DEP_JQUERY)
    if dataformat.is_csv:
        js_deps.append(JS_DEP_CSV)

    datasets = "\n".join(dataset_to_html(label, df, dataformat) for label, df in dataframes.items())

    functional = "\n".join(item.functional_html for item in items if item.functional_html)
    segments = []
    for item in items:
        segment = item.render_html(dataformat, project_dir)
        attribution = item.attribution_html(dataformat)
        if attribution:
            segment += "\n<br>\n" + attribution
        segments.append(segment)

    replacements = {
        "___TITLE_OF_PAGE___": html.escape(str(page.tab_title)),
        "___JS_DEPENDENCIES___": "\n    ".join(js_deps),
        "___EXTRA_STYLES___": "\n".join(styles),
        "___PRISM_LANGUAGES___": prism,
        "___PARQUET_SCRIPT___": JS_DEP_PARQUET if dataformat == DataFormat.PARQUET else "",
        "___UTILITIES___": JS_UTILITIES,
        "___PIVOT_FILTER_BOX_FIX___": PIVOT_FILTER_BOX_FIX,
        "___FUNCTIONAL_BIT___": functional,
        "___DATASETS___": datasets,
        "___PAGE_HEADER___": page.page_header,
        "___NOTES___": page.notes,
        "___PIVOT_TABLES___": SEGMENT_SEPARATOR.join(segments),
        "___VERSION___": __version__,
    }
    # one pass, so placeholder-like text inside user content is left alone
    pattern = re.compile("|".join(re.escape(k) for k in replacements))
    return pattern.sub(lambda m: replacements[m.group(0)], FULL_PAGE_TEMPLATE)
