# jsreport/export/data_export.py
"""
Serialization of DataFrames into report data blocks and data files.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import os
from typing import Optional

import numpy as np
import pandas as pd

from jsreport.core import DataFormat, sanitize_html_id, value_to_string

logger = logging.getLogger(__name__)

DATASET_TEMPLATE = (
    '<script type="text/plain" id="{element_id}" data-format="{data_format}" '
    'data-src="{data_src}">{payload}</script>'
)

ATTRIBUTION_STYLE = "text-align: right; font-size: 0.8em; color: #666; margin-top: -10px; margin-bottom: 10px;"


def _format_datetime_series(series: pd.Series) -> pd.Series:
    values = series.dropna()
    if values.empty:
        return series.astype(object).where(series.notna(), None)
    all_midnight = bool((values == values.dt.normalize()).all())
    fmt = "%Y-%m-%d" if all_midnight else "%Y-%m-%dT%H:%M:%S"
    return series.dt.strftime(fmt).astype(object).where(series.notna(), None)


def _has_temporal_objects(series: pd.Series) -> bool:
    values = series.dropna()
    return not values.empty and all(isinstance(v, (dt.date, dt.time)) for v in values)


def _is_bool_column(series: pd.Series) -> bool:
    if pd.api.types.is_bool_dtype(series):
        return True
    if series.dtype != object:
        return False
    values = series.dropna()
    return not values.empty and all(isinstance(v, (bool, np.bool_)) for v in values)


def _bool_strings(series: pd.Series) -> pd.Series:
    return series.astype(object).map(lambda v: None if pd.isna(v) else ("true" if v else "false"))


def _has_mixed_types(series: pd.Series) -> bool:
    kinds = {type(v) for v in series.dropna()}
    return len(kinds) > 1


def prepare_dataframe(df: pd.DataFrame, dataformat: Optional[DataFormat] = None) -> pd.DataFrame:
    """
    Return a copy of ``df`` ready to be written in ``dataformat``.

    Timezone-aware datetimes are converted to naive UTC. Text formats get
    ISO strings for temporal columns so the browser's date sniffing picks
    them up, and lowercase "true"/"false" for booleans so cells compare
    equal to their filter options. Parquet keeps native types but
    stringifies mixed object columns.
    The input frame is never modified.
    """
    out = df.reset_index(drop=True).copy()
    text_format = dataformat is None or dataformat != DataFormat.PARQUET
    for col in out.columns:
        series = out[col]
        if isinstance(series.dtype, pd.DatetimeTZDtype):
            series = series.dt.tz_convert("UTC").dt.tz_localize(None)
            out[col] = series
        if text_format:
            if _is_bool_column(series):
                out[col] = _bool_strings(series)
            elif pd.api.types.is_datetime64_any_dtype(series):
                out[col] = _format_datetime_series(series)
            elif series.dtype == object and _has_temporal_objects(series):
                out[col] = series.map(lambda v: None if v is None or v is pd.NaT else value_to_string(v))
        elif series.dtype == object and _has_mixed_types(series):
            out[col] = series.map(lambda v: None if v is None else str(v))
    return out


def data_path_base(label: str) -> str:
    """
    Path of a dataset file relative to the report, without extension.

    Dotted labels (``parent.child``) land in a sub-folder named after the
    parent.
    """
    label = str(label)
    if "." in label:
        parent, rest = label.split(".", 1)
        return f"data/{parent}/{rest}"
    return f"data/{label}"


def _embedded_payload(df: pd.DataFrame, dataformat: DataFormat) -> str:
    prepared = prepare_dataframe(df, dataformat)
    if dataformat == DataFormat.CSV_EMBEDDED:
        text = prepared.to_csv(index=False)
    else:
        text = prepared.to_json(orient="records", date_format="iso", indent=2)
    return "\n" + text.replace("</script>", "<\\/script>") + "\n"


def dataset_to_html(label: str, df: pd.DataFrame, dataformat: DataFormat) -> str:
    """Render one dataset as a ``<script type="text/plain">`` data block."""
    dataformat = DataFormat.coerce(dataformat)
    if dataformat.is_embedded:
        payload = _embedded_payload(df, dataformat)
        data_src = ""
    else:
        payload = ""
        data_src = f"{data_path_base(label)}.{dataformat.extension}"
    return DATASET_TEMPLATE.format(
        element_id=sanitize_html_id(label, prefix="data_"),
        data_format=dataformat.value,
        data_src=data_src,
        payload=payload,
    )


def save_dataframe(label: str, df: pd.DataFrame, project_dir: str, dataformat: DataFormat) -> str:
    """
    Write ``df`` next to the report for an external data format.

    Args:
        label: Dataset label; dotted labels go into a sub-folder.
        df: Frame to write.
        project_dir: Report folder; files land under ``<project_dir>/data``.
        dataformat: One of the external formats.

    Returns:
        Absolute path of the written file.
    """
    dataformat = DataFormat.coerce(dataformat)
    if dataformat.is_embedded:
        raise ValueError(f"save_dataframe needs an external format, got {dataformat.value}")
    filepath = os.path.join(project_dir, f"{data_path_base(label)}.{dataformat.extension}")
    os.makedirs(os.path.dirname(filepath), exist_ok=True)
    prepared = prepare_dataframe(df, dataformat)
    if dataformat == DataFormat.CSV_EXTERNAL:
        prepared.to_csv(filepath, index=False)
    elif dataformat == DataFormat.JSON_EXTERNAL:
        records = json.loads(prepared.to_json(orient="records", date_format="iso"))
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
    else:
        prepared.to_parquet(filepath, engine="pyarrow", index=False)
    logger.info("Data saved to %s", filepath)
    return filepath


def _attribution_paragraph(text: str) -> str:
    return f'<p style="{ATTRIBUTION_STYLE}">Data: {text}</p>'


def data_source_attribution_html(label: str, dataformat: DataFormat) -> str:
    dataformat = DataFormat.coerce(dataformat)
    text = str(label)
    if dataformat.is_external:
        text = f"{text}.{dataformat.extension}"
    return _attribution_paragraph(text)


def picture_attribution_html(image_path: str) -> str:
    return _attribution_paragraph(os.path.basename(image_path))
