# jsreport/context.py
"""
Thread-safe configuration for jsreport.

Each thread gets its own ReportConfig via threading.local(), so notebooks
generating reports from several threads do not share defaults.
"""

import threading
import warnings
from dataclasses import dataclass, fields
from typing import Any

from .core import DataFormat
from .errors import JSReportWarning

# Thread-local storage for config
_thread_local = threading.local()


@dataclass
class ReportConfig:
    """
    Defaults applied when a chart or page does not say otherwise.

    Attributes:
        default_dataformat: Format used by ``Page`` when none is given.
        aspect_ratio_default: Initial height/width ratio of Plotly charts.
        large_image_warning_mb: Embedded images above this size warn.
        continuous_unique_threshold: Numeric/temporal filter columns with more
            distinct values than this get a range slider instead of a dropdown.
    """

    default_dataformat: DataFormat = DataFormat.CSV_EMBEDDED
    aspect_ratio_default: float = 0.6
    large_image_warning_mb: float = 5.0
    continuous_unique_threshold: int = 20

    def __post_init__(self):
        self.default_dataformat = DataFormat.coerce(self.default_dataformat)


def get_config() -> ReportConfig:
    """Get the current thread's config."""
    if not hasattr(_thread_local, "config"):
        _thread_local.config = ReportConfig()
    return _thread_local.config


def set_config(cfg: ReportConfig) -> None:
    """Set config for current thread (used in testing)."""
    _thread_local.config = cfg


def reset_config() -> None:
    """Reset config for current thread."""
    if hasattr(_thread_local, "config"):
        del _thread_local.config


def configure(**overrides: Any) -> ReportConfig:
    """
    Update the current thread's config in place.

    Unknown keys are ignored with a warning.

    Returns:
        The active ReportConfig.
    """
    cfg = get_config()
    known = {f.name for f in fields(ReportConfig)}
    for key, value in overrides.items():
        if key not in known:
            warnings.warn(f"jsreport: unknown config option {key!r} ignored", JSReportWarning)
            continue
        if key == "default_dataformat":
            value = DataFormat.coerce(value)
        setattr(cfg, key, value)
    return cfg
