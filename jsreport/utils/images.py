# jsreport/utils/images.py
"""
Image helpers shared by Picture and TextBlock.
"""
from __future__ import annotations

import base64
import logging
import os
import shutil
import warnings
from typing import Optional

from jsreport.context import get_config
from jsreport.errors import JSReportError, JSReportWarning, MissingFileError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg")

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}


def image_mime_type(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    if ext not in _MIME_TYPES:
        raise JSReportError(f"Unsupported image type {ext!r} for {path}")
    return _MIME_TYPES[ext]


def is_svg(path: str) -> bool:
    return os.path.splitext(path)[1].lower() == ".svg"


def require_file(path: str, what: str = "Image file") -> str:
    if not os.path.isfile(path):
        raise MissingFileError(f"{what} not found: {path}")
    return path


def check_image_size(path: str) -> None:
    """Warn when an image about to be embedded is unusually large."""
    limit_mb = get_config().large_image_warning_mb
    size_mb = os.path.getsize(path) / (1024 * 1024)
    if size_mb > limit_mb:
        warnings.warn(
            f"jsreport: embedding {os.path.basename(path)} ({size_mb:.1f} MB) will make "
            f"the HTML file large; consider an external data format",
            JSReportWarning,
        )


def read_svg(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def image_data_uri(path: str) -> str:
    mime = image_mime_type(path)
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def embedded_image_html(path: str, alt: str = "", style: str = "") -> str:
    """Inline SVG markup, or an ``<img>`` with a base64 data URI."""
    check_image_size(path)
    if is_svg(path):
        return read_svg(path)
    style_attr = f' style="{style}"' if style else ""
    return f'<img src="{image_data_uri(path)}" alt="{alt}"{style_attr}>'


def copy_to_pictures(path: str, project_dir: str, name: Optional[str] = None) -> str:
    """
    Copy an image into ``<project_dir>/pictures/``.

    Args:
        path: Source image.
        project_dir: Report folder.
        name: Target stem; defaults to the source file name.

    Returns:
        The path relative to the HTML file, e.g. ``pictures/chart.png``.
    """
    ext = os.path.splitext(path)[1]
    filename = f"{name}{ext}" if name else os.path.basename(path)
    pictures_dir = os.path.join(project_dir, "pictures")
    os.makedirs(pictures_dir, exist_ok=True)
    target = os.path.join(pictures_dir, filename)
    shutil.copyfile(path, target)
    logger.info("Picture saved to %s", target)
    return f"pictures/{filename}"
