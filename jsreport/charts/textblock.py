# jsreport/charts/textblock.py
"""
Free-form HTML block with optional image placeholders.
"""
from __future__ import annotations

import html
import os
import re
from typing import Dict, List, Optional

from jsreport.core import DataFormat, ReportItem
from jsreport.errors import JSReportError
from jsreport.utils.images import copy_to_pictures, embedded_image_html, require_file

TEXTBLOCK_STYLE = """
<style>
    .textblock-content { margin: 20px 0; line-height: 1.6; }
    .textblock-content table { border-collapse: collapse; margin: 10px 0; }
    .textblock-content th, .textblock-content td { border: 1px solid #ddd; padding: 6px 10px; }
    .textblock-content th { background: #f4f4f4; }
    .textblock-content img, .textblock-content svg { max-width: 100%; height: auto; }
    .textblock-content code { background: #f4f4f4; padding: 1px 4px; border-radius: 3px; }
    .textblock-content blockquote { border-left: 4px solid #ddd; margin: 10px 0; padding-left: 12px; color: #555; }
</style>"""

IMAGE_PLACEHOLDER_RE = re.compile(r"\{\{IMAGE:([^}]+)\}\}")


class TextBlock(ReportItem):
    """
    A block of HTML. ``{{IMAGE:key}}`` placeholders are replaced with the
    image at ``images[key]``.
    """

    STYLE = TEXTBLOCK_STYLE

    def __init__(
        self,
        html_content: str,
        images: Optional[Dict[str, str]] = None,
        *,
        chart_title: str = "textblock",
    ):
        self.chart_title = chart_title
        self.html_content = html_content
        self.images = {str(k): str(v) for k, v in (images or {}).items()}
        for key, path in self.images.items():
            require_file(path, what=f"Image for placeholder '{key}'")
        for key in IMAGE_PLACEHOLDER_RE.findall(html_content):
            if key not in self.images:
                raise JSReportError(f"No image supplied for placeholder {{{{IMAGE:{key}}}}}")
        self.functional_html = ""
        self.appearance_html = f'<div class="textblock-content">{html_content}</div>'

    def render_html(self, dataformat: DataFormat, project_dir: str = "") -> str:
        if not self.images:
            return self.appearance_html
        dataformat = DataFormat.coerce(dataformat)

        def replace(match: "re.Match[str]") -> str:
            key = match.group(1)
            path = self.images[key]
            alt = html.escape(key, quote=True)
            if dataformat.is_embedded:
                return embedded_image_html(path, alt=alt)
            if not project_dir:
                raise JSReportError("External data formats need a project directory to copy pictures into")
            src = copy_to_pictures(path, project_dir, name=key)
            return f'<img src="{src}" alt="{alt}">'

        content = IMAGE_PLACEHOLDER_RE.sub(replace, self.html_content)
        return f'<div class="textblock-content">{content}</div>'

    def dependencies(self) -> List[str]:
        return []
