# jsreport/charts/picture.py
"""
Static images: a single file, a filterable directory of images, or a
figure object saved on the fly.
"""
from __future__ import annotations

import html
import json
import logging
import os
import re
import shutil
import tempfile
import warnings
from typing import Any, Callable, Dict, List, Optional

from jsreport.core import JS_DEP_JQUERY, DataFormat, ReportItem, sanitize_chart_title
from jsreport.errors import JSReportError, JSReportWarning, MissingFileError
from jsreport.utils.images import (
    IMAGE_EXTENSIONS,
    copy_to_pictures,
    embedded_image_html,
    require_file,
)

logger = logging.getLogger(__name__)

PICTURE_STYLE = """
<style>
    .picture-container { margin: 20px 0; text-align: center; }
    .picture-container img, .picture-container svg { max-width: 100%; height: auto; }
    .picture-container h2 { text-align: left; }
    .picture-container p { text-align: left; }
</style>"""

PICTURE_TEMPLATE = """
    <div class="picture-container">
        <h2>{title}</h2>
        <p>{notes}</p>
        {controls}
        {image}
    </div>"""

FIGURE_FORMATS = ("png", "svg", "jpeg", "jpg")


def _element_id(basename: str) -> str:
    return "picture_" + re.sub(r"[^\w]", "_", basename)


def _group_label(name: str) -> str:
    text = name.replace("_", " ")
    return text[:1].upper() + text[1:]


def _default_save_function(figure: Any) -> Callable[[Any, str], None]:
    if hasattr(figure, "savefig"):
        return lambda fig, path: fig.savefig(path)
    if hasattr(figure, "write_image"):
        return lambda fig, path: fig.write_image(path)
    raise JSReportError(
        f"Don't know how to save a {type(figure).__name__}; pass save_function(figure, path)"
    )


class Picture(ReportItem):
    """
    An image on the page.

    Embedded data formats inline the image (SVG markup or a base64 data
    URI); external formats copy it into the report's ``pictures/`` folder.
    """

    STYLE = PICTURE_STYLE

    def __init__(
        self,
        chart_title: str,
        image_path: str,
        *,
        title: str = "",
        notes: str = "",
        is_temp: bool = False,
    ):
        require_file(str(image_path))
        self._init_common(chart_title, title or str(chart_title), notes)
        self.image_path = str(image_path)
        self.is_temp = is_temp

    def _init_common(self, chart_title: str, title: str, notes: str) -> None:
        self.chart_title = sanitize_chart_title(chart_title)
        self.title = title
        self.notes = notes
        self.image_path: Optional[str] = None
        self.is_temp = False
        self.directory: Optional[str] = None
        self.files: List[str] = []
        self.group_names: List[str] = []
        self.group_values: Dict[str, List[str]] = {}
        self.group_defaults: Dict[str, str] = {}
        self.file_groups: Dict[str, List[str]] = {}
        self.functional_html = ""
        self.appearance_html = ""

    @property
    def is_filtered(self) -> bool:
        return self.directory is not None

    @classmethod
    def from_directory(
        cls,
        chart_title: str,
        directory: str,
        prefix: str,
        *,
        filters: Optional[Dict[str, Any]] = None,
        title: str = "Picture Viewer",
        notes: str = "",
    ) -> "Picture":
        """
        Image viewer over files named ``<prefix>!<g1>!...!<gN>.<ext>``.

        Each ``!``-separated part is a group; the reader picks one value per
        group from dropdowns. ``filters`` names the groups (in order) and
        gives their initial values.
        """
        if not os.path.isdir(directory):
            raise MissingFileError(f"Directory not found: {directory}")
        pattern = re.compile(
            "^" + re.escape(prefix) + r"!(.+)\.(" + "|".join(e.lstrip(".") for e in IMAGE_EXTENSIONS) + r")$",
            re.IGNORECASE,
        )
        file_groups: Dict[str, List[str]] = {}
        for name in sorted(os.listdir(directory)):
            match = pattern.match(name)
            if match:
                file_groups[name] = match.group(1).split("!")
        if not file_groups:
            raise JSReportError(f"No images matching '{prefix}!*' found in {directory}")
        counts = {len(parts) for parts in file_groups.values()}
        if len(counts) != 1:
            raise JSReportError(
                f"Inconsistent number of groups in image names for prefix '{prefix}': {sorted(counts)}"
            )
        n_groups = counts.pop()

        filters = dict(filters or {})
        names = list(filters.keys())[:n_groups]
        names += [f"group_{i + 1}" for i in range(len(names), n_groups)]

        obj = cls.__new__(cls)
        obj._init_common(chart_title, title, notes)
        obj.directory = str(directory)
        obj.files = list(file_groups)
        obj.file_groups = file_groups
        obj.group_names = names
        for i, name in enumerate(names):
            values = sorted({parts[i] for parts in file_groups.values()})
            obj.group_values[name] = values
            wanted = filters.get(name)
            obj.group_defaults[name] = str(wanted) if wanted is not None and str(wanted) in values else values[0]
        obj.functional_html = obj._filtered_js()
        return obj

    @classmethod
    def from_figure(
        cls,
        chart_title: str,
        figure: Any,
        save_function: Optional[Callable[[Any, str], None]] = None,
        *,
        format: str = "png",
        title: str = "",
        notes: str = "",
    ) -> "Picture":
        """
        Save ``figure`` to a temporary image and show it.

        Without ``save_function``, matplotlib figures (``savefig``) and
        plotly figures (``write_image``) are handled automatically. The
        temporary file is deleted once the report has been written.
        """
        fmt = format.lower()
        if fmt not in FIGURE_FORMATS:
            raise JSReportError(f"format must be one of {', '.join(FIGURE_FORMATS)}, got {format!r}")
        saver = save_function or _default_save_function(figure)
        temp_dir = tempfile.mkdtemp(prefix="jsreport_")
        path = os.path.join(temp_dir, f"{sanitize_chart_title(chart_title)}.{fmt}")
        saver(figure, path)
        if not os.path.isfile(path):
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise JSReportError(f"save_function did not create {path}")
        logger.debug("Figure for %s saved to temporary file %s", chart_title, path)
        return cls(chart_title, path, title=title, notes=notes, is_temp=True)

    # === RENDERING ===

    def _image_html(self, path: str, dataformat: DataFormat, project_dir: str, name: Optional[str] = None) -> str:
        alt = html.escape(self.title, quote=True)
        if dataformat.is_embedded:
            return embedded_image_html(path, alt=alt)
        if not project_dir:
            raise JSReportError("External data formats need a project directory to copy pictures into")
        src = copy_to_pictures(path, project_dir, name=name)
        return f'<img src="{src}" alt="{alt}">'

    def render_html(self, dataformat: DataFormat, project_dir: str = "") -> str:
        dataformat = DataFormat.coerce(dataformat)
        if self.is_filtered:
            return self._render_filtered(dataformat, project_dir)
        image = self._image_html(self.image_path, dataformat, project_dir, name=self.chart_title)
        return PICTURE_TEMPLATE.format(
            title=html.escape(self.title), notes=self.notes, controls="", image=image
        )

    def _render_filtered(self, dataformat: DataFormat, project_dir: str) -> str:
        c = self.chart_title
        dropdowns = []
        for name in self.group_names:
            options = "".join(
                f'<option value="{html.escape(v, quote=True)}"{" selected" if v == self.group_defaults[name] else ""}>'
                f"{html.escape(v)}</option>"
                for v in self.group_values[name]
            )
            dropdowns.append(
                f'<div style="display: inline-block; margin: 0 15px 10px 0;">'
                f'<label for="{name}_select_{c}"><strong>{html.escape(_group_label(name))}:</strong> </label>'
                f'<select id="{name}_select_{c}" onchange="updatePicture_{c}()">{options}</select></div>'
            )
        controls = '<div style="text-align: left;">' + "".join(dropdowns) + "</div>"

        hidden = []
        for filename in self.files:
            element_id = _element_id(filename)
            image = self._image_html(os.path.join(self.directory, filename), dataformat, project_dir)
            hidden.append(f'<div id="{element_id}" style="display: none;">{image}</div>')
        image = f'<div id="picture_img_{c}"></div>\n        ' + "\n        ".join(hidden)

        return PICTURE_TEMPLATE.format(
            title=html.escape(self.title), notes=self.notes, controls=controls, image=image
        )

    def _filtered_js(self) -> str:
        c = self.chart_title
        mapping = {",".join(self.file_groups[f]): _element_id(f) for f in self.files}
        return f"""
    (function() {{
        var pictureMap = {json.dumps(mapping, indent=4)};
        var groups = {json.dumps(self.group_names)};
        window.updatePicture_{c} = function() {{
            var key = groups.map(function(g) {{
                return document.getElementById(g + '_select_{c}').value;
            }}).join(',');
            var target = document.getElementById('picture_img_{c}');
            var source = pictureMap[key] ? document.getElementById(pictureMap[key]) : null;
            target.innerHTML = source ? source.innerHTML : '<p style="color: #999;">No image for this combination.</p>';
        }};
        window.updatePicture_{c}();
    }})();
"""

    def js_dependencies(self) -> List[str]:
        return [JS_DEP_JQUERY]

    def attribution_html(self, dataformat: DataFormat) -> str:
        if self.is_filtered:
            return ""
        from jsreport.export.data_export import picture_attribution_html

        return picture_attribution_html(self.image_path)

    def cleanup(self) -> None:
        if not (self.is_temp and self.image_path):
            return
        temp_dir = os.path.dirname(self.image_path)
        try:
            os.remove(self.image_path)
            if os.path.basename(temp_dir).startswith("jsreport_") and not os.listdir(temp_dir):
                os.rmdir(temp_dir)
            self.is_temp = False
            logger.debug("Removed temporary picture %s", self.image_path)
        except OSError as e:
            warnings.warn(f"jsreport: could not remove temporary picture {self.image_path}: {e}", JSReportWarning)
