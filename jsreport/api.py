# jsreport/api.py
"""
Writing reports to disk.

``create_html`` accepts a Page, a Pages project, or a single item (with
its DataFrame when the item reads data) and returns the path of the main
HTML file. External data formats produce a self-contained project folder:

    report/
        report.html
        data/<label>.<ext>
        pictures/...
        open.bat, open.sh, README.md
"""

from __future__ import annotations

import logging
import os
import tempfile
import webbrowser
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from .core import ReportItem
from .errors import JSReportError
from .export.data_export import save_dataframe
from .export.launchers import write_launchers
from .page import Page, Pages
from .visualization.html_page import render_page_html

logger = logging.getLogger(__name__)

Reportable = Union[Page, Pages, ReportItem]


def _as_page(obj: Reportable, df: Optional[pd.DataFrame]) -> Union[Page, Pages]:
    if isinstance(obj, (Page, Pages)):
        return obj
    if isinstance(obj, ReportItem):
        if df is not None:
            if not obj.dependencies():
                raise TypeError(f"{type(obj).__name__} does not read a dataset; call create_html without df")
            return Page({obj.data_label: df}, [obj], tab_title=obj.chart_title)
        if obj.dependencies():
            raise JSReportError(
                f"{type(obj).__name__} {obj.chart_title!r} reads {obj.dependencies()}; pass its DataFrame as df"
            )
        return Page({}, [obj], tab_title=obj.chart_title)
    raise TypeError(f"create_html expects a Page, Pages or report item, got {type(obj).__name__}")


def _project_paths(outfile_path: str) -> Tuple[str, str]:
    """``<dir>/<name>.html`` -> (``<dir>/<name>``, ``<dir>/<name>/<name>.html``)."""
    directory, filename = os.path.split(os.path.abspath(outfile_path))
    stem = os.path.splitext(filename)[0]
    project_dir = os.path.join(directory, stem)
    return project_dir, os.path.join(project_dir, filename)


def _frames_for(page: Page, available: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
    """Frames the page's items read; the page's own frames when none reads data."""
    needed = page.dependencies()
    if not needed:
        return dict(page.dataframes)
    missing = [label for label in needed if label not in available]
    if missing:
        raise JSReportError(f"Page {page.tab_title!r} references missing datasets: {missing}")
    return {label: available[label] for label in needed}


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    logger.info("HTML page saved to %s", path)


def _cleanup(pages: List[Page]) -> None:
    for page in pages:
        for item in page.items:
            item.cleanup()


def _write_page(page: Page, outfile_path: str) -> str:
    dataformat = page.dataformat
    frames = _frames_for(page, page.dataframes)
    if dataformat.is_embedded:
        directory = os.path.dirname(os.path.abspath(outfile_path))
        os.makedirs(directory, exist_ok=True)
        html_path = os.path.abspath(outfile_path)
        _write_text(html_path, render_page_html(page, frames, dataformat, directory))
        return html_path

    project_dir, html_path = _project_paths(outfile_path)
    os.makedirs(os.path.join(project_dir, "data"), exist_ok=True)
    for label, df in frames.items():
        save_dataframe(label, df, project_dir, dataformat)
    _write_text(html_path, render_page_html(page, frames, dataformat, project_dir))
    write_launchers(project_dir, os.path.basename(html_path))
    return html_path


def _write_pages(project: Pages, outfile_path: str) -> str:
    dataformat = project.dataformat
    project_dir, cover_path = _project_paths(outfile_path)
    os.makedirs(project_dir, exist_ok=True)
    merged = project.merged_dataframes()

    if dataformat.is_external:
        os.makedirs(os.path.join(project_dir, "data"), exist_ok=True)
        saved: List[str] = []
        for label in project.dependencies():
            if label in saved:
                logger.debug("Dataset %s already saved, skipping", label)
                continue
            if label not in merged:
                raise JSReportError(f"No page supplies dataset {label!r}")
            save_dataframe(label, merged[label], project_dir, dataformat)
            saved.append(label)

    cover = project.coverpage
    _write_text(cover_path, render_page_html(cover, _frames_for(cover, merged), dataformat, project_dir))
    for page in project.pages:
        page_path = os.path.join(project_dir, Pages.page_filename(page))
        if os.path.abspath(page_path) == cover_path:
            raise JSReportError(f"Page {page.tab_title!r} would overwrite the cover page; rename it")
        _write_text(page_path, render_page_html(page, _frames_for(page, merged), dataformat, project_dir))

    write_launchers(project_dir, os.path.basename(cover_path))
    logger.info(
        "Multi-page report written to %s: %d pages, %d datasets (%s)",
        project_dir,
        len(project.pages) + 1,
        len(project.dependencies()),
        dataformat.value,
    )
    return cover_path


def create_html(obj: Reportable, df: Optional[pd.DataFrame] = None, outfile_path: str = "report.html") -> str:
    """
    Write a report and return the path of its main HTML file.

    Args:
        obj: A Page, a Pages project, or a single chart/content item.
        df: The item's DataFrame when ``obj`` is a single data-backed item.
        outfile_path: Target HTML path. For external data formats and for
            Pages, a folder named after the file is created next to it and
            the HTML goes inside.
    """
    target = _as_page(obj, df)
    if isinstance(target, Pages):
        pages = target.all_pages()
        try:
            return _write_pages(target, outfile_path)
        finally:
            _cleanup(pages)
    try:
        return _write_page(target, outfile_path)
    finally:
        _cleanup([target])


def show(obj: Reportable, df: Optional[pd.DataFrame] = None, open_browser: bool = True) -> str:
    """Write the report into a temporary directory and open it in a browser."""
    tmpdir = tempfile.mkdtemp(prefix="jsreport_")
    filepath = create_html(obj, df, os.path.join(tmpdir, "report.html"))
    if open_browser:
        webbrowser.open(f"file://{filepath}")
    return filepath
