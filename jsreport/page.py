# jsreport/page.py
"""
Pages: a set of report items plus the DataFrames they read.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from jsreport.charts.linklist import LinkList
from jsreport.context import get_config
from jsreport.core import DataFormat, ReportItem, sanitize_filename
from jsreport.errors import JSReportError


def _check_items(items: Iterable[object]) -> List[ReportItem]:
    checked = []
    for item in items:
        if not isinstance(item, ReportItem):
            raise JSReportError(f"Page items must be charts or content blocks, got {type(item).__name__}")
        checked.append(item)
    return checked


class Page:
    """
    One HTML page.

    Args:
        dataframes: Data label -> DataFrame for every dataset the items read.
        items: Charts and content blocks, in display order.
        tab_title: Browser tab title (also names the file inside ``Pages``).
        page_header: ``<h1>`` heading.
        notes: HTML shown under the heading.
        dataformat: How datasets are stored; defaults to the configured one.
    """

    def __init__(
        self,
        dataframes: Optional[Dict[str, pd.DataFrame]],
        items: Sequence[ReportItem],
        *,
        tab_title: str = "jsreport",
        page_header: str = "",
        notes: str = "",
        dataformat: Union[str, DataFormat, None] = None,
    ):
        self.dataframes: Dict[str, pd.DataFrame] = {}
        for label, df in (dataframes or {}).items():
            if not isinstance(df, pd.DataFrame):
                raise JSReportError(f"Dataset {label!r} must be a pandas DataFrame, got {type(df).__name__}")
            self.dataframes[str(label)] = df
        self.items = _check_items(items)
        self.tab_title = tab_title
        self.page_header = page_header
        self.notes = notes
        self.dataformat = DataFormat.coerce(
            dataformat if dataformat is not None else get_config().default_dataformat
        )

    def dependencies(self) -> List[str]:
        """Data labels read by the items, first use first."""
        labels: List[str] = []
        for item in self.items:
            for label in item.dependencies():
                if label not in labels:
                    labels.append(label)
        return labels

    def __repr__(self) -> str:
        return f"Page(tab_title={self.tab_title!r}, items={len(self.items)}, datasets={list(self.dataframes)})"


class Pages:
    """
    A cover page plus linked sub-pages, written as one folder sharing a
    single ``data/`` directory.
    """

    def __init__(
        self,
        coverpage: Page,
        pages: Sequence[Page],
        *,
        dataformat: Union[str, DataFormat, None] = None,
    ):
        if not isinstance(coverpage, Page):
            raise JSReportError("coverpage must be a Page")
        self.coverpage = coverpage
        self.pages = list(pages)
        for page in self.pages:
            if not isinstance(page, Page):
                raise JSReportError(f"pages must be Page objects, got {type(page).__name__}")
        self.dataformat = DataFormat.coerce(dataformat if dataformat is not None else coverpage.dataformat)
        filenames = [self.page_filename(p) for p in self.pages]
        duplicates = sorted({f for f in filenames if filenames.count(f) > 1})
        if duplicates:
            raise JSReportError(f"Several pages map to the same file name: {duplicates}; use distinct tab titles")

    @staticmethod
    def page_filename(page: Page) -> str:
        return sanitize_filename(page.tab_title) + ".html"

    @classmethod
    def from_content(
        cls,
        content: Sequence[ReportItem],
        pages: Union[Sequence[Page], Dict[str, Sequence[Page]]],
        *,
        tab_title: str = "Home",
        page_header: str = "",
        dataformat: Union[str, DataFormat] = DataFormat.PARQUET,
    ) -> "Pages":
        """
        Build a cover page from ``content`` followed by a list of links to
        ``pages``. A dict of heading -> pages gives a grouped link list.
        """
        if isinstance(pages, dict):
            grouped = {
                heading: [(p.tab_title, cls.page_filename(p), p.notes) for p in group]
                for heading, group in pages.items()
            }
            flat = [p for group in pages.values() for p in group]
            links = LinkList(grouped)
        else:
            flat = list(pages)
            links = LinkList([(p.tab_title, cls.page_filename(p), p.notes) for p in flat])
        cover = Page(
            {},
            list(content) + [links],
            tab_title=tab_title,
            page_header=page_header,
            dataformat=dataformat,
        )
        return cls(cover, flat, dataformat=dataformat)

    def all_pages(self) -> List[Page]:
        return [self.coverpage] + self.pages

    def merged_dataframes(self) -> Dict[str, pd.DataFrame]:
        """Union of every page's datasets; the first page to define a label wins."""
        merged: Dict[str, pd.DataFrame] = {}
        for page in self.all_pages():
            for label, df in page.dataframes.items():
                merged.setdefault(label, df)
        return merged

    def dependencies(self) -> List[str]:
        labels: List[str] = []
        for page in self.all_pages():
            for label in page.dependencies():
                if label not in labels:
                    labels.append(label)
        return labels
