# jsreport/charts/linklist.py
"""
List of links to other pages of a multi-page report.
"""
from __future__ import annotations

import html
from typing import Dict, List, Sequence, Tuple, Union

from jsreport.core import ReportItem

Link = Tuple[str, str, str]


def _link_item(link: Link) -> str:
    title, url, blurb = link
    return (
        f'<li><strong><a href="{html.escape(url, quote=True)}">{html.escape(title)}</a></strong>'
        f": {blurb}</li>"
    )


def _link_list(links: Sequence[Link]) -> str:
    items = "\n            ".join(_link_item(link) for link in links)
    return f"<ul>\n            {items}\n        </ul>"


class LinkList(ReportItem):
    """
    Box of ``(title, url, blurb)`` links.

    ``links`` may also be a dict of heading -> links, rendered as
    sub-sections in insertion order.
    """

    def __init__(
        self,
        links: Union[List[Link], Dict[str, List[Link]]],
        *,
        chart_title: str = "link_list",
        notes: str = "",
    ):
        self.chart_title = chart_title
        self.data_label = "no_data"
        self.notes = notes
        if isinstance(links, dict):
            self.grouped_links = {str(k): [tuple(link) for link in v] for k, v in links.items()}
            self.links = [link for group in self.grouped_links.values() for link in group]
            body = "\n".join(
                f'<h4 style="margin: 15px 0 5px 0;">{html.escape(heading)}</h4>\n        {_link_list(group)}'
                for heading, group in self.grouped_links.items()
            )
        else:
            self.grouped_links = None
            self.links = [tuple(link) for link in links]
            body = _link_list(self.links)

        notes_html = ""
        if notes:
            notes_html = (
                '\n    <div style="background-color: #fffbdd; border-left: 4px solid #e6c200; '
                f'padding: 10px 15px; margin-top: 10px;">{notes}</div>'
            )
        self.functional_html = ""
        self.appearance_html = f"""
    <div style="background-color: #f9f9f9; border: 1px solid #ddd; border-radius: 5px; padding: 15px 20px; margin: 10px 0;">
        <h3 style="margin-top: 0;">Pages</h3>
        {body}
    </div>{notes_html}"""

    def dependencies(self) -> List[str]:
        return []

    def attribution_html(self, dataformat) -> str:
        return ""
