# jsreport/charts/table.py
"""
Static, click-to-sort HTML table rendered straight from a DataFrame.
"""
from __future__ import annotations

import html
from typing import Any, List

import pandas as pd

from jsreport.core import JS_DEP_JQUERY, DataFormat, ReportItem, sanitize_chart_title

TABLE_STYLE = """
<style>
    .jsreport-table-container { margin: 20px 0; }
    .jsreport-table-container .table-wrapper { max-height: 600px; overflow: auto; border: 1px solid #ddd; }
    .jsreport-table-container table { border-collapse: collapse; width: 100%; font-size: 0.9em; }
    .jsreport-table-container th, .jsreport-table-container td { padding: 6px 10px; border-bottom: 1px solid #eee; text-align: left; }
    .jsreport-table-container th { position: sticky; top: 0; background: #f4f4f4; cursor: pointer; user-select: none; }
    .jsreport-table-container th:hover { background: #e8e8e8; }
    .jsreport-table-container tbody tr:nth-child(even) { background: #fafafa; }
    .jsreport-table-container .sort-indicator { color: #999; margin-left: 4px; }
    .jsreport-table-container th.sort-asc .sort-indicator::after { content: "\\25B2"; color: #333; }
    .jsreport-table-container th.sort-desc .sort-indicator::after { content: "\\25BC"; color: #333; }
    .jsreport-table-container th:not(.sort-asc):not(.sort-desc) .sort-indicator::after { content: "\\21C5"; }
</style>"""


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return html.escape(str(value))


class Table(ReportItem):
    """A sortable table holding the whole of ``df``; needs no data block."""

    STYLE = TABLE_STYLE

    def __init__(self, chart_title: str, df: pd.DataFrame, *, notes: str = ""):
        self.chart_title = sanitize_chart_title(chart_title)
        self.title = str(chart_title)
        self.df = df
        table_id = f"table_{self.chart_title}"

        header = "\n".join(
            f'                <th>{html.escape(str(col))}<span class="sort-indicator"></span></th>'
            for col in df.columns
        )
        body_rows = []
        for row in df.itertuples(index=False, name=None):
            cells = "".join(f"<td>{_cell_text(v)}</td>" for v in row)
            body_rows.append(f"                <tr>{cells}</tr>")
        body = "\n".join(body_rows)

        self.appearance_html = f"""
    <div class="jsreport-table-container">
        <h2>{html.escape(self.title)}</h2>
        <p>{notes}</p>
        <div class="table-wrapper">
            <table id="{table_id}">
            <thead>
                <tr>
{header}
                </tr>
            </thead>
            <tbody>
{body}
            </tbody>
            </table>
        </div>
    </div>"""

        self.functional_html = f"""
    (function() {{
        var table = document.getElementById('{table_id}');
        if (!table) return;
        var headers = table.querySelectorAll('thead th');
        var parse = function(text) {{
            var n = parseFloat(text.replace(/,/g, ''));
            return (text.trim() !== '' && !isNaN(n) && isFinite(text.replace(/,/g, ''))) ? n : null;
        }};
        headers.forEach(function(th, index) {{
            th.addEventListener('click', function() {{
                var ascending = !th.classList.contains('sort-asc');
                headers.forEach(function(h) {{ h.classList.remove('sort-asc', 'sort-desc'); }});
                th.classList.add(ascending ? 'sort-asc' : 'sort-desc');
                var tbody = table.querySelector('tbody');
                var rows = Array.from(tbody.querySelectorAll('tr'));
                rows.sort(function(a, b) {{
                    var ta = a.children[index].textContent, tb = b.children[index].textContent;
                    var na = parse(ta), nb = parse(tb);
                    var cmp = (na !== null && nb !== null) ? na - nb : ta.localeCompare(tb);
                    return ascending ? cmp : -cmp;
                }});
                rows.forEach(function(r) {{ tbody.appendChild(r); }});
            }});
        }});
    }})();
"""

    def dependencies(self) -> List[str]:
        return []

    def js_dependencies(self) -> List[str]:
        return [JS_DEP_JQUERY]

    def attribution_html(self, dataformat: DataFormat) -> str:
        from jsreport.export.data_export import ATTRIBUTION_STYLE

        return f'<p style="{ATTRIBUTION_STYLE}">Data: {html.escape(self.chart_title)}</p>'
