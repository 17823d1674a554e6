"""
Tests for the static Table item.
"""
import numpy as np
import pandas as pd

from jsreport import Table
from jsreport.charts.table import TABLE_STYLE
from jsreport.core import JS_DEP_JQUERY, DataFormat


class TestTable:
    def test_headers_and_rows(self, small_df):
        """Every column and row is rendered."""
        table = Table("Small table", small_df)
        html = table.appearance_html
        assert 'id="table_Small_table"' in html
        assert "<h2>Small table</h2>" in html
        assert html.count("<tr>") == len(small_df) + 1
        assert "<td>a</td>" in html

    def test_missing_values_are_blank(self):
        """Missing values render as empty cells."""
        df = pd.DataFrame({"a": [1.0, np.nan], "b": ["x", None]})
        html = Table("t", df).appearance_html
        assert "<td>nan</td>" not in html
        assert "<td></td><td></td>" in html

    def test_cells_are_escaped(self):
        """Headers and cells are HTML-escaped."""
        df = pd.DataFrame({"<col>": ["<b>bold</b>"]})
        html = Table("t", df).appearance_html
        assert "&lt;col&gt;" in html
        assert "&lt;b&gt;bold&lt;/b&gt;" in html

    def test_needs_no_dataset(self, small_df):
        """The table embeds its own rows and needs only jQuery."""
        table = Table("t", small_df)
        assert table.dependencies() == []
        assert table.js_dependencies() == [JS_DEP_JQUERY]
        assert type(table).STYLE == TABLE_STYLE

    def test_sorting_script(self, small_df):
        """Headers are wired for click-to-sort."""
        js = Table("t", small_df).functional_html
        assert "document.getElementById('table_t')" in js
        assert "sort-asc" in js

    def test_attribution(self, small_df):
        assert "Data: t</p>" in Table("t", small_df).attribution_html(DataFormat.PARQUET)
