"""
Tests for BoxAndWhiskers.
"""
import pytest

from jsreport import BoxAndWhiskers
from jsreport.errors import JSReportError


class TestBoxAndWhiskers:
    def test_basic(self, sales_df):
        """The chart reads its dataset and redraws with Plotly.react."""
        chart = BoxAndWhiskers("box", sales_df, "sales", x_cols=["revenue"])
        assert chart.dependencies() == ["sales"]
        assert 'loadDataset("sales")' in chart.functional_html
        assert "Plotly.react" in chart.functional_html

    def test_value_columns_must_be_numeric(self, sales_df):
        """Text columns cannot be summarized."""
        with pytest.raises(JSReportError, match="Column region must be numeric"):
            BoxAndWhiskers("box", sales_df, "sales", x_cols=["region"])

    def test_bool_is_not_numeric(self, sales_df):
        """Boolean columns are rejected even though pandas treats them as numeric."""
        with pytest.raises(JSReportError, match="must be numeric"):
            BoxAndWhiskers("box", sales_df, "sales", x_cols=["promo"])

    def test_default_group_col_is_optional(self, sales_df):
        """The default 'group' column is dropped when absent."""
        BoxAndWhiskers("box", sales_df, "sales", x_cols=["revenue"])

    def test_explicit_group_col_must_exist(self, sales_df):
        """An explicit group column must be present."""
        with pytest.raises(JSReportError, match="group_col"):
            BoxAndWhiskers("box", sales_df, "sales", x_cols=["revenue"], group_col="segment")

    def test_dropdowns(self, sales_df):
        """Several value, colour and grouping columns each get a selector."""
        chart = BoxAndWhiskers(
            "box", sales_df, "sales",
            x_cols=["revenue", "units"], color_cols=["region"], grouping_cols=["product"],
        )
        html = chart.appearance_html
        assert 'id="value_col_select_box"' in html
        assert 'id="color_col_select_box"' in html
        assert 'id="grouping_col_select_box"' in html
        assert '<option value="none">none</option>' in html

    def test_statistic_checkboxes(self, sales_df):
        """Quantile and mean/std overlays can be toggled."""
        chart = BoxAndWhiskers("box", sales_df, "sales", x_cols=["revenue"])
        assert 'id="show_quantiles_box"' in chart.appearance_html
        assert 'id="show_mean_std_box"' in chart.appearance_html

    def test_filters(self, sales_df):
        chart = BoxAndWhiskers("box", sales_df, "sales", x_cols=["revenue"], filters=["region"])
        assert 'id="region_select_box"' in chart.appearance_html
