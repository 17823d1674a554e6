"""
Tests for ScatterPlot.
"""
import pytest

from jsreport import ScatterPlot
from jsreport.errors import JSReportError


class TestScatterPlot:
    def test_basic(self, sales_df):
        """Title is sanitized and the chart reads its dataset."""
        chart = ScatterPlot("Rev vs units", sales_df, "sales", ["revenue", "units"])
        assert chart.chart_title == "Rev_vs_units"
        assert chart.dependencies() == ["sales"]
        assert 'loadDataset("sales")' in chart.functional_html

    def test_needs_two_dimensions(self, sales_df):
        """A single dimension cannot make a scatter plot."""
        with pytest.raises(JSReportError, match="at least 2"):
            ScatterPlot("c", sales_df, "sales", ["revenue"])

    def test_dimensions_validated(self, sales_df):
        """Unknown dimension columns are rejected."""
        with pytest.raises(JSReportError, match="dimensions"):
            ScatterPlot("c", sales_df, "sales", ["revenue", "profit"])

    def test_axis_and_transform_selectors(self, sales_df):
        """Both axes get column and transform pickers, without cumulative options."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units", "date"])
        html = chart.appearance_html
        assert 'id="x_col_select_c"' in html
        assert 'id="y_col_select_c"' in html
        assert 'id="x_transform_select_c"' in html
        assert '<option value="cumulative">' not in html

    def test_default_color_column_when_present(self, small_df):
        """A column literally named 'color' is used when none is given."""
        df = small_df.assign(color=["r", "g", "r", "g"])
        chart = ScatterPlot("c", df, "d", ["x", "y"])
        assert '"color": {' in chart.functional_html

    def test_no_color_column(self, small_df):
        """Without colour columns every point falls in one group."""
        chart = ScatterPlot("c", small_df, "d", ["x", "y"])
        assert "__no_color__" in chart.functional_html

    def test_multiple_color_columns(self, sales_df):
        """Several colour columns get a selector."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units"], color_cols=["region", "product"])
        assert 'id="color_col_select_c"' in chart.appearance_html

    def test_density_toggle(self, sales_df):
        """The density button label reflects the initial state."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units"], show_density=False)
        assert 'id="c_density_toggle"' in chart.appearance_html
        assert "Show Density Contours" in chart.appearance_html
        assert "window.toggleDensity_c = function()" in chart.functional_html

    def test_facets(self, sales_df):
        """Facet columns add a facet selector and panelled layout."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units"], facet_cols=["region"])
        assert 'id="facet1_select_c"' in chart.appearance_html
        assert "buildFacetPanels(data, facetCols, 1.0)" in chart.functional_html

    def test_choices(self, sales_df):
        """Choice columns render single-selects with their default selected."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units"], choices={"product": "B"})
        assert 'id="product_choice_c"' in chart.appearance_html
        assert '<option value="B" selected>' in chart.appearance_html


class TestGroupedTransforms:
    def test_transform_applied_before_grouping(self, sales_df):
        """Axis transforms run once over the panel's rows, then split by colour."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units"], color_cols=["region"])
        js = chart.functional_html
        assert "groupTransformedPoints(rows, xCol, yCol, xTransform, yTransform," in js
        assert "applyAxisTransform(groups[key]" not in js
        assert "x: groups[key].x" in js

    def test_facet_panels_transform_their_own_rows(self, sales_df):
        """Faceted points are transformed per panel."""
        chart = ScatterPlot("c", sales_df, "sales", ["revenue", "units"], facet_cols=["region"])
        assert "pointTraces(panel.rows, xCol, yCol, xTransform, yTransform, colorCol, ids, i === 0)" in chart.functional_html
