"""
Tests for LineChart.
"""
import pytest

from jsreport import LineChart
from jsreport.core import JS_DEP_PLOTLY, DataFormat
from jsreport.errors import JSReportError


class TestLineChartConstruction:
    def test_minimal_chart(self, sales_df):
        """Title is sanitized and the dataset label is recorded."""
        chart = LineChart("Sales chart", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        assert chart.chart_title == "Sales_chart"
        assert chart.data_label == "sales"
        assert chart.dependencies() == ["sales"]
        assert JS_DEP_PLOTLY in chart.js_dependencies()

    def test_functional_html_loads_dataset(self, sales_df):
        """The script loads its dataset and defines the update function."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        js = chart.functional_html
        assert 'loadDataset("sales")' in js
        assert "window.updateChart_c = function()" in js
        assert "setupAspectRatioControl('c')" in js
        assert "applySeriesTransform" in js

    def test_container_div(self, sales_df):
        """The plot div and heading are rendered."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"], title="Revenue")
        assert '<div id="c"></div>' in chart.appearance_html
        assert "<h2>Revenue</h2>" in chart.appearance_html

    def test_missing_column_raises(self, sales_df):
        """Unknown y columns are rejected."""
        with pytest.raises(JSReportError, match="y_cols"):
            LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["profit"])

    def test_default_columns_must_exist(self, sales_df):
        """Without x_cols the chart looks for an 'x' column."""
        with pytest.raises(JSReportError, match="x_cols"):
            LineChart("c", sales_df, "sales", y_cols=["revenue"])

    def test_bad_aggregator_raises(self, sales_df):
        """Only the supported aggregators are accepted."""
        with pytest.raises(JSReportError, match="aggregator must be one of"):
            LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"], aggregator="sum")


class TestLineChartControls:
    def test_color_and_aggregator_dropdowns(self, sales_df):
        """Several colour columns and an aggregator get selectors."""
        chart = LineChart(
            "c", sales_df, "sales",
            x_cols=["date"], y_cols=["revenue"], color_cols=["region", "product"], aggregator="mean",
        )
        html = chart.appearance_html
        assert 'id="color_col_select_c"' in html
        assert 'id="aggregator_select_c"' in html
        assert '<option value="mean" selected>' in html

    def test_single_color_column_has_no_dropdown(self, sales_df):
        """One colour column is applied without a selector."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"], color_cols=["region"])
        assert "color_col_select_c" not in chart.appearance_html
        assert '"North": "#' in chart.functional_html

    def test_filters_and_sliders(self, sales_df):
        """Categorical filters become dropdowns; dates become sliders."""
        chart = LineChart(
            "c", sales_df, "sales",
            x_cols=["date"], y_cols=["revenue"], filters={"region": "North", "date": []},
        )
        html = chart.appearance_html
        assert 'id="region_select_c"' in html
        assert 'id="date_range_c_slider"' in html
        assert 'var categoricalCols = ["region"];' in chart.functional_html
        assert 'var continuousCols = ["date"];' in chart.functional_html

    def test_smoothing_controls(self, sales_df):
        """Several y columns get a picker alongside the transform selector."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue", "units"])
        html = chart.appearance_html
        assert 'id="y_col_select_c"' in html
        assert 'id="y_transform_select_c"' in html
        assert 'id="ewma_weight_c"' in html
        assert '<option value="cumulative">' in html

    def test_facets(self, sales_df):
        """Two facet choices give two facet dropdowns and a wrapped layout."""
        chart = LineChart(
            "c", sales_df, "sales",
            x_cols=["date"], y_cols=["revenue"], facet_cols=["region", "product"], default_facet_cols=["region"],
        )
        assert 'id="facet1_select_c"' in chart.appearance_html
        assert 'id="facet2_select_c"' in chart.appearance_html
        assert "buildFacetPanels(data, facetCols, 1.5)" in chart.functional_html

    def test_too_many_default_facets(self, sales_df):
        """At most two facets can be shown at once."""
        with pytest.raises(JSReportError):
            LineChart(
                "c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"],
                facet_cols=["region", "product", "promo"], default_facet_cols=["region", "product", "promo"],
            )

    def test_aspect_ratio_from_config(self, sales_df):
        """The aspect-ratio slider starts at the configured value."""
        import jsreport

        jsreport.configure(aspect_ratio_default=1.25)
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        assert 'id="c_aspect_ratio_label">1.25<' in chart.appearance_html


class TestLineChartAttribution:
    def test_embedded(self, sales_df):
        """Embedded data is attributed by label."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        assert "Data: sales</p>" in chart.attribution_html(DataFormat.CSV_EMBEDDED)

    def test_external(self, sales_df):
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        assert "Data: sales.parquet</p>" in chart.attribution_html("parquet")
