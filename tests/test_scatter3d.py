# tests/test_scatter3d.py
"""
Tests for Scatter3D.
"""
import pytest

from jsreport import Scatter3D
from jsreport.errors import JSReportError


@pytest.fixture
def cloud_df(sales_df):
    return sales_df.assign(cost=sales_df["revenue"] * 0.4)


class TestScatter3D:
    def test_basic(self, cloud_df):
        """The chart reads its dataset and draws scatter3d traces."""
        chart = Scatter3D("3d cloud", cloud_df, "sales", ["revenue", "units", "cost"])
        assert chart.chart_title == "3d_cloud"
        assert chart.dependencies() == ["sales"]
        assert "type: 'scatter3d'" in chart.functional_html
        assert 'loadDataset("sales")' in chart.functional_html

    def test_needs_three_dimensions(self, cloud_df):
        """Two dimensions are not enough for a 3D scene."""
        with pytest.raises(JSReportError, match="at least 3"):
            Scatter3D("c", cloud_df, "sales", ["revenue", "units"])

    def test_dimensions_validated(self, cloud_df):
        """Unknown dimension columns are rejected."""
        with pytest.raises(JSReportError, match="dimensions"):
            Scatter3D("c", cloud_df, "sales", ["revenue", "units", "profit"])

    def test_three_axis_selectors(self, cloud_df):
        """X, Y and Z each get a column picker and no transform picker."""
        html = Scatter3D("c", cloud_df, "sales", ["revenue", "units", "cost"]).appearance_html
        for axis in ("x", "y", "z"):
            assert f'id="{axis}_col_select_c"' in html
        assert 'id="y_transform_select_c"' not in html
        assert '<option value="cost" selected>' in html

    def test_eigenvector_toggle(self, cloud_df):
        """Principal axes are drawn by default and can be switched off."""
        chart = Scatter3D("c", cloud_df, "sales", ["revenue", "units", "cost"], show_eigenvectors=False)
        assert "Show Eigenvectors" in chart.appearance_html
        assert "var showEigenvectors = false;" in chart.functional_html
        assert "computePrincipalAxes3D(" in chart.functional_html

    def test_facets_get_own_scenes(self, cloud_df):
        """Each facet panel is placed in its own scene."""
        chart = Scatter3D("c", cloud_df, "sales", ["revenue", "units", "cost"], facet_cols=["region"])
        assert 'id="facet1_select_c"' in chart.appearance_html
        assert "function sceneId(i)" in chart.functional_html

    def test_shared_camera_flag(self, cloud_df):
        """Camera syncing across scenes can be turned off."""
        chart = Scatter3D("c", cloud_df, "sales", ["revenue", "units", "cost"], shared_camera=False)
        assert "var SHARED_CAMERA = false;" in chart.functional_html

    def test_color_and_filters(self, cloud_df):
        """Colour columns and filters use the shared controls."""
        chart = Scatter3D(
            "c", cloud_df, "sales", ["revenue", "units", "cost"],
            color_cols=["region", "product"], filters={"promo": [True]},
        )
        assert 'id="color_col_select_c"' in chart.appearance_html
        assert 'id="promo_select_c"' in chart.appearance_html
        assert '"East": "#636efa"' in chart.functional_html
