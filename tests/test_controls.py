"""
Tests for the shared HTML controls.
"""
import datetime as dt

import pandas as pd
import pytest

from jsreport.controls import (
    ChartHtmlControls,
    DropdownControl,
    RangeSliderControl,
    build_axis_controls_html,
    build_choice_dropdowns,
    build_facet_dropdowns,
    build_filter_dropdowns,
    filter_js_config,
    format_slider_value,
    generate_appearance_html,
    generate_appearance_html_from_sections,
    generate_axes_section_html,
    generate_dropdown_html,
    generate_facet_dropdowns_html,
    generate_group_column_dropdown_html,
    generate_range_slider_html,
    generate_value_column_dropdown_html,
    slider_value_type,
    to_slider_number,
)


# ============================================================================
# DROPDOWNS AND SLIDERS
# ============================================================================


class TestDropdownHtml:
    def test_multiselect_marks_defaults(self):
        """Multi-selects mark every default option as selected."""
        dd = DropdownControl("region_select_c", "region", ["East", "North"], ["North"], "updateChart_c()")
        out = generate_dropdown_html(dd, multiselect=True)
        assert 'id="region_select_c" multiple' in out
        assert '<option value="North" selected>North</option>' in out
        assert '<option value="East">East</option>' in out
        assert 'onchange="updateChart_c()"' in out
        assert 'id="region_select_c_obs_count"' in out

    def test_single_select(self):
        """Choice dropdowns are single-selects."""
        dd = DropdownControl("a", "A", ["x", "y"], "y", "f()")
        out = generate_dropdown_html(dd, multiselect=False)
        assert "multiple" not in out

    def test_option_values_are_escaped(self):
        """Option values are HTML-escaped."""
        dd = DropdownControl("a", "A", ['<b>"q"'], None, "f()")
        out = generate_dropdown_html(dd)
        assert "&lt;b&gt;&quot;q&quot;" in out


class TestSliders:
    def test_format_values(self):
        """Server-side labels match the browser's formatters."""
        assert format_slider_value(0, "date") == "1970-01-01"
        assert format_slider_value(90_000, "datetime") == "1970-01-01T00:01:30"
        assert format_slider_value(3_723_000, "time") == "01:02:03"
        assert format_slider_value(4.6, "integer") == "5"
        assert format_slider_value(3.0, "numeric") == "3"
        assert format_slider_value(2.456, "numeric") == "2.46"

    def test_to_slider_number(self):
        """Times map to milliseconds since midnight, dates to epoch milliseconds."""
        assert to_slider_number(dt.time(1, 0, 0)) == 3_600_000.0
        assert to_slider_number(pd.Timestamp("1970-01-02")) == 86_400_000.0
        assert to_slider_number(dt.date(1970, 1, 2)) == 86_400_000.0
        assert to_slider_number(5) == 5.0

    def test_to_slider_number_converts_timezones_to_utc(self):
        """Aware timestamps are measured in UTC."""
        ts = pd.Timestamp("1970-01-01 01:00", tz="Europe/Paris")
        assert to_slider_number(ts) == 0.0

    def test_value_types(self):
        """Slider formatting follows the column's temporal kind."""
        assert slider_value_type(pd.Series(pd.date_range("2024-01-01", periods=3))) == "date"
        assert slider_value_type(pd.Series(pd.to_datetime(["2024-01-01 00:00", "2024-01-01 06:00"]))) == "datetime"
        assert slider_value_type(pd.Series([dt.time(1), dt.time(2)])) == "time"
        assert slider_value_type(pd.Series([dt.date(2024, 1, 1)])) == "date"
        assert slider_value_type(pd.Series([1, 2, 3])) == "integer"
        assert slider_value_type(pd.Series([1.5, 2.0])) == "numeric"

    def test_range_slider_html(self):
        """Range sliders carry their step, formatter and update callback."""
        slider = RangeSliderControl("units_range_c", "units", 0, 59, 0, 59, "updateChart_c()", "integer")
        out = generate_range_slider_html(slider)
        assert 'id="units_range_c_slider"' in out
        assert "0 to 59" in out
        assert "step: 1.0" in out
        assert "function formatValue_units_range_c(x)" in out
        assert "updateChart_c()" in out


# ============================================================================
# BUILDERS
# ============================================================================


class TestBuilders:
    def test_filters_split_into_dropdowns_and_sliders(self, sales_df):
        """Low-cardinality columns get dropdowns, continuous ones sliders."""
        filters = {"region": ["North"], "units": []}
        dropdowns, sliders = build_filter_dropdowns("c", filters, sales_df, "updateChart_c")
        assert [dd.id for dd in dropdowns] == ["region_select_c"]
        assert dropdowns[0].default_value == ["North"]
        assert dropdowns[0].options == ["East", "North", "South"]
        assert len(sliders) == 1
        slider = sliders[0]
        assert slider.id == "units_range_c"
        assert (slider.min_value, slider.max_value) == (0.0, 59.0)
        assert slider.value_type == "integer"

    def test_unknown_filter_defaults_select_everything(self, sales_df):
        """Defaults matching no value fall back to every option."""
        dropdowns, _ = build_filter_dropdowns("c", {"region": ["Mars"]}, sales_df, "f")
        assert dropdowns[0].default_value == ["East", "North", "South"]

    def test_date_slider_uses_epoch_ms(self, sales_df):
        """Date slider bounds are epoch milliseconds."""
        _, sliders = build_filter_dropdowns("c", {"date": []}, sales_df, "f")
        assert sliders[0].value_type == "date"
        assert sliders[0].min_value == to_slider_number(pd.Timestamp("2024-01-01"))

    def test_choice_dropdowns(self, small_df):
        """Choices on absent columns are skipped."""
        dds = build_choice_dropdowns("c", {"group": "b", "absent": 1}, small_df, "f")
        assert len(dds) == 1
        assert dds[0].id == "group_choice_c"
        assert dds[0].default_value == "b"

    def test_choice_bad_default_falls_back(self, small_df):
        """An unknown choice default falls back to the first value."""
        dds = build_choice_dropdowns("c", {"group": "zzz"}, small_df, "f")
        assert dds[0].default_value == "a"

    def test_facet_dropdowns(self):
        """Facet dropdowns always offer None."""
        assert build_facet_dropdowns("c", [], [], "f") == []
        single = build_facet_dropdowns("c", ["region"], ["region"], "f")
        assert single[0].options == ["None", "region"]
        assert single[0].default_value == "region"
        pair = build_facet_dropdowns("c", ["region", "product"], ["product"], "f")
        assert [dd.id for dd in pair] == ["facet1_select_c", "facet2_select_c"]
        assert pair[0].default_value == "product"
        assert pair[1].default_value == "None"

    def test_filter_js_config(self):
        """The update function reads each control into the filter config."""
        choice = [DropdownControl("g_choice_c", "g", [], None, "")]
        dds = [DropdownControl("region_select_c", "region", [], None, "")]
        sliders = [RangeSliderControl("units_range_c", "units", 0, 1, 0, 1, "")]
        js = filter_js_config("c", choice, dds, sliders)
        assert 'var choiceCols = ["g"];' in js
        assert 'var categoricalCols = ["region"];' in js
        assert 'var continuousCols = ["units"];' in js
        assert "readSliderRange(col + '_range_c')" in js


class TestAxisControls:
    def test_single_column_is_a_label(self):
        """A single axis column is shown as text, not a picker."""
        out = build_axis_controls_html("c", "f", x_cols=["date"], y_cols=["a", "b"])
        assert 'id="x_col_select_c"' not in out
        assert 'id="y_col_select_c"' in out

    def test_smoothing_parameters(self):
        """Smoothing transforms bring their parameter inputs."""
        out = build_axis_controls_html("c", "f", x_cols=["x"], y_cols=["y"], include_smoothing=True)
        for element in ("ewma_weight_c", "ewmstd_weight_c", "sma_window_c", "sma_param_c"):
            assert element in out
        assert '<option value="ewma">' in out

    def test_no_columns_no_html(self):
        assert build_axis_controls_html("c", "f") == ""

    def test_x_transform(self):
        """The x transform picker offers the distribution transforms."""
        out = build_axis_controls_html("c", "f", x_cols=["x"], y_cols=["y"], include_x_transform=True)
        assert 'id="x_transform_select_c"' in out
        assert '<option value="inverse_cdf">' in out


class TestAppearance:
    def test_full_layout(self):
        """Title, notes, control boxes and the aspect slider all precede the chart div."""
        controls = ChartHtmlControls(
            chart_title_safe="c",
            chart_div_id="c",
            update_function_name="updateChart_c",
            filter_dropdowns=[DropdownControl("region_select_c", "region", ["a"], ["a"], "f()")],
            attribute_dropdowns=[DropdownControl("color_col_select_c", "Color by", ["a"], "a", "f()")],
            title="Sales",
            notes="<em>n</em>",
        )
        out = generate_appearance_html(controls, aspect_ratio_default=0.75)
        assert "<h2>Sales</h2>" in out
        assert "<em>n</em>" in out
        assert "Filters" in out and 'id="c_total_obs"' in out
        assert "Plot Attributes" in out
        assert 'id="c_aspect_ratio_slider"' in out
        assert "0.75" in out
        assert out.rstrip().endswith('<div id="c"></div>')

    def test_no_controls_no_boxes(self):
        """Without controls no empty boxes are rendered."""
        controls = ChartHtmlControls("c", "c", "f", title="Bare")
        out = generate_appearance_html(controls)
        assert "Filters" not in out
        assert "Plot Attributes" not in out

    def test_from_sections(self):
        """Pre-rendered sections are placed in the standard layout."""
        out = generate_appearance_html_from_sections(
            filters_html="<select id='f'></select>",
            plot_attributes_html="",
            faceting_html=generate_facet_dropdowns_html("c", ["region"], [], "updateChart_c"),
            title="Pieces",
            notes="",
            chart_div_id="c",
        )
        assert "<h2>Pieces</h2>" in out
        assert "<select id='f'></select>" in out
        assert 'id="facet1_select_c"' in out
        assert 'id="c_aspect_ratio_slider"' in out

    def test_from_sections_without_chart_div(self):
        """No aspect-ratio control is added without a chart div."""
        out = generate_appearance_html_from_sections("", "<b>attrs</b>", "", "T", "", "")
        assert "<b>attrs</b>" in out
        assert "aspect_ratio" not in out
        assert "Filters" not in out


class TestColumnSelectors:
    def test_axes_section(self):
        axes = [DropdownControl("x_col_select_c", "X", ["a", "b"], "b", "f()")]
        out = generate_axes_section_html(axes)
        assert "<h4" in out and "Axes" in out
        assert '<option value="b" selected>' in out
        assert generate_axes_section_html([]) == ""

    def test_value_column_dropdown(self):
        """The value selector preselects the default column."""
        html_out, js = generate_value_column_dropdown_html("c", ["revenue", "units"], "units", "updateChart_c")
        assert 'id="c_value_selector"' in html_out
        assert '<option value="units" selected>' in html_out
        assert "updateChart_c()" in js

    def test_value_column_dropdown_needs_two_columns(self):
        """A single value column needs no selector."""
        assert generate_value_column_dropdown_html("c", ["revenue"], None, "f") == ("", "")

    def test_group_column_dropdown_defaults_to_none(self):
        """Without a default the group selector starts on None."""
        html_out, js = generate_group_column_dropdown_html("c", ["region", "product"], None, "f")
        assert '<option value="_none_" selected>None</option>' in html_out
        assert "c_group_selector" in js
