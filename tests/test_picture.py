# tests/test_picture.py
"""
Tests for Picture: single images, filtered directories and figures.
"""
import os

import pytest

import jsreport
from jsreport import Picture
from jsreport.core import DataFormat
from jsreport.errors import JSReportError, JSReportWarning, MissingFileError


# ============================================================================
# SINGLE IMAGE
# ============================================================================


class TestSinglePicture:
    def test_missing_file(self, tmp_path):
        """MissingFileError is also a FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            Picture("p", str(tmp_path / "nope.png"))
        with pytest.raises(MissingFileError):
            Picture("p", str(tmp_path / "nope.png"))

    def test_embedded_png_uses_data_uri(self, png_file):
        """Embedded raster images become data URIs."""
        pic = Picture("My pic", str(png_file), title="Revenue")
        html = pic.render_html(DataFormat.CSV_EMBEDDED)
        assert 'src="data:image/png;base64,' in html
        assert "<h2>Revenue</h2>" in html

    def test_embedded_svg_is_inlined(self, svg_file):
        """SVG files are inlined as markup."""
        html = Picture("p", str(svg_file)).render_html(DataFormat.JSON_EMBEDDED)
        assert "<svg" in html
        assert "data:image" not in html

    def test_title_defaults_to_chart_title(self, png_file):
        assert Picture("Growth", str(png_file)).title == "Growth"

    def test_external_copies_into_pictures(self, png_file, tmp_path):
        """External formats copy the image under pictures/."""
        project = tmp_path / "project"
        pic = Picture("My pic", str(png_file))
        html = pic.render_html(DataFormat.PARQUET, str(project))
        assert (project / "pictures" / "My_pic.png").exists()
        assert 'src="pictures/My_pic.png"' in html

    def test_external_needs_project_dir(self, png_file):
        """External rendering needs somewhere to copy the image."""
        with pytest.raises(JSReportError, match="project directory"):
            Picture("p", str(png_file)).render_html(DataFormat.CSV_EXTERNAL)

    def test_attribution_is_file_name(self, png_file):
        assert "Data: chart.png</p>" in Picture("p", str(png_file)).attribution_html(DataFormat.CSV_EMBEDDED)

    def test_large_image_warns(self, png_file):
        """Embedding a large image emits JSReportWarning."""
        jsreport.configure(large_image_warning_mb=0.00001)
        with pytest.warns(JSReportWarning, match="large"):
            Picture("p", str(png_file)).render_html(DataFormat.CSV_EMBEDDED)

    def test_dependencies(self, png_file):
        assert Picture("p", str(png_file)).dependencies() == []


# ============================================================================
# FILTERED DIRECTORY
# ============================================================================


@pytest.fixture
def picture_dir(tmp_path):
    directory = tmp_path / "plots"
    directory.mkdir()
    for region in ("north", "south"):
        for year in ("2023", "2024"):
            (directory / f"sales!{region}!{year}.png").write_bytes(b"\x89PNG" + region.encode() + year.encode())
    (directory / "other.png").write_bytes(b"\x89PNG")
    return directory


class TestPictureFromDirectory:
    def test_groups_parsed(self, picture_dir):
        """Group names come from the filter keys; a None default picks the first value."""
        pic = Picture.from_directory("viewer", str(picture_dir), "sales", filters={"region": "south", "year": None})
        assert pic.is_filtered
        assert pic.group_names == ["region", "year"]
        assert pic.group_values["region"] == ["north", "south"]
        assert pic.group_defaults == {"region": "south", "year": "2023"}
        assert len(pic.files) == 4

    def test_unnamed_groups(self, picture_dir):
        """Without filters the groups are numbered."""
        pic = Picture.from_directory("viewer", str(picture_dir), "sales")
        assert pic.group_names == ["group_1", "group_2"]

    def test_dropdowns_and_hidden_images(self, picture_dir):
        """Each group gets a dropdown and the images are preloaded hidden."""
        pic = Picture.from_directory("viewer", str(picture_dir), "sales", filters={"region": "north", "year": "2024"})
        html = pic.render_html(DataFormat.CSV_EMBEDDED)
        assert 'id="region_select_viewer"' in html
        assert 'id="year_select_viewer"' in html
        assert '<option value="2024" selected>' in html
        assert 'id="picture_img_viewer"' in html
        assert html.count('style="display: none;"') == 4
        assert "window.updatePicture_viewer = function()" in pic.functional_html
        assert '"north,2024": "picture_sales_north_2024_png"' in pic.functional_html

    def test_external_copies_every_file(self, picture_dir, tmp_path):
        """Every matching image is copied for external formats."""
        project = tmp_path / "out"
        pic = Picture.from_directory("viewer", str(picture_dir), "sales")
        pic.render_html(DataFormat.CSV_EXTERNAL, str(project))
        assert len(os.listdir(project / "pictures")) == 4

    def test_no_attribution(self, picture_dir):
        pic = Picture.from_directory("viewer", str(picture_dir), "sales")
        assert pic.attribution_html(DataFormat.CSV_EMBEDDED) == ""

    def test_missing_directory(self, tmp_path):
        """A missing directory raises MissingFileError."""
        with pytest.raises(MissingFileError):
            Picture.from_directory("v", str(tmp_path / "nope"), "sales")

    def test_no_matching_files(self, picture_dir):
        """A prefix matching no image is an error."""
        with pytest.raises(JSReportError, match="No images matching"):
            Picture.from_directory("v", str(picture_dir), "costs")

    def test_inconsistent_groups(self, picture_dir):
        """All file names must split into the same number of groups."""
        (picture_dir / "sales!east.png").write_bytes(b"\x89PNG")
        with pytest.raises(JSReportError, match="Inconsistent number of groups"):
            Picture.from_directory("v", str(picture_dir), "sales")


# ============================================================================
# FIGURES
# ============================================================================


class FakeFigure:
    def __init__(self):
        self.saved_to = None

    def savefig(self, path):
        self.saved_to = path
        with open(path, "wb") as f:
            f.write(b"\x89PNGfake")


class TestPictureFromFigure:
    def test_savefig_is_detected(self):
        """Figures with savefig are saved to a temporary file."""
        fig = FakeFigure()
        pic = Picture.from_figure("fig", fig)
        assert pic.is_temp
        assert fig.saved_to == pic.image_path
        assert os.path.exists(pic.image_path)
        pic.cleanup()
        assert not os.path.exists(pic.image_path)

    def test_custom_save_function(self):
        """An explicit save function is called with the target path."""
        def save(figure, path):
            with open(path, "w", encoding="utf-8") as f:
                f.write(figure)

        pic = Picture.from_figure("fig", "<svg></svg>", save, format="svg")
        assert pic.image_path.endswith("fig.svg")
        assert "<svg></svg>" in pic.render_html(DataFormat.CSV_EMBEDDED)
        pic.cleanup()

    def test_unknown_figure_type(self):
        """Objects without savefig need a save function."""
        with pytest.raises(JSReportError, match="save_function"):
            Picture.from_figure("fig", object())

    def test_bad_format(self):
        """Only the supported image formats are accepted."""
        with pytest.raises(JSReportError, match="format must be one of"):
            Picture.from_figure("fig", FakeFigure(), format="bmp")

    def test_save_function_must_create_file(self):
        """The save function has to produce the file."""
        with pytest.raises(JSReportError, match="did not create"):
            Picture.from_figure("fig", None, lambda fig, path: None)

    def test_cleanup_is_idempotent(self):
        """Temporary files can be cleaned up twice."""
        pic = Picture.from_figure("fig", FakeFigure())
        pic.cleanup()
        pic.cleanup()

    def test_cleanup_leaves_user_files(self, png_file):
        """cleanup never deletes a user's own image."""
        pic = Picture("p", str(png_file))
        pic.cleanup()
        assert png_file.exists()
