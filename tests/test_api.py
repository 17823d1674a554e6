# tests/test_api.py
"""
End-to-end tests for create_html and show.
"""
import os

import pytest

import jsreport
from jsreport import (
    BoxAndWhiskers,
    CodeBlock,
    LineChart,
    LinkList,
    Page,
    Pages,
    Picture,
    PivotTable,
    ScatterPlot,
    Table,
    TextBlock,
    create_html,
)
from jsreport.errors import JSReportError


# ============================================================================
# SINGLE PAGE
# ============================================================================


class TestCreateHtmlEmbedded:
    def test_page_written_to_outfile(self, tmp_path, sales_df):
        """Embedded pages are written straight to the target file."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        out = tmp_path / "report.html"
        path = create_html(Page({"sales": sales_df}, [chart]), outfile_path=str(out))
        assert path == str(out)
        html = out.read_text(encoding="utf-8")
        assert 'id="data_sales"' in html
        assert "2024-01-01" in html
        assert not (tmp_path / "report").exists()

    def test_only_referenced_frames_embedded(self, tmp_path, sales_df, small_df):
        """Frames no item reads are left out of the page."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        path = create_html(Page({"sales": sales_df, "unused": small_df}, [chart]), outfile_path=str(tmp_path / "r.html"))
        html = open(path, encoding="utf-8").read()
        assert 'id="data_unused"' not in html

    def test_single_item_with_frame(self, tmp_path, sales_df):
        """A lone chart plus its frame becomes a one-item page."""
        chart = ScatterPlot("scatter", sales_df, "sales", ["revenue", "units"])
        path = create_html(chart, sales_df, str(tmp_path / "scatter.html"))
        html = open(path, encoding="utf-8").read()
        assert 'id="data_sales"' in html
        assert "<title>scatter</title>" in html

    def test_data_less_item_alone(self, tmp_path, small_df):
        """Items without data need no frame."""
        path = create_html(Table("t", small_df), outfile_path=str(tmp_path / "t.html"))
        assert 'id="table_t"' in open(path, encoding="utf-8").read()

    def test_code_block_alone(self, tmp_path):
        """A lone code block is written with its highlighter."""
        path = create_html(CodeBlock("print(1)"), outfile_path=str(tmp_path / "code.html"))
        assert "prism-python" in open(path, encoding="utf-8").read()

    def test_data_item_without_frame(self, tmp_path, sales_df):
        """A data-backed item without its frame is an error."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        with pytest.raises(JSReportError, match="pass its DataFrame"):
            create_html(chart, outfile_path=str(tmp_path / "r.html"))

    def test_frame_for_data_less_item(self, tmp_path, small_df):
        """Passing a frame with a data-less item is a TypeError."""
        with pytest.raises(TypeError):
            create_html(Table("t", small_df), small_df, str(tmp_path / "r.html"))

    def test_frame_for_link_list(self, tmp_path, small_df):
        """Link lists read no dataset, so a frame is rejected too."""
        links = LinkList([("Home", "index.html", "Start here")])
        with pytest.raises(TypeError, match="does not read a dataset"):
            create_html(links, small_df, str(tmp_path / "r.html"))
        assert not (tmp_path / "r.html").exists()

    def test_unsupported_object(self, tmp_path):
        """Objects that are not report items are rejected."""
        with pytest.raises(TypeError, match="create_html expects"):
            create_html("nope", outfile_path=str(tmp_path / "r.html"))

    def test_missing_dataset(self, tmp_path, sales_df):
        """A page lacking a referenced frame is an error."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        with pytest.raises(JSReportError, match="missing datasets"):
            create_html(Page({}, [chart]), outfile_path=str(tmp_path / "r.html"))

    def test_logs_saved_page(self, tmp_path, small_df, caplog):
        """The written HTML path is logged."""
        with caplog.at_level("INFO", logger="jsreport.api"):
            create_html(Table("t", small_df), outfile_path=str(tmp_path / "t.html"))
        assert "HTML page saved to" in caplog.text


class TestCreateHtmlExternal:
    @pytest.mark.parametrize(
        "dataformat, extension",
        [("csv_external", "csv"), ("json_external", "json"), ("parquet", "parquet")],
    )
    def test_project_folder(self, tmp_path, sales_df, dataformat, extension):
        """External formats write a project folder with data and launchers."""
        chart = BoxAndWhiskers("box", sales_df, "sales", x_cols=["revenue"], color_cols=["region"])
        page = Page({"sales": sales_df}, [chart], dataformat=dataformat)
        path = create_html(page, outfile_path=str(tmp_path / "report.html"))
        project = tmp_path / "report"
        assert path == str(project / "report.html")
        assert (project / "data" / f"sales.{extension}").exists()
        for name in ("open.bat", "open.sh", "README.md"):
            assert (project / name).exists()
        assert f'data-src="data/sales.{extension}"' in (project / "report.html").read_text(encoding="utf-8")

    def test_only_referenced_frames_saved(self, tmp_path, sales_df, small_df):
        """Only frames that items read are saved."""
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        page = Page({"sales": sales_df, "unused": small_df}, [chart], dataformat="csv_external")
        create_html(page, outfile_path=str(tmp_path / "r.html"))
        assert os.listdir(tmp_path / "r" / "data") == ["sales.csv"]

    def test_all_frames_saved_when_nothing_references_data(self, tmp_path, small_df):
        """Pages without data-backed items save every frame."""
        page = Page({"a": small_df, "b": small_df}, [TextBlock("x")], dataformat="csv_external")
        create_html(page, outfile_path=str(tmp_path / "r.html"))
        assert sorted(os.listdir(tmp_path / "r" / "data")) == ["a.csv", "b.csv"]

    def test_pictures_copied(self, tmp_path, png_file):
        """Pictures are copied next to external reports."""
        page = Page({}, [Picture("pic", str(png_file))], dataformat="parquet")
        create_html(page, outfile_path=str(tmp_path / "r.html"))
        assert (tmp_path / "r" / "pictures" / "pic.png").exists()

    def test_pivot_table_with_several_datasets(self, tmp_path, sales_df, small_df):
        """A pivot table over two datasets saves both."""
        pt = PivotTable("p", ["sales", "small"])
        page = Page({"sales": sales_df, "small": small_df}, [pt], dataformat="json_external")
        create_html(page, outfile_path=str(tmp_path / "r.html"))
        assert sorted(os.listdir(tmp_path / "r" / "data")) == ["sales.json", "small.json"]


class TestCleanup:
    def test_temporary_figures_removed(self, tmp_path):
        """Temporary figure files are deleted after writing."""
        class Figure:
            def savefig(self, path):
                with open(path, "wb") as f:
                    f.write(b"\x89PNG")

        pic = Picture.from_figure("fig", Figure())
        temp_path = pic.image_path
        create_html(pic, outfile_path=str(tmp_path / "fig.html"))
        assert not os.path.exists(temp_path)
        assert "data:image/png;base64," in (tmp_path / "fig.html").read_text(encoding="utf-8")

    def test_cleanup_runs_when_writing_fails(self, tmp_path, sales_df):
        """Cleanup still runs when writing raises."""
        class Figure:
            def savefig(self, path):
                with open(path, "wb") as f:
                    f.write(b"\x89PNG")

        pic = Picture.from_figure("fig", Figure())
        chart = LineChart("c", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        with pytest.raises(JSReportError):
            create_html(Page({}, [pic, chart]), outfile_path=str(tmp_path / "r.html"))
        assert not os.path.exists(pic.image_path)


# ============================================================================
# MULTI-PAGE
# ============================================================================


class TestCreateHtmlPages:
    def _project(self, sales_df, small_df, dataformat="parquet"):
        line = LineChart("line", sales_df, "sales", x_cols=["date"], y_cols=["revenue"])
        box = BoxAndWhiskers("box", sales_df, "sales", x_cols=["units"])
        scatter = ScatterPlot("scatter", small_df, "small", ["x", "y"])
        page1 = Page({"sales": sales_df}, [line, box], tab_title="Sales Page", notes="Revenue")
        page2 = Page({"small": small_df, "sales": sales_df}, [scatter], tab_title="Small")
        return Pages.from_content([TextBlock("<p>Welcome</p>")], [page1, page2], dataformat=dataformat)

    def test_files_written(self, tmp_path, sales_df, small_df):
        """Every page, dataset and launcher lands in the project folder."""
        path = create_html(self._project(sales_df, small_df), outfile_path=str(tmp_path / "site.html"))
        project = tmp_path / "site"
        assert path == str(project / "site.html")
        assert (project / "sales_page.html").exists()
        assert (project / "small.html").exists()
        assert sorted(os.listdir(project / "data")) == ["sales.parquet", "small.parquet"]
        for name in ("open.bat", "open.sh", "README.md"):
            assert (project / name).exists()

    def test_cover_links_to_pages(self, tmp_path, sales_df, small_df):
        """The cover page links to each page and embeds no data."""
        path = create_html(self._project(sales_df, small_df), outfile_path=str(tmp_path / "site.html"))
        cover = open(path, encoding="utf-8").read()
        assert '<a href="sales_page.html">Sales Page</a>' in cover
        assert "Welcome" in cover
        assert 'id="data_' not in cover

    def test_each_page_references_its_own_data(self, tmp_path, sales_df, small_df):
        """Pages only reference the datasets they read."""
        create_html(self._project(sales_df, small_df), outfile_path=str(tmp_path / "site.html"))
        small_html = (tmp_path / "site" / "small.html").read_text(encoding="utf-8")
        assert 'data-src="data/small.parquet"' in small_html
        assert "data/sales.parquet" not in small_html

    def test_embedded_pages_still_use_folder(self, tmp_path, sales_df, small_df):
        """Multi-page embedded reports still get a folder but no data files."""
        project = self._project(sales_df, small_df, dataformat="csv_embedded")
        path = create_html(project, outfile_path=str(tmp_path / "site.html"))
        assert path == str(tmp_path / "site" / "site.html")
        assert not (tmp_path / "site" / "data").exists()
        assert 'id="data_sales"' in (tmp_path / "site" / "sales_page.html").read_text(encoding="utf-8")

    def test_page_cannot_overwrite_cover(self, tmp_path, small_df):
        """A page named like the cover is rejected."""
        sub = Page({}, [Table("t", small_df)], tab_title="Site")
        project = Pages(Page({}, [TextBlock("x")]), [sub])
        with pytest.raises(JSReportError, match="overwrite the cover page"):
            create_html(project, outfile_path=str(tmp_path / "site.html"))

    def test_summary_logged(self, tmp_path, sales_df, small_df, caplog):
        """The multi-page summary line is logged."""
        with caplog.at_level("INFO", logger="jsreport.api"):
            create_html(self._project(sales_df, small_df), outfile_path=str(tmp_path / "site.html"))
        assert "3 pages, 2 datasets (parquet)" in caplog.text


class TestShow:
    def test_opens_browser(self, monkeypatch, small_df):
        """show writes a temporary report and opens it."""
        opened = []
        monkeypatch.setattr("webbrowser.open", lambda url: opened.append(url))
        path = jsreport.show(Table("t", small_df))
        assert os.path.exists(path)
        assert opened == [f"file://{path}"]

    def test_without_browser(self, monkeypatch, small_df):
        """show can skip opening the browser."""
        monkeypatch.setattr("webbrowser.open", lambda url: pytest.fail("browser opened"))
        path = jsreport.show(Table("t", small_df), open_browser=False)
        assert path.endswith("report.html")
