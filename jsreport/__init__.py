"""
jsreport: interactive single-file HTML reports from pandas DataFrames.

Usage:
    import jsreport

    chart = jsreport.LineChart("sales", df, "sales_data",
                               x_cols=["date"], y_cols=["revenue"],
                               color_cols=["region"], filters={"year": [2024]})
    page = jsreport.Page({"sales_data": df}, [chart], tab_title="Sales")
    jsreport.create_html(page, outfile_path="sales.html")

    # Parquet data next to the page, opened through the bundled launchers
    jsreport.configure(default_dataformat="parquet")
"""
from jsreport.context import (
    ReportConfig,
    configure,
    get_config,
    reset_config,
    set_config,
)
from jsreport.core import (
    DataFormat,
    ReportItem,
    sanitize_chart_title,
    sanitize_filename,
    sanitize_html_id,
)
from jsreport.errors import (
    JSReportError,
    JSReportWarning,
    MissingFileError,
)
from jsreport.charts import (
    BoxAndWhiskers,
    CodeBlock,
    DistPlot,
    KernelDensity,
    LineChart,
    LinkList,
    Picture,
    PivotTable,
    Scatter3D,
    ScatterPlot,
    Surface3D,
    Table,
    TextBlock,
)
from jsreport.page import Page, Pages
from jsreport.api import create_html, show

__version__ = "1.0.0"
__all__ = [
    "create_html",
    "show",
    "configure",
    "get_config",
    "set_config",
    "reset_config",
    "ReportConfig",
    "Page",
    "Pages",
    "LineChart",
    "ScatterPlot",
    "Scatter3D",
    "Surface3D",
    "BoxAndWhiskers",
    "DistPlot",
    "KernelDensity",
    "PivotTable",
    "Table",
    "Picture",
    "TextBlock",
    "LinkList",
    "CodeBlock",
    "ReportItem",
    "DataFormat",
    "sanitize_chart_title",
    "sanitize_html_id",
    "sanitize_filename",
    "JSReportError",
    "JSReportWarning",
    "MissingFileError",
]
