"""
Report items: interactive charts and static content blocks.
"""
from jsreport.charts.boxandwhiskers import BoxAndWhiskers
from jsreport.charts.codeblock import CodeBlock
from jsreport.charts.distplot import DistPlot
from jsreport.charts.kerneldensity import KernelDensity
from jsreport.charts.linechart import LineChart
from jsreport.charts.linklist import LinkList
from jsreport.charts.picture import Picture
from jsreport.charts.pivottable import PivotTable
from jsreport.charts.scatter3d import Scatter3D
from jsreport.charts.scatterplot import ScatterPlot
from jsreport.charts.surface3d import Surface3D
from jsreport.charts.table import Table
from jsreport.charts.textblock import TextBlock

__all__ = [
    "BoxAndWhiskers",
    "CodeBlock",
    "DistPlot",
    "KernelDensity",
    "LineChart",
    "LinkList",
    "Picture",
    "PivotTable",
    "Scatter3D",
    "ScatterPlot",
    "Surface3D",
    "Table",
    "TextBlock",
]
