"""
Page templates and the shared browser-side JavaScript.
"""
from jsreport.visualization.html_page import FULL_PAGE_TEMPLATE, SEGMENT_SEPARATOR, render_page_html
from jsreport.visualization.javascript import JS_UTILITIES

__all__ = ["FULL_PAGE_TEMPLATE", "JS_UTILITIES", "SEGMENT_SEPARATOR", "render_page_html"]
