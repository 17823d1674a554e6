# jsreport/utils/__init__.py
"""Utility functions for jsreport."""

from .images import copy_to_pictures, embedded_image_html, image_data_uri, image_mime_type

__all__ = ["copy_to_pictures", "embedded_image_html", "image_data_uri", "image_mime_type"]
