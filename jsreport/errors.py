# jsreport/errors.py
"""
Exceptions and warnings raised while building reports.

Configuration problems are reported synchronously when a chart or page
is constructed. Nothing is retried: generation is a one-shot batch job.
"""


class JSReportError(Exception):
    """Invalid report configuration (bad column, bad enum value, empty input)."""

    pass


class MissingFileError(JSReportError, FileNotFoundError):
    """An image, directory or source file referenced by an item does not exist."""

    pass


class JSReportWarning(UserWarning):
    """Warning for non-fatal issues such as oversized embedded images."""

    pass
