# jsreport/charts/codeblock.py
"""
Syntax-highlighted source code, rendered in the browser by Prism.
"""
from __future__ import annotations

import hashlib
import html
import inspect
import os
import textwrap
from typing import Callable, List, Optional

from jsreport.core import JS_DEP_PRISM, ReportItem
from jsreport.errors import JSReportError
from jsreport.utils.images import require_file

# language name -> Prism component id
PRISM_LANGUAGES = {
    "python": "python",
    "julia": "julia",
    "r": "r",
    "cpp": "cpp",
    "c++": "cpp",
    "c": "c",
    "java": "java",
    "javascript": "javascript",
    "js": "javascript",
    "sql": "sql",
    "plsql": "plsql",
    "rust": "rust",
}

EXTENSION_LANGUAGES = {
    ".py": "python",
    ".jl": "julia",
    ".r": "r",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".java": "java",
    ".js": "javascript",
    ".sql": "sql",
    ".pls": "plsql",
    ".pks": "plsql",
    ".pkb": "plsql",
    ".rs": "rust",
}

CODEBLOCK_STYLE = """
<style>
    .codeblock-container { margin: 20px 0; }
    .codeblock-container pre { border-radius: 5px; max-height: 600px; overflow: auto; font-size: 0.85em; }
</style>"""

CODEBLOCK_TEMPLATE = """
    <div class="codeblock-container">
        <pre><code class="language-{language}">{code}</code></pre>
        {notes}
    </div>"""


def prism_language(language: str) -> str:
    key = language.strip().lower()
    if key not in PRISM_LANGUAGES:
        raise JSReportError(
            f"Unsupported language {language!r}; expected one of {', '.join(sorted(set(PRISM_LANGUAGES.values())))}"
        )
    return PRISM_LANGUAGES[key]


class CodeBlock(ReportItem):
    """Syntax-highlighted source code, rendered with Prism.js."""

    STYLE = CODEBLOCK_STYLE

    def __init__(
        self,
        code: str,
        *,
        language: str = "python",
        notes: str = "",
        chart_title: Optional[str] = None,
    ):
        self.code = code
        self.language = prism_language(language)
        self.notes = notes
        if chart_title is None:
            digest = hashlib.sha1(code.encode("utf-8")).hexdigest()[:10]
            chart_title = f"codeblock_{digest}"
        self.chart_title = chart_title
        self.functional_html = ""
        notes_html = f"<p>{notes}</p>" if notes else ""
        self.appearance_html = CODEBLOCK_TEMPLATE.format(
            language=self.language, code=html.escape(code), notes=notes_html
        )

    @classmethod
    def from_file(cls, path: str, language: Optional[str] = None, *, notes: str = "") -> "CodeBlock":
        """Read ``path``; the language is taken from its extension unless given."""
        require_file(path, what="Source file")
        if language is None:
            ext = os.path.splitext(path)[1].lower()
            if ext not in EXTENSION_LANGUAGES:
                raise JSReportError(f"Cannot detect language of {path}; pass language=")
            language = EXTENSION_LANGUAGES[ext]
        with open(path, "r", encoding="utf-8") as f:
            code = f.read()
        return cls(code, language=language, notes=notes)

    @classmethod
    def from_function(cls, func: Callable, *, notes: str = "") -> "CodeBlock":
        """Show the source of a Python function or class."""
        try:
            code = textwrap.dedent(inspect.getsource(func))
        except (OSError, TypeError) as e:
            raise JSReportError(f"Cannot read source of {func!r}: {e}") from e
        return cls(code, language="python", notes=notes)

    def dependencies(self) -> List[str]:
        return []

    def js_dependencies(self) -> List[str]:
        return [JS_DEP_PRISM]
