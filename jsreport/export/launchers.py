# jsreport/export/launchers.py
"""
Launcher scripts for reports that read external data files.

Browsers refuse ``fetch`` on ``file://`` URLs by default, so reports using
an external data format ship with small scripts that start a browser with
local file access enabled.
"""
from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

BAT_TEMPLATE = r"""@echo off
REM Opens {html} with local file access enabled
set "SCRIPT_DIR=%~dp0"
set "HTML_FILE=%SCRIPT_DIR%{html}"

where brave.exe >nul 2>nul
if %ERRORLEVEL%==0 (
    start "" brave.exe --allow-file-access-from-files "%HTML_FILE%"
    exit /b 0
)

where chrome.exe >nul 2>nul
if %ERRORLEVEL%==0 (
    start "" chrome.exe --allow-file-access-from-files "%HTML_FILE%"
    exit /b 0
)

if exist "%ProgramFiles%\Google\Chrome\Application\chrome.exe" (
    start "" "%ProgramFiles%\Google\Chrome\Application\chrome.exe" --allow-file-access-from-files "%HTML_FILE%"
    exit /b 0
)

if exist "%ProgramFiles(x86)%\Google\Chrome\Application\chrome.exe" (
    start "" "%ProgramFiles(x86)%\Google\Chrome\Application\chrome.exe" --allow-file-access-from-files "%HTML_FILE%"
    exit /b 0
)

where firefox.exe >nul 2>nul
if %ERRORLEVEL%==0 (
    start "" firefox.exe "%HTML_FILE%"
    exit /b 0
)

if exist "%ProgramFiles%\Mozilla Firefox\firefox.exe" (
    start "" "%ProgramFiles%\Mozilla Firefox\firefox.exe" "%HTML_FILE%"
    exit /b 0
)

start "" "%HTML_FILE%"
"""

SH_TEMPLATE = r"""#!/bin/bash
# Opens {html} with local file access enabled
SCRIPT_DIR="$(cd "$(dirname "${{BASH_SOURCE[0]}}")" && pwd)"
HTML_FILE="$SCRIPT_DIR/{html}"
USER_DATA_DIR="$(mktemp -d)"
CHROMIUM_FLAGS="--allow-file-access-from-files --disable-web-security --user-data-dir=$USER_DATA_DIR"

for browser in brave-browser brave google-chrome chrome chromium-browser chromium; do
    if command -v "$browser" >/dev/null 2>&1; then
        "$browser" $CHROMIUM_FLAGS "file://$HTML_FILE" >/dev/null 2>&1 &
        exit 0
    fi
done

if command -v firefox >/dev/null 2>&1; then
    firefox "file://$HTML_FILE" >/dev/null 2>&1 &
    exit 0
fi

for opener in xdg-open open; do
    if command -v "$opener" >/dev/null 2>&1; then
        "$opener" "$HTML_FILE"
        exit 0
    fi
done

echo "No supported browser found. Open $HTML_FILE manually."
exit 1
"""

README_TEMPLATE = """# {stem}

This report loads its data from the `data/` folder next to `{html}`.
Most browsers block that when a page is opened straight from disk, so use
one of the launchers, which start a browser with local file access enabled:

- **Windows**: double-click `open.bat`
- **Linux / macOS**: run `./open.sh`

You can also serve the folder over HTTP, e.g. `python -m http.server`, and
browse to `http://localhost:8000/{html}`.

If you need a single file that opens anywhere, regenerate the report with
`dataformat="csv_embedded"` or `dataformat="json_embedded"`; the data is then
stored inside the HTML file itself.
"""


def generate_bat_launcher(html_filename: str) -> str:
    return BAT_TEMPLATE.format(html=html_filename)


def generate_sh_launcher(html_filename: str) -> str:
    return SH_TEMPLATE.format(html=html_filename)


def generate_readme_content(html_filename: str) -> str:
    stem = os.path.splitext(html_filename)[0]
    return README_TEMPLATE.format(stem=stem, html=html_filename)


def write_launchers(project_dir: str, html_filename: str) -> None:
    """Write ``open.bat``, ``open.sh`` and ``README.md`` into ``project_dir``."""
    bat_path = os.path.join(project_dir, "open.bat")
    with open(bat_path, "w", encoding="utf-8", newline="\r\n") as f:
        f.write(generate_bat_launcher(html_filename))

    sh_path = os.path.join(project_dir, "open.sh")
    with open(sh_path, "w", encoding="utf-8", newline="\n") as f:
        f.write(generate_sh_launcher(html_filename))
    try:
        os.chmod(sh_path, 0o755)
    except OSError as e:
        logger.debug("Could not make %s executable: %s", sh_path, e)

    readme_path = os.path.join(project_dir, "README.md")
    with open(readme_path, "w", encoding="utf-8") as f:
        f.write(generate_readme_content(html_filename))
    logger.info("Launchers written to %s", project_dir)
