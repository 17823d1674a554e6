# tests/conftest.py
"""
Shared pytest fixtures for jsreport tests.
"""

import sys
import warnings

import numpy as np
import pandas as pd
import pytest

import jsreport

# ============================================================================
# VERSION INFO
# ============================================================================


def pytest_configure(config):
    """Print library versions at test session start and register markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )

    print("\n" + "=" * 70)
    print("jsreport Test Session")
    print("=" * 70)
    print(f"Python:     {sys.version.split()[0]}")
    print(f"Pandas:     {pd.__version__}")
    print(f"NumPy:      {np.__version__}")
    print(f"jsreport:   {jsreport.__version__}")
    print("=" * 70)


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_report_config():
    """Reset the thread's ReportConfig before and after each test."""
    jsreport.reset_config()
    yield
    jsreport.reset_config()


@pytest.fixture(autouse=True)
def suppress_deprecation_warnings():
    """Suppress deprecation warnings during tests."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=DeprecationWarning)
        warnings.filterwarnings("ignore", category=FutureWarning)
        yield


# ============================================================================
# SAMPLE DATA
# ============================================================================


@pytest.fixture
def sales_df():
    """60 days of sales across three regions and two products."""
    n = 60
    return pd.DataFrame(
        {
            "date": pd.date_range("2024-01-01", periods=n, freq="D"),
            "region": ["North", "South", "East"] * (n // 3),
            "product": ["A", "B"] * (n // 2),
            "revenue": np.linspace(100.0, 159.0, n),
            "units": np.arange(n, dtype="int64"),
            "promo": [True, False] * (n // 2),
        }
    )


@pytest.fixture
def small_df():
    """A frame small enough that every numeric column is categorical."""
    return pd.DataFrame(
        {
            "x": [1, 2, 3, 4],
            "y": [10.0, 20.0, 15.0, 25.0],
            "group": ["a", "a", "b", "b"],
        }
    )


@pytest.fixture
def png_file(tmp_path):
    """A tiny file with a PNG signature (content is never decoded)."""
    path = tmp_path / "chart.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32)
    return path


@pytest.fixture
def svg_file(tmp_path):
    path = tmp_path / "diagram.svg"
    path.write_text('<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"><rect width="10" height="10"/></svg>')
    return path
