"""Pytest configuration for the Rocks test suite."""

import io
import sys
from pathlib import Path

import pytest

# Add src directory to path so the suite runs from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def run_source():
    """Run source in a fresh session; returns (stdout text, diagnostics)."""
    import rocks

    def _run(source: str, stdin: str = "", **kwargs):
        out = io.StringIO()
        diagnostics = rocks.run(source, out=out, stdin=io.StringIO(stdin), **kwargs)
        return out.getvalue(), diagnostics

    return _run
