"""Pytest configuration for the Lox test suite."""

import io
import sys
from pathlib import Path

import pytest

# Add src directory to path so the suite runs from a plain checkout
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lox import Session  # noqa: E402


@pytest.fixture
def session():
    """A Session whose stdout and stderr are captured in StringIO buffers."""
    return Session(stdout=io.StringIO(), stderr=io.StringIO())
