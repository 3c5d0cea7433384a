"""
Pytest configuration and shared fixtures for Arbor tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from arbor.config import set_default_config  # noqa: E402
from arbor.crypto.hashing import sha256  # noqa: E402


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def h():
    """The default hash function."""
    return sha256


@pytest.fixture
def abcd():
    """The four-element scenario used across proof tests."""
    return [b"a", b"b", b"c", b"d"]


@pytest.fixture
def make_elements():
    """Factory for n distinct elements: b"leaf0", b"leaf1", ..."""
    def _make(n: int) -> list[bytes]:
        return [f"leaf{i}".encode() for i in range(n)]
    return _make


@pytest.fixture(autouse=True)
def _clean_arbor_env(monkeypatch):
    """Keep ARBOR_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("ARBOR_"):
            monkeypatch.delenv(key, raising=False)
    set_default_config(None)
    yield
    set_default_config(None)
