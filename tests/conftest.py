"""Shared test fixtures for the ownership and checker tests."""
from __future__ import annotations

import textwrap

import pytest

from borrowguard_lite.ownership import Owner


@pytest.fixture
def owner() -> Owner[list[int]]:
    """A named owner of a small mutable list, nothing borrowed."""
    return Owner([1, 2, 3], name="buffer")


@pytest.fixture
def source():
    """Dedent a triple-quoted snippet so tests can indent it inline."""
    def _dedent(text: str) -> str:
        return textwrap.dedent(text).lstrip("\n")
    return _dedent
