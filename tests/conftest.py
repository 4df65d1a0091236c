"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from chatparser.plugins import clear_plugins

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SHARE_URL = "https://claude.ai/share/ec0a6320-d9ab-4598-b2be-ac5d9d2c24d1"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def render_count_html() -> str:
    return _read_fixture("render_count.html")


@pytest.fixture
def class_based_html() -> str:
    return _read_fixture("class_based.html")


@pytest.fixture
def share_url() -> str:
    return SHARE_URL


@pytest.fixture(autouse=True)
def _reset_plugins():
    clear_plugins()
    yield
    clear_plugins()
