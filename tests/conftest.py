"""Pytest configuration for test isolation.

``configure_logging`` installs its handler once per process and binds it to
the ``sys.stderr`` of that moment. CLI tests swap stderr for every invocation,
so the package logger is reset around each test. The log-level and date-hint
environment variables are cleared so a developer's shell (or ``.env``) cannot
change parsing results.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from statement_ingest.logging_setup import reset_logging

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    for name in ("STATEMENT_INGEST_LOG_LEVEL", "STATEMENT_INGEST_DATE_FORMAT"):
        # setenv first so teardown also removes values a test loads from .env.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def fixture_path():
    def _path(*parts: str) -> Path:
        return FIXTURES.joinpath(*parts)

    return _path
