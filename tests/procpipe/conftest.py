"""Shared fixtures for procpipe tests.

Helper stage programs live in ``testdata/`` and run under the current
interpreter, so no executable bit or POSIX shell is needed.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from procpipe import PipelineRunner, RunnerConfig, Stage

TESTDATA = Path(__file__).parent / "testdata"


def script(name: str, *args: str) -> Stage:
    """Stage running ``testdata/<name>.py`` with *args*."""
    return Stage(sys.executable, (str(TESTDATA / f"{name}.py"), *args))


class ListLogger(logging.Logger):
    """Logger that keeps every formatted message (thread-safe via Handler lock)."""

    def __init__(self) -> None:
        super().__init__("procpipe.test-sink", level=logging.DEBUG)
        self.messages: list[tuple[int, str]] = []
        handler = _ListHandler(self.messages)
        self.addHandler(handler)
        self.propagate = False


class _ListHandler(logging.Handler):
    def __init__(self, store: list[tuple[int, str]]) -> None:
        super().__init__(level=logging.DEBUG)
        self.store = store

    def emit(self, record: logging.LogRecord) -> None:
        self.store.append((record.levelno, record.getMessage()))


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def testdata() -> Path:
    return TESTDATA


@pytest.fixture
def debug_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="procpipe")
    return caplog


@pytest.fixture
def sink() -> ListLogger:
    return ListLogger()


@pytest.fixture
def runner(sink) -> PipelineRunner:
    """Runner whose log sink records every message."""
    return PipelineRunner(RunnerConfig(), sink=sink)


@pytest.fixture
def py_stage():
    """Factory: ``py_stage("emit", "--exit", "1")`` → Stage for a testdata script."""
    return script


@pytest.fixture
def stage_lines(sink):
    """Stage lines delivered to the ``sink`` fixture, prefix stripped."""

    def collect(prefix: str = "\t| ") -> list[str]:
        return [m[len(prefix):] for _, m in sink.messages if m.startswith(prefix)]

    return collect
