"""Output monitor: consumes one captured stream of one stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorResult:
    """Final report of one monitor, emitted exactly once at end-of-stream.

    ``matched`` is the sticky verdict: True when any line of the stream
    matched a success pattern.
    """

    stream: str
    matched: bool
    lines: int = 0


class LineCheck(Protocol):
    """Predicate applied to every line, with a sticky aggregate verdict."""

    matched: bool

    def __call__(self, line: str) -> bool: ...


def watch_stream(
    stream: IO[bytes],
    check: LineCheck,
    *,
    name: str,
    sink: logging.Logger | None = None,
    prefix: str = "\t| ",
    level: int = logging.DEBUG,
    encoding: str = "utf-8",
) -> MonitorResult:
    """Read *stream* to end-of-input, one line at a time.

    Every line is fed to *check*.  A line identical to the one directly
    before it on the same stream is not logged again, but is still
    checked.  Returns once the stream is exhausted, which happens when
    the writing process exits or closes its end.

    The stream is not closed here; its owner closes it after the verdict
    has been consumed.
    """
    sink = sink or logger
    previous: str | None = None
    count = 0
    for raw in stream:
        data = raw.rstrip(b"\n")
        if data.endswith(b"\r"):
            data = data[:-1]
        line = data.decode(encoding, errors="replace")
        count += 1
        check(line)
        if line != previous:
            sink.log(level, "%s%s", prefix, line)
        previous = line

    return MonitorResult(stream=name, matched=check.matched, lines=count)
