"""Outcome types returned by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ProcPipeError
from .monitor import MonitorResult


@dataclass
class StageOutcome:
    """What happened to one started stage.

    ``returncode`` is ``None`` when the stage could not be waited on.
    ``monitors`` holds one result per captured stream of the stage, and
    is always complete once the outcome is recorded.
    """

    command_line: str
    returncode: int | None
    monitors: list[MonitorResult] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return any(m.matched for m in self.monitors)

    @property
    def rescued(self) -> bool:
        """Failure status overridden by a success pattern."""
        return self.returncode not in (0, None) and self.matched

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0 or self.rescued


@dataclass
class PipelineResult:
    """Outcome of one pipeline invocation.

    Every invocation produces exactly one ``PipelineResult``.  ``error`` is
    the first unrecovered failure reading stages left to right, and
    ``failed_at`` the command line of the stage it belongs to.  Stages
    after the failing one are still listed in ``outcomes``: they were
    drained and reaped, but their own failures are not surfaced.
    """

    outcomes: list[StageOutcome] = field(default_factory=list)
    error: ProcPipeError | None = None
    failed_at: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Re-raise ``error`` if the pipeline failed."""
        if self.error is not None:
            raise self.error
