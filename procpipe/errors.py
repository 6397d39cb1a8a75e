"""Process pipeline error types."""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)

_LEVELS = {
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


class ProcPipeError(Exception):
    """Base class for every error raised or reported by procpipe."""


class EmptyPipelineError(ProcPipeError):
    """The pipeline was executed without any stages."""

    def __init__(self, message: str = "no stages supplied to the pipeline") -> None:
        super().__init__(message)


class PipelineStateError(ProcPipeError):
    """Invalid pipeline lifecycle.

    Examples:
    - A ``ProcessPipeline`` executed a second time.
    - A stage started before the stage feeding its input.
    """


class StageError(ProcPipeError):
    """A single stage failed.  ``command_line`` identifies the stage."""

    def __init__(self, command_line: str, message: str) -> None:
        self.command_line = command_line
        super().__init__(f"{command_line}, {message}")


class StageStartError(StageError):
    """The stage's process could not be created (OS refusal or invalid argv)."""

    def __init__(self, command_line: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(command_line, str(cause))


class StageExecutionError(StageError):
    """The stage exited with a failure status and no success pattern matched.

    ``returncode`` is ``None`` when waiting on the process itself failed.
    """

    def __init__(
        self,
        command_line: str,
        returncode: int | None,
        message: str | None = None,
    ) -> None:
        self.returncode = returncode
        if message is None:
            message = f"exit status {returncode}"
        super().__init__(command_line, message)


class PatternCompilationError(ProcPipeError, ValueError):
    """A conditional success pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"invalid success pattern {pattern!r}: {reason}")


class CommandSyntaxError(ProcPipeError, ValueError):
    """A ``|`` segment of a command line contains no executable."""

    def __init__(self, command_line: str, segment_index: int) -> None:
        self.command_line = command_line
        self.segment_index = segment_index
        super().__init__(
            f"segment {segment_index} of {command_line!r} is empty; "
            "every '|' must separate two commands"
        )


def report_error(
    error: BaseException | None,
    prefix: str = "",
    level: str = "error",
    sink: logging.Logger | None = None,
) -> None:
    """Log *error* at *level* (``warn``, ``error`` or ``fatal``).

    Does nothing when *error* is None.  The traceback is attached when the
    error was raised.  ``fatal`` exits the interpreter with status 1 after
    logging.
    """
    if error is None:
        return
    if level not in _LEVELS:
        raise ValueError(
            f"unknown report level {level!r}; expected one of {sorted(_LEVELS)}"
        )

    sink = sink or logger
    exc_info = error if error.__traceback__ is not None else None
    message = f"{prefix}: {error}" if prefix else str(error)
    sink.log(_LEVELS[level], "%s", message, exc_info=exc_info)

    if level == "fatal":
        sys.exit(1)
