"""Process handles and the stage graph builder.

Building a pipeline creates no process: each ``ProcessHandle`` only
remembers its stage and which handle feeds its standard input.  The
orchestrator starts handles left to right, so a stage's input pipe
always exists before the stage is started.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Iterator, Sequence
from typing import IO

from .errors import PipelineStateError, StageStartError
from .stage import Stage, parse_stage

logger = logging.getLogger(__name__)


class ProcessHandle:
    """Runtime resource bound to one stage.

    Streams once started:

    - ``stdin``: the upstream handle's stdout, or ``/dev/null`` for the head.
    - ``stderr``: always captured.
    - ``stdout``: captured for the final stage only; for other stages it is
      the pipe handed to the next stage.
    """

    def __init__(
        self,
        stage: Stage,
        *,
        upstream: "ProcessHandle | None" = None,
        is_last: bool = False,
    ) -> None:
        self.stage = stage
        self.upstream = upstream
        self.is_last = is_last
        self.process: subprocess.Popen[bytes] | None = None

    def __repr__(self) -> str:
        state = "unstarted" if self.process is None else f"pid={self.process.pid}"
        return f"ProcessHandle({self.command_line!r}, {state})"

    @property
    def command_line(self) -> str:
        return self.stage.command_line

    @property
    def started(self) -> bool:
        return self.process is not None

    @property
    def stdout(self) -> IO[bytes] | None:
        """Captured standard output (final stage only)."""
        if self.process is None or not self.is_last:
            return None
        return self.process.stdout

    @property
    def stderr(self) -> IO[bytes] | None:
        return None if self.process is None else self.process.stderr

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Create the OS process.

        Raises ``StageStartError`` if the OS refuses (missing executable,
        permissions, bad directory) or rejects the argv (embedded null
        byte), and ``PipelineStateError`` if the handle was already started
        or its upstream was not.
        """
        if self.process is not None:
            raise PipelineStateError(f"{self.command_line} has already been started")

        if self.upstream is None:
            stdin: IO[bytes] | int = subprocess.DEVNULL
        else:
            if self.upstream.process is None or self.upstream.process.stdout is None:
                raise PipelineStateError(
                    f"{self.command_line} started before its upstream stage "
                    f"{self.upstream.command_line}"
                )
            stdin = self.upstream.process.stdout

        try:
            self.process = subprocess.Popen(
                self.stage.argv,
                cwd=self.stage.directory,
                stdin=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            raise StageStartError(self.command_line, exc) from exc

    def release_output(self) -> None:
        """Close this process's copy of the pipe now owned by the next stage.

        Lets this stage see a broken pipe if the next one exits early.
        """
        if self.process is not None and not self.is_last and self.process.stdout:
            self.process.stdout.close()

    def wait(self) -> int:
        if self.process is None:
            raise PipelineStateError(f"{self.command_line} was never started")
        return self.process.wait()

    def abort(self) -> None:
        """Terminate and reap a stage whose pipeline can no longer complete."""
        if self.process is None:
            return
        self.release_output()
        if self.process.poll() is None:
            logger.debug("Terminating: %s", self.command_line)
            self.process.terminate()
        self.process.wait()

    def close(self) -> None:
        """Close every stream still held on this process."""
        if self.process is None:
            return
        for stream in (self.process.stdout, self.process.stderr):
            if stream is not None and not stream.closed:
                stream.close()


class ProcessPipeline:
    """Ordered, single-use sequence of process handles; index 0 is the head."""

    def __init__(self, handles: Sequence[ProcessHandle]) -> None:
        self._handles = list(handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[ProcessHandle]:
        return iter(self._handles)

    def __getitem__(self, index: int) -> ProcessHandle:
        return self._handles[index]

    def __repr__(self) -> str:
        return f"ProcessPipeline({' | '.join(h.command_line for h in self._handles)!r})"

    @property
    def started(self) -> bool:
        return any(h.started for h in self._handles)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_pipeline(
    stages: Iterable[Stage], directory: str | None = None
) -> ProcessPipeline:
    """Wire *stages* into unstarted handles.

    Stage *i*'s stdout is connected to stage *i+1*'s stdin; the last
    stage's stdout and every stage's stderr are captured.  When
    *directory* is given it replaces every stage's working directory.
    Never fails: OS errors are deferred to start time.
    """
    stages = list(stages)
    if directory is not None:
        stages = [s.with_directory(directory) for s in stages]

    handles: list[ProcessHandle] = []
    last = len(stages) - 1
    for i, stage in enumerate(stages):
        upstream = handles[-1] if handles else None
        handles.append(ProcessHandle(stage, upstream=upstream, is_last=i == last))
    return ProcessPipeline(handles)


def build_stages(command_lines: Iterable[str], directory: str = ".") -> ProcessPipeline:
    """Build a pipeline with one stage per command string.

    Each string is split on whitespace only; a ``|`` inside it is passed
    to the executable as an ordinary argument.
    """
    return build_pipeline(parse_stage(c, directory) for c in command_lines)
