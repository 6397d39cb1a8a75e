"""Pipeline orchestrator: starts, watches and reconciles every stage."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from .conditions import SuccessPatterns, compile_patterns
from .config import RunnerConfig
from .errors import (
    EmptyPipelineError,
    PipelineStateError,
    ProcPipeError,
    StageExecutionError,
    StageStartError,
)
from .monitor import MonitorResult, watch_stream
from .process import ProcessHandle, ProcessPipeline, build_pipeline, build_stages
from .result import PipelineResult, StageOutcome
from .stage import Stage, tokenize

logger = logging.getLogger(__name__)

Patterns = Iterable[str] | SuccessPatterns


class PipelineRunner:
    """Executes process pipelines the way a shell pipe would.

    Build once and reuse::

        runner = PipelineRunner(RunnerConfig.from_env())
        result = runner.run("cat notes.txt | sort | uniq -c", ["^warning"])
        result.raise_for_error()

    *sink* receives every captured line and the final error; it defaults
    to this module's logger.
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        sink: logging.Logger | None = None,
    ) -> None:
        self.config = config or RunnerConfig()
        self.sink = sink or logger

    # ------------------------------------------------------------------
    # String entry points
    # ------------------------------------------------------------------

    def run(self, command_line: str, success_patterns: Patterns = ()) -> PipelineResult:
        """Run a ``|``-delimited command line from the default directory."""
        return self.run_in_directory(
            command_line, self.config.default_directory, success_patterns
        )

    def run_in_directory(
        self,
        command_line: str,
        directory: str,
        success_patterns: Patterns = (),
    ) -> PipelineResult:
        """Run a ``|``-delimited command line with every stage in *directory*."""
        patterns = compile_patterns(success_patterns)
        return self.execute(build_pipeline(tokenize(command_line, directory)), patterns)

    def run_with_arguments(
        self,
        executable: str,
        arguments: Sequence[str],
        directory: str = ".",
        success_patterns: Patterns = (),
    ) -> PipelineResult:
        """Run *executable* with *arguments*.

        The arguments are joined with spaces and re-tokenized, so arguments
        containing whitespace are split.  Use ``execute(build_pipeline(...))``
        with a ``Stage`` to pass them intact.
        """
        command_line = " ".join([executable, *arguments])
        return self.run_in_directory(command_line, directory, success_patterns)

    # ------------------------------------------------------------------
    # Structured entry points
    # ------------------------------------------------------------------

    @staticmethod
    def build_stages(command_lines: Iterable[str], directory: str = ".") -> ProcessPipeline:
        return build_stages(command_lines, directory)

    @staticmethod
    def build_pipeline(
        stages: Iterable[Stage], directory: str | None = None
    ) -> ProcessPipeline:
        return build_pipeline(stages, directory)

    def execute(
        self, pipeline: ProcessPipeline, success_patterns: Patterns = ()
    ) -> PipelineResult:
        """Run an already built pipeline and return its outcome.

        Every stage is started left to right, each right after its
        upstream, so every pipe has a reader before data flows.  The
        stages are then waited on in order, each together with every
        monitor of its streams.  A failing stage does not stop the walk:
        later stages are still waited on, but only the first failure is
        reported.  If a stage cannot start, the stages already running
        are terminated and reaped.

        Raises ``PatternCompilationError`` for invalid patterns and
        ``PipelineStateError`` for a pipeline that already ran.  Every
        other failure is reported through ``PipelineResult.error``.
        """
        patterns = compile_patterns(success_patterns)
        result = PipelineResult()

        if len(pipeline) == 0:
            self._record(result, EmptyPipelineError(), None)
            return self._finish(result)
        if pipeline.started:
            raise PipelineStateError(f"{pipeline!r} has already been executed")

        handles = list(pipeline)
        with ThreadPoolExecutor(
            max_workers=len(handles) + 1, thread_name_prefix="procpipe-monitor"
        ) as pool:
            try:
                self._walk(pool, handles, patterns, result)
            finally:
                # Nothing started may outlive the invocation, or monitors never finish.
                for handle in handles:
                    if handle.started and handle.process.returncode is None:
                        handle.abort()
                    handle.close()

        return self._finish(result)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _walk(
        self,
        pool: ThreadPoolExecutor,
        handles: list[ProcessHandle],
        patterns: SuccessPatterns,
        result: PipelineResult,
    ) -> None:
        # Every stage runs before any is waited on, or a streaming middle
        # stage blocks on a full pipe that nobody reads yet.
        running: list[tuple[ProcessHandle, list[Future[MonitorResult]]]] = []
        for i, handle in enumerate(handles):
            try:
                watchers = self._launch(pool, handle, patterns)
            except StageStartError as exc:
                self._record(result, exc, handle.command_line)
                for started, started_watchers in running:
                    started.abort()
                    outcome, _ = self._settle(started, started_watchers)
                    result.outcomes.append(outcome)
                return
            if i > 0:
                self.sink.debug("%spiping output to next command", self.config.line_prefix)
                handles[i - 1].release_output()
            running.append((handle, watchers))

        for handle, watchers in running:
            outcome, error = self._settle(handle, watchers)
            result.outcomes.append(outcome)
            if error is not None:
                self._record(result, error, handle.command_line)

    def _launch(
        self,
        pool: ThreadPoolExecutor,
        handle: ProcessHandle,
        patterns: SuccessPatterns,
    ) -> list[Future[MonitorResult]]:
        """Start *handle* and submit one monitor per captured stream."""
        self.sink.debug("Running: %s from %s", handle.command_line, handle.stage.directory)
        handle.start()
        streams = [("stderr", handle.stderr)]
        if handle.is_last:
            streams.append(("stdout", handle.stdout))

        return [
            pool.submit(
                watch_stream,
                stream,
                patterns.checker(),
                name=f"{handle.command_line} [{label}]",
                sink=self.sink,
                prefix=self.config.line_prefix,
                level=self.config.line_level,
                encoding=self.config.encoding,
            )
            for label, stream in streams
            if stream is not None
        ]

    def _settle(
        self, handle: ProcessHandle, watchers: list[Future[MonitorResult]]
    ) -> tuple[StageOutcome, ProcPipeError | None]:
        """Wait for *handle* and all of its monitors, then reconcile."""
        error: ProcPipeError | None = None
        try:
            returncode: int | None = handle.wait()
        except OSError as exc:
            returncode = None
            error = StageExecutionError(
                handle.command_line, None, f"waiting for the stage failed: {exc}"
            )

        # Every verdict is consumed, even when the first one already rescues the stage.
        monitors = [w.result() for w in watchers]
        outcome = StageOutcome(handle.command_line, returncode, monitors)

        if error is None and not outcome.succeeded:
            error = StageExecutionError(handle.command_line, returncode)
        elif outcome.rescued:
            self.sink.debug(
                "%s exited with status %s but matched a success pattern",
                handle.command_line,
                returncode,
            )
        return outcome, error

    @staticmethod
    def _record(
        result: PipelineResult, error: ProcPipeError, command_line: str | None
    ) -> None:
        """Keep *error* only if no stage to its left already failed."""
        if result.error is None:
            result.error = error
            result.failed_at = command_line

    def _finish(self, result: PipelineResult) -> PipelineResult:
        if result.error is not None:
            self.sink.error("%s", result.error)
        return result


# ---------------------------------------------------------------------------
# Module-level convenience wrappers (a fresh default runner per call)
# ---------------------------------------------------------------------------


def run(command_line: str, success_patterns: Patterns = ()) -> PipelineResult:
    return PipelineRunner().run(command_line, success_patterns)


def run_in_directory(
    command_line: str, directory: str, success_patterns: Patterns = ()
) -> PipelineResult:
    return PipelineRunner().run_in_directory(command_line, directory, success_patterns)


def run_with_arguments(
    executable: str,
    arguments: Sequence[str],
    directory: str = ".",
    success_patterns: Patterns = (),
) -> PipelineResult:
    return PipelineRunner().run_with_arguments(
        executable, arguments, directory, success_patterns
    )


def execute(
    pipeline: ProcessPipeline, success_patterns: Patterns = ()
) -> PipelineResult:
    return PipelineRunner().execute(pipeline, success_patterns)
