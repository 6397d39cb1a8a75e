"""Run chains of OS processes like a shell pipe, watching every stream.

Public surface::

    from procpipe import (
        run,
        run_in_directory,
        run_with_arguments,
        build_stages,
        build_pipeline,
        execute,
        tokenize,
        PipelineRunner,
        RunnerConfig,
        Stage,
        ProcessPipeline,
        PipelineResult,
        StageOutcome,
        SuccessPatterns,
        EmptyPipelineError,
        StageStartError,
        StageExecutionError,
        PatternCompilationError,
    )
"""

from .conditions import ConditionalCheck, SuccessPatterns
from .config import RunnerConfig
from .errors import (
    CommandSyntaxError,
    EmptyPipelineError,
    PatternCompilationError,
    PipelineStateError,
    ProcPipeError,
    StageError,
    StageExecutionError,
    StageStartError,
    report_error,
)
from .monitor import MonitorResult, watch_stream
from .process import ProcessHandle, ProcessPipeline, build_pipeline, build_stages
from .result import PipelineResult, StageOutcome
from .runner import (
    PipelineRunner,
    execute,
    run,
    run_in_directory,
    run_with_arguments,
)
from .stage import Stage, parse_stage, tokenize

__all__ = [
    "run",
    "run_in_directory",
    "run_with_arguments",
    "build_stages",
    "build_pipeline",
    "execute",
    "tokenize",
    "parse_stage",
    "watch_stream",
    "report_error",
    "PipelineRunner",
    "RunnerConfig",
    "Stage",
    "ProcessHandle",
    "ProcessPipeline",
    "PipelineResult",
    "StageOutcome",
    "MonitorResult",
    "SuccessPatterns",
    "ConditionalCheck",
    "ProcPipeError",
    "EmptyPipelineError",
    "PipelineStateError",
    "StageError",
    "StageStartError",
    "StageExecutionError",
    "PatternCompilationError",
    "CommandSyntaxError",
]
