"""Runner configuration."""

from __future__ import annotations

import codecs
import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "PROCPIPE_"


class RunnerConfig(BaseModel):
    """Settings shared by every pipeline a ``PipelineRunner`` executes.

    Load from the environment with ``RunnerConfig.from_env()``; the CLI
    reads a ``.env`` file into the environment first.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    line_prefix: str = "\t| "
    line_log_level: str = "DEBUG"
    encoding: str = "utf-8"
    default_directory: str = "."

    @field_validator("line_log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding {value!r}") from exc
        return value

    @property
    def line_level(self) -> int:
        return logging.getLevelName(self.line_log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RunnerConfig":
        """Build a config from ``PROCPIPE_*`` variables; unset ones keep defaults."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
