"""Immutable stage description and the whitespace command tokenizer."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from .errors import CommandSyntaxError


@dataclass(frozen=True)
class Stage:
    """One executable step of a pipeline.

    Stages never change once built.  Use ``.with_directory()`` to produce
    a copy bound to another working directory.
    """

    executable: str
    args: tuple[str, ...] = field(default_factory=tuple)
    directory: str = "."

    def __post_init__(self) -> None:
        # Coerce list/other iterables → tuple for immutability
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))
        if not self.executable:
            raise ValueError("Stage requires an executable name.")

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    @property
    def command_line(self) -> str:
        """Human-readable form used in logs and error messages."""
        return " ".join(self.argv)

    def with_directory(self, directory: str) -> "Stage":
        return dataclasses.replace(self, directory=directory)


def parse_stage(command: str, directory: str = ".") -> Stage:
    """Turn one whitespace-separated command into a ``Stage``.

    Raises ``CommandSyntaxError`` when *command* holds no token.
    """
    tokens = command.split()
    if not tokens:
        raise CommandSyntaxError(command, 0)
    return Stage(tokens[0], tuple(tokens[1:]), directory)


def tokenize(command_line: str, directory: str = ".") -> list[Stage]:
    """Split *command_line* on ``|`` into an ordered list of stages.

    Each segment is split on runs of whitespace; the first token is the
    executable, the rest are its arguments.  There is no quoting or
    escaping, so an argument can never contain whitespace.  Build
    ``Stage`` objects directly when that is needed.

    A blank command line yields no stages.  A blank segment next to a
    ``|`` raises ``CommandSyntaxError``.
    """
    if not command_line.strip():
        return []

    stages: list[Stage] = []
    for index, segment in enumerate(command_line.split("|")):
        if not segment.strip():
            raise CommandSyntaxError(command_line, index)
        stages.append(parse_stage(segment, directory))
    return stages
