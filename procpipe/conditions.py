"""Conditional success patterns.

A stage that exits with a failure status is still treated as successful
when any line it printed matches one of the caller's patterns.  Patterns
are compiled once per invocation into a read-only ``SuccessPatterns``;
every monitored stream gets its own ``ConditionalCheck`` whose verdict
is sticky.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .errors import PatternCompilationError


class SuccessPatterns:
    """Compiled, order-independent set of regular expressions.

    Matching is an unanchored ``re.search``: a pattern may match anywhere
    in the line.  Invalid syntax raises ``PatternCompilationError`` here,
    never while lines are being matched.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        compiled: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                raise PatternCompilationError(pattern, str(exc)) from exc
        self._compiled = tuple(compiled)

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(p.pattern for p in self._compiled)

    def __len__(self) -> int:
        return len(self._compiled)

    def matches(self, line: str) -> bool:
        """Return True if any pattern matches *line*."""
        return any(p.search(line) for p in self._compiled)

    def checker(self) -> "ConditionalCheck":
        """Return a fresh sticky predicate for one monitored stream."""
        return ConditionalCheck(self)


class ConditionalCheck:
    """Stateful predicate over lines.

    Calling the check returns whether *that* line matched.  ``matched``
    is the aggregate: once any line has matched it stays True for the
    rest of the session.  With no patterns it is always False.
    """

    def __init__(self, patterns: SuccessPatterns) -> None:
        self._patterns = patterns
        self.matched = False

    def __call__(self, line: str) -> bool:
        hit = self._patterns.matches(line)
        if hit:
            self.matched = True
        return hit


def compile_patterns(patterns: Iterable[str] | SuccessPatterns = ()) -> SuccessPatterns:
    """Normalise caller input into a ``SuccessPatterns`` instance."""
    if isinstance(patterns, SuccessPatterns):
        return patterns
    if isinstance(patterns, str):
        patterns = [patterns]
    return SuccessPatterns(patterns)
