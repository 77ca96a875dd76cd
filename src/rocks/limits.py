"""Rocks host stack limits — temporary recursion-limit raises for the AST walkers."""

from __future__ import annotations

from contextlib import contextmanager
import sys
from typing import Iterator

# Extra host frames granted to the parser, resolver, and printer
STATIC_EXTRA_FRAMES = 10000

NESTING_TOO_DEEP = "Expression nesting too deep"


@contextmanager
def recursion_limit(extra: int) -> Iterator[None]:
    """Raise the host recursion limit by extra frames, restoring it on exit."""
    old_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(old_limit + extra)
    try:
        yield
    finally:
        sys.setrecursionlimit(old_limit)
