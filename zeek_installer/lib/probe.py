"""Ordered, first-match-wins filesystem probing.

A strategy is a zero-argument callable returning a path (or None). Strategies
are evaluated strictly in order; evaluation stops at the first hit.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

Strategy = Callable[[], Optional[T]]


def first_match(strategies: Iterable[Strategy]) -> Optional[T]:
    for strategy in strategies:
        found = strategy()
        if found:
            return found
    return None


def executable_at(path: str | Path) -> Strategy:
    def _probe() -> Optional[Path]:
        p = Path(path)
        if p.is_file() and os.access(p, os.X_OK):
            return p
        return None

    return _probe


def directory_at(path: str | Path) -> Strategy:
    def _probe() -> Optional[Path]:
        p = Path(path)
        return p if p.is_dir() else None

    return _probe


def command_on_path(name: str, search_path: str) -> Strategy:
    def _probe() -> Optional[Path]:
        found = shutil.which(name, path=search_path)
        return Path(found) if found else None

    return _probe


def install_prefix(binary: Path) -> Path:
    """<prefix>/bin/tool -> <prefix>, resolving symlinks like realpath(1)."""
    return (binary.parent / "..").resolve()


def sibling_of(binary: Optional[Path], rel: str) -> Strategy:
    def _probe() -> Optional[Path]:
        if binary is None:
            return None
        p = install_prefix(binary) / rel
        return p if p.is_dir() else None

    return _probe
