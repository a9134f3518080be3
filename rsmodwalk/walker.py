"""Walk a tree of Rust modules, starting from source files or directories."""

from __future__ import annotations

import logging
import sys
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from .modules import ModuleResolutionError, extract_modules_from_file

log = logging.getLogger(__name__)

UNLIMITED = sys.maxsize


@dataclass(frozen=True)
class SourceFile:
    """A source file found during traversal, together with its text."""

    path: Path
    content: str


class TraverseModulesIter:
    """Iterator over source files, following ``mod x;`` declarations.

    A depth limit of zero yields only the starting files; when a starting path
    is a directory, all ``.rs`` files directly inside it are starting files.
    """

    def __init__(self, max_depth: int = UNLIMITED) -> None:
        self.max_depth = max_depth
        self._queue: deque[tuple[Path, int]] = deque()

    @classmethod
    def with_multi(
        cls, paths: Iterable[str | PathLike[str]]
    ) -> "TraverseModulesIter":
        """Start from several paths without a depth limit."""
        walker = cls()
        for path in paths:
            walker.add_initial_path(path, 0)
        return walker

    @classmethod
    def with_depth_limit(
        cls, path: str | PathLike[str], max_depth: int
    ) -> "TraverseModulesIter":
        """Start from one path, following declarations at most ``max_depth`` deep."""
        walker = cls(max_depth)
        walker.add_initial_path(path, 0)
        return walker

    @classmethod
    def new(cls, path: str | PathLike[str]) -> "TraverseModulesIter":
        """Start from one path without a depth limit."""
        return cls.with_depth_limit(path, UNLIMITED)

    def add_initial_path(self, path: str | PathLike[str], level: int) -> None:
        """Queue a file, or the ``.rs`` files directly inside a directory.

        Raises ``OSError`` if the path does not exist.
        """
        resolved = Path(path).resolve(strict=True)
        if resolved.is_file():
            self._queue.appendleft((resolved, level))
        elif resolved.is_dir():
            for child in sorted(resolved.iterdir()):
                if child.name.startswith("."):
                    continue
                if child.is_symlink() or not child.is_file():
                    continue
                if child.name.endswith(".rs"):
                    log.debug("using path %s as seed recursion dir", child)
                    self._queue.appendleft((child, level))

    def collect_modules(self, path: str | PathLike[str], level: int) -> None:
        """Queue the module files declared in ``path`` at the given depth."""
        path = Path(path)
        if not path.is_file():
            log.warning("Only dealing with files, dropping %s", path)
            return
        log.debug("collecting mods declared in file %s", path)
        self._queue.extend(
            (module, level) for module in sorted(extract_modules_from_file(path))
        )

    def __iter__(self) -> "TraverseModulesIter":
        return self

    def __next__(self) -> Path:
        if not self._queue:
            raise StopIteration
        path, level = self._queue.popleft()
        if level < self.max_depth:
            try:
                self.collect_modules(path, level + 1)
            except (ModuleResolutionError, OSError) as err:
                log.debug("could not collect modules from %s: %s", path, err)
        return path


def _read_sources(paths: Iterable[Path]) -> Iterator[SourceFile]:
    for path in paths:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        if content.strip():
            yield SourceFile(path, content)


def traverse(path: str | PathLike[str]) -> Iterator[SourceFile]:
    """Yield every non-empty source file reachable from ``path``."""
    return traverse_with_depth_limit(path, UNLIMITED)


def traverse_with_depth_limit(
    path: str | PathLike[str], max_depth: int
) -> Iterator[SourceFile]:
    """Yield non-empty source files reachable from ``path`` within ``max_depth``.

    Raises ``OSError`` immediately if ``path`` does not exist.
    """
    walker = TraverseModulesIter.with_depth_limit(path, max_depth)
    return _read_sources(walker)