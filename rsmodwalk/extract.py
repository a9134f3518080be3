"""Collect the files to check from command-line paths, manifests and module trees."""

from __future__ import annotations

import argparse
import logging
import sys
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from os import PathLike
from pathlib import Path

from .manifest import (
    MANIFEST_NAME,
    CheckEntity,
    EntityKind,
    ManifestError,
    handle_manifest,
    to_manifest_dir,
)
from .modules import ModuleResolutionError
from .walker import traverse

log = logging.getLogger(__name__)

MANIFEST = "manifest"
MISSING = "missing"
SOURCE = "source"
MARKDOWN = "markdown"


class ExtractError(Exception):
    """Raised when the inputs cannot be turned into a set of checkable files."""


class OriginKind(Enum):
    """Where a piece of checked content comes from."""

    RUST_SOURCE = "rust_source"
    COMMONMARK = "commonmark"
    MANIFEST_DESCRIPTION = "manifest_description"


@dataclass(frozen=True)
class Origin:
    """The origin of checked content: its kind and the file it lives in."""

    kind: OriginKind
    path: Path

    def as_path(self) -> Path:
        return self.path


def _canonical_inputs(paths: Iterable[str | PathLike[str]], cwd: Path) -> deque[Path]:
    flow: deque[Path] = deque()
    for path_in in paths:
        path = Path(path_in)
        absolute = path if path.is_absolute() else cwd / path
        try:
            resolved = absolute.resolve(strict=True)
        except OSError:
            log.debug("Dropping input that cannot be canonicalized: %s", absolute)
            continue
        log.debug("Processing %s -> %s", path_in, resolved)
        flow.append(resolved)
    return flow


def _children(directory: Path, files_only: bool) -> list[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError as err:
        log.warning("Listing directory contents %s failed: %s", directory, err)
        return []
    if files_only:
        return [entry for entry in entries if entry.is_file()]
    return entries


def classify_paths(
    paths: Iterable[str | PathLike[str]], recurse: bool
) -> list[tuple[str, Path]]:
    """Classify input paths as manifest, source, markdown or missing.

    Directories holding a manifest count as that manifest; other directories
    are expanded into their entries (only their files unless ``recurse``).
    Files of unknown type are skipped.
    """
    flow = _canonical_inputs(paths, Path.cwd())
    log.debug("Running on absolute dirs %s", list(flow))

    classified: list[tuple[str, Path]] = []
    while flow:
        path = flow.popleft()
        try:
            meta = path.stat()
        except OSError:
            classified.append((MISSING, path))
            continue
        if path.is_file():
            name = path.name
            if name == MANIFEST_NAME:
                classified.append((MANIFEST, path))
            elif name.endswith(".md"):
                classified.append((MARKDOWN, path))
            elif name.endswith(".rs"):
                classified.append((SOURCE, path))
            else:
                log.debug("Unknown file type encountered, skipping path: %s", path)
        elif path.is_dir():
            try:
                cargo_toml = to_manifest_dir(path) / MANIFEST_NAME
            except ManifestError:
                cargo_toml = path / MANIFEST_NAME
            if cargo_toml.is_file():
                classified.append((MANIFEST, cargo_toml))
            else:
                flow.extend(_children(path, files_only=not recurse))
        else:
            log.debug("Neither file nor directory (mode %o): %s", meta.st_mode, path)
            classified.append((MISSING, path))
    log.debug("Found a total of %d files to check", len(classified))
    return classified


def _entities(
    classified: Iterable[tuple[str, Path]], recurse: bool, skip_readme: bool
) -> list[CheckEntity]:
    entities: list[CheckEntity] = []
    for kind, path in classified:
        if kind == MANIFEST:
            try:
                found = handle_manifest(path, skip_readme)
            except ManifestError as err:
                raise ExtractError(str(err)) from err
            entities.extend(sorted(found, key=lambda e: (e.kind.value, str(e.path))))
        elif kind == MISSING:
            log.warning(
                "File passed as argument or listed in manifest does not exist: %s", path
            )
        elif kind == SOURCE:
            entities.append(CheckEntity(EntityKind.SOURCE, path, recurse=recurse))
        elif kind == MARKDOWN:
            entities.append(CheckEntity(EntityKind.MARKDOWN, path))
    return entities


def _add_source(docs: dict[Origin, str], entity: CheckEntity) -> None:
    try:
        content = entity.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ExtractError(f"Failed to read source file {entity.path}") from err
    docs[Origin(OriginKind.RUST_SOURCE, entity.path)] = content
    if not entity.recurse:
        return
    try:
        found = [
            source
            for source in traverse(entity.path)
            if Origin(OriginKind.RUST_SOURCE, source.path) not in docs
        ]
    except (OSError, ModuleResolutionError) as err:
        raise ExtractError(f"Failed to traverse modules of {entity.path}") from err
    for source in found:
        docs.setdefault(Origin(OriginKind.RUST_SOURCE, source.path), source.content)


def _add_markdown(docs: dict[Origin, str], entity: CheckEntity) -> None:
    try:
        content = entity.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ExtractError("Common mark / markdown file does not exist") from err
    if not content:
        raise ExtractError("Common mark / markdown file is empty")
    docs[Origin(OriginKind.COMMONMARK, entity.path)] = content


def extract(
    paths: Sequence[str | PathLike[str]], recurse: bool, skip_readme: bool
) -> dict[Origin, str]:
    """Collect all content to check, keyed by origin, in discovery order.

    Without any paths the current directory is checked recursively.
    """
    if not paths:
        paths = [Path.cwd()]
        recurse = True
    log.debug("Running on inputs %s / recursive=%s", list(paths), recurse)

    classified = classify_paths(paths, recurse)
    docs: dict[Origin, str] = {}
    for entity in _entities(classified, recurse, skip_readme):
        if entity.kind is EntityKind.SOURCE:
            _add_source(docs, entity)
        elif entity.kind is EntityKind.MARKDOWN:
            _add_markdown(docs, entity)
        else:
            if not entity.content:
                raise ExtractError("Manifest description field is empty")
            docs[Origin(OriginKind.MANIFEST_DESCRIPTION, entity.path)] = entity.content
    return docs


def main(argv: Sequence[str] | None = None) -> int:
    """List every file that would be checked for the given paths."""
    parser = argparse.ArgumentParser(
        description="List the documentation sources reachable from the given paths."
    )
    parser.add_argument("paths", nargs="*", help="files, directories or manifests")
    parser.add_argument(
        "-r", "--recursive", action="store_true", help="follow module declarations"
    )
    parser.add_argument(
        "--skip-readme", action="store_true", help="ignore read-me files of manifests"
    )
    args = parser.parse_args(argv)
    try:
        docs = extract(args.paths, args.recursive, args.skip_readme)
    except ExtractError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1
    for origin in docs:
        print(f"{origin.kind.value}\t{origin.path}")
    return 0