"""Discover the files named by ``mod x;`` declarations in Rust sources."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Set
from enum import Enum, auto
from os import PathLike
from pathlib import Path

from .tokens import Group, Ident, Punct, Spacing, Token, TokenizeError, tokenize

log = logging.getLogger(__name__)


class ModuleResolutionError(Exception):
    """Raised when module files cannot be determined unambiguously."""


class _Seeking(Enum):
    KEYWORD = auto()
    NAME = auto()
    FIN = auto()


def resolve_module_file(
    path: str | PathLike[str], mod_name: str, found: Set[Path]
) -> Path | None:
    """Return the file implementing module ``mod_name`` declared in ``path``.

    Returns ``None`` if a candidate is already in ``found`` or if no candidate
    file exists. Raises ``ModuleResolutionError`` if more than one exists.
    """
    path = Path(path)
    base = path.parent
    if base == path:
        raise ModuleResolutionError(f"Must have a valid parent directory: {path}")
    name = mod_name.removeprefix("r#")
    candidates = (
        base / name / "mod.rs",
        base / f"{name}.rs",
        base / path.stem / f"{name}.rs",
    )
    if any(candidate in found for candidate in candidates):
        return None
    existing = [candidate for candidate in candidates if candidate.is_file()]
    if len(existing) > 1:
        raise ModuleResolutionError(
            "Detected both module entry files: "
            + " and ".join(str(candidate) for candidate in candidates)
        )
    if not existing:
        log.debug(
            "Neither file nor dir with mod.rs %s",
            " / ".join(str(candidate) for candidate in candidates),
        )
        return None
    return existing[0]


def find_module_declarations(tokens: Iterable[Token]) -> Iterator[str]:
    """Yield the names of all ``mod name;`` declarations, including nested ones."""
    state = _Seeking.KEYWORD
    name = ""
    for token in tokens:
        match token:
            case Ident(name=ident):
                if state is _Seeking.KEYWORD:
                    if ident == "mod":
                        state = _Seeking.NAME
                elif state is _Seeking.NAME:
                    name = ident
                    state = _Seeking.FIN
                else:
                    state = _Seeking.KEYWORD
            case Punct(char=char, spacing=spacing):
                if state is _Seeking.FIN:
                    if char == ";" and spacing is Spacing.ALONE:
                        yield name
                    else:
                        log.debug("incomplete mod declaration %s", name)
                state = _Seeking.KEYWORD
            case Group(tokens=inner):
                state = _Seeking.KEYWORD
                yield from find_module_declarations(inner)
            case _:
                state = _Seeking.KEYWORD


def extract_modules(path: str | PathLike[str], tokens: Iterable[Token]) -> set[Path]:
    """Resolve every module declared in ``tokens`` relative to source ``path``."""
    path = Path(path)
    found: set[Path] = set()
    for name in find_module_declarations(tokens):
        resolved = resolve_module_file(path, name, found)
        if resolved is not None:
            found.add(resolved)
    return found


def extract_modules_from_file(path: str | PathLike[str]) -> set[Path]:
    """Read all ``mod x;`` declarations of a source file and resolve their files."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as err:
        raise ModuleResolutionError(f"File {path} is not valid UTF-8") from err
    try:
        tokens = tokenize(text)
    except TokenizeError as err:
        raise ModuleResolutionError(f"File {path} has syntax errors") from err
    modules = extract_modules(path, tokens)
    log.debug("Recursed into %d modules from %s", len(modules), path)
    return modules