"""A small lexer that turns Rust source text into token trees."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Union

_PUNCT_CHARS = frozenset("~!@#$%^&*-=+|;:,<.>/?'")
_OPEN = {"(": ")", "[": "]", "{": "}"}
_CLOSE = frozenset(_OPEN.values())
_DIGITS = frozenset("0123456789")

_RAW_STRING_START = re.compile(r'(?:b|c)?r(#*)"')
_STRING_START = re.compile(r'(?:b|c)?"')


class Spacing(Enum):
    """Whether a punctuation character is directly followed by another one."""

    ALONE = "alone"
    JOINT = "joint"


@dataclass(frozen=True)
class Ident:
    """An identifier or keyword."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Punct:
    """A single punctuation character."""

    char: str
    spacing: Spacing = Spacing.ALONE

    def __str__(self) -> str:
        return self.char


@dataclass(frozen=True)
class Literal:
    """A string, character, byte or numeric literal, kept as written."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Group:
    """Tokens enclosed by a pair of delimiters: (), [] or {}."""

    delimiter: str
    tokens: tuple["Token", ...]

    @property
    def closing(self) -> str:
        return _OPEN[self.delimiter]


Token = Union[Ident, Punct, Literal, Group]


class TokenizeError(ValueError):
    """Raised when the text is not a valid token stream."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _skip_ident(text: str, pos: int) -> int:
    while pos < len(text) and _is_ident_continue(text[pos]):
        pos += 1
    return pos


def _skip_block_comment(text: str, start: int) -> int:
    depth = 0
    pos = start
    while pos < len(text):
        if text.startswith("/*", pos):
            depth += 1
            pos += 2
        elif text.startswith("*/", pos):
            depth -= 1
            pos += 2
            if depth == 0:
                return pos
        else:
            pos += 1
    raise TokenizeError("unterminated block comment", start)


def _skip_quoted(text: str, pos: int, start: int) -> int:
    """Skip a double-quoted body beginning after the opening quote."""
    while pos < len(text):
        ch = text[pos]
        if ch == "\\":
            pos += 2
        elif ch == '"':
            return pos + 1
        else:
            pos += 1
    raise TokenizeError("unterminated string literal", start)


def _char_literal_end(text: str, pos: int, start: int) -> int | None:
    """Return the end of a character literal whose body starts at pos."""
    if pos < len(text) and text[pos] == "\\":
        end = text.find("'", pos + 2)
        if end < 0:
            raise TokenizeError("unterminated character literal", start)
        return end + 1
    if pos + 1 < len(text) and text[pos + 1] == "'":
        return pos + 2
    return None


def _skip_number(text: str, start: int) -> int:
    radix_prefixed = text[start : start + 2].lower() in ("0x", "0b", "0o")
    seen_dot = False
    pos = start
    while pos < len(text):
        ch = text[pos]
        nxt = text[pos + 1] if pos + 1 < len(text) else ""
        if _is_ident_continue(ch):
            pos += 1
        elif (
            ch == "."
            and not seen_dot
            and not radix_prefixed
            and nxt != "."
            and not (nxt and _is_ident_start(nxt))
        ):
            seen_dot = True
            pos += 1
        elif (
            ch in "+-"
            and not radix_prefixed
            and text[pos - 1] in "eE"
            and nxt in _DIGITS
        ):
            pos += 1
        else:
            break
    return pos


def _scan(text: str) -> Iterator[tuple[int, Token | str]]:
    """Yield leaf tokens and delimiter characters with their offsets."""
    pos = 0
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch.isspace():
            pos += 1
            continue
        if text.startswith("//", pos):
            end = text.find("\n", pos)
            pos = n if end < 0 else end + 1
            continue
        if text.startswith("/*", pos):
            pos = _skip_block_comment(text, pos)
            continue
        if ch in _OPEN or ch in _CLOSE:
            yield pos, ch
            pos += 1
            continue

        start = pos
        if raw := _RAW_STRING_START.match(text, pos):
            terminator = '"' + raw.group(1)
            end = text.find(terminator, raw.end())
            if end < 0:
                raise TokenizeError("unterminated raw string literal", start)
            pos = _skip_ident(text, end + len(terminator))
            yield start, Literal(text[start:pos])
            continue
        if plain := _STRING_START.match(text, pos):
            pos = _skip_ident(text, _skip_quoted(text, plain.end(), start))
            yield start, Literal(text[start:pos])
            continue
        if text.startswith("b'", pos):
            end = _char_literal_end(text, pos + 2, start)
            if end is None:
                raise TokenizeError("invalid byte literal", start)
            pos = _skip_ident(text, end)
            yield start, Literal(text[start:pos])
            continue
        if ch in _DIGITS:
            pos = _skip_number(text, pos)
            yield start, Literal(text[start:pos])
            continue
        if text.startswith("r#", pos) and pos + 2 < n and _is_ident_start(text[pos + 2]):
            pos = _skip_ident(text, pos + 2)
            yield start, Ident(text[start:pos])
            continue
        if _is_ident_start(ch):
            pos = _skip_ident(text, pos)
            yield start, Ident(text[start:pos])
            continue
        if ch == "'":
            end = _char_literal_end(text, pos + 1, start)
            if end is not None:
                pos = _skip_ident(text, end)
                yield start, Literal(text[start:pos])
                continue
            if pos + 1 < n and _is_ident_start(text[pos + 1]):
                yield start, Punct("'", Spacing.JOINT)
                pos += 1
                continue
            raise TokenizeError("invalid character literal or lifetime", start)
        if ch in _PUNCT_CHARS:
            nxt = pos + 1
            joint = (
                nxt < n
                and text[nxt] in _PUNCT_CHARS
                and not text.startswith("//", nxt)
                and not text.startswith("/*", nxt)
            )
            yield start, Punct(ch, Spacing.JOINT if joint else Spacing.ALONE)
            pos += 1
            continue
        raise TokenizeError(f"unexpected character {ch!r}", start)


def tokenize(text: str) -> list[Token]:
    """Split Rust source text into a list of token trees.

    Comments are dropped; delimited regions become nested ``Group`` tokens.
    """
    root: list[Token] = []
    current = root
    stack: list[tuple[str, int, list[Token]]] = []
    for offset, item in _scan(text):
        if isinstance(item, str):
            if item in _OPEN:
                stack.append((item, offset, current))
                current = []
                continue
            if not stack:
                raise TokenizeError(f"unexpected closing delimiter {item!r}", offset)
            opener, _start, parent = stack.pop()
            if _OPEN[opener] != item:
                raise TokenizeError(
                    f"mismatched closing delimiter {item!r} for {opener!r}", offset
                )
            parent.append(Group(opener, tuple(current)))
            current = parent
        else:
            current.append(item)
    if stack:
        opener, start, _parent = stack[-1]
        raise TokenizeError(f"unclosed delimiter {opener!r}", start)
    return root