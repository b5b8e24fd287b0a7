"""Naming helpers for C# identifiers."""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum

CSHARP_RESERVED_KEYWORDS: frozenset[str] = frozenset(
    {
        "abstract",
        "as",
        "base",
        "bool",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "checked",
        "class",
        "const",
        "continue",
        "decimal",
        "default",
        "delegate",
        "do",
        "double",
        "else",
        "enum",
        "event",
        "explicit",
        "extern",
        "false",
        "finally",
        "fixed",
        "float",
        "for",
        "foreach",
        "goto",
        "if",
        "implicit",
        "in",
        "int",
        "interface",
        "internal",
        "is",
        "lock",
        "long",
        "namespace",
        "new",
        "null",
        "object",
        "operator",
        "out",
        "override",
        "params",
        "private",
        "protected",
        "public",
        "readonly",
        "ref",
        "return",
        "sbyte",
        "sealed",
        "short",
        "sizeof",
        "stackalloc",
        "static",
        "string",
        "struct",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "uint",
        "ulong",
        "unchecked",
        "unsafe",
        "ushort",
        "using",
        "virtual",
        "void",
        "volatile",
        "while",
    }
)

_NON_ALPHANUMERIC_RE = re.compile(r"[^0-9A-Za-z]+")
_STATUS_CODE_RE = re.compile(r"^[0-9]{3}$")
_PLACEHOLDER = "Value"
_RESERVED_SUFFIX = "Value"
_DEFAULT_STATUS = "default"


class Casing(Enum):
    PASCAL = "pascal"
    CAMEL = "camel"


def split_words(raw: str) -> list[str]:
    """Split text into words on separators and case or digit boundaries.

    A new word starts at a digit that follows a non-digit, at an upper-case
    letter that follows a non-upper-case character, and at the last upper-case
    letter of an acronym that is followed by a lower-case letter.
    """
    words: list[str] = []
    for chunk in _NON_ALPHANUMERIC_RE.split(raw):
        if chunk:
            words.extend(_split_chunk(chunk))
    return words


def _split_chunk(chunk: str) -> list[str]:
    parts: list[str] = []
    start = 0
    for index in range(1, len(chunk)):
        following = chunk[index + 1] if index + 1 < len(chunk) else ""
        if _starts_word(chunk[index - 1], chunk[index], following):
            parts.append(chunk[start:index])
            start = index
    parts.append(chunk[start:])
    return parts


def _starts_word(previous: str, current: str, following: str) -> bool:
    if current.isdigit():
        return not previous.isdigit()
    if current.isupper() and not previous.isupper():
        return True
    return current.isupper() and previous.isupper() and following.islower()


def normalize_identifier(raw: str, casing: Casing = Casing.PASCAL) -> str:
    """Convert arbitrary text into a valid, non-reserved C# identifier.

    Args:
        raw (str): Source text, e.g. a schema name, property name or tag.
        casing (Casing): Pascal case for types and members, camel case for arguments.

    Returns:
        str: The identifier. Applying this function to its own output is a no-op.
    """
    # Single-letter words fuse into acronyms ("a_b" -> "AB" -> "Ab"), so the
    # pass is repeated until it reaches a fixed point. Each pass only lowers letters.
    text = _normalize_once(raw, casing)
    while True:
        again = _normalize_once(text, casing)
        if again == text:
            return text
        text = again


def _normalize_once(raw: str, casing: Casing) -> str:
    words = split_words(raw)
    if words:
        text = "".join(word[:1].upper() + word[1:].lower() for word in words)
    else:
        text = _PLACEHOLDER
    if casing is Casing.CAMEL:
        text = text[:1].lower() + text[1:]
    if text[0].isdigit():
        text = f"_{text}"
    if text.lower() in CSHARP_RESERVED_KEYWORDS:
        text = f"{text}{_RESERVED_SUFFIX}"
    return text


def pascal_identifier(raw: str) -> str:
    return normalize_identifier(raw, Casing.PASCAL)


def camel_identifier(raw: str) -> str:
    return normalize_identifier(raw, Casing.CAMEL)


def generate_operation_name(method: str, path: str) -> str:
    """Derive a method name from the HTTP verb and path template."""
    stripped = path.replace("{", "").replace("}", "")
    return pascal_identifier(f"{method}_{stripped}")


def is_default_status(code: str) -> bool:
    return code.lower() == _DEFAULT_STATUS


def is_numeric_status_code(code: str) -> bool:
    return bool(_STATUS_CODE_RE.match(code))


def status_code_suffix(code: str) -> str:
    """Name fragment used for inline error payload types."""
    if is_default_status(code):
        return "Default"
    if is_numeric_status_code(code):
        return code
    return pascal_identifier(code)


class NameRegistry:
    """Run-scoped set of taken names that hands out numbered variants."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: set[str] = set(names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def reserve(self, base: str) -> str:
        """Claim ``base`` or the first free ``base2``, ``base3``, ... variant."""
        if base not in self._names:
            self._names.add(base)
            return base
        suffix = 2
        while f"{base}{suffix}" in self._names:
            suffix += 1
        name = f"{base}{suffix}"
        self._names.add(name)
        return name
