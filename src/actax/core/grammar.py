"""
Kind-name grammar and identifier helpers.

Kind names are free-form strings at the core level (they are the schema's primary
key and the discriminator value of every action), but the code generator needs
to turn each one into a constant, a class and a function name. This module holds
both sets of rules.

Responsibilities
- Validate core kind names (non-empty, no surrounding whitespace).
- Decide whether a kind name is renderable as Python identifiers.
- Derive constant / class / function names and guard against collisions.

Design principles
-----------------
1) One naming standard for generated code:
   - Kind constants: UPPER_SNAKE (``SET_USER_NAME``)
   - Action classes: PascalCase (``SetUserName``)
   - Creator functions: lower_snake (``set_user_name``)

2) Discriminator values are never rewritten. ``"user/logout"`` stays
   ``"user/logout"`` on the wire; only identifier-safe names can be generated.

Examples
--------
>>> from actax.core.grammar import class_name, function_name, constant_name
>>> class_name("SET_USER_NAME")
'SetUserName'
>>> function_name("SET_USER_NAME")
'set_user_name'
>>> constant_name("setUserName")
'SET_USER_NAME'
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Iterable
from typing import Final

from .errors import GrammarError

__all__ = [
    "is_kind_name",
    "assert_kind_name",
    "is_identifier_kind",
    "split_words",
    "constant_name",
    "class_name",
    "function_name",
    "ensure_unique_identifiers",
]

_IDENTIFIER_KIND_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
# Boundaries: explicit underscores, lower->Upper and ACRONYMWord transitions.
_CAMEL_BOUNDARY_RE: Final[re.Pattern[str]] = re.compile(
    r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])"
)


def is_kind_name(value: object) -> bool:
    """
    Check whether a value is an acceptable core kind name.

    Args:
      value (object): Candidate kind name.

    Returns:
      bool: True for non-empty strings without leading/trailing whitespace.

    Examples:
      >>> is_kind_name("LOG_OUT")
      True
      >>> is_kind_name(" LOG_OUT")
      False
    """
    return isinstance(value, str) and bool(value) and value == value.strip()


def assert_kind_name(value: object) -> str:
    """
    Validate a core kind name.

    Args:
      value (object): Candidate kind name.

    Returns:
      str: The kind name, unchanged.

    Raises:
      GrammarError: If value is not a non-empty, unpadded string.
    """
    if not is_kind_name(value):
        raise GrammarError(
            f"action kind names must be non-empty strings without surrounding whitespace "
            f"(got: {value!r})"
        )
    return value  # type: ignore[return-value]


def is_identifier_kind(kind: str) -> bool:
    """Return True when the code generator can derive identifiers for ``kind``."""
    return bool(_IDENTIFIER_KIND_RE.match(kind or ""))


def split_words(kind: str) -> list[str]:
    """
    Split an identifier-safe kind name into lowercase words.

    Handles UPPER_SNAKE, lower_snake, camelCase and PascalCase.

    Raises:
      GrammarError: If the kind is not identifier-safe.

    Examples:
      >>> split_words("SET_USER_NAME")
      ['set', 'user', 'name']
      >>> split_words("loadHTTPConfig")
      ['load', 'http', 'config']
    """
    if not is_identifier_kind(kind):
        raise GrammarError(
            f"kind {kind!r} cannot be rendered as a Python identifier "
            "(expected letters, digits and underscores, starting with a letter)"
        )
    words: list[str] = []
    for chunk in kind.split("_"):
        if not chunk:
            continue
        if chunk.isupper() or chunk.islower():
            words.append(chunk.lower())
        else:
            words.extend(part.lower() for part in _CAMEL_BOUNDARY_RE.split(chunk) if part)
    return words


def constant_name(kind: str) -> str:
    """UPPER_SNAKE constant name for a kind."""
    return "_".join(w.upper() for w in split_words(kind))


def class_name(kind: str) -> str:
    """PascalCase class name for a kind's action shape."""
    return "".join(w[:1].upper() + w[1:] for w in split_words(kind))


def function_name(kind: str) -> str:
    """
    lower_snake creator function name for a kind.

    Python keywords get a trailing underscore (``"RETURN"`` -> ``return_``).
    """
    name = "_".join(split_words(kind))
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        name += "_"
    return name


def ensure_unique_identifiers(kinds: Iterable[str]) -> None:
    """
    Assert that no two kinds collapse onto the same generated identifiers.

    Args:
      kinds (Iterable[str]): Kind names in schema order.

    Raises:
      GrammarError: If a kind is not identifier-safe, or two kinds share a
        function (and therefore constant/class) name, e.g. ``SET_NAME`` and
        ``setName``.
    """
    seen: dict[str, str] = {}
    for kind in kinds:
        ident = function_name(kind)
        other = seen.get(ident)
        if other is not None:
            raise GrammarError(
                f"kinds {other!r} and {kind!r} both render as {ident!r}; rename one of them"
            )
        seen[ident] = kind
