"""
Type expressions used for payload types in schema files.

Schema files cannot hold Python objects, so each payload type is written as a
small expression and resolved here:

- builtins: ``str``, ``int``, ``float``, ``bool``, ``bytes``, ``dict``, ``list``,
  ``set``, ``frozenset``, ``tuple``, ``object``, ``None``; ``Any``/``any``
- typing forms: ``Literal['a', 'b']``, ``Optional[int]``, ``Union[int, str]``
- subscripted generics: ``list[str]``, ``dict[str, int]``, ``tuple[int, ...]``
- PEP 604 unions: ``str | None``
- importable references: ``package.module:Name`` or ``package.module.Name``

Grammar (EBNF)::

    expr   = atom, { "|", atom } ;
    atom   = name, [ "[", arg, { ",", arg }, "]" ] ;
    arg    = expr | "..." | string | integer ;
    name   = ident, { ( "." | ":" ), ident } ;

Examples:
    >>> from actax.io.typenames import parse_type_expr
    >>> parse_type_expr("list[str]")
    list[str]
    >>> parse_type_expr("str | None")
    str | None
"""

from __future__ import annotations

import functools
import importlib
import operator
import re
import typing
from dataclasses import dataclass
from typing import Any, Final

from .errors import SchemaFileError

__all__ = ["BUILTIN_TYPES", "parse_type_expr"]

BUILTIN_TYPES: Final[dict[str, Any]] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "dict": dict,
    "list": list,
    "set": set,
    "frozenset": frozenset,
    "tuple": tuple,
    "object": object,
    "None": type(None),
    "Any": typing.Any,
    "any": typing.Any,
    "Literal": typing.Literal,
    "Optional": typing.Optional,
    "Union": typing.Union,
}

_TOKEN_RE: Final[re.Pattern[str]] = re.compile(
    r"""
    \s*(?:
        (?P<ellipsis>\.\.\.)
      | (?P<name>[A-Za-z_][A-Za-z0-9_]*(?:[.:][A-Za-z_][A-Za-z0-9_]*)*)
      | (?P<string>'[^']*'|"[^"]*")
      | (?P<int>-?\d+)
      | (?P<punct>[\[\],|])
    )
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    stripped_end = len(text.rstrip())
    while pos < stripped_end:
        match = _TOKEN_RE.match(text, pos)
        if match is None or match.end() == pos:
            raise SchemaFileError(f"unexpected character {text[pos]!r} at {pos} in {text!r}")
        kind = match.lastgroup or ""
        tokens.append(_Token(kind, match.group(kind), match.start(kind)))
        pos = match.end()
    return tokens


def _resolve_name(name: str, source: str) -> Any:
    if name in BUILTIN_TYPES:
        return BUILTIN_TYPES[name]
    if ":" in name:
        module_name, _, attr_path = name.partition(":")
    elif "." in name:
        module_name, _, attr_path = name.rpartition(".")
    else:
        raise SchemaFileError(
            f"unknown type name {name!r} in {source!r}; "
            "use a builtin or an importable 'package.module:Name' reference"
        )
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise SchemaFileError(f"cannot import module {module_name!r} for {source!r}") from exc
    for part in attr_path.replace(":", ".").split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise SchemaFileError(
                f"{module_name!r} has no attribute path {attr_path!r} (in {source!r})"
            ) from exc
    return obj


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.i = 0

    def _peek(self) -> _Token | None:
        return self.tokens[self.i] if self.i < len(self.tokens) else None

    def _take(self, text: str | None = None) -> _Token:
        tok = self._peek()
        if tok is None:
            raise SchemaFileError(f"unexpected end of type expression {self.text!r}")
        if text is not None and tok.text != text:
            raise SchemaFileError(
                f"expected {text!r} at {tok.pos} in {self.text!r}, got {tok.text!r}"
            )
        self.i += 1
        return tok

    def parse(self) -> Any:
        if not self.tokens:
            raise SchemaFileError("empty type expression")
        result = self._expr()
        tok = self._peek()
        if tok is not None:
            raise SchemaFileError(f"unexpected {tok.text!r} at {tok.pos} in {self.text!r}")
        return result

    def _expr(self) -> Any:
        parts = [self._atom()]
        while (tok := self._peek()) is not None and tok.text == "|":
            self._take("|")
            parts.append(self._atom())
        if len(parts) == 1:
            return parts[0]
        try:
            return functools.reduce(operator.or_, parts)
        except TypeError as exc:
            raise SchemaFileError(f"cannot build union {self.text!r}: {exc}") from exc

    def _atom(self) -> Any:
        tok = self._take()
        if tok.kind != "name":
            raise SchemaFileError(
                f"expected a type name at {tok.pos} in {self.text!r}, got {tok.text!r}"
            )
        base = _resolve_name(tok.text, self.text)
        nxt = self._peek()
        if nxt is None or nxt.text != "[":
            return base
        self._take("[")
        args = [self._arg()]
        while (sep := self._peek()) is not None and sep.text == ",":
            self._take(",")
            args.append(self._arg())
        self._take("]")
        try:
            return base[tuple(args)] if len(args) > 1 else base[args[0]]
        except TypeError as exc:
            raise SchemaFileError(
                f"{tok.text!r} cannot be subscripted in {self.text!r}: {exc}"
            ) from exc

    def _arg(self) -> Any:
        tok = self._peek()
        if tok is None:
            raise SchemaFileError(f"unexpected end of type expression {self.text!r}")
        if tok.kind == "ellipsis":
            self._take()
            return ...
        if tok.kind == "string":
            self._take()
            return tok.text[1:-1]
        if tok.kind == "int":
            self._take()
            return int(tok.text)
        return self._expr()


def parse_type_expr(text: str) -> Any:
    """
    Resolve a payload type expression to a Python annotation.

    Args:
        text (str): Expression such as ``"dict[str, int]"`` or ``"myapp.models:User"``.

    Returns:
        Any: The resolved annotation.

    Raises:
        SchemaFileError: On syntax errors, unknown names, or failed imports.
    """
    if not isinstance(text, str):
        raise SchemaFileError(f"type expressions must be strings (got {text!r})")
    return _Parser(text).parse()
