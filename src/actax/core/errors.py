"""
Core exception types raised while deriving and enforcing an action taxonomy.

Provides typed exceptions for core-domain failures:
- SchemaError for duplicate kinds, unspecified descriptors and conflicting
  payload classification.
- GrammarError for kind names that are empty or cannot be rendered as Python
  identifiers by the code generator.
- UnknownKindError when a shape, creator or action is requested for a name that
  is not part of the action-kind set.
- ArityError when a creator is called with the wrong number of arguments, or an
  action value carries (or lacks) a payload contrary to its kind.
- PayloadTypeError when a payload value fails validation against the declared type.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - SchemaError and UnknownKindError surface at schema-definition time (when a
      Taxonomy is compiled or a derivation is requested); ArityError and
      PayloadTypeError surface at each creator call site.
    - None of these are retryable; they signal programmer-facing defects.

Examples:
    Catch an arity failure.

    >>> from actax.core.errors import ArityError
    >>> try:
    ...     raise ArityError("LOG_OUT takes no payload (got 1 argument)")
    ... except TypeError as e:
    ...     msg = str(e)
    >>> "LOG_OUT" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "SchemaError",
    "GrammarError",
    "UnknownKindError",
    "ArityError",
    "PayloadTypeError",
]


class SchemaError(ValueError):
    """Schema-level failure (duplicate kinds, conflicting or missing classification)."""


class GrammarError(SchemaError):
    """Kind naming failure (empty, padded, or not renderable as an identifier)."""


class UnknownKindError(LookupError):
    """A kind name outside the derived action-kind set was requested."""

    def __init__(self, kind: object, known: tuple[str, ...] = ()) -> None:
        self.kind = kind
        self.known = known
        hint = f" (known: {', '.join(known)})" if known else ""
        super().__init__(f"unknown action kind {kind!r}{hint}")


class ArityError(TypeError):
    """Creator argument count (or action payload presence) contradicts the kind."""


class PayloadTypeError(TypeError):
    """Payload value does not match the declared payload type for its kind."""
