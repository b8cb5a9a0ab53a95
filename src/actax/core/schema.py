"""
ActionSchema: the ordered, immutable mapping from action kind to payload descriptor.

Responsibilities
- Normalize raw schema values into PayloadDescriptor instances.
- Enforce unique, well-formed kind names (the schema's primary key).
- Preserve declaration order; every derived view (partition, shapes, generated
  code) follows it.

Notes:
    - Zero-IO. File loading lives in actax.io.loader.
    - A schema with zero entries is legal; it derives an empty action-kind set.

Examples:
    >>> from actax.core.schema import ActionSchema
    >>> from actax.core.payload import NO_PAYLOAD
    >>> schema = ActionSchema({"SET_NAME": str, "SET_AGE": int, "LOG_OUT": NO_PAYLOAD})
    >>> list(schema)
    ['SET_NAME', 'SET_AGE', 'LOG_OUT']
    >>> schema["LOG_OUT"].has_payload
    False
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .errors import SchemaError
from .grammar import assert_kind_name
from .payload import PayloadDescriptor, as_descriptor, payload_token

__all__ = ["ActionSchema", "SchemaInput"]

SchemaInput = Mapping[str, Any] | Iterable[tuple[str, Any]]


class ActionSchema(Mapping[str, PayloadDescriptor]):
    """
    Immutable ordered mapping ``kind -> PayloadDescriptor``.

    Args:
        entries: A mapping, or an iterable of ``(kind, descriptor)`` pairs. Pairs
            are checked for duplicate kinds; mappings are unique by construction.
        name: Schema name, used as the union name by the code generator.

    Raises:
        SchemaError: On duplicate kinds or invalid descriptors.
        GrammarError: On empty or padded kind names.
    """

    __slots__ = ("_entries", "_name")

    def __init__(self, entries: SchemaInput = (), *, name: str = "Action") -> None:
        if not isinstance(name, str) or not name.strip():
            raise SchemaError(f"schema name must be a non-empty string (got {name!r})")
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        normalized: dict[str, PayloadDescriptor] = {}
        for pair in pairs:
            try:
                kind, raw = pair
            except (TypeError, ValueError) as exc:
                raise SchemaError(
                    f"schema entries must be (kind, descriptor) pairs, got {pair!r}"
                ) from exc
            assert_kind_name(kind)
            if kind in normalized:
                raise SchemaError(f"duplicate action kind {kind!r}")
            normalized[kind] = as_descriptor(raw)
        self._entries: Mapping[str, PayloadDescriptor] = MappingProxyType(normalized)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def kinds(self) -> tuple[str, ...]:
        """Kind names in declaration order."""
        return tuple(self._entries)

    def __getitem__(self, kind: str) -> PayloadDescriptor:
        return self._entries[kind]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionSchema):
            return NotImplemented
        return self._name == other._name and list(self._entries.items()) == list(
            other._entries.items()
        )

    def __hash__(self) -> int:
        return hash((self._name, tuple(self._entries.items())))

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {payload_token(d)}" for k, d in self._entries.items())
        return f"ActionSchema({self._name!r}, {{{body}}})"

    def with_name(self, name: str) -> ActionSchema:
        """Return a copy of this schema under another name."""
        return ActionSchema(self._entries, name=name)
