"""
Payload descriptors and the no-payload marker.

A schema maps every action kind to a PayloadDescriptor. The descriptor is an
explicit tagged variant: ``PayloadKind.NONE`` for kinds that carry no payload,
``PayloadKind.VALUE`` (with a type annotation) for kinds that do. Classification
is by tag, never by structural emptiness, so an empty pydantic model or a bare
``dict`` are ordinary payload types.

Examples:
    >>> from actax.core.payload import NO_PAYLOAD, as_descriptor, PayloadKind
    >>> as_descriptor(str).kind is PayloadKind.VALUE
    True
    >>> as_descriptor(NO_PAYLOAD).has_payload
    False
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Never, NoReturn

from .errors import SchemaError

__all__ = [
    "PayloadKind",
    "PayloadDescriptor",
    "NO_PAYLOAD",
    "UNSPECIFIED",
    "as_descriptor",
    "payload_token",
]


class PayloadKind(Enum):
    """Tag of a payload descriptor."""

    NONE = "none"
    VALUE = "value"


@dataclass(frozen=True)
class PayloadDescriptor:
    """
    Declared payload of one action kind.

    Attributes:
        kind (PayloadKind | None): NONE for payload-less kinds, VALUE for
            payload-bearing kinds, None when left unspecified (legal only for
            kinds listed under the explicit partition strategy).
        type (Any): Payload type annotation when kind is VALUE; None otherwise.
    """

    kind: PayloadKind | None
    type: Any = None

    def __post_init__(self) -> None:
        if self.kind is PayloadKind.VALUE and self.type is None:
            raise SchemaError("a VALUE payload descriptor needs a payload type")
        if self.kind is not PayloadKind.VALUE and self.type is not None:
            raise SchemaError(f"only VALUE payload descriptors carry a type (got {self.type!r})")

    @classmethod
    def none(cls) -> PayloadDescriptor:
        return cls(PayloadKind.NONE)

    @classmethod
    def value(cls, tp: Any) -> PayloadDescriptor:
        return cls(PayloadKind.VALUE, tp)

    @property
    def has_payload(self) -> bool:
        return self.kind is PayloadKind.VALUE

    @property
    def is_unspecified(self) -> bool:
        return self.kind is None

    def __repr__(self) -> str:
        if self.kind is PayloadKind.VALUE:
            return f"PayloadDescriptor.value({payload_token(self)})"
        if self.kind is PayloadKind.NONE:
            return "NO_PAYLOAD"
        return "UNSPECIFIED"


NO_PAYLOAD: Final[PayloadDescriptor] = PayloadDescriptor.none()
UNSPECIFIED: Final[PayloadDescriptor] = PayloadDescriptor(None)

_BOTTOM_TYPES: Final = (Never, NoReturn)


def as_descriptor(value: Any) -> PayloadDescriptor:
    """
    Normalize a raw schema value into a PayloadDescriptor.

    Args:
        value (Any): A PayloadDescriptor, None (unspecified), or a payload type.

    Returns:
        PayloadDescriptor: The normalized descriptor.

    Raises:
        SchemaError: If value is a bottom type (``Never``/``NoReturn``); payload-less
            kinds must use NO_PAYLOAD instead.
    """
    if isinstance(value, PayloadDescriptor):
        return value
    if value is None:
        return UNSPECIFIED
    if any(value is bottom for bottom in _BOTTOM_TYPES):
        raise SchemaError(
            f"{value!r} is not a payload type; mark payload-less kinds with NO_PAYLOAD"
        )
    return PayloadDescriptor.value(value)


def payload_token(descriptor: PayloadDescriptor) -> str:
    """
    Stable, human-readable token for a descriptor.

    Used in fingerprints, ``repr`` and CLI output. Classes render as their
    ``module.qualname``; other annotations fall back to ``repr``.

    Examples:
        >>> payload_token(PayloadDescriptor.value(str))
        'str'
        >>> payload_token(PayloadDescriptor.value(list[int]))
        'list[int]'
        >>> payload_token(NO_PAYLOAD)
        'none'
    """
    if descriptor.kind is PayloadKind.NONE:
        return "none"
    if descriptor.kind is None:
        return "unspecified"
    tp = descriptor.type
    if isinstance(tp, type) and not getattr(tp, "__args__", None):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp).replace("typing.", "")
