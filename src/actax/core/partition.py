"""
Partitioner: split a schema's kinds into payload-bearing and payload-less sets.

Two interchangeable strategies are supported:

- ``InferFromSentinel`` (default): a kind is payload-less iff its descriptor is
  the NO_PAYLOAD marker. The schema is the single source of truth.
- ``ExplicitWithoutPayload(names)``: exactly the listed kinds are payload-less.
  Listed kinds may leave their descriptor unspecified (``None``) or use
  NO_PAYLOAD; listing a kind that declares a concrete payload type, or listing a
  kind missing from the schema, is a SchemaError.

Invariants
- ``with_payload`` and ``without_payload`` are disjoint and their union equals
  the schema's kinds.
- Derivation is pure: the same schema and config always yield an equal Partition.

Examples:
    >>> from actax.core.schema import ActionSchema
    >>> from actax.core.payload import NO_PAYLOAD
    >>> from actax.core.partition import derive_partition, ExplicitWithoutPayload
    >>> p = derive_partition(ActionSchema({"SET_NAME": str, "LOG_OUT": NO_PAYLOAD}))
    >>> p.with_payload, p.without_payload
    (('SET_NAME',), ('LOG_OUT',))
    >>> q = derive_partition(
    ...     ActionSchema({"SET_NAME": str, "LOG_OUT": None}),
    ...     ExplicitWithoutPayload(frozenset({"LOG_OUT"})),
    ... )
    >>> q.without_payload
    ('LOG_OUT',)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

from .errors import SchemaError, UnknownKindError
from .payload import PayloadDescriptor, PayloadKind
from .schema import ActionSchema, SchemaInput

__all__ = [
    "InferFromSentinel",
    "ExplicitWithoutPayload",
    "PartitionConfig",
    "INFER_FROM_SENTINEL",
    "Strategy",
    "partition_config_from",
    "Partition",
    "derive_partition",
]

logger = logging.getLogger(__name__)

Strategy = Literal["sentinel", "explicit"]


@dataclass(frozen=True)
class InferFromSentinel:
    """Classify by NO_PAYLOAD marker identity."""

    strategy: Strategy = field(default="sentinel", init=False)


@dataclass(frozen=True)
class ExplicitWithoutPayload:
    """
    Classify by an explicit list of payload-less kinds.

    Attributes:
        names (frozenset[str]): Kinds known to carry no payload.
    """

    names: frozenset[str] = frozenset()
    strategy: Strategy = field(default="explicit", init=False)

    def __post_init__(self) -> None:
        # Accept any iterable of names; keep the stored value hashable.
        object.__setattr__(self, "names", frozenset(self.names))


PartitionConfig = InferFromSentinel | ExplicitWithoutPayload

INFER_FROM_SENTINEL = InferFromSentinel()


def partition_config_from(
    strategy: str | None, without_payload: Iterable[str] = ()
) -> PartitionConfig:
    """
    Build a PartitionConfig from its textual strategy name.

    Args:
        strategy: ``"sentinel"``, ``"explicit"`` or None. None picks ``"explicit"``
            when ``without_payload`` is non-empty and ``"sentinel"`` otherwise.
        without_payload: Payload-less kinds for the explicit strategy.

    Raises:
        SchemaError: On an unknown strategy, or names given to the sentinel strategy.
    """
    names = frozenset(without_payload)
    chosen = (strategy or ("explicit" if names else "sentinel")).strip().lower()
    if chosen == "sentinel":
        if names:
            raise SchemaError(
                "the sentinel strategy infers payload-less kinds from NO_PAYLOAD; "
                f"do not also list them (got {sorted(names)})"
            )
        return INFER_FROM_SENTINEL
    if chosen == "explicit":
        return ExplicitWithoutPayload(names)
    raise SchemaError(f"partition strategy must be 'sentinel' or 'explicit' (got {strategy!r})")


@dataclass(frozen=True)
class Partition:
    """
    Disjoint split of an action-kind set.

    Attributes:
        kinds (tuple[str, ...]): All kinds in schema order.
        with_payload (tuple[str, ...]): Payload-bearing kinds in schema order.
        without_payload (tuple[str, ...]): Payload-less kinds in schema order.
        payload_types (Mapping[str, Any]): Payload annotation per payload-bearing kind.
    """

    kinds: tuple[str, ...]
    with_payload: tuple[str, ...]
    without_payload: tuple[str, ...]
    payload_types: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def action_kinds(self) -> frozenset[str]:
        return frozenset(self.kinds)

    def __contains__(self, kind: object) -> bool:
        if not isinstance(kind, str):
            return False
        return kind in self.payload_types or kind in self.without_payload

    def require(self, kind: object) -> str:
        """Return ``kind`` if it is a member, else raise UnknownKindError."""
        if kind not in self:
            raise UnknownKindError(kind, self.kinds)
        return kind  # type: ignore[return-value]

    def classify(self, kind: str) -> PayloadKind:
        self.require(kind)
        return PayloadKind.VALUE if kind in self.payload_types else PayloadKind.NONE

    def descriptor(self, kind: str) -> PayloadDescriptor:
        """Resolved descriptor for ``kind`` (never unspecified)."""
        if self.classify(kind) is PayloadKind.VALUE:
            return PayloadDescriptor.value(self.payload_types[kind])
        return PayloadDescriptor.none()

    def payload_type_of(self, kind: str) -> Any:
        """
        Payload annotation of a payload-bearing kind.

        Raises:
            UnknownKindError: If kind is not in the partition.
            SchemaError: If kind is payload-less.
        """
        if self.classify(kind) is PayloadKind.NONE:
            raise SchemaError(f"action kind {kind!r} carries no payload")
        return self.payload_types[kind]


def _classify_sentinel(kind: str, desc: PayloadDescriptor) -> bool:
    if desc.is_unspecified:
        raise SchemaError(
            f"action kind {kind!r} has no payload descriptor; use a payload type or NO_PAYLOAD"
        )
    return desc.has_payload


def _classify_explicit(kind: str, desc: PayloadDescriptor, listed: frozenset[str]) -> bool:
    if kind in listed:
        if desc.has_payload:
            raise SchemaError(
                f"action kind {kind!r} is listed as payload-less but declares payload type "
                f"{desc!r}"
            )
        return False
    if desc.kind is PayloadKind.NONE:
        raise SchemaError(
            f"action kind {kind!r} is marked NO_PAYLOAD but missing from the explicit "
            "payload-less list"
        )
    if desc.is_unspecified:
        raise SchemaError(
            f"action kind {kind!r} has no payload type and is not listed as payload-less"
        )
    return True


def derive_partition(
    schema: ActionSchema | SchemaInput, config: PartitionConfig = INFER_FROM_SENTINEL
) -> Partition:
    """
    Partition a schema's kinds by payload classification.

    Args:
        schema (ActionSchema | SchemaInput): Source schema; raw mappings and pair sequences are
            normalized first.
        config (PartitionConfig): Sentinel inference (default) or explicit list.

    Returns:
        Partition: The classification, in schema order.

    Raises:
        SchemaError: On unspecified descriptors (sentinel strategy), listed kinds
            missing from the schema, or conflicting classification (explicit strategy).
    """
    if not isinstance(schema, ActionSchema):
        schema = ActionSchema(schema)
    if isinstance(config, ExplicitWithoutPayload):
        missing = sorted(config.names.difference(schema))
        if missing:
            raise SchemaError(
                f"payload-less kinds not declared in schema {schema.name!r}: {missing}"
            )

    with_payload: list[str] = []
    without_payload: list[str] = []
    payload_types: dict[str, Any] = {}
    for kind, desc in schema.items():
        if isinstance(config, ExplicitWithoutPayload):
            bearing = _classify_explicit(kind, desc, config.names)
        else:
            bearing = _classify_sentinel(kind, desc)
        if bearing:
            with_payload.append(kind)
            payload_types[kind] = desc.type
        else:
            without_payload.append(kind)

    logger.debug(
        "partitioned schema %r (%s): %d with payload, %d without",
        schema.name,
        config.strategy,
        len(with_payload),
        len(without_payload),
    )
    return Partition(
        kinds=schema.kinds,
        with_payload=tuple(with_payload),
        without_payload=tuple(without_payload),
        payload_types=MappingProxyType(payload_types),
    )
