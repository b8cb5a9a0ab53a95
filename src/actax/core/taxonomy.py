"""
Taxonomy: a schema compiled once into its partition, shapes and creators.

Control flow is ``Schema -> Partition -> {ActionShape, ActionCreator}``. A
Taxonomy runs the whole derivation eagerly at construction, so every SchemaError
surfaces at schema-definition time and later lookups are plain dictionary reads.
Instances hold no mutable state after ``__init__`` and may be shared freely
between threads.

The module also exposes the derivation entry points as pure functions:
``derive_action_kinds``, ``derive_partition``, ``derive_shape`` and
``derive_creator_signature``.

Examples:
    >>> from actax.core.payload import NO_PAYLOAD
    >>> from actax.core.taxonomy import Taxonomy
    >>> tax = Taxonomy({"SET_NAME": str, "SET_AGE": int, "LOG_OUT": NO_PAYLOAD})
    >>> sorted(tax.action_kinds)
    ['LOG_OUT', 'SET_AGE', 'SET_NAME']
    >>> tax.creator("SET_NAME")("Alice").model_dump()
    {'type': 'SET_NAME', 'payload': 'Alice'}
    >>> tax.parse_action({"type": "LOG_OUT"}).type
    'LOG_OUT'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import cached_property
from types import MappingProxyType
from typing import Annotated, Any, Union

from pydantic import Field

from .creators import ActionCreator, CreatorSignature, derive_creator_signature
from .errors import ArityError
from .hashing import schema_fingerprint
from .partition import (
    INFER_FROM_SENTINEL,
    Partition,
    PartitionConfig,
    derive_partition,
)
from .schema import ActionSchema, SchemaInput
from .shapes import (
    DISCRIMINATOR_FIELD,
    PAYLOAD_FIELD,
    ActionModel,
    ActionShape,
    derive_shape,
    shape_from_partition,
    shape_of,
)

__all__ = [
    "Taxonomy",
    "derive_action_kinds",
    "derive_partition",
    "derive_shape",
    "derive_creator_signature",
]

logger = logging.getLogger(__name__)


def derive_action_kinds(schema: ActionSchema | SchemaInput) -> frozenset[str]:
    """
    Derive the full set of action kinds of a schema.

    Always equal to ``set(schema.keys())``; independent of the partition strategy.
    """
    if not isinstance(schema, ActionSchema):
        schema = ActionSchema(schema)
    return frozenset(schema.kinds)


class Taxonomy:
    """
    Compiled action taxonomy.

    Args:
        schema: An ActionSchema, or raw entries accepted by ActionSchema.
        config: Partition strategy (sentinel inference by default).
        strict: Validate payloads without coercion.
        name: Schema name when ``schema`` is given as raw entries.

    Attributes:
        schema (ActionSchema): Source schema.
        config (PartitionConfig): Partition strategy in use.
        partition (Partition): Payload classification of every kind.

    Raises:
        SchemaError: If the schema is invalid or does not partition under ``config``.
    """

    def __init__(
        self,
        schema: ActionSchema | SchemaInput,
        config: PartitionConfig = INFER_FROM_SENTINEL,
        *,
        strict: bool = True,
        name: str = "Action",
    ) -> None:
        if not isinstance(schema, ActionSchema):
            schema = ActionSchema(schema, name=name)
        self.schema = schema
        self.config = config
        self.strict = strict
        self.partition: Partition = derive_partition(schema, config)
        shapes = {k: shape_from_partition(self.partition, k, strict=strict) for k in schema.kinds}
        self._shapes: Mapping[str, ActionShape] = MappingProxyType(shapes)
        self._creators: Mapping[str, ActionCreator] = MappingProxyType(
            {k: ActionCreator(shape) for k, shape in shapes.items()}
        )
        logger.debug(
            "compiled taxonomy %r: %d kinds (%s strategy, strict=%s)",
            schema.name,
            len(shapes),
            config.strategy,
            strict,
        )

    def __repr__(self) -> str:
        return (
            f"Taxonomy({self.schema.name!r}, with_payload={list(self.partition.with_payload)}, "
            f"without_payload={list(self.partition.without_payload)})"
        )

    def __contains__(self, kind: object) -> bool:
        return kind in self.partition

    def __len__(self) -> int:
        return len(self.partition.kinds)

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def kinds(self) -> tuple[str, ...]:
        """Kinds in schema order."""
        return self.partition.kinds

    @property
    def action_kinds(self) -> frozenset[str]:
        return self.partition.action_kinds

    @cached_property
    def fingerprint(self) -> str:
        return schema_fingerprint(self.schema)

    def shape(self, kind: str) -> ActionShape:
        """Shape of ``kind``; raises UnknownKindError for non-members."""
        return self._shapes[self.partition.require(kind)]

    def creator(self, kind: str) -> ActionCreator:
        """Validated creator of ``kind``; raises UnknownKindError for non-members."""
        return self._creators[self.partition.require(kind)]

    def signature(self, kind: str) -> CreatorSignature:
        return self.creator(kind).signature

    def shapes(self) -> Mapping[str, ActionShape]:
        return self._shapes

    def creators(self) -> Mapping[str, ActionCreator]:
        return self._creators

    def models(self) -> tuple[type[ActionModel], ...]:
        """Action model classes in schema order."""
        return tuple(shape.model for shape in self._shapes.values())

    @cached_property
    def action_type(self) -> Any:
        """
        Annotation accepting any action of this taxonomy.

        A discriminated union on ``type`` for two or more kinds, the single model
        for one kind, and None for an empty schema. Usable as a pydantic field
        annotation or with ``pydantic.TypeAdapter``.
        """
        models = self.models()
        if not models:
            return None
        if len(models) == 1:
            return models[0]
        return Annotated[Union[models], Field(discriminator=DISCRIMINATOR_FIELD)]  # noqa: UP007

    def parse_action(self, data: Mapping[str, Any] | ActionModel) -> ActionModel:
        """
        Validate a raw action mapping (or an existing action) against this taxonomy.

        Args:
            data: ``{"type": kind}`` or ``{"type": kind, "payload": value}``, or an
                action model instance.

        Returns:
            ActionModel: The validated action.

        Raises:
            UnknownKindError: If the discriminator is missing or not a member.
            ArityError: If the payload field is present on a payload-less kind,
                missing on a payload-bearing kind, or other fields are present.
            PayloadTypeError: If the payload fails validation.
        """
        if isinstance(data, ActionModel):
            shape = shape_of(data)
            if self.shape(shape.kind) != shape:
                raise ArityError(
                    f"{shape.kind} action has shape {shape.describe()}, expected "
                    f"{self.shape(shape.kind).describe()}"
                )
            return data
        if not isinstance(data, Mapping):
            raise TypeError(f"action values must be mappings (got {type(data).__name__})")

        creator = self.creator(data.get(DISCRIMINATOR_FIELD))  # type: ignore[arg-type]
        extra = sorted(set(data) - {DISCRIMINATOR_FIELD, PAYLOAD_FIELD})
        if extra:
            raise ArityError(f"{creator.kind} action has unexpected fields {extra}")
        has_payload = PAYLOAD_FIELD in data
        if has_payload != creator.shape.has_payload:
            if has_payload:
                raise ArityError(f"{creator.kind} actions carry no payload field")
            raise ArityError(f"{creator.kind} actions require a payload field")
        if has_payload:
            return creator(data[PAYLOAD_FIELD])
        return creator()
