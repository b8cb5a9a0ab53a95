"""
Shape Deriver: the structural definition of each action value.

For a payload-bearing kind ``T`` the shape is ``{type: Literal[T], payload: P}``;
for a payload-less kind it is ``{type: Literal[T]}`` with no payload field at
all. Each shape is backed by a frozen pydantic v2 model with ``extra="forbid"``,
so a payload on a payload-less action and a missing payload on a payload-bearing
one are both rejected at construction.

Notes:
    - Models are built once per ``(kind, descriptor, strict)`` and cached, so
      re-deriving a shape for an unchanged schema returns the same model class.
    - Field names are fixed: DISCRIMINATOR_FIELD and PAYLOAD_FIELD.

Examples:
    >>> from actax.core.schema import ActionSchema
    >>> from actax.core.payload import NO_PAYLOAD
    >>> from actax.core.shapes import derive_shape
    >>> from actax.core.partition import INFER_FROM_SENTINEL
    >>> schema = ActionSchema({"SET_NAME": str, "LOG_OUT": NO_PAYLOAD})
    >>> list(derive_shape(schema, INFER_FROM_SENTINEL, "LOG_OUT").fields)
    ['type']
    >>> list(derive_shape(schema, INFER_FROM_SENTINEL, "SET_NAME").fields)
    ['type', 'payload']
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Final, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    PydanticUndefinedAnnotation,
    PydanticUserError,
    create_model,
)

from .errors import SchemaError
from .grammar import class_name, is_identifier_kind
from .partition import Partition, PartitionConfig, derive_partition
from .payload import PayloadDescriptor, payload_token
from .schema import ActionSchema, SchemaInput

__all__ = [
    "DISCRIMINATOR_FIELD",
    "PAYLOAD_FIELD",
    "ActionModel",
    "LaxActionModel",
    "ActionShape",
    "build_action_model",
    "shape_from_partition",
    "derive_shape",
    "shape_of",
]

DISCRIMINATOR_FIELD: Final[str] = "type"
PAYLOAD_FIELD: Final[str] = "payload"


class ActionModel(BaseModel):
    """Base class of every generated action model (strict payload validation)."""

    model_config = ConfigDict(
        extra="forbid", frozen=True, strict=True, arbitrary_types_allowed=True
    )


class LaxActionModel(ActionModel):
    """Action model base that lets pydantic coerce payloads (e.g. "30" -> 30)."""

    model_config = ConfigDict(strict=False)


# Model class -> shape it was built for; populated by build_action_model only.
_SHAPE_BY_MODEL: dict[type[ActionModel], ActionShape] = {}


@dataclass(frozen=True)
class ActionShape:
    """
    Shape of the action value for one kind.

    Attributes:
        kind (str): Discriminator value.
        payload (PayloadDescriptor): Resolved descriptor (NONE or VALUE).
        strict (bool): Whether the backing model validates payloads strictly.

    Notes:
        Equality is by kind and descriptor; ``strict`` only affects validation.
    """

    kind: str
    payload: PayloadDescriptor
    strict: bool = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionShape):
            return NotImplemented
        return self.kind == other.kind and self.payload == other.payload

    def __hash__(self) -> int:
        return hash((self.kind, self.payload))

    @property
    def has_payload(self) -> bool:
        return self.payload.has_payload

    @property
    def payload_type(self) -> Any:
        """Payload annotation, or None for payload-less kinds."""
        return self.payload.type

    @property
    def fields(self) -> Mapping[str, Any]:
        """Ordered ``field -> annotation``; the payload field is absent when payload-less."""
        out: dict[str, Any] = {DISCRIMINATOR_FIELD: Literal[self.kind]}  # type: ignore[valid-type]
        if self.has_payload:
            out[PAYLOAD_FIELD] = self.payload.type
        return out

    @property
    def model(self) -> type[ActionModel]:
        return build_action_model(self.kind, self.payload, self.strict)

    def describe(self) -> str:
        """Compact text form, e.g. ``{type: 'SET_NAME', payload: str}``."""
        parts = [f"{DISCRIMINATOR_FIELD}: {self.kind!r}"]
        if self.has_payload:
            parts.append(f"{PAYLOAD_FIELD}: {payload_token(self.payload)}")
        return "{" + ", ".join(parts) + "}"


def _model_name(kind: str) -> str:
    if is_identifier_kind(kind):
        return class_name(kind)
    # Non-identifier kinds ("user/logout") still get a model; the name is cosmetic.
    return "Action_" + "".join(ch if ch.isalnum() else "_" for ch in kind)


@lru_cache(maxsize=None)
def build_action_model(
    kind: str, descriptor: PayloadDescriptor, strict: bool = True
) -> type[ActionModel]:
    """
    Build (once) the pydantic model for one action shape.

    Args:
        kind (str): Discriminator value.
        descriptor (PayloadDescriptor): Resolved descriptor (NONE or VALUE).
        strict (bool): Validate payloads in pydantic strict mode (no coercion).

    Returns:
        type[ActionModel]: Frozen model with ``type`` and, iff payload-bearing, ``payload``.

    Raises:
        SchemaError: If the payload annotation cannot be resolved or has no pydantic
            schema (e.g. an undefined forward reference).
    """
    fields: dict[str, Any] = {DISCRIMINATOR_FIELD: (Literal[kind], ...)}  # type: ignore[valid-type]
    if descriptor.has_payload:
        fields[PAYLOAD_FIELD] = (descriptor.type, ...)
    try:
        model = create_model(  # type: ignore[call-overload]
            _model_name(kind),
            __base__=ActionModel if strict else LaxActionModel,
            __module__=__name__,
            **fields,
        )
        model.model_rebuild(raise_errors=True)
    except (PydanticUserError, PydanticUndefinedAnnotation) as exc:
        raise SchemaError(f"cannot build the action model for {kind!r}: {exc}") from exc
    _SHAPE_BY_MODEL[model] = ActionShape(kind, descriptor, strict)
    return model


def shape_from_partition(partition: Partition, kind: str, *, strict: bool = True) -> ActionShape:
    """
    Derive the shape of ``kind`` from an existing partition.

    Raises:
        UnknownKindError: If kind is not a member of the partition.
    """
    return ActionShape(kind, partition.descriptor(kind), strict)


def derive_shape(
    schema: ActionSchema | SchemaInput,
    config: PartitionConfig,
    kind: str,
    *,
    strict: bool = True,
) -> ActionShape:
    """
    Derive the action-value shape for one kind of a schema.

    Args:
        schema (ActionSchema | SchemaInput): Source schema, normalized when raw.
        config (PartitionConfig): Partition strategy.
        kind (str): Requested kind.
        strict (bool): Strict payload validation for the backing model.

    Returns:
        ActionShape: The kind's shape.

    Raises:
        SchemaError: If the schema does not partition under ``config``.
        UnknownKindError: If kind is not in the schema.
    """
    return shape_from_partition(derive_partition(schema, config), kind, strict=strict)


def shape_of(action: ActionModel) -> ActionShape:
    """
    Recover the ActionShape of a constructed action value.

    Args:
        action (ActionModel): An instance of a model built by build_action_model.

    Returns:
        ActionShape: The shape the action's model was built for.

    Raises:
        TypeError: If action was not produced by an actax action model.
    """
    try:
        return _SHAPE_BY_MODEL[type(action)]
    except (KeyError, TypeError) as exc:
        raise TypeError(f"{action!r} is not an action value built by actax") from exc
