"""
Creator Deriver: exact call signatures and validated creator callables.

A payload-less kind gets a zero-argument creator; a payload-bearing kind gets a
creator taking exactly one ``payload`` argument of the declared type. Both return
an instance of the kind's action model.

Enforcement at each call site:
- argument count (and keyword names) is checked against the creator's
  ``inspect.Signature``; mismatches raise ArityError;
- the payload is validated by the kind's pydantic model; failures raise
  PayloadTypeError (with the pydantic ValidationError as ``__cause__``).

Examples:
    >>> from actax.core.schema import ActionSchema
    >>> from actax.core.payload import NO_PAYLOAD
    >>> from actax.core.partition import INFER_FROM_SENTINEL
    >>> from actax.core.creators import derive_creator, derive_creator_signature
    >>> schema = ActionSchema({"SET_NAME": str, "LOG_OUT": NO_PAYLOAD})
    >>> derive_creator_signature(schema, INFER_FROM_SENTINEL, "SET_NAME").render()
    '(payload: str) -> SetName'
    >>> derive_creator(schema, INFER_FROM_SENTINEL, "SET_NAME")("Alice").payload
    'Alice'
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .errors import ArityError, PayloadTypeError
from .grammar import function_name, is_identifier_kind
from .partition import PartitionConfig, derive_partition
from .payload import payload_token
from .schema import ActionSchema, SchemaInput
from .shapes import (
    DISCRIMINATOR_FIELD,
    PAYLOAD_FIELD,
    ActionModel,
    ActionShape,
    shape_from_partition,
)

__all__ = [
    "CreatorSignature",
    "ActionCreator",
    "derive_creator_signature",
    "derive_creator",
]


@dataclass(frozen=True)
class CreatorSignature:
    """
    Required call signature of one kind's creator.

    Attributes:
        kind (str): Action kind.
        parameters (tuple[tuple[str, Any], ...]): ``(name, annotation)`` pairs;
            empty for payload-less kinds, exactly ``(("payload", P),)`` otherwise.
        returns (ActionShape): Shape of the produced action.
    """

    kind: str
    parameters: tuple[tuple[str, Any], ...]
    returns: ActionShape

    @classmethod
    def for_shape(cls, shape: ActionShape) -> CreatorSignature:
        params: tuple[tuple[str, Any], ...] = ()
        if shape.has_payload:
            params = ((PAYLOAD_FIELD, shape.payload_type),)
        return cls(kind=shape.kind, parameters=params, returns=shape)

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def to_inspect(self) -> inspect.Signature:
        """Equivalent ``inspect.Signature`` (return annotation is the action model)."""
        return inspect.Signature(
            [
                inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=tp)
                for name, tp in self.parameters
            ],
            return_annotation=self.returns.model,
        )

    def render(self) -> str:
        """Text form, e.g. ``(payload: int) -> SetAge`` or ``() -> LogOut``."""
        args = ", ".join(
            f"{name}: {payload_token(self.returns.payload)}" for name, _ in self.parameters
        )
        return f"({args}) -> {self.returns.model.__name__}"


class ActionCreator:
    """
    Validated creator for one action kind.

    Args:
        shape (ActionShape): Shape of the actions this creator produces.

    Examples:
        >>> from actax.core.payload import NO_PAYLOAD
        >>> from actax.core.shapes import ActionShape
        >>> log_out = ActionCreator(ActionShape("LOG_OUT", NO_PAYLOAD))
        >>> log_out().type
        'LOG_OUT'
    """

    def __init__(self, shape: ActionShape) -> None:
        self.shape = shape
        self.signature = CreatorSignature.for_shape(shape)
        self.__signature__ = self.signature.to_inspect()
        self.__name__ = function_name(shape.kind) if is_identifier_kind(shape.kind) else "create"
        self.__qualname__ = self.__name__

    @property
    def kind(self) -> str:
        return self.shape.kind

    @property
    def arity(self) -> int:
        return self.signature.arity

    def __repr__(self) -> str:
        return f"<ActionCreator {self.kind!r} {self.signature.render()}>"

    def __call__(self, *args: Any, **kwargs: Any) -> ActionModel:
        try:
            bound = self.__signature__.bind(*args, **kwargs)
        except TypeError as exc:
            given = len(args) + len(kwargs)
            expected = "no payload" if not self.arity else "exactly one payload argument"
            raise ArityError(
                f"{self.kind} creator takes {expected} (got {given} argument"
                f"{'' if given == 1 else 's'})"
            ) from exc

        values: dict[str, Any] = {DISCRIMINATOR_FIELD: self.kind}
        if self.shape.has_payload:
            values[PAYLOAD_FIELD] = bound.arguments[PAYLOAD_FIELD]
        try:
            return self.shape.model(**values)
        except ValidationError as exc:
            raise PayloadTypeError(
                f"{self.kind} payload must be {payload_token(self.shape.payload)} "
                f"(got {type(values.get(PAYLOAD_FIELD)).__name__}): "
                f"{exc.errors()[0]['msg']}"
            ) from exc


def derive_creator_signature(
    schema: ActionSchema | SchemaInput,
    config: PartitionConfig,
    kind: str,
    *,
    strict: bool = True,
) -> CreatorSignature:
    """
    Derive the required creator signature for one kind.

    Raises:
        SchemaError: If the schema does not partition under ``config``.
        UnknownKindError: If kind is not in the schema.
    """
    shape = shape_from_partition(derive_partition(schema, config), kind, strict=strict)
    return CreatorSignature.for_shape(shape)


def derive_creator(
    schema: ActionSchema | SchemaInput,
    config: PartitionConfig,
    kind: str,
    *,
    strict: bool = True,
) -> ActionCreator:
    """Derive a validated creator callable for one kind."""
    partition = derive_partition(schema, config)
    return ActionCreator(shape_from_partition(partition, kind, strict=strict))
