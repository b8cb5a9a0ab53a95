"""
actax — derive action kinds, action shapes and creator signatures from a payload schema.

## Public API
- ActionSchema, NO_PAYLOAD, PayloadDescriptor, PayloadKind — schema description.
- INFER_FROM_SENTINEL, ExplicitWithoutPayload — partition strategies.
- Taxonomy — compiled schema (partition, shapes, creators, action validation).
- derive_action_kinds / derive_partition / derive_shape / derive_creator_signature —
  pure derivation entry points.
- SchemaError, GrammarError, UnknownKindError, ArityError, PayloadTypeError.

## Layers
- actax.core — zero-IO derivation and runtime validation (stdlib + pydantic).
- actax.io — schema files and compile settings.
- actax.codegen — build-time module generation.
- actax.cli — command-line entry point (``actax``).
"""

from __future__ import annotations

from .core.creators import ActionCreator, CreatorSignature, derive_creator
from .core.errors import (
    ArityError,
    GrammarError,
    PayloadTypeError,
    SchemaError,
    UnknownKindError,
)
from .core.partition import (
    INFER_FROM_SENTINEL,
    ExplicitWithoutPayload,
    InferFromSentinel,
    Partition,
    partition_config_from,
)
from .core.payload import NO_PAYLOAD, PayloadDescriptor, PayloadKind
from .core.schema import ActionSchema
from .core.shapes import ActionModel, ActionShape, shape_of
from .core.taxonomy import (
    Taxonomy,
    derive_action_kinds,
    derive_creator_signature,
    derive_partition,
    derive_shape,
)

__all__ = [
    "ActionSchema",
    "NO_PAYLOAD",
    "PayloadDescriptor",
    "PayloadKind",
    "INFER_FROM_SENTINEL",
    "InferFromSentinel",
    "ExplicitWithoutPayload",
    "partition_config_from",
    "Partition",
    "ActionModel",
    "ActionShape",
    "ActionCreator",
    "CreatorSignature",
    "Taxonomy",
    "derive_action_kinds",
    "derive_partition",
    "derive_shape",
    "derive_creator_signature",
    "derive_creator",
    "shape_of",
    "SchemaError",
    "GrammarError",
    "UnknownKindError",
    "ArityError",
    "PayloadTypeError",
]

__version__ = "0.1.0"
