"""
Schema file loading for actax.

Purpose
- Read a schema document from TOML, JSON or YAML and build an ActionSchema plus the
  PartitionConfig it asks for.
- Reject duplicate kind names at parse time in every format (TOML does so natively;
  JSON and YAML loaders are hooked to do the same).

Document layout (TOML shown; JSON/YAML use the same keys)::

    name = "UserAction"
    strategy = "sentinel"          # optional: "sentinel" | "explicit"

    [kinds]
    SET_NAME = "str"
    SET_AGE = "int"
    LOG_OUT = "none"               # the no-payload marker (lowercase)
    CLEAR = "None"                 # a payload of type None

For the explicit strategy, list payload-less kinds under ``without_payload``; their
``kinds`` entry may be ``"none"`` or, in JSON/YAML, ``null``.

Strategy precedence: ``force_strategy`` (CLI flag) > document ``strategy`` >
inferred from ``without_payload`` > ``default_strategy`` (settings).
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from actax.core.errors import SchemaError
from actax.core.partition import PartitionConfig, partition_config_from
from actax.core.payload import NO_PAYLOAD, PayloadDescriptor
from actax.core.schema import ActionSchema
from actax.core.taxonomy import Taxonomy

from .config import CompileSettings
from .errors import SchemaFileError
from .typenames import parse_type_expr

__all__ = [
    "SchemaDocument",
    "LoadedSchema",
    "read_document",
    "load_schema",
    "load_taxonomy",
    "NO_PAYLOAD_TOKENS",
]

logger = logging.getLogger(__name__)

NO_PAYLOAD_TOKENS = frozenset({"none", "no_payload"})
_BOTTOM_TOKENS = frozenset({"never", "noreturn"})

_SUFFIXES = {".toml": "toml", ".json": "json", ".yaml": "yaml", ".yml": "yaml"}


class SchemaDocument(BaseModel):
    """
    Parsed schema document.

    Attributes:
        name (str): Schema name (union name in generated code).
        strategy (str | None): "sentinel", "explicit" or None (infer).
        kinds (dict[str, str | None]): Kind -> type expression, "none", or null.
        without_payload (list[str]): Payload-less kinds for the explicit strategy.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = "Action"
    strategy: Literal["sentinel", "explicit"] | None = None
    kinds: dict[str, str | None] = Field(default_factory=dict)
    without_payload: list[str] = Field(default_factory=list)

    @field_validator("strategy", mode="before")
    @classmethod
    def _lower_strategy(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    def descriptor(self, kind: str) -> PayloadDescriptor | Any:
        """Descriptor (or resolved annotation) for one kind entry."""
        expr = self.kinds[kind]
        if expr is None:
            return None
        token = expr.strip()
        if token in NO_PAYLOAD_TOKENS:
            return NO_PAYLOAD
        if token.lower() in _BOTTOM_TOKENS:
            raise SchemaError(
                f"{token!r} for kind {kind!r} is not a payload type; "
                "mark payload-less kinds with 'none'"
            )
        return parse_type_expr(expr)

    def to_schema(self) -> ActionSchema:
        return ActionSchema([(k, self.descriptor(k)) for k in self.kinds], name=self.name)


@dataclass(frozen=True)
class LoadedSchema:
    """Schema read from a file, with the partition strategy it resolved to."""

    schema: ActionSchema
    config: PartitionConfig
    source: Path


def _reject_duplicate_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in pairs:
        if key in out:
            raise SchemaError(f"duplicate key {key!r} in schema document")
        out[key] = value
    return out


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys."""


def _construct_unique_mapping(
    loader: yaml.SafeLoader, node: yaml.MappingNode, deep: bool = False
) -> dict[Any, Any]:
    loader.flatten_mapping(node)
    pairs = [
        (loader.construct_object(k, deep=deep), loader.construct_object(v, deep=deep))
        for k, v in node.value
    ]
    return _reject_duplicate_pairs(pairs)


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping
)


def read_document(path: str | os.PathLike[str]) -> dict[str, Any]:
    """
    Read a raw schema mapping from disk.

    Raises:
        SchemaFileError: If the file is missing, has an unsupported suffix, or does
            not parse to a mapping.
        SchemaError: If the document repeats a key.
    """
    p = Path(path)
    fmt = _SUFFIXES.get(p.suffix.lower())
    if fmt is None:
        raise SchemaFileError(
            f"unsupported schema file {p.name!r}; expected one of {sorted(_SUFFIXES)}"
        )
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaFileError(f"cannot read schema file {p}: {exc}") from exc

    try:
        if fmt == "toml":
            data: Any = tomllib.loads(text)
        elif fmt == "json":
            data = json.loads(text, object_pairs_hook=_reject_duplicate_pairs)
        else:
            data = yaml.load(text, Loader=_UniqueKeyLoader)  # noqa: S506 - SafeLoader subclass
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SchemaFileError(f"cannot parse {p}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SchemaFileError(
            f"{p} must contain a mapping at top level (got {type(data).__name__})"
        )
    logger.debug("read %s schema document %s (%d top-level keys)", fmt, p, len(data))
    return data


def load_schema(
    path: str | os.PathLike[str],
    *,
    default_strategy: str | None = None,
    force_strategy: str | None = None,
) -> LoadedSchema:
    """
    Load a schema file into an ActionSchema and PartitionConfig.

    Args:
        path: Schema file (.toml, .json, .yaml, .yml).
        default_strategy: Strategy used when the document neither names one nor
            lists payload-less kinds.
        force_strategy: Strategy overriding whatever the document says.

    Returns:
        LoadedSchema

    Raises:
        SchemaFileError: On unreadable or malformed documents.
        SchemaError: On duplicate kinds or an invalid strategy/list combination.
    """
    raw = read_document(path)
    try:
        doc = SchemaDocument.model_validate(raw)
    except ValidationError as exc:
        raise SchemaFileError(f"invalid schema document {path}: {exc}") from exc

    strategy = force_strategy or doc.strategy
    if strategy is None and not doc.without_payload:
        strategy = default_strategy
    config = partition_config_from(strategy, doc.without_payload)
    schema = doc.to_schema()
    logger.debug(
        "loaded schema %r from %s: %d kinds, %s strategy",
        schema.name,
        path,
        len(schema),
        config.strategy,
    )
    return LoadedSchema(schema=schema, config=config, source=Path(path))


def load_taxonomy(
    path: str | os.PathLike[str],
    settings: CompileSettings | None = None,
    *,
    force_strategy: str | None = None,
) -> Taxonomy:
    """
    Load a schema file and compile it into a Taxonomy.

    Args:
        path: Schema file.
        settings: Compile settings (defaults: CompileSettings.load()).
        force_strategy: Optional strategy override.

    Returns:
        Taxonomy
    """
    s = settings or CompileSettings.load()
    loaded = load_schema(path, default_strategy=s.strategy, force_strategy=force_strategy)
    return Taxonomy(loaded.schema, loaded.config, strict=s.strict)
