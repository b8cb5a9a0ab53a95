"""
actax.io — schema files and compile settings.

## Responsibilities
- Read schema documents (TOML, JSON, YAML) and resolve payload type expressions.
- Carry compile settings with env > TOML > defaults precedence.

## Public API
- CompileSettings — configuration for loading, validation strictness and codegen.
- load_schema / load_taxonomy — schema file -> ActionSchema / Taxonomy.
- parse_type_expr — payload type expression -> Python annotation.

## Import DAG discipline
- Depends on stdlib, pydantic, PyYAML and actax.core.*.
- MUST NOT import actax.codegen or actax.cli.
"""

from __future__ import annotations

from .config import CompileSettings
from .errors import IoConfigError, IoError, SchemaFileError
from .loader import LoadedSchema, load_schema, load_taxonomy
from .typenames import parse_type_expr

__all__ = [
    "CompileSettings",
    "IoError",
    "IoConfigError",
    "SchemaFileError",
    "LoadedSchema",
    "load_schema",
    "load_taxonomy",
    "parse_type_expr",
]
