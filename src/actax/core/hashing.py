"""
Canonical JSON serialization and schema fingerprinting.

Provides a single canonical JSON policy and a SHA-256 fingerprint of an
ActionSchema, so generated modules can be stamped with the schema they came from
and regenerated only when it changes. This module is zero-IO.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - Schema order is significant for the fingerprint (it drives generated
      code order); descriptor order inside a kind is not applicable.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from .payload import payload_token
from .schema import ActionSchema

__all__ = [
    "json_dumps_canonical",
    "schema_fingerprint",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_hexdigest(s: str) -> str:
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def schema_fingerprint(schema: ActionSchema) -> str:
    """
    Compute a stable fingerprint for a schema.

    Args:
        schema (ActionSchema): Schema to fingerprint.

    Returns:
        str: SHA-256 hex digest over ``[name, [[kind, payload_token], ...]]``.

    Examples:
        >>> from actax.core.schema import ActionSchema
        >>> a = ActionSchema({"SET_NAME": str})
        >>> schema_fingerprint(a) == schema_fingerprint(ActionSchema({"SET_NAME": str}))
        True
    """
    body = [schema.name, [[kind, payload_token(desc)] for kind, desc in schema.items()]]
    return _sha256_hexdigest(json_dumps_canonical(body))
