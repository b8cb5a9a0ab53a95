"""
Custom exceptions for the actax.io module.

Purpose
- Provide IO-layer specific error types for schema files and settings.
- Keep actax.core as the source of truth for schema/derivation errors (see actax.core.errors).

Source of truth and boundaries
- actax.core.errors.SchemaError (and subclasses) are raised by core derivations, also
  when the schema came from a file.
- actax.io raises Io* errors for file and configuration concerns:
  - IoConfigError: invalid or unsupported settings.
  - SchemaFileError: unreadable file, unsupported format, malformed document, or
    an unresolvable payload type expression.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

__all__ = ["IoError", "IoConfigError", "SchemaFileError"]


class IoError(Exception):
    """
    Base class for IO-related errors in actax.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from actax.core errors.
    """


class IoConfigError(IoError):
    """
    Raised when compile settings are invalid or unsupported.

    Examples:
        - Unknown partition strategy in ACTAX_STRATEGY
        - Unreadable explicit config file
    """


class SchemaFileError(IoError):
    """
    Raised when a schema file cannot be turned into an ActionSchema.

    Notes:
        Core violations found after parsing (duplicate kinds, conflicting
        classification) are reported as actax.core.errors.SchemaError instead.
    """
