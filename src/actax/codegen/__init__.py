"""
actax.codegen — build-time rendering of typed action modules.

## Public API
- render_module — Taxonomy -> Python source (Literal kinds, TypedDict shapes, typed creators).
- write_module — atomic write of the rendered module.
- read_fingerprint — schema fingerprint recorded in a generated module header.

## Import DAG discipline
- Depends on stdlib, actax.core.* and actax.io.config.
"""

from __future__ import annotations

from .render import read_fingerprint, render_annotation, render_module, write_module

__all__ = [
    "render_annotation",
    "render_module",
    "write_module",
    "read_fingerprint",
]
