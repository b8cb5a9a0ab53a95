"""
Render a Taxonomy as a standalone, statically typed Python module.

The generated module moves the derivation to build time so a type checker
(mypy, pyright) enforces the same contract as the runtime layer:

- ``<Union>Type``: ``Literal`` of every kind;
- optional ``KIND: Final = "KIND"`` constants;
- one ``TypedDict`` per kind, with a ``payload`` key iff the kind carries one;
- ``<Union>``: the union of all action TypedDicts;
- one creator function per kind, taking no argument or exactly ``payload: P``.

Output is deterministic for an unchanged schema and settings; the header records
the schema fingerprint so stale modules can be detected (see read_fingerprint).
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import types
import typing
from pathlib import Path
from typing import Any, Final

from actax.core.errors import GrammarError, SchemaError
from actax.core.grammar import class_name, constant_name, ensure_unique_identifiers, function_name
from actax.core.shapes import DISCRIMINATOR_FIELD, PAYLOAD_FIELD
from actax.core.taxonomy import Taxonomy
from actax.io.config import CompileSettings

__all__ = [
    "render_annotation",
    "render_module",
    "write_module",
    "read_fingerprint",
]

logger = logging.getLogger(__name__)

_HEADER_RE: Final[re.Pattern[str]] = re.compile(
    r"^# Generated by actax from schema .* \(sha256 ([0-9a-f]{64})\)"
)

Imports = dict[str, set[str]]

# Names the generated module may import from typing.
_TYPING_NAMES: Final[frozenset[str]] = frozenset({"Any", "Final", "Literal", "Never", "TypedDict"})


def _add_import(imports: Imports, module: str, name: str) -> None:
    imports.setdefault(module, set()).add(name)


def _render_class(tp: type, imports: Imports) -> str:
    if tp is type(None):
        return "None"
    if tp.__module__ == "builtins":
        return tp.__qualname__
    if "<locals>" in tp.__qualname__ or tp.__module__ == "__main__":
        raise SchemaError(
            f"payload type {tp!r} is not importable; define it at module level in an "
            "importable module"
        )
    top = tp.__qualname__.split(".", 1)[0]
    _add_import(imports, tp.__module__, top)
    return tp.__qualname__


def render_annotation(tp: Any, imports: Imports) -> str:
    """
    Render a payload annotation as source text, collecting required imports.

    Args:
        tp (Any): Annotation (class, generic alias, union, Literal, Any, ...).
        imports (dict[str, set[str]]): ``module -> names`` accumulator.

    Returns:
        str: Source form of the annotation.

    Raises:
        SchemaError: If the annotation cannot be expressed in generated code.

    Examples:
        >>> imports = {}
        >>> render_annotation(dict[str, list[int]], imports)
        'dict[str, list[int]]'
        >>> render_annotation(typing.Optional[str], imports)
        'str | None'
    """
    if tp is None:
        return "None"
    if tp is Ellipsis:
        return "..."
    if tp is typing.Any:
        _add_import(imports, "typing", "Any")
        return "Any"
    if isinstance(tp, list):
        return "[" + ", ".join(render_annotation(a, imports) for a in tp) + "]"

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is typing.Literal:
        _add_import(imports, "typing", "Literal")
        values = (json.dumps(a) if isinstance(a, str) else repr(a) for a in args)
        return "Literal[" + ", ".join(values) + "]"
    if origin is typing.Union or origin is types.UnionType:
        return " | ".join(render_annotation(a, imports) for a in args)
    if origin is typing.Annotated:
        return render_annotation(args[0], imports)
    if origin is not None:
        base = _render_class(origin, imports) if isinstance(origin, type) else None
        if base is None:
            raise SchemaError(f"cannot render payload annotation {tp!r}")
        if not args:
            return base
        return base + "[" + ", ".join(render_annotation(a, imports) for a in args) + "]"
    if isinstance(tp, type):
        return _render_class(tp, imports)
    raise SchemaError(f"cannot render payload annotation {tp!r}")


def _render_imports(imports: Imports) -> list[str]:
    lines: list[str] = []
    typing_names = imports.pop("typing", set())
    lines.append(f"from typing import {', '.join(sorted(typing_names))}")
    third = sorted(imports)
    if third:
        lines.append("")
        for module in third:
            lines.append(f"from {module} import {', '.join(sorted(imports[module]))}")
    return lines


def _check_names(
    taxonomy: Taxonomy, union: str, imported: set[str], settings: CompileSettings
) -> None:
    ensure_unique_identifiers(taxonomy.kinds)
    taken: dict[str, str] = {union: "action union", union + "Type": "kind alias"}
    for kind in taxonomy.kinds:
        names = [
            (class_name(kind), f"{kind} action class"),
            (function_name(kind), f"{kind} creator"),
        ]
        if settings.emit_constants:
            names.append((constant_name(kind), f"{kind} constant"))
        for ident, what in names:
            if ident in taken or ident in imported:
                clash = taken.get(ident, "an imported payload type")
                hint = ""
                if what.endswith("constant") or clash.endswith("constant"):
                    # Single-word kinds ("A", "X1") share class and constant names.
                    hint = "; disable kind constants (emit_constants = false or --no-constants)"
                raise GrammarError(
                    f"generated name {ident!r} ({what}) collides with {clash}{hint}"
                )
            taken[ident] = what


def render_module(taxonomy: Taxonomy, settings: CompileSettings | None = None) -> str:
    """
    Render the typed module source for a taxonomy.

    Args:
        taxonomy (Taxonomy): Compiled taxonomy.
        settings (CompileSettings | None): Union name and constant emission.

    Returns:
        str: Module source text ending in a newline.

    Raises:
        GrammarError: If a kind cannot be rendered as identifiers, or generated
            names collide with each other or with imported payload types.
            Single-word kinds such as ``"A"`` or ``"X1"`` render the same class and
            constant name, so they need ``emit_constants=False``.
        SchemaError: If a payload annotation cannot be rendered.
    """
    s = settings or CompileSettings()
    union = s.union_name or taxonomy.name
    if not union.isidentifier():
        raise GrammarError(f"union name {union!r} is not a Python identifier")
    kinds = taxonomy.kinds

    imports: Imports = {"typing": {"Final", "TypedDict"} if s.emit_constants else {"TypedDict"}}
    payload_src: dict[str, str] = {}
    for kind in taxonomy.partition.with_payload:
        payload_src[kind] = render_annotation(taxonomy.shape(kind).payload_type, imports)
    imported = {name for names in imports.values() for name in names} | _TYPING_NAMES
    _check_names(taxonomy, union, imported, s)

    if kinds:
        _add_import(imports, "typing", "Literal")
        kind_alias = "Literal[" + ", ".join(json.dumps(k) for k in kinds) + "]"
        union_expr = " | ".join(class_name(k) for k in kinds)
    else:
        _add_import(imports, "typing", "Never")
        kind_alias = union_expr = "Never"

    p = taxonomy.partition
    out: list[str] = [
        f"# Generated by actax from schema {taxonomy.name!r} (sha256 {taxonomy.fingerprint})",
        "# Do not edit by hand; regenerate with `actax generate`.",
        f'"""Action taxonomy {taxonomy.name!r}: {len(kinds)} kinds '
        f'({len(p.with_payload)} with payload, {len(p.without_payload)} without)."""',
        "",
        "from __future__ import annotations",
        "",
        *_render_imports(imports),
        "",
        "__all__ = [",
        f'    "{union}Type",',
        f'    "{union}",',
        *(f'    "{constant_name(k)}",' for k in kinds if s.emit_constants),
        *(f'    "{class_name(k)}",' for k in kinds),
        *(f'    "{function_name(k)}",' for k in kinds),
        "]",
        "",
        f"{union}Type = {kind_alias}",
        "",
    ]
    if s.emit_constants and kinds:
        out.extend(f"{constant_name(k)}: Final = {json.dumps(k)}" for k in kinds)
        out.append("")

    for kind in kinds:
        out += ["", f"class {class_name(kind)}(TypedDict):"]
        out.append(f"    {DISCRIMINATOR_FIELD}: Literal[{json.dumps(kind)}]")
        if kind in payload_src:
            out.append(f"    {PAYLOAD_FIELD}: {payload_src[kind]}")
        out.append("")

    out += ["", f"{union} = {union_expr}", ""]

    for kind in kinds:
        cls = class_name(kind)
        if kind in payload_src:
            out += [
                "",
                f"def {function_name(kind)}({PAYLOAD_FIELD}: {payload_src[kind]}) -> {cls}:",
                f'    return {{"{DISCRIMINATOR_FIELD}": {json.dumps(kind)}, '
                f'"{PAYLOAD_FIELD}": {PAYLOAD_FIELD}}}',
                "",
            ]
        else:
            out += [
                "",
                f"def {function_name(kind)}() -> {cls}:",
                f'    return {{"{DISCRIMINATOR_FIELD}": {json.dumps(kind)}}}',
                "",
            ]

    logger.debug("rendered module for %r: %d kinds", taxonomy.name, len(kinds))
    return "\n".join(out).rstrip("\n") + "\n"


def read_fingerprint(path: str | os.PathLike[str]) -> str | None:
    """Schema fingerprint recorded in a generated module's header, or None."""
    p = Path(path)
    if not p.exists():
        return None
    with p.open(encoding="utf-8") as fh:
        match = _HEADER_RE.match(fh.readline())
    return match.group(1) if match else None


def write_module(
    taxonomy: Taxonomy,
    path: str | os.PathLike[str] | None = None,
    settings: CompileSettings | None = None,
) -> Path:
    """
    Render and atomically write the typed module (tmp file -> fsync -> os.replace).

    Args:
        taxonomy (Taxonomy): Compiled taxonomy.
        path: Destination; defaults to ``settings.out_path``.
        settings (CompileSettings | None): Rendering settings.

    Returns:
        Path: The written file.
    """
    s = settings or CompileSettings()
    dest = Path(path if path is not None else s.out_path)
    source = render_module(taxonomy, s)
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(source)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, dest)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("wrote %s (%d kinds)", dest, len(taxonomy))
    return dest
