from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from actax.codegen import read_fingerprint, write_module
from actax.core.errors import SchemaError, UnknownKindError
from actax.core.payload import payload_token
from actax.core.taxonomy import Taxonomy
from actax.io.config import CompileSettings
from actax.io.errors import IoError
from actax.io.loader import load_taxonomy
from actax.logs import configure_logging


def _common_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("schema", type=str, help="Schema file (.toml, .json, .yaml, .yml).")
    p.add_argument(
        "--strategy",
        choices=("sentinel", "explicit"),
        default=None,
        help="Override the partition strategy of the schema file.",
    )
    p.add_argument("--config", type=str, default=None, help="Explicit actax TOML config file.")
    p.add_argument(
        "--no-env",
        action="store_true",
        help="Do not auto-load .env (by default, .env is loaded if present).",
    )
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        default="WARNING",
        help="Log level for actax loggers.",
    )
    p.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines.")
    return p


def _prepare(args: argparse.Namespace) -> tuple[CompileSettings, Taxonomy]:
    """Configure logging/env, load settings (env > TOML > defaults) and compile the schema."""
    configure_logging(args.log_level, json_output=args.log_json)
    if not args.no_env:
        # Does not override variables already set in the shell.
        load_dotenv(Path(".env"), override=False)
    settings = CompileSettings.load(args.config)
    tax = load_taxonomy(args.schema, settings, force_strategy=args.strategy)
    return settings, tax


def _cmd_kinds(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="actax kinds", parents=[_common_parser()], description="List action kinds."
    )
    args = p.parse_args(argv)
    _, tax = _prepare(args)
    for kind in tax.kinds:
        print(kind)
    return 0


def _cmd_show(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="actax show",
        parents=[_common_parser()],
        description="Show the partition, shapes and creator signatures of a schema.",
    )
    p.add_argument("--kind", type=str, default=None, help="Show only this kind.")
    args = p.parse_args(argv)
    _, tax = _prepare(args)

    kinds = [tax.partition.require(args.kind)] if args.kind else list(tax.kinds)
    if not args.kind:
        print(f"schema: {tax.name} ({tax.config.strategy} strategy)")
        print(f"with payload: {', '.join(tax.partition.with_payload) or '-'}")
        print(f"without payload: {', '.join(tax.partition.without_payload) or '-'}")
    for kind in kinds:
        shape = tax.shape(kind)
        print(f"{kind}: {payload_token(shape.payload)}")
        print(f"  shape:   {shape.describe()}")
        print(f"  creator: {tax.signature(kind).render()}")
    return 0


def _cmd_check(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="actax check",
        parents=[_common_parser()],
        description="Validate a schema; optionally verify a generated module is up to date.",
    )
    p.add_argument(
        "--generated",
        type=str,
        default=None,
        help="Generated module whose recorded fingerprint must match the schema.",
    )
    args = p.parse_args(argv)
    _, tax = _prepare(args)

    print(
        f"[ok] {args.schema}: {len(tax)} kinds "
        f"({len(tax.partition.with_payload)} with payload, "
        f"{len(tax.partition.without_payload)} without)"
    )
    if args.generated:
        recorded = read_fingerprint(args.generated)
        if recorded != tax.fingerprint:
            print(
                f"[WARN] {args.generated} is stale or missing; run `actax generate {args.schema}`",
                file=sys.stderr,
            )
            return 1
        print(f"[ok] {args.generated} is up to date")
    return 0


def _cmd_generate(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="actax generate",
        parents=[_common_parser()],
        description="Generate a typed Python module (TypedDict shapes + creators) from a schema.",
    )
    p.add_argument(
        "--out", type=str, default=None, help="Output path (default: settings.out_path)."
    )
    p.add_argument("--union-name", type=str, default=None, help="Name of the action union.")
    p.add_argument("--no-constants", action="store_true", help="Do not emit kind constants.")
    args = p.parse_args(argv)
    settings, tax = _prepare(args)

    if args.union_name:
        settings = replace(settings, union_name=args.union_name)
    if args.no_constants:
        settings = replace(settings, emit_constants=False)
    dest = write_module(tax, args.out, settings)
    print(f"[INFO] Wrote {len(tax)} action kinds to {dest}")
    return 0


_COMMANDS = {
    "kinds": _cmd_kinds,
    "show": _cmd_show,
    "check": _cmd_check,
    "generate": _cmd_generate,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="actax",
        description="Derive action kinds, shapes and creator signatures from a payload schema.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("kinds", help="List action kinds.")
    sub.add_parser("show", help="Show partition, shapes and creator signatures.")
    sub.add_parser("check", help="Validate a schema (and a generated module).")
    sub.add_parser("generate", help="Generate a typed module.")
    return p


def run(argv: list[str]) -> int:
    """Dispatch a command and map actax errors to exit code 2."""
    if not argv:
        build_argparser().print_help()
        return 0
    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return 2
    try:
        return handler(rest)
    except (SchemaError, UnknownKindError, IoError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    raise SystemExit(run(argv))


if __name__ == "__main__":
    main()
