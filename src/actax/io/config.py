"""
Configuration for compiling schema files.

Defines CompileSettings, a frozen dataclass carrying the defaults used by the loader,
the code generator and the CLI.

Precedence
- environment (ACTAX_*) > TOML (./actax.toml or [tool.actax] in ./pyproject.toml) > defaults
- A schema document's own ``strategy`` still wins over ``CompileSettings.strategy``;
  the CLI ``--strategy`` flag wins over both.

Import DAG discipline
- Depends only on stdlib and actax.io.errors.
- Does not import actax.core derivations, the loader, codegen, or the CLI.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from .errors import IoConfigError

__all__ = ["CompileSettings", "STRATEGIES"]

Strategy = Literal["sentinel", "explicit"]
STRATEGIES: frozenset[str] = frozenset({"sentinel", "explicit"})


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class CompileSettings:
    """
    Runtime settings for loading and compiling schemas.

    Attributes:
        strategy (Literal["sentinel","explicit"]): Partition strategy used when a
            schema document does not choose one.
        strict (bool): Validate payloads without coercion (pydantic strict mode).
        out_path (str): Default output path of ``actax generate``.
        union_name (str | None): Name of the generated action union; None uses
            the schema name.
        emit_constants (bool): Emit one ``KIND = "KIND"`` constant per kind.

    Examples:
        >>> from actax.io.config import CompileSettings
        >>> CompileSettings(strategy="explicit").strategy
        'explicit'
    """

    strategy: Strategy = "sentinel"
    strict: bool = True
    out_path: str = "actions_generated.py"
    union_name: str | None = None
    emit_constants: bool = True

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise IoConfigError(
                f"strategy must be one of {sorted(STRATEGIES)} (got {self.strategy!r})"
            )

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: CompileSettings, cfg: dict[str, Any] | None) -> CompileSettings:
        """Apply a loose config mapping onto CompileSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "strategy" in cfg:
            strategy = str(cfg["strategy"]).strip().lower()
            if strategy not in STRATEGIES:
                raise IoConfigError(
                    f"strategy must be one of {sorted(STRATEGIES)} (got {cfg['strategy']!r})"
                )
            s = replace(s, strategy=strategy)  # type: ignore[arg-type]

        if "strict" in cfg:
            s = replace(s, strict=_bool(cfg["strict"]))

        if "out_path" in cfg and isinstance(cfg["out_path"], str) and cfg["out_path"].strip():
            s = replace(s, out_path=cfg["out_path"].strip())

        if "union_name" in cfg and isinstance(cfg["union_name"], str):
            s = replace(s, union_name=cfg["union_name"].strip() or None)

        if "emit_constants" in cfg:
            s = replace(s, emit_constants=_bool(cfg["emit_constants"]))

        return s

    @classmethod
    def from_env(
        cls, base: CompileSettings | None = None, prefix: str = "ACTAX_"
    ) -> CompileSettings:
        """
        Build CompileSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - ACTAX_STRATEGY ("sentinel" | "explicit")
            - ACTAX_STRICT (1/0/true/false/yes/no/on/off)
            - ACTAX_OUT_PATH
            - ACTAX_UNION_NAME
            - ACTAX_EMIT_CONSTANTS (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("strategy", "strict", "out_path", "union_name", "emit_constants"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> CompileSettings:
        """
        Build CompileSettings from a TOML file.

        Search order when `path` is None:
            1) ./actax.toml (with either a [compile] table or direct keys)
            2) ./pyproject.toml under [tool.actax]

        Returns defaults if no file is present.

        Raises:
            IoConfigError: If an explicitly given path is missing or unparsable.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise IoConfigError(f"config file not found: {p}")
            cand.append(p)
        else:
            cand.append(Path.cwd() / "actax.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise IoConfigError(f"cannot read config {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("actax") if isinstance(tool, dict) else None
            elif isinstance(data.get("compile"), dict):
                cfg = data["compile"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> CompileSettings:
        """
        Load CompileSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (actax.toml, pyproject.toml).

        Returns:
            CompileSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
