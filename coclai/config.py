"""Client configuration and schema directory discovery."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional, Union

from coclai.compat import CompatibilityGuard
from coclai.errors import CurrentDirError, SchemaDirNotDirectory, SchemaDirNotFound
from coclai.hooks import RuntimeHookConfig

DEFAULT_SCHEMA_RELATIVE_DIR = "SCHEMAS/app-server/active"
SCHEMA_DIR_ENV = "APP_SERVER_SCHEMA_DIR"

PathLike = Union[str, os.PathLike]


def _package_schema_dir() -> Path:
    return Path(__file__).resolve().parent.parent / DEFAULT_SCHEMA_RELATIVE_DIR


@dataclass(frozen=True)
class ClientConfig:
    """Settings used to connect a client; builder methods return updated copies."""

    cli_bin: Path = Path("codex")
    schema_dir: Optional[Path] = None
    compatibility_guard: CompatibilityGuard = field(default_factory=CompatibilityGuard)
    hooks: RuntimeHookConfig = field(default_factory=RuntimeHookConfig)

    def with_cli_bin(self, cli_bin: PathLike) -> "ClientConfig":
        return replace(self, cli_bin=Path(cli_bin))

    def with_schema_dir(self, schema_dir: PathLike) -> "ClientConfig":
        return replace(self, schema_dir=Path(schema_dir))

    def with_compatibility_guard(self, guard: CompatibilityGuard) -> "ClientConfig":
        return replace(self, compatibility_guard=guard)

    def without_compatibility_guard(self) -> "ClientConfig":
        """Disable compatibility checks at connect time."""
        return replace(
            self,
            compatibility_guard=CompatibilityGuard(
                require_initialize_user_agent=False, min_codex_version=None
            ),
        )

    def with_hooks(self, hooks: RuntimeHookConfig) -> "ClientConfig":
        return replace(self, hooks=hooks)

    def with_pre_hook(self, hook: Any) -> "ClientConfig":
        return replace(self, hooks=self.hooks.with_pre_hook(hook))

    def with_post_hook(self, hook: Any) -> "ClientConfig":
        return replace(self, hooks=self.hooks.with_post_hook(hook))

    def resolve_schema_dir(self) -> Path:
        """Resolve the schema directory: explicit setting, then environment, then defaults."""
        if self.schema_dir is not None:
            return validate_schema_dir(self.schema_dir)

        env_value = os.environ.get(SCHEMA_DIR_ENV, "").strip()
        if env_value:
            return validate_schema_dir(Path(env_value))

        try:
            cwd = Path.cwd()
        except OSError as exc:
            raise CurrentDirError(str(exc)) from exc
        return resolve_default_schema_dir(cwd, _package_schema_dir())


def resolve_default_schema_dir(cwd: PathLike, package_default: PathLike) -> Path:
    """Prefer the cwd-relative schema directory, then the package one."""
    cwd_default = Path(cwd) / DEFAULT_SCHEMA_RELATIVE_DIR
    package_default = Path(package_default)
    if cwd_default.exists():
        return validate_schema_dir(cwd_default)
    if package_default != cwd_default and package_default.exists():
        return validate_schema_dir(package_default)
    return validate_schema_dir(cwd_default)


def validate_schema_dir(path: PathLike) -> Path:
    """Return the path if it is an existing directory, else raise."""
    path = Path(path)
    if not path.exists():
        raise SchemaDirNotFound(str(path))
    if not path.is_dir():
        raise SchemaDirNotDirectory(str(path))
    return path