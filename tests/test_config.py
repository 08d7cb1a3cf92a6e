from pathlib import Path

import pytest

from coclai.compat import CompatibilityGuard, SemVerTriplet
from coclai.config import (
    DEFAULT_SCHEMA_RELATIVE_DIR,
    SCHEMA_DIR_ENV,
    ClientConfig,
    resolve_default_schema_dir,
    validate_schema_dir,
)
from coclai.errors import SchemaDirNotDirectory, SchemaDirNotFound
from coclai.hooks import RuntimeHookConfig


class _Hook:
    def __init__(self, name):
        self.name = name

    async def call(self, ctx):
        return None


def test_resolve_schema_dir_rejects_missing_path():
    with pytest.raises(SchemaDirNotFound):
        validate_schema_dir(Path("/not/found"))


def test_validate_schema_dir_rejects_file(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(SchemaDirNotDirectory) as info:
        validate_schema_dir(target)
    assert info.value.path == str(target)


def test_resolve_schema_dir_accepts_existing_directory(tmp_path):
    schema = tmp_path / "schema"
    schema.mkdir()
    assert validate_schema_dir(schema) == schema


def test_resolve_default_schema_dir_prefers_cwd_default(tmp_path):
    cwd = tmp_path / "cwd"
    cwd_schema = cwd / DEFAULT_SCHEMA_RELATIVE_DIR
    package_schema = tmp_path / "pkg-schema"
    cwd_schema.mkdir(parents=True)
    package_schema.mkdir()
    assert resolve_default_schema_dir(cwd, package_schema) == cwd_schema


def test_resolve_default_schema_dir_falls_back_to_package_default(tmp_path):
    cwd = tmp_path / "cwd"
    package_schema = tmp_path / "pkg-schema"
    cwd.mkdir()
    package_schema.mkdir()
    assert resolve_default_schema_dir(cwd, package_schema) == package_schema


def test_resolve_default_schema_dir_fails_when_nothing_exists(tmp_path):
    with pytest.raises(SchemaDirNotFound) as info:
        resolve_default_schema_dir(tmp_path, tmp_path / "missing")
    assert info.value.path == str(tmp_path / DEFAULT_SCHEMA_RELATIVE_DIR)


def test_config_builder_sets_fields():
    cfg = ClientConfig().with_cli_bin("/opt/homebrew/bin/cli").with_schema_dir("/tmp/schema")
    assert cfg.cli_bin == Path("/opt/homebrew/bin/cli")
    assert cfg.schema_dir == Path("/tmp/schema")
    assert cfg.compatibility_guard == CompatibilityGuard(
        require_initialize_user_agent=True,
        min_codex_version=SemVerTriplet(0, 104, 0),
    )


def test_default_cli_bin():
    assert ClientConfig().cli_bin == Path("codex")
    assert ClientConfig().schema_dir is None


def test_disable_compatibility_guard_overrides_defaults():
    cfg = ClientConfig().without_compatibility_guard()
    assert cfg.compatibility_guard == CompatibilityGuard(
        require_initialize_user_agent=False, min_codex_version=None
    )


def test_hook_builders_append_and_replace():
    cfg = ClientConfig().with_pre_hook(_Hook("cfg_pre")).with_post_hook(_Hook("cfg_post"))
    assert [h.name for h in cfg.hooks.pre_hooks] == ["cfg_pre"]
    assert [h.name for h in cfg.hooks.post_hooks] == ["cfg_post"]
    assert cfg.with_hooks(RuntimeHookConfig()).hooks.is_empty()


def test_resolve_schema_dir_explicit(tmp_path):
    cfg = ClientConfig().with_schema_dir(tmp_path)
    assert cfg.resolve_schema_dir() == tmp_path
    with pytest.raises(SchemaDirNotFound):
        ClientConfig().with_schema_dir(tmp_path / "nope").resolve_schema_dir()


def test_resolve_schema_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv(SCHEMA_DIR_ENV, f"  {tmp_path}  ")
    assert ClientConfig().resolve_schema_dir() == tmp_path


def test_resolve_schema_dir_from_cwd(tmp_path, monkeypatch):
    monkeypatch.delenv(SCHEMA_DIR_ENV, raising=False)
    schema = tmp_path / DEFAULT_SCHEMA_RELATIVE_DIR
    schema.mkdir(parents=True)
    monkeypatch.chdir(tmp_path)
    assert ClientConfig().resolve_schema_dir().resolve() == schema.resolve()