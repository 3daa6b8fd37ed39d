"""Tests for frccli.config -- XDG paths, atomic writes, precedence, credentials."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from frccli.config import (
    _atomic_write,
    encode_token,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    load_project_config,
    resolve_api_token,
    resolve_config,
    resolve_credential,
    save_global_config,
)
from frccli.exceptions import AuthError, ConfigError
from frccli.models import ApiConfig, GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_dirs_follow_xdg_env(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "frccli"
        assert get_cache_dir() == isolated_config / "cache" / "frccli"
        assert get_data_dir() == isolated_config / "data" / "frccli"
        assert get_config_dir().is_dir()

    def test_xdg_default_under_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("frccli.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", staticmethod(lambda: tmp_path))
        assert get_config_dir() == tmp_path / ".config" / "frccli"

    def test_fallback_on_non_xdg_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("frccli.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", staticmethod(lambda: tmp_path))
        assert get_config_dir() == tmp_path / ".frccli"
        assert get_cache_dir() == tmp_path / ".frccli" / "cache"
        assert get_data_dir() == tmp_path / ".frccli" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"a": 1}')
        assert target.read_text(encoding="utf-8") == '{"a": 1}'

    def test_failure_leaves_no_temp_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        with patch("frccli.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                _atomic_write(target, "data")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.api.base_url == "https://frc-api.firstinspires.org/v3.0"
        assert config.server.port == 3000

    def test_round_trip(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(team=254, district="FIM"))
        loaded = load_global_config()
        assert (loaded.team, loaded.district) == (254, "FIM")

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        global_config_path().write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_values_raise(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"team": "not-a-number"})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config and precedence
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_must_be_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "frccli.json", [1, 2])
        with pytest.raises(ConfigError, match="must be a JSON object"):
            load_project_config()


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.team is None
        assert config.output.format == "auto"

    def test_project_overrides_user(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(team=118, district="FIT"))
        _write_json(isolated_config / "frccli.json", {"team": 254, "cache": {"ttl_seconds": 60}})
        config = resolve_config()
        assert config.team == 254
        assert config.district == "FIT"
        assert config.cache.ttl_seconds == 60
        assert config.cache.enabled is True

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "frccli.json", {"team": 254})
        monkeypatch.setenv("USER_TEAM", "1678")
        monkeypatch.setenv("USER_DISTRICT", "CA")
        monkeypatch.setenv("FRCCLI_BASE_URL", "http://localhost:8080/v3.0")
        config = resolve_config()
        assert config.team == 1678
        assert config.district == "CA"
        assert config.api.base_url == "http://localhost:8080/v3.0"

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USER_TEAM", "1678")
        config = resolve_config(cli_team=971, cli_format="json")
        assert config.team == 971
        assert config.output.format == "json"

    def test_bad_user_team(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USER_TEAM", "the poofs")
        with pytest.raises(ConfigError, match="USER_TEAM"):
            resolve_config()

    def test_invalid_project_values(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "frccli.json", {"server": {"port": "high"}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            resolve_config()


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_FRC_TOKEN", "abc")
        assert resolve_credential("env:MY_FRC_TOKEN") == "abc"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MY_FRC_TOKEN", raising=False)
        with pytest.raises(ConfigError, match="MY_FRC_TOKEN"):
            resolve_credential("env:MY_FRC_TOKEN")

    def test_file(self, tmp_path: Path) -> None:
        token_file = tmp_path / "token"
        token_file.write_text("user:key\n", encoding="utf-8")
        assert resolve_credential(f"file:{token_file}") == "user:key"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope'}")

    def test_prompt_requires_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin.isatty", lambda: False)
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_unknown_source(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("vault:frc")


class TestApiToken:
    def test_user_key_pairs_are_encoded(self) -> None:
        assert encode_token("user:key") == base64.b64encode(b"user:key").decode("ascii")

    def test_encoded_token_passes_through(self) -> None:
        assert encode_token(" dXNlcjprZXk= ") == "dXNlcjprZXk="

    def test_resolve_from_default_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRC_API_TOKEN", "user:key")
        assert resolve_api_token(GlobalConfig()) == "dXNlcjprZXk="

    def test_missing_token_is_auth_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FRC_API_TOKEN", raising=False)
        with pytest.raises(AuthError, match="No FRC API token"):
            resolve_api_token(GlobalConfig())

    def test_empty_token_is_auth_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRCCLI_TEST_TOKEN", "  ")
        config = GlobalConfig(api=ApiConfig(token_source="env:FRCCLI_TEST_TOKEN"))
        with pytest.raises(AuthError, match="empty"):
            resolve_api_token(config)
