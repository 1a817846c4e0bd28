"""Tests for configuration schema and loading."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lilybear.config.loader import (
    _migrate_config,
    get_config_path,
    load_config,
    save_config,
)
from lilybear.config.schema import AgentConfig, Config, RelayConfig

_RELAY_ENV = ("MCP_URL", "CHN_COUNCIL", "RELAY_OUTBOUND_URL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in _RELAY_ENV:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("LILYBEAR_CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)  # Keep a developer's .env out of the tests
    monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")


def test_model_validate_accepts_camel_case_keys() -> None:
    config = Config.model_validate({"relay": {"targetUrl": "http://vr", "timeoutSeconds": 2}})
    assert config.relay.target_url == "http://vr"
    assert config.relay.timeout_seconds == 2


def test_model_validate_accepts_snake_case_keys() -> None:
    config = Config.model_validate({"relay": {"channel_id": "123"}})
    assert config.relay.channel_id == "123"


def test_default_council_has_three_guardians() -> None:
    names = [a.name for a in Config().agents]
    assert names == ["Lilybear", "Serafina", "ShadowFlowers"]
    serafina = Config().agents[1]
    assert (serafina.rules[0].match, serafina.rules[0].pattern) == ("prefix", "bless")


def test_agent_name_cannot_be_broadcast() -> None:
    with pytest.raises(ValidationError):
        AgentConfig(name="*")


def test_marker_must_be_one_character() -> None:
    with pytest.raises(ValidationError):
        RelayConfig(marker="!!")


def test_enabled_agents_filters_disabled() -> None:
    config = Config.model_validate(
        {"agents": [{"name": "A"}, {"name": "B", "enabled": False}]}
    )
    assert [a.name for a in config.enabled_agents] == ["A"]


def test_default_path():
    assert get_config_path() == Path.home() / ".lilybear" / "config.json"


def test_env_path_override(tmp_path):
    cfg_file = tmp_path / "alt.json"
    cfg_file.write_text(json.dumps({"server": {"port": 5555}}))
    with patch.dict(os.environ, {"LILYBEAR_CONFIG_PATH": str(cfg_file)}):
        assert get_config_path() == cfg_file
        config = load_config()
    assert config.server.port == 5555


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(config_path=tmp_path / "nope.json")
    assert config.server.port == 18795
    assert config.relay.target_url == ""


def test_env_only_loading(tmp_path):
    env = {"LILYBEAR_SERVER__PORT": "9999"}
    with patch.dict(os.environ, env, clear=False):
        config = load_config(config_path=tmp_path / "missing.json")
    assert config.server.port == 9999


def test_relay_env_fills_empty_values(tmp_path):
    env = {"MCP_URL": "http://mcp.local", "CHN_COUNCIL": "42"}
    with patch.dict(os.environ, env, clear=False):
        config = load_config(config_path=tmp_path / "missing.json")
    assert config.relay.target_url == "http://mcp.local"
    assert config.relay.channel_id == "42"


def test_file_takes_precedence_over_relay_env(tmp_path):
    cfg_file = tmp_path / "config.json"
    cfg_file.write_text(json.dumps({"relay": {"targetUrl": "http://from-file"}}))
    with patch.dict(os.environ, {"MCP_URL": "http://from-env"}, clear=False):
        config = load_config(config_path=cfg_file)
    assert config.relay.target_url == "http://from-file"


def test_dotenv_file_is_loaded(tmp_path):
    (tmp_path / ".env").write_text("MCP_URL=http://dotenv.local\n")
    try:
        config = load_config(config_path=tmp_path / "missing.json")
    finally:
        os.environ.pop("MCP_URL", None)
    assert config.relay.target_url == "http://dotenv.local"


def test_corrupt_file_falls_back(tmp_path):
    cfg_file = tmp_path / "bad.json"
    cfg_file.write_text("NOT JSON!!!")
    config = load_config(config_path=cfg_file)
    assert config.server.port == 18795


def test_save_then_load_keeps_camel_case(tmp_path):
    cfg_file = tmp_path / "nested" / "config.json"
    config = Config()
    config.relay.outbound_url = "http://chat.local"
    save_config(config, cfg_file)

    data = json.loads(cfg_file.read_text())
    assert data["relay"]["outboundUrl"] == "http://chat.local"
    assert load_config(cfg_file).relay.outbound_url == "http://chat.local"


def test_migrate_moves_top_level_mcp_url():
    data = _migrate_config({"mcpUrl": "http://old"})
    assert data == {"relay": {"targetUrl": "http://old"}}
