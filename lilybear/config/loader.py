"""Configuration loading utilities."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from lilybear.config.schema import Config
from lilybear.utils.helpers import ensure_dir

# Environment variables shared with the chat-side relay bot.
# Values are dot-separated paths into config.json (camelCase for JSON compat).
_ENV_MAP: dict[str, str] = {
    "MCP_URL": "relay.targetUrl",
    "CHN_COUNCIL": "relay.channelId",
    "RELAY_OUTBOUND_URL": "relay.outboundUrl",
}


def _load_dotenv() -> None:
    """Load .env file if present. Searches cwd, then ~/.lilybear/."""
    for candidate in [Path.cwd() / ".env", Path.home() / ".lilybear" / ".env"]:
        if candidate.is_file():
            load_dotenv(candidate, override=False)
            return


def _inject_env_into_config(data: dict) -> dict:
    """Fill empty config values from the relay environment variables.

    config.json always wins over the environment.
    """
    for env_var, dotted_path in _ENV_MAP.items():
        value = os.environ.get(env_var)
        if not value:
            continue

        keys = dotted_path.split(".")
        node = data
        for key in keys[:-1]:
            if key not in node or not isinstance(node[key], dict):
                node[key] = {}
            node = node[key]

        leaf = keys[-1]
        if not node.get(leaf):
            node[leaf] = value

    return data


def get_config_path() -> Path:
    """Get the default configuration file path.

    Respects the LILYBEAR_CONFIG_PATH env var if set.
    """
    env_path = os.environ.get("LILYBEAR_CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".lilybear" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Loads .env first, then config.json. The relay environment variables
    (MCP_URL, CHN_COUNCIL, ...) fill in values not already set in the file.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    _load_dotenv()

    path = config_path or get_config_path()
    data: dict = {}

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            data = _migrate_config(data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to load config from {}: {}", path, e)
            logger.warning("Using default configuration.")
            data = {}

    data = _inject_env_into_config(data)

    return Config.model_validate(data) if data else Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    ensure_dir(path.parent)

    data = config.model_dump(by_alias=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _migrate_config(data: dict) -> dict:
    """Migrate old config formats to current."""
    # Older files kept the relay URL at the top level as "mcpUrl"
    if "mcpUrl" in data:
        relay = data.setdefault("relay", {})
        relay.setdefault("targetUrl", data.pop("mcpUrl"))
    return data
