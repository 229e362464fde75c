"""
Configuration du bot

Sources, de la plus faible à la plus forte:
    1. config/config.yaml (optionnel)
    2. .env (python-dotenv, ne remplace pas l'environnement existant)
    3. Variables d'environnement

Variables reconnues:
    BOT_USERNAME, OAUTH_TOKEN, CHANNEL_NAME, AUTHORIZED_USERS (a,b,c), MPV_SOCKET

Toute valeur obligatoire manquante lève ConfigError: c'est fatal au démarrage,
jamais pendant le dispatch.
"""
import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from player.transport import DEFAULT_SOCKET_PATH

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"

ENV_KEYS = {
    "bot_username": "BOT_USERNAME",
    "oauth_token": "OAUTH_TOKEN",
    "channel": "CHANNEL_NAME",
    "authorized_users": "AUTHORIZED_USERS",
    "socket_path": "MPV_SOCKET",
}


class ConfigError(Exception):
    """Configuration invalide ou incomplète"""


@dataclass(frozen=True)
class BotConfig:
    """Configuration entièrement résolue avant le démarrage du dispatch"""
    bot_username: str
    oauth_token: str
    channel: str
    authorized_users: FrozenSet[str]
    socket_path: str = DEFAULT_SOCKET_PATH
    ipc_timeout: Optional[float] = None
    max_msgs_per_30s: int = 18
    log_level: str = "INFO"
    log_dir: str = "logs"

    def __repr__(self) -> str:
        # Jamais de token dans les logs
        return (
            f"BotConfig(bot={self.bot_username}, channel=#{self.channel}, "
            f"authorized={len(self.authorized_users)}, socket={self.socket_path})"
        )


def parse_authorized_users(raw: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    """
    "Alice, bob,,CHARLIE" -> {"alice", "bob", "charlie"}

    Accepte aussi une liste YAML.
    """
    if raw is None:
        return frozenset()
    items = raw.split(",") if isinstance(raw, str) else raw
    return frozenset(str(item).strip().lower() for item in items if str(item).strip())


def _read_yaml(config_path: pathlib.Path) -> Dict[str, Any]:
    if not config_path.exists():
        LOGGER.info(f"No config file at {config_path}, using environment only")
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at top level")
    return data


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"'{name}' section must be a mapping")
    return section


def _require(value: Optional[str], name: str, env_key: str) -> str:
    if value is None or not str(value).strip():
        raise ConfigError(f"{name} missing (set {env_key} or twitch.{name} in config)")
    return str(value).strip()


def build_config(data: Mapping[str, Any], env: Mapping[str, str]) -> BotConfig:
    """Fusionne le YAML décodé et l'environnement en BotConfig"""
    twitch = _section(data, "twitch")
    player = _section(data, "player")
    chat = _section(data, "chat")
    logs = _section(data, "logging")

    def pick(key: str, section: Mapping[str, Any]) -> Any:
        return env.get(ENV_KEYS[key]) or section.get(key)

    bot_username = _require(pick("bot_username", twitch), "bot_username", ENV_KEYS["bot_username"]).lower()

    oauth_token = _require(pick("oauth_token", twitch), "oauth_token", ENV_KEYS["oauth_token"])
    if not oauth_token.startswith("oauth:"):
        oauth_token = f"oauth:{oauth_token}"

    channel = _require(pick("channel", twitch), "channel", ENV_KEYS["channel"]).lstrip("#").lower()
    if not channel:
        raise ConfigError("channel is empty")

    authorized_users = parse_authorized_users(pick("authorized_users", twitch))
    if not authorized_users:
        raise ConfigError(f"authorized_users is empty (set {ENV_KEYS['authorized_users']})")

    timeout = player.get("timeout")
    try:
        ipc_timeout = float(timeout) if timeout is not None else None
        max_msgs = int(chat.get("max_msgs_per_30s", 18))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e
    if max_msgs < 1:
        raise ConfigError("chat.max_msgs_per_30s must be >= 1")

    return BotConfig(
        bot_username=bot_username,
        oauth_token=oauth_token,
        channel=channel,
        authorized_users=authorized_users,
        socket_path=str(pick("socket_path", player) or DEFAULT_SOCKET_PATH),
        ipc_timeout=ipc_timeout,
        max_msgs_per_30s=max_msgs,
        log_level=str(logs.get("level", "INFO")).upper(),
        log_dir=str(logs.get("dir", "logs")),
    )


def load_config(
    config_path: Union[str, pathlib.Path] = DEFAULT_CONFIG_PATH,
    env_file: Optional[Union[str, pathlib.Path]] = ".env",
) -> BotConfig:
    """
    Charge .env puis le YAML, applique l'environnement.

    Raises:
        ConfigError: valeur obligatoire absente ou fichier illisible
    """
    if env_file and load_dotenv(env_file):
        LOGGER.info(f"📝 Environment loaded from {env_file}")

    data = _read_yaml(pathlib.Path(config_path))
    config = build_config(data, os.environ)
    LOGGER.info(f"✅ Config loaded: {config!r}")
    return config
