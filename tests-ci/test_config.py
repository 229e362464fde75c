"""
Tests du chargement de configuration (YAML + .env + environnement)
"""
import os

import pytest

from core.config import ENV_KEYS, BotConfig, ConfigError, build_config, load_config, parse_authorized_users


BASE_ENV = {
    "BOT_USERNAME": "MpvBot",
    "OAUTH_TOKEN": "abc123",
    "CHANNEL_NAME": "#SomeChannel",
    "AUTHORIZED_USERS": "Alice, bob,,CHARLIE ",
}


@pytest.fixture
def clean_env(monkeypatch):
    """Environnement sans aucune variable du bot (load_dotenv écrit dans os.environ)"""
    for key in ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    yield
    for key in ENV_KEYS.values():
        os.environ.pop(key, None)


@pytest.mark.unit
class TestBuildConfig:

    def test_env_only(self):
        config = build_config({}, BASE_ENV)

        assert config.bot_username == "mpvbot"
        assert config.channel == "somechannel"
        assert config.oauth_token == "oauth:abc123"
        assert config.authorized_users == frozenset({"alice", "bob", "charlie"})
        assert config.socket_path == "/tmp/mpvsocket"
        assert config.ipc_timeout is None
        assert config.max_msgs_per_30s == 18

    def test_oauth_prefix_kept(self):
        config = build_config({}, {**BASE_ENV, "OAUTH_TOKEN": "oauth:xyz"})
        assert config.oauth_token == "oauth:xyz"

    def test_env_overrides_yaml(self):
        data = {
            "twitch": {"bot_username": "yamlbot", "channel": "yamlchan", "authorized_users": ["dave"]},
            "player": {"socket_path": "/run/mpv.sock", "timeout": 2},
        }
        config = build_config(data, {"OAUTH_TOKEN": "t", "CHANNEL_NAME": "envchan"})

        assert config.bot_username == "yamlbot"
        assert config.channel == "envchan"
        assert config.authorized_users == frozenset({"dave"})
        assert config.socket_path == "/run/mpv.sock"
        assert config.ipc_timeout == 2.0

    def test_socket_from_env(self):
        config = build_config({}, {**BASE_ENV, "MPV_SOCKET": "/tmp/other"})
        assert config.socket_path == "/tmp/other"

    @pytest.mark.parametrize("missing", ["BOT_USERNAME", "OAUTH_TOKEN", "CHANNEL_NAME", "AUTHORIZED_USERS"])
    def test_missing_required_value(self, missing):
        env = {k: v for k, v in BASE_ENV.items() if k != missing}
        with pytest.raises(ConfigError):
            build_config({}, env)

    @pytest.mark.parametrize("users", [" , ,", "   "])
    def test_empty_authorized_list(self, users):
        with pytest.raises(ConfigError):
            build_config({}, {**BASE_ENV, "AUTHORIZED_USERS": users})

    def test_channel_only_hash(self):
        with pytest.raises(ConfigError):
            build_config({}, {**BASE_ENV, "CHANNEL_NAME": "#"})

    @pytest.mark.parametrize("data", [
        {"player": {"timeout": "soon"}},
        {"chat": {"max_msgs_per_30s": "lots"}},
        {"chat": {"max_msgs_per_30s": 0}},
        {"twitch": "not a mapping"},
    ])
    def test_invalid_settings(self, data):
        with pytest.raises(ConfigError):
            build_config(data, BASE_ENV)

    def test_logging_section(self):
        config = build_config({"logging": {"level": "debug", "dir": "/var/log/mpv"}}, BASE_ENV)
        assert config.log_level == "DEBUG"
        assert config.log_dir == "/var/log/mpv"

    def test_repr_hides_token(self):
        config = build_config({}, BASE_ENV)
        assert "abc123" not in repr(config)

    def test_config_is_frozen(self):
        config = build_config({}, BASE_ENV)
        with pytest.raises(Exception):
            config.channel = "other"
        assert isinstance(config, BotConfig)


@pytest.mark.unit
def test_parse_authorized_users():
    assert parse_authorized_users("Alice,BOB") == frozenset({"alice", "bob"})
    assert parse_authorized_users(["Alice", " ", "carol "]) == frozenset({"alice", "carol"})
    assert parse_authorized_users(None) == frozenset()


@pytest.mark.unit
class TestLoadConfig:

    def test_yaml_file(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "twitch:\n"
            "  bot_username: FileBot\n"
            "  oauth_token: oauth:filetoken\n"
            "  channel: FileChan\n"
            "  authorized_users: [Alice]\n"
            "chat:\n"
            "  max_msgs_per_30s: 100\n",
            encoding="utf-8",
        )

        config = load_config(config_file, env_file=None)

        assert config.bot_username == "filebot"
        assert config.channel == "filechan"
        assert config.authorized_users == frozenset({"alice"})
        assert config.max_msgs_per_30s == 100

    def test_env_file(self, tmp_path, clean_env):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "BOT_USERNAME=envbot\n"
            "OAUTH_TOKEN=secret\n"
            "CHANNEL_NAME=envchan\n"
            "AUTHORIZED_USERS=eve,frank\n",
            encoding="utf-8",
        )

        config = load_config(tmp_path / "absent.yaml", env_file=env_file)

        assert config.bot_username == "envbot"
        assert config.authorized_users == frozenset({"eve", "frank"})

    def test_missing_everything(self, tmp_path, clean_env):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.yaml", env_file=None)

    def test_invalid_yaml(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("twitch: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(config_file, env_file=None)

    def test_yaml_not_a_mapping(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(config_file, env_file=None)
