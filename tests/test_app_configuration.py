import json
from pathlib import Path

import pytest

from leaguebot.configuration.app_configuration import DEFAULT_STATS_API_URL, AppConfig
from leaguebot.datatypes.discord_datatypes import ChannelID, GuildID, RoleID


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_builds_league_settings(config_path: Path) -> None:
    config_payload = {
        "league": {"guild_id": 100},
        "channels": {"free_agents": "555", "staff_log": 556},
        "roles": {"ping": 777},
        "free_agents": {"renew_days": 10, "toggle_days": 3, "sweep_interval_seconds": 600},
        "role_sync": {"interval_seconds": 3600},
        "stats_api": {"base_url": "https://proxy.example.test/v1/", "timeout_seconds": 4},
        "database": {"path": str(config_path.parent / "league.db")},
    }
    config_path.write_text(json.dumps(config_payload), encoding="utf-8")

    config = AppConfig(config_path)
    settings = config.league_settings

    assert settings.guild_id == GuildID(100)
    assert settings.free_agent_channel_id == ChannelID(555)
    assert settings.staff_log_channel_id == ChannelID(556)
    assert settings.ping_role_id == RoleID(777)
    assert settings.renew_days == 10
    assert settings.toggle_days == 3
    assert settings.sweep_interval_seconds == pytest.approx(600)
    assert settings.role_sync_interval_seconds == pytest.approx(3600)
    assert settings.stats_api_url == "https://proxy.example.test/v1"
    assert settings.stats_api_timeout == pytest.approx(4)
    assert config.database_path == (config_path.parent / "league.db").resolve()


def test_app_config_defaults(config_path: Path) -> None:
    config_payload = {
        "league": {"guild_id": 1},
        "channels": {"free_agents": 2},
        "roles": {"ping": 3},
    }
    config_path.write_text(json.dumps(config_payload), encoding="utf-8")

    settings = AppConfig(config_path).league_settings

    assert settings.staff_log_channel_id is None
    assert settings.renew_days == 14
    assert settings.toggle_days == 7
    assert settings.sweep_interval_seconds == pytest.approx(86400)
    assert settings.stats_api_url == DEFAULT_STATS_API_URL


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.get("league") is None
    assert config.database_path.name == "league.db"
    with pytest.raises(ValueError, match="league.guild_id"):
        _ = config.league_settings


def test_app_config_reports_every_missing_key(config_path: Path) -> None:
    config_path.write_text(json.dumps({"league": {"guild_id": 1}, "channels": "oops"}), encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        _ = AppConfig(config_path).league_settings

    message = str(excinfo.value)
    assert "channels.free_agents" in message
    assert "roles.ping" in message
    assert "league.guild_id" not in message


def test_app_config_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text(json.dumps({"roles": {"ping": 1}}), encoding="utf-8")
    config = AppConfig(config_path)

    config_path.write_text(json.dumps({"roles": {"ping": 2}}), encoding="utf-8")
    data = config.reload()

    assert data["roles"]["ping"] == 2
