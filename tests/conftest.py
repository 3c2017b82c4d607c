"""
Pytest configuration and fixtures for the league bot tests.
"""

import datetime
import sys
from pathlib import Path

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

import pytest

from leaguebot.configuration.app_configuration import LeagueSettings
from leaguebot.datatypes.discord_datatypes import ChannelID, GuildID, RoleID

NOW = datetime.datetime(2026, 1, 15, 12, 0, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture()
def league_settings() -> LeagueSettings:
    return LeagueSettings(
        guild_id=GuildID(100),
        free_agent_channel_id=ChannelID(555),
        ping_role_id=RoleID(777),
        staff_log_channel_id=ChannelID(556),
    )
