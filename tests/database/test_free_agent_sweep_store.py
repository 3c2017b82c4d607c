"""Free agent reconciler against the real SQLite stores, with roster and
verification writes landing while an operation is suspended on Discord I/O."""

import datetime

import pytest
import pytest_asyncio

from conftest import NOW
from fakes import FakePlatform, FakeStats
from leaguebot.database.db_connection import ConnectionManager
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.player_datatypes import PlayerRecord
from leaguebot.repositories.player_repo import PlayerStore
from leaguebot.repositories.team_repo import TeamStore
from leaguebot.services.free_agent_service import FreeAgentReconciler


class InterleavingPlatform(FakePlatform):
    """Runs queued callbacks while a message is being sent."""

    def __init__(self) -> None:
        super().__init__()
        self.during_send: list = []

    async def send_message(self, channel, payload):
        while self.during_send:
            await self.during_send.pop(0)()
        return await super().send_message(channel, payload)


@pytest_asyncio.fixture
async def connection(tmp_path):
    manager = ConnectionManager()
    await manager.open(tmp_path / "league.db")
    yield manager
    await manager.close()


@pytest.fixture
def players(connection):
    return PlayerStore(connection)


@pytest.fixture
def teams(connection):
    return TeamStore(connection)


@pytest.fixture
def platform():
    return InterleavingPlatform()


@pytest.fixture
def reconciler(league_settings, players, platform):
    return FreeAgentReconciler(
        league_settings,
        players,
        platform,
        FakeStats(),
        renderer=lambda record, profile, now: "advertisement",
        clock=lambda: NOW,
    )


def active_free_agent(user_id):
    return PlayerRecord(
        UserID(user_id),
        is_free_agent=True,
        free_agent_expires_at=NOW + datetime.timedelta(days=3),
    )


@pytest.mark.asyncio
async def test_team_assigned_during_republish_is_kept_and_withdrawn_next_pass(players, teams, platform, reconciler):
    await players.save(active_free_agent(42))
    team_id = await teams.create("Crows")

    async def join_team():
        await teams.add_member(team_id, UserID(42))

    platform.during_send.append(join_team)
    first = await reconciler.sweep()

    assert first.value.republished == 1
    assert (await players.find_by_identity(UserID(42))).team_id == team_id

    second = await reconciler.sweep()

    assert second.value.withdrawn == 1
    saved = await players.find_by_identity(UserID(42))
    assert saved.team_id == team_id
    assert saved.is_free_agent is False
    assert saved.free_agent_message_id is None
    assert [user_id for user_id, _ in platform.dms] == [UserID(42)]


@pytest.mark.asyncio
async def test_player_rostered_mid_pass_is_withdrawn_in_same_pass(players, teams, platform, reconciler):
    await players.save(active_free_agent(1))
    await players.save(active_free_agent(2))
    team_id = await teams.create("Crows")

    async def join_team():
        await teams.add_member(team_id, UserID(2))

    platform.during_send.append(join_team)
    result = await reconciler.sweep()

    assert result.value.scanned == 2
    assert result.value.republished == 1
    assert result.value.withdrawn == 1
    withdrawn = await players.find_by_identity(UserID(2))
    assert withdrawn.is_free_agent is False
    assert withdrawn.team_id == team_id
    assert len(platform.channel.sent) == 1


@pytest.mark.asyncio
async def test_player_switched_off_mid_pass_is_skipped(players, platform, reconciler):
    await players.save(active_free_agent(1))
    await players.save(active_free_agent(2))

    async def switch_off():
        await players.save(PlayerRecord(UserID(2)))

    platform.during_send.append(switch_off)
    result = await reconciler.sweep()

    assert result.value.scanned == 1
    assert (await players.find_by_identity(UserID(2))).is_free_agent is False
    assert len(platform.channel.sent) == 1


@pytest.mark.asyncio
async def test_renew_keeps_tag_verified_while_publishing(players, platform, reconciler):
    await players.save(PlayerRecord(UserID(42)))

    async def verify():
        await players.save(PlayerRecord(UserID(42), external_profile_tag="#TAG", is_verified=True))

    platform.during_send.append(verify)
    result = await reconciler.renew(UserID(42))

    assert result.ok
    saved = await players.find_by_identity(UserID(42))
    assert saved.is_free_agent is True
    assert saved.free_agent_expires_at == NOW + datetime.timedelta(days=14)
    assert saved.external_profile_tag == "#TAG"
    assert saved.is_verified is True
