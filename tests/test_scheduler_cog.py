from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from leaguebot.cog.listener import scheduler_cog
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.result_datatypes import (
    ReconcileErrorKind,
    ReconcileResult,
    RoleSyncFailure,
    RoleSyncReport,
    SweepReport,
)


def make_services(league_settings):
    return SimpleNamespace(
        settings=league_settings,
        free_agents=SimpleNamespace(sweep=AsyncMock(return_value=ReconcileResult.success(SweepReport()))),
        role_sync=SimpleNamespace(sync=AsyncMock(return_value=RoleSyncReport())),
    )


def test_setup_adds_both_cogs(league_settings):
    bot = SimpleNamespace(add_cog=MagicMock())

    scheduler_cog.setup(bot, make_services(league_settings))

    added = [call.args[0] for call in bot.add_cog.call_args_list]
    assert isinstance(added[0], scheduler_cog.FreeAgentSweepCog)
    assert isinstance(added[1], scheduler_cog.RoleSyncCog)


def test_intervals_come_from_settings(league_settings):
    services = make_services(league_settings)

    sweep = scheduler_cog.FreeAgentSweepCog(SimpleNamespace(), services)
    roles = scheduler_cog.RoleSyncCog(SimpleNamespace(), services)

    assert sweep._get_interval(services) == league_settings.sweep_interval_seconds
    assert roles._get_interval(services) == league_settings.role_sync_interval_seconds


@pytest.mark.asyncio
async def test_sweep_cog_runs_sweep(league_settings):
    services = make_services(league_settings)
    cog = scheduler_cog.FreeAgentSweepCog(SimpleNamespace(), services)

    await cog._run_once()

    services.free_agents.sweep.assert_awaited_once()


@pytest.mark.asyncio
async def test_sweep_cog_tolerates_aborted_sweep(league_settings):
    services = make_services(league_settings)
    services.free_agents.sweep.return_value = ReconcileResult.failure(
        ReconcileErrorKind.CHANNEL_UNAVAILABLE, "The free agents channel could not be accessed."
    )
    cog = scheduler_cog.FreeAgentSweepCog(SimpleNamespace(), services)

    await cog._run_once()

    services.free_agents.sweep.assert_awaited_once()


@pytest.mark.asyncio
async def test_role_sync_cog_runs_sync(league_settings):
    services = make_services(league_settings)
    services.role_sync.sync.return_value = RoleSyncReport(
        failures=[RoleSyncFailure(UserID(1), "Crows", "Member 1 not found.")]
    )
    cog = scheduler_cog.RoleSyncCog(SimpleNamespace(), services)

    await cog._run_once()

    services.role_sync.sync.assert_awaited_once()


@pytest.mark.asyncio
async def test_interval_task_swallows_errors(league_settings):
    services = make_services(league_settings)
    services.free_agents.sweep.side_effect = RuntimeError("database locked")
    cog = scheduler_cog.FreeAgentSweepCog(SimpleNamespace(), services)

    await cog._interval_task()

    services.free_agents.sweep.assert_awaited_once()
