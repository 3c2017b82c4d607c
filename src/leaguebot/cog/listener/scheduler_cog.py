"""Background scheduler cogs for the league bot.

Contains two cogs:
- FreeAgentSweepCog - periodically reconciles every free agent advertisement
- RoleSyncCog       - periodically grants the ping role to rostered players
"""

from __future__ import annotations

import asyncio
from typing import Callable

import discord
from discord.ext import commands, tasks

from leaguebot.bot.league_services import LeagueServices
from leaguebot.util.logger import get_logger

logger = get_logger("scheduler_cog")


# ---------------------------------------------------------------------------
# Shared base for interval cogs
# ---------------------------------------------------------------------------

class _IntervalTaskCog(commands.Cog):
    """
    Reusable base for cogs that run one async job on a fixed interval.

    Subclasses supply:
        _name          - human-readable tag used in log messages
        _get_interval  - callable(services) returning the interval in seconds
        _run_once      - coroutine doing the real work
    """

    _name: str
    _get_interval: Callable[[LeagueServices], float]

    def __init__(self, bot: discord.Bot, services: LeagueServices) -> None:
        self.bot = bot
        self.services = services

    async def _run_once(self) -> None:
        raise NotImplementedError

    @tasks.loop(seconds=1)  # real interval set in on_ready
    async def _interval_task(self) -> None:
        try:
            await self._run_once()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[%s] Unexpected error during run: %s", self._name, exc)

    @_interval_task.before_loop
    async def _before_run(self) -> None:
        await self.bot.wait_until_ready()

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        interval = self._get_interval(self.services)
        self._interval_task.change_interval(seconds=interval)
        if not self._interval_task.is_running():
            self._interval_task.start()
            logger.info("[%s] Started (interval=%.1fs)", self._name, interval)

    def cog_unload(self) -> None:
        self._interval_task.cancel()
        logger.info("[%s] Stopped", self._name)


# ---------------------------------------------------------------------------
# Free agent sweep
# ---------------------------------------------------------------------------

class FreeAgentSweepCog(_IntervalTaskCog):
    """Expires, withdraws and refreshes free agent advertisements."""

    _name = "FREE_AGENT_SWEEP"
    _get_interval = staticmethod(lambda services: services.settings.sweep_interval_seconds)

    async def _run_once(self) -> None:
        result = await self.services.free_agents.sweep()
        if not result.ok:
            logger.error("[%s] Sweep aborted: %s", self._name, result.error)


# ---------------------------------------------------------------------------
# Ping role sync
# ---------------------------------------------------------------------------

class RoleSyncCog(_IntervalTaskCog):
    """Grants the ping role to every rostered player."""

    _name = "ROLE_SYNC"
    _get_interval = staticmethod(lambda services: services.settings.role_sync_interval_seconds)

    async def _run_once(self) -> None:
        report = await self.services.role_sync.sync()
        for failure in report.failures:
            logger.warning(
                "[%s] %s on team %s: %s", self._name, failure.user_id, failure.team_name, failure.reason
            )


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

def setup(bot: discord.Bot, services: LeagueServices) -> None:
    bot.add_cog(FreeAgentSweepCog(bot, services))
    bot.add_cog(RoleSyncCog(bot, services))
