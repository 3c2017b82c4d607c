"""Construction of the service graph shared by all cogs."""

from __future__ import annotations

from dataclasses import dataclass

import discord

from leaguebot.configuration.app_configuration import LeagueSettings
from leaguebot.repositories.player_repo import PlayerStore, player_store
from leaguebot.repositories.team_repo import TeamStore, team_store
from leaguebot.services.free_agent_service import FreeAgentReconciler
from leaguebot.services.platform_client import DiscordPlatformClient
from leaguebot.services.role_sync_service import RoleSyncService
from leaguebot.services.stats_client import BrawlStatsClient
from leaguebot.services.verification_service import VerificationService


@dataclass(slots=True)
class LeagueServices:
    settings: LeagueSettings
    players: PlayerStore
    teams: TeamStore
    platform: DiscordPlatformClient
    stats: BrawlStatsClient
    free_agents: FreeAgentReconciler
    role_sync: RoleSyncService
    verification: VerificationService

    async def close(self) -> None:
        await self.stats.close()


def build_services(
    bot: discord.Bot,
    settings: LeagueSettings,
    stats_api_token: str | None,
) -> LeagueServices:
    platform = DiscordPlatformClient(bot, settings)
    stats = BrawlStatsClient(settings.stats_api_url, stats_api_token, timeout=settings.stats_api_timeout)

    return LeagueServices(
        settings=settings,
        players=player_store,
        teams=team_store,
        platform=platform,
        stats=stats,
        free_agents=FreeAgentReconciler(settings, player_store, platform, stats),
        role_sync=RoleSyncService(settings, team_store, platform),
        verification=VerificationService(player_store, stats, platform),
    )
