"""
Ping role propagation.

Every rostered player should carry the league's ping role. ``sync`` walks all
teams and grants the role where it is missing. A member that cannot be
resolved, or a role that no longer exists, fails only that member's step; the
failure is collected in the report and the batch moves on.
"""

from __future__ import annotations

import asyncio

import discord

from leaguebot.configuration.app_configuration import LeagueSettings
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.result_datatypes import (
    ReconcileErrorKind,
    ReconcileResult,
    RoleSyncFailure,
    RoleSyncReport,
)
from leaguebot.repositories.team_repo import TeamStore
from leaguebot.services.platform_client import DiscordPlatformClient
from leaguebot.util.logger import get_logger

logger = get_logger("role_sync_service")

ROLE_SYNC_REASON = "League ping role sync"


class RoleSyncService:
    def __init__(
        self,
        settings: LeagueSettings,
        teams: TeamStore,
        platform: DiscordPlatformClient,
    ) -> None:
        self._settings = settings
        self._teams = teams
        self._platform = platform

    async def ensure_ping_role(
        self,
        user_id: UserID,
        guild: discord.Guild | None = None,
    ) -> ReconcileResult[bool]:
        """Grant the ping role to one user.

        Returns:
            ``True`` if the role was added, ``False`` if the member already had
            it, or a ``NOT_FOUND`` failure for a missing guild, role or member.
        """
        if guild is None:
            guild = await self._platform.fetch_guild(self._settings.guild_id)
            if guild is None:
                return ReconcileResult.failure(
                    ReconcileErrorKind.NOT_FOUND, f"Guild {self._settings.guild_id} not found."
                )

        role = self._platform.get_role(guild, self._settings.ping_role_id)
        if role is None:
            return ReconcileResult.failure(
                ReconcileErrorKind.NOT_FOUND,
                f"Role {self._settings.ping_role_id} not found in {guild.name}.",
            )

        member = await self._platform.fetch_member(guild, user_id)
        if member is None:
            return ReconcileResult.failure(
                ReconcileErrorKind.NOT_FOUND, f"Member {user_id} not found in {guild.name}."
            )

        if any(existing.id == role.id for existing in member.roles):
            return ReconcileResult.success(False)

        await self._platform.add_role(member, role, reason=ROLE_SYNC_REASON)
        logger.debug("[ROLE SYNC] Granted ping role to %s", user_id)
        return ReconcileResult.success(True)

    async def sync(self) -> RoleSyncReport:
        """Grant the ping role to every member of every team."""
        report = RoleSyncReport()

        guild = await self._platform.fetch_guild(self._settings.guild_id)
        if guild is None:
            logger.error("[ROLE SYNC] Guild %s not found, skipping sync", self._settings.guild_id)
            return report

        teams = await self._teams.find_all()
        if not teams:
            logger.warning("[ROLE SYNC] No teams found in the database")
            return report

        for team in teams:
            report.teams_scanned += 1
            if not team.member_ids:
                report.teams_skipped += 1
                continue

            for user_id in team.member_ids:
                try:
                    result = await self.ensure_ping_role(user_id, guild)
                except asyncio.CancelledError:
                    raise
                except discord.HTTPException as exc:
                    report.failures.append(RoleSyncFailure(user_id, team.name, str(exc)))
                    logger.warning("[ROLE SYNC] Failed to grant role to %s (%s): %s", user_id, team.name, exc)
                    continue

                if not result.ok:
                    report.failures.append(RoleSyncFailure(user_id, team.name, result.error.detail))
                    logger.warning("[ROLE SYNC] %s (%s): %s", user_id, team.name, result.error.detail)
                elif result.value:
                    report.granted += 1
                else:
                    report.already_present += 1

        logger.info(
            "[ROLE SYNC] Done: teams=%d skipped=%d granted=%d present=%d failed=%d",
            report.teams_scanned, report.teams_skipped, report.granted,
            report.already_present, len(report.failures),
        )
        return report
