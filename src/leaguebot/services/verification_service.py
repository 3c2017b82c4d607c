"""
Player verification against the Brawl Stars API.

Verification is where player records are born: the first successful
``verify`` creates the record, later ones update the linked tag.
"""

from __future__ import annotations

from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.message_datatypes import MessagePayload
from leaguebot.datatypes.player_datatypes import PlayerRecord
from leaguebot.datatypes.result_datatypes import ReconcileErrorKind, ReconcileResult
from leaguebot.repositories.player_repo import PlayerStore
from leaguebot.services.platform_client import DiscordPlatformClient
from leaguebot.services.stats_client import BrawlStatsClient, normalize_tag
from leaguebot.ui.status_embed import build_log_embed
from leaguebot.util.logger import get_logger

logger = get_logger("verification_service")


class VerificationService:
    def __init__(
        self,
        store: PlayerStore,
        stats: BrawlStatsClient,
        platform: DiscordPlatformClient,
    ) -> None:
        self._store = store
        self._stats = stats
        self._platform = platform

    async def verify(self, user_id: UserID, tag: str) -> ReconcileResult[PlayerRecord]:
        """Link ``tag`` to ``user_id`` if the API knows the account."""
        if not tag or not tag.strip().lstrip("#"):
            return ReconcileResult.failure(ReconcileErrorKind.NOT_FOUND, "A player tag is required.")

        formatted = normalize_tag(tag)
        profile = await self._stats.fetch_profile(formatted)
        if profile is None:
            return ReconcileResult.failure(
                ReconcileErrorKind.NOT_FOUND,
                f"No Brawl Stars account exists with the tag `{formatted}`.",
            )

        record = await self._store.find_by_identity(user_id)
        if record is None:
            record = PlayerRecord(identity=user_id)
        record.external_profile_tag = formatted
        record.is_verified = True
        await self._store.save(record)

        logger.info("[VERIFICATION] %s verified as %s (%s)", user_id, formatted, profile.name)
        await self._platform.send_log(
            MessagePayload(
                embed=build_log_embed(
                    f"User verified with tag **{formatted}**.", user_id=user_id
                )
            )
        )
        return ReconcileResult.success(record)

    async def check_verified(self, user_id: UserID) -> bool:
        """Recompute ``is_verified`` from the presence of a linked tag."""
        record = await self._store.find_by_identity(user_id)
        if record is None:
            return False

        is_verified = bool(record.external_profile_tag)
        if record.is_verified != is_verified:
            record.is_verified = is_verified
            await self._store.save(record)
        return is_verified
