"""
Free agent lifecycle reconciler.

Keeps three things in agreement for every player: the persisted free-agent
flag, its expiry, and the advertisement message posted in the free-agents
channel. Three entry points mutate that state:

- ``renew``  - renewal button in the expiry DM, 14-day window
- ``toggle`` - ``/freeagent`` command, 7-day window, or switch off
- ``sweep``  - periodic pass over every free-agent record

Ordering rules
--------------
A new advertisement is always published *before* the record is saved. A crash
in between leaves an orphaned message, never a record pointing at a message
that does not exist.

Corrective steps (deleting a stale message, DMing the player, refreshing
stats) are best-effort: they log and return a flag, they never abort the
state transition around them.

Concurrency
-----------
Each operation runs sequentially on one event loop and suspends only on I/O.
Running ``renew``/``toggle``/``sweep`` for the same player from several
processes at once is NOT safe: a multi-instance deployment needs per-player
mutual exclusion (optimistic versioning on save, or a lock keyed by user id).
A caller-side timeout means "outcome unknown"; the next sweep repairs any
partial state.

Within one process, roster changes and verification may interleave with a
running operation. The reconciler therefore persists only the free-agent
columns (``save_free_agent_state``) and the sweep re-reads each record right
before reconciling it, so a team assigned mid-pass is never overwritten.

The sweep loads every player (``find_all``) and filters in memory, an O(n)
scan per cycle. That is the scalability ceiling of this design.
"""

from __future__ import annotations

import asyncio
import datetime
from typing import Callable, Optional

from leaguebot.configuration.app_configuration import LeagueSettings
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.message_datatypes import MessagePayload
from leaguebot.datatypes.player_datatypes import PlayerRecord, ProfileData
from leaguebot.datatypes.result_datatypes import (
    ReconcileErrorKind,
    ReconcileResult,
    SweepFailure,
    SweepReport,
)
from leaguebot.repositories.player_repo import PlayerStore
from leaguebot.services.platform_client import DiscordPlatformClient, MessageChannel
from leaguebot.services.stats_client import BrawlStatsClient
from leaguebot.ui.free_agent_embed import (
    render_affiliation_notice,
    render_expiry_notice,
    render_free_agent_advertisement,
)
from leaguebot.util.logger import get_logger

logger = get_logger("free_agent_service")

Renderer = Callable[[PlayerRecord, Optional[ProfileData], datetime.datetime], MessagePayload]
Clock = Callable[[], datetime.datetime]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class FreeAgentReconciler:
    """Brings stored free-agent state and the posted advertisements into agreement.

    Args:
        settings: League identifiers and advertisement windows.
        store: Player persistence (``find_by_identity``, ``find_all``,
            ``save_free_agent_state``).
        platform: Discord operations.
        stats: Brawl Stars profile lookup.
        renderer: Builds the advertisement payload from a record, optional
            stats and the render time.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        settings: LeagueSettings,
        store: PlayerStore,
        platform: DiscordPlatformClient,
        stats: BrawlStatsClient,
        *,
        renderer: Renderer = render_free_agent_advertisement,
        clock: Clock = utcnow,
    ) -> None:
        self._settings = settings
        self._store = store
        self._platform = platform
        self._stats = stats
        self._render = renderer
        self._clock = clock

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def renew(self, user_id: UserID) -> ReconcileResult[PlayerRecord]:
        """Publish a fresh advertisement for an unaffiliated, inactive player."""
        record = await self._store.find_by_identity(user_id)
        if record is None:
            return ReconcileResult.failure(
                ReconcileErrorKind.NOT_FOUND, "Your player profile could not be found."
            )
        if record.team_id is not None:
            return ReconcileResult.failure(
                ReconcileErrorKind.INVALID_TRANSITION,
                "You cannot renew your free agent status while you are part of a team.",
            )
        if record.is_free_agent:
            return ReconcileResult.failure(
                ReconcileErrorKind.INVALID_TRANSITION,
                "Your free agent status is already active.",
            )

        channel = await self._platform.fetch_channel(self._settings.free_agent_channel_id)
        if channel is None:
            return self._channel_unavailable()

        return await self._activate(record, channel, days=self._settings.renew_days)

    async def toggle(self, user_id: UserID) -> ReconcileResult[PlayerRecord]:
        """Switch a player's free-agent status on (7-day window) or off."""
        record = await self._store.find_by_identity(user_id)
        if record is None:
            return ReconcileResult.failure(
                ReconcileErrorKind.NOT_FOUND, "Your player profile could not be found."
            )

        channel = await self._platform.fetch_channel(self._settings.free_agent_channel_id)
        if channel is None:
            return self._channel_unavailable()

        if record.is_free_agent:
            await self._discard_advertisement(channel, record)
            record.clear_free_agent()
            await self._store.save_free_agent_state(record)
            logger.info("[FREE AGENTS] %s is no longer a free agent", record.identity)
            return ReconcileResult.success(record)

        return await self._activate(record, channel, days=self._settings.toggle_days)

    async def sweep(self) -> ReconcileResult[SweepReport]:
        """Reconcile every free-agent record; one failing record never stops the pass."""
        channel = await self._platform.fetch_channel(self._settings.free_agent_channel_id)
        if channel is None:
            return self._channel_unavailable()

        report = SweepReport()
        candidates = [record.identity for record in await self._store.find_all() if record.is_free_agent]
        for identity in candidates:
            try:
                record = await self._store.find_by_identity(identity)
                if record is None or not record.is_free_agent:
                    continue
                report.scanned += 1
                await self._reconcile_record(channel, record, report)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("[FREE AGENTS] Failed to reconcile %s", identity)
                report.failures.append(SweepFailure(identity=identity, reason=str(exc)))

        logger.info(
            "[FREE AGENTS] Sweep done: scanned=%d withdrawn=%d repaired=%d expired=%d "
            "refreshed=%d republished=%d failed=%d",
            report.scanned, report.withdrawn, report.repaired, report.expired,
            report.refreshed, report.republished, len(report.failures),
        )
        return ReconcileResult.success(report)

    # ------------------------------------------------------------------
    # Sweep branches
    # ------------------------------------------------------------------

    async def _reconcile_record(
        self,
        channel: MessageChannel,
        record: PlayerRecord,
        report: SweepReport,
    ) -> None:
        now = self._clock()

        if record.team_id is not None:
            await self._discard_advertisement(channel, record)
            record.clear_free_agent()
            await self._store.save_free_agent_state(record)
            report.withdrawn += 1
            logger.info("[FREE AGENTS] Withdrew %s: joined team %s", record.identity, record.team_id)
            notice = render_affiliation_notice(self._settings.free_agent_channel_id)
            if not await self._notify(record.identity, notice):
                report.notifications_failed += 1
            return

        if record.free_agent_expires_at is None:
            record.free_agent_expires_at = now
            await self._store.save_free_agent_state(record)
            report.repaired += 1
            logger.warning("[FREE AGENTS] %s had no expiry, expiring now", record.identity)

        if record.is_expired(now):
            await self._discard_advertisement(channel, record)
            record.clear_free_agent()
            await self._store.save_free_agent_state(record)
            report.expired += 1
            logger.info("[FREE AGENTS] Advertisement of %s expired", record.identity)
            notice = render_expiry_notice(self._settings.free_agent_channel_id)
            if not await self._notify(record.identity, notice):
                report.notifications_failed += 1
            return

        payload = self._render(record, await self._lookup_profile(record), now)

        if record.free_agent_message_id is not None:
            message = await self._platform.fetch_message(channel, record.free_agent_message_id)
            if message is not None:
                await self._platform.edit_message(message, payload)
                report.refreshed += 1
                return
            logger.info(
                "[FREE AGENTS] Advertisement %s of %s was deleted, republishing",
                record.free_agent_message_id, record.identity,
            )

        record.free_agent_message_id = await self._platform.send_message(channel, payload)
        await self._store.save_free_agent_state(record)
        report.republished += 1

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    async def _activate(
        self,
        record: PlayerRecord,
        channel: MessageChannel,
        *,
        days: int,
    ) -> ReconcileResult[PlayerRecord]:
        now = self._clock()
        payload = self._render(record, await self._lookup_profile(record), now)

        try:
            message_id = await self._platform.send_message(channel, payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[FREE AGENTS] Could not publish advertisement for %s: %s", record.identity, exc)
            return ReconcileResult.failure(
                ReconcileErrorKind.CHANNEL_UNAVAILABLE,
                "The advertisement could not be published in the free agents channel.",
            )

        record.is_free_agent = True
        record.free_agent_expires_at = now + datetime.timedelta(days=days)
        record.free_agent_message_id = message_id
        await self._store.save_free_agent_state(record)

        logger.info(
            "[FREE AGENTS] %s is a free agent until %s (message %s)",
            record.identity, record.free_agent_expires_at.isoformat(), message_id,
        )
        return ReconcileResult.success(record)

    async def _lookup_profile(self, record: PlayerRecord) -> Optional[ProfileData]:
        if not record.external_profile_tag:
            return None
        try:
            return await self._stats.fetch_profile(record.external_profile_tag)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[FREE AGENTS] Stats lookup failed for %s: %s", record.external_profile_tag, exc)
            return None

    async def _discard_advertisement(self, channel: MessageChannel, record: PlayerRecord) -> bool:
        """Delete the referenced advertisement if it still exists."""
        if record.free_agent_message_id is None:
            return False
        try:
            message = await self._platform.fetch_message(channel, record.free_agent_message_id)
            if message is None:
                return False
            return await self._platform.delete_message(message)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "[FREE AGENTS] Could not delete advertisement %s of %s: %s",
                record.free_agent_message_id, record.identity, exc,
            )
            return False

    async def _notify(self, user_id: UserID, payload: MessagePayload) -> bool:
        try:
            delivered = await self._platform.send_direct_message(user_id, payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[FREE AGENTS] DM to %s failed: %s", user_id, exc)
            delivered = False
        if not delivered:
            logger.info("[FREE AGENTS] Could not notify %s by DM", user_id)
        return delivered

    def _channel_unavailable(self) -> ReconcileResult:
        logger.error(
            "[FREE AGENTS] Free agents channel %s not found or not a text channel",
            self._settings.free_agent_channel_id,
        )
        return ReconcileResult.failure(
            ReconcileErrorKind.CHANNEL_UNAVAILABLE,
            "The free agents channel could not be accessed.",
        )
