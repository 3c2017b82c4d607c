"""
Discord operations used by the league services, normalised to one contract.

Structural lookups (channel, message, member, role) return ``None`` when the
object is absent instead of raising, so the caller decides whether absence is
fatal. Corrective operations (deleting a message, sending a DM or a staff log)
return ``True``/``False`` and never raise.
"""

from __future__ import annotations

import asyncio
from typing import Union

import discord

from leaguebot.configuration.app_configuration import LeagueSettings
from leaguebot.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, RoleID, UserID
from leaguebot.datatypes.message_datatypes import MessagePayload
from leaguebot.util.logger import get_logger

logger = get_logger("platform_client")

# Discord error code for "Cannot send messages to this user"
DM_DISABLED_ERROR_CODE = 50007

MessageChannel = Union[discord.TextChannel, discord.Thread]


class DiscordPlatformClient:
    """Adapter from the league services to a running py-cord bot."""

    def __init__(self, bot: discord.Bot, settings: LeagueSettings) -> None:
        self.bot = bot
        self.settings = settings

    # ------------------------------------------------------------------
    # Channels and messages
    # ------------------------------------------------------------------

    async def fetch_channel(self, channel_id: ChannelID) -> MessageChannel | None:
        """Resolve a channel that supports send/fetch/edit/delete, else ``None``."""
        channel = self.bot.get_channel(channel_id.to_int())
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(channel_id.to_int())
            except (discord.NotFound, discord.Forbidden, discord.InvalidData):
                logger.warning("[PLATFORM] Channel %s not found or not accessible", channel_id)
                return None
            except discord.HTTPException as exc:
                logger.error("[PLATFORM] Failed to fetch channel %s: %s", channel_id, exc)
                return None

        if not isinstance(channel, (discord.TextChannel, discord.Thread)):
            logger.warning("[PLATFORM] Channel %s is not a text channel (%s)", channel_id, type(channel).__name__)
            return None
        return channel

    async def send_message(self, channel: MessageChannel, payload: MessagePayload) -> MessageID:
        message = await channel.send(**payload.as_kwargs())
        return MessageID.from_message(message)

    async def fetch_message(self, channel: MessageChannel, message_id: MessageID) -> discord.Message | None:
        """Fetch a message by id; ``None`` when it has been deleted."""
        try:
            return await channel.fetch_message(message_id.to_int())
        except discord.NotFound:
            return None

    async def edit_message(self, message: discord.Message, payload: MessagePayload) -> None:
        await message.edit(**payload.as_kwargs())

    async def delete_message(self, message: discord.Message) -> bool:
        """
        Attempt to delete a Discord message, suppressing recoverable errors.

        Returns:
            bool: True if deletion succeeded, False otherwise.
        """
        try:
            await message.delete()
            return True
        except discord.NotFound:
            return False
        except discord.Forbidden:
            logger.warning("[PLATFORM] No permission to delete message %s", message.id)
        except discord.HTTPException as exc:
            logger.error("[PLATFORM] Error deleting message %s: %s", message.id, exc)
        return False

    # ------------------------------------------------------------------
    # Direct messages and staff log
    # ------------------------------------------------------------------

    async def send_direct_message(self, user_id: UserID, payload: MessagePayload) -> bool:
        """DM a user. Returns False when the user cannot be reached."""
        try:
            user = self.bot.get_user(user_id.to_int()) or await self.bot.fetch_user(user_id.to_int())
            await user.send(**payload.as_kwargs())
            return True
        except asyncio.CancelledError:
            raise
        except discord.Forbidden as exc:
            if exc.code == DM_DISABLED_ERROR_CODE:
                logger.debug("[PLATFORM] %s has DMs disabled", user_id)
            else:
                logger.warning("[PLATFORM] Not allowed to DM %s: %s", user_id, exc)
        except discord.NotFound:
            logger.warning("[PLATFORM] User %s not found for DM", user_id)
        except discord.HTTPException as exc:
            logger.warning("[PLATFORM] Could not DM %s: %s", user_id, exc)
        return False

    async def send_log(self, payload: MessagePayload) -> bool:
        """Post to the configured staff log channel, if any."""
        if self.settings.staff_log_channel_id is None:
            return False
        channel = await self.fetch_channel(self.settings.staff_log_channel_id)
        if channel is None:
            return False
        try:
            await channel.send(**payload.as_kwargs())
            return True
        except discord.HTTPException as exc:
            logger.warning("[PLATFORM] Failed to send staff log: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Guild members and roles
    # ------------------------------------------------------------------

    async def fetch_guild(self, guild_id: GuildID) -> discord.Guild | None:
        guild = self.bot.get_guild(guild_id.to_int())
        if guild is not None:
            return guild
        try:
            return await self.bot.fetch_guild(guild_id.to_int())
        except (discord.NotFound, discord.Forbidden):
            return None

    async def fetch_member(self, guild: discord.Guild, user_id: UserID) -> discord.Member | None:
        member = guild.get_member(user_id.to_int())
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id.to_int())
        except discord.NotFound:
            return None

    def get_role(self, guild: discord.Guild, role_id: RoleID) -> discord.Role | None:
        return guild.get_role(role_id.to_int())

    async def add_role(self, member: discord.Member, role: discord.Role, *, reason: str) -> None:
        await member.add_roles(role, reason=reason)
