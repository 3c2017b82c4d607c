"""Ephemeral reply and staff-log embeds."""

import datetime

import discord

from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.result_datatypes import ReconcileError, ReconcileErrorKind

ERROR_TITLES = {
    ReconcileErrorKind.NOT_FOUND: "Not found",
    ReconcileErrorKind.INVALID_TRANSITION: "Action not allowed",
    ReconcileErrorKind.CHANNEL_UNAVAILABLE: "Channel unavailable",
    ReconcileErrorKind.EXTERNAL_LOOKUP_FAILURE: "Lookup failed",
}


def build_success_embed(title: str, description: str) -> discord.Embed:
    return discord.Embed(
        title=f"✅ {title}",
        description=description,
        color=discord.Color.green(),
    )


def build_error_embed(error: ReconcileError | str) -> discord.Embed:
    if isinstance(error, ReconcileError):
        title = ERROR_TITLES.get(error.kind, "Error")
        description = error.detail
    else:
        title = "Error"
        description = error
    return discord.Embed(
        title=f"❌ {title}",
        description=description,
        color=discord.Color.red(),
    )


def build_log_embed(description: str, *, user_id: UserID | None = None, success: bool = True) -> discord.Embed:
    """Staff log entry; green for success, red otherwise."""
    embed = discord.Embed(
        description=description,
        color=discord.Color.green() if success else discord.Color.red(),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    if user_id is not None:
        embed.add_field(name="User", value=f"<@{user_id}> (`{user_id}`)", inline=False)
    return embed
