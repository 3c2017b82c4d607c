"""
Message builders for the free-agent lifecycle.

All functions here are pure: they only read their arguments and build
``discord.Embed`` / ``discord.ui.View`` objects. Views must be created inside
a running event loop, which is always the case when the services call them.
"""

import datetime
from typing import Optional

import discord

from leaguebot.datatypes.discord_datatypes import ChannelID, UserID
from leaguebot.datatypes.message_datatypes import MessagePayload
from leaguebot.datatypes.player_datatypes import PlayerRecord, ProfileData

RENEW_BUTTON_CUSTOM_ID = "leaguebot:free_agent:renew"

FREE_AGENT_COLOR = discord.Color.blurple()
AFFILIATED_COLOR = discord.Color.from_rgb(0x2E, 0xCC, 0x71)
EXPIRED_COLOR = discord.Color.from_rgb(0xE6, 0x7E, 0x22)


def profile_url(user_id: UserID) -> str:
    return f"https://discord.com/users/{user_id}"


def build_contact_view(user_id: UserID) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(
        discord.ui.Button(
            label="Contact",
            style=discord.ButtonStyle.link,
            url=profile_url(user_id),
        )
    )
    return view


def build_renew_view() -> discord.ui.View:
    """View carrying the persistent renewal button handled by ``FreeAgentRenewView``."""
    view = discord.ui.View(timeout=None)
    view.add_item(
        discord.ui.Button(
            label="Renew free agent",
            style=discord.ButtonStyle.primary,
            emoji="🔍",
            custom_id=RENEW_BUTTON_CUSTOM_ID,
        )
    )
    return view


def _add_profile_fields(embed: discord.Embed, profile: ProfileData) -> None:
    embed.add_field(name="Player", value=f"{profile.name} (`{profile.tag}`)", inline=False)
    embed.add_field(
        name="Trophies",
        value=f"🏆 {profile.trophies:,} (best {profile.highest_trophies:,})",
        inline=True,
    )
    embed.add_field(name="Level", value=str(profile.exp_level), inline=True)
    embed.add_field(
        name="Victories",
        value=(
            f"3v3: {profile.trio_victories:,}\n"
            f"Solo: {profile.solo_victories:,}\n"
            f"Duo: {profile.duo_victories:,}"
        ),
        inline=True,
    )
    embed.add_field(name="Club", value=profile.club_name or "No club", inline=True)


def render_free_agent_advertisement(
    record: PlayerRecord,
    profile: Optional[ProfileData],
    now: datetime.datetime,
) -> MessagePayload:
    """Build the public advertisement for a free agent.

    ``profile`` is ``None`` when the stats lookup failed or the player has no
    linked tag; the advertisement is still published without stats. ``now``
    stamps the embed, so it matches the time the expiry was computed from.
    """
    embed = discord.Embed(
        title="🔍 Free agent",
        description=f"<@{record.identity}> is looking for a team.",
        color=FREE_AGENT_COLOR,
        timestamp=now,
    )

    if profile is not None:
        _add_profile_fields(embed, profile)
    else:
        if record.external_profile_tag:
            embed.add_field(name="Tag", value=f"`{record.external_profile_tag}`", inline=True)
        embed.add_field(name="Stats", value="Stats are unavailable right now.", inline=False)

    embed.set_footer(text="Use the button below to contact the player.")
    return MessagePayload(embed=embed, view=build_contact_view(record.identity))


def render_affiliation_notice(channel_id: ChannelID) -> MessagePayload:
    """DM sent when an advertisement is withdrawn because the player joined a team."""
    embed = discord.Embed(
        title="Free agent status updated",
        description=(
            "Your **free agent** status was removed automatically because you are now part of a team.\n\n"
            f"Your advertisement was deleted from <#{channel_id}>."
        ),
        color=AFFILIATED_COLOR,
    )
    return MessagePayload(embed=embed)


def render_expiry_notice(channel_id: ChannelID) -> MessagePayload:
    """DM sent when an advertisement expires, with a button to renew it."""
    embed = discord.Embed(
        title="Free agent status expired",
        description=(
            "Your **free agent** status has expired without you joining a team.\n\n"
            f"Your advertisement was deleted from <#{channel_id}>.\n\n"
            "You can renew it with the button below."
        ),
        color=EXPIRED_COLOR,
    )
    return MessagePayload(embed=embed, view=build_renew_view())
