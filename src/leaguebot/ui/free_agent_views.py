"""Persistent interaction handlers for free-agent buttons."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.ui.free_agent_embed import RENEW_BUTTON_CUSTOM_ID
from leaguebot.ui.status_embed import build_error_embed, build_success_embed
from leaguebot.util.logger import get_logger

if TYPE_CHECKING:
    from leaguebot.services.free_agent_service import FreeAgentReconciler

logger = get_logger("free_agent_views")

RENEW_FAILED_MESSAGE = "Something went wrong while renewing your free agent status. Please try again later."


class FreeAgentRenewView(discord.ui.View):
    """Handles the renewal button sent in expiry DMs.

    Registered once with ``bot.add_view`` so buttons on messages sent before a
    restart keep working.
    """

    def __init__(self, reconciler: "FreeAgentReconciler", *, renew_days: int) -> None:
        super().__init__(timeout=None)
        self.reconciler = reconciler
        self.renew_days = renew_days

    @discord.ui.button(
        label="Renew free agent",
        style=discord.ButtonStyle.primary,
        emoji="🔍",
        custom_id=RENEW_BUTTON_CUSTOM_ID,
    )
    async def renew_button(self, button: discord.ui.Button, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)

        try:
            result = await self.reconciler.renew(UserID(interaction.user.id))
        except Exception:
            logger.exception("[FREE AGENT VIEW] Renewal failed for %s", interaction.user.id)
            await interaction.followup.send(embed=build_error_embed(RENEW_FAILED_MESSAGE), ephemeral=True)
            return

        if not result.ok:
            await interaction.followup.send(embed=build_error_embed(result.error), ephemeral=True)
            return

        await interaction.followup.send(
            embed=build_success_embed(
                "Free agent status renewed",
                f"Your **free agent** status was renewed and stays active for the next "
                f"**{self.renew_days} days**. Your advertisement is already posted.",
            ),
            ephemeral=True,
        )
