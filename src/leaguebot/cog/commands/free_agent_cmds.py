"""
Free agent cog: player-facing verification and free-agent commands.

- /verify: link a Brawl Stars tag to the caller's profile
- /freeagent: switch the caller's free-agent advertisement on or off
- /sweep_free_agents: run the periodic sweep now (Manage Server)

Responses are ephemeral; the public side effect is the advertisement itself.
"""
import discord
from discord import Option
from discord.ext import commands

from leaguebot.bot.league_services import LeagueServices
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.ui.free_agent_views import FreeAgentRenewView
from leaguebot.ui.status_embed import build_error_embed, build_success_embed
from leaguebot.util.logger import get_logger

logger = get_logger("free_agent_commands")


class FreeAgentCog(commands.Cog):
    """Verification and free-agent lifecycle commands."""

    def __init__(self, discord_bot_instance, services: LeagueServices):
        self.discord_bot_instance = discord_bot_instance
        self.services = services
        self._renew_view_registered = False
        logger.info("[FREE AGENT CMDS] Free agent cog loaded")

    def _has_manage_permission(self, ctx: discord.ApplicationContext) -> bool:
        if not isinstance(ctx.user, discord.Member):
            return False
        return ctx.user.guild_permissions.manage_guild

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        if self._renew_view_registered:
            return
        self.discord_bot_instance.add_view(
            FreeAgentRenewView(
                self.services.free_agents,
                renew_days=self.services.settings.renew_days,
            )
        )
        self._renew_view_registered = True
        logger.info("[FREE AGENT CMDS] Persistent renewal view registered")

    @commands.slash_command(name="verify", description="Link your Brawl Stars account to your league profile.")
    async def verify(
        self,
        ctx: discord.ApplicationContext,
        tag: Option(str, "Your Brawl Stars player tag, e.g. #ABC123.", required=True),  # type: ignore
    ):
        await ctx.defer(ephemeral=True)

        result = await self.services.verification.verify(UserID(ctx.user.id), tag)
        if not result.ok:
            await ctx.send_followup(embed=build_error_embed(result.error), ephemeral=True)
            return

        await ctx.send_followup(
            embed=build_success_embed(
                "Account verified",
                f"Your profile is now linked to **{result.value.external_profile_tag}**.",
            ),
            ephemeral=True,
        )

    @commands.slash_command(name="freeagent", description="Turn your free agent advertisement on or off.")
    async def freeagent(self, ctx: discord.ApplicationContext):
        await ctx.defer(ephemeral=True)
        user_id = UserID(ctx.user.id)

        if not await self.services.verification.check_verified(user_id):
            await ctx.send_followup(
                embed=build_error_embed("You need to verify your account with /verify first."),
                ephemeral=True,
            )
            return

        result = await self.services.free_agents.toggle(user_id)
        if not result.ok:
            await ctx.send_followup(embed=build_error_embed(result.error), ephemeral=True)
            return

        channel_id = self.services.settings.free_agent_channel_id
        if result.value.is_free_agent:
            embed = build_success_embed(
                "You are now a free agent",
                f"Your advertisement is posted in <#{channel_id}> and stays active for "
                f"**{self.services.settings.toggle_days} days**.",
            )
        else:
            embed = build_success_embed(
                "Free agent status removed",
                f"Your advertisement was removed from <#{channel_id}>.",
            )
        await ctx.send_followup(embed=embed, ephemeral=True)

    @commands.slash_command(name="sweep_free_agents", description="Reconcile all free agent advertisements now.")
    async def sweep_free_agents(self, ctx: discord.ApplicationContext):
        if not self._has_manage_permission(ctx):
            await ctx.respond("You need Manage Server permission.", ephemeral=True)
            return

        await ctx.defer(ephemeral=True)
        result = await self.services.free_agents.sweep()
        if not result.ok:
            await ctx.send_followup(embed=build_error_embed(result.error), ephemeral=True)
            return

        report = result.value
        await ctx.send_followup(
            embed=build_success_embed(
                "Free agents reconciled",
                f"Scanned **{report.scanned}** free agents: {report.withdrawn} withdrawn, "
                f"{report.expired} expired, {report.refreshed} refreshed, "
                f"{report.republished} republished, {len(report.failures)} failed.",
            ),
            ephemeral=True,
        )


def setup(discord_bot_instance, services: LeagueServices):
    discord_bot_instance.add_cog(FreeAgentCog(discord_bot_instance, services))
