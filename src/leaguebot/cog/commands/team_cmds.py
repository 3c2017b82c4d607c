"""
Team cog: roster administration and ping role sync (Manage Server only).

- /team_create: create a team
- /team_add: roster a member and grant the ping role
- /team_remove: remove a member from a roster
- /sync_ping_roles: grant the ping role to every rostered player
"""
import aiosqlite
import discord
from discord import Option
from discord.ext import commands

from leaguebot.bot.league_services import LeagueServices
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.ui.status_embed import build_error_embed, build_success_embed
from leaguebot.util.logger import get_logger

logger = get_logger("team_commands")


class TeamCog(commands.Cog):
    """Roster management for league staff."""

    def __init__(self, discord_bot_instance, services: LeagueServices):
        self.discord_bot_instance = discord_bot_instance
        self.services = services
        logger.info("[TEAM CMDS] Team cog loaded")

    async def _check_permissions(self, ctx: discord.ApplicationContext) -> bool:
        if not isinstance(ctx.user, discord.Member) or not ctx.user.guild_permissions.manage_guild:
            await ctx.respond("You need Manage Server permission.", ephemeral=True)
            return False
        return True

    @commands.slash_command(name="team_create", description="Create a league team.")
    async def team_create(
        self,
        ctx: discord.ApplicationContext,
        name: Option(str, "Team name.", required=True),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return
        await ctx.defer(ephemeral=True)

        try:
            team_id = await self.services.teams.create(name.strip())
        except aiosqlite.IntegrityError:
            await ctx.send_followup(embed=build_error_embed(f"A team named **{name}** already exists."), ephemeral=True)
            return
        await ctx.send_followup(
            embed=build_success_embed("Team created", f"**{name}** was created with id `{team_id}`."),
            ephemeral=True,
        )

    @commands.slash_command(name="team_add", description="Add a member to a team roster.")
    async def team_add(
        self,
        ctx: discord.ApplicationContext,
        team_id: Option(int, "Team id.", required=True),  # type: ignore
        member: Option(discord.Member, "Member to add.", required=True),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return
        await ctx.defer(ephemeral=True)

        user_id = UserID.from_user(member)
        try:
            await self.services.teams.add_member(team_id, user_id)
        except aiosqlite.IntegrityError:
            await ctx.send_followup(embed=build_error_embed(f"Team `{team_id}` does not exist."), ephemeral=True)
            return
        role_result = await self.services.role_sync.ensure_ping_role(user_id)

        description = f"{member.mention} was added to team `{team_id}`."
        if not role_result.ok:
            description += f"\nPing role not granted: {role_result.error.detail}"
        await ctx.send_followup(embed=build_success_embed("Member added", description), ephemeral=True)

    @commands.slash_command(name="team_remove", description="Remove a member from a team roster.")
    async def team_remove(
        self,
        ctx: discord.ApplicationContext,
        team_id: Option(int, "Team id.", required=True),  # type: ignore
        member: Option(discord.Member, "Member to remove.", required=True),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return
        await ctx.defer(ephemeral=True)

        await self.services.teams.remove_member(team_id, UserID.from_user(member))
        await ctx.send_followup(
            embed=build_success_embed("Member removed", f"{member.mention} was removed from team `{team_id}`."),
            ephemeral=True,
        )

    @commands.slash_command(name="sync_ping_roles", description="Grant the ping role to every rostered player.")
    async def sync_ping_roles(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx):
            return
        await ctx.defer(ephemeral=True)

        report = await self.services.role_sync.sync()
        if report.failures:
            lines = [f"<@{f.user_id}> ({f.team_name}): {f.reason}" for f in report.failures[:10]]
            await ctx.send_followup(
                embed=build_error_embed(
                    f"Granted {report.granted}, already present {report.already_present}, "
                    f"failed {len(report.failures)}:\n" + "\n".join(lines)
                ),
                ephemeral=True,
            )
            return

        await ctx.send_followup(
            embed=build_success_embed(
                "Ping roles synced",
                f"Granted **{report.granted}**, already present **{report.already_present}** "
                f"across {report.teams_scanned} teams.",
            ),
            ephemeral=True,
        )


def setup(discord_bot_instance, services: LeagueServices):
    discord_bot_instance.add_cog(TeamCog(discord_bot_instance, services))
