"""
League Bot
==========

A Discord bot for a competitive Brawl Stars league: player verification,
free agent advertisements that expire and refresh themselves, and the ping
role for rostered players.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. LEAGUEBOT_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("LEAGUEBOT_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from leaguebot.bot.league_services import LeagueServices, build_services
from leaguebot.configuration.app_configuration import CONFIG_PATH, AppConfig
from leaguebot.database.db_connection import db_connection
from leaguebot.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> tuple[str, str | None]:
    """Load ``.env`` and return the Discord token and the Brawl Stars API token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)

    stats_token = os.getenv("BRAWL_API_TOKEN")
    if not stats_token:
        logger.warning("'BRAWL_API_TOKEN' not set; stats lookups will fail and ads are posted without stats.")
    return token, stats_token


def build_intents() -> discord.Intents:
    """Guild and member intents needed for role grants and member lookups."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, services: LeagueServices) -> None:
    """Register all cogs with the bot, handing each the shared services."""
    from leaguebot.cog.commands import free_agent_cmds, team_cmds
    from leaguebot.cog.listener import scheduler_cog

    free_agent_cmds.setup(discord_bot_instance, services)
    team_cmds.setup(discord_bot_instance, services)
    scheduler_cog.setup(discord_bot_instance, services)

    logger.info("All cogs loaded successfully.")


def create_bot(app_config: AppConfig, stats_token: str | None) -> tuple[discord.Bot, LeagueServices]:
    """Instantiate the bot, build the services and register all cogs."""
    settings = app_config.league_settings
    bot = discord.Bot(intents=build_intents(), debug_guilds=[settings.guild_id.to_int()])
    services = build_services(bot, settings, stats_token)
    load_cogs(bot, services)
    return bot, services


async def start_bot(bot: discord.Bot, token: str) -> None:
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, services: LeagueServices | None) -> None:
    """Close the bot, the HTTP session and the database, logging each failure."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord bot: %s", exc)

    if services is not None:
        try:
            await services.close()
        except Exception as exc:
            logger.exception("Error while closing services: %s", exc)

    try:
        await db_connection.close()
    except Exception as exc:
        logger.exception("Error while closing the database: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the database and the bot, returning an exit code."""
    token, stats_token = load_environment()
    app_config = AppConfig(CONFIG_PATH)

    try:
        logger.info("Initializing database...")
        await db_connection.open(app_config.database_path)
    except Exception as exc:
        logger.critical("Failed to initialize database: %s", exc)
        return 1

    try:
        bot, services = create_bot(app_config, stats_token)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await db_connection.close()
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, services)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting League Bot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
