from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import fcntl
from typing import Any, Dict, Optional
import yaml

from leaguebot.datatypes.discord_datatypes import ChannelID, GuildID, RoleID
from leaguebot.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_STATS_API_URL = "https://api.brawlstars.com/v1"
ONE_DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class LeagueSettings:
    """League-wide identifiers and timings handed to the services at construction.

    Attributes:
        guild_id: The league's Discord server.
        free_agent_channel_id: Channel where free-agent advertisements are posted.
        ping_role_id: Marker role granted to every rostered player.
        staff_log_channel_id: Optional channel receiving staff log embeds.
        renew_days: Advertisement window granted by the renewal button.
        toggle_days: Advertisement window granted by the self-service toggle.
        sweep_interval_seconds: Period of the free-agent sweep.
        role_sync_interval_seconds: Period of the ping role sync.
        stats_api_url: Base URL of the Brawl Stars API.
        stats_api_timeout: Per-request timeout in seconds.
    """
    guild_id: GuildID
    free_agent_channel_id: ChannelID
    ping_role_id: RoleID
    staff_log_channel_id: Optional[ChannelID] = None
    renew_days: int = 14
    toggle_days: int = 7
    sweep_interval_seconds: float = ONE_DAY_SECONDS
    role_sync_interval_seconds: float = ONE_DAY_SECONDS
    stats_api_url: str = DEFAULT_STATS_API_URL
    stats_api_timeout: float = 10.0


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml``, exposes dictionary-like
    access helpers, and builds the typed :class:`LeagueSettings` the services consume.
    Uses fcntl file locks for safe concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _section(self, key: str) -> Dict[str, Any]:
        value = self._data.get(key, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (which will be an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping (do not mutate)."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Return the SQLite database path (default ``./data/league.db``)."""
        value = self._section("database").get("path") or "./data/league.db"
        return Path(str(value)).resolve()

    @property
    def league_settings(self) -> LeagueSettings:
        """Build the typed league settings.

        Raises:
            ValueError: If the guild, free-agent channel or ping role id is
                missing or not a valid snowflake.
        """
        league = self._section("league")
        channels = self._section("channels")
        roles = self._section("roles")
        free_agents = self._section("free_agents")
        role_sync = self._section("role_sync")
        stats_api = self._section("stats_api")

        missing = [
            name for name, value in (
                ("league.guild_id", league.get("guild_id")),
                ("channels.free_agents", channels.get("free_agents")),
                ("roles.ping", roles.get("ping")),
            )
            if value in (None, "")
        ]
        if missing:
            raise ValueError(f"Missing required configuration keys: {', '.join(missing)}")

        staff_log = channels.get("staff_log")

        return LeagueSettings(
            guild_id=GuildID(league["guild_id"]),
            free_agent_channel_id=ChannelID(channels["free_agents"]),
            ping_role_id=RoleID(roles["ping"]),
            staff_log_channel_id=ChannelID(staff_log) if staff_log else None,
            renew_days=int(free_agents.get("renew_days", 14)),
            toggle_days=int(free_agents.get("toggle_days", 7)),
            sweep_interval_seconds=float(free_agents.get("sweep_interval_seconds", ONE_DAY_SECONDS)),
            role_sync_interval_seconds=float(role_sync.get("interval_seconds", ONE_DAY_SECONDS)),
            stats_api_url=str(stats_api.get("base_url") or DEFAULT_STATS_API_URL).rstrip("/"),
            stats_api_timeout=float(stats_api.get("timeout_seconds", 10.0)),
        )


