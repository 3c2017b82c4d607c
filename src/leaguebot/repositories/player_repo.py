"""
Persistent storage for league player records.

``PlayerRepository`` is the low-level, connection-scoped CRUD for the
``players`` table. ``PlayerStore`` wraps it with the shared
:data:`~leaguebot.database.db_connection.db_connection` and exposes the
find / find-all / save contract the services depend on.
"""

from __future__ import annotations

import datetime
from typing import List, Optional

import aiosqlite

from leaguebot.database.db_connection import ConnectionManager, db_connection
from leaguebot.datatypes.discord_datatypes import MessageID, UserID
from leaguebot.datatypes.player_datatypes import PlayerRecord
from leaguebot.util.logger import get_logger

logger = get_logger("player_repo")

_COLUMNS = (
    "user_id, team_id, is_free_agent, free_agent_expires_at, "
    "free_agent_message_id, external_profile_tag, is_verified"
)


def _to_unix(value: Optional[datetime.datetime]) -> Optional[int]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return int(value.timestamp())


def _from_unix(value: Optional[int]) -> Optional[datetime.datetime]:
    if value is None:
        return None
    return datetime.datetime.fromtimestamp(int(value), tz=datetime.timezone.utc)


def _row_to_record(row) -> PlayerRecord:
    return PlayerRecord(
        identity=UserID(row[0]),
        team_id=row[1],
        is_free_agent=bool(row[2]),
        free_agent_expires_at=_from_unix(row[3]),
        free_agent_message_id=MessageID(row[4]) if row[4] else None,
        external_profile_tag=row[5],
        is_verified=bool(row[6]),
    )


class PlayerRepository:
    """Low-level CRUD for the ``players`` table."""

    @staticmethod
    async def get(conn: aiosqlite.Connection, user_id: UserID) -> PlayerRecord | None:
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM players WHERE user_id = ?",
            (str(user_id),),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_record(row) if row is not None else None

    @staticmethod
    async def get_all(conn: aiosqlite.Connection) -> List[PlayerRecord]:
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM players ORDER BY user_id"
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    @staticmethod
    async def upsert(conn: aiosqlite.Connection, record: PlayerRecord) -> None:
        """Insert the row for ``record.identity`` or overwrite it.

        ``team_id`` is only written on insert; afterwards it belongs to
        :class:`~leaguebot.repositories.team_repo.TeamRepository`.
        """
        await conn.execute(
            f"""
            INSERT INTO players ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                is_free_agent         = excluded.is_free_agent,
                free_agent_expires_at = excluded.free_agent_expires_at,
                free_agent_message_id = excluded.free_agent_message_id,
                external_profile_tag  = excluded.external_profile_tag,
                is_verified           = excluded.is_verified,
                updated_at            = CURRENT_TIMESTAMP
            """,
            (
                str(record.identity),
                record.team_id,
                int(record.is_free_agent),
                _to_unix(record.free_agent_expires_at),
                str(record.free_agent_message_id) if record.free_agent_message_id else None,
                record.external_profile_tag,
                int(record.is_verified),
            ),
        )

    @staticmethod
    async def update_free_agent_state(conn: aiosqlite.Connection, record: PlayerRecord) -> None:
        """Write only the three free-agent columns of an existing row."""
        await conn.execute(
            """
            UPDATE players SET
                is_free_agent         = ?,
                free_agent_expires_at = ?,
                free_agent_message_id = ?,
                updated_at            = CURRENT_TIMESTAMP
            WHERE user_id = ?
            """,
            (
                int(record.is_free_agent),
                _to_unix(record.free_agent_expires_at),
                str(record.free_agent_message_id) if record.free_agent_message_id else None,
                str(record.identity),
            ),
        )


class PlayerStore:
    """Player persistence bound to a connection manager."""

    def __init__(self, connection: ConnectionManager = db_connection) -> None:
        self._connection = connection
        self._repo = PlayerRepository()

    async def find_by_identity(self, user_id: UserID) -> PlayerRecord | None:
        async with self._connection.read() as conn:
            return await self._repo.get(conn, user_id)

    async def find_all(self) -> List[PlayerRecord]:
        """Every stored record. A full table scan; fine at league scale."""
        async with self._connection.read() as conn:
            return await self._repo.get_all(conn)

    async def save(self, record: PlayerRecord) -> None:
        async with self._connection.transaction() as conn:
            await self._repo.upsert(conn, record)
        logger.debug(
            "[PLAYER STORE] Saved %s (free_agent=%s, message=%s)",
            record.identity, record.is_free_agent, record.free_agent_message_id,
        )

    async def save_free_agent_state(self, record: PlayerRecord) -> None:
        """Persist the free-agent fields without touching roster or verification data."""
        async with self._connection.transaction() as conn:
            await self._repo.update_free_agent_state(conn, record)
        logger.debug(
            "[PLAYER STORE] Saved free agent state of %s (free_agent=%s, message=%s)",
            record.identity, record.is_free_agent, record.free_agent_message_id,
        )


# Module-level singleton
player_store = PlayerStore()
