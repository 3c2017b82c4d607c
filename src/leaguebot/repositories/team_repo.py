"""
Persistent storage for league teams and their rosters.

Roster membership is recorded twice: a ``team_members`` row for the roster
listing and ``players.team_id`` for the player's own affiliation, which is
what the free-agent sweep checks.
"""

from __future__ import annotations

from typing import Dict, List

import aiosqlite

from leaguebot.database.db_connection import ConnectionManager, db_connection
from leaguebot.datatypes.discord_datatypes import UserID
from leaguebot.datatypes.player_datatypes import TeamRecord
from leaguebot.util.logger import get_logger

logger = get_logger("team_repo")


class TeamRepository:
    """Low-level CRUD for the ``teams`` and ``team_members`` tables."""

    @staticmethod
    async def create(conn: aiosqlite.Connection, name: str) -> int:
        """Insert a team and return its id."""
        cursor = await conn.execute("INSERT INTO teams (name) VALUES (?)", (name,))
        return int(cursor.lastrowid)

    @staticmethod
    async def add_member(conn: aiosqlite.Connection, team_id: int, user_id: UserID) -> None:
        """Roster ``user_id`` on ``team_id``, creating the player row if needed.

        A player is on one roster at a time; any other membership is dropped.
        """
        await conn.execute(
            "DELETE FROM team_members WHERE user_id = ? AND team_id != ?",
            (str(user_id), team_id),
        )
        await conn.execute(
            "INSERT OR IGNORE INTO team_members (team_id, user_id) VALUES (?, ?)",
            (team_id, str(user_id)),
        )
        await conn.execute(
            """
            INSERT INTO players (user_id, team_id) VALUES (?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                team_id    = excluded.team_id,
                updated_at = CURRENT_TIMESTAMP
            """,
            (str(user_id), team_id),
        )

    @staticmethod
    async def remove_member(conn: aiosqlite.Connection, team_id: int, user_id: UserID) -> None:
        await conn.execute(
            "DELETE FROM team_members WHERE team_id = ? AND user_id = ?",
            (team_id, str(user_id)),
        )
        await conn.execute(
            "UPDATE players SET team_id = NULL, updated_at = CURRENT_TIMESTAMP "
            "WHERE user_id = ? AND team_id = ?",
            (str(user_id), team_id),
        )

    @staticmethod
    async def get_all_with_members(conn: aiosqlite.Connection) -> List[TeamRecord]:
        """Return every team with its roster, teams without members included."""
        async with conn.execute(
            "SELECT team_id, name FROM teams ORDER BY team_id"
        ) as cursor:
            team_rows = await cursor.fetchall()

        teams: Dict[int, TeamRecord] = {
            row[0]: TeamRecord(team_id=row[0], name=row[1]) for row in team_rows
        }

        async with conn.execute(
            "SELECT team_id, user_id FROM team_members ORDER BY team_id, user_id"
        ) as cursor:
            member_rows = await cursor.fetchall()

        for team_id, user_id in member_rows:
            team = teams.get(team_id)
            if team is None:
                continue
            try:
                team.member_ids.append(UserID(user_id))
            except ValueError:
                logger.warning("[TEAM REPO] Ignoring malformed member id %r on team %s", user_id, team_id)

        return list(teams.values())


class TeamStore:
    """Team persistence bound to a connection manager."""

    def __init__(self, connection: ConnectionManager = db_connection) -> None:
        self._connection = connection
        self._repo = TeamRepository()

    async def find_all(self) -> List[TeamRecord]:
        async with self._connection.read() as conn:
            return await self._repo.get_all_with_members(conn)

    async def create(self, name: str, member_ids: List[UserID] | None = None) -> int:
        async with self._connection.transaction() as conn:
            team_id = await self._repo.create(conn, name)
            for user_id in member_ids or []:
                await self._repo.add_member(conn, team_id, user_id)
        logger.info("[TEAM STORE] Created team %s (%s) with %d members", name, team_id, len(member_ids or []))
        return team_id

    async def add_member(self, team_id: int, user_id: UserID) -> None:
        async with self._connection.transaction() as conn:
            await self._repo.add_member(conn, team_id, user_id)

    async def remove_member(self, team_id: int, user_id: UserID) -> None:
        async with self._connection.transaction() as conn:
            await self._repo.remove_member(conn, team_id, user_id)


# Module-level singleton
team_store = TeamStore()
