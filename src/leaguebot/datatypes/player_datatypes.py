"""
Data structures for league players, teams and external game profiles.

``PlayerRecord`` is the persisted per-user row. Its free-agent fields are
owned by :class:`leaguebot.services.free_agent_service.FreeAgentReconciler`;
``free_agent_message_id`` is only a weak reference to a message that lives on
Discord and may have been deleted at any time.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from leaguebot.datatypes.discord_datatypes import MessageID, UserID


class FreeAgentState(Enum):
    """Derived lifecycle state of a player record."""

    AFFILIATED = "affiliated"
    NOT_FREE_AGENT = "not_free_agent"
    FREE_AGENT_ACTIVE = "free_agent_active"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class PlayerRecord:
    """A single player known to the league.

    Attributes:
        identity: Discord user id, immutable key of the record.
        team_id: Team the player is rostered on, if any.
        is_free_agent: Whether the player currently advertises as a free agent.
        free_agent_expires_at: UTC expiry of the advertisement; only meaningful
            while ``is_free_agent`` is true.
        free_agent_message_id: Advertisement message currently posted.
        external_profile_tag: Brawl Stars player tag (``#ABC123``).
        is_verified: Whether the player linked a valid game account.
    """
    identity: UserID
    team_id: Optional[int] = None
    is_free_agent: bool = False
    free_agent_expires_at: Optional[datetime.datetime] = None
    free_agent_message_id: Optional[MessageID] = None
    external_profile_tag: Optional[str] = None
    is_verified: bool = False

    @property
    def state(self) -> FreeAgentState:
        if self.team_id is not None:
            return FreeAgentState.AFFILIATED
        if self.is_free_agent:
            return FreeAgentState.FREE_AGENT_ACTIVE
        return FreeAgentState.NOT_FREE_AGENT

    def is_expired(self, now: datetime.datetime) -> bool:
        """An advertisement expiring exactly at ``now`` counts as expired."""
        return self.free_agent_expires_at is not None and self.free_agent_expires_at <= now

    def clear_free_agent(self) -> None:
        self.is_free_agent = False
        self.free_agent_message_id = None
        self.free_agent_expires_at = None

    def copy(self) -> "PlayerRecord":
        return replace(self)


@dataclass(slots=True)
class TeamRecord:
    """A league team and the Discord ids of its roster."""
    team_id: int
    name: str
    member_ids: List[UserID] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ProfileData:
    """Subset of a Brawl Stars player profile used by the advertisement."""
    tag: str
    name: str
    trophies: int = 0
    highest_trophies: int = 0
    exp_level: int = 0
    trio_victories: int = 0
    solo_victories: int = 0
    duo_victories: int = 0
    club_name: Optional[str] = None
    icon_id: Optional[int] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "ProfileData":
        """Build from the ``/players/{tag}`` JSON body.

        Raises:
            KeyError: If ``tag`` or ``name`` is missing.
        """
        club = payload.get("club") or {}
        icon = payload.get("icon") or {}
        return cls(
            tag=str(payload["tag"]),
            name=str(payload["name"]),
            trophies=int(payload.get("trophies", 0)),
            highest_trophies=int(payload.get("highestTrophies", 0)),
            exp_level=int(payload.get("expLevel", 0)),
            trio_victories=int(payload.get("3vs3Victories", 0)),
            solo_victories=int(payload.get("soloVictories", 0)),
            duo_victories=int(payload.get("duoVictories", 0)),
            club_name=club.get("name"),
            icon_id=icon.get("id"),
        )
