"""
Best-effort client for the Brawl Stars public API.

Every failure (network error, timeout, non-200 status, malformed body) is
logged and reported as ``None``; callers treat that as "no stats data".
"""

from __future__ import annotations

import asyncio
import urllib.parse
from typing import Optional

import aiohttp

from leaguebot.datatypes.player_datatypes import ProfileData
from leaguebot.util.logger import get_logger

logger = get_logger("stats_client")


def normalize_tag(tag: str) -> str:
    """Return the canonical ``#UPPERCASE`` form of a player tag.

    >>> normalize_tag("abc123")
    '#ABC123'
    >>> normalize_tag(" #q2y0 ")
    '#Q2Y0'
    """
    cleaned = tag.strip().upper()
    return cleaned if cleaned.startswith("#") else f"#{cleaned}"


class BrawlStatsClient:
    """Thin aiohttp wrapper around ``GET /players/{tag}``.

    Args:
        base_url: API root, e.g. ``https://api.brawlstars.com/v1``.
        api_token: Bearer token issued by the developer portal.
        timeout: Total request timeout in seconds.
    """

    def __init__(self, base_url: str, api_token: str | None, *, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout, headers=self._headers())
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch_profile(self, tag: str | None) -> Optional[ProfileData]:
        """Fetch a player profile; ``None`` on any failure or for an empty tag."""
        if not tag:
            return None

        formatted = normalize_tag(tag)
        url = f"{self._base_url}/players/{urllib.parse.quote(formatted, safe='')}"

        try:
            session = await self._get_session()
            async with session.get(url) as resp:
                if resp.status == 404:
                    logger.info("[STATS] No profile for %s", formatted)
                    return None
                if resp.status != 200:
                    text = await resp.text()
                    logger.warning("[STATS] Lookup for %s returned HTTP %s: %s", formatted, resp.status, text[:200])
                    return None
                payload = await resp.json(content_type=None)
        except asyncio.CancelledError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("[STATS] Network error looking up %s: %s", formatted, exc)
            return None
        except ValueError as exc:
            logger.warning("[STATS] Invalid JSON for %s: %s", formatted, exc)
            return None

        try:
            return ProfileData.from_api(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("[STATS] Malformed profile payload for %s: %s", formatted, exc)
            return None
