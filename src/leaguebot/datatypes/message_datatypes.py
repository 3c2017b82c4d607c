"""Rendered message content handed to the platform client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import discord


@dataclass(slots=True)
class MessagePayload:
    """An embed plus optional components and plain-text content."""
    embed: discord.Embed
    view: Optional[discord.ui.View] = None
    content: Optional[str] = None

    def as_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``Messageable.send`` / ``Message.edit``."""
        kwargs: Dict[str, Any] = {"embed": self.embed}
        if self.view is not None:
            kwargs["view"] = self.view
        if self.content is not None:
            kwargs["content"] = self.content
        return kwargs
