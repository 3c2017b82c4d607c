"""
Type-safe wrapper classes for Discord identifiers.

Discord snowflakes are 64-bit integers but travel as strings in JSON and are
stored as TEXT in the database. These wrappers keep one canonical string form
and convert to ``int`` only at Discord API call sites.
"""

from __future__ import annotations

from typing import Union

import discord


class SnowflakeID:
    """
    Base wrapper for a Discord snowflake.

    Attributes:
        _value (str): The snowflake ID stored as a string.

    Example:
        >>> uid = UserID(123456789012345678)
        >>> uid.to_int()
        123456789012345678
        >>> str(UserID(" 123456789012345678 "))
        '123456789012345678'
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "SnowflakeID"]) -> None:
        """
        Initialize from a string, int, or another wrapper of the same kind.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, SnowflakeID):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    def to_int(self) -> int:
        """Convert to an integer for Discord API calls."""
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SnowflakeID):
            return type(self) is type(other) and self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class UserID(SnowflakeID):
    """Discord user snowflake; the identity key of a player record."""

    __slots__ = ()

    @classmethod
    def from_user(cls, member: Union[discord.Member, discord.User]) -> "UserID":
        return cls(member.id)


class GuildID(SnowflakeID):
    """Discord guild snowflake."""

    __slots__ = ()


class ChannelID(SnowflakeID):
    """Discord channel snowflake."""

    __slots__ = ()


class RoleID(SnowflakeID):
    """Discord role snowflake."""

    __slots__ = ()


class MessageID(SnowflakeID):
    """Discord message snowflake, used as a weak reference to a posted message."""

    __slots__ = ()

    @classmethod
    def from_message(cls, message: discord.Message) -> "MessageID":
        return cls(message.id)
