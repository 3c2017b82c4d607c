from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from leaguebot.configuration.app_configuration import LeagueSettings
from leaguebot.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, RoleID, UserID
from leaguebot.datatypes.message_datatypes import MessagePayload
from leaguebot.services.platform_client import DM_DISABLED_ERROR_CODE, DiscordPlatformClient


def http_error(cls, status, message="error"):
    return cls(SimpleNamespace(status=status, reason="error"), message)


def make_text_channel():
    channel = MagicMock(spec=discord.TextChannel)
    channel.send = AsyncMock(return_value=SimpleNamespace(id=4321))
    channel.fetch_message = AsyncMock()
    return channel


def make_client(league_settings, **bot_attrs):
    bot = MagicMock()
    bot.get_channel.return_value = None
    bot.get_user.return_value = None
    bot.get_guild.return_value = None
    for name, value in bot_attrs.items():
        setattr(bot, name, value)
    return DiscordPlatformClient(bot, league_settings), bot


def payload():
    return MessagePayload(embed=discord.Embed(title="hello"))


@pytest.mark.asyncio
async def test_fetch_channel_uses_cache_first(league_settings):
    channel = make_text_channel()
    client, bot = make_client(league_settings, fetch_channel=AsyncMock())
    bot.get_channel.return_value = channel

    assert await client.fetch_channel(ChannelID(555)) is channel
    bot.get_channel.assert_called_once_with(555)
    bot.fetch_channel.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_channel_falls_back_to_api(league_settings):
    channel = make_text_channel()
    client, bot = make_client(league_settings, fetch_channel=AsyncMock(return_value=channel))

    assert await client.fetch_channel(ChannelID(555)) is channel
    bot.fetch_channel.assert_awaited_once_with(555)


@pytest.mark.asyncio
async def test_fetch_channel_missing_returns_none(league_settings):
    client, _ = make_client(
        league_settings, fetch_channel=AsyncMock(side_effect=http_error(discord.NotFound, 404))
    )

    assert await client.fetch_channel(ChannelID(555)) is None


@pytest.mark.asyncio
async def test_fetch_channel_rejects_non_text_channel(league_settings):
    client, bot = make_client(league_settings)
    bot.get_channel.return_value = MagicMock(spec=discord.VoiceChannel)

    assert await client.fetch_channel(ChannelID(555)) is None


@pytest.mark.asyncio
async def test_send_message_returns_message_id(league_settings):
    client, _ = make_client(league_settings)
    channel = make_text_channel()
    message = payload()

    message_id = await client.send_message(channel, message)

    assert message_id == MessageID(4321)
    channel.send.assert_awaited_once_with(embed=message.embed)


@pytest.mark.asyncio
async def test_fetch_message_returns_none_when_deleted(league_settings):
    client, _ = make_client(league_settings)
    channel = make_text_channel()
    channel.fetch_message.side_effect = http_error(discord.NotFound, 404)

    assert await client.fetch_message(channel, MessageID(1)) is None
    channel.fetch_message.assert_awaited_once_with(1)


@pytest.mark.asyncio
async def test_fetch_message_propagates_other_errors(league_settings):
    client, _ = make_client(league_settings)
    channel = make_text_channel()
    channel.fetch_message.side_effect = http_error(discord.HTTPException, 500)

    with pytest.raises(discord.HTTPException):
        await client.fetch_message(channel, MessageID(1))


@pytest.mark.asyncio
async def test_delete_message_success_and_failures(league_settings):
    client, _ = make_client(league_settings)
    message = MagicMock()

    message.delete = AsyncMock()
    assert await client.delete_message(message) is True

    message.delete = AsyncMock(side_effect=http_error(discord.NotFound, 404))
    assert await client.delete_message(message) is False

    message.delete = AsyncMock(side_effect=http_error(discord.Forbidden, 403))
    assert await client.delete_message(message) is False

    message.delete = AsyncMock(side_effect=http_error(discord.HTTPException, 500))
    assert await client.delete_message(message) is False


@pytest.mark.asyncio
async def test_send_direct_message_success(league_settings):
    user = MagicMock()
    user.send = AsyncMock()
    client, bot = make_client(league_settings, fetch_user=AsyncMock(return_value=user))

    assert await client.send_direct_message(UserID(42), payload()) is True
    bot.fetch_user.assert_awaited_once_with(42)
    user.send.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_direct_message_dms_disabled(league_settings):
    user = MagicMock()
    user.send = AsyncMock(side_effect=http_error(
        discord.Forbidden, 403, {"code": DM_DISABLED_ERROR_CODE, "message": "Cannot send messages to this user"}
    ))
    client, bot = make_client(league_settings)
    bot.get_user.return_value = user

    assert await client.send_direct_message(UserID(42), payload()) is False


@pytest.mark.asyncio
async def test_send_direct_message_unknown_user(league_settings):
    client, _ = make_client(
        league_settings, fetch_user=AsyncMock(side_effect=http_error(discord.NotFound, 404))
    )

    assert await client.send_direct_message(UserID(42), payload()) is False


@pytest.mark.asyncio
async def test_send_log_without_channel_configured(league_settings):
    settings = LeagueSettings(
        guild_id=league_settings.guild_id,
        free_agent_channel_id=league_settings.free_agent_channel_id,
        ping_role_id=league_settings.ping_role_id,
    )
    client, bot = make_client(settings)

    assert await client.send_log(payload()) is False
    bot.get_channel.assert_not_called()


@pytest.mark.asyncio
async def test_send_log_posts_to_staff_channel(league_settings):
    channel = make_text_channel()
    client, bot = make_client(league_settings)
    bot.get_channel.return_value = channel

    assert await client.send_log(payload()) is True
    bot.get_channel.assert_called_once_with(556)
    channel.send.assert_awaited_once()


@pytest.mark.asyncio
async def test_fetch_guild_and_member(league_settings):
    member = MagicMock()
    guild = MagicMock()
    guild.get_member.return_value = None
    guild.fetch_member = AsyncMock(return_value=member)
    guild.get_role.return_value = "role"
    client, bot = make_client(league_settings, fetch_guild=AsyncMock(return_value=guild))

    assert await client.fetch_guild(GuildID(100)) is guild
    assert await client.fetch_member(guild, UserID(7)) is member
    assert client.get_role(guild, RoleID(777)) == "role"
    guild.get_role.assert_called_once_with(777)


@pytest.mark.asyncio
async def test_fetch_member_missing_returns_none(league_settings):
    guild = MagicMock()
    guild.get_member.return_value = None
    guild.fetch_member = AsyncMock(side_effect=http_error(discord.NotFound, 404))
    client, _ = make_client(league_settings)

    assert await client.fetch_member(guild, UserID(7)) is None


@pytest.mark.asyncio
async def test_add_role_passes_reason(league_settings):
    member = MagicMock()
    member.add_roles = AsyncMock()
    client, _ = make_client(league_settings)

    await client.add_role(member, "role", reason="sync")

    member.add_roles.assert_awaited_once_with("role", reason="sync")
