"""Tests for the free agent message builders and the renewal button."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import NOW
from leaguebot.datatypes.discord_datatypes import ChannelID, UserID
from leaguebot.datatypes.player_datatypes import PlayerRecord, ProfileData
from leaguebot.datatypes.result_datatypes import ReconcileErrorKind, ReconcileResult
from leaguebot.ui.free_agent_embed import (
    RENEW_BUTTON_CUSTOM_ID,
    render_affiliation_notice,
    render_expiry_notice,
    render_free_agent_advertisement,
)
from leaguebot.ui.free_agent_views import RENEW_FAILED_MESSAGE, FreeAgentRenewView
from leaguebot.ui.status_embed import build_error_embed, build_log_embed

PROFILE = ProfileData(
    tag="#ABC123",
    name="Shelly",
    trophies=25000,
    highest_trophies=26000,
    exp_level=180,
    trio_victories=9000,
    solo_victories=800,
    duo_victories=700,
    club_name="Crows",
)


def field_names(embed):
    return [field.name for field in embed.fields]


@pytest.mark.asyncio
async def test_advertisement_with_stats():
    record = PlayerRecord(UserID(42), external_profile_tag="#ABC123")

    payload = render_free_agent_advertisement(record, PROFILE, NOW)

    assert "<@42>" in payload.embed.description
    assert field_names(payload.embed) == ["Player", "Trophies", "Level", "Victories", "Club"]
    assert "25,000" in payload.embed.fields[1].value
    [button] = payload.view.children
    assert button.url == "https://discord.com/users/42"
    assert payload.embed.timestamp == NOW


@pytest.mark.asyncio
async def test_advertisement_without_stats_still_renders():
    record = PlayerRecord(UserID(42), external_profile_tag="#ABC123")

    payload = render_free_agent_advertisement(record, None, NOW)

    assert field_names(payload.embed) == ["Tag", "Stats"]
    assert "#ABC123" in payload.embed.fields[0].value


@pytest.mark.asyncio
async def test_advertisement_without_tag():
    payload = render_free_agent_advertisement(PlayerRecord(UserID(42)), None, NOW)

    assert field_names(payload.embed) == ["Stats"]


def test_affiliation_notice_mentions_channel():
    payload = render_affiliation_notice(ChannelID(555))

    assert "<#555>" in payload.embed.description
    assert payload.view is None
    assert payload.as_kwargs() == {"embed": payload.embed}


@pytest.mark.asyncio
async def test_expiry_notice_carries_renew_button():
    payload = render_expiry_notice(ChannelID(555))

    assert "<#555>" in payload.embed.description
    [button] = payload.view.children
    assert button.custom_id == RENEW_BUTTON_CUSTOM_ID
    assert payload.as_kwargs()["view"] is payload.view


def test_error_embed_titles():
    result = ReconcileResult.failure(ReconcileErrorKind.INVALID_TRANSITION, "Already active.")

    embed = build_error_embed(result.error)

    assert "Action not allowed" in embed.title
    assert embed.description == "Already active."
    assert build_error_embed("plain").description == "plain"


def test_log_embed_colour_and_user_field():
    embed = build_log_embed("done", user_id=UserID(9), success=False)

    assert embed.color == discord.Color.red()
    assert "<@9>" in embed.fields[0].value


def make_interaction(user_id=42):
    interaction = MagicMock()
    interaction.user = SimpleNamespace(id=user_id)
    interaction.response.defer = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.mark.asyncio
async def test_renew_view_uses_persistent_custom_id():
    view = FreeAgentRenewView(MagicMock(), renew_days=14)

    assert view.timeout is None
    assert view.is_persistent()
    assert [item.custom_id for item in view.children] == [RENEW_BUTTON_CUSTOM_ID]


@pytest.mark.asyncio
async def test_renew_button_success():
    reconciler = MagicMock()
    reconciler.renew = AsyncMock(return_value=ReconcileResult.success(PlayerRecord(UserID(42))))
    view = FreeAgentRenewView(reconciler, renew_days=14)
    interaction = make_interaction()

    await view.renew_button.callback(interaction)

    interaction.response.defer.assert_awaited_once_with(ephemeral=True)
    reconciler.renew.assert_awaited_once_with(UserID(42))
    embed = interaction.followup.send.await_args.kwargs["embed"]
    assert "14 days" in embed.description


@pytest.mark.asyncio
async def test_renew_button_reports_error():
    reconciler = MagicMock()
    reconciler.renew = AsyncMock(return_value=ReconcileResult.failure(
        ReconcileErrorKind.INVALID_TRANSITION, "Your free agent status is already active."
    ))
    view = FreeAgentRenewView(reconciler, renew_days=14)
    interaction = make_interaction()

    await view.renew_button.callback(interaction)

    embed = interaction.followup.send.await_args.kwargs["embed"]
    assert embed.description == "Your free agent status is already active."
    assert interaction.followup.send.await_args.kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_renew_button_hides_internal_error_details():
    reconciler = MagicMock()
    reconciler.renew = AsyncMock(side_effect=RuntimeError("database is locked"))
    view = FreeAgentRenewView(reconciler, renew_days=14)
    interaction = make_interaction()

    await view.renew_button.callback(interaction)

    kwargs = interaction.followup.send.await_args.kwargs
    assert kwargs["ephemeral"] is True
    assert kwargs["embed"].description == RENEW_FAILED_MESSAGE
    assert "database is locked" not in kwargs["embed"].description
