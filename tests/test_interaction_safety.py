from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from utils.interaction_safety import safe_defer, safe_followup


class _StubFollowup:
    def __init__(self):
        self.last_kwargs = None

    async def send(self, **kwargs):
        self.last_kwargs = kwargs
        return "ok"


class _StubResponse:
    def __init__(self, done=False):
        self.done = done
        self.defer = AsyncMock()

    def is_done(self):
        return self.done


class _StubInteraction:
    def __init__(self, done=False):
        self.id = 123
        self.followup = _StubFollowup()
        self.response = _StubResponse(done)
        self.channel = None


def _http_exception(status=500, code=0):
    response = MagicMock()
    response.status = status
    response.reason = "error"
    return discord.HTTPException(response, {"code": code, "message": "boom"})


@pytest.mark.asyncio
async def test_safe_followup_sends_kwargs():
    interaction = _StubInteraction()

    result = await safe_followup(interaction, content="hi", ephemeral=True)

    assert result == "ok"
    assert interaction.followup.last_kwargs["content"] == "hi"
    assert interaction.followup.last_kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_safe_followup_falls_back_to_channel_for_public_messages():
    interaction = _StubInteraction()
    interaction.followup.send = AsyncMock(side_effect=_http_exception())
    interaction.channel = MagicMock()
    interaction.channel.send = AsyncMock(return_value="channel-msg")

    result = await safe_followup(interaction, content="Contest open!")

    assert result == "channel-msg"
    interaction.channel.send.assert_awaited_once_with(content="Contest open!")


@pytest.mark.asyncio
async def test_safe_followup_never_leaks_ephemeral_to_channel():
    interaction = _StubInteraction()
    interaction.followup.send = AsyncMock(side_effect=_http_exception())
    interaction.channel = MagicMock()
    interaction.channel.send = AsyncMock()

    result = await safe_followup(interaction, content="your balance", ephemeral=True)

    assert result is None
    interaction.channel.send.assert_not_called()


@pytest.mark.asyncio
async def test_safe_defer_defers_once():
    interaction = _StubInteraction()

    assert await safe_defer(interaction, ephemeral=True) is True
    interaction.response.defer.assert_awaited_once_with(ephemeral=True)


@pytest.mark.asyncio
async def test_safe_defer_skips_when_already_done():
    interaction = _StubInteraction(done=True)

    assert await safe_defer(interaction) is True
    interaction.response.defer.assert_not_called()


@pytest.mark.asyncio
async def test_safe_defer_already_acknowledged_counts_as_success():
    interaction = _StubInteraction()
    interaction.response.defer.side_effect = _http_exception(400, 40060)

    assert await safe_defer(interaction) is True


@pytest.mark.asyncio
async def test_safe_defer_expired_interaction():
    interaction = _StubInteraction()
    response = MagicMock()
    response.status = 404
    response.reason = "Not Found"
    interaction.response.defer.side_effect = discord.NotFound(response, {"code": 10062, "message": "Unknown interaction"})

    assert await safe_defer(interaction) is False
