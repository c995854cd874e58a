"""Tests for utils/command_helpers.py - Discord command helper utilities."""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from services import error_codes
from services.result import Result
from utils.command_helpers import (
    format_result_error,
    handle_result,
    handle_result_with_embed,
)


@pytest.fixture
def mock_interaction():
    """Create a mock Discord interaction."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


class TestHandleResult:
    """Tests for handle_result function."""

    @pytest.mark.asyncio
    async def test_success_without_message(self, mock_interaction):
        """Successful result with no message should return True without sending."""
        result = Result.ok({"key": "value"})

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            success = await handle_result(mock_interaction, result)

            assert success is True
            mock_followup.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_with_message(self, mock_interaction):
        result = Result.ok({"key": "value"})

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            success = await handle_result(mock_interaction, result, success_msg="Bet placed!")

            assert success is True
            mock_followup.assert_awaited_once_with(
                mock_interaction, content="Bet placed!", ephemeral=True
            )

    @pytest.mark.asyncio
    async def test_failure_sends_error(self, mock_interaction):
        """Failed result should send error message and return False."""
        result = Result.fail("Something went wrong")

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            success = await handle_result(mock_interaction, result)

            assert success is False
            mock_followup.assert_awaited_once()
            call_kwargs = mock_followup.call_args.kwargs
            assert "Something went wrong" in call_kwargs["content"]
            assert call_kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_failure_is_always_ephemeral(self, mock_interaction):
        result = Result.fail("Contest is closed", code=error_codes.CONTEST_CLOSED)

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            await handle_result(mock_interaction, result, ephemeral=False)

            assert mock_followup.call_args.kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_ephemeral_parameter(self, mock_interaction):
        """Ephemeral parameter should be passed through on success."""
        result = Result.ok(None)

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            await handle_result(mock_interaction, result, success_msg="Done", ephemeral=False)

            assert mock_followup.call_args.kwargs["ephemeral"] is False


class TestHandleResultWithEmbed:
    @pytest.mark.asyncio
    async def test_success_with_embed(self, mock_interaction):
        result = Result.ok({"key": "value"})
        embed = discord.Embed(title="Contest closed")

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            success = await handle_result_with_embed(mock_interaction, result, success_embed=embed)

            assert success is True
            mock_followup.assert_awaited_once_with(mock_interaction, embed=embed, ephemeral=False)

    @pytest.mark.asyncio
    async def test_failure_sends_error(self, mock_interaction):
        result = Result.fail("Something went wrong")

        with patch("utils.command_helpers.safe_followup", new_callable=AsyncMock) as mock_followup:
            success = await handle_result_with_embed(mock_interaction, result)

            assert success is False
            assert "Something went wrong" in mock_followup.call_args.kwargs["content"]


class TestFormatResultError:
    def test_success_returns_empty(self):
        assert format_result_error(Result.ok(1)) == ""

    def test_failure_without_code(self):
        assert format_result_error(Result.fail("Something went wrong")) == "Something went wrong"

    def test_known_code_gets_its_emoji(self):
        result = Result.fail("Insufficient balance", code=error_codes.INSUFFICIENT_FUNDS)

        assert format_result_error(result) == "💸 Insufficient balance (`insufficient_funds`)"

    def test_other_codes_get_default_prefix(self):
        result = Result.fail("You already have a bet", code=error_codes.ALREADY_BET)

        assert format_result_error(result) == "❌ You already have a bet (`already_bet`)"

    def test_failure_without_error_message(self):
        assert format_result_error(Result(success=False, error=None)) == "Unknown error"
