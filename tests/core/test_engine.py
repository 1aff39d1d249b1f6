"""
Tests for the AssistantEngine

End-to-end conversations through confirmation, resolution, dispatch and
formatting, with provider doubles standing in for the network.
"""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import TEST_SECRET, USDC_ADDRESS, VITALIK_ADDRESS
from sayless.core.confirmation import ConfirmationStage
from sayless.core.dispatch import Dispatcher
from sayless.core.engine import AssistantEngine


def assert_no_provider_calls(resolver, oneinch, circle):
    resolver.resolve_name.assert_not_called()
    for method in ("get_balances", "get_history", "search_token", "get_spot_price"):
        getattr(oneinch, method).assert_not_called()
    circle.create_wallet.assert_not_called()
    circle.fund_wallet.assert_not_called()


# =============================================================================
# Confirmation gate
# =============================================================================

class TestConfirmationGate:

    @pytest.mark.asyncio
    async def test_unconfirmed_name_only_prompts(self, engine, session, resolver, oneinch, circle):
        reply = await engine.get_wallet_balance(session, "vitalik", "ethereum")

        assert 'I want to look up "vitalik.eth"' in reply
        assert session.confirmation.stage == ConfirmationStage.PROPOSED
        assert_no_provider_calls(resolver, oneinch, circle)

    @pytest.mark.asyncio
    async def test_vitalik_balance_after_yes(self, engine, session, resolver, oneinch):
        prompt = engine.confirm_identifier(session, "vitalik")
        assert "vitalik.eth" in prompt
        assert engine.reply(session, "yes") == 'Thanks, I\'ll use "vitalik.eth".'

        reply = await engine.get_wallet_balance(session, "vitalik", "ethereum")

        resolver.resolve_name.assert_awaited_once_with("vitalik.eth")
        oneinch.get_balances.assert_awaited_once_with("1", VITALIK_ADDRESS)
        assert "vitalik" in reply
        assert VITALIK_ADDRESS in reply
        assert "1500000000000000000" in reply
        assert session.confirmation.state is None

    @pytest.mark.asyncio
    async def test_lookup_while_pending_counts_as_yes(self, engine, session, oneinch):
        engine.confirm_identifier(session, "vitalik")

        reply = await engine.get_wallet_balance(session, "Vitalik", "ethereum")

        oneinch.get_balances.assert_awaited_once_with("1", VITALIK_ADDRESS)
        assert VITALIK_ADDRESS in reply

    @pytest.mark.asyncio
    async def test_confirmation_is_used_once(self, engine, session, oneinch):
        engine.confirm_identifier(session, "vitalik")
        engine.reply(session, "yes")
        await engine.get_wallet_balance(session, "vitalik", "ethereum")

        reply = await engine.get_wallet_balance(session, "vitalik", "ethereum")

        assert "Is this spelling correct?" in reply
        assert oneinch.get_balances.await_count == 1

    @pytest.mark.asyncio
    async def test_different_identifier_is_proposed_fresh(self, engine, session, oneinch):
        engine.confirm_identifier(session, "vitalik")
        engine.reply(session, "yes")

        reply = await engine.get_wallet_balance(session, "nick", "ethereum")

        assert '"nick.eth"' in reply
        oneinch.get_balances.assert_not_called()

    @pytest.mark.asyncio
    async def test_address_needs_confirmation_but_not_resolution(self, engine, session, resolver, oneinch):
        first = await engine.get_wallet_balance(session, VITALIK_ADDRESS, "polygon")
        assert VITALIK_ADDRESS in first
        oneinch.get_balances.assert_not_called()

        await engine.get_wallet_balance(session, VITALIK_ADDRESS, "polygon")

        resolver.resolve_name.assert_not_called()
        oneinch.get_balances.assert_awaited_once_with("137", VITALIK_ADDRESS)

    def test_spelling_round_trip(self, engine, session):
        engine.confirm_identifier(session, "vitalick")

        spelled = engine.reply(session, "no")
        assert "v, i, t, a, l, i, c, k, ., e, t, h" in spelled

        respelled = engine.reply(session, "vitalik")
        assert '"vitalik.eth"' in respelled

        assert engine.reply(session, "yes") == 'Thanks, I\'ll use "vitalik.eth".'

    def test_spell_identifier_tool(self, engine, session):
        reply = engine.spell_identifier(session, "vitalik")

        assert "v, i, t, a, l, i, k" in reply
        assert session.confirmation.stage == ConfirmationStage.SPELLING

    def test_spelling_ceiling_ends_with_distinct_failure(self, engine, session):
        engine.confirm_identifier(session, "vitalik")
        for _ in range(3):
            assert "Let me spell that out" in engine.reply(session, "no")

        reply = engine.reply(session, "no")

        assert "could not confirm the spelling after 3 attempts" in reply
        assert session.confirmation.state is None

    def test_reply_with_nothing_pending(self, engine, session):
        assert "no name or address waiting" in engine.reply(session, "yes")

    def test_free_text_reply_with_nothing_pending_proposes_nothing(self, engine, session):
        assert "no name or address waiting" in engine.reply(session, "hello")
        assert session.confirmation.state is None

    def test_blank_identifier(self, engine, session):
        assert "didn't catch a wallet name" in engine.confirm_identifier(session, "  ")


# =============================================================================
# Local validation happens before anything else
# =============================================================================

class TestLocalValidation:

    @pytest.mark.asyncio
    async def test_solana_is_rejected_without_calls(self, engine, session, resolver, oneinch, circle):
        reply = await engine.get_wallet_balance(session, VITALIK_ADDRESS, "solana")

        assert "unknown chain 'solana'" in reply
        assert "ethereum" in reply
        assert session.confirmation.state is None
        assert_no_provider_calls(resolver, oneinch, circle)

    @pytest.mark.asyncio
    async def test_history_limit_150_is_rejected_without_calls(self, engine, session, resolver, oneinch, circle):
        engine.confirm_identifier(session, "vitalik")
        engine.reply(session, "yes")

        reply = await engine.get_transaction_history(session, "vitalik", "ethereum", 150)

        assert reply == "Sorry, the maximum limit for transactions is 100. Please specify a lower number."
        assert_no_provider_calls(resolver, oneinch, circle)

    @pytest.mark.asyncio
    async def test_history_limit_10(self, engine, session, oneinch):
        engine.confirm_identifier(session, "vitalik")
        engine.reply(session, "yes")

        reply = await engine.get_transaction_history(session, "vitalik", "ethereum", 10)

        oneinch.get_history.assert_awaited_once_with("1", VITALIK_ADDRESS, 10)
        assert reply.startswith("Here are the last 10 transactions for vitalik.eth")

    @pytest.mark.asyncio
    async def test_history_uses_default_limit(self, engine, session, oneinch):
        engine.confirm_identifier(session, VITALIK_ADDRESS)

        await engine.get_transaction_history(session, VITALIK_ADDRESS, "arbitrum")

        oneinch.get_history.assert_awaited_once_with("42161", VITALIK_ADDRESS, 10)

    @pytest.mark.asyncio
    async def test_history_limit_zero_uses_default(self, engine, session, oneinch):
        engine.confirm_identifier(session, "vitalik")
        engine.reply(session, "yes")

        reply = await engine.get_transaction_history(session, "vitalik", "ethereum", 0)

        oneinch.get_history.assert_awaited_once_with("1", VITALIK_ADDRESS, 10)
        assert reply.startswith("Here are the last 10 transactions for vitalik.eth")

    @pytest.mark.asyncio
    async def test_negative_history_limit_is_rejected_without_calls(self, engine, session, resolver, oneinch, circle):
        engine.confirm_identifier(session, "vitalik")
        engine.reply(session, "yes")

        reply = await engine.get_transaction_history(session, "vitalik", "ethereum", -1)

        assert reply == "Sorry, the number of transactions must be between 1 and 100."
        assert_no_provider_calls(resolver, oneinch, circle)


# =============================================================================
# Failures become text
# =============================================================================

class TestFailureText:

    @pytest.mark.asyncio
    async def test_unresolved_name(self, engine, session, resolver, oneinch):
        resolver.resolve_name.return_value = None
        engine.confirm_identifier(session, "vitalikk")

        reply = await engine.get_wallet_balance(session, "vitalikk", "ethereum")

        assert "I couldn't find an address for vitalikk.eth" in reply
        oneinch.get_balances.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_status_and_no_secret(self, engine, session, oneinch):
        request = httpx.Request("GET", "https://api.1inch.dev/balance/v1.2/1/balances/x")
        response = httpx.Response(
            500,
            request=request,
            headers={"x-echo": f"Bearer {TEST_SECRET}"},
        )
        oneinch.get_balances.side_effect = httpx.HTTPStatusError(
            f"Authorization: Bearer {TEST_SECRET}", request=request, response=response
        )
        engine.confirm_identifier(session, VITALIK_ADDRESS)

        reply = await engine.get_wallet_balance(session, VITALIK_ADDRESS, "ethereum")

        assert "1inch API returned status: 500" in reply
        assert TEST_SECRET not in reply

    @pytest.mark.asyncio
    async def test_cancelled_call(self, engine, session, oneinch):
        started = asyncio.Event()

        async def slow(*args):
            started.set()
            await asyncio.sleep(5)

        oneinch.get_balances = AsyncMock(side_effect=slow)
        engine.confirm_identifier(session, VITALIK_ADDRESS)

        task = asyncio.create_task(engine.get_wallet_balance(session, VITALIK_ADDRESS, "ethereum"))
        await started.wait()
        session.cancel()

        assert await task == "The request to fetch the balance was cancelled."

    @pytest.mark.asyncio
    async def test_hanging_name_resolution_times_out(self, session, resolver, oneinch, circle):
        async def hang(name):
            await asyncio.sleep(3600)

        resolver.resolve_name = AsyncMock(side_effect=hang)
        engine = AssistantEngine(
            dispatcher=Dispatcher(indexer=oneinch, prices=oneinch, custody=circle, faucet=circle, timeout_s=0.05),
            name_resolver=resolver,
            secrets=[TEST_SECRET],
        )
        engine.confirm_identifier(session, "vitalik")

        reply = await asyncio.wait_for(engine.get_wallet_balance(session, "vitalik", "ethereum"), timeout=2)

        assert "ens did not respond within 0.05s" in reply
        oneinch.get_balances.assert_not_called()
        assert not session.busy

    @pytest.mark.asyncio
    async def test_cancel_during_name_resolution(self, engine, session, resolver, oneinch):
        started = asyncio.Event()

        async def hang(name):
            started.set()
            await asyncio.sleep(3600)

        resolver.resolve_name = AsyncMock(side_effect=hang)
        engine.confirm_identifier(session, "vitalik")

        task = asyncio.create_task(engine.get_wallet_balance(session, "vitalik", "ethereum"))
        await started.wait()
        assert session.busy
        assert session.cancel() is True

        assert await task == "The request to fetch the balance was cancelled."
        oneinch.get_balances.assert_not_called()


# =============================================================================
# Price and custody
# =============================================================================

class TestOtherOperations:

    @pytest.mark.asyncio
    async def test_token_price(self, engine, session, oneinch):
        reply = await engine.get_token_price(session, " USDC ", "ethereum")

        oneinch.search_token.assert_awaited_once_with("1", "USDC")
        assert reply == (
            f"The current price of USDC (USD Coin) on ethereum is 1.0001 USD. Token address: {USDC_ADDRESS}."
        )

    @pytest.mark.asyncio
    async def test_price_discards_pending_confirmation(self, engine, session):
        engine.confirm_identifier(session, "vitalik")

        await engine.get_token_price(session, "USDC", "ethereum")

        assert session.confirmation.state is None

    @pytest.mark.asyncio
    async def test_empty_token_search(self, engine, session, oneinch):
        oneinch.search_token.return_value = []

        reply = await engine.get_token_price(session, "notatoken", "base")

        assert reply == 'I couldn\'t find a token matching "notatoken".'

    @pytest.mark.asyncio
    async def test_create_wallet(self, engine, session, circle):
        reply = await engine.create_wallet(session, "MATIC-AMOY", "SCA")

        circle.create_wallet.assert_awaited_once_with("MATIC-AMOY", "SCA")
        assert reply.startswith("Successfully created a new SCA wallet on MATIC-AMOY")

    @pytest.mark.asyncio
    async def test_create_wallet_rejects_unknown_blockchain(self, engine, session, circle):
        reply = await engine.create_wallet(session, "ETH-MAINNET", "SCA")

        assert "'ETH-MAINNET' is not a valid blockchain" in reply
        circle.create_wallet.assert_not_called()

    @pytest.mark.asyncio
    async def test_fund_wallet(self, engine, session, circle):
        address = "0x1234567890123456789012345678901234567890"

        reply = await engine.fund_wallet(session, address, "ETH-SEPOLIA")

        circle.fund_wallet.assert_awaited_once_with(address, "ETH-SEPOLIA")
        assert "Status: success" in reply

    @pytest.mark.asyncio
    async def test_fund_wallet_rejects_wrong_address_shape(self, engine, session, circle):
        reply = await engine.fund_wallet(session, "vitalik.eth", "ETH-SEPOLIA")

        assert "not a valid address for ETH-SEPOLIA" in reply
        circle.fund_wallet.assert_not_called()
