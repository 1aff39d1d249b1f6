from unittest.mock import AsyncMock, MagicMock

import pytest

from sayless.core.dispatch import Dispatcher
from sayless.core.engine import AssistantEngine
from sayless.core.session import SessionContext


VITALIK_ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
TEST_SECRET = "test-secret-key-123"


def make_provider(name: str, **methods) -> MagicMock:
    """A provider double whose named methods are AsyncMocks returning the given values."""
    provider = MagicMock()
    provider.name = name
    for method, value in methods.items():
        setattr(provider, method, AsyncMock(return_value=value))
    return provider


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def resolver() -> MagicMock:
    return make_provider("ens", resolve_name=VITALIK_ADDRESS)


@pytest.fixture
def oneinch() -> MagicMock:
    return make_provider(
        "1inch",
        get_balances={"0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee": "1500000000000000000"},
        get_history={"items": [{"txHash": "0xabc", "type": 0}]},
        search_token=[
            {"symbol": "USDC", "name": "USD Coin", "address": USDC_ADDRESS, "decimals": 6},
        ],
        get_spot_price={USDC_ADDRESS.lower(): "1.0001"},
    )


@pytest.fixture
def circle() -> MagicMock:
    return make_provider(
        "circle",
        create_wallet={
            "id": "wallet-1",
            "address": "0x1234567890123456789012345678901234567890",
            "blockchain": "MATIC-AMOY",
            "accountType": "SCA",
        },
        fund_wallet={
            "status": "success",
            "address": "0x1234567890123456789012345678901234567890",
            "blockchain": "ETH-SEPOLIA",
        },
    )


@pytest.fixture
def dispatcher(oneinch: MagicMock, circle: MagicMock) -> Dispatcher:
    return Dispatcher(
        indexer=oneinch,
        prices=oneinch,
        custody=circle,
        faucet=circle,
        timeout_s=1.0,
        history_max_limit=100,
    )


@pytest.fixture
def engine(dispatcher: Dispatcher, resolver: MagicMock) -> AssistantEngine:
    return AssistantEngine(
        dispatcher=dispatcher,
        name_resolver=resolver,
        history_default_limit=10,
        secrets=[TEST_SECRET],
    )


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(session_id="test-session", max_spelling_attempts=3)
