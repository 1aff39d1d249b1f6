"""
Provider Dispatcher

One routine for all five operations: validate, call the provider (each call
bounded by a timeout, never retried), and classify the outcome into a
ProviderResult. Operation-specific code is limited to the handler that shapes
the provider response.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog

from ..errors import (
    DispatchError,
    EmptyTokenSearchError,
    InvalidAddressError,
    ProviderMalformedResponseError,
    classify_error,
)
from ...providers.base import (
    CustodyProvider,
    FaucetProvider,
    IndexerProvider,
    Provider,
    TokenPriceProvider,
)
from .models import (
    BalanceRequest,
    CreateWalletRequest,
    FundWalletRequest,
    HistoryRequest,
    OperationKind,
    PriceRequest,
    ProviderRequest,
    ProviderResult,
    validate_limit,
)


logger = structlog.stdlib.get_logger("dispatch")

Handler = Callable[[Any], Awaitable[Any]]


class Dispatcher:
    """
    Dispatches resolved requests to external providers.

    Holds no mutable state between calls; the providers are the only
    collaborators and each dispatch issues its calls sequentially.
    """

    def __init__(
        self,
        indexer: IndexerProvider,
        prices: TokenPriceProvider,
        custody: CustodyProvider,
        faucet: FaucetProvider,
        timeout_s: float = 15.0,
        history_max_limit: int = 100,
    ):
        self.indexer = indexer
        self.prices = prices
        self.custody = custody
        self.faucet = faucet
        self.timeout_s = timeout_s
        self.history_max_limit = history_max_limit

        self._handlers: Dict[OperationKind, Handler] = {
            OperationKind.BALANCE: self._handle_balance,
            OperationKind.HISTORY: self._handle_history,
            OperationKind.PRICE: self._handle_price,
            OperationKind.CREATE_WALLET: self._handle_create_wallet,
            OperationKind.FUND_WALLET: self._handle_fund_wallet,
        }

    def validate(self, request: ProviderRequest) -> None:
        """Local precondition checks that need no network."""
        if isinstance(request, (BalanceRequest, HistoryRequest)):
            if not request.target.address:
                raise InvalidAddressError(request.target.address, request.chain.name)
        if isinstance(request, HistoryRequest):
            validate_limit(request.limit, self.history_max_limit)

    async def dispatch(self, request: ProviderRequest) -> ProviderResult:
        """Run one operation and return its classified result. Never raises DispatchError."""
        kind = request.kind
        try:
            self.validate(request)
        except DispatchError as exc:
            logger.info("dispatch_rejected", operation=kind.value, error_kind=exc.kind.value)
            return ProviderResult.failure(kind, exc, request=request)

        handler = self._handlers[kind]
        started = time.perf_counter()
        try:
            payload = await handler(request)
        except DispatchError as exc:
            result = ProviderResult.failure(kind, exc, request=request, latency_ms=self._elapsed(started))
        except Exception as exc:
            logger.exception("dispatch_handler_error", operation=kind.value)
            error = classify_error(exc, timeout_s=self.timeout_s)
            result = ProviderResult.failure(kind, error, request=request, latency_ms=self._elapsed(started))
        else:
            result = ProviderResult.success(request, payload, latency_ms=self._elapsed(started))

        logger.info(
            "dispatch_complete",
            operation=kind.value,
            chain=self._chain_label(request),
            ok=result.ok,
            error_kind=result.error.kind.value if result.error else None,
            duration_ms=result.latency_ms,
        )
        return result

    async def _call(self, provider: Provider, call: Awaitable[Any]) -> Any:
        """Await a single provider call under the timeout and classify failures."""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_s)
        except Exception as exc:
            raise classify_error(exc, provider=provider.name, timeout_s=self.timeout_s) from exc

    async def _handle_balance(self, request: BalanceRequest) -> Dict[str, Any]:
        balances = await self._call(
            self.indexer,
            self.indexer.get_balances(request.chain.chain_id, request.target.address),
        )
        return {
            "identifier": request.target.display_name,
            "address": request.target.address,
            "chain": request.chain.name,
            "balances": balances,
        }

    async def _handle_history(self, request: HistoryRequest) -> Dict[str, Any]:
        events = await self._call(
            self.indexer,
            self.indexer.get_history(request.chain.chain_id, request.target.address, request.limit),
        )
        return {
            "identifier": request.target.display_name,
            "address": request.target.address,
            "chain": request.chain.name,
            "limit": request.limit,
            "events": events,
        }

    async def _handle_price(self, request: PriceRequest) -> Dict[str, Any]:
        chain_id = request.chain.chain_id
        matches = await self._call(self.prices, self.prices.search_token(chain_id, request.query))
        if not matches:
            raise EmptyTokenSearchError(request.query, provider=self.prices.name)

        token = matches[0]
        address = token["address"]
        prices = await self._call(self.prices, self.prices.get_spot_price(chain_id, [address]))

        if not isinstance(prices, dict):
            raise ProviderMalformedResponseError("prices were not an object", provider=self.prices.name)
        price = {str(key).lower(): value for key, value in prices.items()}.get(address.lower())
        if price is None:
            raise ProviderMalformedResponseError(
                f"no price returned for {token.get('symbol') or address}",
                provider=self.prices.name,
            )
        return {
            "query": request.query,
            "chain": request.chain.name,
            "token": {
                "symbol": token.get("symbol", ""),
                "name": token.get("name", ""),
                "address": address,
            },
            "price": price,
            "currency": "USD",
        }

    async def _handle_create_wallet(self, request: CreateWalletRequest) -> Dict[str, Any]:
        return await self._call(
            self.custody,
            self.custody.create_wallet(request.blockchain, request.account_type),
        )

    async def _handle_fund_wallet(self, request: FundWalletRequest) -> Dict[str, Any]:
        return await self._call(
            self.faucet,
            self.faucet.fund_wallet(request.address, request.blockchain),
        )

    @staticmethod
    def _elapsed(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)

    @staticmethod
    def _chain_label(request: ProviderRequest) -> Optional[str]:
        chain = getattr(request, "chain", None)
        if chain is not None:
            return chain.chain_id
        return getattr(request, "blockchain", None)
