import httpx
from typing import Any, Dict, List, Optional
from ..config import settings
from ..core.errors import ProviderMalformedResponseError, ProviderUnavailableError
from .base import IndexerProvider, TokenPriceProvider


class OneInchProvider(IndexerProvider, TokenPriceProvider):
    """1inch developer APIs: balances, history, token search and spot prices"""

    name = "1inch"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.oneinch_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.oneinch_base_url).rstrip("/")
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout_s)

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {
                "status": "unavailable",
                "reason": "API key not configured"
            }

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/token/v1.2/1/search",
                    params={"query": "ETH", "limit": 1},
                    headers=self._build_headers(),
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except httpx.HTTPStatusError as e:
            return {"status": "error", "reason": f"status {e.response.status_code}"}
        except httpx.HTTPError as e:
            return {"status": "error", "reason": type(e).__name__}

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.api_key:
            raise ProviderUnavailableError("1inch API key is not configured", provider=self.name)

        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}{path}",
                params=params,
                headers=self._build_headers(),
            )
            response.raise_for_status()
            return response.json()

    async def get_balances(self, chain_id: str, address: str) -> Dict[str, Any]:
        """Get token balances (token address -> raw amount) for a wallet"""
        data = await self._get_json(f"/balance/v1.2/{chain_id}/balances/{address}")
        if not isinstance(data, dict):
            raise ProviderMalformedResponseError("balances were not an object", provider=self.name)
        return data

    async def get_history(self, chain_id: str, address: str, limit: int) -> Dict[str, Any]:
        """Get the most recent history events, in the order 1inch returns them"""
        data = await self._get_json(
            f"/history/v2.0/history/{address}/events",
            params={"chainId": chain_id, "limit": str(limit)},
        )
        if not isinstance(data, dict):
            raise ProviderMalformedResponseError("history was not an object", provider=self.name)
        return data

    async def search_token(self, chain_id: str, query: str) -> List[Dict[str, Any]]:
        data = await self._get_json(
            f"/token/v1.2/{chain_id}/search",
            params={"query": query, "limit": 10, "ignore_listed": "false"},
        )
        if not isinstance(data, list):
            raise ProviderMalformedResponseError("token search did not return a list", provider=self.name)

        matches = []
        for item in data:
            if not isinstance(item, dict) or not item.get("address"):
                raise ProviderMalformedResponseError("token search result without an address", provider=self.name)
            matches.append({
                "symbol": item.get("symbol", ""),
                "name": item.get("name", ""),
                "address": item["address"],
                "decimals": item.get("decimals"),
            })
        return matches

    async def get_spot_price(self, chain_id: str, addresses: List[str]) -> Dict[str, Any]:
        """Get USD spot prices keyed by lower-cased token address"""
        if not addresses:
            return {}

        data = await self._get_json(
            f"/price/v1.1/{chain_id}/{','.join(addresses)}",
            params={"currency": "USD"},
        )
        if not isinstance(data, dict):
            raise ProviderMalformedResponseError("prices were not an object", provider=self.name)
        return {str(address).lower(): price for address, price in data.items()}
