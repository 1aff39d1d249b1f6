import uuid
import httpx
from typing import Any, Dict, Optional
from ..config import settings
from ..core.errors import ProviderMalformedResponseError, ProviderUnavailableError
from .base import CustodyProvider, FaucetProvider


class CircleProvider(CustodyProvider, FaucetProvider):
    """Circle developer-controlled wallets and the testnet faucet"""

    name = "circle"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        entity_secret_ciphertext: Optional[str] = None,
        wallet_set_id: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.circle_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.circle_base_url).rstrip("/")
        self.entity_secret_ciphertext = (
            settings.circle_entity_secret_ciphertext
            if entity_secret_ciphertext is None
            else entity_secret_ciphertext
        )
        self.wallet_set_id = settings.circle_wallet_set_id if wallet_set_id is None else wallet_set_id
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
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
                response = await client.get(f"{self.base_url}/ping")
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except httpx.HTTPStatusError as e:
            return {"status": "error", "reason": f"status {e.response.status_code}"}
        except httpx.HTTPError as e:
            return {"status": "error", "reason": type(e).__name__}

    async def _post_json(self, path: str, body: Dict[str, Any]) -> Any:
        if not self.api_key:
            raise ProviderUnavailableError("Circle API key is not configured", provider=self.name)

        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}{path}",
                json=body,
                headers=self._build_headers(),
            )
            response.raise_for_status()
            return response.json()

    async def create_wallet(self, blockchain: str, account_type: str) -> Dict[str, Any]:
        """Create exactly one wallet in the configured wallet set"""
        if not self.entity_secret_ciphertext or not self.wallet_set_id:
            raise ProviderUnavailableError(
                "wallet creation is not configured (entity secret or wallet set missing)",
                provider=self.name,
            )

        data = await self._post_json(
            "/v1/w3s/developer/wallets",
            {
                "idempotencyKey": str(uuid.uuid4()),
                "entitySecretCiphertext": self.entity_secret_ciphertext,
                "walletSetId": self.wallet_set_id,
                "blockchains": [blockchain],
                "accountType": account_type,
                "count": 1,
            },
        )

        wallets = (data.get("data") or {}).get("wallets") if isinstance(data, dict) else None
        if not wallets or not isinstance(wallets[0], dict) or not wallets[0].get("address"):
            raise ProviderMalformedResponseError("no wallet data returned", provider=self.name)

        wallet = wallets[0]
        return {
            "id": wallet.get("id"),
            "address": wallet["address"],
            "blockchain": wallet.get("blockchain", blockchain),
            "accountType": wallet.get("accountType", account_type),
        }

    async def fund_wallet(self, address: str, blockchain: str) -> Dict[str, Any]:
        """Request a faucet drip of test tokens"""
        data = await self._post_json(
            "/v1/faucet/drips",
            {
                "destinationAddress": address,
                "blockchain": blockchain,
            },
        )

        status = data.get("status") if isinstance(data, dict) else None
        if not status:
            raise ProviderMalformedResponseError("faucet response had no status", provider=self.name)
        return {"status": str(status), "address": address, "blockchain": blockchain}
