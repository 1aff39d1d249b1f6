import logging
from typing import Any, Dict, Optional

from ens import AsyncENS
from web3 import AsyncWeb3
from web3.providers.rpc import AsyncHTTPProvider

from ..config import settings
from ..core.errors import ProviderUnavailableError
from .base import NameResolverProvider


class EnsResolverProvider(NameResolverProvider):
    """ENS name resolution against Ethereum mainnet"""

    name = "ens"

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        ns: Optional[AsyncENS] = None,
    ):
        self.rpc_url = settings.eth_rpc_url if rpc_url is None else rpc_url
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._ns = ns
        self._w3: Optional[AsyncWeb3] = None
        self.logger = logging.getLogger(__name__)

    def _web3(self) -> AsyncWeb3:
        if self._w3 is None:
            self._w3 = AsyncWeb3(
                AsyncHTTPProvider(self.rpc_url, request_kwargs={"timeout": self.timeout_s})
            )
        return self._w3

    def _ens(self) -> AsyncENS:
        if self._ns is None:
            if not self.rpc_url:
                raise ProviderUnavailableError("Ethereum RPC URL is not configured", provider=self.name)
            self._ns = AsyncENS.from_web3(self._web3())
        return self._ns

    async def ready(self) -> bool:
        return self._ns is not None or bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {
                "status": "unavailable",
                "reason": "Ethereum RPC URL not configured"
            }

        if self._ns is not None and self._w3 is None:
            return {"status": "healthy"}

        try:
            chain_id = await self._web3().eth.chain_id
            return {"status": "healthy", "chain_id": chain_id}
        except Exception as e:
            # Only the exception type; the RPC URL may embed a key
            return {"status": "error", "reason": type(e).__name__}

    async def resolve_name(self, name: str) -> Optional[str]:
        self.logger.debug("attempting to resolve ENS name: %s", name)
        address = await self._ens().address(name)
        if not address:
            return None
        self.logger.debug("resolved %s to %s", name, address)
        return str(address)
