from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 15

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class NameResolverProvider(Provider):
    """Provider that turns a human-readable name into an address"""

    @abstractmethod
    async def resolve_name(self, name: str) -> Optional[str]:
        """Return the address for a canonical name, or None when unregistered"""
        pass


class IndexerProvider(Provider):
    """Provider for blockchain indexing data (balances, transactions)"""

    @abstractmethod
    async def get_balances(self, chain_id: str, address: str) -> Dict[str, Any]:
        """Get all token balances for an address"""
        pass

    @abstractmethod
    async def get_history(self, chain_id: str, address: str, limit: int) -> Dict[str, Any]:
        """Get the most recent history events for an address"""
        pass


class TokenPriceProvider(Provider):
    """Provider for token search and spot prices"""

    @abstractmethod
    async def search_token(self, chain_id: str, query: str) -> List[Dict[str, Any]]:
        """Search tokens by name or symbol; each match has symbol, name, address"""
        pass

    @abstractmethod
    async def get_spot_price(self, chain_id: str, addresses: List[str]) -> Dict[str, Any]:
        """Get spot prices keyed by token address"""
        pass


class CustodyProvider(Provider):
    """Provider that creates custodial wallets"""

    @abstractmethod
    async def create_wallet(self, blockchain: str, account_type: str) -> Dict[str, Any]:
        """Create one wallet and return at least its address and blockchain"""
        pass


class FaucetProvider(Provider):
    """Provider that funds testnet wallets"""

    @abstractmethod
    async def fund_wallet(self, address: str, blockchain: str) -> Dict[str, Any]:
        """Request test tokens; the result carries the provider status"""
        pass
