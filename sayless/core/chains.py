"""
Static chain tables.

Two fixed sets live here: the networks the lookup providers can query (mapped
to their numeric chain ids) and the testnets the custody provider can create
and fund wallets on. Both are read-only for the life of the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping

from .errors import InvalidOptionError, UnknownChainError


# User-facing network name -> provider chain id
CHAIN_IDS: Mapping[str, str] = MappingProxyType({
    "ethereum": "1",
    "base": "8453",
    "polygon": "137",
    "arbitrum": "42161",
    "optimism": "10",
    "avalanche": "43114",
})

# Testnets supported by the wallet custody and faucet providers
CUSTODY_BLOCKCHAINS = ("MATIC-AMOY", "SOL-DEVNET", "ETH-SEPOLIA")
EVM_CUSTODY_BLOCKCHAINS = frozenset({"MATIC-AMOY", "ETH-SEPOLIA"})

# SCA = smart contract account, EOA = externally owned account
ACCOUNT_TYPES = ("SCA", "EOA")


@dataclass(frozen=True)
class ChainSelection:
    """A validated network choice."""

    name: str
    chain_id: str

    def __str__(self) -> str:
        return self.name


def supported_chains() -> List[str]:
    return list(CHAIN_IDS)


def normalize_chain(name: str) -> str:
    """Map a network name to its provider chain id.

    Matching is exact and case-sensitive; nothing falls back to a default.

    Raises:
        UnknownChainError: If the name is not in the table.
    """
    chain_id = CHAIN_IDS.get(name) if isinstance(name, str) else None
    if chain_id is None:
        raise UnknownChainError(str(name), supported_chains())
    return chain_id


def select_chain(name: str) -> ChainSelection:
    return ChainSelection(name=name, chain_id=normalize_chain(name))


def validate_custody_blockchain(blockchain: str) -> str:
    if blockchain not in CUSTODY_BLOCKCHAINS:
        raise InvalidOptionError("blockchain", str(blockchain), CUSTODY_BLOCKCHAINS)
    return blockchain


def validate_account_type(account_type: str) -> str:
    if account_type not in ACCOUNT_TYPES:
        raise InvalidOptionError("account type", str(account_type), ACCOUNT_TYPES)
    return account_type


__all__ = [
    "CHAIN_IDS",
    "CUSTODY_BLOCKCHAINS",
    "EVM_CUSTODY_BLOCKCHAINS",
    "ACCOUNT_TYPES",
    "ChainSelection",
    "supported_chains",
    "normalize_chain",
    "select_chain",
    "validate_custody_blockchain",
    "validate_account_type",
]
