"""
Identifier resolution.

A user-supplied identifier is either a literal address (anything starting with
``0x``) or a human-readable name. Names are canonicalised (lower-cased, default
suffix appended, ENS-normalised) and then looked up through a
NameResolverProvider. Addresses pass through untouched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from ens.exceptions import InvalidName
from ens.utils import normalize_name
from eth_utils import is_hex_address

from .chains import EVM_CUSTODY_BLOCKCHAINS
from .errors import (
    EmptyIdentifierError,
    InvalidAddressError,
    InvalidNameError,
    NameNotFoundError,
    classify_error,
)
from ..providers.base import NameResolverProvider


ADDRESS_PREFIX = "0x"
DEFAULT_SUFFIX = "eth"

_BASE58_ALPHABET = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")


@dataclass(frozen=True)
class ResolvedAddress:
    """An address ready to hand to a provider, plus how we got there."""

    identifier: str
    address: str
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.identifier


def is_address_token(value: str) -> bool:
    return value.startswith(ADDRESS_PREFIX)


def is_valid_evm_address(address: str) -> bool:
    return bool(address) and address.startswith(ADDRESS_PREFIX) and is_hex_address(address)


@lru_cache(maxsize=128)
def is_valid_solana_address(address: str) -> bool:
    if not address:
        return False
    length = len(address)
    if length < 32 or length > 44:
        return False
    return all(ch in _BASE58_ALPHABET for ch in address)


def validate_wallet_address(address: str, blockchain: str) -> str:
    """Check a funding target has the address shape its custody chain expects."""
    address = (address or "").strip()
    if blockchain in EVM_CUSTODY_BLOCKCHAINS:
        valid = is_valid_evm_address(address)
    else:
        valid = is_valid_solana_address(address)
    if not valid:
        raise InvalidAddressError(address, blockchain)
    return address


def normalize_name_input(raw: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """Canonical name form: lower-case with the default suffix exactly once.

    Idempotent: normalizing an already-normalized name returns it unchanged.

    Raises:
        EmptyIdentifierError: If nothing but whitespace was given.
        InvalidNameError: If the name contains characters ENS does not allow.
    """
    candidate = (raw or "").strip().lower()
    if not candidate:
        raise EmptyIdentifierError()

    tail = f".{suffix}"
    if not candidate.endswith(tail):
        candidate = f"{candidate}{tail}"

    try:
        return normalize_name(candidate)
    except InvalidName as exc:
        raise InvalidNameError(candidate, str(exc)) from exc


def normalize_identifier(raw: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """Normalize whatever the user said: addresses verbatim, names canonicalised."""
    if raw and is_address_token(raw):
        return raw
    return normalize_name_input(raw, suffix)


class IdentifierResolver:
    """
    Turns a confirmed identifier into a ResolvedAddress.

    Performs no confirmation itself; callers only hand it identifiers that
    the user has already confirmed.
    """

    def __init__(
        self,
        name_resolver: NameResolverProvider,
        suffix: str = DEFAULT_SUFFIX,
        timeout_s: float = 15.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.name_resolver = name_resolver
        self.suffix = suffix
        self.timeout_s = timeout_s
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, raw_identifier: str, chain_id: Optional[str] = None) -> ResolvedAddress:
        """
        Resolve an identifier to an address.

        Args:
            raw_identifier: Literal address or name as confirmed by the user
            chain_id: Chain the address will be used on (names always resolve
                on Ethereum mainnet; the id is only logged)

        Returns:
            ResolvedAddress; ``name`` is set when resolution happened

        Raises:
            EmptyIdentifierError, InvalidNameError: Before any network call
            NameNotFoundError: The resolver had no record for the name
            ProviderTimeoutError: No answer within ``timeout_s``
            DispatchError: The resolver call itself failed
        """
        if raw_identifier and is_address_token(raw_identifier):
            return ResolvedAddress(identifier=raw_identifier, address=raw_identifier)

        name = normalize_name_input(raw_identifier, self.suffix)

        provider_name = getattr(self.name_resolver, "name", "resolver")
        try:
            address = await asyncio.wait_for(self.name_resolver.resolve_name(name), timeout=self.timeout_s)
        except Exception as exc:
            raise classify_error(exc, provider=provider_name, timeout_s=self.timeout_s) from exc

        if not address:
            self.logger.info("name %s did not resolve (chain %s)", name, chain_id)
            raise NameNotFoundError(name, provider=provider_name)

        self.logger.info("resolved %s for chain %s", name, chain_id)
        return ResolvedAddress(identifier=raw_identifier, address=address, name=name)


__all__ = [
    "ADDRESS_PREFIX",
    "DEFAULT_SUFFIX",
    "ResolvedAddress",
    "IdentifierResolver",
    "is_address_token",
    "is_valid_evm_address",
    "is_valid_solana_address",
    "validate_wallet_address",
    "normalize_name_input",
    "normalize_identifier",
]
