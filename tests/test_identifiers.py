import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from ens.exceptions import InvalidName

from conftest import VITALIK_ADDRESS, make_provider
from sayless.core import identifiers
from sayless.core.errors import (
    EmptyIdentifierError,
    ErrorKind,
    InvalidAddressError,
    InvalidNameError,
    NameNotFoundError,
    ProviderTimeoutError,
)
from sayless.core.identifiers import (
    IdentifierResolver,
    is_address_token,
    normalize_identifier,
    normalize_name_input,
    validate_wallet_address,
)


SOLANA_ADDRESS = "4Nd1mBQtrMJVYVfKf2PJy9NZUZdTAsp7D4xWLs4gDB4T"


# =============================================================================
# Normalization
# =============================================================================

class TestNormalization:

    def test_bare_name_gets_suffix(self):
        assert normalize_name_input("vitalik") == "vitalik.eth"

    def test_case_and_whitespace_are_folded(self):
        assert normalize_name_input("  Vitalik ") == "vitalik.eth"

    def test_suffix_is_not_doubled(self):
        assert normalize_name_input("vitalik.eth") == "vitalik.eth"
        assert normalize_name_input("VITALIK.ETH") == "vitalik.eth"

    def test_normalization_is_idempotent(self):
        once = normalize_name_input("Nick")
        assert normalize_name_input(once) == once

    def test_custom_suffix(self):
        assert normalize_name_input("alice", suffix="xyz") == "alice.xyz"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_input_is_rejected(self, raw):
        with pytest.raises(EmptyIdentifierError):
            normalize_name_input(raw)

    def test_invalid_name_is_classified(self, monkeypatch):
        def reject(name):
            raise InvalidName("disallowed character")

        monkeypatch.setattr(identifiers, "normalize_name", reject)

        with pytest.raises(InvalidNameError) as exc_info:
            normalize_name_input("bad")
        assert exc_info.value.kind == ErrorKind.INVALID_NAME
        assert exc_info.value.details["name"] == "bad.eth"

    def test_addresses_pass_through_verbatim(self):
        assert is_address_token(VITALIK_ADDRESS)
        assert not is_address_token("vitalik")
        assert normalize_identifier(VITALIK_ADDRESS) == VITALIK_ADDRESS
        assert normalize_identifier("0xSomethingOdd") == "0xSomethingOdd"


# =============================================================================
# Funding target validation
# =============================================================================

class TestWalletAddressValidation:

    def test_evm_chains_need_hex_address(self):
        assert validate_wallet_address(VITALIK_ADDRESS, "ETH-SEPOLIA") == VITALIK_ADDRESS
        with pytest.raises(InvalidAddressError):
            validate_wallet_address("0x1234", "MATIC-AMOY")
        with pytest.raises(InvalidAddressError):
            validate_wallet_address(SOLANA_ADDRESS, "ETH-SEPOLIA")

    def test_solana_needs_base58_address(self):
        assert validate_wallet_address(SOLANA_ADDRESS, "SOL-DEVNET") == SOLANA_ADDRESS
        with pytest.raises(InvalidAddressError):
            validate_wallet_address(VITALIK_ADDRESS, "SOL-DEVNET")


# =============================================================================
# Resolution
# =============================================================================

class TestIdentifierResolver:

    @pytest.mark.asyncio
    async def test_address_skips_resolver(self):
        provider = make_provider("ens", resolve_name=None)
        resolver = IdentifierResolver(provider)

        resolved = await resolver.resolve(VITALIK_ADDRESS, "1")

        assert resolved.address == VITALIK_ADDRESS
        assert resolved.name is None
        assert resolved.display_name == VITALIK_ADDRESS
        provider.resolve_name.assert_not_called()

    @pytest.mark.asyncio
    async def test_name_resolves_canonical_form(self):
        provider = make_provider("ens", resolve_name=VITALIK_ADDRESS)
        resolver = IdentifierResolver(provider)

        resolved = await resolver.resolve("Vitalik", "8453")

        provider.resolve_name.assert_awaited_once_with("vitalik.eth")
        assert resolved.address == VITALIK_ADDRESS
        assert resolved.name == "vitalik.eth"
        assert resolved.display_name == "vitalik.eth"

    @pytest.mark.asyncio
    async def test_missing_record_is_name_not_found(self):
        provider = make_provider("ens", resolve_name=None)
        resolver = IdentifierResolver(provider)

        with pytest.raises(NameNotFoundError) as exc_info:
            await resolver.resolve("nobody-here")

        assert exc_info.value.details["name"] == "nobody-here.eth"
        assert exc_info.value.provider == "ens"

    @pytest.mark.asyncio
    async def test_empty_name_never_reaches_resolver(self):
        provider = make_provider("ens", resolve_name=VITALIK_ADDRESS)
        resolver = IdentifierResolver(provider)

        with pytest.raises(EmptyIdentifierError):
            await resolver.resolve("  ")
        provider.resolve_name.assert_not_called()

    @pytest.mark.asyncio
    async def test_resolver_failure_is_classified(self):
        provider = MagicMock()
        provider.name = "ens"
        provider.resolve_name = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        resolver = IdentifierResolver(provider)

        with pytest.raises(ProviderTimeoutError):
            await resolver.resolve("vitalik")

    @pytest.mark.asyncio
    async def test_hanging_resolver_times_out(self):
        async def hang(name):
            await asyncio.sleep(3600)

        provider = make_provider("ens")
        provider.resolve_name = AsyncMock(side_effect=hang)
        resolver = IdentifierResolver(provider, timeout_s=0.05)

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await resolver.resolve("vitalik")

        assert exc_info.value.provider == "ens"
        assert "did not respond within 0.05s" in exc_info.value.message
