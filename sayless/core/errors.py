"""
Error Classification

Every failure the engine can report is a DispatchError with a kind.
Kinds are split into user-correctable ones (the user can fix the input:
unknown chain, misspelled name, nothing found) and operational ones (a
provider call failed and asking again with the same input may or may not help).
"""

import asyncio
import json
from enum import Enum
from typing import Any, Dict, Optional, Sequence

import httpx


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to the conversational layer."""

    UNKNOWN_CHAIN = "unknown_chain"
    INVALID_NAME = "invalid_name"
    NAME_NOT_FOUND = "name_not_found"
    LIMIT_OUT_OF_RANGE = "limit_out_of_range"
    EMPTY_TOKEN_SEARCH = "empty_token_search"
    INVALID_OPTION = "invalid_option"
    INVALID_ADDRESS = "invalid_address"
    EMPTY_IDENTIFIER = "empty_identifier"
    CONFIRMATION_EXHAUSTED = "confirmation_exhausted"
    PROVIDER_HTTP_ERROR = "provider_http_error"
    PROVIDER_MALFORMED_RESPONSE = "provider_malformed_response"
    PROVIDER_TIMEOUT = "provider_timeout"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    CANCELLED = "cancelled"


class DispatchError(Exception):
    """Base class for every failure the engine reports as text."""

    kind: ErrorKind = ErrorKind.PROVIDER_UNAVAILABLE
    user_correctable: bool = False

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "userCorrectable": self.user_correctable,
            "provider": self.provider,
            "details": self.details,
        }


# Local validation errors (raised before any network call)
class UnknownChainError(DispatchError):
    kind = ErrorKind.UNKNOWN_CHAIN
    user_correctable = True

    def __init__(self, chain: str, supported: Sequence[str]):
        super().__init__(
            f"unknown chain '{chain}'. Supported chains are: {', '.join(supported)}",
            details={"chain": chain, "supported": list(supported)},
        )
        self.chain = chain


class InvalidOptionError(DispatchError):
    """A value outside one of the fixed enumerated sets."""

    kind = ErrorKind.INVALID_OPTION
    user_correctable = True

    def __init__(self, field: str, value: str, allowed: Sequence[str]):
        super().__init__(
            f"'{value}' is not a valid {field}. Choose one of: {', '.join(allowed)}",
            details={"field": field, "value": value, "allowed": list(allowed)},
        )
        self.field = field
        self.value = value


class LimitOutOfRangeError(DispatchError):
    kind = ErrorKind.LIMIT_OUT_OF_RANGE
    user_correctable = True

    def __init__(self, limit: int, ceiling: int):
        below = isinstance(limit, int) and not isinstance(limit, bool) and limit < 1
        super().__init__(
            f"the number of transactions must be between 1 and {ceiling}"
            if below
            else f"the maximum limit for transactions is {ceiling}",
            details={"limit": limit, "ceiling": ceiling, "belowMinimum": below},
        )
        self.limit = limit
        self.ceiling = ceiling
        self.below_minimum = below


class EmptyIdentifierError(DispatchError):
    kind = ErrorKind.EMPTY_IDENTIFIER
    user_correctable = True

    def __init__(self):
        super().__init__("no wallet name or address was given")


class InvalidNameError(DispatchError):
    kind = ErrorKind.INVALID_NAME
    user_correctable = True

    def __init__(self, name: str, reason: str = ""):
        message = f"'{name}' is not a valid name"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"name": name})
        self.name = name


class InvalidAddressError(DispatchError):
    kind = ErrorKind.INVALID_ADDRESS
    user_correctable = True

    def __init__(self, address: str, blockchain: str):
        super().__init__(
            f"'{address}' is not a valid address for {blockchain}",
            details={"address": address, "blockchain": blockchain},
        )
        self.address = address


class ConfirmationExhaustedError(DispatchError):
    kind = ErrorKind.CONFIRMATION_EXHAUSTED
    user_correctable = True

    def __init__(self, attempts: int):
        super().__init__(
            f"could not confirm the spelling after {attempts} attempts",
            details={"attempts": attempts},
        )
        self.attempts = attempts


# Data-not-found errors (the provider answered, but with nothing to show)
class NameNotFoundError(DispatchError):
    kind = ErrorKind.NAME_NOT_FOUND
    user_correctable = True

    def __init__(self, name: str, provider: Optional[str] = None):
        super().__init__(
            f"could not resolve {name} to an address",
            provider=provider,
            details={"name": name},
        )
        self.name = name


class EmptyTokenSearchError(DispatchError):
    kind = ErrorKind.EMPTY_TOKEN_SEARCH
    user_correctable = True

    def __init__(self, query: str, provider: Optional[str] = None):
        super().__init__(
            f"no token matching '{query}' was found",
            provider=provider,
            details={"query": query},
        )
        self.query = query


# Operational errors (the provider call itself failed)
class ProviderHttpError(DispatchError):
    kind = ErrorKind.PROVIDER_HTTP_ERROR

    def __init__(self, status: int, provider: Optional[str] = None, reason: str = ""):
        source = provider or "provider"
        message = f"{source} API returned status: {status}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, provider=provider, details={"status": status})
        self.status = status


class ProviderMalformedResponseError(DispatchError):
    kind = ErrorKind.PROVIDER_MALFORMED_RESPONSE

    def __init__(self, reason: str, provider: Optional[str] = None):
        source = provider or "provider"
        super().__init__(f"unexpected response from {source}: {reason}", provider=provider)


class ProviderTimeoutError(DispatchError):
    kind = ErrorKind.PROVIDER_TIMEOUT

    def __init__(self, timeout_s: Optional[float] = None, provider: Optional[str] = None):
        source = provider or "provider"
        message = f"{source} did not respond"
        if timeout_s is not None:
            message = f"{message} within {timeout_s:g}s"
        super().__init__(message, provider=provider, details={"timeoutSeconds": timeout_s})


class ProviderUnavailableError(DispatchError):
    kind = ErrorKind.PROVIDER_UNAVAILABLE


class OperationCancelledError(DispatchError):
    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "the request was cancelled"):
        super().__init__(message)


def classify_error(
    error: BaseException,
    provider: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> DispatchError:
    """
    Classify an exception raised during a provider call.

    Messages are built from status codes and exception type names only;
    the original exception text is never copied.
    """
    if isinstance(error, DispatchError):
        if error.provider is None:
            error.provider = provider
        return error

    if isinstance(error, httpx.HTTPStatusError):
        return ProviderHttpError(
            error.response.status_code,
            provider=provider,
            reason=error.response.reason_phrase,
        )

    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
        return ProviderTimeoutError(timeout_s, provider=provider)

    if isinstance(error, httpx.RequestError):
        return ProviderUnavailableError(
            f"could not reach {provider or 'provider'} ({type(error).__name__})",
            provider=provider,
        )

    if isinstance(error, json.JSONDecodeError):
        return ProviderMalformedResponseError("response was not valid JSON", provider=provider)

    return ProviderUnavailableError(
        f"{provider or 'provider'} call failed ({type(error).__name__})",
        provider=provider,
    )


__all__ = [
    "ErrorKind",
    "DispatchError",
    "UnknownChainError",
    "InvalidOptionError",
    "LimitOutOfRangeError",
    "EmptyIdentifierError",
    "InvalidNameError",
    "InvalidAddressError",
    "ConfirmationExhaustedError",
    "NameNotFoundError",
    "EmptyTokenSearchError",
    "ProviderHttpError",
    "ProviderMalformedResponseError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "OperationCancelledError",
    "classify_error",
]
