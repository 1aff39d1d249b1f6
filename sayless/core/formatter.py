"""Render provider results and errors as the single string the conversation sees."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Optional

from .dispatch.models import OperationKind, ProviderResult
from .errors import DispatchError, ErrorKind


REDACTED = "[redacted]"

_BEARER_RE = re.compile(r"(?i)bearer\s+[^\s\"',]+")

_ACTIONS = {
    OperationKind.BALANCE: "fetch the balance",
    OperationKind.HISTORY: "fetch the transaction history",
    OperationKind.PRICE: "fetch the token price",
    OperationKind.CREATE_WALLET: "create the wallet",
    OperationKind.FUND_WALLET: "fund the wallet",
}


def redact(text: str, secrets: Optional[Iterable[str]] = None) -> str:
    """Strip credentials and bearer tokens from text bound for the user."""
    cleaned = _BEARER_RE.sub(f"Bearer {REDACTED}", text or "")
    for secret in sorted((s for s in secrets or () if s), key=len, reverse=True):
        cleaned = cleaned.replace(secret, REDACTED)
    return cleaned


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def format_success(kind: OperationKind, payload: Any) -> str:
    if kind == OperationKind.BALANCE:
        return (
            f"The wallet {payload['identifier']} ({payload['address']}) has the following "
            f"balances on {payload['chain']}: {_dump(payload['balances'])}"
        )

    if kind == OperationKind.HISTORY:
        return (
            f"Here are the last {payload['limit']} transactions for {payload['identifier']} "
            f"({payload['address']}) on {payload['chain']}: {_dump(payload['events'])}"
        )

    if kind == OperationKind.PRICE:
        token = payload["token"]
        label = token["symbol"] or token["address"]
        if token["name"]:
            label = f"{label} ({token['name']})"
        return (
            f"The current price of {label} on {payload['chain']} is {payload['price']} "
            f"{payload['currency']}. Token address: {token['address']}."
        )

    if kind == OperationKind.CREATE_WALLET:
        return (
            f"Successfully created a new {payload.get('accountType', '')} wallet on "
            f"{payload['blockchain']}:\n"
            f"  Address: {payload['address']}\n"
            f"  Blockchain: {payload['blockchain']}"
        )

    if kind == OperationKind.FUND_WALLET:
        return (
            "Successfully requested test tokens for your wallet:\n"
            f"  Status: {payload['status']}\n"
            f"  Destination Address: {payload['address']}\n"
            f"  Blockchain: {payload['blockchain']}"
        )

    return _dump(payload)


def format_error(kind: Optional[OperationKind], error: DispatchError) -> str:
    action = _ACTIONS.get(kind, "complete that request")

    if error.kind == ErrorKind.CANCELLED:
        return f"The request to {action} was cancelled."

    if error.kind == ErrorKind.NAME_NOT_FOUND:
        return (
            f"I couldn't find an address for {error.details.get('name')}. "
            "Please check the spelling and try again."
        )

    if error.kind == ErrorKind.EMPTY_TOKEN_SEARCH:
        return f"I couldn't find a token matching \"{error.details.get('query')}\"."

    if error.kind == ErrorKind.LIMIT_OUT_OF_RANGE:
        if error.details.get("belowMinimum"):
            return f"Sorry, the number of transactions must be between 1 and {error.details.get('ceiling')}."
        return (
            f"Sorry, the maximum limit for transactions is {error.details.get('ceiling')}. "
            "Please specify a lower number."
        )

    if error.kind == ErrorKind.EMPTY_IDENTIFIER:
        return "I didn't catch a wallet name or address. Could you say it again?"

    if error.kind == ErrorKind.CONFIRMATION_EXHAUSTED:
        return (
            f"Sorry, I {error.message}. "
            "Let's start over: please tell me the name or address again."
        )

    if error.user_correctable:
        return f"I couldn't {action}: {error.message}."

    return (
        f"Sorry, I couldn't {action} because the provider call failed. "
        f"Error: {error.message}. This is a temporary service problem, not a problem with your request."
    )


def format_result(result: ProviderResult, secrets: Optional[Iterable[str]] = None) -> str:
    """Render a ProviderResult, with credentials scrubbed."""
    if result.ok:
        text = format_success(result.kind, result.payload)
    else:
        text = format_error(result.kind, result.error)
    return redact(text, secrets)


__all__ = ["REDACTED", "redact", "format_success", "format_error", "format_result"]
