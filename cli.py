#!/usr/bin/env python3
"""Simple CLI for trying the wallet assistant locally"""

import argparse
import asyncio
import json
import sys
from typing import Awaitable, Callable, List, Optional

from sayless.core.engine import get_engine
from sayless.core.session import SessionContext
from sayless.core.tools import get_tool_registry
from sayless.config import settings
from sayless.logging_config import setup_logging


Lookup = Callable[[str], Awaitable[str]]


def ask(prompt: str) -> Optional[str]:
    try:
        return input(f"\n{prompt}\n> ").strip()
    except EOFError:
        return None


async def confirm_then_run(session: SessionContext, identifier: str, lookup: Lookup) -> str:
    """
    Drive the spelling confirmation on stdin, then run the lookup.

    The user answers yes, no, or types a corrected spelling. Stops early on
    end of input or when the spelling ceiling is reached.
    """
    engine = get_engine()
    reply = await lookup(identifier)

    while session.confirmation.state is not None and session.confirmation.state.is_pending:
        answer = ask(reply)
        if answer is None:
            return "No answer given; nothing was looked up."
        reply = engine.reply(session, answer)

        state = session.confirmation.state
        if state is not None and state.is_confirmed:
            print(reply)
            return await lookup(state.attempt)

    return reply


async def cli_balance(session: SessionContext, identifier: str, chain: str) -> None:
    engine = get_engine()
    print(await confirm_then_run(
        session,
        identifier,
        lambda target: engine.get_wallet_balance(session, target, chain),
    ))


async def cli_history(session: SessionContext, identifier: str, chain: str, limit: Optional[int]) -> None:
    engine = get_engine()
    print(await confirm_then_run(
        session,
        identifier,
        lambda target: engine.get_transaction_history(session, target, chain, limit),
    ))


def cli_tools(schema_format: str) -> None:
    registry = get_tool_registry()
    if schema_format == "openai":
        schemas = registry.to_openai_format()
    else:
        schemas = registry.to_anthropic_format()
    print(json.dumps(schemas, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sayless wallet assistant CLI")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command")

    balance_parser = subparsers.add_parser("balance", help="Token balances for a name or address")
    balance_parser.add_argument("identifier", help="Wallet address or name (e.g. vitalik)")
    balance_parser.add_argument("chain", nargs="?", default="ethereum", help="Chain (default: ethereum)")

    history_parser = subparsers.add_parser("history", help="Recent transactions for a name or address")
    history_parser.add_argument("identifier", help="Wallet address or name")
    history_parser.add_argument("chain", nargs="?", default="ethereum", help="Chain (default: ethereum)")
    history_parser.add_argument("--limit", type=int, default=None, help="Number of transactions")

    price_parser = subparsers.add_parser("price", help="Current USD price of a token")
    price_parser.add_argument("query", help="Token symbol or name")
    price_parser.add_argument("chain", nargs="?", default="ethereum", help="Chain (default: ethereum)")

    create_parser = subparsers.add_parser("create-wallet", help="Create a custodial testnet wallet")
    create_parser.add_argument("blockchain", help="MATIC-AMOY, SOL-DEVNET or ETH-SEPOLIA")
    create_parser.add_argument("account_type", nargs="?", default="SCA", help="SCA or EOA (default: SCA)")

    fund_parser = subparsers.add_parser("fund", help="Request faucet test tokens for a wallet")
    fund_parser.add_argument("address", help="Wallet address")
    fund_parser.add_argument("blockchain", help="MATIC-AMOY, SOL-DEVNET or ETH-SEPOLIA")

    tools_parser = subparsers.add_parser("tools", help="Print the tool schemas")
    tools_parser.add_argument("--format", dest="schema_format", choices=["anthropic", "openai"], default="anthropic")

    return parser


async def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level or settings.log_level)

    if args.command == "tools":
        cli_tools(args.schema_format)
        return 0

    engine = get_engine()
    session = SessionContext(
        max_spelling_attempts=settings.max_spelling_attempts,
        name_suffix=settings.name_suffix,
    )

    if args.command == "balance":
        await cli_balance(session, args.identifier, args.chain)

    elif args.command == "history":
        await cli_history(session, args.identifier, args.chain, args.limit)

    elif args.command == "price":
        print(await engine.get_token_price(session, args.query, args.chain))

    elif args.command == "create-wallet":
        print(await engine.create_wallet(session, args.blockchain, args.account_type))

    elif args.command == "fund":
        print(await engine.fund_wallet(session, args.address, args.blockchain))

    return 0


def main() -> None:
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
