"""
Assistant engine.

The seven operations the conversational layer can invoke. Each takes the
caller's SessionContext and returns one display string; failures are turned
into text here and never escape as exceptions.

Balance and history lookups go through the confirmation gate: an identifier
reaches the resolver only once the user has confirmed its spelling in this
session.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ..config import settings
from ..providers.base import NameResolverProvider
from .chains import select_chain, validate_account_type, validate_custody_blockchain
from .confirmation import ConfirmationAnswer, NoPendingConfirmationError, parse_answer
from .dispatch import (
    BalanceRequest,
    CreateWalletRequest,
    Dispatcher,
    FundWalletRequest,
    HistoryRequest,
    OperationKind,
    PriceRequest,
    ProviderResult,
    validate_limit,
)
from .errors import DispatchError
from .formatter import format_error, format_result, redact
from .identifiers import IdentifierResolver, validate_wallet_address
from .session import SessionContext


NOTHING_PENDING_MESSAGE = "There is no name or address waiting for confirmation right now."


class AssistantEngine:
    """Confirmation, resolution, dispatch and formatting behind one facade."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        name_resolver: NameResolverProvider,
        history_default_limit: int = 10,
        name_suffix: str = "eth",
        secrets: Optional[list] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.dispatcher = dispatcher
        self.resolver = IdentifierResolver(name_resolver, suffix=name_suffix, timeout_s=dispatcher.timeout_s)
        self.history_default_limit = history_default_limit
        self.secrets = list(secrets if secrets is not None else settings.secret_values())
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Confirmation prompts
    # ------------------------------------------------------------------
    def confirm_identifier(self, session: SessionContext, name: str) -> str:
        """Echo the normalized identifier back and ask for yes/no."""
        session.touch()
        try:
            return session.confirmation.propose(name)
        except DispatchError as exc:
            return self._fail(None, exc)

    def spell_identifier(self, session: SessionContext, current_attempt: Optional[str] = None) -> str:
        """Spell the current attempt letter by letter and ask again."""
        session.touch()
        try:
            return session.confirmation.spell(current_attempt or None)
        except NoPendingConfirmationError:
            return NOTHING_PENDING_MESSAGE
        except DispatchError as exc:
            session.confirmation.discard()
            return self._fail(None, exc)

    def reply(self, session: SessionContext, answer: str) -> str:
        """Apply a direct user reply: yes, no, or a fresh spelling."""
        session.touch()
        if session.confirmation.state is None:
            return NOTHING_PENDING_MESSAGE
        parsed = parse_answer(answer)
        try:
            if parsed is None:
                return session.confirmation.respell(answer)
            return session.confirmation.respond(parsed)
        except NoPendingConfirmationError:
            return NOTHING_PENDING_MESSAGE
        except DispatchError as exc:
            session.confirmation.discard()
            return self._fail(None, exc)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    async def get_wallet_balance(self, session: SessionContext, address_or_name: str, chain: str) -> str:
        kind = OperationKind.BALANCE
        try:
            selection = select_chain(chain)
            gate = self._confirmation_gate(session, address_or_name)
            if gate is not None:
                return gate
        except DispatchError as exc:
            return self._fail(kind, exc)

        async def lookup() -> ProviderResult:
            target = await self.resolver.resolve(address_or_name, selection.chain_id)
            return await self.dispatcher.dispatch(BalanceRequest(target=target, chain=selection))

        return await self._run(session, kind, lookup)

    async def get_transaction_history(
        self,
        session: SessionContext,
        address_or_name: str,
        chain: str,
        limit: Optional[int] = None,
    ) -> str:
        kind = OperationKind.HISTORY
        try:
            selection = select_chain(chain)
            query_limit = validate_limit(
                self.history_default_limit if limit in (None, 0) else limit,
                self.dispatcher.history_max_limit,
            )
            gate = self._confirmation_gate(session, address_or_name)
            if gate is not None:
                return gate
        except DispatchError as exc:
            return self._fail(kind, exc)

        async def lookup() -> ProviderResult:
            target = await self.resolver.resolve(address_or_name, selection.chain_id)
            return await self.dispatcher.dispatch(
                HistoryRequest(target=target, chain=selection, limit=query_limit)
            )

        return await self._run(session, kind, lookup)

    async def get_token_price(self, session: SessionContext, query: str, chain: str = "ethereum") -> str:
        kind = OperationKind.PRICE
        session.confirmation.discard()
        try:
            selection = select_chain(chain)
        except DispatchError as exc:
            return self._fail(kind, exc)

        return await self._dispatch(session, PriceRequest(query=query.strip(), chain=selection))

    # ------------------------------------------------------------------
    # Custody
    # ------------------------------------------------------------------
    async def create_wallet(self, session: SessionContext, blockchain: str, account_type: str) -> str:
        kind = OperationKind.CREATE_WALLET
        session.confirmation.discard()
        try:
            request = CreateWalletRequest(
                blockchain=validate_custody_blockchain(blockchain),
                account_type=validate_account_type(account_type),
            )
        except DispatchError as exc:
            return self._fail(kind, exc)

        return await self._dispatch(session, request)

    async def fund_wallet(self, session: SessionContext, address: str, blockchain: str) -> str:
        kind = OperationKind.FUND_WALLET
        session.confirmation.discard()
        try:
            blockchain = validate_custody_blockchain(blockchain)
            request = FundWalletRequest(
                address=validate_wallet_address(address, blockchain),
                blockchain=blockchain,
            )
        except DispatchError as exc:
            return self._fail(kind, exc)

        return await self._dispatch(session, request)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _confirmation_gate(self, session: SessionContext, address_or_name: str) -> Optional[str]:
        """
        Return a prompt to show instead of dispatching, or None to proceed.

        A lookup for an identifier with a confirmation pending is taken as the
        user's yes; the confirmed identifier is then consumed by this lookup.
        """
        protocol = session.confirmation
        if protocol.is_pending_for(address_or_name):
            protocol.respond(ConfirmationAnswer.YES)

        if protocol.consume(address_or_name) is not None:
            return None

        self.logger.info("identifier not yet confirmed in session %s", session.session_id)
        return protocol.propose(address_or_name)

    async def _dispatch(self, session: SessionContext, request) -> str:
        return await self._run(session, request.kind, lambda: self.dispatcher.dispatch(request), request)

    async def _run(
        self,
        session: SessionContext,
        kind: OperationKind,
        operation: Callable[[], Awaitable[ProviderResult]],
        request=None,
    ) -> str:
        """Queue an operation on the session; resolution failures and cancellation become text too."""
        try:
            result = await session.run(operation)
        except DispatchError as exc:
            result = ProviderResult.failure(kind, exc, request=request)
        return format_result(result, self.secrets)

    def _fail(self, kind: Optional[OperationKind], error: DispatchError) -> str:
        self.logger.info("request rejected: %s", error.kind.value)
        return redact(format_error(kind, error), self.secrets)


_engine: Optional[AssistantEngine] = None


def get_engine() -> AssistantEngine:
    """Get or create the process-wide engine wired to the configured providers."""
    global _engine
    if _engine is None:
        from ..providers.circle import CircleProvider
        from ..providers.ens import EnsResolverProvider
        from ..providers.oneinch import OneInchProvider

        oneinch = OneInchProvider()
        circle = CircleProvider()
        _engine = AssistantEngine(
            dispatcher=Dispatcher(
                indexer=oneinch,
                prices=oneinch,
                custody=circle,
                faucet=circle,
                timeout_s=settings.request_timeout_seconds,
                history_max_limit=settings.history_max_limit,
            ),
            name_resolver=EnsResolverProvider(),
            history_default_limit=settings.history_default_limit,
            name_suffix=settings.name_suffix,
        )
    return _engine
