"""
Confirmation Protocol

Forces the user to confirm an identifier's spelling before it is used.

    PROPOSED --yes--> CONFIRMED
    PROPOSED --no---> SPELLING --yes--> CONFIRMED
                      SPELLING --no---> SPELLING (or EXHAUSTED past the ceiling)
    SPELLING --respell--> PROPOSED

One identifier is in flight per protocol instance; proposing a new one
replaces the old state.
"""

import logging
from typing import Dict, Optional, Set

from ..errors import ConfirmationExhaustedError, DispatchError
from ..identifiers import DEFAULT_SUFFIX, normalize_identifier
from .models import (
    ConfirmationAnswer,
    ConfirmationStage,
    ConfirmationState,
    ConfirmationTransition,
)


SPELLING_DELIMITER = ", "

PROPOSE_PROMPT = (
    'I want to look up "{attempt}". Is this spelling correct? '
    'Please respond with "yes" to proceed or "no" to spell it letter by letter.'
)
SPELL_PROMPT = 'Let me spell that out for you: {spelled}. Is this correct? Please respond with "yes" or "no".'
CONFIRMED_MESSAGE = 'Thanks, I\'ll use "{attempt}".'


class NoPendingConfirmationError(Exception):
    """A yes/no answer arrived with nothing waiting for one."""


def spell_out(value: str, delimiter: str = SPELLING_DELIMITER) -> str:
    return delimiter.join(value)


class ConfirmationProtocol:
    """Per-session confirmation state machine."""

    TRANSITIONS: Dict[ConfirmationStage, Set[ConfirmationStage]] = {
        ConfirmationStage.PROPOSED: {
            ConfirmationStage.CONFIRMED,
            ConfirmationStage.SPELLING,
            ConfirmationStage.EXHAUSTED,
        },
        ConfirmationStage.SPELLING: {
            ConfirmationStage.CONFIRMED,
            ConfirmationStage.SPELLING,
            ConfirmationStage.PROPOSED,
            ConfirmationStage.EXHAUSTED,
        },
        ConfirmationStage.CONFIRMED: set(),
        ConfirmationStage.EXHAUSTED: set(),
    }

    def __init__(
        self,
        max_spelling_attempts: int = 5,
        suffix: str = DEFAULT_SUFFIX,
        logger: Optional[logging.Logger] = None,
    ):
        self.max_spelling_attempts = max_spelling_attempts
        self.suffix = suffix
        self.logger = logger or logging.getLogger(__name__)
        self.state: Optional[ConfirmationState] = None

    @property
    def stage(self) -> Optional[ConfirmationStage]:
        return self.state.stage if self.state else None

    def normalize(self, raw: str) -> str:
        return normalize_identifier(raw, self.suffix)

    def matches(self, raw: str) -> bool:
        """True if ``raw`` normalizes to the identifier in flight."""
        if self.state is None:
            return False
        try:
            return self.normalize(raw) == self.state.attempt
        except DispatchError:
            return False

    def is_confirmed_for(self, raw: str) -> bool:
        return bool(self.state and self.state.is_confirmed and self.matches(raw))

    def is_pending_for(self, raw: str) -> bool:
        return bool(self.state and self.state.is_pending and self.matches(raw))

    def _transition(self, to_stage: ConfirmationStage, attempt: Optional[str] = None) -> None:
        state = self.state
        from_stage = state.stage
        if to_stage not in self.TRANSITIONS[from_stage]:
            raise NoPendingConfirmationError(
                f"cannot move from {from_stage.value} to {to_stage.value}"
            )
        if attempt is not None:
            state.attempt = attempt
        state.stage = to_stage
        state.history.append(
            ConfirmationTransition(from_stage=from_stage, to_stage=to_stage, attempt=state.attempt)
        )
        self.logger.debug("confirmation %s -> %s (%s)", from_stage.value, to_stage.value, state.attempt)

    def propose(self, raw: str) -> str:
        """
        Start confirming a new identifier and return the prompt to show.

        Raises:
            EmptyIdentifierError: Blank input; ask the user to repeat.
            InvalidNameError: The name cannot be a valid name at all.
        """
        attempt = self.normalize(raw)
        self.state = ConfirmationState(original=raw, attempt=attempt)
        self.state.history.append(
            ConfirmationTransition(from_stage=None, to_stage=ConfirmationStage.PROPOSED, attempt=attempt)
        )
        return PROPOSE_PROMPT.format(attempt=attempt)

    def respond(self, answer: ConfirmationAnswer) -> str:
        """Apply a yes/no answer to the identifier in flight."""
        if self.state is None or not self.state.is_pending:
            raise NoPendingConfirmationError("nothing is waiting for confirmation")

        if answer == ConfirmationAnswer.YES:
            self._transition(ConfirmationStage.CONFIRMED)
            return CONFIRMED_MESSAGE.format(attempt=self.state.attempt)
        return self.spell()

    def spell(self, attempt: Optional[str] = None) -> str:
        """
        Treat the current spelling as rejected and spell out the next guess.

        ``attempt`` replaces the best guess when given. With nothing in flight
        the attempt is proposed first, so the flow always passes PROPOSED.

        Raises:
            ConfirmationExhaustedError: The spelling ceiling was passed.
        """
        if self.state is None or not self.state.is_pending:
            if attempt is None:
                raise NoPendingConfirmationError("nothing is waiting for confirmation")
            self.propose(attempt)
            attempt = None

        new_attempt = self.normalize(attempt) if attempt is not None else None
        state = self.state
        state.spelling_attempts += 1
        if state.spelling_attempts > self.max_spelling_attempts:
            self._transition(ConfirmationStage.EXHAUSTED)
            self.logger.info("confirmation gave up after %d spellings", state.spelling_attempts - 1)
            raise ConfirmationExhaustedError(self.max_spelling_attempts)

        self._transition(ConfirmationStage.SPELLING, new_attempt)
        return SPELL_PROMPT.format(spelled=spell_out(state.attempt))

    def respell(self, new_attempt: str) -> str:
        """Take an explicit new spelling from the user and ask about it."""
        if self.state is None or self.state.stage != ConfirmationStage.SPELLING:
            return self.propose(new_attempt)
        self._transition(ConfirmationStage.PROPOSED, self.normalize(new_attempt))
        return PROPOSE_PROMPT.format(attempt=self.state.attempt)

    def confirm(self) -> str:
        """Mark the identifier in flight as confirmed and return it."""
        self.respond(ConfirmationAnswer.YES)
        return self.state.attempt

    def consume(self, raw: str) -> Optional[str]:
        """Hand out a confirmed identifier once, then forget it."""
        if not self.is_confirmed_for(raw):
            return None
        attempt = self.state.attempt
        self.discard()
        return attempt

    def discard(self) -> None:
        self.state = None
