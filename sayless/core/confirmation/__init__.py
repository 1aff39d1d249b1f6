"""
Confirmation Module

Spelling confirmation for user-supplied identifiers before any lookup.
"""

from .models import (
    ConfirmationAnswer,
    ConfirmationStage,
    ConfirmationState,
    ConfirmationTransition,
    parse_answer,
)
from .protocol import (
    ConfirmationProtocol,
    NoPendingConfirmationError,
    SPELLING_DELIMITER,
    spell_out,
)

__all__ = [
    "ConfirmationProtocol",
    "NoPendingConfirmationError",
    "ConfirmationAnswer",
    "ConfirmationStage",
    "ConfirmationState",
    "ConfirmationTransition",
    "SPELLING_DELIMITER",
    "parse_answer",
    "spell_out",
]
