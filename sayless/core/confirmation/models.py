"""
Confirmation Models

States and per-identifier state for the spelling confirmation flow.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ConfirmationStage(str, Enum):
    """Where an identifier is in the confirmation flow."""

    PROPOSED = "proposed"      # Normalized form echoed back, waiting for yes/no
    SPELLING = "spelling"      # Spelled out letter by letter, waiting for yes/no
    CONFIRMED = "confirmed"    # User said yes; usable for lookups
    EXHAUSTED = "exhausted"    # Too many rejected spellings; gave up


class ConfirmationAnswer(str, Enum):
    YES = "yes"
    NO = "no"


@dataclass
class ConfirmationTransition:
    """Record of one step through the flow."""

    from_stage: Optional[ConfirmationStage]
    to_stage: ConfirmationStage
    attempt: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromStage": self.from_stage.value if self.from_stage else None,
            "toStage": self.to_stage.value,
            "attempt": self.attempt,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ConfirmationState:
    """The identifier currently being confirmed in a session."""

    original: str
    attempt: str
    stage: ConfirmationStage = ConfirmationStage.PROPOSED
    spelling_attempts: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    history: List[ConfirmationTransition] = field(default_factory=list)

    @property
    def is_confirmed(self) -> bool:
        return self.stage == ConfirmationStage.CONFIRMED

    @property
    def is_pending(self) -> bool:
        return self.stage in (ConfirmationStage.PROPOSED, ConfirmationStage.SPELLING)

    @property
    def is_terminal(self) -> bool:
        return self.stage in (ConfirmationStage.CONFIRMED, ConfirmationStage.EXHAUSTED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "attempt": self.attempt,
            "stage": self.stage.value,
            "spellingAttempts": self.spelling_attempts,
            "createdAt": self.created_at.isoformat(),
            "history": [t.to_dict() for t in self.history],
        }


def parse_answer(text: str) -> Optional[ConfirmationAnswer]:
    """Read a yes/no reply; anything else returns None."""
    cleaned = (text or "").strip().lower().rstrip(".!")
    if cleaned in {"yes", "y", "yeah", "yep", "correct", "right", "done"}:
        return ConfirmationAnswer.YES
    if cleaned in {"no", "n", "nope", "wrong", "incorrect"}:
        return ConfirmationAnswer.NO
    return None
