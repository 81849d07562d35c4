"""
Card Pydantic Models

The Card model is the unit of study tracked by the scheduler. Instances are
frozen: the scheduler derives updated cards with model_copy() instead of
mutating them, so a stored card can be shared safely between readers.
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CardState(IntEnum):
    """Coarse learning phase of a card. Integer values are the wire format."""
    LEARNING = 0
    REVIEW = 1
    RELEARNING = 2

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive values are assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Card(BaseModel):
    """
    A single study item plus its scheduling metadata.

    Example (API representation):
    {
        "id": "card_5f0c...",
        "word": "hello",
        "translation": "hola",
        "context": "Hello, how are you today?",
        "state": 1,
        "due": "2024-05-02T10:00:00Z",
        "stability": 1.5,
        "difficulty": 0.1,
        "elapsed_days": 0.0,
        "scheduled_days": 1.0,
        "reps": 1,
        "lapses": 0,
        "created": "2024-05-01T10:00:00Z",
        "lastReviewed": "2024-05-01T10:00:00Z"
    }
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Opaque card identifier")
    word: str
    translation: str = ''
    context: str = ''

    state: CardState = CardState.LEARNING
    due: datetime
    stability: float = Field(default=0.0, ge=0.0)
    difficulty: float = 0.0
    elapsed_days: float = Field(default=0.0, ge=0.0)
    scheduled_days: float = Field(default=0.0, ge=0.0)
    reps: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)

    created: datetime
    last_reviewed: Optional[datetime] = Field(default=None, alias='lastReviewed')

    @field_validator('due', 'created', 'last_reviewed')
    @classmethod
    def normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return as_utc(value)

    def is_due(self, now: datetime) -> bool:
        return self.due <= as_utc(now)

    def to_api(self) -> Dict[str, Any]:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(mode='json', by_alias=True)
