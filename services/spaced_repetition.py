"""Spaced repetition rating -> card transition"""

from datetime import datetime, timedelta
from enum import IntEnum
from typing import Any

from services.exceptions import InvalidRating
from services.srs_models import Card, CardState, as_utc

ONE_DAY = timedelta(days=1)


class Rating(IntEnum):
    """User's self-reported recall quality. Integer values are the wire format."""
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4
    PERFECT = 5

    @property
    def is_failure(self) -> bool:
        return self <= Rating.HARD

    @classmethod
    def parse(cls, value: Any) -> 'Rating':
        """
        Convert a raw rating into a Rating.

        Args:
            value: Rating as received from a caller (1-5)

        Returns:
            The matching Rating member

        Raises:
            InvalidRating: If value is not a whole number from 1 to 5
        """
        if isinstance(value, cls):
            return value
        # JSON clients may send 3.0 for 3
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        # bool is an int subclass; True must not be read as AGAIN
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRating(value)
        try:
            return cls(value)
        except ValueError:
            raise InvalidRating(value)


def days_between(start: datetime, end: datetime) -> float:
    """Signed number of (fractional) days from start to end"""
    return (end - start) / ONE_DAY


class SpacedRepetitionService:
    """
    Deterministic card scheduler.

    Failure ratings (Again/Hard) send the card back to learning for a short
    retry, Good graduates a learning card or stretches a reviewed one, and
    Easy/Perfect stretch the interval further without touching the state.
    Relearning exists as a state but no rating produces it.

    For cards that are not being graduated the next interval is taken from
    the stability the card had *before* this answer, while the stored
    stability is the increased one.
    """

    FAILURE_STABILITY_FACTOR = 0.8
    FAILURE_RETRY_DELAY = timedelta(minutes=5)

    GRADUATION_STABILITY = 1.5
    GRADUATION_INTERVAL = ONE_DAY

    GOOD_STABILITY_FACTOR = 1.2
    EASY_STABILITY_FACTOR = 1.5

    MIN_STABILITY = 0.1
    MIN_DIFFICULTY = 0.1
    MAX_DIFFICULTY = 1.0
    DIFFICULTY_STEP = 0.1

    def transition(self, card: Card, rating: Any, now: datetime) -> Card:
        """
        Apply one answer to a card.

        Args:
            card: Card being answered (left untouched)
            rating: Rating or raw integer 1-5
            now: Moment of answering

        Returns:
            The updated card

        Raises:
            InvalidRating: If rating is outside 1-5
        """
        rating = Rating.parse(rating)
        now = as_utc(now)

        # How overdue the card was; answering early counts as zero
        elapsed_days = max(0.0, days_between(card.due, now))

        state = card.state
        stability = card.stability

        if rating in (Rating.AGAIN, Rating.HARD):
            state = CardState.LEARNING
            stability = max(0.0, card.stability * self.FAILURE_STABILITY_FACTOR)
            due = now + self.FAILURE_RETRY_DELAY
        elif rating == Rating.GOOD:
            if card.state == CardState.LEARNING:
                state = CardState.REVIEW
                stability = self.GRADUATION_STABILITY
                due = now + self.GRADUATION_INTERVAL
            else:
                stability = card.stability * self.GOOD_STABILITY_FACTOR
                due = now + card.stability * ONE_DAY
        elif rating in (Rating.EASY, Rating.PERFECT):
            stability = card.stability * self.EASY_STABILITY_FACTOR
            due = now + card.stability * ONE_DAY
        else:
            raise InvalidRating(rating)

        return card.model_copy(update={
            'state': state,
            'due': due,
            'stability': max(self.MIN_STABILITY, stability),
            'difficulty': self.next_difficulty(card.difficulty, rating),
            'elapsed_days': elapsed_days,
            'scheduled_days': max(0.0, days_between(now, due)),
            'reps': card.reps + 1,
            'lapses': card.lapses + (1 if rating.is_failure else 0),
            'last_reviewed': now
        })

    def next_difficulty(self, difficulty: float, rating: Rating) -> float:
        """Shift difficulty by 0.1 per rating step away from Good, clamped to [0.1, 1.0]"""
        shifted = difficulty + (int(rating) - int(Rating.GOOD)) * self.DIFFICULTY_STEP
        return max(self.MIN_DIFFICULTY, min(self.MAX_DIFFICULTY, shifted))
