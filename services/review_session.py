"""
Review Session - Presents due cards one at a time and reports completion.

A session moves through IDLE -> PRESENTING -> AWAITING_ANSWER -> ... -> COMPLETE.
Every answer is committed through the CardService as soon as it is given;
abandoning a session keeps what was already answered and nothing else.
"""

import logging
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Deque, Optional

from services.card_service import CardService, utc_now
from services.exceptions import SessionStateError, UnknownCard
from services.srs_models import Card, DeckStats

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Phases of a review session"""
    IDLE = "idle"
    PRESENTING = "presenting"
    AWAITING_ANSWER = "awaiting_answer"
    COMPLETE = "complete"


class DueCountWatcher:
    """
    Detects the due count dropping from a positive value to zero.

    The previous count is replaced on every observation, so the signal fires
    once per drop and can fire again after the count rises and falls again.
    """

    def __init__(self):
        self.previous: Optional[int] = None

    def observe(self, due_count: int) -> bool:
        """Record a due count; return True if it just dropped to zero"""
        dropped = self.previous is not None and self.previous > 0 and due_count == 0
        self.previous = due_count
        return dropped


class ReviewSession:
    """Review session controller for a single user"""

    def __init__(
        self,
        card_service: CardService,
        user_id: str,
        on_complete: Optional[Callable[['ReviewSession'], None]] = None
    ):
        self.card_service = card_service
        self.user_id = user_id
        self.on_complete = on_complete

        self.state = SessionState.IDLE
        self.queue: Deque[Card] = deque()
        self.current: Optional[Card] = None
        self.stats: Optional[DeckStats] = None
        self.watcher = DueCountWatcher()

        self.answered = 0
        self.completions = 0
        self.abandoned = False

    @property
    def is_complete(self) -> bool:
        return self.state == SessionState.COMPLETE

    @property
    def remaining(self) -> int:
        """Cards still to show, including the one on screen"""
        return len(self.queue) + (1 if self.current is not None else 0)

    def start(self, now: Optional[datetime] = None) -> Optional[Card]:
        """
        Load the due cards and present the first one.

        Returns:
            The first card, or None if nothing is due (session completes at once)

        Raises:
            SessionStateError: If the session was already started
        """
        self._require(SessionState.IDLE, 'start')
        now = now or utc_now()

        self.queue = deque(self.card_service.get_due_cards(self.user_id, now))
        self.refresh_stats(now)
        logger.info(f"Review session started: user_id={self.user_id}, due={len(self.queue)}")

        return self._advance()

    def reveal(self) -> Card:
        """Show the answer side of the current card"""
        self._require(SessionState.PRESENTING, 'reveal')
        self.state = SessionState.AWAITING_ANSWER
        return self.current

    def answer(self, rating: Any, now: Optional[datetime] = None) -> Card:
        """
        Rate the current card, persist it and move on.

        Args:
            rating: Rating or integer 1-5
            now: Answer instant (defaults to the current UTC time)

        Returns:
            The updated card

        Raises:
            SessionStateError: If no answer is awaited
            InvalidRating: If rating is outside 1-5 (the card stays current)
            UnknownCard: If the card was deleted meanwhile (the session moves on)
        """
        self._require(SessionState.AWAITING_ANSWER, 'answer')
        now = now or utc_now()

        try:
            updated = self.card_service.answer_card(self.user_id, self.current.id, rating, now)
        except UnknownCard:
            logger.warning(f"Card vanished during review: user_id={self.user_id}, card_id={self.current.id}")
            self.refresh_stats(now)
            self._advance()
            raise
        self.answered += 1

        self.refresh_stats(now)
        self._advance()
        return updated

    def refresh_stats(self, now: Optional[datetime] = None) -> DeckStats:
        """Recompute the user's stats and fire completion if the due count hit zero"""
        self.stats = self.card_service.get_stats(self.user_id, now or utc_now())
        if self.watcher.observe(self.stats.due):
            self.completions += 1
            logger.info(f"All due cards reviewed: user_id={self.user_id}")
            if self.on_complete is not None:
                self.on_complete(self)
        return self.stats

    def abandon(self) -> None:
        """Stop the session; already answered cards stay answered"""
        if self.state == SessionState.COMPLETE:
            return
        self.abandoned = True
        self.queue.clear()
        self.current = None
        self.state = SessionState.COMPLETE
        logger.info(f"Review session abandoned: user_id={self.user_id}, answered={self.answered}")

    def _advance(self) -> Optional[Card]:
        if self.queue:
            self.current = self.queue.popleft()
            self.state = SessionState.PRESENTING
        else:
            self.current = None
            self.state = SessionState.COMPLETE
            logger.info(f"Review session complete: user_id={self.user_id}, answered={self.answered}")
        return self.current

    def _require(self, expected: SessionState, action: str) -> None:
        if self.state != expected:
            raise SessionStateError(
                f"Cannot {action} while session is {self.state.value}"
            )
