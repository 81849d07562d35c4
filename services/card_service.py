"""
Card Service - Entry points for creating, reviewing and inspecting cards.

Wraps the pure scheduler, due selector and statistics aggregator around a
CardStore. The service owns no card data itself; the store is injected.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app

from services.card_store import CardStore
from services.review_queue import aggregate_stats, days_until_due, select_due_cards
from services.spaced_repetition import Rating, SpacedRepetitionService
from services.srs_models import Card, CardState, DeckStats, as_utc

logger = logging.getLogger(__name__)

# Sort keys accepted by list_cards
ORDER_KEYS = {
    'word': lambda card: card.word.lower(),
    'created': lambda card: card.created,
    'due': lambda card: card.due,
    'state': lambda card: int(card.state),
}
DEFAULT_ORDER_KEY = 'word'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_card_id() -> str:
    return f"card_{uuid.uuid4().hex}"


def _normalize(text: Optional[str]) -> str:
    return (text or '').strip().lower()


class CardService:
    """Service for the card lifecycle and review queries of every user"""

    def __init__(self, store: CardStore, scheduler: Optional[SpacedRepetitionService] = None):
        self.store = store
        self.scheduler = scheduler or SpacedRepetitionService()

    def create_card(
        self,
        user_id: str,
        word: str,
        translation: Optional[str] = '',
        context: Optional[str] = '',
        now: Optional[datetime] = None
    ) -> Card:
        """
        Create a new learning card, due immediately.

        Args:
            user_id: Owner of the card
            word: Word or phrase to learn (required)
            translation: Translation shown on the back of the card
            context: Example sentence
            now: Creation instant (defaults to the current UTC time)

        Returns:
            The created Card

        Raises:
            ValueError: If user_id or word is empty
        """
        if not user_id or not user_id.strip():
            raise ValueError("user_id is required")
        if not word or not word.strip():
            raise ValueError("word is required")

        now = as_utc(now) if now else utc_now()
        card = Card(
            id=new_card_id(),
            word=word,
            translation=translation or '',
            context=context or '',
            state=CardState.LEARNING,
            due=now,
            stability=0.0,
            difficulty=0.0,
            elapsed_days=0.0,
            scheduled_days=0.0,
            reps=0,
            lapses=0,
            created=now,
            last_reviewed=None
        )

        with self.store.writer(user_id):
            self.store.insert(user_id, card)

        logger.info(f"Created card: user_id={user_id}, card_id={card.id}, word={word!r}")
        return card

    def get_due_cards(self, user_id: str, now: Optional[datetime] = None) -> List[Card]:
        """Cards of the user due at now, oldest due first; unknown users have none"""
        return select_due_cards(self.store.get_cards(user_id), now or utc_now())

    def answer_card(
        self,
        user_id: str,
        card_id: str,
        rating: Any,
        now: Optional[datetime] = None
    ) -> Card:
        """
        Apply a rating to a card and persist the result.

        The rating is validated before the card is looked up, so a bad rating
        never touches stored state.

        Args:
            user_id: Owner of the card
            card_id: Card being answered
            rating: Rating or integer 1-5
            now: Answer instant (defaults to the current UTC time)

        Returns:
            The updated Card

        Raises:
            InvalidRating: If rating is outside 1-5
            UnknownUser: If the user has no collection
            UnknownCard: If the card is not in the user's collection
        """
        rating = Rating.parse(rating)
        now = as_utc(now) if now else utc_now()

        with self.store.writer(user_id):
            card = self.store.get_card(user_id, card_id)
            updated = self.scheduler.transition(card, rating, now)
            self.store.update(user_id, updated)

        logger.info(
            f"Answered card: user_id={user_id}, card_id={card_id}, rating={rating.name}, "
            f"state={updated.state.name}, due={updated.due.isoformat()}, reps={updated.reps}"
        )
        return updated

    def delete_card(self, user_id: str, card_id: str) -> None:
        """
        Remove a card unconditionally.

        Raises:
            UnknownUser: If the user has no collection
            UnknownCard: If the card is not in the user's collection
        """
        with self.store.writer(user_id):
            self.store.delete(user_id, card_id)

        logger.info(f"Deleted card: user_id={user_id}, card_id={card_id}")

    def get_stats(self, user_id: str, now: Optional[datetime] = None) -> DeckStats:
        """Per-state and due counts for the user; zeroed for unknown users"""
        return aggregate_stats(self.store.get_cards(user_id), now or utc_now())

    def update_card(
        self,
        user_id: str,
        card_id: str,
        word: str,
        translation: Optional[str] = None,
        context: Optional[str] = None
    ) -> Card:
        """
        Edit the display text of a card. Scheduling fields are left alone.

        Empty translation or context keep the current value.

        Raises:
            ValueError: If word is empty
            UnknownUser: If the user has no collection
            UnknownCard: If the card is not in the user's collection
        """
        if not word or not word.strip():
            raise ValueError("word is required")

        with self.store.writer(user_id):
            card = self.store.get_card(user_id, card_id)
            updated = card.model_copy(update={
                'word': word,
                'translation': translation or card.translation,
                'context': context or card.context
            })
            self.store.update(user_id, updated)

        logger.info(f"Updated card text: user_id={user_id}, card_id={card_id}")
        return updated

    def list_cards(
        self,
        user_id: str,
        search: Optional[str] = None,
        order_by: str = DEFAULT_ORDER_KEY,
        order_dir: str = 'asc',
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> Tuple[List[Card], int]:
        """
        Browse a user's cards.

        Args:
            user_id: Owner of the cards
            search: Case-insensitive substring filter on the word
            order_by: One of word, created, due, state (anything else sorts by word)
            order_dir: 'asc' or 'desc'
            limit: Page size (no limit when None)
            offset: Cards to skip; only applied together with a limit

        Returns:
            Tuple of (page of cards, number of cards matching the filter)
        """
        cards = self.store.get_cards(user_id)

        if search and search.strip():
            needle = search.strip().lower()
            cards = [card for card in cards if needle in card.word.lower()]

        sort_key = ORDER_KEYS.get(order_by, ORDER_KEYS[DEFAULT_ORDER_KEY])
        cards.sort(key=lambda card: (sort_key(card), card.id),
                   reverse=(order_dir or '').lower() == 'desc')

        total = len(cards)
        if limit is not None:
            start = max(offset or 0, 0)
            cards = cards[start:start + max(limit, 0)]

        return cards, total

    def find_duplicate(self, user_id: str, word: str, translation: Optional[str] = '') -> Optional[Card]:
        """Return a card with the same word and translation (trimmed, case-insensitive)"""
        target = (_normalize(word), _normalize(translation))
        for card in self.store.get_cards(user_id):
            if (_normalize(card.word), _normalize(card.translation)) == target:
                return card
        return None

    def debug_snapshot(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Dump every collection with per-card due information.

        Returns:
            Dict keyed by user id with stats and annotated cards:
            {
                'user123': {
                    'stats': DeckStats,
                    'cards': [{..card fields.., 'isDue': bool,
                               'daysUntilDue': int, 'stateName': str}]
                }
            }
        """
        now = as_utc(now) if now else utc_now()
        snapshot = {}
        for user_id in self.store.user_ids():
            cards = self.store.get_cards(user_id)
            snapshot[user_id] = {
                'stats': aggregate_stats(cards, now),
                'cards': [
                    {
                        **card.to_api(),
                        'isDue': card.is_due(now),
                        'daysUntilDue': days_until_due(card, now),
                        'stateName': card.state.display_name
                    }
                    for card in cards
                ]
            }
        return snapshot


def get_card_service() -> CardService:
    """Return the CardService of the current Flask application"""
    return current_app.extensions['card_service']
