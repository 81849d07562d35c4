"""Due-card selection and per-user statistics over a card collection"""

import math
from datetime import datetime
from typing import Iterable, List

from services.srs_models import Card, CardState, DeckStats, as_utc


def select_due_cards(cards: Iterable[Card], now: datetime) -> List[Card]:
    """
    Return every card with due <= now.

    Cards are ordered by due time, oldest first, with the card id breaking
    ties so that the result does not depend on storage order.

    Args:
        cards: A user's card collection
        now: Reference instant

    Returns:
        List of due cards (empty when nothing is due)
    """
    now = as_utc(now)
    due_cards = [card for card in cards if card.is_due(now)]
    due_cards.sort(key=lambda card: (card.due, card.id))
    return due_cards


def aggregate_stats(cards: Iterable[Card], now: datetime) -> DeckStats:
    """
    Count cards by state and due-ness.

    Args:
        cards: A user's card collection
        now: Reference instant for the due count

    Returns:
        DeckStats with total, due, learning, review and relearning counts
    """
    now = as_utc(now)
    cards = list(cards)
    return DeckStats(
        total=len(cards),
        due=sum(1 for card in cards if card.is_due(now)),
        learning=sum(1 for card in cards if card.state == CardState.LEARNING),
        review=sum(1 for card in cards if card.state == CardState.REVIEW),
        relearning=sum(1 for card in cards if card.state == CardState.RELEARNING)
    )


def days_until_due(card: Card, now: datetime) -> int:
    """Whole days until the card is due, rounded up (zero or negative when due)"""
    return math.ceil((card.due - as_utc(now)).total_seconds() / 86400)
