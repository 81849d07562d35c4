"""Demo cards for trying the review flow on a fresh install"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from services.card_service import CardService, new_card_id, utc_now
from services.srs_models import Card, CardState

logger = logging.getLogger(__name__)

# (word, translation, context, state, due offset, stability, difficulty,
#  elapsed/scheduled days, reps, lapses, created offset)
SAMPLE_CARDS = [
    ('hello', 'hola', 'Hello, how are you today?',
     CardState.LEARNING, timedelta(0), 0.0, 0.0, 0, 0, 0, timedelta(days=-1)),
    ('world', 'mundo', 'The world is beautiful.',
     CardState.REVIEW, timedelta(hours=-1), 1.5, 0.3, 1, 2, 0, timedelta(days=-2)),
    ('computer', 'computadora', 'I work on my computer every day.',
     CardState.REVIEW, timedelta(days=1), 2.5, 0.2, 3, 5, 1, timedelta(days=-3)),
    ('language', 'idioma', 'Learning a new language is fun.',
     CardState.LEARNING, timedelta(0), 0.0, 0.0, 0, 0, 0, timedelta(0)),
    ('study', 'estudiar', 'I study English every evening.',
     CardState.REVIEW, timedelta(hours=-2), 1.8, 0.4, 2, 3, 0, timedelta(days=-4)),
]


def build_sample_cards(now: datetime) -> List[Card]:
    """Sample cards with due and creation times relative to now"""
    cards = []
    for (word, translation, context, state, due_offset, stability, difficulty,
         days, reps, lapses, created_offset) in SAMPLE_CARDS:
        cards.append(Card(
            id=new_card_id(),
            word=word,
            translation=translation,
            context=context,
            state=state,
            due=now + due_offset,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=days,
            scheduled_days=days,
            reps=reps,
            lapses=lapses,
            created=now + created_offset
        ))
    return cards


def seed_sample_cards(service: CardService, user_id: str, now: Optional[datetime] = None) -> int:
    """
    Give user_id the sample deck unless they already own cards.

    Returns:
        Number of cards inserted
    """
    store = service.store
    with store.writer(user_id):
        if store.get_cards(user_id):
            logger.debug(f"Sample data skipped, user_id={user_id} already has cards")
            return 0

        cards = build_sample_cards(now or utc_now())
        for card in cards:
            store.insert(user_id, card)

    logger.info(f"Sample data initialized for user_id={user_id} ({len(cards)} cards)")
    return len(cards)
