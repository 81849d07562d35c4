"""
Card Store
Keyed per-user card collections behind one interface, so the scheduler can run
against the database or against process memory without knowing which
"""

import logging
import threading
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.card import CardRecord
from models.user import User
from services.exceptions import UnknownCard, UnknownUser
from services.srs_models import Card

logger = logging.getLogger(__name__)


class CardStore(ABC):
    """
    Abstract base class for card stores.

    Every store hands out one re-entrant writer lock per user. Callers that
    read a card, compute a new version and write it back must hold
    writer(user_id) for the whole sequence. A lock lives only while some
    writer holds a reference to it.
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._user_locks = weakref.WeakValueDictionary()

    @contextmanager
    def writer(self, user_id: str) -> Iterator[None]:
        """Serialize writers against one user's collection"""
        with self._registry_lock:
            lock = self._user_locks.setdefault(user_id, threading.RLock())
        with lock:
            yield

    @abstractmethod
    def has_user(self, user_id: str) -> bool:
        """Return True if the user owns a collection (possibly empty)"""
        pass

    @abstractmethod
    def get_cards(self, user_id: str) -> List[Card]:
        """Return all cards of a user; unknown users own no cards"""
        pass

    @abstractmethod
    def find_card(self, user_id: str, card_id: str) -> Optional[Card]:
        """Return a card or None"""
        pass

    @abstractmethod
    def insert(self, user_id: str, card: Card) -> Card:
        """Add a card, creating the user's collection if needed"""
        pass

    @abstractmethod
    def update(self, user_id: str, card: Card) -> Card:
        """Replace the stored card with the same id"""
        pass

    @abstractmethod
    def delete(self, user_id: str, card_id: str) -> None:
        """Remove a card from the user's collection"""
        pass

    @abstractmethod
    def user_ids(self) -> List[str]:
        """Return the ids of all users owning a collection"""
        pass

    def get_card(self, user_id: str, card_id: str) -> Card:
        """
        Return a card of an existing user.

        Raises:
            UnknownUser: If the user has no collection
            UnknownCard: If the card is not in the user's collection
        """
        if not self.has_user(user_id):
            raise UnknownUser(user_id)
        card = self.find_card(user_id, card_id)
        if card is None:
            raise UnknownCard(user_id, card_id)
        return card


class InMemoryCardStore(CardStore):
    """Process-local store; cards are frozen so readers never see partial updates"""

    def __init__(self):
        super().__init__()
        self._data_lock = threading.Lock()
        self._collections: Dict[str, Dict[str, Card]] = {}

    def has_user(self, user_id: str) -> bool:
        with self._data_lock:
            return user_id in self._collections

    def get_cards(self, user_id: str) -> List[Card]:
        with self._data_lock:
            return list(self._collections.get(user_id, {}).values())

    def find_card(self, user_id: str, card_id: str) -> Optional[Card]:
        with self._data_lock:
            return self._collections.get(user_id, {}).get(card_id)

    def insert(self, user_id: str, card: Card) -> Card:
        with self._data_lock:
            collection = self._collections.setdefault(user_id, {})
            if card.id in collection:
                raise ValueError(f'Card already exists: {card.id}')
            collection[card.id] = card
        return card

    def update(self, user_id: str, card: Card) -> Card:
        with self._data_lock:
            if user_id not in self._collections:
                raise UnknownUser(user_id)
            collection = self._collections[user_id]
            if card.id not in collection:
                raise UnknownCard(user_id, card.id)
            collection[card.id] = card
        return card

    def delete(self, user_id: str, card_id: str) -> None:
        with self._data_lock:
            if user_id not in self._collections:
                raise UnknownUser(user_id)
            collection = self._collections[user_id]
            if card_id not in collection:
                raise UnknownCard(user_id, card_id)
            del collection[card_id]

    def user_ids(self) -> List[str]:
        with self._data_lock:
            return list(self._collections)


class SQLAlchemyCardStore(CardStore):
    """
    Database-backed store using the Flask-SQLAlchemy session.

    Must be used inside an application context. Every write commits
    immediately; on a database error the session is rolled back and the
    error is re-raised unchanged.
    """

    def has_user(self, user_id: str) -> bool:
        return db.session.get(User, user_id) is not None

    def get_cards(self, user_id: str) -> List[Card]:
        records = (CardRecord.query
                   .filter_by(user_id=user_id)
                   .order_by(CardRecord.id)
                   .all())
        return [record.to_card() for record in records]

    def find_card(self, user_id: str, card_id: str) -> Optional[Card]:
        record = self._find_record(user_id, card_id)
        return record.to_card() if record else None

    def insert(self, user_id: str, card: Card) -> Card:
        try:
            if db.session.get(User, user_id) is None:
                db.session.add(User(user_id=user_id))
                logger.info(f"Created card collection for user_id={user_id}")
            db.session.add(CardRecord.from_card(user_id, card))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(
                f"Failed to insert card {card.id} for user_id={user_id}: {str(e)}",
                exc_info=True
            )
            raise
        return card

    def update(self, user_id: str, card: Card) -> Card:
        record = self._require_record(user_id, card.id)
        try:
            record.apply(card)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(
                f"Failed to update card {card.id} for user_id={user_id}: {str(e)}",
                exc_info=True
            )
            raise
        return card

    def delete(self, user_id: str, card_id: str) -> None:
        record = self._require_record(user_id, card_id)
        try:
            db.session.delete(record)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(
                f"Failed to delete card {card_id} for user_id={user_id}: {str(e)}",
                exc_info=True
            )
            raise

    def user_ids(self) -> List[str]:
        return [user.user_id for user in User.query.order_by(User.user_id).all()]

    def _find_record(self, user_id: str, card_id: str) -> Optional[CardRecord]:
        return CardRecord.query.filter_by(user_id=user_id, card_id=card_id).first()

    def _require_record(self, user_id: str, card_id: str) -> CardRecord:
        if not self.has_user(user_id):
            raise UnknownUser(user_id)
        record = self._find_record(user_id, card_id)
        if record is None:
            raise UnknownCard(user_id, card_id)
        return record


def create_card_store(backend: str) -> CardStore:
    """
    Build the card store named by configuration.

    Args:
        backend: "sql" or "memory"

    Raises:
        ValueError: If the backend is not supported
    """
    backend = (backend or 'sql').lower()
    logger.info(f"Creating card store: {backend}")

    if backend == 'sql':
        return SQLAlchemyCardStore()
    elif backend == 'memory':
        return InMemoryCardStore()
    else:
        raise ValueError(
            f"Unsupported card store backend: {backend}. "
            f"Supported backends: sql, memory"
        )
