"""
SRS Pydantic Models

Data models shared by the scheduler, the card stores and the HTTP layer:
- Card models (CardState, Card, as_utc)
- Statistics models (DeckStats)
- Request models (CreateCardRequest, AnswerCardRequest, UpdateCardRequest)
"""

from .card_models import CardState, Card, as_utc
from .stats_models import DeckStats
from .request_models import CreateCardRequest, AnswerCardRequest, UpdateCardRequest

__all__ = [
    'CardState',
    'Card',
    'as_utc',
    'DeckStats',
    'CreateCardRequest',
    'AnswerCardRequest',
    'UpdateCardRequest'
]
