"""
Request Pydantic Models

Validated shapes of the JSON bodies accepted by the SRS endpoints.
Field aliases match the camelCase keys sent by the web client.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_text(value: str) -> str:
    if not value or not value.strip():
        raise ValueError('must not be empty')
    return value


class CreateCardRequest(BaseModel):
    """
    Body of POST /srs/create-card

    Example:
    {
        "userId": "user123",
        "word": "hello",
        "translation": "hola",
        "context": "Hello, how are you today?"
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias='userId')
    word: str
    translation: Optional[str] = None
    context: Optional[str] = None

    @field_validator('user_id', 'word')
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)


class AnswerCardRequest(BaseModel):
    """
    Body of POST /srs/answer-card

    The rating is kept as a raw value here; Rating.parse() turns it into a
    Rating or raises InvalidRating so that bad ratings get their own error.
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias='userId')
    card_id: str = Field(alias='cardId')
    rating: Any

    @field_validator('user_id', 'card_id')
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator('rating')
    @classmethod
    def rating_present(cls, value: Any) -> Any:
        if value is None:
            raise ValueError('rating is required')
        return value


class UpdateCardRequest(BaseModel):
    """Body of PUT /srs/update-card/<user_id>/<card_id>"""

    word: str
    translation: Optional[str] = None
    context: Optional[str] = None

    @field_validator('word')
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)
