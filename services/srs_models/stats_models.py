"""
Statistics Pydantic Models
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class DeckStats(BaseModel):
    """Per-user card counts, recomputed from the collection on every request"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total: int = Field(default=0, alias='totalCards')
    due: int = Field(default=0, alias='dueCards')
    learning: int = Field(default=0, alias='learningCards')
    review: int = Field(default=0, alias='reviewCards')
    relearning: int = Field(default=0, alias='relearningCards')

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
