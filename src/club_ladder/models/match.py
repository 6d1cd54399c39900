import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Match(SQLModel, table=True):
    """A recorded match result. Rows are only ever inserted."""

    __tablename__ = "matches"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    winner_id: str = Field(index=True)
    loser_id: str = Field(index=True)
    winner_score: int
    loser_score: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
