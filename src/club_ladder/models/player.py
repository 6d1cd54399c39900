import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Player(SQLModel, table=True):
    """A player on the ladder. Rank 1 is the top of the ladder."""

    __tablename__ = "players"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    rank: int = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
