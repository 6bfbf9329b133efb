from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from poker_ledger.schemas.base import TimestampField


class Game(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "games"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    # Callers look games up by number alone, so numbers are unique across seasons.
    game_number: int = Field(index=True, unique=True)
    start_time: Optional[datetime] = TimestampField(nullable=True)
    end_time: Optional[datetime] = TimestampField(nullable=True)
    created_at: datetime = TimestampField()
