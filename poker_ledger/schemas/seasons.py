from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field

from poker_ledger.models.fields import NAME_MAX_LENGTH
from poker_ledger.schemas.base import TimestampField


class Season(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "seasons"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=NAME_MAX_LENGTH,
        index=True,
        unique=True,
        description="Season name like 'Winter 2025'",
    )
    start_date: date
    end_date: Optional[date] = Field(default=None, description="Set when the season concludes")
    created_at: datetime = TimestampField()
