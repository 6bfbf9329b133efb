from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from poker_ledger.models.fields import NAME_MAX_LENGTH
from poker_ledger.schemas.base import TimestampField


class Player(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "players"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=NAME_MAX_LENGTH,
        index=True,
        unique=True,
        description="Display name; the natural key callers use",
    )
    created_at: datetime = TimestampField()
