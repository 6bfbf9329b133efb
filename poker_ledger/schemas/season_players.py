from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

from poker_ledger.schemas.base import MoneyField, TimestampField


class SeasonPlayer(SQLModel, table=True):  # type: ignore[call-arg]
    """A player's ledger account within one season."""

    __tablename__ = "season_players"
    __table_args__ = (
        UniqueConstraint(
            "season_id", "player_id", name="uq_season_players_season_player"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    player_id: int = Field(foreign_key="players.id", index=True)

    allocated_pot_size: Decimal = MoneyField("Initial stake for the season")
    min_buy_in: Decimal = MoneyField("Minimum buy-in per game")
    current_pot_size: Decimal = MoneyField("Running balance")

    created_at: datetime = TimestampField()
