"""Buy-in, result and participation rows recorded against a game."""

from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

from poker_ledger.schemas.base import MoneyField, TimestampField


class GameBuyIn(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "game_buy_ins"
    __table_args__ = (
        UniqueConstraint(
            "game_id", "season_player_id", name="uq_game_buy_ins_game_season_player"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    game_id: int = Field(foreign_key="games.id", index=True)
    season_player_id: int = Field(foreign_key="season_players.id", index=True)
    buy_in_amount: Decimal = MoneyField()
    buy_in_time: datetime = TimestampField()


class GameResult(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "game_results"
    __table_args__ = (
        UniqueConstraint(
            "game_id", "season_player_id", name="uq_game_results_game_season_player"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    game_id: int = Field(foreign_key="games.id", index=True)
    season_player_id: int = Field(foreign_key="season_players.id", index=True)
    winnings: Decimal = MoneyField()
    created_at: datetime = TimestampField()


class PlayerParticipation(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "player_participations"
    __table_args__ = (
        UniqueConstraint(
            "game_id",
            "season_player_id",
            name="uq_player_participations_game_season_player",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    game_id: int = Field(foreign_key="games.id", index=True)
    season_player_id: int = Field(foreign_key="season_players.id", index=True)
    participated: bool
    participation_time: Optional[datetime] = TimestampField(nullable=True)
