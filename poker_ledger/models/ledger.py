"""Request and response models for the ledger's records."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import SQLModel

from poker_ledger.models.fields import NAME, ParticipationChoice


class CreatedResponse(SQLModel):
    id: int


class PlayerRead(SQLModel):
    id: int
    name: str
    created_at: datetime


class PlayerUpdate(SQLModel):
    name: NAME


class SeasonRead(SQLModel):
    id: int
    name: str
    start_date: date
    end_date: Optional[date] = None
    created_at: datetime


class SeasonUpdate(SQLModel):
    """Full replacement of a season; omitted optional fields become null."""

    name: NAME
    start_date: date
    end_date: Optional[date] = None


class ConcludeSeason(SQLModel):
    end_date: Optional[date] = None


class GameRead(SQLModel):
    id: int
    season_id: int
    game_number: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime


class GameUpdate(SQLModel):
    season_id: int
    game_number: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class SeasonPlayerRead(SQLModel):
    """A ledger account: allocated stake, minimum buy-in, running balance."""

    id: int
    season_id: int
    player_id: int
    allocated_pot_size: Decimal
    min_buy_in: Decimal
    current_pot_size: Decimal
    created_at: datetime


class SeasonPlayerUpdate(SQLModel):
    # Money stays a plain Decimal here; precision rules live in utils.money
    season_id: int
    player_id: int
    allocated_pot_size: Decimal
    min_buy_in: Decimal
    current_pot_size: Decimal


class BalanceRead(SQLModel):
    season_player_id: int
    allocated_pot_size: Decimal
    total_buy_ins: Decimal
    total_winnings: Decimal
    balance: Decimal


class GameBuyInRead(SQLModel):
    id: int
    game_id: int
    season_player_id: int
    buy_in_amount: Decimal
    buy_in_time: datetime


class GameBuyInUpdate(SQLModel):
    buy_in_amount: Decimal


class GameResultRead(SQLModel):
    id: int
    game_id: int
    season_player_id: int
    winnings: Decimal
    created_at: datetime


class GameResultUpdate(SQLModel):
    winnings: Decimal


class PlayerParticipationRead(SQLModel):
    id: int
    game_id: int
    season_player_id: int
    participated: bool
    participation_time: Optional[datetime] = None


class PlayerParticipationUpdate(SQLModel):
    participated: ParticipationChoice
