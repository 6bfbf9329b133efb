"""Create and record endpoints of the tournament resource.

Routes are thin wrappers; every rule lives in the ledger services.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status

from poker_ledger.models.fields import ParticipationChoice
from poker_ledger.models.ledger import CreatedResponse
from poker_ledger.routes.deps import get_ledger
from poker_ledger.services.tournament_ledger import TournamentLedger

router = APIRouter(prefix="/api/poker/tournament", tags=["tournament"])


@router.post(
    "/create-season",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_season(
    season_name: str = Query(..., alias="seasonName"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> CreatedResponse:
    """Create a season starting today."""
    return CreatedResponse(id=await ledger.create_season(season_name))


@router.post(
    "/create-season-player",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_season_player(
    season_name: str = Query(..., alias="seasonName"),
    player_name: str = Query(..., alias="playerName"),
    min_buy_in: Decimal = Query(..., alias="minBuyIn"),
    allocated_pot_size: Decimal = Query(..., alias="allocatedPotSize"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> CreatedResponse:
    """Open a player's account in a season, creating the player if new."""
    account_id = await ledger.open_season_player_account(
        season_name, player_name, min_buy_in, allocated_pot_size
    )
    return CreatedResponse(id=account_id)


@router.post("/games", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_game(
    season_name: str = Query(..., alias="seasonName"),
    game_number: int = Query(..., alias="gameNumber"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> CreatedResponse:
    return CreatedResponse(id=await ledger.create_game(season_name, game_number))


@router.post(
    "/player-participation",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_player_participation(
    player_name: str = Query(..., alias="playerName"),
    player_participation: ParticipationChoice = Query(..., alias="playerParticipation"),
    game_number: int = Query(..., alias="gameNumber"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> CreatedResponse:
    participation_id = await ledger.record_participation(
        player_name, player_participation, game_number
    )
    return CreatedResponse(id=participation_id)


@router.post(
    "/create-game-buy-in",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_game_buy_in(
    game_number: int = Query(..., alias="gameNumber"),
    player_name: str = Query(..., alias="playerName"),
    buy_in_amount: Decimal = Query(..., alias="buyInAmount"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> CreatedResponse:
    buy_in_id = await ledger.record_buy_in(game_number, player_name, buy_in_amount)
    return CreatedResponse(id=buy_in_id)


@router.post(
    "/create-game-result",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_game_result(
    game_number: int = Query(..., alias="gameNumber"),
    player_name: str = Query(..., alias="playerName"),
    winnings: Decimal = Query(...),
    ledger: TournamentLedger = Depends(get_ledger),
) -> CreatedResponse:
    result_id = await ledger.record_result(game_number, player_name, winnings)
    return CreatedResponse(id=result_id)
