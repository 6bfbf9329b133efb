"""Read, update and guarded delete endpoints for ledger records."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from poker_ledger.models.fields import EntityKind
from poker_ledger.models.ledger import (
    BalanceRead,
    ConcludeSeason,
    GameBuyInRead,
    GameBuyInUpdate,
    GameRead,
    GameResultRead,
    GameResultUpdate,
    GameUpdate,
    PlayerParticipationRead,
    PlayerParticipationUpdate,
    PlayerRead,
    PlayerUpdate,
    SeasonPlayerRead,
    SeasonPlayerUpdate,
    SeasonRead,
    SeasonUpdate,
)
from poker_ledger.routes.deps import get_ledger
from poker_ledger.services.event_recorder import Balance
from poker_ledger.services.tournament_ledger import TournamentLedger

router = APIRouter(prefix="/api", tags=["records"])


def _balance_read(balance: Balance) -> BalanceRead:
    return BalanceRead(
        season_player_id=balance.season_player_id,
        allocated_pot_size=balance.allocated_pot_size,
        total_buy_ins=balance.total_buy_ins,
        total_winnings=balance.total_winnings,
        balance=balance.balance,
    )


# Seasons


@router.get("/seasons", response_model=List[SeasonRead])
async def list_seasons(ledger: TournamentLedger = Depends(get_ledger)) -> List[SeasonRead]:
    return [SeasonRead.model_validate(s) for s in await ledger.list_seasons()]


@router.get("/seasons/{season_id}", response_model=SeasonRead)
async def get_season(
    season_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> SeasonRead:
    return SeasonRead.model_validate(await ledger.get_season(season_id))


@router.put("/seasons/{season_id}", response_model=SeasonRead)
async def update_season(
    season_id: int,
    data: SeasonUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> SeasonRead:
    return SeasonRead.model_validate(await ledger.update_season(season_id, data))


@router.post("/seasons/{season_id}/conclude", response_model=SeasonRead)
async def conclude_season(
    season_id: int,
    data: ConcludeSeason,
    ledger: TournamentLedger = Depends(get_ledger),
) -> SeasonRead:
    """Close a season by setting its end date (today when omitted)."""
    return SeasonRead.model_validate(await ledger.conclude_season(season_id, data.end_date))


@router.delete("/seasons/{season_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_season(
    season_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> Response:
    await ledger.delete_season(season_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Players


@router.get("/players", response_model=List[PlayerRead])
async def list_players(ledger: TournamentLedger = Depends(get_ledger)) -> List[PlayerRead]:
    return [PlayerRead.model_validate(p) for p in await ledger.list_players()]


@router.get("/players/{player_id}", response_model=PlayerRead)
async def get_player(
    player_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> PlayerRead:
    return PlayerRead.model_validate(await ledger.get_player(player_id))


@router.put("/players/{player_id}", response_model=PlayerRead)
async def update_player(
    player_id: int,
    data: PlayerUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> PlayerRead:
    return PlayerRead.model_validate(await ledger.update_player(player_id, data))


@router.delete("/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(
    player_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> Response:
    await ledger.delete_player(player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Games


@router.get("/games", response_model=List[GameRead])
async def list_games(
    season_id: Optional[int] = Query(None, alias="seasonId"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> List[GameRead]:
    return [GameRead.model_validate(g) for g in await ledger.list_games(season_id)]


@router.get("/games/{game_id}", response_model=GameRead)
async def get_game(game_id: int, ledger: TournamentLedger = Depends(get_ledger)) -> GameRead:
    return GameRead.model_validate(await ledger.get_game(game_id))


@router.put("/games/{game_id}", response_model=GameRead)
async def update_game(
    game_id: int,
    data: GameUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> GameRead:
    return GameRead.model_validate(await ledger.update_game(game_id, data))


@router.delete("/games/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(game_id: int, ledger: TournamentLedger = Depends(get_ledger)) -> Response:
    await ledger.delete_game(game_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Season player accounts


@router.get("/seasonPlayers", response_model=List[SeasonPlayerRead])
async def list_season_players(
    season_id: Optional[int] = Query(None, alias="seasonId"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> List[SeasonPlayerRead]:
    return [
        SeasonPlayerRead.model_validate(a) for a in await ledger.list_accounts(season_id)
    ]


@router.get("/seasonPlayers/{account_id}", response_model=SeasonPlayerRead)
async def get_season_player(
    account_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> SeasonPlayerRead:
    return SeasonPlayerRead.model_validate(await ledger.get_account(account_id))


@router.put("/seasonPlayers/{account_id}", response_model=SeasonPlayerRead)
async def update_season_player(
    account_id: int,
    data: SeasonPlayerUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> SeasonPlayerRead:
    return SeasonPlayerRead.model_validate(await ledger.update_account(account_id, data))


@router.delete("/seasonPlayers/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_season_player(
    account_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> Response:
    await ledger.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/seasonPlayers/{account_id}/balance", response_model=BalanceRead)
async def get_balance(
    account_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> BalanceRead:
    """Balance derived from recorded buy-ins and results; nothing is written."""
    return _balance_read(await ledger.compute_balance(account_id))


@router.post("/seasonPlayers/{account_id}/reconcile", response_model=BalanceRead)
async def reconcile_season_player(
    account_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> BalanceRead:
    """Write the derived balance into the account's current pot size."""
    return _balance_read(await ledger.reconcile_account(account_id))


# Game events


@router.get("/gameBuyIns", response_model=List[GameBuyInRead])
async def list_game_buy_ins(
    game_id: Optional[int] = Query(None, alias="gameId"),
    season_player_id: Optional[int] = Query(None, alias="seasonPlayerId"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> List[GameBuyInRead]:
    events = await ledger.list_events(EntityKind.game_buy_in, game_id, season_player_id)
    return [GameBuyInRead.model_validate(e) for e in events]


@router.get("/gameBuyIns/{buy_in_id}", response_model=GameBuyInRead)
async def get_game_buy_in(
    buy_in_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> GameBuyInRead:
    return GameBuyInRead.model_validate(await ledger.get_event(EntityKind.game_buy_in, buy_in_id))


@router.put("/gameBuyIns/{buy_in_id}", response_model=GameBuyInRead)
async def update_game_buy_in(
    buy_in_id: int,
    data: GameBuyInUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> GameBuyInRead:
    return GameBuyInRead.model_validate(
        await ledger.update_buy_in(buy_in_id, data.buy_in_amount)
    )


@router.delete("/gameBuyIns/{buy_in_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game_buy_in(
    buy_in_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> Response:
    await ledger.delete_event(EntityKind.game_buy_in, buy_in_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/gameResults", response_model=List[GameResultRead])
async def list_game_results(
    game_id: Optional[int] = Query(None, alias="gameId"),
    season_player_id: Optional[int] = Query(None, alias="seasonPlayerId"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> List[GameResultRead]:
    events = await ledger.list_events(EntityKind.game_result, game_id, season_player_id)
    return [GameResultRead.model_validate(e) for e in events]


@router.get("/gameResults/{result_id}", response_model=GameResultRead)
async def get_game_result(
    result_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> GameResultRead:
    return GameResultRead.model_validate(await ledger.get_event(EntityKind.game_result, result_id))


@router.put("/gameResults/{result_id}", response_model=GameResultRead)
async def update_game_result(
    result_id: int,
    data: GameResultUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> GameResultRead:
    return GameResultRead.model_validate(await ledger.update_result(result_id, data.winnings))


@router.delete("/gameResults/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game_result(
    result_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> Response:
    await ledger.delete_event(EntityKind.game_result, result_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/playerParticipations", response_model=List[PlayerParticipationRead])
async def list_player_participations(
    game_id: Optional[int] = Query(None, alias="gameId"),
    season_player_id: Optional[int] = Query(None, alias="seasonPlayerId"),
    ledger: TournamentLedger = Depends(get_ledger),
) -> List[PlayerParticipationRead]:
    events = await ledger.list_events(
        EntityKind.player_participation, game_id, season_player_id
    )
    return [PlayerParticipationRead.model_validate(e) for e in events]


@router.get("/playerParticipations/{participation_id}", response_model=PlayerParticipationRead)
async def get_player_participation(
    participation_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> PlayerParticipationRead:
    event = await ledger.get_event(EntityKind.player_participation, participation_id)
    return PlayerParticipationRead.model_validate(event)


@router.put("/playerParticipations/{participation_id}", response_model=PlayerParticipationRead)
async def update_player_participation(
    participation_id: int,
    data: PlayerParticipationUpdate,
    ledger: TournamentLedger = Depends(get_ledger),
) -> PlayerParticipationRead:
    event = await ledger.update_participation(participation_id, data.participated)
    return PlayerParticipationRead.model_validate(event)


@router.delete(
    "/playerParticipations/{participation_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_player_participation(
    participation_id: int, ledger: TournamentLedger = Depends(get_ledger)
) -> Response:
    await ledger.delete_event(EntityKind.player_participation, participation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
