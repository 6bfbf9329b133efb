"""Season, game and player lifecycle: creation, lookup and full-replace updates.

Deletes are not offered here; they go through ``TournamentLedger`` so the
integrity guard always runs first.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from typing import Any, Sequence

from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel

from poker_ledger.models.fields import EntityKind
from poker_ledger.models.ledger import GameUpdate, PlayerUpdate, SeasonUpdate
from poker_ledger.schemas.base import utcnow
from poker_ledger.schemas.games import Game
from poker_ledger.schemas.players import Player
from poker_ledger.schemas.seasons import Season
from poker_ledger.services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from poker_ledger.services.identity_resolver import IdentityResolver, clean_name
from poker_ledger.services.store import LedgerStore

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _check_game_number(game_number: int) -> int:
    if isinstance(game_number, bool) or not isinstance(game_number, int):
        raise InvalidArgumentError("game_number must be an integer", field="game_number")
    if game_number < 1:
        raise InvalidArgumentError("game_number must be positive", field="game_number")
    return game_number


class SeasonDirectory:
    def __init__(self, store: LedgerStore, resolver: IdentityResolver):
        self.store = store
        self.resolver = resolver

    # Seasons

    async def create_season(self, name: str, start_date: date | None = None) -> int:
        name = clean_name(name, "season_name")
        if await self.store.exists(Season, Season.name == name):
            raise ConflictError(f"Season {name!r} already exists", {"season_name": name})
        season = Season(name=name, start_date=start_date or utcnow().date())
        await self._save_unique(
            season, f"Season {name!r} already exists", {"season_name": name}
        )
        logger.info("Created season %s (%r)", season.id, name)
        assert season.id is not None
        return season.id

    async def get_season(self, season_id: int) -> Season:
        season = await self.store.get(Season, season_id)
        if season is None:
            raise NotFoundError(EntityKind.season, season_id)
        return season

    async def list_seasons(self) -> Sequence[Season]:
        return await self.store.find_all(Season)

    async def update_season(self, season_id: int, data: SeasonUpdate) -> Season:
        season = await self.get_season(season_id)
        name = clean_name(data.name, "season_name")
        if name != season.name and await self.store.exists(Season, Season.name == name):
            raise ConflictError(f"Season {name!r} already exists", {"season_name": name})
        if data.end_date is not None and data.end_date < data.start_date:
            raise InvalidArgumentError("end_date is before start_date", field="end_date")
        await self._save_unique(
            season,
            f"Season {name!r} already exists",
            {"season_name": name},
            name=name,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        logger.info("Updated season %s", season_id)
        return season

    async def conclude_season(self, season_id: int, end_date: date | None = None) -> Season:
        season = await self.get_season(season_id)
        end_date = end_date or utcnow().date()
        if end_date < season.start_date:
            raise InvalidArgumentError("end_date is before start_date", field="end_date")
        season.end_date = end_date
        await self.store.save(season)
        logger.info("Concluded season %s on %s", season_id, end_date)
        return season

    # Games

    async def create_game(
        self,
        season_name: str,
        game_number: int,
        start_time: datetime | None = None,
    ) -> int:
        game_number = _check_game_number(game_number)
        season_id = await self.resolver.resolve_season_id(season_name)
        if await self.store.exists(Game, Game.game_number == game_number):
            raise ConflictError(
                f"Game number {game_number} already exists", {"game_number": game_number}
            )
        game = Game(
            season_id=season_id, game_number=game_number, start_time=_as_utc(start_time)
        )
        await self._save_unique(
            game, f"Game number {game_number} already exists", {"game_number": game_number}
        )
        logger.info(
            "Created game %s (number %s) in season %r", game.id, game_number, season_name
        )
        assert game.id is not None
        return game.id

    async def get_game(self, game_id: int) -> Game:
        game = await self.store.get(Game, game_id)
        if game is None:
            raise NotFoundError(EntityKind.game, game_id)
        return game

    async def list_games(self, season_id: int | None = None) -> Sequence[Game]:
        if season_id is None:
            return await self.store.find_all(Game)
        return await self.store.find_all(Game, Game.season_id == season_id)

    async def update_game(self, game_id: int, data: GameUpdate) -> Game:
        game = await self.get_game(game_id)
        game_number = _check_game_number(data.game_number)
        await self.get_season(data.season_id)
        if game_number != game.game_number and await self.store.exists(
            Game, Game.game_number == game_number
        ):
            raise ConflictError(
                f"Game number {game_number} already exists", {"game_number": game_number}
            )
        await self._save_unique(
            game,
            f"Game number {game_number} already exists",
            {"game_number": game_number},
            season_id=data.season_id,
            game_number=game_number,
            start_time=_as_utc(data.start_time),
            end_time=_as_utc(data.end_time),
        )
        logger.info("Updated game %s", game_id)
        return game

    # Players

    async def get_player(self, player_id: int) -> Player:
        player = await self.store.get(Player, player_id)
        if player is None:
            raise NotFoundError(EntityKind.player, player_id)
        return player

    async def list_players(self) -> Sequence[Player]:
        return await self.store.find_all(Player)

    async def update_player(self, player_id: int, data: PlayerUpdate) -> Player:
        player = await self.get_player(player_id)
        name = clean_name(data.name, "player_name")
        if name != player.name and await self.store.exists(Player, Player.name == name):
            raise ConflictError(f"Player {name!r} already exists", {"player_name": name})
        await self._save_unique(
            player, f"Player {name!r} already exists", {"player_name": name}, name=name
        )
        logger.info("Renamed player %s to %r", player_id, name)
        return player

    async def _save_unique(
        self, record: SQLModel, message: str, details: dict[str, Any], **changes: Any
    ) -> None:
        """Apply ``changes`` and flush under a savepoint.

        The unique index decides when a concurrent writer got there first.
        """
        try:
            async with self.store.savepoint():
                for field, value in changes.items():
                    setattr(record, field, value)
                await self.store.save(record)
        except IntegrityError:
            raise ConflictError(message, details) from None
