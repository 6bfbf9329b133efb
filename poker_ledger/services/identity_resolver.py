"""Resolve natural keys (player name, season name, game number) to ids."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from poker_ledger.models.fields import NAME_MAX_LENGTH, EntityKind
from poker_ledger.schemas.games import Game
from poker_ledger.schemas.players import Player
from poker_ledger.schemas.season_players import SeasonPlayer
from poker_ledger.schemas.seasons import Season
from poker_ledger.services.errors import InvalidArgumentError, NotFoundError
from poker_ledger.services.store import LedgerStore

logger = logging.getLogger(__name__)


def clean_name(value: str | None, field: str) -> str:
    """Strip a display name and enforce the non-blank, 100-char rule."""
    if value is None or not value.strip():
        raise InvalidArgumentError(f"{field} is required", field=field)
    cleaned = value.strip()
    if len(cleaned) > NAME_MAX_LENGTH:
        raise InvalidArgumentError(
            f"{field} must be at most {NAME_MAX_LENGTH} characters", field=field
        )
    return cleaned


class IdentityResolver:
    """Maps player names, season names and game numbers to surrogate ids.

    Players are the only records created on demand; seasons and games must
    exist before they are referenced.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def find_player(self, name: str) -> Player | None:
        return await self.store.find_one(Player, Player.name == name)

    async def resolve_player_id(self, name: str) -> int:
        name = clean_name(name, "player_name")
        player = await self.find_player(name)
        if player is None:
            raise NotFoundError(EntityKind.player, name)
        assert player.id is not None
        return player.id

    async def resolve_or_create_player_id(self, name: str) -> int:
        """Return the id for ``name``, creating the player on first reference.

        The unique index on ``players.name`` decides concurrent creations:
        the losing insert is rolled back to its savepoint and the lookup is
        repeated, returning the winner's id.
        """
        name = clean_name(name, "player_name")
        player = await self.find_player(name)
        if player is not None:
            assert player.id is not None
            return player.id

        try:
            async with self.store.savepoint():
                player = await self.store.save(Player(name=name))
        except IntegrityError:
            logger.info("Player %r created concurrently; re-reading", name)
            player = await self.find_player(name)
            if player is None:
                raise
        else:
            logger.info("Created player %s (%r) on first reference", player.id, name)

        assert player.id is not None
        return player.id

    async def resolve_season_id(self, name: str) -> int:
        name = clean_name(name, "season_name")
        season = await self.store.find_one(Season, Season.name == name)
        if season is None:
            raise NotFoundError(EntityKind.season, name)
        assert season.id is not None
        return season.id

    async def find_game(self, game_number: int) -> Game:
        # Numbers are unique across seasons; newest-first keeps the pick explicit.
        game = await self.store.find_one(Game, Game.game_number == game_number)
        if game is None:
            raise NotFoundError(EntityKind.game, game_number)
        return game

    async def resolve_game_id(self, game_number: int, season_id: int | None = None) -> int:
        game = await self.find_game(game_number)
        if season_id is not None and game.season_id != season_id:
            raise NotFoundError(EntityKind.game, game_number)
        assert game.id is not None
        return game.id

    async def resolve_season_id_for_game(self, game_number: int) -> int:
        game = await self.find_game(game_number)
        return game.season_id

    async def resolve_season_player_id(self, player_name: str, season_id: int) -> int:
        """Player, then season, then the (player, season) account.

        Each stage raises NotFoundError tagged with the kind that is missing.
        """
        player_id = await self.resolve_player_id(player_name)
        if await self.store.get(Season, season_id) is None:
            raise NotFoundError(EntityKind.season, season_id)
        account = await self.store.find_one(
            SeasonPlayer,
            SeasonPlayer.player_id == player_id,
            SeasonPlayer.season_id == season_id,
        )
        if account is None:
            raise NotFoundError(
                EntityKind.season_player, f"{player_name} in season {season_id}"
            )
        assert account.id is not None
        return account.id
