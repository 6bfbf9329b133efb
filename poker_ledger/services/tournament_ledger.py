"""Operation surface of the tournament ledger.

Each public coroutine is one transaction: it resolves natural keys, delegates
to the component that owns the rule, and either commits everything or
nothing. Components are wired once per session by ``build_ledger``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from poker_ledger.models.fields import EntityKind, ParticipationChoice
from poker_ledger.models.ledger import (
    GameUpdate,
    PlayerUpdate,
    SeasonPlayerUpdate,
    SeasonUpdate,
)
from poker_ledger.schemas.events import GameBuyIn, GameResult, PlayerParticipation
from poker_ledger.schemas.games import Game
from poker_ledger.schemas.players import Player
from poker_ledger.schemas.season_players import SeasonPlayer
from poker_ledger.schemas.seasons import Season
from poker_ledger.services.event_recorder import Balance, EventRecorder
from poker_ledger.services.identity_resolver import IdentityResolver
from poker_ledger.services.integrity_guard import IntegrityGuard, ReferenceWarning
from poker_ledger.services.ledger_accounts import LedgerAccountManager
from poker_ledger.services.season_directory import SeasonDirectory
from poker_ledger.services.store import LedgerStore

logger = logging.getLogger(__name__)


class TournamentLedger:
    def __init__(
        self,
        store: LedgerStore,
        resolver: IdentityResolver,
        directory: SeasonDirectory,
        accounts: LedgerAccountManager,
        recorder: EventRecorder,
        guard: IntegrityGuard,
    ):
        self.store = store
        self.resolver = resolver
        self.directory = directory
        self.accounts = accounts
        self.recorder = recorder
        self.guard = guard

    # Create / record

    async def create_season(self, name: str, start_date: date | None = None) -> int:
        async with self.store.transaction():
            return await self.directory.create_season(name, start_date)

    async def open_season_player_account(
        self,
        season_name: str,
        player_name: str,
        min_buy_in: object,
        allocated_pot_size: object,
    ) -> int:
        async with self.store.transaction():
            return await self.accounts.open_account(
                season_name, player_name, min_buy_in, allocated_pot_size
            )

    async def create_game(
        self, season_name: str, game_number: int, start_time: datetime | None = None
    ) -> int:
        async with self.store.transaction():
            return await self.directory.create_game(season_name, game_number, start_time)

    async def record_participation(
        self,
        player_name: str,
        participated: bool | ParticipationChoice | str,
        game_number: int,
    ) -> int:
        async with self.store.transaction():
            return await self.recorder.record_participation(
                player_name, participated, game_number
            )

    async def record_buy_in(self, game_number: int, player_name: str, amount: object) -> int:
        async with self.store.transaction():
            return await self.recorder.record_buy_in(game_number, player_name, amount)

    async def record_result(self, game_number: int, player_name: str, winnings: object) -> int:
        async with self.store.transaction():
            return await self.recorder.record_result(game_number, player_name, winnings)

    # Identity

    async def resolve_player_id(self, name: str) -> int:
        async with self.store.transaction():
            return await self.resolver.resolve_player_id(name)

    async def resolve_or_create_player_id(self, name: str) -> int:
        async with self.store.transaction():
            return await self.resolver.resolve_or_create_player_id(name)

    async def resolve_season_id(self, name: str) -> int:
        async with self.store.transaction():
            return await self.resolver.resolve_season_id(name)

    # Balances

    async def compute_balance(self, account_id: int) -> Balance:
        async with self.store.transaction():
            return await self.recorder.compute_balance(account_id)

    async def reconcile_account(self, account_id: int) -> Balance:
        """Recompute the balance from recorded events and store it."""
        async with self.store.transaction():
            balance = await self.recorder.compute_balance(account_id)
            account = await self.accounts.get_account(account_id)
            await self.accounts.set_balance(account, balance.balance)
        logger.info("Reconciled account %s to %s", account_id, balance.balance)
        return balance

    # Reads and updates

    async def get_season(self, season_id: int) -> Season:
        async with self.store.transaction():
            return await self.directory.get_season(season_id)

    async def list_seasons(self) -> Sequence[Season]:
        async with self.store.transaction():
            return await self.directory.list_seasons()

    async def update_season(self, season_id: int, data: SeasonUpdate) -> Season:
        async with self.store.transaction():
            return await self.directory.update_season(season_id, data)

    async def conclude_season(self, season_id: int, end_date: date | None = None) -> Season:
        async with self.store.transaction():
            return await self.directory.conclude_season(season_id, end_date)

    async def get_player(self, player_id: int) -> Player:
        async with self.store.transaction():
            return await self.directory.get_player(player_id)

    async def list_players(self) -> Sequence[Player]:
        async with self.store.transaction():
            return await self.directory.list_players()

    async def update_player(self, player_id: int, data: PlayerUpdate) -> Player:
        async with self.store.transaction():
            return await self.directory.update_player(player_id, data)

    async def get_game(self, game_id: int) -> Game:
        async with self.store.transaction():
            return await self.directory.get_game(game_id)

    async def list_games(self, season_id: int | None = None) -> Sequence[Game]:
        async with self.store.transaction():
            return await self.directory.list_games(season_id)

    async def update_game(self, game_id: int, data: GameUpdate) -> Game:
        """Full replace; a game with recorded events stays in its season."""
        async with self.store.transaction():
            game = await self.directory.get_game(game_id)
            if data.season_id != game.season_id:
                await self.guard.ensure_unreferenced(EntityKind.game, game_id, action="move")
            return await self.directory.update_game(game_id, data)

    async def get_account(self, account_id: int) -> SeasonPlayer:
        async with self.store.transaction():
            return await self.accounts.get_account(account_id)

    async def list_accounts(self, season_id: int | None = None) -> Sequence[SeasonPlayer]:
        async with self.store.transaction():
            return await self.accounts.list_accounts(season_id)

    async def update_account(self, account_id: int, data: SeasonPlayerUpdate) -> SeasonPlayer:
        """Full replace; an account with recorded events keeps its season and player."""
        async with self.store.transaction():
            account = await self.accounts.get_account(account_id)
            if (data.season_id, data.player_id) != (account.season_id, account.player_id):
                await self.guard.ensure_unreferenced(
                    EntityKind.season_player, account_id, action="move"
                )
            return await self.accounts.update_account(account_id, data)

    # Game events

    async def get_event(self, kind: EntityKind, event_id: int) -> SQLModel:
        async with self.store.transaction():
            return await self.recorder.get_event(kind, event_id)

    async def list_events(
        self,
        kind: EntityKind,
        game_id: int | None = None,
        season_player_id: int | None = None,
    ) -> Sequence[SQLModel]:
        async with self.store.transaction():
            return await self.recorder.list_events(kind, game_id, season_player_id)

    async def update_buy_in(self, buy_in_id: int, amount: object) -> GameBuyIn:
        async with self.store.transaction():
            return await self.recorder.update_buy_in(buy_in_id, amount)

    async def update_result(self, result_id: int, winnings: object) -> GameResult:
        async with self.store.transaction():
            return await self.recorder.update_result(result_id, winnings)

    async def update_participation(
        self, participation_id: int, participated: bool | ParticipationChoice | str
    ) -> PlayerParticipation:
        async with self.store.transaction():
            return await self.recorder.update_participation(participation_id, participated)

    async def delete_event(self, kind: EntityKind, event_id: int) -> None:
        async with self.store.transaction():
            await self.recorder.delete_event(kind, event_id)

    # Guarded deletes

    async def check_references(
        self, kind: EntityKind, entity_id: int
    ) -> ReferenceWarning | None:
        async with self.store.transaction():
            return await self.guard.check_references(kind, entity_id)

    async def delete_season(self, season_id: int) -> None:
        async with self.store.transaction():
            await self.guard.delete(EntityKind.season, season_id)

    async def delete_player(self, player_id: int) -> None:
        async with self.store.transaction():
            await self.guard.delete(EntityKind.player, player_id)

    async def delete_game(self, game_id: int) -> None:
        async with self.store.transaction():
            await self.guard.delete(EntityKind.game, game_id)

    async def delete_account(self, account_id: int) -> None:
        async with self.store.transaction():
            await self.guard.delete(EntityKind.season_player, account_id)


def build_ledger(session: AsyncSession) -> TournamentLedger:
    """Wire every ledger component around one session."""
    store = LedgerStore(session)
    resolver = IdentityResolver(store)
    return TournamentLedger(
        store=store,
        resolver=resolver,
        directory=SeasonDirectory(store, resolver),
        accounts=LedgerAccountManager(store, resolver),
        recorder=EventRecorder(store, resolver),
        guard=IntegrityGuard(store),
    )
