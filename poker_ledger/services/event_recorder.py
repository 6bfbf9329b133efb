"""Record buy-ins, results and participation against a game.

Recording is pure event logging: a buy-in or result never touches the
account's ``current_pot_size``. The balance is derived on demand by
``compute_balance`` (allocated stake minus buy-ins plus winnings) and only
written back through an explicit reconciliation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel

from poker_ledger.models.fields import EntityKind, ParticipationChoice
from poker_ledger.schemas.base import ZERO, utcnow
from poker_ledger.schemas.events import GameBuyIn, GameResult, PlayerParticipation
from poker_ledger.schemas.season_players import SeasonPlayer
from poker_ledger.services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from poker_ledger.services.identity_resolver import IdentityResolver
from poker_ledger.services.store import LedgerStore
from poker_ledger.utils.money import CENT, validate_money

logger = logging.getLogger(__name__)


@dataclass
class GameAccount:
    """The (game, account) pair an event is recorded against."""

    game_id: int
    season_id: int
    season_player_id: int


@dataclass
class Balance:
    season_player_id: int
    allocated_pot_size: Decimal
    total_buy_ins: Decimal
    total_winnings: Decimal

    @property
    def balance(self) -> Decimal:
        return (self.allocated_pot_size - self.total_buy_ins + self.total_winnings).quantize(
            CENT
        )


EVENT_MODELS: dict[EntityKind, type[SQLModel]] = {
    EntityKind.game_buy_in: GameBuyIn,
    EntityKind.game_result: GameResult,
    EntityKind.player_participation: PlayerParticipation,
}


def _event_model(kind: EntityKind) -> type[SQLModel]:
    model = EVENT_MODELS.get(kind)
    if model is None:
        raise InvalidArgumentError(f"{kind.value} is not a game event", field="kind")
    return model


def _as_participated(value: bool | ParticipationChoice | str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, ParticipationChoice):
        return value.participated
    try:
        return ParticipationChoice(str(value).strip().upper()).participated
    except ValueError:
        raise InvalidArgumentError(
            f"participated must be yes/no, got {value!r}", field="participated"
        ) from None


class EventRecorder:
    def __init__(self, store: LedgerStore, resolver: IdentityResolver):
        self.store = store
        self.resolver = resolver

    async def resolve_game_account(self, game_number: int, player_name: str) -> GameAccount:
        """Game by number, then its season, then the player's account there."""
        game = await self.resolver.find_game(game_number)
        assert game.id is not None
        season_player_id = await self.resolver.resolve_season_player_id(
            player_name, game.season_id
        )
        return GameAccount(
            game_id=game.id, season_id=game.season_id, season_player_id=season_player_id
        )

    async def record_buy_in(self, game_number: int, player_name: str, amount: object) -> int:
        amount = validate_money(amount, "buy_in_amount")
        target = await self.resolve_game_account(game_number, player_name)
        buy_in = GameBuyIn(
            game_id=target.game_id,
            season_player_id=target.season_player_id,
            buy_in_amount=amount,
        )
        await self._save_event(buy_in, EntityKind.game_buy_in, target)
        logger.info(
            "Recorded buy-in %s of %s for %r in game %s",
            buy_in.id,
            amount,
            player_name,
            game_number,
        )
        assert buy_in.id is not None
        return buy_in.id

    async def record_result(self, game_number: int, player_name: str, winnings: object) -> int:
        winnings = validate_money(winnings, "winnings")
        target = await self.resolve_game_account(game_number, player_name)
        result = GameResult(
            game_id=target.game_id,
            season_player_id=target.season_player_id,
            winnings=winnings,
        )
        await self._save_event(result, EntityKind.game_result, target)
        logger.info(
            "Recorded result %s of %s for %r in game %s",
            result.id,
            winnings,
            player_name,
            game_number,
        )
        assert result.id is not None
        return result.id

    async def record_participation(
        self,
        player_name: str,
        participated: bool | ParticipationChoice | str,
        game_number: int,
    ) -> int:
        flag = _as_participated(participated)
        target = await self.resolve_game_account(game_number, player_name)
        participation = PlayerParticipation(
            game_id=target.game_id,
            season_player_id=target.season_player_id,
            participated=flag,
            participation_time=utcnow(),
        )
        await self._save_event(participation, EntityKind.player_participation, target)
        logger.info(
            "Recorded participation %s (%s) for %r in game %s",
            participation.id,
            "yes" if flag else "no",
            player_name,
            game_number,
        )
        assert participation.id is not None
        return participation.id

    async def compute_balance(self, account_id: int) -> Balance:
        account = await self.store.get(SeasonPlayer, account_id)
        if account is None:
            raise NotFoundError(EntityKind.season_player, account_id)
        buy_ins = await self.store.total(
            GameBuyIn.buy_in_amount, GameBuyIn.season_player_id == account_id
        )
        winnings = await self.store.total(
            GameResult.winnings, GameResult.season_player_id == account_id
        )
        return Balance(
            season_player_id=account_id,
            allocated_pot_size=Decimal(account.allocated_pot_size),
            total_buy_ins=Decimal(buy_ins or ZERO).quantize(CENT),
            total_winnings=Decimal(winnings or ZERO).quantize(CENT),
        )

    async def get_event(self, kind: EntityKind, event_id: int) -> SQLModel:
        event = await self.store.get(_event_model(kind), event_id)
        if event is None:
            raise NotFoundError(kind, event_id)
        return event

    async def list_events(
        self,
        kind: EntityKind,
        game_id: int | None = None,
        season_player_id: int | None = None,
    ) -> Sequence[SQLModel]:
        """Events of one kind, optionally narrowed to a game and/or an account."""
        model = _event_model(kind)
        criteria = []
        if game_id is not None:
            criteria.append(model.game_id == game_id)  # type: ignore[attr-defined]
        if season_player_id is not None:
            criteria.append(model.season_player_id == season_player_id)  # type: ignore[attr-defined]
        return await self.store.find_all(model, *criteria)

    async def update_buy_in(self, buy_in_id: int, amount: object) -> GameBuyIn:
        amount = validate_money(amount, "buy_in_amount")
        buy_in = await self.get_event(EntityKind.game_buy_in, buy_in_id)
        assert isinstance(buy_in, GameBuyIn)
        buy_in.buy_in_amount = amount
        await self.store.save(buy_in)
        logger.info("Updated buy-in %s to %s", buy_in_id, amount)
        return buy_in

    async def update_result(self, result_id: int, winnings: object) -> GameResult:
        winnings = validate_money(winnings, "winnings")
        result = await self.get_event(EntityKind.game_result, result_id)
        assert isinstance(result, GameResult)
        result.winnings = winnings
        await self.store.save(result)
        logger.info("Updated result %s to %s", result_id, winnings)
        return result

    async def update_participation(
        self, participation_id: int, participated: bool | ParticipationChoice | str
    ) -> PlayerParticipation:
        flag = _as_participated(participated)
        participation = await self.get_event(EntityKind.player_participation, participation_id)
        assert isinstance(participation, PlayerParticipation)
        participation.participated = flag
        participation.participation_time = utcnow()
        await self.store.save(participation)
        logger.info(
            "Updated participation %s to %s", participation_id, "yes" if flag else "no"
        )
        return participation

    async def delete_event(self, kind: EntityKind, event_id: int) -> None:
        """Events are leaves of the ledger; nothing references them."""
        await self.store.delete(await self.get_event(kind, event_id))
        logger.info("Deleted %s %s", kind.value, event_id)

    async def _save_event(self, event: SQLModel, kind: EntityKind, target: GameAccount) -> None:
        model = type(event)
        if await self.store.exists(
            model,
            model.game_id == target.game_id,  # type: ignore[attr-defined]
            model.season_player_id == target.season_player_id,  # type: ignore[attr-defined]
        ):
            raise self._duplicate(kind, target)
        try:
            async with self.store.savepoint():
                await self.store.save(event)
        except IntegrityError:
            raise self._duplicate(kind, target) from None

    @staticmethod
    def _duplicate(kind: EntityKind, target: GameAccount) -> ConflictError:
        return ConflictError(
            f"{kind.label} already recorded for season player "
            f"{target.season_player_id} in game {target.game_id}",
            {"game_id": target.game_id, "season_player_id": target.season_player_id},
        )
