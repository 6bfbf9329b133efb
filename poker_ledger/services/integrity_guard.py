"""Refuse deletes that would orphan ledger history.

Nothing is ever cascade-deleted. Before a Season, Player, Game or
SeasonPlayer row goes away, the guard looks for dependents in a fixed order
and reports the first one it finds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlmodel import SQLModel

from poker_ledger.models.fields import EntityKind
from poker_ledger.schemas.events import GameBuyIn, GameResult, PlayerParticipation
from poker_ledger.schemas.games import Game
from poker_ledger.schemas.players import Player
from poker_ledger.schemas.season_players import SeasonPlayer
from poker_ledger.schemas.seasons import Season
from poker_ledger.services.errors import (
    InvalidArgumentError,
    NotFoundError,
    ReferenceBlockedError,
)
from poker_ledger.services.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceWarning:
    """Why a delete was refused: the blocked record and its first dependent."""

    key: str
    entity_kind: EntityKind
    entity_id: int
    blocking_kind: EntityKind
    blocking_id: int

    @property
    def params(self) -> list[int]:
        return [self.blocking_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "entityKind": self.entity_kind.value,
            "entityId": self.entity_id,
            "blockingKind": self.blocking_kind.value,
            "blockingId": self.blocking_id,
            "params": self.params,
        }


@dataclass(frozen=True)
class _Dependent:
    kind: EntityKind
    model: type[SQLModel]
    column: str


GUARDED_MODELS: dict[EntityKind, type[SQLModel]] = {
    EntityKind.season: Season,
    EntityKind.player: Player,
    EntityKind.game: Game,
    EntityKind.season_player: SeasonPlayer,
}

# Checked in order; the first hit blocks the delete.
DEPENDENTS: dict[EntityKind, tuple[_Dependent, ...]] = {
    EntityKind.season: (
        _Dependent(EntityKind.season_player, SeasonPlayer, "season_id"),
        _Dependent(EntityKind.game, Game, "season_id"),
    ),
    EntityKind.player: (
        _Dependent(EntityKind.season_player, SeasonPlayer, "player_id"),
    ),
    EntityKind.game: (
        _Dependent(EntityKind.game_buy_in, GameBuyIn, "game_id"),
        _Dependent(EntityKind.game_result, GameResult, "game_id"),
        _Dependent(EntityKind.player_participation, PlayerParticipation, "game_id"),
    ),
    EntityKind.season_player: (
        _Dependent(EntityKind.game_buy_in, GameBuyIn, "season_player_id"),
        _Dependent(EntityKind.game_result, GameResult, "season_player_id"),
        _Dependent(
            EntityKind.player_participation, PlayerParticipation, "season_player_id"
        ),
    ),
}


def reference_key(kind: EntityKind, dependent: EntityKind) -> str:
    """Message key such as ``season.game.season.referenced``."""
    owner = kind.reference_name
    return f"{owner}.{dependent.reference_name}.{owner}.referenced"


class IntegrityGuard:
    def __init__(self, store: LedgerStore):
        self.store = store

    async def load(self, kind: EntityKind, entity_id: int) -> SQLModel:
        model = GUARDED_MODELS.get(kind)
        if model is None:
            raise InvalidArgumentError(f"{kind.value} records cannot be deleted", field="kind")
        record = await self.store.get(model, entity_id)
        if record is None:
            raise NotFoundError(kind, entity_id)
        return record

    async def check_references(
        self, kind: EntityKind, entity_id: int
    ) -> ReferenceWarning | None:
        """Return a warning naming the first dependent record, or None."""
        await self.load(kind, entity_id)
        for dependent in DEPENDENTS[kind]:
            column = getattr(dependent.model, dependent.column)
            blocking = await self.store.find_first(dependent.model, column == entity_id)
            if blocking is not None:
                return ReferenceWarning(
                    key=reference_key(kind, dependent.kind),
                    entity_kind=kind,
                    entity_id=entity_id,
                    blocking_kind=dependent.kind,
                    blocking_id=blocking.id,  # type: ignore[attr-defined]
                )
        return None

    async def ensure_unreferenced(
        self, kind: EntityKind, entity_id: int, action: str = "delete"
    ) -> None:
        """Raise ReferenceBlockedError if any dependent record exists."""
        warning = await self.check_references(kind, entity_id)
        if warning is not None:
            logger.warning(
                "Refused to %s %s %s: %s (%s %s)",
                action,
                kind.value,
                entity_id,
                warning.key,
                warning.blocking_kind.value,
                warning.blocking_id,
            )
            raise ReferenceBlockedError(warning)

    async def delete(self, kind: EntityKind, entity_id: int) -> None:
        """Delete the record, or raise ReferenceBlockedError if anything uses it."""
        await self.ensure_unreferenced(kind, entity_id)
        await self.store.delete(await self.load(kind, entity_id))
        logger.info("Deleted %s %s", kind.value, entity_id)
