"""Per-season player accounts: opening, reading and full-replace updates."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy.exc import IntegrityError

from poker_ledger.models.fields import EntityKind
from poker_ledger.models.ledger import SeasonPlayerUpdate
from poker_ledger.schemas.players import Player
from poker_ledger.schemas.season_players import SeasonPlayer
from poker_ledger.schemas.seasons import Season
from poker_ledger.services.errors import ConflictError, NotFoundError
from poker_ledger.services.identity_resolver import IdentityResolver
from poker_ledger.services.store import LedgerStore
from poker_ledger.utils.money import validate_money

logger = logging.getLogger(__name__)


class LedgerAccountManager:
    """Owns the SeasonPlayer balance record and the rules for changing it.

    An account exists at most once per (season, player). It opens with
    ``current_pot_size == allocated_pot_size``; after that only explicit
    updates or reconciliation move the balance.
    """

    def __init__(self, store: LedgerStore, resolver: IdentityResolver):
        self.store = store
        self.resolver = resolver

    async def open_account(
        self,
        season_name: str,
        player_name: str,
        min_buy_in: object,
        allocated_pot_size: object,
    ) -> int:
        """Open the (season, player) account, creating the player if needed.

        Raises:
            InvalidArgumentError: an amount fails the precision rules
            NotFoundError: the season does not exist
            ConflictError: the player already has an account in the season
        """
        min_buy_in = validate_money(min_buy_in, "min_buy_in")
        allocated_pot_size = validate_money(allocated_pot_size, "allocated_pot_size")

        season_id = await self.resolver.resolve_season_id(season_name)
        player_id = await self.resolver.resolve_or_create_player_id(player_name)

        await self._ensure_no_account(season_id, player_id, label=player_name)
        account = SeasonPlayer(
            season_id=season_id,
            player_id=player_id,
            min_buy_in=min_buy_in,
            allocated_pot_size=allocated_pot_size,
            current_pot_size=allocated_pot_size,
        )
        await self._save_unique(account, season_id, player_id, label=player_name)
        logger.info(
            "Opened account %s for %r in season %r (stake %s, min buy-in %s)",
            account.id,
            player_name,
            season_name,
            allocated_pot_size,
            min_buy_in,
        )
        assert account.id is not None
        return account.id

    async def get_account(self, account_id: int) -> SeasonPlayer:
        account = await self.store.get(SeasonPlayer, account_id)
        if account is None:
            raise NotFoundError(EntityKind.season_player, account_id)
        return account

    async def list_accounts(self, season_id: int | None = None) -> Sequence[SeasonPlayer]:
        if season_id is None:
            return await self.store.find_all(SeasonPlayer)
        return await self.store.find_all(SeasonPlayer, SeasonPlayer.season_id == season_id)

    async def update_account(self, account_id: int, data: SeasonPlayerUpdate) -> SeasonPlayer:
        """Replace every mutable field of the account with ``data``."""
        account = await self.get_account(account_id)
        allocated = validate_money(data.allocated_pot_size, "allocated_pot_size")
        min_buy_in = validate_money(data.min_buy_in, "min_buy_in")
        current = validate_money(data.current_pot_size, "current_pot_size")

        if await self.store.get(Season, data.season_id) is None:
            raise NotFoundError(EntityKind.season, data.season_id)
        if await self.store.get(Player, data.player_id) is None:
            raise NotFoundError(EntityKind.player, data.player_id)

        moved = (data.season_id, data.player_id) != (account.season_id, account.player_id)
        if moved:
            await self._ensure_no_account(
                data.season_id, data.player_id, label=f"player {data.player_id}"
            )

        await self._save_unique(
            account,
            data.season_id,
            data.player_id,
            label=f"player {data.player_id}",
            season_id=data.season_id,
            player_id=data.player_id,
            allocated_pot_size=allocated,
            min_buy_in=min_buy_in,
            current_pot_size=current,
        )
        logger.info("Updated account %s", account_id)
        return account

    async def set_balance(self, account: SeasonPlayer, balance: Decimal) -> SeasonPlayer:
        account.current_pot_size = validate_money(balance, "current_pot_size")
        await self.store.save(account)
        return account

    async def _ensure_no_account(self, season_id: int, player_id: int, *, label: str) -> None:
        if await self.store.exists(
            SeasonPlayer,
            SeasonPlayer.season_id == season_id,
            SeasonPlayer.player_id == player_id,
        ):
            raise ConflictError(
                f"{label} already has an account in season {season_id}",
                {"season_id": season_id, "player_id": player_id},
            )

    async def _save_unique(
        self,
        account: SeasonPlayer,
        season_id: int,
        player_id: int,
        /,
        *,
        label: str,
        **changes: Any,
    ) -> None:
        # The storage constraint settles races the lookup above cannot see.
        try:
            async with self.store.savepoint():
                for field, value in changes.items():
                    setattr(account, field, value)
                await self.store.save(account)
        except IntegrityError:
            raise ConflictError(
                f"{label} already has an account in season {season_id}",
                {"season_id": season_id, "player_id": player_id},
            ) from None
