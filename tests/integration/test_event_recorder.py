"""Integration tests for buy-ins, results, participation and balances."""

from decimal import Decimal

import pytest

from sqlalchemy.ext.asyncio import AsyncSession

from poker_ledger.models.fields import EntityKind, ParticipationChoice
from poker_ledger.schemas.events import GameBuyIn, GameResult, PlayerParticipation
from poker_ledger.schemas.players import Player
from poker_ledger.services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from poker_ledger.services.tournament_ledger import TournamentLedger

from tests.integration.ledger_helpers import SeededSeason, count_rows, skip_existence_checks


@pytest.mark.asyncio
class TestRecordBuyIn:
    """Tests for recording buy-ins."""

    async def test_records_buy_in(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        buy_in_id = await ledger.record_buy_in(1, "Alice", "100.00")

        buy_in = await db_session.get(GameBuyIn, buy_in_id)
        assert buy_in is not None
        assert buy_in.game_id == seeded.game_id
        assert buy_in.season_player_id == seeded.account_id
        assert buy_in.buy_in_amount == Decimal("100.00")

    async def test_unknown_game_writes_nothing(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        """A missing game should fail before any row is written."""
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.record_buy_in(99, "Alice", "100.00")

        assert exc_info.value.kind is EntityKind.game
        assert await count_rows(db_session, GameBuyIn) == 0

    async def test_player_without_account(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        """A known player with no account in the game's season is not found."""
        await ledger.resolve_or_create_player_id("Bob")

        with pytest.raises(NotFoundError) as exc_info:
            await ledger.record_buy_in(1, "Bob", "100.00")

        assert exc_info.value.kind is EntityKind.season_player
        assert await count_rows(db_session, GameBuyIn) == 0

    async def test_unknown_player_is_not_created(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.record_buy_in(1, "Carol", "100.00")

        assert exc_info.value.kind is EntityKind.player
        assert await count_rows(db_session, Player) == 1

    async def test_duplicate_buy_in_conflicts(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        """One buy-in per account per game."""
        await ledger.record_buy_in(1, "Alice", "100.00")
        with pytest.raises(ConflictError):
            await ledger.record_buy_in(1, "Alice", "20.00")
        assert await count_rows(db_session, GameBuyIn) == 1

    async def test_bad_amount_rejected(self, ledger: TournamentLedger, seeded: SeededSeason):
        with pytest.raises(InvalidArgumentError):
            await ledger.record_buy_in(1, "Alice", "100.005")


@pytest.mark.asyncio
class TestRecordResultAndParticipation:
    """Tests for results and participation flags."""

    async def test_records_result(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        result_id = await ledger.record_result(1, "Alice", "250.50")

        result = await db_session.get(GameResult, result_id)
        assert result is not None
        assert result.winnings == Decimal("250.50")

    async def test_duplicate_result_conflicts(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        await ledger.record_result(1, "Alice", "10.00")
        with pytest.raises(ConflictError):
            await ledger.record_result(1, "Alice", "10.00")

    async def test_records_participation(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        """YES and NO should both be stored as explicit flags."""
        await ledger.open_season_player_account("S1", "Bob", "50.00", "1000.00")

        yes_id = await ledger.record_participation("Alice", ParticipationChoice.YES, 1)
        no_id = await ledger.record_participation("Bob", "no", 1)

        yes = await db_session.get(PlayerParticipation, yes_id)
        no = await db_session.get(PlayerParticipation, no_id)
        assert yes is not None and yes.participated is True
        assert no is not None and no.participated is False
        assert yes.participation_time is not None

    async def test_participation_unknown_game(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.record_participation("Alice", True, 2)
        assert exc_info.value.kind is EntityKind.game


@pytest.mark.asyncio
class TestBalances:
    """Tests for derived balances and reconciliation."""

    async def test_recording_leaves_current_pot_untouched(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        """Events are logged only; the stored balance moves on reconcile."""
        await ledger.record_buy_in(1, "Alice", "100.00")
        await ledger.record_result(1, "Alice", "40.00")

        account = await ledger.get_account(seeded.account_id)
        assert account.current_pot_size == Decimal("1000.00")

    async def test_compute_balance(self, ledger: TournamentLedger, seeded: SeededSeason):
        await ledger.create_game("S1", 2)
        await ledger.record_buy_in(1, "Alice", "100.00")
        await ledger.record_buy_in(2, "Alice", "50.00")
        await ledger.record_result(2, "Alice", "400.00")

        balance = await ledger.compute_balance(seeded.account_id)

        assert balance.allocated_pot_size == Decimal("1000.00")
        assert balance.total_buy_ins == Decimal("150.00")
        assert balance.total_winnings == Decimal("400.00")
        assert balance.balance == Decimal("1250.00")

    async def test_balance_without_events(self, ledger: TournamentLedger, seeded: SeededSeason):
        balance = await ledger.compute_balance(seeded.account_id)
        assert balance.total_buy_ins == Decimal("0.00")
        assert balance.balance == Decimal("1000.00")

    async def test_reconcile_writes_balance(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        await ledger.record_buy_in(1, "Alice", "100.00")
        await ledger.record_result(1, "Alice", "30.00")

        balance = await ledger.reconcile_account(seeded.account_id)

        account = await ledger.get_account(seeded.account_id)
        assert balance.balance == Decimal("930.00")
        assert account.current_pot_size == Decimal("930.00")

    async def test_reconcile_refuses_negative_balance(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        """A balance below zero is reported but never stored."""
        await ledger.record_buy_in(1, "Alice", "1500.00")

        assert (await ledger.compute_balance(seeded.account_id)).balance == Decimal("-500.00")
        with pytest.raises(InvalidArgumentError):
            await ledger.reconcile_account(seeded.account_id)

        account = await ledger.get_account(seeded.account_id)
        assert account.current_pot_size == Decimal("1000.00")

    async def test_unknown_account(self, ledger: TournamentLedger):
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.compute_balance(7)
        assert exc_info.value.kind is EntityKind.season_player


@pytest.mark.asyncio
class TestEventUniqueIndex:
    """The (game, account) index should catch events the lookup misses."""

    async def test_duplicate_buy_in_conflicts(
        self,
        ledger: TournamentLedger,
        seeded: SeededSeason,
        db_session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ):
        await ledger.record_buy_in(1, "Alice", "100.00")
        skip_existence_checks(monkeypatch, ledger)

        with pytest.raises(ConflictError) as exc_info:
            await ledger.record_buy_in(1, "Alice", "20.00")

        assert exc_info.value.details == {
            "game_id": seeded.game_id,
            "season_player_id": seeded.account_id,
        }
        assert await count_rows(db_session, GameBuyIn) == 1
        assert (await ledger.compute_balance(seeded.account_id)).total_buy_ins == Decimal(
            "100.00"
        )

    async def test_duplicate_participation_conflicts(
        self,
        ledger: TournamentLedger,
        seeded: SeededSeason,
        db_session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ):
        await ledger.record_participation("Alice", True, 1)
        skip_existence_checks(monkeypatch, ledger)

        with pytest.raises(ConflictError):
            await ledger.record_participation("Alice", False, 1)

        assert await count_rows(db_session, PlayerParticipation) == 1


@pytest.mark.asyncio
class TestEventRecords:
    """Tests for reading, correcting and deleting recorded events."""

    async def test_get_and_list_by_game_or_account(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        bob_account = await ledger.open_season_player_account("S1", "Bob", "50.00", "800.00")
        await ledger.create_game("S1", 2)
        first = await ledger.record_buy_in(1, "Alice", "100.00")
        second = await ledger.record_buy_in(1, "Bob", "60.00")
        third = await ledger.record_buy_in(2, "Alice", "70.00")

        buy_in = await ledger.get_event(EntityKind.game_buy_in, second)
        assert isinstance(buy_in, GameBuyIn)
        assert buy_in.season_player_id == bob_account

        by_game = await ledger.list_events(EntityKind.game_buy_in, game_id=seeded.game_id)
        by_account = await ledger.list_events(
            EntityKind.game_buy_in, season_player_id=seeded.account_id
        )
        both = await ledger.list_events(
            EntityKind.game_buy_in, seeded.game_id, seeded.account_id
        )
        assert [e.id for e in by_game] == [first, second]
        assert [e.id for e in by_account] == [first, third]
        assert [e.id for e in both] == [first]
        assert len(await ledger.list_events(EntityKind.game_buy_in)) == 3
        assert await ledger.list_events(EntityKind.game_result) == []

    @pytest.mark.parametrize(
        "kind", [EntityKind.game_buy_in, EntityKind.game_result, EntityKind.player_participation]
    )
    async def test_unknown_event(self, ledger: TournamentLedger, kind):
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.get_event(kind, 99)
        assert exc_info.value.kind is kind

    async def test_non_event_kind_rejected(self, ledger: TournamentLedger):
        with pytest.raises(InvalidArgumentError):
            await ledger.list_events(EntityKind.game)

    async def test_update_buy_in_moves_balance(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        """A corrected amount should flow into the derived balance."""
        buy_in_id = await ledger.record_buy_in(1, "Alice", "100.00")

        buy_in = await ledger.update_buy_in(buy_in_id, "80.00")

        assert buy_in.buy_in_amount == Decimal("80.00")
        assert (await ledger.compute_balance(seeded.account_id)).balance == Decimal("920.00")

    async def test_update_buy_in_rejects_bad_amount(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        buy_in_id = await ledger.record_buy_in(1, "Alice", "100.00")
        with pytest.raises(InvalidArgumentError):
            await ledger.update_buy_in(buy_in_id, "-5.00")
        buy_in = await ledger.get_event(EntityKind.game_buy_in, buy_in_id)
        assert buy_in.buy_in_amount == Decimal("100.00")  # type: ignore[attr-defined]

    async def test_update_result(self, ledger: TournamentLedger, seeded: SeededSeason):
        result_id = await ledger.record_result(1, "Alice", "10.00")
        result = await ledger.update_result(result_id, "12.50")
        assert result.winnings == Decimal("12.50")

    async def test_update_participation(self, ledger: TournamentLedger, seeded: SeededSeason):
        participation_id = await ledger.record_participation("Alice", "yes", 1)

        participation = await ledger.update_participation(
            participation_id, ParticipationChoice.NO
        )

        assert participation.participated is False
        assert participation.participation_time is not None

    async def test_delete_event(
        self, ledger: TournamentLedger, seeded: SeededSeason, db_session: AsyncSession
    ):
        """Deleting a buy-in frees the slot and restores the balance."""
        buy_in_id = await ledger.record_buy_in(1, "Alice", "100.00")

        await ledger.delete_event(EntityKind.game_buy_in, buy_in_id)

        assert await count_rows(db_session, GameBuyIn) == 0
        assert (await ledger.compute_balance(seeded.account_id)).balance == Decimal("1000.00")
        await ledger.record_buy_in(1, "Alice", "40.00")
        with pytest.raises(NotFoundError):
            await ledger.delete_event(EntityKind.game_buy_in, buy_in_id)
