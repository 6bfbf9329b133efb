"""Integration tests for natural-key resolution."""

import pytest

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poker_ledger.models.fields import EntityKind
from poker_ledger.schemas.players import Player
from poker_ledger.services.errors import InvalidArgumentError, NotFoundError
from poker_ledger.services.tournament_ledger import TournamentLedger, build_ledger

from tests.integration.ledger_helpers import SeededSeason, count_rows


@pytest.mark.asyncio
class TestPlayerResolution:
    """Tests for player lookup and on-demand creation."""

    async def test_resolve_or_create_is_idempotent(
        self, ledger: TournamentLedger, db_session: AsyncSession
    ):
        """Resolving the same name twice should return one id and one row."""
        first = await ledger.resolve_or_create_player_id("Alice")
        second = await ledger.resolve_or_create_player_id("Alice")

        assert first == second
        assert await count_rows(db_session, Player) == 1

    async def test_names_are_trimmed(self, ledger: TournamentLedger):
        """Surrounding whitespace should not create a second player."""
        player_id = await ledger.resolve_or_create_player_id("  Alice ")
        assert await ledger.resolve_player_id("Alice") == player_id

    async def test_resolve_unknown_player(self, ledger: TournamentLedger):
        """Plain resolution should never create a player."""
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.resolve_player_id("Nobody")
        assert exc_info.value.kind is EntityKind.player

    async def test_blank_and_oversized_names_rejected(self, ledger: TournamentLedger):
        """Blank names and names over 100 characters should be rejected."""
        with pytest.raises(InvalidArgumentError):
            await ledger.resolve_or_create_player_id("   ")
        with pytest.raises(InvalidArgumentError):
            await ledger.resolve_or_create_player_id("x" * 101)

    async def test_concurrent_creation_returns_winner(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        monkeypatch: pytest.MonkeyPatch,
    ):
        """A creator that loses the insert race should return the winner's id."""
        async with session_factory() as winner_session, session_factory() as loser_session:
            winner = build_ledger(winner_session)
            loser = build_ledger(loser_session)

            winner_id = await winner.resolve_or_create_player_id("Alice")

            real_find = loser.resolver.find_player
            calls = {"count": 0}

            async def stale_find(name: str):
                # The first lookup misses, as if it ran before the winner committed.
                calls["count"] += 1
                if calls["count"] == 1:
                    return None
                return await real_find(name)

            monkeypatch.setattr(loser.resolver, "find_player", stale_find)
            loser_id = await loser.resolve_or_create_player_id("Alice")

            assert loser_id == winner_id
            assert calls["count"] == 2
            assert await count_rows(loser_session, Player) == 1


@pytest.mark.asyncio
class TestSeasonAndGameResolution:
    """Tests for season, game and account resolution."""

    async def test_resolve_season_id(self, ledger: TournamentLedger, seeded: SeededSeason):
        assert await ledger.resolve_season_id("S1") == seeded.season_id

    async def test_unknown_season(self, ledger: TournamentLedger):
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.resolve_season_id("S9")
        assert exc_info.value.kind is EntityKind.season

    async def test_game_outside_season_is_not_found(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        """A game number should only resolve inside its own season."""
        other_season = await ledger.create_season("S2")
        resolver = ledger.resolver

        assert await resolver.resolve_game_id(1) == seeded.game_id
        assert await resolver.resolve_game_id(1, seeded.season_id) == seeded.game_id
        assert await resolver.resolve_season_id_for_game(1) == seeded.season_id
        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve_game_id(1, other_season)
        assert exc_info.value.kind is EntityKind.game

    async def test_season_player_resolution_reports_missing_stage(
        self, ledger: TournamentLedger, seeded: SeededSeason
    ):
        """Each stage should report the kind that is actually missing."""
        resolver = ledger.resolver
        other_season = await ledger.create_season("S2")
        await ledger.resolve_or_create_player_id("Bob")

        assert (
            await resolver.resolve_season_player_id("Alice", seeded.season_id)
            == seeded.account_id
        )

        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve_season_player_id("Carol", seeded.season_id)
        assert exc_info.value.kind is EntityKind.player

        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve_season_player_id("Alice", 9999)
        assert exc_info.value.kind is EntityKind.season

        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve_season_player_id("Bob", seeded.season_id)
        assert exc_info.value.kind is EntityKind.season_player

        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve_season_player_id("Alice", other_season)
        assert exc_info.value.kind is EntityKind.season_player
