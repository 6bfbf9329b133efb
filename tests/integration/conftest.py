"""Ledger fixtures shared by the integration tests."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from poker_ledger.services.tournament_ledger import TournamentLedger, build_ledger

from tests.integration.ledger_helpers import SeededSeason


@pytest.fixture()
def ledger(db_session: AsyncSession) -> TournamentLedger:
    return build_ledger(db_session)


@pytest_asyncio.fixture()
async def seeded(ledger: TournamentLedger) -> SeededSeason:
    """Season S1 with Alice's account (50.00 / 1000.00) and game 1."""
    season_id = await ledger.create_season("S1")
    account_id = await ledger.open_season_player_account("S1", "Alice", "50.00", "1000.00")
    game_id = await ledger.create_game("S1", 1)
    return SeededSeason(season_id=season_id, account_id=account_id, game_id=game_id)
