"""FastAPI dependencies shared by the ledger routers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from poker_ledger.services.tournament_ledger import TournamentLedger, build_ledger
from poker_ledger.utils.db_async import get_session


async def get_ledger(db: AsyncSession = Depends(get_session)) -> TournamentLedger:
    """Ledger wired to the request's session."""
    return build_ledger(db)
