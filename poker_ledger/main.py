"""
Main entry point for FastAPI application.
"""
from contextlib import asynccontextmanager
import os

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from poker_ledger.routes import records, tournament
from poker_ledger.services.errors import ErrorCode, LedgerError
from poker_ledger.utils.db_async import init_db, dispose_engine, describe_database_url, DATABASE_URL

from poker_ledger.logging_config import setup_logging
from poker_ledger.config import settings

import logging
logger = logging.getLogger(__name__)

setup_logging(
    level=settings.log_level,
    access_log=settings.access_log,
    sql_echo=settings.sql_echo,
)

ERROR_STATUS = {
    ErrorCode.PLAYER_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.SEASON_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.GAME_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.SEASON_PLAYER_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.GAME_BUY_IN_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.GAME_RESULT_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.PLAYER_PARTICIPATION_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT.value: status.HTTP_409_CONFLICT,
    ErrorCode.REFERENCE_BLOCKED.value: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_ARGUMENT.value: status.HTTP_400_BAD_REQUEST,
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    should_init_db = settings.is_dev and settings.auto_init_db

    if should_init_db:
        logger.info("Running init_db()…")
        logger.info(f"DB target: {describe_database_url(DATABASE_URL)}")
        try:
            await init_db()
            logger.info("DB ready.")
        except Exception:
            logger.exception("init_db failed")
            raise
    else:
        logger.info("Skipping init_db(); auto_init_db disabled or not a dev environment")

    yield

    try:
        logger.info("Disposing DB engine…")
        await dispose_engine()
        logger.info("DB engine disposed.")
    except Exception:
        logger.exception("Failed to dispose DB engine")

app = FastAPI(title="Poker Tournament Ledger", lifespan=lifespan)
app.include_router(tournament.router)
app.include_router(records.router)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Report ledger errors verbatim with a matching status code."""
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    if status_code == status.HTTP_409_CONFLICT:
        logger.warning(f"{request.method} {request.url.path} refused: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.get("/health")
async def health_check():
    """Health Check Endpoint"""
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
