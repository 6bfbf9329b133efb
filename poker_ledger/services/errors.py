"""Exception classes raised by the ledger services.

Every error is a caller-correctable input problem, so the services raise it
once where it is detected and the HTTP layer reports it unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from poker_ledger.models.fields import EntityKind

if TYPE_CHECKING:
    from poker_ledger.services.integrity_guard import ReferenceWarning


class ErrorCode(str, Enum):
    """Error codes for programmatic handling."""

    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    SEASON_NOT_FOUND = "SEASON_NOT_FOUND"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    SEASON_PLAYER_NOT_FOUND = "SEASON_PLAYER_NOT_FOUND"
    GAME_BUY_IN_NOT_FOUND = "GAME_BUY_IN_NOT_FOUND"
    GAME_RESULT_NOT_FOUND = "GAME_RESULT_NOT_FOUND"
    PLAYER_PARTICIPATION_NOT_FOUND = "PLAYER_PARTICIPATION_NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    REFERENCE_BLOCKED = "REFERENCE_BLOCKED"


_NOT_FOUND_CODES = {
    EntityKind.player: ErrorCode.PLAYER_NOT_FOUND,
    EntityKind.season: ErrorCode.SEASON_NOT_FOUND,
    EntityKind.game: ErrorCode.GAME_NOT_FOUND,
    EntityKind.season_player: ErrorCode.SEASON_PLAYER_NOT_FOUND,
    EntityKind.game_buy_in: ErrorCode.GAME_BUY_IN_NOT_FOUND,
    EntityKind.game_result: ErrorCode.GAME_RESULT_NOT_FOUND,
    EntityKind.player_participation: ErrorCode.PLAYER_PARTICIPATION_NOT_FOUND,
}


class LedgerError(Exception):
    """Base exception for ledger errors.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable error message
        details: Additional error details
    """

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "errorCode": self.code,
            "errorMessage": self.message,
            "details": self.details,
        }


class NotFoundError(LedgerError):
    """Raised when a natural key or surrogate id does not resolve."""

    def __init__(self, kind: EntityKind, key: Any):
        self.kind = kind
        self.key = key
        super().__init__(
            code=_NOT_FOUND_CODES[kind],
            message=f"{kind.label} not found: {key}",
            details={"kind": kind.value, "key": key},
        )


class ConflictError(LedgerError):
    """Raised when a write would break a uniqueness invariant."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code=ErrorCode.CONFLICT, message=message, details=details)


class InvalidArgumentError(LedgerError):
    """Raised for malformed amounts and missing or oversized fields."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(
            code=ErrorCode.INVALID_ARGUMENT,
            message=message,
            details={"field": field} if field else None,
        )


class ReferenceBlockedError(LedgerError):
    """Raised when a delete is refused because dependent records exist."""

    def __init__(self, warning: ReferenceWarning):
        self.warning = warning
        super().__init__(
            code=ErrorCode.REFERENCE_BLOCKED,
            message=(
                f"{warning.entity_kind.label} {warning.entity_id} is still referenced "
                f"by {warning.blocking_kind.label.lower()} {warning.blocking_id}"
            ),
            details=warning.to_dict(),
        )
