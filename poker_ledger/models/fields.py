"""
Shared field types and enums for ledger models.
"""
from enum import Enum
from typing import Annotated

from pydantic import Field as PydField

NAME_MAX_LENGTH = 100

NAME = Annotated[str, PydField(..., min_length=1, max_length=NAME_MAX_LENGTH)]


class EntityKind(str, Enum):
    """Record kinds the ledger resolves, guards and reports on."""

    player = "player"
    season = "season"
    game = "game"
    season_player = "season_player"
    game_buy_in = "game_buy_in"
    game_result = "game_result"
    player_participation = "player_participation"

    @property
    def label(self) -> str:
        return {
            "player": "Player",
            "season": "Season",
            "game": "Game",
            "season_player": "Season player",
            "game_buy_in": "Game buy-in",
            "game_result": "Game result",
            "player_participation": "Player participation",
        }[self.value]

    @property
    def reference_name(self) -> str:
        """camelCase name used inside reference warning keys."""
        return {
            "player": "player",
            "season": "season",
            "game": "game",
            "season_player": "seasonPlayer",
            "game_buy_in": "gameBuyIn",
            "game_result": "gameResult",
            "player_participation": "playerParticipation",
        }[self.value]


class ParticipationChoice(str, Enum):
    YES = "YES"
    NO = "NO"

    @property
    def participated(self) -> bool:
        return self is ParticipationChoice.YES
