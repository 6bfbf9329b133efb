"""Initial schema for the tournament ledger.

Revision ID: 20251019_000001
Revises:
Create Date: 2025-10-19 00:00:01
"""

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa

from poker_ledger.schemas.base import Money, UTCDateTime

revision = "20251019_000001"
down_revision = None
branch_labels = None
depends_on = None

MONEY = Money()


def upgrade() -> None:
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
    )
    op.create_index("ix_players_name", "players", ["name"], unique=True)

    op.create_table(
        "seasons",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
    )
    op.create_index("ix_seasons_name", "seasons", ["name"], unique=True)

    op.create_table(
        "season_players",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("season_id", sa.Integer(), sa.ForeignKey("seasons.id"), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("allocated_pot_size", MONEY, nullable=False),
        sa.Column("min_buy_in", MONEY, nullable=False),
        sa.Column("current_pot_size", MONEY, nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.UniqueConstraint(
            "season_id", "player_id", name="uq_season_players_season_player"
        ),
    )
    op.create_index("ix_season_players_season_id", "season_players", ["season_id"])
    op.create_index("ix_season_players_player_id", "season_players", ["player_id"])

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("season_id", sa.Integer(), sa.ForeignKey("seasons.id"), nullable=False),
        sa.Column("game_number", sa.Integer(), nullable=False),
        sa.Column("start_time", UTCDateTime(), nullable=True),
        sa.Column("end_time", UTCDateTime(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
    )
    op.create_index("ix_games_season_id", "games", ["season_id"])
    op.create_index("ix_games_game_number", "games", ["game_number"], unique=True)

    for table, money_column, time_column, constraint in (
        ("game_buy_ins", "buy_in_amount", "buy_in_time", "uq_game_buy_ins_game_season_player"),
        ("game_results", "winnings", "created_at", "uq_game_results_game_season_player"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False),
            sa.Column(
                "season_player_id",
                sa.Integer(),
                sa.ForeignKey("season_players.id"),
                nullable=False,
            ),
            sa.Column(money_column, MONEY, nullable=False),
            sa.Column(time_column, UTCDateTime(), nullable=False),
            sa.UniqueConstraint("game_id", "season_player_id", name=constraint),
        )
        op.create_index(f"ix_{table}_game_id", table, ["game_id"])
        op.create_index(f"ix_{table}_season_player_id", table, ["season_player_id"])

    op.create_table(
        "player_participations",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False),
        sa.Column(
            "season_player_id",
            sa.Integer(),
            sa.ForeignKey("season_players.id"),
            nullable=False,
        ),
        sa.Column("participated", sa.Boolean(), nullable=False),
        sa.Column("participation_time", UTCDateTime(), nullable=True),
        sa.UniqueConstraint(
            "game_id",
            "season_player_id",
            name="uq_player_participations_game_season_player",
        ),
    )
    op.create_index(
        "ix_player_participations_game_id", "player_participations", ["game_id"]
    )
    op.create_index(
        "ix_player_participations_season_player_id",
        "player_participations",
        ["season_player_id"],
    )


def downgrade() -> None:
    op.drop_table("player_participations")
    op.drop_table("game_results")
    op.drop_table("game_buy_ins")
    op.drop_table("games")
    op.drop_table("season_players")
    op.drop_table("seasons")
    op.drop_table("players")
