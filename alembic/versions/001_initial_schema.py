"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column(
            "state",
            sa.Enum("waiting", "active", "finished", name="roomstate"),
            nullable=False,
        ),
        sa.Column(
            "bounds_policy",
            sa.Enum("fixed", "dynamic", name="boundspolicy"),
            nullable=False,
        ),
        sa.Column("grid_min_x", sa.Integer(), nullable=False),
        sa.Column("grid_max_x", sa.Integer(), nullable=False),
        sa.Column("grid_min_y", sa.Integer(), nullable=False),
        sa.Column("grid_max_y", sa.Integer(), nullable=False),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rooms_owner_id"), "rooms", ["owner_id"], unique=False)

    op.create_table(
        "room_players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("seat", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "user_id", name="uq_room_players_room_user"),
        sa.UniqueConstraint("room_id", "seat", name="uq_room_players_room_seat"),
    )
    op.create_index(op.f("ix_room_players_id"), "room_players", ["id"], unique=False)
    op.create_index(op.f("ix_room_players_room_id"), "room_players", ["room_id"], unique=False)
    op.create_index(op.f("ix_room_players_user_id"), "room_players", ["user_id"], unique=False)

    op.create_table(
        "bag_tiles",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("letter", sa.String(length=1), nullable=False),
        sa.Column("is_joker", sa.Boolean(), nullable=False),
        sa.Column("drawn_by", sa.Integer(), nullable=True),
        sa.Column("drawn_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"]),
        sa.ForeignKeyConstraint(["drawn_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "seq", name="uq_bag_tiles_room_seq"),
    )
    op.create_index(op.f("ix_bag_tiles_id"), "bag_tiles", ["id"], unique=False)
    op.create_index(op.f("ix_bag_tiles_room_id"), "bag_tiles", ["room_id"], unique=False)

    op.create_table(
        "rack_tiles",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("bag_seq", sa.Integer(), nullable=False),
        sa.Column("idx", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "bag_seq", name="uq_rack_tiles_room_seq"),
        sa.UniqueConstraint("room_id", "user_id", "idx", name="uq_rack_tiles_room_user_idx"),
    )
    op.create_index(op.f("ix_rack_tiles_id"), "rack_tiles", ["id"], unique=False)
    op.create_index(op.f("ix_rack_tiles_room_id"), "rack_tiles", ["room_id"], unique=False)
    op.create_index(op.f("ix_rack_tiles_user_id"), "rack_tiles", ["user_id"], unique=False)

    op.create_table(
        "board_tiles",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("bag_seq", sa.Integer(), nullable=False),
        sa.Column("x", sa.Integer(), nullable=False),
        sa.Column("y", sa.Integer(), nullable=False),
        sa.Column("as_letter", sa.String(length=1), nullable=False),
        sa.Column("locked", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "bag_seq", name="uq_board_tiles_room_seq"),
        sa.UniqueConstraint("room_id", "user_id", "x", "y", name="uq_board_tiles_room_user_cell"),
    )
    op.create_index(op.f("ix_board_tiles_id"), "board_tiles", ["id"], unique=False)
    op.create_index(op.f("ix_board_tiles_room_id"), "board_tiles", ["room_id"], unique=False)
    op.create_index(op.f("ix_board_tiles_user_id"), "board_tiles", ["user_id"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column(
            "type",
            sa.Enum("start", "place", "move", "unplace", "mixmo", "finish", name="eventtype"),
            nullable=False,
        ),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_events_id"), "events", ["id"], unique=False)
    op.create_index(op.f("ix_events_room_id"), "events", ["room_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_events_room_id"), table_name="events")
    op.drop_index(op.f("ix_events_id"), table_name="events")
    op.drop_table("events")

    op.drop_index(op.f("ix_board_tiles_user_id"), table_name="board_tiles")
    op.drop_index(op.f("ix_board_tiles_room_id"), table_name="board_tiles")
    op.drop_index(op.f("ix_board_tiles_id"), table_name="board_tiles")
    op.drop_table("board_tiles")

    op.drop_index(op.f("ix_rack_tiles_user_id"), table_name="rack_tiles")
    op.drop_index(op.f("ix_rack_tiles_room_id"), table_name="rack_tiles")
    op.drop_index(op.f("ix_rack_tiles_id"), table_name="rack_tiles")
    op.drop_table("rack_tiles")

    op.drop_index(op.f("ix_bag_tiles_room_id"), table_name="bag_tiles")
    op.drop_index(op.f("ix_bag_tiles_id"), table_name="bag_tiles")
    op.drop_table("bag_tiles")

    op.drop_index(op.f("ix_room_players_user_id"), table_name="room_players")
    op.drop_index(op.f("ix_room_players_room_id"), table_name="room_players")
    op.drop_index(op.f("ix_room_players_id"), table_name="room_players")
    op.drop_table("room_players")

    op.drop_index(op.f("ix_rooms_owner_id"), table_name="rooms")
    op.drop_table("rooms")

    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    op.execute("DROP TYPE IF EXISTS eventtype")
    op.execute("DROP TYPE IF EXISTS boundspolicy")
    op.execute("DROP TYPE IF EXISTS roomstate")
