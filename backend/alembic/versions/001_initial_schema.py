"""Initial schema: sports, profiles, teams, registrations, tournaments, brackets, fixtures

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sport",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("is_team_sport", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sport_name", "sport", ["name"], unique=True)

    op.create_table(
        "profile",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("assigned_sports", sa.JSON(), nullable=True),
        sa.Column("assigned_venues", sa.JSON(), nullable=True),
        sa.Column("moderator_notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profile_email", "profile", ["email"], unique=True)

    op.create_table(
        "registrationsetting",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sport_id", sa.Integer(), nullable=False),
        sa.Column("registration_open", sa.Boolean(), nullable=False),
        sa.Column("registration_start", sa.DateTime(), nullable=True),
        sa.Column("registration_end", sa.DateTime(), nullable=True),
        sa.Column("min_team_size", sa.Integer(), nullable=True),
        sa.Column("max_team_size", sa.Integer(), nullable=True),
        sa.Column("allow_mixed_gender", sa.Boolean(), nullable=False),
        sa.Column("allow_mixed_department", sa.Boolean(), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), nullable=False),
        sa.Column("max_registrations_per_sport", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sport_id"], ["sport.id"]),
        sa.UniqueConstraint("sport_id"),
    )

    op.create_table(
        "teamregistration",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("sport_id", sa.Integer(), nullable=False),
        sa.Column("team_name", sa.String(), nullable=False),
        sa.Column("department", sa.String(), nullable=False),
        sa.Column("semester", sa.String(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("captain_name", sa.String(), nullable=False),
        sa.Column("captain_contact", sa.String(), nullable=False),
        sa.Column("captain_email", sa.String(), nullable=False),
        sa.Column("members", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("admin_notes", sa.String(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profile.id"]),
        sa.ForeignKeyConstraint(["sport_id"], ["sport.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["profile.id"]),
    )
    op.create_index("ix_teamregistration_user_id", "teamregistration", ["user_id"])
    op.create_index("ix_teamregistration_sport_id", "teamregistration", ["sport_id"])

    op.create_table(
        "individualregistration",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("sport_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("department", sa.String(), nullable=False),
        sa.Column("semester", sa.String(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("contact_number", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("admin_notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profile.id"]),
        sa.ForeignKeyConstraint(["sport_id"], ["sport.id"]),
    )
    op.create_index("ix_individualregistration_user_id", "individualregistration", ["user_id"])
    op.create_index("ix_individualregistration_sport_id", "individualregistration", ["sport_id"])

    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sport_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("department", sa.String(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("team_type", sa.String(), nullable=False),
        sa.Column("captain_name", sa.String(), nullable=True),
        sa.Column("captain_contact", sa.String(), nullable=True),
        sa.Column("captain_email", sa.String(), nullable=True),
        sa.Column("original_registration_id", sa.Integer(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sport_id"], ["sport.id"]),
        sa.ForeignKeyConstraint(["original_registration_id"], ["teamregistration.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["profile.id"]),
        sa.UniqueConstraint("sport_id", "name", name="uq_sport_team_name"),
    )
    op.create_index("ix_team_sport_id", "team", ["sport_id"])

    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("sport_id", sa.Integer(), nullable=False),
        sa.Column("tournament_type", sa.String(), nullable=False),
        sa.Column("max_teams", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sport_id"], ["sport.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["team.id"]),
    )
    op.create_index("ix_tournament_sport_id", "tournament", ["sport_id"])

    op.create_table(
        "tournamentteam",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("seed", sa.Integer(), nullable=False),
        sa.Column("bracket_position", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
        sa.UniqueConstraint("tournament_id", "seed", name="uq_tournament_seed"),
        sa.UniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),
    )
    op.create_index("ix_tournamentteam_tournament_id", "tournamentteam", ["tournament_id"])

    op.create_table(
        "tournamentround",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("round_name", sa.String(), nullable=False),
        sa.Column("total_matches", sa.Integer(), nullable=False),
        sa.Column("completed_matches", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "round_number", name="uq_tournament_round_number"),
    )
    op.create_index("ix_tournamentround_tournament_id", "tournamentround", ["tournament_id"])

    op.create_table(
        "fixture",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sport_id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=True),
        sa.Column("tournament_round_id", sa.Integer(), nullable=True),
        sa.Column("bracket_position", sa.Integer(), nullable=True),
        sa.Column("team_a_id", sa.Integer(), nullable=True),
        sa.Column("team_b_id", sa.Integer(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(), nullable=True),
        sa.Column("venue", sa.String(), nullable=True),
        sa.Column("team_a_score", sa.Integer(), nullable=True),
        sa.Column("team_b_score", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("extra", sa.JSON(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sport_id"], ["sport.id"]),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["tournament_round_id"], ["tournamentround.id"]),
        sa.ForeignKeyConstraint(["team_a_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["team_b_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["updated_by"], ["profile.id"]),
        sa.UniqueConstraint("tournament_round_id", "bracket_position", name="uq_round_bracket_position"),
    )
    op.create_index("ix_fixture_sport_id", "fixture", ["sport_id"])
    op.create_index("ix_fixture_tournament_id", "fixture", ["tournament_id"])
    op.create_index("ix_fixture_tournament_round_id", "fixture", ["tournament_round_id"])

    op.create_table(
        "matchupdate",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("fixture_id", sa.Integer(), nullable=False),
        sa.Column("update_type", sa.String(), nullable=False),
        sa.Column("change_type", sa.String(), nullable=True),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("media_url", sa.String(), nullable=True),
        sa.Column("prev_team_a_score", sa.Integer(), nullable=True),
        sa.Column("prev_team_b_score", sa.Integer(), nullable=True),
        sa.Column("prev_status", sa.String(), nullable=True),
        sa.Column("new_team_a_score", sa.Integer(), nullable=True),
        sa.Column("new_team_b_score", sa.Integer(), nullable=True),
        sa.Column("new_status", sa.String(), nullable=True),
        sa.Column("reverted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["fixture_id"], ["fixture.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["profile.id"]),
    )
    op.create_index("ix_matchupdate_fixture_id", "matchupdate", ["fixture_id"])


def downgrade() -> None:
    op.drop_table("matchupdate")
    op.drop_table("fixture")
    op.drop_table("tournamentround")
    op.drop_table("tournamentteam")
    op.drop_table("tournament")
    op.drop_table("team")
    op.drop_table("individualregistration")
    op.drop_table("teamregistration")
    op.drop_table("registrationsetting")
    op.drop_table("profile")
    op.drop_table("sport")
