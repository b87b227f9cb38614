"""Create tours, students, registrations, settings and users tables."""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20251101_create_campus_tours_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "tours",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("registered", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("checked_in", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status_override", sa.String(20), nullable=True),
        sa.Column("paused", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("canceled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("capacity >= 1", name="ck_tours_capacity_positive"),
        sa.CheckConstraint("registered >= 0 AND registered <= capacity",
                           name="ck_tours_registered_within_capacity"),
        sa.CheckConstraint("checked_in >= 0 AND checked_in <= registered",
                           name="ck_tours_checked_in_within_registered"),
    )
    op.create_index("ix_tours_start_time", "tours", ["start_time"])

    op.create_table(
        "students",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_email", "students", ["email"], unique=True)

    op.create_table(
        "registrations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("tour_id", sa.String(36), sa.ForeignKey("tours.id"), nullable=False),
        sa.Column("code", sa.String(12), nullable=False),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "tour_id", name="unique_student_tour"),
    )
    op.create_index("ix_registrations_student_id", "registrations", ["student_id"])
    op.create_index("ix_registrations_tour_id", "registrations", ["tour_id"])
    op.create_index("ix_registrations_code", "registrations", ["code"])

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("max_tours_per_student", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("filling_fast_threshold", sa.Float(), nullable=False, server_default="0.25"),
        sa.Column("announcement", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(80), nullable=False),
        sa.Column("email", sa.String(120), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("Admin", "Staff", name="user_role"), nullable=False,
                  server_default="Staff"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )


def downgrade():
    op.drop_table("users")
    op.drop_table("settings")
    op.drop_index("ix_registrations_code", table_name="registrations")
    op.drop_index("ix_registrations_tour_id", table_name="registrations")
    op.drop_index("ix_registrations_student_id", table_name="registrations")
    op.drop_table("registrations")
    op.drop_index("ix_students_email", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_tours_start_time", table_name="tours")
    op.drop_table("tours")
