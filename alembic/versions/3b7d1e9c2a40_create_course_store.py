"""create users, courses, enrollments, payments and purchases

Revision ID: 3b7d1e9c2a40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7d1e9c2a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=True),
    )

    op.create_table(
        "courses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column(
            "instructor_name", sa.String(length=255), nullable=False, server_default=""
        ),
        sa.Column("instructor_email", sa.String(length=320), nullable=False),
        sa.Column("available_seats", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="pending"
        ),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("enrolled_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("available_seats >= 0", name="ck_courses_seats_nonneg"),
        sa.CheckConstraint("enrolled_count >= 0", name="ck_courses_enrolled_nonneg"),
    )
    op.create_index(
        "ix_courses_instructor_email", "courses", ["instructor_email"]
    )

    op.create_table(
        "enrolled_courses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        sa.Column("course_name", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.UniqueConstraint("user_email", "course_id", name="uq_enrolled_user_course"),
    )
    op.create_index(
        "ix_enrolled_courses_user_email", "enrolled_courses", ["user_email"]
    )

    op.create_table(
        "payments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        sa.Column("enrollment_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("transaction_id", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("seats_before", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_payments_user_email", "payments", ["user_email"])

    op.create_table(
        "purchased_courses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        sa.Column(
            "payment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("payments.id"),
            nullable=False,
        ),
        sa.Column("course_name", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("purchased_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "user_email", "course_id", name="uq_purchased_user_course"
        ),
    )
    op.create_index(
        "ix_purchased_courses_user_email", "purchased_courses", ["user_email"]
    )


def downgrade() -> None:
    op.drop_index("ix_purchased_courses_user_email", table_name="purchased_courses")
    op.drop_table("purchased_courses")
    op.drop_index("ix_payments_user_email", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_enrolled_courses_user_email", table_name="enrolled_courses")
    op.drop_table("enrolled_courses")
    op.drop_index("ix_courses_instructor_email", table_name="courses")
    op.drop_table("courses")
    op.drop_table("users")
