"""Initial booking engine schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

JSONB_TYPE = postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite")

user_role_enum = sa.Enum("ADMIN", "PROVIDER", "CUSTOMER", name="userrole")
user_status_enum = sa.Enum("ACTIVE", "SUSPENDED", name="userstatus")
service_kind_enum = sa.Enum("APPOINTMENT", "PRODUCT", name="servicekind")
booking_status_enum = sa.Enum(
    "PENDING",
    "ACCEPTED",
    "REJECTED",
    "COMPLETED",
    "CANCELLED",
    name="bookingstatus",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("full_name", sa.String(length=240), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "service_offerings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "provider_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("kind", service_kind_enum, nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "availabilities",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "provider_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("days", JSONB_TYPE, nullable=False),
        sa.Column("custom_dates", JSONB_TYPE, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "provider_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "service_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("service_offerings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("address", sa.String(length=512), nullable=True),
        sa.Column("notes", sa.String(length=1024), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_bookings_provider_start", "bookings", ["provider_id", "start_at"]
    )
    op.create_index("ix_bookings_user", "bookings", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_bookings_user", table_name="bookings")
    op.drop_index("ix_bookings_provider_start", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("availabilities")
    op.drop_table("service_offerings")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (
        booking_status_enum,
        service_kind_enum,
        user_status_enum,
        user_role_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
