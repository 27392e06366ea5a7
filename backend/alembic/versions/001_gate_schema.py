"""Gate schema: pass types, bookings, booking passes, entry logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pass_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("max_people", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("price >= 0", name="check_pass_type_price_non_negative"),
        sa.CheckConstraint("max_people > 0", name="check_pass_type_max_people_positive"),
    )
    op.create_index("ix_pass_types_id", "pass_types", ["id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_code", sa.String(64), nullable=False, unique=True),
        sa.Column("pass_type_id", sa.Integer(), sa.ForeignKey("pass_types.id"), nullable=True),
        sa.Column("buyer_name", sa.String(255), nullable=False),
        sa.Column("buyer_phone", sa.String(20), nullable=True),
        sa.Column("total_people", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("people_entered", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("payment_mode", sa.String(20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scanned_by", sa.String(100), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("people_entered >= 0", name="check_booking_people_entered_non_negative"),
        sa.CheckConstraint(
            "payment_status IN ('Pending', 'Paid', 'Refunded')",
            name="check_booking_payment_status",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    # Sibling lookup at the gate is an exact match on phone
    op.create_index("ix_bookings_buyer_phone", "bookings", ["buyer_phone"])

    op.create_table(
        "booking_passes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id", sa.Integer(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("pass_type_name", sa.String(100), nullable=False),
        sa.Column("people_count", sa.Integer(), nullable=False),
        sa.Column("people_entered", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("people_count > 0", name="check_booking_pass_people_count_positive"),
        sa.CheckConstraint("people_entered >= 0", name="check_booking_pass_people_entered_non_negative"),
    )
    op.create_index("ix_booking_passes_id", "booking_passes", ["id"])
    op.create_index("ix_booking_passes_booking_id", "booking_passes", ["booking_id"])

    op.create_table(
        "entry_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id", sa.Integer(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("scanned_by", sa.String(100), nullable=False),
        sa.Column("people_entered", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("scanned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('Checked-in', 'Partially Checked-in', 'Denied')",
            name="check_entry_log_status",
        ),
    )
    op.create_index("ix_entry_logs_id", "entry_logs", ["id"])
    op.create_index("ix_entry_logs_booking_id", "entry_logs", ["booking_id"])
    # Log view reads newest first
    op.create_index("ix_entry_logs_scanned_at", "entry_logs", ["scanned_at"])


def downgrade() -> None:
    op.drop_table("entry_logs")
    op.drop_table("booking_passes")
    op.drop_table("bookings")
    op.drop_table("pass_types")
