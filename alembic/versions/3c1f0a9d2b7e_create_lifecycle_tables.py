"""create lifecycle tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-16 09:12:44.210331

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "drivers",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("vehicle_reg", sa.String(), nullable=False),
        sa.Column("vehicle_type", sa.String(), nullable=False, server_default="van"),
        sa.Column("vehicle_fuel_type", sa.String(), nullable=False, server_default="diesel"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_drivers_company_id", "drivers", ["company_id"], unique=False)
    op.create_index("ix_drivers_user_id", "drivers", ["user_id"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("booking_number", sa.String(), nullable=False, unique=True),
        sa.Column("status", sa.String(), nullable=False, server_default="created"),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("client_name", sa.String(), nullable=False),
        sa.Column("reseller_id", sa.String(), nullable=True),
        sa.Column("reseller_name", sa.String(), nullable=True),
        sa.Column("site_id", sa.String(), nullable=True),
        sa.Column("site_name", sa.String(), nullable=False),
        sa.Column("site_address", sa.String(), nullable=False),
        sa.Column("postcode", sa.String(), nullable=False),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("estimated_co2e", sa.Float(), nullable=False, server_default="0"),
        sa.Column("estimated_buyback", sa.Float(), nullable=False, server_default="0"),
        sa.Column("charity_percent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("driver_id", sa.String(), nullable=True),
        sa.Column("driver_name", sa.String(), nullable=True),
        sa.Column("scheduled_by", sa.String(), nullable=True),
        sa.Column("completed_by", sa.String(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("collected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sanitised_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("job_id", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("charity_percent BETWEEN 0 AND 100", name="ck_bookings_charity_percent_range"),
    )
    op.create_index("ix_bookings_company_id", "bookings", ["company_id"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)
    op.create_index("ix_bookings_client_id", "bookings", ["client_id"], unique=False)
    op.create_index("ix_bookings_reseller_id", "bookings", ["reseller_id"], unique=False)
    op.create_index("ix_bookings_driver_id", "bookings", ["driver_id"], unique=False)

    op.create_table(
        "booking_assets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("booking_id", sa.String(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("category_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_booking_assets_quantity_positive"),
    )
    op.create_index("ix_booking_assets_booking_id", "booking_assets", ["booking_id"], unique=False)

    op.create_table(
        "jobs",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("erp_job_number", sa.String(), nullable=False, unique=True),
        sa.Column("booking_id", sa.String(), sa.ForeignKey("bookings.id"), nullable=False, unique=True),
        sa.Column("status", sa.String(), nullable=False, server_default="booked"),
        sa.Column("driver_id", sa.String(), nullable=True),
        sa.Column("driver_name", sa.String(), nullable=True),
        sa.Column("vehicle_reg", sa.String(), nullable=True),
        sa.Column("vehicle_type", sa.String(), nullable=True),
        sa.Column("driver_phone", sa.String(), nullable=True),
        sa.Column("client_name", sa.String(), nullable=False),
        sa.Column("site_name", sa.String(), nullable=False),
        sa.Column("site_address", sa.String(), nullable=False),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("co2e_saved", sa.Float(), nullable=False, server_default="0"),
        sa.Column("buyback_value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("charity_percent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("travel_emissions", sa.Float(), nullable=False, server_default="0"),
        sa.Column("evidence", sa.JSON(), nullable=False),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_jobs_company_id", "jobs", ["company_id"], unique=False)
    op.create_index("ix_jobs_status", "jobs", ["status"], unique=False)
    op.create_index("ix_jobs_driver_id", "jobs", ["driver_id"], unique=False)

    op.create_table(
        "job_assets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("job_id", sa.String(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("sanitised", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sanitisation_record_id", sa.String(), nullable=True),
        sa.Column("grade", sa.String(), nullable=True),
        sa.Column("resale_value", sa.Integer(), nullable=True),
        sa.Column("grading_record_id", sa.String(), nullable=True),
    )
    op.create_index("ix_job_assets_job_id", "job_assets", ["job_id"], unique=False)

    op.create_table(
        "sanitisation_records",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.String(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("asset_id", sa.String(), nullable=False),
        sa.Column("method", sa.String(), nullable=False),
        sa.Column("method_details", sa.String(), nullable=True),
        sa.Column("performed_by", sa.String(), nullable=False),
        sa.Column("certificate_id", sa.String(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sanitisation_records_company_id", "sanitisation_records", ["company_id"], unique=False)
    op.create_index("ix_sanitisation_records_booking", "sanitisation_records", ["company_id", "booking_id"], unique=False)

    op.create_table(
        "grading_records",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.String(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("asset_id", sa.String(), nullable=False),
        sa.Column("asset_category", sa.String(), nullable=False),
        sa.Column("grade", sa.String(), nullable=False),
        sa.Column("resale_value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("condition", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("graded_by", sa.String(), nullable=False),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_grading_records_company_id", "grading_records", ["company_id"], unique=False)
    op.create_index("ix_grading_records_booking", "grading_records", ["company_id", "booking_id"], unique=False)

    op.create_table(
        "commissions",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.String(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("booking_number", sa.String(), nullable=False),
        sa.Column("job_id", sa.String(), nullable=True),
        sa.Column("reseller_id", sa.String(), nullable=False),
        sa.Column("reseller_name", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("client_name", sa.String(), nullable=False),
        sa.Column("commission_percent", sa.Float(), nullable=False),
        sa.Column("job_value", sa.Float(), nullable=False),
        sa.Column("commission_amount", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("period", sa.String(), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("booking_id", name="uq_commissions_booking"),
    )
    op.create_index("ix_commissions_company_id", "commissions", ["company_id"], unique=False)
    op.create_index("ix_commissions_reseller_id", "commissions", ["reseller_id"], unique=False)
    op.create_index("ix_commissions_status", "commissions", ["status"], unique=False)
    op.create_index("ix_commissions_period", "commissions", ["period"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("invoice_number", sa.String(), nullable=False, unique=True),
        sa.Column("booking_id", sa.String(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("job_id", sa.String(), nullable=True),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("client_name", sa.String(), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("subtotal", sa.Integer(), nullable=False),
        sa.Column("tax", sa.Integer(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("booking_id", name="uq_invoices_booking"),
    )
    op.create_index("ix_invoices_company_id", "invoices", ["company_id"], unique=False)
    op.create_index("ix_invoices_client_id", "invoices", ["client_id"], unique=False)
    op.create_index("ix_invoices_status", "invoices", ["status"], unique=False)

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("invoice_id", sa.String(), sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Integer(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_invoice_items_invoice_id", table_name="invoice_items")
    op.drop_table("invoice_items")

    op.drop_index("ix_invoices_status", table_name="invoices")
    op.drop_index("ix_invoices_client_id", table_name="invoices")
    op.drop_index("ix_invoices_company_id", table_name="invoices")
    op.drop_table("invoices")

    op.drop_index("ix_commissions_period", table_name="commissions")
    op.drop_index("ix_commissions_status", table_name="commissions")
    op.drop_index("ix_commissions_reseller_id", table_name="commissions")
    op.drop_index("ix_commissions_company_id", table_name="commissions")
    op.drop_table("commissions")

    op.drop_index("ix_grading_records_booking", table_name="grading_records")
    op.drop_index("ix_grading_records_company_id", table_name="grading_records")
    op.drop_table("grading_records")

    op.drop_index("ix_sanitisation_records_booking", table_name="sanitisation_records")
    op.drop_index("ix_sanitisation_records_company_id", table_name="sanitisation_records")
    op.drop_table("sanitisation_records")

    op.drop_index("ix_job_assets_job_id", table_name="job_assets")
    op.drop_table("job_assets")

    op.drop_index("ix_jobs_driver_id", table_name="jobs")
    op.drop_index("ix_jobs_status", table_name="jobs")
    op.drop_index("ix_jobs_company_id", table_name="jobs")
    op.drop_table("jobs")

    op.drop_index("ix_booking_assets_booking_id", table_name="booking_assets")
    op.drop_table("booking_assets")

    op.drop_index("ix_bookings_driver_id", table_name="bookings")
    op.drop_index("ix_bookings_reseller_id", table_name="bookings")
    op.drop_index("ix_bookings_client_id", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_company_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_drivers_user_id", table_name="drivers")
    op.drop_index("ix_drivers_company_id", table_name="drivers")
    op.drop_table("drivers")
