"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("photo_url", sa.String(length=512), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_phone_number", "users", ["phone_number"], unique=True)

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])
    op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"])

    op.create_table(
        "employee_roles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("permissions", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_employee_roles_slug", "employee_roles", ["slug"], unique=True)

    op.create_table(
        "employees",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("type", sa.String(length=12), nullable=False, server_default="admin"),
        sa.Column("role_id", sa.String(length=36), sa.ForeignKey("employee_roles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_online", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_employees_user_id", "employees", ["user_id"], unique=True)
    op.create_index("ix_employees_role_id", "employees", ["role_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_phone_number", "customers", ["phone_number"], unique=True)

    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("seats", sa.Integer(), nullable=False),
        sa.Column("primary_photo_url", sa.String(length=512), nullable=False),
        sa.Column("plate_number", sa.String(length=30), nullable=False, unique=True),
        sa.Column("color", sa.String(length=40), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "airports",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("code", sa.String(length=10), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_airports_code", "airports", ["code"], unique=True)

    op.create_table(
        "airport_pickup_ride_options",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("price_per_mile_ugx", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("price_per_mile_usd", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("photo_url", sa.String(length=512), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "airport_pickup_bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("fare", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="UGX"),
        sa.Column("airport_id", sa.String(length=36), sa.ForeignKey("airports.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("ride_option_id", sa.String(length=36), sa.ForeignKey("airport_pickup_ride_options.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("customer_id", sa.String(length=36), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("driver_id", sa.String(length=36), sa.ForeignKey("employees.id"), nullable=True),
        sa.Column("vehicle_id", sa.String(length=36), sa.ForeignKey("vehicles.id"), nullable=True),
        sa.Column("status", sa.String(length=40), nullable=False, server_default="pending_payment"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("drop_off_latitude", sa.Float(), nullable=False),
        sa.Column("drop_off_longitude", sa.Float(), nullable=False),
        sa.Column("drop_off_location_name", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_airport_pickup_bookings_airport_id", "airport_pickup_bookings", ["airport_id"])
    op.create_index("ix_airport_pickup_bookings_ride_option_id", "airport_pickup_bookings", ["ride_option_id"])
    op.create_index("ix_airport_pickup_bookings_customer_id", "airport_pickup_bookings", ["customer_id"])
    op.create_index("ix_airport_pickup_bookings_status", "airport_pickup_bookings", ["status"])

    op.create_table(
        "airport_pickup_booking_payments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_id", sa.String(length=36), sa.ForeignKey("airport_pickup_bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="UGX"),
        sa.Column("method", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("transaction_token", sa.String(length=120), nullable=True),
        sa.Column("gateway_reference", sa.String(length=120), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_airport_pickup_booking_payments_booking_id", "airport_pickup_booking_payments", ["booking_id"], unique=True)
    op.create_index("ix_airport_pickup_booking_payments_transaction_token", "airport_pickup_booking_payments", ["transaction_token"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("performed_by_id", sa.String(length=36), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("affected_resource_id", sa.String(length=64), nullable=True),
        sa.Column("affected_resource_type", sa.String(length=40), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_performed_by_id", "audit_logs", ["performed_by_id"])
    op.create_index("ix_audit_logs_affected_resource_id", "audit_logs", ["affected_resource_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("airport_pickup_booking_payments")
    op.drop_table("airport_pickup_bookings")
    op.drop_table("airport_pickup_ride_options")
    op.drop_table("airports")
    op.drop_table("vehicles")
    op.drop_table("customers")
    op.drop_table("employees")
    op.drop_table("employee_roles")
    op.drop_table("sessions")
    op.drop_table("users")
