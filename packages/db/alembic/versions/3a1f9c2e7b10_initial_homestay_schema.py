# This project was developed with assistance from AI tools.
"""initial homestay registration schema

Revision ID: 3a1f9c2e7b10
Revises:
Create Date: 2026-09-02 10:12:41.508113

"""

import sqlalchemy as sa
from alembic import op

revision = "3a1f9c2e7b10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "portal_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("keycloak_user_id", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("mobile", sa.String(20), nullable=True),
        sa.Column("aadhaar", sa.String(20), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("keycloak_user_id"),
    )
    op.create_index("ix_portal_users_keycloak_user_id", "portal_users", ["keycloak_user_id"])
    op.create_index("ix_portal_users_email", "portal_users", ["email"])
    op.create_index("ix_portal_users_mobile", "portal_users", ["mobile"])
    op.create_index("ix_portal_users_district", "portal_users", ["district"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_number", sa.String(50), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("application_kind", sa.String(50), nullable=False),
        sa.Column("parent_application_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="draft"),
        sa.Column("property_name", sa.String(255), nullable=False),
        sa.Column("district", sa.String(100), nullable=False),
        sa.Column("tehsil", sa.String(100), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("pincode", sa.String(10), nullable=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("total_rooms", sa.Integer(), nullable=False),
        sa.Column("requested_rooms", sa.Integer(), nullable=True),
        sa.Column("requested_category", sa.String(20), nullable=True),
        sa.Column("is_pangi_sub_division", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("certificate_validity_years", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("owner_name", sa.String(200), nullable=True),
        sa.Column("owner_mobile", sa.String(20), nullable=True),
        sa.Column("owner_email", sa.String(255), nullable=True),
        sa.Column("owner_aadhaar", sa.String(20), nullable=True),
        sa.Column("owner_gender", sa.String(10), nullable=True),
        sa.Column("base_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("validity_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("female_owner_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("pangi_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=True),
        sa.Column("revert_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dtdo_revert_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("correction_submission_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("da_id", sa.String(255), nullable=True),
        sa.Column("da_remarks", sa.Text(), nullable=True),
        sa.Column("da_forwarded_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("dtdo_id", sa.String(255), nullable=True),
        sa.Column("dtdo_remarks", sa.Text(), nullable=True),
        sa.Column("dtdo_review_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("clarification_requested", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("site_inspection_scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("site_inspection_completed_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("site_inspection_outcome", sa.String(50), nullable=True),
        sa.Column("site_inspection_notes", sa.Text(), nullable=True),
        sa.Column("certificate_number", sa.String(50), nullable=True),
        sa.Column("certificate_issued_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("certificate_expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["portal_users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["parent_application_id"], ["applications.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number"),
        sa.UniqueConstraint("certificate_number"),
    )
    op.create_index("ix_applications_application_number", "applications", ["application_number"])
    op.create_index("ix_applications_owner_id", "applications", ["owner_id"])
    op.create_index(
        "ix_applications_parent_application_id", "applications", ["parent_application_id"]
    )
    op.create_index("ix_applications_status", "applications", ["status"])
    op.create_index("ix_applications_district", "applications", ["district"])
    op.create_index("ix_applications_da_id", "applications", ["da_id"])
    op.create_index("ix_applications_dtdo_id", "applications", ["dtdo_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("doc_type", sa.String(50), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("file_path", sa.String(500), nullable=True),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("verification_status", sa.String(30), nullable=False, server_default="pending"),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("verified_by", sa.String(255), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_application_id", "documents", ["application_id"])

    op.create_table(
        "inspection_orders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("scheduled_by", sa.String(255), nullable=False),
        sa.Column("assigned_to", sa.String(255), nullable=False),
        sa.Column("district", sa.String(100), nullable=False),
        sa.Column("inspection_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("inspection_address", sa.Text(), nullable=True),
        sa.Column("special_instructions", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("owner_acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inspection_orders_application_id", "inspection_orders", ["application_id"])
    op.create_index("ix_inspection_orders_assigned_to", "inspection_orders", ["assigned_to"])
    op.create_index("ix_inspection_orders_district", "inspection_orders", ["district"])

    op.create_table(
        "inspection_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("inspection_order_id", sa.Integer(), nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("submitted_by", sa.String(255), nullable=False),
        sa.Column("actual_inspection_date", sa.Date(), nullable=False),
        sa.Column("room_count_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("actual_room_count", sa.Integer(), nullable=True),
        sa.Column(
            "category_meets_standards", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("recommended_category", sa.String(20), nullable=True),
        sa.Column("checklist", sa.JSON(), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("recommendation", sa.String(30), nullable=False),
        sa.Column(
            "early_inspection_override", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("early_inspection_reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(
            ["inspection_order_id"], ["inspection_orders.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("inspection_order_id"),
    )
    op.create_index(
        "ix_inspection_reports_application_id", "inspection_reports", ["application_id"]
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("purpose", sa.String(20), nullable=False, server_default="registration"),
        sa.Column("gateway", sa.String(50), nullable=False, server_default="himkosh"),
        sa.Column("transaction_id", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="initiated"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("gateway_response", sa.JSON(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transaction_id"),
    )
    op.create_index("ix_payments_application_id", "payments", ["application_id"])
    op.create_index("ix_payments_transaction_id", "payments", ["transaction_id"])

    op.create_table(
        "grievances",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ticket_number", sa.String(30), nullable=False),
        sa.Column("ticket_type", sa.String(30), nullable=False, server_default="owner_grievance"),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("assigned_to", sa.String(255), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("last_comment_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_read_by_owner", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_read_by_officer", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["portal_users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ticket_number"),
    )
    op.create_index("ix_grievances_ticket_number", "grievances", ["ticket_number"])
    op.create_index("ix_grievances_user_id", "grievances", ["user_id"])
    op.create_index("ix_grievances_application_id", "grievances", ["application_id"])
    op.create_index("ix_grievances_status", "grievances", ["status"])

    op.create_table(
        "grievance_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("grievance_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("author_role", sa.String(50), nullable=True),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["grievance_id"], ["grievances.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["portal_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_grievance_comments_grievance_id", "grievance_comments", ["grievance_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=True),
        sa.Column("grievance_id", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("channels", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["user_id"], ["portal_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_application_id", "notifications", ["application_id"])
    op.create_index("ix_notifications_grievance_id", "notifications", ["grievance_id"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "timestamp", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column("prev_hash", sa.String(64), nullable=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("user_role", sa.String(50), nullable=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=True),
        sa.Column("grievance_id", sa.Integer(), nullable=True),
        sa.Column("event_data", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_events_event_type", "audit_events", ["event_type"])
    op.create_index("ix_audit_events_application_id", "audit_events", ["application_id"])
    op.create_index("ix_audit_events_grievance_id", "audit_events", ["grievance_id"])

    op.create_table(
        "demo_data_manifest",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "seeded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column("config_hash", sa.String(64), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("demo_data_manifest")
    op.drop_table("audit_events")
    op.drop_table("notifications")
    op.drop_table("grievance_comments")
    op.drop_table("grievances")
    op.drop_table("payments")
    op.drop_table("inspection_reports")
    op.drop_table("inspection_orders")
    op.drop_table("documents")
    op.drop_table("applications")
    op.drop_table("portal_users")
