"""Initial schema: merchants, onboarding status, bank accounts, members, documents, notes, audit log.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "merchants",
        sa.Column("id", sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column("entity_type", sa.SmallInteger(), nullable=False),
        sa.Column("legal_name", sa.String(255), nullable=False),
        sa.Column("dba_name", sa.String(255), nullable=True),
        sa.Column("ein", sa.String(20), nullable=True),
        sa.Column("address1", sa.String(255), nullable=False),
        sa.Column("address2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(50), nullable=False),
        sa.Column("zip", sa.String(20), nullable=False),
        sa.Column("country", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("tc_version", sa.String(10), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("mcc", sa.String(4), nullable=False),
        sa.Column("is_new", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("annual_cc_sales", sa.Numeric(15, 2), nullable=True),
        sa.Column("avg_ticket", sa.Numeric(10, 2), nullable=True),
        sa.Column("established_date", sa.Date(), nullable=True),
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("verification_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("risk_score", sa.SmallInteger(), nullable=True),
        sa.Column("approval_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(255), nullable=True),
    )
    op.create_index("ix_merchants_email", "merchants", ["email"], unique=True)
    op.create_index("ix_merchants_status", "merchants", ["status"])

    op.create_table(
        "merchant_onboarding_status",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("current_step", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("entity_info_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("bank_info_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("owner_info_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("documents_uploaded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("agreement_accepted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("kyc_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("aml_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("underwriting_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("is_automated_onboarding", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_merchant_onboarding_status_merchant_id", "merchant_onboarding_status", ["merchant_id"], unique=True
    )

    op.create_table(
        "merchant_bank_accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("account_method", sa.SmallInteger(), nullable=False),
        sa.Column("account_number", sa.String(255), nullable=False),
        sa.Column("routing_number", sa.String(50), nullable=False),
        sa.Column("account_name", sa.String(255), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("verification_date", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_merchant_bank_accounts_merchant_id", "merchant_bank_accounts", ["merchant_id"])
    op.create_index(
        "uq_merchant_bank_accounts_primary",
        "merchant_bank_accounts",
        ["merchant_id"],
        unique=True,
        postgresql_where=sa.text("is_primary"),
        sqlite_where=sa.text("is_primary = 1"),
    )

    op.create_table(
        "merchant_members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        *_timestamps(),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("ssn", sa.String(20), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("ownership_percentage", sa.SmallInteger(), nullable=False),
        sa.Column("significant_responsibility", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("politically_exposed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("address1", sa.String(255), nullable=False),
        sa.Column("address2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(50), nullable=False),
        sa.Column("zip", sa.String(20), nullable=False),
        sa.Column("country", sa.String(50), nullable=False),
        sa.Column("id_verification_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("background_check_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_merchant_members_merchant_id", "merchant_members", ["merchant_id"])
    op.create_index(
        "uq_merchant_members_primary",
        "merchant_members",
        ["merchant_id"],
        unique=True,
        postgresql_where=sa.text("is_primary"),
        sqlite_where=sa.text("is_primary = 1"),
    )

    op.create_table(
        "merchant_documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("member_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.Column("document_type", sa.SmallInteger(), nullable=False),
        sa.Column("document_name", sa.String(255), nullable=False),
        sa.Column("document_path", sa.String(1024), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("verification_status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("verification_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["merchant_members.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_merchant_documents_merchant_id", "merchant_documents", ["merchant_id"])
    op.create_index("ix_merchant_documents_member_id", "merchant_documents", ["member_id"])

    op.create_table(
        "merchant_notes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("note_text", sa.Text(), nullable=False),
        sa.Column("note_type", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_merchant_notes_merchant_id", "merchant_notes", ["merchant_id"])

    # merchant_id is not a foreign key: the DELETE entry outlives its merchant
    op.create_table(
        "merchant_audit_log",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("table_name", sa.String(50), nullable=False),
        sa.Column("record_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(10), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("changes", sa.JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    )
    op.create_index("ix_merchant_audit_log_merchant_id", "merchant_audit_log", ["merchant_id"])
    op.create_index("ix_merchant_audit_log_created_at", "merchant_audit_log", ["created_at"])
    op.create_index("ix_merchant_audit_log_table_name", "merchant_audit_log", ["table_name"])
    op.create_index("ix_merchant_audit_log_record_id", "merchant_audit_log", ["record_id"])
    op.create_index("ix_merchant_audit_log_changed_by", "merchant_audit_log", ["changed_by"])


def downgrade() -> None:
    op.drop_table("merchant_audit_log")
    op.drop_table("merchant_notes")
    op.drop_table("merchant_documents")
    op.drop_table("merchant_members")
    op.drop_table("merchant_bank_accounts")
    op.drop_table("merchant_onboarding_status")
    op.drop_index("ix_merchants_status", table_name="merchants")
    op.drop_index("ix_merchants_email", table_name="merchants")
    op.drop_table("merchants")
