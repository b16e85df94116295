from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from onboarding.core.database import Base


class MerchantAuditLog(Base):
    """Append-only change record for one mutation of the merchant aggregate.

    merchant_id is indexed but deliberately not a foreign key: the DELETE
    entry for a removed merchant outlives the merchant row.
    """

    __tablename__ = "merchant_audit_log"

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    table_name = Column(String(50), nullable=False, index=True)
    record_id = Column(String(36), nullable=False, index=True)
    action = Column(String(10), nullable=False)  # INSERT, UPDATE, DELETE
    changed_by = Column(String(255), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)
    changes = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
