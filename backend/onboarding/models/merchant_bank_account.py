from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, SmallInteger, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from onboarding.core.database import Base
from onboarding.models.codes import BankAccountStatus


class MerchantBankAccount(Base):
    __tablename__ = "merchant_bank_accounts"
    # At most one primary per merchant
    __table_args__ = (
        Index(
            "uq_merchant_bank_accounts_primary",
            "merchant_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary = 1"),
        ),
    )

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(
        String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    is_primary = Column(Boolean, default=False, nullable=False)
    account_method = Column(SmallInteger, nullable=False)
    account_number = Column(String(255), nullable=False)  # sensitive: mask in audit
    routing_number = Column(String(50), nullable=False)  # sensitive: mask in audit
    account_name = Column(String(255), nullable=True)
    currency = Column(String(3), nullable=False)
    status = Column(SmallInteger, default=int(BankAccountStatus.pending), nullable=False)
    verification_date = Column(DateTime(timezone=True), nullable=True)

    merchant = relationship("Merchant", back_populates="bank_accounts")
