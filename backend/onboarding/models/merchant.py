from sqlalchemy import Boolean, Column, Date, DateTime, Numeric, SmallInteger, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from onboarding.core.database import Base
from onboarding.models.codes import MerchantStatus


class Merchant(Base):
    """Aggregate root; owns every onboarding child row."""

    __tablename__ = "merchants"

    id = Column(String(36), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    # Entity information
    entity_type = Column(SmallInteger, nullable=False)
    legal_name = Column(String(255), nullable=False)
    dba_name = Column(String(255), nullable=True)  # business / trading name
    ein = Column(String(20), nullable=True)
    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    zip = Column(String(20), nullable=False)
    country = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    website = Column(String(255), nullable=True)
    # Business profile
    tc_version = Column(String(10), nullable=False)
    currency = Column(String(3), nullable=False)
    mcc = Column(String(4), nullable=False)
    is_new = Column(Boolean, default=True, nullable=False)
    annual_cc_sales = Column(Numeric(15, 2), nullable=True)
    avg_ticket = Column(Numeric(10, 2), nullable=True)
    established_date = Column(Date, nullable=True)
    # Lifecycle, verification and risk
    status = Column(SmallInteger, default=int(MerchantStatus.new), nullable=False, index=True)
    verification_status = Column(SmallInteger, default=0, nullable=False)
    risk_score = Column(SmallInteger, nullable=True)
    approval_date = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(255), nullable=True)

    # relationships
    bank_accounts = relationship(
        "MerchantBankAccount", back_populates="merchant", cascade="all, delete-orphan"
    )
    members = relationship("MerchantMember", back_populates="merchant", cascade="all, delete-orphan")
    documents = relationship("MerchantDocument", back_populates="merchant", cascade="all, delete-orphan")
    notes = relationship("MerchantNote", back_populates="merchant", cascade="all, delete-orphan")
    onboarding_status = relationship(
        "MerchantOnboardingStatus",
        back_populates="merchant",
        uselist=False,
        cascade="all, delete-orphan",
    )
