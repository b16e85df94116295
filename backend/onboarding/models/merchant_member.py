from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, SmallInteger, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from onboarding.core.database import Base
from onboarding.models.codes import VerificationStatus


class MerchantMember(Base):
    """Beneficial owner / principal of a merchant."""

    __tablename__ = "merchant_members"
    # At most one primary per merchant
    __table_args__ = (
        Index(
            "uq_merchant_members_primary",
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
    title = Column(String(100), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    ssn = Column(String(20), nullable=False)  # sensitive: mask in audit
    date_of_birth = Column(Date, nullable=False)
    ownership_percentage = Column(SmallInteger, nullable=False)  # basis points, 0-10000
    significant_responsibility = Column(Boolean, default=False, nullable=False)
    politically_exposed = Column(Boolean, default=False, nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    # Address
    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    zip = Column(String(20), nullable=False)
    country = Column(String(50), nullable=False)
    # Identity verification
    id_verification_status = Column(SmallInteger, default=int(VerificationStatus.pending), nullable=False)
    background_check_status = Column(SmallInteger, default=int(VerificationStatus.pending), nullable=False)

    merchant = relationship("Merchant", back_populates="members")
    documents = relationship("MerchantDocument", back_populates="member")
