from sqlalchemy import Boolean, Column, DateTime, ForeignKey, SmallInteger, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from onboarding.core.database import Base
from onboarding.models.codes import VerificationStatus

# The six section flags; is_completed is true iff all of them are.
SECTION_FLAGS = (
    "entity_info_completed",
    "bank_info_completed",
    "owner_info_completed",
    "documents_uploaded",
    "verification_completed",
    "agreement_accepted",
)


class MerchantOnboardingStatus(Base):
    __tablename__ = "merchant_onboarding_status"

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(
        String(36),
        ForeignKey("merchants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    current_step = Column(SmallInteger, default=1, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completion_date = Column(DateTime(timezone=True), nullable=True)
    # Section completion
    entity_info_completed = Column(Boolean, default=False, nullable=False)
    bank_info_completed = Column(Boolean, default=False, nullable=False)
    owner_info_completed = Column(Boolean, default=False, nullable=False)
    documents_uploaded = Column(Boolean, default=False, nullable=False)
    verification_completed = Column(Boolean, default=False, nullable=False)
    agreement_accepted = Column(Boolean, default=False, nullable=False)
    # Verification sub-statuses
    kyc_status = Column(SmallInteger, default=int(VerificationStatus.pending), nullable=False)
    aml_status = Column(SmallInteger, default=int(VerificationStatus.pending), nullable=False)
    underwriting_status = Column(SmallInteger, default=int(VerificationStatus.pending), nullable=False)
    is_automated_onboarding = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)

    merchant = relationship("Merchant", back_populates="onboarding_status")

    def all_sections_completed(self) -> bool:
        return all(getattr(self, flag) for flag in SECTION_FLAGS)
