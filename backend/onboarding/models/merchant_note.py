from sqlalchemy import Boolean, Column, DateTime, ForeignKey, SmallInteger, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from onboarding.core.database import Base


class MerchantNote(Base):
    __tablename__ = "merchant_notes"

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(
        String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    created_by = Column(String(255), nullable=False)
    note_text = Column(Text, nullable=False)
    note_type = Column(SmallInteger, default=0, nullable=False)
    is_internal = Column(Boolean, default=True, nullable=False)  # hidden from the merchant

    merchant = relationship("Merchant", back_populates="notes")
