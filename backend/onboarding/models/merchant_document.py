from sqlalchemy import Column, DateTime, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from onboarding.core.database import Base
from onboarding.models.codes import DocumentVerificationStatus


class MerchantDocument(Base):
    __tablename__ = "merchant_documents"

    id = Column(String(36), primary_key=True, index=True)
    merchant_id = Column(
        String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id = Column(
        String(36), ForeignKey("merchant_members.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    document_type = Column(SmallInteger, nullable=False)
    document_name = Column(String(255), nullable=False)
    document_path = Column(String(1024), nullable=False)  # storage path of the uploaded file
    mime_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)  # bytes
    verification_status = Column(
        SmallInteger, default=int(DocumentVerificationStatus.pending), nullable=False
    )
    verification_date = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(255), nullable=True)

    merchant = relationship("Merchant", back_populates="documents")
    member = relationship("MerchantMember", back_populates="documents")
