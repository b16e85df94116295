import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from onboarding.core.errors import NotFoundError, ValidationError
from onboarding.models.codes import AuditAction
from onboarding.models.merchant import Merchant
from onboarding.models.merchant_document import MerchantDocument
from onboarding.models.merchant_member import MerchantMember
from onboarding.services.audit_log import AuditLogWriter
from onboarding.services.persistence import (
    check_allowed,
    new_id,
    reject_blank_required,
    require_fields,
    snapshot,
    transaction,
)
from onboarding.services.primary import count_for_merchant
from onboarding.services.signals import SectionSignals

logger = logging.getLogger(__name__)

TABLE_NAME = "merchant_documents"

REQUIRED_FIELDS = ("merchant_id", "document_type", "document_name", "document_path", "mime_type", "file_size")
CREATE_FIELDS = REQUIRED_FIELDS + ("member_id",)
UPDATE_FIELDS = ("member_id", "document_type", "document_name", "document_path", "mime_type", "file_size")
VERIFICATION_FIELDS = ("verification_status", "verification_date", "verified_by")


class DocumentManager:
    def __init__(self, db: Session, audit: AuditLogWriter, signals: Optional[SectionSignals] = None):
        self.db = db
        self.audit = audit
        self.signals = signals

    def find_by_id(self, document_id: str) -> Optional[MerchantDocument]:
        return self.db.query(MerchantDocument).filter(MerchantDocument.id == document_id).first()

    def find_by_merchant(self, merchant_id: str) -> List[MerchantDocument]:
        return (
            self.db.query(MerchantDocument)
            .filter(MerchantDocument.merchant_id == merchant_id)
            .order_by(MerchantDocument.created_at.desc())
            .all()
        )

    def find_by_member(self, member_id: str) -> List[MerchantDocument]:
        return (
            self.db.query(MerchantDocument)
            .filter(MerchantDocument.member_id == member_id)
            .order_by(MerchantDocument.created_at.desc())
            .all()
        )

    def find_by_type(self, merchant_id: str, document_type: int) -> List[MerchantDocument]:
        return (
            self.db.query(MerchantDocument)
            .filter(MerchantDocument.merchant_id == merchant_id, MerchantDocument.document_type == document_type)
            .order_by(MerchantDocument.created_at.desc())
            .all()
        )

    def count_by_verification_status(self, merchant_id: str, status: int) -> int:
        return (
            self.db.query(MerchantDocument)
            .filter(MerchantDocument.merchant_id == merchant_id, MerchantDocument.verification_status == status)
            .count()
        )

    def _get(self, document_id: str, merchant_id: Optional[str] = None) -> MerchantDocument:
        document = self.find_by_id(document_id)
        if not document or (merchant_id is not None and document.merchant_id != merchant_id):
            raise NotFoundError("Document", document_id)
        return document

    def _check_member(self, member_id: Optional[str], merchant_id: str) -> None:
        if not member_id:
            return
        member = self.db.query(MerchantMember.merchant_id).filter(MerchantMember.id == member_id).first()
        if not member:
            raise NotFoundError("Member", member_id)
        if member[0] != merchant_id:
            raise ValidationError("Document member belongs to another merchant", ["member_id"])

    def create(
        self,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantDocument:
        values = check_allowed(data, CREATE_FIELDS, "document")
        require_fields(values, REQUIRED_FIELDS, "document")
        merchant_id = values["merchant_id"]
        with transaction(self.db):
            if not self.db.query(Merchant.id).filter(Merchant.id == merchant_id).first():
                raise NotFoundError("Merchant", merchant_id)
            self._check_member(values.get("member_id"), merchant_id)
            document = MerchantDocument(id=new_id(), **values)
            self.db.add(document)
            self.db.flush()
            document_count = count_for_merchant(self.db, MerchantDocument, merchant_id)
        logger.info("Document %s uploaded for merchant %s by %s", document.id, merchant_id, actor_id)

        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, document.id, AuditAction.insert, actor_id,
            {"new": snapshot(document)}, source_address,
        )
        if document_count == 1 and self.signals:
            self.signals.publish(merchant_id, "documents_uploaded")
        return document

    def update(
        self,
        document_id: str,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantDocument:
        values = check_allowed(data, UPDATE_FIELDS, "document")
        reject_blank_required(values, REQUIRED_FIELDS, "document")
        with transaction(self.db):
            document = self._get(document_id, merchant_id)
            if "member_id" in values:
                self._check_member(values["member_id"], document.merchant_id)
            old = snapshot(document)
            for field, value in values.items():
                setattr(document, field, value)
        self.audit.record_after_commit(
            document.merchant_id, TABLE_NAME, document_id, AuditAction.update, actor_id,
            {"old": old, "new": snapshot(document)}, source_address,
        )
        return document

    def update_verification_status(
        self,
        document_id: str,
        status: int,
        verified_by: Optional[str],
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantDocument:
        """Set status and verification date; verifier is only overwritten when given."""
        with transaction(self.db):
            document = self._get(document_id, merchant_id)
            old = snapshot(document, VERIFICATION_FIELDS)
            document.verification_status = int(status)
            document.verification_date = datetime.now(timezone.utc)
            if verified_by:
                document.verified_by = verified_by
        logger.info("Document %s verification status set to %s by %s", document_id, status, actor_id)
        self.audit.record_after_commit(
            document.merchant_id, TABLE_NAME, document_id, AuditAction.update, actor_id,
            {"old": old, "new": snapshot(document, VERIFICATION_FIELDS)}, source_address,
        )
        return document

    def delete(
        self,
        document_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> None:
        with transaction(self.db):
            document = self._get(document_id, merchant_id)
            merchant_id = document.merchant_id
            old = snapshot(document)
            self.db.delete(document)
        logger.info("Document %s deleted by %s", document_id, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, document_id, AuditAction.delete, actor_id, {"old": old}, source_address,
        )
