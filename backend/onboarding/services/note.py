import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from onboarding.core.errors import NotFoundError, ValidationError
from onboarding.models.codes import AuditAction
from onboarding.models.merchant import Merchant
from onboarding.models.merchant_note import MerchantNote
from onboarding.services.audit_log import AuditLogWriter
from onboarding.services.persistence import new_id, snapshot, transaction

logger = logging.getLogger(__name__)

TABLE_NAME = "merchant_notes"


class NoteService:
    """Free-text notes on a merchant, internal or visible to the merchant."""

    def __init__(self, db: Session, audit: AuditLogWriter):
        self.db = db
        self.audit = audit

    def find_by_id(self, note_id: str) -> Optional[MerchantNote]:
        return self.db.query(MerchantNote).filter(MerchantNote.id == note_id).first()

    def find_by_merchant(self, merchant_id: str, include_internal: bool = True) -> List[MerchantNote]:
        query = self.db.query(MerchantNote).filter(MerchantNote.merchant_id == merchant_id)
        if not include_internal:
            query = query.filter(MerchantNote.is_internal.is_(False))
        return query.order_by(MerchantNote.created_at.desc()).all()

    def find_by_type(self, merchant_id: str, note_type: int) -> List[MerchantNote]:
        return (
            self.db.query(MerchantNote)
            .filter(MerchantNote.merchant_id == merchant_id, MerchantNote.note_type == note_type)
            .order_by(MerchantNote.created_at.desc())
            .all()
        )

    def _get(self, note_id: str, merchant_id: Optional[str] = None) -> MerchantNote:
        note = self.find_by_id(note_id)
        if not note or (merchant_id is not None and note.merchant_id != merchant_id):
            raise NotFoundError("Note", note_id)
        return note

    def create_note(
        self,
        merchant_id: str,
        created_by: str,
        note_text: str,
        note_type: int = 0,
        is_internal: bool = True,
        source_address: Optional[str] = None,
    ) -> MerchantNote:
        if not note_text or not note_text.strip():
            raise ValidationError("Missing required note fields: note_text", ["note_text"])
        note = MerchantNote(
            id=new_id(),
            merchant_id=merchant_id,
            created_by=created_by,
            note_text=note_text,
            note_type=note_type,
            is_internal=is_internal,
        )
        with transaction(self.db):
            if not self.db.query(Merchant.id).filter(Merchant.id == merchant_id).first():
                raise NotFoundError("Merchant", merchant_id)
            self.db.add(note)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, note.id, AuditAction.insert, created_by, {"new": snapshot(note)}, source_address,
        )
        return note

    def update_note_text(
        self,
        note_id: str,
        note_text: str,
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantNote:
        if not note_text or not note_text.strip():
            raise ValidationError("Missing required note fields: note_text", ["note_text"])
        with transaction(self.db):
            note = self._get(note_id, merchant_id)
            old_text = note.note_text
            note.note_text = note_text
        self.audit.record_after_commit(
            note.merchant_id, TABLE_NAME, note_id, AuditAction.update, actor_id,
            {"old": {"note_text": old_text}, "new": {"note_text": note_text}},
            source_address,
        )
        return note

    def delete(
        self,
        note_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> None:
        with transaction(self.db):
            note = self._get(note_id, merchant_id)
            merchant_id = note.merchant_id
            old = snapshot(note)
            self.db.delete(note)
        logger.info("Note %s deleted by %s", note_id, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, note_id, AuditAction.delete, actor_id, {"old": old}, source_address,
        )
