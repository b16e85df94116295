"""Merchant aggregate: creation with its onboarding record, updates, lifecycle status, deletion."""
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session, selectinload

from onboarding.core.errors import NotFoundError
from onboarding.models.audit_log import MerchantAuditLog
from onboarding.models.codes import AuditAction, MerchantStatus
from onboarding.models.merchant import Merchant
from onboarding.services.audit_log import AuditLogWriter
from onboarding.services.onboarding_status import OnboardingStatusEngine
from onboarding.services.persistence import (
    check_allowed,
    is_blank,
    new_id,
    reject_blank_required,
    require_fields,
    snapshot,
    transaction,
)
from onboarding.services.signals import SectionSignals

logger = logging.getLogger(__name__)

TABLE_NAME = "merchants"

REQUIRED_FIELDS = (
    "entity_type",
    "legal_name",
    "address1",
    "city",
    "state",
    "zip",
    "country",
    "phone",
    "email",
    "tc_version",
    "currency",
    "mcc",
)
# Entity info is complete once every creation field is filled in.
ENTITY_INFO_FIELDS = REQUIRED_FIELDS
PROFILE_FIELDS = REQUIRED_FIELDS + (
    "dba_name",
    "ein",
    "address2",
    "website",
    "is_new",
    "annual_cc_sales",
    "avg_ticket",
    "established_date",
)
CREATE_FIELDS = PROFILE_FIELDS
# status / approval_* only change through update_status
UPDATE_FIELDS = PROFILE_FIELDS + ("verification_status", "risk_score")
STATUS_FIELDS = ("status", "approval_date", "approved_by")


def is_entity_info_complete(merchant: Merchant) -> bool:
    return not any(is_blank(getattr(merchant, field)) for field in ENTITY_INFO_FIELDS)


class MerchantService:
    def __init__(
        self,
        db: Session,
        audit: AuditLogWriter,
        onboarding: OnboardingStatusEngine,
        signals: Optional[SectionSignals] = None,
    ):
        self.db = db
        self.audit = audit
        self.onboarding = onboarding
        self.signals = signals

    # --- queries ---

    def find_by_id(self, merchant_id: str) -> Optional[Merchant]:
        return self.db.query(Merchant).filter(Merchant.id == merchant_id).first()

    def find_with_full_details(self, merchant_id: str) -> Optional[Merchant]:
        return (
            self.db.query(Merchant)
            .options(
                selectinload(Merchant.bank_accounts),
                selectinload(Merchant.members),
                selectinload(Merchant.documents),
                selectinload(Merchant.notes),
                selectinload(Merchant.onboarding_status),
            )
            .filter(Merchant.id == merchant_id)
            .first()
        )

    def find_by_email(self, email: str) -> Optional[Merchant]:
        return self.db.query(Merchant).filter(Merchant.email == email).first()

    def find_by_status(self, status: int) -> List[Merchant]:
        return self.db.query(Merchant).filter(Merchant.status == status).all()

    def find_by_verification_status(self, verification_status: int) -> List[Merchant]:
        return self.db.query(Merchant).filter(Merchant.verification_status == verification_status).all()

    def count_by_status(self, status: int) -> int:
        return self.db.query(Merchant).filter(Merchant.status == status).count()

    def list_recent(self, limit: int = 100) -> List[Merchant]:
        return self.db.query(Merchant).order_by(Merchant.created_at.desc()).limit(limit).all()

    def _get(self, merchant_id: str) -> Merchant:
        merchant = self.find_by_id(merchant_id)
        if not merchant:
            raise NotFoundError("Merchant", merchant_id)
        return merchant

    # --- mutations ---

    def create(
        self,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> Merchant:
        """
        Insert the merchant and its onboarding status in one transaction.
        A duplicate email surfaces as ConflictError.
        """
        values = check_allowed(data, CREATE_FIELDS, "merchant")
        require_fields(values, REQUIRED_FIELDS, "merchant")
        merchant = Merchant(id=new_id(), status=int(MerchantStatus.new), **values)
        with transaction(self.db):
            self.db.add(merchant)
            self.db.flush()
            self.db.add(self.onboarding.new_status(merchant.id))
        logger.info("Merchant %s created by %s", merchant.id, actor_id)
        self.audit.record_after_commit(
            merchant.id, TABLE_NAME, merchant.id, AuditAction.insert, actor_id,
            {"new": snapshot(merchant)}, source_address,
        )
        return merchant

    def update(
        self,
        merchant_id: str,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> Merchant:
        values = check_allowed(data, UPDATE_FIELDS, "merchant")
        reject_blank_required(values, REQUIRED_FIELDS, "merchant")
        with transaction(self.db):
            merchant = self._get(merchant_id)
            old = snapshot(merchant)
            for field, value in values.items():
                setattr(merchant, field, value)
        logger.info("Merchant %s updated by %s", merchant_id, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, merchant_id, AuditAction.update, actor_id,
            {"old": old, "new": snapshot(merchant)}, source_address,
        )
        if is_entity_info_complete(merchant) and self.signals:
            self.signals.publish(merchant_id, "entity_info_completed")
        return merchant

    def update_status(
        self,
        merchant_id: str,
        status: int,
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> Merchant:
        """Set the lifecycle status; approval also records when and by whom."""
        with transaction(self.db):
            merchant = self._get(merchant_id)
            old = snapshot(merchant, STATUS_FIELDS)
            merchant.status = int(status)
            if merchant.status == MerchantStatus.approved:
                merchant.approval_date = datetime.now(timezone.utc)
                merchant.approved_by = actor_id
        logger.info("Merchant %s status %s -> %s by %s", merchant_id, old["status"], status, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, merchant_id, AuditAction.update, actor_id,
            {"old": old, "new": snapshot(merchant, STATUS_FIELDS)},
            source_address,
        )
        return merchant

    def delete(self, merchant_id: str, actor_id: str, source_address: Optional[str] = None) -> None:
        """
        Delete the merchant and everything it owns, including its earlier audit rows.
        The DELETE entry written afterwards keeps the final snapshot.
        """
        with transaction(self.db):
            merchant = self._get(merchant_id)
            old = snapshot(merchant)
            self.db.query(MerchantAuditLog).filter(MerchantAuditLog.merchant_id == merchant_id).delete(
                synchronize_session=False
            )
            self.db.delete(merchant)
        logger.info("Merchant %s deleted by %s", merchant_id, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, merchant_id, AuditAction.delete, actor_id, {"old": old}, source_address,
        )
