"""Onboarding state machine: six section flags plus KYC/AML/underwriting sub-statuses.

is_completed is set, together with completion_date, in the same transaction
as the flag that completes the set, and is never reset.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from onboarding.core.errors import NotFoundError, ValidationError
from onboarding.models.codes import AuditAction, VerificationStatus
from onboarding.models.merchant_onboarding_status import SECTION_FLAGS, MerchantOnboardingStatus
from onboarding.services.audit_log import AuditLogWriter
from onboarding.services.persistence import json_safe, new_id, snapshot, transaction

logger = logging.getLogger(__name__)

TABLE_NAME = "merchant_onboarding_status"

VERIFICATION_FIELDS = ("kyc_status", "aml_status", "underwriting_status")


class OnboardingStatusEngine:
    def __init__(self, db: Session, audit: AuditLogWriter):
        self.db = db
        self.audit = audit

    # --- queries ---

    def find_by_id(self, status_id: str) -> Optional[MerchantOnboardingStatus]:
        return self.db.query(MerchantOnboardingStatus).filter(MerchantOnboardingStatus.id == status_id).first()

    def find_by_merchant_id(self, merchant_id: str) -> Optional[MerchantOnboardingStatus]:
        return (
            self.db.query(MerchantOnboardingStatus)
            .filter(MerchantOnboardingStatus.merchant_id == merchant_id)
            .first()
        )

    def find_by_completion_status(self, is_completed: bool) -> List[MerchantOnboardingStatus]:
        return (
            self.db.query(MerchantOnboardingStatus)
            .filter(MerchantOnboardingStatus.is_completed == is_completed)
            .order_by(MerchantOnboardingStatus.updated_at.desc())
            .all()
        )

    def _get_for_update(self, status_id: str) -> MerchantOnboardingStatus:
        status = (
            self.db.query(MerchantOnboardingStatus)
            .filter(MerchantOnboardingStatus.id == status_id)
            .with_for_update()
            .first()
        )
        if not status:
            raise NotFoundError("Onboarding status", status_id)
        return status

    # --- mutations ---

    @staticmethod
    def new_status(merchant_id: str) -> MerchantOnboardingStatus:
        """Unsaved initial record: step 1, every flag false."""
        status = MerchantOnboardingStatus(id=new_id(), merchant_id=merchant_id, current_step=1, is_completed=False)
        for flag in SECTION_FLAGS:
            setattr(status, flag, False)
        return status

    def create(
        self,
        merchant_id: str,
        actor_id: Optional[str] = None,
        source_address: Optional[str] = None,
    ) -> MerchantOnboardingStatus:
        status = self.new_status(merchant_id)
        with transaction(self.db):
            self.db.add(status)
        if actor_id:
            self.audit.record_after_commit(
                merchant_id, TABLE_NAME, status.id, AuditAction.insert, actor_id,
                {"new": snapshot(status)}, source_address,
            )
        return status

    def update_step(
        self,
        status_id: str,
        step: int,
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantOnboardingStatus:
        with transaction(self.db):
            status = self._get_for_update(status_id)
            old_step = status.current_step
            status.current_step = step
        self.audit.record_after_commit(
            status.merchant_id, TABLE_NAME, status_id, AuditAction.update, actor_id,
            {"old": {"current_step": old_step}, "new": {"current_step": step}},
            source_address,
        )
        return status

    def _complete_section(self, status: MerchantOnboardingStatus, section: str) -> Dict[str, Dict[str, Any]]:
        """Set one flag inside the caller's transaction and derive completion; returns old/new."""
        old = {section: getattr(status, section)}
        new = {section: True}
        setattr(status, section, True)
        if status.all_sections_completed() and not status.is_completed:
            old.update(is_completed=status.is_completed, completion_date=status.completion_date)
            status.is_completed = True
            status.completion_date = datetime.now(timezone.utc)
            new.update(is_completed=True, completion_date=status.completion_date)
            logger.info("Onboarding completed for merchant %s", status.merchant_id)
        return {"old": json_safe(old), "new": json_safe(new)}

    def mark_section_completed(
        self,
        status_id: str,
        section: str,
        actor_id: Optional[str] = None,
        source_address: Optional[str] = None,
    ) -> MerchantOnboardingStatus:
        """
        Mark one of the six sections complete; completes onboarding when it was the last one.
        Only the recognised flag names are accepted. Audited when an actor is given.
        """
        if section not in SECTION_FLAGS:
            raise ValidationError(f"Invalid section: {section}", [section])
        with transaction(self.db):
            status = self._get_for_update(status_id)
            changes = self._complete_section(status, section)
        logger.info("Section %s completed for merchant %s", section, status.merchant_id)
        if actor_id:
            self.audit.record_after_commit(
                status.merchant_id, TABLE_NAME, status_id, AuditAction.update, actor_id, changes, source_address,
            )
        return status

    def update_verification_statuses(
        self,
        status_id: str,
        kyc_status: Optional[int] = None,
        aml_status: Optional[int] = None,
        underwriting_status: Optional[int] = None,
        actor_id: Optional[str] = None,
        source_address: Optional[str] = None,
    ) -> MerchantOnboardingStatus:
        """
        Partial update of the supplied sub-statuses. Once all three have passed,
        verification_completed is marked in the same transaction and the one
        audit entry covers both.
        """
        supplied = {
            "kyc_status": kyc_status,
            "aml_status": aml_status,
            "underwriting_status": underwriting_status,
        }
        supplied = {k: int(v) for k, v in supplied.items() if v is not None}
        with transaction(self.db):
            status = self._get_for_update(status_id)
            changes: Dict[str, Any] = {"old": {}, "new": {}}
            for field, value in supplied.items():
                if getattr(status, field) != value:
                    changes["old"][field] = getattr(status, field)
                    changes["new"][field] = value
                setattr(status, field, value)
            passed = all(getattr(status, f) == VerificationStatus.passed for f in VERIFICATION_FIELDS)
            if passed and not status.verification_completed:
                section_changes = self._complete_section(status, "verification_completed")
                changes["old"].update(section_changes["old"])
                changes["new"].update(section_changes["new"])
        if not changes["new"]:
            changes = {"change": "Verification statuses unchanged"}
        if actor_id:
            self.audit.record_after_commit(
                status.merchant_id, TABLE_NAME, status_id, AuditAction.update, actor_id, changes, source_address,
            )
        return status

    def mark_agreement_accepted(
        self,
        status_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantOnboardingStatus:
        return self.mark_section_completed(status_id, "agreement_accepted", actor_id, source_address)

    # --- signal listener ---

    def on_section_signal(self, merchant_id: str, section: str) -> None:
        """Mark `section` for the merchant unless it is already set; no audit row (no actor)."""
        status = self.find_by_merchant_id(merchant_id)
        if not status:
            logger.warning("No onboarding status for merchant %s; %s not recorded", merchant_id, section)
            return
        if not getattr(status, section, False):
            self.mark_section_completed(status.id, section)
