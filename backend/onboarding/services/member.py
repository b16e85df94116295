import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from onboarding.core.config import settings
from onboarding.core.errors import NotFoundError, ValidationError
from onboarding.core.masking import mask_ssn
from onboarding.models.codes import AuditAction
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
from onboarding.services.primary import (
    count_for_merchant,
    current_primary_id,
    first_remaining,
    lock_merchant,
    promote_to_primary,
)
from onboarding.services.signals import SectionSignals

logger = logging.getLogger(__name__)

TABLE_NAME = "merchant_members"

REQUIRED_FIELDS = (
    "merchant_id",
    "first_name",
    "last_name",
    "ssn",
    "date_of_birth",
    "ownership_percentage",
    "email",
    "phone",
    "address1",
    "city",
    "state",
    "zip",
    "country",
)
PROFILE_FIELDS = (
    "title",
    "first_name",
    "last_name",
    "ssn",
    "date_of_birth",
    "ownership_percentage",
    "significant_responsibility",
    "politically_exposed",
    "email",
    "phone",
    "address1",
    "address2",
    "city",
    "state",
    "zip",
    "country",
)
CREATE_FIELDS = ("merchant_id", "is_primary") + PROFILE_FIELDS
UPDATE_FIELDS = ("is_primary",) + PROFILE_FIELDS

MAX_OWNERSHIP_BPS = 10000


def masked_snapshot(member: MerchantMember) -> Dict[str, Any]:
    data = snapshot(member)
    data["ssn"] = mask_ssn(member.ssn)
    return data


def _check_ownership(values: Mapping[str, Any]) -> None:
    if "ownership_percentage" not in values:
        return
    pct = values["ownership_percentage"]
    if not isinstance(pct, int) or isinstance(pct, bool) or not 0 <= pct <= MAX_OWNERSHIP_BPS:
        raise ValidationError(
            f"ownership_percentage must be an integer between 0 and {MAX_OWNERSHIP_BPS} basis points",
            ["ownership_percentage"],
        )


class MemberManager:
    """Beneficial owners of a merchant; keeps exactly one of them primary."""

    def __init__(self, db: Session, audit: AuditLogWriter, signals: Optional[SectionSignals] = None):
        self.db = db
        self.audit = audit
        self.signals = signals

    def find_by_id(self, member_id: str) -> Optional[MerchantMember]:
        return self.db.query(MerchantMember).filter(MerchantMember.id == member_id).first()

    def find_primary_for_merchant(self, merchant_id: str) -> Optional[MerchantMember]:
        return (
            self.db.query(MerchantMember)
            .filter(MerchantMember.merchant_id == merchant_id, MerchantMember.is_primary.is_(True))
            .first()
        )

    def find_all_for_merchant(self, merchant_id: str) -> List[MerchantMember]:
        return (
            self.db.query(MerchantMember)
            .filter(MerchantMember.merchant_id == merchant_id)
            .order_by(MerchantMember.is_primary.desc(), MerchantMember.ownership_percentage.desc())
            .all()
        )

    def find_by_email(self, merchant_id: str, email: str) -> Optional[MerchantMember]:
        return (
            self.db.query(MerchantMember)
            .filter(MerchantMember.merchant_id == merchant_id, MerchantMember.email == email)
            .first()
        )

    def find_significant_owners(self, merchant_id: str, min_percentage: Optional[int] = None) -> List[MerchantMember]:
        """Members at or above `min_percentage` basis points (default 2500 = 25%), largest first."""
        threshold = settings.SIGNIFICANT_OWNERSHIP_BPS if min_percentage is None else min_percentage
        return (
            self.db.query(MerchantMember)
            .filter(
                MerchantMember.merchant_id == merchant_id,
                MerchantMember.ownership_percentage >= threshold,
            )
            .order_by(MerchantMember.ownership_percentage.desc())
            .all()
        )

    def _get(self, member_id: str, merchant_id: Optional[str] = None) -> MerchantMember:
        """The member, or NotFoundError; when `merchant_id` is given it must own the member."""
        member = self.find_by_id(member_id)
        if not member or (merchant_id is not None and member.merchant_id != merchant_id):
            raise NotFoundError("Member", member_id)
        return member

    def create(
        self,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantMember:
        values = check_allowed(data, CREATE_FIELDS, "member")
        require_fields(values, REQUIRED_FIELDS, "member")
        _check_ownership(values)
        wants_primary = bool(values.pop("is_primary", False))
        merchant_id = values["merchant_id"]

        with transaction(self.db):
            if not lock_merchant(self.db, merchant_id):
                raise NotFoundError("Merchant", merchant_id)
            member = MerchantMember(id=new_id(), is_primary=False, **values)
            self.db.add(member)
            self.db.flush()
            member_count = count_for_merchant(self.db, MerchantMember, merchant_id)
            if member_count == 1 or wants_primary:
                promote_to_primary(self.db, MerchantMember, member.id, merchant_id)
        logger.info("Member %s created for merchant %s by %s", member.id, merchant_id, actor_id)

        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, member.id, AuditAction.insert, actor_id,
            {"new": masked_snapshot(member)}, source_address,
        )
        if member_count == 1 and self.signals:
            self.signals.publish(merchant_id, "owner_info_completed")
        return member

    def update(
        self,
        member_id: str,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantMember:
        values = check_allowed(data, UPDATE_FIELDS, "member")
        reject_blank_required(values, REQUIRED_FIELDS, "member")
        _check_ownership(values)
        make_primary = bool(values.pop("is_primary", False))
        with transaction(self.db):
            member = self._get(member_id, merchant_id)
            old = masked_snapshot(member)
            if make_primary:
                lock_merchant(self.db, member.merchant_id)
                promote_to_primary(self.db, MerchantMember, member_id, member.merchant_id)
            for field, value in values.items():
                setattr(member, field, value)
        logger.info("Member %s updated by %s", member_id, actor_id)
        self.audit.record_after_commit(
            member.merchant_id, TABLE_NAME, member_id, AuditAction.update, actor_id,
            {"old": old, "new": masked_snapshot(member)}, source_address,
        )
        return member

    def update_verification_status(
        self,
        member_id: str,
        id_verification_status: Optional[int] = None,
        background_check_status: Optional[int] = None,
        actor_id: Optional[str] = None,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantMember:
        """Update only the supplied statuses; the audit entry lists only values that changed."""
        supplied = {
            "id_verification_status": id_verification_status,
            "background_check_status": background_check_status,
        }
        supplied = {k: int(v) for k, v in supplied.items() if v is not None}
        changes: Dict[str, Any] = {"old": {}, "new": {}}
        with transaction(self.db):
            member = self._get(member_id, merchant_id)
            for field, value in supplied.items():
                if getattr(member, field) != value:
                    changes["old"][field] = getattr(member, field)
                    changes["new"][field] = value
                setattr(member, field, value)
        if not changes["new"]:
            changes = {"change": "Verification statuses unchanged"}
        if actor_id:
            self.audit.record_after_commit(
                member.merchant_id, TABLE_NAME, member_id, AuditAction.update, actor_id, changes, source_address,
            )
        return member

    def delete(
        self,
        member_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> None:
        """Remove a member; documents keep existing with member_id cleared."""
        with transaction(self.db):
            member = self._get(member_id, merchant_id)
            merchant_id = member.merchant_id
            lock_merchant(self.db, merchant_id)
            was_primary = member.is_primary
            old = masked_snapshot(member)
            self.db.delete(member)
            self.db.flush()
            successor = first_remaining(self.db, MerchantMember, merchant_id) if was_primary else None
            if successor:
                promote_to_primary(self.db, MerchantMember, successor, merchant_id)
        logger.info("Member %s deleted by %s", member_id, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, member_id, AuditAction.delete, actor_id, {"old": old}, source_address,
        )

    def set_primary(
        self,
        member_id: str,
        merchant_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantMember:
        with transaction(self.db):
            member = self._get(member_id, merchant_id)
            lock_merchant(self.db, merchant_id)
            old_primary = current_primary_id(self.db, MerchantMember, merchant_id)
            promote_to_primary(self.db, MerchantMember, member_id, merchant_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, member_id, AuditAction.update, actor_id,
            {"change": f"Primary member changed from {old_primary or 'none'} to {member_id}"},
            source_address,
        )
        return member
