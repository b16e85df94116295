import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from onboarding.core.errors import NotFoundError
from onboarding.core.masking import mask_account_number, mask_routing_number
from onboarding.models.codes import AuditAction, BankAccountStatus
from onboarding.models.merchant_bank_account import MerchantBankAccount
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

TABLE_NAME = "merchant_bank_accounts"

REQUIRED_FIELDS = ("merchant_id", "account_method", "account_number", "routing_number", "currency")
CREATE_FIELDS = REQUIRED_FIELDS + ("account_name", "is_primary", "status")
UPDATE_FIELDS = ("account_method", "account_number", "routing_number", "account_name", "currency", "is_primary")


def masked_snapshot(account: MerchantBankAccount) -> Dict[str, Any]:
    data = snapshot(account)
    data["account_number"] = mask_account_number(account.account_number)
    data["routing_number"] = mask_routing_number(account.routing_number)
    return data


class BankAccountManager:
    """Bank accounts of a merchant; keeps exactly one of them primary."""

    def __init__(self, db: Session, audit: AuditLogWriter, signals: Optional[SectionSignals] = None):
        self.db = db
        self.audit = audit
        self.signals = signals

    def find_by_id(self, account_id: str) -> Optional[MerchantBankAccount]:
        return self.db.query(MerchantBankAccount).filter(MerchantBankAccount.id == account_id).first()

    def find_primary_for_merchant(self, merchant_id: str) -> Optional[MerchantBankAccount]:
        return (
            self.db.query(MerchantBankAccount)
            .filter(MerchantBankAccount.merchant_id == merchant_id, MerchantBankAccount.is_primary.is_(True))
            .first()
        )

    def find_all_for_merchant(self, merchant_id: str) -> List[MerchantBankAccount]:
        return (
            self.db.query(MerchantBankAccount)
            .filter(MerchantBankAccount.merchant_id == merchant_id)
            .order_by(
                MerchantBankAccount.is_primary.desc(),
                MerchantBankAccount.created_at.asc(),
                MerchantBankAccount.id.asc(),
            )
            .all()
        )

    def _get(self, account_id: str, merchant_id: Optional[str] = None) -> MerchantBankAccount:
        """The account, or NotFoundError; when `merchant_id` is given it must own the account."""
        account = self.find_by_id(account_id)
        if not account or (merchant_id is not None and account.merchant_id != merchant_id):
            raise NotFoundError("Bank account", account_id)
        return account

    def create(
        self,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantBankAccount:
        """
        Add an account. The merchant's first account, or one submitted with
        is_primary, is promoted in the same transaction as the insert.
        """
        values = check_allowed(data, CREATE_FIELDS, "bank account")
        require_fields(values, REQUIRED_FIELDS, "bank account")
        wants_primary = bool(values.pop("is_primary", False))
        merchant_id = values["merchant_id"]

        with transaction(self.db):
            if not lock_merchant(self.db, merchant_id):
                raise NotFoundError("Merchant", merchant_id)
            account = MerchantBankAccount(id=new_id(), is_primary=False, **values)
            self.db.add(account)
            self.db.flush()
            account_count = count_for_merchant(self.db, MerchantBankAccount, merchant_id)
            if account_count == 1 or wants_primary:
                promote_to_primary(self.db, MerchantBankAccount, account.id, merchant_id)
        logger.info("Bank account %s created for merchant %s by %s", account.id, merchant_id, actor_id)

        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, account.id, AuditAction.insert, actor_id,
            {"new": masked_snapshot(account)}, source_address,
        )
        if account_count == 1 and self.signals:
            self.signals.publish(merchant_id, "bank_info_completed")
        return account

    def update(
        self,
        account_id: str,
        data: Mapping[str, Any],
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantBankAccount:
        values = check_allowed(data, UPDATE_FIELDS, "bank account")
        reject_blank_required(values, REQUIRED_FIELDS, "bank account")
        make_primary = bool(values.pop("is_primary", False))
        with transaction(self.db):
            account = self._get(account_id, merchant_id)
            old = masked_snapshot(account)
            if make_primary:
                lock_merchant(self.db, account.merchant_id)
                promote_to_primary(self.db, MerchantBankAccount, account_id, account.merchant_id)
            for field, value in values.items():
                setattr(account, field, value)
        logger.info("Bank account %s updated by %s", account_id, actor_id)
        self.audit.record_after_commit(
            account.merchant_id, TABLE_NAME, account_id, AuditAction.update, actor_id,
            {"old": old, "new": masked_snapshot(account)}, source_address,
        )
        return account

    def update_status(
        self,
        account_id: str,
        status: int,
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> MerchantBankAccount:
        """Set the status; a verified status also stamps verification_date."""
        fields = ("status", "verification_date")
        with transaction(self.db):
            account = self._get(account_id, merchant_id)
            old = snapshot(account, fields)
            account.status = int(status)
            if account.status == BankAccountStatus.verified:
                account.verification_date = datetime.now(timezone.utc)
        self.audit.record_after_commit(
            account.merchant_id, TABLE_NAME, account_id, AuditAction.update, actor_id,
            {"old": old, "new": snapshot(account, fields)}, source_address,
        )
        return account

    def delete(
        self,
        account_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
        merchant_id: Optional[str] = None,
    ) -> None:
        """Remove an account; if it was primary, the oldest remaining account takes over."""
        with transaction(self.db):
            account = self._get(account_id, merchant_id)
            merchant_id = account.merchant_id
            lock_merchant(self.db, merchant_id)
            was_primary = account.is_primary
            old = masked_snapshot(account)
            self.db.delete(account)
            self.db.flush()
            successor = first_remaining(self.db, MerchantBankAccount, merchant_id) if was_primary else None
            if successor:
                promote_to_primary(self.db, MerchantBankAccount, successor, merchant_id)
        logger.info("Bank account %s deleted by %s", account_id, actor_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, account_id, AuditAction.delete, actor_id, {"old": old}, source_address,
        )

    def set_primary(
        self,
        account_id: str,
        merchant_id: str,
        actor_id: str,
        source_address: Optional[str] = None,
    ) -> MerchantBankAccount:
        with transaction(self.db):
            account = self._get(account_id, merchant_id)
            lock_merchant(self.db, merchant_id)
            old_primary = current_primary_id(self.db, MerchantBankAccount, merchant_id)
            promote_to_primary(self.db, MerchantBankAccount, account_id, merchant_id)
        self.audit.record_after_commit(
            merchant_id, TABLE_NAME, account_id, AuditAction.update, actor_id,
            {"change": f"Primary account changed from {old_primary or 'none'} to {account_id}"},
            source_address,
        )
        return account
