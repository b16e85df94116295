"""Append-only audit trail for the merchant aggregate.

The writer stores whatever `changes` payload it is given; callers mask
sensitive values before calling `record`.
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from onboarding.core.config import settings
from onboarding.core.errors import PersistenceError
from onboarding.models.audit_log import MerchantAuditLog
from onboarding.models.codes import AuditAction
from onboarding.services.persistence import new_id

logger = logging.getLogger(__name__)


class AuditLogWriter:
    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        merchant_id: str,
        table_name: str,
        record_id: str,
        action: AuditAction,
        actor_id: str,
        changes: Dict[str, Any],
        source_address: Optional[str] = None,
    ) -> MerchantAuditLog:
        """Insert one audit row. Raises PersistenceError if the store rejects it."""
        entry = MerchantAuditLog(
            id=new_id(),
            merchant_id=merchant_id,
            table_name=table_name,
            record_id=record_id,
            action=AuditAction(action).value,
            changed_by=actor_id,
            changes=changes,
            ip_address=source_address,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to create audit log entry: {e}") from e
        self.db.refresh(entry)
        return entry

    def record_after_commit(
        self,
        merchant_id: str,
        table_name: str,
        record_id: str,
        action: AuditAction,
        actor_id: str,
        changes: Dict[str, Any],
        source_address: Optional[str] = None,
    ) -> Optional[MerchantAuditLog]:
        """
        Audit a business mutation that has already committed.
        A failed write is logged and does not undo the mutation.
        """
        try:
            return self.record(merchant_id, table_name, record_id, action, actor_id, changes, source_address)
        except PersistenceError as e:
            logger.warning(
                "Audit write failed for %s %s %s by %s: %s",
                AuditAction(action).value,
                table_name,
                record_id,
                actor_id,
                e,
            )
            return None

    def find_by_id(self, log_id: str) -> Optional[MerchantAuditLog]:
        return self.db.query(MerchantAuditLog).filter(MerchantAuditLog.id == log_id).first()

    def find_by_merchant(self, merchant_id: str, limit: Optional[int] = None) -> List[MerchantAuditLog]:
        """Most recent first, at most `limit` rows (AUDIT_LOG_DEFAULT_LIMIT by default)."""
        return (
            self.db.query(MerchantAuditLog)
            .filter(MerchantAuditLog.merchant_id == merchant_id)
            .order_by(MerchantAuditLog.created_at.desc())
            .limit(limit or settings.AUDIT_LOG_DEFAULT_LIMIT)
            .all()
        )

    def find_by_table(self, merchant_id: str, table_name: str) -> List[MerchantAuditLog]:
        return (
            self.db.query(MerchantAuditLog)
            .filter(
                MerchantAuditLog.merchant_id == merchant_id,
                MerchantAuditLog.table_name == table_name,
            )
            .order_by(MerchantAuditLog.created_at.desc())
            .all()
        )

    def find_by_record_id(self, record_id: str) -> List[MerchantAuditLog]:
        return (
            self.db.query(MerchantAuditLog)
            .filter(MerchantAuditLog.record_id == record_id)
            .order_by(MerchantAuditLog.created_at.desc())
            .all()
        )

    def find_by_date_range(self, merchant_id: str, start: datetime, end: datetime) -> List[MerchantAuditLog]:
        """Both bounds inclusive."""
        return (
            self.db.query(MerchantAuditLog)
            .filter(
                MerchantAuditLog.merchant_id == merchant_id,
                MerchantAuditLog.created_at >= start,
                MerchantAuditLog.created_at <= end,
            )
            .order_by(MerchantAuditLog.created_at.desc())
            .all()
        )

    def get_actor_activity_summary(self, actor_id: str, start: datetime, end: datetime) -> Dict[str, Any]:
        """
        Summarise one actor's changes between `start` and `end` (inclusive):
        counts per table and action, per calendar day, and how many merchants were touched.
        """
        logs = (
            self.db.query(MerchantAuditLog)
            .filter(
                MerchantAuditLog.changed_by == actor_id,
                MerchantAuditLog.created_at >= start,
                MerchantAuditLog.created_at <= end,
            )
            .order_by(MerchantAuditLog.created_at.desc())
            .all()
        )
        by_table: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        timeline: Dict[str, int] = defaultdict(int)
        for log in logs:
            by_table[log.table_name][log.action] += 1
            timeline[log.created_at.date().isoformat()] += 1
        return {
            "total_actions": len(logs),
            "actions_by_table": {table: dict(actions) for table, actions in by_table.items()},
            "merchants_modified": len({log.merchant_id for log in logs}),
            "timeline": dict(timeline),
        }
