"""Exactly-one-primary rule shared by bank accounts and members."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from onboarding.models.merchant import Merchant

logger = logging.getLogger(__name__)


def promote_to_primary(db: Session, model, record_id: str, merchant_id: str) -> None:
    """
    Demote every sibling of the merchant, then promote `record_id`.
    Runs inside the caller's transaction, so both updates commit together.
    """
    db.query(model).filter(model.merchant_id == merchant_id).update(
        {model.is_primary: False}, synchronize_session="fetch"
    )
    db.query(model).filter(model.id == record_id, model.merchant_id == merchant_id).update(
        {model.is_primary: True}, synchronize_session="fetch"
    )
    logger.info("%s %s is now primary for merchant %s", model.__tablename__, record_id, merchant_id)


def first_remaining(db: Session, model, merchant_id: str) -> Optional[str]:
    """Id of the sibling to promote after the primary is removed (oldest first, then id)."""
    row = (
        db.query(model.id)
        .filter(model.merchant_id == merchant_id)
        .order_by(model.created_at.asc(), model.id.asc())
        .first()
    )
    return row[0] if row else None


def count_for_merchant(db: Session, model, merchant_id: str) -> int:
    return db.query(model).filter(model.merchant_id == merchant_id).count()


def current_primary_id(db: Session, model, merchant_id: str) -> Optional[str]:
    row = db.query(model.id).filter(model.merchant_id == merchant_id, model.is_primary.is_(True)).first()
    return row[0] if row else None


def lock_merchant(db: Session, merchant_id: str) -> bool:
    """
    Take the merchant row lock that serialises primary changes among its
    children. Returns False when the merchant does not exist.
    """
    row = db.query(Merchant.id).filter(Merchant.id == merchant_id).with_for_update().first()
    return row is not None
