"""Transaction scope, field allow-lists and audit snapshots shared by the managers."""
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from onboarding.core.errors import ConflictError, PersistenceError, ValidationError


def new_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Commit the work done inside the block, or roll all of it back.
    IntegrityError surfaces as ConflictError, any other storage failure as PersistenceError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Constraint violated: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e
    except Exception:
        db.rollback()
        raise


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def missing_fields(data: Mapping[str, Any], required: Iterable[str]) -> list:
    """Required keys that are absent, None or blank strings (0 and False count as present)."""
    return [field for field in required if is_blank(data.get(field))]


def require_fields(data: Mapping[str, Any], required: Iterable[str], entity: str) -> None:
    missing = missing_fields(data, required)
    if missing:
        raise ValidationError(f"Missing required {entity} fields: {', '.join(missing)}", missing)


def reject_blank_required(data: Mapping[str, Any], required: Iterable[str], entity: str) -> None:
    """On partial updates, a required field that is supplied must not be blank."""
    require_fields(data, [field for field in required if field in data], entity)


def check_allowed(data: Mapping[str, Any], allowed: Iterable[str], entity: str) -> Dict[str, Any]:
    """Reject keys outside the allow-list and return a plain dict copy."""
    allowed = set(allowed)
    unknown = sorted(k for k in data if k not in allowed)
    if unknown:
        raise ValidationError(f"Unknown {entity} fields: {', '.join(unknown)}", unknown)
    return dict(data)


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def snapshot(instance: Any, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """JSON-safe dict of a row's column values (all columns, or just `fields`)."""
    if fields is None:
        fields = [attr.key for attr in inspect(instance).mapper.column_attrs]
    return {field: _json_value(getattr(instance, field)) for field in fields}


def json_safe(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _json_value(value) for key, value in values.items()}
