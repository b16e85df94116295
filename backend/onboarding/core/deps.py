from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from onboarding.core.database import SessionLocal
from onboarding.services.registry import OnboardingServices, build_services


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_services(db: Session = Depends(get_db)) -> OnboardingServices:
    return build_services(db)


def get_actor_id(x_actor_id: str = Header(..., alias="X-Actor-Id", min_length=1)) -> str:
    """Authenticated principal, resolved upstream by the request router."""
    return x_actor_id


def get_source_address(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
