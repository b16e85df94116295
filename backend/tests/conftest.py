"""
Pytest fixtures for the onboarding test suite.

Every test gets a fresh in-memory SQLite database (foreign keys enforced)
with the full schema, a session on it, and the wired managers.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from onboarding.core.database import create_db_engine  # noqa: E402
from onboarding.models import Base  # noqa: E402
from onboarding.services.registry import build_services  # noqa: E402

ACTOR_ID = "user-123"
SOURCE_ADDRESS = "10.0.0.7"


@pytest.fixture
def engine():
    engine = create_db_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def services(db):
    return build_services(db)


@pytest.fixture
def actor_id():
    return ACTOR_ID


@pytest.fixture
def merchant_payload():
    def _make(**overrides):
        data = {
            "entity_type": 1,
            "legal_name": "Acme Widgets LLC",
            "address1": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip": "62701",
            "country": "US",
            "phone": "2175550100",
            "email": "ops@acme.example",
            "tc_version": "2024.1",
            "currency": "USD",
            "mcc": "5999",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def bank_payload():
    def _make(merchant_id, **overrides):
        data = {
            "merchant_id": merchant_id,
            "account_method": 1,
            "account_number": "000123456789",
            "routing_number": "021000021",
            "currency": "USD",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def member_payload():
    def _make(merchant_id, **overrides):
        data = {
            "merchant_id": merchant_id,
            "first_name": "Jane",
            "last_name": "Doe",
            "ssn": "123456789",
            "date_of_birth": date(1980, 5, 17),
            "ownership_percentage": 5000,
            "email": "jane@acme.example",
            "phone": "2175550101",
            "address1": "2 Oak Ave",
            "city": "Springfield",
            "state": "IL",
            "zip": "62702",
            "country": "US",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def document_payload():
    def _make(merchant_id, **overrides):
        data = {
            "merchant_id": merchant_id,
            "document_type": 1,
            "document_name": "articles.pdf",
            "document_path": "merchants/articles.pdf",
            "mime_type": "application/pdf",
            "file_size": 20480,
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def merchant(services, merchant_payload, actor_id):
    return services.merchants.create(merchant_payload(), actor_id, SOURCE_ADDRESS)
