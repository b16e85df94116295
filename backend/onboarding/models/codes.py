"""Status codes stored as small integers on the onboarding tables."""
import enum


class MerchantStatus(enum.IntEnum):
    new = 0
    active = 1
    approved = 2
    suspended = 3
    rejected = 4


class BankAccountStatus(enum.IntEnum):
    pending = 0
    verified = 1
    failed = 2


class VerificationStatus(enum.IntEnum):
    """Tri-state used by KYC, AML, underwriting and member checks."""

    pending = 0
    in_review = 1
    passed = 2
    failed = 3


class DocumentVerificationStatus(enum.IntEnum):
    pending = 0
    verified = 1
    rejected = 2


class AuditAction(str, enum.Enum):
    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"
