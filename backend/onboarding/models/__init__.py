from onboarding.core.database import Base
from onboarding.models.merchant import Merchant
from onboarding.models.merchant_bank_account import MerchantBankAccount
from onboarding.models.merchant_member import MerchantMember
from onboarding.models.merchant_document import MerchantDocument
from onboarding.models.merchant_onboarding_status import MerchantOnboardingStatus
from onboarding.models.merchant_note import MerchantNote
from onboarding.models.audit_log import MerchantAuditLog

__all__ = [
    "Base",
    "Merchant",
    "MerchantBankAccount",
    "MerchantMember",
    "MerchantDocument",
    "MerchantOnboardingStatus",
    "MerchantNote",
    "MerchantAuditLog",
]
