from dataclasses import dataclass

from sqlalchemy.orm import Session

from onboarding.services.audit_log import AuditLogWriter
from onboarding.services.bank_account import BankAccountManager
from onboarding.services.document import DocumentManager
from onboarding.services.member import MemberManager
from onboarding.services.merchant import MerchantService
from onboarding.services.note import NoteService
from onboarding.services.onboarding_status import OnboardingStatusEngine
from onboarding.services.signals import SectionSignals


@dataclass
class OnboardingServices:
    audit: AuditLogWriter
    onboarding: OnboardingStatusEngine
    merchants: MerchantService
    bank_accounts: BankAccountManager
    members: MemberManager
    documents: DocumentManager
    notes: NoteService


def build_services(db: Session) -> OnboardingServices:
    """Wire one set of managers around a request-scoped session."""
    audit = AuditLogWriter(db)
    onboarding = OnboardingStatusEngine(db, audit)
    signals = SectionSignals()
    signals.subscribe(onboarding.on_section_signal)
    return OnboardingServices(
        audit=audit,
        onboarding=onboarding,
        merchants=MerchantService(db, audit, onboarding, signals),
        bank_accounts=BankAccountManager(db, audit, signals),
        members=MemberManager(db, audit, signals),
        documents=DocumentManager(db, audit, signals),
        notes=NoteService(db, audit),
    )
