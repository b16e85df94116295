from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StepUpdate(BaseModel):
    step: int = Field(ge=1)


class SectionUpdate(BaseModel):
    section: str


class VerificationStatusesUpdate(BaseModel):
    kyc_status: Optional[int] = None
    aml_status: Optional[int] = None
    underwriting_status: Optional[int] = None


class OnboardingStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    merchant_id: str
    current_step: int
    is_completed: bool
    completion_date: Optional[datetime] = None
    entity_info_completed: bool
    bank_info_completed: bool
    owner_info_completed: bool
    documents_uploaded: bool
    verification_completed: bool
    agreement_accepted: bool
    kyc_status: int
    aml_status: int
    underwriting_status: int
    is_automated_onboarding: bool
    notes: Optional[str] = None
