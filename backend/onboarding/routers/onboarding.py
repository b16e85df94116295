from typing import Optional

from fastapi import APIRouter, Depends

from onboarding.core.deps import get_actor_id, get_services, get_source_address
from onboarding.core.errors import NotFoundError
from onboarding.schemas.onboarding import (
    OnboardingStatusResponse,
    SectionUpdate,
    StepUpdate,
    VerificationStatusesUpdate,
)
from onboarding.services.registry import OnboardingServices

router = APIRouter()


def _status_id(merchant_id: str, services: OnboardingServices) -> str:
    status = services.onboarding.find_by_merchant_id(merchant_id)
    if not status:
        raise NotFoundError("Onboarding status", merchant_id)
    return status.id


@router.get("/{merchant_id}/onboarding", response_model=OnboardingStatusResponse)
def get_onboarding_status(merchant_id: str, services: OnboardingServices = Depends(get_services)):
    status = services.onboarding.find_by_merchant_id(merchant_id)
    if not status:
        raise NotFoundError("Onboarding status", merchant_id)
    return status


@router.put("/{merchant_id}/onboarding/step", response_model=OnboardingStatusResponse)
def update_step(
    merchant_id: str,
    body: StepUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.onboarding.update_step(_status_id(merchant_id, services), body.step, actor_id, source_address)


@router.post("/{merchant_id}/onboarding/sections", response_model=OnboardingStatusResponse)
def complete_section(
    merchant_id: str,
    body: SectionUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.onboarding.mark_section_completed(
        _status_id(merchant_id, services), body.section, actor_id, source_address
    )


@router.put("/{merchant_id}/onboarding/verification", response_model=OnboardingStatusResponse)
def update_verification(
    merchant_id: str,
    body: VerificationStatusesUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.onboarding.update_verification_statuses(
        _status_id(merchant_id, services),
        body.kyc_status,
        body.aml_status,
        body.underwriting_status,
        actor_id,
        source_address,
    )


@router.post("/{merchant_id}/onboarding/agreement", response_model=OnboardingStatusResponse)
def accept_agreement(
    merchant_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.onboarding.mark_agreement_accepted(_status_id(merchant_id, services), actor_id, source_address)
