from typing import Optional

from fastapi import APIRouter, Depends, Query

from onboarding.core.deps import get_actor_id, get_services, get_source_address
from onboarding.schemas.member import MemberCreate, MemberResponse, MemberUpdate, MemberVerificationUpdate
from onboarding.services.registry import OnboardingServices

router = APIRouter()


@router.get("/{merchant_id}/members", response_model=list[MemberResponse])
def list_members(merchant_id: str, services: OnboardingServices = Depends(get_services)):
    return [MemberResponse.from_member(m) for m in services.members.find_all_for_merchant(merchant_id)]


@router.get("/{merchant_id}/members/significant-owners", response_model=list[MemberResponse])
def list_significant_owners(
    merchant_id: str,
    min_percentage: Optional[int] = Query(None, ge=0, le=10000, description="Basis points (2500 = 25%)"),
    services: OnboardingServices = Depends(get_services),
):
    owners = services.members.find_significant_owners(merchant_id, min_percentage)
    return [MemberResponse.from_member(m) for m in owners]


@router.post("/{merchant_id}/members", response_model=MemberResponse, status_code=201)
def create_member(
    merchant_id: str,
    body: MemberCreate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    data = body.model_dump(exclude_none=True)
    data["merchant_id"] = merchant_id
    return MemberResponse.from_member(services.members.create(data, actor_id, source_address))


@router.patch("/{merchant_id}/members/{member_id}", response_model=MemberResponse)
def update_member(
    merchant_id: str,
    member_id: str,
    body: MemberUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    member = services.members.update(
        member_id, body.model_dump(exclude_unset=True), actor_id, source_address, merchant_id=merchant_id
    )
    return MemberResponse.from_member(member)


@router.put("/{merchant_id}/members/{member_id}/verification", response_model=MemberResponse)
def update_member_verification(
    merchant_id: str,
    member_id: str,
    body: MemberVerificationUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    member = services.members.update_verification_status(
        member_id,
        body.id_verification_status,
        body.background_check_status,
        actor_id,
        source_address,
        merchant_id=merchant_id,
    )
    return MemberResponse.from_member(member)


@router.put("/{merchant_id}/members/{member_id}/primary", response_model=MemberResponse)
def set_primary_member(
    merchant_id: str,
    member_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return MemberResponse.from_member(services.members.set_primary(member_id, merchant_id, actor_id, source_address))


@router.delete("/{merchant_id}/members/{member_id}", status_code=204)
def delete_member(
    merchant_id: str,
    member_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    services.members.delete(member_id, actor_id, source_address, merchant_id=merchant_id)
