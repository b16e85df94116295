from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from onboarding.core.deps import get_actor_id, get_services, get_source_address
from onboarding.core.errors import NotFoundError
from onboarding.schemas.audit import ActivitySummaryResponse, AuditLogResponse
from onboarding.schemas.merchant import MerchantCreate, MerchantResponse, MerchantStatusUpdate, MerchantUpdate
from onboarding.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from onboarding.services.registry import OnboardingServices

router = APIRouter()


@router.get("", response_model=list[MerchantResponse])
def list_merchants(
    limit: int = Query(100, ge=1, le=500),
    services: OnboardingServices = Depends(get_services),
):
    """Most recently created merchants first."""
    return services.merchants.list_recent(limit)


@router.post("", response_model=MerchantResponse, status_code=201)
def create_merchant(
    body: MerchantCreate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    """Create a merchant together with its onboarding status."""
    return services.merchants.create(body.model_dump(exclude_none=True), actor_id, source_address)


@router.get("/{merchant_id}", response_model=MerchantResponse)
def get_merchant(merchant_id: str, services: OnboardingServices = Depends(get_services)):
    merchant = services.merchants.find_by_id(merchant_id)
    if not merchant:
        raise NotFoundError("Merchant", merchant_id)
    return merchant


@router.patch("/{merchant_id}", response_model=MerchantResponse)
def update_merchant(
    merchant_id: str,
    body: MerchantUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.merchants.update(merchant_id, body.model_dump(exclude_unset=True), actor_id, source_address)


@router.put("/{merchant_id}/status", response_model=MerchantResponse)
def update_merchant_status(
    merchant_id: str,
    body: MerchantStatusUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.merchants.update_status(merchant_id, body.status, actor_id, source_address)


@router.delete("/{merchant_id}", status_code=204)
def delete_merchant(
    merchant_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    services.merchants.delete(merchant_id, actor_id, source_address)


# --- Notes ---


@router.get("/{merchant_id}/notes", response_model=list[NoteResponse])
def list_notes(
    merchant_id: str,
    include_internal: bool = True,
    services: OnboardingServices = Depends(get_services),
):
    return services.notes.find_by_merchant(merchant_id, include_internal)


@router.post("/{merchant_id}/notes", response_model=NoteResponse, status_code=201)
def create_note(
    merchant_id: str,
    body: NoteCreate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.notes.create_note(
        merchant_id, actor_id, body.note_text, body.note_type, body.is_internal, source_address
    )


@router.patch("/{merchant_id}/notes/{note_id}", response_model=NoteResponse)
def update_note(
    merchant_id: str,
    note_id: str,
    body: NoteUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.notes.update_note_text(note_id, body.note_text, actor_id, source_address, merchant_id=merchant_id)


@router.delete("/{merchant_id}/notes/{note_id}", status_code=204)
def delete_note(
    merchant_id: str,
    note_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    services.notes.delete(note_id, actor_id, source_address, merchant_id=merchant_id)


# --- Audit trail ---


@router.get("/{merchant_id}/audit-log", response_model=list[AuditLogResponse])
def list_audit_log(
    merchant_id: str,
    table_name: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    services: OnboardingServices = Depends(get_services),
):
    """Most recent first. Filter by table, or by an inclusive [start, end] range."""
    if table_name:
        return services.audit.find_by_table(merchant_id, table_name)
    if start and end:
        return services.audit.find_by_date_range(merchant_id, start, end)
    return services.audit.find_by_merchant(merchant_id, limit)


@router.get("/audit/actors/{actor_id}/summary", response_model=ActivitySummaryResponse)
def actor_activity_summary(
    actor_id: str,
    start: datetime,
    end: datetime,
    services: OnboardingServices = Depends(get_services),
):
    return services.audit.get_actor_activity_summary(actor_id, start, end)
