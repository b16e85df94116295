from typing import Optional

from fastapi import APIRouter, Depends

from onboarding.core.deps import get_actor_id, get_services, get_source_address
from onboarding.schemas.document import (
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
    DocumentVerificationUpdate,
)
from onboarding.services.registry import OnboardingServices

router = APIRouter()


@router.get("/{merchant_id}/documents", response_model=list[DocumentResponse])
def list_documents(
    merchant_id: str,
    document_type: Optional[int] = None,
    services: OnboardingServices = Depends(get_services),
):
    if document_type is not None:
        return services.documents.find_by_type(merchant_id, document_type)
    return services.documents.find_by_merchant(merchant_id)


@router.get("/{merchant_id}/documents/count")
def count_documents(merchant_id: str, status: int, services: OnboardingServices = Depends(get_services)):
    """Documents of the merchant in the given verification status."""
    return {"count": services.documents.count_by_verification_status(merchant_id, status)}


@router.post("/{merchant_id}/documents", response_model=DocumentResponse, status_code=201)
def create_document(
    merchant_id: str,
    body: DocumentCreate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    data = body.model_dump(exclude_none=True)
    data["merchant_id"] = merchant_id
    return services.documents.create(data, actor_id, source_address)


@router.patch("/{merchant_id}/documents/{document_id}", response_model=DocumentResponse)
def update_document(
    merchant_id: str,
    document_id: str,
    body: DocumentUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.documents.update(
        document_id, body.model_dump(exclude_unset=True), actor_id, source_address, merchant_id=merchant_id
    )


@router.put("/{merchant_id}/documents/{document_id}/verification", response_model=DocumentResponse)
def update_document_verification(
    merchant_id: str,
    document_id: str,
    body: DocumentVerificationUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    return services.documents.update_verification_status(
        document_id, body.status, body.verified_by, actor_id, source_address, merchant_id=merchant_id
    )


@router.delete("/{merchant_id}/documents/{document_id}", status_code=204)
def delete_document(
    merchant_id: str,
    document_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    services.documents.delete(document_id, actor_id, source_address, merchant_id=merchant_id)
