from typing import Optional

from fastapi import APIRouter, Depends

from onboarding.core.deps import get_actor_id, get_services, get_source_address
from onboarding.schemas.bank_account import (
    BankAccountCreate,
    BankAccountResponse,
    BankAccountStatusUpdate,
    BankAccountUpdate,
)
from onboarding.services.registry import OnboardingServices

router = APIRouter()


@router.get("/{merchant_id}/bank-accounts", response_model=list[BankAccountResponse])
def list_bank_accounts(merchant_id: str, services: OnboardingServices = Depends(get_services)):
    """Primary account first."""
    return [BankAccountResponse.from_account(a) for a in services.bank_accounts.find_all_for_merchant(merchant_id)]


@router.post("/{merchant_id}/bank-accounts", response_model=BankAccountResponse, status_code=201)
def create_bank_account(
    merchant_id: str,
    body: BankAccountCreate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    data = body.model_dump(exclude_none=True)
    data["merchant_id"] = merchant_id
    account = services.bank_accounts.create(data, actor_id, source_address)
    return BankAccountResponse.from_account(account)


@router.patch("/{merchant_id}/bank-accounts/{account_id}", response_model=BankAccountResponse)
def update_bank_account(
    merchant_id: str,
    account_id: str,
    body: BankAccountUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    account = services.bank_accounts.update(
        account_id, body.model_dump(exclude_unset=True), actor_id, source_address, merchant_id=merchant_id
    )
    return BankAccountResponse.from_account(account)


@router.put("/{merchant_id}/bank-accounts/{account_id}/status", response_model=BankAccountResponse)
def update_bank_account_status(
    merchant_id: str,
    account_id: str,
    body: BankAccountStatusUpdate,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    account = services.bank_accounts.update_status(
        account_id, body.status, actor_id, source_address, merchant_id=merchant_id
    )
    return BankAccountResponse.from_account(account)


@router.put("/{merchant_id}/bank-accounts/{account_id}/primary", response_model=BankAccountResponse)
def set_primary_bank_account(
    merchant_id: str,
    account_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    account = services.bank_accounts.set_primary(account_id, merchant_id, actor_id, source_address)
    return BankAccountResponse.from_account(account)


@router.delete("/{merchant_id}/bank-accounts/{account_id}", status_code=204)
def delete_bank_account(
    merchant_id: str,
    account_id: str,
    services: OnboardingServices = Depends(get_services),
    actor_id: str = Depends(get_actor_id),
    source_address: Optional[str] = Depends(get_source_address),
):
    services.bank_accounts.delete(account_id, actor_id, source_address, merchant_id=merchant_id)
