from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from onboarding.core.masking import mask_account_number, mask_routing_number


class BankAccountCreate(BaseModel):
    account_method: int
    account_number: str
    routing_number: str
    account_name: Optional[str] = None
    currency: str
    is_primary: bool = False


class BankAccountUpdate(BaseModel):
    account_method: Optional[int] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    account_name: Optional[str] = None
    currency: Optional[str] = None
    is_primary: Optional[bool] = None


class BankAccountStatusUpdate(BaseModel):
    status: int


class BankAccountResponse(BaseModel):
    """Account and routing numbers are returned masked."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    merchant_id: str
    is_primary: bool
    account_method: int
    account_number: str
    routing_number: str
    account_name: Optional[str] = None
    currency: str
    status: int
    verification_date: Optional[datetime] = None

    @classmethod
    def from_account(cls, account) -> "BankAccountResponse":
        out = cls.model_validate(account)
        out.account_number = mask_account_number(account.account_number)
        out.routing_number = mask_routing_number(account.routing_number)
        return out
