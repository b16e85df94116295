from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class MerchantCreate(BaseModel):
    entity_type: int
    legal_name: str
    dba_name: Optional[str] = None
    ein: Optional[str] = None
    address1: str
    address2: Optional[str] = None
    city: str
    state: str
    zip: str
    country: str
    phone: str
    email: EmailStr
    website: Optional[str] = None
    tc_version: str
    currency: str = Field(min_length=3, max_length=3)
    mcc: str = Field(min_length=4, max_length=4)
    is_new: Optional[bool] = None
    annual_cc_sales: Optional[Decimal] = None
    avg_ticket: Optional[Decimal] = None
    established_date: Optional[date] = None


class MerchantUpdate(BaseModel):
    entity_type: Optional[int] = None
    legal_name: Optional[str] = None
    dba_name: Optional[str] = None
    ein: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    tc_version: Optional[str] = None
    currency: Optional[str] = None
    mcc: Optional[str] = None
    is_new: Optional[bool] = None
    annual_cc_sales: Optional[Decimal] = None
    avg_ticket: Optional[Decimal] = None
    established_date: Optional[date] = None
    verification_status: Optional[int] = None
    risk_score: Optional[int] = None


class MerchantStatusUpdate(BaseModel):
    status: int


class MerchantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    entity_type: int
    legal_name: str
    dba_name: Optional[str] = None
    email: str
    phone: str
    website: Optional[str] = None
    city: str
    state: str
    country: str
    currency: str
    mcc: str
    tc_version: str
    status: int
    verification_status: int
    risk_score: Optional[int] = None
    approval_date: Optional[datetime] = None
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None
