from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from onboarding.core.masking import mask_ssn


class MemberCreate(BaseModel):
    title: Optional[str] = None
    first_name: str
    last_name: str
    ssn: str
    date_of_birth: date
    ownership_percentage: int = Field(ge=0, le=10000)  # basis points
    significant_responsibility: bool = False
    politically_exposed: bool = False
    email: EmailStr
    phone: str
    is_primary: bool = False
    address1: str
    address2: Optional[str] = None
    city: str
    state: str
    zip: str
    country: str


class MemberUpdate(BaseModel):
    title: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    ssn: Optional[str] = None
    date_of_birth: Optional[date] = None
    ownership_percentage: Optional[int] = Field(default=None, ge=0, le=10000)
    significant_responsibility: Optional[bool] = None
    politically_exposed: Optional[bool] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    is_primary: Optional[bool] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


class MemberVerificationUpdate(BaseModel):
    id_verification_status: Optional[int] = None
    background_check_status: Optional[int] = None


class MemberResponse(BaseModel):
    """SSN is returned masked."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    merchant_id: str
    title: Optional[str] = None
    first_name: str
    last_name: str
    ssn: str
    date_of_birth: date
    ownership_percentage: int
    significant_responsibility: bool
    politically_exposed: bool
    email: str
    phone: str
    is_primary: bool
    city: str
    state: str
    country: str
    id_verification_status: int
    background_check_status: int

    @classmethod
    def from_member(cls, member) -> "MemberResponse":
        out = cls.model_validate(member)
        out.ssn = mask_ssn(member.ssn)
        return out
