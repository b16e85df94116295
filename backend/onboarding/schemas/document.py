from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentCreate(BaseModel):
    member_id: Optional[str] = None
    document_type: int
    document_name: str
    document_path: str
    mime_type: str
    file_size: int = Field(gt=0)  # bytes


class DocumentUpdate(BaseModel):
    member_id: Optional[str] = None
    document_type: Optional[int] = None
    document_name: Optional[str] = None
    document_path: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = Field(default=None, gt=0)


class DocumentVerificationUpdate(BaseModel):
    status: int
    verified_by: Optional[str] = None


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    merchant_id: str
    member_id: Optional[str] = None
    document_type: int
    document_name: str
    document_path: str
    mime_type: str
    file_size: int
    verification_status: int
    verification_date: Optional[datetime] = None
    verified_by: Optional[str] = None
