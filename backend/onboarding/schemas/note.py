from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class NoteCreate(BaseModel):
    note_text: str
    note_type: int = 0
    is_internal: bool = True


class NoteUpdate(BaseModel):
    note_text: str


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    merchant_id: str
    created_by: str
    note_text: str
    note_type: int
    is_internal: bool
    created_at: Optional[datetime] = None
