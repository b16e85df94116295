from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    merchant_id: str
    table_name: str
    record_id: str
    action: str
    changed_by: str
    ip_address: Optional[str] = None
    changes: Dict[str, Any]
    created_at: Optional[datetime] = None


class ActivitySummaryResponse(BaseModel):
    total_actions: int
    actions_by_table: Dict[str, Dict[str, int]]
    merchants_modified: int
    timeline: Dict[str, int]
