from pydantic import BaseModel
from typing import Optional, List, Literal

BackupFrequency = Literal["daily", "weekly", "monthly"]


class BackupScheduleRequest(BaseModel):
    frequency: BackupFrequency


class BackupScheduleResponse(BaseModel):
    enabled: bool
    frequency: BackupFrequency
    last_backup: Optional[str] = None
    next_backup: str


class RestoreResponse(BaseModel):
    success: bool
    tables_restored: List[str]
    records_restored: int
    errors: List[str]
