from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date, datetime

# --- 1. TABLE ROW ---
class LeadResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    account_id: Optional[int] = None
    stage: str = "new"
    score: Optional[int] = 0
    last_contacted: Optional[date] = None
    agent_state: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LeadListResponse(BaseModel):
    data: List[LeadResponse]
    total: int
    page: int
    page_size: int

# --- 2. DETAIL VIEW (lead + what the agent did to it) ---
class DealResponse(BaseModel):
    id: int
    title: str
    lead_id: int
    stage: str
    amount: Optional[float] = None
    close_date: Optional[date] = None

    class Config:
        from_attributes = True

class ActivityResponse(BaseModel):
    id: int
    type: str
    lead_id: int
    deal_id: Optional[int] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="metadata_json")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LeadDetailResponse(LeadResponse):
    deals: List[DealResponse] = []
    activities: List[ActivityResponse] = []
