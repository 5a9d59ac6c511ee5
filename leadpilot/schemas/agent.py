from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional

# --- 1. SINGLE LEAD RUN ---
class AgentRunResult(BaseModel):
    lead_id: int
    old_stage: str
    new_stage: str
    action: str
    message: str
    activity_id: Optional[int] = None   # None for noop runs (nothing written)
    deal_created: bool = False
    meta: Dict[str, Any] = {}

    class Config:
        alias_generator = to_camel
        populate_by_name = True

# --- 2. BATCH RUN ---
class BatchRunResponse(BaseModel):
    processed: int
    limit: int
