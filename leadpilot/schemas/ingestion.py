from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List

# --- 1. NORMALIZED PROFILE (one per person found by the provider) ---
class LeadCandidate(BaseModel):
    full_name: str = ""
    email: str = ""
    job_title: str = ""
    linkedin: str = ""
    phone: str = ""
    company_name: str = ""
    company_website: str = ""
    company_linkedin: str = ""

# --- 2. RECONCILE / IMPORT REPORT ---
class ReconcileReport(BaseModel):
    created: int = Field(0, alias="createdLeads")
    updated: int = Field(0, alias="updatedLeads")
    skipped: int = 0
    total: int = 0

    class Config:
        populate_by_name = True

# --- 3. DEMO SEED ---
class SeedResult(BaseModel):
    count: int
    account_ids: List[int] = []
    lead_ids: List[int] = []
    deal_ids: List[int] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True
