from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from leadpilot.core.config import settings
from leadpilot.core.database import get_db
from leadpilot.core.store import RecordStore
from leadpilot.models import Lead
from leadpilot.schemas.agent import AgentRunResult, BatchRunResponse
from leadpilot.schemas.ingestion import ReconcileReport, SeedResult
from leadpilot.schemas.lead import LeadDetailResponse, LeadListResponse
from leadpilot.services.lead_agent import run_lead_agent
from leadpilot.services.seed_service import seed_demo_data
from leadpilot.workers.agent.batch_runner import effective_limit, run_exclusive
from leadpilot.workers.ingestion.import_worker import import_enriched_leads

router = APIRouter(prefix="/api/ai-crm", tags=["AI CRM"])


def require_operator(authorization: Optional[str] = Header(None)):
    """Operator actions need the admin bearer token, when one is configured."""
    token = settings.ADMIN_API_TOKEN
    if not token:
        return
    if authorization != f"Bearer {token}":
        raise HTTPException(status_code=401, detail="Operator token required")


# ---------------------------------------------------------
# 1. HEALTH
# ---------------------------------------------------------
@router.get("/health")
def health():
    return {"ok": True}


# ---------------------------------------------------------
# 2. OPERATOR ACTIONS
# ---------------------------------------------------------
@router.post("/seed", response_model=SeedResult, dependencies=[Depends(require_operator)])
def seed(count: int = 1, db: Session = Depends(get_db)):
    return seed_demo_data(RecordStore(db), count)


@router.post("/agents/run/{lead_id}", response_model=AgentRunResult, dependencies=[Depends(require_operator)])
def run_agent(lead_id: int, db: Session = Depends(get_db)):
    return run_lead_agent(RecordStore(db), lead_id)


@router.post("/agents/run-pending", response_model=BatchRunResponse, dependencies=[Depends(require_operator)])
def run_pending(limit: Optional[int] = None, db: Session = Depends(get_db)):
    effective = effective_limit(limit)
    processed = run_exclusive(RecordStore(db), effective)
    if processed is None:
        raise HTTPException(status_code=409, detail="An agent batch is already running")
    return BatchRunResponse(processed=processed, limit=effective)


@router.post("/apify/import", response_model=ReconcileReport, dependencies=[Depends(require_operator)])
def apify_import(db: Session = Depends(get_db)):
    return import_enriched_leads(RecordStore(db))


# ---------------------------------------------------------
# 3. LEADS (inspect what the autopilot did)
# ---------------------------------------------------------
@router.get("/leads", response_model=LeadListResponse, dependencies=[Depends(require_operator)])
def list_leads(
    stage: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    query = db.query(Lead)
    if stage:
        query = query.filter(Lead.stage == stage)

    total = query.count()
    leads = query.order_by(Lead.updated_at.desc(), Lead.id.desc())\
                 .offset((page - 1) * page_size)\
                 .limit(page_size)\
                 .all()

    return {"data": leads, "total": total, "page": page, "page_size": page_size}


@router.get("/leads/{lead_id}", response_model=LeadDetailResponse, dependencies=[Depends(require_operator)])
def get_lead(lead_id: int, db: Session = Depends(get_db)):
    return RecordStore(db).get(Lead, lead_id)
