import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from leadpilot.core.config import settings
from leadpilot.core.database import Base, engine
from leadpilot.core.errors import CRMError
from leadpilot.scheduler import run_startup_seed, start_scheduler, scheduler
from leadpilot.api import crm

from leadpilot.models import *

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = FastAPI(title="Lead Autopilot CRM")

# -------------------------
# Include Routers
# -------------------------
app.include_router(crm.router)


# -------------------------
# DB INIT
# -------------------------
Base.metadata.create_all(bind=engine)


# -------------------------
# Error mapping
# -------------------------
@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


# -------------------------
# FastAPI lifecycle
# -------------------------

@app.on_event("startup")
def startup():
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
        return

    # Seed first, then start ticking: the autopilot never sees a half-seeded table
    run_startup_seed()
    start_scheduler()

@app.on_event("shutdown")
def shutdown():
    if scheduler.running:
        scheduler.shutdown()

# -------------------------
# Routes
# -------------------------

@app.get("/")
def root():
    return {"status": "running"}
