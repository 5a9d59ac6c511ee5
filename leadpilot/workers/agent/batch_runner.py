"""
leadpilot/workers/agent/batch_runner.py

Autopilot batch: picks the most recently updated open leads and advances each
one step with the LeadAgent. One bad lead never stops the batch.

Only one batch runs at a time per process: the scheduler tick and the manual
API trigger both go through `run_exclusive`, which skips instead of waiting
when a batch is already in flight.
"""

import logging
import threading
from typing import Optional

from leadpilot.core.config import settings
from leadpilot.core.database import SessionLocal
from leadpilot.core.store import RecordStore
from leadpilot.models import Lead
from leadpilot.models.stages import TERMINAL_STAGES
from leadpilot.services.lead_agent import LeadAgent

logger = logging.getLogger(__name__)

_batch_lock = threading.Lock()


def select_pending_leads(store: RecordStore, limit: int) -> list:
    # Newest activity first: long-stalled leads can wait behind a busy pipeline
    return store.find_many(
        Lead,
        Lead.stage.notin_(sorted(TERMINAL_STAGES)),
        order_by=[Lead.updated_at.desc(), Lead.id.desc()],
        limit=limit,
    )


def effective_limit(limit: Optional[int]) -> int:
    if not limit or limit <= 0:
        limit = settings.AGENT_BATCH_LIMIT
    return min(limit, settings.AGENT_BATCH_MAX)


def run_pending_leads(store: RecordStore, limit: Optional[int] = None) -> int:
    """Returns how many leads were advanced successfully."""
    limit = effective_limit(limit)

    # ids only: every agent run commits, which expires loaded objects
    lead_ids = [lead.id for lead in select_pending_leads(store, limit)]

    agent = LeadAgent(store)
    processed = 0

    for lead_id in lead_ids:
        try:
            agent.run(lead_id)
            processed += 1
        except Exception as e:
            logger.warning(f"⚠️ Agent run failed for lead {lead_id}: {e}")
            store.rollback()
            continue

    return processed


def run_exclusive(store: RecordStore, limit: Optional[int] = None) -> Optional[int]:
    """Like run_pending_leads, but returns None when another batch is still running."""
    if not _batch_lock.acquire(blocking=False):
        return None
    try:
        return run_pending_leads(store, limit)
    finally:
        _batch_lock.release()


def run_agent_batch(session_factory=SessionLocal) -> int:
    """Scheduler entry point. Opens its own session and never raises."""
    db = session_factory()
    try:
        processed = run_exclusive(RecordStore(db), settings.AGENT_BATCH_LIMIT)
        if processed is None:
            logger.info("⏭️ Autopilot: previous batch still running, skipping this tick.")
            return 0

        logger.info(f"✅ Autopilot: advanced {processed} leads.")
        return processed

    except Exception as e:
        logger.error(f"❌ Autopilot batch failed: {e}")
        return 0
    finally:
        db.close()
