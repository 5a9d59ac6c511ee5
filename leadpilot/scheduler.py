import logging
from apscheduler.schedulers.background import BackgroundScheduler
from leadpilot.core.config import settings
from leadpilot.core.database import SessionLocal
from leadpilot.core.store import RecordStore

# --- WORKERS ---
from leadpilot.services.seed_service import auto_seed_up_to
from leadpilot.workers.agent.batch_runner import run_agent_batch

logger = logging.getLogger(__name__)
scheduler = BackgroundScheduler()

# ---------------------------------------------------------
# STARTUP: Demo data top-up
# ---------------------------------------------------------
def run_startup_seed(session_factory=SessionLocal) -> int:
    """
    Runs once, before the scheduler starts, so the first autopilot tick
    never races the seeder. Best effort: failures are logged, not raised.
    """
    db = session_factory()
    try:
        seeded = auto_seed_up_to(RecordStore(db), settings.AUTO_SEED_TARGET)
        if seeded:
            logger.info(f"🌱 Startup: seeded {seeded} demo leads (target {settings.AUTO_SEED_TARGET}).")
        return seeded
    except Exception as e:
        logger.warning(f"⚠️ Startup seed failed: {e}")
        return 0
    finally:
        db.close()

# ---------------------------------------------------------
# SCHEDULER SETUP
# ---------------------------------------------------------
def start_scheduler():
    if scheduler.running:
        return

    # Autopilot (every minute); a tick never overlaps the previous one
    scheduler.add_job(
        run_agent_batch,
        "interval",
        minutes=settings.AGENT_INTERVAL_MINUTES,
        id="ai_crm_autopilot",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    scheduler.start()
    logger.info("🚀 Background Scheduler Started.")
