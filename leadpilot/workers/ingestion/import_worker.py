"""
leadpilot/workers/ingestion/import_worker.py

Apify -> normalize -> dedup/upsert. Runs inside the request that triggered it.
"""

import logging

from leadpilot.core.store import RecordStore
from leadpilot.schemas.ingestion import ReconcileReport
from leadpilot.workers.ingestion.apify_client import ApifyClient
from leadpilot.workers.ingestion.normalizer import normalize
from leadpilot.workers.ingestion.reconciler import reconcile

logger = logging.getLogger(__name__)


def import_enriched_leads(store: RecordStore, client: ApifyClient = None) -> ReconcileReport:
    client = client or ApifyClient()

    body = client.fetch_items()
    candidates = normalize(body)
    logger.info(f"   🧾 Apify returned {len(candidates)} candidate profiles")

    return reconcile(store, candidates)
