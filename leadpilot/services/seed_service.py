"""
leadpilot/services/seed_service.py

Random demo pipeline: one Account + Lead + Deal per item. Used by the
operator "seed" action and by the startup top-up (auto_seed_up_to).
"""

import logging
import random

from leadpilot.core.config import settings
from leadpilot.core.store import RecordStore
from leadpilot.models import Account, Deal, Lead
from leadpilot.models.stages import DealStage, LeadStage
from leadpilot.schemas.ingestion import SeedResult

logger = logging.getLogger(__name__)

FIRST_NAMES = ["Taylor", "Jordan", "Casey", "Riley", "Avery", "Sam", "Jamie", "Morgan", "Alex", "Quinn"]
LAST_NAMES = ["Shah", "Patel", "Singh", "Kim", "Chen", "Garcia", "Brown", "Smith", "Khan", "Ng"]
COMPANIES = ["Acme", "Globex", "Initech", "Umbrella", "Stark", "Wayne", "Wonka", "Hooli", "Vehement", "Soylent"]
COMPANY_SUFFIXES = ["Labs", "Systems", "AI", "Holdings", "Tech"]
DOMAINS = ["example.com", "acme.test", "company.test", "demo.local", "corp.test"]

# Seeded leads never start in a terminal stage
SEED_LEAD_STAGES = [
    LeadStage.NEW.value,
    LeadStage.OUTREACHED.value,
    LeadStage.REPLIED.value,
    LeadStage.QUALIFIED.value,
    LeadStage.PROPOSAL.value,
]

DEAL_STAGE_BY_LEAD_STAGE = {
    LeadStage.NEW.value: DealStage.QUALIFICATION.value,
    LeadStage.OUTREACHED.value: DealStage.QUALIFICATION.value,
    LeadStage.REPLIED.value: DealStage.QUALIFICATION.value,
    LeadStage.QUALIFIED.value: DealStage.QUALIFICATION.value,
    LeadStage.PROPOSAL.value: DealStage.PROPOSAL.value,
    LeadStage.WON.value: DealStage.WON.value,
    LeadStage.LOST.value: DealStage.LOST.value,
}


def _clamp_count(count: int) -> int:
    if count <= 0:
        return 1
    return min(count, settings.SEED_MAX_COUNT)


def seed_demo_data(store: RecordStore, count: int, rng: random.Random = None) -> SeedResult:
    rng = rng or random.Random()
    count = _clamp_count(count)

    result = SeedResult(count=count)

    with store.transaction():
        for _ in range(count):
            fn = rng.choice(FIRST_NAMES)
            ln = rng.choice(LAST_NAMES)
            company = f"{rng.choice(COMPANIES)} {rng.choice(COMPANY_SUFFIXES)}"
            domain = company.replace(" ", "").lower() + "." + rng.choice(DOMAINS)
            email = f"{fn}.{ln}".lower() + f"+{rng.randrange(100000)}@" + rng.choice(DOMAINS)
            stage = rng.choice(SEED_LEAD_STAGES)

            account = store.create(Account, name=company, domain=domain)

            lead = store.create(
                Lead,
                name=f"{fn} {ln}",
                email=email,
                company=company,
                account_id=account.id,
                stage=stage,
                score=rng.randint(0, 100),
            )

            deal = store.create(
                Deal,
                title=f"{company} / Starter",
                lead_id=lead.id,
                stage=DEAL_STAGE_BY_LEAD_STAGE[stage],
                amount=1000 + rng.randrange(50000),
            )

            result.account_ids.append(account.id)
            result.lead_ids.append(lead.id)
            result.deal_ids.append(deal.id)

    logger.info(f"🌱 Seeded {count} demo leads")
    return result


def auto_seed_up_to(store: RecordStore, target: int) -> int:
    """Tops the lead table up to `target` rows. Returns how many were added."""
    if target <= 0:
        return 0
    target = min(target, settings.SEED_MAX_COUNT)

    missing = target - store.count(Lead)
    if missing <= 0:
        return 0

    seed_demo_data(store, missing)
    return missing
