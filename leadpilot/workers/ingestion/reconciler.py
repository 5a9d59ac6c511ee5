"""
leadpilot/workers/ingestion/reconciler.py

Dedup + idempotent upsert of LeadCandidates into Accounts and Leads.

  1. Collapse duplicates in memory (email, else name+company). First one wins.
  2. Skip candidates without a name or a company.
  3. Account: exact match on name, created with a domain from the website.
  4. Lead: exact match on email, else on (name, company). Blank candidate
     fields never overwrite stored values.

Each candidate is committed on its own. The first storage error stops the
run; candidates already committed stay committed.
"""

import logging
from urllib.parse import urlparse

from leadpilot.core.errors import ValidationError
from leadpilot.core.store import RecordStore
from leadpilot.models import Account, Lead
from leadpilot.models.stages import LeadStage
from leadpilot.schemas.ingestion import LeadCandidate, ReconcileReport

logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# HELPER: Website -> domain
# ---------------------------------------------------------
def domain_from_website(site: str) -> str:
    """'https://www.example.com/path' -> 'example.com'. Unparseable -> ''."""
    site = (site or "").strip()
    if not site:
        return ""
    if "://" not in site:
        site = "https://" + site

    try:
        host = urlparse(site).hostname or ""
    except ValueError:
        return ""

    host = host.strip().lower()
    if host.startswith("www."):
        host = host[len("www."):]
    return host


# ---------------------------------------------------------
# 1. IN-MEMORY DEDUP
# ---------------------------------------------------------
def dedup_key(candidate: LeadCandidate) -> str:
    email = candidate.email.strip()
    if email:
        return "email:" + email.lower()
    return (
        "name_company:"
        + candidate.full_name.strip().lower()
        + "|"
        + candidate.company_name.strip().lower()
    )


EMPTY_KEY = "name_company:|"


def dedupe_candidates(candidates: list[LeadCandidate]) -> list[LeadCandidate]:
    """
    Keeps the first candidate per key, in input order. Candidates with no
    email, name or company have nothing to collapse on and are all kept, so
    they count towards the report's `total`; reconcile() then counts each
    one as `skipped` without writing anything.
    """
    seen: set[str] = set()
    deduped: list[LeadCandidate] = []

    for c in candidates:
        key = dedup_key(c)
        if key == EMPTY_KEY:
            deduped.append(c)
            continue
        if key in seen:
            continue
        seen.add(key)
        deduped.append(c)

    return deduped


# ---------------------------------------------------------
# 2. UPSERTS
# ---------------------------------------------------------
def upsert_account_by_name(store: RecordStore, company_name: str, company_website: str = ""):
    """Returns (account, created). Existing accounts are returned untouched."""
    company_name = (company_name or "").strip()
    if not company_name:
        raise ValidationError("missing company name")

    account = store.find_one(Account, Account.name == company_name)
    if account:
        return account, False

    fields = {"name": company_name}
    domain = domain_from_website(company_website)
    if domain:
        fields["domain"] = domain

    return store.create(Account, **fields), True


def upsert_lead(store: RecordStore, account_id: int, candidate: LeadCandidate):
    """Returns (lead, created)."""
    full_name = candidate.full_name.strip()
    email = candidate.email.strip()
    company = candidate.company_name.strip()

    if email:
        lead = store.find_one(Lead, Lead.email == email)
    else:
        lead = store.find_one(Lead, Lead.name == full_name, Lead.company == company)

    fields = {
        "name": full_name,
        "company": company,
        "account_id": account_id,
    }
    if email:
        fields["email"] = email

    # Non-destructive: only fill what the candidate actually has
    for attr, value in (
        ("job_title", candidate.job_title),
        ("phone", candidate.phone),
        ("linkedin", candidate.linkedin),
    ):
        value = value.strip()
        if value:
            fields[attr] = value

    if lead is None:
        lead = store.create(Lead, stage=LeadStage.NEW.value, score=0, **fields)
        return lead, True

    store.update(lead, **fields)
    return lead, False


# ---------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------
def reconcile(store: RecordStore, candidates: list[LeadCandidate]) -> ReconcileReport:
    deduped = dedupe_candidates(candidates)
    report = ReconcileReport(total=len(deduped))

    for c in deduped:
        if not c.full_name.strip() or not c.company_name.strip():
            report.skipped += 1
            continue

        with store.transaction():
            account, _ = upsert_account_by_name(store, c.company_name, c.company_website)
            _, created = upsert_lead(store, account.id, c)

        if created:
            report.created += 1
        else:
            report.updated += 1

    logger.info(
        f"📥 Reconciled {report.total} candidates: "
        f"{report.created} created, {report.updated} updated, {report.skipped} skipped"
    )
    return report
