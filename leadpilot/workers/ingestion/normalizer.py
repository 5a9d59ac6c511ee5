"""
leadpilot/workers/ingestion/normalizer.py

Turns the enrichment provider's dataset into a flat list of LeadCandidate.

Envelopes accepted:
    [ {...}, {...} ]                  bare array
    { "items": [ {...}, {...} ] }     wrapped

Each item is routed by its structural fingerprint:
    "direct"     one person per item          (has fullName / personId)
    "flattened"  several people in one item   (csuiteProfile_<field>,
                                               csuiteProfile/<i>/<field>)
    "empty"      nothing usable
"""

import json
from decimal import Decimal

from leadpilot.core.errors import ExternalServiceError
from leadpilot.schemas.ingestion import LeadCandidate

FLAT_PREFIX = "csuiteProfile_"
INDEXED_PREFIX = "csuiteProfile/"


# ---------------------------------------------------------
# HELPER: Scalar coercion
# ---------------------------------------------------------
def as_string(value) -> str:
    """Any JSON value -> trimmed string. Missing/null -> ''."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")

    # Objects/arrays: last resort, serialized and unquoted
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True).strip('"')
    except (TypeError, ValueError):
        return ""


def get_string(item: dict, key: str) -> str:
    if not item:
        return ""
    return as_string(item.get(key))


def first_non_empty(a: str, b: str) -> str:
    a = (a or "").strip()
    if a:
        return a
    return (b or "").strip()


# ---------------------------------------------------------
# 1. ENVELOPE
# ---------------------------------------------------------
def parse_items(body) -> list[dict]:
    """
    Accepts raw bytes/str or an already-decoded document.
    Raises ExternalServiceError for anything that is neither envelope shape.
    """
    if isinstance(body, (bytes, bytearray, str)):
        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            raise ExternalServiceError(f"Enrichment response is not valid JSON: {e}") from e
    else:
        data = body

    # A bare `null` body is an empty dataset
    if data is None:
        return []

    if isinstance(data, dict):
        data = data.get("items") or []

    if not isinstance(data, list):
        raise ExternalServiceError(
            f"Unexpected enrichment payload: expected an array or an 'items' list, got {type(data).__name__}"
        )

    items = []
    for element in data:
        if element is None:
            continue
        if not isinstance(element, dict):
            raise ExternalServiceError(
                f"Unexpected enrichment item: expected an object, got {type(element).__name__}"
            )
        items.append(element)
    return items


# ---------------------------------------------------------
# 2. PROFILE -> CANDIDATE
# ---------------------------------------------------------
def normalize_profile(profile: dict) -> LeadCandidate:
    full_name = first_non_empty(
        get_string(profile, "fullName"),
        f"{get_string(profile, 'firstName')} {get_string(profile, 'lastName')}",
    )
    return LeadCandidate(
        full_name=full_name,
        email=get_string(profile, "email"),
        job_title=first_non_empty(get_string(profile, "jobTitle"), get_string(profile, "headline")),
        linkedin=get_string(profile, "linkedinProfile"),
        phone=first_non_empty(get_string(profile, "mobileNumber"), get_string(profile, "phone")),
        company_name=first_non_empty(
            get_string(profile, "companyName"),
            get_string(profile, f"{FLAT_PREFIX}companyName"),
        ),
        company_website=get_string(profile, "companyWebsite"),
        company_linkedin=get_string(profile, "companyLinkedin"),
    )


# ---------------------------------------------------------
# 3. FINGERPRINT DISPATCH
# ---------------------------------------------------------
def fingerprint(item: dict) -> str:
    if get_string(item, "fullName") or get_string(item, "personId"):
        return "direct"
    if any(k.startswith(FLAT_PREFIX) or k.startswith(INDEXED_PREFIX) for k in item):
        return "flattened"
    return "empty"


def _parse_direct(item: dict) -> list[LeadCandidate]:
    return [normalize_profile(item)]


def _parse_flattened(item: dict) -> list[LeadCandidate]:
    groups: dict[int, dict] = {}

    for key, value in item.items():
        if key.startswith(FLAT_PREFIX):
            groups.setdefault(0, {})[key[len(FLAT_PREFIX):]] = value
            continue

        if key.startswith(INDEXED_PREFIX):
            parts = key[len(INDEXED_PREFIX):].split("/", 1)
            if len(parts) != 2:
                continue
            try:
                idx = int(parts[0])
            except ValueError:
                continue
            groups.setdefault(idx, {})[parts[1]] = value

    return [normalize_profile(groups[idx]) for idx in sorted(groups)]


def _parse_empty(item: dict) -> list[LeadCandidate]:
    return []


PARSERS = {
    "direct": _parse_direct,
    "flattened": _parse_flattened,
    "empty": _parse_empty,
}


def extract_candidates(item: dict) -> list[LeadCandidate]:
    if not item:
        return []
    return PARSERS[fingerprint(item)](item)


# ---------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------
def normalize(payload) -> list[LeadCandidate]:
    candidates: list[LeadCandidate] = []
    for item in parse_items(payload):
        candidates.extend(extract_candidates(item))
    return candidates
