import os
from urllib.parse import quote_plus
from dotenv import load_dotenv

load_dotenv()


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST")
    if host:
        user = os.getenv("DB_USER", "")
        password = quote_plus(os.getenv("DB_PASSWORD", ""))
        port = os.getenv("DB_PORT", "5432")
        name = os.getenv("DB_NAME", "leadpilot")
        return f"postgresql://{user}:{password}@{host}:{port}/{name}"

    return "sqlite:///./leadpilot.db"


class Settings:
    DATABASE_URL = _build_database_url()

    # OPERATOR ROUTES
    # When set, /api/ai-crm actions require "Authorization: Bearer <token>"
    ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")

    # APIFY (lead enrichment provider)
    APIFY_TOKEN = os.getenv("APIFY_TOKEN")
    APIFY_ACTOR_URL = os.getenv(
        "APIFY_ACTOR_URL",
        "https://api.apify.com/v2/acts/compass~crawler-google-places/run-sync-get-dataset-items",
    )
    APIFY_TIMEOUT_SECONDS = int(os.getenv("APIFY_TIMEOUT_SECONDS", "330"))

    # Search input sent to the actor
    APIFY_SEARCH_INPUT = {
        "searchStringsArray": ["e-commerce"],
        "locationQuery": "Dubai, United Arab Emirates",
        "countryCode": "AE",
        "language": "en",
        "maxCrawledPlacesPerSearch": 10,
        "maximumLeadsEnrichmentRecords": 3,
        "leadsEnrichmentDepartments": ["c_suite"],
        "scrapeContacts": False,
        "scrapePlaceDetailPage": False,
    }

    # AUTOPILOT
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
    AGENT_INTERVAL_MINUTES = int(os.getenv("AGENT_INTERVAL_MINUTES", "1"))
    AGENT_BATCH_LIMIT = int(os.getenv("AGENT_BATCH_LIMIT", "5"))
    AGENT_BATCH_MAX = int(os.getenv("AGENT_BATCH_MAX", "50"))

    # LIMITS
    AUTO_SEED_TARGET = int(os.getenv("AUTO_SEED_TARGET", "25"))
    SEED_MAX_COUNT = 500

settings = Settings()
