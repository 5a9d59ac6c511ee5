"""
leadpilot/workers/ingestion/apify_client.py

Single synchronous call to the Apify actor that searches businesses and
enriches their C-suite contacts. Returns the raw dataset body; parsing lives
in normalizer.py.

SETUP in .env:
    APIFY_TOKEN=apify_api_...
    APIFY_TIMEOUT_SECONDS=330     (the actor crawls before it answers)

Failure mapping:
    no token              -> PreconditionError   (never retried)
    timeout               -> ExternalTimeoutError
    connection refused    -> retried 3x, then ExternalServiceError (connect timeouts are not retried)
    HTTP >= 400           -> ExternalServiceError with the response body
"""

import logging
import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from leadpilot.core.config import settings
from leadpilot.core.errors import ExternalServiceError, ExternalTimeoutError, PreconditionError

logger = logging.getLogger(__name__)


class ApifyClient:
    def __init__(self, token=None, actor_url=None, timeout=None, search_input=None):
        self.token = (token if token is not None else settings.APIFY_TOKEN or "").strip()
        self.actor_url = actor_url or settings.APIFY_ACTOR_URL
        self.timeout = timeout or settings.APIFY_TIMEOUT_SECONDS
        self.search_input = search_input or settings.APIFY_SEARCH_INPUT

    @retry(
        # ConnectTimeout is also a ConnectionError: timeouts surface on the first attempt
        retry=(
            retry_if_exception_type(requests.exceptions.ConnectionError)
            & retry_if_not_exception_type(requests.exceptions.Timeout)
        ),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _post(self) -> requests.Response:
        return requests.post(
            self.actor_url,
            params={
                "token": self.token,
                "view": "leadsEnrichment",
                "clean": "true",
            },
            json=self.search_input,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def fetch_items(self) -> bytes:
        if not self.token:
            raise PreconditionError("missing APIFY_TOKEN")

        logger.info(f"🔎 Calling Apify actor (timeout {self.timeout}s)...")

        try:
            resp = self._post()
        except requests.exceptions.Timeout as e:
            raise ExternalTimeoutError(f"apify request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise ExternalServiceError(f"apify request failed: {e}") from e

        if resp.status_code >= 400:
            raise ExternalServiceError(
                f"apify request failed ({resp.status_code}): {resp.text.strip()}"
            )

        return resp.content
