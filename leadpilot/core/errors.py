"""
leadpilot/core/errors.py

Error taxonomy shared by the agent, the batch runner and the ingestion
pipeline. API routes translate these into HTTP status codes (see main.py).
"""


class CRMError(Exception):
    """Base class for every error raised by leadpilot."""

    status_code = 500


class NotFound(CRMError):
    """A lead, deal or other record lookup missed."""

    status_code = 404


class ValidationError(CRMError):
    """Malformed input: bad counts, candidates missing required fields."""

    status_code = 400


class ExternalServiceError(CRMError):
    """Enrichment provider unreachable, non-2xx, or returned an unusable body."""

    status_code = 502


class ExternalTimeoutError(ExternalServiceError):
    status_code = 504


class PreconditionError(CRMError):
    """A required credential or setting is missing. Never retried."""

    status_code = 412


class PersistenceError(CRMError):
    """Any failure reading from or writing to the record store."""

    status_code = 500
