"""
Pipeline enums shared by the models, the planner and the seeder.
"""

from datetime import datetime, timezone
from enum import Enum


class LeadStage(str, Enum):
    NEW = "new"
    OUTREACHED = "outreached"
    REPLIED = "replied"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    WON = "won"
    LOST = "lost"


class DealStage(str, Enum):
    QUALIFICATION = "qualification"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class ActivityType(str, Enum):
    OUTREACH_EMAIL = "outreach_email"
    OUTREACH_CALL = "outreach_call"
    MEETING = "meeting"
    NOTE = "note"
    STATUS_CHANGE = "status_change"


# Once a lead reaches one of these, the agent stops touching it
TERMINAL_STAGES = {LeadStage.WON.value, LeadStage.LOST.value}

# A deal must exist from qualification onwards
DEAL_STAGES_FOR_LEAD = {
    LeadStage.QUALIFIED.value,
    LeadStage.PROPOSAL.value,
    LeadStage.WON.value,
}


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
