from .account import Account
from .lead import Lead
from .deal import Deal
from .activity import Activity
from .stages import LeadStage, DealStage, ActivityType, TERMINAL_STAGES

__all__ = [
    "Account",
    "Lead",
    "Deal",
    "Activity",
    "LeadStage",
    "DealStage",
    "ActivityType",
    "TERMINAL_STAGES",
]
