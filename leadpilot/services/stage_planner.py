"""
leadpilot/services/stage_planner.py

Rule-based next-step planner for a single lead. Pure: no database, no I/O.
The LeadAgent decides what to persist based on the returned StepPlan.

    new        -> draft_outreach -> outreached  (outreach_email)
    outreached -> follow_up      -> qualified   (note)
    replied    -> qualify        -> qualified   (note)
    qualified  -> proposal       -> proposal    (note)
    proposal   -> close          -> won         (status_change)
    anything else -> noop, stage unchanged      (note)
"""

from typing import NamedTuple

from leadpilot.models.stages import ActivityType, LeadStage

NOOP_ACTION = "noop"
NOOP_MESSAGE = "No action planned."
PLACEHOLDER = "there"


class StepPlan(NamedTuple):
    action: str
    message: str
    next_stage: str
    activity_type: str


def display_name(value) -> str:
    """Blank or whitespace-only names render as 'there'."""
    value = (value or "").strip()
    return value or PLACEHOLDER


# stage -> (action, message template, next stage, activity type)
TRANSITIONS = {
    LeadStage.NEW.value: (
        "draft_outreach",
        "Hi {name},\n\nI noticed {company} and thought it might be worth a quick chat. "
        "Are you open to a 15-min call this week?\n\nBest,\nYou",
        LeadStage.OUTREACHED.value,
        ActivityType.OUTREACH_EMAIL.value,
    ),
    LeadStage.OUTREACHED.value: (
        "follow_up",
        "Follow up with {name} at {company}. Ask 2-3 qualifying questions and propose next step.",
        LeadStage.QUALIFIED.value,
        ActivityType.NOTE.value,
    ),
    LeadStage.REPLIED.value: (
        "qualify",
        "{name} replied. Capture pain points, budget, timeline and move to qualified.",
        LeadStage.QUALIFIED.value,
        ActivityType.NOTE.value,
    ),
    LeadStage.QUALIFIED.value: (
        "proposal",
        "Create a proposal for {name} ({company}) and send it.",
        LeadStage.PROPOSAL.value,
        ActivityType.NOTE.value,
    ),
    LeadStage.PROPOSAL.value: (
        "close",
        "If no blockers, move {name} to won and log the reason.",
        LeadStage.WON.value,
        ActivityType.STATUS_CHANGE.value,
    ),
}


def plan_next_step(stage: str, lead_name: str = "", lead_company: str = "") -> StepPlan:
    """Never raises; unmapped stages (won, lost, unknown) yield a noop plan."""
    rule = TRANSITIONS.get(stage)
    if rule is None:
        return StepPlan(NOOP_ACTION, NOOP_MESSAGE, stage, ActivityType.NOTE.value)

    action, template, next_stage, activity_type = rule
    message = template.format(name=display_name(lead_name), company=display_name(lead_company))
    return StepPlan(action, message, next_stage, activity_type)
