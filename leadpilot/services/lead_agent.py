"""
leadpilot/services/lead_agent.py

Advances ONE lead by ONE pipeline step:

  1. Load the lead (NotFound if missing)
  2. Terminal stage (won/lost) -> noop, nothing written
  3. Ask the planner for the next step
  4. From 'qualified' onwards, make sure the lead has exactly one Deal
  5. Log an Activity for the transition
  6. Save the new stage + agent_state snapshot on the lead
  7. On 'won', close the Deal as won too

Steps 4-7 share one transaction: a run is either fully visible or not at all.
"""

import logging

from leadpilot.core.store import RecordStore
from leadpilot.models import Activity, Deal, Lead
from leadpilot.models.stages import (
    DEAL_STAGES_FOR_LEAD,
    TERMINAL_STAGES,
    DealStage,
    LeadStage,
)
from leadpilot.schemas.agent import AgentRunResult
from leadpilot.services.stage_planner import NOOP_ACTION, display_name, plan_next_step

logger = logging.getLogger(__name__)

FINALIZED_MESSAGE = "Lead already finalized."


class LeadAgent:
    def __init__(self, store: RecordStore):
        self.store = store

    # ---------------------------------------------------------
    # PUBLIC
    # ---------------------------------------------------------
    def run(self, lead_id: int) -> AgentRunResult:
        lead = self.store.get(Lead, lead_id)

        old_stage = lead.stage or LeadStage.NEW.value

        if old_stage in TERMINAL_STAGES:
            return AgentRunResult(
                lead_id=lead.id,
                old_stage=old_stage,
                new_stage=old_stage,
                action=NOOP_ACTION,
                message=FINALIZED_MESSAGE,
                meta={"final": True},
            )

        step = plan_next_step(old_stage, lead.name, lead.company)

        with self.store.transaction():
            deal, deal_created = None, False
            if step.next_stage in DEAL_STAGES_FOR_LEAD:
                deal, deal_created = self._ensure_deal(lead)

            activity = self.store.create(
                Activity,
                type=step.activity_type,
                lead_id=lead.id,
                deal_id=deal.id if deal else None,
                content=step.message,
                metadata_json={
                    "agentAction": step.action,
                    "fromStage": old_stage,
                    "toStage": step.next_stage,
                },
            )

            self.store.update(
                lead,
                stage=step.next_stage,
                agent_state={
                    "last_action": step.action,
                    "last_message": step.message,
                    "old_stage": old_stage,
                    "new_stage": step.next_stage,
                },
            )

            if step.next_stage == LeadStage.WON.value:
                self.store.update(deal, stage=DealStage.WON.value)

        logger.info(f"🤖 Lead {lead.id}: {old_stage} -> {step.next_stage} ({step.action})")

        return AgentRunResult(
            lead_id=lead.id,
            old_stage=old_stage,
            new_stage=step.next_stage,
            action=step.action,
            message=step.message,
            activity_id=activity.id,
            deal_created=deal_created,
            meta={"activityType": step.activity_type},
        )

    # ---------------------------------------------------------
    # HELPERS
    # ---------------------------------------------------------
    def _ensure_deal(self, lead: Lead):
        """Returns (deal, created). An existing deal is left untouched."""
        existing = self.store.find_one(Deal, Deal.lead_id == lead.id)
        if existing:
            return existing, False

        deal = self.store.create(
            Deal,
            title=f"{display_name(lead.company)} / New deal",
            lead_id=lead.id,
            stage=DealStage.QUALIFICATION.value,
        )
        logger.info(f"💼 Created deal {deal.id} for lead {lead.id}")
        return deal, True


def run_lead_agent(store: RecordStore, lead_id: int) -> AgentRunResult:
    return LeadAgent(store).run(lead_id)
