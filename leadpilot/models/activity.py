from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, ForeignKey, JSON
from sqlalchemy.orm import relationship
from leadpilot.core.database import Base
from leadpilot.models.stages import utcnow


# Append-only audit log: rows are never updated or deleted
class Activity(Base):
    __tablename__ = "crm_activities"

    id = Column(Integer, primary_key=True, index=True)

    # 'outreach_email', 'outreach_call', 'meeting', 'note', 'status_change'
    type = Column(String, nullable=False)

    lead_id = Column(Integer, ForeignKey("crm_leads.id"), nullable=False, index=True)
    deal_id = Column(Integer, ForeignKey("crm_deals.id"), nullable=True)

    content = Column(Text)

    # e.g. {"agentAction": "follow_up", "fromStage": "outreached", "toStage": "qualified"}
    metadata_json = Column("metadata", JSON)

    created_at = Column(TIMESTAMP, default=utcnow)

    lead = relationship("Lead", back_populates="activities")
    deal = relationship("Deal")
