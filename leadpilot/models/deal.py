from sqlalchemy import Column, Integer, String, Float, Date, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship
from leadpilot.core.database import Base
from leadpilot.models.stages import DealStage, utcnow

class Deal(Base):
    __tablename__ = "crm_deals"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(255), nullable=False)

    # At most one deal per lead on the automation path (checked before insert, not a constraint)
    lead_id = Column(Integer, ForeignKey("crm_leads.id"), nullable=False, index=True)

    # 'qualification', 'proposal', 'negotiation', 'won', 'lost'
    stage = Column(String, nullable=False, default=DealStage.QUALIFICATION.value)
    amount = Column(Float)
    close_date = Column(Date)

    created_at = Column(TIMESTAMP, default=utcnow)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow)

    lead = relationship("Lead", back_populates="deals")
