from sqlalchemy import Column, Integer, String, Text, Date, TIMESTAMP, ForeignKey, JSON
from sqlalchemy.orm import relationship
from leadpilot.core.database import Base
from leadpilot.models.stages import LeadStage, utcnow

class Lead(Base):
    __tablename__ = "crm_leads"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True)   # natural key when present
    company = Column(String(255))
    job_title = Column(String(255))
    phone = Column(String(255))
    linkedin = Column(String(1024))

    # Weak reference: deleting an account only clears the link
    account_id = Column(Integer, ForeignKey("crm_accounts.id", ondelete="SET NULL"), nullable=True)

    # 'new' -> 'outreached' -> ('replied') -> 'qualified' -> 'proposal' -> 'won' | 'lost'
    stage = Column(String, nullable=False, default=LeadStage.NEW.value, index=True)
    score = Column(Integer, default=0)  # 0-100

    last_contacted = Column(Date)

    # Snapshot of the most recent automated decision
    agent_state = Column(JSON)

    created_at = Column(TIMESTAMP, default=utcnow)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow, index=True)

    account = relationship("Account", back_populates="leads")
    deals = relationship("Deal", back_populates="lead")
    activities = relationship("Activity", back_populates="lead", order_by="Activity.id")
