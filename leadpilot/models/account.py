from sqlalchemy import Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import relationship
from leadpilot.core.database import Base
from leadpilot.models.stages import utcnow

class Account(Base):
    __tablename__ = "crm_accounts"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False, index=True)  # natural key, exact match
    domain = Column(String(255))
    notes = Column(Text)

    created_at = Column(TIMESTAMP, default=utcnow)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow)

    leads = relationship("Lead", back_populates="account")
