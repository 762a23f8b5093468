"""
Wellness Tip Model - Short editorial content shown on the dashboard.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from ..database import Base


class WellnessTip(Base):
    """
    WellnessTip Model

    Fields:
    - title, content, category, icon_name
    - clinic_id: Owning clinic, null for platform-wide tips
    - is_active
    """
    __tablename__ = "wellness_tips"

    id = Column(Integer, primary_key=True, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String, nullable=True)
    icon_name = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    clinic = relationship("Clinic")

    def __repr__(self):
        return f"<WellnessTip(id={self.id}, title='{self.title}')>"
