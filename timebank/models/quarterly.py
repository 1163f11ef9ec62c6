from sqlalchemy import Column, String, Text, Float, Date, DateTime, ForeignKey, func
from timebank.database import Base
from timebank.models.profile import new_uuid

class QuarterlyReflection(Base):
    __tablename__ = "quarterly_reflections"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    quarter_start = Column(Date, nullable=False)
    quarter_end = Column(Date, nullable=False)
    achievement_rate = Column(Float, nullable=False, default=0.0)  # 0–100
    avg_peer_rating = Column(Float, nullable=False, default=0.0)   # 0–5
    avg_goal_rating = Column(Float, nullable=False, default=0.0)   # 0–5
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class QuarterlyAction(Base):
    __tablename__ = "quarterly_actions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    quarterly_reflection_id = Column(
        String(36), ForeignKey("quarterly_reflections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action_text = Column(Text, nullable=False)
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
