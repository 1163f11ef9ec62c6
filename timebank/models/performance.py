# timebank/models/performance.py
from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey, UniqueConstraint
from timebank.database import Base

class MonthlyValueScore(Base):
    """Per-user monthly aggregate, filled upstream and only read here."""
    __tablename__ = "monthly_value_scores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    display_name = Column(String, nullable=False, default="")
    month = Column(Date, nullable=False)  # first day of the month

    total_hours = Column(Float, default=0.0)
    avg_rating = Column(Float, default=0.0)
    feedback_count = Column(Integer, default=0)
    value_score = Column(Float, default=0.0)  # total_hours*1.0 + avg_rating*2.0

    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_value_score_user_month"),
    )
