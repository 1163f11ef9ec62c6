from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from timebank.database import Base
from timebank.models.profile import new_uuid

class EvaluationAxis(Base):
    __tablename__ = "evaluation_axes"

    id = Column(Integer, primary_key=True, index=True)
    axis_key = Column(String, nullable=False, unique=True)
    axis_label = Column(String, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class DetailedEvaluation(Base):
    __tablename__ = "detailed_evaluations"

    id = Column(String(36), primary_key=True, default=new_uuid)
    entry_id = Column(String(36), ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True)
    evaluator_id = Column(String(36), nullable=False)
    evaluated_id = Column(String(36), nullable=False, index=True)
    axis_key = Column(String, nullable=False)
    score = Column(Integer, nullable=False)       # 1–5
    comment = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # one score per evaluator, evaluated user and axis on an entry
        UniqueConstraint("entry_id", "evaluator_id", "evaluated_id", "axis_key", name="uq_detailed_evaluations_axis"),
    )
