from sqlalchemy import Column, String, Text, Float, DateTime, ForeignKey, Index, JSON, func, text
from timebank.database import Base
from timebank.models.profile import new_uuid

class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    estimated_hours = Column(Float, nullable=True)
    requester_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)  # Who asked
    assignee_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)    # Who does it
    status = Column(String, nullable=False, default="open")  # open, in_progress, completed, cancelled
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class TaskApplication(Base):
    __tablename__ = "task_applications"

    id = Column(String(36), primary_key=True, default=new_uuid)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    applicant_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    status = Column(String, nullable=False, default="applied")  # applied, withdrawn
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # One active application per (task, applicant); withdrawn rows may repeat.
        Index(
            "uq_task_applications_active",
            "task_id",
            "applicant_id",
            unique=True,
            postgresql_where=text("status = 'applied'"),
            sqlite_where=text("status = 'applied'"),
        ),
    )
