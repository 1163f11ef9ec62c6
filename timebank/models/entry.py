from sqlalchemy import Column, Integer, String, Text, Float, Date, DateTime, ForeignKey, JSON, func
from timebank.database import Base
from timebank.models.profile import new_uuid

class Entry(Base):
    __tablename__ = "entries"

    id = Column(String(36), primary_key=True, default=new_uuid)
    week_start = Column(Date, nullable=False, index=True)      # Monday of the contributed week
    hours = Column(Float, nullable=False)                      # (0, 100]
    tags = Column(JSON, nullable=False, default=list)          # normalized, at most 10
    note = Column(Text, nullable=False, default="")
    contributor_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    # Legacy single recipient, superseded by entry_recipients. Read only.
    recipient_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class EntryRecipient(Base):
    __tablename__ = "entry_recipients"

    id = Column(String(36), primary_key=True, default=new_uuid)
    entry_id = Column(String(36), ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String(36), nullable=False, index=True)  # profiles.id or guilds.id
    recipient_type = Column(String, nullable=False)                # user, guild
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EntryHistory(Base):
    __tablename__ = "entries_history"

    id = Column(Integer, primary_key=True, index=True)
    entry_id = Column(String(36), nullable=False, index=True)
    actor_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    action = Column(String, nullable=False)  # insert, update, delete
    snapshot = Column(JSON, nullable=False, default=dict)
    acted_at = Column(DateTime(timezone=True), server_default=func.now())
