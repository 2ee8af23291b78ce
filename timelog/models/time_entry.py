import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, UniqueConstraint, func
from timelog.database import Base


def _new_id():
    return str(uuid.uuid4())


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(String(36), primary_key=True, default=_new_id)

    date = Column(String(10), nullable=False, index=True)   # YYYY-MM-DD
    start_time = Column(String(5), nullable=False)          # HH:MM
    end_time = Column(String(5), nullable=False)

    activity = Column(Text, nullable=False, default="")
    thought = Column(Text, nullable=True)
    is_same_as_previous = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("date", "start_time", name="uix_entry_date_slot"),
    )
