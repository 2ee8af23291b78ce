import uuid

from sqlalchemy import Column, String, Text, DateTime, func
from timelog.database import Base

ANALYSIS_TYPE = "analysis"


class SavedNote(Base):
    __tablename__ = "saved_notes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    content = Column(Text, nullable=False)
    source_date = Column(String(10), nullable=True, index=True)
    type = Column(String(20), nullable=False, default=ANALYSIS_TYPE)

    created_at = Column(DateTime, server_default=func.now())
