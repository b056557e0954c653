from sqlalchemy import Column, Integer, String, Text

from decaping.database.base import Base, UTCDateTime


class SafetyIncident(Base):
    __tablename__ = "safety_incidents"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    date = Column(UTCDateTime, nullable=False)
    incident_type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(String, nullable=False)
    location = Column(String, nullable=False)
    reported_by = Column(Integer, nullable=False, index=True)
    status = Column(String, nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
