from sqlalchemy import Column, Integer, String, Text

from decaping.database.base import Base, UTCDateTime


class Activity(Base):
    """Append-only record of a user-triggered action."""

    __tablename__ = "activities"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)  # operation_created, machine_updated, ...
    description = Column(Text, nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    timestamp = Column(UTCDateTime, nullable=True, index=True)
    related_entity_id = Column(Integer, nullable=True)
    related_entity_type = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    action_status = Column(String, nullable=False, default="success")
