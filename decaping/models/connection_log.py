from sqlalchemy import Column, Integer, String

from decaping.database.base import Base, UTCDateTime


class ConnectionLog(Base):
    """One login session; logout_time and session_duration are set once, together."""

    __tablename__ = "connection_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    timestamp = Column(UTCDateTime, nullable=True, index=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    status = Column(String, nullable=False, default="success")
    logout_time = Column(UTCDateTime, nullable=True)
    session_duration = Column(Integer, nullable=True)  # whole seconds
