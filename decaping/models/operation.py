from sqlalchemy import Column, Float, Integer, String, Text

from decaping.database.base import Base, UTCDateTime


class Operation(Base):
    __tablename__ = "operations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    operation_id = Column(String, nullable=False, unique=True, index=True)  # OP-YYYYMMDD-NNN
    date = Column(UTCDateTime, nullable=False)
    decaping_method = Column(String, nullable=False, index=True)
    machine_id = Column(Integer, nullable=False)  # informational, not a foreign key
    shift = Column(Integer, nullable=False)
    panel = Column(String, nullable=False)
    section = Column(String, nullable=False)
    level = Column(String, nullable=False)
    machine_state = Column(String, nullable=False)
    running_hours = Column(Float, nullable=False)
    stop_hours = Column(Float, nullable=False)
    excavated_volume = Column(Float, nullable=False)
    observations = Column(Text, nullable=True)
    user_id = Column(Integer, nullable=False, index=True)
    created_at = Column(UTCDateTime, nullable=False)

    # Transport
    discharge_distance = Column(Float, nullable=True)
    truck_count = Column(Integer, nullable=True)
    excavator_count = Column(Integer, nullable=True)

    # Poussage
    bulldozer_count = Column(Integer, nullable=True)
    equipment_state = Column(String, nullable=True)
    excavated_meterage = Column(Float, nullable=True)

    # Casement
    machine_count = Column(Integer, nullable=True)
    intervention_type = Column(String, nullable=True)


class OperationDayCounter(Base):
    """Last sequence number handed out for a calendar day (YYYYMMDD)."""

    __tablename__ = "operation_day_counters"

    day = Column(String(8), primary_key=True)
    last_seq = Column(Integer, nullable=False, default=0)
