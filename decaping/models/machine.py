from sqlalchemy import Boolean, Column, Integer, String, Text

from decaping.database.base import Base


class Machine(Base):
    __tablename__ = "machines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    decaping_method = Column(String, nullable=False, index=True)
    specifications = Column(Text, nullable=True)  # serialised key/value pairs, opaque here
    current_state = Column(String, nullable=False, default="running")
    is_active = Column(Boolean, nullable=False, default=True)
