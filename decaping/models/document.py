from sqlalchemy import Column, Float, Integer, String, Text

from decaping.database.base import Base, UTCDateTime


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    file_type = Column(String, nullable=False)
    file_size = Column(Float, nullable=False)  # megabytes
    last_updated = Column(UTCDateTime, nullable=False)
    download_url = Column(String, nullable=False)
    category = Column(String, nullable=False)
