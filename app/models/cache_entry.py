from sqlalchemy import Column, String, Text, DateTime
from app.db import Base

class CacheEntry(Base):
    __tablename__ = "cache_entries"

    key = Column(String(120), primary_key=True)
    payload = Column(Text, nullable=False)                  # JSON serializado
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
