"""Record model backing the document store."""
from sqlalchemy import Column, String, DateTime, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from app.database import Base


class Record(Base):
    """A JSON document addressed by collection path and id.

    Collection paths look like ``users/{uid}/sites`` or ``publicSites``.
    """
    __tablename__ = "records"

    collection_path = Column(String, primary_key=True)
    record_id = Column(String, primary_key=True)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Record {self.collection_path}/{self.record_id}>"
