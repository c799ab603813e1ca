from sqlalchemy import Column, String, Text, Index
from database import Base
from datetime import datetime

# --- DOCUMENT STORE ---

class DocumentORM(Base):
    """One document of a named collection. Field values live in `data` as JSON text."""
    __tablename__ = "documents"

    id = Column(String, primary_key=True, index=True)
    collection = Column(String, primary_key=True, index=True)  # blogs, FAQ, programs, ...
    data = Column(Text, nullable=False, default="{}")  # JSON object
    created_at = Column(String, default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_documents_collection_created", "collection", "created_at"),
    )
