from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func
from billing.db.base import Base


class AppState(Base):
    """Key-value blobs (catalog, company profile). Rewritten wholesale on change."""
    __tablename__ = "app_state"

    key = Column(String(64), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
