from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.sql import func

from .base import Base


class QuoteRecord(Base):
    """
    One stored quote. The full record lives in `payload`; id, status and
    position are copied out so the table can be inspected and ordered.
    """
    __tablename__ = "quotes"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, index=True)
    customer_portal_token = Column(String, index=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
