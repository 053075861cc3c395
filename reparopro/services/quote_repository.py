import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from sqlalchemy.orm import Session

from reparopro.models.quote import QuoteRecord
from reparopro.schemas.quote import Quote

logger = logging.getLogger(__name__)


class QuoteRepository(ABC):
    """Durable keyed store of quotes with whole-collection load/save."""

    @abstractmethod
    def load_all(self) -> List[Quote]:
        ...

    @abstractmethod
    def save_all(self, quotes: List[Quote]) -> None:
        ...


class InMemoryQuoteRepository(QuoteRepository):

    def __init__(self, quotes: List[Quote] = None):
        self._quotes = [quote.model_copy(deep=True) for quote in quotes or []]
        self.save_count = 0

    def load_all(self) -> List[Quote]:
        return [quote.model_copy(deep=True) for quote in self._quotes]

    def save_all(self, quotes: List[Quote]) -> None:
        self._quotes = [quote.model_copy(deep=True) for quote in quotes]
        self.save_count += 1


class SqlQuoteRepository(QuoteRepository):
    """Stores each quote as a JSON payload row; save_all rewrites the table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load_all(self) -> List[Quote]:
        db = self.session_factory()
        try:
            records = db.query(QuoteRecord).order_by(QuoteRecord.position).all()
            return [Quote.model_validate(record.payload) for record in records]
        finally:
            db.close()

    def save_all(self, quotes: List[Quote]) -> None:
        db = self.session_factory()
        try:
            db.query(QuoteRecord).delete()
            for position, quote in enumerate(quotes):
                db.add(QuoteRecord(
                    id=quote.id,
                    position=position,
                    status=quote.status.value,
                    customer_portal_token=quote.customer_portal_token,
                    payload=quote.model_dump(mode="json"),
                ))
            db.commit()
        except Exception as e:
            logger.error(f"Error saving quotes: {str(e)}")
            db.rollback()
            raise
        finally:
            db.close()
