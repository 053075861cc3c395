from .base import Base
from .quote import QuoteRecord

__all__ = ["Base", "QuoteRecord"]
