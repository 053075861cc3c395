from dataclasses import dataclass, field
from typing import Optional

from reparopro.schemas.quote import Quote


def blank_quote() -> Quote:
    return Quote()


@dataclass
class EditorSession:
    """
    Per-user editing context: the quote being authored and the quote opened
    for preview/management. Both are caches of repository records and must be
    refreshed after every write that touches the same id.
    """
    working: Quote = field(default_factory=blank_quote)
    active: Optional[Quote] = None

    def load(self, quote: Quote) -> None:
        self.working = quote.model_copy(deep=True)
        self.active = quote.model_copy(deep=True)

    def reset(self) -> None:
        self.working = blank_quote()
        self.active = None

    def sync(self, updated: Quote) -> None:
        if self.working.id and self.working.id == updated.id:
            self.working = updated.model_copy(deep=True)
        if self.active is not None and self.active.id == updated.id:
            self.active = updated.model_copy(deep=True)

    def on_deleted(self, quote_id: str) -> None:
        if self.working.id == quote_id:
            self.reset()
        elif self.active is not None and self.active.id == quote_id:
            self.active = None
