import uuid
from datetime import datetime, timezone
from typing import Optional

from reparopro.core.settings import ChatSender, QuoteStatus
from reparopro.exceptions.errors import ChatClosed, ValidationRejected
from reparopro.schemas.quote import ChatMessage, Quote, TimelineEvent


def _now() -> datetime:
    return datetime.now(timezone.utc)


def append_timeline_event(
        quote: Quote,
        description: str,
        status: str,
        photo_url: Optional[str] = None,
        now: Optional[datetime] = None,
) -> Quote:
    """Append a progress update. Entries are kept in write order; readers reverse for display."""
    if not description:
        raise ValidationRejected("A descrição da atualização é obrigatória")

    event = TimelineEvent(
        id=f"timeline-{uuid.uuid4().hex}",
        date=now or _now(),
        status=status,
        description=description,
        photo_url=photo_url or None,
    )
    return quote.model_copy(update={"timeline": [*(quote.timeline or []), event]})


def append_chat_message(
        quote: Quote,
        sender: ChatSender,
        text: str,
        now: Optional[datetime] = None,
) -> Quote:
    if not text or not text.strip():
        raise ValidationRejected("A mensagem não pode estar vazia")
    if quote.status == QuoteStatus.COMPLETED:
        raise ChatClosed("O chat está encerrado para serviços concluídos", {"quote_id": quote.id})

    message = ChatMessage(
        id=f"chat-{uuid.uuid4().hex}",
        sender=ChatSender(sender),
        text=text,
        timestamp=now or _now(),
    )
    return quote.model_copy(update={"chat": [*(quote.chat or []), message]})


def current_progress(quote: Quote, default: str) -> str:
    """Label shown to the customer: the last timeline entry by position."""
    if not quote.timeline:
        return default
    return quote.timeline[-1].status
