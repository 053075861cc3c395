import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional

from reparopro.core.catalog import PORTAL_IDLE_STATUS, WORK_ORDER_SEED_DESCRIPTION, WORK_ORDER_SEED_STATUS
from reparopro.core.permissions import APPROVER_ROLES, DELETE_ROLES, EDITOR_ROLES, require_active, require_role
from reparopro.core.settings import OVERRIDE_STATUSES, ChatSender, QuoteStatus
from reparopro.exceptions.errors import (
    InvalidPortalToken,
    InvalidTransition,
    MissingPortalToken,
    NotFound,
    ValidationRejected,
)
from reparopro.schemas.quote import DamagedPart, PortalView, Quote, TimelineEvent
from reparopro.schemas.user import UserObject
from reparopro.services import ledger
from reparopro.services.quote_repository import QuoteRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def mint_portal_token() -> str:
    return secrets.token_urlsafe(32)


class QuoteService:
    """
    Lifecycle of a quote: pending -> approved/denied -> os-generated ->
    em-andamento -> concluido.

    The service keeps no state between calls. Each operation loads the whole
    collection, applies one change and writes the whole collection back.
    """

    def __init__(self, repository: QuoteRepository, clock: Callable[[], datetime] = _utcnow):
        self.repository = repository
        self.clock = clock

    # Reads

    def list_quotes(self, actor: UserObject) -> List[Quote]:
        require_active(actor)
        return self.repository.load_all()

    def get(self, quote_id: str, actor: UserObject) -> Quote:
        require_active(actor)
        return self._find(self.repository.load_all(), quote_id)

    def search_by_plate(self, plate: str, actor: UserObject) -> List[Quote]:
        require_active(actor)
        needle = (plate or "").strip().lower()
        if not needle:
            return []
        return [q for q in self.repository.load_all() if needle in q.vehicle.plate.lower()]

    def filter_quotes(self, term: Optional[str], actor: UserObject) -> List[Quote]:
        """Match on customer name or plate; an empty term returns everything."""
        quotes = self.list_quotes(actor)
        if not term:
            return quotes
        needle = term.lower()
        return [
            q for q in quotes
            if needle in q.customer.name.lower() or needle in q.vehicle.plate.lower()
        ]

    # Authoring

    def save(self, quote: Quote, actor: UserObject) -> Quote:
        require_role(actor, *EDITOR_ROLES)
        to_save = quote.model_copy(deep=True)
        if not to_save.status:
            to_save.status = QuoteStatus.PENDING
        if not to_save.id:
            to_save.id = f"quote-{uuid.uuid4().hex}"
            to_save.created_at = self.clock()
            to_save.created_by_id = actor.id
            to_save.created_by_name = actor.name
            logger.info(f"Creating quote {to_save.id} by user {actor.id}")

        quotes = self.repository.load_all()
        if any(q.id == to_save.id for q in quotes):
            quotes = [to_save if q.id == to_save.id else q for q in quotes]
        else:
            quotes = [to_save, *quotes]
        self.repository.save_all(quotes)
        return to_save

    def update_damaged_parts(
            self,
            quote_id: str,
            damaged_parts: Mapping[str, DamagedPart],
            actor: UserObject,
    ) -> Quote:
        require_role(actor, *EDITOR_ROLES)
        return self._mutate(quote_id, lambda q: q.model_copy(update={"damaged_parts": dict(damaged_parts)}))

    # Approval and work order

    def set_approval_status(self, quote_id: str, status: QuoteStatus, actor: UserObject) -> Quote:
        require_role(actor, *APPROVER_ROLES)
        status = QuoteStatus(status)
        if status not in (QuoteStatus.APPROVED, QuoteStatus.DENIED):
            raise ValidationRejected(f"Status de aprovação inválido: {status.value}")

        def apply(quote: Quote) -> Quote:
            if quote.status != QuoteStatus.PENDING:
                raise InvalidTransition(
                    f"Orçamento {quote.id} já foi resolvido ({quote.status.value})",
                    {"from": quote.status.value, "to": status.value},
                )
            update = {"status": status}
            if status == QuoteStatus.APPROVED and quote.approved_at is None:
                update["approved_at"] = self.clock()
            return quote.model_copy(update=update)

        updated = self._mutate(quote_id, apply)
        logger.info(f"Quote {quote_id} marked {status.value} by user {actor.id}")
        return updated

    def generate_work_order(self, quote_id: str, actor: UserObject) -> Quote:
        require_role(actor, *APPROVER_ROLES)

        def apply(quote: Quote) -> Quote:
            if quote.status != QuoteStatus.APPROVED:
                raise InvalidTransition(
                    f"Apenas orçamentos aprovados geram OS (status atual: {quote.status.value})",
                    {"from": quote.status.value, "to": QuoteStatus.OS_GENERATED.value},
                )
            now = self.clock()
            seed = TimelineEvent(
                id=f"timeline-{uuid.uuid4().hex}",
                date=now,
                status=WORK_ORDER_SEED_STATUS,
                description=WORK_ORDER_SEED_DESCRIPTION,
            )
            return quote.model_copy(update={
                "status": QuoteStatus.OS_GENERATED,
                "os_generated_at": now,
                "customer_portal_token": mint_portal_token(),
                "timeline": [seed],
                "chat": [],
            })

        updated = self._mutate(quote_id, apply)
        logger.info(f"Work order {updated.os_number} generated for quote {quote_id}")
        return updated

    def sign(self, quote_id: str, signature: str, actor: UserObject) -> Quote:
        require_role(actor, *EDITOR_ROLES)
        if not signature:
            raise ValidationRejected("A assinatura é obrigatória")

        def apply(quote: Quote) -> Quote:
            if quote.status != QuoteStatus.OS_GENERATED:
                logger.warning(f"Signing quote {quote.id} from status {quote.status.value}")
            return quote.model_copy(update={
                "signature": signature,
                "signed_at": self.clock(),
                "status": QuoteStatus.IN_PROGRESS,
            })

        return self._mutate(quote_id, apply)

    def set_terms(self, quote_id: str, terms: str, actor: UserObject) -> Quote:
        require_role(actor, *EDITOR_ROLES)
        return self._mutate(quote_id, lambda q: q.model_copy(update={"terms_and_conditions": terms}))

    # Service management

    def update_service(self, quote: Quote, actor: UserObject) -> Quote:
        """Whole-record replace of a stored quote."""
        require_role(actor, *EDITOR_ROLES)
        return self._mutate(quote.id, lambda _: quote.model_copy(deep=True))

    def set_status(self, quote_id: str, status: QuoteStatus, actor: UserObject) -> Quote:
        """Administrative override; skipped edges are accepted."""
        require_role(actor, *EDITOR_ROLES)
        status = QuoteStatus(status)
        if status not in OVERRIDE_STATUSES:
            raise ValidationRejected(
                f"Status não permitido na gestão do serviço: {status.value}",
                {"allowed": [s.value for s in OVERRIDE_STATUSES]},
            )
        return self._mutate(quote_id, lambda q: q.model_copy(update={"status": status}))

    def add_timeline_event(
            self,
            quote_id: str,
            description: str,
            status: str,
            actor: UserObject,
            photo_url: Optional[str] = None,
    ) -> Quote:
        require_role(actor, *EDITOR_ROLES)
        return self._mutate(
            quote_id,
            lambda q: ledger.append_timeline_event(q, description, status, photo_url, now=self.clock()),
        )

    def post_chat_message(self, quote_id: str, text: str, actor: UserObject) -> Quote:
        require_role(actor, *EDITOR_ROLES)
        return self._mutate(
            quote_id,
            lambda q: ledger.append_chat_message(q, ChatSender.WORKSHOP, text, now=self.clock()),
        )

    def delete(self, quote_id: str, actor: UserObject) -> None:
        require_role(actor, *DELETE_ROLES)
        quotes = self.repository.load_all()
        self._find(quotes, quote_id)
        self.repository.save_all([q for q in quotes if q.id != quote_id])
        logger.info(f"Quote {quote_id} deleted by user {actor.id}")

    # Customer portal

    def open_portal(self, token: Optional[str]) -> Quote:
        if not token:
            raise MissingPortalToken("Nenhum token de acesso informado")
        # Bytes, since compare_digest rejects non-ASCII str
        candidate = token.encode("utf-8")
        quote = next(
            (q for q in self.repository.load_all() if q.customer_portal_token and
             secrets.compare_digest(q.customer_portal_token.encode("utf-8"), candidate)),
            None,
        )
        if quote is None:
            raise InvalidPortalToken("O link de acesso não é válido. Entre em contato com a oficina.")
        return quote

    def portal_view(self, token: Optional[str]) -> PortalView:
        return build_portal_view(self.open_portal(token))

    def post_portal_message(self, token: Optional[str], text: str) -> Quote:
        quote = self.open_portal(token)
        return self._mutate(
            quote.id,
            lambda q: ledger.append_chat_message(q, ChatSender.CUSTOMER, text, now=self.clock()),
        )

    # Helpers

    @staticmethod
    def _find(quotes: List[Quote], quote_id: str) -> Quote:
        quote = next((q for q in quotes if q.id == quote_id), None)
        if quote is None:
            raise NotFound(f"Orçamento não encontrado: {quote_id}", {"quote_id": quote_id})
        return quote

    def _mutate(self, quote_id: str, apply: Callable[[Quote], Quote]) -> Quote:
        quotes = self.repository.load_all()
        updated = apply(self._find(quotes, quote_id))
        self.repository.save_all([updated if q.id == quote_id else q for q in quotes])
        return updated


def build_portal_view(quote: Quote) -> PortalView:
    first_name = quote.customer.name.split(" ")[0] if quote.customer.name else ""
    return PortalView(
        quote_id=quote.id,
        os_number=quote.os_number,
        customer_name=first_name,
        vehicle=f"{quote.vehicle.make} {quote.vehicle.model}".strip(),
        status=quote.status,
        current_status=ledger.current_progress(quote, PORTAL_IDLE_STATUS),
        timeline=list(reversed(quote.timeline or [])),
        chat=list(quote.chat or []),
        chat_enabled=quote.status != QuoteStatus.COMPLETED,
    )
