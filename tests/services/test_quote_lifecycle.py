import pytest

from reparopro.core.catalog import PORTAL_IDLE_STATUS, WORK_ORDER_SEED_STATUS
from reparopro.core.settings import ChatSender, QuoteStatus
from reparopro.exceptions.errors import (
    AccessDenied,
    InvalidPortalToken,
    InvalidTransition,
    MissingPortalToken,
    NotFound,
    ValidationRejected,
)
from reparopro.services.damaged_part_registry import DamagedPartRegistry

from conftest import FIXED_NOW, make_quote


def test_save_mints_identity_and_defaults(service, estimator, repository) -> None:
    quote = service.save(make_quote(), estimator)

    assert quote.id.startswith("quote-")
    assert quote.created_at == FIXED_NOW
    assert quote.created_by_id == estimator.id
    assert quote.created_by_name == estimator.name
    assert quote.status == QuoteStatus.PENDING
    assert [q.id for q in repository.load_all()] == [quote.id]


def test_save_is_idempotent_on_id_and_last_write_wins(service, estimator, repository) -> None:
    quote = service.save(make_quote(), estimator)

    first = quote.model_copy(update={"customer": quote.customer.model_copy(update={"name": "Maria S."})})
    service.save(first, estimator)
    second = quote.model_copy(update={"customer": quote.customer.model_copy(update={"name": "Maria Silva"})})
    service.save(second, estimator)

    stored = repository.load_all()
    assert len(stored) == 1
    assert stored[0].customer.name == "Maria Silva"
    assert stored[0].created_at == FIXED_NOW


def test_new_quotes_are_prepended(service, estimator) -> None:
    older = service.save(make_quote(name="Antigo"), estimator)
    newer = service.save(make_quote(name="Novo"), estimator)

    assert [q.id for q in service.list_quotes(estimator)] == [newer.id, older.id]


def test_search_by_plate_is_case_insensitive_substring(service, estimator) -> None:
    service.save(make_quote(plate="ABC1D23"), estimator)
    service.save(make_quote(plate="XYZ9K88"), estimator)

    assert [q.vehicle.plate for q in service.search_by_plate(" c1d ", estimator)] == ["ABC1D23"]
    assert service.search_by_plate("   ", estimator) == []


def test_filter_matches_customer_or_plate(service, estimator) -> None:
    service.save(make_quote(name="João Pereira", plate="AAA0000"), estimator)
    service.save(make_quote(name="Carla Dias", plate="JOA1234"), estimator)

    assert len(service.filter_quotes("joã", estimator)) == 1
    assert len(service.filter_quotes("joa", estimator)) == 1
    assert len(service.filter_quotes("", estimator)) == 2


def test_approval_stamps_approved_at_once(service, estimator, saved_quote) -> None:
    approved = service.set_approval_status(saved_quote.id, QuoteStatus.APPROVED, estimator)

    assert approved.status == QuoteStatus.APPROVED
    assert approved.approved_at == FIXED_NOW


def test_denial_after_approval_is_rejected(service, estimator, saved_quote, repository) -> None:
    service.set_approval_status(saved_quote.id, "approved", estimator)

    with pytest.raises(InvalidTransition):
        service.set_approval_status(saved_quote.id, "denied", estimator)

    assert repository.load_all()[0].status == QuoteStatus.APPROVED


def test_denied_quote_has_no_approval_date(service, estimator, saved_quote) -> None:
    denied = service.set_approval_status(saved_quote.id, "denied", estimator)

    assert denied.status == QuoteStatus.DENIED
    assert denied.approved_at is None


def test_approval_accepts_only_approved_or_denied(service, estimator, saved_quote) -> None:
    with pytest.raises(ValidationRejected):
        service.set_approval_status(saved_quote.id, QuoteStatus.COMPLETED, estimator)


def test_generate_work_order_seeds_ledger_and_token(work_order) -> None:
    assert work_order.status == QuoteStatus.OS_GENERATED
    assert work_order.os_generated_at == FIXED_NOW
    assert work_order.customer_portal_token
    assert len(work_order.timeline) == 1
    assert work_order.timeline[0].status == WORK_ORDER_SEED_STATUS
    assert work_order.chat == []
    assert work_order.os_number == f"OS-{work_order.id[-6:].upper()}"


def test_second_work_order_is_rejected_and_keeps_token_and_chat(service, estimator, work_order, repository) -> None:
    service.post_chat_message(work_order.id, "Carro recebido", estimator)

    with pytest.raises(InvalidTransition):
        service.generate_work_order(work_order.id, estimator)

    stored = repository.load_all()[0]
    assert stored.customer_portal_token == work_order.customer_portal_token
    assert len(stored.chat) == 1


def test_work_order_requires_approval(service, estimator, saved_quote) -> None:
    with pytest.raises(InvalidTransition):
        service.generate_work_order(saved_quote.id, estimator)


def test_sign_starts_the_service(service, estimator, work_order) -> None:
    signed = service.sign(work_order.id, "data:image/png;base64,AAAA", estimator)

    assert signed.status == QuoteStatus.IN_PROGRESS
    assert signed.signed_at == FIXED_NOW
    assert signed.signature == "data:image/png;base64,AAAA"


def test_sign_requires_signature(service, estimator, work_order) -> None:
    with pytest.raises(ValidationRejected):
        service.sign(work_order.id, "", estimator)


def test_terms_override_and_default(service, estimator, work_order) -> None:
    assert "90 dias" in work_order.effective_terms

    updated = service.set_terms(work_order.id, "Sem garantia para peças usadas.", estimator)

    assert updated.effective_terms == "Sem garantia para peças usadas."


def test_status_override_allows_skipping(service, estimator, work_order) -> None:
    done = service.set_status(work_order.id, QuoteStatus.COMPLETED, estimator)

    assert done.status == QuoteStatus.COMPLETED


def test_status_override_rejects_pre_work_order_statuses(service, estimator, work_order) -> None:
    with pytest.raises(ValidationRejected):
        service.set_status(work_order.id, QuoteStatus.PENDING, estimator)


def test_timeline_events_append_in_order(service, estimator, work_order) -> None:
    service.add_timeline_event(work_order.id, "Desmontagem do capô", "Em Funilaria", estimator)
    updated = service.add_timeline_event(
        work_order.id, "Primeira demão", "Em Pintura", estimator, photo_url="https://fotos/1.jpg"
    )

    assert [e.status for e in updated.timeline] == [WORK_ORDER_SEED_STATUS, "Em Funilaria", "Em Pintura"]
    assert updated.timeline[-1].photo_url == "https://fotos/1.jpg"


def test_update_damaged_parts_persists_registry_result(service, estimator, saved_quote, repository) -> None:
    damaged_parts = DamagedPartRegistry.toggle(saved_quote.damaged_parts, "roof")

    service.update_damaged_parts(saved_quote.id, damaged_parts, estimator)

    assert set(repository.load_all()[0].damaged_parts) == {"hood", "roof"}


def test_update_service_replaces_whole_record(service, estimator, work_order, repository) -> None:
    edited = work_order.model_copy(update={"payment_method": "pix"})

    service.update_service(edited, estimator)

    assert repository.load_all()[0].payment_method == "pix"


def test_delete_is_admin_only(service, admin, estimator, saved_quote, repository) -> None:
    with pytest.raises(AccessDenied):
        service.delete(saved_quote.id, estimator)

    service.delete(saved_quote.id, admin)

    assert repository.load_all() == []
    with pytest.raises(NotFound):
        service.delete(saved_quote.id, admin)


def test_viewer_can_read_but_not_write(service, viewer, saved_quote) -> None:
    assert service.get(saved_quote.id, viewer).id == saved_quote.id

    with pytest.raises(AccessDenied):
        service.save(make_quote(), viewer)
    with pytest.raises(AccessDenied):
        service.set_approval_status(saved_quote.id, "approved", viewer)


def test_inactive_user_is_denied_everything(service, inactive_estimator, saved_quote) -> None:
    with pytest.raises(AccessDenied):
        service.get(saved_quote.id, inactive_estimator)
    with pytest.raises(AccessDenied):
        service.save(make_quote(), inactive_estimator)


def test_access_denied_is_distinct_from_not_found(service, viewer) -> None:
    with pytest.raises(NotFound):
        service.get("quote-missing", viewer)
    with pytest.raises(AccessDenied):
        service.set_terms("quote-missing", "x", viewer)


def test_mutations_write_the_whole_collection(service, estimator, repository) -> None:
    service.save(make_quote(name="A"), estimator)
    quote = service.save(make_quote(name="B"), estimator)
    before = repository.save_count

    service.set_approval_status(quote.id, "approved", estimator)

    assert repository.save_count == before + 1
    assert len(repository.load_all()) == 2


def test_portal_distinguishes_missing_and_invalid_token(service, work_order) -> None:
    with pytest.raises(MissingPortalToken):
        service.open_portal(None)
    with pytest.raises(MissingPortalToken):
        service.open_portal("")
    with pytest.raises(InvalidPortalToken):
        service.open_portal("not-a-token")


def test_portal_token_with_accents_is_an_invalid_link(service, work_order) -> None:
    with pytest.raises(InvalidPortalToken):
        service.open_portal("tokén-inválido")
    with pytest.raises(InvalidPortalToken):
        service.post_portal_message("tokén-inválido", "Olá")


def test_portal_view_shows_newest_event_first(service, estimator, work_order) -> None:
    service.add_timeline_event(work_order.id, "Pintura iniciada", "Em Pintura", estimator)

    view = service.portal_view(work_order.customer_portal_token)

    assert view.customer_name == "Maria"
    assert view.vehicle == "Fiat Argo"
    assert view.current_status == "Em Pintura"
    assert [e.status for e in view.timeline] == ["Em Pintura", WORK_ORDER_SEED_STATUS]
    assert view.chat_enabled


def test_portal_idle_status_without_timeline(service, estimator, saved_quote) -> None:
    service.set_approval_status(saved_quote.id, "approved", estimator)
    quote = service.generate_work_order(saved_quote.id, estimator)
    service.update_service(quote.model_copy(update={"timeline": []}), estimator)

    view = service.portal_view(quote.customer_portal_token)

    assert view.current_status == PORTAL_IDLE_STATUS


def test_customer_messages_are_tagged_as_customer(service, work_order) -> None:
    updated = service.post_portal_message(work_order.customer_portal_token, "Quando fica pronto?")

    assert updated.chat[-1].sender == ChatSender.CUSTOMER
    assert updated.chat[-1].timestamp == FIXED_NOW
