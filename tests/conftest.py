from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient
from tenacity import wait_none

from reparopro.api.deps import get_quote_repository, get_suggestion_provider
from reparopro.config import settings
from reparopro.core.settings import PaymentMethod, ServiceType, UserRole, UserStatus
from reparopro.main import app
from reparopro.schemas.quote import Customer, DamagedPart, Part, Quote, Service, Vehicle
from reparopro.schemas.user import UserObject
from reparopro.services.quote_lifecycle import QuoteService
from reparopro.services.quote_repository import InMemoryQuoteRepository
from reparopro.services.repair_suggestion import RepairSuggestionService

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


# ----- users -----


@pytest.fixture
def admin() -> UserObject:
    return UserObject(id="u-admin", name="Ana Admin", role=UserRole.ADMIN)


@pytest.fixture
def estimator() -> UserObject:
    return UserObject(id="u-est", name="Eduardo Orçamentista", role=UserRole.ESTIMATOR)


@pytest.fixture
def viewer() -> UserObject:
    return UserObject(id="u-view", name="Vera Visualizadora", role=UserRole.VIEWER)


@pytest.fixture
def inactive_estimator() -> UserObject:
    return UserObject(id="u-off", name="Igor Inativo", role=UserRole.ESTIMATOR, status=UserStatus.INACTIVE)


# ----- quote builders -----


def hood_part(labor_hours: float = 2, unit_cost: float = 300) -> DamagedPart:
    return DamagedPart(
        part_id="hood",
        part_name="Capô",
        services=[
            Service(
                id="hood-service-1",
                name="Pintura (Base)",
                type=ServiceType.PAINT,
                labor_hours=labor_hours,
                cost_per_hour=75,
            )
        ],
        replacement_parts=[Part(id="hood-part-1", name="Dobradiça", quantity=1, unit_cost=unit_cost)],
        materials=[],
    )


def make_quote(
        name: str = "Maria Souza",
        plate: str = "ABC1D23",
        payment_method: PaymentMethod = PaymentMethod.CREDIT,
        damaged_parts: Optional[Dict[str, DamagedPart]] = None,
        **fields,
) -> Quote:
    return Quote(
        customer=Customer(name=name, phone="11 99999-0000", email="maria@example.com"),
        vehicle=Vehicle(make="Fiat", model="Argo", year="2022", color="Prata", plate=plate),
        damaged_parts={"hood": hood_part()} if damaged_parts is None else damaged_parts,
        payment_method=payment_method,
        **fields,
    )


# ----- core service -----


@pytest.fixture
def repository() -> InMemoryQuoteRepository:
    return InMemoryQuoteRepository()


@pytest.fixture
def service(repository) -> QuoteService:
    return QuoteService(repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def saved_quote(service, estimator) -> Quote:
    return service.save(make_quote(), estimator)


@pytest.fixture
def work_order(service, estimator, saved_quote) -> Quote:
    service.set_approval_status(saved_quote.id, "approved", estimator)
    return service.generate_work_order(saved_quote.id, estimator)


# ----- AI provider -----


class FakeCompletions:
    """Stands in for client.chat.completions with canned answers or failures."""

    def __init__(self, responses: List):
        self.responses = list(responses)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        message = SimpleNamespace(content=response)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_openai_client(*responses) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(list(responses))))


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(RepairSuggestionService._complete.retry, "wait", wait_none())


# ----- HTTP -----


def bearer(user: UserObject) -> Dict[str, str]:
    claims = {
        "sub": user.id,
        "name": user.name,
        "role": user.role.value,
        "status": user.status.value,
    }
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def suggestion_provider() -> RepairSuggestionService:
    return RepairSuggestionService(client=fake_openai_client())


@pytest.fixture
def client(repository, suggestion_provider):
    app.dependency_overrides[get_quote_repository] = lambda: repository
    app.dependency_overrides[get_suggestion_provider] = lambda: suggestion_provider
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
