from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from reparopro.core.catalog import DEFAULT_TERMS
from reparopro.core.settings import ChatSender, PaymentMethod, QuoteStatus, ServiceType


class Customer(BaseModel):
    name: str = ""
    phone: str = ""
    email: str = ""


class Vehicle(BaseModel):
    make: str = ""
    model: str = ""
    year: str = ""
    color: str = ""
    plate: str = ""


class Photo(BaseModel):
    name: str
    url: str


class Service(BaseModel):
    id: str
    name: str
    type: ServiceType
    labor_hours: float
    cost_per_hour: float

    @property
    def cost(self) -> float:
        return self.labor_hours * self.cost_per_hour


class LineItem(BaseModel):
    id: str
    name: str
    quantity: float
    unit_cost: float

    @property
    def cost(self) -> float:
        return self.quantity * self.unit_cost


class Part(LineItem):
    pass


class Material(LineItem):
    pass


class DamagedPart(BaseModel):
    part_id: str
    part_name: str
    services: List[Service] = []
    replacement_parts: List[Part] = []
    materials: List[Material] = []


class TimelineEvent(BaseModel):
    id: str
    date: datetime
    status: str
    description: str
    photo_url: Optional[str] = None


class ChatMessage(BaseModel):
    id: str
    sender: ChatSender
    text: str
    timestamp: datetime


class Quote(BaseModel):
    """Aggregate root: a priced repair estimate that evolves into a work order."""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by_id: Optional[str] = None
    created_by_name: Optional[str] = None
    status: Optional[QuoteStatus] = QuoteStatus.PENDING
    customer: Customer = Field(default_factory=Customer)
    vehicle: Vehicle = Field(default_factory=Vehicle)
    photos: List[Photo] = []
    damaged_parts: Dict[str, DamagedPart] = {}
    payment_method: PaymentMethod = PaymentMethod.NONE

    approved_at: Optional[datetime] = None
    os_generated_at: Optional[datetime] = None
    customer_portal_token: Optional[str] = None
    signature: Optional[str] = None
    signed_at: Optional[datetime] = None
    terms_and_conditions: Optional[str] = None
    timeline: Optional[List[TimelineEvent]] = None
    chat: Optional[List[ChatMessage]] = None

    @property
    def os_number(self) -> str:
        return f"OS-{(self.id or '')[-6:].upper()}"

    @property
    def effective_terms(self) -> str:
        if self.terms_and_conditions is None:
            return DEFAULT_TERMS
        return self.terms_and_conditions

    @property
    def is_ready_to_finalize(self) -> bool:
        return bool(
            self.customer.name
            and self.vehicle.make
            and self.damaged_parts
            and self.payment_method != PaymentMethod.NONE
        )


class LaborByCategory(BaseModel):
    bodywork: float = 0.0
    prep: float = 0.0
    paint: float = 0.0
    finishing: float = 0.0


class QuoteTotals(BaseModel):
    labor_total: float = 0.0
    parts_total: float = 0.0
    materials_total: float = 0.0
    labor_by_category: LaborByCategory = Field(default_factory=LaborByCategory)
    subtotal: float = 0.0
    payment_surcharge: float = 0.0
    grand_total: float = 0.0


# Request bodies

class QuoteDraftRequest(BaseModel):
    customer: Customer = Field(default_factory=Customer)
    vehicle: Vehicle = Field(default_factory=Vehicle)
    photos: List[Photo] = []
    payment_method: PaymentMethod = PaymentMethod.NONE


class ApprovalRequest(BaseModel):
    status: QuoteStatus


class ServiceSelectionRequest(BaseModel):
    service_name: str
    selected: bool = True


class ServiceHoursRequest(BaseModel):
    labor_hours: float


class LineItemCreateRequest(BaseModel):
    name: str
    quantity: float = 1
    unit_cost: float = 0


class LineItemUpdateRequest(BaseModel):
    field: str
    value: Union[str, float]


class SignatureRequest(BaseModel):
    signature: str


class TermsRequest(BaseModel):
    terms: str


class StatusOverrideRequest(BaseModel):
    status: QuoteStatus


class TimelineEventRequest(BaseModel):
    description: str
    status: str = "Em Análise"
    photo_url: Optional[str] = None


class ChatMessageRequest(BaseModel):
    text: str


class PortalView(BaseModel):
    quote_id: str
    os_number: str
    customer_name: str
    vehicle: str
    status: QuoteStatus
    current_status: str
    timeline: List[TimelineEvent]
    chat: List[ChatMessage]
    chat_enabled: bool
