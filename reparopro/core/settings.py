from enum import Enum


class QuoteStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    OS_GENERATED = "os-generated"
    IN_PROGRESS = "em-andamento"
    COMPLETED = "concluido"


class ServiceType(str, Enum):
    BODYWORK = "bodywork"
    PREP = "prep"
    PAINT = "paint"
    FINISHING = "finishing"


class PaymentMethod(str, Enum):
    NONE = ""
    PIX = "pix"
    DEBIT = "debit"
    CREDIT = "credit"


class LineItemKind(str, Enum):
    PART = "part"
    MATERIAL = "material"


class ChatSender(str, Enum):
    CUSTOMER = "customer"
    WORKSHOP = "workshop"


class UserRole(str, Enum):
    ADMIN = "admin"
    ESTIMATOR = "estimator"
    VIEWER = "viewer"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# Targets accepted by the manual status override on the management screen
OVERRIDE_STATUSES = (QuoteStatus.OS_GENERATED, QuoteStatus.IN_PROGRESS, QuoteStatus.COMPLETED)

# Statuses counted as revenue on the dashboard
REVENUE_STATUSES = (
    QuoteStatus.APPROVED,
    QuoteStatus.OS_GENERATED,
    QuoteStatus.IN_PROGRESS,
    QuoteStatus.COMPLETED,
)

# Pricing constants
LABOR_COST_PER_HOUR = 75.0
DEFAULT_LABOR_HOURS = 2.0
CREDIT_CARD_FEE_PERCENTAGE = 4.99
