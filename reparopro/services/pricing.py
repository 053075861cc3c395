from typing import Mapping

from reparopro.core.settings import CREDIT_CARD_FEE_PERCENTAGE, PaymentMethod
from reparopro.schemas.quote import DamagedPart, LaborByCategory, Quote, QuoteTotals


def calculate_totals(
        damaged_parts: Mapping[str, DamagedPart],
        payment_method: PaymentMethod = PaymentMethod.NONE,
        fee_percentage: float = CREDIT_CARD_FEE_PERCENTAGE,
) -> QuoteTotals:
    """
    Compute the cost breakdown of an estimate from its damaged-parts map.

    The result is a projection: it is rebuilt from the line items on every read
    and never stored on the quote.
    """
    labor_by_category = LaborByCategory()
    labor_total = 0.0
    parts_total = 0.0
    materials_total = 0.0

    for part in damaged_parts.values():
        for service in part.services:
            cost = service.cost
            labor_total += cost
            bucket = service.type.value
            setattr(labor_by_category, bucket, getattr(labor_by_category, bucket) + cost)
        parts_total += sum(item.cost for item in part.replacement_parts)
        materials_total += sum(item.cost for item in part.materials)

    subtotal = labor_total + parts_total + materials_total
    payment_surcharge = 0.0
    if PaymentMethod(payment_method) == PaymentMethod.CREDIT:
        payment_surcharge = subtotal * (fee_percentage / 100)

    return QuoteTotals(
        labor_total=labor_total,
        parts_total=parts_total,
        materials_total=materials_total,
        labor_by_category=labor_by_category,
        subtotal=subtotal,
        payment_surcharge=payment_surcharge,
        grand_total=subtotal + payment_surcharge,
    )


def quote_totals(quote: Quote) -> QuoteTotals:
    return calculate_totals(quote.damaged_parts, quote.payment_method)
