import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from reparopro.core.settings import REVENUE_STATUSES, QuoteStatus
from reparopro.schemas.quote import Quote
from reparopro.services.pricing import quote_totals

logger = logging.getLogger(__name__)


def _month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def _last_months(today: datetime, count: int = 12) -> List[str]:
    keys = []
    year, month = today.year, today.month
    for _ in range(count):
        keys.append(f"{year}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


class DashboardService:

    @staticmethod
    def build_dashboard(
            quotes: List[Quote],
            created_by_id: Optional[str] = None,
            today: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        KPIs for the staff dashboard.

        Revenue uses the subtotal (card surcharge excluded) of every quote that
        was approved at some point; monthly buckets use approved_at, falling
        back to created_at.
        """
        today = today or datetime.now(timezone.utc)
        if created_by_id:
            quotes = [q for q in quotes if q.created_by_id == created_by_id]

        revenue_quotes = [q for q in quotes if q.status in REVENUE_STATUSES]
        subtotals = {q.id: quote_totals(q).subtotal for q in revenue_quotes}
        total_revenue = sum(subtotals.values())

        resolved = [q for q in quotes if q.status != QuoteStatus.PENDING]
        converted = [q for q in resolved if q.status != QuoteStatus.DENIED]
        approval_rate = (len(converted) / len(resolved) * 100) if resolved else 0.0

        monthly_revenue = {key: 0.0 for key in _last_months(today)}
        for q in revenue_quotes:
            moment = q.approved_at or q.created_at
            if moment is None:
                continue
            key = _month_key(moment)
            if key in monthly_revenue:
                monthly_revenue[key] += subtotals[q.id]

        estimator_performance: Dict[str, Dict[str, Any]] = {}
        for q in revenue_quotes:
            if not q.created_by_id:
                continue
            entry = estimator_performance.setdefault(
                q.created_by_id, {"name": q.created_by_name, "total": 0.0}
            )
            entry["total"] += subtotals[q.id]

        def count(*statuses: QuoteStatus) -> int:
            return sum(1 for q in quotes if q.status in statuses)

        return {
            "kpis": {
                "total_revenue": total_revenue,
                "in_progress_services": count(QuoteStatus.IN_PROGRESS),
                "pending_count": count(QuoteStatus.PENDING),
                "approval_rate": approval_rate,
            },
            "status_distribution": {
                "approved": count(QuoteStatus.APPROVED),
                "pending": count(QuoteStatus.PENDING),
                "denied": count(QuoteStatus.DENIED),
                "in_progress": count(QuoteStatus.OS_GENERATED, QuoteStatus.IN_PROGRESS),
                "completed": count(QuoteStatus.COMPLETED),
            },
            "monthly_revenue": monthly_revenue,
            "estimator_performance": estimator_performance,
            "recent_quotes": [
                {
                    "id": q.id,
                    "customer_name": q.customer.name,
                    "vehicle": f"{q.vehicle.make} {q.vehicle.model}".strip(),
                    "plate": q.vehicle.plate or "S/ Placa",
                    "status": q.status.value,
                }
                for q in quotes[:10]
            ],
        }
