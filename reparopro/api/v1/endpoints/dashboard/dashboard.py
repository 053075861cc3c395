import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reparopro.api.deps import get_current_user, get_quote_service
from reparopro.exceptions.errors import QuoteError
from reparopro.schemas.user import UserObject
from reparopro.services.quote_lifecycle import QuoteService
from .dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", summary="Indicadores do painel")
async def get_dashboard(
        created_by_id: Optional[str] = Query(None, description="Filtrar por orçamentista"),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    try:
        quotes = service.list_quotes(current_user)
        data = DashboardService.build_dashboard(quotes, created_by_id=created_by_id)
        return {
            "success": True,
            "message": "Painel",
            "data": data,
        }
    except QuoteError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in get_dashboard: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail="Ocorreu um erro ao carregar o painel"
        )
