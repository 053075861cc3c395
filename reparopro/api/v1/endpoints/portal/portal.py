import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from reparopro.api.deps import get_quote_service
from reparopro.schemas.quote import ChatMessageRequest
from reparopro.services.quote_lifecycle import QuoteService, build_portal_view

logger = logging.getLogger(__name__)

# Customer-facing; the portal token is the only credential
router = APIRouter()


@router.get("/", summary="Acompanhar serviço")
async def get_portal(
        token: Optional[str] = Query(None, description="Token de acesso do cliente"),
        service: QuoteService = Depends(get_quote_service),
):
    view = service.portal_view(token)
    return {
        "success": True,
        "message": f"Acompanhamento da {view.os_number}",
        "data": view.model_dump(mode="json"),
    }


@router.post("/chat", summary="Mensagem do cliente")
async def post_portal_message(
        token: Optional[str] = Query(None, description="Token de acesso do cliente"),
        request: ChatMessageRequest = Body(...),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.post_portal_message(token, request.text)
    logger.info(f"Customer message posted on quote {quote.id}")
    return {
        "success": True,
        "message": "Mensagem enviada",
        "data": build_portal_view(quote).model_dump(mode="json"),
    }
