import logging

from fastapi import APIRouter, Body, Depends

from reparopro.api.deps import get_current_user, get_quote_service
from reparopro.api.v1.endpoints.quote.quote import quote_payload
from reparopro.config import settings
from reparopro.exceptions.errors import NotFound
from reparopro.schemas.quote import (
    ChatMessageRequest,
    Quote,
    SignatureRequest,
    StatusOverrideRequest,
    TermsRequest,
    TimelineEventRequest,
)
from reparopro.schemas.user import UserObject
from reparopro.services.quote_lifecycle import QuoteService

logger = logging.getLogger(__name__)

router = APIRouter()


def portal_link(quote: Quote) -> str:
    if not quote.customer_portal_token:
        return ""
    return f"{settings.PORTAL_BASE_URL}?token={quote.customer_portal_token}"


def work_order_document(quote: Quote):
    """Everything a printed work order shows."""
    data = quote_payload(quote)
    data.update({
        "os_generated_at": quote.os_generated_at,
        "terms_and_conditions": quote.effective_terms,
        "signed": bool(quote.signature),
        "signed_at": quote.signed_at,
        "portal_link": portal_link(quote),
    })
    return data


def _respond(quote: Quote, message: str):
    return {
        "success": True,
        "message": message,
        "data": work_order_document(quote),
    }


@router.get("/{quote_id}", summary="Documento da ordem de serviço")
async def get_work_order(
        quote_id: str,
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.get(quote_id, current_user)
    if quote.os_generated_at is None:
        raise NotFound(f"Ordem de serviço não gerada para o orçamento {quote_id}", {"quote_id": quote_id})
    return _respond(quote, f"Ordem de serviço {quote.os_number}")


@router.post("/{quote_id}/sign", summary="Assinar ordem de serviço")
async def sign_work_order(
        quote_id: str,
        request: SignatureRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.sign(quote_id, request.signature, current_user)
    logger.info(f"Work order {quote.os_number} signed by user {current_user.id}")
    return _respond(quote, "Ordem de serviço assinada")


@router.put("/{quote_id}/terms", summary="Atualizar termos e condições")
async def update_terms(
        quote_id: str,
        request: TermsRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.set_terms(quote_id, request.terms, current_user)
    return _respond(quote, "Termos atualizados")


@router.put("/{quote_id}/status", summary="Alterar status do serviço")
async def update_status(
        quote_id: str,
        request: StatusOverrideRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.set_status(quote_id, request.status, current_user)
    logger.info(f"Work order {quote.os_number} set to {quote.status.value} by user {current_user.id}")
    return _respond(quote, "Status atualizado")


@router.post("/{quote_id}/timeline", summary="Adicionar atualização na linha do tempo")
async def add_timeline_event(
        quote_id: str,
        request: TimelineEventRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.add_timeline_event(
        quote_id, request.description, request.status, current_user, photo_url=request.photo_url
    )
    return _respond(quote, "Atualização adicionada")


@router.post("/{quote_id}/chat", summary="Enviar mensagem ao cliente")
async def post_chat_message(
        quote_id: str,
        request: ChatMessageRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.post_chat_message(quote_id, request.text, current_user)
    return _respond(quote, "Mensagem enviada")
