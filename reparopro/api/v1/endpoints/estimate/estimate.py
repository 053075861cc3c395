import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from reparopro.api.deps import get_current_user, get_quote_service, get_suggestion_provider
from reparopro.api.v1.endpoints.quote.quote import quote_payload
from reparopro.core.permissions import EDITOR_ROLES, require_role
from reparopro.core.settings import LineItemKind
from reparopro.exceptions.errors import QuoteError
from reparopro.schemas.quote import (
    LineItemCreateRequest,
    LineItemUpdateRequest,
    ServiceHoursRequest,
    ServiceSelectionRequest,
)
from reparopro.schemas.suggestion import RepairSuggestionRequest
from reparopro.schemas.user import UserObject
from reparopro.services.damaged_part_registry import DamagedPartRegistry
from reparopro.services.quote_lifecycle import QuoteService
from reparopro.services.repair_suggestion import RepairSuggestionService

logger = logging.getLogger(__name__)

router = APIRouter()

# One suggestion request at a time per quote; entries live while a request holds or awaits them
_suggestion_locks: Dict[str, asyncio.Lock] = {}
_suggestion_lock_users: Dict[str, int] = {}


@asynccontextmanager
async def _suggestion_lock(quote_id: str):
    lock = _suggestion_locks.setdefault(quote_id, asyncio.Lock())
    _suggestion_lock_users[quote_id] = _suggestion_lock_users.get(quote_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _suggestion_lock_users[quote_id] -= 1
        if not _suggestion_lock_users[quote_id]:
            del _suggestion_lock_users[quote_id]
            del _suggestion_locks[quote_id]


def _respond(quote, message: str):
    return {
        "success": True,
        "message": message,
        "data": quote_payload(quote),
    }


@router.post("/suggestions", summary="Sugerir peças e serviços com IA")
async def suggest_damaged_parts(
        quote_id: str,
        request: RepairSuggestionRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
        provider: RepairSuggestionService = Depends(get_suggestion_provider),
):
    require_role(current_user, *EDITOR_ROLES)
    service.get(quote_id, current_user)

    async with _suggestion_lock(quote_id):
        try:
            suggestion = await provider.suggest(request.description)
        except QuoteError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in suggestion for quote {quote_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Falha ao obter sugestões da IA.")

        # Reload after the await so edits made meanwhile are kept
        quote = service.get(quote_id, current_user)
        damaged_parts = DamagedPartRegistry.apply_suggestion(quote.damaged_parts, suggestion)
        quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)

    return _respond(quote, "Sugestões aplicadas")


@router.post("/{part_id}/toggle", summary="Marcar/desmarcar peça danificada")
async def toggle_part(
        quote_id: str,
        part_id: str,
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    require_role(current_user, *EDITOR_ROLES)
    quote = service.get(quote_id, current_user)
    damaged_parts = DamagedPartRegistry.toggle(quote.damaged_parts, part_id)
    quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)
    return _respond(quote, "Peças danificadas atualizadas")


@router.put("/{part_id}/services", summary="Selecionar/remover serviço")
async def select_service(
        quote_id: str,
        part_id: str,
        request: ServiceSelectionRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    require_role(current_user, *EDITOR_ROLES)
    quote = service.get(quote_id, current_user)
    damaged_parts = DamagedPartRegistry.set_service_selected(
        quote.damaged_parts, part_id, request.service_name, request.selected
    )
    quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)
    return _respond(quote, "Serviços atualizados")


@router.patch("/{part_id}/services/{service_id}", summary="Alterar horas de mão de obra")
async def update_service_hours(
        quote_id: str,
        part_id: str,
        service_id: str,
        request: ServiceHoursRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    require_role(current_user, *EDITOR_ROLES)
    quote = service.get(quote_id, current_user)
    damaged_parts = DamagedPartRegistry.update_service_hours(
        quote.damaged_parts, part_id, service_id, request.labor_hours
    )
    quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)
    return _respond(quote, "Horas atualizadas")


@router.post("/{part_id}/items/{kind}", summary="Adicionar peça ou material")
async def add_line_item(
        quote_id: str,
        part_id: str,
        kind: LineItemKind,
        request: LineItemCreateRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    require_role(current_user, *EDITOR_ROLES)
    quote = service.get(quote_id, current_user)
    damaged_parts = DamagedPartRegistry.add_line_item(
        quote.damaged_parts, part_id, kind, request.name, request.quantity, request.unit_cost
    )
    quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)
    return _respond(quote, "Item adicionado")


@router.patch("/{part_id}/items/{kind}/{index}", summary="Editar peça ou material")
async def update_line_item(
        quote_id: str,
        part_id: str,
        kind: LineItemKind,
        index: int,
        request: LineItemUpdateRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    require_role(current_user, *EDITOR_ROLES)
    quote = service.get(quote_id, current_user)
    damaged_parts = DamagedPartRegistry.update_line_item(
        quote.damaged_parts, part_id, kind, index, request.field, request.value
    )
    quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)
    return _respond(quote, "Item atualizado")


@router.delete("/{part_id}/items/{kind}/{index}", summary="Remover peça ou material")
async def remove_line_item(
        quote_id: str,
        part_id: str,
        kind: LineItemKind,
        index: int,
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    require_role(current_user, *EDITOR_ROLES)
    quote = service.get(quote_id, current_user)
    damaged_parts = DamagedPartRegistry.remove_line_item(quote.damaged_parts, part_id, kind, index)
    quote = service.update_damaged_parts(quote_id, damaged_parts, current_user)
    return _respond(quote, "Item removido")
