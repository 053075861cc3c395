import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query

from reparopro.api.deps import get_current_user, get_quote_service
from reparopro.core.catalog import (
    AVAILABLE_MATERIALS,
    AVAILABLE_SERVICES,
    CAR_PARTS,
    PAYMENT_METHODS,
    SERVICE_STATUSES,
    STATUS_LABELS,
)
from reparopro.core.permissions import can_edit, require_active
from reparopro.core.settings import CREDIT_CARD_FEE_PERCENTAGE, LABOR_COST_PER_HOUR
from reparopro.exceptions.errors import QuoteError
from reparopro.schemas.quote import ApprovalRequest, Quote, QuoteDraftRequest
from reparopro.schemas.user import UserObject
from reparopro.services.pricing import quote_totals
from reparopro.services.quote_lifecycle import QuoteService

logger = logging.getLogger(__name__)

router = APIRouter()


def quote_payload(quote: Quote) -> Dict[str, Any]:
    """Stored record plus the derived values every consumer shows."""
    return {
        "quote": quote.model_dump(mode="json"),
        "totals": quote_totals(quote).model_dump(mode="json"),
        "os_number": quote.os_number,
        "ready_to_finalize": quote.is_ready_to_finalize,
    }


@router.get("/", summary="Listar orçamentos")
async def list_quotes(
        search: Optional[str] = Query(None, description="Nome do cliente ou placa"),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quotes = service.filter_quotes(search, current_user)
    return {
        "success": True,
        "message": "Lista de orçamentos",
        "data": [quote_payload(q) for q in quotes],
        "total": len(quotes),
    }


@router.get("/search", summary="Buscar orçamentos por placa")
async def search_by_plate(
        plate: str = Query(..., min_length=1),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    results = service.search_by_plate(plate, current_user)
    return {
        "success": True,
        "message": f"Resultados da busca por: {plate.strip()}",
        "data": [quote_payload(q) for q in results],
    }


@router.get("/catalog", summary="Catálogos do orçamento")
async def get_catalog(current_user: UserObject = Depends(get_current_user)):
    require_active(current_user)
    return {
        "success": True,
        "message": "Catálogos",
        "data": {
            "car_parts": CAR_PARTS,
            "services": AVAILABLE_SERVICES,
            "materials": AVAILABLE_MATERIALS,
            "payment_methods": [
                {"id": method.value, "name": name} for method, name in PAYMENT_METHODS.items()
            ],
            "service_statuses": SERVICE_STATUSES,
            "status_labels": STATUS_LABELS,
            "labor_cost_per_hour": LABOR_COST_PER_HOUR,
            "credit_card_fee_percentage": CREDIT_CARD_FEE_PERCENTAGE,
        },
    }


@router.post("/", summary="Criar orçamento")
async def create_quote(
        request: QuoteDraftRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.save(Quote(**request.model_dump()), current_user)
    return {
        "success": True,
        "message": "Orçamento salvo com sucesso!",
        "data": quote_payload(quote),
    }


@router.get("/{quote_id}", summary="Detalhe do orçamento")
async def get_quote(
        quote_id: str = Path(..., description="ID do orçamento"),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.get(quote_id, current_user)
    data = quote_payload(quote)
    data["read_only"] = not can_edit(current_user)
    return {
        "success": True,
        "message": "Detalhe do orçamento",
        "data": data,
    }


@router.put("/{quote_id}", summary="Atualizar dados do orçamento")
async def update_quote(
        quote_id: str,
        request: QuoteDraftRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    stored = service.get(quote_id, current_user)
    # Photos are append-only while authoring
    new_photos = [photo for photo in request.photos if photo not in stored.photos]
    updated = stored.model_copy(update={
        "customer": request.customer,
        "vehicle": request.vehicle,
        "photos": [*stored.photos, *new_photos],
        "payment_method": request.payment_method,
    })
    quote = service.save(updated, current_user)
    return {
        "success": True,
        "message": "Orçamento salvo com sucesso!",
        "data": quote_payload(quote),
    }


@router.delete("/{quote_id}", summary="Excluir orçamento")
async def delete_quote(
        quote_id: str,
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    service.delete(quote_id, current_user)
    return {
        "success": True,
        "message": "Orçamento excluído",
        "data": {"id": quote_id},
    }


@router.get("/{quote_id}/totals", summary="Totais do orçamento")
async def get_totals(
        quote_id: str,
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.get(quote_id, current_user)
    return {
        "success": True,
        "message": "Totais calculados",
        "data": quote_totals(quote).model_dump(mode="json"),
    }


@router.post("/{quote_id}/approval", summary="Aprovar ou recusar orçamento")
async def set_approval(
        quote_id: str,
        request: ApprovalRequest = Body(...),
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    quote = service.set_approval_status(quote_id, request.status, current_user)
    return {
        "success": True,
        "message": "Status do orçamento atualizado",
        "data": quote_payload(quote),
    }


@router.post("/{quote_id}/work-order", summary="Gerar ordem de serviço")
async def generate_work_order(
        quote_id: str,
        current_user: UserObject = Depends(get_current_user),
        service: QuoteService = Depends(get_quote_service),
):
    try:
        quote = service.generate_work_order(quote_id, current_user)
    except QuoteError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error generating work order for {quote_id}: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail="Ocorreu um erro ao gerar a ordem de serviço"
        )

    return {
        "success": True,
        "message": f"Ordem de serviço {quote.os_number} gerada",
        "data": quote_payload(quote),
    }
