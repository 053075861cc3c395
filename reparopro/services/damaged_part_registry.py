import logging
import uuid
from typing import Dict, List, Mapping, Union

from reparopro.core.catalog import find_car_part, find_service_template
from reparopro.core.settings import DEFAULT_LABOR_HOURS, LABOR_COST_PER_HOUR, LineItemKind, ServiceType
from reparopro.exceptions.errors import NotFound, ValidationRejected
from reparopro.schemas.quote import DamagedPart, Material, Part, Service
from reparopro.schemas.suggestion import RepairSuggestion
from reparopro.services.suggestion_matcher import match_service_templates

logger = logging.getLogger(__name__)

DamagedPartsMap = Dict[str, DamagedPart]

LINE_ITEM_FIELDS = ("name", "quantity", "unit_cost")


def _line_id(part_id: str, label: str) -> str:
    return f"{part_id}-{label}-{uuid.uuid4().hex}"


def _copy(damaged_parts: Mapping[str, DamagedPart]) -> DamagedPartsMap:
    return {part_id: part.model_copy(deep=True) for part_id, part in damaged_parts.items()}


def _build_service(part_id: str, template: Dict[str, ServiceType], cost_per_hour: float) -> Service:
    return Service(
        id=_line_id(part_id, "service"),
        name=template["name"],
        type=template["type"],
        labor_hours=DEFAULT_LABOR_HOURS,
        cost_per_hour=cost_per_hour,
    )


def _lines(part: DamagedPart, kind: LineItemKind) -> List[Union[Part, Material]]:
    if LineItemKind(kind) == LineItemKind.PART:
        return part.replacement_parts
    return part.materials


class DamagedPartRegistry:
    """
    Edits on a quote's damaged-parts map. Every operation works on a deep copy
    and returns it; the map passed in is never touched.
    """

    @staticmethod
    def toggle(damaged_parts: Mapping[str, DamagedPart], part_id: str) -> DamagedPartsMap:
        part_info = find_car_part(part_id)
        if part_info is None:
            raise NotFound(f"Peça desconhecida: {part_id}", {"part_id": part_id})

        result = _copy(damaged_parts)
        if part_id in result:
            # Removing a part discards all of its lines
            del result[part_id]
        else:
            result[part_id] = DamagedPart(part_id=part_id, part_name=part_info["name"])
        return result

    @staticmethod
    def set_service_selected(
            damaged_parts: Mapping[str, DamagedPart],
            part_id: str,
            service_name: str,
            selected: bool,
            cost_per_hour: float = LABOR_COST_PER_HOUR,
    ) -> DamagedPartsMap:
        result = _copy(damaged_parts)
        part = DamagedPartRegistry._get_part(result, part_id)

        if selected:
            template = find_service_template(service_name)
            if template is None:
                raise ValidationRejected(f"Serviço desconhecido: {service_name}", {"service_name": service_name})
            part.services.append(_build_service(part_id, template, cost_per_hour))
        else:
            part.services = [service for service in part.services if service.name != service_name]
        return result

    @staticmethod
    def add_line_item(
            damaged_parts: Mapping[str, DamagedPart],
            part_id: str,
            kind: LineItemKind,
            name: str,
            quantity: float,
            unit_cost: float,
    ) -> DamagedPartsMap:
        if not name or quantity <= 0 or unit_cost < 0:
            raise ValidationRejected(
                "Item inválido: informe nome, quantidade maior que zero e custo não negativo",
                {"name": name, "quantity": quantity, "unit_cost": unit_cost},
            )

        result = _copy(damaged_parts)
        part = DamagedPartRegistry._get_part(result, part_id)
        kind = LineItemKind(kind)
        if kind == LineItemKind.PART:
            part.replacement_parts.append(
                Part(id=_line_id(part_id, "part"), name=name, quantity=quantity, unit_cost=unit_cost)
            )
        else:
            part.materials.append(
                Material(id=_line_id(part_id, "material"), name=name, quantity=quantity, unit_cost=unit_cost)
            )
        return result

    @staticmethod
    def update_line_item(
            damaged_parts: Mapping[str, DamagedPart],
            part_id: str,
            kind: LineItemKind,
            index: int,
            field: str,
            value: Union[str, float],
    ) -> DamagedPartsMap:
        if field not in LINE_ITEM_FIELDS:
            raise ValidationRejected(f"Campo inválido: {field}", {"field": field})

        result = _copy(damaged_parts)
        lines = _lines(DamagedPartRegistry._get_part(result, part_id), kind)
        if index < 0 or index >= len(lines):
            raise NotFound(f"Item {index} não encontrado", {"part_id": part_id, "index": index})

        if field == "name":
            coerced = str(value)
        else:
            try:
                coerced = float(value)
            except (TypeError, ValueError):
                raise ValidationRejected(f"Valor numérico inválido para {field}: {value!r}", {"field": field})
        setattr(lines[index], field, coerced)
        return result

    @staticmethod
    def remove_line_item(
            damaged_parts: Mapping[str, DamagedPart],
            part_id: str,
            kind: LineItemKind,
            index: int,
    ) -> DamagedPartsMap:
        result = _copy(damaged_parts)
        lines = _lines(DamagedPartRegistry._get_part(result, part_id), kind)
        if index < 0 or index >= len(lines):
            raise NotFound(f"Item {index} não encontrado", {"part_id": part_id, "index": index})
        del lines[index]
        return result

    @staticmethod
    def update_service_hours(
            damaged_parts: Mapping[str, DamagedPart],
            part_id: str,
            service_id: str,
            hours: float,
    ) -> DamagedPartsMap:
        # No bound check on hours: negative values are accepted by the model
        result = _copy(damaged_parts)
        part = DamagedPartRegistry._get_part(result, part_id)
        service = next((s for s in part.services if s.id == service_id), None)
        if service is None:
            raise NotFound(f"Serviço não encontrado: {service_id}", {"service_id": service_id})
        service.labor_hours = hours
        return result

    @staticmethod
    def apply_suggestion(
            damaged_parts: Mapping[str, DamagedPart],
            suggestion: RepairSuggestion,
            cost_per_hour: float = LABOR_COST_PER_HOUR,
    ) -> DamagedPartsMap:
        """
        Bulk-insert the parts proposed by the AI provider.

        Parts already present are left alone so user edits are never overwritten;
        unknown part ids and unmatched service names are dropped.
        """
        result = _copy(damaged_parts)
        for part_id in suggestion.damaged_parts:
            if part_id in result:
                continue
            part_info = find_car_part(part_id)
            if part_info is None:
                logger.info(f"Ignoring suggested part outside catalog: {part_id}")
                continue

            templates = match_service_templates(suggestion.suggested_services.get(part_id, []))
            result[part_id] = DamagedPart(
                part_id=part_id,
                part_name=part_info["name"],
                services=[_build_service(part_id, template, cost_per_hour) for template in templates],
                replacement_parts=[],
                materials=[],
            )
        return result

    @staticmethod
    def _get_part(damaged_parts: DamagedPartsMap, part_id: str) -> DamagedPart:
        part = damaged_parts.get(part_id)
        if part is None:
            raise NotFound(f"Peça não marcada como danificada: {part_id}", {"part_id": part_id})
        return part
