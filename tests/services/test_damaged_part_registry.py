import pytest

from reparopro.core.settings import DEFAULT_LABOR_HOURS, LABOR_COST_PER_HOUR, LineItemKind, ServiceType
from reparopro.exceptions.errors import NotFound, ValidationRejected
from reparopro.schemas.suggestion import RepairSuggestion
from reparopro.services.damaged_part_registry import DamagedPartRegistry

from conftest import hood_part


def test_toggle_on_creates_empty_entry_with_catalog_name() -> None:
    result = DamagedPartRegistry.toggle({}, "front-bumper")

    part = result["front-bumper"]
    assert part.part_name == "Para-choque Dianteiro"
    assert part.services == []
    assert part.replacement_parts == []
    assert part.materials == []


def test_toggle_round_trip_restores_map() -> None:
    original = {"hood": hood_part()}

    toggled = DamagedPartRegistry.toggle(original, "roof")
    restored = DamagedPartRegistry.toggle(toggled, "roof")

    assert restored == original
    assert "roof" not in original


def test_toggle_off_discards_lines() -> None:
    result = DamagedPartRegistry.toggle({"hood": hood_part()}, "hood")

    assert result == {}


def test_toggle_unknown_part_is_rejected() -> None:
    with pytest.raises(NotFound):
        DamagedPartRegistry.toggle({}, "spoiler")


def test_selecting_service_uses_catalog_type_and_default_hours() -> None:
    damaged_parts = DamagedPartRegistry.toggle({}, "hood")

    result = DamagedPartRegistry.set_service_selected(damaged_parts, "hood", "Lixamento", True)

    service = result["hood"].services[0]
    assert service.name == "Lixamento"
    assert service.type == ServiceType.PREP
    assert service.labor_hours == DEFAULT_LABOR_HOURS
    assert service.cost_per_hour == LABOR_COST_PER_HOUR
    assert service.id.startswith("hood-service-")
    assert damaged_parts["hood"].services == []


def test_deselecting_service_removes_it_by_name() -> None:
    result = DamagedPartRegistry.set_service_selected({"hood": hood_part()}, "hood", "Pintura (Base)", False)

    assert result["hood"].services == []


def test_unknown_service_name_is_rejected() -> None:
    with pytest.raises(ValidationRejected):
        DamagedPartRegistry.set_service_selected({"hood": hood_part()}, "hood", "Troca de óleo", True)


def test_service_on_unmarked_part_is_not_found() -> None:
    with pytest.raises(NotFound):
        DamagedPartRegistry.set_service_selected({}, "hood", "Lixamento", True)


def test_add_material_appends_line() -> None:
    result = DamagedPartRegistry.add_line_item(
        {"hood": hood_part()}, "hood", LineItemKind.MATERIAL, "Verniz (ml)", 300, 0.15
    )

    material = result["hood"].materials[0]
    assert material.name == "Verniz (ml)"
    assert material.cost == pytest.approx(45)
    assert material.id.startswith("hood-material-")


def test_add_part_gets_fresh_id_each_time() -> None:
    first = DamagedPartRegistry.add_line_item({"hood": hood_part()}, "hood", "part", "Emblema", 1, 80)
    second = DamagedPartRegistry.add_line_item(first, "hood", "part", "Emblema", 1, 80)

    ids = [item.id for item in second["hood"].replacement_parts]
    assert len(ids) == 3
    assert len(set(ids)) == 3


@pytest.mark.parametrize(
    "name, quantity, unit_cost",
    [("", 1, 10), ("Parafuso", 0, 10), ("Parafuso", -2, 10), ("Parafuso", 1, -0.01)],
)
def test_invalid_line_items_are_rejected_and_map_is_unchanged(name, quantity, unit_cost) -> None:
    original = {"hood": hood_part()}

    with pytest.raises(ValidationRejected):
        DamagedPartRegistry.add_line_item(original, "hood", LineItemKind.PART, name, quantity, unit_cost)

    assert original == {"hood": hood_part()}


def test_update_line_item_coerces_numeric_fields() -> None:
    result = DamagedPartRegistry.update_line_item({"hood": hood_part()}, "hood", "part", 0, "quantity", "3")

    assert result["hood"].replacement_parts[0].quantity == 3.0
    assert result["hood"].replacement_parts[0].cost == pytest.approx(900)


def test_update_line_item_renames() -> None:
    result = DamagedPartRegistry.update_line_item({"hood": hood_part()}, "hood", "part", 0, "name", "Trava")

    assert result["hood"].replacement_parts[0].name == "Trava"


def test_update_line_item_is_not_bound_like_add() -> None:
    parts = {"hood": hood_part()}
    parts = DamagedPartRegistry.update_line_item(parts, "hood", "part", 0, "quantity", 0)
    parts = DamagedPartRegistry.update_line_item(parts, "hood", "part", 0, "unit_cost", "-10")
    parts = DamagedPartRegistry.update_line_item(parts, "hood", "part", 0, "name", "")

    line = parts["hood"].replacement_parts[0]
    assert (line.name, line.quantity, line.unit_cost) == ("", 0.0, -10.0)
    assert line.cost == 0


def test_update_line_item_rejects_unknown_field_and_bad_number() -> None:
    with pytest.raises(ValidationRejected):
        DamagedPartRegistry.update_line_item({"hood": hood_part()}, "hood", "part", 0, "id", "x")
    with pytest.raises(ValidationRejected):
        DamagedPartRegistry.update_line_item({"hood": hood_part()}, "hood", "part", 0, "unit_cost", "caro")


def test_line_index_out_of_range_is_not_found() -> None:
    with pytest.raises(NotFound):
        DamagedPartRegistry.update_line_item({"hood": hood_part()}, "hood", "material", 0, "name", "x")
    with pytest.raises(NotFound):
        DamagedPartRegistry.remove_line_item({"hood": hood_part()}, "hood", "part", 5)


def test_remove_line_item_by_index() -> None:
    result = DamagedPartRegistry.remove_line_item({"hood": hood_part()}, "hood", "part", 0)

    assert result["hood"].replacement_parts == []


def test_update_service_hours_accepts_negative_values() -> None:
    result = DamagedPartRegistry.update_service_hours({"hood": hood_part()}, "hood", "hood-service-1", -1.5)

    assert result["hood"].services[0].labor_hours == -1.5


def test_update_hours_of_unknown_service_is_not_found() -> None:
    with pytest.raises(NotFound):
        DamagedPartRegistry.update_service_hours({"hood": hood_part()}, "hood", "missing", 3)


def test_apply_suggestion_adds_only_new_catalog_parts() -> None:
    existing = {"hood": hood_part()}
    suggestion = RepairSuggestion(
        damaged_parts=["hood", "front-bumper", "spoiler"],
        suggested_services={
            "hood": ["Polimento"],
            "front-bumper": ["solda plástica no canto", "troca de óleo", "pintura completa"],
        },
    )

    result = DamagedPartRegistry.apply_suggestion(existing, suggestion)

    assert set(result) == {"hood", "front-bumper"}
    assert result["hood"] == hood_part()
    bumper_services = result["front-bumper"].services
    assert [s.name for s in bumper_services] == ["Solda Plástica", "Pintura (Base)"]
    assert all(s.labor_hours == DEFAULT_LABOR_HOURS for s in bumper_services)
    assert result["front-bumper"].replacement_parts == []
