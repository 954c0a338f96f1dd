"""
Tests for the Bundle Export Service.

Tests cover the reference closure of exported recipes, workspace scoping,
error cases and export to file.
"""

import json

import pytest

from src.models.ingredient import IngredientVolume
from src.models.unit import Unit
from src.services.bundle_export_service import (
    ExportResult,
    count_bundle_records,
    export_cocktails,
    export_cocktails_to_json,
)
from src.services.database import session_scope
from src.services.exceptions import InvalidRequest, NotFound
from src.utils.constants import APP_VERSION, BUNDLE_COLLECTION_KEYS
from src.utils.datetime_utils import parse_iso_timestamp


def _ids(records):
    return {r["id"] for r in records}


class TestExportCocktails:
    """Tests for export_cocktails()."""

    def test_metadata(self, source_catalog):
        bundle = export_cocktails(source_catalog.workspace_id, [source_catalog.mojito_id])

        assert bundle["exportVersion"] == APP_VERSION
        assert bundle["exportDate"].endswith("Z")
        parse_iso_timestamp(bundle["exportDate"])
        assert bundle["exportedFrom"] == {
            "workspaceId": source_catalog.workspace_id,
            "workspaceName": "Bar Source",
        }
        assert set(BUNDLE_COLLECTION_KEYS) <= set(bundle)

    def test_mojito_closure(self, source_catalog):
        bundle = export_cocktails(source_catalog.workspace_id, [source_catalog.mojito_id])

        assert [r["name"] for r in bundle["cocktailRecipes"]] == ["Mojito"]
        assert len(bundle["cocktailRecipeSteps"]) == 2
        assert len(bundle["cocktailRecipeIngredients"]) == 3
        assert len(bundle["cocktailRecipeGarnishes"]) == 1
        assert len(bundle["cocktailRecipeImages"]) == 1
        assert _ids(bundle["glasses"]) == {source_catalog.glass_id}
        assert _ids(bundle["ice"]) == {source_catalog.ice_id}
        assert _ids(bundle["garnishes"]) == {source_catalog.garnish_id}
        assert _ids(bundle["ingredients"]) == set(source_catalog.ingredients.values())
        assert _ids(bundle["stepActions"]) == set(source_catalog.actions.values())
        assert _ids(bundle["units"]) == set(source_catalog.units.values())
        assert len(bundle["glassImages"]) == 1
        assert len(bundle["garnishImages"]) == 1
        assert len(bundle["ingredientImages"]) == 1
        assert len(bundle["ingredientVolumes"]) == 1

    def test_every_reference_resolves_inside_bundle(self, source_catalog):
        bundle = export_cocktails(
            source_catalog.workspace_id, [source_catalog.mojito_id, source_catalog.daiquiri_id]
        )

        glass_ids = _ids(bundle["glasses"])
        ice_ids = _ids(bundle["ice"])
        unit_ids = _ids(bundle["units"])
        action_ids = _ids(bundle["stepActions"])
        ingredient_ids = _ids(bundle["ingredients"])
        garnish_ids = _ids(bundle["garnishes"])
        step_ids = _ids(bundle["cocktailRecipeSteps"])
        root_ids = _ids(bundle["cocktailRecipes"])

        for r in bundle["cocktailRecipes"]:
            assert r["glassId"] is None or r["glassId"] in glass_ids
            assert r["iceId"] is None or r["iceId"] in ice_ids
        for s in bundle["cocktailRecipeSteps"]:
            assert s["cocktailRecipeId"] in root_ids
            assert s["actionId"] in action_ids
        for line in bundle["cocktailRecipeIngredients"]:
            assert line["cocktailRecipeStepId"] in step_ids
            assert line["ingredientId"] in ingredient_ids
            assert line["unitId"] in unit_ids
        for g in bundle["cocktailRecipeGarnishes"]:
            assert g["garnishId"] in garnish_ids
        for v in bundle["ingredientVolumes"]:
            assert v["ingredientId"] in ingredient_ids
            assert v["unitId"] in unit_ids

    def test_units_reached_only_through_volumes_are_included(self, test_db, source_catalog):
        session = test_db()
        ml = Unit(workspace_id=source_catalog.workspace_id, name="ML")
        session.add(ml)
        session.flush()
        session.add(
            IngredientVolume(
                workspace_id=source_catalog.workspace_id,
                ingredient_id=source_catalog.ingredients["White Rum"],
                unit_id=ml.id,
                volume=700.0,
            )
        )
        session.commit()

        bundle = export_cocktails(source_catalog.workspace_id, [source_catalog.daiquiri_id])

        assert ml.id in _ids(bundle["units"])
        assert bundle["glasses"] == []
        assert bundle["garnishes"] == []

    def test_steps_in_step_number_order(self, source_catalog):
        bundle = export_cocktails(source_catalog.workspace_id, [source_catalog.mojito_id])
        assert [s["stepNumber"] for s in bundle["cocktailRecipeSteps"]] == [0, 1]
        assert bundle["cocktailRecipeSteps"][0]["actionId"] == source_catalog.actions["Muddle"]

    def test_roots_follow_requested_order(self, source_catalog):
        bundle = export_cocktails(
            source_catalog.workspace_id, [source_catalog.daiquiri_id, source_catalog.mojito_id]
        )
        assert [r["name"] for r in bundle["cocktailRecipes"]] == ["Daiquiri", "Mojito"]

    def test_wire_keys_are_camel_case(self, source_catalog):
        bundle = export_cocktails(source_catalog.workspace_id, [source_catalog.mojito_id])
        mojito = bundle["cocktailRecipes"][0]
        assert mojito["isArchived"] is False
        assert mojito["tags"] == ["classic", "long"]
        assert bundle["stepActions"][0].keys() == {"id", "name", "actionGroup", "workspaceId"}
        assert "shortName" in bundle["ingredients"][0]

    def test_empty_selection_rejected(self, source_catalog):
        with pytest.raises(InvalidRequest):
            export_cocktails(source_catalog.workspace_id, [])

    def test_unknown_ids_not_found(self, source_catalog):
        with pytest.raises(NotFound):
            export_cocktails(source_catalog.workspace_id, ["does-not-exist"])

    def test_other_workspace_ids_ignored(self, source_catalog, target_workspace):
        with pytest.raises(NotFound):
            export_cocktails(target_workspace, [source_catalog.mojito_id])

    def test_with_session_parameter(self, source_catalog):
        with session_scope() as session:
            bundle = export_cocktails(
                source_catalog.workspace_id, [source_catalog.mojito_id], session=session
            )
        assert len(bundle["cocktailRecipes"]) == 1


class TestExportToJson:
    """Tests for export_cocktails_to_json()."""

    def test_writes_bundle_file(self, source_catalog, tmp_path):
        path = tmp_path / "bundle.json"
        result = export_cocktails_to_json(
            str(path), source_catalog.workspace_id, [source_catalog.mojito_id]
        )

        assert result.success is True
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["cocktailRecipes"][0]["name"] == "Mojito"
        assert result.record_count == sum(count_bundle_records(data).values())
        assert result.entity_counts["cocktailRecipes"] == 1
        assert "Exported" in result.get_summary()

    def test_failure_captured_in_result(self, source_catalog, tmp_path):
        result = export_cocktails_to_json(
            str(tmp_path / "bundle.json"), source_catalog.workspace_id, ["missing"]
        )
        assert result.success is False
        assert "No cocktails found" in result.error
        assert result.get_summary().startswith("Export failed")


class TestExportResult:
    """Tests for ExportResult."""

    def test_summary_lists_entity_counts(self):
        result = ExportResult("out.json", 3)
        result.add_entity_count("glasses", 2)
        summary = result.get_summary()
        assert "Exported 3 records to out.json" in summary
        assert "glasses: 2" in summary
