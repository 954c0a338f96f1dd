"""
Bundle Export Service - Serialize cocktail recipes into a portable bundle.

A bundle holds the selected recipes, their nested records, and the closure
of every catalog entity they reference, so an importer never needs to
contact the source workspace again. Second-order references are followed:
ingredient volume conversions pull in the units they are expressed in.

Usage:
    from src.services.bundle_export_service import export_cocktails, export_cocktails_to_json

    bundle = export_cocktails(workspace_id, ["3f2b...", "91ac..."])

    result = export_cocktails_to_json("bundle.json", workspace_id, cocktail_ids)
    print(result.get_summary())
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from src.models.garnish import Garnish, GarnishImage
from src.models.glass import Glass, GlassImage
from src.models.ice import Ice
from src.models.ingredient import Ingredient, IngredientImage, IngredientVolume
from src.models.recipe import (
    CocktailRecipe,
    CocktailRecipeGarnish,
    CocktailRecipeImage,
    CocktailRecipeIngredient,
    CocktailRecipeStep,
)
from src.models.step_action import StepAction
from src.models.unit import Unit
from src.models.workspace import Workspace
from src.services.database import session_scope
from src.services.exceptions import InvalidRequest, NotFound
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import APP_VERSION, BUNDLE_COLLECTION_KEYS
from src.utils.datetime_utils import to_iso_timestamp, utc_now

logger = get_service_logger(__name__)


# ============================================================================
# Result Class
# ============================================================================


class ExportResult:
    """Result of a bundle export to file."""

    def __init__(self, file_path: str, record_count: int):
        self.file_path = file_path
        self.record_count = record_count
        self.success = True
        self.error = None
        self.entity_counts: Dict[str, int] = {}

    def add_entity_count(self, entity_type: str, count: int):
        """Add count for a specific entity type."""
        self.entity_counts[entity_type] = count

    def get_summary(self) -> str:
        """Get a summary string of the export results."""
        if not self.success:
            return f"Export failed: {self.error}"

        lines = [f"Exported {self.record_count} records to {self.file_path}"]

        if self.entity_counts:
            lines.append("")
            for entity, count in self.entity_counts.items():
                lines.append(f"  {entity}: {count}")

        return "\n".join(lines)


# ============================================================================
# Record Builders (model -> wire format)
# ============================================================================


def _cocktail_record(r: CocktailRecipe) -> Dict[str, Any]:
    return {
        "id": r.id,
        "name": r.name,
        "workspaceId": r.workspace_id,
        "glassId": r.glass_id,
        "iceId": r.ice_id,
        "price": r.price,
        "tags": list(r.tags or []),
        "description": r.description,
        "isArchived": r.is_archived,
        "history": r.history,
        "notes": r.notes,
    }


def _step_record(s: CocktailRecipeStep) -> Dict[str, Any]:
    return {
        "id": s.id,
        "cocktailRecipeId": s.cocktail_recipe_id,
        "stepNumber": s.step_number,
        "actionId": s.action_id,
        "optional": s.optional,
    }


def _step_ingredient_record(i: CocktailRecipeIngredient) -> Dict[str, Any]:
    return {
        "id": i.id,
        "cocktailRecipeStepId": i.cocktail_recipe_step_id,
        "ingredientId": i.ingredient_id,
        "ingredientNumber": i.ingredient_number,
        "optional": i.optional,
        "amount": i.amount,
        "unitId": i.unit_id,
    }


def _recipe_garnish_record(g: CocktailRecipeGarnish) -> Dict[str, Any]:
    return {
        "cocktailRecipeId": g.cocktail_recipe_id,
        "garnishId": g.garnish_id,
        "garnishNumber": g.garnish_number,
        "optional": g.optional,
        "description": g.description,
    }


def _glass_record(g: Glass) -> Dict[str, Any]:
    return {
        "id": g.id,
        "name": g.name,
        "workspaceId": g.workspace_id,
        "deposit": g.deposit,
        "volume": g.volume,
        "notes": g.notes,
    }


def _garnish_record(g: Garnish) -> Dict[str, Any]:
    return {
        "id": g.id,
        "name": g.name,
        "workspaceId": g.workspace_id,
        "description": g.description,
        "notes": g.notes,
        "price": g.price,
    }


def _ingredient_record(i: Ingredient) -> Dict[str, Any]:
    return {
        "id": i.id,
        "name": i.name,
        "workspaceId": i.workspace_id,
        "shortName": i.short_name,
        "description": i.description,
        "notes": i.notes,
        "price": i.price,
        "link": i.link,
        "tags": list(i.tags or []),
    }


def _volume_record(v: IngredientVolume) -> Dict[str, Any]:
    return {
        "id": v.id,
        "ingredientId": v.ingredient_id,
        "unitId": v.unit_id,
        "volume": v.volume,
        "workspaceId": v.workspace_id,
    }


def _named_record(entity) -> Dict[str, Any]:
    return {"id": entity.id, "name": entity.name, "workspaceId": entity.workspace_id}


def _step_action_record(a: StepAction) -> Dict[str, Any]:
    return {
        "id": a.id,
        "name": a.name,
        "actionGroup": a.action_group,
        "workspaceId": a.workspace_id,
    }


def _image_record(fk_key: str, parent_id: str, image: str) -> Dict[str, Any]:
    return {fk_key: parent_id, "image": image}


# ============================================================================
# Export Functions
# ============================================================================


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    """Distinct non-empty ids, in first-seen order."""
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def export_cocktails(
    workspace_id: str,
    cocktail_ids: List[str],
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """
    Build an export bundle for the given cocktails of one workspace.

    Args:
        workspace_id: Source workspace
        cocktail_ids: Recipes to export (ids outside the workspace are ignored)
        session: Optional SQLAlchemy session for transactional composition

    Returns:
        Bundle dictionary in wire format

    Raises:
        InvalidRequest: If cocktail_ids is empty
        NotFound: If none of the requested cocktails exist in the workspace
    """
    if not cocktail_ids:
        raise InvalidRequest("No cocktails selected")

    if session is not None:
        return _export_cocktails_impl(workspace_id, cocktail_ids, session)
    with session_scope() as sess:
        return _export_cocktails_impl(workspace_id, cocktail_ids, sess)


def _export_cocktails_impl(
    workspace_id: str, cocktail_ids: List[str], session: Session
) -> Dict[str, Any]:
    """Internal implementation of export_cocktails."""
    requested = _distinct(cocktail_ids)
    found = {
        r.id: r
        for r in session.query(CocktailRecipe)
        .filter(CocktailRecipe.workspace_id == workspace_id, CocktailRecipe.id.in_(requested))
        .all()
    }
    recipes = [found[rid] for rid in requested if rid in found]
    if not recipes:
        log_operation(
            logger, "export_cocktails", "not_found", workspace_id=workspace_id,
            requested=len(requested),
        )
        raise NotFound("No cocktails found")

    recipe_ids = [r.id for r in recipes]

    # Direct children of the recipes
    recipe_images = (
        session.query(CocktailRecipeImage)
        .filter(CocktailRecipeImage.cocktail_recipe_id.in_(recipe_ids))
        .order_by(CocktailRecipeImage.cocktail_recipe_id)
        .all()
    )
    steps = (
        session.query(CocktailRecipeStep)
        .filter(CocktailRecipeStep.cocktail_recipe_id.in_(recipe_ids))
        .order_by(CocktailRecipeStep.cocktail_recipe_id, CocktailRecipeStep.step_number)
        .all()
    )
    recipe_garnishes = (
        session.query(CocktailRecipeGarnish)
        .filter(CocktailRecipeGarnish.cocktail_recipe_id.in_(recipe_ids))
        .order_by(CocktailRecipeGarnish.cocktail_recipe_id, CocktailRecipeGarnish.garnish_number)
        .all()
    )
    step_ids = [s.id for s in steps]
    step_ingredients = (
        session.query(CocktailRecipeIngredient)
        .filter(CocktailRecipeIngredient.cocktail_recipe_step_id.in_(step_ids))
        .order_by(
            CocktailRecipeIngredient.cocktail_recipe_step_id,
            CocktailRecipeIngredient.ingredient_number,
        )
        .all()
        if step_ids
        else []
    )

    # First-order references
    glass_ids = _distinct(r.glass_id for r in recipes)
    ice_ids = _distinct(r.ice_id for r in recipes)
    garnish_ids = _distinct(g.garnish_id for g in recipe_garnishes)
    ingredient_ids = _distinct(i.ingredient_id for i in step_ingredients)
    action_ids = _distinct(s.action_id for s in steps)

    glasses = _fetch(session, Glass, glass_ids)
    glass_images = _fetch_by(session, GlassImage, GlassImage.glass_id, glass_ids)
    ice = _fetch(session, Ice, ice_ids)
    garnishes = _fetch(session, Garnish, garnish_ids)
    garnish_images = _fetch_by(session, GarnishImage, GarnishImage.garnish_id, garnish_ids)
    ingredients = _fetch(session, Ingredient, ingredient_ids)
    ingredient_images = _fetch_by(
        session, IngredientImage, IngredientImage.ingredient_id, ingredient_ids
    )
    ingredient_volumes = _fetch_by(
        session, IngredientVolume, IngredientVolume.ingredient_id, ingredient_ids
    )
    step_actions = _fetch(session, StepAction, action_ids)

    # Second-order references: units used by lines and by volume conversions
    unit_ids = _distinct(
        [v.unit_id for v in ingredient_volumes] + [i.unit_id for i in step_ingredients]
    )
    units = _fetch(session, Unit, unit_ids)

    workspace = session.get(Workspace, workspace_id)

    bundle: Dict[str, Any] = {
        "exportVersion": APP_VERSION,
        "exportDate": to_iso_timestamp(utc_now()),
        "exportedFrom": {
            "workspaceId": workspace_id,
            "workspaceName": workspace.name if workspace else "",
        },
        "cocktailRecipes": [_cocktail_record(r) for r in recipes],
        "cocktailRecipeImages": [
            _image_record("cocktailRecipeId", i.cocktail_recipe_id, i.image) for i in recipe_images
        ],
        "cocktailRecipeSteps": [_step_record(s) for s in steps],
        "cocktailRecipeGarnishes": [_recipe_garnish_record(g) for g in recipe_garnishes],
        "cocktailRecipeIngredients": [_step_ingredient_record(i) for i in step_ingredients],
        "glasses": [_glass_record(g) for g in glasses],
        "glassImages": [_image_record("glassId", i.glass_id, i.image) for i in glass_images],
        "garnishes": [_garnish_record(g) for g in garnishes],
        "garnishImages": [
            _image_record("garnishId", i.garnish_id, i.image) for i in garnish_images
        ],
        "ingredients": [_ingredient_record(i) for i in ingredients],
        "ingredientImages": [
            _image_record("ingredientId", i.ingredient_id, i.image) for i in ingredient_images
        ],
        "ingredientVolumes": [_volume_record(v) for v in ingredient_volumes],
        "ice": [_named_record(i) for i in ice],
        "units": [_named_record(u) for u in units],
        "stepActions": [_step_action_record(a) for a in step_actions],
    }

    log_operation(
        logger,
        "export_cocktails",
        "success",
        workspace_id=workspace_id,
        cocktails=len(recipes),
        glasses=len(glasses),
        ingredients=len(ingredients),
        units=len(units),
    )
    return bundle


def _fetch(session: Session, model, ids: List[str]) -> list:
    """Fetch records by id, ordered by id for deterministic output."""
    if not ids:
        return []
    return session.query(model).filter(model.id.in_(ids)).order_by(model.id).all()


def _fetch_by(session: Session, model, column, ids: List[str]) -> list:
    """Fetch child records whose FK column is in ids."""
    if not ids:
        return []
    return session.query(model).filter(column.in_(ids)).order_by(column, model.id).all()


def count_bundle_records(bundle: Dict[str, Any]) -> Dict[str, int]:
    """Number of records in each bundle collection."""
    return {key: len(bundle.get(key) or []) for key in BUNDLE_COLLECTION_KEYS}


def export_cocktails_to_json(
    file_path: str, workspace_id: str, cocktail_ids: List[str]
) -> ExportResult:
    """
    Export cocktails to a JSON bundle file.

    Args:
        file_path: Path to output JSON file
        workspace_id: Source workspace
        cocktail_ids: Recipes to export

    Returns:
        ExportResult with per-collection record counts
    """
    try:
        bundle = export_cocktails(workspace_id, cocktail_ids)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(bundle, f, indent=2, ensure_ascii=False)

        counts = count_bundle_records(bundle)
        result = ExportResult(file_path, sum(counts.values()))
        for key, count in counts.items():
            if count:
                result.add_entity_count(key, count)
        return result

    except Exception as e:
        log_operation(logger, "export_cocktails_to_json", "error", error=str(e))
        result = ExportResult(file_path, 0)
        result.success = False
        result.error = str(e)
        return result
