"""
Entity Kind Registry - Capabilities of each auxiliary entity kind.

Cocktail recipes reference six kinds of workspace reference data. Export,
mapping proposal and import treat them uniformly through the AuxiliaryKind
interface:

- uniqueness_key(): identifying key enforced by the database
- match_key(): case-insensitive key used for auto-matching
- lookup_by_key(): find the destination record holding a key
- create(): insert a new record from bundle/override data
- copy_children(): copy images and other owned child records

Processing order is derived from the declared reference graph
(REFERENCE_GRAPH), not from statement order.

Usage:
    from src.services.entity_kinds import AUXILIARY_KINDS, AUXILIARY_IMPORT_ORDER

    for key in AUXILIARY_IMPORT_ORDER:
        kind = AUXILIARY_KINDS[key]
        existing = kind.lookup_by_key(session, workspace_id, kind.uniqueness_key(data))
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from src.models.garnish import Garnish, GarnishImage
from src.models.glass import Glass, GlassImage
from src.models.ice import Ice
from src.models.ingredient import Ingredient, IngredientImage, IngredientVolume
from src.models.step_action import StepAction
from src.models.unit import Unit
from src.services.logging_utils import get_service_logger

if TYPE_CHECKING:
    from src.services.reconciliation_service import ReconciliationContext

logger = get_service_logger(__name__)


# ============================================================================
# Reference Graph
# ============================================================================

ROOT_KIND = "cocktails"

# kind -> kinds it references. Declaration order breaks ties in the sort.
REFERENCE_GRAPH: Dict[str, List[str]] = {
    "units": [],
    "ice": [],
    "stepActions": [],
    "glasses": [],
    "garnishes": [],
    "ingredients": ["units"],
    ROOT_KIND: ["units", "ice", "stepActions", "glasses", "garnishes", "ingredients"],
}


def resolve_processing_order(graph: Dict[str, List[str]]) -> List[str]:
    """
    Topologically sort a reference graph so referenced kinds come first.

    Args:
        graph: Mapping of kind -> kinds it references

    Returns:
        Kinds in dependency order

    Raises:
        ValueError: If a kind references an undeclared kind or the graph has a cycle
    """
    for kind, deps in graph.items():
        unknown = [d for d in deps if d not in graph]
        if unknown:
            raise ValueError(f"Kind '{kind}' references undeclared kinds: {', '.join(unknown)}")

    order: List[str] = []
    remaining = list(graph.keys())
    while remaining:
        ready = [k for k in remaining if all(d in order for d in graph[k])]
        if not ready:
            raise ValueError(f"Reference cycle between kinds: {', '.join(remaining)}")
        order.append(ready[0])
        remaining.remove(ready[0])
    return order


IMPORT_ORDER: List[str] = resolve_processing_order(REFERENCE_GRAPH)
AUXILIARY_IMPORT_ORDER: List[str] = [k for k in IMPORT_ORDER if k != ROOT_KIND]


# ============================================================================
# Helpers
# ============================================================================


def _upsert_image(session: Session, image_model, fk_field: str, parent_id: str, image: str):
    """Insert or replace the single image row owned by parent_id."""
    existing = (
        session.query(image_model).filter(getattr(image_model, fk_field) == parent_id).first()
    )
    if existing:
        existing.image = image
    else:
        session.add(image_model(**{fk_field: parent_id, "image": image}))
    session.flush()


def copy_bundle_images(
    session: Session,
    bundle: Dict[str, Any],
    collection: str,
    bundle_fk: str,
    image_model,
    model_fk: str,
    export_id: str,
    new_id: str,
) -> int:
    """Copy bundle images of export_id onto new_id. Returns the number copied."""
    copied = 0
    for record in bundle.get(collection) or []:
        if record.get(bundle_fk) == export_id and record.get("image") is not None:
            _upsert_image(session, image_model, model_fk, new_id, record["image"])
            copied += 1
    return copied


# ============================================================================
# Kind Capabilities
# ============================================================================


class AuxiliaryKind:
    """
    Capabilities of one auxiliary entity kind.

    Subclasses declare the model, the wire key and how bundle fields map to
    model columns; identity, lookup and creation are shared.

    Attributes:
        key: Wire key used in bundles and decision payloads (e.g. "units")
        label: Entity type label used in error records
        model: SQLAlchemy model class
        translatable: Whether a translation label may accompany new records
        candidate_rule: "exact" or "contains" matching for manual-picker candidates
    """

    key: str = ""
    label: str = ""
    model = None
    translatable: bool = False
    candidate_rule: str = "exact"

    # -- identity ------------------------------------------------------------

    def uniqueness_key(self, data: Dict[str, Any]) -> Tuple:
        """Identifying key of wire data, as the database constraint sees it."""
        return (data.get("name"),)

    def match_key(self, data: Dict[str, Any]) -> Tuple:
        """Case-insensitive auto-match key of wire data."""
        name = data.get("name") or ""
        return (name.lower(),)

    def model_match_key(self, entity) -> Tuple:
        return ((entity.name or "").lower(),)

    def display_name(self, data: Dict[str, Any]) -> str:
        """Name used to identify the entity in error records."""
        return str(data.get("name") or "")

    # -- queries -------------------------------------------------------------

    def _key_filters(self, key: Tuple) -> list:
        return [self.model.name == key[0]]

    def lookup_by_key(self, session: Session, workspace_id: str, key: Tuple):
        """Find the destination record holding key, or None."""
        return (
            session.query(self.model)
            .filter(self.model.workspace_id == workspace_id, *self._key_filters(key))
            .first()
        )

    def list_existing(self, session: Session, workspace_id: str) -> list:
        """All destination records of this kind, ordered by name then id."""
        return (
            session.query(self.model)
            .filter(self.model.workspace_id == workspace_id)
            .order_by(self.model.name, self.model.id)
            .all()
        )

    def summarize(self, entity) -> Dict[str, Any]:
        """Wire summary of a destination record for candidate lists."""
        return {"id": entity.id, "name": entity.name}

    def is_candidate(self, entity, data: Dict[str, Any]) -> bool:
        """Whether a destination record should be offered for manual mapping."""
        if self.candidate_rule == "contains":
            needle = (data.get("name") or "").lower()
            return needle in (entity.name or "").lower()
        return self.model_match_key(entity) == self.match_key(data)

    # -- mutation ------------------------------------------------------------

    def entity_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Model column values taken from wire data."""
        return {"name": data.get("name")}

    def create(self, session: Session, workspace_id: str, data: Dict[str, Any]):
        """Insert a new record built from wire data and flush to obtain its id."""
        entity = self.model(workspace_id=workspace_id, **self.entity_fields(data))
        session.add(entity)
        session.flush()
        return entity

    def copy_children(
        self,
        session: Session,
        context: "ReconciliationContext",
        export_id: str,
        new_id: str,
        entity_name: str,
    ) -> None:
        """Copy records owned by the bundle entity onto the new record."""
        return None


class UnitKind(AuxiliaryKind):
    key = "units"
    label = "Unit"
    model = Unit
    translatable = True


class IceKind(AuxiliaryKind):
    key = "ice"
    label = "Ice"
    model = Ice
    translatable = True


class StepActionKind(AuxiliaryKind):
    """Step actions are identified by (name, action group)."""

    key = "stepActions"
    label = "Step action"
    model = StepAction
    translatable = True

    def uniqueness_key(self, data):
        return (data.get("name"), data.get("actionGroup"))

    def match_key(self, data):
        return ((data.get("name") or "").lower(), data.get("actionGroup"))

    def model_match_key(self, entity):
        return ((entity.name or "").lower(), entity.action_group)

    def display_name(self, data):
        return f"{data.get('name')} ({data.get('actionGroup')})"

    def _key_filters(self, key):
        return [self.model.name == key[0], self.model.action_group == key[1]]

    def summarize(self, entity):
        return {"id": entity.id, "name": entity.name, "actionGroup": entity.action_group}

    def entity_fields(self, data):
        return {"name": data.get("name"), "action_group": data.get("actionGroup")}


class GlassKind(AuxiliaryKind):
    key = "glasses"
    label = "Glass"
    model = Glass
    candidate_rule = "contains"

    def entity_fields(self, data):
        return {
            "name": data.get("name"),
            "deposit": data.get("deposit"),
            "volume": data.get("volume"),
            "notes": data.get("notes"),
        }

    def copy_children(self, session, context, export_id, new_id, entity_name):
        copy_bundle_images(
            session, context.bundle, "glassImages", "glassId", GlassImage, "glass_id",
            export_id, new_id,
        )


class GarnishKind(AuxiliaryKind):
    key = "garnishes"
    label = "Garnish"
    model = Garnish
    candidate_rule = "contains"

    def entity_fields(self, data):
        return {
            "name": data.get("name"),
            "description": data.get("description"),
            "notes": data.get("notes"),
            "price": data.get("price"),
        }

    def copy_children(self, session, context, export_id, new_id, entity_name):
        copy_bundle_images(
            session, context.bundle, "garnishImages", "garnishId", GarnishImage, "garnish_id",
            export_id, new_id,
        )


class IngredientKind(AuxiliaryKind):
    """Ingredients own images and unit volume conversions."""

    key = "ingredients"
    label = "Ingredient"
    model = Ingredient
    candidate_rule = "contains"

    def entity_fields(self, data):
        return {
            "name": data.get("name"),
            "short_name": data.get("shortName"),
            "description": data.get("description"),
            "notes": data.get("notes"),
            "price": data.get("price"),
            "link": data.get("link"),
            "tags": data.get("tags") or [],
        }

    def copy_children(self, session, context, export_id, new_id, entity_name):
        copy_bundle_images(
            session, context.bundle, "ingredientImages", "ingredientId", IngredientImage,
            "ingredient_id", export_id, new_id,
        )
        for record in context.bundle.get("ingredientVolumes") or []:
            if record.get("ingredientId") != export_id:
                continue
            unit_id = context.resolve("units", record.get("unitId"))
            if unit_id is None:
                logger.debug(
                    f"Skipping volume of '{entity_name}': unit {record.get('unitId')} not mapped"
                )
                continue
            context.run_item(
                session,
                step="ingredientVolumes",
                entity_type="Ingredient volume",
                entity_name=entity_name,
                action=lambda unit_id=unit_id, record=record: self._copy_volume(
                    session, context.workspace_id, new_id, unit_id, record
                ),
            )

    @staticmethod
    def _copy_volume(
        session: Session, workspace_id: str, ingredient_id: str, unit_id: str, record: Dict
    ) -> Optional[IngredientVolume]:
        existing = (
            session.query(IngredientVolume)
            .filter(
                IngredientVolume.workspace_id == workspace_id,
                IngredientVolume.ingredient_id == ingredient_id,
                IngredientVolume.unit_id == unit_id,
            )
            .first()
        )
        if existing:
            return None
        volume = IngredientVolume(
            workspace_id=workspace_id,
            ingredient_id=ingredient_id,
            unit_id=unit_id,
            volume=record.get("volume"),
        )
        session.add(volume)
        session.flush()
        return volume


AUXILIARY_KINDS: Dict[str, AuxiliaryKind] = {
    kind.key: kind
    for kind in (
        UnitKind(),
        IceKind(),
        StepActionKind(),
        GlassKind(),
        GarnishKind(),
        IngredientKind(),
    )
}

AUXILIARY_KIND_KEYS: List[str] = list(AUXILIARY_KINDS.keys())


def get_kind(key: str) -> AuxiliaryKind:
    """
    Look up an auxiliary kind by wire key.

    Raises:
        KeyError: If key is not an auxiliary kind
    """
    return AUXILIARY_KINDS[key]
