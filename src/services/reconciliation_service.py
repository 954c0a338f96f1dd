"""
Reconciliation Service - Execute an import bundle against a workspace.

Applies a complete decision set inside one transaction:

1. Auxiliary kinds in dependency order (units, ice, step actions, glasses,
   garnishes, ingredients). Each mapping either reuses an existing record or
   creates a new one; the bundle id -> destination id pair goes into the
   remap table of the kind.
2. Cocktail recipes, with every nested reference translated through the
   remap tables.
3. Pending translation labels, merged into the workspace setting once.

Each creation runs in its own savepoint, so a failing item is rolled back
and reported while the rest of the import still commits. A fault in the
transaction itself discards everything and raises ReconciliationError.

Usage:
    from src.services.import_decisions import MappingDecisions
    from src.services.reconciliation_service import execute_import

    result = execute_import(bundle, MappingDecisions.from_dict(payload), workspace_id)
    print(result.get_summary())
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.models.recipe import (
    CocktailRecipe,
    CocktailRecipeGarnish,
    CocktailRecipeImage,
    CocktailRecipeIngredient,
    CocktailRecipeStep,
)
from src.services.database import session_scope
from src.services.entity_kinds import (
    AUXILIARY_IMPORT_ORDER,
    AUXILIARY_KIND_KEYS,
    ROOT_KIND,
    AuxiliaryKind,
    copy_bundle_images,
    get_kind,
)
from src.services.exceptions import CocktailNotFound, ReconciliationError
from src.services.import_decisions import (
    AuxiliaryDecision,
    ImportErrorRecord,
    MappingDecisions,
    PrimaryDecision,
    PrimaryEntityMapping,
)
from src.services.logging_utils import get_service_logger, log_operation
from src.services.workspace_settings_service import merge_translations
from src.utils.constants import ROOT_COLLECTION_KEY, TRANSLATION_LABEL_FIELDS

logger = get_service_logger(__name__)

COCKTAIL_ENTITY_TYPE = "Cocktail"


def is_transaction_fault(error: Exception) -> bool:
    """Whether an error means the enclosing transaction itself is unusable."""
    if isinstance(error, (OperationalError, InterfaceError)):
        return True
    return isinstance(error, DBAPIError) and error.connection_invalidated


# ============================================================================
# Result Class
# ============================================================================


class ReconciliationResult:
    """Outcome of a successful execute: counts plus non-fatal error records."""

    def __init__(self):
        self.success = True
        self.imported_cocktails = 0
        self.created: Dict[str, int] = {key: 0 for key in AUXILIARY_KIND_KEYS}
        self.reused: Dict[str, int] = {key: 0 for key in AUXILIARY_KIND_KEYS}
        self.errors: List[ImportErrorRecord] = []

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Wire response of the execute phase."""
        result: Dict[str, Any] = {
            "success": self.success,
            "imported": {
                ROOT_KIND: self.imported_cocktails,
                **{key: 0 for key in AUXILIARY_KIND_KEYS},
            },
            "created": dict(self.created),
            "reused": dict(self.reused),
        }
        if self.errors:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def get_summary(self) -> str:
        """Get a summary string of the import results."""
        lines = [
            "=" * 60,
            "Import Summary",
            "=" * 60,
            f"Cocktails imported: {self.imported_cocktails}",
        ]

        for key in AUXILIARY_KIND_KEYS:
            created = self.created.get(key, 0)
            reused = self.reused.get(key, 0)
            if created or reused:
                lines.append(f"  {key}: {created} created, {reused} reused")

        if self.errors:
            lines.append("")
            lines.append(f"Errors: {len(self.errors)}")
            for error in self.errors:
                lines.append(
                    f"  - [{error.step}] {error.entity_type} '{error.entity_name}': {error.error}"
                )

        lines.append("=" * 60)
        return "\n".join(lines)


# ============================================================================
# Execution Context
# ============================================================================


@dataclass
class ReconciliationContext:
    """
    State of one execute call: remap tables, counters and collected errors.

    Lives only for the duration of the transaction.
    """

    workspace_id: str
    bundle: Dict[str, Any]
    remap: Dict[str, Dict[str, str]] = field(default_factory=dict)
    result: ReconciliationResult = field(default_factory=ReconciliationResult)
    translations: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def resolve(self, kind_key: str, export_id: Optional[str]) -> Optional[str]:
        """Destination id for a bundle id, or None if it was never mapped."""
        if export_id is None:
            return None
        return self.remap.get(kind_key, {}).get(export_id)

    def map_id(self, kind_key: str, export_id: str, destination_id: str) -> None:
        self.remap.setdefault(kind_key, {})[export_id] = destination_id

    def record_error(self, step: str, entity_type: str, entity_name: str, error: str) -> None:
        """Collect a non-fatal error and keep going."""
        self.result.errors.append(ImportErrorRecord(step, entity_type, entity_name, error))
        log_operation(
            logger,
            "execute_import",
            "item_error",
            level=logging.WARNING,
            workspace_id=self.workspace_id,
            step=step,
            entity_type=entity_type,
            entity_name=entity_name,
            error=error,
        )

    def queue_translations(self, data: Dict[str, Any]) -> None:
        """Remember translation labels carried by entity data."""
        name = data.get("name")
        if not name:
            return
        for label_field, language in TRANSLATION_LABEL_FIELDS.items():
            label = data.get(label_field)
            if label:
                self.translations.setdefault(language, {})[name] = label

    def run_item(
        self,
        session: Session,
        step: str,
        entity_type: str,
        entity_name: str,
        action: Callable[[], Any],
    ) -> Any:
        """
        Run one item inside a savepoint.

        Returns:
            The action's return value, or None if the item failed and was
            rolled back

        Raises:
            SQLAlchemyError: If the failure is a transaction-level fault
        """
        try:
            with session.begin_nested():
                return action()
        except Exception as e:
            if is_transaction_fault(e):
                raise
            self.record_error(step, entity_type, entity_name, str(e))
            return None


# ============================================================================
# Execute
# ============================================================================


def execute_import(
    bundle: Dict[str, Any],
    decisions: MappingDecisions,
    workspace_id: str,
    session: Optional[Session] = None,
) -> ReconciliationResult:
    """
    Import a bundle into a workspace according to a decision set.

    Args:
        bundle: Export bundle (already structurally validated)
        decisions: Parsed decision set
        workspace_id: Destination workspace
        session: Optional SQLAlchemy session for transactional composition

    Returns:
        ReconciliationResult with counts and non-fatal errors

    Raises:
        ReconciliationError: If the transaction failed; nothing was committed
    """
    context = ReconciliationContext(workspace_id=workspace_id, bundle=bundle)

    try:
        if session is not None:
            _execute_import_impl(context, decisions, session)
        else:
            with session_scope() as sess:
                _execute_import_impl(context, decisions, sess)
    except SQLAlchemyError as e:
        errors = [err.to_dict() for err in context.result.errors]
        if not errors:
            errors = [
                ImportErrorRecord(
                    step="transaction", entity_type="System", entity_name="", error=str(e)
                ).to_dict()
            ]
        log_operation(
            logger,
            "execute_import",
            "transaction_failed",
            level=logging.ERROR,
            workspace_id=workspace_id,
            error=str(e),
            collected_errors=len(context.result.errors),
        )
        raise ReconciliationError(str(e), errors=errors, original_error=e) from e

    result = context.result
    log_operation(
        logger,
        "execute_import",
        "success",
        workspace_id=workspace_id,
        cocktails_imported=result.imported_cocktails,
        created_count=sum(result.created.values()),
        reused_count=sum(result.reused.values()),
        error_count=len(result.errors),
    )
    return result


def _execute_import_impl(
    context: ReconciliationContext, decisions: MappingDecisions, session: Session
) -> None:
    """Internal implementation of execute_import."""
    for kind_key in AUXILIARY_IMPORT_ORDER:
        _reconcile_auxiliary(get_kind(kind_key), context, decisions, session)

    _reconcile_cocktails(context, decisions, session)

    if context.translations:
        merge_translations(context.workspace_id, context.translations, session=session)


def _index_by_id(records: Optional[List[Dict[str, Any]]]) -> Dict[str, Dict[str, Any]]:
    return {r.get("id"): r for r in records or [] if isinstance(r, dict)}


# ============================================================================
# Auxiliary Kinds
# ============================================================================


def _reconcile_auxiliary(
    kind: AuxiliaryKind,
    context: ReconciliationContext,
    decisions: MappingDecisions,
    session: Session,
) -> None:
    """Resolve every mapping of one auxiliary kind into its remap table."""
    records = _index_by_id(context.bundle.get(kind.key))

    for mapping in decisions.for_kind(kind.key):
        if mapping.decision == AuxiliaryDecision.USE_EXISTING:
            context.map_id(kind.key, mapping.export_id, mapping.existing_id)
            context.result.reused[kind.key] += 1
            continue

        record = records.get(mapping.export_id)
        if record is None and mapping.new_entity_data is None:
            context.record_error(
                kind.key, kind.label, mapping.export_id, "Not found in export data"
            )
            continue

        data = dict(record or {})
        data.update(mapping.new_entity_data or {})
        entity_name = kind.display_name(data)

        existing = kind.lookup_by_key(session, context.workspace_id, kind.uniqueness_key(data))
        if existing is not None:
            context.record_error(
                kind.key, kind.label, entity_name, "Already exists (unique constraint)"
            )
            context.map_id(kind.key, mapping.export_id, existing.id)
            context.result.reused[kind.key] += 1
            continue

        entity = context.run_item(
            session,
            step=kind.key,
            entity_type=kind.label,
            entity_name=entity_name,
            action=lambda: _create_auxiliary(kind, context, session, mapping.export_id, data),
        )
        if entity is None:
            continue

        if kind.translatable:
            context.queue_translations(data)
        context.map_id(kind.key, mapping.export_id, entity.id)
        context.result.created[kind.key] += 1


def _create_auxiliary(
    kind: AuxiliaryKind,
    context: ReconciliationContext,
    session: Session,
    export_id: str,
    data: Dict[str, Any],
):
    entity = kind.create(session, context.workspace_id, data)
    kind.copy_children(session, context, export_id, entity.id, kind.display_name(data))
    logger.debug(f"Created {kind.label} '{kind.display_name(data)}' ({entity.id})")
    return entity


# ============================================================================
# Cocktail Recipes
# ============================================================================


def _reconcile_cocktails(
    context: ReconciliationContext, decisions: MappingDecisions, session: Session
) -> None:
    """Materialize every non-skipped recipe mapping."""
    records = _index_by_id(context.bundle.get(ROOT_COLLECTION_KEY))

    for mapping in decisions.cocktails:
        if mapping.decision == PrimaryDecision.SKIP:
            continue

        record = records.get(mapping.export_id)
        if record is None:
            context.record_error(
                ROOT_KIND, COCKTAIL_ENTITY_TYPE, mapping.export_id, "Not found in export data"
            )
            continue

        name = _final_name(mapping, record)
        recipe = context.run_item(
            session,
            step=ROOT_KIND,
            entity_type=COCKTAIL_ENTITY_TYPE,
            entity_name=name,
            action=lambda: _materialize_cocktail(session, context, record, name, mapping),
        )
        if recipe is not None:
            context.result.imported_cocktails += 1


def _final_name(mapping: PrimaryEntityMapping, record: Dict[str, Any]) -> str:
    if mapping.decision == PrimaryDecision.RENAME:
        return mapping.new_name
    return record.get("name") or ""


def _delete_for_overwrite(session: Session, workspace_id: str, recipe_id: str) -> None:
    """Delete a recipe and its whole subtree, keeping its id free for reuse."""
    target = session.get(CocktailRecipe, recipe_id)
    if target is None or target.workspace_id != workspace_id:
        raise CocktailNotFound(recipe_id)
    # Cascades remove step ingredients, steps, garnish links and images first
    session.delete(target)
    session.flush()


def _materialize_cocktail(
    session: Session,
    context: ReconciliationContext,
    record: Dict[str, Any],
    name: str,
    mapping: PrimaryEntityMapping,
) -> CocktailRecipe:
    """Create one recipe and its children from bundle records."""
    export_id = record["id"]
    bundle = context.bundle

    if mapping.decision == PrimaryDecision.OVERWRITE:
        _delete_for_overwrite(session, context.workspace_id, mapping.overwrite_id)

    recipe = CocktailRecipe(
        workspace_id=context.workspace_id,
        name=name,
        glass_id=context.resolve("glasses", record.get("glassId")),
        ice_id=context.resolve("ice", record.get("iceId")),
        price=record.get("price"),
        tags=list(record.get("tags") or []),
        description=record.get("description"),
        is_archived=bool(record.get("isArchived")),
        history=record.get("history"),
        notes=record.get("notes"),
    )
    if mapping.decision == PrimaryDecision.OVERWRITE:
        recipe.id = mapping.overwrite_id
    session.add(recipe)
    session.flush()

    copy_bundle_images(
        session, bundle, "cocktailRecipeImages", "cocktailRecipeId", CocktailRecipeImage,
        "cocktail_recipe_id", export_id, recipe.id,
    )

    lines_by_step: Dict[str, List[Dict[str, Any]]] = {}
    for line in bundle.get("cocktailRecipeIngredients") or []:
        lines_by_step.setdefault(line.get("cocktailRecipeStepId"), []).append(line)

    steps = sorted(
        (
            s
            for s in bundle.get("cocktailRecipeSteps") or []
            if s.get("cocktailRecipeId") == export_id
        ),
        key=lambda s: s.get("stepNumber") or 0,
    )
    for step_record in steps:
        action_id = context.resolve("stepActions", step_record.get("actionId"))
        if action_id is None:
            logger.debug(
                f"Dropping step {step_record.get('stepNumber')} of '{name}': action not mapped"
            )
            continue

        step = CocktailRecipeStep(
            cocktail_recipe_id=recipe.id,
            step_number=step_record.get("stepNumber") or 0,
            action_id=action_id,
            optional=bool(step_record.get("optional")),
        )
        session.add(step)
        session.flush()

        lines = sorted(
            lines_by_step.get(step_record.get("id"), []),
            key=lambda line: line.get("ingredientNumber") or 0,
        )
        for line in lines:
            session.add(
                CocktailRecipeIngredient(
                    cocktail_recipe_step_id=step.id,
                    ingredient_id=context.resolve("ingredients", line.get("ingredientId")),
                    unit_id=context.resolve("units", line.get("unitId")),
                    ingredient_number=line.get("ingredientNumber") or 0,
                    optional=bool(line.get("optional")),
                    amount=line.get("amount"),
                )
            )

    garnish_links = sorted(
        (
            g
            for g in bundle.get("cocktailRecipeGarnishes") or []
            if g.get("cocktailRecipeId") == export_id
        ),
        key=lambda g: g.get("garnishNumber") or 0,
    )
    for link in garnish_links:
        garnish_id = context.resolve("garnishes", link.get("garnishId"))
        if garnish_id is None:
            continue
        session.add(
            CocktailRecipeGarnish(
                cocktail_recipe_id=recipe.id,
                garnish_id=garnish_id,
                garnish_number=link.get("garnishNumber") or 0,
                optional=bool(link.get("optional")),
                description=link.get("description"),
            )
        )

    session.flush()
    return recipe
