"""
Import Decisions - Data contracts passed between mapping and execution.

The mapping proposer produces default decisions, a human may overwrite any
of them, and the reconciliation executor consumes the final set. Decisions
travel as JSON (camelCase keys) between phases; this module converts them to
and from typed records and rejects malformed sets before any work starts.

Usage:
    from src.services.import_decisions import MappingDecisions

    decisions = MappingDecisions.from_dict(payload["mappingDecisions"])
    for mapping in decisions.for_kind("units"):
        ...
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from src.services.entity_kinds import AUXILIARY_KIND_KEYS, ROOT_KIND
from src.services.exceptions import InvalidRequest


# ============================================================================
# Enums
# ============================================================================


class AuxiliaryDecision(str, Enum):
    """How to resolve one auxiliary entity from the bundle."""

    USE_EXISTING = "use-existing"  # Map onto an existing destination record
    CREATE_NEW = "create-new"  # Create a new destination record


class PrimaryDecision(str, Enum):
    """How to handle one cocktail recipe from the bundle."""

    IMPORT = "import"
    SKIP = "skip"
    RENAME = "rename"  # Import under newName
    OVERWRITE = "overwrite"  # Replace overwriteId wholesale


# ============================================================================
# Mapping Records
# ============================================================================


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


@dataclass
class AuxiliaryEntityMapping:
    """
    Decision for one auxiliary entity.

    Attributes:
        export_id: Bundle-local identifier
        decision: use-existing or create-new
        existing_id: Destination id (required iff use-existing)
        new_entity_data: Optional wire-format field overrides used on create-new
    """

    export_id: str
    decision: AuxiliaryDecision
    existing_id: Optional[str] = None
    new_entity_data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], prefix: str = "") -> "AuxiliaryEntityMapping":
        errors = []
        if not isinstance(data, dict):
            raise InvalidRequest("Invalid mapping decisions", [f"{prefix}: expected an object"])

        export_id = data.get("exportId")
        if not _is_non_empty_string(export_id):
            errors.append(f"{prefix}.exportId: required")

        try:
            decision = AuxiliaryDecision(data.get("decision"))
        except ValueError:
            decision = None
            errors.append(
                f"{prefix}.decision: must be one of "
                f"{', '.join(d.value for d in AuxiliaryDecision)}"
            )

        existing_id = data.get("existingId")
        if decision == AuxiliaryDecision.USE_EXISTING and not _is_non_empty_string(existing_id):
            errors.append(f"{prefix}.existingId: required for use-existing")

        new_entity_data = data.get("newEntityData")
        if new_entity_data is not None and not isinstance(new_entity_data, dict):
            errors.append(f"{prefix}.newEntityData: expected an object")

        if errors:
            raise InvalidRequest("Invalid mapping decisions", errors)

        return cls(
            export_id=export_id,
            decision=decision,
            existing_id=existing_id if decision == AuxiliaryDecision.USE_EXISTING else None,
            new_entity_data=new_entity_data,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"exportId": self.export_id, "decision": self.decision.value}
        if self.existing_id is not None:
            result["existingId"] = self.existing_id
        if self.new_entity_data is not None:
            result["newEntityData"] = self.new_entity_data
        return result


@dataclass
class PrimaryEntityMapping:
    """
    Decision for one cocktail recipe.

    Attributes:
        export_id: Bundle-local identifier
        decision: import, skip, rename or overwrite
        new_name: Name to import under (required iff rename)
        overwrite_id: Destination recipe to replace (required iff overwrite)
    """

    export_id: str
    decision: PrimaryDecision
    new_name: Optional[str] = None
    overwrite_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], prefix: str = "") -> "PrimaryEntityMapping":
        errors = []
        if not isinstance(data, dict):
            raise InvalidRequest("Invalid mapping decisions", [f"{prefix}: expected an object"])

        export_id = data.get("exportId")
        if not _is_non_empty_string(export_id):
            errors.append(f"{prefix}.exportId: required")

        try:
            decision = PrimaryDecision(data.get("decision"))
        except ValueError:
            decision = None
            errors.append(
                f"{prefix}.decision: must be one of "
                f"{', '.join(d.value for d in PrimaryDecision)}"
            )

        new_name = data.get("newName")
        if decision == PrimaryDecision.RENAME and not _is_non_empty_string(new_name):
            errors.append(f"{prefix}.newName: required for rename")

        overwrite_id = data.get("overwriteId")
        if decision == PrimaryDecision.OVERWRITE and not _is_non_empty_string(overwrite_id):
            errors.append(f"{prefix}.overwriteId: required for overwrite")

        if errors:
            raise InvalidRequest("Invalid mapping decisions", errors)

        return cls(
            export_id=export_id,
            decision=decision,
            new_name=new_name if decision == PrimaryDecision.RENAME else None,
            overwrite_id=overwrite_id if decision == PrimaryDecision.OVERWRITE else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"exportId": self.export_id, "decision": self.decision.value}
        if self.new_name is not None:
            result["newName"] = self.new_name
        if self.overwrite_id is not None:
            result["overwriteId"] = self.overwrite_id
        return result


@dataclass
class MappingDecisions:
    """
    Complete decision set for one execute call.

    Attributes:
        auxiliary: Kind key -> mappings for that kind (every kind present, possibly empty)
        cocktails: Recipe mappings in processing order
    """

    auxiliary: Dict[str, List[AuxiliaryEntityMapping]] = field(default_factory=dict)
    cocktails: List[PrimaryEntityMapping] = field(default_factory=list)

    def for_kind(self, kind_key: str) -> List[AuxiliaryEntityMapping]:
        return self.auxiliary.get(kind_key, [])

    @classmethod
    def from_dict(cls, data: Any) -> "MappingDecisions":
        """
        Parse a wire decision set, collecting every problem before failing.

        Missing kind lists are treated as empty.

        Raises:
            InvalidRequest: If the payload or any decision is malformed
        """
        if not isinstance(data, dict):
            raise InvalidRequest("Mapping decisions are missing")

        errors: List[str] = []
        auxiliary: Dict[str, List[AuxiliaryEntityMapping]] = {}
        for kind_key in AUXILIARY_KIND_KEYS:
            items = data.get(kind_key) or []
            if not isinstance(items, list):
                errors.append(f"{kind_key}: expected an array")
                continue
            auxiliary[kind_key] = []
            for idx, item in enumerate(items):
                try:
                    auxiliary[kind_key].append(
                        AuxiliaryEntityMapping.from_dict(item, f"{kind_key}[{idx}]")
                    )
                except InvalidRequest as e:
                    errors.extend(e.errors)

        cocktails: List[PrimaryEntityMapping] = []
        items = data.get(ROOT_KIND) or []
        if not isinstance(items, list):
            errors.append(f"{ROOT_KIND}: expected an array")
        else:
            for idx, item in enumerate(items):
                try:
                    cocktails.append(PrimaryEntityMapping.from_dict(item, f"{ROOT_KIND}[{idx}]"))
                except InvalidRequest as e:
                    errors.extend(e.errors)

        if errors:
            raise InvalidRequest("Invalid mapping decisions", errors)

        return cls(auxiliary=auxiliary, cocktails=cocktails)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            kind_key: [m.to_dict() for m in self.for_kind(kind_key)]
            for kind_key in AUXILIARY_KIND_KEYS
        }
        result[ROOT_KIND] = [m.to_dict() for m in self.cocktails]
        return result


# ============================================================================
# Error Records
# ============================================================================


@dataclass
class ImportErrorRecord:
    """
    Per-item problem recorded during execute.

    Attributes:
        step: Processing step (kind key, "ingredientVolumes", "cocktails", "transaction")
        entity_type: Human-readable entity type
        entity_name: Name identifying the entity
        error: Error message
    """

    step: str
    entity_type: str
    entity_name: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "step": self.step,
            "entityType": self.entity_type,
            "entityName": self.entity_name,
            "error": self.error,
        }
