"""
Mapping Proposal Service - Suggest decisions for importing a bundle.

For every auxiliary entity in the bundle the proposal lists destination
records a user could map it onto, and a default decision:

- exactly one case-insensitive name match (plus equal action group for step
  actions) -> use-existing
- otherwise -> create-new

Cocktail recipes whose name already exists in the destination are reported
as conflicts and default to skip; all others default to import.

The proposal is read-only and can be fed back into execute unchanged.

Usage:
    from src.services.mapping_proposal_service import prepare_mapping

    proposal = prepare_mapping(bundle, workspace_id)
    payload = proposal.to_dict()
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from src.models.recipe import CocktailRecipe
from src.services.database import session_scope
from src.services.entity_kinds import AUXILIARY_IMPORT_ORDER, ROOT_KIND, AuxiliaryKind, get_kind
from src.services.import_decisions import (
    AuxiliaryDecision,
    AuxiliaryEntityMapping,
    MappingDecisions,
    PrimaryDecision,
    PrimaryEntityMapping,
)
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import ROOT_COLLECTION_KEY

logger = get_service_logger(__name__)


@dataclass
class CandidateList:
    """Destination records a bundle entity could be mapped onto."""

    export_id: str
    export_name: str
    matches: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exportId": self.export_id,
            "exportName": self.export_name,
            "matches": [dict(m) for m in self.matches],
        }


@dataclass
class CocktailConflict:
    """Destination recipes sharing the name of a bundle recipe (possibly none)."""

    export_id: str
    export_name: str
    conflicts: List[Dict[str, str]] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exportId": self.export_id,
            "exportName": self.export_name,
            "conflicts": [dict(c) for c in self.conflicts],
        }


@dataclass
class MappingProposal:
    """
    Suggested decisions for one bundle.

    Attributes:
        existing_matches: kind -> candidate list per bundle entity
        decisions: Default decision set (auxiliary kinds and cocktails)
        cocktail_conflicts: One entry per bundle recipe
    """

    existing_matches: Dict[str, List[CandidateList]] = field(default_factory=dict)
    decisions: MappingDecisions = field(default_factory=MappingDecisions)
    cocktail_conflicts: List[CocktailConflict] = field(default_factory=list)

    @property
    def conflict_count(self) -> int:
        return sum(1 for c in self.cocktail_conflicts if c.has_conflicts)

    def to_dict(self) -> Dict[str, Any]:
        decisions = self.decisions.to_dict()
        return {
            "existingMatches": {
                kind: [c.to_dict() for c in candidates]
                for kind, candidates in self.existing_matches.items()
            },
            "autoMappings": {kind: decisions[kind] for kind in AUXILIARY_IMPORT_ORDER},
            "cocktailConflicts": [c.to_dict() for c in self.cocktail_conflicts],
            "cocktailMappings": decisions[ROOT_KIND],
        }


def prepare_mapping(
    bundle: Dict[str, Any], workspace_id: str, session: Optional[Session] = None
) -> MappingProposal:
    """
    Build default decisions and candidate lists for a validated bundle.

    Args:
        bundle: Export bundle (already structurally validated)
        workspace_id: Destination workspace
        session: Optional SQLAlchemy session for transactional composition

    Returns:
        MappingProposal
    """
    if session is not None:
        return _prepare_mapping_impl(bundle, workspace_id, session)
    with session_scope() as sess:
        return _prepare_mapping_impl(bundle, workspace_id, sess)


def _prepare_mapping_impl(
    bundle: Dict[str, Any], workspace_id: str, session: Session
) -> MappingProposal:
    """Internal implementation of prepare_mapping."""
    proposal = MappingProposal()

    for kind_key in AUXILIARY_IMPORT_ORDER:
        kind = get_kind(kind_key)
        candidates, mappings = _propose_kind(
            kind, bundle.get(kind_key) or [], workspace_id, session
        )
        proposal.existing_matches[kind_key] = candidates
        proposal.decisions.auxiliary[kind_key] = mappings

    destination = (
        session.query(CocktailRecipe)
        .filter(CocktailRecipe.workspace_id == workspace_id)
        .order_by(CocktailRecipe.name, CocktailRecipe.id)
        .all()
    )
    for record in bundle.get(ROOT_COLLECTION_KEY) or []:
        conflict = _cocktail_conflict(destination, record)
        proposal.cocktail_conflicts.append(conflict)
        decision = PrimaryDecision.SKIP if conflict.has_conflicts else PrimaryDecision.IMPORT
        proposal.decisions.cocktails.append(
            PrimaryEntityMapping(export_id=record["id"], decision=decision)
        )

    log_operation(
        logger,
        "prepare_mapping",
        "success",
        workspace_id=workspace_id,
        cocktails=len(proposal.decisions.cocktails),
        conflicts=proposal.conflict_count,
        auto_matched=sum(
            1
            for kind_key in AUXILIARY_IMPORT_ORDER
            for m in proposal.decisions.for_kind(kind_key)
            if m.decision == AuxiliaryDecision.USE_EXISTING
        ),
    )
    return proposal


def _propose_kind(
    kind: AuxiliaryKind, records: List[Dict[str, Any]], workspace_id: str, session: Session
) -> Tuple[List[CandidateList], List[AuxiliaryEntityMapping]]:
    """Candidates and default mapping for every bundle record of one kind."""
    existing = kind.list_existing(session, workspace_id)
    candidates: List[CandidateList] = []
    mappings: List[AuxiliaryEntityMapping] = []

    for record in records:
        if not isinstance(record, dict):
            continue
        export_id = record.get("id")
        if export_id is None:
            continue

        candidates.append(
            CandidateList(
                export_id=export_id,
                export_name=kind.display_name(record),
                matches=[kind.summarize(e) for e in existing if kind.is_candidate(e, record)],
            )
        )

        auto = [e for e in existing if kind.model_match_key(e) == kind.match_key(record)]
        if len(auto) == 1:
            mappings.append(
                AuxiliaryEntityMapping(
                    export_id=export_id,
                    decision=AuxiliaryDecision.USE_EXISTING,
                    existing_id=auto[0].id,
                )
            )
        else:
            mappings.append(
                AuxiliaryEntityMapping(export_id=export_id, decision=AuxiliaryDecision.CREATE_NEW)
            )

    return candidates, mappings


def _cocktail_conflict(
    destination: List[CocktailRecipe], record: Dict[str, Any]
) -> CocktailConflict:
    name = record.get("name") or ""
    return CocktailConflict(
        export_id=record["id"],
        export_name=name,
        conflicts=[
            {"id": r.id, "name": r.name}
            for r in destination
            if (r.name or "").lower() == name.lower()
        ],
    )
