"""
Cocktail Import Service - Request surface for the import and export endpoints.

The import endpoint is a three-phase protocol keyed by ``phase``:

- validate: structural check of ``exportData``
- prepare-mapping: default decisions and candidate lists
- execute: apply ``mappingDecisions`` in one transaction

Each handler returns a PhaseResponse (HTTP-style status code and JSON body)
and maps service exceptions onto status codes via ``http_status_code``.

Usage:
    from src.services.cocktail_import_service import handle_import_request

    response = handle_import_request(
        {"phase": "validate", "exportData": bundle}, workspace_id
    )
    if response.ok:
        print(response.body["cocktailCount"])
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from src.services.bundle_export_service import export_cocktails
from src.services.bundle_validation_service import validate_bundle
from src.services.exceptions import InvalidRequest, ReconciliationError, ServiceError
from src.services.import_decisions import MappingDecisions
from src.services.logging_utils import get_service_logger, log_operation
from src.services.mapping_proposal_service import prepare_mapping
from src.services.reconciliation_service import execute_import
from src.utils.constants import (
    IMPORT_PHASES,
    PHASE_EXECUTE,
    PHASE_PREPARE_MAPPING,
    PHASE_VALIDATE,
)

logger = get_service_logger(__name__)


@dataclass
class PhaseResponse:
    """Status code and JSON body of one request."""

    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _error_response(error: ServiceError) -> PhaseResponse:
    body: Dict[str, Any] = {"message": getattr(error, "message", None) or str(error)}
    errors = getattr(error, "errors", None)
    if errors:
        body["errors"] = list(errors)
    return PhaseResponse(error.http_status_code, body)


def handle_import_request(request: Dict[str, Any], workspace_id: str) -> PhaseResponse:
    """
    Dispatch one import request by phase.

    Args:
        request: {"phase", "exportData", "mappingDecisions"?}
        workspace_id: Destination workspace

    Returns:
        PhaseResponse: 200 on success, 400 for malformed requests, 404 for
        missing entities, 500 for a failed import transaction or an
        unexpected failure
    """
    phase = request.get("phase") if isinstance(request, dict) else None
    if phase not in IMPORT_PHASES:
        log_operation(
            logger, "handle_import_request", "invalid_phase", level=logging.WARNING,
            phase=str(phase),
        )
        return PhaseResponse(400, {"message": "Invalid phase"})

    export_data = request.get("exportData")

    try:
        if phase == PHASE_VALIDATE:
            return _handle_validate(export_data)
        if phase == PHASE_PREPARE_MAPPING:
            return _handle_prepare_mapping(export_data, workspace_id)
        return _handle_execute(export_data, request.get("mappingDecisions"), workspace_id)

    except ReconciliationError as e:
        return PhaseResponse(e.http_status_code, {"message": e.message, "errors": list(e.errors)})
    except ServiceError as e:
        log_operation(
            logger, "handle_import_request", "rejected", level=logging.WARNING,
            phase=phase, error=str(e),
        )
        return _error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected failure in {phase} phase: {e}")
        return PhaseResponse(500, {"message": str(e)})


def _handle_validate(export_data: Any) -> PhaseResponse:
    result = validate_bundle(export_data)
    return PhaseResponse(200 if result.valid else 400, result.to_dict())


def _require_valid_bundle(export_data: Any) -> None:
    result = validate_bundle(export_data)
    if not result.valid:
        raise InvalidRequest("Invalid export data", result.errors)


def _handle_prepare_mapping(export_data: Any, workspace_id: str) -> PhaseResponse:
    _require_valid_bundle(export_data)
    proposal = prepare_mapping(export_data, workspace_id)
    return PhaseResponse(200, proposal.to_dict())


def _handle_execute(
    export_data: Any, mapping_decisions: Optional[Dict[str, Any]], workspace_id: str
) -> PhaseResponse:
    if not mapping_decisions:
        raise InvalidRequest("Mapping decisions are missing")
    decisions = MappingDecisions.from_dict(mapping_decisions)
    _require_valid_bundle(export_data)
    result = execute_import(export_data, decisions, workspace_id)
    return PhaseResponse(200, result.to_dict())


def handle_export_request(request: Dict[str, Any], workspace_id: str) -> PhaseResponse:
    """
    Export the requested cocktails as a bundle.

    Args:
        request: {"cocktailIds": [...]}
        workspace_id: Source workspace

    Returns:
        PhaseResponse with the bundle as body on success
    """
    cocktail_ids = request.get("cocktailIds") if isinstance(request, dict) else None
    if not isinstance(cocktail_ids, list) or not all(isinstance(i, str) for i in cocktail_ids):
        return PhaseResponse(400, {"message": "cocktailIds must be an array of ids"})

    try:
        return PhaseResponse(200, export_cocktails(workspace_id, cocktail_ids))
    except ServiceError as e:
        return _error_response(e)
