"""Services package - Business logic layer for Cocktail Porter.

This package contains the service modules of the cross-workspace cocktail
import/export engine.

Architecture:
- Services: Stateless functions; each accepts an optional session so calls
  can compose into a caller's transaction
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy
- Item isolation: Savepoints per imported entity during execute

Service Modules:
- bundle_export_service: Serialize recipes and their reference closure
- bundle_validation_service: Structural checks on an uploaded bundle
- mapping_proposal_service: Default decisions and manual-mapping candidates
- reconciliation_service: Transactional execution of a decision set
- cocktail_import_service: Phase dispatcher for the import/export endpoints
- workspace_settings_service: Workspace translations setting

Infrastructure:
- entity_kinds: Auxiliary kind capabilities and processing order
- import_decisions: Decision and error record types
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- logging_utils: Structured operation logging
"""

from . import (
    database,
    bundle_export_service,
    bundle_validation_service,
    mapping_proposal_service,
    reconciliation_service,
    cocktail_import_service,
    workspace_settings_service,
)

from .exceptions import (
    ServiceError,
    InvalidRequest,
    NotFound,
    CocktailNotFound,
    ReconciliationError,
)

from .bundle_export_service import export_cocktails, export_cocktails_to_json
from .bundle_validation_service import validate_bundle
from .mapping_proposal_service import prepare_mapping
from .reconciliation_service import execute_import
from .cocktail_import_service import handle_export_request, handle_import_request

__all__ = [
    # Modules
    "database",
    "bundle_export_service",
    "bundle_validation_service",
    "mapping_proposal_service",
    "reconciliation_service",
    "cocktail_import_service",
    "workspace_settings_service",
    # Exceptions
    "ServiceError",
    "InvalidRequest",
    "NotFound",
    "CocktailNotFound",
    "ReconciliationError",
    # Operations
    "export_cocktails",
    "export_cocktails_to_json",
    "validate_bundle",
    "prepare_mapping",
    "execute_import",
    "handle_import_request",
    "handle_export_request",
]
