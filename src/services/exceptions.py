"""Service layer exception classes for Cocktail Porter.

This module defines the custom exceptions used by the service layer to provide
consistent error handling across the import/export engine.

Exception Hierarchy:
    ServiceError (base)
    ├── InvalidRequest          (400 - malformed bundle or decision set)
    ├── NotFound                (404)
    │   └── CocktailNotFound
    └── ReconciliationError     (500 - transaction-level fault during execute)
"""

from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.

    Attributes:
        http_status_code: Status the request surface reports for this error
    """

    http_status_code = 500


class InvalidRequest(ServiceError):
    """Raised when a request or bundle is structurally malformed.

    Args:
        message: Summary of the problem
        errors: Optional list of individual human-readable complaints

    Example:
        >>> raise InvalidRequest("Invalid bundle", ["exportVersion is missing"])
        InvalidRequest: Invalid bundle: exportVersion is missing
    """

    http_status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = list(errors or [])
        if self.errors:
            super().__init__(f"{message}: {'; '.join(self.errors)}")
        else:
            super().__init__(message)


class NotFound(ServiceError):
    """Raised when a requested entity does not exist."""

    http_status_code = 404


class CocktailNotFound(NotFound):
    """Raised when a cocktail recipe cannot be found in a workspace.

    Args:
        cocktail_id: The cocktail ID that was not found

    Example:
        >>> raise CocktailNotFound("3f2b...")
        CocktailNotFound: Cocktail with ID 3f2b... not found
    """

    def __init__(self, cocktail_id: str):
        self.cocktail_id = cocktail_id
        super().__init__(f"Cocktail with ID {cocktail_id} not found")


class ReconciliationError(ServiceError):
    """Raised when the import transaction itself fails.

    Nothing from the transaction is committed. Item-level errors collected
    before the fault are attached for diagnostics.

    Args:
        message: Description of the transaction fault
        errors: Already-collected per-item error records (as dicts)
        original_error: Underlying exception
    """

    http_status_code = 500

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.original_error = original_error
        super().__init__(f"Import transaction failed: {message}")
