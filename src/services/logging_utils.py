"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across export, mapping and import.

Usage:
    from src.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="execute_import",
        outcome="success",
        workspace_id="a1b2...",
        cocktails_imported=3,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger with the 'cocktail_porter.services' prefix.

    Example:
        >>> logger = get_service_logger("src.services.reconciliation_service")
        >>> logger.name
        'cocktail_porter.services.reconciliation_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"cocktail_porter.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "export_cocktails", "create_auxiliary")
        outcome: Outcome description (e.g., "success", "uniqueness_conflict", "error")
        level: Log level (default: INFO)
        **context: Additional context fields (workspace ids, entity names, error details)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
