"""
Bundle Validation Service - Structural checks on an uploaded bundle.

Only shape is checked: metadata fields, list types and the identity of the
root records. Whether references resolve inside the bundle is left to
execute, where an incomplete closure shows up as unmapped references.

Usage:
    from src.services.bundle_validation_service import validate_bundle

    result = validate_bundle(payload)
    if not result.valid:
        for error in result.errors:
            print(error)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import BUNDLE_COLLECTION_KEYS, ROOT_COLLECTION_KEY
from src.utils.datetime_utils import parse_iso_timestamp

logger = get_service_logger(__name__)


@dataclass
class BundleValidationResult:
    """
    Result of validating a bundle.

    Attributes:
        valid: True when no structural complaint was found
        errors: Human-readable complaints
        cocktails: {id, name} of every root record (only when valid)
    """

    valid: bool
    errors: List[str] = field(default_factory=list)
    cocktails: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def cocktail_count(self) -> int:
        return len(self.cocktails)

    def to_dict(self) -> Dict[str, Any]:
        if not self.valid:
            return {"valid": False, "errors": list(self.errors)}
        return {
            "valid": True,
            "cocktailCount": self.cocktail_count,
            "cocktails": [dict(c) for c in self.cocktails],
        }


def validate_bundle(data: Any) -> BundleValidationResult:
    """
    Check the structure of a bundle.

    Args:
        data: Decoded JSON payload

    Returns:
        BundleValidationResult; never raises for malformed input
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        errors.append("Export data must be a JSON object")
        return _finish(BundleValidationResult(valid=False, errors=errors))

    export_version = data.get("exportVersion")
    if not isinstance(export_version, str) or not export_version.strip():
        errors.append("exportVersion is missing or not a string")

    export_date = data.get("exportDate")
    if not isinstance(export_date, str):
        errors.append("exportDate is missing or not a string")
    else:
        try:
            parse_iso_timestamp(export_date)
        except ValueError:
            errors.append(f"exportDate is not a valid ISO-8601 timestamp: {export_date}")

    for key in BUNDLE_COLLECTION_KEYS:
        if key == ROOT_COLLECTION_KEY:
            continue
        records = data.get(key)
        if records is None:
            continue
        if not isinstance(records, list):
            errors.append(f"{key} must be an array")
            continue
        errors.extend(
            f"{key}[{idx}] must be an object"
            for idx, record in enumerate(records)
            if not isinstance(record, dict)
        )

    cocktails: List[Dict[str, Any]] = []
    roots = data.get(ROOT_COLLECTION_KEY)
    if roots is None:
        errors.append(f"{ROOT_COLLECTION_KEY} is missing")
    elif not isinstance(roots, list):
        errors.append(f"{ROOT_COLLECTION_KEY} must be an array")
    elif len(roots) == 0:
        errors.append(f"{ROOT_COLLECTION_KEY} contains no cocktails")
    else:
        for idx, record in enumerate(roots):
            if not isinstance(record, dict):
                errors.append(f"{ROOT_COLLECTION_KEY}[{idx}] must be an object")
                continue
            record_errors = [
                f"{ROOT_COLLECTION_KEY}[{idx}].{key} is missing or not a string"
                for key in ("id", "name")
                if not isinstance(record.get(key), str)
            ]
            if record_errors:
                errors.extend(record_errors)
                continue
            cocktails.append({"id": record["id"], "name": record["name"]})

    if errors:
        return _finish(BundleValidationResult(valid=False, errors=errors))
    return _finish(BundleValidationResult(valid=True, cocktails=cocktails))


def _finish(result: BundleValidationResult) -> BundleValidationResult:
    log_operation(
        logger,
        "validate_bundle",
        "valid" if result.valid else "invalid",
        complaints=len(result.errors),
        cocktails=result.cocktail_count,
    )
    return result
