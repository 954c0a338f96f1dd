"""
Workspace Settings Service - Per-workspace JSON settings.

The only setting the import engine writes is the translations map:

    {"de": {"CL": "cl", "Shake": "Schütteln"}, ...}

Usage:
    from src.services.workspace_settings_service import merge_translations

    merge_translations(workspace_id, {"de": {"Shake": "Schütteln"}}, session=session)
"""

import json
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from src.models.workspace import WorkspaceSetting
from src.services.database import session_scope
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import TRANSLATIONS_SETTING

logger = get_service_logger(__name__)


def get_setting(
    workspace_id: str, setting: str, session: Optional[Session] = None
) -> Dict[str, Any]:
    """
    Read a JSON setting for a workspace.

    Returns:
        Decoded value, or an empty dict if the setting has never been written
    """
    if session is not None:
        return _get_setting_impl(workspace_id, setting, session)
    with session_scope() as sess:
        return _get_setting_impl(workspace_id, setting, sess)


def _get_setting_impl(workspace_id: str, setting: str, session: Session) -> Dict[str, Any]:
    row = _find_setting(session, workspace_id, setting)
    return row.get_json() if row else {}


def _find_setting(session: Session, workspace_id: str, setting: str) -> Optional[WorkspaceSetting]:
    return (
        session.query(WorkspaceSetting)
        .filter(
            WorkspaceSetting.workspace_id == workspace_id,
            WorkspaceSetting.setting == setting,
        )
        .first()
    )


def get_translations(workspace_id: str, session: Optional[Session] = None) -> Dict[str, Any]:
    """Translations map of a workspace (language -> {name: label})."""
    return get_setting(workspace_id, TRANSLATIONS_SETTING, session=session)


def merge_translations(
    workspace_id: str,
    pending: Dict[str, Dict[str, str]],
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """
    Merge labels into the workspace translations setting with a single upsert.

    Existing labels for other names and languages are kept; labels for the
    same language and name are replaced.

    Args:
        workspace_id: Target workspace
        pending: Language -> {name: label}
        session: Optional SQLAlchemy session for transactional composition

    Returns:
        The merged translations map
    """
    if session is not None:
        return _merge_translations_impl(workspace_id, pending, session)
    with session_scope() as sess:
        return _merge_translations_impl(workspace_id, pending, sess)


def _merge_translations_impl(
    workspace_id: str, pending: Dict[str, Dict[str, str]], session: Session
) -> Dict[str, Any]:
    row = _find_setting(session, workspace_id, TRANSLATIONS_SETTING)
    merged = row.get_json() if row else {}

    for language, labels in pending.items():
        current = merged.get(language)
        if not isinstance(current, dict):
            current = {}
        current.update(labels)
        merged[language] = current

    if row is None:
        row = WorkspaceSetting(workspace_id=workspace_id, setting=TRANSLATIONS_SETTING)
        session.add(row)
    row.value = json.dumps(merged, ensure_ascii=False)
    session.flush()

    log_operation(
        logger,
        "merge_translations",
        "success",
        workspace_id=workspace_id,
        labels=sum(len(labels) for labels in pending.values()),
    )
    return merged
