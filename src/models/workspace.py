"""
Workspace models.

A workspace is the tenant boundary: every catalog entity and recipe belongs
to exactly one workspace. Workspace settings hold per-workspace JSON values
such as the translations map.
"""

import json
from typing import Any, Dict

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Workspace(BaseModel):
    """
    Tenant that owns catalog data and recipes.

    Attributes:
        name: Display name (written into bundles as exportedFrom.workspaceName)
    """

    __tablename__ = "workspaces"

    name = Column(String(200), nullable=False)

    settings = relationship(
        "WorkspaceSetting",
        back_populates="workspace",
        cascade="all, delete-orphan",
    )


class WorkspaceSetting(BaseModel):
    """
    Keyed per-workspace setting with a JSON text value.

    Attributes:
        workspace_id: Owning workspace
        setting: Setting key (e.g. "translations")
        value: JSON-encoded value
    """

    __tablename__ = "workspace_settings"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    setting = Column(String(100), nullable=False)
    value = Column(Text, nullable=False, default="{}")

    workspace = relationship("Workspace", back_populates="settings")

    __table_args__ = (
        UniqueConstraint("workspace_id", "setting", name="uq_workspace_setting"),
    )

    def get_json(self) -> Dict[str, Any]:
        """Decode the stored value, treating empty values as an empty object."""
        if not self.value:
            return {}
        return json.loads(self.value)
