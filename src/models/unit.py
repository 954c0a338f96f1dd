"""
Unit reference model.

Units are workspace-scoped identifiers (e.g. "CL", "DASH") referenced by
recipe ingredient lines and ingredient volume conversions. The display
label lives in the workspace translations setting, keyed by unit name.
"""

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from .base import BaseModel


class Unit(BaseModel):
    """
    Workspace measurement unit.

    Attributes:
        workspace_id: Owning workspace
        name: Unit identifier, unique per workspace
    """

    __tablename__ = "units"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)

    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uq_unit_workspace_name"),)
