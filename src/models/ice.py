"""
Ice type reference model.
"""

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from .base import BaseModel


class Ice(BaseModel):
    """
    Workspace ice type (e.g. "CUBES", "CRUSHED").

    Attributes:
        workspace_id: Owning workspace
        name: Ice identifier, unique per workspace
    """

    __tablename__ = "ice"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)

    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uq_ice_workspace_name"),)
