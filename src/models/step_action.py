"""
Recipe step action model.

A step action names what happens in a recipe step ("STIR", "SHAKE") and
belongs to an action group ("MIX", "GARNISH"). The same action name may exist
in several groups, so the identifying key is (name, action_group).
"""

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from .base import BaseModel


class StepAction(BaseModel):
    """
    Workspace cocktail recipe step action.

    Attributes:
        workspace_id: Owning workspace
        name: Action identifier
        action_group: Group the action belongs to
    """

    __tablename__ = "step_actions"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    action_group = Column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "name", "action_group", name="uq_step_action_workspace_name_group"
        ),
    )

    def __repr__(self) -> str:
        return f"StepAction(name='{self.name}', action_group='{self.action_group}')"
