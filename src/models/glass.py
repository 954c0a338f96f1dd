"""
Glass models.

This module contains:
- Glass: Serving glass catalog entry
- GlassImage: Optional image for a glass (one per glass)
"""

from sqlalchemy import Column, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Glass(BaseModel):
    """
    Serving glass.

    Attributes:
        workspace_id: Owning workspace
        name: Glass name, unique per workspace
        deposit: Deposit charged for the glass
        volume: Capacity
        notes: Free-text notes
    """

    __tablename__ = "glasses"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    deposit = Column(Float, nullable=True)
    volume = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    images = relationship("GlassImage", back_populates="glass", cascade="all, delete-orphan")

    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uq_glass_workspace_name"),)


class GlassImage(BaseModel):
    """Image payload for a glass, passed through unchanged."""

    __tablename__ = "glass_images"

    glass_id = Column(
        String(36), ForeignKey("glasses.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    image = Column(Text, nullable=False)

    glass = relationship("Glass", back_populates="images")
