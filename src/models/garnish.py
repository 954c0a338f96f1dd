"""
Garnish models.

This module contains:
- Garnish: Garnish catalog entry
- GarnishImage: Optional image for a garnish (one per garnish)
"""

from sqlalchemy import Column, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Garnish(BaseModel):
    """
    Garnish type.

    Attributes:
        workspace_id: Owning workspace
        name: Garnish name, unique per workspace
        description: Preparation description
        notes: Free-text notes
        price: Cost per garnish
    """

    __tablename__ = "garnishes"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    price = Column(Float, nullable=True)

    images = relationship("GarnishImage", back_populates="garnish", cascade="all, delete-orphan")

    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uq_garnish_workspace_name"),)


class GarnishImage(BaseModel):
    """Image payload for a garnish, passed through unchanged."""

    __tablename__ = "garnish_images"

    garnish_id = Column(
        String(36), ForeignKey("garnishes.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    image = Column(Text, nullable=False)

    garnish = relationship("Garnish", back_populates="images")
