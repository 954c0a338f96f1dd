"""
Ingredient models.

This module contains:
- Ingredient: Bar ingredient catalog entry
- IngredientImage: Optional image for an ingredient (one per ingredient)
- IngredientVolume: Volume of one ingredient unit expressed in another unit
"""

from sqlalchemy import JSON, Column, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Ingredient(BaseModel):
    """
    Bar ingredient (spirit, syrup, juice...).

    Attributes:
        workspace_id: Owning workspace
        name: Ingredient name, unique per workspace
        short_name: Abbreviated name for compact views
        description: Description
        notes: Free-text notes
        price: Bottle price
        link: Supplier/product link
        tags: List of tag strings
    """

    __tablename__ = "ingredients"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    short_name = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    link = Column(String(1000), nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    images = relationship(
        "IngredientImage", back_populates="ingredient", cascade="all, delete-orphan"
    )
    volumes = relationship(
        "IngredientVolume", back_populates="ingredient", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("workspace_id", "name", name="uq_ingredient_workspace_name"),
    )


class IngredientImage(BaseModel):
    """Image payload for an ingredient, passed through unchanged."""

    __tablename__ = "ingredient_images"

    ingredient_id = Column(
        String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    image = Column(Text, nullable=False)

    ingredient = relationship("Ingredient", back_populates="images")


class IngredientVolume(BaseModel):
    """
    Volume conversion for an ingredient.

    Attributes:
        workspace_id: Owning workspace
        ingredient_id: Ingredient being converted
        unit_id: Unit the volume is expressed in
        volume: Amount of that unit per ingredient
    """

    __tablename__ = "ingredient_volumes"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_id = Column(
        String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="RESTRICT"), nullable=False)
    volume = Column(Float, nullable=False)

    ingredient = relationship("Ingredient", back_populates="volumes")
    unit = relationship("Unit")

    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "ingredient_id", "unit_id", name="uq_ingredient_volume_unit"
        ),
    )
