"""
Cocktail recipe models.

This module contains:
- CocktailRecipe: Root recipe record
- CocktailRecipeImage: Optional recipe image (one per recipe)
- CocktailRecipeStep: Ordered preparation step referencing a step action
- CocktailRecipeIngredient: Ingredient line within a step
- CocktailRecipeGarnish: Garnish attached to a recipe
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class CocktailRecipe(BaseModel):
    """
    Cocktail recipe.

    Names are not unique within a workspace; the import wizard reports
    same-named recipes as conflicts instead.

    Attributes:
        workspace_id: Owning workspace
        name: Recipe name
        glass_id: Serving glass (optional)
        ice_id: Ice type (optional)
        price: Menu price
        tags: List of tag strings
        description: Description
        is_archived: Soft-delete flag
        history: Origin story
        notes: Free-text notes
    """

    __tablename__ = "cocktail_recipes"

    workspace_id = Column(
        String(36), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(200), nullable=False)
    glass_id = Column(String(36), ForeignKey("glasses.id", ondelete="SET NULL"), nullable=True)
    ice_id = Column(String(36), ForeignKey("ice.id", ondelete="SET NULL"), nullable=True)
    price = Column(Float, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    history = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    glass = relationship("Glass")
    ice = relationship("Ice")
    images = relationship(
        "CocktailRecipeImage", back_populates="cocktail_recipe", cascade="all, delete-orphan"
    )
    steps = relationship(
        "CocktailRecipeStep",
        back_populates="cocktail_recipe",
        cascade="all, delete-orphan",
        order_by="CocktailRecipeStep.step_number",
    )
    garnishes = relationship(
        "CocktailRecipeGarnish",
        back_populates="cocktail_recipe",
        cascade="all, delete-orphan",
        order_by="CocktailRecipeGarnish.garnish_number",
    )

    __table_args__ = (Index("idx_cocktail_recipe_workspace_name", "workspace_id", "name"),)


class CocktailRecipeImage(BaseModel):
    """Image payload for a recipe, passed through unchanged."""

    __tablename__ = "cocktail_recipe_images"

    cocktail_recipe_id = Column(
        String(36),
        ForeignKey("cocktail_recipes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    image = Column(Text, nullable=False)

    cocktail_recipe = relationship("CocktailRecipe", back_populates="images")


class CocktailRecipeStep(BaseModel):
    """
    Preparation step.

    Attributes:
        cocktail_recipe_id: Owning recipe
        step_number: Position within the recipe
        action_id: Step action performed
        optional: Whether the step may be omitted
    """

    __tablename__ = "cocktail_recipe_steps"

    cocktail_recipe_id = Column(
        String(36), ForeignKey("cocktail_recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_number = Column(Integer, nullable=False, default=0)
    action_id = Column(
        String(36), ForeignKey("step_actions.id", ondelete="RESTRICT"), nullable=False
    )
    optional = Column(Boolean, nullable=False, default=False)

    cocktail_recipe = relationship("CocktailRecipe", back_populates="steps")
    action = relationship("StepAction")
    ingredients = relationship(
        "CocktailRecipeIngredient",
        back_populates="step",
        cascade="all, delete-orphan",
        order_by="CocktailRecipeIngredient.ingredient_number",
    )

    __table_args__ = (Index("idx_cocktail_recipe_step_recipe", "cocktail_recipe_id"),)


class CocktailRecipeIngredient(BaseModel):
    """
    Ingredient line within a step.

    Ingredient and unit are optional so a line survives even when its
    references could not be resolved.

    Attributes:
        cocktail_recipe_step_id: Owning step
        ingredient_id: Ingredient used (optional)
        unit_id: Unit of the amount (optional)
        ingredient_number: Position within the step
        optional: Whether the ingredient may be omitted
        amount: Quantity in the given unit
    """

    __tablename__ = "cocktail_recipe_ingredients"

    cocktail_recipe_step_id = Column(
        String(36), ForeignKey("cocktail_recipe_steps.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_id = Column(
        String(36), ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=True
    )
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="RESTRICT"), nullable=True)
    ingredient_number = Column(Integer, nullable=False, default=0)
    optional = Column(Boolean, nullable=False, default=False)
    amount = Column(Float, nullable=True)

    step = relationship("CocktailRecipeStep", back_populates="ingredients")
    ingredient = relationship("Ingredient")
    unit = relationship("Unit")

    __table_args__ = (Index("idx_cocktail_recipe_ingredient_step", "cocktail_recipe_step_id"),)


class CocktailRecipeGarnish(BaseModel):
    """
    Garnish attached to a recipe.

    Attributes:
        cocktail_recipe_id: Owning recipe
        garnish_id: Garnish used
        garnish_number: Position within the recipe
        optional: Whether the garnish may be omitted
        description: Recipe-specific preparation note
    """

    __tablename__ = "cocktail_recipe_garnishes"

    cocktail_recipe_id = Column(
        String(36), ForeignKey("cocktail_recipes.id", ondelete="CASCADE"), nullable=False
    )
    garnish_id = Column(
        String(36), ForeignKey("garnishes.id", ondelete="RESTRICT"), nullable=False
    )
    garnish_number = Column(Integer, nullable=False, default=0)
    optional = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)

    cocktail_recipe = relationship("CocktailRecipe", back_populates="garnishes")
    garnish = relationship("Garnish")
