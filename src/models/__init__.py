"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .workspace import Workspace, WorkspaceSetting
from .unit import Unit
from .ice import Ice
from .step_action import StepAction
from .glass import Glass, GlassImage
from .garnish import Garnish, GarnishImage
from .ingredient import Ingredient, IngredientImage, IngredientVolume
from .recipe import (
    CocktailRecipe,
    CocktailRecipeImage,
    CocktailRecipeStep,
    CocktailRecipeIngredient,
    CocktailRecipeGarnish,
)

__all__ = [
    "Base",
    "BaseModel",
    "Workspace",
    "WorkspaceSetting",
    "Unit",
    "Ice",
    "StepAction",
    "Glass",
    "GlassImage",
    "Garnish",
    "GarnishImage",
    "Ingredient",
    "IngredientImage",
    "IngredientVolume",
    "CocktailRecipe",
    "CocktailRecipeImage",
    "CocktailRecipeStep",
    "CocktailRecipeIngredient",
    "CocktailRecipeGarnish",
]
