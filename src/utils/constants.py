"""
Constants for the Cocktail Porter application.

This module defines system-wide constants including:
- Application metadata
- Bundle wire format keys
- Workspace setting names
"""

from typing import Dict, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Cocktail Porter"
APP_VERSION = "1.4.0"
DATABASE_FILENAME = "cocktail_porter.db"

# ============================================================================
# Bundle Format
# ============================================================================

# Every list carried by an export bundle, in the order it is written
BUNDLE_COLLECTION_KEYS: List[str] = [
    "cocktailRecipes",
    "cocktailRecipeImages",
    "cocktailRecipeSteps",
    "cocktailRecipeGarnishes",
    "cocktailRecipeIngredients",
    "glasses",
    "glassImages",
    "garnishes",
    "garnishImages",
    "ingredients",
    "ingredientImages",
    "ingredientVolumes",
    "ice",
    "units",
    "stepActions",
]

ROOT_COLLECTION_KEY = "cocktailRecipes"

# Request phases accepted by the import endpoint
PHASE_VALIDATE = "validate"
PHASE_PREPARE_MAPPING = "prepare-mapping"
PHASE_EXECUTE = "execute"

IMPORT_PHASES: List[str] = [PHASE_VALIDATE, PHASE_PREPARE_MAPPING, PHASE_EXECUTE]

# ============================================================================
# Workspace Settings
# ============================================================================

TRANSLATIONS_SETTING = "translations"

# Label fields accepted on auxiliary entity data -> translation language.
# "lableDE" is the spelling used by existing bundles and the import wizard.
TRANSLATION_LABEL_FIELDS: Dict[str, str] = {
    "lableDE": "de",
}
