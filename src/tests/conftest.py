"""Pytest configuration and fixtures for service layer tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

import src.models  # noqa: F401
from src.models.base import Base
from src.models.garnish import Garnish, GarnishImage
from src.models.glass import Glass, GlassImage
from src.models.ice import Ice
from src.models.ingredient import Ingredient, IngredientImage, IngredientVolume
from src.models.recipe import (
    CocktailRecipe,
    CocktailRecipeGarnish,
    CocktailRecipeImage,
    CocktailRecipeIngredient,
    CocktailRecipeStep,
)
from src.models.step_action import StepAction
from src.models.unit import Unit
from src.models.workspace import Workspace


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    # Create in-memory SQLite database for testing
    engine = create_engine("sqlite:///:memory:", echo=False)

    # Create all tables
    Base.metadata.create_all(engine)

    # Create session factory
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import src.services.database as db_module

    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    # Provide database to test
    yield Session

    # Cleanup
    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    # Restore original session factory
    db_module.get_session_factory = original_get_session


def _create_workspace(test_db, name):
    session = test_db()
    workspace = Workspace(name=name)
    session.add(workspace)
    session.commit()
    return workspace.id


@pytest.fixture(scope="function")
def source_workspace(test_db):
    """Provide the id of the workspace recipes are exported from."""
    return _create_workspace(test_db, "Bar Source")


@pytest.fixture(scope="function")
def target_workspace(test_db):
    """Provide the id of an empty workspace recipes are imported into."""
    return _create_workspace(test_db, "Bar Target")


@pytest.fixture(scope="function")
def source_catalog(test_db, source_workspace):
    """Provide a populated source workspace with two cocktails.

    Creates:
    - Units CL and DASH, ice Crushed, actions Muddle (prepare) and Shake (mix)
    - Glass Highball (with image), garnish Mint Sprig (with image)
    - Ingredients White Rum (image, volume in CL) and Lime Juice
    - Mojito: 2 steps, 3 ingredient lines, garnish, image
    - Daiquiri: 1 step, 2 ingredient lines, no glass
    """
    session = test_db()
    ws = source_workspace

    cl = Unit(workspace_id=ws, name="CL")
    dash = Unit(workspace_id=ws, name="DASH")
    crushed = Ice(workspace_id=ws, name="Crushed")
    muddle = StepAction(workspace_id=ws, name="Muddle", action_group="prepare")
    shake = StepAction(workspace_id=ws, name="Shake", action_group="mix")
    highball = Glass(workspace_id=ws, name="Highball", deposit=1.5, volume=30.0, notes="Tall")
    mint = Garnish(workspace_id=ws, name="Mint Sprig", description="Fresh", price=0.2)
    rum = Ingredient(
        workspace_id=ws, name="White Rum", short_name="Rum", price=22.0, tags=["spirit"]
    )
    lime = Ingredient(workspace_id=ws, name="Lime Juice", tags=[])
    session.add_all([cl, dash, crushed, muddle, shake, highball, mint, rum, lime])
    session.flush()

    session.add_all(
        [
            GlassImage(glass_id=highball.id, image="data:image/png;base64,R0xBU1M="),
            GarnishImage(garnish_id=mint.id, image="data:image/png;base64,TUlOVA=="),
            IngredientImage(ingredient_id=rum.id, image="data:image/png;base64,UlVN"),
            IngredientVolume(workspace_id=ws, ingredient_id=rum.id, unit_id=cl.id, volume=70.0),
        ]
    )

    mojito = CocktailRecipe(
        workspace_id=ws,
        name="Mojito",
        glass_id=highball.id,
        ice_id=crushed.id,
        price=9.5,
        tags=["classic", "long"],
        description="Minty highball",
        history="Havana",
    )
    daiquiri = CocktailRecipe(workspace_id=ws, name="Daiquiri", price=8.0, tags=["sour"])
    session.add_all([mojito, daiquiri])
    session.flush()

    session.add(
        CocktailRecipeImage(cocktail_recipe_id=mojito.id, image="data:image/png;base64,TU9K")
    )
    step1 = CocktailRecipeStep(cocktail_recipe_id=mojito.id, step_number=0, action_id=muddle.id)
    step2 = CocktailRecipeStep(cocktail_recipe_id=mojito.id, step_number=1, action_id=shake.id)
    step3 = CocktailRecipeStep(cocktail_recipe_id=daiquiri.id, step_number=0, action_id=shake.id)
    session.add_all([step1, step2, step3])
    session.flush()

    session.add_all(
        [
            CocktailRecipeIngredient(
                cocktail_recipe_step_id=step1.id, ingredient_id=lime.id, unit_id=cl.id,
                ingredient_number=0, amount=3.0,
            ),
            CocktailRecipeIngredient(
                cocktail_recipe_step_id=step2.id, ingredient_id=rum.id, unit_id=cl.id,
                ingredient_number=0, amount=5.0,
            ),
            CocktailRecipeIngredient(
                cocktail_recipe_step_id=step2.id, ingredient_id=lime.id, unit_id=dash.id,
                ingredient_number=1, amount=1.0, optional=True,
            ),
            CocktailRecipeIngredient(
                cocktail_recipe_step_id=step3.id, ingredient_id=rum.id, unit_id=cl.id,
                ingredient_number=0, amount=6.0,
            ),
            CocktailRecipeIngredient(
                cocktail_recipe_step_id=step3.id, ingredient_id=lime.id, unit_id=cl.id,
                ingredient_number=1, amount=2.5,
            ),
            CocktailRecipeGarnish(
                cocktail_recipe_id=mojito.id, garnish_id=mint.id, garnish_number=0,
                description="Slap before use",
            ),
        ]
    )
    session.commit()

    class CatalogData:
        def __init__(self):
            self.workspace_id = ws
            self.units = {"CL": cl.id, "DASH": dash.id}
            self.ice_id = crushed.id
            self.actions = {"Muddle": muddle.id, "Shake": shake.id}
            self.glass_id = highball.id
            self.garnish_id = mint.id
            self.ingredients = {"White Rum": rum.id, "Lime Juice": lime.id}
            self.mojito_id = mojito.id
            self.daiquiri_id = daiquiri.id

    return CatalogData()


@pytest.fixture(scope="function")
def mojito_bundle():
    """Provide a hand-written bundle: one unit, glass, step action and recipe."""
    return {
        "exportVersion": "1.4.0",
        "exportDate": "2025-03-01T18:04:05.123Z",
        "exportedFrom": {"workspaceId": "ws-elsewhere", "workspaceName": "Elsewhere"},
        "cocktailRecipes": [
            {"id": "r1", "name": "Mojito", "glassId": "g1", "iceId": None, "tags": ["classic"]}
        ],
        "cocktailRecipeImages": [],
        "cocktailRecipeSteps": [
            {"id": "s1", "cocktailRecipeId": "r1", "stepNumber": 0, "actionId": "a1"}
        ],
        "cocktailRecipeGarnishes": [],
        "cocktailRecipeIngredients": [
            {
                "id": "l1",
                "cocktailRecipeStepId": "s1",
                "ingredientId": None,
                "ingredientNumber": 0,
                "amount": 4.0,
                "unitId": "u1",
            }
        ],
        "glasses": [{"id": "g1", "name": "Highball"}],
        "glassImages": [],
        "garnishes": [],
        "garnishImages": [],
        "ingredients": [],
        "ingredientImages": [],
        "ingredientVolumes": [],
        "ice": [],
        "units": [{"id": "u1", "name": "CL"}],
        "stepActions": [{"id": "a1", "name": "STIR", "actionGroup": "MIX"}],
    }


@pytest.fixture(scope="function")
def create_new_decisions():
    """Provide decisions creating every auxiliary entity of mojito_bundle and importing r1."""
    return {
        "units": [{"exportId": "u1", "decision": "create-new"}],
        "ice": [],
        "stepActions": [{"exportId": "a1", "decision": "create-new"}],
        "glasses": [{"exportId": "g1", "decision": "create-new"}],
        "garnishes": [],
        "ingredients": [],
        "cocktails": [{"exportId": "r1", "decision": "import"}],
    }
