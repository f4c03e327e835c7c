"""
Test fixtures for the recipe gateway.
Uses FastAPI dependency overrides for testable, isolated components.
"""

import os

# Settings are read at import time; keep Redis off and pin the signing secret.
os.environ["REDIS_URL"] = ""
os.environ.setdefault("JWT_SECRET", "test-secret")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.core.dependencies import (
    get_alternate_provider,
    get_cache_backend,
    get_cocktail_provider,
    get_meal_provider,
    get_recipe_store,
    get_user_store,
)
from app.main import app
from app.models import UserAccount
from app.services.auth import issue_token
from app.services.cache import MemoryCacheBackend
from app.services.metrics import aggregate_metrics
from app.services.storage import LocalRecipeStore, UserStore


@pytest.fixture
def recipe_store(tmp_path):
    """Fresh recipes.json per test."""
    store = LocalRecipeStore(tmp_path / "recipes.json")
    store.ensure()
    return store


@pytest.fixture
def user_store(tmp_path):
    store = UserStore(tmp_path / "users.json")
    store.ensure()
    return store


@pytest.fixture
def cache():
    return MemoryCacheBackend()


@pytest.fixture
def meal_provider():
    """Mock TheMealDB adapter. Every call succeeds with no results by default."""
    mock = MagicMock()
    mock.search_meals = AsyncMock(return_value=[])
    mock.filter_meals = AsyncMock(return_value=[])
    mock.list_categories = AsyncMock(return_value=[])
    mock.lookup_meal = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def alternate_provider():
    """Mock DummyJSON adapter."""
    mock = MagicMock()
    mock.search_recipes = AsyncMock(return_value=[])
    mock.list_recipes = AsyncMock(return_value=[])
    mock.get_recipe = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def cocktail_provider():
    """Mock TheCocktailDB adapter."""
    mock = MagicMock()
    mock.search_drinks = AsyncMock(return_value=[])
    mock.filter_drinks = AsyncMock(return_value=[])
    mock.lookup_drink = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def client(
    recipe_store, user_store, cache, meal_provider, alternate_provider, cocktail_provider
):
    """Test client with dependency overrides for stores, cache and providers."""
    app.dependency_overrides[get_recipe_store] = lambda: recipe_store
    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_cache_backend] = lambda: cache
    app.dependency_overrides[get_meal_provider] = lambda: meal_provider
    app.dependency_overrides[get_alternate_provider] = lambda: alternate_provider
    app.dependency_overrides[get_cocktail_provider] = lambda: cocktail_provider

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a username."""

    def _headers(username: str = "alice") -> dict:
        user = UserAccount(username=username, password="unused")
        token = issue_token(user, settings.JWT_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture(autouse=True)
def reset_aggregate_metrics():
    """Reset aggregate metrics before each test for consistent assertions."""
    aggregate_metrics.local_count = 0
    aggregate_metrics.upstream_count = 0
    aggregate_metrics.local_total_ms = 0.0
    aggregate_metrics.upstream_total_ms = 0.0
    aggregate_metrics.cache_hits = 0
    aggregate_metrics.cache_misses = 0
    yield


@pytest.fixture
def sample_submission():
    """Sample recipe submission body"""
    return {
        "title": "Solar Flare Soup",
        "ingredients": ["2 carrots", "1 chili", "500ml stock"],
        "instructions": "Simmer everything for 20 minutes.",
        "category": "Soup",
        "cookingTime": "30 min",
    }


# Sample provider payloads (shapes taken from the live APIs)

SAMPLE_MEAL = {
    "idMeal": "52772",
    "strMeal": "Teriyaki Chicken Casserole",
    "strCategory": "Chicken",
    "strArea": "Japanese",
    "strInstructions": "Preheat oven to 350° F.\r\nCombine ingredients.",
    "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
    "strTags": "Meat,Casserole",
    "strIngredient1": "soy sauce",
    "strIngredient2": "chicken breasts",
    "strIngredient3": "",
    "strMeasure1": "3/4 cup",
    "strMeasure2": "2",
    "strMeasure3": " ",
}

SAMPLE_DUMMY_RECIPE = {
    "id": 1,
    "name": "Classic Margherita Pizza",
    "ingredients": ["Pizza dough", "Tomato sauce", "Fresh mozzarella"],
    "instructions": ["Preheat the oven.", "Roll out the dough.", "Bake."],
    "cuisine": "Italian",
    "mealType": ["Dinner"],
    "image": "https://cdn.dummyjson.com/recipe-images/1.webp",
}

SAMPLE_DRINK = {
    "idDrink": "11007",
    "strDrink": "Margarita",
    "strCategory": "Ordinary Drink",
    "strDrinkThumb": "https://www.thecocktaildb.com/images/media/drink/5noda61589575158.jpg",
    "strInstructions": "Rub the rim of the glass with the lime slice.",
    "strIngredient1": "Tequila",
    "strIngredient2": "Triple sec",
    "strMeasure1": "1 1/2 oz ",
    "strMeasure2": None,
}
