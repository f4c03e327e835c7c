"""
Abstractions for local stores, upstream providers, and caching.
Enables component swapping and testability via dependency injection.
"""

from typing import Any, List, Optional, Protocol

from app.models import LocalRecipe, UserAccount

# Provider list results: None means the call failed, [] means no results.
ProviderRecords = Optional[List[dict[str, Any]]]


class LocalRecipeRepository(Protocol):
    """Abstract interface for user-submitted recipe data access."""

    async def list_recipes(self) -> List[LocalRecipe]:
        """Return all local recipes in insertion order."""
        ...

    async def get_recipe(self, recipe_id: str) -> Optional[LocalRecipe]:
        ...

    async def add_recipe(self, recipe: LocalRecipe) -> LocalRecipe:
        ...

    async def remove_recipe(self, recipe_id: str) -> bool:
        """Remove a recipe. Returns False if it did not exist."""
        ...


class UserRepository(Protocol):
    async def get_user(self, username: str) -> Optional[UserAccount]:
        ...

    async def add_user(self, user: UserAccount) -> UserAccount:
        """Add a user. Raises UserExistsError on a duplicate username."""
        ...


class MealProvider(Protocol):
    """Primary provider (TheMealDB)."""

    async def search_meals(self, term: str) -> ProviderRecords:
        ...

    async def filter_meals(
        self, category: Optional[str] = None, area: Optional[str] = None
    ) -> ProviderRecords:
        ...

    async def list_categories(self) -> ProviderRecords:
        ...

    async def lookup_meal(self, meal_id: str) -> ProviderRecords:
        ...


class AlternateRecipeProvider(Protocol):
    """Alternate provider (DummyJSON)."""

    async def search_recipes(self, query: str) -> ProviderRecords:
        ...

    async def list_recipes(self, limit: int = 20) -> ProviderRecords:
        ...

    async def get_recipe(self, recipe_id: str) -> ProviderRecords:
        ...


class CocktailProvider(Protocol):
    """Cocktail provider (TheCocktailDB)."""

    async def search_drinks(self, term: str) -> ProviderRecords:
        ...

    async def filter_drinks(self, category: str = "Ordinary_Drink") -> ProviderRecords:
        ...

    async def lookup_drink(self, drink_id: str) -> ProviderRecords:
        ...


class CacheBackend(Protocol):
    """Abstract interface for cache operations (Redis or in-memory)."""

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value. Returns None on miss."""
        ...

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a JSON-serializable value. ttl=None uses the backend default; ttl<=0 stores nothing."""
        ...

    def delete_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with prefix. Returns count removed."""
        ...
