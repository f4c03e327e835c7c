"""
TheMealDB API adapter (primary provider).
Returns provider-native meal dicts; the normalizer maps them to CanonicalRecipe.
"""

from typing import Any, List, Optional

from app.adapters.base import JSONProviderAdapter

BASE_URL = "https://www.themealdb.com/api/json/v1/1"


class TheMealDBAdapter(JSONProviderAdapter):
    """Adapter for TheMealDB API with error handling."""

    name = "themealdb"

    def __init__(self, base_url: str = BASE_URL, **kwargs: Any):
        super().__init__(base_url, **kwargs)

    async def search_meals(self, term: str) -> Optional[List[dict[str, Any]]]:
        """
        Search meals by name. An empty term lists every meal TheMealDB
        returns for `s=`. None means the call failed.
        """
        return await self._get_list(
            "search.php", {"s": (term or "").strip()}, "meals", operation="search"
        )

    async def filter_meals(
        self, category: Optional[str] = None, area: Optional[str] = None
    ) -> Optional[List[dict[str, Any]]]:
        """Filter by category or, failing that, by area. Results carry only id, name and thumbnail."""
        if category:
            params = {"c": category}
        elif area:
            params = {"a": area}
        else:
            return []
        return await self._get_list("filter.php", params, "meals", operation="filter")

    async def list_categories(self) -> Optional[List[dict[str, Any]]]:
        return await self._get_list(
            "categories.php", None, "categories", operation="categories"
        )

    async def lookup_meal(self, meal_id: str) -> Optional[List[dict[str, Any]]]:
        """Lookup by id. [] when the id is unknown, None when the call failed."""
        if not meal_id or not str(meal_id).strip():
            return []
        return await self._get_list(
            "lookup.php", {"i": str(meal_id).strip()}, "meals", operation="lookup"
        )
