"""
TheCocktailDB adapter (cocktail provider).
"""

from typing import Any, List, Optional

from app.adapters.base import JSONProviderAdapter

BASE_URL = "https://www.thecocktaildb.com/api/json/v1/1"
DEFAULT_DRINK_FILTER = "Ordinary_Drink"


class TheCocktailDBAdapter(JSONProviderAdapter):
    name = "thecocktaildb"

    def __init__(self, base_url: str = BASE_URL, **kwargs: Any):
        super().__init__(base_url, **kwargs)

    async def search_drinks(self, term: str) -> Optional[List[dict[str, Any]]]:
        return await self._get_list(
            "search.php", {"s": (term or "").strip()}, "drinks", operation="search"
        )

    async def filter_drinks(
        self, category: str = DEFAULT_DRINK_FILTER
    ) -> Optional[List[dict[str, Any]]]:
        return await self._get_list(
            "filter.php", {"c": category}, "drinks", operation="filter"
        )

    async def lookup_drink(self, drink_id: str) -> Optional[List[dict[str, Any]]]:
        if not drink_id or not str(drink_id).strip():
            return []
        return await self._get_list(
            "lookup.php", {"i": str(drink_id).strip()}, "drinks", operation="lookup"
        )
