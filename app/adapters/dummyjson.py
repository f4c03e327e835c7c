"""
DummyJSON recipes adapter (alternate provider).
"""

from typing import Any, List, Optional

from app.adapters.base import JSONProviderAdapter

BASE_URL = "https://dummyjson.com"
DEFAULT_LIST_LIMIT = 20


class DummyJSONAdapter(JSONProviderAdapter):
    name = "dummyjson"

    def __init__(self, base_url: str = BASE_URL, **kwargs: Any):
        super().__init__(base_url, **kwargs)

    async def search_recipes(self, query: str) -> Optional[List[dict[str, Any]]]:
        return await self._get_list(
            "recipes/search", {"q": (query or "").strip()}, "recipes", operation="search"
        )

    async def list_recipes(
        self, limit: int = DEFAULT_LIST_LIMIT
    ) -> Optional[List[dict[str, Any]]]:
        return await self._get_list(
            "recipes", {"limit": limit}, "recipes", operation="list"
        )

    async def get_recipe(self, recipe_id: str) -> Optional[List[dict[str, Any]]]:
        """
        DummyJSON answers the bare object (or 404) for /recipes/{id}. Wrapped
        into a list so lookups share the "None failed, [] not found" contract.
        """
        recipe_id = str(recipe_id or "").strip()
        if not recipe_id:
            return []
        data = await self._get_json(
            f"recipes/{recipe_id}", operation="lookup", allow_not_found=True
        )
        if data is None:
            return None
        return [data] if data else []
