"""
Cached passthroughs to single providers.

A provider failure answers 500 and is not cached; successful answers are
cached with the backend's default TTL.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.abstractions import (
    AlternateRecipeProvider,
    CacheBackend,
    CocktailProvider,
    MealProvider,
)
from app.core.dependencies import (
    get_alternate_provider,
    get_cache_backend,
    get_cocktail_provider,
    get_current_user,
    get_meal_provider,
)
from app.models import RecipeOrigin, origin_for_id
from app.normalizer import normalize_many
from app.services.metrics import (
    finish_request_metrics,
    record_cache_lookup,
    start_request_metrics,
    timed_upstream,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/external", dependencies=[Depends(get_current_user)]
)


async def _cached_passthrough(
    cache: CacheBackend,
    key: str,
    operation: str,
    fetch: Callable[[], Awaitable[Optional[Any]]],
    failure_detail: str,
) -> Any:
    start_request_metrics()
    try:
        cached = cache.get(key)
        record_cache_lookup(operation, cached is not None)
        if cached is not None:
            return cached
        with timed_upstream():
            data = await fetch()
        if data is None:
            raise HTTPException(status_code=500, detail=failure_detail)
        cache.set(key, data)
        return data
    finally:
        finish_request_metrics()


@router.get("/categories")
async def get_categories(
    cache: CacheBackend = Depends(get_cache_backend),
    meals: MealProvider = Depends(get_meal_provider),
):
    """TheMealDB category list, as the provider returns it."""
    return await _cached_passthrough(
        cache, "categories", "categories", meals.list_categories, "Failed"
    )


@router.get("/search")
async def search_external(
    s: Optional[str] = None,
    cache: CacheBackend = Depends(get_cache_backend),
    meals: MealProvider = Depends(get_meal_provider),
):
    async def fetch():
        records = await meals.search_meals(s or "")
        if records is None:
            return None
        return [r.to_response() for r in normalize_many(RecipeOrigin.THEMEALDB, records)]

    return await _cached_passthrough(
        cache, f"search_{s or ''}", "search", fetch, "Failed to search recipes"
    )


@router.get("/recipe/{recipe_id}")
async def get_external_recipe(
    recipe_id: str,
    cache: CacheBackend = Depends(get_cache_backend),
    meals: MealProvider = Depends(get_meal_provider),
    alternate: AlternateRecipeProvider = Depends(get_alternate_provider),
    cocktails: CocktailProvider = Depends(get_cocktail_provider),
):
    """Lookup one provider recipe; the id prefix selects the provider."""
    origin, provider_id = origin_for_id(recipe_id)
    lookups = {
        RecipeOrigin.THEMEALDB: meals.lookup_meal,
        RecipeOrigin.DUMMYJSON: alternate.get_recipe,
        RecipeOrigin.THECOCKTAILDB: cocktails.lookup_drink,
    }
    if origin not in lookups:
        # User recipes are served by /api/recipes/{id}
        raise HTTPException(status_code=404, detail="Not found")

    async def fetch():
        records = await lookups[origin](provider_id)
        if records is None:
            return None
        normalized = normalize_many(origin, records)
        if not normalized:
            raise HTTPException(status_code=404, detail="Not found")
        return normalized[0].to_response()

    return await _cached_passthrough(
        cache, f"recipe_{recipe_id}", "recipe", fetch, "Failed"
    )


@router.get("/filter")
async def filter_external(
    c: Optional[str] = None,
    a: Optional[str] = None,
    cache: CacheBackend = Depends(get_cache_backend),
    meals: MealProvider = Depends(get_meal_provider),
):
    """TheMealDB filter by category (c) or area (a)."""
    if not c and not a:
        raise HTTPException(status_code=400, detail="Provide c or a")

    async def fetch():
        records = await meals.filter_meals(category=c, area=a)
        if records is None:
            return None
        return [r.to_response() for r in normalize_many(RecipeOrigin.THEMEALDB, records)]

    return await _cached_passthrough(
        cache, f"filter_{c or ''}_{a or ''}", "filter", fetch, "Failed to filter recipes"
    )
