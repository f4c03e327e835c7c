"""
Merged recipe listing: local submissions first, then every upstream provider
the request needs, fetched concurrently, normalized, de-duplicated and
filtered. Results are cached briefly under a "merged_" key so that writes to
the local store can drop them all by prefix.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from app.core.abstractions import (
    AlternateRecipeProvider,
    CacheBackend,
    CocktailProvider,
    LocalRecipeRepository,
    MealProvider,
    ProviderRecords,
)
from app.models import DRINKS_CATEGORY, CanonicalRecipe, LocalRecipe, RecipeOrigin
from app.normalizer import local_to_canonical, normalize_many
from app.services.cache import MERGED_KEY_PREFIX, MERGED_TTL_SECONDS
from app.services.metrics import record_cache_lookup, timed_local, timed_upstream
from app.services.prometheus_metrics import record_merged_degraded

logger = logging.getLogger(__name__)

ALL_CATEGORY = "All"
# Requested label -> TheMealDB category actually queried
CATEGORY_SYNONYMS = {"Quick Meals": "Starter"}
COCKTAIL_FILTER = "Ordinary_Drink"


def merged_cache_key(search_term: Optional[str], category: Optional[str]) -> str:
    """Key for one (term, category) listing. None stands for "no filter"."""
    term = (search_term or "").strip().lower() or None
    return f"{MERGED_KEY_PREFIX}{json.dumps([term, category or None])}"


def is_specific_category(category: Optional[str]) -> bool:
    """A real category filter: not absent, not "All", not "Drinks"."""
    return bool(category) and category not in (ALL_CATEGORY, DRINKS_CATEGORY)


def filter_local_recipes(
    recipes: Iterable[LocalRecipe],
    search_term: Optional[str],
    category: Optional[str],
) -> List[LocalRecipe]:
    """Title or any ingredient contains the term; category must match exactly."""
    results = list(recipes)
    if search_term:
        term = search_term.lower()
        results = [
            r
            for r in results
            if term in r.title.lower()
            or any(term in ingredient.lower() for ingredient in r.ingredients)
        ]
    if category and category != ALL_CATEGORY:
        results = [r for r in results if r.category == category]
    return results


def dedupe_by_id(records: Iterable[CanonicalRecipe]) -> List[CanonicalRecipe]:
    """
    Keep one record per id at its first-seen position. A later duplicate
    replaces the kept one only when it has a category and the kept one does
    not, so a relabelled filter result is never clobbered by a bare copy.
    """
    kept: dict[str, CanonicalRecipe] = {}
    for record in records:
        current = kept.get(record.id)
        if current is None or (record.category and not current.category):
            kept[record.id] = record
    return list(kept.values())


def filter_by_category(
    records: Iterable[CanonicalRecipe], category: str
) -> List[CanonicalRecipe]:
    wanted = category.lower()
    return [r for r in records if r.category and r.category.lower() == wanted]


@dataclass(frozen=True)
class PlannedCall:
    """One upstream request in a merged query plan."""

    label: str
    origin: RecipeOrigin
    fetch: Callable[[], Awaitable[ProviderRecords]]
    # Overrides the provider's category on every returned record
    category_label: Optional[str] = None


class RecipeAggregator:
    def __init__(
        self,
        cache: CacheBackend,
        store: LocalRecipeRepository,
        meals: MealProvider,
        alternate: AlternateRecipeProvider,
        cocktails: CocktailProvider,
        merged_ttl: int = MERGED_TTL_SECONDS,
        alternate_list_limit: int = 20,
    ) -> None:
        self.cache = cache
        self.store = store
        self.meals = meals
        self.alternate = alternate
        self.cocktails = cocktails
        self.merged_ttl = merged_ttl
        self.alternate_list_limit = alternate_list_limit

    def build_query_plan(
        self, search_term: Optional[str], category: Optional[str]
    ) -> List[PlannedCall]:
        """Upstream calls to issue, in output order: primary, alternate, cocktail."""
        plan: List[PlannedCall] = []
        list_everything = not category or category == ALL_CATEGORY

        if search_term:
            plan.append(PlannedCall(
                "themealdb.search",
                RecipeOrigin.THEMEALDB,
                lambda: self.meals.search_meals(search_term),
            ))
        elif is_specific_category(category):
            queried = CATEGORY_SYNONYMS.get(category, category)
            plan.append(PlannedCall(
                "themealdb.filter",
                RecipeOrigin.THEMEALDB,
                lambda: self.meals.filter_meals(category=queried),
                category_label=category,
            ))
        elif list_everything:
            plan.append(PlannedCall(
                "themealdb.search",
                RecipeOrigin.THEMEALDB,
                lambda: self.meals.search_meals(""),
            ))

        if search_term:
            plan.append(PlannedCall(
                "dummyjson.search",
                RecipeOrigin.DUMMYJSON,
                lambda: self.alternate.search_recipes(search_term),
            ))
        elif list_everything:
            plan.append(PlannedCall(
                "dummyjson.list",
                RecipeOrigin.DUMMYJSON,
                lambda: self.alternate.list_recipes(self.alternate_list_limit),
            ))

        if search_term:
            plan.append(PlannedCall(
                "thecocktaildb.search",
                RecipeOrigin.THECOCKTAILDB,
                lambda: self.cocktails.search_drinks(search_term),
            ))
        elif category == DRINKS_CATEGORY:
            plan.append(PlannedCall(
                "thecocktaildb.filter",
                RecipeOrigin.THECOCKTAILDB,
                lambda: self.cocktails.filter_drinks(COCKTAIL_FILTER),
            ))

        return plan

    async def _fetch_upstream(
        self, search_term: Optional[str], category: Optional[str]
    ) -> Optional[List[CanonicalRecipe]]:
        """
        Run the plan concurrently. A failed call contributes nothing; returns
        None only when every planned call failed.
        """
        plan = self.build_query_plan(search_term, category)
        with timed_upstream():
            results = await asyncio.gather(
                *(call.fetch() for call in plan), return_exceptions=True
            )

        records: List[CanonicalRecipe] = []
        failed = 0
        for call, result in zip(plan, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning("Upstream call %s raised: %s", call.label, result)
                result = None
            if result is None:
                failed += 1
                continue
            normalized = normalize_many(call.origin, result)
            if call.category_label:
                normalized = [
                    r.model_copy(update={"category": call.category_label})
                    for r in normalized
                ]
            records.extend(normalized)

        if plan and failed == len(plan):
            return None

        upstream = dedupe_by_id(records)
        if is_specific_category(category):
            upstream = filter_by_category(upstream, category)
        return upstream

    async def get_merged_recipes(
        self, search_term: Optional[str] = None, category: Optional[str] = None
    ) -> List[dict[str, Any]]:
        """
        Local-first merged listing as JSON-ready dicts.

        Served from cache when possible. If the upstream side fails as a
        whole (every call failed, or anything raised past the per-call
        boundary) the filtered local recipes are returned and nothing is
        cached.
        """
        search_term = (search_term or "").strip() or None
        category = (category or "").strip() or None
        key = merged_cache_key(search_term, category)

        cached = self.cache.get(key)
        record_cache_lookup("merged", cached is not None)
        if cached is not None:
            return cached

        with timed_local():
            stored = await self.store.list_recipes()
        local = [
            local_to_canonical(r).to_response()
            for r in filter_local_recipes(stored, search_term, category)
        ]

        try:
            upstream = await self._fetch_upstream(search_term, category)
            if upstream is None:
                logger.warning(
                    "Every upstream provider failed for %s; serving local recipes only",
                    key,
                )
                record_merged_degraded()
                return local
            merged = local + [r.to_response() for r in upstream]
            self.cache.set(key, merged, ttl=self.merged_ttl)
        except Exception:
            logger.exception("Merged aggregation failed for %s; serving local recipes only", key)
            record_merged_degraded()
            return local
        return merged
