"""
Create, read and delete user-submitted recipes.

Every successful write drops all cached merged listings by prefix: the set
of (term, category) combinations that were cached is not known here.
"""

import logging

from app.core.abstractions import CacheBackend, LocalRecipeRepository
from app.errors import (
    NotLocalRecipeError,
    NotRecipeAuthorError,
    RecipeNotFoundError,
    SubmissionValidationError,
)
from app.models import LocalRecipe, RecipeOrigin, RecipeSubmission, origin_for_id
from app.services.cache import MERGED_KEY_PREFIX
from app.services.prometheus_metrics import record_cache_invalidation
from app.validation import clean_ingredients, find_missing_fields

logger = logging.getLogger(__name__)


class LocalRecipeService:
    def __init__(
        self,
        store: LocalRecipeRepository,
        cache: CacheBackend,
        default_image: str,
    ) -> None:
        self.store = store
        self.cache = cache
        self.default_image = default_image

    def _invalidate_merged(self) -> None:
        removed = self.cache.delete_prefix(MERGED_KEY_PREFIX)
        record_cache_invalidation(MERGED_KEY_PREFIX, removed)
        logger.debug("Invalidated %d merged cache entries", removed)

    async def create(self, submission: RecipeSubmission, author: str) -> LocalRecipe:
        missing = find_missing_fields(submission)
        if missing:
            raise SubmissionValidationError(missing)

        recipe = LocalRecipe(
            title=submission.title.strip(),
            category=submission.category,
            ingredients=clean_ingredients(submission.ingredients),
            instructions=submission.instructions,
            cooking_time=submission.cooking_time,
            image=submission.image or self.default_image,
            author=author,
        )
        await self.store.add_recipe(recipe)
        self._invalidate_merged()
        logger.info("Recipe %s created by %s", recipe.id, author)
        return recipe

    async def get(self, recipe_id: str) -> LocalRecipe:
        origin, _ = origin_for_id(recipe_id)
        if origin is not RecipeOrigin.LOCAL:
            raise NotLocalRecipeError(recipe_id)
        recipe = await self.store.get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    async def delete(self, recipe_id: str, username: str) -> None:
        """Only the author may delete. Raises before touching the store otherwise."""
        recipe = await self.store.get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        if recipe.author != username:
            raise NotRecipeAuthorError(recipe_id, username)
        if not await self.store.remove_recipe(recipe_id):
            raise RecipeNotFoundError(recipe_id)
        self._invalidate_merged()
        logger.info("Recipe %s deleted by %s", recipe_id, username)
