import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.dependencies import (
    get_current_user,
    get_local_recipe_service,
    get_recipe_aggregator,
)
from app.errors import (
    NotLocalRecipeError,
    NotRecipeAuthorError,
    RecipeNotFoundError,
    SubmissionValidationError,
)
from app.models import CurrentUser, RecipeSubmission
from app.services.aggregator import RecipeAggregator
from app.services.metrics import (
    aggregate_metrics,
    finish_request_metrics,
    start_request_metrics,
    timed_local,
)
from app.services.recipes import LocalRecipeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/recipes")
async def get_merged_recipes(
    s: Optional[str] = None,
    c: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    aggregator: RecipeAggregator = Depends(get_recipe_aggregator),
):
    """Local recipes first, then TheMealDB, DummyJSON and TheCocktailDB results."""
    start_request_metrics()
    try:
        return await aggregator.get_merged_recipes(search_term=s, category=c)
    finally:
        finish_request_metrics()


@router.post("/recipes", status_code=201)
async def create_recipe(
    submission: RecipeSubmission,
    user: CurrentUser = Depends(get_current_user),
    service: LocalRecipeService = Depends(get_local_recipe_service),
):
    """Submit a recipe authored by the signed-in user."""
    try:
        recipe = await service.create(submission, author=user.username)
    except SubmissionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return recipe.to_document()


@router.get("/recipes/{recipe_id}")
async def get_local_recipe(
    recipe_id: str,
    service: LocalRecipeService = Depends(get_local_recipe_service),
):
    """Get a user-submitted recipe. Provider recipes live under /api/external/recipe."""
    start_request_metrics()
    try:
        with timed_local():
            recipe = await service.get(recipe_id)
    except NotLocalRecipeError:
        raise HTTPException(
            status_code=400,
            detail="Use /api/external/recipe/{id} for provider recipes",
        )
    except RecipeNotFoundError:
        raise HTTPException(status_code=404, detail="Recipe not found")
    finally:
        finish_request_metrics()
    return recipe.to_document()


@router.delete("/recipes/{recipe_id}")
async def delete_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: LocalRecipeService = Depends(get_local_recipe_service),
):
    """Delete a recipe. Only its author may do this."""
    try:
        await service.delete(recipe_id, username=user.username)
    except RecipeNotFoundError:
        raise HTTPException(status_code=404, detail="Not found")
    except NotRecipeAuthorError:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return {"message": "Deleted"}


@router.get("/metrics")
def get_metrics():
    """Return aggregate performance metrics (local store vs upstream times, cache hit rate)."""
    return aggregate_metrics.to_dict()
