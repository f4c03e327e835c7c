"""
Normalization of provider payloads and local submissions into CanonicalRecipe.
"""

import logging
from typing import Any, Callable, Iterable, List, Type, TypeVar

from pydantic import ValidationError

from app.adapters.payloads import (
    CocktailDrink,
    DummyJSONRecipe,
    MealDBMeal,
    ProviderPayload,
)
from app.models import (
    COCKTAIL_ID_PREFIX,
    DEFAULT_AREA,
    DEFAULT_CATEGORY,
    DEFAULT_DRINK_AREA,
    DRINKS_CATEGORY,
    DUMMY_ID_PREFIX,
    LOCAL_AREA,
    MAX_INGREDIENTS,
    CanonicalRecipe,
    Ingredient,
    LocalRecipe,
    RecipeOrigin,
)

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=ProviderPayload)


def _free_text_ingredients(items: Iterable[str]) -> List[Ingredient]:
    return [Ingredient(name=item, measure="") for item in items][:MAX_INGREDIENTS]


def normalize_meal(meal: MealDBMeal) -> CanonicalRecipe:
    return CanonicalRecipe(
        id=meal.idMeal,
        name=meal.strMeal,
        thumbnail=meal.strMealThumb,
        category=meal.strCategory,
        area=meal.strArea,
        instructions=meal.strInstructions or "",
        ingredients=[
            Ingredient(name=name, measure=measure)
            for name, measure in meal.numbered_pairs(MAX_INGREDIENTS)
        ],
        origin=RecipeOrigin.THEMEALDB,
        is_external=True,
    )


def normalize_dummy_recipe(recipe: DummyJSONRecipe) -> CanonicalRecipe:
    if isinstance(recipe.instructions, list):
        instructions = "\n".join(recipe.instructions)
    else:
        instructions = recipe.instructions or ""
    return CanonicalRecipe(
        id=f"{DUMMY_ID_PREFIX}{recipe.id}",
        name=recipe.name,
        thumbnail=recipe.image,
        category=recipe.mealType[0] if recipe.mealType else DEFAULT_CATEGORY,
        area=recipe.cuisine or DEFAULT_AREA,
        instructions=instructions,
        ingredients=_free_text_ingredients(recipe.ingredients),
        origin=RecipeOrigin.DUMMYJSON,
        is_external=True,
    )


def normalize_drink(drink: CocktailDrink) -> CanonicalRecipe:
    # TheCocktailDB's own category (e.g. "Ordinary Drink") is shown as the area.
    return CanonicalRecipe(
        id=f"{COCKTAIL_ID_PREFIX}{drink.idDrink}",
        name=drink.strDrink,
        thumbnail=drink.strDrinkThumb,
        category=DRINKS_CATEGORY,
        area=drink.strCategory or DEFAULT_DRINK_AREA,
        instructions=drink.strInstructions or "",
        ingredients=[
            Ingredient(name=name, measure=measure)
            for name, measure in drink.numbered_pairs(MAX_INGREDIENTS)
        ],
        origin=RecipeOrigin.THECOCKTAILDB,
        is_external=True,
    )


def local_to_canonical(recipe: LocalRecipe) -> CanonicalRecipe:
    return CanonicalRecipe(
        id=recipe.id,
        name=recipe.title,
        thumbnail=recipe.image,
        category=recipe.category,
        area=LOCAL_AREA,
        instructions=recipe.instructions,
        ingredients=_free_text_ingredients(recipe.ingredients),
        origin=RecipeOrigin.LOCAL,
        is_local=True,
    )


_NORMALIZERS: dict[RecipeOrigin, tuple[Type[ProviderPayload], Callable[[Any], CanonicalRecipe]]] = {
    RecipeOrigin.THEMEALDB: (MealDBMeal, normalize_meal),
    RecipeOrigin.DUMMYJSON: (DummyJSONRecipe, normalize_dummy_recipe),
    RecipeOrigin.THECOCKTAILDB: (CocktailDrink, normalize_drink),
}


def normalize_payload(origin: RecipeOrigin, raw: dict[str, Any]) -> CanonicalRecipe:
    """Validate one provider-native dict and map it to a CanonicalRecipe."""
    payload_cls, normalize = _NORMALIZERS[origin]
    return normalize(payload_cls.model_validate(raw))


def normalize_many(origin: RecipeOrigin, records: Iterable[Any]) -> List[CanonicalRecipe]:
    """
    Normalize a provider response list. Records that are not objects or that
    lack an id are skipped with a warning instead of failing the whole list.
    """
    results: List[CanonicalRecipe] = []
    for raw in records:
        if not isinstance(raw, dict):
            continue
        try:
            results.append(normalize_payload(origin, raw))
        except ValidationError as e:
            logger.warning("Skipping malformed %s record: %s", origin.value, e)
    return results
