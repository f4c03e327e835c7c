"""
Provider-native payload shapes.

Each provider gets its own model so the normalizer maps a known variant
instead of an ad hoc dict. Unknown keys are kept (extra="allow") because
TheMealDB and TheCocktailDB spread ingredients over numbered keys.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

UNTITLED = "Untitled"


def _clean_text(value: Any) -> Optional[str]:
    """Blank or non-scalar values degrade to None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


class ProviderPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    def numbered_pairs(self, limit: int) -> List[tuple[str, str]]:
        """Collect (strIngredientN, strMeasureN) pairs, skipping blank ingredients."""
        extra = self.model_extra or {}
        pairs: List[tuple[str, str]] = []
        for i in range(1, limit + 1):
            name = _clean_text(extra.get(f"strIngredient{i}"))
            if not name:
                continue
            measure = _clean_text(extra.get(f"strMeasure{i}")) or ""
            pairs.append((name, measure))
        return pairs


class MealDBMeal(ProviderPayload):
    idMeal: str
    strMeal: str = UNTITLED
    strMealThumb: Optional[str] = None
    strCategory: Optional[str] = None
    strArea: Optional[str] = None
    strInstructions: Optional[str] = None
    strTags: Optional[str] = None

    @field_validator("idMeal", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Optional[str]:
        # Blank ids fail validation so the record is skipped
        return _clean_text(value)

    @field_validator("strMeal", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _clean_text(value) or UNTITLED

    @field_validator(
        "strMealThumb", "strCategory", "strArea", "strInstructions", "strTags",
        mode="before",
    )
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)


class CocktailDrink(ProviderPayload):
    idDrink: str
    strDrink: str = UNTITLED
    strDrinkThumb: Optional[str] = None
    strCategory: Optional[str] = None
    strInstructions: Optional[str] = None

    @field_validator("idDrink", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Optional[str]:
        # Blank ids fail validation so the record is skipped
        return _clean_text(value)

    @field_validator("strDrink", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _clean_text(value) or UNTITLED

    @field_validator("strDrinkThumb", "strCategory", "strInstructions", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)


class DummyJSONRecipe(ProviderPayload):
    id: str
    name: str = UNTITLED
    image: Optional[str] = None
    cuisine: Optional[str] = None
    mealType: List[str] = []
    instructions: Union[List[str], str, None] = None
    ingredients: List[str] = []

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("name", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _clean_text(value) or UNTITLED

    @field_validator("image", "cuisine", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("mealType", "ingredients", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [text for text in (_clean_text(item) for item in value) if text]

    @field_validator("instructions", mode="before")
    @classmethod
    def _steps(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(step) for step in value if step is not None]
        return _clean_text(value)
