from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
import uuid

from pydantic import BaseModel, ConfigDict, Field

# Constants
MAX_INGREDIENTS = 20
LOCAL_ID_PREFIX = "local_"
DUMMY_ID_PREFIX = "dummy_"
COCKTAIL_ID_PREFIX = "cocktail_"

DEFAULT_CATEGORY = "Miscellaneous"
DEFAULT_AREA = "International"
DRINKS_CATEGORY = "Drinks"
DEFAULT_DRINK_AREA = "Beverage"
LOCAL_AREA = "User Submitted"


class RecipeOrigin(str, Enum):
    THEMEALDB = "themealdb"
    DUMMYJSON = "dummyjson"
    THECOCKTAILDB = "thecocktaildb"
    LOCAL = "local"


_ID_PREFIXES = (
    (LOCAL_ID_PREFIX, RecipeOrigin.LOCAL),
    (DUMMY_ID_PREFIX, RecipeOrigin.DUMMYJSON),
    (COCKTAIL_ID_PREFIX, RecipeOrigin.THECOCKTAILDB),
)


def origin_for_id(recipe_id: str) -> Tuple[RecipeOrigin, str]:
    """Split a recipe id into its origin and the id the origin knows it by.

    Bare ids belong to TheMealDB.
    """
    for prefix, origin in _ID_PREFIXES:
        if recipe_id.startswith(prefix):
            return origin, recipe_id[len(prefix):]
    return RecipeOrigin.THEMEALDB, recipe_id


class Ingredient(BaseModel):
    name: str
    measure: str = ""


class CanonicalRecipe(BaseModel):
    """Unified recipe shape every source is normalized into."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    thumbnail: Optional[str] = None
    category: Optional[str] = None
    area: Optional[str] = None
    instructions: str = ""
    ingredients: List[Ingredient] = Field(default_factory=list, max_length=MAX_INGREDIENTS)
    origin: RecipeOrigin
    is_external: bool = Field(default=False, alias="isExternal")
    is_local: bool = Field(default=False, alias="isLocal")

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class LocalRecipe(BaseModel):
    """User-submitted recipe as persisted in the recipes file."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: f"{LOCAL_ID_PREFIX}{uuid.uuid4()}")
    title: str
    category: Optional[str] = None
    ingredients: List[str]
    instructions: str
    cooking_time: Optional[str] = Field(default=None, alias="cookingTime")
    image: str
    author: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class RecipeSubmission(BaseModel):
    """Body of POST /api/recipes. Required fields are checked by app.validation."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    ingredients: Optional[List[str]] = None
    instructions: Optional[str] = None
    category: Optional[str] = None
    cooking_time: Optional[str] = Field(default=None, alias="cookingTime")
    image: Optional[str] = None


class UserAccount(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    username: str
    password: str  # bcrypt hash


class Credentials(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class CurrentUser(BaseModel):
    id: str
    username: str
