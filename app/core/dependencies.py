"""
FastAPI dependency injection providers.
Use Depends(get_recipe_aggregator), etc. in route handlers; override the leaf
providers (stores, cache, adapters) in tests.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.dummyjson import DummyJSONAdapter
from app.adapters.thecocktaildb import TheCocktailDBAdapter
from app.adapters.themealdb import TheMealDBAdapter
from app.config import Settings, settings
from app.core.abstractions import (
    AlternateRecipeProvider,
    CacheBackend,
    CocktailProvider,
    LocalRecipeRepository,
    MealProvider,
    UserRepository,
)
from app.errors import InvalidTokenError
from app.models import CurrentUser
from app.services.aggregator import RecipeAggregator
from app.services.auth import AuthService, decode_token
from app.services.cache import create_cache_backend
from app.services.recipes import LocalRecipeService
from app.services.storage import LocalRecipeStore, UserStore

# --- Singletons (lazy-initialized) ---

_recipe_store: Optional[LocalRecipeStore] = None
_user_store: Optional[UserStore] = None
_cache_backend: Optional[CacheBackend] = None
_meal_provider: Optional[TheMealDBAdapter] = None
_alternate_provider: Optional[DummyJSONAdapter] = None
_cocktail_provider: Optional[TheCocktailDBAdapter] = None


def get_settings() -> Settings:
    return settings


def get_recipe_store() -> LocalRecipeRepository:
    """Provide the local recipe store. Used as Depends(get_recipe_store)."""
    global _recipe_store
    if _recipe_store is None:
        _recipe_store = LocalRecipeStore(settings.recipes_file)
    return _recipe_store


def get_user_store() -> UserRepository:
    global _user_store
    if _user_store is None:
        _user_store = UserStore(settings.users_file)
    return _user_store


def get_cache_backend() -> CacheBackend:
    """Provide CacheBackend (Redis when reachable, else in-memory)."""
    global _cache_backend
    if _cache_backend is None:
        _cache_backend = create_cache_backend(
            settings.REDIS_URL, default_ttl=settings.CACHE_TTL_SECONDS
        )
    return _cache_backend


def get_meal_provider() -> MealProvider:
    global _meal_provider
    if _meal_provider is None:
        _meal_provider = TheMealDBAdapter(
            settings.MEALDB_BASE_URL, timeout=settings.UPSTREAM_TIMEOUT
        )
    return _meal_provider


def get_alternate_provider() -> AlternateRecipeProvider:
    global _alternate_provider
    if _alternate_provider is None:
        _alternate_provider = DummyJSONAdapter(
            settings.DUMMYJSON_BASE_URL, timeout=settings.UPSTREAM_TIMEOUT
        )
    return _alternate_provider


def get_cocktail_provider() -> CocktailProvider:
    global _cocktail_provider
    if _cocktail_provider is None:
        _cocktail_provider = TheCocktailDBAdapter(
            settings.COCKTAILDB_BASE_URL, timeout=settings.UPSTREAM_TIMEOUT
        )
    return _cocktail_provider


# --- Composed services (built per request from the providers above) ---


def get_recipe_aggregator(
    cache: CacheBackend = Depends(get_cache_backend),
    store: LocalRecipeRepository = Depends(get_recipe_store),
    meals: MealProvider = Depends(get_meal_provider),
    alternate: AlternateRecipeProvider = Depends(get_alternate_provider),
    cocktails: CocktailProvider = Depends(get_cocktail_provider),
    config: Settings = Depends(get_settings),
) -> RecipeAggregator:
    return RecipeAggregator(
        cache=cache,
        store=store,
        meals=meals,
        alternate=alternate,
        cocktails=cocktails,
        merged_ttl=config.MERGED_CACHE_TTL_SECONDS,
        alternate_list_limit=config.DUMMYJSON_LIST_LIMIT,
    )


def get_local_recipe_service(
    store: LocalRecipeRepository = Depends(get_recipe_store),
    cache: CacheBackend = Depends(get_cache_backend),
    config: Settings = Depends(get_settings),
) -> LocalRecipeService:
    return LocalRecipeService(store, cache, default_image=config.DEFAULT_RECIPE_IMAGE)


def get_auth_service(
    users: UserRepository = Depends(get_user_store),
    config: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(users, config.JWT_SECRET, config.JWT_EXPIRES_HOURS)


# --- Auth guard ---

auth_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    cred: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    config: Settings = Depends(get_settings),
) -> CurrentUser:
    """Resolve `Authorization: Bearer <token>` to the signed-in user, else 401."""
    if cred is None or not cred.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token, authorization denied",
        )
    try:
        return decode_token(cred.credentials, config.JWT_SECRET)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token is not valid"
        )
