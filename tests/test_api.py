"""
Smoke and contract tests for the recipe gateway API.
Covers auth guards, the merged route, local recipe mutations, and the
cached provider passthroughs.
"""

import json

from app.services.aggregator import merged_cache_key
from conftest import SAMPLE_DRINK, SAMPLE_DUMMY_RECIPE, SAMPLE_MEAL


def _create(client, auth_headers, body, username="alice"):
    return client.post("/api/recipes", json=body, headers=auth_headers(username))


def test_health_check(client):
    """Smoke test: API is running and responding"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# --- Auth guard ---


def test_merged_route_requires_token(client):
    response = client.get("/api/recipes")
    assert response.status_code == 401
    assert response.json()["detail"] == "No token, authorization denied"


def test_merged_route_rejects_invalid_token(client):
    response = client.get("/api/recipes", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token is not valid"


def test_external_routes_require_token(client):
    assert client.get("/api/external/categories").status_code == 401


# --- GET /api/recipes ---


def test_merged_recipes_returns_array(client, auth_headers, meal_provider, alternate_provider):
    meal_provider.search_meals.return_value = [SAMPLE_MEAL]
    alternate_provider.list_recipes.return_value = [SAMPLE_DUMMY_RECIPE]

    response = client.get("/api/recipes", headers=auth_headers())

    assert response.status_code == 200
    data = response.json()
    assert isinstance(data, list)
    assert [r["id"] for r in data] == ["52772", "dummy_1"]
    alternate_provider.list_recipes.assert_awaited_once_with(20)


def test_solar_flare_soup_is_first_for_soup_category(
    client, auth_headers, sample_submission, meal_provider
):
    meal_provider.filter_meals.return_value = [
        {"idMeal": "52", "strMeal": "Leek Soup", "strMealThumb": "leek.jpg"}
    ]
    _create(client, auth_headers, sample_submission)

    response = client.get("/api/recipes", params={"c": "Soup"}, headers=auth_headers())

    data = response.json()
    assert data[0]["origin"] == "local"
    assert data[0]["name"] == "Solar Flare Soup"
    assert data[1]["category"] == "Soup"


def test_drinks_category_returns_cocktails(client, auth_headers, cocktail_provider):
    cocktail_provider.filter_drinks.return_value = [SAMPLE_DRINK]

    response = client.get("/api/recipes", params={"c": "Drinks"}, headers=auth_headers())

    assert [r["id"] for r in response.json()] == ["cocktail_11007"]
    assert response.json()[0]["category"] == "Drinks"


def test_merged_recipes_served_from_cache(client, auth_headers, meal_provider):
    meal_provider.search_meals.return_value = [SAMPLE_MEAL]

    first = client.get("/api/recipes", params={"s": "chicken"}, headers=auth_headers())
    second = client.get("/api/recipes", params={"s": "chicken"}, headers=auth_headers())

    assert first.content == second.content
    assert meal_provider.search_meals.await_count == 1


def test_create_invalidates_merged_cache(
    client, auth_headers, cache, sample_submission, meal_provider
):
    client.get("/api/recipes", headers=auth_headers())
    client.get("/api/recipes", params={"s": "soup"}, headers=auth_headers())
    assert cache.get(merged_cache_key(None, None)) is not None

    _create(client, auth_headers, sample_submission)

    assert cache.get(merged_cache_key(None, None)) is None
    assert cache.get(merged_cache_key("soup", None)) is None
    response = client.get("/api/recipes", headers=auth_headers())
    assert response.json()[0]["name"] == "Solar Flare Soup"
    assert meal_provider.search_meals.await_count == 3


def test_delete_invalidates_merged_cache(client, auth_headers, cache, sample_submission):
    recipe_id = _create(client, auth_headers, sample_submission).json()["id"]
    listed = client.get("/api/recipes", headers=auth_headers()).json()
    assert listed[0]["id"] == recipe_id

    client.delete(f"/api/recipes/{recipe_id}", headers=auth_headers())

    assert cache.get(merged_cache_key(None, None)) is None
    listed = client.get("/api/recipes", headers=auth_headers()).json()
    assert all(r["id"] != recipe_id for r in listed)


def test_corrupt_store_answers_500(client, auth_headers, recipe_store):
    recipe_store.path.write_text("{not json", encoding="utf-8")

    response = client.get("/api/recipes", headers=auth_headers())

    assert response.status_code == 500
    assert response.json() == {"detail": "Server Error"}


# --- POST /api/recipes ---


def test_create_recipe(client, auth_headers, sample_submission):
    response = _create(client, auth_headers, sample_submission)

    assert response.status_code == 201
    recipe = response.json()
    assert recipe["id"].startswith("local_")
    assert recipe["title"] == "Solar Flare Soup"
    assert recipe["author"] == "alice"
    assert recipe["cookingTime"] == "30 min"
    assert "createdAt" in recipe
    # Placeholder image when none is given
    assert recipe["image"].startswith("https://images.unsplash.com/")


def test_create_recipe_missing_instructions_is_400_and_no_write(
    client, auth_headers, sample_submission, recipe_store
):
    before = recipe_store.path.read_text(encoding="utf-8")
    body = {k: v for k, v in sample_submission.items() if k != "instructions"}

    response = _create(client, auth_headers, body)

    assert response.status_code == 400
    assert "instructions" in response.json()["detail"]
    assert recipe_store.path.read_text(encoding="utf-8") == before


def test_create_recipe_blank_fields_are_missing(client, auth_headers, sample_submission):
    body = {**sample_submission, "title": "  ", "ingredients": []}

    response = _create(client, auth_headers, body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing fields: title, ingredients"


def test_create_recipe_requires_token(client, sample_submission):
    assert client.post("/api/recipes", json=sample_submission).status_code == 401


# --- GET /api/recipes/{id} ---


def test_get_local_recipe(client, auth_headers, sample_submission):
    recipe_id = _create(client, auth_headers, sample_submission).json()["id"]

    response = client.get(f"/api/recipes/{recipe_id}")

    assert response.status_code == 200
    assert response.json()["title"] == "Solar Flare Soup"


def test_get_local_recipe_not_found(client):
    assert client.get("/api/recipes/local_missing").status_code == 404


def test_get_non_local_recipe_is_400(client):
    response = client.get("/api/recipes/52772")
    assert response.status_code == 400
    assert "/api/external/recipe" in response.json()["detail"]


# --- DELETE /api/recipes/{id} ---


def test_delete_recipe_by_author(client, auth_headers, sample_submission, recipe_store):
    recipe_id = _create(client, auth_headers, sample_submission).json()["id"]

    response = client.delete(f"/api/recipes/{recipe_id}", headers=auth_headers("alice"))

    assert response.status_code == 200
    assert response.json() == {"message": "Deleted"}
    assert client.get(f"/api/recipes/{recipe_id}").status_code == 404


def test_delete_recipe_by_other_user_is_403(client, auth_headers, sample_submission):
    recipe_id = _create(client, auth_headers, sample_submission, username="alice").json()["id"]

    response = client.delete(f"/api/recipes/{recipe_id}", headers=auth_headers("bob"))

    assert response.status_code == 403
    assert client.get(f"/api/recipes/{recipe_id}").status_code == 200


def test_delete_recipe_not_found(client, auth_headers):
    response = client.delete("/api/recipes/local_missing", headers=auth_headers())
    assert response.status_code == 404


# --- /api/external passthroughs ---


def test_external_categories_cached(client, auth_headers, meal_provider):
    meal_provider.list_categories.return_value = [{"idCategory": "1", "strCategory": "Beef"}]

    first = client.get("/api/external/categories", headers=auth_headers())
    second = client.get("/api/external/categories", headers=auth_headers())

    assert first.json() == second.json() == [{"idCategory": "1", "strCategory": "Beef"}]
    assert meal_provider.list_categories.await_count == 1


def test_external_search_normalizes(client, auth_headers, meal_provider):
    meal_provider.search_meals.return_value = [SAMPLE_MEAL]

    response = client.get("/api/external/search", params={"s": "teriyaki"}, headers=auth_headers())

    assert response.status_code == 200
    assert response.json()[0]["name"] == "Teriyaki Chicken Casserole"


def test_external_failure_is_500_and_not_cached(client, auth_headers, cache, meal_provider):
    meal_provider.search_meals.return_value = None

    response = client.get("/api/external/search", params={"s": "x"}, headers=auth_headers())

    assert response.status_code == 500
    assert cache.get("search_x") is None


def test_external_recipe_dispatches_on_prefix(
    client, auth_headers, meal_provider, alternate_provider, cocktail_provider
):
    meal_provider.lookup_meal.return_value = [SAMPLE_MEAL]
    alternate_provider.get_recipe.return_value = [SAMPLE_DUMMY_RECIPE]
    cocktail_provider.lookup_drink.return_value = [SAMPLE_DRINK]

    meal = client.get("/api/external/recipe/52772", headers=auth_headers()).json()
    dummy = client.get("/api/external/recipe/dummy_1", headers=auth_headers()).json()
    drink = client.get("/api/external/recipe/cocktail_11007", headers=auth_headers()).json()

    assert meal["id"] == "52772"
    assert dummy["id"] == "dummy_1"
    assert drink["id"] == "cocktail_11007"
    alternate_provider.get_recipe.assert_awaited_once_with("1")
    cocktail_provider.lookup_drink.assert_awaited_once_with("11007")


def test_external_recipe_rejects_local_ids(client, auth_headers, meal_provider):
    response = client.get("/api/external/recipe/local_abc", headers=auth_headers())

    assert response.status_code == 404
    meal_provider.lookup_meal.assert_not_awaited()


def test_external_recipe_not_found(client, auth_headers, cocktail_provider):
    cocktail_provider.lookup_drink.return_value = []

    response = client.get("/api/external/recipe/cocktail_0", headers=auth_headers())

    assert response.status_code == 404


def test_external_filter(client, auth_headers, meal_provider):
    meal_provider.filter_meals.return_value = [
        {"idMeal": "52", "strMeal": "Sushi", "strMealThumb": "sushi.jpg"}
    ]

    response = client.get("/api/external/filter", params={"a": "Japanese"}, headers=auth_headers())

    assert response.status_code == 200
    assert response.json()[0]["name"] == "Sushi"
    meal_provider.filter_meals.assert_awaited_once_with(category=None, area="Japanese")


def test_external_filter_requires_a_parameter(client, auth_headers):
    response = client.get("/api/external/filter", headers=auth_headers())
    assert response.status_code == 400


# --- Metrics ---


def test_metrics_endpoint_returns_aggregate(client, auth_headers):
    """GET /api/metrics returns aggregate local/upstream/cache stats"""
    client.get("/api/recipes", headers=auth_headers())
    client.get("/api/recipes", headers=auth_headers())

    data = client.get("/api/metrics").json()

    assert data["local"]["count"] >= 1
    assert data["cache"]["hits"] == 1
    assert data["cache"]["misses"] == 1
    assert "hit_rate_percent" in data["cache"]


def test_prometheus_exposition(client):
    response = client.get("/metrics/")
    assert response.status_code == 200
    assert "recipe_gateway_upstream_calls_total" in response.text


def test_cached_body_is_plain_json_array(client, auth_headers, cache, meal_provider):
    meal_provider.search_meals.return_value = [SAMPLE_MEAL]
    client.get("/api/recipes", headers=auth_headers())

    cached = cache.get(merged_cache_key(None, None))

    assert json.loads(json.dumps(cached)) == cached
    assert cached[0]["isExternal"] is True
