from typing import List


class RecipeAppError(Exception):
    pass


class SubmissionValidationError(RecipeAppError):
    def __init__(self, missing_fields: List[str]):
        super().__init__(f"Missing fields: {', '.join(missing_fields)}")
        self.missing_fields = missing_fields


class RecipeNotFoundError(RecipeAppError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class NotRecipeAuthorError(RecipeAppError):
    def __init__(self, recipe_id: str, username: str):
        super().__init__(f"{username} is not the author of {recipe_id}")
        self.recipe_id = recipe_id
        self.username = username


class NotLocalRecipeError(RecipeAppError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Not a local recipe id: {recipe_id}")
        self.recipe_id = recipe_id


class UserExistsError(RecipeAppError):
    def __init__(self, username: str):
        super().__init__(f"User already exists: {username}")
        self.username = username


class InvalidCredentialsError(RecipeAppError):
    pass


class InvalidTokenError(RecipeAppError):
    pass


class StoreError(RecipeAppError):
    """The flat-file store could not be read or written."""
