"""
Validation for user recipe submissions.

A field counts as missing when it is absent, blank, or an empty list, so a
submission that fails here never reaches the store.
"""

from typing import Any, List

from app.models import RecipeSubmission

REQUIRED_SUBMISSION_FIELDS = ("title", "ingredients", "instructions")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return not any(isinstance(item, str) and item.strip() for item in value)
    return False


def find_missing_fields(submission: RecipeSubmission) -> List[str]:
    """Return the required fields the submission lacks, in declaration order."""
    return [
        field
        for field in REQUIRED_SUBMISSION_FIELDS
        if _is_blank(getattr(submission, field))
    ]


def clean_ingredients(ingredients: List[str]) -> List[str]:
    """Strip entries and drop blank lines left over from the submit form."""
    return [item.strip() for item in ingredients if item and item.strip()]
