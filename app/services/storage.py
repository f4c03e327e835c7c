"""
Flat-file JSON stores for user-submitted recipes and user accounts.

Each store is one JSON array, read whole and rewritten whole. Writes in a
process are serialized by a per-store asyncio.Lock and land atomically
(temp file + os.replace), so a crash mid-write leaves the previous file.
File I/O runs in a worker thread to keep the event loop free.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from pydantic import ValidationError

from app.errors import StoreError, UserExistsError
from app.models import LocalRecipe, UserAccount

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JSONFileStore:
    """A JSON array persisted in a single file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def ensure(self) -> None:
        """Create the parent directory and an empty array file if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("[]", encoding="utf-8")

    def _read_sync(self) -> List[dict[str, Any]]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt store {self.path}: {e.msg} at line {e.lineno}") from e
        if not isinstance(data, list):
            raise StoreError(f"Store {self.path} does not hold a JSON array")
        return data

    def _write_sync(self, documents: List[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(documents, tmp, indent=2, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot write {self.path}: {e}") from e

    async def read_all(self) -> List[dict[str, Any]]:
        return await asyncio.to_thread(self._read_sync)

    async def update(self, mutate: Callable[[List[dict[str, Any]]], T]) -> T:
        """
        Read-modify-write under the store lock. `mutate` edits the list in
        place and returns a result; the file is rewritten afterwards unless
        it raises.
        """
        async with self._lock:
            documents = await asyncio.to_thread(self._read_sync)
            result = mutate(documents)
            await asyncio.to_thread(self._write_sync, documents)
            return result


class LocalRecipeStore(JSONFileStore):
    """User-submitted recipes (recipes.json)."""

    async def list_recipes(self) -> List[LocalRecipe]:
        recipes: List[LocalRecipe] = []
        for doc in await self.read_all():
            try:
                recipes.append(LocalRecipe.model_validate(doc))
            except ValidationError as e:
                recipe_id = doc.get("id", "?") if isinstance(doc, dict) else "?"
                logger.warning("Skipping malformed stored recipe %s: %s", recipe_id, e)
        return recipes

    async def get_recipe(self, recipe_id: str) -> Optional[LocalRecipe]:
        for recipe in await self.list_recipes():
            if recipe.id == recipe_id:
                return recipe
        return None

    async def add_recipe(self, recipe: LocalRecipe) -> LocalRecipe:
        await self.update(lambda docs: docs.append(recipe.to_document()))
        return recipe

    async def remove_recipe(self, recipe_id: str) -> bool:
        def _remove(docs: List[dict[str, Any]]) -> bool:
            for index, doc in enumerate(docs):
                if isinstance(doc, dict) and doc.get("id") == recipe_id:
                    del docs[index]
                    return True
            return False

        return await self.update(_remove)


class UserStore(JSONFileStore):
    """User accounts (users.json)."""

    async def get_user(self, username: str) -> Optional[UserAccount]:
        for doc in await self.read_all():
            if isinstance(doc, dict) and doc.get("username") == username:
                return UserAccount.model_validate(doc)
        return None

    async def add_user(self, user: UserAccount) -> UserAccount:
        def _add(docs: List[dict[str, Any]]) -> None:
            if any(isinstance(d, dict) and d.get("username") == user.username for d in docs):
                raise UserExistsError(user.username)
            docs.append(user.model_dump(mode="json"))

        await self.update(_add)
        return user
