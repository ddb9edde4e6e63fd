"""
Portfolio catalog operations.

Projects and categories live in two JSON collections. Every mutation reads the
collection, changes it in memory and writes it back while holding the catalog
lock, so concurrent admin requests in this process cannot lose updates.
"""
import copy
import logging
import threading
from typing import Any, Optional

from govivid.catalog.store import JsonCollectionStore
from govivid.shared.errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)

PROJECT_DEFAULTS = {
    "title": "",
    "category": "",
    "description": "",
    "image": "",
    "tags": [],
    "link": "",
    "github": "",
}

DEFAULT_CATEGORIES = [
    ("branding", "Branding & Identity"),
    ("digital", "Digital Marketing"),
    ("social", "Social Media"),
    ("campaigns", "Campaign Management"),
    ("content", "Content Marketing"),
]


def _find_index(items: list[dict[str, Any]], item_id: int) -> Optional[int]:
    for index, item in enumerate(items):
        if item.get("id") == item_id:
            return index
    return None


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class Catalog:
    """Projects and categories with the category rename/delete rules."""

    def __init__(self, projects: JsonCollectionStore, categories: JsonCollectionStore):
        self.projects = projects
        self.categories = categories
        self._lock = threading.RLock()

    # ──────────────────────────────────────────────────────────────────────
    # Projects
    # ──────────────────────────────────────────────────────────────────────

    def list_projects(self) -> list[dict[str, Any]]:
        return self.projects.load()

    def create_project(self, data: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            items = self.projects.load()
            project = {"id": self.projects.next_id(items)}
            for key, default in PROJECT_DEFAULTS.items():
                value = data.get(key)
                project[key] = value if value is not None else copy.copy(default)
            items.append(project)
            self.projects.save(items)

        logger.info(f"Created project {project['id']} ({project['title']!r})")
        return project

    def update_project(self, project_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Merge changes into a project. The id itself can't be changed."""
        with self._lock:
            items = self.projects.load()
            index = _find_index(items, project_id)
            if index is None:
                raise NotFound("Project not found")

            updated = dict(items[index])
            for key, value in changes.items():
                if key == "id" or value is None:
                    continue
                updated[key] = value
            items[index] = updated
            self.projects.save(items)

        logger.info(f"Updated project {project_id}")
        return updated

    def delete_project(self, project_id: int) -> bool:
        """Remove a project. Returns False if it did not exist."""
        with self._lock:
            items = self.projects.load()
            remaining = [item for item in items if item.get("id") != project_id]
            if len(remaining) == len(items):
                return False
            self.projects.save(remaining)

        logger.info(f"Deleted project {project_id}")
        return True

    # ──────────────────────────────────────────────────────────────────────
    # Categories
    # ──────────────────────────────────────────────────────────────────────

    def list_categories(self) -> list[dict[str, Any]]:
        return self.categories.load()

    def create_category(self, value: Optional[str], label: Optional[str]) -> dict[str, Any]:
        value, label = _clean(value), _clean(label)
        if not value or not label:
            raise BadRequest("value and label are required")

        with self._lock:
            items = self.categories.load()
            if any(item.get("value") == value for item in items):
                raise Conflict("Category value already exists")

            category = {"id": self.categories.next_id(items), "value": value, "label": label}
            items.append(category)
            self.categories.save(items)

        logger.info(f"Created category {category['id']} ({value!r})")
        return category

    def update_category(
        self,
        category_id: int,
        value: Optional[str] = None,
        label: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Update a category's value and/or label.

        Renaming the value rewrites the category of every project that used
        the old value.
        """
        if value is not None and not _clean(value):
            raise BadRequest("value cannot be empty")
        if label is not None and not _clean(label):
            raise BadRequest("label cannot be empty")

        with self._lock:
            items = self.categories.load()
            index = _find_index(items, category_id)
            if index is None:
                raise NotFound("Category not found")

            category = dict(items[index])
            old_value = category.get("value")
            new_value = _clean(value) if value is not None else old_value

            if new_value != old_value and any(
                item.get("value") == new_value for item in items if item.get("id") != category_id
            ):
                raise Conflict("Category value already exists")

            category["value"] = new_value
            if label is not None:
                category["label"] = _clean(label)
            items[index] = category

            # Projects are rewritten first and restored if the category write fails
            original_projects = None
            if new_value != old_value:
                original_projects = self._rename_project_category(old_value, new_value)
            try:
                self.categories.save(items)
            except Exception:
                if original_projects is not None:
                    logger.error(f"Saving category {category_id} failed, restoring project categories")
                    self.projects.save(original_projects)
                raise

        logger.info(f"Updated category {category_id}")
        return category

    def delete_category(self, category_id: int) -> None:
        with self._lock:
            items = self.categories.load()
            index = _find_index(items, category_id)
            if index is None:
                raise NotFound("Category not found")

            value = items[index].get("value")
            if any(project.get("category") == value for project in self.projects.load()):
                raise BadRequest("Category is in use by one or more projects")

            del items[index]
            self.categories.save(items)

        logger.info(f"Deleted category {category_id} ({value!r})")

    def seed_default_categories(self) -> bool:
        """Write the default categories if no categories file exists yet."""
        with self._lock:
            if self.categories.exists():
                return False
            items: list[dict[str, Any]] = []
            for value, label in DEFAULT_CATEGORIES:
                items.append({"id": self.categories.next_id(items), "value": value, "label": label})
            self.categories.save(items)

        logger.info(f"Seeded {len(items)} default categories")
        return True

    def _rename_project_category(
        self, old_value: Optional[str], new_value: str
    ) -> Optional[list[dict[str, Any]]]:
        """Move projects to the renamed category. Returns the prior projects if any changed."""
        projects = self.projects.load()
        original = copy.deepcopy(projects)
        changed = 0
        for project in projects:
            if project.get("category") == old_value:
                project["category"] = new_value
                changed += 1

        # Only write when something actually changed
        if changed:
            self.projects.save(projects)
            logger.info(f"Moved {changed} project(s) from category {old_value!r} to {new_value!r}")
            return original
        return None
