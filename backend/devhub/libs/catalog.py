"""
Catalog Controller

Holds the loaded catalog plus the view inputs (category, search text,
visible count) and derives the filtered, paginated view from them. Also
carries the edit/create/delete commands and the project form they use.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from devhub.libs.asset_storage import ImageFile
from devhub.libs.models import Category, Project, dedupe_tags
from devhub.libs.project_store import ProjectStore

logger = logging.getLogger(__name__)

PAGE_SIZE = 9


class CatalogCommandError(Exception):
    """A write command failed; the catalog was left at its last good state"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class FormValidationError(ValueError):
    """Required form fields are missing"""


def matches(project: Project, category: Category, search: str) -> bool:
    """Category filter AND case-insensitive title/tag search."""
    if category is not Category.ALL and project.category is not category:
        return False
    query = search.lower()
    if not query:
        return True
    if query in project.title.lower():
        return True
    return any(query in tag.lower() for tag in project.tags)


def filter_projects(projects: List[Project], category: Category, search: str) -> List[Project]:
    return [p for p in projects if matches(p, category, search)]


def placeholder_image_url() -> str:
    return f"https://picsum.photos/seed/{random.randrange(1000)}/800/600"


@dataclass
class ProjectForm:
    """Create/edit form state"""
    title: str = ""
    description: str = ""
    category: Category = Category.UTILITY
    tags: List[str] = field(default_factory=list)
    image_url: str = ""
    demo_url: str = ""
    repo_url: str = ""
    featured: bool = False
    editing: Optional[Project] = None
    is_open: bool = True

    @classmethod
    def for_create(cls) -> "ProjectForm":
        return cls(image_url=placeholder_image_url())

    @classmethod
    def for_edit(cls, project: Project) -> "ProjectForm":
        return cls(
            title=project.title,
            description=project.description,
            category=project.category,
            tags=list(project.tags),
            image_url=project.image_url,
            demo_url=project.demo_url or "",
            repo_url=project.repo_url or "",
            featured=project.featured,
            editing=project,
        )

    @property
    def is_edit(self) -> bool:
        return self.editing is not None

    def add_tag(self, tag: str) -> None:
        self.tags = dedupe_tags([*self.tags, tag])

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag]

    def to_project(self) -> Project:
        if not self.title.strip() or not self.description.strip():
            raise FormValidationError("Title and description are required")
        if self.category is Category.ALL:
            raise FormValidationError("Pick a category for the project")
        return Project(
            id=self.editing.id if self.editing else "",
            title=self.title.strip(),
            description=self.description.strip(),
            category=self.category,
            tags=self.tags,
            image_url=self.image_url,
            demo_url=self.demo_url or None,
            repo_url=self.repo_url or None,
            featured=self.featured,
            created_at=self.editing.created_at if self.editing else date.today(),
        )


ConfirmCallback = Callable[[Project], bool]


class CatalogController:
    """View state and commands for the project catalog."""

    def __init__(self, store: ProjectStore, page_size: int = PAGE_SIZE):
        self.store = store
        self.page_size = page_size
        self.projects: List[Project] = []
        self.active_category: Category = Category.ALL
        self.search: str = ""
        self.visible_count: int = page_size
        self.is_loading = False

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    async def load(self) -> List[Project]:
        """Replace the catalog with the store's current contents."""
        self.is_loading = True
        try:
            self.projects = await self.store.fetch_projects()
        finally:
            self.is_loading = False
        return self.projects

    def set_category(self, category: Category) -> None:
        self.active_category = category
        self.visible_count = self.page_size

    def set_search(self, search: str) -> None:
        self.search = search or ""
        self.visible_count = self.page_size

    @property
    def filtered(self) -> List[Project]:
        return filter_projects(self.projects, self.active_category, self.search)

    @property
    def visible(self) -> List[Project]:
        return self.filtered[:self.visible_count]

    @property
    def has_more(self) -> bool:
        return self.visible_count < len(self.filtered)

    def load_more(self) -> int:
        """Show one more page, capped at the number of filtered projects."""
        total = len(self.filtered)
        if self.visible_count < total:
            self.visible_count = min(self.visible_count + self.page_size, total)
        return self.visible_count

    def find(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def open_create_form(self) -> ProjectForm:
        return ProjectForm.for_create()

    def open_edit_form(self, project_id: str) -> ProjectForm:
        project = self.find(project_id)
        if project is None:
            raise KeyError(project_id)
        return ProjectForm.for_edit(project)

    async def save(self, form: ProjectForm, image: Optional[ImageFile] = None) -> Project:
        """
        Upload the image if one was chosen, then create or update

        The form is closed only when every step succeeded.
        """
        project = form.to_project()
        try:
            if image is not None:
                project = project.model_copy(update={"image_url": await self.store.upload_image(image)})
                form.image_url = project.image_url

            if form.is_edit:
                saved = await self.store.update_project(project)
                self.projects = [saved if p.id == saved.id else p for p in self.projects]
            else:
                saved = await self.store.create_project(project)
                self.projects = [saved, *self.projects]
        except Exception as e:
            logger.error("Save error: %s", e)
            raise CatalogCommandError(f"Error saving project: {e}") from e

        form.is_open = False
        return saved

    async def delete(self, project_id: str, confirm: ConfirmCallback) -> bool:
        """
        Delete after confirmation

        The project is removed locally first. On success the catalog is
        refetched from the store; on failure the previous list is restored
        and CatalogCommandError is raised.

        Returns:
            False if the user declined, True once deleted
        """
        project = self.find(project_id)
        if project is None:
            raise KeyError(project_id)
        if not confirm(project):
            return False

        snapshot = list(self.projects)
        self.projects = [p for p in self.projects if p.id != project_id]

        if not await self.store.delete_project(project_id):
            self.projects = snapshot
            raise CatalogCommandError(f"Could not delete project '{project.title}'")

        await self.load()
        return True
