"""
Portfolio Models

Pydantic models shared by the record store, the AI gateway, the repository
importer and the API layer.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class Category(str, Enum):
    """Project categories. ``ALL`` is a view filter and never stored."""
    ALL = "All"
    ECOMMERCE = "E-commerce"
    DASHBOARD = "Dashboard"
    LANDING = "Landing Page"
    UTILITY = "Utility"
    WEB3 = "Web3"
    AI = "AI/ML"


STORED_CATEGORIES: List[Category] = [c for c in Category if c is not Category.ALL]


class ChatRole(str, Enum):
    """Chat message role values"""
    USER = "user"
    MODEL = "model"


# =============================================================================
# HELPERS
# =============================================================================


def dedupe_tags(tags: Iterable[str]) -> List[str]:
    """Trim tags and drop blanks and repeats, keeping first-seen order."""
    seen = set()
    result = []
    for tag in tags or []:
        tag = (tag or "").strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def _stored_category(value: Category) -> Category:
    if value is Category.ALL:
        raise ValueError("'All' is a filter value and cannot be stored on a project")
    return value


# =============================================================================
# PORTFOLIO MODELS
# =============================================================================


class Project(BaseModel):
    """A portfolio entry"""
    id: str
    title: str
    description: str
    category: Category
    tags: List[str] = Field(default_factory=list)
    image_url: str = ""
    demo_url: Optional[str] = None
    repo_url: Optional[str] = None
    featured: bool = False
    created_at: date = Field(default_factory=date.today)

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: Category) -> Category:
        return _stored_category(value)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: List[str]) -> List[str]:
        return dedupe_tags(value)


class ProjectDraft(BaseModel):
    """A Project-shaped record staged for review before it is committed."""
    title: str
    description: str
    category: Category
    tags: List[str] = Field(default_factory=list)
    repo_url: Optional[str] = None
    demo_url: Optional[str] = None
    image_url: str = ""
    created_at: Optional[date] = None

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: Category) -> Category:
        return _stored_category(value)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: List[str]) -> List[str]:
        return dedupe_tags(value)

    def to_project(self, project_id: str) -> Project:
        return Project(
            id=project_id,
            title=self.title,
            description=self.description,
            category=self.category,
            tags=self.tags,
            image_url=self.image_url,
            demo_url=self.demo_url or None,
            repo_url=self.repo_url or None,
            featured=False,
            created_at=self.created_at or date.today(),
        )


class ProjectDraftBatch(BaseModel):
    """Envelope returned by the structuring call."""
    projects: List[ProjectDraft]


class ChatMessage(BaseModel):
    """One entry of the chat transcript. ``text`` grows while streaming."""
    id: str
    role: ChatRole
    text: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GitHubRepo(BaseModel):
    """Repository metadata staged for import. Not stored."""
    name: str
    description: Optional[str] = None
    html_url: str
    homepage: Optional[str] = None
    language: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    fork: bool = False

    @property
    def created_date(self) -> Optional[date]:
        if not self.created_at:
            return None
        try:
            return date.fromisoformat(self.created_at[:10])
        except ValueError:
            return None
