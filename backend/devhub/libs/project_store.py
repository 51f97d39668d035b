"""
Project Store

Typed adapter between ``Project`` models and rows of the ``projects`` table.

Reads never fail: on any error, on timeout, or when the table is empty the
fixed fallback catalog is returned. Writes raise ``ProjectStoreError``,
except delete which reports success as a boolean.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from devhub.libs.asset_storage import AssetStorage, AssetUploadError, ImageFile
from devhub.libs.database import get_db_connection
from devhub.libs.fallback_catalog import fallback_projects
from devhub.libs.models import Category, Project

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], Awaitable[Any]]

SELECT_ALL_SQL = "SELECT * FROM projects ORDER BY created_at DESC"

INSERT_SQL = """
INSERT INTO projects (title, description, category, tags, image_url, demo_url, repo_url, featured)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
RETURNING *
"""

UPDATE_SQL = """
UPDATE projects
SET title = $1,
    description = $2,
    category = $3,
    tags = $4,
    image_url = $5,
    demo_url = $6,
    repo_url = $7,
    featured = $8
WHERE id = $9
RETURNING *
"""

DELETE_SQL = "DELETE FROM projects WHERE id = $1"


class ProjectStoreError(Exception):
    """Raised when a write to the record store fails"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return date.today()


def project_from_row(row: Mapping[str, Any]) -> Project:
    """Map a ``projects`` row to a Project."""
    return Project(
        id=str(row["id"]),
        title=row["title"],
        description=row["description"] or "",
        category=Category(row["category"]),
        tags=list(row["tags"] or []),
        image_url=row["image_url"] or "",
        demo_url=row["demo_url"],
        repo_url=row["repo_url"],
        featured=bool(row["featured"]),
        created_at=_as_date(row["created_at"]),
    )


def project_to_row(project: Project) -> Dict[str, Any]:
    """Column values for insert/update, in statement parameter order."""
    return {
        "title": project.title,
        "description": project.description,
        "category": project.category.value,
        "tags": list(project.tags),
        "image_url": project.image_url,
        "demo_url": project.demo_url,
        "repo_url": project.repo_url,
        "featured": project.featured,
    }


class ProjectStore:
    """Record store adapter for portfolio projects"""

    def __init__(
        self,
        connect: Optional[ConnectionFactory] = None,
        assets: Optional[AssetStorage] = None,
        fetch_timeout: float = 5.0,
    ):
        """
        Args:
            connect: Coroutine factory returning an asyncpg-style connection
            assets: Object storage used by ``upload_image``
            fetch_timeout: Seconds to wait for a catalog read before falling back
        """
        self._connect = connect or get_db_connection
        self.assets = assets
        self.fetch_timeout = fetch_timeout

    async def _select_all(self) -> List[Project]:
        conn = await self._connect()
        try:
            rows = await conn.fetch(SELECT_ALL_SQL)
        finally:
            await conn.close()
        return [project_from_row(row) for row in rows]

    async def fetch_projects(self) -> List[Project]:
        """
        Load the catalog, newest first

        Returns:
            Stored projects, or the fallback catalog when the read fails,
            times out or finds no rows
        """
        try:
            projects = await asyncio.wait_for(self._select_all(), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            logger.warning("Project fetch timed out after %ss, using fallback catalog", self.fetch_timeout)
            return fallback_projects()
        except Exception as e:
            logger.warning("Project fetch failed (using fallback catalog): %s", e)
            return fallback_projects()

        if not projects:
            logger.info("Record store is empty, using fallback catalog")
            return fallback_projects()

        return projects

    async def _write(self, sql: str, *params: Any) -> Optional[Mapping[str, Any]]:
        conn = await self._connect()
        try:
            return await conn.fetchrow(sql, *params)
        finally:
            await conn.close()

    async def create_project(self, project: Project) -> Project:
        """Insert a project and return it with the server-assigned id and date."""
        values = project_to_row(project)
        try:
            row = await self._write(INSERT_SQL, *values.values())
        except Exception as e:
            logger.error("Error creating project %r: %s", project.title, e)
            raise ProjectStoreError(f"Failed to create project: {e}") from e

        if row is None:
            raise ProjectStoreError("Failed to create project: no row returned")

        return project.model_copy(update={
            "id": str(row["id"]),
            "created_at": _as_date(row["created_at"]),
        })

    async def update_project(self, project: Project) -> Project:
        """Replace every column of the project with the given id."""
        values = project_to_row(project)
        try:
            row = await self._write(UPDATE_SQL, *values.values(), project.id)
        except Exception as e:
            logger.error("Error updating project %s: %s", project.id, e)
            raise ProjectStoreError(f"Failed to update project: {e}") from e

        if row is None:
            raise ProjectStoreError(f"Project not found: {project.id}")

        return project.model_copy(update={"id": str(row["id"])})

    async def delete_project(self, project_id: str) -> bool:
        """Delete by id. Returns False instead of raising on failure."""
        try:
            conn = await self._connect()
            try:
                await conn.execute(DELETE_SQL, project_id)
            finally:
                await conn.close()
        except Exception as e:
            logger.error("Error deleting project %s: %s", project_id, e)
            return False
        logger.info("Deleted project %s", project_id)
        return True

    async def upload_image(self, image: ImageFile) -> str:
        """Store an image and return its public URL."""
        if self.assets is None:
            raise AssetUploadError("Object storage is not configured")
        return await self.assets.upload_image(image)
