"""Translation of adapter/controller exceptions into HTTP errors."""

from fastapi import HTTPException

from devhub.libs.ai_gateway import AIConfigurationError, StructuringError
from devhub.libs.asset_storage import AssetUploadError
from devhub.libs.catalog import CatalogCommandError, FormValidationError
from devhub.libs.github_client import GitHubError, GitHubNotFoundError, GitHubRateLimitError
from devhub.libs.project_store import ProjectStoreError
from devhub.libs.repo_importer import RepositoryImportError

AI_NOT_CONFIGURED = "ai_not_configured"


def ai_not_configured(message: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={"code": AI_NOT_CONFIGURED, "message": message},
    )


def http_error_for(e: Exception) -> HTTPException:
    """Pick the status code that tells the client what went wrong."""
    if isinstance(e, AIConfigurationError):
        return ai_not_configured(e.message)
    if isinstance(e, GitHubNotFoundError):
        return HTTPException(status_code=404, detail=f"GitHub account not found. {e.message}")
    if isinstance(e, GitHubRateLimitError):
        detail = "GitHub rate limit reached, try again later."
        if e.reset:
            detail += f" Quota resets at {e.reset} (unix time)."
        return HTTPException(status_code=429, detail=detail)
    if isinstance(e, GitHubError):
        return HTTPException(status_code=502, detail=e.message)
    if isinstance(e, RepositoryImportError):
        return HTTPException(status_code=422, detail=e.message)
    if isinstance(e, StructuringError):
        return HTTPException(status_code=502, detail=e.message)
    if isinstance(e, FormValidationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (CatalogCommandError, ProjectStoreError, AssetUploadError)):
        return HTTPException(status_code=502, detail=e.message)
    return HTTPException(status_code=500, detail=str(e))
