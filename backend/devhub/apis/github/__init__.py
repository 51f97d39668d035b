"""
GitHub Import API

Endpoints for importing repositories into the portfolio:
- Preset account list
- Preview: list repositories, structure them with AI, return drafts
- Commit: create the selected drafts
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from devhub.config import Settings
from devhub.deps import get_repository_importer, get_settings
from devhub.errors import http_error_for
from devhub.libs.ai_gateway import AIConfigurationError, StructuringError
from devhub.libs.github_client import GitHubError
from devhub.libs.models import Project, ProjectDraft
from devhub.libs.project_store import ProjectStoreError
from devhub.libs.repo_importer import ImportPreview, RepositoryImporter, RepositoryImportError, parse_usernames

router = APIRouter(prefix="/github", tags=["GitHub"])


# Request/Response Models
class ProfilesResponse(BaseModel):
    """Preset GitHub accounts"""
    profiles: List[str]
    sync_all: str = Field(..., description="Every preset account, comma separated, for a single import")


class ImportPreviewRequest(BaseModel):
    """Accounts to import from"""
    usernames: Union[str, List[str]] = Field(
        ...,
        description="Comma separated string or list of GitHub account names"
    )


class ImportPreviewResponse(BaseModel):
    """Drafts ready for review"""
    drafts: List[ProjectDraft]
    selected: List[int]


class ImportCommitRequest(BaseModel):
    """Drafts to write"""
    drafts: List[ProjectDraft]
    selected: Optional[List[int]] = Field(
        None,
        description="Positions of the drafts to import; all when omitted"
    )


@router.get("/profiles")
async def get_profiles(settings: Settings = Depends(get_settings)) -> ProfilesResponse:
    """Preset accounts offered as one-click imports."""
    return ProfilesResponse(
        profiles=settings.quick_profiles,
        sync_all=",".join(settings.quick_profiles),
    )


@router.post("/import/preview")
async def preview_import(
    request: ImportPreviewRequest,
    importer: RepositoryImporter = Depends(get_repository_importer),
) -> ImportPreviewResponse:
    """
    List repositories of the given accounts and structure them into drafts

    Forks are skipped. Every draft starts selected.
    """
    if isinstance(request.usernames, str):
        usernames = parse_usernames(request.usernames)
    else:
        usernames = parse_usernames(",".join(request.usernames))

    try:
        preview = await importer.discover(usernames)
    except (GitHubError, RepositoryImportError, AIConfigurationError, StructuringError) as e:
        raise http_error_for(e)

    return ImportPreviewResponse(drafts=preview.drafts, selected=sorted(preview.selected))


@router.post("/import/commit")
async def commit_import(
    request: ImportCommitRequest,
    importer: RepositoryImporter = Depends(get_repository_importer),
) -> List[Project]:
    """Create the selected drafts. Returns the created projects."""
    preview = ImportPreview.all_selected(request.drafts)
    if request.selected is not None:
        preview.select_only(request.selected)

    try:
        return await importer.commit(preview)
    except ProjectStoreError as e:
        raise http_error_for(e)
