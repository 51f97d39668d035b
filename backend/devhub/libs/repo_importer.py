"""
Repository Importer

Bulk import of GitHub repositories into the portfolio:

1. List repositories for every requested account (any failed lookup aborts)
2. Drop forks
3. Ask the AI gateway to structure the rest into project drafts
4. Reattach authoritative URLs and dates from the repository data
5. Let the admin pick drafts, then create the selected ones in the store

Step 4 matches drafts to repositories by case-insensitive name and falls
back to list position. A draft the model renamed past recognition can pick
up the wrong repository's metadata; that is accepted.
"""

import asyncio
import logging
import secrets
import string
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from devhub.libs.ai_gateway import AIGateway
from devhub.libs.github_client import GitHubClient
from devhub.libs.models import GitHubRepo, Project, ProjectDraft
from devhub.libs.project_store import ProjectStore

logger = logging.getLogger(__name__)

PLACEHOLDER_COVER = (
    "https://images.unsplash.com/photo-1618401471353-b98afee0b2eb"
    "?auto=format&fit=crop&w=800&q=80"
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


class RepositoryImportError(Exception):
    """The import batch was aborted"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


def parse_usernames(raw: str) -> List[str]:
    """Split a comma separated account list, dropping blanks."""
    return [name.strip() for name in (raw or "").split(",") if name.strip()]


def generate_local_id(length: int = 7) -> str:
    """Short random id for a draft about to be committed."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def match_repository(draft: ProjectDraft, index: int, repos: List[GitHubRepo]) -> Optional[GitHubRepo]:
    """Repository a draft came from: same name first, else same position."""
    title = (draft.title or "").lower()
    for repo in repos:
        if repo.name.lower() == title:
            return repo
    if index < len(repos):
        return repos[index]
    return None


def merge_drafts(drafts: List[ProjectDraft], repos: List[GitHubRepo]) -> List[ProjectDraft]:
    """Overlay source URL, homepage and creation date from the matched repository."""
    merged = []
    for i, draft in enumerate(drafts):
        original = match_repository(draft, i, repos)
        update = {"image_url": PLACEHOLDER_COVER}
        if original is not None:
            update["repo_url"] = original.html_url
            update["demo_url"] = original.homepage or None
            update["created_at"] = original.created_date
        merged.append(draft.model_copy(update=update))
    return merged


@dataclass
class ImportPreview:
    """Drafts awaiting confirmation; all selected by default"""
    drafts: List[ProjectDraft]
    selected: Set[int] = field(default_factory=set)

    @classmethod
    def all_selected(cls, drafts: List[ProjectDraft]) -> "ImportPreview":
        return cls(drafts=drafts, selected=set(range(len(drafts))))

    def toggle(self, index: int) -> None:
        if not 0 <= index < len(self.drafts):
            raise IndexError(f"No draft at position {index}")
        if index in self.selected:
            self.selected.discard(index)
        else:
            self.selected.add(index)

    def select_only(self, indices: Iterable[int]) -> None:
        self.selected = {i for i in indices if 0 <= i < len(self.drafts)}

    def selected_drafts(self) -> List[ProjectDraft]:
        return [d for i, d in enumerate(self.drafts) if i in self.selected]


class RepositoryImporter:
    """Coordinates GitHub listing, AI structuring and the final bulk write."""

    def __init__(self, github: GitHubClient, gateway: AIGateway, store: ProjectStore):
        self.github = github
        self.gateway = gateway
        self.store = store

    async def list_repositories(self, usernames: List[str]) -> List[GitHubRepo]:
        """All repositories of all accounts. Any failed lookup aborts the batch."""
        all_repos: List[GitHubRepo] = []
        for name in usernames:
            # GitHubError subclasses propagate with their own message
            repos = await asyncio.to_thread(self.github.list_user_repositories, name)
            all_repos.extend(repos)
        return all_repos

    async def discover(self, usernames: List[str]) -> ImportPreview:
        """
        Build the import preview for the given accounts

        Raises:
            RepositoryImportError: no accounts, no repositories, or only forks
            GitHubNotFoundError / GitHubRateLimitError / GitHubError: lookup failed
            AIConfigurationError / StructuringError: structuring failed
        """
        if not usernames:
            raise RepositoryImportError("No GitHub accounts given")

        # Fail on a missing credential before spending GitHub quota
        self.gateway.ensure_available()

        all_repos = await self.list_repositories(usernames)
        if not all_repos:
            raise RepositoryImportError("No repositories found")

        originals = [r for r in all_repos if not r.fork]
        if not originals:
            raise RepositoryImportError("Only forked repositories found, nothing to import")

        logger.info(
            "Structuring %d repositories (%d forks skipped) for %s",
            len(originals), len(all_repos) - len(originals), ", ".join(usernames),
        )
        drafts = await self.gateway.structure_repositories(originals)
        return ImportPreview.all_selected(merge_drafts(drafts, originals))

    async def commit(self, preview: ImportPreview) -> List[Project]:
        """
        Create the selected drafts in the store, one at a time

        Not atomic: a failure leaves earlier drafts created and raises.
        """
        created = []
        for draft in preview.selected_drafts():
            project = draft.to_project(generate_local_id())
            created.append(await self.store.create_project(project))
        logger.info("Imported %d projects", len(created))
        return created
