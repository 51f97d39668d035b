"""Process-wide service instances, injected into routers with ``Depends``."""

from functools import lru_cache

from fastapi import Depends

from devhub.config import Settings
from devhub.libs.ai_gateway import AIGateway
from devhub.libs.asset_storage import AssetStorage
from devhub.libs.chat_widget import ChatWidget
from devhub.libs.database import get_db_connection
from devhub.libs.github_client import GitHubClient
from devhub.libs.project_store import ProjectStore
from devhub.libs.repo_importer import RepositoryImporter


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_project_store() -> ProjectStore:
    settings = get_settings()
    assets = AssetStorage(
        base_url=settings.storage_url,
        bucket=settings.storage_bucket,
        api_key=settings.storage_key,
    )
    return ProjectStore(
        connect=lambda: get_db_connection(settings.database_url),
        assets=assets,
        fetch_timeout=settings.catalog_fetch_timeout,
    )


@lru_cache
def get_ai_gateway() -> AIGateway:
    settings = get_settings()
    return AIGateway(
        api_key=settings.openai_api_key,
        catalog_loader=get_project_store().fetch_projects,
        chat_model=settings.chat_model,
        structuring_model=settings.structuring_model,
    )


@lru_cache
def get_chat_widget() -> ChatWidget:
    return ChatWidget(get_ai_gateway())


@lru_cache
def get_github_client() -> GitHubClient:
    return GitHubClient(token=get_settings().github_token)


def get_repository_importer(
    github: GitHubClient = Depends(get_github_client),
    gateway: AIGateway = Depends(get_ai_gateway),
    store: ProjectStore = Depends(get_project_store),
) -> RepositoryImporter:
    return RepositoryImporter(github, gateway, store)
