"""
AI Gateway

Wraps the OpenAI client for two jobs:
- a streaming chat whose conversation is primed with the current catalog
- a one-shot structured call turning repositories into project drafts

The chat conversation is owned by the gateway, created lazily on first use
and dropped after any failure so the next message starts a fresh one.
"""

import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from openai import AsyncOpenAI, AuthenticationError
from pydantic import ValidationError

from devhub.libs.ai_system_prompt import (
    STRUCTURING_SYSTEM_PROMPT,
    get_chat_system_prompt,
    get_project_draft_schema,
    get_structuring_prompt,
)
from devhub.libs.models import ChatMessage, ChatRole, GitHubRepo, Project, ProjectDraft, ProjectDraftBatch

logger = logging.getLogger(__name__)

CatalogLoader = Callable[[], Awaitable[List[Project]]]
ClientFactory = Callable[[str], Any]


class AIConfigurationError(Exception):
    """The AI credential is missing or was rejected"""
    def __init__(self, message: str = "AI service is not configured. Provide an OpenAI API key."):
        self.message = message
        super().__init__(self.message)


class StructuringError(Exception):
    """The structuring call failed or returned data outside the schema"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ChatSession:
    """Conversation state for the chat assistant."""

    def __init__(self, system_instruction: str, history: Optional[List[ChatMessage]] = None):
        self.system_instruction = system_instruction
        self.history: List[Dict[str, str]] = []
        for msg in history or []:
            if msg.text:
                self.history.append({
                    "role": "user" if msg.role is ChatRole.USER else "assistant",
                    "content": msg.text,
                })

    def messages_for(self, message: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_instruction},
            *self.history,
            {"role": "user", "content": message},
        ]

    def record_turn(self, message: str, reply: str) -> None:
        self.history.append({"role": "user", "content": message})
        self.history.append({"role": "assistant", "content": reply})


class AIGateway:
    """Owns the AI client, the chat session and the availability flag."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        catalog_loader: Optional[CatalogLoader] = None,
        chat_model: str = "gpt-4o-mini",
        structuring_model: str = "gpt-4o",
        client_factory: Optional[ClientFactory] = None,
    ):
        """
        Args:
            api_key: OpenAI API key; without it AI features are unavailable
            catalog_loader: Coroutine returning the catalog to embed in the chat prompt
            chat_model: Model used for the chat assistant
            structuring_model: Model used for repository structuring
            client_factory: Builds the client from the key (tests pass a fake)
        """
        self.catalog_loader = catalog_loader
        self.chat_model = chat_model
        self.structuring_model = structuring_model
        self._client_factory = client_factory or (lambda key: AsyncOpenAI(api_key=key))
        self._api_key: Optional[str] = None
        self._client = None
        self._session: Optional[ChatSession] = None
        self.available = False
        self.configure(api_key)

    def configure(self, api_key: Optional[str]) -> bool:
        """Install a new credential, drop client and session, re-check availability."""
        self._api_key = api_key.strip() if api_key and api_key.strip() else None
        self._client = None
        self._session = None
        self.available = self._api_key is not None
        if not self.available:
            logger.warning("OpenAI API key not set, AI features disabled")
        return self.available

    @property
    def has_session(self) -> bool:
        return self._session is not None

    def reset_session(self) -> None:
        self._session = None

    def _credential_rejected(self, error: Exception) -> None:
        logger.error("OpenAI rejected the API key: %s", error)
        self._client = None
        self.reset_session()
        self.available = False

    def ensure_available(self) -> None:
        if not self.available:
            raise AIConfigurationError()

    def _require_client(self):
        self.ensure_available()
        if self._client is None:
            self._client = self._client_factory(self._api_key)
        return self._client

    async def _ensure_session(self, history: Optional[List[ChatMessage]]) -> ChatSession:
        if self._session is None:
            projects = await self.catalog_loader() if self.catalog_loader else []
            self._session = ChatSession(get_chat_system_prompt(projects), history)
            logger.info("Started chat session with %d catalog entries", len(projects))
        return self._session

    async def stream_chat_reply(
        self,
        message: str,
        history: Optional[List[ChatMessage]] = None,
    ) -> AsyncIterator[str]:
        """
        Send a message in the ongoing conversation and stream the reply

        Args:
            message: The user's message
            history: Prior transcript, used only to seed a new session

        Yields:
            Text fragments of the reply, in order
        """
        client = self._require_client()
        session = await self._ensure_session(history)

        parts: List[str] = []
        try:
            stream = await client.chat.completions.create(
                model=self.chat_model,
                messages=session.messages_for(message),
                temperature=0.7,
                top_p=0.95,
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content or ""
                if text:
                    parts.append(text)
                    yield text
        except AuthenticationError as e:
            self._credential_rejected(e)
            raise AIConfigurationError("OpenAI rejected the configured API key.") from e
        except Exception as e:
            logger.error("Chat stream error: %s", e)
            self.reset_session()
            raise

        session.record_turn(message, "".join(parts))

    async def structure_repositories(self, repos: List[GitHubRepo]) -> List[ProjectDraft]:
        """
        Turn repository metadata into project drafts

        Args:
            repos: Repositories to describe

        Returns:
            One draft per entry the model returned

        Raises:
            AIConfigurationError: no credential
            StructuringError: call failed or output did not match the schema
        """
        client = self._require_client()
        if not repos:
            return []

        try:
            response = await client.chat.completions.create(
                model=self.structuring_model,
                messages=[
                    {"role": "system", "content": STRUCTURING_SYSTEM_PROMPT},
                    {"role": "user", "content": get_structuring_prompt(repos)},
                ],
                temperature=0.2,
                response_format={"type": "json_schema", "json_schema": get_project_draft_schema()},
            )
        except AuthenticationError as e:
            self._credential_rejected(e)
            raise AIConfigurationError("OpenAI rejected the configured API key.") from e
        except Exception as e:
            logger.error("Structuring call failed: %s", e)
            raise StructuringError(f"AI structuring request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        try:
            batch = ProjectDraftBatch.model_validate(json.loads(content or ""))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.error("Structuring returned invalid data: %s", e)
            raise StructuringError("AI returned data that does not match the project schema") from e

        logger.info("Structured %d repositories into %d drafts", len(repos), len(batch.projects))
        return batch.projects
