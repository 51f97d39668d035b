"""Chat transcript driven by the AI gateway's streaming reply."""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import AsyncIterator, List

from devhub.libs.ai_gateway import AIGateway
from devhub.libs.models import ChatMessage, ChatRole

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Hello! I'm your AI Portfolio Navigator. I can help you find specific projects, "
    "explain the tech stack used, or summarize the developer's expertise. "
    "What would you like to explore?"
)

ERROR_TEXT = (
    "System overload. I'm having trouble reaching the neural network. "
    "Please verify API configuration."
)

BUSY_TEXT = "Still answering the previous message. Try again once it finishes."


@dataclass
class ChatEvent:
    """One update emitted while a reply streams"""
    type: str  # "delta" or "error"
    message_id: str
    text: str


def _new_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class ChatWidget:
    """Append-only transcript for one chat mount."""

    def __init__(self, gateway: AIGateway):
        self.gateway = gateway
        self.messages: List[ChatMessage] = [
            ChatMessage(id="welcome", role=ChatRole.MODEL, text=WELCOME_TEXT)
        ]
        self.is_loading = False

    async def submit(self, text: str) -> AsyncIterator[ChatEvent]:
        """
        Send a user message and stream the reply into the transcript

        A user message and an empty model message are appended, then the
        model message grows with every fragment. If the stream fails the
        partial reply is removed and a single error message is appended.
        A message sent while a reply is still streaming is not added; it
        gets a single error event instead. Never retries.
        """
        text = (text or "").strip()
        if not text:
            return
        if self.is_loading:
            logger.warning("Chat message dropped, a reply is already streaming")
            yield ChatEvent(type="error", message_id="", text=BUSY_TEXT)
            return

        history = list(self.messages)
        self.messages.append(ChatMessage(id=_new_id(), role=ChatRole.USER, text=text))
        reply = ChatMessage(id=_new_id(), role=ChatRole.MODEL, text="")
        self.messages.append(reply)
        self.is_loading = True

        try:
            async for fragment in self.gateway.stream_chat_reply(text, history):
                reply.text += fragment
                yield ChatEvent(type="delta", message_id=reply.id, text=fragment)
        except Exception as e:
            logger.error("Chat reply failed: %s", e)
            self.messages.remove(reply)
            error = ChatMessage(id=_new_id(), role=ChatRole.MODEL, text=ERROR_TEXT)
            self.messages.append(error)
            yield ChatEvent(type="error", message_id=error.id, text=ERROR_TEXT)
        finally:
            self.is_loading = False
