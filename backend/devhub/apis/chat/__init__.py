"""
Chat API

Portfolio chat assistant:
- AI availability status and key configuration
- Streaming replies as newline-delimited JSON events
- Transcript of the current chat
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from devhub.deps import get_ai_gateway, get_chat_widget
from devhub.errors import AI_NOT_CONFIGURED, ai_not_configured
from devhub.libs.ai_gateway import AIConfigurationError, AIGateway
from devhub.libs.chat_widget import ChatWidget
from devhub.libs.models import ChatMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


class ChatStatusResponse(BaseModel):
    """Whether AI features can be used"""
    available: bool
    code: Optional[str] = None
    message: Optional[str] = None


class ConfigureRequest(BaseModel):
    """New AI credential"""
    api_key: str = Field(..., min_length=1, description="OpenAI API key")


class ChatRequest(BaseModel):
    """User message"""
    message: str = Field(..., min_length=1)


def _status(gateway: AIGateway) -> ChatStatusResponse:
    if gateway.available:
        return ChatStatusResponse(available=True)
    return ChatStatusResponse(
        available=False,
        code=AI_NOT_CONFIGURED,
        message=AIConfigurationError().message,
    )


@router.get("/status")
async def get_status(gateway: AIGateway = Depends(get_ai_gateway)) -> ChatStatusResponse:
    """AI availability. Clients show a configuration banner when unavailable."""
    return _status(gateway)


@router.post("/configure")
async def configure(request: ConfigureRequest, gateway: AIGateway = Depends(get_ai_gateway)) -> ChatStatusResponse:
    """Install an API key and re-check availability."""
    gateway.configure(request.api_key)
    logger.info("AI credential updated, available=%s", gateway.available)
    return _status(gateway)


@router.get("/transcript")
async def get_transcript(widget: ChatWidget = Depends(get_chat_widget)) -> List[ChatMessage]:
    """Messages exchanged since the server started."""
    return widget.messages


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
    widget: ChatWidget = Depends(get_chat_widget),
):
    """
    Stream the assistant's reply.

    Each line is a JSON object: ``{"type": "delta", ...}`` per fragment,
    ``{"type": "error", ...}`` with the fallback message if the stream
    failed, and a final ``{"type": "done"}``.
    """
    if not gateway.available:
        raise ai_not_configured(AIConfigurationError().message)
    if widget.is_loading:
        raise HTTPException(status_code=409, detail="A reply is already streaming")

    async def generate():
        async for event in widget.submit(request.message):
            yield json.dumps({"type": event.type, "id": event.message_id, "text": event.text}) + "\n"
        yield json.dumps({"type": "done"}) + "\n"

    return StreamingResponse(generate(), media_type="application/x-ndjson")
