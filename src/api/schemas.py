"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from src.ai.types import IntentCategory


class ClassifyRequest(BaseModel):
    prompt: str = Field(..., max_length=8000, description="Free-text request to classify")


class ClassifyResponse(BaseModel):
    intent: IntentCategory
    design_score: int
    logic_score: int


class DispatchRequest(BaseModel):
    """A prompt for the design/logic specialists."""

    prompt: str = Field(..., min_length=1, max_length=8000)
    context: dict[str, Any] | None = Field(
        None, description="Structured context prepended to the prompt",
    )
    intent: IntentCategory | None = Field(
        None, description="Skip classification and force this intent",
    )
    collaborate: bool = Field(
        False, description="For mixed requests, merge both specialists' opinions",
    )


class DispatchResponse(BaseModel):
    content: str
    provider_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=4000)


class ChatRequest(BaseModel):
    """Incoming message for a tenant's property chatbot."""

    message: str = Field(..., min_length=1, max_length=2000, description="The client's message")
    history: list[HistoryTurn] = Field(
        default_factory=list,
        max_length=50,
        description="Prior turns of this conversation, oldest first",
    )


class ChatResponse(BaseModel):
    reply: str = Field(..., description="The assistant's response message")
    tenant_id: str


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "realty-ai-orchestrator"
