"""FastAPI route definitions for the orchestration core."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from src.ai.classifier import classify, score
from src.ai.providers import ProviderError
from src.ai.types import AIRequest
from src.api.schemas import (
    ChatRequest,
    ChatResponse,
    ClassifyRequest,
    ClassifyResponse,
    DispatchRequest,
    DispatchResponse,
    HealthResponse,
)
from src.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

_RETRY_DETAIL = "The AI service could not process the request. Please try again."


def _get_orchestrator(request: Request) -> Orchestrator:
    """Retrieve the orchestrator built during the FastAPI lifespan."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=503,
            detail="The service is still starting up. Please try again in a moment.",
        )
    return orchestrator


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse()


@router.post("/ai/classify", response_model=ClassifyResponse)
async def classify_prompt(request: ClassifyRequest):
    """Classify a prompt without calling any model."""
    scores = score(request.prompt)
    return ClassifyResponse(
        intent=classify(request.prompt),
        design_score=scores.design,
        logic_score=scores.logic,
    )


@router.post("/ai/dispatch", response_model=DispatchResponse)
async def dispatch(request: DispatchRequest, http_request: Request):
    """Route a prompt to the design specialist, the logic specialist, or both.

    Model calls are blocking, so they run in the default thread pool.
    """
    orchestrator = _get_orchestrator(http_request)
    request_id = getattr(http_request.state, "request_id", "?")
    ai_request = AIRequest(
        prompt=request.prompt,
        context=request.context,
        intent=request.intent,
        collaborate=request.collaborate,
    )

    try:
        response = await asyncio.to_thread(orchestrator.dispatcher.dispatch, ai_request)
    except ProviderError as e:
        logger.error("[%s] Provider failure during dispatch: %s", request_id, e)
        raise HTTPException(status_code=502, detail=_RETRY_DETAIL) from e
    except Exception as e:
        logger.exception("[%s] Error processing dispatch request", request_id)
        raise HTTPException(
            status_code=500,
            detail="An internal error occurred. Please try again.",
        ) from e

    return DispatchResponse(
        content=response.content,
        provider_id=response.provider_id,
        metadata=response.metadata,
    )


@router.post("/chatbot/{tenant_id}/messages", response_model=ChatResponse)
async def chatbot_message(tenant_id: str, request: ChatRequest, http_request: Request):
    """Run one property-chatbot turn for *tenant_id*."""
    orchestrator = _get_orchestrator(http_request)
    request_id = getattr(http_request.state, "request_id", "?")
    history = [turn.model_dump() for turn in request.history]

    try:
        reply = await asyncio.to_thread(
            orchestrator.chatbot.run_turn, tenant_id, request.message, history,
        )
    except ProviderError as e:
        logger.error("[%s] Provider failure in chatbot turn: %s", request_id, e)
        raise HTTPException(status_code=502, detail=_RETRY_DETAIL) from e
    except Exception as e:
        logger.exception("[%s] Error processing chatbot message", request_id)
        raise HTTPException(
            status_code=500,
            detail="An internal error occurred. Please try again.",
        ) from e

    return ChatResponse(reply=reply, tenant_id=tenant_id)
