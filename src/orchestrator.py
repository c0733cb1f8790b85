"""Composition root: build every adapter once and wire the core together.

Nothing in the core reaches for a global model client.  ``create_orchestrator``
constructs the three model profiles from ``config`` and hands them to the
dispatcher and the chatbot; tests build an ``Orchestrator`` directly with
fake adapters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.ai.collaboration import CollaborationSynthesizer
from src.ai.dispatcher import RequestDispatcher
from src.ai.providers import build_adapter, design_adapter, logic_adapter
from src.ai.types import IntentCategory
from src.chatbot import PropertyChatbot
from src.config import (
    CHAT_MODEL_NAME,
    CHAT_PROVIDER,
    DESIGN_MODEL_NAME,
    DESIGN_PROVIDER,
    LOGIC_MODEL_NAME,
    LOGIC_PROVIDER,
    MIXED_INTENT_ROUTE,
    STORAGE_API_URL,
)
from src.services.storage import InMemoryTenantStore, TenantStore
from src.services.storage_client import get_storage_client

logger = logging.getLogger(__name__)


@dataclass
class Orchestrator:
    """The two upward-facing entry points of the core."""

    dispatcher: RequestDispatcher
    chatbot: PropertyChatbot


def _default_store() -> TenantStore:
    if STORAGE_API_URL:
        logger.info("Using storage API at %s", STORAGE_API_URL)
        return get_storage_client()
    logger.warning("STORAGE_API_URL not set; using an empty in-memory store")
    return InMemoryTenantStore()


def create_orchestrator(store: TenantStore | None = None) -> Orchestrator:
    """Build adapters for the design, logic and chat profiles and wire them up."""
    design = design_adapter(build_adapter("design", DESIGN_PROVIDER, DESIGN_MODEL_NAME))
    logic = logic_adapter(build_adapter("logic", LOGIC_PROVIDER, LOGIC_MODEL_NAME))
    chat = build_adapter("chat", CHAT_PROVIDER, CHAT_MODEL_NAME, max_tokens=1000)

    dispatcher = RequestDispatcher(
        design,
        logic,
        synthesizer=CollaborationSynthesizer(design, logic),
        mixed_route=IntentCategory(MIXED_INTENT_ROUTE),
    )
    chatbot = PropertyChatbot(chat, store or _default_store())

    logger.debug(
        "Orchestrator ready — design: %s/%s, logic: %s/%s, chat: %s/%s",
        DESIGN_PROVIDER, DESIGN_MODEL_NAME,
        LOGIC_PROVIDER, LOGIC_MODEL_NAME,
        CHAT_PROVIDER, CHAT_MODEL_NAME,
    )
    return Orchestrator(dispatcher=dispatcher, chatbot=chatbot)
