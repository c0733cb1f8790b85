"""Provider adapters: a uniform call shape over LangChain chat models.

A ``ProviderAdapter`` wraps one configured chat model (Anthropic or OpenAI)
and offers two capabilities:

* ``invoke(prompt, system_instruction)`` — single-shot text generation
* ``chat(messages, tools)`` — message-sequence calls, optionally with tool
  declarations bound, used by the property chatbot

A ``SpecializedAdapter`` layers a fixed domain system instruction and
optional structured context on top of a base adapter.

Every failure of the underlying client (transport, auth, quota, timeout) is
re-raised as ``ProviderError``; nothing is retried here.  The client-level
timeout and retry count come from ``config``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, AnyMessage, HumanMessage, SystemMessage
from langchain_core.tools import BaseTool
from langchain_openai import ChatOpenAI

from src.ai.types import AIResponse
from src.config import LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS, api_key_for
from src.prompts import DESIGN_SYSTEM_INSTRUCTION, LOGIC_SYSTEM_INSTRUCTION
from src.services.metrics import metrics

logger = logging.getLogger(__name__)

# Returned in place of an empty completion so callers never get blank text.
NO_RESPONSE_FALLBACK = "No se pudo generar respuesta"


class ProviderError(Exception):
    """Raised when a remote model call fails or returns unusable output."""

    def __init__(self, message: str, provider_id: str | None = None):
        self.provider_id = provider_id
        super().__init__(message)


# ── Model construction ──────────────────────────────────────────────


def build_chat_model(
    vendor: str,
    model: str,
    *,
    temperature: float = 0.7,
    max_tokens: int = 1024,
) -> BaseChatModel:
    """Build a LangChain chat model for *vendor* with the configured timeout."""
    if vendor == "anthropic":
        return ChatAnthropic(
            model=model,
            api_key=api_key_for(vendor),
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=LLM_TIMEOUT_SECONDS,
            max_retries=LLM_MAX_RETRIES,
        )
    if vendor == "openai":
        return ChatOpenAI(
            model=model,
            api_key=api_key_for(vendor),
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=LLM_TIMEOUT_SECONDS,
            max_retries=LLM_MAX_RETRIES,
        )
    raise ValueError(f"Unsupported model vendor: {vendor!r}")


def extract_text(content: Any) -> str:
    """Flatten AIMessage content (a string or a list of content blocks) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
            elif isinstance(block, dict) and block.get("type") in ("tool_use", "thinking"):
                continue
            else:
                raise ProviderError(f"Unparseable content block: {block!r}")
        return "".join(parts)
    raise ProviderError(f"Unparseable model output of type {type(content).__name__}")


# ── Adapters ────────────────────────────────────────────────────────


class ProviderAdapter:
    """Uniform wrapper around one remote chat model."""

    def __init__(
        self,
        provider_id: str,
        llm: BaseChatModel,
        *,
        model_name: str = "",
        profile: str = "default",
    ):
        self.provider_id = provider_id
        self.model_name = model_name
        self.profile = profile
        self._llm = llm

    def invoke(self, prompt: str, system_instruction: str | None = None) -> AIResponse:
        """Generate text for *prompt*.  Empty output becomes the fallback sentinel."""
        messages: list[AnyMessage] = []
        if system_instruction:
            messages.append(SystemMessage(content=system_instruction))
        messages.append(HumanMessage(content=prompt))

        reply = self._call(messages, tools=None, kind="invoke")
        try:
            text = extract_text(reply.content)
        except ProviderError as exc:
            exc.provider_id = self.provider_id
            raise

        if not text.strip():
            logger.warning("%s returned an empty completion; using fallback text", self.provider_id)
            text = NO_RESPONSE_FALLBACK

        metadata: dict[str, Any] = {"model": self.model_name, "profile": self.profile}
        usage = getattr(reply, "usage_metadata", None)
        if usage:
            metadata["usage"] = dict(usage)
        return AIResponse(content=text, provider_id=self.provider_id, metadata=metadata)

    def chat(
        self,
        messages: Sequence[AnyMessage],
        tools: Sequence[BaseTool | dict[str, Any]] | None = None,
    ) -> AIMessage:
        """Send a full message sequence, with tool declarations bound when given."""
        return self._call(list(messages), tools=tools, kind="chat")

    def _call(
        self,
        messages: list[AnyMessage],
        *,
        tools: Sequence[BaseTool | dict[str, Any]] | None,
        kind: str,
    ) -> AIMessage:
        llm = self._llm.bind_tools(list(tools)) if tools else self._llm
        operation = f"{self.profile}_{kind}"
        logger.debug(
            "%s %s — model: %s, messages: %d, tools: %d",
            self.provider_id, operation, self.model_name, len(messages), len(tools or ()),
        )
        try:
            with metrics.timed(self.provider_id, operation):
                return llm.invoke(messages)
        except Exception as exc:
            logger.error("%s %s failed: %s", self.provider_id, operation, exc)
            raise ProviderError(
                f"{self.provider_id} error: {exc}", provider_id=self.provider_id,
            ) from exc


class SpecializedAdapter:
    """A base adapter plus a fixed system instruction and context merging."""

    def __init__(self, base: ProviderAdapter, system_instruction: str):
        self._base = base
        self._system_instruction = system_instruction

    @property
    def provider_id(self) -> str:
        return self._base.provider_id

    def analyze(self, prompt: str, context: dict[str, Any] | None = None) -> AIResponse:
        """Answer *prompt*, prefixing the JSON-serialised *context* when present."""
        if context:
            serialized = json.dumps(context, ensure_ascii=False, default=str)
            prompt = f"Contexto: {serialized}\n\nConsulta: {prompt}"
        return self._base.invoke(prompt, self._system_instruction)


def build_adapter(profile: str, vendor: str, model: str, **model_kwargs: Any) -> ProviderAdapter:
    """Construct a ``ProviderAdapter`` for a configured model profile."""
    llm = build_chat_model(vendor, model, **model_kwargs)
    return ProviderAdapter(vendor, llm, model_name=model, profile=profile)


def design_adapter(base: ProviderAdapter) -> SpecializedAdapter:
    """The UX/UI specialist."""
    return SpecializedAdapter(base, DESIGN_SYSTEM_INSTRUCTION)


def logic_adapter(base: ProviderAdapter) -> SpecializedAdapter:
    """The business-logic specialist."""
    return SpecializedAdapter(base, LOGIC_SYSTEM_INSTRUCTION)
