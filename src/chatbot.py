"""LangGraph tool-calling loop for the public property chatbot.

Architecture:
  A bounded StateGraph with three nodes:

    1. **agent**     — chat model call with the property tools declared
    2. **tools**     — executes every requested invocation, in order, for the
                       acting tenant, appending one ToolMessage per invocation
    3. **finalize**  — one more chat model call *without* tools, so the model
                       has to answer in natural language

  Routing:
    agent → (no tool calls?) → END                 (direct answer)
    agent → (tool calls?)    → tools → finalize → END   (tool-augmented answer)

  Unlike an open ReAct loop there is no edge back to ``agent``: a user turn
  costs at most two model calls, however many tools the first call requests.

  The tenant id travels in the graph state, never in tool arguments, so the
  model cannot choose whose data a tool reads.  Conversation history is owned
  by the caller and passed in on every turn.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Annotated, Any

from langchain_core.messages import (
    AIMessage,
    AnyMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langgraph.graph import END, StateGraph
from langgraph.graph.message import add_messages
from typing_extensions import TypedDict

from src.ai.providers import ProviderAdapter, extract_text
from src.prompts import get_chatbot_system_prompt
from src.services.storage import TenantStore
from src.tools.properties import PropertyTools
from src.tools.registry import PROPERTY_TOOLS, ToolInvocation, execute_tool_call

logger = logging.getLogger(__name__)

DEFAULT_AGENCY_NAME = "Agencia"
FALLBACK_REPLY = "Lo siento, no pude procesar tu mensaje. Por favor, intenta de nuevo."


class ChatState(TypedDict):
    """State flowing through the graph.

    ``messages`` uses the ``add_messages`` reducer so each node appends.
    ``tenant_id`` is set once by the caller and read by the tools node.
    """

    messages: Annotated[list[AnyMessage], add_messages]
    tenant_id: str


def pending_tool_calls(message: AnyMessage) -> list[dict[str, Any]]:
    """All invocations an AI message requested, malformed ones included.

    Malformed calls still need an answer: the provider expects one tool
    result per invocation id.
    """
    if not isinstance(message, AIMessage):
        return []
    return [*message.tool_calls, *message.invalid_tool_calls]


# ── Nodes ────────────────────────────────────────────────────────────


def _make_agent_node(adapter: ProviderAdapter):
    def agent_node(state: ChatState) -> dict:
        """First model call, tools enabled."""
        response = adapter.chat(state["messages"], tools=PROPERTY_TOOLS)
        return {"messages": [response]}

    return agent_node


def _make_tools_node(tools: PropertyTools):
    def tools_node(state: ChatState) -> dict:
        """Execute each invocation sequentially, in the order the model issued them."""
        tenant_id = state["tenant_id"]
        results: list[ToolMessage] = []
        for tool_call in pending_tool_calls(state["messages"][-1]):
            invocation = ToolInvocation.from_tool_call(tool_call)
            if not invocation.id:
                # A result needs an invocation id to be matched to
                logger.warning(
                    "Skipping %s invocation without an id for %s",
                    invocation.function_name or "unnamed", tenant_id,
                )
                continue
            logger.debug("Executing %s (%s) for %s", invocation.function_name, invocation.id, tenant_id)
            result = execute_tool_call(tools, tenant_id, invocation)
            results.append(result.to_message(name=invocation.function_name or None))
        return {"messages": results}

    return tools_node


def _make_finalize_node(adapter: ProviderAdapter):
    def finalize_node(state: ChatState) -> dict:
        """Concluding model call, tools disabled."""
        response = adapter.chat(state["messages"])
        return {"messages": [response]}

    return finalize_node


def should_use_tools(state: ChatState) -> str:
    """Route to ``tools`` if the last message requested any invocation."""
    if pending_tool_calls(state["messages"][-1]):
        return "tools"
    return END


# ── Graph assembly ───────────────────────────────────────────────────


def create_chatbot_graph(adapter: ProviderAdapter, tools: PropertyTools):
    """Build and compile the bounded tool-calling graph.

    Invoke with::

        graph.invoke({"messages": [SystemMessage(...), HumanMessage(...)],
                      "tenant_id": "agency-1"})
    """
    graph = StateGraph(ChatState)

    graph.add_node("agent", _make_agent_node(adapter))
    graph.add_node("tools", _make_tools_node(tools))
    graph.add_node("finalize", _make_finalize_node(adapter))

    graph.set_entry_point("agent")
    graph.add_conditional_edges("agent", should_use_tools, {"tools": "tools", END: END})
    graph.add_edge("tools", "finalize")
    graph.add_edge("finalize", END)

    return graph.compile()


def history_to_messages(history: Sequence[Mapping[str, Any]] | None) -> list[AnyMessage]:
    """Convert ``{"role", "content"}`` turns into LangChain messages.

    Only ``user`` and ``assistant`` turns are accepted from callers; system
    and tool messages are produced by this module alone.
    """
    messages: list[AnyMessage] = []
    for turn in history or ():
        role = turn.get("role")
        content = str(turn.get("content") or "")
        if role == "user":
            messages.append(HumanMessage(content=content))
        elif role == "assistant":
            messages.append(AIMessage(content=content))
        else:
            logger.warning("Skipping history turn with unsupported role %r", role)
    return messages


class PropertyChatbot:
    """Runs one conversation turn for a tenant's public chatbot."""

    def __init__(
        self,
        adapter: ProviderAdapter,
        store: TenantStore,
        *,
        tools: PropertyTools | None = None,
    ):
        self._store = store
        self._graph = create_chatbot_graph(adapter, tools or PropertyTools(store))

    def _agency_name(self, tenant_id: str) -> str:
        try:
            return self._store.get_tenant_name(tenant_id) or DEFAULT_AGENCY_NAME
        except Exception as exc:
            logger.warning("Agency lookup for %s failed, using default name: %s", tenant_id, exc)
            return DEFAULT_AGENCY_NAME

    def run_turn(
        self,
        tenant_id: str,
        user_message: str,
        prior_history: Sequence[Mapping[str, Any]] | None = None,
    ) -> str:
        """Answer *user_message*; raises ``ProviderError`` if a model call fails."""
        messages: list[AnyMessage] = [
            SystemMessage(content=get_chatbot_system_prompt(self._agency_name(tenant_id))),
            *history_to_messages(prior_history),
            HumanMessage(content=user_message),
        ]
        result = self._graph.invoke({"messages": messages, "tenant_id": tenant_id})

        final = result["messages"][-1]
        tool_results = sum(isinstance(m, ToolMessage) for m in result["messages"])
        logger.info(
            "Chatbot turn for %s finished as %s (%d tool result(s))",
            tenant_id,
            "tool-augmented-answer" if tool_results else "direct-answer",
            tool_results,
        )

        reply = extract_text(final.content) if isinstance(final, AIMessage) else ""
        return reply.strip() or FALLBACK_REPLY
