"""The chatbot's property tools as LangChain ``StructuredTool``s, and their safe execution.

``PROPERTY_TOOLS`` is bound to the chat model as-is: langchain-core derives
each declaration from the tool's pydantic argument struct and converts it for
whichever vendor backs the chat profile.

The acting tenant and the ``PropertyTools`` instance are never tool
arguments.  They travel in the run config (``configurable``), so the model
cannot choose whose data a tool reads.

``execute_tool_call`` is the only way a model-issued invocation reaches a
tool: it validates arguments against the tool's struct and turns every
failure into an error payload, so a bad invocation never escapes the
conversation loop as an exception.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import ToolMessage
from langchain_core.runnables import RunnableConfig
from langchain_core.tools import BaseTool, StructuredTool
from pydantic import ValidationError

from src.services.metrics import metrics
from src.tools.properties import (
    AvailableTimesQuery,
    PropertyLookup,
    PropertyTools,
    SearchCriteria,
    ViewingRequest,
    get_available_times,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolInvocation:
    """One function call requested by the model."""

    id: str
    function_name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    malformed: bool = False

    @classmethod
    def from_tool_call(cls, tool_call: Mapping[str, Any]) -> ToolInvocation:
        """Build from a LangChain ``tool_calls`` / ``invalid_tool_calls`` entry."""
        args = tool_call.get("args")
        if args is None:
            args = {}
        elif isinstance(args, str):
            # invalid_tool_calls keep the raw argument string
            try:
                args = json.loads(args) if args.strip() else {}
            except ValueError:
                args = None
        if not isinstance(args, Mapping):
            return cls(
                id=tool_call.get("id") or "",
                function_name=tool_call.get("name") or "",
                malformed=True,
            )
        return cls(
            id=tool_call.get("id") or "",
            function_name=tool_call.get("name") or "",
            arguments=args,
        )


@dataclass(frozen=True)
class ToolResult:
    """The JSON payload answering one ``ToolInvocation``."""

    invocation_id: str
    payload: dict[str, Any]

    def to_message(self, name: str | None = None) -> ToolMessage:
        return ToolMessage(
            content=json.dumps(self.payload, ensure_ascii=False, default=str),
            tool_call_id=self.invocation_id,
            name=name,
        )


# ── Tool functions ───────────────────────────────────────────────────


def _bound(config: RunnableConfig) -> tuple[PropertyTools, str]:
    configurable = config.get("configurable") or {}
    return configurable["property_tools"], configurable["tenant_id"]


def _search_properties(config: RunnableConfig, **criteria: Any) -> dict[str, Any]:
    tools, tenant_id = _bound(config)
    return tools.search_units(tenant_id, SearchCriteria.model_validate(criteria))


def _get_property_details(config: RunnableConfig, **lookup: Any) -> dict[str, Any]:
    tools, tenant_id = _bound(config)
    return tools.get_unit_details(tenant_id, PropertyLookup.model_validate(lookup))


def _schedule_viewing(config: RunnableConfig, **request: Any) -> dict[str, Any]:
    tools, tenant_id = _bound(config)
    return tools.schedule_viewing(tenant_id, ViewingRequest.model_validate(request))


def _get_available_times(**query: Any) -> dict[str, Any]:
    return get_available_times(AvailableTimesQuery.model_validate(query))


PROPERTY_TOOLS: list[BaseTool] = [
    StructuredTool.from_function(
        func=_search_properties,
        name="search_properties",
        description=(
            "Buscar propiedades disponibles según criterios como precio, ubicación, "
            "número de recámaras, tipo de propiedad"
        ),
        args_schema=SearchCriteria,
    ),
    StructuredTool.from_function(
        func=_get_property_details,
        name="get_property_details",
        description="Obtener detalles completos de una propiedad específica por su ID o número de unidad",
        args_schema=PropertyLookup,
    ),
    StructuredTool.from_function(
        func=_schedule_viewing,
        name="schedule_viewing",
        description=(
            "Agendar una cita para ver una propiedad. Requiere información del cliente "
            "y fecha/hora deseada."
        ),
        args_schema=ViewingRequest,
    ),
    StructuredTool.from_function(
        func=_get_available_times,
        name="get_available_times",
        description="Obtener horarios disponibles para agendar citas en una fecha específica",
        args_schema=AvailableTimesQuery,
    ),
]

TOOLS_BY_NAME: dict[str, BaseTool] = {tool.name: tool for tool in PROPERTY_TOOLS}


# ── Execution ────────────────────────────────────────────────────────


def _error(message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error": message, **extra}


def execute_tool_call(
    tools: PropertyTools,
    tenant_id: str,
    invocation: ToolInvocation,
) -> ToolResult:
    """Run one invocation for *tenant_id*.  Never raises."""
    tool = TOOLS_BY_NAME.get(invocation.function_name)
    if tool is None:
        logger.warning("Model requested unknown tool %r", invocation.function_name)
        metrics.record_failure("tools", invocation.function_name or "unknown", "UnknownTool")
        return ToolResult(
            invocation.id, _error(f"Unknown function: {invocation.function_name}"),
        )

    if invocation.malformed:
        logger.info("Unparseable arguments for %s", tool.name)
        metrics.record_failure("tools", tool.name, "MalformedArguments")
        return ToolResult(invocation.id, _error("Arguments are not a valid JSON object"))

    # Validated here, with camelCase aliases, so problems can be reported back
    try:
        args = tool.args_schema.model_validate(dict(invocation.arguments))
    except ValidationError as exc:
        logger.info("Invalid arguments for %s: %s", tool.name, exc)
        metrics.record_failure("tools", tool.name, "ValidationError")
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in exc.errors()
        ]
        return ToolResult(invocation.id, _error("Invalid arguments", details=problems))

    config: RunnableConfig = {
        "configurable": {"tenant_id": tenant_id, "property_tools": tools},
    }
    try:
        with metrics.timed("tools", tool.name):
            payload = tool.invoke(args.model_dump(), config=config)
    except Exception as exc:
        logger.exception("Tool %s failed for tenant %s", tool.name, tenant_id)
        return ToolResult(
            invocation.id,
            _error(f"La función {tool.name} no está disponible en este momento ({type(exc).__name__})."),
        )

    return ToolResult(invocation.id, payload)
