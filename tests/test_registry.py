"""Tests for the property tools and safe tool execution."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

from langchain_core.tools import StructuredTool
from langchain_core.utils.function_calling import convert_to_openai_tool

from src.tools.properties import PropertyTools
from src.tools.registry import (
    PROPERTY_TOOLS,
    TOOLS_BY_NAME,
    ToolInvocation,
    ToolResult,
    execute_tool_call,
)


def _parameters(name: str) -> dict:
    return convert_to_openai_tool(TOOLS_BY_NAME[name])["function"]["parameters"]


class TestPropertyTools:
    def test_four_tools_in_order(self):
        assert [tool.name for tool in PROPERTY_TOOLS] == [
            "search_properties",
            "get_property_details",
            "schedule_viewing",
            "get_available_times",
        ]
        assert all(isinstance(tool, StructuredTool) for tool in PROPERTY_TOOLS)

    def test_schedule_viewing_requires_name_and_phone(self):
        params = _parameters("schedule_viewing")
        assert len(params["required"]) == 2
        assert len(params["properties"]) > 2

    def test_tenant_is_never_a_parameter(self):
        for tool in PROPERTY_TOOLS:
            props = _parameters(tool.name).get("properties", {})
            for hidden in ("agencyId", "tenantId", "tenant_id", "config", "property_tools"):
                assert hidden not in props

    def test_tool_reads_tenant_from_run_config(self, store):
        payload = TOOLS_BY_NAME["get_property_details"].invoke(
            {"unit_id": "x1"},
            config={"configurable": {"tenant_id": "agency-2", "property_tools": PropertyTools(store)}},
        )
        assert payload["success"] is True


class TestToolInvocation:
    def test_from_tool_call(self):
        invocation = ToolInvocation.from_tool_call(
            {"name": "search_properties", "args": {"bedrooms": 2}, "id": "call_1"}
        )
        assert invocation.function_name == "search_properties"
        assert invocation.arguments == {"bedrooms": 2}
        assert invocation.malformed is False

    def test_string_args_are_parsed(self):
        invocation = ToolInvocation.from_tool_call(
            {"name": "search_properties", "args": '{"bedrooms": 2}', "id": "call_1"}
        )
        assert invocation.arguments == {"bedrooms": 2}

    def test_unparseable_args_are_malformed(self):
        invocation = ToolInvocation.from_tool_call(
            {"name": "search_properties", "args": "{bedrooms: 2", "id": "call_1"}
        )
        assert invocation.malformed is True

    def test_non_object_args_are_malformed(self):
        invocation = ToolInvocation.from_tool_call({"name": "x", "args": "[1, 2]", "id": "c"})
        assert invocation.malformed is True


class TestToolResult:
    def test_to_message_serialises_payload(self):
        message = ToolResult("call_9", {"success": True, "message": "¡Listo!"}).to_message("x")
        assert message.tool_call_id == "call_9"
        assert json.loads(message.content) == {"success": True, "message": "¡Listo!"}
        assert "¡Listo!" in message.content


class TestExecuteToolCall:
    def test_dispatches_with_tenant_from_caller(self, store):
        tools = PropertyTools(store)
        invocation = ToolInvocation("c1", "get_property_details", {"unitId": "x1"})

        result = execute_tool_call(tools, "agency-1", invocation)

        assert result.invocation_id == "c1"
        assert result.payload["success"] is False

    def test_search_returns_payload(self, store):
        invocation = ToolInvocation("c1", "search_properties", {"location": "La Veleta"})
        result = execute_tool_call(PropertyTools(store), "agency-1", invocation)
        assert result.payload["count"] == 1

    def test_unknown_function(self, store):
        result = execute_tool_call(PropertyTools(store), "agency-1", ToolInvocation("c1", "delete_all"))
        assert result.payload == {"success": False, "error": "Unknown function: delete_all"}

    def test_malformed_arguments_do_not_run_the_tool(self):
        tools = MagicMock()
        invocation = ToolInvocation("c1", "search_properties", malformed=True)

        result = execute_tool_call(tools, "agency-1", invocation)

        assert result.payload["success"] is False
        tools.search_units.assert_not_called()

    def test_invalid_arguments_report_details(self, store):
        invocation = ToolInvocation("c1", "schedule_viewing", {"clientName": "Ana"})
        result = execute_tool_call(PropertyTools(store), "agency-1", invocation)
        assert result.payload["error"] == "Invalid arguments"
        assert any("clientPhone" in d for d in result.payload["details"])

    def test_handler_exception_becomes_error_payload(self):
        tools = MagicMock()
        tools.search_units.side_effect = RuntimeError("connection reset")

        result = execute_tool_call(tools, "agency-1", ToolInvocation("c1", "search_properties", {}))

        assert result.payload["success"] is False
        assert "search_properties" in result.payload["error"]
        assert "connection reset" not in result.payload["error"]

    def test_available_times_needs_no_store(self):
        tools = MagicMock()
        result = execute_tool_call(
            tools, "agency-1", ToolInvocation("c1", "get_available_times", {"date": "2026-03-14"}),
        )
        assert result.payload["date"] == "2026-03-14"
        assert tools.method_calls == []
