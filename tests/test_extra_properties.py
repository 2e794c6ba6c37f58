"""
Tests for extra tool properties.
"""

import json

from mcp.types import Tool

from proto_mcp.extra_properties import (
    ExtraProperty,
    add_extra_properties,
    add_extra_properties_to_tool,
    extract_extra_properties,
)

TENANT = ExtraProperty(name="tenant", description="Tenant to act on", required=True)
TRACE = ExtraProperty(name="trace_id", description="Optional trace id")


class TestAddExtraProperties:
    def test_adds_string_properties(self):
        schema = json.dumps({
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        })

        result = json.loads(add_extra_properties(schema, [TENANT, TRACE]))

        assert result["properties"]["tenant"] == {"type": "string", "description": "Tenant to act on"}
        assert result["properties"]["trace_id"] == {"type": "string", "description": "Optional trace id"}
        assert result["required"] == ["name", "tenant"]

    def test_creates_missing_properties_and_required(self):
        result = json.loads(add_extra_properties('{"type": "object"}', [TENANT]))
        assert result == {
            "type": "object",
            "properties": {"tenant": {"type": "string", "description": "Tenant to act on"}},
            "required": ["tenant"],
        }

    def test_optional_only_adds_no_required(self):
        result = json.loads(add_extra_properties('{"type": "object"}', [TRACE]))
        assert "required" not in result

    def test_required_names_are_not_duplicated(self):
        schema = json.dumps({"type": "object", "properties": {}, "required": ["tenant"]})
        result = json.loads(add_extra_properties(schema, [TENANT]))
        assert result["required"] == ["tenant"]

    def test_no_format_annotation(self):
        result = json.loads(add_extra_properties('{"type": "object"}', [TENANT]))
        assert "format" not in result["properties"]["tenant"]

    def test_empty_property_list_returns_input(self):
        schema = '{"type":"object"}'
        assert add_extra_properties(schema, []) is schema

    def test_unparsable_input_is_returned_unchanged(self):
        assert add_extra_properties("{not json", [TENANT]) == "{not json"
        assert add_extra_properties(b"\xff\xfe", [TENANT]) == b"\xff\xfe"

    def test_non_object_document_is_returned_unchanged(self):
        assert add_extra_properties("[1, 2]", [TENANT]) == "[1, 2]"

    def test_bytes_in_bytes_out(self):
        result = add_extra_properties(b'{"type": "object"}', [TENANT])
        assert isinstance(result, bytes)
        assert "tenant" in json.loads(result)["properties"]


class TestAddExtraPropertiesToTool:
    def test_returns_augmented_copy(self):
        tool = Tool(
            name="acme_CreateItem",
            inputSchema={"type": "object", "properties": {"name": {"type": "string"}}},
        )

        augmented = add_extra_properties_to_tool(tool, [TENANT])

        assert augmented is not tool
        assert augmented.name == "acme_CreateItem"
        assert augmented.inputSchema["required"] == ["tenant"]
        assert "tenant" not in tool.inputSchema["properties"]

    def test_no_properties_returns_same_tool(self):
        tool = Tool(name="t", inputSchema={"type": "object"})
        assert add_extra_properties_to_tool(tool, []) is tool


class TestExtractExtraProperties:
    def test_splits_values_off(self):
        args = {"name": "widget", "tenant": "acme", "trace_id": "abc"}

        remaining, extras = extract_extra_properties(args, [TENANT, TRACE])

        assert remaining == {"name": "widget"}
        assert extras == {"tenant": "acme", "trace_id": "abc"}
        # Input is not modified
        assert args == {"name": "widget", "tenant": "acme", "trace_id": "abc"}

    def test_absent_properties_are_omitted(self):
        remaining, extras = extract_extra_properties({"name": "widget"}, [TENANT])
        assert remaining == {"name": "widget"}
        assert extras == {}
