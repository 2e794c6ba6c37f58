"""
Extra Tool Properties

Extra properties are string parameters that are not part of the request
message, e.g. a tenant or a base URL the caller must supply with every call.
They are merged into the serialized tool schema at registration time and
split off the arguments again before the request is decoded.
"""

import json
from typing import Union

from mcp.types import Tool
from pydantic import BaseModel

SchemaDocument = Union[str, bytes]


class ExtraProperty(BaseModel):
    """A string parameter added to a tool schema."""

    name: str
    description: str = ""
    required: bool = False


def add_extra_properties(
    schema_json: SchemaDocument,
    properties: list[ExtraProperty],
) -> SchemaDocument:
    """
    Merge extra string properties into a serialized JSON Schema.

    Each property is added to "properties" as a plain string field (no format
    annotation). Required names are appended after the existing ones.

    Args:
        schema_json: Serialized schema document (str or bytes)
        properties: Properties to add

    Returns:
        The re-serialized document, of the same type as the input. If the
        input cannot be parsed as a JSON object it is returned unchanged.

    Example:
        >>> add_extra_properties('{"type": "object"}', [ExtraProperty(name="tenant", required=True)])
        '{"type": "object", "properties": {"tenant": {"type": "string", "description": ""}}, "required": ["tenant"]}'
    """
    if not properties:
        return schema_json

    try:
        schema = json.loads(schema_json)
    except ValueError:
        return schema_json

    if not isinstance(schema, dict):
        return schema_json

    schema = _merge_properties(schema, properties)

    serialized = json.dumps(schema)
    if isinstance(schema_json, bytes):
        return serialized.encode("utf-8")
    return serialized


def add_extra_properties_to_tool(tool: Tool, properties: list[ExtraProperty]) -> Tool:
    """Return a copy of an MCP tool whose input schema carries the extra properties."""
    if not properties:
        return tool

    augmented = add_extra_properties(json.dumps(tool.inputSchema), properties)
    return tool.model_copy(update={"inputSchema": json.loads(augmented)})


def extract_extra_properties(
    args: dict,
    properties: list[ExtraProperty],
) -> tuple[dict, dict[str, str]]:
    """
    Split extra property values off the call arguments.

    Returns:
        Tuple of (remaining_arguments, extra_values). The input dict is not
        modified. Absent properties are omitted from extra_values.
    """
    remaining = dict(args)
    extras = {}

    for prop in properties:
        if prop.name in remaining:
            extras[prop.name] = remaining.pop(prop.name)

    return remaining, extras


def _merge_properties(schema: dict, properties: list[ExtraProperty]) -> dict:
    schema_properties = schema.get("properties")
    if not isinstance(schema_properties, dict):
        schema_properties = {}
        schema["properties"] = schema_properties

    required = schema.get("required")
    required = list(required) if isinstance(required, list) else []

    for prop in properties:
        schema_properties[prop.name] = {
            "type": "string",
            "description": prop.description,
        }
        if prop.required and prop.name not in required:
            required.append(prop.name)

    if required:
        schema["required"] = required

    return schema
