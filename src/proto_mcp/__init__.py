"""
proto-mcp

Expose protobuf RPC methods as MCP tools: JSON Schema generation from
message descriptors (standard and restricted dialects), the compatibility
rewrite back to canonical protobuf JSON, extra tool properties and
normalized error results.
"""

from .errors import CanonicalStatus, format_error, handle_error, normalize_error, render_status
from .extra_properties import (
    ExtraProperty,
    add_extra_properties,
    add_extra_properties_to_tool,
    extract_extra_properties,
)
from .fix import fix_compat, fix_map
from .schema import (
    DEFAULT_OPTIONS,
    Dialect,
    SchemaOptions,
    field_schema,
    input_schema,
    input_schema_json,
    message_schema,
)
from .tools import ProtoTool, register_service, tool_name
from .typemap import kind_to_type
from .validator import validate_schema

__all__ = [
    "CanonicalStatus",
    "DEFAULT_OPTIONS",
    "Dialect",
    "ExtraProperty",
    "ProtoTool",
    "SchemaOptions",
    "add_extra_properties",
    "add_extra_properties_to_tool",
    "extract_extra_properties",
    "field_schema",
    "fix_compat",
    "fix_map",
    "format_error",
    "handle_error",
    "input_schema",
    "input_schema_json",
    "kind_to_type",
    "message_schema",
    "normalize_error",
    "register_service",
    "render_status",
    "tool_name",
    "validate_schema",
]
