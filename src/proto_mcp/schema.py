"""
JSON Schema Generation from Protobuf Descriptors

Builds the input schema of an MCP tool from the descriptor of its request
message. Two output dialects are supported:

- STANDARD: plain JSON Schema matching the canonical protobuf JSON mapping
  (native maps, native JSON for Struct/Value/ListValue, required reflects
  field presence).
- RESTRICTED_COMPAT: the subset accepted by strict tool-calling consumers
  (OpenAI structured outputs). Every property is required, optionality is
  expressed by a nullable type, objects are closed, maps become lists of
  key/value pairs and dynamic JSON types become JSON-in-a-string.

Data produced under RESTRICTED_COMPAT must be passed through
proto_mcp.fix.fix_compat before it is decoded.

The generator never raises for a single field: unsupported kinds degrade to
an unconstrained schema so that one exotic field cannot break a whole tool.
"""

import copy
import itertools
import json
import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from google.protobuf.descriptor import Descriptor, FieldDescriptor

from . import wellknown
from .typemap import SCALAR_KINDS, scalar_schema

logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    """Output dialect of the generated schema."""

    STANDARD = "standard"
    RESTRICTED_COMPAT = "restricted"


@dataclass(frozen=True)
class SchemaOptions:
    """
    Generator configuration.

    Attributes:
        restricted_date_time_format: Emit ``format: date-time`` for
            timestamps under RESTRICTED_COMPAT. STANDARD always emits it.
        recursion_limit: How many times one message type may appear on the
            current expansion path before the recursion is cut.
    """

    restricted_date_time_format: bool = True
    recursion_limit: int = 2


DEFAULT_OPTIONS = SchemaOptions()

MAP_DESCRIPTION = "List of key value pairs"

DURATION_PATTERN = r"^-?[0-9]+(\.[0-9]{1,9})?s$"


def message_schema(
    descriptor: Descriptor,
    dialect: Dialect = Dialect.STANDARD,
    options: SchemaOptions = DEFAULT_OPTIONS,
) -> dict:
    """
    Generate the root object schema for a message.

    The root type is always exactly "object", in both dialects.

    Args:
        descriptor: Message descriptor (e.g. ``MyRequest.DESCRIPTOR``)
        dialect: Output dialect
        options: Generator configuration

    Returns:
        A fresh JSON Schema dict

    Example:
        >>> schema = message_schema(CreateItemRequest.DESCRIPTOR, Dialect.RESTRICTED_COMPAT)
        >>> schema["type"], schema["additionalProperties"]
        ('object', False)
    """
    return _message_schema(descriptor, dialect, options, (descriptor.full_name,))


def field_schema(
    field: FieldDescriptor,
    dialect: Dialect = Dialect.STANDARD,
    options: SchemaOptions = DEFAULT_OPTIONS,
) -> dict:
    """Generate the schema of a single field."""
    path = (field.containing_type.full_name,) if field.containing_type else ()
    return _field_schema(field, dialect, options, path)


def input_schema(
    descriptor: Descriptor,
    dialect: Dialect = Dialect.STANDARD,
    options: SchemaOptions = DEFAULT_OPTIONS,
) -> dict:
    """
    Memoized variant of message_schema().

    Generation is deterministic per (descriptor, dialect, options), so the
    result is cached; every caller gets its own deep copy.
    """
    return copy.deepcopy(_cached_schema(descriptor, Dialect(dialect), options))


def input_schema_json(
    descriptor: Descriptor,
    dialect: Dialect = Dialect.STANDARD,
    options: SchemaOptions = DEFAULT_OPTIONS,
) -> str:
    """Serialized form of input_schema(), as embedded into tool definitions."""
    return json.dumps(_cached_schema(descriptor, Dialect(dialect), options))


@lru_cache(maxsize=None)
def _cached_schema(descriptor: Descriptor, dialect: Dialect, options: SchemaOptions) -> dict:
    return message_schema(descriptor, dialect, options)


# ============== Message Level ==============

def _message_schema(
    descriptor: Descriptor,
    dialect: Dialect,
    options: SchemaOptions,
    path: tuple[str, ...],
) -> dict:
    restricted = dialect is Dialect.RESTRICTED_COMPAT
    properties = {}
    required = []

    for field in descriptor.fields:
        properties[field.name] = _field_schema(field, dialect, options, path)
        if restricted or is_required(field):
            required.append(field.name)

    result = {
        "type": "object",
        "properties": properties,
        "required": required,
    }

    groups = [oneof for oneof in descriptor.oneofs if len(oneof.fields) > 1]
    if groups:
        if restricted:
            # not/allOf are unavailable, so exclusivity can only be described
            for oneof in groups:
                _describe_oneof(oneof, properties)
        else:
            result["allOf"] = [_at_most_one(oneof) for oneof in groups]

    if restricted:
        result["additionalProperties"] = False

    return result


def is_required(field: FieldDescriptor) -> bool:
    """
    Whether a field has mandatory presence.

    proto2 ``required`` fields always do. Otherwise only singular scalar and
    enum fields without explicit presence (no ``optional`` keyword, not in a
    oneof, not under editions EXPLICIT presence) are required.
    """
    if field.is_required:
        return True
    if field.is_repeated:
        return False
    if field.has_presence:
        return False
    return field.type in SCALAR_KINDS


def _at_most_one(oneof) -> dict:
    """Constraint allowing at most one member of a oneof to be present."""
    pairs = [
        {"required": [a.name, b.name]}
        for a, b in itertools.combinations(oneof.fields, 2)
    ]
    return {"not": {"anyOf": pairs}}


def _describe_oneof(oneof, properties: dict) -> None:
    names = [f.name for f in oneof.fields]
    for field in oneof.fields:
        others = ", ".join(n for n in names if n != field.name)
        note = f"Mutually exclusive with: {others}. Set the others to null."
        schema = properties[field.name]
        if schema.get("description"):
            schema["description"] = f"{schema['description']} {note}"
        else:
            schema["description"] = note


# ============== Field Level ==============

def _field_schema(
    field: FieldDescriptor,
    dialect: Dialect,
    options: SchemaOptions,
    path: tuple[str, ...],
) -> dict:
    if is_map(field):
        return _map_schema(field, dialect, options, path)

    element = _element_schema(field, dialect, options, path)

    # List elements are never null
    if field.is_repeated:
        return {"type": "array", "items": element}

    if _accepts_null(field, dialect):
        return _nullable(element)

    return element


def _element_schema(
    field: FieldDescriptor,
    dialect: Dialect,
    options: SchemaOptions,
    path: tuple[str, ...],
) -> dict:
    """Schema of a single value of the field, without null."""
    if field.type == FieldDescriptor.TYPE_MESSAGE:
        return _message_type_schema(field.message_type, dialect, options, path)

    if field.type in SCALAR_KINDS:
        return scalar_schema(field)

    logger.warning(
        "Unsupported kind %s for field %s, using an unconstrained schema",
        field.type, field.full_name,
    )
    return {}


def _accepts_null(field: FieldDescriptor, dialect: Dialect) -> bool:
    """Whether a singular field may be sent as null."""
    if field.type == FieldDescriptor.TYPE_MESSAGE:
        # Dynamic types carry their own null; Any is always an object
        name = field.message_type.full_name
        return not (wellknown.is_dynamic(name) or name == wellknown.ANY)

    if field.type in SCALAR_KINDS:
        return dialect is Dialect.RESTRICTED_COMPAT and field.has_presence

    return False


def is_map(field: FieldDescriptor) -> bool:
    return (
        field.type == FieldDescriptor.TYPE_MESSAGE
        and field.is_repeated
        and field.message_type.GetOptions().map_entry
    )


def _map_schema(
    field: FieldDescriptor,
    dialect: Dialect,
    options: SchemaOptions,
    path: tuple[str, ...],
) -> dict:
    # Map values are never null, whatever the presence of the entry field
    value_field = field.message_type.fields_by_name["value"]
    value_schema = _element_schema(value_field, dialect, options, path)

    if dialect is Dialect.RESTRICTED_COMPAT:
        # Dynamic keys cannot be expressed with closed objects
        return {
            "type": "array",
            "description": MAP_DESCRIPTION,
            "items": {
                "type": "object",
                "properties": {
                    "key": {"type": "string"},
                    "value": value_schema,
                },
                "required": ["key", "value"],
                "additionalProperties": False,
            },
        }

    return {
        "type": "object",
        "propertyNames": {"type": "string"},
        "additionalProperties": value_schema,
    }


def _message_type_schema(
    descriptor: Descriptor,
    dialect: Dialect,
    options: SchemaOptions,
    path: tuple[str, ...],
) -> dict:
    name = descriptor.full_name
    restricted = dialect is Dialect.RESTRICTED_COMPAT

    if wellknown.is_dynamic(name):
        return _dynamic_schema(name, dialect)

    if name == wellknown.TIMESTAMP:
        schema = {
            "type": "string",
            "description": "RFC 3339 timestamp, e.g. 2024-01-01T12:00:00Z",
        }
        if not restricted or options.restricted_date_time_format:
            schema["format"] = "date-time"
        return schema

    if name == wellknown.DURATION:
        schema = {
            "type": "string",
            "description": "Duration in seconds with up to 9 fractional digits, ending in 's', e.g. 3.5s",
        }
        if not restricted:
            schema["pattern"] = DURATION_PATTERN
        return schema

    if name == wellknown.FIELD_MASK:
        return {
            "type": "string",
            "description": "Comma-separated list of lowerCamelCase field paths",
        }

    if name == wellknown.ANY:
        # Shape depends on the embedded type; never closed
        return {
            "type": "object",
            "description": "Any message: '@type' holds the type URL, the other properties hold the embedded message",
            "properties": {"@type": {"type": "string"}},
            "required": ["@type"],
        }

    if wellknown.is_wrapper(name):
        schema = {"type": wellknown.WRAPPER_TYPES[name]}
        if name == wellknown.BYTES_VALUE:
            schema["contentEncoding"] = "base64"
        return schema

    if path.count(name) >= options.recursion_limit:
        return _recursion_cut(name, dialect)

    return _message_schema(descriptor, dialect, options, path + (name,))


def _dynamic_schema(name: str, dialect: Dialect) -> dict:
    if dialect is Dialect.RESTRICTED_COMPAT:
        shape = {
            wellknown.STRUCT: "any JSON object",
            wellknown.VALUE: "any JSON value",
            wellknown.LIST_VALUE: "a JSON array",
        }[name]
        return {
            "type": "string",
            "description": f"A string representation of {shape}. Must be valid JSON.",
        }

    if name == wellknown.STRUCT:
        return {
            "type": "object",
            "additionalProperties": True,
            "description": "A JSON object with arbitrary properties",
        }
    if name == wellknown.LIST_VALUE:
        return {
            "type": "array",
            "items": {},
            "description": "A JSON array of dynamic values",
        }
    return {"description": "Any dynamic JSON value: object, array, string, number, boolean or null"}


def _recursion_cut(name: str, dialect: Dialect) -> dict:
    logger.debug("Cutting recursive expansion of %s", name)
    schema = {
        "type": "object",
        "description": f"Recursive reference to {name}; nesting limit reached",
    }
    if dialect is Dialect.RESTRICTED_COMPAT:
        schema["properties"] = {}
        schema["required"] = []
        schema["additionalProperties"] = False
    return schema


def _nullable(schema: dict) -> dict:
    result = dict(schema)
    if isinstance(result.get("type"), str):
        result["type"] = [result["type"], "null"]
    if "enum" in result:
        result["enum"] = [*result["enum"], None]
    return result
