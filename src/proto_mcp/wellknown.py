"""
Well-Known Type Names

The google.protobuf well-known types have special JSON encodings. They are
grouped here by how the schema generator and the compatibility rewriter
treat them.
"""

STRUCT = "google.protobuf.Struct"
VALUE = "google.protobuf.Value"
LIST_VALUE = "google.protobuf.ListValue"
TIMESTAMP = "google.protobuf.Timestamp"
DURATION = "google.protobuf.Duration"
FIELD_MASK = "google.protobuf.FieldMask"
ANY = "google.protobuf.Any"

# Open JSON shapes; flattened to JSON-in-a-string by the restricted dialect
DYNAMIC_TYPES = frozenset({STRUCT, VALUE, LIST_VALUE})

# Nullable primitive wrappers, keyed to the JSON type of the wrapped scalar
WRAPPER_TYPES = {
    "google.protobuf.DoubleValue": "number",
    "google.protobuf.FloatValue": "number",
    "google.protobuf.Int64Value": "string",
    "google.protobuf.UInt64Value": "string",
    "google.protobuf.Int32Value": "integer",
    "google.protobuf.UInt32Value": "integer",
    "google.protobuf.BoolValue": "boolean",
    "google.protobuf.StringValue": "string",
    "google.protobuf.BytesValue": "string",
}

BYTES_VALUE = "google.protobuf.BytesValue"


def is_dynamic(full_name: str) -> bool:
    return full_name in DYNAMIC_TYPES


def is_wrapper(full_name: str) -> bool:
    return full_name in WRAPPER_TYPES


def matches_dynamic_shape(full_name: str, value) -> bool:
    """
    Check whether a parsed JSON value has the shape a dynamic type accepts.

    Struct only accepts objects and ListValue only arrays; Value accepts
    anything.
    """
    if full_name == STRUCT:
        return isinstance(value, dict)
    if full_name == LIST_VALUE:
        return isinstance(value, list)
    return full_name == VALUE
