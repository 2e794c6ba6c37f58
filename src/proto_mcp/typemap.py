"""
Scalar Type Mapping

Maps protobuf scalar field types onto JSON Schema primitive types, following
the canonical protobuf JSON encoding:

- 64-bit integers are strings (JSON numbers lose precision beyond 2^53)
- bytes are base64 strings
- enums are their symbolic value names, never the numeric codes

The mapping does not depend on the output dialect.
"""

from google.protobuf.descriptor import FieldDescriptor


KIND_TO_TYPE = {
    FieldDescriptor.TYPE_BOOL: "boolean",
    FieldDescriptor.TYPE_STRING: "string",
    # 32-bit integers
    FieldDescriptor.TYPE_INT32: "integer",
    FieldDescriptor.TYPE_SINT32: "integer",
    FieldDescriptor.TYPE_SFIXED32: "integer",
    FieldDescriptor.TYPE_UINT32: "integer",
    FieldDescriptor.TYPE_FIXED32: "integer",
    # 64-bit integers
    FieldDescriptor.TYPE_INT64: "string",
    FieldDescriptor.TYPE_SINT64: "string",
    FieldDescriptor.TYPE_SFIXED64: "string",
    FieldDescriptor.TYPE_UINT64: "string",
    FieldDescriptor.TYPE_FIXED64: "string",
    # Floating point
    FieldDescriptor.TYPE_FLOAT: "number",
    FieldDescriptor.TYPE_DOUBLE: "number",
    FieldDescriptor.TYPE_BYTES: "string",
    FieldDescriptor.TYPE_ENUM: "string",
}

SCALAR_KINDS = frozenset(KIND_TO_TYPE)


def kind_to_type(kind: int) -> str:
    """
    Map a protobuf field type constant to a JSON Schema type name.

    Args:
        kind: One of the ``FieldDescriptor.TYPE_*`` constants

    Returns:
        The JSON Schema type. Unrecognized kinds map to "string".

    Example:
        >>> kind_to_type(FieldDescriptor.TYPE_INT64)
        'string'
    """
    return KIND_TO_TYPE.get(kind, "string")


def scalar_schema(field: FieldDescriptor) -> dict:
    """Build the schema for a singular scalar or enum field."""
    schema = {"type": kind_to_type(field.type)}

    if field.type == FieldDescriptor.TYPE_BYTES:
        schema["contentEncoding"] = "base64"
    elif field.type == FieldDescriptor.TYPE_ENUM:
        schema["enum"] = [value.name for value in field.enum_type.values]

    return schema
