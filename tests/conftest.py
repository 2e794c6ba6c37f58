"""
Shared test protos.

The descriptors are built from FileDescriptorProtos and registered in the
default descriptor pool once per session, so no protoc step is needed.
"""

import pytest
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

# Register the well-known types the test files depend on
from google.protobuf import (  # noqa: F401
    any_pb2,
    duration_pb2,
    field_mask_pb2,
    struct_pb2,
    timestamp_pb2,
    wrappers_pb2,
)

PACKAGE = "protomcp.testdata"

F = descriptor_pb2.FieldDescriptorProto

OPTIONAL = F.LABEL_OPTIONAL
REPEATED = F.LABEL_REPEATED
REQUIRED = F.LABEL_REQUIRED


def _field(name, number, type_, label=OPTIONAL, type_name=None, **kwargs):
    field = F(name=name, number=number, type=type_, label=label, **kwargs)
    if type_name:
        field.type_name = type_name if type_name.startswith(".") else f".{PACKAGE}.{type_name}"
    return field


def _message(name, *fields, nested=(), oneofs=()):
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    message.nested_type.extend(nested)
    for oneof in oneofs:
        message.oneof_decl.add(name=oneof)
    return message


def _map_entry(entry_name, value_type, value_type_name=None):
    entry = _message(
        entry_name,
        _field("key", 1, F.TYPE_STRING),
        _field("value", 2, value_type, type_name=value_type_name),
    )
    entry.options.map_entry = True
    return entry


def _map_field(message_name, name, number, entry_name):
    return _field(name, number, F.TYPE_MESSAGE, REPEATED, type_name=f"{message_name}.{entry_name}")


def _test_file():
    proto = descriptor_pb2.FileDescriptorProto(
        name="protomcp/testdata/test.proto",
        package=PACKAGE,
        syntax="proto3",
        dependency=[
            "google/protobuf/any.proto",
            "google/protobuf/duration.proto",
            "google/protobuf/field_mask.proto",
            "google/protobuf/struct.proto",
            "google/protobuf/timestamp.proto",
            "google/protobuf/wrappers.proto",
        ],
    )

    color = proto.enum_type.add(name="Color")
    for number, value in enumerate(["COLOR_UNSPECIFIED", "RED", "GREEN"]):
        color.value.add(name=value, number=number)

    proto.message_type.extend([
        _message(
            "ScalarMessage",
            _field("flag", 1, F.TYPE_BOOL),
            _field("text", 2, F.TYPE_STRING),
            _field("small", 3, F.TYPE_INT32),
            _field("big", 4, F.TYPE_INT64),
            _field("ubig", 5, F.TYPE_UINT64),
            _field("ratio", 6, F.TYPE_FLOAT),
            _field("score", 7, F.TYPE_DOUBLE),
            _field("blob", 8, F.TYPE_BYTES),
            _field("color", 9, F.TYPE_ENUM, type_name="Color"),
            _field("nickname", 10, F.TYPE_STRING, oneof_index=0, proto3_optional=True),
            _field("tags", 11, F.TYPE_STRING, REPEATED),
            oneofs=["_nickname"],
        ),
        _message(
            "WktTestMessage",
            _field("timestamp", 1, F.TYPE_MESSAGE, type_name=".google.protobuf.Timestamp"),
            _field("duration", 2, F.TYPE_MESSAGE, type_name=".google.protobuf.Duration"),
            _field("struct_field", 3, F.TYPE_MESSAGE, type_name=".google.protobuf.Struct"),
            _field("value_field", 4, F.TYPE_MESSAGE, type_name=".google.protobuf.Value"),
            _field("list_value", 5, F.TYPE_MESSAGE, type_name=".google.protobuf.ListValue"),
            _field("field_mask", 6, F.TYPE_MESSAGE, type_name=".google.protobuf.FieldMask"),
            _field("any", 7, F.TYPE_MESSAGE, type_name=".google.protobuf.Any"),
            _field("string_value", 8, F.TYPE_MESSAGE, type_name=".google.protobuf.StringValue"),
            _field("int32_value", 9, F.TYPE_MESSAGE, type_name=".google.protobuf.Int32Value"),
            _field("int64_value", 10, F.TYPE_MESSAGE, type_name=".google.protobuf.Int64Value"),
            _field("bool_value", 11, F.TYPE_MESSAGE, type_name=".google.protobuf.BoolValue"),
            _field("bytes_value", 12, F.TYPE_MESSAGE, type_name=".google.protobuf.BytesValue"),
            _field("struct_list", 13, F.TYPE_MESSAGE, REPEATED, type_name=".google.protobuf.Struct"),
            _field("timestamps", 14, F.TYPE_MESSAGE, REPEATED, type_name=".google.protobuf.Timestamp"),
            _field("string_values", 15, F.TYPE_MESSAGE, REPEATED, type_name=".google.protobuf.StringValue"),
        ),
        _message(
            "Nested",
            _field("name", 1, F.TYPE_STRING),
            _map_field("Nested", "labels", 2, "LabelsEntry"),
            _field("payload", 3, F.TYPE_MESSAGE, type_name=".google.protobuf.Value"),
            nested=[_map_entry("LabelsEntry", F.TYPE_STRING)],
        ),
        _message(
            "MapTestMessage",
            _map_field("MapTestMessage", "string_map", 1, "StringMapEntry"),
            _map_field("MapTestMessage", "nested_map", 2, "NestedMapEntry"),
            _map_field("MapTestMessage", "struct_map", 3, "StructMapEntry"),
            nested=[
                _map_entry("StringMapEntry", F.TYPE_STRING),
                _map_entry("NestedMapEntry", F.TYPE_MESSAGE, f".{PACKAGE}.Nested"),
                _map_entry("StructMapEntry", F.TYPE_MESSAGE, ".google.protobuf.Struct"),
            ],
        ),
        _message(
            "CreateItemRequest",
            _field("name", 1, F.TYPE_STRING),
            _map_field("CreateItemRequest", "labels", 2, "LabelsEntry"),
            _field("nested", 3, F.TYPE_MESSAGE, type_name="Nested"),
            _field("items", 4, F.TYPE_MESSAGE, REPEATED, type_name="Nested"),
            nested=[_map_entry("LabelsEntry", F.TYPE_STRING)],
        ),
        _message(
            "CreateItemResponse",
            _field("id", 1, F.TYPE_STRING),
            _field("name", 2, F.TYPE_STRING),
        ),
        _message(
            "TreeNode",
            _field("name", 1, F.TYPE_STRING),
            _field("children", 2, F.TYPE_MESSAGE, REPEATED, type_name="TreeNode"),
            _field("parent", 3, F.TYPE_MESSAGE, type_name="TreeNode"),
        ),
        _message(
            "OneofMessage",
            _field("text", 1, F.TYPE_STRING, oneof_index=0),
            _field("number", 2, F.TYPE_INT32, oneof_index=0),
            _field("nested", 3, F.TYPE_MESSAGE, type_name="Nested", oneof_index=0),
            _field("id", 4, F.TYPE_STRING),
            oneofs=["choice"],
        ),
    ])

    service = proto.service.add(name="ItemService")
    service.method.add(
        name="CreateItem",
        input_type=f".{PACKAGE}.CreateItemRequest",
        output_type=f".{PACKAGE}.CreateItemResponse",
    )
    service.method.add(
        name="WatchItems",
        input_type=f".{PACKAGE}.CreateItemRequest",
        output_type=f".{PACKAGE}.CreateItemResponse",
        server_streaming=True,
    )

    return proto


def _legacy_file():
    proto = descriptor_pb2.FileDescriptorProto(
        name="protomcp/testdata/legacy.proto",
        package=PACKAGE,
        syntax="proto2",
    )
    proto.message_type.extend([
        _message(
            "LegacyMessage",
            _field("id", 1, F.TYPE_STRING, REQUIRED),
            _field("count", 2, F.TYPE_INT32),
            _field("extra", 3, F.TYPE_GROUP, type_name="LegacyMessage.Extra"),
            _map_field("LegacyMessage", "tags", 5, "TagsEntry"),
            nested=[
                _message("Extra", _field("note", 4, F.TYPE_STRING)),
                _map_entry("TagsEntry", F.TYPE_STRING),
            ],
        ),
    ])
    return proto


def _register():
    pool = descriptor_pool.Default()
    for proto in (_test_file(), _legacy_file()):
        try:
            pool.FindFileByName(proto.name)
        except KeyError:
            pool.AddSerializedFile(proto.SerializeToString())
    return pool


POOL = _register()


def message_descriptor(name: str):
    return POOL.FindMessageTypeByName(f"{PACKAGE}.{name}")


def message_class(name: str):
    return message_factory.GetMessageClass(message_descriptor(name))


@pytest.fixture(scope="session")
def descriptors():
    """Lookup of test message descriptors by short name."""
    return message_descriptor


@pytest.fixture(scope="session")
def item_service():
    return POOL.FindServiceByName(f"{PACKAGE}.ItemService")
