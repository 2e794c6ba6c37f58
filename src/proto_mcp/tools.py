"""
MCP Tools for Protobuf RPC Methods

Exposes unary RPC methods as fastmcp tools. Each tool publishes the schema
generated from the method's request message and, when called:

1. splits off extra properties
2. restores canonical shapes (RESTRICTED_COMPAT only)
3. decodes the arguments with json_format
4. calls the handler (sync or async, e.g. a gRPC stub method)
5. returns the response as canonical JSON

Handler failures are reported as a ToolError carrying the canonical status
text produced by proto_mcp.errors.
"""

import hashlib
import inspect
import json
import logging
from typing import Any, Callable

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import Tool, ToolResult
from google.protobuf import json_format, message_factory
from google.protobuf.descriptor import MethodDescriptor, ServiceDescriptor
from mcp.types import TextContent
from pydantic import PrivateAttr

from .errors import format_error
from .extra_properties import ExtraProperty, add_extra_properties, extract_extra_properties
from .fix import fix_compat
from .schema import DEFAULT_OPTIONS, Dialect, SchemaOptions, input_schema_json

logger = logging.getLogger(__name__)

MAX_TOOL_NAME_LENGTH = 64


def tool_name(full_name: str) -> str:
    """
    Derive an MCP tool name from a fully qualified method name.

    Dots become underscores. Names longer than 64 characters are shortened
    and suffixed with a stable hash so they stay unique.

    Example:
        >>> tool_name("acme.items.v1.ItemService.CreateItem")
        'acme_items_v1_ItemService_CreateItem'
    """
    name = full_name.replace(".", "_")
    if len(name) <= MAX_TOOL_NAME_LENGTH:
        return name

    digest = hashlib.sha1(full_name.encode("utf-8")).hexdigest()[:8]
    return f"{name[:MAX_TOOL_NAME_LENGTH - len(digest) - 1]}_{digest}"


class ProtoTool(Tool):
    """A tool that decodes its arguments into a protobuf request."""

    _method: MethodDescriptor = PrivateAttr()
    _handler: Callable[..., Any] = PrivateAttr()
    _dialect: Dialect = PrivateAttr(default=Dialect.STANDARD)
    _extra_properties: list[ExtraProperty] = PrivateAttr(default_factory=list)
    _request_class: type = PrivateAttr()

    @classmethod
    def from_method(
        cls,
        method: MethodDescriptor,
        handler: Callable[..., Any],
        dialect: Dialect = Dialect.STANDARD,
        extra_properties: list[ExtraProperty] | None = None,
        options: SchemaOptions = DEFAULT_OPTIONS,
        name: str | None = None,
        description: str | None = None,
    ) -> "ProtoTool":
        """
        Build a tool for one RPC method.

        Args:
            method: The method descriptor
            handler: Called with the decoded request, plus a dict of extra
                property values when extra properties are configured
            dialect: Schema dialect published to the client
            extra_properties: String parameters added to the schema
            options: Schema generator configuration
            name: Tool name; derived from the method name by default
            description: Tool description
        """
        extra_properties = list(extra_properties or [])
        dialect = Dialect(dialect)

        schema_json = input_schema_json(method.input_type, dialect, options)
        schema_json = add_extra_properties(schema_json, extra_properties)

        tool = cls(
            name=name or tool_name(method.full_name),
            description=description or f"Calls the {method.full_name} RPC.",
            parameters=json.loads(schema_json),
        )
        tool._method = method
        tool._handler = handler
        tool._dialect = dialect
        tool._extra_properties = extra_properties
        tool._request_class = message_factory.GetMessageClass(method.input_type)
        return tool

    @property
    def method(self) -> MethodDescriptor:
        return self._method

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def decode(self, arguments: dict[str, Any]) -> tuple[Any, dict[str, str]]:
        """
        Turn tool arguments into a request message.

        Returns:
            Tuple of (request, extra_property_values)

        Raises:
            ToolError: If the arguments do not decode canonically
        """
        args, extras = extract_extra_properties(arguments, self._extra_properties)

        if self._dialect is Dialect.RESTRICTED_COMPAT:
            fix_compat(self._method.input_type, args)

        request = self._request_class()
        try:
            json_format.ParseDict(args, request)
        except json_format.ParseError as e:
            raise ToolError(f"Invalid arguments: {e}") from e

        return request, extras

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        request, extras = self.decode(arguments)

        try:
            if self._extra_properties:
                response = self._handler(request, extras)
            else:
                response = self._handler(request)
            if inspect.isawaitable(response):
                response = await response
        except Exception as e:
            raise ToolError(format_error(e)) from e

        text = json_format.MessageToJson(response, preserving_proto_field_name=True)
        return ToolResult(content=[TextContent(type="text", text=text)])


def register_service(
    server: FastMCP,
    service: ServiceDescriptor,
    implementation: Any,
    dialect: Dialect = Dialect.STANDARD,
    extra_properties: list[ExtraProperty] | None = None,
    options: SchemaOptions = DEFAULT_OPTIONS,
) -> list[ProtoTool]:
    """
    Register one tool per unary method of a service.

    Args:
        server: The FastMCP server
        service: Service descriptor (e.g. ``my_pb2.DESCRIPTOR.services_by_name["ItemService"]``)
        implementation: Object with one callable per method, named like the
            RPC (a gRPC stub works)
        dialect: Schema dialect published to the client
        extra_properties: String parameters added to every tool
        options: Schema generator configuration

    Returns:
        The registered tools
    """
    tools = []

    for method in service.methods:
        if method.client_streaming or method.server_streaming:
            logger.warning("Skipping streaming method %s", method.full_name)
            continue

        tool = ProtoTool.from_method(
            method,
            getattr(implementation, method.name),
            dialect=dialect,
            extra_properties=extra_properties,
            options=options,
        )
        server.add_tool(tool)
        tools.append(tool)

    return tools
