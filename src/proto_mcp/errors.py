"""
Error Normalization

Converts failures of the downstream RPC into one canonical status shape, so
that every tool reports errors the same way regardless of the transport:

    {"code": "INVALID_ARGUMENT", "message": "...", "details": [{"@type": ...}]}

Resolution order:
1. gRPC errors (grpc.RpcError): rich google.rpc.Status from the trailers,
   else the call's code and details
2. Connect protocol errors over HTTP (httpx.HTTPStatusError): the Connect
   JSON error body, else the HTTP status mapped to a code
3. Anything else: UNKNOWN with the exception text
"""

import base64
import logging
from typing import Any, Optional

import grpc
import httpx
from google.protobuf import any_pb2, json_format
from google.rpc import code_pb2, status_pb2
from google.rpc import error_details_pb2  # noqa: F401  (registers the standard detail types)
from grpc_status import rpc_status
from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel

logger = logging.getLogger(__name__)

TYPE_URL_PREFIX = "type.googleapis.com/"

# Connect protocol: HTTP status to code, for bodies without a Connect error
HTTP_STATUS_TO_CODE = {
    400: code_pb2.INTERNAL,
    401: code_pb2.UNAUTHENTICATED,
    403: code_pb2.PERMISSION_DENIED,
    404: code_pb2.UNIMPLEMENTED,
    429: code_pb2.UNAVAILABLE,
    502: code_pb2.UNAVAILABLE,
    503: code_pb2.UNAVAILABLE,
    504: code_pb2.UNAVAILABLE,
}


class CanonicalStatus(BaseModel):
    """The normalized error shape returned to tool callers."""

    code: str
    message: str
    details: list[dict[str, Any]] = []

    @classmethod
    def from_proto(cls, status: status_pb2.Status) -> "CanonicalStatus":
        """
        Build from a google.rpc.Status.

        Raises:
            TypeError: If a detail's type is unknown to the descriptor pool
        """
        return cls(
            code=code_name(status.code),
            message=status.message,
            details=[json_format.MessageToDict(detail) for detail in status.details],
        )


def code_name(code: int) -> str:
    """Symbolic name of a numeric status code; out of range codes are UNKNOWN."""
    try:
        return code_pb2.Code.Name(code)
    except ValueError:
        return "UNKNOWN"


def normalize_error(error: Optional[BaseException]) -> Optional[status_pb2.Status]:
    """
    Convert any failure into a google.rpc.Status.

    Args:
        error: The failure raised by the downstream call, or None

    Returns:
        The status, or None when there was no error
    """
    if error is None:
        return None

    if isinstance(error, grpc.RpcError) and callable(getattr(error, "code", None)):
        return _from_grpc(error)

    if isinstance(error, httpx.HTTPStatusError):
        return _from_connect(error)

    return status_pb2.Status(code=code_pb2.UNKNOWN, message=str(error))


def render_status(status: status_pb2.Status) -> str:
    """Render a status as canonical JSON text."""
    return CanonicalStatus.from_proto(status).model_dump_json()


def format_error(error: Optional[BaseException]) -> Optional[str]:
    """
    Normalize and render a failure.

    Falls back to ``"Error: <message>"`` if the status cannot be rendered;
    never raises.
    """
    status = normalize_error(error)
    if status is None:
        return None

    try:
        return render_status(status)
    except (TypeError, ValueError, json_format.Error) as e:
        logger.debug("Could not render status for %r: %s", error, e)
        return f"Error: {error}"


def handle_error(error: Optional[BaseException]) -> Optional[CallToolResult]:
    """
    Convert a failure into an MCP error result.

    Returns:
        A CallToolResult with isError set and the canonical status as text,
        or None when there was no error
    """
    text = format_error(error)
    if text is None:
        return None

    return CallToolResult(
        content=[TextContent(type="text", text=text)],
        isError=True,
    )


# ============== Transports ==============

def _from_grpc(error: grpc.RpcError) -> status_pb2.Status:
    try:
        status = rpc_status.from_call(error)
    except ValueError as e:
        # Trailer status disagrees with the call's own code/message
        logger.debug("Ignoring inconsistent rich status: %s", e)
        status = None

    if status is not None:
        return status

    code = error.code()
    return status_pb2.Status(
        code=code.value[0] if code is not None else code_pb2.UNKNOWN,
        message=error.details() or "",
    )


def _from_connect(error: httpx.HTTPStatusError) -> status_pb2.Status:
    response = error.response

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("code"), str):
        return status_pb2.Status(
            code=_connect_code(body["code"]),
            message=str(body.get("message", "")),
            details=_connect_details(body.get("details")),
        )

    return status_pb2.Status(
        code=HTTP_STATUS_TO_CODE.get(response.status_code, code_pb2.UNKNOWN),
        message=response.reason_phrase or str(error),
    )


def _connect_code(name: str) -> int:
    # Connect spells it "canceled"
    if name == "canceled":
        return code_pb2.CANCELLED
    try:
        return code_pb2.Code.Value(name.upper())
    except ValueError:
        return code_pb2.UNKNOWN


def _connect_details(details: Any) -> list[any_pb2.Any]:
    if not isinstance(details, list):
        return []

    result = []
    for detail in details:
        if not isinstance(detail, dict):
            continue
        type_name = detail.get("type")
        value = detail.get("value", "")
        if not isinstance(type_name, str) or not isinstance(value, str):
            continue
        try:
            # Connect sends unpadded base64
            raw = base64.b64decode(value + "=" * (-len(value) % 4))
        except ValueError:
            logger.debug("Dropping Connect detail %s with invalid base64", type_name)
            continue
        result.append(any_pb2.Any(type_url=TYPE_URL_PREFIX + type_name, value=raw))

    return result
