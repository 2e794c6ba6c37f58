"""
Compatibility Rewriter

Turns arguments produced under the RESTRICTED_COMPAT schema dialect back into
the canonical protobuf JSON encoding, right before json_format decodes them:

- maps sent as ``[{"key": k, "value": v}, ...]`` become ``{k: v, ...}``
- Struct / Value / ListValue sent as JSON strings become native JSON

The walk is driven by the descriptor, not by the object's keys: unknown keys
are left for the decoder to reject. Malformed fragments are left untouched
as well; validation is the decoder's job, not the rewriter's. Applying the
rewrite to an already canonical tree is a no-op.
"""

import json
import logging
from typing import Any

from google.protobuf.descriptor import Descriptor, FieldDescriptor

from . import wellknown
from .schema import is_map

logger = logging.getLogger(__name__)


def fix_compat(descriptor: Descriptor, args: dict) -> dict:
    """
    Apply all RESTRICTED_COMPAT rewrites to a decoded argument tree.

    The tree is mutated in place; it must be owned by the current call.

    Args:
        descriptor: Descriptor the tool schema was generated from
        args: Decoded JSON arguments

    Returns:
        The same ``args`` object, rewritten

    Example:
        >>> fix_compat(Req.DESCRIPTOR, {"labels": [{"key": "k", "value": "v"}]})
        {'labels': {'k': 'v'}}
    """
    _rewrite_message(descriptor, args, dynamic=True)
    return args


def fix_map(descriptor: Descriptor, args: dict) -> dict:
    """Restore map fields only, leaving dynamic JSON strings alone."""
    _rewrite_message(descriptor, args, dynamic=False)
    return args


def _rewrite_message(descriptor: Descriptor, obj: dict, dynamic: bool) -> None:
    for field in descriptor.fields:
        if field.name not in obj:
            continue

        value = obj[field.name]

        if is_map(field):
            obj[field.name] = _rewrite_map(field, value, dynamic)
        elif field.type == FieldDescriptor.TYPE_MESSAGE:
            if field.is_repeated and isinstance(value, list):
                obj[field.name] = [
                    _rewrite_value(field.message_type, item, dynamic) for item in value
                ]
            else:
                obj[field.name] = _rewrite_value(field.message_type, value, dynamic)


def _rewrite_value(descriptor: Descriptor, value: Any, dynamic: bool) -> Any:
    """Rewrite one message-typed value; returns the (possibly replaced) value."""
    name = descriptor.full_name

    if wellknown.is_dynamic(name):
        if dynamic:
            return _parse_dynamic(name, value)
        return value

    if isinstance(value, dict):
        _rewrite_message(descriptor, value, dynamic)

    return value


def _rewrite_map(field: FieldDescriptor, value: Any, dynamic: bool) -> Any:
    if not isinstance(value, list):
        # Already an object (or something the decoder will reject)
        return value

    value_field = field.message_type.fields_by_name["value"]
    result = {}

    for entry in value:
        if not isinstance(entry, dict):
            logger.debug("Dropping non-object entry of map field %s", field.full_name)
            continue
        key = entry.get("key")
        if not isinstance(key, str) or "value" not in entry:
            logger.debug("Dropping incomplete entry of map field %s", field.full_name)
            continue
        # Later duplicates win
        result[key] = entry["value"]

    if value_field.type == FieldDescriptor.TYPE_MESSAGE:
        for key, item in result.items():
            result[key] = _rewrite_value(value_field.message_type, item, dynamic)

    return result


def _parse_dynamic(name: str, value: Any) -> Any:
    if not isinstance(value, str) or not value:
        return value

    try:
        parsed = json.loads(value)
    except ValueError:
        logger.debug("Leaving unparsable %s payload untouched", name)
        return value

    if not wellknown.matches_dynamic_shape(name, parsed):
        return value

    return parsed
