"""
CLI for proto-mcp

Build-time inspection of the schemas generated for protobuf messages.

Usage:
    proto-mcp schema acme.v1.CreateItemRequest -m acme.v1.items_pb2
    proto-mcp schema acme.v1.CreateItemRequest -m acme.v1.items_pb2 --dialect restricted
    proto-mcp check acme.v1.CreateItemRequest -m acme.v1.items_pb2 --json
    proto-mcp diff acme.v1.CreateItemRequest -m acme.v1.items_pb2
    proto-mcp list -m acme.v1.items_pb2

Importing a generated ``_pb2`` module registers its descriptors in the
default descriptor pool; messages are then looked up by full name.
"""

import argparse
import importlib
import json
import logging
import sys

from google.protobuf import descriptor_pool
from google.protobuf.descriptor import Descriptor

from .reporter import format_json_report, generate_report, print_diff, print_terminal_report
from .schema import Dialect, SchemaOptions, message_schema
from .tools import tool_name
from .validator import validate_schema


class CliError(Exception):
    """A user error reported as 'Error: ...' with exit status 1."""


def load_modules(modules: list[str]) -> list:
    """Import generated modules so their descriptors are registered."""
    loaded = []
    for name in modules:
        try:
            loaded.append(importlib.import_module(name))
        except ImportError as e:
            raise CliError(f"Could not import module '{name}': {e}") from e
    return loaded


def find_message(full_name: str) -> Descriptor:
    try:
        return descriptor_pool.Default().FindMessageTypeByName(full_name)
    except KeyError as e:
        raise CliError(f"Message '{full_name}' not found") from e


def _options(args: argparse.Namespace) -> SchemaOptions:
    return SchemaOptions(
        restricted_date_time_format=not args.no_date_time_format,
        recursion_limit=args.recursion_limit,
    )


def cmd_schema(args: argparse.Namespace) -> int:
    """Print the schema generated for a message."""
    load_modules(args.module)
    descriptor = find_message(args.message)

    schema = message_schema(descriptor, Dialect(args.dialect), _options(args))
    print(json.dumps(schema, indent=2))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Validate the restricted schema of a message."""
    load_modules(args.module)
    descriptor = find_message(args.message)

    schema = message_schema(descriptor, Dialect.RESTRICTED_COMPAT, _options(args))
    issues = validate_schema(schema)
    report = generate_report(descriptor.full_name, schema, issues)

    if args.json:
        print(format_json_report(report))
    else:
        print_terminal_report(report, use_color=not args.no_color)

    return 0 if not issues else 1


def cmd_diff(args: argparse.Namespace) -> int:
    """Show the schema in both dialects."""
    load_modules(args.module)
    descriptor = find_message(args.message)
    options = _options(args)

    print_diff(
        message_schema(descriptor, Dialect.STANDARD, options),
        message_schema(descriptor, Dialect.RESTRICTED_COMPAT, options),
        descriptor.full_name,
        use_color=not args.no_color,
    )
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List services, methods and their tool names."""
    modules = load_modules(args.module)

    entries = []
    for module in modules:
        file_descriptor = getattr(module, "DESCRIPTOR", None)
        if file_descriptor is None:
            continue
        for service in file_descriptor.services_by_name.values():
            for method in service.methods:
                entries.append({
                    "method": method.full_name,
                    "tool": tool_name(method.full_name),
                    "input": method.input_type.full_name,
                    "streaming": bool(method.client_streaming or method.server_streaming),
                })

    if args.json:
        print(json.dumps(entries, indent=2))
    else:
        print(f"\nRPC methods ({len(entries)} total):\n")
        for entry in entries:
            suffix = " (streaming, skipped)" if entry["streaming"] else ""
            print(f"   - {entry['method']} -> {entry['tool']}{suffix}")
        print()

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proto-mcp",
        description="JSON Schema tooling for protobuf-backed MCP tools",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    # Shared by every command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--module", "-m",
        action="append",
        required=True,
        help="Generated _pb2 module to import (repeatable)",
    )

    # Shared by commands that generate schemas
    generation = argparse.ArgumentParser(add_help=False)
    generation.add_argument(
        "message",
        help="Fully qualified message name",
    )
    generation.add_argument(
        "--no-date-time-format",
        action="store_true",
        help="Omit format: date-time for timestamps in the restricted dialect",
    )
    generation.add_argument(
        "--recursion-limit",
        type=int,
        default=SchemaOptions().recursion_limit,
        help="Expansions of one message type per path before recursion is cut",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # schema command
    schema_parser = subparsers.add_parser(
        "schema",
        parents=[common, generation],
        help="Print the generated schema",
    )
    schema_parser.add_argument(
        "--dialect",
        choices=[d.value for d in Dialect],
        default=Dialect.STANDARD.value,
        help="Output dialect",
    )
    schema_parser.set_defaults(func=cmd_schema)

    # check command
    check_parser = subparsers.add_parser(
        "check",
        parents=[common, generation],
        help="Validate the restricted schema",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON report",
    )
    check_parser.set_defaults(func=cmd_check)

    # diff command
    diff_parser = subparsers.add_parser(
        "diff",
        parents=[common, generation],
        help="Show the schema in both dialects",
    )
    diff_parser.set_defaults(func=cmd_diff)

    # list command
    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="List RPC methods and tool names",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON",
    )
    list_parser.set_defaults(func=cmd_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except CliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
