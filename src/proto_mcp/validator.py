"""
Restricted Dialect Validator

Checks whether a schema honours the RESTRICTED_COMPAT contract of strict
tool-calling consumers:

- the root type is exactly "object" (no union)
- every object is closed (additionalProperties: false)
- every property is listed in "required"
- no references, conditionals or composition keywords

Used to verify generated schemas (and hand-written ones) before they are
published as tool definitions.
"""

from typing import Any


# Keywords the restricted consumers reject
FORBIDDEN_PATTERNS = {
    "$ref": "References are not resolved by strict consumers",
    "$defs": "Definitions block not supported",
    "definitions": "Definitions block not supported (legacy key)",
    "allOf": "Composition not supported",
    "oneOf": "Only anyOf is supported",
    "not": "Negation not supported",
    "if": "Conditional schemas not supported",
    "then": "Conditional schemas not supported",
    "else": "Conditional schemas not supported",
    "patternProperties": "Dynamic keys not supported",
}

# Structural rules of the dialect
RULES = {
    "root-type": "Root type must be exactly 'object'",
    "additionalProperties": "Objects must set additionalProperties to false",
    "optional-property": "Every property must be listed in 'required'",
    "untyped": "Every schema node must declare a type",
}

SEVERITY = {
    # Critical: the consumer rejects the whole tool definition
    "root-type": "critical",
    "additionalProperties": "critical",
    "optional-property": "critical",
    "$ref": "critical",
    "$defs": "critical",
    "definitions": "critical",
    # Medium: rejected or silently ignored depending on the consumer
    "allOf": "medium",
    "oneOf": "medium",
    "not": "medium",
    "patternProperties": "medium",
    "untyped": "medium",
    # Low
    "if": "low",
    "then": "low",
    "else": "low",
}


def validate_schema(schema: dict) -> list[dict]:
    """
    Check a schema against the restricted dialect contract.

    Args:
        schema: JSON Schema to validate

    Returns:
        List of issues found, each with:
        - path: JSONPath to the issue (e.g. "$.properties.labels")
        - pattern: The rule or forbidden keyword
        - message: Explanation of why it's a problem
        - severity: "critical", "medium", or "low"

    Example:
        >>> issues = validate_schema({"type": ["object", "null"]})
        >>> issues[0]["pattern"]
        'root-type'
    """
    issues = []

    if not isinstance(schema, dict) or schema.get("type") != "object":
        _add(issues, "$", "root-type")

    _find_issues(schema, "$", issues)

    # Sort by severity (critical first)
    severity_order = {"critical": 0, "medium": 1, "low": 2}
    issues.sort(key=lambda x: severity_order.get(x["severity"], 3))

    return issues


def _find_issues(node: Any, path: str, issues: list[dict]) -> None:
    """Recursively find contract violations in a schema node."""
    if not isinstance(node, dict):
        return

    properties = node.get("properties")
    if not isinstance(properties, dict):
        properties = {}

    # google.protobuf.Any: the shape depends on the embedded type
    if "@type" in properties:
        return

    for key in node:
        if key in FORBIDDEN_PATTERNS:
            _add(issues, f"{path}.{key}", key, FORBIDDEN_PATTERNS[key])

    node_type = node.get("type")
    if node_type is None:
        _add(issues, path, "untyped")

    if _is_object_type(node_type):
        if node.get("additionalProperties") is not False:
            _add(issues, path, "additionalProperties")

        required = node.get("required") or []
        for name in properties:
            if name not in required:
                _add(issues, f"{path}.properties.{name}", "optional-property")

    # Recurse into nested schemas
    for name, child in properties.items():
        _find_issues(child, f"{path}.properties.{name}", issues)

    items = node.get("items")
    if isinstance(items, dict):
        _find_issues(items, f"{path}.items", issues)

    additional = node.get("additionalProperties")
    if isinstance(additional, dict):
        _find_issues(additional, f"{path}.additionalProperties", issues)


def is_compatible(schema: dict) -> bool:
    """
    Quick check if schema honours the restricted dialect.

    Returns:
        True if no issues found, False otherwise
    """
    return len(validate_schema(schema)) == 0


def get_compatibility_summary(schema: dict) -> dict:
    """
    Get a summary of schema compatibility.

    Returns:
        Dict with:
        - compatible: bool
        - critical_count: int
        - medium_count: int
        - low_count: int
        - issues: list of issues
    """
    issues = validate_schema(schema)

    return {
        "compatible": len(issues) == 0,
        "critical_count": sum(1 for i in issues if i["severity"] == "critical"),
        "medium_count": sum(1 for i in issues if i["severity"] == "medium"),
        "low_count": sum(1 for i in issues if i["severity"] == "low"),
        "issues": issues,
    }


# ============== Helper Functions ==============

def _is_object_type(node_type: Any) -> bool:
    if isinstance(node_type, list):
        return "object" in node_type
    return node_type == "object"


def _add(issues: list[dict], path: str, pattern: str, message: str = "") -> None:
    issues.append({
        "path": path,
        "pattern": pattern,
        "message": message or RULES[pattern],
        "severity": SEVERITY.get(pattern, "low"),
    })
