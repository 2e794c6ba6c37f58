"""
Compatibility Reporter

Renders validator results for the CLI:
- JSON report for programmatic consumption
- Terminal output for humans
"""

import json

ANSI = {
    "red": "\033[91m",
    "green": "\033[92m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "bold": "\033[1m",
    "reset": "\033[0m",
}

SEVERITY_COLORS = {"critical": "red", "medium": "yellow", "low": "blue"}


def generate_report(message_name: str, schema: dict, issues: list[dict]) -> dict:
    """
    Generate a JSON report for one message.

    Args:
        message_name: Fully qualified message name
        schema: Generated restricted schema
        issues: Issues from validator.validate_schema()

    Returns:
        Report dict with message, status (COMPATIBLE / INCOMPATIBLE),
        issues and the schema itself
    """
    return {
        "message": message_name,
        "status": "INCOMPATIBLE" if issues else "COMPATIBLE",
        "issues": issues,
        "schema": schema,
    }


def print_terminal_report(report: dict, use_color: bool = True) -> None:
    """
    Pretty-print a report to the terminal.

    Args:
        report: Report dict from generate_report()
        use_color: Whether to use ANSI color codes
    """
    colors = _palette(use_color)
    reset = colors["reset"]
    issues = report["issues"]

    _header(f"MESSAGE: {report['message']}", colors)

    status_color = colors["green"] if report["status"] == "COMPATIBLE" else colors["red"]
    print(f"{status_color}STATUS: {report['status']}{reset}")

    if issues:
        counts = ", ".join(
            f"{sum(1 for i in issues if i['severity'] == level)} {level}"
            for level in SEVERITY_COLORS
        )
        print(f"\n{colors['yellow']}{len(issues)} issue(s): {counts}{reset}")
        for number, issue in enumerate(issues, 1):
            color = colors[SEVERITY_COLORS.get(issue["severity"], "blue")]
            print(f"   [{number}] {color}{issue['severity'].upper():<8}{reset} {issue['path']}")
            print(f"       {issue['pattern']}: {issue['message']}")

    print()


def print_diff(standard: dict, restricted: dict, message_name: str, use_color: bool = True) -> None:
    """
    Print the STANDARD and RESTRICTED_COMPAT schemas of a message one after the other.

    Args:
        standard: Schema generated with Dialect.STANDARD
        restricted: Schema generated with Dialect.RESTRICTED_COMPAT
        message_name: Name of the message (for header)
        use_color: Whether to use ANSI color codes
    """
    colors = _palette(use_color)

    _header(f"SCHEMA DIFF: {message_name}", colors)

    print(f"\n{colors['red']}--- STANDARD{colors['reset']}")
    print(json.dumps(standard, indent=2))

    print(f"\n{colors['green']}+++ RESTRICTED{colors['reset']}")
    print(json.dumps(restricted, indent=2))

    print()


def format_json_report(report: dict, indent: int = 2) -> str:
    return json.dumps(report, indent=indent)


def _palette(use_color: bool) -> dict[str, str]:
    if use_color:
        return ANSI
    return {name: "" for name in ANSI}


def _header(title: str, colors: dict[str, str]) -> None:
    print(f"\n{colors['bold']}{'═' * 68}{colors['reset']}")
    print(f"{colors['bold']}{title}{colors['reset']}")
    print("═" * 68)
