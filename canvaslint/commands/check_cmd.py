"""Check command implementation."""

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..diagnostics import Diagnostic
from ..models import dump_document
from ..runner import CheckResult, check
from .common import LEVEL_STYLES, SEVERITY_ORDER, read_document, resolve_config


def run_check(
    document_path: Path,
    config_path: Path | None = None,
    fail_on: str = "error",
    output_json: bool = False,
    overlay_path: Path | None = None,
) -> int:
    """Run lint rules against a canvas document.

    Args:
        document_path: OCIF JSON file to check
        config_path: canvaslint.toml to use (defaults to the nearest one, then the recommended rules)
        fail_on: Exit with error if this level or higher found ("error" or "warning")
        output_json: Output results as JSON instead of a table
        overlay_path: Write the overlay document here

    Returns:
        Exit code (0 = success, 1 = findings at or above fail_on)
    """
    console = Console(stderr=True)

    document = read_document(document_path)
    config = resolve_config(document_path, config_path)
    if not output_json:
        console.print(f"Checking {document_path} with {len(config.rules)} rule(s)...", style="dim")

    result = check(document, config)

    if overlay_path is not None:
        overlay_path.write_text(dump_document(result.overlay) + "\n", encoding="utf-8")
        if not output_json:
            console.print(f"Wrote overlay to {overlay_path}", style="dim")

    counts = _count(result.diagnostics)
    if output_json:
        _output_json(document_path, result, counts)
    else:
        _output_table(console, result, counts)

    threshold = SEVERITY_ORDER[fail_on]
    if any(SEVERITY_ORDER[d.severity] <= threshold for d in result.diagnostics):
        return 1
    return 0


def _count(diagnostics: list[Diagnostic]) -> dict[str, int]:
    counts = {level: 0 for level in SEVERITY_ORDER}
    for d in diagnostics:
        counts[d.severity] += 1
    return counts


def _output_json(document_path: Path, result: CheckResult, counts: dict[str, int]) -> None:
    output = {
        "file": str(document_path),
        "diagnostics": [d.to_dict() for d in result.diagnostics],
        "unknownRules": result.unknown_rules,
        "summary": {
            "errors": counts["error"],
            "warnings": counts["warning"],
            "info": counts["info"],
            "hints": counts["hint"],
            "fixable": sum(1 for d in result.diagnostics if d.fixable),
        },
    }
    print(json.dumps(output, indent=2, default=str))


def _output_table(console: Console, result: CheckResult, counts: dict[str, int]) -> None:
    for rule_id in result.unknown_rules:
        console.print(escape(f"⚠ Unknown rule in config: {rule_id}"), style="yellow")

    if result.diagnostics:
        table = Table(title="Diagnostics")
        table.add_column("Severity")
        table.add_column("Rule", style="cyan", no_wrap=True)
        table.add_column("Target", style="magenta")
        table.add_column("Message")
        table.add_column("Fix", style="dim")

        for d in result.diagnostics:
            label, style = LEVEL_STYLES[d.severity]
            table.add_row(
                f"[{style}]{label}[/]",
                d.rule_id,
                escape(", ".join(str(t) for t in d.targets)),
                escape(d.message),
                escape(d.fix.description) if d.fix is not None else "",
            )
        console.print(table)

    console.print()
    if counts["error"]:
        console.print(f"✗ {counts['error']} error(s)", style="bold red")
    if counts["warning"]:
        console.print(f"⚠ {counts['warning']} warning(s)", style="yellow")
    if counts["info"] or counts["hint"]:
        console.print(f"ℹ {counts['info'] + counts['hint']} info(s)", style="dim")
    if not result.diagnostics:
        console.print("✓ No problems found", style="bold green")
    else:
        fixable = sum(1 for d in result.diagnostics if d.fixable)
        if fixable:
            console.print(f"  {fixable} problem(s) can be repaired with `canvaslint fix`", style="dim")
