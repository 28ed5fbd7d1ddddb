"""Fix command implementation."""

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..diagnostics import Diagnostic
from ..fixer import FixResult, fix
from ..models import dump_document
from ..runner import check
from .common import SEVERITY_ORDER, read_document_with_indent, resolve_config


def run_fix(
    document_path: Path,
    config_path: Path | None = None,
    output_path: Path | None = None,
    dry_run: bool = False,
    output_json: bool = False,
) -> int:
    """Check a document and apply every available fix.

    Fixes are attempted errors first, then warnings, keeping rule order
    within a severity. The written file keeps the source file's indentation.

    Args:
        document_path: OCIF JSON file to repair
        config_path: canvaslint.toml to use
        output_path: Where to write the fixed document (defaults to document_path)
        dry_run: Report what would change without writing anything
        output_json: Output results as JSON

    Returns:
        Exit code (0 = every fix applied, 1 = some fix failed)
    """
    console = Console(stderr=True)

    document, indent = read_document_with_indent(document_path)
    config = resolve_config(document_path, config_path)

    result = check(document, config)
    ordered = sorted(result.diagnostics, key=lambda d: SEVERITY_ORDER[d.severity])
    outcome = fix(document, ordered)

    target = output_path or document_path
    written = False
    if outcome.applied and not dry_run:
        target.write_text(dump_document(outcome.document, indent=indent) + "\n", encoding="utf-8")
        written = True

    if output_json:
        _output_json(document_path, target if written else None, outcome)
    else:
        _output_summary(console, target if written else None, outcome, dry_run)

    return 1 if outcome.failed else 0


def _output_json(document_path: Path, written_to: Path | None, outcome: FixResult) -> None:
    output = {
        "file": str(document_path),
        "output": str(written_to) if written_to is not None else None,
        "iterations": outcome.iterations,
        "applied": [d.to_dict() for d in outcome.applied],
        "failed": [d.to_dict() for d in outcome.failed],
        "remaining": [d.to_dict() for d in outcome.remaining],
    }
    print(json.dumps(output, indent=2, default=str))


def _print_group(console: Console, title: str, diagnostics: list[Diagnostic], style: str) -> None:
    if not diagnostics:
        return
    console.print(f"\n{title} ({len(diagnostics)})", style=f"bold {style}")
    for d in diagnostics:
        fix_note = f" ({d.fix.description})" if d.fix is not None else ""
        console.print(escape(f"  [{d.rule_id}] {d.targets[0]} - {d.message}{fix_note}"), style=style)


def _output_summary(console: Console, written_to: Path | None, outcome: FixResult, dry_run: bool) -> None:
    verb = "Would apply" if dry_run else "Applied"
    _print_group(console, verb, outcome.applied, "green")
    _print_group(console, "Failed", outcome.failed, "red")
    _print_group(console, "Not fixable", outcome.remaining, "yellow")

    console.print()
    if not outcome.applied:
        console.print("✓ Nothing to fix", style="dim")
    elif written_to is not None:
        console.print(f"✓ Wrote fixed document to {written_to}", style="bold green")
    else:
        console.print("Dry run: no files written", style="dim")
    if outcome.failed:
        console.print(f"✗ {len(outcome.failed)} fix(es) could not be applied", style="bold red")
