"""Rules command implementation."""

import json

from rich.console import Console
from rich.table import Table

from ..registry import Registry, default_registry


def run_rules(output_json: bool = False, registry: Registry | None = None) -> int:
    """List registered rules with their metadata."""
    console = Console(stderr=True)
    if registry is None:
        registry = default_registry()
    rules = registry.list_all()

    if output_json:
        output = [
            {
                "id": rule.id,
                "target": rule.target,
                "description": rule.meta.description,
                "category": rule.meta.category,
                "severity": rule.meta.severity,
                "fixable": rule.meta.fixable,
                "docs": rule.meta.docs,
            }
            for rule in rules
        ]
        print(json.dumps(output, indent=2))
        return 0

    table = Table(title="Rules")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("target", style="magenta")
    table.add_column("category")
    table.add_column("severity")
    table.add_column("fixable", justify="center")
    table.add_column("description", style="dim")

    for rule in rules:
        table.add_row(
            rule.id,
            rule.target,
            rule.meta.category,
            rule.meta.severity,
            "✓" if rule.meta.fixable else "",
            rule.meta.description,
        )

    console.print(table)
    return 0
