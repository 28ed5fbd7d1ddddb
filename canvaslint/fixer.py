"""Fix engine: apply diagnostic repairs until no further repair makes progress."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .diagnostics import Diagnostic, Fix
from .models import Document
from .paths import Unresolved, apply_change

logger = logging.getLogger(__name__)

# Upper bound on fix rounds; guarantees termination when fixes wait on each other
MAX_FIX_ITERATIONS = 100


@dataclass
class FixResult:
    """Outcome of a fix run.

    `applied`, `failed` and `remaining` partition the input diagnostics,
    each listed in input order. `remaining` holds diagnostics that carried
    no fix at all.
    """

    document: Document
    applied: list[Diagnostic] = field(default_factory=list)
    failed: list[Diagnostic] = field(default_factory=list)
    remaining: list[Diagnostic] = field(default_factory=list)
    iterations: int = 0


def apply_fix(document: Document, fix: Fix) -> Document | Unresolved:
    """Apply every change of a fix in order.

    If any change's target does not resolve, the partially updated document
    is dropped and the Unresolved outcome returned; the input is never
    touched.
    """
    working = document
    for change in fix.changes:
        outcome = apply_change(working, change)
        if isinstance(outcome, Unresolved):
            return outcome
        working = outcome
    return working


def fix(
    document: Document,
    diagnostics: Sequence[Diagnostic],
    *,
    max_iterations: int = MAX_FIX_ITERATIONS,
) -> FixResult:
    """
    Apply the fixes carried by `diagnostics` to a copy of `document`.

    Diagnostics are attempted in the order given; callers wanting errors
    before warnings sort first. A fix whose target cannot be resolved yet is
    retried in the next round, since another fix may make it resolvable.
    Rounds repeat while some fix was applied, up to `max_iterations`. A fix
    that raises is failed at once and never retried.

    Args:
        document: Document to repair (never modified)
        diagnostics: Diagnostics to apply, typically from check()
        max_iterations: Round limit

    Returns:
        FixResult with the repaired document and the applied / failed /
        remaining partition of `diagnostics`
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")

    # Diagnostics are tracked by their position in the input, not by identity
    # or value: two equal diagnostics are still two entries.
    remaining_keys: set[int] = set()
    pending: list[int] = []
    for key, diagnostic in enumerate(diagnostics):
        if diagnostic.fix is None:
            remaining_keys.add(key)
        else:
            pending.append(key)

    applied_keys: set[int] = set()
    failed_keys: set[int] = set()
    working = document
    iterations = 0
    made_progress = True

    while pending and made_progress and iterations < max_iterations:
        iterations += 1
        made_progress = False
        retry: list[int] = []

        for key in pending:
            diagnostic = diagnostics[key]
            try:
                outcome = apply_fix(working, diagnostic.fix)
            except Exception:
                logger.exception(f"Failed to apply fix for {diagnostic.rule_id}: {diagnostic.message}")
                failed_keys.add(key)
                continue

            if isinstance(outcome, Unresolved):
                logger.debug(f"Round {iterations}: deferring {diagnostic.rule_id} ({outcome})")
                retry.append(key)
                continue

            working = outcome
            applied_keys.add(key)
            made_progress = True

        pending = retry

    if pending:
        logger.info(f"{len(pending)} fix(es) could not be applied after {iterations} round(s)")
        failed_keys.update(pending)

    return FixResult(
        document=working,
        applied=[d for k, d in enumerate(diagnostics) if k in applied_keys],
        failed=[d for k, d in enumerate(diagnostics) if k in failed_keys],
        remaining=[d for k, d in enumerate(diagnostics) if k in remaining_keys],
        iterations=iterations,
    )
