from __future__ import annotations

import pytest

from canvaslint.diagnostics import (
    DeleteChange,
    Diagnostic,
    DiagnosticTarget,
    Fix,
    InsertChange,
    MoveChange,
    SetChange,
)
from canvaslint.fixer import MAX_FIX_ITERATIONS, fix
from canvaslint.models import Document

from conftest import make_document, make_edge, make_node


def _diag(message: str, *changes, target=None) -> Diagnostic:
    target = target or DiagnosticTarget("node", "a")
    return Diagnostic(
        message=message,
        targets=(target,),
        rule_id="test/rule",
        fix=Fix(description=message, changes=changes) if changes else None,
    )


@pytest.fixture
def document() -> Document:
    return make_document(
        nodes=[make_node("a", (0, 0), (10, 10)), make_node("b", (40, 0), (10, 10))],
        relations=[make_edge("e", "a", "b")],
    )


def test_diagnostics_without_fix_remain_and_change_nothing(document: Document) -> None:
    info = _diag("just a note")
    result = fix(document, [info])

    assert result.remaining == [info]
    assert result.applied == []
    assert result.failed == []
    assert result.document is document
    assert result.iterations == 0


def test_applied_fixes_update_a_copy(document: Document) -> None:
    move = _diag("move a", MoveChange("a", (5, 5)))
    result = fix(document, [move])

    assert result.applied == [move]
    assert result.document.nodes[0].position == (5, 5)
    assert document.nodes[0].position == (0, 0)


def test_partition_keeps_input_order_and_equal_diagnostics_apart(document: Document) -> None:
    same = _diag("delete e", DeleteChange(DiagnosticTarget("relation", "e")))
    note = _diag("note")
    result = fix(document, [same, note, same])

    # both copies count: the second delete finds e already gone
    assert result.applied == [same, same]
    assert result.remaining == [note]
    assert result.document.relations == ()


def test_unresolved_fix_is_retried_after_another_fix_applies(document: Document) -> None:
    rewire = _diag(
        "point late at a",
        SetChange(DiagnosticTarget("relation", "late", ("data", 0, "start")), "a"),
    )
    create = _diag("create late", InsertChange("relations", make_edge("late", "b", "b")))

    result = fix(document, [rewire, create])

    assert result.applied == [rewire, create]
    assert result.failed == []
    assert result.iterations == 2
    late = result.document.relations[-1]
    assert late.id == "late"
    assert late.data[0].get("start") == "a"


def test_deadlocked_fixes_fail_within_the_ceiling(document: Document) -> None:
    # each fix needs an element only the other creates, after itself
    first = _diag("needs x", SetChange(DiagnosticTarget("relation", "x", ("data", 0, "start")), "a"))
    second = _diag("needs y", SetChange(DiagnosticTarget("relation", "y", ("data", 0, "start")), "a"))

    result = fix(document, [first, second])

    assert result.failed == [first, second]
    assert result.applied == []
    assert result.document is document
    assert result.iterations <= MAX_FIX_ITERATIONS


def test_fix_that_keeps_requeueing_stops_at_max_iterations(document: Document) -> None:
    # the inserts make progress, so the round limit is what stops the loop
    waiting = _diag("never resolves", SetChange(DiagnosticTarget("relation", "never", ("data", 0, "end")), "a"))
    inserts = [_diag(f"insert {i}", InsertChange("nodes", make_node(f"extra-{i}"))) for i in range(10)]

    result = fix(document, [waiting, *inserts], max_iterations=1)

    assert result.iterations == 1
    assert result.failed == [waiting]
    assert len(result.applied) == 10


def test_all_changes_of_a_fix_apply_or_none_do(document: Document) -> None:
    half = _diag(
        "move then break",
        MoveChange("a", (99, 99)),
        SetChange(DiagnosticTarget("relation", "missing", ("data", 0, "start")), "a"),
    )
    result = fix(document, [half])

    assert result.failed == [half]
    assert result.document.nodes[0].position == (0, 0)


def test_exception_during_application_fails_immediately(document: Document, monkeypatch) -> None:
    import canvaslint.fixer as fixer_module

    calls = []

    def exploding(doc, change):
        calls.append(change)
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(fixer_module, "apply_change", exploding)
    bad = _diag("explodes", MoveChange("a", (1, 1)))
    result = fix(document, [bad])

    assert result.failed == [bad]
    assert len(calls) == 1
    assert result.iterations == 1


def test_max_iterations_must_be_positive(document: Document) -> None:
    with pytest.raises(ValueError):
        fix(document, [], max_iterations=0)
