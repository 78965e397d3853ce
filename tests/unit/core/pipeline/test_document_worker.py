from __future__ import annotations

"""
Unit tests for the per-document analysis worker.

Verifies that the worker reports results and failures through its result
dictionary instead of raising.
"""

import threading
from pathlib import Path

from deadregions.core.pipeline.stages.worker import analyze_document_task
from deadregions.domain.directive_models import SymbolState


def test_worker_success(tmp_path: Path) -> None:
    source = tmp_path / "a.cs"
    source.write_text("#if A\nx();\n#endif\n", encoding="utf-8")

    res = analyze_document_task(str(source), "id-a", {"A": SymbolState.ALWAYS_ENABLED}, frozenset())

    assert res["ok"] is True
    info = res["info"]
    assert info.document_id == "id-a"
    assert info.path == str(source)
    assert [r.state for r in info.regions()] == [SymbolState.ALWAYS_ENABLED]


def test_worker_missing_file(tmp_path: Path) -> None:
    res = analyze_document_task(str(tmp_path / "missing.cs"), "x", {}, frozenset())
    assert res["ok"] is False
    assert res["cancelled"] is False
    assert res["error"]


def test_worker_unbalanced_directives(tmp_path: Path) -> None:
    source = tmp_path / "bad.cs"
    source.write_text("#if A\nx();\n", encoding="utf-8")

    res = analyze_document_task(str(source), "bad", {}, frozenset())

    assert res["ok"] is False
    assert "unterminated" in res["error"]


def test_worker_honours_cancellation(tmp_path: Path) -> None:
    source = tmp_path / "a.cs"
    source.write_text("#if A\n#endif\n", encoding="utf-8")
    event = threading.Event()
    event.set()

    res = analyze_document_task(str(source), "a", {}, frozenset(), event)

    assert res["ok"] is False
    assert res["cancelled"] is True


def test_worker_drops_deeply_nested_condition(tmp_path: Path) -> None:
    deep = "(" * 2000 + "A" + ")" * 2000
    source = tmp_path / "deep.cs"
    source.write_text(f"#if {deep}\nx();\n#endif\n#if B\ny();\n#endif\n", encoding="utf-8")

    res = analyze_document_task(str(source), "deep", {"B": SymbolState.ALWAYS_ENABLED}, frozenset())

    assert res["ok"] is True
    assert [r.state for r in res["info"].regions()] == [SymbolState.ALWAYS_ENABLED]
