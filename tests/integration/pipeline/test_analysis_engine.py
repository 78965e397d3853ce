from __future__ import annotations

"""
Integration tests for the analysis engine.

Runs complete analyses over real files: multi-configuration intersection,
in-place editing, patch generation, per-document failures and cancellation.
"""

import threading
from pathlib import Path
from typing import Any, Dict

import pytest

from deadregions.core.pipeline.engine import run_analysis
from deadregions.domain.directive_models import SymbolState

PLATFORM = (
    "using System;\n"
    "#if NET45\n"
    "Legacy();\n"
    "#elif NETCORE\n"
    "Modern();\n"
    "#endif\n"
    "#if DEBUG\n"
    "Trace();\n"
    "#endif\n"
)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    src = tmp_path / "src"
    src.mkdir()
    (src / "platform.cs").write_text(PLATFORM, encoding="utf-8")
    (src / "plain.cs").write_text("class Plain {}\n", encoding="utf-8")
    return tmp_path


def _config(project: Path, **extra: Any) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {"base_dir": str(project), "sources": ["src/*.cs"], "max_workers": 2}
    cfg.update(extra)
    return cfg


def test_single_configuration_counts(project: Path) -> None:
    result = run_analysis(_config(project, defined_symbols=["NETCORE"], varying_symbols=["DEBUG"]))

    assert result.ok
    assert result.configuration_names == ["default"]
    assert len(result.documents) == 2
    assert result.counts.as_dict() == {
        "total": 3, "disabled": 1, "enabled": 1, "varying": 1, "explicitly_varying": 0,
    }
    assert result.modified_files == []
    assert (project / "src" / "platform.cs").read_text(encoding="utf-8") == PLATFORM


def test_documents_sorted_by_identity(project: Path) -> None:
    result = run_analysis(_config(project))
    ids = [d.document_id for d in result.documents]
    assert ids == sorted(ids)


def test_configurations_are_intersected(project: Path) -> None:
    result = run_analysis(_config(project, configurations=[
        {"name": "net45", "symbols": {"NET45": "enabled", "NETCORE": "disabled"}},
        {"name": "netcore", "symbols": {"NET45": "disabled", "NETCORE": "enabled"}},
    ]))

    assert result.ok
    assert result.configuration_names == ["net45", "netcore"]
    platform = next(d for d in result.documents if d.path.endswith("platform.cs"))
    states = [r.state for r in platform.regions()]
    # Chains are ordered by region count: DEBUG (never defined) first, then the platform chain
    assert states == [SymbolState.ALWAYS_DISABLED, SymbolState.VARYING, SymbolState.VARYING]


def test_only_shared_documents_are_analysed(project: Path) -> None:
    result = run_analysis(_config(project, configurations=[
        {"name": "all", "symbols": {}},
        {"name": "one", "symbols": {}, "sources": ["src/platform.cs"]},
    ]))
    assert [Path(d.path).name for d in result.documents] == ["platform.cs"]


def test_edit_rewrites_files(project: Path) -> None:
    result = run_analysis(_config(
        project, edit=True, undefined_symbols=["NET45"], varying_symbols=["NETCORE"],
    ))

    path = project / "src" / "platform.cs"
    assert result.ok
    assert result.modified_files == [str(path)]
    assert path.read_text(encoding="utf-8") == (
        "using System;\n"
        "#if NETCORE\n"
        "Modern();\n"
        "#endif\n"
    )


def test_patch_does_not_touch_files(project: Path) -> None:
    result = run_analysis(_config(project, patch=True, defined_symbols=["DEBUG", "NET45"]))

    assert (project / "src" / "platform.cs").read_text(encoding="utf-8") == PLATFORM
    assert "--- a/" in result.patch
    assert "-#if DEBUG" in result.patch
    assert "-Modern();" in result.patch
    assert " Legacy();" in result.patch


def test_broken_document_is_reported_and_others_continue(project: Path) -> None:
    (project / "src" / "broken.cs").write_text("#if A\n", encoding="utf-8")

    result = run_analysis(_config(project))

    assert result.ok
    assert len(result.documents) == 2
    assert len(result.errors) == 1
    assert result.errors[0].path.endswith("broken.cs")
    assert "unterminated" in result.errors[0].error


def test_no_sources_is_an_error(tmp_path: Path) -> None:
    result = run_analysis({"base_dir": str(tmp_path), "sources": ["*.cs"]})
    assert not result.ok
    assert "No source documents" in result.error


def test_cancellation_writes_nothing(project: Path) -> None:
    event = threading.Event()
    event.set()

    result = run_analysis(_config(project, edit=True, defined_symbols=["DEBUG"]), cancellation_event=event)

    assert not result.ok
    assert result.cancelled
    assert (project / "src" / "platform.cs").read_text(encoding="utf-8") == PLATFORM
