from __future__ import annotations

"""
Unit tests for the configuration domain: defaults, state spellings, JSON
loading and the typed build-configuration view.
"""

import json
import os
from pathlib import Path

import pytest

from deadregions.core.pipeline.validator import validate_config
from deadregions.domain.config import (
    DEFAULT_CONFIGURATION_NAME,
    build_configurations,
    get_default_config,
    load_config_file,
    parse_symbol_state,
)
from deadregions.domain.directive_models import SymbolState


def test_default_config_is_fresh() -> None:
    a = get_default_config()
    a["sources"].append("x")
    assert get_default_config()["sources"] == []


@pytest.mark.parametrize("value,expected", [
    ("enabled", SymbolState.ALWAYS_ENABLED),
    ("Defined", SymbolState.ALWAYS_ENABLED),
    (True, SymbolState.ALWAYS_ENABLED),
    ("off", SymbolState.ALWAYS_DISABLED),
    (False, SymbolState.ALWAYS_DISABLED),
    (" varies ", SymbolState.VARYING),
    (SymbolState.VARYING, SymbolState.VARYING),
])
def test_parse_symbol_state(value, expected) -> None:
    assert parse_symbol_state(value) is expected


def test_parse_symbol_state_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        parse_symbol_state("sometimes")


def test_load_config_file_sets_base_dir(tmp_path: Path) -> None:
    path = tmp_path / "deadregions.json"
    path.write_text(json.dumps({"sources": ["*.cs"]}), encoding="utf-8")

    data = load_config_file(str(path))

    assert data["sources"] == ["*.cs"]
    assert data["base_dir"] == str(tmp_path)


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_load_config_file_rejects_invalid(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config_file(str(path))


def test_single_configuration_from_symbol_lists(tmp_path: Path) -> None:
    (tmp_path / "a.cs").write_text("", encoding="utf-8")
    cfg, _ = validate_config({
        "base_dir": str(tmp_path),
        "sources": ["*.cs"],
        "defined_symbols": ["DEBUG"],
        "undefined_symbols": ["TRACE", "X"],
        "varying_symbols": ["X"],
    })

    (configuration,) = build_configurations(cfg)

    assert configuration.name == DEFAULT_CONFIGURATION_NAME
    assert configuration.sources == (os.path.abspath(str(tmp_path / "a.cs")),)
    assert configuration.symbol_states == {
        "DEBUG": SymbolState.ALWAYS_ENABLED,
        "TRACE": SymbolState.ALWAYS_DISABLED,
        "X": SymbolState.VARYING,
    }


def test_multiple_configurations_inherit_sources(tmp_path: Path) -> None:
    (tmp_path / "a.cs").write_text("", encoding="utf-8")
    (tmp_path / "b.cs").write_text("", encoding="utf-8")
    cfg, _ = validate_config({
        "base_dir": str(tmp_path),
        "sources": ["a.cs"],
        "configurations": [
            {"name": "one", "symbols": {"A": "enabled"}},
            {"name": "two", "symbols": {"A": "disabled"}, "sources": ["a.cs", "b.cs"]},
        ],
    })

    one, two = build_configurations(cfg)

    assert [os.path.basename(p) for p in one.sources] == ["a.cs"]
    assert [os.path.basename(p) for p in two.sources] == ["a.cs", "b.cs"]
    assert two.symbol_states == {"A": SymbolState.ALWAYS_DISABLED}
