from __future__ import annotations

"""
Unit tests for the directive, region and chain value types.
"""

from dataclasses import FrozenInstanceError

import pytest

from deadregions.domain.directive_models import (
    ConditionalRegion,
    ConditionalRegionChain,
    Directive,
    DirectiveKind,
    DirectiveSyntaxError,
    RegionCounts,
    SymbolState,
)
from deadregions.domain.edit_models import TextEdit


def _directive(index: int, kind: DirectiveKind, line: int, text: str) -> Directive:
    return Directive(index, kind, 0, 0, 0, 0, line=line, text=text)


def test_chain_requires_regions() -> None:
    with pytest.raises(ValueError):
        ConditionalRegionChain(())


def test_chain_requires_linked_regions() -> None:
    d0 = _directive(0, DirectiveKind.IF, 0, "#if A\n")
    d1 = _directive(1, DirectiveKind.ELSE, 2, "#else\n")
    d2 = _directive(2, DirectiveKind.ENDIF, 4, "#endif\n")

    with pytest.raises(ValueError):
        ConditionalRegionChain((ConditionalRegion(d0, d1, 0), ConditionalRegion(d0, d2, 1)))

    chain = ConditionalRegionChain((ConditionalRegion(d0, d1, 0), ConditionalRegion(d1, d2, 1)))
    assert len(chain) == 2


def test_region_str() -> None:
    region = ConditionalRegion(
        _directive(0, DirectiveKind.IF, 4, "#if DEBUG\n"),
        _directive(1, DirectiveKind.ENDIF, 9, "#endif\n"),
        0,
        SymbolState.ALWAYS_DISABLED,
    )
    assert str(region) == "(5-10): #if DEBUG .. #endif [disabled]"


def test_regions_are_immutable() -> None:
    region = ConditionalRegion(
        _directive(0, DirectiveKind.IF, 0, ""), _directive(1, DirectiveKind.ENDIF, 1, ""), 0
    )
    with pytest.raises(FrozenInstanceError):
        region.state = SymbolState.VARYING  # type: ignore[misc]


def test_directive_kinds() -> None:
    assert _directive(0, DirectiveKind.ELIF, 0, "").has_condition_slot
    assert not _directive(0, DirectiveKind.ELSE, 0, "").has_condition_slot
    assert not _directive(0, DirectiveKind.ENDIF, 0, "").is_branching


def test_directive_syntax_error_carries_line() -> None:
    err = DirectiveSyntaxError("unterminated #if", 7)
    assert err.line == 7
    assert "line 7" in str(err)


def test_state_helpers() -> None:
    assert SymbolState.ALWAYS_ENABLED.is_decided
    assert not SymbolState.VARYING.is_decided
    assert RegionCounts(1, 2, 3, 1).total == 6


def test_text_edit_ordering() -> None:
    edits = [TextEdit(5, 9), TextEdit(0, 9), TextEdit(0, 3)]
    assert sorted(edits, key=lambda e: e.sort_key) == [TextEdit(0, 3), TextEdit(0, 9), TextEdit(5, 9)]
    assert TextEdit(2, 7).length == 5
