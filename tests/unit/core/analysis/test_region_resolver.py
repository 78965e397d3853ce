from __future__ import annotations

"""
Unit tests for the region state resolver.

Verifies:
1. Classification of '#if', '#elif' and '#else' regions from earlier siblings.
2. Always-ignored symbols forcing VARYING from their directive onwards.
3. Resolution producing new chains without touching its input.
"""

from typing import List

import pytest

from deadregions.core.analysis.chain_builder import build_chains
from deadregions.core.analysis.resolver import resolve_chain
from deadregions.core.parsing.directive_scanner import scan_directives
from deadregions.domain.directive_models import DocumentConditionalRegionInfo, SymbolState

E = SymbolState.ALWAYS_ENABLED
D = SymbolState.ALWAYS_DISABLED
V = SymbolState.VARYING

IF_ELSE = "#if A\na();\n#else\nb();\n#endif\n"
IF_ELIF = "#if A\na();\n#elif B\nb();\n#endif\n"
IF_ELIF_ELSE = "#if A\na();\n#elif B\nb();\n#else\nc();\n#endif\n"


def _states(info: DocumentConditionalRegionInfo) -> List[SymbolState]:
    return [r.state for r in info.regions()]


def test_if_else_with_disabled_symbol(analyze) -> None:
    info = analyze("#if DEBUG\nA();\n#else\nB();\n#endif", {"DEBUG": "disabled"})
    assert len(info.chains) == 1
    assert _states(info) == [D, E]


def test_missing_symbol_is_disabled(analyze) -> None:
    assert _states(analyze(IF_ELSE)) == [D, E]


@pytest.mark.parametrize("a,expected", [
    ("enabled", [E, D]),
    ("disabled", [D, E]),
    ("varying", [V, V]),
])
def test_else_follows_earlier_branches(analyze, a: str, expected: List[SymbolState]) -> None:
    assert _states(analyze(IF_ELSE, {"A": a})) == expected


@pytest.mark.parametrize("a,b,expected", [
    ("disabled", "varying", [D, V]),
    ("enabled", "enabled", [E, D]),
    ("enabled", "varying", [E, D]),
    ("varying", "enabled", [V, V]),
    ("varying", "disabled", [V, D]),
    ("disabled", "enabled", [D, E]),
])
def test_elif_depends_on_earlier_branches(analyze, a: str, b: str, expected: List[SymbolState]) -> None:
    assert _states(analyze(IF_ELIF, {"A": a, "B": b})) == expected


@pytest.mark.parametrize("a,b,expected", [
    ("disabled", "disabled", [D, D, E]),
    ("disabled", "enabled", [D, E, D]),
    ("disabled", "varying", [D, V, V]),
    ("varying", "disabled", [V, D, V]),
])
def test_else_after_elif(analyze, a: str, b: str, expected: List[SymbolState]) -> None:
    assert _states(analyze(IF_ELIF_ELSE, {"A": a, "B": b})) == expected


def test_ignored_symbol_forces_varying(analyze) -> None:
    info = analyze("#if IGNORED\nx();\n#endif\n", ignored=["IGNORED"])
    (region,) = info.regions()
    assert region.state is V
    assert region.explicitly_varies


def test_ignored_symbol_applies_to_later_regions_only(analyze) -> None:
    info = analyze(IF_ELIF_ELSE.replace("B", "IGNORED"), {"A": "disabled"}, ignored=["IGNORED"])
    regions = list(info.regions())

    assert [r.state for r in regions] == [D, V, V]
    assert [r.explicitly_varies for r in regions] == [False, True, True]


def test_ignored_symbol_inside_larger_condition(analyze) -> None:
    info = analyze("#if A && !IGNORED\nx();\n#endif\n", {"A": "enabled"}, ignored=["IGNORED"])
    assert _states(info) == [V]


def test_resolution_does_not_mutate_input() -> None:
    (chain,) = build_chains(scan_directives(IF_ELSE))
    resolved = resolve_chain(chain, {"A": E})

    assert [r.state for r in chain] == [None, None]
    assert [r.state for r in resolved] == [E, D]
    assert resolved.key == chain.key


def test_ignored_elif_after_taken_branch_is_disabled(analyze) -> None:
    info = analyze(IF_ELIF.replace("B", "IGNORED"), {"A": "enabled"}, ignored=["IGNORED"])
    assert _states(info) == [E, D]


def test_ignored_elif_after_taken_middle_branch_is_disabled(analyze) -> None:
    text = "#if X\nx();\n#elif A\na();\n#elif IGNORED\nb();\n#endif\n"
    info = analyze(text, {"A": "enabled"}, ignored=["IGNORED"])
    assert _states(info) == [D, E, D]
