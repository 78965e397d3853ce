from __future__ import annotations

"""
Region State Resolver.

Classifies every region of a chain under a symbol -> state table. A region
is reachable only when all earlier branches of its chain are false, so each
classification takes the preceding siblings into account. Regions that
follow a condition mentioning an always-ignored symbol are forced to
VARYING and flagged as explicitly varying, unless an earlier branch is
always taken.
"""

import logging
from dataclasses import replace
from typing import AbstractSet, Iterable, List, Mapping

from deadregions.core.analysis.evaluator import evaluate, referenced_symbols
from deadregions.domain.directive_models import (
    ConditionalRegion,
    ConditionalRegionChain,
    Directive,
    DirectiveKind,
    SymbolState,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve_chain(
        chain: ConditionalRegionChain,
        symbol_states: Mapping[str, SymbolState],
        ignored_symbols: AbstractSet[str] = frozenset(),
) -> ConditionalRegionChain:
    """
    Return a copy of the chain with every region state resolved.

    Args:
        chain: Chain produced by the chain builder.
        symbol_states: Forced state per symbol; missing symbols are disabled.
        ignored_symbols: Symbols whose regions must never be treated as dead.

    Returns:
        ConditionalRegionChain: A new chain; the input is left untouched.
    """
    resolved: List[ConditionalRegion] = []
    earlier: List[SymbolState] = []
    ignored_symbol_seen = False

    for region in chain.regions:
        start = region.start
        if not ignored_symbol_seen and _depends_on_ignored(start, ignored_symbols):
            ignored_symbol_seen = True

        if ignored_symbol_seen and SymbolState.ALWAYS_ENABLED in earlier:
            # Unreachable whatever the ignored symbol turns out to be
            state = SymbolState.ALWAYS_DISABLED
        elif ignored_symbol_seen:
            state = SymbolState.VARYING
        else:
            state = _classify(start, earlier, symbol_states)

        earlier.append(state)
        resolved.append(replace(region, state=state, explicitly_varies=ignored_symbol_seen))

    return ConditionalRegionChain(tuple(resolved))


def resolve_chains(
        chains: Iterable[ConditionalRegionChain],
        symbol_states: Mapping[str, SymbolState],
        ignored_symbols: AbstractSet[str] = frozenset(),
) -> List[ConditionalRegionChain]:
    return [resolve_chain(c, symbol_states, ignored_symbols) for c in chains]


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _depends_on_ignored(directive: Directive, ignored_symbols: AbstractSet[str]) -> bool:
    # '#else' and '#endif' carry no expression; an '#else' inherits through its '#if'
    if not ignored_symbols or directive.condition is None:
        return False
    return any(name in ignored_symbols for name in referenced_symbols(directive.condition))


def _classify(
        directive: Directive,
        earlier: List[SymbolState],
        symbol_states: Mapping[str, SymbolState],
) -> SymbolState:
    if directive.kind is DirectiveKind.ELSE:
        if SymbolState.ALWAYS_ENABLED in earlier:
            return SymbolState.ALWAYS_DISABLED
        if all(s is SymbolState.ALWAYS_DISABLED for s in earlier):
            return SymbolState.ALWAYS_ENABLED
        return SymbolState.VARYING

    own = evaluate(directive.condition, symbol_states)
    if directive.kind is DirectiveKind.IF:
        return own

    # '#elif': unreachable once an earlier branch is always taken
    if SymbolState.ALWAYS_ENABLED in earlier or own is SymbolState.ALWAYS_DISABLED:
        return SymbolState.ALWAYS_DISABLED
    if SymbolState.VARYING in earlier:
        return SymbolState.VARYING
    return own
