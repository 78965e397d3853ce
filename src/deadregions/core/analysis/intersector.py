from __future__ import annotations

"""
Cross-Configuration Intersector.

Combines the per-document results computed independently for several build
configurations into a single answer valid for all of them. Only documents
and chains present with the same shape in every configuration survive; a
region keeps a decided state only when every configuration agrees on it.
Inputs are never mutated: merged chains are new values.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, List, Sequence, TypeVar

from deadregions.domain.directive_models import (
    ConditionalRegion,
    ConditionalRegionChain,
    DocumentConditionalRegionInfo,
    SymbolState,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def merge_state(a: SymbolState, b: SymbolState) -> SymbolState:
    """States that agree carry over; any disagreement means the region varies."""
    return a if a is b else SymbolState.VARYING


def intersect_chains(
        a: ConditionalRegionChain,
        b: ConditionalRegionChain,
) -> ConditionalRegionChain:
    """
    Merge two chains of identical shape region by region.

    Once a region varies, every later region of the chain varies too: it is
    only reachable through the undecidable branch.

    Raises:
        ValueError: If the chains do not share the same key.
    """
    if a.key != b.key:
        raise ValueError(f"Cannot intersect chains with different shapes: {a.key} != {b.key}")

    merged: List[ConditionalRegion] = []
    varies = False

    for left, right in zip(a.regions, b.regions):
        state = merge_state(left.state, right.state)
        if varies or state is SymbolState.VARYING:
            varies = True
            state = SymbolState.VARYING
        merged.append(replace(
            left,
            state=state,
            explicitly_varies=left.explicitly_varies or right.explicitly_varies,
        ))

    return ConditionalRegionChain(tuple(merged))


def intersect_document(
        a: DocumentConditionalRegionInfo,
        b: DocumentConditionalRegionInfo,
) -> DocumentConditionalRegionInfo:
    """Intersect the chains of one document seen under two configurations."""
    chains = _sorted_merge(a.chains, b.chains, lambda c: c.key, intersect_chains)
    return replace(a, chains=tuple(chains))


def intersect(
        infos_a: Sequence[DocumentConditionalRegionInfo],
        infos_b: Sequence[DocumentConditionalRegionInfo],
) -> List[DocumentConditionalRegionInfo]:
    """
    Intersect two sorted lists of document results.

    Both inputs must be sorted by document identity, and each document's
    chains by chain key. The left side's path and text are kept.

    Args:
        infos_a: Results of the first configuration.
        infos_b: Results of the second configuration.

    Returns:
        List[DocumentConditionalRegionInfo]: Documents present in both inputs,
        with merged chains.
    """
    return _sorted_merge(infos_a, infos_b, lambda i: i.document_id, intersect_document)


def intersect_all(
        per_configuration: Sequence[Sequence[DocumentConditionalRegionInfo]],
) -> List[DocumentConditionalRegionInfo]:
    """Fold the intersection pairwise, left to right, over every configuration."""
    if not per_configuration:
        return []

    result = list(per_configuration[0])
    for other in per_configuration[1:]:
        result = intersect(result, other)
    return result


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _sorted_merge(
        xs: Sequence[T],
        ys: Sequence[T],
        key: Callable[[T], Any],
        combine: Callable[[T, T], T],
) -> List[T]:
    """Two-cursor walk keeping only elements whose keys appear on both sides."""
    out: List[T] = []
    i = j = 0
    dropped = 0

    while i < len(xs) and j < len(ys):
        kx, ky = key(xs[i]), key(ys[j])
        if kx == ky:
            out.append(combine(xs[i], ys[j]))
            i += 1
            j += 1
        elif kx < ky:
            i += 1
            dropped += 1
        else:
            j += 1
            dropped += 1

    dropped += (len(xs) - i) + (len(ys) - j)
    if dropped:
        logger.debug(f"Intersection dropped {dropped} unmatched entries.")
    return out
