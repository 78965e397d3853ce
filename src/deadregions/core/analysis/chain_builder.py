from __future__ import annotations

"""
Conditional Region Chain Builder.

Groups the linked directives of a scanned document into chains of
unresolved regions. Groups that were already visited, that pass through an
inactive directive, or whose conditions could not be parsed are dropped:
under-reporting dead code is preferred to an unsafe removal.
"""

import logging
from typing import List, Optional, Sequence, Set

from deadregions.core.parsing.directive_scanner import ParsedDocument
from deadregions.domain.directive_models import (
    ConditionalRegion,
    ConditionalRegionChain,
    Directive,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_chains(document: ParsedDocument) -> List[ConditionalRegionChain]:
    """
    Build one chain per linked directive group of the document.

    Args:
        document: Directive snapshot produced by the scanner.

    Returns:
        List[ConditionalRegionChain]: Chains sorted by their key; every
        region is unresolved (state None).
    """
    chains: List[ConditionalRegionChain] = []
    visited: Set[int] = set()

    for directive in document.branching_directives():
        if directive.index in visited:
            continue

        chain = parse_region_chain(document.linked_directives(directive), visited)
        if chain is not None:
            chains.append(chain)

    chains.sort(key=lambda c: c.key)
    return chains


def parse_region_chain(
        directives: Sequence[Directive],
        visited: Set[int],
) -> Optional[ConditionalRegionChain]:
    """
    Turn one linked directive group into a chain.

    Every directive of the group is marked visited even when the chain is
    rejected, so the group is never attempted twice.

    Args:
        directives: The group in source order ('#if', '#elif'*, '#else'?, '#endif').
        visited: Directive indices already consumed; updated in place.

    Returns:
        Optional[ConditionalRegionChain]: The chain, or None if it was rejected.
    """
    regions: List[ConditionalRegion] = []
    rejected = False
    reason = ""

    for i, directive in enumerate(directives):
        if directive.index in visited:
            rejected, reason = True, "already visited"
            break

        if i > 0 and not rejected:
            previous = directives[i - 1]
            # Conditions on a branch the original compilation skipped were never evaluated
            if not previous.is_active:
                rejected, reason = True, "inactive directive"
            elif previous.has_condition_slot and previous.condition is None:
                rejected, reason = True, "unparseable condition"
            else:
                regions.append(ConditionalRegion(start=previous, end=directive, index=len(regions)))

    visited.update(d.index for d in directives)

    if rejected or not regions:
        if directives:
            logger.debug(f"Dropped chain at line {directives[0].line + 1}: {reason or 'empty'}")
        return None

    return ConditionalRegionChain(tuple(regions))
