from __future__ import annotations

"""
Region Count Aggregation.

Pure fold over resolved chains producing the disabled / enabled / varying
totals reported at the end of a run.
"""

from typing import Iterable

from deadregions.domain.directive_models import (
    DocumentConditionalRegionInfo,
    RegionCounts,
    SymbolState,
)


def count_regions(infos: Iterable[DocumentConditionalRegionInfo]) -> RegionCounts:
    """Count resolved regions by state across all documents."""
    disabled = enabled = varying = explicitly_varying = 0

    for info in infos:
        for region in info.regions():
            if region.state is SymbolState.ALWAYS_DISABLED:
                disabled += 1
            elif region.state is SymbolState.ALWAYS_ENABLED:
                enabled += 1
            elif region.state is SymbolState.VARYING:
                varying += 1
                if region.explicitly_varies:
                    explicitly_varying += 1

    return RegionCounts(disabled, enabled, varying, explicitly_varying)
