from __future__ import annotations

"""
Atomic Document Worker.

Encapsulates the analysis of a single document under one build
configuration: read, scan, build chains, resolve. Designed to run inside a
ThreadPoolExecutor; it shares no mutable state with other tasks and
reports failures in its result dictionary instead of raising.
"""

import logging
import threading
from typing import AbstractSet, Any, Dict, Mapping, Optional

from deadregions.core.analysis.chain_builder import build_chains
from deadregions.core.analysis.resolver import resolve_chains
from deadregions.core.parsing.directive_scanner import scan_directives
from deadregions.domain.directive_models import (
    DirectiveSyntaxError,
    DocumentConditionalRegionInfo,
    SymbolState,
)
from deadregions.infra.fs import read_source_text

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def analyze_text(
        text: str,
        document_id: str,
        path: str,
        symbol_states: Mapping[str, SymbolState],
        ignored_symbols: AbstractSet[str] = frozenset(),
) -> DocumentConditionalRegionInfo:
    """
    Analyse an in-memory document.

    Args:
        text: Document text.
        document_id: Identity used for cross-configuration alignment.
        path: Path or label used in reports.
        symbol_states: Forced symbol states of the configuration.
        ignored_symbols: Symbols never treated as dead.

    Returns:
        DocumentConditionalRegionInfo: Resolved chains of the document.

    Raises:
        DirectiveSyntaxError: If the directive structure is unbalanced.
    """
    defined = frozenset(
        name for name, state in symbol_states.items() if state is SymbolState.ALWAYS_ENABLED
    )
    parsed = scan_directives(text, document_id, path, defined)
    chains = resolve_chains(build_chains(parsed), symbol_states, ignored_symbols)
    return DocumentConditionalRegionInfo(document_id, path, tuple(chains), text)


def analyze_document_task(
        path: str,
        document_id: str,
        symbol_states: Mapping[str, SymbolState],
        ignored_symbols: AbstractSet[str],
        cancellation_event: Optional[threading.Event] = None,
) -> Dict[str, Any]:
    """
    Execute the analysis lifecycle of a single file.

    Returns:
        Dict[str, Any]: {"ok": True, "path", "info"} on success, or
        {"ok": False, "path", "error", "cancelled"} on failure.
    """
    if cancellation_event is not None and cancellation_event.is_set():
        return {"ok": False, "path": path, "error": "Cancelled", "cancelled": True}

    try:
        text = read_source_text(path)
        info = analyze_text(text, document_id, path, symbol_states, ignored_symbols)
    except (OSError, DirectiveSyntaxError) as e:
        logger.error(f"Worker failed for {path}: {e}")
        return {"ok": False, "path": path, "error": str(e), "cancelled": False}

    logger.debug(f"Analysed {path}: {len(info.chains)} chains")
    return {"ok": True, "path": path, "info": info}
