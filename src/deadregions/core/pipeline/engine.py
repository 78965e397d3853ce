from __future__ import annotations

"""
Core orchestration pipeline.

Coordinates a complete analysis run:
1. Validates the configuration and derives the build configurations.
2. Aligns documents across configurations by identity.
3. Analyses every document of every configuration in parallel threads.
4. Intersects the per-configuration results.
5. Counts regions and, on request, rewrites or diffs the documents.
"""

import difflib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, AbstractSet, Dict, List, Optional, Tuple

from deadregions.core.analysis.intersector import intersect_all
from deadregions.core.analysis.region_remover import remove_unnecessary_regions
from deadregions.core.analysis.summary import count_regions
from deadregions.core.pipeline.stages.worker import analyze_document_task
from deadregions.core.pipeline.validator import validate_config
from deadregions.domain.config import BuildConfiguration, build_configurations
from deadregions.domain.directive_models import DocumentConditionalRegionInfo
from deadregions.domain.pipeline_models import (
    AnalysisResult,
    DocumentError,
    create_error_result,
    create_success_result,
)
from deadregions.infra.fs import document_identity, write_source_text

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_analysis(
        config: Optional[Dict[str, Any]],
        *,
        cancellation_event: Optional[threading.Event] = None,
) -> AnalysisResult:
    """
    Execute the full dead-region analysis.

    Args:
        config: The configuration dictionary (raw or partial).
        cancellation_event: When set, pending work is skipped and no file
                            is modified.

    Returns:
        AnalysisResult: Object containing status, documents, counts and summary.
    """
    logger.info("Analysis started.")

    # -------------------------------------------------------------------------
    # 1) Config
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    configurations = build_configurations(cfg)
    names = [c.name for c in configurations]
    ignored = frozenset(cfg["ignored_symbols"])

    # -------------------------------------------------------------------------
    # 2) Document Alignment
    # -------------------------------------------------------------------------
    documents = _common_documents(configurations)
    if not documents:
        msg = "No source documents shared by every configuration."
        logger.error(msg)
        return create_error_result(msg, names)

    logger.info(f"Analysing {len(documents)} documents under {len(configurations)} configuration(s).")

    # -------------------------------------------------------------------------
    # 3) Parallel Analysis
    # -------------------------------------------------------------------------
    errors: List[DocumentError] = []
    per_configuration: List[List[DocumentConditionalRegionInfo]] = []

    for configuration in configurations:
        infos = _analyze_configuration(
            configuration,
            documents,
            ignored,
            cfg["max_workers"],
            errors,
            cancellation_event,
        )
        per_configuration.append(infos)

    if cancellation_event is not None and cancellation_event.is_set():
        logger.warning("Analysis cancelled; no document was modified.")
        return create_error_result("Analysis cancelled.", names, cancelled=True)

    # -------------------------------------------------------------------------
    # 4) Intersection & Counts
    # -------------------------------------------------------------------------
    final_infos = intersect_all(per_configuration)
    counts = count_regions(final_infos)

    # -------------------------------------------------------------------------
    # 5) Rewrite / Patch
    # -------------------------------------------------------------------------
    modified: List[str] = []
    patch_chunks: List[str] = []

    if cfg["edit"] or cfg["patch"]:
        for info in final_infos:
            new_text = remove_unnecessary_regions(info)
            if new_text == info.text:
                continue
            modified.append(info.path)

            if cfg["patch"]:
                patch_chunks.append(_unified_diff(info.path, info.text, new_text))
                continue

            try:
                write_source_text(info.path, new_text)
                logger.info(f"Rewrote {info.path}")
            except OSError as e:
                logger.error(f"Failed to write {info.path}: {e}")
                errors.append(DocumentError(info.path, f"Write failed: {e}"))

    logger.info(
        f"Analysis finished. Documents: {len(final_infos)}, "
        f"Regions: {counts.total}, Errors: {len(errors)}."
    )

    return create_success_result(
        configuration_names=names,
        documents=final_infos,
        counts=counts,
        errors=errors,
        modified_files=modified,
        patch="".join(patch_chunks),
        summary_extra={"ignored_symbols": sorted(ignored), "warnings": len(warnings)},
    )


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _common_documents(configurations: List[BuildConfiguration]) -> List[Tuple[str, str]]:
    """Return (identity, path) pairs compiled by every configuration, sorted by identity."""
    common: Optional[Dict[str, str]] = None

    for configuration in configurations:
        current = {document_identity(p): p for p in configuration.sources}
        if common is None:
            common = current
            continue
        skipped = set(common) ^ set(current)
        if skipped:
            logger.debug(
                f"Configuration '{configuration.name}': {len(skipped)} documents "
                f"not shared with every other configuration."
            )
        common = {k: v for k, v in common.items() if k in current}

    return sorted((common or {}).items())


def _analyze_configuration(
        configuration: BuildConfiguration,
        documents: List[Tuple[str, str]],
        ignored_symbols: AbstractSet[str],
        max_workers: Optional[int],
        errors: List[DocumentError],
        cancellation_event: Optional[threading.Event],
) -> List[DocumentConditionalRegionInfo]:
    """Analyse every document under one configuration; results sorted by identity."""
    logger.debug(f"Configuration '{configuration.name}': {configuration.symbol_states}")
    infos: List[DocumentConditionalRegionInfo] = []

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="AnalysisWorker") as executor:
        tasks = []
        for identity, path in documents:
            if cancellation_event is not None and cancellation_event.is_set():
                break
            tasks.append(executor.submit(
                analyze_document_task,
                path=path,
                document_id=identity,
                symbol_states=configuration.symbol_states,
                ignored_symbols=ignored_symbols,
                cancellation_event=cancellation_event,
            ))

        for future in as_completed(tasks):
            worker_res = future.result()
            if worker_res["ok"]:
                infos.append(worker_res["info"])
            elif not worker_res.get("cancelled"):
                errors.append(DocumentError(
                    worker_res["path"],
                    f"[{configuration.name}] {worker_res['error']}",
                ))

    infos.sort(key=lambda i: i.document_id)
    return infos


def _unified_diff(path: str, old: str, new: str) -> str:
    lines = difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
    )
    out = []
    for line in lines:
        out.append(line if line.endswith("\n") else line + "\n\\ No newline at end of file\n")
    return "".join(out)
