from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result object exchanged between the analysis engine and the
interface layer, plus its factory functions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from deadregions.domain.directive_models import DocumentConditionalRegionInfo, RegionCounts

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DocumentError:
    """
    Failure to analyse or rewrite a single document.

    Attributes:
        path: Document path.
        error: Descriptive error message.
    """
    path: str
    error: str


@dataclass(frozen=True)
class AnalysisResult:
    """
    Unified result of a complete analysis run.

    Attributes:
        ok: False when the run could not start or was cancelled.
        error: Descriptive message in case of failure.
        configuration_names: Build configurations that were intersected.
        documents: Resolved documents, sorted by identity.
        counts: Region totals by state.
        errors: Per-document failures; they never abort the run.
        modified_files: Documents rewritten (or that would be, in patch mode).
        patch: Unified diff of all rewrites when patch output was requested.
        cancelled: True when the run was stopped through the cancellation event.
        summary: Flat statistics for rendering.
    """
    ok: bool
    error: str = ""
    configuration_names: List[str] = field(default_factory=list)
    documents: List[DocumentConditionalRegionInfo] = field(default_factory=list)
    counts: RegionCounts = field(default_factory=RegionCounts)
    errors: List[DocumentError] = field(default_factory=list)
    modified_files: List[str] = field(default_factory=list)
    patch: str = ""
    cancelled: bool = False
    summary: Dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        configuration_names: Optional[List[str]] = None,
        cancelled: bool = False,
) -> AnalysisResult:
    """Create a failed analysis result."""
    return AnalysisResult(
        ok=False,
        error=error,
        configuration_names=list(configuration_names or []),
        cancelled=cancelled,
        summary={"cancelled": cancelled},
    )


def create_success_result(
        configuration_names: List[str],
        documents: List[DocumentConditionalRegionInfo],
        counts: RegionCounts,
        errors: Optional[List[DocumentError]] = None,
        modified_files: Optional[List[str]] = None,
        patch: str = "",
        summary_extra: Optional[Dict[str, Any]] = None,
) -> AnalysisResult:
    """
    Create a successful analysis result.

    Args:
        configuration_names: Names of the analysed configurations.
        documents: Final (intersected) document results.
        counts: Region totals.
        errors: Per-document failures.
        modified_files: Rewritten documents.
        patch: Unified diff text.
        summary_extra: Additional statistics merged into the summary.

    Returns:
        AnalysisResult: An immutable success result.
    """
    errors = list(errors or [])
    modified_files = list(modified_files or [])
    summary: Dict[str, Any] = {
        "configurations": len(configuration_names),
        "documents": len(documents),
        "chains": sum(len(d.chains) for d in documents),
        "regions": counts.as_dict(),
        "errors": len(errors),
        "modified_files": len(modified_files),
    }
    summary.update(summary_extra or {})

    return AnalysisResult(
        ok=True,
        configuration_names=list(configuration_names),
        documents=list(documents),
        counts=counts,
        errors=errors,
        modified_files=modified_files,
        patch=patch,
        summary=summary,
    )
