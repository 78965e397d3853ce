from __future__ import annotations

"""
Dead Region Removal.

Computes the text edits that delete provably-dead conditional regions and
the directives that became redundant, then applies them in one batch
against the original text. Regions that vary are never touched; when a
dead run is followed by a varying '#elif', that directive is rewritten as
'#if' so the surviving construct stays well formed.
"""

import logging
from typing import Iterable, List, Optional

from deadregions.domain.directive_models import (
    ConditionalRegionChain,
    Directive,
    DirectiveKind,
    DocumentConditionalRegionInfo,
    SymbolState,
)
from deadregions.domain.edit_models import EditApplicationError, TextEdit

logger = logging.getLogger(__name__)

_EXCERPT_LIMIT = 200


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def compute_chain_edits(chain: ConditionalRegionChain) -> List[TextEdit]:
    """
    Compute the raw (unexpanded, unmerged) edits for one resolved chain.

    Args:
        chain: Chain whose regions all carry a final state.

    Returns:
        List[TextEdit]: Edits in the order they were produced.
    """
    edits: List[TextEdit] = []
    regions = chain.regions
    remove_endif = True
    i = 0

    while i < len(regions):
        region = regions[i]

        if _keeps_start(regions, i):
            # A surviving region needs the construct's '#endif'
            remove_endif = False
            i += 1
            continue

        edits.append(_directive_edit(region.start))

        if region.state is not SymbolState.ALWAYS_DISABLED:
            i += 1
            continue

        # Collapse the maximal run of disabled regions
        run_start = region.start
        edits.append(_content_edit(region.start, region.end))
        j = i + 1
        while j < len(regions) and regions[j].state is SymbolState.ALWAYS_DISABLED:
            region = regions[j]
            edits.append(_directive_edit(region.start))
            edits.append(_content_edit(region.start, region.end))
            j += 1

        if j < len(regions) and _keeps_start(regions, j):
            rewrite = _boundary_rewrite(run_start, region.end)
            if rewrite is not None:
                edits.append(rewrite)

        i = j

    if remove_endif:
        edits.append(_directive_edit(regions[-1].end))

    return edits


def compute_text_edits(chains: Iterable[ConditionalRegionChain], text: str) -> List[TextEdit]:
    """
    Compute the final, non-overlapping edit batch for a document.

    Args:
        chains: Resolved chains of the document.
        text: Original document text.

    Returns:
        List[TextEdit]: Edits sorted by position, expanded over adjacent
        blank lines and merged.
    """
    edits: List[TextEdit] = []
    for chain in chains:
        edits.extend(compute_chain_edits(chain))

    edits = [expand_to_surrounding_blank_lines(e, text) for e in edits]
    edits.sort(key=lambda e: e.sort_key)
    return merge_overlapping_edits(edits)


def expand_to_surrounding_blank_lines(edit: TextEdit, text: str) -> TextEdit:
    """
    Grow an edit over the blank lines directly before and after it.

    The line terminator of the preceding non-blank line is kept. Edits
    reaching past the end of the text are returned unchanged.
    """
    start, end = edit.start, edit.end
    if end > len(text):
        return edit

    if start > 0:
        pos = start
        terminators: List[int] = []
        while pos > 0 and text[pos - 1] == "\n":
            pos -= 1
            if pos > 0 and text[pos - 1] == "\r":
                pos -= 1
            terminators.append(pos)
        if terminators and pos == 0:
            start = 0
        elif len(terminators) >= 2:
            earliest = terminators[-1]
            start = earliest + (2 if text.startswith("\r\n", earliest) else 1)

    while end < len(text):
        if text.startswith("\n", end):
            end += 1
        elif text.startswith("\r\n", end):
            end += 2
        else:
            break

    if (start, end) == (edit.start, edit.end):
        return edit
    return TextEdit(start, end, edit.new_text)


def merge_overlapping_edits(edits: List[TextEdit]) -> List[TextEdit]:
    """
    Coalesce touching or overlapping edits.

    Edits must be sorted by (end, start). When a later edit covers the whole
    earlier one its replacement wins; when they only touch or partially
    overlap, the earlier replacement is kept in front of the later one.
    """
    merged: List[TextEdit] = []

    for edit in edits:
        while merged and edit.start <= merged[-1].end:
            prev = merged.pop()
            if edit.start <= prev.start:
                new_text = edit.new_text
            else:
                new_text = prev.new_text + edit.new_text
            edit = TextEdit(min(prev.start, edit.start), max(prev.end, edit.end), new_text)
        merged.append(edit)

    return merged


def apply_text_edits(text: str, edits: List[TextEdit]) -> str:
    """
    Apply a sorted, non-overlapping batch of edits to the original text.

    Raises:
        EditApplicationError: If an edit is out of range or overlaps its predecessor.
    """
    pieces: List[str] = []
    cursor = 0

    for edit in edits:
        if edit.start < cursor or edit.start > edit.end or edit.end > len(text):
            raise EditApplicationError(
                f"Invalid edit [{edit.start}, {edit.end}) after offset {cursor} "
                f"in a text of length {len(text)}."
            )
        pieces.append(text[cursor:edit.start])
        pieces.append(edit.new_text)
        cursor = edit.end

    pieces.append(text[cursor:])
    return "".join(pieces)


def remove_unnecessary_regions(info: DocumentConditionalRegionInfo) -> str:
    """
    Return the document text with every dead region removed.

    The original text is returned unchanged when nothing needs removing or
    when the computed edits cannot be applied; edits are never applied
    partially.

    Args:
        info: Resolved (and possibly intersected) chains of the document.

    Returns:
        str: The rewritten or original text.
    """
    text = info.text
    edits = compute_text_edits(info.chains, text)
    if not edits:
        return text

    try:
        return apply_text_edits(text, edits)
    except EditApplicationError as e:
        logger.error(
            f"Failed to remove regions from document '{info.path}': {e}\n"
            + "\n".join(_describe_edit(text, edit) for edit in edits)
        )
        return text


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _keeps_start(regions, index: int) -> bool:
    """
    Tell whether the start directive of a region survives removal.

    Varying regions always keep theirs. An always-enabled region keeps it too
    while a later sibling still varies, since that sibling needs an opening
    directive in front of it.
    """
    state = regions[index].state
    if state is SymbolState.VARYING:
        return True
    if state is SymbolState.ALWAYS_ENABLED:
        return any(r.state is SymbolState.VARYING for r in regions[index + 1:])
    return False


def _directive_edit(directive: Directive) -> TextEdit:
    return TextEdit(directive.full_span_start, directive.full_span_end)


def _content_edit(start: Directive, end: Directive) -> TextEdit:
    return TextEdit(start.full_span_end, end.full_span_start)


def _boundary_rewrite(run_start: Directive, boundary: Directive) -> Optional[TextEdit]:
    """
    Rewrite the first live directive after a dead run that began the chain.

    An '#elif' becomes '#if' with the same condition and trivia. An '#else'
    has no condition to carry over, so it is left as is.
    """
    if run_start.kind is not DirectiveKind.IF:
        return None

    if boundary.kind is DirectiveKind.ELIF:
        rel = boundary.keyword_start - boundary.full_span_start
        new_text = boundary.text[:rel] + "if" + boundary.text[rel + len("elif"):]
        return TextEdit(boundary.full_span_start, boundary.full_span_end, new_text)

    if boundary.kind is DirectiveKind.ELSE:
        logger.warning(
            f"Line {boundary.line + 1}: '#else' follows only dead branches but still varies; "
            f"left in place."
        )
    return None


def _describe_edit(text: str, edit: TextEdit) -> str:
    start_line = text.count("\n", 0, max(0, min(edit.start, len(text)))) + 1
    end_line = text.count("\n", 0, max(0, min(edit.end, len(text)))) + 1
    excerpt = text[edit.start:edit.end][:_EXCERPT_LIMIT]
    return f"({start_line}-{end_line}): {excerpt!r}"
