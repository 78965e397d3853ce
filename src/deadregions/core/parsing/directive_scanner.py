from __future__ import annotations

"""
Conditional Directive Scanner.

Front end of the analysis: walks raw document text line by line, recognises
'#if', '#ifdef', '#ifndef', '#elif', '#else' and '#endif', links them into
groups, and records for each directive whether it sits on a branch taken
under the scan-time defined symbols. The result is a self-contained
snapshot; later stages never look at the raw text structure again.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterator, List, Optional, Tuple

from deadregions.core.analysis.evaluator import evaluate
from deadregions.core.parsing.condition_parser import ConditionSyntaxError, parse_condition
from deadregions.domain.directive_models import (
    Directive,
    DirectiveKind,
    DirectiveSyntaxError,
    Expression,
    Identifier,
    Not,
    SymbolState,
)

logger = logging.getLogger(__name__)

_LINE_RX = re.compile(r"[^\n]*\n|[^\n]+$")
_DIRECTIVE_RX = re.compile(r"^[ \t]*(#)[ \t]*(ifdef|ifndef|if|elif|else|endif)\b(.*)$")
_SYMBOL_RX = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)")

_KEYWORD_KIND: Dict[str, DirectiveKind] = {
    "if": DirectiveKind.IF,
    "ifdef": DirectiveKind.IF,
    "ifndef": DirectiveKind.IF,
    "elif": DirectiveKind.ELIF,
    "else": DirectiveKind.ELSE,
    "endif": DirectiveKind.ENDIF,
}


# -----------------------------------------------------------------------------
# DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedDocument:
    """
    Directive snapshot of one document.

    Attributes:
        document_id: Stable identity used for sorting and cross-configuration matching.
        path: Filesystem path or label.
        text: Original text.
        directives: All conditional directives in source order.
        groups: Indices of each '#if ... #endif' construct in source order.
    """
    document_id: str
    path: str
    text: str = field(repr=False)
    directives: Tuple[Directive, ...] = ()
    groups: Tuple[Tuple[int, ...], ...] = ()
    _group_of: Dict[int, int] = field(default_factory=dict, repr=False, compare=False)

    def linked_directives(self, directive: Directive) -> Tuple[Directive, ...]:
        """Return the complete linked group the directive belongs to."""
        group = self.groups[self._group_of[directive.index]]
        return tuple(self.directives[i] for i in group)

    def branching_directives(self) -> Iterator[Directive]:
        for directive in self.directives:
            if directive.is_branching:
                yield directive


@dataclass
class _OpenGroup:
    members: List[int]
    parent_active: bool
    # True/False once known; None when an unparseable condition hides the answer
    taken: Optional[bool]
    seen_else: bool = False


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def scan_directives(
        text: str,
        document_id: str = "",
        path: str = "",
        defined_symbols: AbstractSet[str] = frozenset(),
) -> ParsedDocument:
    """
    Scan a document and build its directive snapshot.

    Args:
        text: Raw document text.
        document_id: Identity of the document (defaults to path).
        path: Filesystem path or label used in reports.
        defined_symbols: Symbols considered defined when deciding which
            branches are active.

    Returns:
        ParsedDocument: The directives and their linked groups.

    Raises:
        DirectiveSyntaxError: If the directive structure is unbalanced.
    """
    directives: List[Directive] = []
    groups: List[Tuple[int, ...]] = []
    group_of: Dict[int, int] = {}
    stack: List[_OpenGroup] = []
    active = True

    for line_no, (offset, line) in enumerate(_iter_lines(text)):
        content = line.rstrip("\r\n")
        m = _DIRECTIVE_RX.match(content)
        if m is None:
            continue

        keyword = m.group(2)
        kind = _KEYWORD_KIND[keyword]
        tail = m.group(3)
        index = len(directives)
        condition: Optional[Expression] = None

        if kind is DirectiveKind.IF:
            is_active = active
            condition = _parse_if_condition(keyword, tail, line_no, is_active)
            branch = _branch_taken(condition, defined_symbols)
            stack.append(_OpenGroup([index], parent_active=active, taken=branch))
            active = active and branch is True

        elif kind is DirectiveKind.ELIF:
            group = _require_open(stack, keyword, line_no)
            if group.seen_else:
                raise DirectiveSyntaxError("#elif after #else", line_no + 1)
            is_active = group.parent_active
            condition = _parse_if_condition(keyword, tail, line_no, is_active)
            branch = _branch_taken(condition, defined_symbols)
            active = _enter_branch(group, branch)
            group.members.append(index)

        elif kind is DirectiveKind.ELSE:
            group = _require_open(stack, keyword, line_no)
            if group.seen_else:
                raise DirectiveSyntaxError("duplicate #else", line_no + 1)
            group.seen_else = True
            is_active = group.parent_active
            active = _enter_branch(group, True)
            group.members.append(index)

        else:
            group = _require_open(stack, keyword, line_no)
            stack.pop()
            is_active = group.parent_active
            active = group.parent_active
            group.members.append(index)
            group_of.update((i, len(groups)) for i in group.members)
            groups.append(tuple(group.members))

        directives.append(Directive(
            index=index,
            kind=kind,
            span_start=offset + m.start(1),
            span_end=offset + len(content.rstrip()),
            full_span_start=offset,
            full_span_end=offset + len(line),
            condition=condition,
            is_active=is_active,
            line=line_no,
            text=line,
            keyword_start=offset + m.start(2),
        ))

    if stack:
        first_open = directives[stack[-1].members[0]]
        raise DirectiveSyntaxError("unterminated #if", first_open.line + 1)

    # Groups close innermost first; reorder them by their opening directive
    order = sorted(range(len(groups)), key=lambda g: groups[g][0])
    remap = {old: new for new, old in enumerate(order)}
    ordered_groups = tuple(groups[g] for g in order)
    group_of = {i: remap[g] for i, g in group_of.items()}

    logger.debug(f"Scanned {len(directives)} directives in {len(ordered_groups)} groups: {path}")
    return ParsedDocument(
        document_id=document_id or path,
        path=path,
        text=text,
        directives=tuple(directives),
        groups=ordered_groups,
        _group_of=group_of,
    )


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _iter_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (offset, line) pairs; lines keep their terminator."""
    for m in _LINE_RX.finditer(text):
        yield m.start(), m.group(0)


def _require_open(stack: List[_OpenGroup], keyword: str, line_no: int) -> _OpenGroup:
    if not stack:
        raise DirectiveSyntaxError(f"#{keyword} without matching #if", line_no + 1)
    return stack[-1]


def _parse_if_condition(
        keyword: str,
        tail: str,
        line_no: int,
        is_active: bool,
) -> Optional[Expression]:
    """Parse the condition of an IF/ELIF line; None when it is unparseable."""
    if keyword in ("ifdef", "ifndef"):
        m = _SYMBOL_RX.match(tail)
        if m is None:
            logger.debug(f"Line {line_no + 1}: #{keyword} without a symbol.")
            return None
        symbol = Identifier(m.group(1))
        return symbol if keyword == "ifdef" else Not(symbol)

    try:
        return parse_condition(tail)
    except ConditionSyntaxError as e:
        level = logging.WARNING if is_active else logging.DEBUG
        logger.log(level, f"Line {line_no + 1}: unsupported condition in #{keyword}: {e}")
        return None


def _branch_taken(condition: Optional[Expression], defined: AbstractSet[str]) -> Optional[bool]:
    if condition is None:
        return None
    return _truth(condition, defined)


def _truth(expr: Expression, defined: AbstractSet[str]) -> bool:
    # Two-valued evaluation: decides which branch the original compilation took
    states = {name: SymbolState.ALWAYS_ENABLED for name in defined}
    return evaluate(expr, states) is SymbolState.ALWAYS_ENABLED


def _enter_branch(group: _OpenGroup, branch: Optional[bool]) -> bool:
    """Update the group for a new sibling branch and return whether it is active."""
    if group.taken is True:
        return False
    if group.taken is None or branch is None:
        group.taken = None
        return False
    group.taken = branch
    return group.parent_active and branch
