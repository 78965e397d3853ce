from __future__ import annotations

"""
Directive Domain Data Models.

Defines the value types shared by every analysis stage: the three-valued
symbol state, the closed union of condition expression nodes, the owned
directive snapshot produced by the scanner, and the region/chain structures
built on top of it. All types are immutable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union

# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

class DirectiveSyntaxError(ValueError):
    """Raised by the scanner when the directive structure of a document is broken."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line


class InvariantViolationError(AssertionError):
    """Raised when an internal contract is broken and no safe result exists."""


# -----------------------------------------------------------------------------
# SYMBOL STATE
# -----------------------------------------------------------------------------

class SymbolState(Enum):
    ALWAYS_ENABLED = "enabled"
    ALWAYS_DISABLED = "disabled"
    VARYING = "varying"

    @property
    def is_decided(self) -> bool:
        return self is not SymbolState.VARYING


class DirectiveKind(Enum):
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    ENDIF = "endif"


# -----------------------------------------------------------------------------
# CONDITION EXPRESSIONS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Literal:
    value: bool


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Not:
    operand: "Expression"


@dataclass(frozen=True)
class And:
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Or:
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Parenthesized:
    inner: "Expression"


Expression = Union[Literal, Identifier, Not, And, Or, Parenthesized]


# -----------------------------------------------------------------------------
# DIRECTIVES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Directive:
    """
    Owned snapshot of a single conditional-compilation directive.

    Attributes:
        index: Position of the directive in its document's directive list.
        kind: Directive keyword.
        span_start: Offset of the '#' character.
        span_end: Offset just past the directive text (line terminator excluded).
        full_span_start: Offset of the start of the line.
        full_span_end: Offset just past the line terminator.
        condition: Parsed condition for IF/ELIF; None when absent or unparseable.
        is_active: True when every enclosing branch was taken at scan time.
        line: 0-based line number.
        text: Full text of the directive line, terminator included.
        keyword_start: Offset of the keyword (used to rewrite '#elif' as '#if').
    """
    index: int
    kind: DirectiveKind
    span_start: int
    span_end: int
    full_span_start: int
    full_span_end: int
    condition: Optional[Expression] = None
    is_active: bool = True
    line: int = 0
    text: str = ""
    keyword_start: int = -1

    @property
    def is_branching(self) -> bool:
        return self.kind is not DirectiveKind.ENDIF

    @property
    def has_condition_slot(self) -> bool:
        return self.kind in (DirectiveKind.IF, DirectiveKind.ELIF)


# -----------------------------------------------------------------------------
# REGIONS & CHAINS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ConditionalRegion:
    """
    Interval between two consecutive linked directives of a chain.

    A region built by the chain builder has no state yet (None); the
    resolver and the intersector return new regions with a state filled in.
    """
    start: Directive
    end: Directive
    index: int
    state: Optional[SymbolState] = None
    explicitly_varies: bool = False

    @property
    def span_start(self) -> int:
        return self.start.full_span_start

    @property
    def span_end(self) -> int:
        return self.end.full_span_end

    def __str__(self) -> str:
        state = self.state.value if self.state else "unresolved"
        start_text = self.start.text.strip()
        end_text = self.end.text.strip()
        return (f"({self.start.line + 1}-{self.end.line + 1}): "
                f"{start_text} .. {end_text} [{state}]")


@dataclass(frozen=True)
class ConditionalRegionChain:
    """One complete '#if ... #endif' construct, linked end to end."""
    regions: Tuple[ConditionalRegion, ...]

    def __post_init__(self) -> None:
        if not self.regions:
            raise ValueError("A conditional region chain requires at least one region.")
        for prev, cur in zip(self.regions, self.regions[1:]):
            if prev.end.index != cur.start.index:
                raise ValueError(
                    f"Regions {prev.index} and {cur.index} are not linked end to end."
                )

    @property
    def span_start(self) -> int:
        return self.regions[0].span_start

    @property
    def span_end(self) -> int:
        return self.regions[-1].span_end

    @property
    def key(self) -> Tuple[int, int, int]:
        """Ordering used for deterministic sorting and cross-configuration matching."""
        return (len(self.regions), self.span_start, self.span_end)

    def __iter__(self) -> Iterator[ConditionalRegion]:
        return iter(self.regions)

    def __len__(self) -> int:
        return len(self.regions)


@dataclass(frozen=True)
class DocumentConditionalRegionInfo:
    """
    Resolved chains of a single document.

    Attributes:
        document_id: Stable identity used to align documents across configurations.
        path: Filesystem path (or label) of the document.
        chains: Chains ordered by their key.
        text: Original document text, needed by the region remover.
    """
    document_id: str
    path: str
    chains: Tuple[ConditionalRegionChain, ...] = ()
    text: str = field(default="", repr=False, compare=False)

    def regions(self) -> Iterator[ConditionalRegion]:
        for chain in self.chains:
            yield from chain.regions


@dataclass(frozen=True)
class RegionCounts:
    disabled: int = 0
    enabled: int = 0
    varying: int = 0
    explicitly_varying: int = 0

    @property
    def total(self) -> int:
        return self.disabled + self.enabled + self.varying

    def as_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "disabled": self.disabled,
            "enabled": self.enabled,
            "varying": self.varying,
            "explicitly_varying": self.explicitly_varying,
        }
