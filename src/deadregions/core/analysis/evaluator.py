from __future__ import annotations

"""
Three-Valued Condition Evaluator.

Maps a directive condition expression and a symbol -> state table to a
SymbolState using short-circuit boolean algebra. Undefined symbols are
treated as always disabled, matching conventional preprocessor semantics.
"""

from typing import Iterator, Mapping

from deadregions.domain.directive_models import (
    And,
    Expression,
    Identifier,
    InvariantViolationError,
    Literal,
    Not,
    Or,
    Parenthesized,
    SymbolState,
)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def negate(state: SymbolState) -> SymbolState:
    """Logical NOT over the three-valued domain; VARYING stays VARYING."""
    if state is SymbolState.ALWAYS_ENABLED:
        return SymbolState.ALWAYS_DISABLED
    if state is SymbolState.ALWAYS_DISABLED:
        return SymbolState.ALWAYS_ENABLED
    return SymbolState.VARYING


def evaluate(expr: Expression, symbol_states: Mapping[str, SymbolState]) -> SymbolState:
    """
    Evaluate a condition expression against the configured symbol states.

    Args:
        expr: Condition AST of an '#if' or '#elif' directive.
        symbol_states: Forced state per symbol name. Missing names are disabled.

    Returns:
        SymbolState: The classification of the whole expression.

    Raises:
        InvariantViolationError: If the AST contains a node outside the
            boolean directive grammar.
    """
    if isinstance(expr, Literal):
        return SymbolState.ALWAYS_ENABLED if expr.value else SymbolState.ALWAYS_DISABLED

    if isinstance(expr, Identifier):
        return symbol_states.get(expr.name, SymbolState.ALWAYS_DISABLED)

    if isinstance(expr, Not):
        return negate(evaluate(expr.operand, symbol_states))

    if isinstance(expr, And):
        left = evaluate(expr.left, symbol_states)
        right = evaluate(expr.right, symbol_states)
        # false && anything == false
        if SymbolState.ALWAYS_DISABLED in (left, right):
            return SymbolState.ALWAYS_DISABLED
        if left is SymbolState.ALWAYS_ENABLED and right is SymbolState.ALWAYS_ENABLED:
            return SymbolState.ALWAYS_ENABLED
        return SymbolState.VARYING

    if isinstance(expr, Or):
        left = evaluate(expr.left, symbol_states)
        right = evaluate(expr.right, symbol_states)
        # true || anything == true
        if SymbolState.ALWAYS_ENABLED in (left, right):
            return SymbolState.ALWAYS_ENABLED
        if left is SymbolState.ALWAYS_DISABLED and right is SymbolState.ALWAYS_DISABLED:
            return SymbolState.ALWAYS_DISABLED
        return SymbolState.VARYING

    if isinstance(expr, Parenthesized):
        return evaluate(expr.inner, symbol_states)

    raise InvariantViolationError(
        f"Unsupported node in directive condition: {type(expr).__name__}"
    )


def referenced_symbols(expr: Expression) -> Iterator[str]:
    """Yield every identifier name referenced by an expression, left to right."""
    if isinstance(expr, Identifier):
        yield expr.name
    elif isinstance(expr, Not):
        yield from referenced_symbols(expr.operand)
    elif isinstance(expr, (And, Or)):
        yield from referenced_symbols(expr.left)
        yield from referenced_symbols(expr.right)
    elif isinstance(expr, Parenthesized):
        yield from referenced_symbols(expr.inner)
    elif not isinstance(expr, Literal):
        raise InvariantViolationError(
            f"Unsupported node in directive condition: {type(expr).__name__}"
        )
