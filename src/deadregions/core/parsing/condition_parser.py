from __future__ import annotations

"""
Directive Condition Parser.

Tokenizes and parses the restricted boolean grammar allowed in
conditional-compilation directives:

    or_expr   := and_expr ('||' and_expr)*
    and_expr  := unary ('&&' unary)*
    unary     := '!' unary | primary
    primary   := 'true' | 'false' | IDENT | 'defined' ['('] IDENT [')']
               | '(' or_expr ')'

'defined(X)' is accepted as sugar for 'X' so that C-style headers can be
analysed with the same model.
"""

import re
from typing import List, Optional, Tuple

from deadregions.domain.directive_models import (
    And,
    Expression,
    Identifier,
    Literal,
    Not,
    Or,
    Parenthesized,
)

_TOKEN_RX = re.compile(r"\s*(?:(\|\||&&|!|\(|\))|([A-Za-z_][A-Za-z0-9_]*))")
_BLOCK_COMMENT_RX = re.compile(r"/\*.*?\*/")
_LINE_COMMENT_RX = re.compile(r"//.*$")

_OPERATOR = "op"
_NAME = "name"

Token = Tuple[str, str]

# Evaluation walks the tree recursively
MAX_NESTING_DEPTH = 200


class ConditionSyntaxError(ValueError):
    """Raised when a condition falls outside the boolean directive grammar."""


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def strip_comments(text: str) -> str:
    """Remove block and trailing line comments from a directive tail."""
    return _LINE_COMMENT_RX.sub("", _BLOCK_COMMENT_RX.sub(" ", text)).strip()


def parse_condition(text: str) -> Expression:
    """
    Parse the condition text of an '#if' or '#elif' directive.

    Args:
        text: Raw text following the directive keyword.

    Returns:
        Expression: The condition AST.

    Raises:
        ConditionSyntaxError: If the text is empty, uses unsupported syntax or
            nests deeper than MAX_NESTING_DEPTH.
    """
    tokens = _tokenize(strip_comments(text))
    if not tokens:
        raise ConditionSyntaxError("Missing condition.")

    parser = _Parser(tokens)
    try:
        expr = parser.parse_or()
    except RecursionError:
        raise ConditionSyntaxError("Condition is nested too deeply.") from None
    if parser.peek() is not None:
        raise ConditionSyntaxError(f"Unexpected token '{parser.peek()[1]}'.")
    if _nesting_depth(expr) > MAX_NESTING_DEPTH:
        raise ConditionSyntaxError("Condition is nested too deeply.")
    return expr


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _nesting_depth(expr: Expression) -> int:
    deepest = 0
    stack = [(expr, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        if isinstance(node, (And, Or)):
            stack.append((node.left, depth + 1))
            stack.append((node.right, depth + 1))
        elif isinstance(node, Not):
            stack.append((node.operand, depth + 1))
        elif isinstance(node, Parenthesized):
            stack.append((node.inner, depth + 1))
    return deepest


def _tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        m = _TOKEN_RX.match(text, pos)
        if m is None:
            raise ConditionSyntaxError(f"Unsupported syntax near '{text[pos:].strip()}'.")
        if m.group(1):
            tokens.append((_OPERATOR, m.group(1)))
        else:
            tokens.append((_NAME, m.group(2)))
        pos = m.end()
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, tokens: List[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> Token:
        tok = self.peek()
        if tok is None:
            raise ConditionSyntaxError("Unexpected end of condition.")
        self._pos += 1
        return tok

    def _accept(self, op: str) -> bool:
        if self.peek() == (_OPERATOR, op):
            self._pos += 1
            return True
        return False

    def _expect(self, op: str) -> None:
        if not self._accept(op):
            found = self.peek()
            raise ConditionSyntaxError(
                f"Expected '{op}' but found '{found[1] if found else 'end of condition'}'."
            )

    def parse_or(self) -> Expression:
        expr = self._parse_and()
        while self._accept("||"):
            expr = Or(expr, self._parse_and())
        return expr

    def _parse_and(self) -> Expression:
        expr = self._parse_unary()
        while self._accept("&&"):
            expr = And(expr, self._parse_unary())
        return expr

    def _parse_unary(self) -> Expression:
        if self._accept("!"):
            return Not(self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        if self._accept("("):
            inner = self.parse_or()
            self._expect(")")
            return Parenthesized(inner)

        kind, value = self._advance()
        if kind != _NAME:
            raise ConditionSyntaxError(f"Unexpected token '{value}'.")
        if value == "true":
            return Literal(True)
        if value == "false":
            return Literal(False)
        if value == "defined":
            return self._parse_defined()
        return Identifier(value)

    def _parse_defined(self) -> Expression:
        parenthesized = self._accept("(")
        kind, value = self._advance()
        if kind != _NAME:
            raise ConditionSyntaxError(f"Expected a symbol after 'defined', found '{value}'.")
        if parenthesized:
            self._expect(")")
        return Identifier(value)
