from __future__ import annotations

"""
Unit tests for the conditional directive scanner.

Verifies:
1. Directive recognition, spans and line numbers.
2. Linked groups for nested constructs.
3. Active flags under the scan-time defined symbols.
4. Structural errors.
"""

import pytest

from deadregions.core.parsing.directive_scanner import scan_directives
from deadregions.domain.directive_models import (
    DirectiveKind,
    DirectiveSyntaxError,
    Identifier,
    Not,
)

NESTED = (
    "#if A\n"        # 0
    "  #if B\n"      # 1
    "  x();\n"
    "  #endif\n"     # 2
    "#elif C\n"      # 3
    "y();\n"
    "#else\n"        # 4
    "#endif\n"       # 5
)


def test_spans_and_lines() -> None:
    text = "a();\n  # if X // c\nb();\n#endif"
    doc = scan_directives(text, path="t.cs")

    first, last = doc.directives
    assert first.kind is DirectiveKind.IF
    assert first.line == 1
    assert first.full_span_start == 5
    assert first.full_span_end == text.index("b();")
    assert text[first.span_start] == "#"
    assert text[first.keyword_start:first.keyword_start + 2] == "if"
    assert first.condition == Identifier("X")

    assert last.kind is DirectiveKind.ENDIF
    assert last.full_span_end == len(text)
    assert last.text == "#endif"


def test_document_id_defaults_to_path() -> None:
    doc = scan_directives("", path="p.cs")
    assert doc.document_id == "p.cs"
    assert doc.directives == ()


def test_ifdef_and_ifndef() -> None:
    doc = scan_directives("#ifdef A\n#endif\n#ifndef B\n#endif\n")
    assert doc.directives[0].condition == Identifier("A")
    assert doc.directives[2].condition == Not(Identifier("B"))


def test_groups_link_nested_constructs() -> None:
    doc = scan_directives(NESTED)

    assert doc.groups == ((0, 3, 4, 5), (1, 2))
    outer = doc.linked_directives(doc.directives[4])
    assert [d.index for d in outer] == [0, 3, 4, 5]
    inner = doc.linked_directives(doc.directives[1])
    assert [d.kind for d in inner] == [DirectiveKind.IF, DirectiveKind.ENDIF]


def test_branching_directives_exclude_endif() -> None:
    doc = scan_directives(NESTED)
    assert [d.index for d in doc.branching_directives()] == [0, 1, 3, 4]


def test_active_flags_follow_defined_symbols() -> None:
    inactive = scan_directives(NESTED)
    # A is undefined: the nested construct sits on a skipped branch
    assert inactive.directives[0].is_active
    assert not inactive.directives[1].is_active
    assert not inactive.directives[2].is_active
    assert inactive.directives[3].is_active

    active = scan_directives(NESTED, defined_symbols={"A"})
    assert active.directives[1].is_active
    assert active.directives[2].is_active


def test_unparseable_condition_is_kept_as_none() -> None:
    doc = scan_directives("#if A == 1\n#endif\n")
    assert doc.directives[0].kind is DirectiveKind.IF
    assert doc.directives[0].condition is None


def test_crlf_line_endings() -> None:
    text = "#if A\r\nx\r\n#endif\r\n"
    doc = scan_directives(text)
    assert doc.directives[0].full_span_end == 7
    assert doc.directives[0].condition == Identifier("A")
    assert doc.directives[1].full_span_start == 10


@pytest.mark.parametrize("text,line", [
    ("#endif\n", 1),
    ("#if A\n#else\n#else\n#endif\n", 3),
    ("#if A\n#else\n#elif B\n#endif\n", 3),
    ("x\n#if A\n", 2),
    ("#elif A\n", 1),
])
def test_structural_errors(text: str, line: int) -> None:
    with pytest.raises(DirectiveSyntaxError) as exc:
        scan_directives(text)
    assert exc.value.line == line


def test_non_directive_hash_lines_are_ignored() -> None:
    doc = scan_directives("#region R\n#define X\n#iffy\n#endregion\n")
    assert doc.directives == ()
