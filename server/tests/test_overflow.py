"""Tests for the overflow resolver."""

import pytest

from vestaboard_mcp.overflow import OverflowExceeded, append_ellipsis, resolve_overflow
from vestaboard_mcp.symbols import LayoutError
from vestaboard_mcp.tokenizer import DirectiveToken, LiteralToken, render_tokens, tokenize


def lines_of(count):
    return [tokenize(f"LINE {i}") for i in range(1, count + 1)]


def test_six_or_fewer_lines_pass_through():
    for policy in ("truncate", "ellipsis", "error"):
        lines = lines_of(6)
        assert resolve_overflow(lines, policy) == lines
    assert resolve_overflow([], "error") == []


def test_truncate_keeps_first_six():
    result = resolve_overflow(lines_of(8), "truncate")
    assert [render_tokens(line) for line in result] == [f"LINE {i}" for i in range(1, 7)]


def test_error_policy_raises():
    with pytest.raises(OverflowExceeded) as exc_info:
        resolve_overflow(lines_of(8), "error")
    assert exc_info.value.line_count == 8
    assert exc_info.value.limit == 6
    assert isinstance(exc_info.value, LayoutError)
    assert "8 lines" in str(exc_info.value)


def test_ellipsis_appends_when_room():
    result = resolve_overflow(lines_of(8), "ellipsis")
    assert len(result) == 6
    assert render_tokens(result[-1]) == "LINE 6..."
    assert render_tokens(result[0]) == "LINE 1"


def test_ellipsis_trims_full_line():
    lines = lines_of(6) + [tokenize("x")]
    lines[5] = tokenize("ABCDEFGHIJKLMNOPQRSTUV")
    result = resolve_overflow(lines, "ellipsis")
    assert render_tokens(result[-1]) == "ABCDEFGHIJKLMNOPQRS..."
    assert len(result[-1]) == 22


def test_ellipsis_trims_nearly_full_line():
    line = tokenize("A" * 20)
    assert render_tokens(append_ellipsis(line)) == "A" * 19 + "..."


def test_ellipsis_keeps_directives_whole():
    line = [DirectiveToken("red")] * 22
    result = append_ellipsis(line)
    assert len(result) == 22
    assert result[:19] == [DirectiveToken("red")] * 19
    assert result[19:] == [LiteralToken(".")] * 3


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        resolve_overflow(lines_of(2), "wrap")  # type: ignore[arg-type]


def test_input_lines_not_mutated():
    lines = lines_of(8)
    before = [list(line) for line in lines]
    resolve_overflow(lines, "ellipsis")
    assert lines == before
