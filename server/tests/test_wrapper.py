"""Tests for the word wrapper."""

from vestaboard_mcp.symbols import GRID_COLS
from vestaboard_mcp.tokenizer import DirectiveToken, render_tokens
from vestaboard_mcp.wrapper import split_words, wrap_text


def rendered(text):
    return [render_tokens(line) for line in wrap_text(text)]


def test_short_text_single_line():
    assert rendered("Hello World") == ["HELLO WORLD"]


def test_greedy_packing_with_exact_fit():
    # "THIS IS A LONG MESSAGE" is exactly 22 units and stays on one line
    assert rendered("This is a long message that needs wrapping") == [
        "THIS IS A LONG MESSAGE",
        "THAT NEEDS WRAPPING",
    ]


def test_word_of_exactly_line_width():
    word = "abcdefghijklmnopqrstuv"
    assert rendered(word) == [word.upper()]


def test_word_one_unit_too_long():
    word = "abcdefghijklmnopqrstuvw"
    assert rendered(word) == [word[:22].upper(), "W"]


def test_long_word_split_into_full_chunks():
    word = "A" * 35
    lines = wrap_text(word)
    assert [len(line) for line in lines] == [22, 13]


def test_split_tail_seeds_next_line():
    assert rendered("Supercalifragilisticexpialidocious ok") == [
        "SUPERCALIFRAGILISTICEX",
        "PIALIDOCIOUS OK",
    ]


def test_directives_never_split_in_long_words():
    lines = wrap_text("{red}" * 30)
    assert [len(line) for line in lines] == [22, 8]
    assert all(isinstance(t, DirectiveToken) for line in lines for t in line)

    lines = wrap_text("A" + "{red}" * 22)
    assert [len(line) for line in lines] == [22, 1]
    assert lines[1] == [DirectiveToken("red")]


def test_directives_count_as_one_unit():
    assert rendered("Hello {red} World") == ["HELLO {red} WORLD"]
    # 21 letters plus one directive fit exactly
    lines = wrap_text("A" * 21 + "{blue}")
    assert len(lines) == 1
    assert len(lines[0]) == GRID_COLS


def test_explicit_newlines_are_hard_breaks():
    assert rendered("Hi\nThere") == ["HI", "THERE"]
    assert rendered("A\n\nB") == ["A", "", "B"]
    assert rendered("A\r\nB") == ["A", "B"]


def test_leading_blank_lines_kept_trailing_dropped():
    assert rendered("\nA") == ["", "A"]
    assert rendered("A\n\n") == ["A"]
    assert rendered("   \n\n   ") == []
    assert wrap_text("") == []


def test_words_without_symbols_are_skipped():
    assert rendered("Hi ~~~ there") == ["HI THERE"]


def test_tabs_and_space_runs_separate_words():
    assert rendered("a\t\tb    c") == ["A B C"]
    assert split_words("  one  two\tthree ") == ["one", "two", "three"]


def test_no_line_exceeds_width():
    text = " ".join(["word"] * 40 + ["x" * 50] + ["{red}"] * 30)
    for line in wrap_text(text):
        assert 0 < len(line) <= GRID_COLS
