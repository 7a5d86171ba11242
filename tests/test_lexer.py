"""
Tests for the two lexer front ends (bfvm.lexer).

Covers:
  - strict lexer keeps the eight commands, skips everything else
  - comment lexer skips '#' to end of line
  - spans are UTF-8 byte offsets
  - Instruction.from_symbol and bracket markers
  - reading programs from files
"""

import pytest

from bfvm.brackets import Side
from bfvm.events import BfError, ErrorKind
from bfvm.lexer import CommentLexer, Instruction, Lexer, Span, tokenize


def _symbols(tokens) -> str:
    return "".join(str(t.instruction) for t in tokens)


# ─── Strict lexer ─────────────────────

class TestStrictLexer:
    def test_all_commands(self):
        tokens = tokenize("+-<>.,[]")
        assert [t.instruction for t in tokens] == list(Instruction)

    def test_ignores_other_characters(self):
        assert _symbols(tokenize("a+b\n-c [ x ] ")) == "+-[]"

    def test_empty_source(self):
        assert tokenize("") == []

    def test_hash_is_ordinary_text(self):
        assert _symbols(tokenize("+ # -\n.")) == "+-."

    def test_spans_are_byte_offsets(self):
        tokens = tokenize("é+→-")
        assert tokens[0].span == Span(2, 3)
        assert tokens[1].span == Span(6, 7)

    def test_lexer_object_keeps_tokens(self):
        lexer = Lexer("++")
        tokens = lexer.tokenize()
        assert lexer.tokens is tokens
        assert len(tokens) == 2


# ─── Comment-tolerant lexer ─────────────────────

class TestCommentLexer:
    def test_comment_runs_to_end_of_line(self):
        assert _symbols(tokenize("+ # -[.\n.", comments=True)) == "+."

    def test_comment_on_last_line(self):
        assert _symbols(CommentLexer("++#--").tokenize()) == "++"

    def test_multiple_comments(self):
        source = "# header [\n+\n# ]\n-"
        assert _symbols(tokenize(source, comments=True)) == "+-"

    def test_spans_count_comment_bytes(self):
        tokens = tokenize("#ü\n+", comments=True)
        assert tokens[0].span == Span(4, 5)

    def test_same_as_strict_without_comments(self):
        source = "++[>+<-]."
        assert tokenize(source, comments=True) == tokenize(source)


# ─── Instructions ─────────────────────

class TestInstruction:
    def test_from_symbol(self):
        assert Instruction.from_symbol("[") is Instruction.LOOP_OPEN

    def test_from_symbol_rejects_unknown(self):
        with pytest.raises(BfError) as exc:
            Instruction.from_symbol("x")
        assert exc.value.kind == ErrorKind.UNRECOGNIZED_COMMAND

    def test_bracket_markers(self):
        left = Instruction.LOOP_OPEN.bracket()
        right = Instruction.LOOP_CLOSE.bracket()
        assert left.side is Side.LEFT
        assert right.side is Side.RIGHT
        assert left.kind == right.kind
        assert left.counterpart is None

    def test_non_brackets_have_no_marker(self):
        assert Instruction.INCREMENT.bracket() is None


# ─── Files ─────────────────────

class TestFromFile:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "prog.bf"
        path.write_text("+[-]\n", encoding="utf-8")
        assert _symbols(Lexer.from_file(path).tokenize()) == "+[-]"

    def test_comment_lexer_from_file(self, tmp_path):
        path = tmp_path / "prog.bf"
        path.write_text("+ # +\n", encoding="utf-8")
        assert _symbols(CommentLexer.from_file(str(path)).tokenize()) == "+"

    def test_missing_file(self, tmp_path):
        with pytest.raises(BfError) as exc:
            Lexer.from_file(tmp_path / "missing.bf")
        assert exc.value.kind == ErrorKind.OTHER
