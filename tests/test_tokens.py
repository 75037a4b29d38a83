"""Tests for the Lox tokenizer beyond what the lexer .tests files express."""

import io

from lox.diagnostics import Reporter
from lox.tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_STRING, tokenize


def _lex(source: str):
    reporter = Reporter(io.StringIO())
    return tokenize(source, reporter), reporter


def test_empty_source_yields_only_eof():
    tokens, reporter = _lex("")
    assert len(tokens) == 1
    assert tokens[0].type == TK_EOF
    assert tokens[0].line == 1
    assert not reporter.had_error


def test_line_numbers_follow_newlines():
    tokens, _ = _lex("a\nb\n\nc")
    assert [(t.lexeme, t.line) for t in tokens if t.type == TK_IDENT] == [
        ("a", 1),
        ("b", 2),
        ("c", 4),
    ]
    assert tokens[-1].line == 4


def test_multiline_string_starts_on_its_first_line():
    tokens, _ = _lex('"one\ntwo" x')
    assert tokens[0].type == TK_STRING
    assert tokens[0].line == 1
    assert tokens[0].literal == "one\ntwo"
    assert tokens[1].lexeme == "x"
    assert tokens[1].line == 2


def test_number_literal_is_decoded():
    tokens, _ = _lex("3.25")
    assert tokens[0].type == TK_NUMBER
    assert tokens[0].lexeme == "3.25"
    assert tokens[0].literal == 3.25


def test_keywords_have_no_literal():
    tokens, _ = _lex("true nil")
    assert tokens[0].type == "true"
    assert tokens[0].literal is None
    assert tokens[1].type == "nil"


def test_scanning_continues_after_errors():
    tokens, reporter = _lex("var @ x = 1; #\nprint x;")
    messages = [str(d) for d in reporter.diagnostics]
    assert messages == [
        "[line 1] Error: Unexpected character.",
        "[line 1] Error: Unexpected character.",
    ]
    lexemes = [t.lexeme for t in tokens]
    assert lexemes == ["var", "x", "=", "1", ";", "print", "x", ";", ""]


def test_unterminated_string_is_dropped():
    tokens, reporter = _lex('print "oops')
    assert [t.type for t in tokens] == ["print", TK_EOF]
    assert reporter.had_error


def test_diagnostics_are_printed_to_stream():
    stream = io.StringIO()
    tokenize("@", Reporter(stream))
    assert stream.getvalue() == "[line 1] Error: Unexpected character.\n"


def test_token_str():
    tokens, _ = _lex('"hi" 2')
    assert str(tokens[0]) == 'STRING "hi" hi'
    assert str(tokens[1]) == "NUMBER 2 2.0"
    assert repr(tokens[1]) == "Token(NUMBER, '2', 2.0, 1)"
