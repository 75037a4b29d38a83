"""Lox tokenizer — lexes source into a flat token list."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .diagnostics import Reporter


# Token kind constants. Keywords and punctuation use their own lexeme as kind.
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "and",
    "class",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "nil",
    "or",
    "print",
    "return",
    "super",
    "this",
    "true",
    "var",
    "while",
}

# Two-character operators, checked before their one-character prefixes
MULTI_OPS: list[str] = [
    "!=",
    "==",
    "<=",
    ">=",
]

SINGLE_OPS: set[str] = {
    "(",
    ")",
    "{",
    "}",
    ",",
    ".",
    "-",
    "+",
    ";",
    "*",
    "/",
    "!",
    "=",
    "<",
    ">",
}


class Token:
    """A token with kind, exact lexeme, decoded literal, and source line."""

    __slots__ = ("type", "lexeme", "literal", "line")

    def __init__(
        self, type_: str, lexeme: str, literal: float | str | None, line: int
    ):
        self.type: str = type_
        self.lexeme: str = lexeme
        self.literal: float | str | None = literal
        self.line: int = line

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.lexeme)
            + ", "
            + repr(self.literal)
            + ", "
            + str(self.line)
            + ")"
        )

    def __str__(self) -> str:
        literal = "null" if self.literal is None else str(self.literal)
        return self.type + " " + self.lexeme + " " + literal


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str, reporter: Reporter) -> list[Token]:
    """Tokenize Lox source into a flat list ending with TK_EOF.

    Never raises. Bad characters and unterminated strings are reported to
    `reporter` and skipped, so one pass surfaces every lexical error.
    """
    tokens: list[Token] = []
    pos = 0
    line = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        start_pos = pos

        # String literal: "...", may span lines
        if c == '"':
            pos += 1
            start_line = line
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    line += 1
                pos += 1
            if pos >= length:
                reporter.error(line, "Unterminated string.")
                continue
            pos += 1  # skip closing "
            lexeme = source[start_pos:pos]
            tokens.append(Token(TK_STRING, lexeme, lexeme[1:-1], start_line))
            continue

        # Number: digits with an optional fractional part
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
            if (
                pos + 1 < length
                and source[pos] == "."
                and _is_digit(source[pos + 1])
            ):
                pos += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
            lexeme = source[start_pos:pos]
            tokens.append(Token(TK_NUMBER, lexeme, float(lexeme), line))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(word, word, None, line))
            else:
                tokens.append(Token(TK_IDENT, word, None, line))
            continue

        # Multi-character operators
        matched = False
        for op in MULTI_OPS:
            if source.startswith(op, pos):
                tokens.append(Token(op, op, None, line))
                pos += len(op)
                matched = True
                break
        if matched:
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            tokens.append(Token(c, c, None, line))
            pos += 1
            continue

        reporter.error(line, "Unexpected character.")
        pos += 1

    tokens.append(Token(TK_EOF, "", None, line))
    return tokens
