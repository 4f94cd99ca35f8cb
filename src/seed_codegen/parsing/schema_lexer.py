"""Lexer for the entity schema DSL."""

import ply.lex as lex


def find_column(source: str, lexpos: int) -> int:
    """Return the 1-based column of a character offset in ``source``."""
    line_start = source.rfind("\n", 0, lexpos) + 1
    return lexpos - line_start + 1


class SchemaLexer:
    """Split schema text into tokens.

    Type names, field names and markers are all IDENTIFIERs; only ``define``
    and ``as`` are reserved. ``[]`` after a type name is a single ARRAY token
    so it cannot be confused with a marker list.
    """

    keywords = {
        "define": "DEFINE",
        "as": "AS",
    }

    tokens = [
        "IDENTIFIER",
        "LBRACE",
        "RBRACE",
        "ARRAY",
        "LBRACKET",
        "RBRACKET",
        "COLON",
        "COMMA",
    ] + list(keywords.values())

    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_ARRAY = r"\[[ \t]*\]"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_COLON = r":"
    t_COMMA = r","

    t_ignore = " \t\r"
    t_ignore_COMMENT = r"\#[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore
        self.source = ""

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.keywords.get(t.value, "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        column = find_column(self.source, t.lexpos)
        raise SyntaxError(f"Illegal character '{t.value[0]}' at line {t.lineno}, column {column}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Start lexing ``data`` from line 1."""
        self.source = data
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Return every token of ``data``."""
        self.input(data)
        return list(iter(self.token, None))
