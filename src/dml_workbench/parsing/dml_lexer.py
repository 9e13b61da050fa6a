"""Lexer for the DML statements accepted by the query box."""

import ply.lex as lex


class DMLParseError(SyntaxError):
    """A DML keyword prefix matched but the statement body could not be parsed."""


def _unquote(raw: str) -> str:
    """Strip the quotes from a string literal and resolve its escapes."""
    quote = raw[0]
    body = raw[1:-1]
    if quote == "'":
        # SQL style: '' inside a single-quoted literal is one quote
        body = body.replace("''", "'")
    return body.replace("\\" + quote, quote).replace("\\\\", "\\")


class DMLLexer:
    """Lexer for tokenizing DML statements."""

    # Reserved keywords (matched case-insensitively)
    reserved = {
        "create": "CREATE",
        "record": "RECORD",
        "list": "LIST",
        "insert": "INSERT",
        "into": "INTO",
        "values": "VALUES",
        "update": "UPDATE",
        "set": "SET",
        "delete": "DELETE",
        "from": "FROM",
        "where": "WHERE",
        "in": "IN",
        "is": "IS",
        "not": "NOT",
        "between": "BETWEEN",
        "and": "AND",
        "or": "OR",
        "true": "TRUE",
        "false": "FALSE",
        "null": "NULL",
        "commit": "COMMIT",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "FLOAT",
        "INTEGER",
        "STRING",
        "COMMA",
        "LPAREN",
        "RPAREN",
        "LBRACKET",
        "RBRACKET",
        "EQ",
        "NE",
        "LE",
        "GE",
        "LT",
        "GT",
        "MINUS",
        "SEMICOLON",
    ] + list(reserved.values())

    # Simple tokens
    t_COMMA = r","
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_EQ = r"="
    t_NE = r"!=|<>"
    t_LE = r"<="
    t_GE = r">="
    t_LT = r"<"
    t_GT = r">"
    t_MINUS = r"-"
    t_SEMICOLON = r";"

    # Ignored characters (newlines are counted separately)
    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass  # Ignore comments

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+\.\d+"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"|\'([^\'\\]|\'\'|\\.)*\''
        t.value = _unquote(t.value)
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        # Check if it's a reserved word (case-insensitive)
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise DMLParseError(
            f"Illegal character '{t.value[0]}' at line {t.lexer.lineno}, position {t.lexpos}"
        )

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
