from __future__ import annotations
import logging
from typing import Iterator, List

import ply.lex as lex

from .tokens import Token, TokenKind, lookup_ident

logger = logging.getLogger(__name__)


class BenLangLexer:

    # Every kind ply may hand back; keywords are produced by t_IDENT.
    tokens = tuple(kind.name for kind in TokenKind if kind is not TokenKind.EOF)

    # Ignored characters
    t_ignore = ' \t\r'

    #  Longer patterns are tried first by ply
    t_EQ = r'=='
    t_NOT_EQ = r'!='
    t_LTE = r'<='
    t_GTE = r'>='

    # Single-character operators
    t_PLUS = r'\+'
    t_MINUS = r'-'
    t_ASTERISK = r'\*'
    t_SLASH = r'/'
    t_MODULO = r'%'
    t_LT = r'<'
    t_GT = r'>'
    t_ASSIGN = r'='

    # Delimiters
    t_COMMA = r','
    t_DOT = r'\.'
    t_COLON = r':'
    t_SEMICOLON = r';'
    t_LPAREN = r'\('
    t_RPAREN = r'\)'
    t_LBRACE = r'\{'
    t_RBRACE = r'\}'
    t_LBRACKET = r'\['
    t_RBRACKET = r'\]'

    def __init__(self, data: str = ""):
        self.lexer = None
        self.data = ""
        self.input(data)

    # Comments run to the end of the line
    def t_COMMENT(self, t):
        r'//[^\n]*'
        pass

    # Strings: only \" is an escape, unterminated strings run to the end
    def t_STRING(self, t):
        r'"'
        data = t.lexer.lexdata
        pos = t.lexer.lexpos
        chars = []
        while pos < len(data) and data[pos] != '"':
            if data[pos] == '\\' and data[pos + 1:pos + 2] == '"':
                pos += 1
            elif data[pos] == '\n':
                t.lexer.lineno += 1
            chars.append(data[pos])
            pos += 1
        # skip the closing quote if there is one
        t.lexer.lexpos = min(pos + 1, len(data))
        t.value = ''.join(chars)
        return t

    # Decimal numbers, no sign and no exponent
    def t_NUMBER(self, t):
        r'[0-9]+(?:\.[0-9]+)?'
        return t

    # Identifiers and keywords: a letter or '_', then letters, ASCII digits
    # or '_'. The \w match is cut back to that run.
    def t_IDENT(self, t):
        r'[^\W\d]\w*'
        text = t.value
        end = 0
        while end < len(text) and (text[end].isalpha() or text[end] == '_'
                                   or (end and '0' <= text[end] <= '9')):
            end += 1
        if end == 0:
            t.type = TokenKind.ILLEGAL.name
            t.value = text[0]
            t.lexer.lexpos = t.lexpos + 1
            return t
        t.value = text[:end]
        t.lexer.lexpos = t.lexpos + end
        t.type = lookup_ident(t.value).name
        return t

    #  line number tracking
    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += len(t.value)

    # Unknown characters become ILLEGAL tokens for the parser to report
    def t_error(self, t):
        t.type = TokenKind.ILLEGAL.name
        t.value = t.value[0]
        t.lexer.skip(1)
        return t

    def build(self, **kwargs):
        """Build the lexer"""
        kwargs.setdefault("errorlog", logger)
        self.lexer = lex.lex(module=self, **kwargs)
        return self.lexer

    def input(self, data: str):
        if not self.lexer:
            self.build()
        self.data = data
        self.lexer.lineno = 1
        self.lexer.input(data)

    def _column(self, lexpos: int) -> int:
        line_start = self.data.rfind('\n', 0, lexpos) + 1
        return lexpos - line_start + 1

    def next_token(self) -> Token:
        """Scan one token. Returns EOF forever once the input is used up."""
        tok = self.lexer.token()
        if tok is None:
            end = len(self.data)
            return Token(TokenKind.EOF, "", self.lexer.lineno, self._column(end))
        return Token(TokenKind[tok.type], tok.value, tok.lineno, self._column(tok.lexpos))

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind is TokenKind.EOF:
                return

    def tokenize(self, data: str) -> List[Token]:
        self.input(data)
        return list(self)


def tokenize(source: str) -> List[Token]:
    """Scan the whole source; the last token is always EOF."""
    return BenLangLexer().tokenize(source)


def print_tokens(tokens):
    if not tokens:
        print("No tokens found!")
        return

    print(f"{'Line':<6}| {'Column':<7}| {'Token':<20}| Value")
    print("-" * 60)

    for tok in tokens:
        value = tok.text
        # Limit length for display
        if len(value) > 50:
            value = value[:47] + "..."
        # Display escape characters
        value = repr(value)[1:-1] if '\n' in value or '\t' in value else value

        print(f"{tok.line:<6}| {tok.column:<7}| {tok.kind.name:<20}| {value}")
