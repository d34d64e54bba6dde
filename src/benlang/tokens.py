from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class TokenKind(Enum):
    """Token kinds. The value is the text shown in diagnostics."""

    # Special
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    NUMBER = "NUMBER"
    STRING = "STRING"

    # Operators
    PLUS = "+"
    MINUS = "-"
    ASTERISK = "*"
    SLASH = "/"
    MODULO = "%"
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="
    EQ = "=="
    NOT_EQ = "!="
    ASSIGN = "="

    # Delimiters
    COMMA = ","
    DOT = "."
    COLON = ":"
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Control flow
    WENN = "WENN"
    SONST = "SONST"
    SOLANGE = "SOLANGE"
    FUER = "FUER"
    VON = "VON"
    BIS = "BIS"
    WIEDERHOLE = "WIEDERHOLE"

    # Functions
    FUNKTION = "FUNKTION"
    ZURUECK = "ZURUECK"

    # Variables
    VARIABLE = "VARIABLE"
    VAR = "VAR"

    # Booleans
    WAHR = "WAHR"
    FALSCH = "FALSCH"

    # Logical operators
    UND = "UND"
    ODER = "ODER"
    NICHT = "NICHT"

    # Game specific
    SPIEL = "SPIEL"
    FIGUR = "FIGUR"
    WENN_TASTE = "WENN_TASTE"
    WENN_KOLLISION = "WENN_KOLLISION"
    WENN_START = "WENN_START"
    WENN_IMMER = "WENN_IMMER"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int


KEYWORDS = MappingProxyType({
    # Control flow
    "wenn": TokenKind.WENN,
    "sonst": TokenKind.SONST,
    "solange": TokenKind.SOLANGE,
    "fuer": TokenKind.FUER,
    "für": TokenKind.FUER,
    "von": TokenKind.VON,
    "bis": TokenKind.BIS,
    "wiederhole": TokenKind.WIEDERHOLE,

    # Functions
    "funktion": TokenKind.FUNKTION,
    "zurueck": TokenKind.ZURUECK,
    "zurück": TokenKind.ZURUECK,

    # Variables
    "variable": TokenKind.VARIABLE,
    "var": TokenKind.VAR,

    # Booleans
    "wahr": TokenKind.WAHR,
    "falsch": TokenKind.FALSCH,

    # Logical
    "und": TokenKind.UND,
    "oder": TokenKind.ODER,
    "nicht": TokenKind.NICHT,

    # Game specific
    "spiel": TokenKind.SPIEL,
    "figur": TokenKind.FIGUR,
    "wenn_taste": TokenKind.WENN_TASTE,
    "wenn_kollision": TokenKind.WENN_KOLLISION,
    "wenn_start": TokenKind.WENN_START,
    "wenn_immer": TokenKind.WENN_IMMER,
})

# Only ASCII capitals and the German umlauts fold; everything else is kept.
_FOLD = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZÄÖÜ",
    "abcdefghijklmnopqrstuvwxyzäöü",
)


def fold_case(text: str) -> str:
    return text.translate(_FOLD)


def lookup_ident(text: str) -> TokenKind:
    """Return the keyword kind for an identifier spelling, or IDENT."""
    return KEYWORDS.get(fold_case(text), TokenKind.IDENT)
