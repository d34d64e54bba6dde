from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .tokens import Token


@dataclass(frozen=True)
class Node:
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def column(self) -> int:
        return self.token.column


# ---------- Expressions ----------
@dataclass(frozen=True)
class Identifier(Node):
    name: str = ""

@dataclass(frozen=True)
class NumberLiteral(Node):
    value: float = 0.0

@dataclass(frozen=True)
class StringLiteral(Node):
    value: str = ""

@dataclass(frozen=True)
class BooleanLiteral(Node):
    value: bool = False

@dataclass(frozen=True)
class ArrayLiteral(Node):
    elements: Tuple["Expression", ...] = ()

@dataclass(frozen=True)
class IndexExpression(Node):
    target: Optional["Expression"] = None
    index: Optional["Expression"] = None

@dataclass(frozen=True)
class PrefixExpression(Node):
    operator: str = ""
    operand: Optional["Expression"] = None

@dataclass(frozen=True)
class InfixExpression(Node):
    operator: str = ""
    left: Optional["Expression"] = None
    right: Optional["Expression"] = None

@dataclass(frozen=True)
class CallExpression(Node):
    callee: Optional["Expression"] = None
    arguments: Tuple["Expression", ...] = ()

@dataclass(frozen=True)
class MemberExpression(Node):
    object: Optional["Expression"] = None
    property: Optional[Identifier] = None

@dataclass(frozen=True)
class AssignmentExpression(Node):
    target: Optional["Expression"] = None
    value: Optional["Expression"] = None


Expression = Union[
    Identifier,
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    ArrayLiteral,
    IndexExpression,
    PrefixExpression,
    InfixExpression,
    CallExpression,
    MemberExpression,
    AssignmentExpression,
]


# ---------- Statements ----------
class EventKind(Enum):
    START = "start"                # WENN_START
    EVERY_FRAME = "immer"          # WENN_IMMER
    ON_KEY = "taste"               # WENN_TASTE
    ON_COLLISION = "kollision"     # WENN_KOLLISION


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple["Statement", ...] = ()

@dataclass(frozen=True)
class VariableDeclaration(Node):
    name: Optional[Identifier] = None
    value: Optional[Expression] = None

@dataclass(frozen=True)
class FigureDeclaration(Node):
    name: Optional[Identifier] = None
    value: Optional[Expression] = None

@dataclass(frozen=True)
class FunctionDeclaration(Node):
    name: Optional[Identifier] = None
    parameters: Tuple[Identifier, ...] = ()
    body: Optional[Block] = None

@dataclass(frozen=True)
class ReturnStatement(Node):
    value: Optional[Expression] = None

@dataclass(frozen=True)
class ExpressionStatement(Node):
    expression: Optional[Expression] = None

@dataclass(frozen=True)
class IfStatement(Node):
    """WENN condition { ... } SONST { ... }

    ``alternative`` is either a plain else block or, for ``SONST WENN``,
    a block holding exactly one nested IfStatement.
    """
    condition: Optional[Expression] = None
    consequence: Optional[Block] = None
    alternative: Optional[Block] = None

    @property
    def is_else_if(self) -> bool:
        alt = self.alternative
        return (
            alt is not None
            and len(alt.statements) == 1
            and isinstance(alt.statements[0], IfStatement)
        )

@dataclass(frozen=True)
class WhileStatement(Node):
    condition: Optional[Expression] = None
    body: Optional[Block] = None

@dataclass(frozen=True)
class ForStatement(Node):
    variable: Optional[Identifier] = None
    start: Optional[Expression] = None
    end: Optional[Expression] = None  # inclusive
    body: Optional[Block] = None

@dataclass(frozen=True)
class RepeatStatement(Node):
    count: Optional[Expression] = None
    body: Optional[Block] = None

@dataclass(frozen=True)
class GameDeclaration(Node):
    name: str = ""

@dataclass(frozen=True)
class EventHandler(Node):
    kind: EventKind = EventKind.START
    parameters: Optional[Tuple[Expression, ...]] = None
    body: Optional[Block] = None


Statement = Union[
    VariableDeclaration,
    FigureDeclaration,
    FunctionDeclaration,
    ReturnStatement,
    ExpressionStatement,
    Block,
    IfStatement,
    WhileStatement,
    ForStatement,
    RepeatStatement,
    GameDeclaration,
    EventHandler,
]


# ---------- Program ----------
@dataclass(frozen=True)
class Program:
    statements: Tuple[Statement, ...] = field(default_factory=tuple)
