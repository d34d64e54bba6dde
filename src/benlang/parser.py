from __future__ import annotations
import logging
from enum import IntEnum
from types import MappingProxyType
from typing import Iterable, List, Optional, Tuple

from .ast_nodes import *
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

# Deepest nesting of blocks and expressions before the parser gives up
MAX_NESTING = 200


class ParseError(Exception):
    def __init__(self, message: str, line: int, col: int):
        super().__init__(f"Line {line}: {message}")
        self.message = message
        self.line = line
        self.col = col


class NestingError(ParseError):
    """Raised when a statement nests deeper than MAX_NESTING."""


class Precedence(IntEnum):
    LOWEST = 1
    ASSIGN = 2        # =
    OR = 3            # ODER
    AND = 4           # UND
    EQUALS = 5        # ==, !=
    LESSGREATER = 6   # <, >, <=, >=
    SUM = 7           # +, -
    PRODUCT = 8       # *, /, %
    PREFIX = 9        # -x, NICHT x
    CALL = 10         # f(x)
    INDEX = 11        # a[i]
    MEMBER = 12       # obj.prop


PRECEDENCES = MappingProxyType({
    TokenKind.ASSIGN: Precedence.ASSIGN,
    TokenKind.ODER: Precedence.OR,
    TokenKind.UND: Precedence.AND,
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.LT: Precedence.LESSGREATER,
    TokenKind.GT: Precedence.LESSGREATER,
    TokenKind.LTE: Precedence.LESSGREATER,
    TokenKind.GTE: Precedence.LESSGREATER,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.SLASH: Precedence.PRODUCT,
    TokenKind.MODULO: Precedence.PRODUCT,
    TokenKind.LPAREN: Precedence.CALL,
    TokenKind.LBRACKET: Precedence.INDEX,
    TokenKind.DOT: Precedence.MEMBER,
})

_EVENT_KINDS = MappingProxyType({
    TokenKind.WENN_START: EventKind.START,
    TokenKind.WENN_IMMER: EventKind.EVERY_FRAME,
    TokenKind.WENN_TASTE: EventKind.ON_KEY,
    TokenKind.WENN_KOLLISION: EventKind.ON_COLLISION,
})


def _describe(tok: Token) -> str:
    # illegal characters are more useful than the kind name
    if tok.kind is TokenKind.ILLEGAL:
        return tok.text
    return tok.kind.value


class TokenStream:
    """Pulls tokens on demand. Keeps handing out EOF once the source ends."""

    def __init__(self, tokens: Iterable[Token]):
        self.source = iter(tokens)
        self.eof: Optional[Token] = None
        self.last_line = 1
        self.last_column = 1

    def advance(self) -> Token:
        if self.eof is not None:
            return self.eof
        tok = next(self.source, None)
        if tok is None:
            tok = Token(TokenKind.EOF, "", self.last_line, self.last_column)
        if tok.kind is TokenKind.EOF:
            self.eof = tok
        self.last_line = tok.line
        self.last_column = tok.column + len(tok.text)
        return tok


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self.ts = TokenStream(tokens)
        self.errors: List[str] = []
        self.depth = 0
        self.cur = self.ts.advance()
        self.peek = self.ts.advance()

    # ---------------- cursor ----------------
    def next_token(self):
        self.cur = self.peek
        self.peek = self.ts.advance()

    def cur_is(self, kind: TokenKind) -> bool:
        return self.cur.kind is kind

    def peek_is(self, kind: TokenKind) -> bool:
        return self.peek.kind is kind

    def expect_peek(self, kind: TokenKind) -> Token:
        if self.peek_is(kind):
            self.next_token()
            return self.cur
        raise ParseError(
            f"expected '{kind.value}', found '{_describe(self.peek)}'",
            self.peek.line,
            self.peek.column,
        )

    def peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek.kind, Precedence.LOWEST)

    def cur_precedence(self) -> int:
        return PRECEDENCES.get(self.cur.kind, Precedence.LOWEST)

    def error(self, message: str, tok: Token):
        msg = f"Line {tok.line}: {message}"
        logger.debug("diagnostic: %s", msg)
        self.errors.append(msg)

    def enter(self, tok: Token):
        """Go one level deeper; callers restore ``depth`` when they return."""
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise NestingError("nesting too deep", tok.line, tok.column)

    # ---------------- statements ----------------
    def parse_program(self) -> Program:
        statements: List[Statement] = []
        while not self.cur_is(TokenKind.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()
        return Program(statements=tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        """Parse one statement, leaving ``cur`` on its last token.

        A failed expectation is recorded and yields None; the caller still
        advances past the current token, so parsing always moves forward.
        Too deep nesting unwinds to the top-level statement and is reported
        once there.
        """
        rule = self._statement_rules.get(self.cur.kind, Parser.parse_expression_statement)
        try:
            return rule(self)
        except ParseError as e:
            if isinstance(e, NestingError) and self.depth:
                raise
            logger.debug("diagnostic: %s (column %d)", e, e.col)
            self.errors.append(str(e))
            return None

    def _parse_binding(self, node_cls):
        tok = self.cur
        name_tok = self.expect_peek(TokenKind.IDENT)
        self.expect_peek(TokenKind.ASSIGN)
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        return node_cls(tok, name=Identifier(name_tok, name=name_tok.text), value=value)

    def parse_variable_declaration(self) -> VariableDeclaration:
        return self._parse_binding(VariableDeclaration)

    def parse_figure_declaration(self) -> FigureDeclaration:
        return self._parse_binding(FigureDeclaration)

    def parse_function_declaration(self) -> FunctionDeclaration:
        tok = self.cur
        name_tok = self.expect_peek(TokenKind.IDENT)
        self.expect_peek(TokenKind.LPAREN)
        params = self.parse_function_parameters()
        self.expect_peek(TokenKind.LBRACE)
        body = self.parse_block()
        return FunctionDeclaration(
            tok,
            name=Identifier(name_tok, name=name_tok.text),
            parameters=params,
            body=body,
        )

    def parse_function_parameters(self) -> Tuple[Identifier, ...]:
        if self.peek_is(TokenKind.RPAREN):
            self.next_token()
            return ()
        params: List[Identifier] = []
        while True:
            t = self.expect_peek(TokenKind.IDENT)
            params.append(Identifier(t, name=t.text))
            if not self.peek_is(TokenKind.COMMA):
                break
            self.next_token()
        self.expect_peek(TokenKind.RPAREN)
        return tuple(params)

    def parse_return_statement(self) -> ReturnStatement:
        tok = self.cur
        if self.peek_is(TokenKind.RBRACE) or self.peek_is(TokenKind.EOF):
            return ReturnStatement(tok)
        self.next_token()
        return ReturnStatement(tok, value=self.parse_expression(Precedence.LOWEST))

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        tok = self.cur
        expr = self.parse_expression(Precedence.LOWEST)
        if expr is None:
            return None
        return ExpressionStatement(tok, expression=expr)

    def parse_block(self) -> Block:
        tok = self.cur  # the '{'
        depth = self.depth
        try:
            self.enter(tok)
            self.next_token()
            statements: List[Statement] = []
            while not self.cur_is(TokenKind.RBRACE):
                if self.cur_is(TokenKind.EOF):
                    self.error("expected '}', found 'EOF'", self.cur)
                    break
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                self.next_token()
        finally:
            self.depth = depth
        return Block(tok, statements=tuple(statements))

    def parse_if_statement(self) -> IfStatement:
        tok = self.cur
        depth = self.depth
        try:
            # each SONST WENN nests one level
            self.enter(tok)
            return self._parse_if(tok)
        finally:
            self.depth = depth

    def _parse_if(self, tok: Token) -> IfStatement:
        self.next_token()
        cond = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.LBRACE)
        consequence = self.parse_block()

        alternative = None
        if self.peek_is(TokenKind.SONST):
            self.next_token()
            if self.peek_is(TokenKind.WENN):
                # SONST WENN: the else block wraps exactly one nested if
                self.next_token()
                else_tok = self.cur
                nested = self.parse_if_statement()
                alternative = Block(else_tok, statements=(nested,))
            else:
                self.expect_peek(TokenKind.LBRACE)
                alternative = self.parse_block()

        return IfStatement(tok, condition=cond, consequence=consequence, alternative=alternative)

    def parse_while_statement(self) -> WhileStatement:
        tok = self.cur
        self.next_token()
        cond = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.LBRACE)
        return WhileStatement(tok, condition=cond, body=self.parse_block())

    def parse_for_statement(self) -> ForStatement:
        tok = self.cur
        var_tok = self.expect_peek(TokenKind.IDENT)
        self.expect_peek(TokenKind.VON)
        self.next_token()
        start = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.BIS)
        self.next_token()
        end = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.LBRACE)
        return ForStatement(
            tok,
            variable=Identifier(var_tok, name=var_tok.text),
            start=start,
            end=end,
            body=self.parse_block(),
        )

    def parse_repeat_statement(self) -> RepeatStatement:
        tok = self.cur
        self.next_token()
        count = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.LBRACE)
        return RepeatStatement(tok, count=count, body=self.parse_block())

    def parse_game_declaration(self) -> GameDeclaration:
        tok = self.cur
        name_tok = self.expect_peek(TokenKind.STRING)
        return GameDeclaration(tok, name=name_tok.text)

    def parse_event_handler(self) -> EventHandler:
        tok = self.cur
        params = None
        # WENN_TASTE("links") and WENN_KOLLISION(a, b) bind their triggers
        if self.peek_is(TokenKind.LPAREN):
            self.next_token()
            params = self.parse_expression_list(TokenKind.RPAREN)
        self.expect_peek(TokenKind.LBRACE)
        return EventHandler(tok, kind=_EVENT_KINDS[tok.kind], parameters=params, body=self.parse_block())

    # ---------------- expressions (Pratt) ----------------
    def parse_expression(self, precedence: int) -> Optional[Expression]:
        depth = self.depth
        try:
            self.enter(self.cur)
            prefix = self._prefix_rules.get(self.cur.kind)
            if prefix is None:
                self.error(f"unexpected token '{_describe(self.cur)}'", self.cur)
                return None
            left = prefix(self)

            while not self.peek_is(TokenKind.RBRACE) and precedence < self.peek_precedence():
                infix = self._infix_rules.get(self.peek.kind)
                if infix is None:
                    return left
                self.next_token()
                # a left operand chain deepens the tree as much as nesting does
                self.enter(self.cur)
                left = infix(self, left)
            return left
        finally:
            self.depth = depth

    def parse_expression_list(self, end: TokenKind) -> Tuple[Expression, ...]:
        if self.peek_is(end):
            self.next_token()
            return ()
        self.next_token()
        items = [self.parse_expression(Precedence.LOWEST)]
        while self.peek_is(TokenKind.COMMA):
            self.next_token()
            self.next_token()
            items.append(self.parse_expression(Precedence.LOWEST))
        self.expect_peek(end)
        return tuple(items)

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur, name=self.cur.text)

    def parse_number_literal(self) -> Optional[Expression]:
        try:
            value = float(self.cur.text)
        except ValueError:
            self.error(f"could not parse '{self.cur.text}' as a number", self.cur)
            return None
        return NumberLiteral(self.cur, value=value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur, value=self.cur.text)

    def parse_boolean_literal(self) -> Expression:
        return BooleanLiteral(self.cur, value=self.cur_is(TokenKind.WAHR))

    def parse_array_literal(self) -> Expression:
        tok = self.cur
        return ArrayLiteral(tok, elements=self.parse_expression_list(TokenKind.RBRACKET))

    def parse_prefix_expression(self) -> Expression:
        tok = self.cur
        op = "NICHT" if tok.kind is TokenKind.NICHT else tok.text
        self.next_token()
        return PrefixExpression(tok, operator=op, operand=self.parse_expression(Precedence.PREFIX))

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()
        expr = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.RPAREN)
        return expr

    def parse_infix_expression(self, left: Expression) -> Expression:
        tok = self.cur
        # keyword operators are stored in canonical spelling
        op = tok.kind.value if tok.kind in (TokenKind.UND, TokenKind.ODER) else tok.text
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        return InfixExpression(tok, operator=op, left=left, right=right)

    def parse_call_expression(self, callee: Expression) -> Expression:
        tok = self.cur
        return CallExpression(tok, callee=callee, arguments=self.parse_expression_list(TokenKind.RPAREN))

    def parse_index_expression(self, target: Expression) -> Expression:
        tok = self.cur
        self.next_token()
        index = self.parse_expression(Precedence.LOWEST)
        self.expect_peek(TokenKind.RBRACKET)
        return IndexExpression(tok, target=target, index=index)

    def parse_member_expression(self, obj: Expression) -> Expression:
        tok = self.cur
        name_tok = self.expect_peek(TokenKind.IDENT)
        return MemberExpression(tok, object=obj, property=Identifier(name_tok, name=name_tok.text))

    def parse_assignment_expression(self, target: Expression) -> Expression:
        tok = self.cur
        self.next_token()
        # right side is a full expression, so a = b = c nests to the right
        value = self.parse_expression(Precedence.LOWEST)
        return AssignmentExpression(tok, target=target, value=value)

    # ---------------- dispatch tables ----------------
    _statement_rules = MappingProxyType({
        TokenKind.VAR: parse_variable_declaration,
        TokenKind.VARIABLE: parse_variable_declaration,
        TokenKind.FIGUR: parse_figure_declaration,
        TokenKind.FUNKTION: parse_function_declaration,
        TokenKind.ZURUECK: parse_return_statement,
        TokenKind.WENN: parse_if_statement,
        TokenKind.SOLANGE: parse_while_statement,
        TokenKind.FUER: parse_for_statement,
        TokenKind.WIEDERHOLE: parse_repeat_statement,
        TokenKind.SPIEL: parse_game_declaration,
        TokenKind.WENN_START: parse_event_handler,
        TokenKind.WENN_IMMER: parse_event_handler,
        TokenKind.WENN_TASTE: parse_event_handler,
        TokenKind.WENN_KOLLISION: parse_event_handler,
    })

    _prefix_rules = MappingProxyType({
        TokenKind.IDENT: parse_identifier,
        TokenKind.NUMBER: parse_number_literal,
        TokenKind.STRING: parse_string_literal,
        TokenKind.WAHR: parse_boolean_literal,
        TokenKind.FALSCH: parse_boolean_literal,
        TokenKind.MINUS: parse_prefix_expression,
        TokenKind.NICHT: parse_prefix_expression,
        TokenKind.LPAREN: parse_grouped_expression,
        TokenKind.LBRACKET: parse_array_literal,
    })

    _infix_rules = MappingProxyType({
        TokenKind.PLUS: parse_infix_expression,
        TokenKind.MINUS: parse_infix_expression,
        TokenKind.ASTERISK: parse_infix_expression,
        TokenKind.SLASH: parse_infix_expression,
        TokenKind.MODULO: parse_infix_expression,
        TokenKind.EQ: parse_infix_expression,
        TokenKind.NOT_EQ: parse_infix_expression,
        TokenKind.LT: parse_infix_expression,
        TokenKind.GT: parse_infix_expression,
        TokenKind.LTE: parse_infix_expression,
        TokenKind.GTE: parse_infix_expression,
        TokenKind.UND: parse_infix_expression,
        TokenKind.ODER: parse_infix_expression,
        TokenKind.LPAREN: parse_call_expression,
        TokenKind.LBRACKET: parse_index_expression,
        TokenKind.DOT: parse_member_expression,
        TokenKind.ASSIGN: parse_assignment_expression,
    })


def parse(tokens: Iterable[Token]) -> Tuple[Program, List[str]]:
    """Parse a token stream. Diagnostics must be checked before using the AST."""
    parser = Parser(tokens)
    program = parser.parse_program()
    return program, parser.errors
