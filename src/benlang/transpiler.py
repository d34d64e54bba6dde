from __future__ import annotations
import logging
import math
from types import MappingProxyType
from typing import List, Optional

from .ast_nodes import *

logger = logging.getLogger(__name__)

RUNTIME = "_benlang"

# Builtin verbs called as free functions live on the runtime object.
BUILTINS = MappingProxyType({
    # figures and images
    "LADE_BILD": "ladeBild",
    "BILD_WECHSELN": "bildWechseln",
    "GEHE_ZU": "geheZu",
    "DREHE": "drehe",
    "SKALIERE": "skaliere",
    "LOESCHEN": "loescheFigur",
    # drawing
    "ZEIGE_TEXT": "zeigeText",
    "ZEICHNE_RECHTECK": "zeichneRechteck",
    "ZEICHNE_KREIS": "zeichneKreis",
    "ZEICHNE_LINIE": "zeichneLinie",
    # input
    "TASTE_GEDRUECKT": "tasteGedrueckt",
    "TASTE_GETIPPT": "tasteGetippt",
    "GEDRUECKTE_TASTE": "gedrueckteTaste",
    "MAUS_X": "mausX",
    "MAUS_Y": "mausY",
    "MAUS_GEDRUECKT": "mausGedrueckt",
    "FRAGE": "frage",
    # sound, timing, misc
    "SPIELE_TON": "spieleTon",
    "WARTE": "warte",
    "ZUFALL": "zufall",
    "LAENGE": "laenge",
    "ZEICHEN": "zeichen",
    "GROSSBUCHSTABEN": "grossbuchstaben",
})

# These return promises and are awaited inside event handlers.
AWAITABLE = frozenset({"WARTE", "FRAGE", "BILD_WECHSELN"})

MATH_FUNCTIONS = MappingProxyType({
    "RUNDEN": "Math.round",
    "ABSOLUT": "Math.abs",
    "WURZEL": "Math.sqrt",
})

_INFIX_OPERATORS = MappingProxyType({
    "UND": "&&",
    "ODER": "||",
})

_EVENT_REGISTRATION = MappingProxyType({
    EventKind.START: "wennStart",
    EventKind.EVERY_FRAME: "wennImmer",
    EventKind.ON_KEY: "wennTaste",
    EventKind.ON_COLLISION: "wennKollision",
})


def format_number(value: float) -> str:
    """Shortest text that reads back as the same number (3.0 -> "3")."""
    if not math.isfinite(value):
        return "Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def js_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class Transpiler:
    """Turns a parsed Program into JavaScript for the browser runtime.

    The input must come from a parse without diagnostics.
    """

    def __init__(self, indent: str = "    "):
        self.indent = indent
        self.lines: List[str] = []
        self.depth = 0
        self.repeat_id = 0
        self.in_handler = False

    def emit(self, s: str):
        self.lines.append(self.indent * self.depth + s)

    def generate(self, prog: Program) -> str:
        self.lines = []
        self.depth = 0
        self.repeat_id = 0
        self.in_handler = False
        for st in prog.statements:
            self.gen_stmt(st)
        if not self.lines:
            return ""
        logger.debug("generated %d lines of JavaScript", len(self.lines))
        return "\n".join(self.lines) + "\n"

    def gen_body(self, block: Optional[Block]):
        self.depth += 1
        for st in (block.statements if block is not None else ()):
            self.gen_stmt(st)
        self.depth -= 1

    # -------- statements ----------
    def gen_stmt(self, st: Statement):
        if isinstance(st, (VariableDeclaration, FigureDeclaration)):
            self.emit(f"let {self.gen_expr(st.name)} = {self.gen_expr(st.value, top=True)};")

        elif isinstance(st, FunctionDeclaration):
            params = ", ".join(p.name for p in st.parameters)
            self.emit(f"function {self.gen_expr(st.name)}({params}) {{")
            # a plain function body cannot await, even inside a handler
            outer = self.in_handler
            self.in_handler = False
            self.gen_body(st.body)
            self.in_handler = outer
            self.emit("}")

        elif isinstance(st, ReturnStatement):
            if st.value is None:
                self.emit("return;")
            else:
                self.emit(f"return {self.gen_expr(st.value, top=True)};")

        elif isinstance(st, ExpressionStatement):
            self.emit(f"{self.gen_expr(st.expression, top=True)};")

        elif isinstance(st, Block):
            self.emit("{")
            self.gen_body(st)
            self.emit("}")

        elif isinstance(st, IfStatement):
            self.gen_if(st)

        elif isinstance(st, WhileStatement):
            self.emit(f"while ({self.gen_expr(st.condition, top=True)}) {{")
            self.gen_body(st.body)
            self.emit("}")

        elif isinstance(st, ForStatement):
            self.gen_for(st)

        elif isinstance(st, RepeatStatement):
            self.gen_repeat(st)

        elif isinstance(st, GameDeclaration):
            self.emit(f"{RUNTIME}.spielName = {js_string(st.name)};")

        elif isinstance(st, EventHandler):
            self.gen_event_handler(st)

        else:
            raise TypeError(f"unsupported statement node {type(st).__name__}")

    def gen_if(self, st: IfStatement):
        node = st
        self.emit(f"if ({self.gen_expr(node.condition, top=True)}) {{")
        while True:
            self.gen_body(node.consequence)
            if node.is_else_if:
                node = node.alternative.statements[0]
                self.emit(f"}} else if ({self.gen_expr(node.condition, top=True)}) {{")
                continue
            if node.alternative is not None:
                self.emit("} else {")
                self.gen_body(node.alternative)
            self.emit("}")
            return

    def gen_for(self, st: ForStatement):
        # FUER i VON a BIS b includes b
        var = self.gen_expr(st.variable)
        start = self.gen_expr(st.start, top=True)
        end = self.gen_expr(st.end, top=True)
        self.emit(f"for (let {var} = {start}; {var} <= {end}; {var}++) {{")
        self.gen_body(st.body)
        self.emit("}")

    def gen_repeat(self, st: RepeatStatement):
        counter = f"_wiederhole{self.repeat_id}"
        self.repeat_id += 1
        count = self.gen_expr(st.count, top=True)
        self.emit(f"for (let {counter} = 0; {counter} < {count}; {counter}++) {{")
        self.gen_body(st.body)
        self.emit("}")

    def gen_event_handler(self, st: EventHandler):
        args = [self.gen_expr(p, top=True) for p in (st.parameters or ())]
        args.append("async () => {")
        self.emit(f"{RUNTIME}.{_EVENT_REGISTRATION[st.kind]}({', '.join(args)}")
        outer = self.in_handler
        self.in_handler = True
        self.gen_body(st.body)
        self.in_handler = outer
        self.emit("});")

    # -------- expressions ----------
    def gen_expr(self, e: Optional[Expression], top: bool = False) -> str:
        """Render an expression. Operators are parenthesized unless ``top``."""
        if e is None:
            return "undefined"

        if isinstance(e, Identifier):
            return e.name

        if isinstance(e, NumberLiteral):
            return format_number(e.value)

        if isinstance(e, StringLiteral):
            return js_string(e.value)

        if isinstance(e, BooleanLiteral):
            return "true" if e.value else "false"

        if isinstance(e, ArrayLiteral):
            return "[" + ", ".join(self.gen_expr(x, top=True) for x in e.elements) + "]"

        if isinstance(e, IndexExpression):
            return f"{self.gen_expr(e.target)}[{self.gen_expr(e.index, top=True)}]"

        if isinstance(e, PrefixExpression):
            op = "!" if e.operator == "NICHT" else e.operator
            s = f"{op}{self.gen_expr(e.operand)}"
            return s if top else f"({s})"

        if isinstance(e, InfixExpression):
            op = _INFIX_OPERATORS.get(e.operator, e.operator)
            s = f"{self.gen_expr(e.left)} {op} {self.gen_expr(e.right)}"
            return s if top else f"({s})"

        if isinstance(e, CallExpression):
            return self.gen_call(e)

        if isinstance(e, MemberExpression):
            return f"{self.gen_expr(e.object)}.{self.gen_expr(e.property)}"

        if isinstance(e, AssignmentExpression):
            s = f"{self.gen_expr(e.target)} = {self.gen_expr(e.value, top=True)}"
            return s if top else f"({s})"

        raise TypeError(f"unsupported expression node {type(e).__name__}")

    def gen_call(self, e: CallExpression) -> str:
        args = ", ".join(self.gen_expr(a, top=True) for a in e.arguments)
        callee = e.callee

        # LOESCHEN(f): free call -> runtime namespace
        if isinstance(callee, Identifier):
            key = callee.name.upper()
            if key in BUILTINS:
                call = f"{RUNTIME}.{BUILTINS[key]}({args})"
                if self.in_handler and key in AWAITABLE:
                    return f"(await {call})"
                return call
            if key in MATH_FUNCTIONS:
                return f"{MATH_FUNCTIONS[key]}({args})"

        # f.LOESCHEN(): method on the figure, only the name is lower-cased
        if (
            isinstance(callee, MemberExpression)
            and callee.property is not None
            and callee.property.name.upper() in BUILTINS
        ):
            return f"{self.gen_expr(callee.object)}.{callee.property.name.lower()}({args})"

        return f"{self.gen_expr(callee)}({args})"


def generate(program: Program) -> str:
    return Transpiler().generate(program)
