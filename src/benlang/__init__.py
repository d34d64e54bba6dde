"""BenLang to JavaScript compiler.

The host (the IDE server) only needs :func:`compile_source`.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List

from .lexer import BenLangLexer, tokenize
from .parser import Parser, parse
from .transpiler import Transpiler, generate

__version__ = "1.0.0"

__all__ = [
    "CompileResult",
    "compile_source",
    "tokenize",
    "parse",
    "generate",
    "BenLangLexer",
    "Parser",
    "Transpiler",
]

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    code: str
    diagnostics: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def compile_source(source: str) -> CompileResult:
    """Scan, parse and transpile one source text.

    On any diagnostic the code is left empty and must not be run.
    """
    parser = Parser(BenLangLexer(source))
    program = parser.parse_program()
    if parser.errors:
        logger.info("compile failed with %d diagnostic(s)", len(parser.errors))
        return CompileResult(code="", diagnostics=list(parser.errors))
    return CompileResult(code=Transpiler().generate(program))
