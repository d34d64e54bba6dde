import logging
import sys

from . import compile_source
from .lexer import BenLangLexer, print_tokens
from .parser import Parser

logger = logging.getLogger(__name__)


def read_input(argv):
    if len(argv) == 2:
        with open(argv[1], "r", encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()

def usage():
    print("Usage:")
    print("  benlang lex < input.ben")
    print("  benlang check < input.ben")
    print("  benlang gen < input.ben")
    print("  or:")
    print("  benlang lex file.ben")
    print("  benlang check file.ben")
    print("  benlang gen file.ben")
    print("  add -v / --verbose for debug logging")

def print_diagnostics(diagnostics):
    for d in diagnostics:
        print(d)

def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    verbose = any(a in ("-v", "--verbose") for a in argv)
    argv = [a for a in argv if a not in ("-v", "--verbose")]

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not argv or len(argv) > 2:
        usage()
        return 1

    mode = argv[0].lower()
    if mode not in ("lex", "check", "gen"):
        usage()
        return 1

    try:
        data = read_input(argv)
    except OSError as e:
        print(f"Error reading file: {e}")
        return 1

    if mode == "lex":
        print_tokens(BenLangLexer().tokenize(data))
        return 0

    if mode == "check":
        parser = Parser(BenLangLexer(data))
        parser.parse_program()
        if not parser.errors:
            print("OK: no syntax errors found.")
            return 0
        print_diagnostics(parser.errors)
        return 1

    result = compile_source(data)
    if not result.ok:
        print_diagnostics(result.diagnostics)
        print("\nCode generation skipped due to errors.")
        return 1
    sys.stdout.write(result.code)
    return 0

if __name__ == "__main__":
    sys.exit(main())
