import pytest

from benlang.ast_nodes import Program
from benlang.lexer import tokenize
from benlang.parser import parse
from benlang.transpiler import Transpiler, format_number, generate, js_string


def js(source):
    program, errors = parse(tokenize(source))
    assert errors == [], errors
    return generate(program)


def test_loeschen_free_call_and_method_call_differ():
    out = js('FIGUR f = LADE_BILD("test.png")\nLOESCHEN(f)\nf.LOESCHEN()')
    assert out == (
        'let f = _benlang.ladeBild("test.png");\n'
        "_benlang.loescheFigur(f);\n"
        "f.loeschen();\n"
    )


@pytest.mark.parametrize("source, expected", [
    ("GEHE_ZU(f, 10, 20)", "_benlang.geheZu(f, 10, 20);"),
    ("f.GEHE_ZU(10, 20)", "f.gehe_zu(10, 20);"),
    ("DREHE(f, 90)", "_benlang.drehe(f, 90);"),
    ("f.Drehe(90)", "f.drehe(90);"),
    ("skaliere(f, 2)", "_benlang.skaliere(f, 2);"),
    ('ZEICHNE_KREIS(x, y, 25, "#4ecca3")', '_benlang.zeichneKreis(x, y, 25, "#4ecca3");'),
    ("ZEICHNE_RECHTECK(0, 0, 800, 600)", "_benlang.zeichneRechteck(0, 0, 800, 600);"),
    ("ZEICHNE_LINIE(0, 0, 1, 1)", "_benlang.zeichneLinie(0, 0, 1, 1);"),
    ('SPIELE_TON("ton.wav")', '_benlang.spieleTon("ton.wav");'),
    ("x = ZUFALL(1, 6)", "x = _benlang.zufall(1, 6);"),
    ("x = MAUS_X()", "x = _benlang.mausX();"),
    ("x = RUNDEN(3.7)", "x = Math.round(3.7);"),
    ("x = WURZEL(ABSOLUT(y))", "x = Math.sqrt(Math.abs(y));"),
    ("meineFunktion(1)", "meineFunktion(1);"),
    ("text.toUpperCase()", "text.toUpperCase();"),
])
def test_calls(source, expected):
    assert js(source) == expected + "\n"


def test_precedence_is_kept():
    assert js("VAR x = 2 + 3 * 4") == "let x = 2 + (3 * 4);\n"
    assert js("VAR x = (2 + 3) * 4") == "let x = (2 + 3) * 4;\n"


def test_logical_operators():
    assert js("VAR x = wahr UND falsch ODER wahr") == "let x = (true && false) || true;\n"
    assert js("VAR x = NICHT a") == "let x = !a;\n"
    assert js("VAR x = NICHT (a ODER b)") == "let x = !(a || b);\n"


def test_prefix_minus():
    assert js("VAR x = -5") == "let x = -5;\n"
    assert js("VAR x = - -y") == "let x = -(-y);\n"
    assert js("VAR x = a * -b") == "let x = a * (-b);\n"


def test_numbers_are_minimal():
    assert js("VAR a = 3.0") == "let a = 3;\n"
    assert js("VAR a = 3.50") == "let a = 3.5;\n"
    assert format_number(0.1) == "0.1"
    assert format_number(100.0) == "100"
    assert format_number(float("inf")) == "Infinity"


def test_strings_are_escaped():
    assert js_string('sag "hi"') == '"sag \\"hi\\""'
    assert js_string("a\\b") == '"a\\\\b"'
    assert js_string("zwei\nzeilen") == '"zwei\\nzeilen"'
    assert js(r'VAR s = "er sagt \"ja\""') == 'let s = "er sagt \\"ja\\"";\n'


def test_collections_and_members():
    assert js("VAR l = [1, 2, 3]") == "let l = [1, 2, 3];\n"
    assert js("VAR e = l[i + 1]") == "let e = l[i + 1];\n"
    assert js("spieler.x = spieler.x + 5") == "spieler.x = spieler.x + 5;\n"


def test_chained_assignment():
    assert js("a = b = 1") == "a = b = 1;\n"


def test_if_else_if_else_is_one_construct():
    out = js("WENN a { x } SONST WENN b { y } SONST { z }")
    assert out == (
        "if (a) {\n"
        "    x;\n"
        "} else if (b) {\n"
        "    y;\n"
        "} else {\n"
        "    z;\n"
        "}\n"
    )
    assert out.count("if (") == 2


def test_if_without_else():
    assert js("WENN punkte > 10 { punkte = 0 }") == (
        "if (punkte > 10) {\n"
        "    punkte = 0;\n"
        "}\n"
    )


def test_else_if_with_nested_if_in_body():
    out = js("WENN a { WENN b { x } } SONST { y }")
    assert out == (
        "if (a) {\n"
        "    if (b) {\n"
        "        x;\n"
        "    }\n"
        "} else {\n"
        "    y;\n"
        "}\n"
    )


def test_for_loop_is_inclusive():
    assert js("FUER i VON 1 BIS 3 { SCHREIBE(i) }") == (
        "for (let i = 1; i <= 3; i++) {\n"
        "    SCHREIBE(i);\n"
        "}\n"
    )


def test_while_loop():
    assert js("SOLANGE x < 10 { x = x + 1 }") == (
        "while (x < 10) {\n"
        "    x = x + 1;\n"
        "}\n"
    )


def test_repeat_loops_get_distinct_counters():
    out = js("WIEDERHOLE 3 { WIEDERHOLE n { a() } }")
    assert out == (
        "for (let _wiederhole0 = 0; _wiederhole0 < 3; _wiederhole0++) {\n"
        "    for (let _wiederhole1 = 0; _wiederhole1 < n; _wiederhole1++) {\n"
        "        a();\n"
        "    }\n"
        "}\n"
    )


def test_function_declaration():
    assert js("FUNKTION addiere(a, b) {\n ZURUECK a + b\n}") == (
        "function addiere(a, b) {\n"
        "    return a + b;\n"
        "}\n"
    )
    assert js("FUNKTION f() { ZURUECK }") == "function f() {\n    return;\n}\n"


def test_game_declaration():
    assert js('SPIEL "Mein \\"erstes\\" Spiel"') == '_benlang.spielName = "Mein \\"erstes\\" Spiel";\n'


def test_event_handlers():
    out = js(
        "WENN_START { x = 1 }\n"
        "WENN_IMMER { }\n"
        'WENN_TASTE("leertaste") { punkte = punkte + 1 }\n'
        "WENN_KOLLISION(held, stein) { LOESCHEN(stein) }\n"
    )
    assert out == (
        "_benlang.wennStart(async () => {\n"
        "    x = 1;\n"
        "});\n"
        "_benlang.wennImmer(async () => {\n"
        "});\n"
        '_benlang.wennTaste("leertaste", async () => {\n'
        "    punkte = punkte + 1;\n"
        "});\n"
        "_benlang.wennKollision(held, stein, async () => {\n"
        "    _benlang.loescheFigur(stein);\n"
        "});\n"
    )


def test_awaitable_builtins_inside_handlers():
    out = js(
        "WENN_START {\n"
        "  WARTE(500)\n"
        '  VAR name = FRAGE("Name?")\n'
        "  FUNKTION f() { WARTE(1) }\n"
        "}\n"
        "WARTE(2)\n"
    )
    assert out == (
        "_benlang.wennStart(async () => {\n"
        "    (await _benlang.warte(500));\n"
        '    let name = (await _benlang.frage("Name?"));\n'
        "    function f() {\n"
        "        _benlang.warte(1);\n"
        "    }\n"
        "});\n"
        "_benlang.warte(2);\n"
    )


def test_empty_program():
    assert generate(Program()) == ""


def test_generation_is_deterministic():
    program, _ = parse(tokenize("WIEDERHOLE 2 { a() }\nWENN_START { WARTE(1) }"))
    t = Transpiler()
    first = t.generate(program)
    second = t.generate(program)
    assert first == second
    assert generate(program) == first
