import io

from benlang.main import main


def run(monkeypatch, capsys, argv, stdin=""):
    monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
    code = main(argv)
    return code, capsys.readouterr().out


def test_gen_from_file(tmp_path, monkeypatch, capsys):
    src = tmp_path / "hauptspiel.ben"
    src.write_text('SPIEL "Test"\nVAR x = 1\n', encoding="utf-8")
    code, out = run(monkeypatch, capsys, ["gen", str(src)])
    assert code == 0
    assert out == '_benlang.spielName = "Test";\nlet x = 1;\n'


def test_gen_from_stdin(monkeypatch, capsys):
    code, out = run(monkeypatch, capsys, ["gen"], stdin="LOESCHEN(f)\n")
    assert code == 0
    assert out == "_benlang.loescheFigur(f);\n"


def test_gen_with_errors(monkeypatch, capsys):
    code, out = run(monkeypatch, capsys, ["gen"], stdin="WENN { }")
    assert code == 1
    assert "Line 1: unexpected token '{'" in out
    assert "Code generation skipped due to errors." in out


def test_check(monkeypatch, capsys):
    code, out = run(monkeypatch, capsys, ["check"], stdin="VAR a = 1")
    assert code == 0
    assert out.startswith("OK")

    code, out = run(monkeypatch, capsys, ["CHECK", "-v"], stdin="VAR = 1")
    assert code == 1
    assert "Line 1: expected 'IDENT', found '='" in out


def test_lex(monkeypatch, capsys):
    code, out = run(monkeypatch, capsys, ["lex"], stdin="wenn x")
    assert code == 0
    lines = out.splitlines()
    assert lines[0].startswith("Line")
    assert "WENN" in lines[2]
    assert "IDENT" in lines[3]
    assert "EOF" in lines[4]


def test_usage_errors(monkeypatch, capsys):
    code, out = run(monkeypatch, capsys, [])
    assert code == 1
    assert "Usage:" in out

    code, out = run(monkeypatch, capsys, ["compile"])
    assert code == 1


def test_missing_file(tmp_path, monkeypatch, capsys):
    code, out = run(monkeypatch, capsys, ["gen", str(tmp_path / "fehlt.ben")])
    assert code == 1
    assert "Error reading file" in out
