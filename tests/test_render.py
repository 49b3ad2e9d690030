import io
import json
import pytest
from contextlib import redirect_stdout
from pyll1.grammar import *
from pyll1.table import buildTable
from pyll1.parser import PredictiveRecognizer
from pyll1.config import CANONICAL, GrammarConfig, loadConfig
from pyll1.render import *
from pyll1.cli import main

BAD_CONFIGS = [ "{", "[]", '{"start": "E"}',
                '{"start": "E", "productions": {}, "extra": 1}',
                '{"start": "E", "productions": {"E": [5]}}',
                '{"start": "E", "productions": {"E": 5}}',
                '{"start": "E", "productions": {"E": ["i"]}, "operators": 5}',
                '{"start": 1, "productions": {"E": ["i"]}}',
                '{"start": "E", "productions": {"E": ["i"]}, "inputs": "i"}' ]

def canonical():
    p = GrammarPredictor(CANONICAL.grammar())
    return p, buildTable(p)

def test_render_grammar_and_sets():
    p, _ = canonical()
    assert renderGrammar(p.original) == "E -> E+T | T\nT -> T*F | F\nF -> (E) | i"
    assert renderGrammar(p.grammar).splitlines()[:2] == [ "E -> TE'", "E' -> +TE' | ε" ]
    assert renderSymbols(p.grammar) == "non-terminals: E E' T T' F\nterminals: + * ( ) i"

    first = renderFirst(p.firstSet, p.grammar).splitlines()
    assert "first(F): (, i" in first
    assert "first(+TE'): +" in first
    assert "first(E'): +, ε" in first

    follow = renderFollow(p.followSet, p.grammar).splitlines()
    assert "follow(E'): ), #" in follow
    assert "follow(T): +, ), #" in follow

def test_render_table():
    _, table = canonical()
    out = renderTable(table)
    lines = out.splitlines()
    header = next(l for l in lines if "#" in l)
    for col in [ "+", "*", "(", ")", "i", "#" ]:
        assert col in header
    assert "TE'" in out
    assert "ε" in out
    assert "NULL" not in out and "NoRule" not in out

def test_render_trace():
    _, table = canonical()
    r = PredictiveRecognizer(table)
    out = renderTrace(r.recognize("i"))
    assert "E->TE'" in out
    assert "match #" in out
    assert out.endswith("i is accepted")

    out = renderTrace(r.recognize("(i"))
    assert out.splitlines()[-1].startswith("(i is rejected")

def test_config_roundtrip(tmp_path):
    path = tmp_path / "grammar.json"
    path.write_text(json.dumps(CANONICAL.todict()), encoding="utf-8")
    config = loadConfig(path)
    assert config == CANONICAL
    assert config.grammar() == CANONICAL.grammar()

def test_config_errors(tmp_path):
    path = tmp_path / "bad.json"
    for data in BAD_CONFIGS:
        path.write_text(data, encoding="utf-8")
        try:
            loadConfig(path)
        except GrammarError:
            continue
        raise AssertionError(f"{data} should not load")

def test_cli_canonical(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    for title in ("grammar:", "grammar without left recursion:", "symbols:", "first sets:",
                  "follow sets:", "parse table:"):
        assert title in out
    assert "i+i*i is accepted" in out
    assert "(i(*i) is rejected" in out

def test_cli_inputs_and_config(tmp_path, capsys):
    config = GrammarConfig("S", { "S": [ "aSb", "" ] })
    path = tmp_path / "anbn.json"
    path.write_text(json.dumps(config.todict()), encoding="utf-8")
    assert main([ "--config", str(path), "--raw", "--strict", "aabb", "aab" ]) == 0
    out = capsys.readouterr().out
    assert "grammar without left recursion:" in out
    assert "aabb is accepted" in out
    assert "aab is rejected" in out

def test_cli_configuration_error(tmp_path, capsys):
    path = tmp_path / "loop.json"
    path.write_text(json.dumps({ "start": "A", "productions": { "A": [ "Aa" ] } }), encoding="utf-8")
    assert main([ "-c", str(path) ]) == 1
    assert "error:" in capsys.readouterr().err

    path.write_text(json.dumps({ "start": "S", "productions": { "S": [ "aA", "aB" ], "A": [ "x" ], "B": [ "y" ] } }),
                    encoding="utf-8")
    assert main([ "-c", str(path), "--strict" ]) == 1
    assert "not LL(1)" in capsys.readouterr().err
    assert main([ "-c", str(path), "--no-eliminate", "ax" ]) == 0
    assert "conflict:" in capsys.readouterr().out

def test_config_not_utf8(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"start": "\xff\xfe"}')
    with pytest.raises(GrammarError):
        loadConfig(path)

def test_cli_rejects_malformed_config(tmp_path, capsys):
    path = tmp_path / "bad.json"
    for data in BAD_CONFIGS[4:]:
        path.write_text(data, encoding="utf-8")
        assert main([ "-c", str(path) ]) == 1
        assert "error:" in capsys.readouterr().err
    path.write_bytes(b"\xff\xfe\x00")
    assert main([ "-c", str(path) ]) == 1
    assert "error:" in capsys.readouterr().err

def test_cli_writes_to_current_stdout():
    buf = io.StringIO()
    with redirect_stdout(buf):
        assert main([ "i+i*i" ]) == 0
    assert "i+i*i is accepted" in buf.getvalue()
