import pytest
from deepdiff import DeepDiff
from pyll1.grammar import *
from pyll1.table import *

EXPR = Grammar.fromDefinition("E", { "E": [ "E+T", "T" ],
                                     "T": [ "T*F", "F" ],
                                     "F": [ "(E)", "i" ] })

AMBIG = Grammar.fromDefinition("S", { "S": [ "aA", "aB" ],
                                      "A": [ "x" ],
                                      "B": [ "y" ] })

DANGLING = Grammar.fromDefinition("S", { "S": [ "iSE", "a" ],
                                         "E": [ "eS", "" ] })

def validate(expected, actual):
    diff = DeepDiff(expected, actual)
    if len(diff) != 0:
        raise ValueError(f"Table does not match expected state:\n{expected}\n{actual}\n{diff.pretty()}")

def test_expression_table():
    table = buildTable(GrammarPredictor(EXPR))
    validate({ "E":  { "(": "E -> TE'",   "i": "E -> TE'" },
               "E'": { "+": "E' -> +TE'", ")": "E' -> ε", "#": "E' -> ε" },
               "T":  { "(": "T -> FT'",   "i": "T -> FT'" },
               "T'": { "+": "T' -> ε",    "*": "T' -> *FT'", ")": "T' -> ε", "#": "T' -> ε" },
               "F":  { "(": "F -> (E)",   "i": "F -> i" } },
             table.todict())
    assert table.isLL1
    assert table.columns[-1] == END

def test_table_is_total():
    table = buildTable(GrammarPredictor(EXPR))
    nonterms, terms = table.predictor.grammar.symbols()
    for n in nonterms:
        for a in terms + (END,):
            cell = table[n, a]
            assert cell is NO_RULE or isinstance(cell, Rule)
        assert len(table.row(n)) == len(terms) + 1
    assert table[NonTerm("E"), Term("z")] is NO_RULE
    assert table[NonTerm("Z"), Term("i")] is NO_RULE
    assert table[NonTerm("E"), END] is NO_RULE
    assert not NO_RULE
    assert repr(NO_RULE) == ""

def test_conflict_keeps_first_rule():
    table = buildTable(GrammarPredictor(AMBIG))
    assert not table.isLL1
    assert table[NonTerm("S"), Term("a")] == Rule(NonTerm("S"), (Term("a"), NonTerm("A")))
    assert table.conflicts == [ Conflict(NonTerm("S"), Term("a"),
                                         Rule(NonTerm("S"), (Term("a"), NonTerm("A"))),
                                         Rule(NonTerm("S"), (Term("a"), NonTerm("B")))) ]

def test_conflict_between_first_and_follow():
    table = buildTable(GrammarPredictor(DANGLING))
    assert [ (c.nonterm, c.lookahead) for c in table.conflicts ] == [ (NonTerm("E"), Term("e")) ]
    assert table[NonTerm("E"), Term("e")] == Rule(NonTerm("E"), (Term("e"), NonTerm("S")))
    assert table[NonTerm("E"), END] == Rule(NonTerm("E"), ())

@pytest.mark.parametrize("g", [ AMBIG, DANGLING ])
def test_strict_mode_rejects_conflicts(g):
    with pytest.raises(GrammarConflictError):
        buildTable(GrammarPredictor(g), strict=True)

def test_strict_mode_accepts_ll1():
    table = buildTable(GrammarPredictor(EXPR), strict=True)
    assert table.isLL1

def test_cells_follow_select_sets():
    for g in (EXPR, AMBIG, DANGLING):
        p = GrammarPredictor(g)
        table = buildTable(p)
        for rule in p.grammar.allRules():
            for a in table.columns:
                if table[rule.lhs, a] == rule:
                    assert p.testSelect(a, rule.lhs, rule.rhs)
        for n in table.nonterms:
            for a, rule in table.row(n).items():
                if rule is NO_RULE:
                    assert not any(p.testSelect(a, n, rhs) for rhs in p.grammar[n])
