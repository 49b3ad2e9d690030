#!/usr/bin/env python3

import logging
from dataclasses import dataclass
from .grammar import NonTerm, PseudoTerm, Rule, GrammarError, GrammarPredictor, END

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class NoRule:
    def __repr__(self): return ""
    def __bool__(self): return False

NO_RULE = NoRule()

class GrammarConflictError(GrammarError):
    """Two productions compete for one table cell: the grammar is not LL(1)."""

@dataclass(frozen=True)
class Conflict:
    nonterm: NonTerm
    lookahead: PseudoTerm
    kept: Rule
    rejected: Rule

    def __repr__(self):
        return f"[{self.nonterm}, {self.lookahead}]: kept '{self.kept}', dropped '{self.rejected}'"

class ParseTable:
    """
    Total map from (non-terminal, lookahead) to a Rule or ``NO_RULE``.

    Rows follow the grammar's non-terminal order, columns are the terminals in
    order of first appearance followed by the end-marker.
    """

    def __init__(self, predictor: GrammarPredictor):
        nonterms, terms = predictor.grammar.symbols()
        self.predictor = predictor
        self.start     = predictor.grammar.start
        self.nonterms  = nonterms
        self.columns   = terms + (END,)
        self.conflicts = []
        self._cells    = { n: { a: NO_RULE for a in self.columns } for n in nonterms }

    def __getitem__(self, key):
        nonterm, lookahead = key
        return self._cells.get(nonterm, {}).get(lookahead, NO_RULE)

    def row(self, nonterm: NonTerm) -> dict:
        return dict(self._cells[nonterm])

    @property
    def isLL1(self) -> bool:
        return not self.conflicts

    def _assign(self, rule: Rule, lookahead: PseudoTerm, strict: bool):
        row = self._cells[rule.lhs]
        current = row[lookahead]
        if current is NO_RULE:
            row[lookahead] = rule
            return
        if current == rule:
            return
        conflict = Conflict(rule.lhs, lookahead, current, rule)
        if strict:
            raise GrammarConflictError(f"grammar is not LL(1): {conflict}")
        log.warning("table conflict %s", conflict)
        self.conflicts.append(conflict)

    def todict(self):
        return { repr(n): { repr(a): repr(r) for a, r in row.items() if r is not NO_RULE }
                 for n, row in self._cells.items() }

def buildTable(predictor: GrammarPredictor, strict: bool = False) -> ParseTable:
    table = ParseTable(predictor)
    for rule in predictor.grammar.allRules():
        for a in table.columns:
            if predictor.testSelect(a, rule.lhs, rule.rhs):
                table._assign(rule, a, strict)
    return table
