#!/usr/bin/env python3

from collections.abc import Iterable
from tabulate import tabulate
from .grammar import Grammar, FirstSet, FollowSet, Symbol, END, symbolName, wordString
from .table import ParseTable, NO_RULE
from .parser import RecognitionResult, Match

TABLEFMT = "simple_grid"

def orderSymbols(symbols: Iterable[Symbol], order: Iterable[Symbol]) -> list[Symbol]:
    symbols = set(symbols)
    ordered = [ s for s in order if s in symbols ]
    return ordered + sorted(symbols - set(ordered), key=symbolName)

def renderGrammar(g: Grammar) -> str:
    lines = []
    for n, rules in g.rules():
        lines.append(f"{n.name} -> " + " | ".join(wordString(rhs) for rhs in rules))
    return "\n".join(lines)

def renderSymbols(g: Grammar) -> str:
    nonterms, terms = g.symbols()
    return "non-terminals: " + " ".join(symbolName(n) for n in nonterms) + "\n" \
         + "terminals: "     + " ".join(symbolName(t) for t in terms)

def _setString(s, order) -> str:
    return ", ".join(repr(x) for x in orderSymbols(s, order))

def renderFirst(firstSet: FirstSet, g: Grammar) -> str:
    _, terms = g.symbols()
    order = terms
    lines = [ f"first({wordString(rule.rhs)}): {_setString(s, order)}" for rule, s in firstSet.rules() ]
    lines += [ f"first({n.name}): {_setString(s, order)}" for n, s in firstSet.nonterms() ]
    return "\n".join(lines)

def renderFollow(followSet: FollowSet, g: Grammar) -> str:
    _, terms = g.symbols()
    order = terms + (END,)
    return "\n".join(f"follow({n.name}): {_setString(s, order)}" for n, s in followSet.nonterms())

def renderTable(table: ParseTable) -> str:
    headers = [ "" ] + [ repr(a) for a in table.columns ]
    rows = []
    for n in table.nonterms:
        row = [ n.name ]
        for a in table.columns:
            rule = table[n, a]
            row.append("" if rule is NO_RULE else wordString(rule.rhs))
        rows.append(row)
    return tabulate(rows, headers=headers, tablefmt=TABLEFMT)

def _action(action) -> str:
    if action is None: return ""
    if isinstance(action, Match): return repr(action)
    return f"{action.lhs.name}->{wordString(action.rhs)}"

def renderTrace(result: RecognitionResult) -> str:
    rows = [ [ step.index,
               "".join(symbolName(s) for s in step.stack),
               "".join(symbolName(s) for s in step.remaining),
               _action(step.action) ]
             for step in result.steps ]
    out = tabulate(rows, headers=[ "step", "stack", "input", "production" ], tablefmt=TABLEFMT)
    verdict = result.verdict
    if result.reason:
        verdict += f" ({result.reason})"
    return out + "\n" + verdict
