#!/usr/bin/env python3

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypeVar, Callable, Any
from copy import deepcopy

T = TypeVar('T')
G = TypeVar('G')

log = logging.getLogger(__name__)

EPSILON_NAME = "ε"
END_NAME     = "#"

# Grammar Representation
# ######################

@dataclass(frozen=True)
class Symbol: pass

@dataclass(frozen=True)
class NonTerm(Symbol):
    name: str
    def __repr__(self): return self.name

@dataclass(frozen=True)
class PseudoTerm(Symbol): pass

@dataclass(frozen=True)
class Term(PseudoTerm):
    name: str
    def __repr__(self): return self.name

@dataclass(frozen=True)
class Epsilon(PseudoTerm):
    def __repr__(self): return EPSILON_NAME

@dataclass(frozen=True)
class EndMarker(PseudoTerm):
    def __repr__(self): return END_NAME

EPSILON = Epsilon()
END     = EndMarker()

class GrammarError(ValueError):
    """Configuration error in a grammar definition; aborts analysis."""

class LeftRecursionError(GrammarError):
    """A nonterminal is directly left recursive and has no other alternative."""

def symbolName(s: Symbol) -> str:
    return s.name if isinstance(s, (NonTerm, Term)) else repr(s)

def wordString(word: Iterable[Symbol]) -> str:
    names = [ symbolName(s) for s in word ]
    if not names: return EPSILON_NAME
    sep = "" if all(len(n) == 1 or n.endswith("'") for n in names) else " "
    return sep.join(names)

@dataclass(frozen=True)
class Rule:
    lhs: NonTerm
    rhs: tuple[Symbol, ...]

    def __repr__(self):
        return f"{self.lhs.name} -> {wordString(self.rhs)}"

    def __len__(self):
        return len(self.rhs)

@dataclass
class Grammar:
    start: NonTerm
    ruleDict: dict[NonTerm, list[tuple[Symbol, ...]]] = field(default_factory=dict)

    def __repr__(self):
        res = f"Grammar(\n  start = {self.start},\n"
        for rule in self.allRules():
            res += "  " + repr(rule) + "\n"
        res += ")"
        return res

    @classmethod
    def fromDefinition(cls, start: str, definition: dict[str, Iterable[Any]]) -> "Grammar":
        """
        Build a grammar from ``{name: [alternative, ...]}``.

        A name is a nonterminal iff it is a key of ``definition``; every other
        name used in an alternative is a terminal. String alternatives are read
        one character per symbol (whitespace ignored), other iterables one
        element per symbol. ``""``, ``"ε"`` and empty sequences denote the
        epsilon production.
        """
        nonterms = set(definition)
        def toSymbol(name):
            return NonTerm(name) if name in nonterms else Term(name)
        g = cls(NonTerm(start))
        for lhs, alternatives in definition.items():
            if not isinstance(lhs, str):
                raise GrammarError(f"non-terminal name {lhs!r} must be a string")
            if not isinstance(alternatives, (list, tuple)):
                raise GrammarError(f"alternatives of {lhs} must be a list")
            g.ruleDict.setdefault(NonTerm(lhs), [])
            for alt in alternatives:
                if isinstance(alt, str):
                    names = [ c for c in alt if not c.isspace() ]
                    if any(c == "'" and prev in nonterms for prev, c in zip(names, names[1:])):
                        primed = []
                        for c in names:
                            if c == "'" and primed: primed[-1] += c
                            else: primed.append(c)
                        raise GrammarError(f"'{alt}' would split primed symbols into single characters; "
                                           f"write multi-character symbols as a list, e.g. {primed!r}")
                elif isinstance(alt, (list, tuple)) and all(isinstance(n, str) for n in alt):
                    names = list(alt)
                else:
                    raise GrammarError(f"alternative {alt!r} of {lhs} must be a string or a list of strings")
                names = [ n for n in names if n != EPSILON_NAME ]
                if END_NAME in names:
                    raise GrammarError(f"'{END_NAME}' is reserved for the end-marker ({lhs})")
                g.declareProduction(NonTerm(lhs), tuple(toSymbol(n) for n in names))
        g.validate()
        return g

    def declareProduction(self, nonterm: NonTerm, rhs: Iterable[Symbol]):
        if not isinstance(nonterm, NonTerm):
            raise GrammarError("Grammar rule must be declared with a valid non-terminal")
        rhs = tuple(s for s in rhs if not isinstance(s, Epsilon))
        alternatives = self.ruleDict.setdefault(nonterm, [])
        if rhs not in alternatives:
            alternatives.append(rhs)

    def validate(self):
        if not self.ruleDict.get(self.start):
            raise GrammarError(f"start symbol {self.start} has no productions")
        for rule in self.allRules():
            for s in rule.rhs:
                if isNonTerm(s) and not self.ruleDict.get(s):
                    raise GrammarError(f"non-terminal {s} used in '{rule}' has no productions")
                if isinstance(s, EndMarker):
                    raise GrammarError(f"end-marker may not appear in '{rule}'")

    def symbols(self) -> tuple[tuple[NonTerm, ...], tuple[Term, ...]]:
        nonterms = tuple(self.ruleDict)
        terms = {}
        for rule in self.allRules():
            for s in rule.rhs:
                if isTerm(s): terms.setdefault(s, None)
        return nonterms, tuple(terms)

    def names(self) -> set[str]:
        nonterms, terms = self.symbols()
        return { s.name for s in nonterms + terms }

    def keys(self):
        return self.ruleDict.keys()

    def rules(self):
        return self.ruleDict.items()

    def allRules(self) -> Iterable[Rule]:
        for n, alternatives in self.ruleDict.items():
            for rhs in alternatives:
                yield Rule(n, rhs)

    def __getitem__(self, nonterm):
        if not isinstance(nonterm, NonTerm):
            raise ValueError("Grammar rule lookup must use valid non-terminal")
        return self.ruleDict.get(nonterm, [])

# utility functions
# #################

def isTerm(s: Symbol) -> bool:
    return isinstance(s, Term)

def isNonTerm(s: Symbol) -> bool:
    return isinstance(s, NonTerm)

def setSize(d: dict[Any, set]) -> int:
    return sum(len(v) for v in d.values())

def closure(f: Callable[[T, G], T], measure: Callable[[T], int] = len) -> Callable[[T, G], T]:

    def closure_f(s: T, g: G) -> T:
       s = deepcopy(s)
       passes = 0
       size, newsize = -1, measure(s)
       while size < newsize:
           size = newsize
           s = f(s,g)
           newsize = measure(s)
           passes += 1
       log.debug("%s stable after %d passes", f.__name__, passes)
       return s

    return closure_f

# grammar diagnostics
# ###################

def productive_rule(rule: tuple[Symbol, ...], p: set[NonTerm]) -> bool:
    return all(not isNonTerm(s) or s in p for s in rule)

def _productive_1(p: set[NonTerm], g: Grammar) -> set[NonTerm]:
    for n, rules in g.rules():
        if n in p: continue
        if any(productive_rule(rule, p) for rule in rules):
            p.add(n)
    return p

_productive_0 = closure(_productive_1)

def productive(g: Grammar) -> set[NonTerm]:
    return _productive_0(set(), g)

def _reachable_1(r: set[NonTerm], g: Grammar) -> set[NonTerm]:
    for n, rules in g.rules():
        if n not in r: continue
        for rule in rules:
            r.update({ s for s in rule if isNonTerm(s) })
    return r

_reachable_0 = closure(_reachable_1)

def reachable(g: Grammar) -> set[NonTerm]:
    return _reachable_0({ g.start }, g)

def _nullable_1(null: set[NonTerm], g: Grammar) -> set[NonTerm]:
    for n, rules in g.rules():
        if n in null: continue
        for rule in rules:
            if all(s in null or isinstance(s, Epsilon) for s in rule):
                null.add(n)
                break
    return null

_nullable_0 = closure(_nullable_1)

def nullable(g: Grammar) -> set[NonTerm]:
    return _nullable_0(set(), g)

def diagnose(g: Grammar):
    nonterms = set(g.keys())
    for n in sorted(nonterms - productive(g), key=symbolName):
        log.warning("non-terminal %s derives no terminal string", n)
    for n in sorted(nonterms - reachable(g), key=symbolName):
        log.warning("non-terminal %s is unreachable from %s", n, g.start)

# grammar preprocessing
# #####################

class SymbolAllocator:
    """Hands out non-terminal names that collide with no name seen so far."""

    def __init__(self, taken: Iterable[str] = ()):
        self.taken = set(taken)

    def fresh(self, base: NonTerm, suffix: str = "'") -> NonTerm:
        name = base.name + suffix
        while name in self.taken:
            name += suffix
        self.taken.add(name)
        return NonTerm(name)

def eliminateLeftRecursion(g: Grammar, allocator: SymbolAllocator = None) -> Grammar:
    """
    Rewrite every directly left recursive non-terminal ``A -> A a | b`` as
    ``A -> b A'`` and ``A' -> a A' | ε``. Indirect left recursion is left as is.
    """
    g.validate()
    allocator = allocator or SymbolAllocator(g.names())
    out = Grammar(g.start)
    for n, rules in g.rules():
        alpha = [ rule[1:] for rule in rules if rule[:1] == (n,) and len(rule) > 1 ]
        beta  = [ rule for rule in rules if rule[:1] != (n,) ]
        if len(beta) == len(rules):
            out.ruleDict[n] = list(rules)
            continue
        if not beta:
            raise LeftRecursionError(f"non-terminal {n} is left recursive and has no other alternative")
        if not alpha:
            # only trivial n -> n cycles
            out.ruleDict[n] = beta
            continue
        tail = allocator.fresh(n)
        out.ruleDict[n]    = [ b + (tail,) for b in beta ]
        out.ruleDict[tail] = [ a + (tail,) for a in alpha ] + [ () ]
        log.debug("eliminated left recursion in %s using %s", n, tail)
    return out

# grammar prediction
# ##################

def first(firstMap: dict[NonTerm, set[PseudoTerm]], word: Iterable[Symbol]) -> set[PseudoTerm]:
    firstWord = set()
    for sym in word:
        if isinstance(sym, Epsilon): continue
        if not isNonTerm(sym):
            firstWord.add(sym)
            break
        firstSym = firstMap.get(sym, set())
        firstWord.update(firstSym - { EPSILON })
        if EPSILON not in firstSym:
            break
    else:
        firstWord.add(EPSILON)
    return firstWord

def _buildFirst1(firstMap: dict[NonTerm, set[PseudoTerm]], g: Grammar):
    for n, rules in g.rules():
        for rule in rules:
            firstMap.setdefault(n, set()).update(first(firstMap, rule))
    return firstMap

_buildFirst0 = closure(_buildFirst1, setSize)

class FirstSet:
    """FIRST sets per rule and per non-terminal of one grammar."""

    def __init__(self, ruleMap: dict[Rule, frozenset], nontermMap: dict[NonTerm, frozenset]):
        self._rules    = dict(ruleMap)
        self._nonterms = dict(nontermMap)

    def __getitem__(self, key) -> frozenset:
        if isinstance(key, Rule):    return self._rules[key]
        if isinstance(key, NonTerm): return self._nonterms[key]
        return frozenset(self.word(key))

    def word(self, word: Iterable[Symbol]) -> set[PseudoTerm]:
        return first(self._nonterms, word)

    def rules(self):
        return self._rules.items()

    def nonterms(self):
        return self._nonterms.items()

    def todict(self):
        return { "rules":    { repr(k): { repr(s) for s in v } for k, v in self._rules.items() },
                 "nonterms": { repr(k): { repr(s) for s in v } for k, v in self._nonterms.items() } }

def buildFirst(g: Grammar) -> FirstSet:
    firstMap = _buildFirst0({ n: set() for n in g.keys() }, g)
    ruleMap = { rule: frozenset(first(firstMap, rule.rhs)) for rule in g.allRules() }
    nontermMap = { n: frozenset() for n in g.keys() }
    for rule, rhsFirst in ruleMap.items():
        nontermMap[rule.lhs] = nontermMap[rule.lhs] | rhsFirst
    return FirstSet(ruleMap, nontermMap)

def _buildFollow1(follow: dict[NonTerm, set[PseudoTerm]], gfp: tuple[Grammar, FirstSet]):
    g, firstSet = gfp
    for rule in g.allRules():
        for i, curr in enumerate(rule.rhs):
            if not isNonTerm(curr): continue
            rest = firstSet.word(rule.rhs[i+1:])
            follow[curr].update(rest - { EPSILON })
            if EPSILON in rest:
                follow[curr].update(follow[rule.lhs])
    return follow

_buildFollow0 = closure(_buildFollow1, setSize)

class FollowSet:
    """FOLLOW sets per non-terminal of one grammar."""

    def __init__(self, followMap: dict[NonTerm, frozenset]):
        self._nonterms = dict(followMap)

    def __getitem__(self, nonterm: NonTerm) -> frozenset:
        return self._nonterms[nonterm]

    def nonterms(self):
        return self._nonterms.items()

    def todict(self):
        return { repr(k): { repr(s) for s in v } for k, v in self._nonterms.items() }

def buildFollow(g: Grammar, firstSet: FirstSet) -> FollowSet:
    d = { n: set() for n in g.keys() }
    d[g.start].add(END)
    follow = _buildFollow0(d, (g, firstSet))
    return FollowSet({ n: frozenset(v) for n, v in follow.items() })

# grammar initialization routines
# ###############################

class GrammarPredictor:
    original: Grammar
    grammar: Grammar
    firstSet: FirstSet
    followSet: FollowSet

    def __init__(self, grammar: Grammar, eliminate: bool = True):
        grammar.validate()
        self.original  = grammar
        self.grammar   = eliminateLeftRecursion(grammar) if eliminate else grammar
        diagnose(self.grammar)
        self.firstSet  = buildFirst(self.grammar)
        self.followSet = buildFollow(self.grammar, self.firstSet)

    def testSelect(self, term: PseudoTerm, nonterm: NonTerm, word: Iterable[Symbol]) -> bool:
        wordFirst = self.firstSet.word(word)
        return ( term in wordFirst ) \
            or ( EPSILON in wordFirst and term in self.followSet[nonterm] )

    def todict(self):
        return { "start":  repr(self.grammar.start),
                 "rules":  [ repr(r) for r in self.grammar.allRules() ],
                 "first":  self.firstSet.todict(),
                 "follow": self.followSet.todict() }
