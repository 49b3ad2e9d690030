#!/usr/bin/env python3

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Optional, Union
from .grammar import Symbol, Term, PseudoTerm, Epsilon, EndMarker, Rule, END, isNonTerm
from .table import ParseTable, NO_RULE

log = logging.getLogger(__name__)

OPERATORS  = "()+*"
IDENTIFIER = "i"

# Input Preparation
# #################

def tokenize(text: str, operators: str = OPERATORS, identifier: str = IDENTIFIER) -> list[Term]:
    """
    Collapse every run of non-operator characters into one ``identifier``
    terminal; operator characters pass through as terminals of their own.
    Whitespace separates runs and is dropped.
    """
    tokens, inRun = [], False
    for c in text:
        if c in operators:
            tokens.append(Term(c))
            inRun = False
        elif c.isspace():
            inRun = False
        elif not inRun:
            tokens.append(Term(identifier))
            inRun = True
    return tokens

def toWord(word: Union[str, Iterable[Symbol]]) -> tuple[Symbol, ...]:
    if isinstance(word, str):
        return tuple(Term(c) for c in word)
    return tuple(word)

# Recognizer Data Structures
# ##########################

@dataclass(frozen=True)
class Match:
    symbol: PseudoTerm
    def __repr__(self): return f"match {self.symbol}"

Action = Union[Rule, Match, None]

@dataclass(frozen=True)
class TraceStep:
    index: int
    stack: tuple[Symbol, ...]
    remaining: tuple[Symbol, ...]
    action: Action

    def __post_init__(self):
        if self.index < 1:
            raise ValueError("TraceStep index must be positive")

    def __repr__(self):
        stack = "".join(map(repr, self.stack))
        rest  = "".join(map(repr, self.remaining))
        return f"{self.index}\t{stack}\t{rest}\t{'' if self.action is None else repr(self.action)}"

@dataclass
class RecognitionResult:
    word: tuple[Symbol, ...]
    accepted: bool = False
    steps: list[TraceStep] = field(default_factory=list)
    reason: Optional[str] = None

    def __bool__(self):
        return self.accepted

    @property
    def verdict(self) -> str:
        word = "".join(map(repr, self.word))
        return f"{word} is {'accepted' if self.accepted else 'rejected'}"

# Predictive Recognizer
# #####################

class PredictiveRecognizer:
    table: ParseTable
    stack: list[Symbol]
    parseInput: list[Symbol]
    result: RecognitionResult

    def __init__(self, table: ParseTable):
        self.table = table

    def reset(self, word: Union[str, Iterable[Symbol]]):
        word = toWord(word)
        self.stack = [ END, self.table.start ]
        # next input symbol on top
        self.parseInput = [ END ] + list(reversed(word))
        self.result = RecognitionResult(word)

    def reject(self, reason: str):
        self.result.reason = reason
        log.debug("rejected %s: %s", self.result.word, reason)

    def snapshot(self, action: Action) -> TraceStep:
        step = TraceStep(len(self.result.steps) + 1,
                         tuple(self.stack),
                         tuple(reversed(self.parseInput)),
                         action)
        self.result.steps.append(step)
        log.debug("step %r", step)
        return step

    def steps(self, word: Union[str, Iterable[Symbol]]) -> Iterator[TraceStep]:
        """Run the automaton on ``word``, yielding each step before it is performed."""
        self.reset(word)
        for s in self.result.word:
            if isinstance(s, EndMarker) or not isinstance(s, Term):
                yield self.snapshot(None)
                self.reject(f"'{s!r}' is not an input terminal")
                return

        while self.stack and self.parseInput:
            top, focus = self.stack[-1], self.parseInput[-1]

            if top == focus:
                yield self.snapshot(Match(focus))
                self.stack.pop()
                self.parseInput.pop()

            elif isNonTerm(top):
                rule = self.table[top, focus]
                yield self.snapshot(rule if rule is not NO_RULE else None)
                if rule is NO_RULE:
                    self.reject(f"no rule for {top} on lookahead '{focus!r}'")
                    return
                self.stack.pop()
                self.stack.extend(s for s in reversed(rule.rhs) if not isinstance(s, Epsilon))

            else:
                yield self.snapshot(None)
                self.reject(f"expected '{top!r}' but found '{focus!r}'")
                return

        if self.stack or self.parseInput:
            self.reject("analysis stack and input did not empty together")
            return
        self.result.accepted = True

    def recognize(self, word: Union[str, Iterable[Symbol]]) -> RecognitionResult:
        for _ in self.steps(word): pass
        return self.result

    def recognizeText(self, text: str, operators: str = OPERATORS, identifier: str = IDENTIFIER) -> RecognitionResult:
        return self.recognize(tokenize(text, operators, identifier))
