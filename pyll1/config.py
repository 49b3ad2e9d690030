#!/usr/bin/env python3

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from .grammar import Grammar, GrammarError
from .parser import OPERATORS, IDENTIFIER

log = logging.getLogger(__name__)

def isAlternative(alt) -> bool:
    return isinstance(alt, str) or (isinstance(alt, list) and all(isinstance(n, str) for n in alt))

@dataclass
class GrammarConfig:
    start: str
    productions: dict[str, list]
    operators: str = OPERATORS
    identifier: str = IDENTIFIER
    inputs: list[str] = field(default_factory=list)

    def grammar(self) -> Grammar:
        return Grammar.fromDefinition(self.start, self.productions)

    @classmethod
    def fromdict(cls, data: dict) -> "GrammarConfig":
        if not isinstance(data, dict):
            raise GrammarError("grammar configuration must be a JSON object")
        missing = { "start", "productions" } - set(data)
        if missing:
            raise GrammarError(f"grammar configuration is missing {', '.join(sorted(missing))}")
        unknown = set(data) - { "start", "productions", "operators", "identifier", "inputs" }
        if unknown:
            raise GrammarError(f"unknown grammar configuration keys: {', '.join(sorted(unknown))}")
        for key in ("start", "operators", "identifier"):
            if key in data and not isinstance(data[key], str):
                raise GrammarError(f"'{key}' must be a string")
        if not isinstance(data["productions"], dict):
            raise GrammarError("'productions' must map non-terminals to lists of alternatives")
        for lhs, alternatives in data["productions"].items():
            if not isinstance(alternatives, list) or not all(isAlternative(a) for a in alternatives):
                raise GrammarError(f"alternatives of {lhs} must be a list of strings or lists of strings")
        inputs = data.get("inputs", [])
        if not isinstance(inputs, list) or not all(isinstance(s, str) for s in inputs):
            raise GrammarError("'inputs' must be a list of strings")
        return cls(**data)

    def todict(self):
        return { "start":       self.start,
                 "productions": self.productions,
                 "operators":   self.operators,
                 "identifier":  self.identifier,
                 "inputs":      self.inputs }

CANONICAL = GrammarConfig(
    start = "E",
    productions = { "E": [ "E+T", "T" ],
                    "T": [ "T*F", "F" ],
                    "F": [ "(E)", "i" ] },
    inputs = [ "abc+age*80", "(abc-80(*s5)" ],
)

def loadConfig(path) -> GrammarConfig:
    path = Path(path)
    log.debug("loading grammar configuration from %s", path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise GrammarError(f"{path}: invalid JSON: {e}") from e
    return GrammarConfig.fromdict(data)
