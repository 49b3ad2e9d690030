#!/usr/bin/env python3

import argparse
import logging
import sys
from .config import CANONICAL, loadConfig
from .grammar import GrammarError, GrammarPredictor
from .table import buildTable
from .parser import PredictiveRecognizer, tokenize
from .render import renderGrammar, renderSymbols, renderFirst, renderFollow, renderTable, renderTrace

log = logging.getLogger(__name__)

def argParser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pyll1", description="LL(1) grammar analysis and predictive recognition")
    p.add_argument("inputs", nargs="*", help="strings to recognize (default: the configuration's inputs)")
    p.add_argument("-c", "--config", help="JSON grammar configuration (default: the expression grammar)")
    p.add_argument("--strict", action="store_true", help="fail on table conflicts instead of keeping the first rule")
    p.add_argument("--no-eliminate", dest="eliminate", action="store_false", help="skip left-recursion elimination")
    p.add_argument("--raw", action="store_true", help="treat every input character as a terminal, without tokenizing")
    p.add_argument("-v", "--verbose", action="store_true", help="log analysis and recognizer steps")
    return p

def section(out, title, body):
    print(f"\n{title}:", file=out)
    print(body, file=out)

def run(args, out=None) -> int:
    out = out or sys.stdout
    config = loadConfig(args.config) if args.config else CANONICAL
    grammar = config.grammar()
    predictor = GrammarPredictor(grammar, eliminate=args.eliminate)
    table = buildTable(predictor, strict=args.strict)

    section(out, "grammar", renderGrammar(predictor.original))
    if args.eliminate:
        section(out, "grammar without left recursion", renderGrammar(predictor.grammar))
    section(out, "symbols", renderSymbols(predictor.grammar))
    section(out, "first sets", renderFirst(predictor.firstSet, predictor.grammar))
    section(out, "follow sets", renderFollow(predictor.followSet, predictor.grammar))
    section(out, "parse table", renderTable(table))
    for conflict in table.conflicts:
        print(f"conflict: {conflict!r}", file=out)

    recognizer = PredictiveRecognizer(table)
    for text in args.inputs or config.inputs:
        word = text if args.raw else tokenize(text, config.operators, config.identifier)
        result = recognizer.recognize(word)
        section(out, f"analysis of {text!r}", renderTrace(result))
    return 0

def main(argv=None) -> int:
    args = argParser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return run(args)
    except (GrammarError, OSError) as e:
        log.debug("analysis aborted", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
