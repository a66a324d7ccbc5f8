"""
Command-line caller for the DFA engine.

    python dfa_runner.py examples/parity/parity.dfa --describe
    python dfa_runner.py examples/parity/parity.dfa \
        --input examples/parity/strings.txt --output accepted.txt --verbose
"""

import argparse
import sys

from dfa_engine import build
from dfa_errors import DFAError
from trace_logger import TraceLogger
from trace_reporter import TraceReporter, format_trace


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Classify lines of a text file with a DFA.")
    parser.add_argument("config", help="Automaton definition (.dfa text or .json)")
    parser.add_argument("-i", "--input", help="Corpus, one candidate string per line")
    parser.add_argument("-o", "--output", help="File receiving the accepted lines")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print every transition taken")
    parser.add_argument("--describe", action="store_true",
                        help="Print the automaton before classifying")
    parser.add_argument("--trace-log", metavar="DIR",
                        help="Also write a JSONL trace log into DIR")
    parser.add_argument("--separator", default=None,
                        help="Split lines into symbols on SEP instead of per character")
    parser.add_argument("--check", nargs="+", metavar="WORD", default=[],
                        help="Classify the given words and print a traced verdict")
    args = parser.parse_args(argv)
    if bool(args.input) != bool(args.output):
        parser.error("--input and --output must be given together")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        engine = build(args.config)
    except DFAError as e:
        print(f"Error loading {args.config}: {e}", file=sys.stderr)
        return 1

    if args.describe:
        print(engine.describe())
        print()

    trace_logger = None
    if args.trace_log:
        trace_logger = TraceLogger(log_dir=args.trace_log)
        trace_logger.record_automaton(engine.automaton)

    for word in args.check:
        result = engine.classify_line(word, trace=True, separator=args.separator)
        print(format_trace(word, result))
        if trace_logger is not None:
            trace_logger.record_run(result)

    if args.input:
        try:
            summary = engine.run_batch(
                args.input, args.output,
                verbose=args.verbose,
                reporter=TraceReporter(),
                trace_logger=trace_logger,
                separator=args.separator,
            )
        except DFAError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Processed {summary.total} lines: "
              f"{summary.accepted} accepted, {summary.rejected} rejected")
        print(f"Accepted lines written to: {args.output}")

    if trace_logger is not None:
        path = trace_logger.save()
        print(f"Trace log saved to: {path} ({len(trace_logger.steps)} steps)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
