"""
Batch Classifier — Runs every line of a corpus through a DFA engine and
writes the accepted lines, in input order, to an output file.

The sink is truncated before the first write. If reading or writing fails
part-way, the partial sink is removed so no half-written artifact survives.

Bytes that are not valid UTF-8 are carried through as surrogate escapes:
they never match an alphabet symbol, so such lines are simply rejected.
"""

import os
from dataclasses import dataclass

from dfa_errors import SinkUnavailable, SourceUnavailable
from trace_reporter import TraceReporter

ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


@dataclass
class Summary:
    """Line counts for one batch run."""
    total: int = 0
    accepted: int = 0
    rejected: int = 0

    def add(self, accepted: bool):
        self.total += 1
        if accepted:
            self.accepted += 1
        else:
            self.rejected += 1


def _strip_terminator(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


class BatchClassifier:
    """Drives many classifications against one shared engine."""

    def __init__(self, engine, reporter=None, trace_logger=None,
                 separator: str | None = None):
        self.engine = engine
        self.reporter = reporter
        self.trace_logger = trace_logger
        self.separator = separator

    def classify_lines(self, lines, verbose: bool = False):
        """Yield one ClassificationResult per line, in order.

        With verbose set and no reporter configured, traces go to stdout.
        """
        reporter = None
        if verbose:
            reporter = self.reporter if self.reporter is not None else TraceReporter()
        # Traces are only built when someone consumes them
        want_trace = reporter is not None or self.trace_logger is not None
        for raw in lines:
            line = _strip_terminator(raw)
            result = self.engine.classify_line(
                line, trace=want_trace, separator=self.separator)
            if reporter is not None:
                reporter.report(line, result)
            if self.trace_logger is not None:
                self.trace_logger.record_run(result)
            yield result

    def run(self, input_path, output_path, verbose: bool = False) -> Summary:
        """Classify input_path line by line; write accepted lines to output_path."""
        try:
            source = open(input_path, "r", encoding=ENCODING,
                          errors=ENCODING_ERRORS, newline="")
        except OSError as e:
            raise SourceUnavailable(input_path, e.strerror or str(e)) from e

        with source:
            try:
                sink = open(output_path, "w", encoding=ENCODING,
                            errors=ENCODING_ERRORS, newline="\n")
            except OSError as e:
                raise SinkUnavailable(output_path, e.strerror or str(e)) from e

            summary = Summary()
            with sink:
                try:
                    for result in self.classify_lines(source, verbose=verbose):
                        summary.add(result.accepted)
                        if result.accepted:
                            _write(sink, output_path, result.input)
                except OSError as e:
                    _discard(sink, output_path)
                    raise SourceUnavailable(input_path, str(e)) from e
                except SinkUnavailable:
                    _discard(sink, output_path)
                    raise
                try:
                    sink.flush()
                except OSError as e:
                    _discard(sink, output_path)
                    raise SinkUnavailable(output_path, e.strerror or str(e)) from e
        return summary


def _write(sink, path, line: str):
    try:
        sink.write(line + "\n")
    except OSError as e:
        raise SinkUnavailable(path, e.strerror or str(e)) from e


def _discard(sink, path):
    """Close and delete a partially written sink."""
    try:
        sink.close()
    except OSError:
        pass
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
