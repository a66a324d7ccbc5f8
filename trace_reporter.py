"""
Trace Reporter — Prints the transitions taken for one input, then its verdict.

Purely observational; it only reads ClassificationResult objects.
"""

import sys

UNDEFINED_LABEL = "(undefined transition)"


def format_record(record) -> str:
    target = UNDEFINED_LABEL if record.target is None else record.target
    return f"{record.source} --{record.symbol}--> {target}"


def format_trace(line: str, result) -> str:
    """Render one traced classification as text."""
    lines = [f"Input: {line!r}"]
    if not result.trace:
        lines.append("  (no transitions)")
    else:
        for record in result.trace:
            lines.append("  " + format_record(record))
    verdict = "ACCEPTED" if result.accepted else "REJECTED"
    lines.append(f"  Result: {verdict}")
    return "\n".join(lines)


class TraceReporter:
    """Writes formatted traces to a text stream (stdout by default)."""

    def __init__(self, stream=None):
        self.stream = stream
        self.reported = 0

    def report(self, line: str, result):
        out = self.stream if self.stream is not None else sys.stdout
        # Undecodable input bytes arrive as lone surrogates; show them escaped
        text = format_trace(line, result).encode("utf-8", "backslashreplace")
        print(text.decode("utf-8"), file=out)
        self.reported += 1
