"""
dfa_errors — Exception hierarchy for loading and running automata.

ConfigError kinds are raised while building an Automaton; BatchIOError kinds
while classifying a corpus. A rejected input is never an error.
"""


class DFAError(Exception):
    """Root of every error raised by the DFA engine."""


# ── Configuration ───────────────────────────────────────────────────────────

class ConfigError(DFAError):
    """Invalid automaton definition. The engine is never built from one."""

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}: {self.message}"


class MalformedConfig(ConfigError):
    """Syntax problem: unknown key, bad triple, missing section, duplicates."""


class UnknownStartState(ConfigError):
    """Start state is not among the declared states."""


class UnknownAcceptingState(ConfigError):
    """An accepting state is not among the declared states."""


class UnknownSymbolOrState(ConfigError):
    """A transition names an undeclared state or symbol."""


class ConflictingTransition(ConfigError):
    """Two transitions share a (state, symbol) pair with different targets."""


# ── Batch I/O ───────────────────────────────────────────────────────────────

class BatchIOError(DFAError):
    """File-level failure. Always fatal for the run."""

    def __init__(self, path, reason: str = ""):
        self.path = str(path)
        self.reason = reason
        super().__init__(str(self))

    def __str__(self) -> str:
        label = type(self).__name__
        if self.reason:
            return f"{label}: {self.path} ({self.reason})"
        return f"{label}: {self.path}"


class SourceUnavailable(BatchIOError):
    """Input (or configuration) file is missing or unreadable."""


class SinkUnavailable(BatchIOError):
    """Output file cannot be created or written."""
