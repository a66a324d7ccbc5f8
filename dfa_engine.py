"""
DFA Engine — Immutable automaton model plus the simulation that walks it.

States and symbols are interned to indices in declaration order. The
transition function is a read-only numpy matrix [n_states, n_symbols] where
-1 marks an undefined pair; accepting membership is a parallel boolean mask.

Undefined lookups (including symbols outside the alphabet) reject the input
immediately. There is no silent skipping.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from batch_classifier import BatchClassifier

UNDEFINED = -1


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransitionRecord:
    """One traced move. target=None is the undefined-transition marker."""
    source: str
    symbol: str
    target: Optional[str]

    @property
    def undefined(self) -> bool:
        return self.target is None

    def to_dict(self) -> dict:
        return {"source": self.source, "symbol": self.symbol,
                "target": self.target}


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict for one input. trace is None unless tracing was requested."""
    input: object
    accepted: bool
    trace: Optional[tuple] = None
    final_state: Optional[str] = None    # None when the run hit an undefined pair
    consumed: int = 0


@dataclass(frozen=True, eq=False)
class Automaton:
    """States, alphabet, transition matrix, start index, accepting mask."""
    states: tuple
    alphabet: tuple
    table: np.ndarray
    start: int
    accepting: np.ndarray

    _state_index: dict = field(init=False, repr=False)
    _symbol_index: dict = field(init=False, repr=False)
    _rows: list = field(init=False, repr=False)

    def __post_init__(self):
        if not self.states:
            raise ValueError("states must not be empty")
        if not self.alphabet:
            raise ValueError("alphabet must not be empty")
        if len(set(self.states)) != len(self.states):
            raise ValueError("states must be unique")
        if len(set(self.alphabet)) != len(self.alphabet):
            raise ValueError("alphabet symbols must be unique")

        n_states, n_symbols = len(self.states), len(self.alphabet)
        table = np.array(self.table, dtype=np.int64)
        if table.shape != (n_states, n_symbols):
            raise ValueError(
                f"table shape {table.shape} != ({n_states}, {n_symbols})")
        if table.size and (table.min() < UNDEFINED or table.max() >= n_states):
            raise ValueError("table entries must be state indices or -1")
        accepting = np.array(self.accepting, dtype=bool)
        if accepting.shape != (n_states,):
            raise ValueError("accepting mask must have one flag per state")
        if not 0 <= self.start < n_states:
            raise ValueError("start must index a declared state")

        table.flags.writeable = False
        accepting.flags.writeable = False
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "alphabet", tuple(self.alphabet))
        object.__setattr__(self, "table", table)
        object.__setattr__(self, "accepting", accepting)
        object.__setattr__(self, "_state_index",
                           {s: i for i, s in enumerate(self.states)})
        object.__setattr__(self, "_symbol_index",
                           {a: j for j, a in enumerate(self.alphabet)})
        # Plain lists for the per-symbol hot path
        object.__setattr__(self, "_rows", table.tolist())

    @staticmethod
    def from_transitions(states, alphabet, transitions: dict, start: str,
                         accept) -> "Automaton":
        """Build from names. transitions maps (state, symbol) -> state."""
        state_index = {s: i for i, s in enumerate(states)}
        symbol_index = {a: j for j, a in enumerate(alphabet)}
        if start not in state_index:
            raise ValueError(f"unknown start state: {start}")

        table = np.full((len(states), len(alphabet)), UNDEFINED, dtype=np.int64)
        for (state, symbol), target in transitions.items():
            if state not in state_index or target not in state_index:
                raise ValueError(f"transition references unknown state: "
                                 f"({state}, {symbol}) -> {target}")
            if symbol not in symbol_index:
                raise ValueError(f"transition references unknown symbol: {symbol}")
            table[state_index[state], symbol_index[symbol]] = state_index[target]

        accepting = np.zeros(len(states), dtype=bool)
        for state in accept:
            if state not in state_index:
                raise ValueError(f"unknown accepting state: {state}")
            accepting[state_index[state]] = True

        return Automaton(
            states=tuple(states),
            alphabet=tuple(alphabet),
            table=table,
            start=state_index[start],
            accepting=accepting,
        )

    # -- Introspection --------------------------------------------------------

    @property
    def start_state(self) -> str:
        return self.states[self.start]

    @property
    def accept_states(self) -> frozenset:
        return frozenset(s for s, flag in zip(self.states, self.accepting) if flag)

    @property
    def transitions(self) -> dict:
        """Defined transitions as {(state, symbol): target}."""
        out = {}
        for i, row in enumerate(self._rows):
            for j, target in enumerate(row):
                if target != UNDEFINED:
                    out[(self.states[i], self.alphabet[j])] = self.states[target]
        return out

    @property
    def is_complete(self) -> bool:
        return bool(np.all(self.table != UNDEFINED))

    def missing_transitions(self) -> list[tuple[str, str]]:
        """(state, symbol) pairs with no target, in table order."""
        rows, cols = np.nonzero(self.table == UNDEFINED)
        return [(self.states[i], self.alphabet[j]) for i, j in zip(rows, cols)]

    def state_index(self, state: str) -> int:
        return self._state_index[state]

    def is_accepting(self, state: str) -> bool:
        return bool(self.accepting[self._state_index[state]])

    def lookup(self, state: int, symbol: str) -> int:
        """Target index for (state index, symbol), or -1."""
        j = self._symbol_index.get(symbol)
        if j is None:
            return UNDEFINED
        return self._rows[state][j]

    def to_dict(self) -> dict:
        return {
            "states": list(self.states),
            "alphabet": list(self.alphabet),
            "start": self.start_state,
            "accept": [s for s in self.states if s in self.accept_states],
            "transitions": [[s, a, t] for (s, a), t in self.transitions.items()],
        }


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

class Run:
    """Cursor for one input. Owns its state and (optional) trace log."""

    def __init__(self, automaton: Automaton, trace: bool = False):
        self.automaton = automaton
        self.state = automaton.start
        self.consumed = 0
        self.halted = False
        self.trace = [] if trace else None

    @property
    def current_state(self) -> Optional[str]:
        if self.halted:
            return None
        return self.automaton.states[self.state]

    @property
    def accepted(self) -> bool:
        return not self.halted and bool(self.automaton.accepting[self.state])

    def feed(self, symbol: str) -> bool:
        """Consume one symbol. Returns False once the run has died."""
        if self.halted:
            return False
        target = self.automaton.lookup(self.state, symbol)
        source = self.automaton.states[self.state]
        if target == UNDEFINED:
            self.halted = True
            if self.trace is not None:
                self.trace.append(TransitionRecord(source, symbol, None))
            return False
        if self.trace is not None:
            self.trace.append(
                TransitionRecord(source, symbol, self.automaton.states[target]))
        self.state = target
        self.consumed += 1
        return True

    def result(self, input) -> ClassificationResult:
        return ClassificationResult(
            input=input,
            accepted=self.accepted,
            trace=tuple(self.trace) if self.trace is not None else None,
            final_state=self.current_state,
            consumed=self.consumed,
        )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def tokenize(line: str, separator: str | None = None) -> list[str]:
    """Characters of line, or its non-empty separator-delimited pieces."""
    if separator is None:
        return list(line)
    return [tok for tok in line.split(separator) if tok]


class DFAEngine:
    """Read-only wrapper over an Automaton. Safe to share between runs."""

    def __init__(self, automaton: Automaton):
        self.automaton = automaton

    def describe(self) -> str:
        a = self.automaton
        accept = [s for s in a.states if s in a.accept_states]
        lines = [
            "DFA",
            f"States: {', '.join(a.states)}",
            f"Alphabet: {', '.join(a.alphabet)}",
            f"Start state: {a.start_state}",
            f"Accepting states: {', '.join(accept) if accept else '(none)'}",
            "Transitions:",
        ]
        for (state, symbol), target in a.transitions.items():
            lines.append(f"  {state} --{symbol}--> {target}")
        if not a.is_complete:
            lines.append(f"Undefined transitions: {len(a.missing_transitions())}")
        return "\n".join(lines)

    def step(self, state: str, symbol: str) -> Optional[str]:
        """Single lookup by name. None if the pair is undefined."""
        a = self.automaton
        if state not in a.states:
            return None
        target = a.lookup(a.state_index(state), symbol)
        if target == UNDEFINED:
            return None
        return a.states[target]

    def start_run(self, trace: bool = False) -> Run:
        return Run(self.automaton, trace=trace)

    def classify(self, symbols, trace: bool = False) -> ClassificationResult:
        if not isinstance(symbols, str):
            symbols = tuple(symbols)
        run = Run(self.automaton, trace=trace)
        for symbol in symbols:
            if not run.feed(symbol):
                break
        return run.result(symbols)

    def classify_line(self, line: str, trace: bool = False,
                      separator: str | None = None) -> ClassificationResult:
        """Classify a text line; the result keeps the line as its input."""
        run = Run(self.automaton, trace=trace)
        for symbol in tokenize(line, separator):
            if not run.feed(symbol):
                break
        return run.result(line)

    def run_batch(self, input_path, output_path, verbose: bool = False,
                  reporter=None, trace_logger=None, separator=None):
        classifier = BatchClassifier(
            self, reporter=reporter, trace_logger=trace_logger,
            separator=separator,
        )
        return classifier.run(input_path, output_path, verbose=verbose)


def build(config_path) -> DFAEngine:
    """Load a configuration file and wrap it in an engine."""
    from dfa_config import load_file
    return DFAEngine(load_file(config_path))
