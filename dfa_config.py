"""
dfa_config — Builds a validated Automaton from a textual definition.

Text format (one declaration per line, '#' starts a comment):

    states: Even, Odd
    alphabet: 0, 1
    start: Even
    accept: Even
    transitions:
    Even 0 Even
    Even 1 -> Odd
    Odd, 0, Odd
    Odd 1 Even

A file ending in .json may instead hold the same fields as a mapping, with
transitions given as [[src, sym, dst], ...] or {src: {sym: dst}}.
"""

import json
import re
from pathlib import Path

from dfa_engine import Automaton
from dfa_errors import (
    ConflictingTransition,
    MalformedConfig,
    SourceUnavailable,
    UnknownAcceptingState,
    UnknownStartState,
    UnknownSymbolOrState,
)

KEY_ALIASES = {
    "states": "states",
    "alphabet": "alphabet",
    "symbols": "alphabet",
    "start": "start",
    "accept": "accept",
    "accepting": "accept",
    "final": "accept",
    "transitions": "transitions",
}
REQUIRED_KEYS = ("states", "alphabet", "start", "accept")

_HEADER_RE = re.compile(r"^\s*([A-Za-z_]+)\s*:(.*)$")
_SPLIT_RE = re.compile(r"[,\s]+")
_RESERVED_RE = re.compile(r"[,\s#:]")


class _Declarations:
    """Raw, unvalidated contents of a definition."""

    def __init__(self):
        self.fields: dict[str, tuple[list[str], int | None]] = {}
        self.transitions: list[tuple[str, str, str, int | None]] = []


def _split_values(text: str) -> list[str]:
    return [v for v in _SPLIT_RE.split(text.strip()) if v]


def _parse_triple(text: str, lineno: int | None) -> tuple[str, str, str]:
    tokens = _split_values(text)
    if len(tokens) == 4 and tokens[2] == "->":
        del tokens[2]
    if len(tokens) != 3:
        raise MalformedConfig(
            f"expected 'source symbol target', got {text.strip()!r}", lineno)
    return tokens[0], tokens[1], tokens[2]


def _parse_text(source: str) -> _Declarations:
    decl = _Declarations()
    in_transitions = False

    for lineno, raw in enumerate(source.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        m = _HEADER_RE.match(line)
        key = KEY_ALIASES.get(m.group(1).lower()) if m else None
        if m and key is None and not in_transitions:
            raise MalformedConfig(f"unknown key {m.group(1)!r}", lineno)

        if key is not None:
            if key in decl.fields:
                raise MalformedConfig(f"{key!r} declared more than once", lineno)
            rest = m.group(2)
            if key == "transitions":
                if rest.strip():
                    raise MalformedConfig(
                        "transition triples go on the lines after 'transitions:'",
                        lineno)
                decl.fields[key] = ([], lineno)
                in_transitions = True
            else:
                decl.fields[key] = (_split_values(rest), lineno)
                in_transitions = False
            continue

        if not in_transitions:
            raise MalformedConfig(f"unexpected line {line!r}", lineno)
        src, sym, dst = _parse_triple(line, lineno)
        decl.transitions.append((src, sym, dst, lineno))

    return decl


def _as_names(value, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise MalformedConfig(f"{key!r} must be a list")
    return [str(v) for v in value]


def _parse_mapping(data: dict) -> _Declarations:
    if not isinstance(data, dict):
        raise MalformedConfig("definition must be a JSON object")
    decl = _Declarations()
    for raw_key, value in data.items():
        key = KEY_ALIASES.get(str(raw_key).lower())
        if key is None:
            raise MalformedConfig(f"unknown key {raw_key!r}")
        if key in decl.fields:
            raise MalformedConfig(f"{key!r} declared more than once")
        if key == "transitions":
            decl.fields[key] = ([], None)
            if isinstance(value, dict):
                for src, row in value.items():
                    if not isinstance(row, dict):
                        raise MalformedConfig(
                            f"transitions for {src!r} must be a mapping")
                    for sym, dst in row.items():
                        decl.transitions.append((str(src), str(sym), str(dst), None))
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if not isinstance(item, (list, tuple)) or len(item) != 3:
                        raise MalformedConfig(
                            f"expected [source, symbol, target], got {item!r}")
                    src, sym, dst = (str(v) for v in item)
                    decl.transitions.append((src, sym, dst, None))
            else:
                raise MalformedConfig("'transitions' must be a list or mapping")
        else:
            decl.fields[key] = (_as_names(value, key), None)
    return decl


def _check_unique(names: list[str], key: str, lineno: int | None):
    seen = set()
    for name in names:
        if name in seen:
            raise MalformedConfig(f"{key} entry {name!r} declared twice", lineno)
        seen.add(name)


def _validate(decl: _Declarations) -> Automaton:
    """Apply the checks in order; the first failure is raised."""
    for key in REQUIRED_KEYS:
        if key not in decl.fields:
            raise MalformedConfig(f"missing '{key}:' declaration")

    states, states_line = decl.fields["states"]
    alphabet, alphabet_line = decl.fields["alphabet"]
    start, start_line = decl.fields["start"]
    accept, accept_line = decl.fields["accept"]

    if not states:
        raise MalformedConfig("no states declared", states_line)
    if not alphabet:
        raise MalformedConfig("no alphabet symbols declared", alphabet_line)
    _check_unique(states, "state", states_line)
    _check_unique(alphabet, "symbol", alphabet_line)
    if len(start) != 1:
        raise MalformedConfig("exactly one start state is required", start_line)

    state_set = set(states)
    symbol_set = set(alphabet)

    if start[0] not in state_set:
        raise UnknownStartState(f"start state {start[0]!r} is not declared",
                                start_line)
    for state in accept:
        if state not in state_set:
            raise UnknownAcceptingState(
                f"accepting state {state!r} is not declared", accept_line)

    table: dict[tuple[str, str], tuple[str, int | None]] = {}
    for src, sym, dst, lineno in decl.transitions:
        for state in (src, dst):
            if state not in state_set:
                raise UnknownSymbolOrState(
                    f"transition uses undeclared state {state!r}", lineno)
        if sym not in symbol_set:
            raise UnknownSymbolOrState(
                f"transition uses undeclared symbol {sym!r}", lineno)

        previous = table.get((src, sym))
        if previous is not None and previous[0] != dst:
            where = f" (first declared on line {previous[1]})" if previous[1] else ""
            raise ConflictingTransition(
                f"({src}, {sym}) goes to both {previous[0]!r} and {dst!r}{where}",
                lineno)
        if previous is None:
            table[(src, sym)] = (dst, lineno)

    return Automaton.from_transitions(
        states=states,
        alphabet=alphabet,
        transitions={pair: dst for pair, (dst, _) in table.items()},
        start=start[0],
        accept=accept,
    )


# ── Public API ──────────────────────────────────────────────────────────────

def load(source: str) -> Automaton:
    """Parse the text format into a validated Automaton."""
    return _validate(_parse_text(source))


def load_dict(data: dict) -> Automaton:
    """Build a validated Automaton from a JSON-shaped mapping."""
    return _validate(_parse_mapping(data))


def load_file(path) -> Automaton:
    """Read one definition file. .json selects the mapping form."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceUnavailable(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise SourceUnavailable(path, str(e)) from e

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedConfig(e.msg, e.lineno) from e
        return load_dict(data)
    return load(text)


def dumps(automaton: Automaton) -> str:
    """Render an Automaton in the text format accepted by load()."""
    for name in automaton.states + automaton.alphabet:
        if not name or _RESERVED_RE.search(name) or name == "->":
            raise ValueError(f"{name!r} cannot be written in the text format")

    accept = [s for s in automaton.states if s in automaton.accept_states]
    lines = [
        f"states: {', '.join(automaton.states)}",
        f"alphabet: {', '.join(automaton.alphabet)}",
        f"start: {automaton.start_state}",
        f"accept: {', '.join(accept)}",
        "transitions:",
    ]
    for (state, symbol), target in automaton.transitions.items():
        lines.append(f"{state} {symbol} {target}")
    return "\n".join(lines) + "\n"
