"""
TraceLogger — Captures every classification as a sequence of steps and
writes them to a single JSONL file for later replay.

Row kinds (the "phase" field):
  automaton   one header row with the definition being run
  init        run starts in the start state
  transition  one defined move
  undefined   the run hit an undefined (state, symbol) pair
  verdict     final accept/reject for the input
"""

import json
import os
from dataclasses import dataclass, asdict
from typing import Optional

LOG_NAME = "trace_log.jsonl"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class StepLog:
    """One logged step of one run."""
    step: int
    run: int
    phase: str
    input: str = ""
    dfa_source: Optional[str] = None
    dfa_state: Optional[str] = None
    dfa_symbol: Optional[str] = None
    dfa_transition: Optional[str] = None
    accepted: Optional[bool] = None


# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------

class TraceLogger:
    """Collects run steps in memory and writes them to JSONL."""

    def __init__(self, log_dir: str = "logs"):
        self.log_dir = log_dir
        self.log_path = os.path.join(log_dir, LOG_NAME)
        self.automaton: dict | None = None
        self.steps: list[StepLog] = []
        self._step_counter = 0
        self._run_counter = 0

    # -- Recording -----------------------------------------------------------

    def record_automaton(self, automaton):
        """Remember the definition so the log can be replayed on its own."""
        self.automaton = automaton.to_dict()

    def _log(self, **kwargs) -> StepLog:
        step = StepLog(step=self._step_counter, run=self._run_counter, **kwargs)
        self.steps.append(step)
        self._step_counter += 1
        return step

    def record_run(self, result, start_state: str | None = None) -> list[StepLog]:
        """Log a traced ClassificationResult. Returns the steps added."""
        if result.trace is None:
            raise ValueError("result has no trace; classify with trace=True")

        text = result.input if isinstance(result.input, str) else " ".join(result.input)
        if start_state is None:
            if result.trace:
                start_state = result.trace[0].source
            elif self.automaton is not None:
                start_state = self.automaton["start"]
            else:
                start_state = result.final_state

        added = [self._log(phase="init", input=text, dfa_state=start_state)]
        for record in result.trace:
            if record.target is None:
                added.append(self._log(
                    phase="undefined",
                    input=text,
                    dfa_source=record.source,
                    dfa_state=record.source,
                    dfa_symbol=record.symbol,
                    dfa_transition="UNDEFINED",
                ))
            else:
                added.append(self._log(
                    phase="transition",
                    input=text,
                    dfa_source=record.source,
                    dfa_state=record.target,
                    dfa_symbol=record.symbol,
                    dfa_transition=f"({record.source}, {record.symbol}) → {record.target}",
                ))
        added.append(self._log(
            phase="verdict",
            input=text,
            dfa_state=result.final_state,
            accepted=result.accepted,
        ))
        self._run_counter += 1
        return added

    # -- Serialization -------------------------------------------------------

    def save(self) -> str:
        """Write the header row and all steps to the JSONL file."""
        os.makedirs(self.log_dir, exist_ok=True)
        with open(self.log_path, "w", encoding="utf-8") as f:
            if self.automaton is not None:
                header = {"phase": "automaton", "automaton": self.automaton}
                f.write(json.dumps(header, separators=(",", ":")) + "\n")
            for step in self.steps:
                line = json.dumps(asdict(step), separators=(",", ":"))
                f.write(line + "\n")
        return self.log_path

    def load(self, path: str | None = None) -> list[dict]:
        """Load a JSONL log file and return list of row dicts."""
        p = path or self.log_path
        rows = []
        with open(p, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    rows.append(json.loads(line))
        return rows
