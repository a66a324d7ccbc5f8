"""
trace_loader.py — Loads JSONL trace logs into structured Python objects
for the Dash replay app.
"""

import json


class TraceData:
    """Parsed trace log — provides step-by-step and per-run access for the UI."""

    def __init__(self, rows: list[dict]):
        self.automaton = None
        self.steps = []
        for row in rows:
            if row.get("phase") == "automaton":
                self.automaton = row.get("automaton")
            else:
                self.steps.append(row)
        self.num_steps = len(self.steps)

    # -- Access helpers -------------------------------------------------------

    def get_step(self, idx: int) -> dict:
        """Get a step by index (0-based)."""
        if 0 <= idx < self.num_steps:
            return self.steps[idx]
        return {}

    def get_run_ids(self) -> list[int]:
        """Run numbers present in the log, in order."""
        seen = []
        for step in self.steps:
            run = step.get("run", 0)
            if run not in seen:
                seen.append(run)
        return seen

    def get_run_steps(self, run: int) -> list[dict]:
        return [s for s in self.steps if s.get("run", 0) == run]

    def get_run_input(self, run: int) -> str:
        steps = self.get_run_steps(run)
        return steps[0].get("input", "") if steps else ""

    def get_verdict(self, run: int) -> bool | None:
        """True/False for accept/reject, None if the run has no verdict row."""
        for step in self.get_run_steps(run):
            if step.get("phase") == "verdict":
                return bool(step.get("accepted"))
        return None

    def get_dfa_path(self, run: int) -> list[dict]:
        """State path of one run: list of {step, state, symbol, transition}."""
        path = []
        for step in self.get_run_steps(run):
            if step.get("phase") == "verdict":
                continue
            path.append({
                "step": step.get("step", 0),
                "state": step.get("dfa_state"),
                "symbol": step.get("dfa_symbol"),
                "transition": step.get("dfa_transition"),
            })
        return path

    def get_state_series(self, run: int) -> list[str | None]:
        """States occupied after each consumed symbol, starting with init."""
        series = []
        for step in self.get_run_steps(run):
            phase = step.get("phase")
            if phase in ("init", "transition"):
                series.append(step.get("dfa_state"))
            elif phase == "undefined":
                series.append(None)
        return series

    def summary(self) -> dict:
        """Counts over all runs with a verdict."""
        accepted = rejected = 0
        for run in self.get_run_ids():
            verdict = self.get_verdict(run)
            if verdict is True:
                accepted += 1
            elif verdict is False:
                rejected += 1
        return {"total": accepted + rejected, "accepted": accepted,
                "rejected": rejected}

    # -- Narrative -----------------------------------------------------------

    def generate_thought(self, step_idx: int) -> str:
        """Generate a human-readable narrative for a given step."""
        step = self.get_step(step_idx)
        if not step:
            return "No data for this step."

        phase = step.get("phase", "unknown")
        state = step.get("dfa_state")
        symbol = step.get("dfa_symbol")
        lines = [
            f"Step {step.get('step', '?')} — run {step.get('run', '?')} "
            f"on {step.get('input', '')!r}",
            "",
        ]

        if phase == "init":
            lines.append("PHASE: Start")
            lines.append(f"Starting state: {state}")
        elif phase == "transition":
            lines.append("PHASE: Transition")
            lines.append(f"INPUT: Symbol '{symbol}'")
            lines.append(f"TRANSITION: {step.get('dfa_transition')}")
            lines.append(f"RESULT: Current state = {state}")
        elif phase == "undefined":
            lines.append("PHASE: Undefined transition")
            lines.append(f"INPUT: Symbol '{symbol}'")
            lines.append(f"No transition from {state} on '{symbol}'; run stops.")
        elif phase == "verdict":
            verdict = "ACCEPTED" if step.get("accepted") else "REJECTED"
            lines.append(f"PHASE: Verdict")
            if state is not None:
                lines.append(f"Final state: {state}")
            lines.append(f"RESULT: {verdict}")
        else:
            lines.append(f"PHASE: {phase}")

        return "\n".join(lines)


def load_trace(path: str) -> TraceData:
    """Load a JSONL trace log file."""
    rows = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                rows.append(json.loads(line))
    return TraceData(rows)
