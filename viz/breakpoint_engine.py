"""
Breakpoint Engine — Conditional breakpoints for trace replay.

Define conditions (entered state X, read symbol Y, undefined transition,
rejected input) and the engine scans the log to find steps where they fire.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


class ConditionType(str, Enum):
    """Supported breakpoint condition types."""
    STATE_ENTERED = "state_entered"            # dfa_state == target (init/transition)
    STATE_CHANGED = "state_changed"            # transition to a different state
    SYMBOL_READ = "symbol_read"                # dfa_symbol == target
    UNDEFINED_TRANSITION = "undefined_transition"
    REJECTED = "rejected"                      # verdict step with accepted=False


@dataclass
class Breakpoint:
    """A single breakpoint condition."""
    id: str
    condition: ConditionType
    target: Optional[str] = None  # state or symbol name; None = any
    enabled: bool = True

    def to_dict(self) -> dict:
        d = asdict(self)
        d["condition"] = self.condition.value
        return d

    @staticmethod
    def from_dict(d: dict) -> "Breakpoint":
        return Breakpoint(
            id=d["id"],
            condition=ConditionType(d["condition"]),
            target=d.get("target"),
            enabled=d.get("enabled", True),
        )


@dataclass
class BreakpointHit:
    """Records a breakpoint firing at a specific step."""
    breakpoint_id: str
    step: int
    run: int
    message: str


class BreakpointEngine:
    """Evaluates breakpoints against trace steps."""

    def __init__(self):
        self.breakpoints: dict[str, Breakpoint] = {}
        self._next_id = 0

    def add_breakpoint(
        self,
        condition: ConditionType,
        target: str | None = None,
        bp_id: str | None = None,
    ) -> Breakpoint:
        """Add a new breakpoint. Returns the created Breakpoint."""
        if bp_id is None:
            bp_id = f"bp_{self._next_id}"
            self._next_id += 1
        bp = Breakpoint(id=bp_id, condition=condition, target=target)
        self.breakpoints[bp_id] = bp
        return bp

    def remove_breakpoint(self, bp_id: str) -> bool:
        """Remove a breakpoint by ID. Returns True if removed."""
        if bp_id in self.breakpoints:
            del self.breakpoints[bp_id]
            return True
        return False

    def toggle_breakpoint(self, bp_id: str) -> bool:
        """Toggle a breakpoint's enabled state. Returns new state."""
        if bp_id in self.breakpoints:
            self.breakpoints[bp_id].enabled = not self.breakpoints[bp_id].enabled
            return self.breakpoints[bp_id].enabled
        return False

    def clear_all(self):
        """Remove all breakpoints."""
        self.breakpoints.clear()
        self._next_id = 0

    def evaluate_step(
        self, step: dict, prev_step: dict | None = None
    ) -> list[BreakpointHit]:
        """Check all enabled breakpoints against a single step."""
        hits = []
        for bp in self.breakpoints.values():
            if not bp.enabled:
                continue
            hit = self._check_breakpoint(bp, step, prev_step)
            if hit is not None:
                hits.append(hit)
        return hits

    def _check_breakpoint(
        self, bp: Breakpoint, step: dict, prev_step: dict | None
    ) -> BreakpointHit | None:
        phase = step.get("phase")
        state = step.get("dfa_state")
        symbol = step.get("dfa_symbol")
        message = None

        if bp.condition == ConditionType.STATE_ENTERED:
            if phase in ("init", "transition") and state is not None \
                    and (bp.target is None or state == bp.target):
                message = f"Entered state {state}"

        elif bp.condition == ConditionType.STATE_CHANGED:
            if (phase == "transition" and prev_step is not None
                    and prev_step.get("run") == step.get("run")):
                prev_state = prev_step.get("dfa_state")
                if prev_state and state and prev_state != state:
                    message = f"State changed: {prev_state} → {state}"

        elif bp.condition == ConditionType.SYMBOL_READ:
            if phase in ("transition", "undefined") and symbol is not None \
                    and (bp.target is None or symbol == bp.target):
                message = f"Read symbol '{symbol}' in state {state}"

        elif bp.condition == ConditionType.UNDEFINED_TRANSITION:
            if phase == "undefined":
                message = f"No transition from {state} on '{symbol}'"

        elif bp.condition == ConditionType.REJECTED:
            if phase == "verdict" and not step.get("accepted"):
                message = f"Rejected {step.get('input', '')!r}"

        if message is None:
            return None
        return BreakpointHit(
            breakpoint_id=bp.id,
            step=step.get("step", 0),
            run=step.get("run", 0),
            message=message,
        )

    def find_next_breakpoint(
        self, steps: list[dict], from_step: int = 0
    ) -> BreakpointHit | None:
        """Scan forward from from_step to find the next triggered breakpoint."""
        for i in range(from_step, len(steps)):
            prev = steps[i - 1] if i > 0 else None
            hits = self.evaluate_step(steps[i], prev)
            if hits:
                return hits[0]
        return None

    def find_all_breakpoints(self, steps: list[dict]) -> list[BreakpointHit]:
        """Scan all steps and return all breakpoint hits."""
        all_hits = []
        for i, step in enumerate(steps):
            prev = steps[i - 1] if i > 0 else None
            all_hits.extend(self.evaluate_step(step, prev))
        return all_hits

    def get_breakpoint_summary(self) -> list[dict]:
        """Get a summary of all breakpoints for display."""
        return [bp.to_dict() for bp in self.breakpoints.values()]
