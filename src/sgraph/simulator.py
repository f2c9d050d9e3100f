from typing import Dict, Iterable, Iterator, List, Mapping, Optional
import logging

from .errors import CombinationalLoopError, StallTimeout, Unforceable, Unreadable
from .rtl_model import Design, SignalDef, SignalKind
from .simulation import SimulationControl

logger = logging.getLogger(__name__)

PS_PER_NS = 1000


def _to_ps(duration: float) -> int:
    return int(round(duration * PS_PER_NS))


class _ValueView(Mapping[str, int]):
    """Read-only view of the simulator's current values by local name."""

    def __init__(self, sim: "CycleSimulator"):
        self._sim = sim

    def __getitem__(self, name: str) -> int:
        return self._sim._value(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sim.design.signals)

    def __len__(self) -> int:
        return len(self._sim.design.signals)


class CycleSimulator(SimulationControl):
    """
    Cycle-based simulator for ``Design`` descriptions.

    Time is kept in integer picoseconds. A clock with period P rises at
    P/2 + k*P. On a rising edge every register of that clock computes its
    next state from the pre-edge values, then all of them are committed
    together and the combinational wires are settled again.

    Forcing a register deposits the value: it holds until the register's
    next clock edge. Forcing an input, wire or clock overrides it until
    ``release``.

    Args:
        design: The circuit to simulate
        max_comb_loops: Delta iterations allowed for wires to settle
    """

    def __init__(self, design: Design, max_comb_loops: int = 30):
        design.validate()
        self.design = design
        self.max_comb_loops = max_comb_loops
        self._view = _ValueView(self)
        self._time = 0
        self._state: Dict[str, int] = {}  # inputs and registers
        self._wires: Dict[str, int] = {}
        self._forces: Dict[str, int] = {}
        self._clocks = design.of_kind(SignalKind.CLOCK)
        self._registers = design.of_kind(SignalKind.REGISTER)
        self._wire_defs = design.of_kind(SignalKind.WIRE)
        self.restart()

    @property
    def time(self) -> float:
        """Current simulation time (ns)."""
        return self._time / PS_PER_NS

    def restart(self) -> None:
        self._time = 0
        self._forces.clear()
        self._state = {sig.name: sig.init & sig.mask for sig in self.design
                       if sig.kind in (SignalKind.INPUT, SignalKind.REGISTER)}
        self._wires = {sig.name: 0 for sig in self._wire_defs}
        self._settle()

    def list_signals(self, scope: Optional[str] = None) -> List[str]:
        paths = [self.design.path(name) for name in self.design.signals]
        if scope:
            paths = [p for p in paths if p.startswith(scope + ".")]
        return paths

    def read(self, signal: str) -> str:
        sig = self._lookup(signal)
        if sig is None or not sig.readable:
            raise Unreadable(signal)
        return format(self._value(sig.name), f"0{sig.width}b")

    def force(self, signal: str, value: str) -> None:
        sig = self._lookup(signal)
        if sig is None or not sig.forceable:
            raise Unforceable(signal)
        if len(value) != sig.width or any(bit not in "01" for bit in value):
            raise Unforceable(signal, f"cannot drive {value!r} onto {sig.width} bits")
        if sig.kind == SignalKind.REGISTER:
            self._state[sig.name] = int(value, 2)
        else:
            self._forces[sig.name] = int(value, 2)
        self._settle()

    def release(self, signal: str) -> None:
        sig = self._lookup(signal)
        if sig is not None and self._forces.pop(sig.name, None) is not None:
            self._settle()

    def advance_time(self, duration: float) -> None:
        self._run_until(self._time + _to_ps(duration))

    def advance_to_next_edge(self, clock: str, timeout: float) -> None:
        sig = self._lookup(clock)
        edge = self._next_rise(sig) if sig is not None else None
        limit = self._time + _to_ps(timeout)
        if edge is None or edge > limit:
            self._run_until(limit)
            raise StallTimeout(clock, timeout)
        self._run_until(edge)

    def _lookup(self, signal: str) -> Optional[SignalDef]:
        local = self.design.local(signal)
        return self.design.signals[local] if local is not None else None

    def _value(self, name: str) -> int:
        if name in self._forces:
            return self._forces[name]
        sig = self.design.signals[name]
        if sig.kind == SignalKind.CLOCK:
            return self._clock_value(sig, self._time)
        if sig.kind == SignalKind.WIRE:
            return self._wires[name]
        return self._state[name]

    def _clock_value(self, clk: SignalDef, t: int) -> int:
        if not clk.running:
            return 0
        period = _to_ps(clk.period)
        return 1 if (t % period) >= period // 2 else 0

    def _next_rise(self, clk: SignalDef) -> Optional[int]:
        """Time of the first rising edge of ``clk`` strictly after now."""
        if not clk.running or clk.name in self._forces:
            return None
        period = _to_ps(clk.period)
        half = period // 2
        if self._time < half:
            return half
        return half + ((self._time - half) // period + 1) * period

    def _run_until(self, target: int) -> None:
        while True:
            upcoming = [(self._next_rise(clk), clk) for clk in self._clocks]
            upcoming = [(t, clk) for t, clk in upcoming if t is not None and t <= target]
            if not upcoming:
                break
            edge = min(t for t, _ in upcoming)
            self._time = edge
            self._fire({clk.name for t, clk in upcoming if t == edge})
        self._time = target

    def _fire(self, clocks: Iterable[str]) -> None:
        """Update every register clocked by ``clocks`` as one non-blocking step."""
        clocks = set(clocks)
        updates = {}
        for reg in self._registers:
            if reg.clock not in clocks:
                continue
            if reg.reset is not None and self._value(reg.reset) == reg.reset_active:
                updates[reg.name] = reg.reset_value & reg.mask
            else:
                updates[reg.name] = reg.next_state(self._view) & reg.mask
        self._state.update(updates)
        self._settle()

    def _settle(self) -> None:
        """Recompute wires until no value changes (delta cycles)."""
        for _ in range(self.max_comb_loops):
            changed = False
            for wire in self._wire_defs:
                if wire.name in self._forces:
                    continue
                value = wire.expr(self._view) & wire.mask
                if self._wires[wire.name] != value:
                    self._wires[wire.name] = value
                    changed = True
            if not changed:
                return
        raise CombinationalLoopError(
            f"{self.design.name}: wires did not converge within {self.max_comb_loops} delta cycles")
