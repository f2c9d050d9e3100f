from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Mapping, Optional

# Next-state and combinational functions receive a read-only view of the
# design's current values, indexed by local signal name.
Expression = Callable[[Mapping[str, int]], int]


class SignalKind(Enum):
    CLOCK = "clock"
    INPUT = "input"
    REGISTER = "register"
    WIRE = "wire"


@dataclass
class SignalDef:
    """A signal of a behavioral design."""
    name: str
    kind: SignalKind
    width: int = 1
    init: int = 0
    period: Optional[float] = None  # clocks only (ns)
    running: bool = True  # clocks only
    clock: Optional[str] = None  # registers only
    next_state: Optional[Expression] = None  # registers only
    expr: Optional[Expression] = None  # wires only
    reset: Optional[str] = None  # registers only, synchronous
    reset_active: int = 1
    reset_value: int = 0
    readable: bool = True
    forceable: bool = True

    def __post_init__(self):
        """Validate the signal definition."""
        if self.width < 1:
            raise ValueError(f"{self.name}: width must be at least 1")
        if self.kind == SignalKind.CLOCK and (self.period is None or self.period <= 0):
            raise ValueError(f"{self.name}: clock period must be positive")
        if self.kind == SignalKind.REGISTER and self.clock is None:
            raise ValueError(f"{self.name}: register needs a clock")
        if self.kind == SignalKind.WIRE and self.expr is None:
            raise ValueError(f"{self.name}: wire needs an expression")

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1


class Design:
    """
    A synchronous circuit described with Python callables.

    Signals are declared by local name; the simulator exposes them under
    ``<design name>.<local name>``. Registers sample their next state on the
    rising edge of their clock, wires are recomputed until they settle.

    Example:
        d = Design("tb")
        d.clock("clk", period=10.0)
        d.input("rst")
        d.register("count", width=4, clock="clk", reset="rst",
                   next_state=lambda s: s["count"] + 1)
    """

    def __init__(self, name: str):
        self.name = name
        self.signals: Dict[str, SignalDef] = {}

    def _add(self, sig: SignalDef) -> SignalDef:
        if sig.name in self.signals:
            raise ValueError(f"Signal {sig.name} declared twice in {self.name}")
        self.signals[sig.name] = sig
        return sig

    def clock(self, name: str, period: float, running: bool = True) -> SignalDef:
        """Declare a free-running clock, low for the first half period."""
        return self._add(SignalDef(name, SignalKind.CLOCK, period=period, running=running))

    def input(self, name: str, width: int = 1, value: int = 0, **flags) -> SignalDef:
        """Declare a primary input held at ``value`` unless forced."""
        return self._add(SignalDef(name, SignalKind.INPUT, width=width, init=value, **flags))

    def register(self,
                 name: str,
                 width: int = 1,
                 clock: str = "clk",
                 next_state: Optional[Expression] = None,
                 reset: Optional[str] = None,
                 reset_active: int = 1,
                 reset_value: int = 0,
                 init: int = 0,
                 **flags) -> SignalDef:
        """Declare an edge-triggered register; without ``next_state`` it holds its value."""
        if next_state is None:
            next_state = lambda s, _name=name: s[_name]
        return self._add(SignalDef(name, SignalKind.REGISTER, width=width, init=init,
                                   clock=clock, next_state=next_state, reset=reset,
                                   reset_active=reset_active, reset_value=reset_value,
                                   **flags))

    def wire(self, name: str, expr: Expression, width: int = 1, **flags) -> SignalDef:
        """Declare a combinational signal."""
        return self._add(SignalDef(name, SignalKind.WIRE, width=width, expr=expr, **flags))

    def path(self, local: str) -> str:
        """Hierarchical identifier of a local signal."""
        return f"{self.name}.{local}"

    def local(self, path: str) -> Optional[str]:
        """Local name of a hierarchical identifier, or None if it is not in this design."""
        prefix = self.name + "."
        if path.startswith(prefix) and path[len(prefix):] in self.signals:
            return path[len(prefix):]
        return None

    def of_kind(self, kind: SignalKind) -> List[SignalDef]:
        return [sig for sig in self.signals.values() if sig.kind == kind]

    def __iter__(self) -> Iterator[SignalDef]:
        return iter(self.signals.values())

    def validate(self) -> None:
        """Check that every clock and reset referenced by a register exists."""
        for reg in self.of_kind(SignalKind.REGISTER):
            clk = self.signals.get(reg.clock)
            if clk is None or clk.kind != SignalKind.CLOCK:
                raise ValueError(f"{reg.name}: unknown clock {reg.clock}")
            if reg.reset is not None and reg.reset not in self.signals:
                raise ValueError(f"{reg.name}: unknown reset {reg.reset}")
