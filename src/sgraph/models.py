from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
from dataclasses import dataclass, field
import networkx as nx


@dataclass(frozen=True)
class ClockDomain:
    """A clock, its period and the reset used to bring the design up."""
    clock: str
    period: float  # ns
    reset: str
    reset_active: int = 1  # 1 => active-high, 0 => active-low

    def __post_init__(self):
        """Validate domain parameters."""
        if not self.clock:
            raise ValueError("clock path must not be empty")
        if not self.reset:
            raise ValueError("reset path must not be empty")
        if self.clock == self.reset:
            raise ValueError(f"clock and reset must differ (both {self.clock})")
        if self.period <= 0:
            raise ValueError(f"period of {self.clock} must be positive")
        if self.reset_active not in (0, 1):
            raise ValueError("reset_active must be 0 or 1")

    @property
    def reset_asserted(self) -> str:
        return "1" if self.reset_active else "0"

    @property
    def reset_released(self) -> str:
        return "0" if self.reset_active else "1"


class StateSnapshot(Mapping[str, str]):
    """Immutable signal -> value mapping captured at one simulation instant."""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def __getitem__(self, signal: str) -> str:
        return self._values[signal]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"StateSnapshot({self._values!r})"

    def changed_against(self, other: "StateSnapshot", over: Iterable[str]) -> List[str]:
        """
        List the signals of ``over`` whose values differ between two snapshots.

        Signals missing from either snapshot (unreadable at capture time) are
        not compared.

        Args:
            other: Snapshot to compare against
            over: Signals to compare, in the order they should be reported

        Returns:
            Changed signals in the order of ``over``
        """
        changed = []
        for signal in over:
            if signal in self._values and signal in other:
                if self._values[signal] != other[signal]:
                    changed.append(signal)
        return changed


@dataclass(frozen=True)
class DependencyEdge:
    """Perturbing ``source`` before an edge of ``clock`` changed ``destination`` after it."""
    source: str
    destination: str
    clock: str


@dataclass(frozen=True)
class StronglyConnectedComponent:
    """A maximal set of mutually reachable registers in one domain."""
    clock: str
    members: Tuple[str, ...]
    has_self_loop: bool = False

    def __post_init__(self):
        # Members are always kept sorted by identifier
        object.__setattr__(self, "members", tuple(sorted(self.members)))

    @property
    def is_feedback(self) -> bool:
        # A singleton with a self-edge is not treated as feedback
        return len(self.members) > 1

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, signal: object) -> bool:
        return signal in self.members


@dataclass
class DomainAnalysis:
    """Everything learned about one clock domain."""
    domain: ClockDomain
    registers: Tuple[str, ...] = ()
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    edges: List[DependencyEdge] = field(default_factory=list)
    components: List[StronglyConnectedComponent] = field(default_factory=list)
    trials: int = 0
    skipped_trials: int = 0
    aborted: Optional[str] = None

    @property
    def clock(self) -> str:
        return self.domain.clock

    @property
    def completed(self) -> bool:
        return self.aborted is None

    @property
    def feedback_components(self) -> List[StronglyConnectedComponent]:
        return [comp for comp in self.components if comp.is_feedback]

    def component_of(self, signal: str) -> Optional[StronglyConnectedComponent]:
        """Return the component containing ``signal``, if any."""
        for comp in self.components:
            if signal in comp:
                return comp
        return None

    def to_dict(self) -> dict:
        """Convert the analysis to a JSON-compatible dictionary."""
        return {
            'clock': self.domain.clock,
            'period': self.domain.period,
            'reset': self.domain.reset,
            'reset_active': self.domain.reset_active,
            'aborted': self.aborted,
            'trials': self.trials,
            'skipped_trials': self.skipped_trials,
            'registers': list(self.registers),
            'edges': [
                {'source': e.source, 'target': e.destination} for e in self.edges
            ],
            'components': [
                {
                    'members': list(comp.members),
                    'feedback': comp.is_feedback,
                    'self_loop': comp.has_self_loop,
                }
                for comp in self.components
            ],
        }
