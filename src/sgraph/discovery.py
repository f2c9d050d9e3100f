from typing import Iterable, List, Optional, Set, Tuple
import logging

from .errors import DomainAborted, StallTimeout
from .simulation import SimulationControl, SimulationSession

logger = logging.getLogger(__name__)


def enumerate_signals(control: SimulationControl, scope: Optional[str] = None) -> List[str]:
    """
    List every addressable signal below a hierarchy scope.

    Args:
        control: Simulation instance to query
        scope: Hierarchical prefix such as ``tb_top``; None lists everything

    Returns:
        Sorted, duplicate-free signal identifiers
    """
    signals = set(control.list_signals(scope))
    if scope:
        prefix = scope + "."
        signals = {s for s in signals if s.startswith(prefix)}
    return sorted(signals)


def discover_state_registers(session: SimulationSession,
                             candidates: Iterable[str],
                             edges: int = 5,
                             exclude: Iterable[str] = ()) -> Tuple[str, ...]:
    """
    Classify which candidates are updated by the session's clock.

    After the standard bring-up, each of ``edges`` rising edges is bracketed
    by a snapshot just before and just after it. Any candidate whose value
    differs across an edge is a state register. Signals that never toggle in
    this window are missed.

    Args:
        session: Session bound to the clock domain to classify
        candidates: Signals to consider
        edges: Number of edges to sample
        exclude: Further signals never classified as registers, such as the
            clocks of other domains

    Returns:
        Sorted register identifiers, never including the clock or reset

    Raises:
        DomainAborted: If the clock stalls
    """
    domain = session.domain
    excluded = {domain.clock, domain.reset}
    excluded.update(exclude)
    candidates = [s for s in dict.fromkeys(candidates) if s not in excluded]
    toggled: Set[str] = set()

    try:
        session.bring_up()
        for _ in range(edges):
            # sample just short of the edge so other clocks' edges fall outside
            session.settle()
            session.approach_edge()
            before = session.snapshot(candidates)
            session.wait_edge()
            after = session.snapshot(candidates)
            toggled.update(after.changed_against(before, candidates))
    except StallTimeout as e:
        raise DomainAborted(domain.clock, e) from e

    registers = tuple(sorted(toggled))
    logger.info(f"Clock: {domain.clock} - discovered {len(registers)} state regs")
    return registers
