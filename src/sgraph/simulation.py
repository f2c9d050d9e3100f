from abc import ABC, abstractmethod
from typing import Iterable, Optional
import logging
import threading

from .errors import StallTimeout, Unforceable, Unreadable
from .models import ClockDomain, StateSnapshot
from .perturbation import PerturbationPolicy

logger = logging.getLogger(__name__)


class SimulationControl(ABC):
    """
    Control surface of one simulation instance.

    Values are bit strings (most significant bit first). Adapters raise
    ``Unreadable``/``Unforceable`` for signals they cannot examine or drive,
    and ``StallTimeout`` when a clock never rises.
    """

    # Time step used by the polling edge wait (ns)
    poll_step: float = 0.1

    @abstractmethod
    def restart(self) -> None:
        """Restart the simulation from time zero, dropping all forces."""

    @abstractmethod
    def read(self, signal: str) -> str:
        """Return the current value of a signal."""

    @abstractmethod
    def force(self, signal: str, value: str) -> None:
        """Override a signal with a value."""

    @abstractmethod
    def release(self, signal: str) -> None:
        """Remove a force placed by ``force``."""

    @abstractmethod
    def advance_time(self, duration: float) -> None:
        """Run the simulation for ``duration`` ns."""

    @abstractmethod
    def list_signals(self, scope: Optional[str] = None) -> Iterable[str]:
        """List the hierarchical identifiers of all signals under ``scope``."""

    def advance_to_next_edge(self, clock: str, timeout: float) -> None:
        """
        Run until the next 0 -> 1 transition of ``clock``.

        The default implementation steps time by ``poll_step`` and samples the
        clock after every step.

        Args:
            clock: Clock signal identifier
            timeout: Longest simulated time to wait (ns)

        Raises:
            StallTimeout: If no rising edge happens within ``timeout``
        """
        prev = self._clock_level(clock)
        elapsed = 0.0
        while elapsed < timeout:
            self.advance_time(self.poll_step)
            elapsed += self.poll_step
            now = self._clock_level(clock)
            if prev != "1" and now == "1":
                return
            prev = now
        raise StallTimeout(clock, timeout)

    def _clock_level(self, clock: str) -> str:
        try:
            return self.read(clock)
        except Unreadable:
            return "x"


class SimulationSession:
    """
    Exclusive owner of one simulation instance for one clock domain.

    Every public operation holds the session lock, so a force, the edge that
    follows it, the snapshot and the release always run as one uninterrupted
    sequence.
    """

    def __init__(self,
                 control: SimulationControl,
                 domain: ClockDomain,
                 warmup_cycles: int = 50,
                 settle_cycles: int = 2,
                 probe_offset: float = 0.1,
                 stall_periods: int = 4):
        """
        Initialize the session.

        Args:
            control: Simulation instance, not shared with any other session
            domain: Clock domain analyzed through this session
            warmup_cycles: Edges run after reset release and settling
            settle_cycles: Edges run right after reset release
            probe_offset: Time advanced past an edge before probing (ns)
            stall_periods: Clock periods to wait for an edge before giving up
        """
        self.control = control
        self.domain = domain
        self.warmup_cycles = warmup_cycles
        self.settle_cycles = settle_cycles
        self.probe_offset = probe_offset
        self.stall_timeout = stall_periods * domain.period
        self._lock = threading.RLock()

    def restart(self) -> None:
        with self._lock:
            self.control.restart()

    def wait_edge(self) -> None:
        """Advance to the next rising edge of the domain clock."""
        with self._lock:
            self.control.advance_to_next_edge(self.domain.clock, self.stall_timeout)

    def settle(self) -> None:
        """Step a little past the current instant so combinational logic settles."""
        with self._lock:
            self.control.advance_time(self.probe_offset)

    def approach_edge(self) -> None:
        """
        Step from ``probe_offset`` past an edge to ``probe_offset`` before the next one.

        Only valid right after ``settle`` following an edge of the domain clock.
        """
        with self._lock:
            self.control.advance_time(self.domain.period - 2 * self.probe_offset)

    def bring_up(self, warmup_cycles: Optional[int] = None) -> None:
        """
        Restart and replay the reset-then-run sequence.

        Reset is held for two edges, then forced to its inactive level and
        left forced for the rest of the run.
        """
        if warmup_cycles is None:
            warmup_cycles = self.warmup_cycles
        with self._lock:
            self.control.restart()
            self.control.force(self.domain.reset, self.domain.reset_asserted)
            for _ in range(2):
                self.wait_edge()
            self.control.force(self.domain.reset, self.domain.reset_released)
            for _ in range(self.settle_cycles):
                self.wait_edge()
            for _ in range(warmup_cycles):
                self.wait_edge()

    def snapshot(self, signals: Iterable[str]) -> StateSnapshot:
        """Read the given signals; unreadable ones are left out."""
        values = {}
        with self._lock:
            for signal in signals:
                try:
                    values[signal] = self.control.read(signal)
                except Unreadable:
                    continue
        return StateSnapshot(values)

    def baseline(self, registers: Iterable[str]) -> StateSnapshot:
        """Post-edge state of an unperturbed run, one edge after bring-up."""
        with self._lock:
            self.bring_up()
            self.wait_edge()
            return self.snapshot(registers)

    def run_trial(self,
                  source: str,
                  registers: Iterable[str],
                  policy: PerturbationPolicy) -> Optional[StateSnapshot]:
        """
        Perturb ``source`` just before an edge and capture the state after it.

        The trial replays the same bring-up as ``baseline`` so both snapshots
        are taken after the same edge.

        Args:
            source: Register to perturb
            registers: Registers captured after the edge
            policy: Perturbation applied to the current value of ``source``

        Returns:
            Post-edge snapshot, or None if the trial had to be skipped

        Raises:
            StallTimeout: If the clock stops; the force is released first
        """
        with self._lock:
            self.bring_up()
            self.settle()
            try:
                current = self.control.read(source)
            except Unreadable as e:
                logger.debug(f"Skipping {source}: {e}")
                return None
            perturbed = policy.perturb(current, source)
            if perturbed is None:
                logger.debug(f"Skipping {source}: no flippable bit in {current!r}")
                return None
            try:
                self.control.force(source, perturbed)
            except Unforceable as e:
                logger.debug(f"Skipping {source}: {e}")
                return None
            try:
                self.wait_edge()
                return self.snapshot(registers)
            finally:
                self.control.release(source)
