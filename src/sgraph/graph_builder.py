from typing import Dict, List, Optional, Sequence
import logging
import networkx as nx

from .errors import DomainAborted, StallTimeout
from .models import DependencyEdge, DomainAnalysis
from .perturbation import PerturbationPolicy
from .simulation import SimulationSession

logger = logging.getLogger(__name__)


class DependencyGraphBuilder:
    """Builds the register dependency graph of one clock domain by perturbation."""

    def __init__(self,
                 session: SimulationSession,
                 registers: Sequence[str],
                 policy: Optional[PerturbationPolicy] = None,
                 progress_interval: int = 50):
        """
        Initialize the builder.

        Args:
            session: Session owning the simulation instance for this domain
            registers: State registers of the domain, in processing order
            policy: Perturbation policy (flip least-significant bit by default)
            progress_interval: Log progress every this many trials
        """
        self.session = session
        self.registers = tuple(dict.fromkeys(registers))
        self.policy = policy or PerturbationPolicy()
        self.progress_interval = progress_interval
        self.graph = nx.DiGraph()
        self.edges: List[DependencyEdge] = []
        self.trials = 0
        self.skipped_trials = 0

    @property
    def clock(self) -> str:
        return self.session.domain.clock

    def build(self) -> nx.DiGraph:
        """
        Run the baseline and one perturbation trial per register.

        Returns:
            The dependency graph; nodes are exactly the registers

        Raises:
            DomainAborted: If the clock stalls; no partial graph is kept
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(self.registers)
        edges: List[DependencyEdge] = []
        trials = skipped = 0

        if not self.registers:
            logger.warning(f"Clock: {self.clock} - no state registers, graph is empty")
            self.graph, self.edges = graph, edges
            return graph

        try:
            baseline = self.session.baseline(self.registers)
            total = len(self.registers)
            for source in self.registers:
                trials += 1
                perturbed = self.session.run_trial(source, self.registers, self.policy)
                if perturbed is None:
                    skipped += 1
                else:
                    for dest in perturbed.changed_against(baseline, self.registers):
                        graph.add_edge(source, dest)
                        edges.append(DependencyEdge(source, dest, self.clock))
                if trials % self.progress_interval == 0:
                    logger.info(f"  [{self.clock}] processed {trials} / {total} regs...")
        except StallTimeout as e:
            raise DomainAborted(self.clock, e) from e

        self.graph, self.edges = graph, edges
        self.trials, self.skipped_trials = trials, skipped
        logger.info(f"Clock: {self.clock} - {len(edges)} edges from {trials} trials "
                    f"({skipped} skipped)")
        return graph

    def successors(self) -> Dict[str, List[str]]:
        """Get the destinations of every register, in register order."""
        return {reg: list(self.graph.successors(reg)) for reg in self.graph.nodes()}

    def to_analysis(self, analysis: DomainAnalysis) -> DomainAnalysis:
        """Copy the build results into a domain analysis record."""
        analysis.registers = self.registers
        analysis.graph = self.graph
        analysis.edges = list(self.edges)
        analysis.trials = self.trials
        analysis.skipped_trials = self.skipped_trials
        return analysis
