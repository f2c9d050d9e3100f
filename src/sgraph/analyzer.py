from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List
import logging

from .config import AnalysisConfig
from .discovery import discover_state_registers, enumerate_signals
from .errors import DomainAborted
from .graph_builder import DependencyGraphBuilder
from .models import ClockDomain, DomainAnalysis
from .scc import find_components
from .simulation import SimulationControl, SimulationSession

logger = logging.getLogger(__name__)

# Returns a new, independent simulation instance on every call
SimulatorFactory = Callable[[], SimulationControl]


def analyze_domain(control: SimulationControl,
                   domain: ClockDomain,
                   config: AnalysisConfig) -> DomainAnalysis:
    """
    Discover registers, build the dependency graph and find its SCCs for one domain.

    Args:
        control: Simulation instance used only for this domain
        domain: Clock domain to analyze
        config: Analysis parameters

    Returns:
        The completed domain analysis

    Raises:
        DomainAborted: If the domain clock stalls
    """
    control.poll_step = config.poll_step
    session = SimulationSession(control, domain, **config.session_options())
    analysis = DomainAnalysis(domain=domain)

    candidates = enumerate_signals(control, config.top)
    logger.info(f"Clock: {domain.clock} - {len(candidates)} candidate signals")
    other_clocks = [clk.path for clk in config.clocks if clk.path != domain.clock]
    registers = discover_state_registers(session, candidates, config.discovery_edges,
                                         exclude=other_clocks)
    analysis.registers = registers

    builder = DependencyGraphBuilder(session, registers,
                                     policy=config.perturbation,
                                     progress_interval=config.progress_interval)
    builder.build()
    builder.to_analysis(analysis)
    analysis.components = find_components(analysis.graph, domain.clock)
    return analysis


def _run_domain(factory: SimulatorFactory,
                domain: ClockDomain,
                config: AnalysisConfig) -> DomainAnalysis:
    try:
        return analyze_domain(factory(), domain, config)
    except DomainAborted as e:
        if not config.continue_on_stall:
            raise
        logger.error(str(e))
        reason = str(e.cause) if e.cause is not None else str(e)
        return DomainAnalysis(domain=domain, aborted=reason)


def analyze(config: AnalysisConfig,
            factory: SimulatorFactory,
            jobs: int = 1) -> List[DomainAnalysis]:
    """
    Analyze every configured clock domain.

    Each domain gets its own simulation instance from ``factory``, so domains
    may run in parallel when ``jobs`` is greater than one. Results are
    returned in configuration order.

    Args:
        config: Analysis parameters
        factory: Creates a fresh simulation instance per domain
        jobs: Number of domains analyzed concurrently

    Returns:
        One DomainAnalysis per clock; stalled domains carry an abort reason

    Raises:
        DomainAborted: If a domain stalls and ``continue_on_stall`` is false
    """
    domains = config.domains()
    if jobs < 1:
        raise ValueError("jobs must be at least 1")

    if jobs == 1 or len(domains) == 1:
        return [_run_domain(factory, domain, config) for domain in domains]

    with ThreadPoolExecutor(max_workers=min(jobs, len(domains))) as pool:
        futures = [pool.submit(_run_domain, factory, domain, config) for domain in domains]
        return [future.result() for future in futures]
