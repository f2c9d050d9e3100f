from .models import (
    ClockDomain,
    DependencyEdge,
    DomainAnalysis,
    StateSnapshot,
    StronglyConnectedComponent,
)
from .errors import (
    ConfigError,
    DomainAborted,
    SimulationError,
    StallTimeout,
    Unforceable,
    Unreadable,
)
from .perturbation import PerturbationKind, PerturbationPolicy
from .simulation import SimulationControl, SimulationSession
from .discovery import enumerate_signals, discover_state_registers
from .graph_builder import DependencyGraphBuilder
from .scc import tarjan_scc, find_components
from .config import AnalysisConfig
from .analyzer import analyze, analyze_domain
from .report import ReportEmitter

__all__ = [
    'ClockDomain',
    'DependencyEdge',
    'DomainAnalysis',
    'StateSnapshot',
    'StronglyConnectedComponent',
    'ConfigError',
    'DomainAborted',
    'SimulationError',
    'StallTimeout',
    'Unforceable',
    'Unreadable',
    'PerturbationKind',
    'PerturbationPolicy',
    'SimulationControl',
    'SimulationSession',
    'enumerate_signals',
    'discover_state_registers',
    'DependencyGraphBuilder',
    'tarjan_scc',
    'find_components',
    'AnalysisConfig',
    'analyze',
    'analyze_domain',
    'ReportEmitter',
]
