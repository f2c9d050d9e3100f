from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import os

from .errors import ConfigError
from .models import ClockDomain
from .perturbation import PerturbationPolicy

DEFAULT_OUTPUTS = {
    'edges': "edges.csv",
    'registers': "state_regs.txt",
    'scc': "scc.txt",
    'json': None,
}

_COUNT_DEFAULTS = {
    'warmup_cycles': 50,
    'settle_cycles': 2,
    'discovery_edges': 5,
    'stall_periods': 4,
    'progress_interval': 50,
}

_TIME_DEFAULTS = {
    'probe_offset': 0.1,
    'poll_step': 0.1,
}


def _integer(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    return value


@dataclass
class ClockSpec:
    """A clock to analyze, as written in the configuration."""
    path: str
    period: float


@dataclass
class AnalysisConfig:
    """Parameters of one analysis run."""
    clocks: List[ClockSpec]
    reset_path: str
    reset_active: int = 1  # 1 => active-high, 0 => active-low
    top: Optional[str] = None
    warmup_cycles: int = 50  # edges of normal stimulus before sampling
    settle_cycles: int = 2  # edges after reset release
    discovery_edges: int = 5  # edges sampled to classify state registers
    probe_offset: float = 0.1  # ns stepped past an edge before probing
    poll_step: float = 0.1  # ns per step of the polling edge wait
    stall_periods: int = 4  # clock periods without an edge before giving up
    progress_interval: int = 50
    perturbation: PerturbationPolicy = field(default_factory=PerturbationPolicy)
    continue_on_stall: bool = True
    outputs: Dict[str, Optional[str]] = field(default_factory=lambda: dict(DEFAULT_OUTPUTS))

    def __post_init__(self):
        """Validate configuration parameters."""
        if not self.clocks:
            raise ConfigError("At least one clock must be specified")
        paths = [clk.path for clk in self.clocks]
        if len(set(paths)) != len(paths):
            raise ConfigError(f"Duplicate clock paths: {paths}")
        if not self.reset_path:
            raise ConfigError("reset path must be specified")
        if self.reset_active not in (0, 1):
            raise ConfigError("reset active level must be 0 or 1")
        for name in ('warmup_cycles', 'settle_cycles', 'discovery_edges'):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        for name in ('probe_offset', 'poll_step'):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.stall_periods < 1:
            raise ConfigError("stall_periods must be at least 1")
        if self.progress_interval < 1:
            raise ConfigError("progress_interval must be at least 1")
        unknown = set(self.outputs) - set(DEFAULT_OUTPUTS)
        if unknown:
            raise ConfigError(f"Unknown output kinds: {sorted(unknown)}")
        # Building the domains validates periods and clock/reset overlap
        try:
            self.domains()
        except ValueError as e:
            raise ConfigError(str(e)) from e
        # Probes sit probe_offset on either side of an edge
        for clk in self.clocks:
            if 2 * self.probe_offset >= clk.period:
                raise ConfigError(f"probe_offset must be below half the period of {clk.path}")

    def domains(self) -> List[ClockDomain]:
        """Clock domains in configuration order."""
        return [
            ClockDomain(clock=clk.path, period=clk.period,
                        reset=self.reset_path, reset_active=self.reset_active)
            for clk in self.clocks
        ]

    def session_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``SimulationSession``."""
        return {
            'warmup_cycles': self.warmup_cycles,
            'settle_cycles': self.settle_cycles,
            'probe_offset': self.probe_offset,
            'stall_periods': self.stall_periods,
        }

    @classmethod
    def from_dict(cls, params: dict) -> 'AnalysisConfig':
        """Create an AnalysisConfig from a dictionary of parameters."""
        try:
            clocks = [ClockSpec(path=c['path'], period=float(c['period']))
                      for c in params.get('clocks', [])]
            reset_path = params['reset']['path']
            reset_active = int(params['reset'].get('active', 1))
            counts = {name: _integer(name, params.get(name, default))
                      for name, default in _COUNT_DEFAULTS.items()}
            times = {name: float(params.get(name, default))
                     for name, default in _TIME_DEFAULTS.items()}
            perturbation = PerturbationPolicy.from_dict(params.get('perturbation', {}))
            outputs = dict(DEFAULT_OUTPUTS)
            outputs.update(params.get('outputs', {}))
        except KeyError as e:
            raise ConfigError(f"Missing configuration key: {e}") from e
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        return cls(
            clocks=clocks,
            reset_path=reset_path,
            reset_active=reset_active,
            top=params.get('top'),
            perturbation=perturbation,
            continue_on_stall=bool(params.get('continue_on_stall', True)),
            outputs=outputs,
            **counts,
            **times,
        )

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            'top': self.top,
            'clocks': [{'path': c.path, 'period': c.period} for c in self.clocks],
            'reset': {'path': self.reset_path, 'active': self.reset_active},
            'warmup_cycles': self.warmup_cycles,
            'settle_cycles': self.settle_cycles,
            'discovery_edges': self.discovery_edges,
            'probe_offset': self.probe_offset,
            'poll_step': self.poll_step,
            'stall_periods': self.stall_periods,
            'progress_interval': self.progress_interval,
            'perturbation': self.perturbation.to_dict(),
            'continue_on_stall': self.continue_on_stall,
            'outputs': dict(self.outputs),
        }

    @classmethod
    def load(cls, path: str) -> 'AnalysisConfig':
        """Read a JSON configuration file."""
        if not os.path.exists(path):
            raise ConfigError(f"Configuration file not found: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            try:
                params = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"{path}: {e}") from e
        if not isinstance(params, dict):
            raise ConfigError(f"{path}: top level must be an object")
        return cls.from_dict(params)
