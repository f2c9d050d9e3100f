"""
Command line entry point.

Usage:
    sgraph --config analysis.json --design mypkg.bench:make_simulator

The design factory is a callable returning a new ``SimulationControl`` each
time it is called; it is given either as ``module:callable`` or as
``path/to/file.py:callable``.
"""

from typing import List, Optional
import argparse
import importlib
import importlib.util
import logging
import os
import sys

from .analyzer import SimulatorFactory, analyze
from .config import AnalysisConfig
from .errors import ConfigError, DomainAborted, SimulationError
from .report import ReportEmitter

logger = logging.getLogger(__name__)


def load_factory(spec: str) -> SimulatorFactory:
    """
    Resolve a ``module:callable`` or ``file.py:callable`` reference.

    Raises:
        ConfigError: If the reference cannot be imported or is not callable
    """
    target, sep, attr = spec.rpartition(":")
    if not sep or not target or not attr:
        raise ConfigError(f"Design factory must look like module:callable, got {spec!r}")
    try:
        if target.endswith(".py"):
            if not os.path.exists(target):
                raise ConfigError(f"Design file not found: {target}")
            name = os.path.splitext(os.path.basename(target))[0]
            module_spec = importlib.util.spec_from_file_location(name, target)
            module = importlib.util.module_from_spec(module_spec)
            module_spec.loader.exec_module(module)
        else:
            module = importlib.import_module(target)
    except ImportError as e:
        raise ConfigError(f"Cannot import {target}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigError(f"{target} has no callable {attr}")
    return factory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sgraph",
        description="Discover state-register dependency graphs and feedback loops by perturbation")
    parser.add_argument('--config', required=True, help='JSON analysis configuration')
    parser.add_argument('--design', required=True,
                        help='Simulator factory, module:callable or file.py:callable')
    parser.add_argument('--output-dir', default='.', help='Directory for report files')
    parser.add_argument('--jobs', type=int, default=1,
                        help='Clock domains analyzed in parallel (one simulator each)')
    parser.add_argument('--json', action='store_true', help='Also write the JSON report')
    parser.add_argument('--visualize', action='store_true',
                        help='Render each domain graph with Graphviz')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the analysis; returns 0 when all domains completed, 1 otherwise, 2 on bad input."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = AnalysisConfig.load(args.config)
        factory = load_factory(args.design)
        if args.jobs < 1:
            raise ConfigError("--jobs must be at least 1")
    except ConfigError as e:
        logger.error(str(e))
        return 2

    if args.json and not config.outputs.get('json'):
        config.outputs['json'] = "sgraph.json"

    try:
        analyses = analyze(config, factory, jobs=args.jobs)
    except DomainAborted as e:
        logger.error(str(e))
        return 1
    except SimulationError as e:
        # reset or design the simulator cannot work with
        logger.error(f"Simulation failed: {e}")
        return 2

    emitter = ReportEmitter(analyses)
    emitter.write_all(args.output_dir, config.outputs)
    if args.visualize:
        emitter.visualize(args.output_dir)

    for analysis in analyses:
        status = "ABORTED" if not analysis.completed else (
            f"{len(analysis.registers)} regs, {len(analysis.edges)} edges, "
            f"{len(analysis.feedback_components)} feedback loops")
        logger.info(f"  {analysis.clock}: {status}")

    return 0 if all(a.completed for a in analyses) else 1


if __name__ == "__main__":
    sys.exit(main())
