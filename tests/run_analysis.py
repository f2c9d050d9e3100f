#!/usr/bin/env python3
"""
Demo script: Run the dependency analysis over the bundled fixture circuits and write reports
"""

import os
import sys
import json
import argparse
from pathlib import Path

# Make the fixture circuits importable
sys.path.insert(0, str(Path(__file__).parent))

from sgraph import AnalysisConfig, ReportEmitter, analyze
from circuits import dual_clock, shift_chain, swap, tiny16

CIRCUITS = {
    'swap': swap,
    'shift_chain': shift_chain,
    'dual_clock': dual_clock,
    'tiny16': tiny16,
}


def run_circuit(name, output_root, visualize=True, jobs=1):
    """
    Analyze one fixture circuit and write its reports

    Args:
        name: Fixture name (key of CIRCUITS)
        output_root: Directory receiving one sub-directory per circuit
        visualize: Whether to render dependency graphs
        jobs: Clock domains analyzed in parallel
    """
    print(f"\nAnalyzing circuit: {name}")
    module = CIRCUITS[name]
    config = AnalysisConfig.from_dict(dict(module.CONFIG, outputs={'json': f"{name}.json"}))

    analyses = analyze(config, module.make_simulator, jobs=jobs)

    output_dir = os.path.join(output_root, name)
    emitter = ReportEmitter(analyses)
    written = emitter.write_all(output_dir, config.outputs)

    summary = json.loads(emitter.to_json())['summary']
    print(f"Number of domains: {summary['domains']}")
    print(f"Number of state registers: {summary['registers']}")
    print(f"Number of edges: {summary['edges']}")
    print(f"Number of feedback loops: {summary['feedback_loops']}")
    if summary['aborted']:
        print(f"Aborted domains: {', '.join(summary['aborted'])}")

    if visualize:
        for path in emitter.visualize(output_dir):
            print(f"Generated visualization: {path}")

    print(f"Analysis complete, results saved to {', '.join(written)}")
    return not summary['aborted']


def main():
    """Main function: Analyze all fixture circuits"""
    parser = argparse.ArgumentParser(description='Analyze fixture circuits and output results')
    parser.add_argument('--no-vis', action='store_true', help='Do not generate visualization')
    parser.add_argument('--circuit', choices=sorted(CIRCUITS), help='Only analyze specified circuit')
    parser.add_argument('--jobs', type=int, default=1, help='Clock domains analyzed in parallel')
    parser.add_argument('--output-dir', default=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'output'),
                        help='Directory for report files')
    args = parser.parse_args()

    names = [args.circuit] if args.circuit else list(CIRCUITS)
    all_success = True
    for name in names:
        if not run_circuit(name, args.output_dir, visualize=not args.no_vis, jobs=args.jobs):
            all_success = False

    return 0 if all_success else 1


if __name__ == "__main__":
    sys.exit(main())
