from typing import Dict, List, Optional, Sequence, TextIO
import csv
import json
import logging
import os
import warnings
import graphviz

from .models import DomainAnalysis

logger = logging.getLogger(__name__)


class ReportEmitter:
    """Writes edge, register and SCC reports for a set of analyzed domains."""

    def __init__(self, analyses: Sequence[DomainAnalysis]):
        """
        Initialize the emitter.

        Args:
            analyses: Domain results in the order the domains were processed
        """
        self.analyses = list(analyses)

    def write_edges(self, out: TextIO) -> None:
        """Edge table: one ``src,dst,clock`` row per edge in discovery order."""
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(["src", "dst", "clock"])
        for analysis in self.analyses:
            if not analysis.completed:
                continue
            for edge in analysis.edges:
                writer.writerow([edge.source, edge.destination, edge.clock])

    def write_registers(self, out: TextIO) -> None:
        """Register listing grouped by clock domain."""
        for analysis in self.analyses:
            out.write(self._domain_header(analysis))
            if analysis.completed:
                for reg in analysis.registers:
                    out.write(f"{reg}\n")
            out.write("\n")

    def write_scc(self, out: TextIO) -> None:
        """SCC listing grouped by clock domain; ``*`` marks feedback loops."""
        for analysis in self.analyses:
            out.write(self._domain_header(analysis))
            if analysis.completed:
                for comp in analysis.components:
                    mark = "*" if comp.is_feedback else " "
                    out.write(f"{mark} {', '.join(comp.members)}\n")
            out.write("\n")

    def _domain_header(self, analysis: DomainAnalysis) -> str:
        if analysis.completed:
            return f"clock {analysis.clock}\n"
        return f"clock {analysis.clock}  ABORTED: {analysis.aborted}\n"

    def to_json(self) -> str:
        """Convert all domain results to JSON format."""
        data = {
            "domains": [analysis.to_dict() for analysis in self.analyses],
            "summary": {
                "domains": len(self.analyses),
                "aborted": [a.clock for a in self.analyses if not a.completed],
                "registers": sum(len(a.registers) for a in self.analyses if a.completed),
                "edges": sum(len(a.edges) for a in self.analyses if a.completed),
                "feedback_loops": sum(len(a.feedback_components) for a in self.analyses),
            },
        }
        return json.dumps(data, indent=2)

    def write_all(self, output_dir: str, outputs: Dict[str, Optional[str]]) -> List[str]:
        """
        Write every configured report file.

        Args:
            output_dir: Directory receiving the files
            outputs: Report kind (edges, registers, scc, json) -> file name;
                kinds mapped to None are not written

        Returns:
            Paths of the files written
        """
        writers = {
            'edges': self.write_edges,
            'registers': self.write_registers,
            'scc': self.write_scc,
            'json': lambda out: out.write(self.to_json() + "\n"),
        }
        os.makedirs(output_dir, exist_ok=True)
        written = []
        for kind, write in writers.items():
            name = outputs.get(kind)
            if not name:
                continue
            path = os.path.join(output_dir, name)
            with open(path, 'w', encoding='utf-8', newline='') as f:
                write(f)
            written.append(path)
        logger.info(f"Done. Wrote: {', '.join(written)}")
        return written

    def visualize(self, output_dir: str) -> List[str]:
        """Create a Graphviz rendering of each completed domain's dependency graph."""
        rendered = []
        for analysis in self.analyses:
            if not analysis.completed:
                continue
            feedback = {m for comp in analysis.feedback_components for m in comp.members}
            base = os.path.join(output_dir, _safe_name(analysis.clock))
            try:
                dot = graphviz.Digraph(comment=f'State dependencies ({analysis.clock})')
                dot.attr(rankdir='LR')
                for reg in analysis.registers:
                    color = 'red' if reg in feedback else 'black'
                    dot.node(reg, reg, color=color, shape='box')
                for edge in analysis.edges:
                    dot.edge(edge.source, edge.destination)
                rendered.append(dot.render(base, view=False, format='png'))
            except Exception as e:
                warnings.warn(f"Could not generate visualization: {e}\n"
                              f"Please install Graphviz and add it to your system PATH")
                warnings.warn("You can still use the JSON output for analysis")
        return rendered


def _safe_name(clock: str) -> str:
    return "deps_" + "".join(c if c.isalnum() or c in "-_" else "_" for c in clock)
