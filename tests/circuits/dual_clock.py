"""
Two clock domains: a counter on ``clk_a`` and a swap pair on ``clk_b``.

``clk_a`` rises at odd and ``clk_b`` at even nanoseconds, so their edges
never coincide. ``clk_b`` can be built stopped to model a clock that never
toggles.
"""

from sgraph.rtl_model import Design
from sgraph.simulator import CycleSimulator


def build_design(clk_b_running: bool = True) -> Design:
    d = Design("top")
    d.clock("clk_a", period=10.0)
    d.clock("clk_b", period=16.0, running=clk_b_running)
    d.input("rst")
    d.register("a.count", width=4, clock="clk_a", reset="rst",
               next_state=lambda s: s["a.count"] + 1)
    d.register("b.p", clock="clk_b", reset="rst", reset_value=1,
               next_state=lambda s: s["b.q"])
    d.register("b.q", clock="clk_b", reset="rst",
               next_state=lambda s: s["b.p"])
    return d


def make_simulator() -> CycleSimulator:
    return CycleSimulator(build_design())


def make_stalled_simulator() -> CycleSimulator:
    return CycleSimulator(build_design(clk_b_running=False))


CONFIG = {
    'top': "top",
    'clocks': [
        {'path': "top.clk_a", 'period': 10.0},
        {'path': "top.clk_b", 'period': 16.0},
    ],
    'reset': {'path': "top.rst", 'active': 1},
    'warmup_cycles': 4,
    'settle_cycles': 2,
    'discovery_edges': 5,
}
