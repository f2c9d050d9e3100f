"""
Tests for the iterative Tarjan cycle detector.
"""

import random

import networkx as nx
import pytest

from sgraph.scc import find_components, tarjan_scc


def random_graph(seed: int, nodes: int = 40, edges: int = 70) -> nx.DiGraph:
    rng = random.Random(seed)
    graph = nx.DiGraph()
    graph.add_nodes_from(f"n{i}" for i in range(nodes))
    for _ in range(edges):
        graph.add_edge(f"n{rng.randrange(nodes)}", f"n{rng.randrange(nodes)}")
    return graph


class TestTarjan:

    def test_chain_yields_singletons_deepest_first(self):
        adjacency = {"a": ["b"], "b": ["c"], "c": []}
        assert tarjan_scc(adjacency) == [["c"], ["b"], ["a"]]

    def test_cycle_is_one_component(self):
        adjacency = {"a": ["b"], "b": ["c"], "c": ["a"], "d": ["a"]}
        components = tarjan_scc(adjacency)
        assert sorted(map(sorted, components)) == [["a", "b", "c"], ["d"]]

    def test_isolated_nodes_are_components(self):
        assert tarjan_scc({"a": [], "b": []}) == [["a"], ["b"]]

    def test_empty_graph(self):
        assert tarjan_scc({}) == []

    def test_dangling_successor_rejected(self):
        with pytest.raises(ValueError):
            tarjan_scc({"a": ["zzz"]})

    @pytest.mark.parametrize("seed", range(8))
    def test_partition_matches_networkx(self, seed):
        graph = random_graph(seed)
        adjacency = {n: list(graph.successors(n)) for n in graph.nodes()}
        ours = {frozenset(c) for c in tarjan_scc(adjacency)}
        reference = {frozenset(c) for c in nx.strongly_connected_components(graph)}
        assert ours == reference

        members = [m for comp in ours for m in comp]
        assert sorted(members) == sorted(graph.nodes())

    def test_deep_graph_does_not_recurse(self):
        n = 20000
        adjacency = {f"r{i}": [f"r{i + 1}"] for i in range(n - 1)}
        adjacency[f"r{n - 1}"] = ["r0"]
        components = tarjan_scc(adjacency)
        assert len(components) == 1
        assert len(components[0]) == n


class TestFindComponents:

    def test_feedback_flag_and_sorted_members(self):
        graph = nx.DiGraph()
        graph.add_edges_from([("tb.y", "tb.x"), ("tb.x", "tb.y"), ("tb.x", "tb.z")])
        components = find_components(graph, "tb.clk")

        feedback = [c for c in components if c.is_feedback]
        assert len(feedback) == 1
        assert feedback[0].members == ("tb.x", "tb.y")
        assert all(c.clock == "tb.clk" for c in components)

    def test_self_loop_singleton_is_not_feedback(self):
        graph = nx.DiGraph()
        graph.add_edge("tb.count", "tb.count")
        graph.add_node("tb.idle")
        components = find_components(graph, "tb.clk")

        by_member = {c.members: c for c in components}
        assert by_member[("tb.count",)].has_self_loop
        assert not by_member[("tb.count",)].is_feedback
        assert not by_member[("tb.idle",)].has_self_loop

    def test_every_node_in_exactly_one_component(self):
        graph = random_graph(99, nodes=60, edges=120)
        components = find_components(graph, "clk")
        members = [m for c in components for m in c.members]
        assert len(members) == len(set(members)) == graph.number_of_nodes()
