from typing import Dict, Iterable, Iterator, List, Mapping, Set, Tuple
import logging
import networkx as nx

from .models import StronglyConnectedComponent

logger = logging.getLogger(__name__)


def tarjan_scc(adjacency: Mapping[str, Iterable[str]]) -> List[List[str]]:
    """
    Find strongly connected components with Tarjan's algorithm.

    The depth-first search keeps its own stack of (node, successor iterator)
    frames instead of recursing, so graph depth is not bounded by the
    interpreter's recursion limit.

    Args:
        adjacency: Ordered mapping from node to successors. Roots are tried
            in mapping order and successors in the order given.

    Returns:
        Components in the order they are completed; members in pop order

    Raises:
        ValueError: If a successor is not a key of ``adjacency``
    """
    index: Dict[str, int] = {}
    low: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    components: List[List[str]] = []
    counter = 0

    def successors(node: str) -> Iterator[str]:
        for succ in adjacency[node]:
            if succ not in adjacency:
                raise ValueError(f"Edge {node} -> {succ} leaves the node set")
            yield succ

    for root in adjacency:
        if root in index:
            continue
        index[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: List[Tuple[str, Iterator[str]]] = [(root, successors(root))]

        while work:
            node, succs = work[-1]
            descended = False
            for succ in succs:
                if succ not in index:
                    index[succ] = low[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack.add(succ)
                    work.append((succ, successors(succ)))
                    descended = True
                    break
                elif succ in on_stack:
                    low[node] = min(low[node], index[succ])
            if descended:
                continue

            # All successors done: propagate low-link to the parent frame
            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[node])

            if low[node] == index[node]:
                comp = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    comp.append(member)
                    if member == node:
                        break
                components.append(comp)

    return components


def find_components(graph: nx.DiGraph, clock: str) -> List[StronglyConnectedComponent]:
    """
    Compute the strongly connected components of one domain's dependency graph.

    Args:
        graph: Dependency graph whose nodes are the domain's registers
        clock: Clock identifier of the domain

    Returns:
        One component per SCC; every node appears in exactly one of them
    """
    adjacency = {node: list(graph.successors(node)) for node in graph.nodes()}
    components = []
    for members in tarjan_scc(adjacency):
        self_loop = len(members) == 1 and graph.has_edge(members[0], members[0])
        components.append(StronglyConnectedComponent(
            clock=clock, members=tuple(members), has_self_loop=self_loop))

    feedback = sum(1 for comp in components if comp.is_feedback)
    logger.info(f"Clock: {clock} - {len(components)} SCCs, {feedback} feedback loops")
    return components
