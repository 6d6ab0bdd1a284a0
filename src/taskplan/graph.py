"""Dependency graph utilities: cycle detection and topological ordering.

A graph is a mapping of node id to the ids it depends on. Edges that point at
ids which are not keys of the mapping are ignored.
"""

from __future__ import annotations

import heapq
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .exceptions import CircularDependencyError


def find_cycles(graph: Mapping[str, Iterable[str]]) -> list[list[str]]:
    """Find circular dependencies with a depth-first traversal.

    Keeps a visited set and the set of nodes on the active path. Reaching a node
    that is still on the active path closes a cycle. The active-path marker is
    cleared when the traversal backtracks out of a node, so a node reached
    twice through different branches is not mistaken for a cycle.

    Args:
        graph: Mapping of node id to the ids it depends on

    Returns:
        Cycles as node lists that start and end with the same node,
        e.g. ``["a", "b", "a"]``. Each cycle is reported once.
    """
    adjacency = {node: [dep for dep in deps if dep in graph] for node, deps in graph.items()}
    visited: set[str] = set()
    cycles: list[list[str]] = []
    seen_cycles: set[frozenset[str]] = set()

    for root in sorted(adjacency):
        if root in visited:
            continue

        path: list[str] = [root]
        on_path: set[str] = {root}
        visited.add(root)
        # Each frame holds the node and an iterator over its remaining dependencies
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(adjacency[root]))]

        while stack:
            node, remaining = stack[-1]
            next_node = next(remaining, None)
            if next_node is None:
                stack.pop()
                path.pop()
                on_path.discard(node)
                continue

            if next_node in on_path:
                cycle = path[path.index(next_node) :] + [next_node]
                key = frozenset(cycle)
                if key not in seen_cycles:
                    seen_cycles.add(key)
                    cycles.append(cycle)
                continue

            if next_node in visited:
                continue

            visited.add(next_node)
            path.append(next_node)
            on_path.add(next_node)
            stack.append((next_node, iter(adjacency[next_node])))

    return cycles


def assert_acyclic(graph: Mapping[str, Iterable[str]]) -> None:
    """Raise if the graph has any circular dependency.

    Raises:
        CircularDependencyError: Listing every cycle found
    """
    cycles = find_cycles(graph)
    if cycles:
        described = "; ".join(" -> ".join(cycle) for cycle in cycles)
        raise CircularDependencyError(f"Circular dependency detected: {described}", cycles)


def topological_order(
    graph: Mapping[str, Iterable[str]],
    key: Callable[[str], Any],
) -> tuple[list[str], list[str]]:
    """Order nodes so every node comes after the nodes it depends on (Kahn's algorithm).

    Among nodes that are ready at the same time, the one with the smallest
    ``key`` goes first, which makes the result deterministic.

    Args:
        graph: Mapping of node id to the ids it depends on
        key: Sort key used to break ties between ready nodes

    Returns:
        Tuple of (ordered node ids, node ids left over because they sit on or
        behind a cycle). Leftover nodes are sorted by ``key``.
    """
    dependencies = {
        node: {dep for dep in deps if dep in graph and dep != node} for node, deps in graph.items()
    }
    dependents: dict[str, list[str]] = {node: [] for node in dependencies}
    in_degree = {node: len(deps) for node, deps in dependencies.items()}
    for node, deps in dependencies.items():
        for dep in deps:
            dependents[dep].append(node)

    ready: list[tuple[Any, str]] = [
        (key(node), node) for node, degree in in_degree.items() if degree == 0
    ]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        _, node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, (key(dependent), dependent))

    placed = set(order)
    leftover = sorted((node for node in dependencies if node not in placed), key=key)
    return order, leftover
