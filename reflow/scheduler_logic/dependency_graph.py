"""Dependency graph over work-order identifiers and its topological order.

Orders own the *identifiers* of their predecessors; the graph is a plain
``id -> set(dependency ids)`` mapping built from them.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from reflow.shared.errors import CircularDependencyError, UnknownDependencyError
from reflow.shared.models import WorkOrder

logger = logging.getLogger(__name__)

DependencyGraph = dict[str, set[str]]


def build_dependency_graph(work_orders: Sequence[WorkOrder]) -> DependencyGraph:
    """Map each order id to its declared dependencies.

    Raises :class:`UnknownDependencyError` naming every referenced id that
    is not among *work_orders*.
    """
    graph: DependencyGraph = {wo.id: set(wo.depends_on) for wo in work_orders}

    unknown: list[str] = []
    for wo in work_orders:
        for dep in wo.depends_on:
            if dep not in graph and dep not in unknown:
                unknown.append(dep)
    if unknown:
        raise UnknownDependencyError(
            f"Unknown dependencies: {', '.join(unknown)}", unknown=unknown,
        )
    return graph


def topological_sort(work_orders: Sequence[WorkOrder]) -> list[str]:
    """Kahn's algorithm with a FIFO queue seeded in input order.

    Equal input ordering always yields the same result, which keeps the
    placement of independent orders reproducible.
    """
    graph = build_dependency_graph(work_orders)
    remaining = {node: set(deps) for node, deps in graph.items()}

    queue = deque(wo.id for wo in work_orders if not remaining[wo.id])
    queued = set(queue)
    order: list[str] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for other in graph:
            deps = remaining[other]
            if node in deps:
                deps.discard(node)
                if not deps and other not in queued:
                    queue.append(other)
                    queued.add(other)

    if len(order) < len(graph):
        stuck = [node for node in graph if node not in queued]
        raise CircularDependencyError(
            f"Circular dependency detected among: {', '.join(stuck)}",
            work_order_ids=stuck,
        )

    logger.debug("Topological order: %s", order)
    return order


def ensure_acyclic(work_orders: Sequence[WorkOrder]) -> None:
    topological_sort(work_orders)
