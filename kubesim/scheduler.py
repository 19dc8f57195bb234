"""
The filter-then-score pipeline deciding where a single workload goes.

Pure functions over node views -- binding the decision is the orchestrator's job
"""

import logging

from kubesim.core import NodeView, Workload
from kubesim.plugins.api import Filter, Scorer

logger = logging.getLogger(__name__)


def filter_nodes(filters: list[Filter], workload: Workload, nodes: list[NodeView]) -> list[NodeView]:
    """Applies filters in order, a node rejected by one filter is not presented to the next.
    Exceptions raised by a filter propagate"""
    for f in filters:
        logger.debug(f"filtering {[n.name for n in nodes]} with {f.__class__.__name__}")
        nodes = [node for node in nodes if f.filter(workload, node)]
        logger.debug(f"filtered to {[n.name for n in nodes]}")
    return nodes


def score_nodes(scorers: list[Scorer], workload: Workload, nodes: list[NodeView]) -> dict[str, float]:
    """Weighted sum of scores per candidate node. Exceptions raised by a scorer propagate"""
    totals: dict[str, float] = {node.name: 0 for node in nodes}
    for scorer in scorers:
        scores, weight = scorer.score(workload, nodes)
        for score in scores:
            if score.node not in totals:
                logger.debug(f"{scorer.__class__.__name__} scored non-candidate {score.node}, ignoring")
                continue
            totals[score.node] += score.score * weight
        logger.debug(f"scored nodes {totals}")
    return totals


def select_node(totals: dict[str, float]) -> str | None:
    """Node with the greatest total, ties going to the lexically smallest name.
    None if there is no candidate"""
    best: str | None = None
    for node in sorted(totals):
        if best is None or totals[node] > totals[best]:
            best = node
    return best


def schedule(
    filters: list[Filter], scorers: list[Scorer], workload: Workload, nodes: list[NodeView]
) -> str | None:
    """Name of the node chosen for the workload, or None if no node is feasible"""
    candidates = filter_nodes(filters, workload, nodes)
    if not candidates:
        return None
    return select_node(score_nodes(scorers, workload, candidates))
