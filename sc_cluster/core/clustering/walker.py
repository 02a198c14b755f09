"""Flatten hierarchical groupings into per-observation cluster paths.

Two modes:

- single-cut: slice an ``AgglomerativeTree`` at one or more distance
  thresholds; each resulting subtree is one cluster.
- nested: number every node of any grouping in depth-first pre-order and
  give each observation the ids on the way from the root to its leaf
  cluster.

Cluster ids start at 1 and follow visit order. Paths are ordered
coarsest first, so the innermost cluster is always ``path[-1]``.
"""

from typing import Dict, Iterable, List, Tuple

import networkx as nx

from ..errors import EmptyCluster, InvalidInput
from .tree import (
    AgglomerativeTree,
    Branch,
    ClusterAssignment,
    DendrogramNode,
    HierarchicalGrouping,
    Observation,
    iter_preorder,
)

ROOT_CLUSTER = 1


def cut_tree(tree: AgglomerativeTree, threshold: float) -> List[DendrogramNode]:
    """Cut every branch whose distance exceeds ``threshold``.

    Cutting is top-down: a branch at or below the threshold is kept whole
    even if a descendant merged at a larger distance.

    Returns
    -------
    List[DendrogramNode]
        Retained subtrees, left to right
    """
    subtrees = []
    stack = [tree.root]
    while stack:
        node = stack.pop()
        if isinstance(node, Branch) and node.distance > threshold:
            stack.append(node.right)
            stack.append(node.left)
        else:
            subtrees.append(node)
    return subtrees


def flatten_at_cuts(
    tree: AgglomerativeTree,
    thresholds: Iterable[float],
) -> List[ClusterAssignment]:
    """Assign clusters at several cut thresholds at once.

    Thresholds are applied largest (coarsest) first and ids keep counting
    across levels, so each observation ends up with one id per distinct
    threshold.

    Parameters
    ----------
    tree : AgglomerativeTree
        Dendrogram to flatten
    thresholds : Iterable[float]
        Cut thresholds; duplicates are collapsed

    Returns
    -------
    List[ClusterAssignment]
        One assignment per observation, in leaf order
    """
    levels = sorted(set(float(t) for t in thresholds), reverse=True)
    if not levels:
        raise InvalidInput("At least one cut threshold is required")

    paths: Dict[int, List[int]] = {}
    next_id = ROOT_CLUSTER
    for threshold in levels:
        for subtree in cut_tree(tree, threshold):
            for node in iter_preorder(tree, subtree):
                for obs in tree.members(node):
                    paths.setdefault(obs.row, []).append(next_id)
            next_id += 1

    return [
        ClusterAssignment(observation=obs, path=tuple(paths[obs.row]))
        for obs in tree.observations()
    ]


def flatten_at_cut(tree: AgglomerativeTree, threshold: float) -> List[ClusterAssignment]:
    """Assign one cluster per subtree left after cutting at ``threshold``."""
    return flatten_at_cuts(tree, [threshold])


class ClusterGraph:
    """Directed tree of clusters, edges pointing from parent to child.

    Node ids are cluster ids in pre-order (root = 1). Leaf nodes carry the
    observations in their ``items`` attribute.
    """

    def __init__(self, graph: nx.DiGraph, root: int = ROOT_CLUSTER):
        self.graph = graph
        self.root = root

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def leaves(self) -> List[int]:
        """Leaf cluster ids in ascending (left-to-right) order."""
        return sorted(n for n in self.graph.nodes if self.graph.out_degree(n) == 0)

    def children(self, cluster: int) -> List[int]:
        return list(self.graph.successors(cluster))

    def parent(self, cluster: int):
        parents = list(self.graph.predecessors(cluster))
        return parents[0] if parents else None

    def path_to(self, cluster: int) -> Tuple[int, ...]:
        """Cluster ids from the root down to ``cluster``."""
        path = [cluster]
        parent = self.parent(cluster)
        while parent is not None:
            path.append(parent)
            parent = self.parent(parent)
        return tuple(reversed(path))

    def items(self, cluster: int) -> Tuple[Observation, ...]:
        """Observations under ``cluster`` (union over its descendants)."""
        if self.graph.out_degree(cluster) == 0:
            return self.graph.nodes[cluster]["items"]
        leaves = sorted(
            n for n in nx.descendants(self.graph, cluster) if self.graph.out_degree(n) == 0
        )
        return tuple(obs for leaf in leaves for obs in self.graph.nodes[leaf]["items"])

    def leaves_with_paths(self) -> List[Tuple[Tuple[int, ...], Tuple[Observation, ...]]]:
        """(path, items) for every leaf cluster."""
        return [(self.path_to(leaf), self.graph.nodes[leaf]["items"]) for leaf in self.leaves()]


def to_cluster_graph(grouping: HierarchicalGrouping) -> ClusterGraph:
    """Number the nodes of a grouping and return them as a ``ClusterGraph``.

    Raises
    ------
    EmptyCluster
        If a leaf of the grouping holds no observations
    """
    graph = nx.DiGraph()
    next_id = ROOT_CLUSTER
    stack = [(grouping.root, None)]
    while stack:
        node, parent = stack.pop()
        cluster = next_id
        next_id += 1

        attrs = {}
        if not grouping.children(node):
            items = tuple(grouping.members(node))
            if not items:
                raise EmptyCluster(cluster)
            attrs["items"] = items
        if isinstance(node, Branch):
            attrs["distance"] = node.distance
        elif getattr(node, "modularity", None) is not None:
            attrs["modularity"] = node.modularity
        graph.add_node(cluster, **attrs)
        if parent is not None:
            graph.add_edge(parent, cluster)

        for child in reversed(grouping.children(node)):
            stack.append((child, cluster))
    return ClusterGraph(graph)


def flatten_nested(grouping: HierarchicalGrouping) -> List[ClusterAssignment]:
    """Give every observation the cluster path from the root to its leaf cluster."""
    return graph_to_assignments(to_cluster_graph(grouping))


def graph_to_assignments(graph: ClusterGraph) -> List[ClusterAssignment]:
    return [
        ClusterAssignment(observation=obs, path=path)
        for path, items in graph.leaves_with_paths()
        for obs in items
    ]

