"""Degree, clustering coefficient and betweenness centrality."""

from __future__ import annotations

import networkx as nx
import numpy as np

from regnet.analyzers.base import (
    Analyzer,
    AnalyzerKind,
    AnalyzerResult,
    nan_mean,
    require_nonnegative_weights,
)
from regnet.graph import Graph


class DegreeAnalyzer(Analyzer):
    """Node degree; out/in degree for directed graphs, plus strength if weighted.

    A self-loop adds 2 to the degree of an undirected node, so the degree sum
    of an undirected graph is twice its number of edges.
    """

    kind = AnalyzerKind.DEGREE

    def compute(self, graph: Graph) -> AnalyzerResult:
        size = graph.node_count()
        out_degree = np.zeros(size, dtype=np.int64)
        in_degree = np.zeros(size, dtype=np.int64)
        out_strength = np.zeros(size, dtype=float)
        in_strength = np.zeros(size, dtype=float)
        for edge in graph.edges:
            out_degree[edge.source] += 1
            in_degree[edge.target] += 1
            out_strength[edge.source] += edge.weight
            in_strength[edge.target] += edge.weight

        result = AnalyzerResult(self.kind)
        if graph.is_directed:
            columns = [("out_degree", out_degree), ("in_degree", in_degree)]
            if graph.is_weighted:
                columns += [("out_strength", out_strength), ("in_strength", in_strength)]
        else:
            columns = [("degree", out_degree + in_degree)]
            if graph.is_weighted:
                columns.append(("strength", out_strength + in_strength))
        for name, values in columns:
            result.add_node_property(name, values)
            result.add_network_mean(name, nan_mean(values))
        return result


class ClusteringCoefficientAnalyzer(Analyzer):
    """Fraction of closed triangles among the neighbor pairs of each node.

    Always computed on the undirected, unweighted view of the graph: edge
    direction and weights are ignored. Nodes with fewer than two neighbors
    have coefficient 0.
    """

    kind = AnalyzerKind.CLUSTERING

    def compute(self, graph: Graph) -> AnalyzerResult:
        if graph.is_directed or graph.is_weighted:
            self.logger.info(
                "Clustering coefficient of %s computed on the undirected, unweighted network.",
                graph.name,
            )
        view = graph.to_networkx(directed=False, weighted=False)
        view.remove_edges_from(list(nx.selfloop_edges(view)))
        scores = nx.clustering(view)
        values = np.array(
            [float(scores.get(index, 0.0)) for index in range(graph.node_count())],
            dtype=float,
        )
        result = AnalyzerResult(self.kind)
        result.add_node_property("clustering_coefficient", values)
        result.add_network_mean("clustering_coefficient", nan_mean(values))
        return result


class BetweennessAnalyzer(Analyzer):
    """Normalized shortest-path betweenness centrality (Brandes).

    Unweighted graphs use breadth-first search; weighted graphs use the edge
    weight as edge length (Dijkstra).
    """

    kind = AnalyzerKind.BETWEENNESS

    def compute(self, graph: Graph) -> AnalyzerResult:
        require_nonnegative_weights(graph, self.label)
        view = graph.to_networkx()
        scores = nx.betweenness_centrality(
            view,
            normalized=True,
            weight="weight" if graph.is_weighted else None,
        )
        values = np.array(
            [float(scores.get(index, 0.0)) for index in range(graph.node_count())],
            dtype=float,
        )
        result = AnalyzerResult(self.kind)
        result.add_node_property("betweenness", values)
        result.add_network_mean("betweenness", nan_mean(values))
        return result


__all__ = [
    "BetweennessAnalyzer",
    "ClusteringCoefficientAnalyzer",
    "DegreeAnalyzer",
]
