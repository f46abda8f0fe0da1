"""All-pairs shortest path lengths."""

from __future__ import annotations

import logging
from typing import Optional

import networkx as nx
import numpy as np

from regnet.analyzers.base import (
    Analyzer,
    AnalyzerKind,
    AnalyzerResult,
    MatrixResult,
    require_nonnegative_weights,
)
from regnet.graph import Graph
from regnet.logging_utils import ProgressMonitor


def shortest_path_lengths(graph: Graph, *, logger: Optional[logging.Logger] = None) -> np.ndarray:
    """Distance matrix D[u, v] following edge direction; NaN where v is unreachable.

    Breadth-first search for unweighted graphs, Dijkstra (weights as lengths,
    which must not be negative) otherwise. Holds one N x N float64 array.
    """
    require_nonnegative_weights(graph, "shortest path lengths")
    size = graph.node_count()
    distances = np.full((size, size), np.nan, dtype=float)
    view = graph.to_networkx()
    monitor = ProgressMonitor(size, label="shortest paths", logger=logger)
    for source in range(size):
        if graph.is_weighted:
            lengths = nx.single_source_dijkstra_path_length(view, source, weight="weight")
        else:
            lengths = nx.single_source_shortest_path_length(view, source)
        for target, length in lengths.items():
            distances[source, target] = float(length)
        distances[source, source] = 0.0
        monitor.iteration(source)
    monitor.done()
    return distances


class ShortestPathAnalyzer(Analyzer):
    """Mean shortest path length per node and over the network.

    Unreachable pairs are excluded from both means; their share of all
    ordered pairs ``u != v`` is reported as ``unreachable_fraction``.
    """

    kind = AnalyzerKind.SHORTEST_PATH
    matrix_label = "shortestPathLengths"

    def __init__(self, *, export_node_properties: bool = True, **kwargs) -> None:
        super().__init__(**kwargs)
        self.export_node_properties = export_node_properties

    def compute(self, graph: Graph) -> AnalyzerResult:
        distances = shortest_path_lengths(graph, logger=self.logger)
        size = graph.node_count()
        off_diagonal = ~np.eye(size, dtype=bool)
        reachable = np.isfinite(distances) & off_diagonal

        totals = np.where(reachable, distances, 0.0).sum(axis=1)
        counts = reachable.sum(axis=1)
        node_means = np.full(size, np.nan, dtype=float)
        np.divide(totals, counts, out=node_means, where=counts > 0)

        pair_count = size * (size - 1)
        reachable_count = int(reachable.sum())
        if reachable_count:
            network_mean = float(distances[reachable].mean())
        else:
            network_mean = float("nan")
        unreachable = (pair_count - reachable_count) / pair_count if pair_count else 0.0

        result = AnalyzerResult(self.kind)
        if self.export_node_properties:
            result.add_node_property("mean_path_length", node_means)
        result.add_network_mean("mean_path_length", network_mean)
        result.add_network_mean("unreachable_fraction", unreachable)
        result.matrix = MatrixResult(
            name=self.matrix_label,
            row_ids=graph.node_ids,
            col_ids=graph.node_ids,
            values=distances,
        )
        return result


__all__ = ["ShortestPathAnalyzer", "shortest_path_lengths"]
