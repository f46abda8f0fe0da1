"""Tanimoto (Jaccard) similarity of neighbor sets.

In a directed network the source set holds the regulators (nodes with
out-going edges), compared by the sets of targets they regulate; the target
set holds the regulated nodes, compared by the sets of their regulators. In
an undirected network every node is compared by its adjacent nodes.
"""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from regnet.analyzers.base import (
    Analyzer,
    AnalyzerKind,
    AnalyzerResult,
    MatrixResult,
    off_diagonal_mean,
)
from regnet.graph import Graph


def tanimoto_matrix(membership: sp.spmatrix) -> np.ndarray:
    """Pairwise |A∩B| / |A∪B| between the rows of a 0/1 matrix (0 for two empty rows)."""
    membership = sp.csr_matrix(membership, dtype=float)
    intersection = np.asarray((membership @ membership.T).todense(), dtype=float)
    sizes = np.asarray(membership.sum(axis=1), dtype=float).ravel()
    union = sizes[:, None] + sizes[None, :] - intersection
    similarity = np.zeros_like(intersection)
    np.divide(intersection, union, out=similarity, where=union > 0)
    return similarity


class TanimotoAnalyzer(Analyzer):
    """Similarity between source (TF) or target neighbor sets."""

    kind = AnalyzerKind.TANIMOTO

    def __init__(
        self,
        *,
        targets: bool = False,
        export_node_properties: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.targets = bool(targets)
        self.export_node_properties = export_node_properties

    @property
    def label(self) -> str:
        return "target_tanimoto" if self.targets else "tf_tanimoto"

    @property
    def matrix_label(self) -> str:
        return "targetTanimoto" if self.targets else "tfTanimoto"

    def _members(self, graph: Graph, adjacency: sp.csr_matrix) -> tuple[np.ndarray, sp.csr_matrix]:
        if not graph.is_directed:
            return np.arange(graph.node_count()), adjacency
        if self.targets:
            neighbor_sets = adjacency.T.tocsr()
        else:
            neighbor_sets = adjacency
        degrees = np.diff(neighbor_sets.indptr)
        members = np.flatnonzero(degrees > 0)
        return members, neighbor_sets[members]

    def compute(self, graph: Graph) -> AnalyzerResult:
        adjacency = graph.adjacency_matrix(sparse=True, weighted=False)
        members, neighbor_sets = self._members(graph, adjacency)
        similarity = tanimoto_matrix(neighbor_sets)
        self.logger.debug("%s: %d nodes in set of %s", self.label, len(members), graph.name)

        result = AnalyzerResult(self.kind)
        if self.export_node_properties:
            row_means = np.full(graph.node_count(), np.nan, dtype=float)
            if len(members) > 1:
                off_diagonal = similarity.sum(axis=1) - np.diag(similarity)
                row_means[members] = off_diagonal / (len(members) - 1)
            result.add_node_property(self.label, row_means)
        result.add_network_mean(self.label, off_diagonal_mean(similarity))
        member_ids = tuple(graph.node_id(int(index)) for index in members)
        result.matrix = MatrixResult(
            name=self.matrix_label,
            row_ids=member_ids,
            col_ids=member_ids,
            values=similarity,
        )
        return result


__all__ = ["TanimotoAnalyzer", "tanimoto_matrix"]
