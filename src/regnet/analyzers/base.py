"""Analyzer kinds, result containers and the shared analyzer interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from regnet.errors import AnalysisError
from regnet.graph import Graph
from regnet.table import write_matrix


class AnalyzerKind(str, Enum):
    DEGREE = "degree"
    BETWEENNESS = "betweenness"
    CLUSTERING = "clustering"
    SHORTEST_PATH = "shortest_path"
    PSTEP_KERNEL = "pstep_kernel"
    TANIMOTO = "tanimoto"


@dataclass(frozen=True)
class MatrixResult:
    """Dense matrix with node ids as row and column labels."""

    name: str
    row_ids: tuple[str, ...]
    col_ids: tuple[str, ...]
    values: np.ndarray

    def __post_init__(self) -> None:
        if self.values.shape != (len(self.row_ids), len(self.col_ids)):
            raise AnalysisError(
                f"Matrix {self.name!r} has shape {self.values.shape}, expected "
                f"({len(self.row_ids)}, {len(self.col_ids)})."
            )


@dataclass
class AnalyzerResult:
    kind: AnalyzerKind
    node_properties: list[tuple[str, np.ndarray]] = field(default_factory=list)
    network_means: list[tuple[str, float]] = field(default_factory=list)
    matrix: Optional[MatrixResult] = None

    def add_node_property(self, name: str, values: np.ndarray) -> None:
        self.node_properties.append((name, np.asarray(values)))

    def add_network_mean(self, name: str, value: float) -> None:
        self.network_means.append((name, float(value)))


def nan_mean(values: np.ndarray) -> float:
    """Mean of the finite entries, NaN if there are none."""
    values = np.asarray(values, dtype=float)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return float("nan")
    return float(finite.mean())


def require_nonnegative_weights(graph: Graph, label: str) -> None:
    """Raise AnalysisError if a weighted graph has an edge weight below zero.

    Weights are used as edge lengths by the path-based analyzers.
    """
    if not graph.is_weighted:
        return
    for edge in graph.edges:
        if edge.weight < 0.0:
            raise AnalysisError(
                f"Cannot compute {label} of {graph.name}: negative edge weight "
                f"{edge.weight!r} on {graph.node_id(edge.source)} -> "
                f"{graph.node_id(edge.target)}.",
                context={"analyzer": label, "network": graph.name},
            )


def off_diagonal_mean(matrix: np.ndarray) -> float:
    size = matrix.shape[0]
    if size < 2 or matrix.shape[1] != size:
        return float("nan")
    mask = ~np.eye(size, dtype=bool)
    return float(matrix[mask].mean())


class Analyzer:
    """Base class: compute node-level and network-level properties of a graph."""

    kind: AnalyzerKind
    #: Prefix of the supplemental matrix file, e.g. ``pstepKernel``.
    matrix_label: Optional[str] = None

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(f"regnet.analyzers.{self.kind.value}")

    @property
    def label(self) -> str:
        return self.kind.value

    def run(self, graph: Graph) -> AnalyzerResult:
        if graph.node_count() == 0:
            raise AnalysisError(
                f"Cannot compute {self.label} of an empty network ({graph.name}).",
                context={"analyzer": self.label, "network": graph.name},
            )
        result = self.compute(graph)
        for name, values in result.node_properties:
            if len(values) != graph.node_count():
                raise AnalysisError(
                    f"{self.label}: node property {name!r} has {len(values)} values "
                    f"for {graph.node_count()} nodes."
                )
        return result

    def compute(self, graph: Graph) -> AnalyzerResult:
        raise NotImplementedError("Analyzer implementations must override compute().")

    def write_supplemental_output(
        self,
        result: AnalyzerResult,
        base_filename: Union[str, Path],
        *,
        compress: bool = False,
    ) -> Optional[Path]:
        """Write the result matrix to ``<base_filename>_<matrix_label>.txt``."""
        if result.matrix is None or self.matrix_label is None:
            return None
        path = Path(f"{base_filename}_{self.matrix_label}.txt")
        written = write_matrix(result.matrix, path, compress=compress)
        self.logger.info("Wrote %s", written)
        return written


__all__ = [
    "Analyzer",
    "AnalyzerKind",
    "AnalyzerResult",
    "MatrixResult",
    "nan_mean",
    "off_diagonal_mean",
    "require_nonnegative_weights",
]
