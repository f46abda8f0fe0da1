"""Immutable network model and edge-list I/O."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
import math
from pathlib import Path
from typing import Any, Optional, Union

import networkx as nx
import numpy as np
import scipy.sparse as sp

from regnet.config import Settings
from regnet.errors import FormatError
from regnet.io_utils import DEFAULT_DELIMITER, DelimitedReader, open_text, with_compression

logger = logging.getLogger(__name__)

DUPLICATES_ERROR = "error"
DUPLICATES_MAX = "max"


@dataclass(frozen=True)
class Node:
    index: int
    id: str


@dataclass(frozen=True)
class Edge:
    source: int
    target: int
    weight: float = 1.0


class Graph:
    """Node/edge store with dense node indices 0..N-1.

    Built once (see :class:`GraphBuilder` and :func:`read_graph`) and never
    mutated afterwards, so analyzers can share one instance.
    """

    def __init__(
        self,
        node_ids: Sequence[str],
        edges: Sequence[Edge],
        *,
        directed: bool,
        weighted: bool,
        filename: Optional[str] = None,
    ) -> None:
        self._ids = tuple(str(node_id) for node_id in node_ids)
        self._index = {node_id: idx for idx, node_id in enumerate(self._ids)}
        if len(self._index) != len(self._ids):
            raise FormatError("Node ids must be unique.")
        self._directed = bool(directed)
        self._weighted = bool(weighted)
        self.filename = filename

        size = len(self._ids)
        succ: list[dict[int, float]] = [{} for _ in range(size)]
        pred: list[dict[int, float]] = [{} for _ in range(size)]
        for edge in edges:
            if not (0 <= edge.source < size and 0 <= edge.target < size):
                raise FormatError(
                    f"Edge ({edge.source}, {edge.target}) references an undefined node index."
                )
            weight = float(edge.weight) if self._weighted else 1.0
            if edge.target in succ[edge.source] or (
                not self._directed and edge.source in succ[edge.target]
            ):
                raise FormatError(
                    f"Duplicate edge: {self._ids[edge.source]} -> {self._ids[edge.target]}"
                )
            succ[edge.source][edge.target] = weight
            pred[edge.target][edge.source] = weight
            if not self._directed:
                succ[edge.target][edge.source] = weight
                pred[edge.source][edge.target] = weight
        self._edges = tuple(
            Edge(edge.source, edge.target, float(edge.weight) if self._weighted else 1.0)
            for edge in edges
        )
        self._succ = tuple(succ)
        self._pred = tuple(pred)

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Sequence[Any]],
        *,
        nodes: Optional[Iterable[str]] = None,
        directed: bool = True,
        weighted: bool = False,
        filename: Optional[str] = None,
    ) -> "Graph":
        return graph_from_edges(
            edges,
            nodes=nodes,
            directed=directed,
            weighted=weighted,
            filename=filename,
        )

    def __repr__(self) -> str:
        kind = "directed" if self._directed else "undirected"
        weight = "weighted" if self._weighted else "unweighted"
        return (
            f"Graph({self.name!r}, {kind}, {weight}, "
            f"nodes={self.node_count()}, edges={self.edge_count()})"
        )

    @property
    def name(self) -> str:
        if self.filename:
            return Path(self.filename).name
        return "<memory>"

    @property
    def is_directed(self) -> bool:
        return self._directed

    @property
    def is_weighted(self) -> bool:
        return self._weighted

    @property
    def node_ids(self) -> tuple[str, ...]:
        return self._ids

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(Node(idx, node_id) for idx, node_id in enumerate(self._ids))

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    def node_count(self) -> int:
        return len(self._ids)

    def edge_count(self) -> int:
        return len(self._edges)

    def node_id(self, index: int) -> str:
        return self._ids[index]

    def node_index(self, node_id: str) -> int:
        return self._index[node_id]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def neighbors(self, index: int) -> list[int]:
        """Successors for directed graphs, all adjacent nodes otherwise."""
        return list(self._succ[index])

    def predecessors(self, index: int) -> list[int]:
        return list(self._pred[index])

    def edge_weight(self, source: int, target: int) -> Optional[float]:
        """Weight of the edge, 1.0 if unweighted, None if there is no edge."""
        return self._succ[source].get(target)

    def adjacency_matrix(self, *, sparse: bool = False, weighted: Optional[bool] = None) -> Any:
        """Adjacency matrix A[i, j] = weight of edge i -> j (symmetric if undirected)."""
        use_weights = self._weighted if weighted is None else (weighted and self._weighted)
        size = self.node_count()
        rows: list[int] = []
        cols: list[int] = []
        values: list[float] = []
        for edge in self._edges:
            value = edge.weight if use_weights else 1.0
            rows.append(edge.source)
            cols.append(edge.target)
            values.append(value)
            if not self._directed and edge.source != edge.target:
                rows.append(edge.target)
                cols.append(edge.source)
                values.append(value)
        matrix = sp.csr_matrix((values, (rows, cols)), shape=(size, size), dtype=float)
        if sparse:
            return matrix
        return matrix.toarray()

    def to_networkx(
        self,
        *,
        directed: Optional[bool] = None,
        weighted: Optional[bool] = None,
    ) -> nx.Graph:
        """networkx view with node indices as node keys."""
        directed = self._directed if directed is None else directed
        use_weights = self._weighted if weighted is None else (weighted and self._weighted)
        graph = nx.DiGraph() if directed else nx.Graph()
        graph.add_nodes_from(range(self.node_count()))
        for edge in self._edges:
            if use_weights:
                graph.add_edge(edge.source, edge.target, weight=edge.weight)
            else:
                graph.add_edge(edge.source, edge.target)
        return graph


class GraphBuilder:
    """Accumulate nodes and edges, then freeze them into a :class:`Graph`.

    ``duplicates`` selects what happens when the same edge is added twice:
    ``"error"`` raises FormatError, ``"max"`` keeps one edge with the maximum
    weight (presence only for unweighted graphs).
    """

    def __init__(
        self,
        *,
        directed: bool,
        weighted: bool,
        nodes: Optional[Iterable[str]] = None,
        duplicates: str = DUPLICATES_ERROR,
    ) -> None:
        if duplicates not in {DUPLICATES_ERROR, DUPLICATES_MAX}:
            raise ValueError(f"Unknown duplicate edge policy: {duplicates!r}.")
        self.directed = directed
        self.weighted = weighted
        self.duplicates = duplicates
        self._ids: list[str] = []
        self._index: dict[str, int] = {}
        self._edge_pos: dict[tuple[int, int], int] = {}
        self._edges: list[Edge] = []
        self._fixed_nodes = nodes is not None
        for node_id in nodes or ():
            if node_id in self._index:
                raise FormatError(f"Node listed multiple times: {node_id}")
            self._append_node(node_id)

    def _append_node(self, node_id: str) -> int:
        index = len(self._ids)
        self._ids.append(node_id)
        self._index[node_id] = index
        return index

    def add_node(self, node_id: str) -> int:
        index = self._index.get(node_id)
        if index is not None:
            return index
        if self._fixed_nodes:
            raise FormatError(f"Edge references undefined node: {node_id}")
        return self._append_node(node_id)

    def _edge_key(self, source: int, target: int) -> tuple[int, int]:
        if self.directed:
            return source, target
        return (source, target) if source <= target else (target, source)

    def add_edge(self, source: str, target: str, weight: float = 1.0) -> None:
        src = self.add_node(source)
        tgt = self.add_node(target)
        weight = float(weight) if self.weighted else 1.0
        key = self._edge_key(src, tgt)
        position = self._edge_pos.get(key)
        if position is None:
            self._edge_pos[key] = len(self._edges)
            self._edges.append(Edge(src, tgt, weight))
            return
        if self.duplicates == DUPLICATES_ERROR:
            raise FormatError(f"Duplicate edge: {source} -> {target}")
        existing = self._edges[position]
        if weight > existing.weight:
            self._edges[position] = Edge(existing.source, existing.target, weight)

    def build(self, filename: Optional[str] = None) -> Graph:
        return Graph(
            self._ids,
            self._edges,
            directed=self.directed,
            weighted=self.weighted,
            filename=filename,
        )


def graph_from_edges(
    edges: Iterable[Sequence[Any]],
    *,
    nodes: Optional[Iterable[str]] = None,
    directed: bool = True,
    weighted: bool = False,
    filename: Optional[str] = None,
) -> Graph:
    """Build a graph from ``(source, target[, weight])`` tuples."""
    builder = GraphBuilder(directed=directed, weighted=weighted, nodes=nodes)
    for edge in edges:
        if len(edge) == 3:
            builder.add_edge(str(edge[0]), str(edge[1]), float(edge[2]))
        elif len(edge) == 2:
            if weighted:
                raise FormatError(f"Weighted edge needs three values: {tuple(edge)!r}")
            builder.add_edge(str(edge[0]), str(edge[1]))
        else:
            raise FormatError(f"Edge must have two or three values: {tuple(edge)!r}")
    return builder.build(filename)


def read_node_file(
    path: Union[str, Path],
    *,
    delimiter: str = DEFAULT_DELIMITER,
) -> list[str]:
    """Node ids from the first column of ``path``, in file order."""
    reader = DelimitedReader(path, delimiter=delimiter)
    node_ids: list[str] = []
    seen: set[str] = set()
    for fields in reader:
        node_id = fields[0]
        if node_id in seen:
            reader.error(f"Node listed multiple times: {node_id}")
        seen.add(node_id)
        node_ids.append(node_id)
    return node_ids


def _parse_weight(reader: DelimitedReader, raw: str) -> float:
    try:
        weight = float(raw)
    except ValueError:
        reader.error(f"Edge weight is not a number: {raw!r}")
    if not math.isfinite(weight):
        reader.error(f"Edge weight must be finite: {raw!r}")
    return weight


def read_graph(
    path: Union[str, Path],
    *,
    directed: bool,
    weighted: bool,
    delimiter: str = DEFAULT_DELIMITER,
    node_file: Optional[Union[str, Path]] = None,
) -> Graph:
    """Parse an edge list (``source<TAB>target[<TAB>weight]`` per line).

    Weighted graphs need exactly three columns. Unweighted graphs take two
    columns, or three with the weight column ignored.
    """
    nodes = read_node_file(node_file, delimiter=delimiter) if node_file else None
    builder = GraphBuilder(directed=directed, weighted=weighted, nodes=nodes)
    reader = DelimitedReader(path, delimiter=delimiter)
    for fields in reader:
        if weighted and len(fields) != 3:
            reader.error(f"Expected 3 columns (source, target, weight), found {len(fields)}")
        if not weighted and len(fields) not in (2, 3):
            reader.error(f"Expected 2 columns (source, target), found {len(fields)}")
        if not fields[0] or not fields[1]:
            reader.error("Empty node id")
        weight = _parse_weight(reader, fields[2]) if weighted else 1.0
        try:
            builder.add_edge(fields[0], fields[1], weight)
        except FormatError as exc:
            reader.error(str(exc))
    graph = builder.build(str(path))
    logger.debug("Loaded %r", graph)
    return graph


def load_graph(path: Union[str, Path], settings: Settings) -> Graph:
    return read_graph(
        path,
        directed=settings.is_directed,
        weighted=settings.is_weighted,
        delimiter=settings.delimiter,
        node_file=settings.node_file or None,
    )


def _format_weight(weight: float) -> str:
    return repr(float(weight))


def write_graph(
    graph: Graph,
    path: Union[str, Path],
    *,
    compress: bool = False,
    delimiter: str = DEFAULT_DELIMITER,
) -> Path:
    """Write ``graph`` in the edge-list format read by :func:`read_graph`.

    Only edges are written, so nodes without edges are lost. Use
    :func:`write_node_file` to keep the full node list.
    """
    path = with_compression(path, compress)
    with open_text(path, "w") as handle:
        for edge in graph.edges:
            columns = [graph.node_id(edge.source), graph.node_id(edge.target)]
            if graph.is_weighted:
                columns.append(_format_weight(edge.weight))
            handle.write(delimiter.join(columns) + "\n")
    return path


def write_node_file(
    graph: Graph,
    path: Union[str, Path],
    *,
    compress: bool = False,
) -> Path:
    """One node id per line, in node index order (the format of the node file)."""
    path = with_compression(path, compress)
    with open_text(path, "w") as handle:
        for node_id in graph.node_ids:
            handle.write(node_id + "\n")
    return path


__all__ = [
    "DUPLICATES_ERROR",
    "DUPLICATES_MAX",
    "Edge",
    "Graph",
    "GraphBuilder",
    "Node",
    "graph_from_edges",
    "load_graph",
    "read_graph",
    "read_node_file",
    "write_graph",
    "write_node_file",
]
