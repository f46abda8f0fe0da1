"""Union of the networks of a group."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import time
from typing import Optional

from regnet.config import Settings
from regnet.errors import ConfigError, RegnetError
from regnet.graph import (
    DUPLICATES_MAX,
    Graph,
    GraphBuilder,
    load_graph,
    write_graph,
    write_node_file,
)
from regnet.groups import resolve_network_groups
from regnet.logging_utils import ProgressMonitor, format_duration
from regnet.pipeline import BatchReport


def union_graphs(graphs: Sequence[Graph], *, filename: Optional[str] = None) -> Graph:
    """Graph with the union of the nodes and edges of ``graphs``.

    Nodes and edges keep their order of first appearance. An edge present in
    several graphs appears once; for weighted graphs it carries the maximum
    observed weight.
    """
    if not graphs:
        raise ConfigError("Cannot compute the union of zero networks.")
    directed = graphs[0].is_directed
    weighted = graphs[0].is_weighted
    for graph in graphs[1:]:
        if graph.is_directed != directed or graph.is_weighted != weighted:
            raise ConfigError(
                f"Cannot merge {graph.name}: all networks must agree on directed/weighted."
            )
    builder = GraphBuilder(directed=directed, weighted=weighted, duplicates=DUPLICATES_MAX)
    for graph in graphs:
        for node_id in graph.node_ids:
            builder.add_node(node_id)
        for edge in graph.edges:
            builder.add_edge(
                graph.node_id(edge.source),
                graph.node_id(edge.target),
                edge.weight,
            )
    return builder.build(filename)


class NetworkMerger:
    """Read the networks of one group from ``settings.network_dir`` and merge them."""

    def __init__(self, settings: Settings, *, logger: Optional[logging.Logger] = None) -> None:
        self.settings = settings
        self.network_dir = Path(settings.network_dir)
        self.logger = logger or logging.getLogger("regnet.merge")

    def merge(self, filenames: Sequence[str], *, name: Optional[str] = None) -> Graph:
        if not filenames:
            raise ConfigError(f"Network set {name!r} has no files.")
        graphs = []
        monitor = ProgressMonitor(len(filenames), label=f"union {name or ''}".strip(), logger=self.logger)
        for index, filename in enumerate(filenames):
            path = self.network_dir / filename
            if not path.is_file():
                raise ConfigError(f"Network file not found: {path}")
            graphs.append(load_graph(path, self.settings))
            monitor.iteration(index)
        monitor.done()
        return union_graphs(graphs, filename=name)

    def output_path(self, name: str) -> Path:
        return self.settings.output_path / f"{self.settings.network_file_prefix}{name}.txt"

    def node_output_path(self, name: str) -> Path:
        return self.settings.output_path / f"{self.settings.network_file_prefix}{name}_nodes.txt"


def run_group_union(
    settings: Settings,
    *,
    logger: Optional[logging.Logger] = None,
) -> BatchReport:
    """Merge every network group and write one union network per group.

    With ``node_file`` set, ``<prefix><group>_nodes.txt`` lists every node of
    the union, including nodes without edges.
    """
    settings.validate_for_union()
    logger = logger or logging.getLogger("regnet.merge")
    groups = resolve_network_groups(
        settings.network_dir,
        settings.network_group_file or None,
        file_prefix=settings.network_file_prefix,
        file_suffix=settings.network_file_suffix,
        delimiter=settings.delimiter,
    )
    merger = NetworkMerger(settings, logger=logger)
    report = BatchReport()
    for name, filenames in groups.items():
        logger.info("- %s (%d networks)", name, len(filenames))
        started = time.perf_counter()
        try:
            union = merger.merge(filenames, name=name)
            path = write_graph(
                union,
                merger.output_path(name),
                compress=settings.compress_files,
                delimiter=settings.delimiter,
            )
            written = [path]
            if settings.node_file:
                written.append(
                    write_node_file(
                        union,
                        merger.node_output_path(name),
                        compress=settings.compress_files,
                    )
                )
        except RegnetError as exc:
            report.record_failure(name, exc, logger)
            continue
        except OSError as exc:
            report.record_failure(name, RegnetError(f"Cannot merge {name}: {exc}"), logger)
            continue
        report.outputs[name] = written
        logger.info(
            "Wrote %s (%d nodes, %d edges) in %s",
            path,
            union.node_count(),
            union.edge_count(),
            format_duration(time.perf_counter() - started),
        )
    return report


__all__ = ["NetworkMerger", "run_group_union", "union_graphs"]
