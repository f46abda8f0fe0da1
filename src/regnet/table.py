"""Node property tables and dense matrix output."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Union

import numpy as np
import pandas as pd

from regnet.errors import AnalysisError
from regnet.io_utils import with_compression

if TYPE_CHECKING:
    from regnet.analyzers.base import MatrixResult

logger = logging.getLogger(__name__)

NA_REP = "NA"
TABLE_DELIMITER = "\t"


class PropertyTable:
    """Ordered ``(name, vector)`` columns aligned with the node ids of one graph."""

    def __init__(self, node_ids: Sequence[str]) -> None:
        self.node_ids = tuple(node_ids)
        self.columns: list[tuple[str, np.ndarray]] = []

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.columns]

    @property
    def is_empty(self) -> bool:
        return not self.columns

    def add(self, name: str, values: Sequence[float]) -> None:
        vector = np.asarray(values)
        if vector.ndim != 1 or len(vector) != len(self.node_ids):
            raise AnalysisError(
                f"Node property {name!r} has {len(vector)} values for "
                f"{len(self.node_ids)} nodes; number of nodes in analyzer not "
                "consistent with network."
            )
        if name in self.names:
            raise AnalysisError(f"Duplicate node property: {name!r}.")
        self.columns.append((name, vector))

    def extend(self, columns: Iterable[tuple[str, Sequence[float]]]) -> None:
        for name, values in columns:
            self.add(name, values)

    def column(self, name: str) -> np.ndarray:
        for column_name, values in self.columns:
            if column_name == name:
                return values
        raise KeyError(f"Unknown node property: {name!r}.")

    def validate(self) -> None:
        for name, values in self.columns:
            if len(values) != len(self.node_ids):
                raise AnalysisError(
                    f"Node property {name!r} has {len(values)} values for "
                    f"{len(self.node_ids)} nodes."
                )

    def to_frame(self) -> pd.DataFrame:
        self.validate()
        frame = pd.DataFrame(
            {name: values for name, values in self.columns},
            index=pd.Index(self.node_ids, dtype=object),
        )
        return frame[self.names]


def write_property_table(
    table: PropertyTable,
    path: Union[str, Path],
    *,
    compress: bool = False,
) -> Path:
    """Header row of property names, then one row per node with the id first."""
    frame = table.to_frame()
    path = with_compression(path, compress)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(
        path,
        sep=TABLE_DELIMITER,
        na_rep=NA_REP,
        index=True,
        index_label="",
        lineterminator="\n",
    )
    logger.info("Wrote %d node properties for %d nodes to %s", len(table), len(table.node_ids), path)
    return path


def read_property_table(path: Union[str, Path]) -> PropertyTable:
    """Parse a table written by :func:`write_property_table`.

    Only property values are checked for the ``NA`` marker; node ids are
    kept verbatim.
    """
    frame = pd.read_csv(
        path,
        sep=TABLE_DELIMITER,
        index_col=0,
        dtype=str,
        keep_default_na=False,
    )
    table = PropertyTable([str(node_id) for node_id in frame.index])
    for name in frame.columns:
        values = frame[name].mask(frame[name] == NA_REP)
        table.add(str(name), pd.to_numeric(values).to_numpy())
    return table


def write_matrix(
    matrix: "MatrixResult",
    path: Union[str, Path],
    *,
    compress: bool = False,
) -> Path:
    """Dense row-major matrix with node ids as row and column labels."""
    frame = pd.DataFrame(
        matrix.values,
        index=pd.Index(matrix.row_ids, dtype=object),
        columns=list(matrix.col_ids),
    )
    path = with_compression(path, compress)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(
        path,
        sep=TABLE_DELIMITER,
        na_rep=NA_REP,
        index=True,
        index_label="",
        lineterminator="\n",
    )
    return path


__all__ = [
    "NA_REP",
    "PropertyTable",
    "read_property_table",
    "write_matrix",
    "write_property_table",
]
