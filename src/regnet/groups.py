"""Partition network files into named groups."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from regnet.io_utils import DEFAULT_DELIMITER, DelimitedReader, list_files

logger = logging.getLogger(__name__)

DEFAULT_GROUP_NAME = "_networkUnion"
DEFAULT_FILE_SUFFIX = ".txt.gz"

_STRIPPED_CHARS = "()'\","


def normalize_group_name(label: str) -> str:
    """Filesystem-safe group name: spaces to underscores, no brackets, quotes or commas."""
    name = label.strip().replace(" ", "_")
    for char in _STRIPPED_CHARS:
        name = name.replace(char, "")
    return name.lower()


def resolve_network_groups(
    network_dir: Union[str, Path],
    group_file: Optional[Union[str, Path]] = None,
    *,
    file_prefix: str = "",
    file_suffix: str = DEFAULT_FILE_SUFFIX,
    delimiter: str = DEFAULT_DELIMITER,
) -> dict[str, list[str]]:
    """Map group name -> network filenames, in order of first appearance.

    Without ``group_file`` every file of ``network_dir`` goes into one group
    named ``_networkUnion``. Otherwise each row of ``group_file`` (file stem,
    group label) adds ``file_prefix + stem + file_suffix`` to the group named
    after the normalized label.
    """
    if not group_file:
        filenames = list_files(network_dir)
        logger.info("- %d files in network directory", len(filenames))
        return {DEFAULT_GROUP_NAME: filenames}

    groups: dict[str, list[str]] = {}
    owner: dict[str, str] = {}
    reader = DelimitedReader(group_file, delimiter=delimiter)
    for fields in reader:
        if len(fields) != 2:
            reader.error(f"Expected two columns, found {len(fields)}")
        stem, label = fields
        if not stem:
            reader.error("Empty network file identifier")
        name = normalize_group_name(label)
        if not name:
            reader.error(f"Group label is empty after normalization: {label!r}")
        filename = f"{file_prefix}{stem}{file_suffix}"
        previous = owner.get(filename)
        if previous == name:
            reader.error(f"File listed multiple times for the same set: {filename}")
        if previous is not None:
            reader.error(f"File {filename} listed for sets {previous!r} and {name!r}")
        owner[filename] = name
        groups.setdefault(name, []).append(filename)
    logger.info("- Initialized %d network sets", len(groups))
    return groups


__all__ = [
    "DEFAULT_FILE_SUFFIX",
    "DEFAULT_GROUP_NAME",
    "normalize_group_name",
    "resolve_network_groups",
]
