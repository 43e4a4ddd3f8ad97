"""
Directory snapshots for detecting downloaded files

yt-dlp does not reliably report which files it wrote (playlist entries can
be skipped, titles are sanitized, extensions change after conversion). The
downloader therefore lists matching files before and after running it and
treats the difference as the set of new files. Files that existed before a
run are never part of the difference, so they are never retagged.
"""

import os
from typing import FrozenSet, List, Union

from ..utils.helpers import normalize_extension


FileSet = FrozenSet[str]


def _raise_walk_error(error: OSError) -> None:
    raise error


def snapshot_files(directory: Union[str, os.PathLike], extension: str) -> FileSet:
    """
    Collect files below ``directory`` that have the given extension

    Args:
        directory: Root directory to scan recursively
        extension: Target extension, with or without leading dot; matched
                   case-insensitively. An empty extension matches nothing.

    Returns:
        Paths of matching regular files, relative to ``directory``

    Raises:
        FileNotFoundError: If ``directory`` does not exist
        NotADirectoryError: If ``directory`` is not a directory
        OSError: If part of the tree cannot be read
    """
    root = os.fspath(directory)
    if not os.path.exists(root):
        raise FileNotFoundError(f"Directory not found: {root}")
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Not a directory: {root}")

    target = normalize_extension(extension)
    if not target:
        return frozenset()

    files = set()
    for current, _dirs, names in os.walk(root, onerror=_raise_walk_error):
        for name in names:
            if os.path.splitext(name)[1].lower() != target:
                continue
            path = os.path.join(current, name)
            if not os.path.isfile(path):
                continue
            files.add(os.path.relpath(path, root))

    return frozenset(files)


def diff_files(before: FileSet, after: FileSet) -> List[str]:
    """
    Return the paths present in ``after`` but not in ``before``, sorted

    Args:
        before: Snapshot taken before the external operation
        after: Snapshot taken after the external operation

    Returns:
        Sorted list of new relative paths
    """
    return sorted(set(after) - set(before))
