"""
Helpers over a pyarrow filesystem handle, shared by the coordinator, the
distributed cache and the docno mappings.
"""

import os
import logging
from typing import List

from pyarrow import fs
from pyarrow.fs import FileSelector, FileType

logger = logging.getLogger(__name__)


def get_local() -> fs.FileSystem:
    return fs.LocalFileSystem()


def _path(filesystem: fs.FileSystem, path: str) -> str:
    # LocalFileSystem only takes absolute paths
    if isinstance(filesystem, fs.LocalFileSystem):
        return os.path.abspath(path)
    return path


def exists(filesystem: fs.FileSystem, path: str) -> bool:
    return filesystem.get_file_info(_path(filesystem, path)).type != FileType.NotFound


def mkdirs(filesystem: fs.FileSystem, path: str) -> None:
    filesystem.create_dir(_path(filesystem, path), recursive=True)


def ensure_parent_dir(filesystem: fs.FileSystem, path: str) -> None:
    parent = os.path.dirname(_path(filesystem, path))
    if parent:
        filesystem.create_dir(parent, recursive=True)


def open_input(filesystem: fs.FileSystem, path: str):
    """Open a file for binary reading; .gz files are decompressed."""
    return filesystem.open_input_stream(_path(filesystem, path))


def open_output(filesystem: fs.FileSystem, path: str, compression=None):
    """Create (or truncate) a file for binary writing, making parent directories."""
    ensure_parent_dir(filesystem, path)
    return filesystem.open_output_stream(_path(filesystem, path), compression=compression)


def delete(filesystem: fs.FileSystem, path: str) -> bool:
    """
    Delete a file, or a directory with everything under it.

    Returns:
        True if something was deleted, False if the path did not exist
    """
    info = filesystem.get_file_info(_path(filesystem, path))
    if info.type == FileType.NotFound:
        return False
    if info.type == FileType.Directory:
        filesystem.delete_dir(info.path)
    else:
        filesystem.delete_file(info.path)
    logger.info(f"Deleted {path}")
    return True


def list_files(filesystem: fs.FileSystem, path: str) -> List[str]:
    """List regular files directly under a directory, sorted by name."""
    info = filesystem.get_file_info(_path(filesystem, path))
    if info.type != FileType.Directory:
        return []
    infos = filesystem.get_file_info(FileSelector(info.path, recursive=False))
    return sorted(i.path for i in infos if i.type == FileType.File)


def copy(filesystem: fs.FileSystem, src: str, dst: str) -> str:
    ensure_parent_dir(filesystem, dst)
    filesystem.copy_file(_path(filesystem, src), _path(filesystem, dst))
    return dst
