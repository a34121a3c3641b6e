"""
Distributed cache: side files replicated to the workers before a job starts.
"""

import os
import logging
from typing import List

from pyarrow.fs import FileSystem

from doccount.common import config
from doccount.common.config import JobConf
from doccount.common import filesystem
from doccount.common.filesystem import get_local

logger = logging.getLogger(__name__)


class DistributedCache:
    """Registers cache files on a job and copies them to a node-local directory"""

    def __init__(self, fs: FileSystem = None):
        self.fs = fs or get_local()

    @staticmethod
    def add_cache_file(conf: JobConf, path: str):
        files = conf.get_list(config.CACHE_FILES)
        files.append(path)
        conf.set(config.CACHE_FILES, files)

    @staticmethod
    def get_cache_files(conf: JobConf) -> List[str]:
        return conf.get_list(config.CACHE_FILES)

    def localize(self, conf: JobConf, cache_dir: str) -> List[str]:
        """
        Copy every registered cache file into cache_dir

        Args:
            conf: Job configuration listing the cache files
            cache_dir: Directory shared read-only by the node's workers

        Returns:
            Paths of the local copies

        Raises:
            FileNotFoundError: If a registered file does not exist
            ValueError: If two cache files share a file name
        """
        local_files = []
        seen = set()
        filesystem.mkdirs(self.fs, cache_dir)
        for src in self.get_cache_files(conf):
            if not filesystem.exists(self.fs, src):
                raise FileNotFoundError(f"Cache file not found: {src}")
            name = os.path.basename(src)
            if name in seen:
                raise ValueError(f"Duplicate cache file name: {name}")
            seen.add(name)
            dst = filesystem.copy(self.fs, src, os.path.join(cache_dir, name))
            logger.info(f"Replicated {src} -> {dst}")
            local_files.append(dst)
        return local_files
