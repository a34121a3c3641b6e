"""
Per-worker initialization
Resolves the configured docno mapping scheme, finds the replicated mapping
artifact in the worker's local cache and loads it, once per worker process.
"""

import os
import logging
from dataclasses import dataclass
from typing import List, Optional

from doccount.common import config
from doccount.common.config import JobConf
from doccount.common.docno_mapping import DocnoMapping, create_mapping
from doccount.common.errors import InitializationError
from doccount.common import filesystem
from doccount.common.filesystem import get_local

logger = logging.getLogger(__name__)


@dataclass
class InitResult:
    """Outcome of worker initialization; exactly one of mapping/error is set"""
    mapping: Optional[DocnoMapping] = None
    error: Optional[InitializationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def get_local_cache_files(cache_dir: str) -> List[str]:
    """Files replicated to this worker, sorted by name"""
    return filesystem.list_files(get_local(), cache_dir)


def locate_mapping_file(conf: JobConf, cache_dir: str) -> str:
    """
    Find the mapping artifact among the worker's cached files

    Args:
        conf: Job configuration
        cache_dir: Local directory holding the replicated files

    Returns:
        Path of the artifact

    Raises:
        InitializationError: If no file, or more than one candidate, is found
    """
    cached = get_local_cache_files(cache_dir)
    if not cached:
        raise InitializationError(f"No docno mapping found in local cache {cache_dir}")

    wanted = conf.get(config.DOCNO_MAPPING_FILE)
    if wanted:
        matches = [p for p in cached if os.path.basename(p) == wanted]
        if not matches:
            raise InitializationError(
                f"Docno mapping '{wanted}' not present in local cache {cache_dir}")
        return matches[0]

    if len(cached) > 1:
        names = ", ".join(os.path.basename(p) for p in cached)
        raise InitializationError(
            f"Ambiguous local cache: expected exactly one mapping file, found {len(cached)} ({names})")
    return cached[0]


def initialize_worker(conf: JobConf, cache_dir: str) -> InitResult:
    """
    Instantiate and load the docno mapping for this worker.

    Never raises; failures are reported through the returned InitResult so
    the task runner can abort every task assigned to this worker.
    """
    scheme = conf.get(config.DOCNO_MAPPING_SCHEME)
    try:
        if not scheme:
            raise InitializationError(f"Job configuration is missing '{config.DOCNO_MAPPING_SCHEME}'")
        mapping = create_mapping(scheme)
        path = locate_mapping_file(conf, cache_dir)
        mapping.load(path, get_local())
    except InitializationError as e:
        logger.error(f"Error initializing docno mapping: {e}")
        return InitResult(error=e)
    except Exception as e:
        logger.error(f"Error initializing docno mapping ({scheme}): {e}")
        error = InitializationError(f"Error initializing docno mapping: {e}")
        error.__cause__ = e
        return InitResult(error=error)

    logger.info(f"Worker {os.getpid()} loaded '{scheme}' mapping with {len(mapping)} entries")
    return InitResult(mapping=mapping)
