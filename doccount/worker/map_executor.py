"""
Map Task Executor
Runs one map task over a collection shard: counts every document, resolves
its docno and writes the (docid, docno) pair to the task's output partition
"""

import os
import time
import logging
from collections import Counter
from enum import Enum

import psutil

from doccount.common.docno_mapping import DocnoMapping
from doccount.common.pair import Pair
from doccount.worker.collection import CollectionReader
from doccount.worker.output import PartitionWriter

logger = logging.getLogger(__name__)


class Count(Enum):
    """Counters reported by map tasks"""
    DOCS = "DOCS"


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, task_id: int, input_path: str, output_dir: str,
                 mapping: DocnoMapping, reader: CollectionReader,
                 job_id: str, compress: bool = False, record: Pair = None):
        """
        Initialize the map executor

        Args:
            task_id: Unique ID for this map task
            input_path: Path to the shard this task reads
            output_dir: Directory receiving the task's partition file
            mapping: Loaded docno mapping of this worker
            reader: Collection reader for the shard format
            job_id: Unique job identifier
            compress: Whether to gzip the partition file
            record: Output record reused across documents (one per worker)
        """
        self.task_id = task_id
        self.input_path = input_path
        self.output_dir = output_dir
        self.mapping = mapping
        self.reader = reader
        self.job_id = job_id
        self.compress = compress
        self.record = record if record is not None else Pair()

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'success', 'counters', 'records', 'output_file',
            'execution_time_ms', 'memory_rss_bytes' and 'error_message' fields.
            Counters are only reported for successful tasks.
        """
        start_time = time.time()
        logger.info(f"Map task {self.task_id}: reading {self.input_path}")

        counters = Counter()
        writer = PartitionWriter(self.output_dir, self.task_id, self.compress)
        try:
            with writer:
                for _, doc in self.reader.read_shard(self.input_path):
                    counters[Count.DOCS.value] += 1
                    self.record.set(doc.docid, self.mapping.get_docno(doc.docid))
                    writer.write(self.record)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Map task {self.task_id}: {counters[Count.DOCS.value]} docs in {execution_time}ms")
            return {
                'task_id': self.task_id,
                'success': True,
                'counters': dict(counters),
                'records': writer.records,
                'output_file': writer.path,
                'execution_time_ms': execution_time,
                'memory_rss_bytes': self.get_memory_usage(),
                'error_message': ''
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Map task {self.task_id} failed on {self.input_path}: {e}")
            return {
                'task_id': self.task_id,
                'success': False,
                'counters': {},
                'records': writer.records,
                'output_file': writer.path,
                'execution_time_ms': execution_time,
                'memory_rss_bytes': self.get_memory_usage(),
                'error_message': f"{type(e).__name__}: {e}"
            }

    @staticmethod
    def get_memory_usage() -> int:
        """Current resident memory of this worker process in bytes."""
        return psutil.Process(os.getpid()).memory_info().rss
