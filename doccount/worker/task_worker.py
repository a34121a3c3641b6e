"""
Worker process entry points.
The process pool calls init_worker() once per process and run_map_task() for
every shard assigned to that process.
"""

import os
import logging
from typing import Any, Dict, Optional

from doccount.common import config
from doccount.common.config import JobConf
from doccount.common.errors import ConfigurationError
from doccount.common.pair import Pair
from doccount.worker.collection import get_reader
from doccount.worker.initializer import InitResult, initialize_worker
from doccount.worker.map_executor import MapExecutor

logger = logging.getLogger(__name__)


class TaskWorker:
    """State owned by one worker process for the lifetime of a job"""

    def __init__(self, conf: JobConf, cache_dir: str, job_id: str):
        self.conf = conf
        self.job_id = job_id
        self.worker_id = f"worker-{os.getpid()}"
        self.init_result: InitResult = initialize_worker(conf, cache_dir)
        self.record = Pair()

    def run(self, task_id: int, input_path: str, output_dir: str) -> Dict[str, Any]:
        """Run one map task, or fail it straight away if setup failed."""
        if not self.init_result.ok:
            return self._failed(task_id, f"InitializationError: {self.init_result.error}")
        try:
            reader = get_reader(self.conf.get(config.COLLECTION_FORMAT, "trec"))
        except ConfigurationError as e:
            return self._failed(task_id, f"ConfigurationError: {e}")

        executor = MapExecutor(
            task_id=task_id,
            input_path=input_path,
            output_dir=output_dir,
            mapping=self.init_result.mapping,
            reader=reader,
            job_id=self.job_id,
            compress=self.conf.get_bool(config.COMPRESS_OUTPUT),
            record=self.record,
        )
        result = executor.execute()
        result['worker_id'] = self.worker_id
        return result

    def _failed(self, task_id: int, message: str) -> Dict[str, Any]:
        logger.error(f"Map task {task_id} aborted on {self.worker_id}: {message}")
        return {
            'task_id': task_id,
            'success': False,
            'counters': {},
            'records': 0,
            'output_file': '',
            'execution_time_ms': 0,
            'memory_rss_bytes': MapExecutor.get_memory_usage(),
            'error_message': message,
            'worker_id': self.worker_id,
        }


_worker: Optional[TaskWorker] = None


def init_worker(conf_values: Dict[str, Any], cache_dir: str, job_id: str):
    """Process pool initializer."""
    global _worker
    _worker = TaskWorker(JobConf(conf_values), cache_dir, job_id)


def run_map_task(task_id: int, input_path: str, output_dir: str) -> Dict[str, Any]:
    """Process pool task function."""
    if _worker is None:
        raise RuntimeError("Worker process was not initialized")
    return _worker.run(task_id, input_path, output_dir)
