"""
Local job runner.
Executes the map tasks of a job on a pool of worker processes (or inline in
the calling process) and blocks until the job completes, fails or times out.
"""

import os
import time
import logging
from concurrent import futures
from typing import Optional

from doccount.common.config import JobConf
from doccount.common.errors import JobFailedError, JobTimeoutError
from doccount.coordinator.job_manager import Job, JobManager, JobStatus, MapTask
from doccount.worker.task_worker import TaskWorker, init_worker, run_map_task

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "_SUCCESS"


class LocalJobRunner:
    """Runs map-only jobs on the local machine"""

    def __init__(self, job_manager: JobManager, max_workers: int = 1):
        self.job_manager = job_manager
        self.max_workers = max_workers

    def run(self, job: Job, conf: JobConf, cache_dir: str,
            timeout: Optional[float] = None) -> Job:
        """
        Run every map task of the job and wait for completion

        Args:
            job: Job with its map tasks generated
            conf: Job configuration shipped to the workers
            cache_dir: Local directory holding the replicated cache files
            timeout: Seconds to wait for the whole job, None to wait forever

        Returns:
            The completed job

        Raises:
            JobTimeoutError: If the job was cancelled or timed out
            JobFailedError: If any map task failed
        """
        self.job_manager.start_job(job.job_id)
        os.makedirs(job.output_path, exist_ok=True)
        logger.info(f"Job {job.job_id}: {job.num_map_tasks} map tasks, 0 reduce tasks")

        if not job.map_tasks:
            self.job_manager.complete_if_empty(job.job_id)
        elif self.max_workers <= 1 or job.num_map_tasks == 1:
            self._run_inline(job, conf, cache_dir, timeout)
        else:
            self._run_pool(job, conf, cache_dir, timeout)

        if job.status == JobStatus.CANCELLED:
            logger.error(f"Job {job.job_id} cancelled: {job.error_message}")
            raise JobTimeoutError(f"Job {job.job_id} cancelled: {job.error_message}", job.job_id)
        if job.status != JobStatus.COMPLETED:
            logger.error(f"Job {job.job_id} failed: {job.error_message}")
            raise JobFailedError(f"Job {job.job_id} failed: {job.error_message}", job.job_id)

        with open(os.path.join(job.output_path, SUCCESS_MARKER), "w"):
            pass
        logger.info(f"Job {job.job_id} completed in {job.end_time - job.start_time:.2f}s")
        return job

    def _run_inline(self, job: Job, conf: JobConf, cache_dir: str, timeout: Optional[float]):
        deadline = time.monotonic() + timeout if timeout is not None else None
        worker = TaskWorker(conf, cache_dir, job.job_id)
        for task in job.map_tasks:
            if deadline is not None and time.monotonic() > deadline:
                self.job_manager.cancel_job(job.job_id, f"timed out after {timeout}s")
                return
            self.job_manager.mark_map_task_assigned(job.job_id, task.task_id, worker.worker_id)
            result = worker.run(task.task_id, task.input_path, job.output_path)
            if not self._record_result(job, task, result):
                return

    def _run_pool(self, job: Job, conf: JobConf, cache_dir: str, timeout: Optional[float]):
        pool = futures.ProcessPoolExecutor(
            max_workers=min(self.max_workers, job.num_map_tasks),
            initializer=init_worker,
            initargs=(conf.to_dict(), cache_dir, job.job_id)
        )
        clean_exit = False
        timed_out = False
        try:
            pending = {}
            for task in job.map_tasks:
                future = pool.submit(run_map_task, task.task_id, task.input_path, job.output_path)
                pending[future] = task
                self.job_manager.mark_map_task_assigned(job.job_id, task.task_id)

            try:
                for future in futures.as_completed(pending, timeout=timeout):
                    task = pending[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        self.job_manager.mark_map_task_failed(
                            job.job_id, task.task_id, f"{type(e).__name__}: {e}")
                        return
                    if not self._record_result(job, task, result):
                        return
            except futures.TimeoutError:
                timed_out = True
                self.job_manager.cancel_job(job.job_id, f"timed out after {timeout}s")
                return
            clean_exit = True
        finally:
            # Running tasks are only abandoned on timeout
            pool.shutdown(wait=not timed_out, cancel_futures=not clean_exit)

    def _record_result(self, job: Job, task: MapTask, result: dict) -> bool:
        if result.get('success'):
            self.job_manager.mark_map_task_completed(job.job_id, task.task_id, result)
            return True
        self.job_manager.mark_map_task_failed(
            job.job_id, task.task_id, result.get('error_message', 'unknown error'), result)
        return False
