"""
Document counting job.
Counts every document of a collection with a map-only job and writes, for each
document, its docid and the docno assigned by a docno mapping artifact.
"""

import os
import logging
from typing import Optional

from pyarrow.fs import FileSystem

from doccount.common import config
from doccount.common.config import JobConf
from doccount.common.errors import JobFailedError
from doccount.common import filesystem
from doccount.common.filesystem import get_local
from doccount.coordinator.distributed_cache import DistributedCache
from doccount.coordinator.job_manager import JobManager
from doccount.coordinator.metrics import MetricsCollector
from doccount.coordinator.runner import LocalJobRunner
from doccount.worker.map_executor import Count

logger = logging.getLogger(__name__)

USAGE = ("usage: CountDocuments --collection PATH --output PATH --docno-mapping PATH "
         "[--count-output PATH]")


class CountDocuments:
    """Tool counting the documents of a collection"""

    DEFAULT_MAPPING_SCHEME = "trec"

    def __init__(self, conf: Optional[JobConf] = None, fs: Optional[FileSystem] = None,
                 max_workers: Optional[int] = None, work_dir: Optional[str] = None,
                 job_manager: Optional[JobManager] = None):
        self.conf = conf or JobConf()
        self.fs = fs or get_local()
        self.max_workers = config.MAX_WORKERS if max_workers is None else max_workers
        self.work_dir = work_dir or config.WORK_DIR
        self.job_manager = job_manager or JobManager()
        self.metrics = MetricsCollector()
        self.last_job = None

    def run(self, collection: Optional[str] = None, output: Optional[str] = None,
            docno_mapping: Optional[str] = None, count_output: Optional[str] = None,
            mapping_scheme: Optional[str] = None, timeout: Optional[float] = None,
            compress: bool = False, metrics_output: Optional[str] = None) -> int:
        """
        Run the job

        Args:
            collection: Collection file or directory of shards (required)
            output: Output directory, replaced if it exists (required)
            docno_mapping: Docno mapping artifact (required)
            count_output: Optional file receiving the document count
            mapping_scheme: Registered docno mapping scheme, 'trec' by default
            timeout: Seconds to wait for the job, None to wait forever
            compress: Whether to gzip the output partitions
            metrics_output: Optional JSON file receiving job metrics

        Returns:
            Number of documents read, or -1 if a required path is missing

        Raises:
            JobFailedError: If the job fails or times out
            OSError: If the count or metrics file cannot be written
        """
        if not collection or not output or not docno_mapping:
            logger.error(USAGE)
            return -1

        scheme = mapping_scheme or self.DEFAULT_MAPPING_SCHEME
        timeout = config.JOB_TIMEOUT if timeout is None else timeout

        logger.info(f"Tool: {type(self).__name__}")
        logger.info(f" - input: {collection}")
        logger.info(f" - output dir: {output}")
        logger.info(f" - docno mapping file: {docno_mapping} ({scheme})")

        conf = JobConf(self.conf.to_dict())
        conf.set(config.JOB_NAME, type(self).__name__)
        conf.set(config.NUM_REDUCE_TASKS, 0)
        conf.set(config.DOCNO_MAPPING_SCHEME, scheme)
        conf.set(config.DOCNO_MAPPING_FILE, os.path.basename(docno_mapping))
        conf.set(config.COMPRESS_OUTPUT, compress)
        if config.COLLECTION_FORMAT not in conf:
            conf.set(config.COLLECTION_FORMAT, "trec")
        DistributedCache.add_cache_file(conf, docno_mapping)

        job = self.job_manager.create_job(
            name=conf.get(config.JOB_NAME),
            input_path=collection,
            output_path=output,
            num_reduce_tasks=conf.get_int(config.NUM_REDUCE_TASKS)
        )
        self.last_job = job
        try:
            self.job_manager.generate_map_tasks(job)
        except OSError as e:
            self.job_manager.cancel_job(job.job_id, str(e))
            raise JobFailedError(f"Cannot read collection: {e}", job.job_id) from e

        job_dir = os.path.join(self.work_dir, job.job_id)
        cache_dir = os.path.join(job_dir, "cache")
        try:
            try:
                DistributedCache(self.fs).localize(conf, cache_dir)
            except (OSError, ValueError) as e:
                self.job_manager.cancel_job(job.job_id, str(e))
                raise JobFailedError(f"Cannot replicate docno mapping: {e}", job.job_id) from e

            # Delete the output directory if it exists already.
            try:
                filesystem.delete(self.fs, output)
            except OSError as e:
                self.job_manager.cancel_job(job.job_id, str(e))
                raise JobFailedError(f"Cannot replace output {output}: {e}", job.job_id) from e

            LocalJobRunner(self.job_manager, self.max_workers).run(job, conf, cache_dir, timeout)
        finally:
            filesystem.delete(self.fs, job_dir)

        num_docs = self.job_manager.get_counter(job.job_id, Count.DOCS.value)
        logger.info(f"Read {num_docs} docs.")

        if count_output:
            with filesystem.open_output(self.fs, count_output) as out:
                out.write(str(num_docs).encode("ascii"))

        metrics = self.metrics.collect(job, Count.DOCS.value)
        if metrics_output:
            metrics.save_to_file(metrics_output)

        return num_docs
