"""
Performance metrics collection for map-only jobs.
"""

import os
import json
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from doccount.coordinator.job_manager import Job, TaskStatus
from doccount.worker.collection import list_shards


@dataclass
class JobMetrics:
    """Metrics for a single job execution."""

    job_id: str
    start_time: float
    end_time: float
    num_map_tasks: int
    documents: int
    input_size_bytes: int
    output_size_bytes: int
    peak_worker_rss_bytes: int = 0

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def docs_per_second(self) -> float:
        elapsed = self.total_time_seconds
        return self.documents / elapsed if elapsed > 0 else 0.0

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for jobs."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}

    def collect(self, job: Job, counter_name: str) -> JobMetrics:
        """Build metrics for a finished job from its tasks and output."""
        input_size = sum(os.path.getsize(p) for p in list_shards(job.input_path)) \
            if os.path.exists(job.input_path) else 0
        output_size = 0
        if os.path.isdir(job.output_path):
            output_size = sum(
                os.path.getsize(os.path.join(job.output_path, name))
                for name in os.listdir(job.output_path)
                if name.startswith("part-")
            )
        peak_rss = max(
            (t.result.get('memory_rss_bytes', 0) for t in job.map_tasks
             if t.status == TaskStatus.COMPLETED and t.result),
            default=0
        )

        metrics = JobMetrics(
            job_id=job.job_id,
            start_time=job.start_time,
            end_time=job.end_time,
            num_map_tasks=job.num_map_tasks,
            documents=job.counters.get(counter_name, 0),
            input_size_bytes=input_size,
            output_size_bytes=output_size,
            peak_worker_rss_bytes=peak_rss
        )
        self.job_metrics[job.job_id] = metrics
        return metrics

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
