"""
Job Manager for map-only jobs
Handles job state management, map task generation, counter aggregation and
progress tracking
"""

import threading
import time
import uuid
from collections import Counter
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from doccount.worker.collection import list_shards


class JobStatus(Enum):
    """Status of a job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TaskStatus(Enum):
    """Status of individual map tasks"""
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MapTask:
    """Represents a single map task over one shard"""
    task_id: int
    input_path: str
    status: TaskStatus = TaskStatus.PENDING
    assigned_worker: Optional[str] = None
    result: Optional[dict] = None


@dataclass
class Job:
    """Represents a complete map-only job"""
    job_id: str
    name: str
    input_path: str
    output_path: str
    num_reduce_tasks: int = 0
    status: JobStatus = JobStatus.PENDING
    map_tasks: List[MapTask] = field(default_factory=list)
    counters: Counter = field(default_factory=Counter)
    start_time: float = 0.0
    end_time: float = 0.0
    error_message: str = ""

    @property
    def num_map_tasks(self) -> int:
        return len(self.map_tasks)


class JobManager:
    """Manages jobs and their lifecycle"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, name: str, input_path: str, output_path: str,
                   num_reduce_tasks: int = 0) -> Job:
        """Create a new job; only map-only jobs are supported"""
        if num_reduce_tasks != 0:
            raise ValueError(f"Only map-only jobs are supported, got {num_reduce_tasks} reduce tasks")
        with self.lock:
            job = Job(
                job_id=f"job_{int(time.time())}_{uuid.uuid4().hex[:8]}",
                name=name,
                input_path=input_path,
                output_path=output_path,
                num_reduce_tasks=num_reduce_tasks,
                start_time=time.time()
            )
            self.jobs[job.job_id] = job
            return job

    def generate_map_tasks(self, job: Job) -> List[MapTask]:
        """Create one map task per collection shard"""
        map_tasks = [
            MapTask(task_id=i, input_path=shard)
            for i, shard in enumerate(list_shards(job.input_path))
        ]
        job.map_tasks = map_tasks
        return map_tasks

    def start_job(self, job_id: str):
        with self.lock:
            job = self.jobs[job_id]
            if job.status != JobStatus.PENDING:
                raise ValueError(f"Cannot start job {job_id} from {job.status.value}")
            job.status = JobStatus.MAP_PHASE

    def mark_map_task_assigned(self, job_id: str, task_id: int, worker: Optional[str] = None):
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.map_tasks):
                job.map_tasks[task_id].status = TaskStatus.ASSIGNED
                job.map_tasks[task_id].assigned_worker = worker

    def mark_map_task_completed(self, job_id: str, task_id: int, result: dict):
        """Mark map task as completed and fold its counters into the job"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job or task_id >= len(job.map_tasks):
                return
            task = job.map_tasks[task_id]
            if task.status == TaskStatus.COMPLETED:
                return
            task.status = TaskStatus.COMPLETED
            task.result = result
            task.assigned_worker = result.get('worker_id', task.assigned_worker)
            job.counters.update(result.get('counters', {}))

            # Check if all map tasks completed
            if job.status == JobStatus.MAP_PHASE and \
                    all(t.status == TaskStatus.COMPLETED for t in job.map_tasks):
                job.status = JobStatus.COMPLETED
                job.end_time = time.time()

    def mark_map_task_failed(self, job_id: str, task_id: int, error_message: str,
                             result: Optional[dict] = None):
        """Mark map task as failed; a failed task fails the whole job"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job or task_id >= len(job.map_tasks):
                return
            job.map_tasks[task_id].status = TaskStatus.FAILED
            job.map_tasks[task_id].result = result
            if job.status not in (JobStatus.FAILED, JobStatus.CANCELLED):
                job.status = JobStatus.FAILED
                job.error_message = f"Map task {task_id} failed: {error_message}"
                job.end_time = time.time()

    def complete_if_empty(self, job_id: str):
        """A collection without shards completes immediately"""
        with self.lock:
            job = self.jobs[job_id]
            if job.status == JobStatus.MAP_PHASE and not job.map_tasks:
                job.status = JobStatus.COMPLETED
                job.end_time = time.time()

    def cancel_job(self, job_id: str, reason: str = "") -> bool:
        """Cancel the job if it's not already completed or failed"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job or job.status in (JobStatus.COMPLETED, JobStatus.FAILED):
                return False
            job.status = JobStatus.CANCELLED
            job.error_message = reason
            job.end_time = time.time()
            return True

    def get_counter(self, job_id: str, name: str) -> int:
        """Read an aggregated counter of a completed job"""
        with self.lock:
            job = self.jobs[job_id]
            if job.status != JobStatus.COMPLETED:
                raise ValueError(f"Counters of job {job_id} are not final ({job.status.value})")
            return job.counters.get(name, 0)

    def get_job_status(self, job_id: str) -> Optional[Dict]:
        """Get current job status with progress"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return None

            total = len(job.map_tasks)
            completed = sum(1 for t in job.map_tasks if t.status == TaskStatus.COMPLETED)
            failed = sum(1 for t in job.map_tasks if t.status == TaskStatus.FAILED)
            progress = int(completed / total * 100) if total > 0 else \
                (100 if job.status == JobStatus.COMPLETED else 0)

            return {
                'status': job.status.value,
                'progress': progress,
                'map_completed': completed,
                'map_failed': failed,
                'map_total': total,
                'reduce_total': job.num_reduce_tasks,
                'counters': dict(job.counters),
                'error_message': job.error_message
            }
