"""Formatting helpers for reporting job progress and results."""

from typing import Optional

from doccount.coordinator.job_manager import Job, JobManager


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human readable string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds / 60)
    seconds = seconds % 60
    if minutes < 60:
        return f"{minutes}m {seconds:.1f}s"
    hours = int(minutes / 60)
    minutes = minutes % 60
    return f"{hours}h {minutes}m {seconds:.1f}s"


def format_progress_bar(completed: int, total: int, width: int = 40) -> str:
    """Create a progress bar string."""
    percentage = (completed / total) if total > 0 else 0
    filled = int(width * percentage)
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}] {percentage:.1%}"


def format_job_summary(job_manager: JobManager, job: Optional[Job]) -> str:
    """Multi-line summary of a job: status, map progress, counters."""
    if job is None:
        return "No job"
    status = job_manager.get_job_status(job.job_id)
    lines = [
        f"Job ID: {job.job_id}",
        f"Status: {status['status']}",
        f"Runtime: {format_duration(max(job.end_time - job.start_time, 0.0))}",
        "Map Progress:",
        format_progress_bar(status['map_completed'], status['map_total']),
        f"Tasks: {status['map_completed']}/{status['map_total']}",
    ]
    for name, value in sorted(status['counters'].items()):
        lines.append(f"Counter {name}: {value}")
    if status['error_message']:
        lines.append(f"Error: {status['error_message']}")
    return "\n".join(lines)
