"""
Exception types shared by the coordinator and the workers.
"""


class DoccountError(Exception):
    """Base class for all doccount errors"""


class ConfigurationError(DoccountError):
    """Missing or inconsistent job configuration"""


class MappingLoadError(DoccountError):
    """A docno mapping artifact is missing, unreadable or corrupt"""


class DocnoNotFoundError(DoccountError, LookupError):
    """A docid (or docno) is absent from the loaded mapping"""


class CollectionFormatError(DoccountError):
    """A collection shard contains a malformed document"""


class InitializationError(DoccountError):
    """Worker setup failed; every task on that worker is aborted"""


class JobFailedError(DoccountError):
    """The job did not complete successfully"""

    def __init__(self, message: str, job_id: str = None):
        super().__init__(message)
        self.job_id = job_id


class JobTimeoutError(JobFailedError):
    """The job was cancelled or exceeded its time limit"""
