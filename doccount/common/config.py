"""
Job configuration shared between the coordinator and worker processes.
"""

import os
import tempfile
from typing import Any, Dict, List, Optional

# Configuration keys
JOB_NAME = "mapred.job.name"
NUM_REDUCE_TASKS = "mapred.reduce.tasks"
CACHE_FILES = "mapred.cache.files"
COMPRESS_OUTPUT = "mapred.output.compress"
COLLECTION_FORMAT = "collection.format"
DOCNO_MAPPING_SCHEME = "docno.mapping.scheme"
DOCNO_MAPPING_FILE = "docno.mapping.file"

# Configuration from environment
WORK_DIR = os.getenv('DOCCOUNT_WORK_DIR', os.path.join(tempfile.gettempdir(), 'doccount'))
MAX_WORKERS = int(os.getenv('DOCCOUNT_MAX_WORKERS', os.cpu_count() or 1))
JOB_TIMEOUT = float(os.getenv('DOCCOUNT_JOB_TIMEOUT')) if os.getenv('DOCCOUNT_JOB_TIMEOUT') else None


class JobConf:
    """String-keyed job configuration, shipped as-is to every worker"""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any):
        self._values[key] = value

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        return default if value is None else int(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def get_list(self, key: str) -> List[str]:
        """Return a list value; comma-separated strings are split."""
        value = self._values.get(key)
        if not value:
            return []
        if isinstance(value, str):
            return [v for v in value.split(",") if v]
        return list(value)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __repr__(self):
        return f"JobConf({self._values!r})"
