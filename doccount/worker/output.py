"""
Map output sink: one text partition file per map task.
"""

import os
import gzip

from doccount.common.pair import Pair


def partition_name(task_id: int, compress: bool = False) -> str:
    name = f"part-m-{task_id:05d}"
    return name + ".gz" if compress else name


class PartitionWriter:
    """Writes key<TAB>value lines for a single map task"""

    def __init__(self, output_dir: str, task_id: int, compress: bool = False):
        self.path = os.path.join(output_dir, partition_name(task_id, compress))
        self.compress = compress
        self.records = 0
        self._file = None

    def open(self):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        if self.compress:
            self._file = gzip.open(self.path, "wt", encoding="utf-8", newline="\n")
        else:
            self._file = open(self.path, "w", encoding="utf-8", newline="\n")
        return self

    def write(self, record: Pair):
        self._file.write(f"{record.left}\t{record.right}\n")
        self.records += 1

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
