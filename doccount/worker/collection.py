"""
Collection readers
Turn collection shards into a lazy stream of (byte offset, Document) pairs
"""

import os
import re
import gzip
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple, Type

from doccount.common.errors import CollectionFormatError, ConfigurationError

logger = logging.getLogger(__name__)

COLLECTION_FORMATS: Dict[str, Type["CollectionReader"]] = {}


@dataclass(frozen=True)
class Document:
    """A single document from a collection shard"""
    docid: str
    content: str
    offset: int


def list_shards(path: str) -> List[str]:
    """
    Expand a collection path into its shard files

    Args:
        path: A single shard file or a directory of shards

    Returns:
        Sorted list of shard paths; hidden and '_'-prefixed files are skipped

    Raises:
        FileNotFoundError: If the path does not exist
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Collection not found: {path}")
    if os.path.isfile(path):
        return [path]

    shards = []
    for name in sorted(os.listdir(path)):
        if name.startswith(".") or name.startswith("_"):
            continue
        full = os.path.join(path, name)
        if os.path.isfile(full):
            shards.append(full)
    return shards


def get_reader(name: str) -> "CollectionReader":
    cls = COLLECTION_FORMATS.get(name)
    if cls is None:
        raise ConfigurationError(f"Unknown collection format '{name}'")
    return cls()


class CollectionReader:
    """Base class for shard readers"""

    format_name = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.format_name:
            COLLECTION_FORMATS[cls.format_name] = cls

    def read_shard(self, path: str) -> Iterator[Tuple[int, Document]]:
        raise NotImplementedError


class TrecCollectionReader(CollectionReader):
    """
    Reader for TREC SGML collections: a shard is a concatenation of
    <DOC> ... </DOC> blocks, each holding a <DOCNO> element with the docid.
    """

    format_name = "trec"

    DOC_START = b"<DOC>"
    DOC_END = b"</DOC>"
    DOCNO_RE = re.compile(r"<DOCNO>(.*?)</DOCNO>", re.DOTALL)

    def read_shard(self, path: str) -> Iterator[Tuple[int, Document]]:
        opener = gzip.open if path.endswith(".gz") else open
        with opener(path, "rb") as f:
            offset = 0
            start = None
            buf: List[bytes] = []
            for line in f:
                # A line may close one document and open (or hold) the next ones
                pos = 0
                while pos < len(line):
                    if start is None:
                        idx = line.find(self.DOC_START, pos)
                        if idx < 0:
                            break
                        start, pos = offset + idx, idx
                    end = line.find(self.DOC_END, pos)
                    if end < 0:
                        buf.append(line[pos:])
                        break
                    end += len(self.DOC_END)
                    buf.append(line[pos:end])
                    yield start, self._parse(b"".join(buf), start, path)
                    start, buf, pos = None, [], end
                offset += len(line)

            if start is not None:
                raise CollectionFormatError(f"{path}: unterminated <DOC> at offset {start}")

    def _parse(self, raw: bytes, offset: int, path: str) -> Document:
        end = raw.find(self.DOC_END)
        text = raw[:end + len(self.DOC_END)].decode("utf-8", errors="replace")
        match = self.DOCNO_RE.search(text)
        if not match or not match.group(1).strip():
            raise CollectionFormatError(f"{path}: document at offset {offset} has no <DOCNO>")
        return Document(docid=match.group(1).strip(), content=text, offset=offset)
