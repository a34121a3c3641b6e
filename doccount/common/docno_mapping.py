"""
Docno mappings: translate external document identifiers (docids) into dense
sequential integers (docnos) and back.

Concrete mappings are registered by scheme name so that the job only has to
carry a string in its configuration; workers instantiate the matching class
through create_mapping().
"""

import bisect
import struct
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional, Type

from pyarrow.fs import FileSystem

from doccount.common.errors import ConfigurationError, DocnoNotFoundError, MappingLoadError
from doccount.common.filesystem import get_local, open_input, open_output

logger = logging.getLogger(__name__)

MAPPING_SCHEMES: Dict[str, Type["DocnoMapping"]] = {}


class UnknownMappingSchemeError(ConfigurationError):
    """No mapping class is registered under the requested name"""


def register_mapping(name: str) -> Callable[[Type["DocnoMapping"]], Type["DocnoMapping"]]:
    """Class decorator registering a DocnoMapping under a scheme name."""
    def decorator(cls):
        if name in MAPPING_SCHEMES and MAPPING_SCHEMES[name] is not cls:
            raise ValueError(f"Mapping scheme already registered: {name}")
        MAPPING_SCHEMES[name] = cls
        cls.scheme = name
        return cls
    return decorator


def create_mapping(name: str) -> "DocnoMapping":
    """
    Instantiate the mapping registered under a scheme name

    Raises:
        UnknownMappingSchemeError: If nothing is registered under that name
    """
    cls = MAPPING_SCHEMES.get(name)
    if cls is None:
        known = ", ".join(sorted(MAPPING_SCHEMES)) or "none"
        raise UnknownMappingSchemeError(f"Unknown docno mapping scheme '{name}' (known: {known})")
    return cls()


class DocnoMapping(ABC):
    """Bidirectional docid <-> docno lookup loaded from a single artifact file"""

    scheme: str = ""

    @abstractmethod
    def load(self, path: str, fs: Optional[FileSystem] = None):
        """
        Load the mapping artifact into memory

        Args:
            path: Path of the artifact file
            fs: Filesystem handle to read through (local disk by default)

        Raises:
            MappingLoadError: If the artifact is missing or corrupt
        """

    @abstractmethod
    def get_docno(self, docid: str) -> int:
        """Return the docno of a docid, raising DocnoNotFoundError if absent."""

    @abstractmethod
    def get_docid(self, docno: int) -> str:
        """Return the docid of a docno, raising DocnoNotFoundError if absent."""

    @abstractmethod
    def __len__(self) -> int:
        pass

    def resolve(self, docid: str) -> int:
        return self.get_docno(docid)

    @classmethod
    @abstractmethod
    def write_mapping(cls, docids: Iterable[str], path: str, fs: Optional[FileSystem] = None) -> int:
        """Write an artifact for the given docids and return the number of entries."""

    @staticmethod
    def _read_bytes(path: str, fs: Optional[FileSystem]) -> bytes:
        fs = fs or get_local()
        try:
            with open_input(fs, path) as f:
                return f.read()
        except OSError as e:
            raise MappingLoadError(f"Cannot read docno mapping {path}: {e}") from e


@register_mapping("trec")
class TrecDocnoMapping(DocnoMapping):
    """
    Mapping stored as a sorted docid table; a docid's docno is its 1-based
    position in the table.

    File layout (big-endian): int32 entry count, then for each docid a uint16
    byte length followed by the UTF-8 encoded docid.
    """

    def __init__(self):
        self.docids: List[str] = []

    def load(self, path: str, fs: Optional[FileSystem] = None):
        data = self._read_bytes(path, fs)
        if len(data) < 4:
            raise MappingLoadError(f"Docno mapping {path} is truncated (no header)")

        (count,) = struct.unpack_from(">i", data, 0)
        if count < 0:
            raise MappingLoadError(f"Docno mapping {path} has negative entry count {count}")

        docids = []
        pos = 4
        try:
            for _ in range(count):
                (length,) = struct.unpack_from(">H", data, pos)
                pos += 2
                if pos + length > len(data):
                    raise MappingLoadError(f"Docno mapping {path} is truncated at entry {len(docids) + 1}")
                docids.append(data[pos:pos + length].decode("utf-8"))
                pos += length
        except (struct.error, UnicodeDecodeError) as e:
            raise MappingLoadError(f"Docno mapping {path} is corrupt: {e}") from e

        if pos != len(data):
            raise MappingLoadError(f"Docno mapping {path} has {len(data) - pos} trailing bytes")
        for prev, cur in zip(docids, docids[1:]):
            if prev >= cur:
                raise MappingLoadError(f"Docno mapping {path} is not strictly sorted near '{cur}'")

        self.docids = docids
        logger.info(f"Loaded {count} docids from {path}")

    def get_docno(self, docid: str) -> int:
        idx = bisect.bisect_left(self.docids, docid)
        if idx == len(self.docids) or self.docids[idx] != docid:
            raise DocnoNotFoundError(f"Docid not found in mapping: {docid}")
        return idx + 1

    def get_docid(self, docno: int) -> str:
        if not 1 <= docno <= len(self.docids):
            raise DocnoNotFoundError(f"Docno out of range: {docno}")
        return self.docids[docno - 1]

    def __len__(self):
        return len(self.docids)

    @classmethod
    def write_mapping(cls, docids: Iterable[str], path: str, fs: Optional[FileSystem] = None) -> int:
        fs = fs or get_local()
        table = sorted(set(docids))
        with open_output(fs, path) as out:
            out.write(struct.pack(">i", len(table)))
            for docid in table:
                encoded = docid.encode("utf-8")
                if len(encoded) > 0xFFFF:
                    raise ValueError(f"Docid too long for mapping table: {docid[:40]}...")
                out.write(struct.pack(">H", len(encoded)))
                out.write(encoded)
        return len(table)


@register_mapping("tsv")
class TsvDocnoMapping(DocnoMapping):
    """Explicit table, one 'docid<TAB>docno' per line"""

    def __init__(self):
        self.docnos: Dict[str, int] = {}
        self.docids: Dict[int, str] = {}

    def load(self, path: str, fs: Optional[FileSystem] = None):
        data = self._read_bytes(path, fs)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MappingLoadError(f"Docno mapping {path} is not valid UTF-8: {e}") from e

        docnos, docids = {}, {}
        for line_num, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            parts = line.split("\t")
            if len(parts) != 2:
                raise MappingLoadError(f"{path}:{line_num}: expected 'docid<TAB>docno'")
            docid, raw_docno = parts[0].strip(), parts[1].strip()
            try:
                docno = int(raw_docno)
            except ValueError:
                raise MappingLoadError(f"{path}:{line_num}: invalid docno '{raw_docno}'") from None
            if docid in docnos:
                raise MappingLoadError(f"{path}:{line_num}: duplicate docid '{docid}'")
            if docno in docids:
                raise MappingLoadError(f"{path}:{line_num}: docno {docno} assigned twice")
            docnos[docid] = docno
            docids[docno] = docid

        self.docnos, self.docids = docnos, docids
        logger.info(f"Loaded {len(docnos)} docid/docno pairs from {path}")

    def get_docno(self, docid: str) -> int:
        try:
            return self.docnos[docid]
        except KeyError:
            raise DocnoNotFoundError(f"Docid not found in mapping: {docid}") from None

    def get_docid(self, docno: int) -> str:
        try:
            return self.docids[docno]
        except KeyError:
            raise DocnoNotFoundError(f"Docno not found in mapping: {docno}") from None

    def __len__(self):
        return len(self.docnos)

    @classmethod
    def write_mapping(cls, docids: Iterable[str], path: str, fs: Optional[FileSystem] = None) -> int:
        fs = fs or get_local()
        table = sorted(set(docids))
        with open_output(fs, path) as out:
            for docno, docid in enumerate(table, start=1):
                out.write(f"{docid}\t{docno}\n".encode("utf-8"))
        return len(table)
