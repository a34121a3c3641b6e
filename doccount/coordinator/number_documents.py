"""
Builds docno mapping artifacts by numbering the documents of a collection.
"""

import logging

from pyarrow.fs import FileSystem

from doccount.common.docno_mapping import MAPPING_SCHEMES, UnknownMappingSchemeError
from doccount.common.filesystem import get_local
from doccount.worker.collection import get_reader, list_shards

logger = logging.getLogger(__name__)


def build_mapping(collection_path: str, output_path: str, scheme: str = "trec",
                  collection_format: str = "trec", fs: FileSystem = None) -> int:
    """
    Scan a collection and write a docno mapping artifact for it

    Args:
        collection_path: Collection file or directory of shards
        output_path: Artifact file to write (overwritten)
        scheme: Registered mapping scheme deciding the artifact layout
        collection_format: Collection reader to use

    Returns:
        Number of distinct docids written
    """
    cls = MAPPING_SCHEMES.get(scheme)
    if cls is None:
        raise UnknownMappingSchemeError(f"Unknown docno mapping scheme '{scheme}'")

    reader = get_reader(collection_format)
    docids = set()
    total = 0
    for shard in list_shards(collection_path):
        for _, doc in reader.read_shard(shard):
            total += 1
            if doc.docid in docids:
                logger.warning(f"Duplicate docid {doc.docid} in {shard}")
            docids.add(doc.docid)

    count = cls.write_mapping(docids, output_path, fs or get_local())
    logger.info(f"Wrote {scheme} mapping for {count} docids ({total} documents) to {output_path}")
    return count
