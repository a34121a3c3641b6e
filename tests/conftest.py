"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import tempfile
import shutil

from doccount.common.docno_mapping import TrecDocnoMapping


def make_trec_doc(docid, text="some text"):
    return f"<DOC>\n<DOCNO> {docid} </DOCNO>\n<TEXT>\n{text}\n</TEXT>\n</DOC>\n"


@pytest.fixture
def trec_doc():
    """Render one TREC document"""
    return make_trec_doc


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def abc_collection(temp_dir):
    """Single-shard collection holding documents A, B and C"""
    filepath = os.path.join(temp_dir, 'abc.sgml')
    with open(filepath, 'w') as f:
        for docid in ("A", "B", "C"):
            f.write(make_trec_doc(docid, f"text of {docid}"))
    return filepath


@pytest.fixture
def abc_mapping(temp_dir):
    """Explicit mapping A->1, B->2, C->3"""
    filepath = os.path.join(temp_dir, 'abc-mapping.tsv')
    with open(filepath, 'w') as f:
        f.write("A\t1\nB\t2\nC\t3\n")
    return filepath


@pytest.fixture
def sharded_collection(temp_dir):
    """Directory of three shards with 10 documents in total"""
    dirpath = os.path.join(temp_dir, 'collection')
    os.makedirs(dirpath)
    docids = [f"DOC-{i:03d}" for i in range(10)]
    shards = [docids[0:4], docids[4:7], docids[7:10]]
    for i, shard in enumerate(shards):
        with open(os.path.join(dirpath, f"shard-{i}.sgml"), 'w') as f:
            for docid in shard:
                f.write(make_trec_doc(docid))
    return dirpath, docids


@pytest.fixture
def trec_mapping(temp_dir, sharded_collection):
    """Binary 'trec' mapping covering the sharded collection"""
    _, docids = sharded_collection
    filepath = os.path.join(temp_dir, 'trec-docno-mapping.dat')
    TrecDocnoMapping.write_mapping(docids, filepath)
    return filepath


@pytest.fixture
def tsv_mapping_factory(temp_dir):
    """Write a tsv mapping from a docid->docno dict"""
    def factory(entries, name='mapping.tsv'):
        filepath = os.path.join(temp_dir, name)
        with open(filepath, 'w') as f:
            for docid, docno in entries.items():
                f.write(f"{docid}\t{docno}\n")
        return filepath
    return factory


@pytest.fixture
def run_dirs(temp_dir):
    """Output, count and scratch paths for a job run"""
    return {
        'output': os.path.join(temp_dir, 'out'),
        'count': os.path.join(temp_dir, 'records.txt'),
        'work': os.path.join(temp_dir, 'work'),
    }


def read_output(output_dir):
    """All (docid, docno) records of a job output, in partition order"""
    records = []
    for name in sorted(os.listdir(output_dir)):
        if not name.startswith("part-"):
            continue
        with open(os.path.join(output_dir, name)) as f:
            for line in f:
                docid, docno = line.rstrip("\n").split("\t")
                records.append((docid, int(docno)))
    return records


@pytest.fixture
def output_reader():
    return read_output

