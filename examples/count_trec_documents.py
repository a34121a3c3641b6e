"""
Counts the documents of the bundled TREC sample.

Builds a 'trec' docno mapping for examples/trec/sample.sgml, runs the counting
job and prints the docid/docno pairs it produced.

    python3 examples/count_trec_documents.py
"""

import os
import logging
import tempfile

from doccount.coordinator.count_job import CountDocuments
from doccount.coordinator.number_documents import build_mapping

SAMPLE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "trec", "sample.sgml")


def main():
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    work = tempfile.mkdtemp(prefix="doccount-example-")
    mapping = os.path.join(work, "trec-docno-mapping.dat")
    output = os.path.join(work, "output")
    records = os.path.join(work, "records.txt")

    build_mapping(SAMPLE, mapping, scheme="trec")
    num_docs = CountDocuments(max_workers=1, work_dir=work).run(
        collection=SAMPLE, output=output, docno_mapping=mapping, count_output=records)

    with open(os.path.join(output, "part-m-00000"), encoding="utf-8") as f:
        print(f.read(), end="")
    print(f"{num_docs} documents, count written to {records}")


if __name__ == "__main__":
    main()
