#!/usr/bin/env python3
"""
Quick utility script to check the output of a document counting job.

Verifies that every partition parses as docid<TAB>docno, that no docno is
assigned to two docids, and that the number of records matches the count file.

Usage:
    python3 scripts/check_count_output.py --output-dir out [--count-file records.txt]
"""

import os
import sys
import gzip
import argparse


def read_partitions(output_dir: str):
    """Yield (partition_name, line_num, docid, docno) for every output record."""
    for name in sorted(os.listdir(output_dir)):
        if not name.startswith("part-"):
            continue
        path = os.path.join(output_dir, name)
        opener = gzip.open if name.endswith(".gz") else open
        with opener(path, "rt", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                docid, docno = line.rstrip("\n").split("\t")
                yield name, line_num, docid, int(docno)


def check_output(output_dir: str, count_file: str = None) -> bool:
    """Check a job output directory and print a short report."""
    if not os.path.isdir(output_dir):
        print(f"❌ Output directory does not exist: {output_dir}")
        return False

    if not os.path.exists(os.path.join(output_dir, "_SUCCESS")):
        print(f"⚠️  No _SUCCESS marker in {output_dir}; the job may not have completed")

    seen_docnos = {}
    records = 0
    partitions = set()
    ok = True
    try:
        for name, line_num, docid, docno in read_partitions(output_dir):
            partitions.add(name)
            records += 1
            other = seen_docnos.get(docno)
            if other is not None and other != docid:
                print(f"❌ {name}:{line_num}: docno {docno} assigned to both {other} and {docid}")
                ok = False
            seen_docnos[docno] = docid
    except ValueError as e:
        print(f"❌ Malformed record: {e}")
        return False

    print(f"✅ Read {records} records from {len(partitions)} partition(s)")

    if count_file:
        if not os.path.exists(count_file):
            print(f"❌ Count file not found: {count_file}")
            return False
        with open(count_file, encoding="ascii") as f:
            count = int(f.read().strip())
        if count != records:
            print(f"❌ Count file says {count}, output holds {records} records")
            ok = False
        else:
            print(f"✅ Count file matches: {count}")

    return ok


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Check the output of a document counting job')
    parser.add_argument('--output-dir', required=True, help='Job output directory')
    parser.add_argument('--count-file', help='Count file written by the job')
    args = parser.parse_args()

    success = check_output(os.path.abspath(args.output_dir), args.count_file)
    sys.exit(0 if success else 1)
