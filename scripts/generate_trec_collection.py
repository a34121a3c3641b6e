#!/usr/bin/env python3
"""
Generate a synthetic sharded TREC collection and a matching docno mapping.

Usage:
    python3 scripts/generate_trec_collection.py --output-dir shared/trec --shards 4 --docs 1000
"""

import os
import random
import argparse

from doccount.common.docno_mapping import MAPPING_SCHEMES

WORDS = ("market", "report", "river", "election", "energy", "court", "harvest",
         "satellite", "budget", "festival", "treaty", "storm", "museum", "rail")


def make_document(docid: str, rng: random.Random) -> str:
    body = " ".join(rng.choice(WORDS) for _ in range(rng.randint(20, 80)))
    return f"<DOC>\n<DOCNO> {docid} </DOCNO>\n<TEXT>\n{body}\n</TEXT>\n</DOC>\n"


def generate(output_dir: str, num_shards: int, num_docs: int, scheme: str, seed: int = 42):
    """
    Write num_docs documents spread over num_shards shard files plus a mapping.

    Returns:
        Tuple of (collection directory, mapping path)
    """
    rng = random.Random(seed)
    collection_dir = os.path.join(output_dir, "collection")
    os.makedirs(collection_dir, exist_ok=True)

    docids = [f"SYN-{i:08d}" for i in range(num_docs)]
    rng.shuffle(docids)

    for shard in range(num_shards):
        path = os.path.join(collection_dir, f"shard-{shard:03d}.sgml")
        with open(path, "w", encoding="utf-8") as f:
            for docid in docids[shard::num_shards]:
                f.write(make_document(docid, rng))
        print(f"  ✓ Created: {path}")

    mapping_path = os.path.join(output_dir, f"docno-mapping.{scheme}")
    count = MAPPING_SCHEMES[scheme].write_mapping(docids, mapping_path)
    print(f"  ✓ Created: {mapping_path} ({count} docids)")
    return collection_dir, mapping_path


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic TREC collection")
    parser.add_argument("--output-dir", default="shared/trec", help="Where to write the collection")
    parser.add_argument("--shards", type=int, default=4, help="Number of shard files")
    parser.add_argument("--docs", type=int, default=1000, help="Number of documents")
    parser.add_argument("--mapping-scheme", default="trec", choices=sorted(MAPPING_SCHEMES))
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    print("=" * 70)
    print(f"Generating {args.docs} documents in {args.shards} shard(s)")
    print("=" * 70)
    generate(args.output_dir, args.shards, args.docs, args.mapping_scheme, args.seed)
    return 0


if __name__ == "__main__":
    exit(main())
