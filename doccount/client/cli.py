"""
Command line client for counting collections and building docno mappings.
"""

import sys
import logging
import argparse
from typing import List, Optional

from doccount.common import config
from doccount.common.docno_mapping import MAPPING_SCHEMES
from doccount.common.errors import DoccountError
from doccount.coordinator.count_job import CountDocuments
from doccount.coordinator.number_documents import build_mapping
from doccount.client.monitoring import format_job_summary

logger = logging.getLogger(__name__)


def count_documents(args) -> int:
    """Run the document counting job."""
    tool = CountDocuments(max_workers=args.workers, work_dir=args.work_dir)
    try:
        num_docs = tool.run(
            collection=args.collection,
            output=args.output,
            docno_mapping=args.docno_mapping,
            count_output=args.count_output,
            mapping_scheme=args.mapping_scheme,
            timeout=args.timeout,
            compress=args.compress,
            metrics_output=args.metrics_output
        )
    except (DoccountError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if num_docs < 0:
        args.parser.print_help(sys.stderr)
        return 1

    print(format_job_summary(tool.job_manager, tool.last_job))
    print(num_docs)
    return 0


def build_docno_mapping(args) -> int:
    """Write a docno mapping artifact for a collection."""
    try:
        count = build_mapping(args.collection, args.output, args.mapping_scheme)
    except (DoccountError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Wrote {count} docids to {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="doccount", description="Document counting tools")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Count command; required paths are validated by the tool itself
    count_parser = subparsers.add_parser("count", help="Count documents and emit docid/docno pairs")
    count_parser.add_argument("--collection", metavar="PATH", help="(required) collection path")
    count_parser.add_argument("--output", metavar="PATH", help="(required) output path")
    count_parser.add_argument("--docno-mapping", metavar="PATH", help="(required) docno mapping data")
    count_parser.add_argument("--count-output", metavar="PATH",
                              help="(optional) output file to write the number of records")
    count_parser.add_argument("--mapping-scheme", default=CountDocuments.DEFAULT_MAPPING_SCHEME,
                              choices=sorted(MAPPING_SCHEMES), help="Docno mapping scheme")
    count_parser.add_argument("--workers", type=int, default=config.MAX_WORKERS,
                              help="Number of worker processes")
    count_parser.add_argument("--timeout", type=float, default=None,
                              help="Job timeout in seconds")
    count_parser.add_argument("--compress", action="store_true", help="Gzip output partitions")
    count_parser.add_argument("--metrics-output", metavar="PATH", help="Write job metrics as JSON")
    count_parser.add_argument("--work-dir", default=None, help="Local scratch directory")
    count_parser.set_defaults(func=count_documents, parser=count_parser)

    # Build mapping command
    mapping_parser = subparsers.add_parser("build-mapping", help="Build a docno mapping artifact")
    mapping_parser.add_argument("--collection", required=True, metavar="PATH", help="Collection path")
    mapping_parser.add_argument("--output", required=True, metavar="PATH", help="Artifact file to write")
    mapping_parser.add_argument("--mapping-scheme", default="trec", choices=sorted(MAPPING_SCHEMES),
                                help="Docno mapping scheme")
    mapping_parser.set_defaults(func=build_docno_mapping)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"Running {args.command} with args {argv if argv is not None else sys.argv[1:]}")

    if not args.command:
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
