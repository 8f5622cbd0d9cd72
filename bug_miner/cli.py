"""
Command-line entry point.

Usage:
    bugminer bugs.sqlite /path/to/repo --names '*.py' --exclude vendor --progress
"""

import argparse
import resource
import sys
import time

from .config import DEFAULT_NAMES, DEFAULT_NAMES_EXCLUDE
from .discovery import split_csv
from .errors import BugMinerError
from .pipeline import mine_repository
from .report import print_summary
from .store import FactStore


def resource_usage(started: float) -> str:
    elapsed = time.perf_counter() - started
    # ru_maxrss is reported in kilobytes on Linux
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024
    return f"Time: {elapsed:.2f} seconds, Memory: {peak:.2f} MB"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bugminer',
        description='Bug Miner - correlate code changes with bug fixes',
    )
    parser.add_argument('database', help='Path to the SQLite3 database')
    parser.add_argument('repository', help='Path to the Git repository')
    parser.add_argument('--names', default=','.join(DEFAULT_NAMES),
                        help='A comma-separated list of file names to check')
    parser.add_argument('--names-exclude', default=','.join(DEFAULT_NAMES_EXCLUDE),
                        help='A comma-separated list of file names to exclude')
    parser.add_argument('--exclude', action='append', default=[],
                        help='Exclude a directory from code analysis (repeatable)')
    parser.add_argument('--progress', action='store_true',
                        help='Show progress bar')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress status output')
    parser.add_argument('--summary', type=int, default=0, metavar='N',
                        help='Print the top N entries of every ranking after mining')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    started = time.perf_counter()

    try:
        mine_repository(
            args.database,
            args.repository,
            names=split_csv(args.names),
            names_exclude=split_csv(args.names_exclude),
            exclude=args.exclude,
            progress=args.progress,
            quiet=args.quiet,
        )
        if args.summary > 0:
            with FactStore(args.database) as store:
                print_summary(store, top=args.summary)
    except BugMinerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"\n{resource_usage(started)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
