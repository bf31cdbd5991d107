"""Command-line entry point: print one snapshot as JSON.

Usage:
    procsnap [--warmup SECONDS] [--no-classify] [--proc-root PATH] [--log-level LEVEL]
"""

import argparse
import logging
import os
import sys
import time
from dataclasses import replace
from pathlib import Path

from procsnap.config import CollectorConfig
from procsnap.monitor import SnapshotBuilder
from procsnap.render import Renderer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procsnap",
        description="Print a point-in-time snapshot of memory, CPU and the process table as JSON.",
    )
    parser.add_argument(
        "--warmup",
        type=float,
        default=0.5,
        metavar="SECONDS",
        help="Prime the CPU counters and wait this long before the snapshot "
        "(0 reports cpu_usage_pct as 0). Default: 0.5",
    )
    parser.add_argument(
        "--no-classify",
        action="store_true",
        help="Do not tag container-runtime processes.",
    )
    parser.add_argument(
        "--proc-root",
        type=Path,
        default=None,
        help="procfs mount point. Default: $PROCSNAP_PROC_ROOT or /proc",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics written to stderr. Default: WARNING",
    )
    return parser


def load_config(args: argparse.Namespace) -> CollectorConfig:
    """Environment config with command-line overrides applied."""
    config = CollectorConfig.from_env()
    if args.proc_root is not None:
        config = replace(config, proc_root=args.proc_root)
    if args.no_classify:
        config = replace(config, classify=False)
    return config


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    config = load_config(args)
    config.apply_procfs()
    builder = SnapshotBuilder.from_config(config)

    if args.warmup > 0:
        builder.prime()
        time.sleep(args.warmup)

    snapshot = builder.build()
    logger.info(f"Snapshot at {snapshot.timestamp_ms} with {snapshot.total_process_count} processes")

    try:
        Renderer().write(snapshot, sys.stdout)
        sys.stdout.flush()
    except BrokenPipeError:
        # Reader went away (e.g. `procsnap | head`); redirect so the
        # interpreter's final flush does not raise again.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    return 0


if __name__ == "__main__":
    sys.exit(main())
