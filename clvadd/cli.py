"""Command line entry point: ``clvadd`` / ``python -m clvadd``."""

import argparse
import logging
import shlex
import sys
from pathlib import Path

from clvadd.config import DEVICE_ENV, VaddConfig, default_device_type
from clvadd.device import DEVICE_TYPES, describe_platforms
from clvadd.errors import (
    CompileError,
    ComputeError,
    NoPlatformError,
    ReadBackError,
)
from clvadd.pipeline import make_vectors, run_vadd
from clvadd.program import KERNEL_SOURCE
from clvadd.verify import print_report

logger = logging.getLogger(__name__)


def build_parser():
    ap = argparse.ArgumentParser(
        prog="clvadd",
        description="Add two random float vectors on an OpenCL device and "
                    "check the result on the host.")
    ap.add_argument("--length", type=int, default=VaddConfig.length,
                    help="number of elements (default %(default)s)")
    ap.add_argument("--device", choices=sorted(DEVICE_TYPES), default=None,
                    help=f"device class to look for (default: ${DEVICE_ENV} "
                         "or 'default')")
    ap.add_argument("--seed", type=int, default=None,
                    help="seed for the input vectors")
    ap.add_argument("--tolerance", type=float, default=VaddConfig.tolerance,
                    help="accepted absolute deviation (default %(default)s)")
    ap.add_argument("--build-options", default="", metavar="OPTS",
                    help="extra OpenCL compiler options as one string; use "
                         "--build-options=-DFOO for a single option")
    ap.add_argument("--source", type=Path, default=None,
                    help="read the vadd kernel from this file instead")
    ap.add_argument("--list-devices", action="store_true",
                    help="print the platform/device inventory and exit")
    ap.add_argument("-v", "--verbose", action="count", default=0,
                    help="-v for progress, -vv for resource tracing")
    return ap


def _configure_logging(verbosity):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format="%(asctime)s %(name)s %(levelname)s: %(message)s")


def report_error(err):
    """Print the diagnostic for a fatal pipeline error."""
    if isinstance(err, NoPlatformError):
        print("Found 0 platforms!")
    elif isinstance(err, CompileError) and err.build_log:
        print(f"Error: Failed to build program executable!\n{err.status_name}")
        print(err.build_log)
    elif isinstance(err, ReadBackError):
        print(f"Error: Failed to read output array!\n{err.status_name}")
    else:
        print(err)


def main(argv=None):
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.list_devices:
            for line in describe_platforms():
                print(line)
            return 0

        config = VaddConfig(
            length=args.length,
            tolerance=args.tolerance,
            device_type=args.device or default_device_type(),
            seed=args.seed,
            build_options=tuple(shlex.split(args.build_options)),
        )
        source = KERNEL_SOURCE
        if args.source is not None:
            source = args.source.read_text(encoding="utf-8")

        a, b, _ = make_vectors(config.length, config.seed)
        result = run_vadd(
            a, b,
            device_type=config.device_type,
            tolerance=config.tolerance,
            build_options=config.build_options,
            source=source,
        )
    except ComputeError as e:
        logger.debug("Run failed", exc_info=True)
        report_error(e)
        return 1
    except (ValueError, OSError) as e:
        print(f"Error: {e}")
        return 2

    # mismatches are reported, not fatal
    print_report(result.report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
