#!/usr/bin/env python3

import argparse, sys

from .checker import RAW_ROOT_INODE, ROOT_INODE, Checker
from .image import FatalFault, open_image
from .report import Reporter


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="pdp7fsck",
        description="check the free list, i-nodes and directories of an image")
    parser.add_argument('image', help="filesystem image to check")
    parser.add_argument('-d', '--debug', action='store_true',
                        help="trace the passes on stderr")
    parser.add_argument('-r', '--raw-root', action='store_true',
                        help=f"walk from i-node {RAW_ROOT_INODE} instead of {ROOT_INODE}")
    args = parser.parse_args(argv)

    reporter = Reporter(debug=args.debug)
    try:
        store = open_image(args.image)
    except OSError as e:
        print(f"ERROR: can't read {args.image}: {e.strerror or e}", file=sys.stderr)
        return 1
    try:
        findings = Checker(store, reporter).run(
            RAW_ROOT_INODE if args.raw_root else ROOT_INODE)
    except FatalFault as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    reporter.trace(f"{len(findings)} problems found")
    return 0


if __name__ == "__main__":
    sys.exit(main())
