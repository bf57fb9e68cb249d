#!/usr/bin/env python
import argparse
import logging

from icfs import cli
from icfs.error import IcfsError
from icfs.icfslog import TRACE, init_logging
from icfs.main.util import run_main

"""
icfs <MOUNTPOINT>
icfs <MOUNTPOINT> --config config.yaml --debug
"""


def get_parser():
    parser = argparse.ArgumentParser(prog="icfs")

    parser.add_argument("--debug", default=False, action="store_true")
    parser.add_argument(
        "--debug-fs",
        default=False,
        action="store_true",
        dest="debug_fs",
        help="log every filesystem request",
    )

    cli.add_mount_arguments(parser)

    return parser


async def main():

    args = get_parser().parse_args()

    init_logging(
        debug_level=logging.DEBUG if args.debug else logging.INFO,
        fs_debug_level=TRACE if args.debug_fs else logging.INFO,
    )

    await cli.mount(args)


if __name__ == "__main__":
    try:
        run_main(main)
    except IcfsError as e:
        print(f"Error happened: {e}")
