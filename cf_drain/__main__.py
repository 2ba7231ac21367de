#!/usr/bin/env python3

import sys
import argparse
import logging

from cf_drain import create_drain


def setup_logging(args):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout,
    )

    root_logger = logging.getLogger()
    if args.verbose:
        root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream == sys.stdout:
            if args.silent:
                root_logger.removeHandler(handler)
            elif args.quiet:
                handler.setLevel(logging.WARNING)
            elif args.verbose:
                handler.setLevel(logging.DEBUG)


def main():
    main_parser = argparse.ArgumentParser("cf-drain")
    main_parser.add_argument("--verbose", action="store_true")
    main_parser.add_argument("--silent", action="store_true")
    main_parser.add_argument("--quiet", action="store_true")
    main_parser.set_defaults(func=lambda a, extras: main_parser.print_help())
    subparsers = main_parser.add_subparsers()

    parser = subparsers.add_parser(
        "create-drain", help="Create a syslog drain for an app or service"
    )
    create_drain.setup_args(parser)
    parser.set_defaults(func=create_drain.main)

    # create-drain accepts options between its positionals, those come back as extras
    args, extras = main_parser.parse_known_args()

    setup_logging(args)

    return args.func(args, extras)


if __name__ == "__main__":
    main()
