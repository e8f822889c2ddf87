# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

"""
Evaluate a headerless csv file and print the results as csv to stdout
"""
import argparse
import logging
import os
import sys

from sheetcalc.sheetcontext import sheetcalc_logger, Spreadsheet
from sheetcalc.sheetutil import DEFAULT_FORMAT, SheetCalcException
from sheetcalc.version import __version__


def sheetcalc_logging_to_console(level=logging.INFO):
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    sheetcalc_logger.setLevel(level)
    sheetcalc_logger.addHandler(console)
    return console


def build_parser():
    parser = argparse.ArgumentParser(
        prog='sheetcalc',
        description='Evaluate a csv file without a header row. '
                    'The evaluated cells are printed to stdout as csv.')
    parser.add_argument('filename', help='csv file to evaluate')
    parser.add_argument(
        '--strict', action='store_true',
        help='fail on blank cells instead of printing them as blanks')
    parser.add_argument(
        '--format', default=DEFAULT_FORMAT, dest='fmt',
        help=f'format for the values (default: {DEFAULT_FORMAT})')
    parser.add_argument('--delimiter', default=',', help='field delimiter')
    parser.add_argument(
        '-v', '--verbose', action='count', default=0,
        help='log to stderr, twice for debug')
    parser.add_argument(
        '--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.fmt.format(0.0)
    except (IndexError, KeyError, ValueError):
        parser.error(f'bad --format: {args.fmt}')

    console = None
    if args.verbose:
        console = sheetcalc_logging_to_console(
            logging.DEBUG if args.verbose > 1 else logging.INFO)

    try:
        if not os.path.exists(args.filename):
            print(f'File not found - {args.filename}', file=sys.stderr)
            return 1

        if not os.path.isfile(args.filename) or not os.access(
                args.filename, os.R_OK):
            print(f'File not readable - {args.filename}', file=sys.stderr)
            return 1

        try:
            sheet = Spreadsheet.from_csv(
                args.filename, delimiter=args.delimiter)
            getter = sheet.get_strict if args.strict else sheet.get_formatted
            sheet.print_stream(sys.stdout, getter, fmt=args.fmt)

        except (SheetCalcException, OSError, UnicodeDecodeError) as exc:
            if console is not None:
                sheetcalc_logger.error(
                    'Failed to evaluate %s', args.filename, exc_info=True)
            print(f'{type(exc).__name__}: {exc}', file=sys.stderr)
            return 1

        return 0

    finally:
        if console is not None:
            sheetcalc_logger.removeHandler(console)
