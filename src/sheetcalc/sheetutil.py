# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import collections
import re

from openpyxl.utils import column_index_from_string, get_column_letter


# cell names are a single letter, 'A' to 'Z'
MAX_COL = 26

DEFAULT_FORMAT = '{:.2f}'

ADDRESS_RE = re.compile(r'^(?P<column>[A-Z])(?P<row>[0-9]+)$')
ROW_RE = re.compile(r'^[0-9]+$')
COLUMN_RE = re.compile(r'^[A-Z]$')


class SheetCalcException(Exception):
    """Base class for Sheetcalc errors"""


class GridShapeError(SheetCalcException):
    """The rows given can not be loaded as a rectangular grid"""

    def __init__(self, msg, row=None):
        super().__init__(msg)
        self.row = row


class ColumnCountMismatch(GridShapeError):
    """A row has a different number of columns than the first row"""


class TooManyColumns(GridShapeError):
    """More columns than there are single letter column names"""


class FormulaEvalError(SheetCalcException):
    """Error during eval"""


class EmptyCellEvaluated(FormulaEvalError):
    """A blank cell was asked for a numeric value"""


class SelfReference(FormulaEvalError):
    """A cell refers to itself"""


class AddressOutOfRange(FormulaEvalError):
    """A reference outside of the grid, or with no grid at all"""


class CircularReference(FormulaEvalError):
    """An address was reached twice during one evaluation"""

    def __init__(self, address, chain):
        self.address = address
        self.chain = tuple(sorted(chain, key=lambda a: a.sort_key))
        super().__init__(
            f"Address {address} has a circular reference. "
            f"Reference chain is [{' '.join(str(a) for a in self.chain)}]")


class GridPrintError(FormulaEvalError):
    """A cell failed while printing the whole grid"""

    def __init__(self, msg, address=None):
        super().__init__(msg)
        self.address = address


class AddressCell(collections.namedtuple('AddressCell', 'address col_idx row')):
    """ Helper class for constructing, validating and accessing Cell Addresses

    **Tuple Attributes:**

    .. py:attribute:: address

        `AddressCell` as a string, ie: `B2`

    .. py:attribute:: col_idx

        Column number as a 1 based index

    .. py:attribute:: row

        Row number as a 1 based index
    """

    def __new__(cls, address, *args):
        if args:
            return super(AddressCell, cls).__new__(cls, address, *args)

        if is_address(address):
            return address

        elif isinstance(address, str):
            return cls.create(address)

        elif isinstance(address, tuple) and len(address) == 2:
            col_idx, row = address
            if not (isinstance(col_idx, int) and 1 <= col_idx <= MAX_COL):
                raise ValueError(f"Column out of range 1 to {MAX_COL}: {col_idx}")
            if not (isinstance(row, int) and row >= 1):
                raise ValueError(f"Row must be a positive integer: {row}")

            return super(AddressCell, cls).__new__(
                cls, f'{get_column_letter(col_idx)}{row}', col_idx, row)

        raise ValueError(f"Unknown address: {address!r}")

    def __str__(self):
        return self.address

    @property
    def column(self):
        """column letter"""
        return get_column_letter(self.col_idx)

    @property
    def coordinate(self):
        return self.address

    @property
    def sort_key(self):
        return self.col_idx, self.row

    @classmethod
    def create(cls, address):
        """ Factory method.

        :param address: str like `B2`, `AddressCell` or (col_idx, row)
        :return: `AddressCell`
        """
        if not isinstance(address, str):
            return cls(address)

        match = ADDRESS_RE.match(address)
        if match is None:
            raise ValueError(f"{address} is not a valid coordinate")
        return cls((column_index_from_string(match.group('column')),
                    int(match.group('row'))))

    @classmethod
    def from_parts(cls, row, column):
        """ Build an address from separate row and column strings

        :param row: row number as a string, ie: `2`
        :param column: column letter, ie: `B`
        :return: `AddressCell`
        """
        if not (isinstance(row, str) and ROW_RE.match(row) and
                isinstance(column, str) and COLUMN_RE.match(column)):
            raise ValueError(
                f"Can not create address from row: {row!r}, column: {column!r}")
        return cls.create(column + row)


def is_address(addr):
    return isinstance(addr, AddressCell)


def grid_addresses(height, width):
    """Get each address for every cell, yields one row at a time."""
    for row in range(1, height + 1):
        yield tuple(AddressCell((col, row)) for col in range(1, width + 1))


def uniqueify(seq):
    seen = set()
    return tuple(x for x in seq if x not in seen and not seen.add(x))


def format_value(value, fmt=DEFAULT_FORMAT):
    return fmt.format(value)


class ReferenceTracker:
    """Which addresses have been dereferenced during one top level read

    A fresh tracker is built for each top level read and handed down the
    evaluation, so nothing is carried from one read to the next.
    """

    def __init__(self):
        self.root = None
        self.visited = set()

    def __len__(self):
        return len(self.visited)

    def __contains__(self, address):
        return AddressCell(address) in self.visited

    def visit(self, address):
        """ Record an address about to be dereferenced

        :param address: `AddressCell` being dereferenced
        :raises CircularReference: if the address was already visited
        """
        if self.root is None:
            self.root = address
        elif address in self.visited:
            raise CircularReference(address, self.visited)
        self.visited.add(address)
