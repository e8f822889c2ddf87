# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import json
import logging
import pickle

import networkx as nx
from ruamel.yaml import YAML

from sheetcalc.sheetformula import MalformedExpression, NullLeaf, parse
from sheetcalc.sheetutil import (
    AddressCell,
    AddressOutOfRange,
    ColumnCountMismatch,
    DEFAULT_FORMAT,
    format_value,
    grid_addresses,
    GridPrintError,
    MAX_COL,
    ReferenceTracker,
    SheetCalcException,
    TooManyColumns,
)
from sheetcalc.sheetwrapper import CsvWrapper, write_rows

sheetcalc_logger = logging.getLogger('sheetcalc')


class Spreadsheet:
    """A grid of cells, each holding a parsed expression.

    Cell text is parsed when it is put into the grid, and evaluated each time
    the cell is read.  Nothing is cached between reads.
    """

    save_file_extensions = ('pkl', 'pickle', 'yml', 'yaml', 'json')

    def __init__(self, delimiter=','):
        self.delimiter = delimiter
        self.log = sheetcalc_logger

        # cell address to Cell mapping
        self.cell_map = {}

        # directed graph for cell dependencies, precedent -> dependant
        self.dep_graph = nx.DiGraph()

        self._row_count = 0
        self._column_count = 0

    def __getstate__(self):
        state = dict(self.__dict__)
        state['log'] = None
        return state

    def __setstate__(self, d):
        self.__dict__.update(d)
        self.log = sheetcalc_logger

    def __repr__(self):
        return f'{type(self).__name__}<{self.row_count}x{self.column_count}>'

    @property
    def row_count(self):
        return self._row_count

    @property
    def column_count(self):
        return self._column_count

    @classmethod
    def from_rows(cls, rows, delimiter=','):
        """ Build a spreadsheet from rows of cell text

        The first row sets the number of columns, every other row must match.

        :param rows: iterable of iterables of cell text
        :param delimiter: delimiter to use when printing
        :return: `Spreadsheet`
        """
        sheet = cls(delimiter=delimiter)
        column_count = None
        for row, texts in enumerate(rows, start=1):
            texts = list(texts)
            if column_count is None:
                column_count = len(texts)
                if column_count > MAX_COL:
                    raise TooManyColumns(
                        f'No more than {MAX_COL} columns allowed, '
                        f'found {column_count}', row=row)

            elif len(texts) != column_count:
                raise ColumnCountMismatch(
                    f'Inconsistent number of columns in row {row}: '
                    f'{len(texts)} found, {column_count} expected', row=row)

            for col_idx, text in enumerate(texts, start=1):
                sheet.put(AddressCell((col_idx, row)), text)

        sheet.log.info('Loaded %s rows, %s columns, %s cells',
                       sheet.row_count, sheet.column_count, len(sheet.cell_map))
        return sheet

    @classmethod
    def from_csv(cls, source, delimiter=','):
        """ Load a spreadsheet from a headerless delimited text file

        :param source: filename or text stream
        :param delimiter: field delimiter
        :return: `Spreadsheet`
        """
        return cls.from_rows(
            CsvWrapper(source, delimiter=delimiter).rows(), delimiter=delimiter)

    def put(self, address, text):
        """ Parse text into the cell at address, replacing what was there

        The grid grows to include the address if needed.

        :param address: `str` or `AddressCell`
        :param text: cell text
        """
        address = AddressCell(address)
        self.log.debug('Put %s: %r', address, text)
        try:
            cell = _Cell(address, text)
        except MalformedExpression as exc:
            raise MalformedExpression(f'{address}: {exc}') from exc
        self.cell_map[address.address] = cell

        self._row_count = max(self._row_count, address.row)
        self._column_count = max(self._column_count, address.col_idx)

        # a new cell replaces any precedents of the old one
        node = address.address
        if node in self.dep_graph:
            self.dep_graph.remove_edges_from(
                tuple(self.dep_graph.in_edges(node)))
        self.dep_graph.add_node(node, label=node)
        for precedent in cell.needed_addresses:
            self.dep_graph.add_edge(precedent.address, node)

    def contents(self, address):
        """The expression stored at address, None if nothing was put there"""
        cell = self.cell_map.get(AddressCell(address).address)
        return None if cell is None else cell.expression

    def _top_expression(self, address):
        address = AddressCell(address)
        if address.row > self.row_count or address.col_idx > self.column_count:
            raise AddressOutOfRange(
                f'{address} is outside of the {self.row_count} x '
                f'{self.column_count} sheet')

        expression = self.contents(address)
        if expression is None:
            # never put, but inside the grid
            expression = NullLeaf()

        self.log.debug('Evaluating: %s, %s', address, expression)
        return address, expression

    def evaluate(self, address):
        """ Evaluate a cell to a number, failing on any bad cell

        :param address: `str` or `AddressCell`
        :return: float
        """
        address, expression = self._top_expression(address)
        value = expression.eval(self, ReferenceTracker())
        self.log.info("Cell %s evaluated to '%s'", address, value)
        return value

    def get_strict(self, address, fmt=DEFAULT_FORMAT):
        """ Evaluated value of the cell as a string, blank cells fail

        :param address: `str` or `AddressCell`
        :param fmt: format template for the value
        """
        return format_value(self.evaluate(address), fmt)

    def get_formatted(self, address, fmt=DEFAULT_FORMAT):
        """ Evaluated value of the cell as a string, a blank cell is ''

        Only the cell itself may be blank, blank cells referenced from it
        still fail.

        :param address: `str` or `AddressCell`
        :param fmt: format template for the value
        """
        address, expression = self._top_expression(address)
        return expression.display_string(self, fmt, ReferenceTracker())

    def to_rows(self, getter=None, fmt=DEFAULT_FORMAT):
        """ Every cell as a string, one list per row

        :param getter: one of `get_formatted` (default) or `get_strict`
        :param fmt: format template for the values
        :raises GridPrintError: on the first cell which fails
        """
        getter = getter or self.get_formatted
        rows = []
        for row in grid_addresses(self.row_count, self.column_count):
            texts = []
            for address in row:
                try:
                    texts.append(getter(address, fmt))
                except SheetCalcException as exc:
                    raise GridPrintError(
                        f'Can not print cell {address}: {exc}',
                        address=address) from exc
            rows.append(texts)
        return rows

    def print_stream(self, writer, getter=None, fmt=DEFAULT_FORMAT):
        """ Write the whole evaluated grid to writer

        Every cell is evaluated before anything is written, so a failure
        leaves the writer untouched.

        :param writer: text stream, flushed when done
        :param getter: one of `get_formatted` (default) or `get_strict`
        :param fmt: format template for the values
        :raises GridPrintError: if any cell can not be evaluated
        """
        write_rows(writer, self.to_rows(getter, fmt), delimiter=self.delimiter)

    def precedents(self, address):
        """Addresses the cell refers to"""
        return self._neighbors(address, self.dep_graph.predecessors)

    def dependents(self, address):
        """Addresses of cells which refer to the cell"""
        return self._neighbors(address, self.dep_graph.successors)

    def _neighbors(self, address, neighbors):
        node = AddressCell(address).address
        if node not in self.dep_graph:
            return ()
        return tuple(sorted((AddressCell(a) for a in neighbors(node)),
                            key=lambda a: a.sort_key))

    def value_tree_str(self, address):
        """Generator which returns a formatted dependency graph"""
        seen = set()
        todo = [(AddressCell(address), 0)]
        while todo:
            address, indent = todo.pop()
            if address in seen:
                yield "{}{} <- cycle".format(" " * indent, address)
                continue

            seen.add(address)
            try:
                value = self.get_formatted(address)
            except SheetCalcException as exc:
                value = f'<{type(exc).__name__}>'
            yield "{}{} = {}".format(" " * indent, address, value)
            todo.extend((precedent, indent + 1)
                        for precedent in reversed(self.precedents(address)))

    def export_to_gexf(self, filename):
        from networkx.readwrite.gexf import write_gexf
        write_gexf(self.dep_graph, filename)

    @classmethod
    def _filename_extension(cls, filename):
        return next((extension for extension in cls.save_file_extensions
                     if str(filename).endswith('.' + extension)), None)

    def _to_dict(self):
        return dict(
            rows=self.row_count,
            columns=self.column_count,
            delimiter=self.delimiter,
            cells=dict(
                (cell.address.address, cell.text) for cell in sorted(
                    self.cell_map.values(), key=lambda c: c.address.sort_key)
            ),
        )

    @classmethod
    def _from_dict(cls, data):
        sheet = cls(delimiter=data.get('delimiter', ','))
        for address, text in data['cells'].items():
            sheet.put(address, text)
        sheet._row_count = max(sheet.row_count, data.get('rows', 0))
        sheet._column_count = max(sheet.column_count, data.get('columns', 0))
        return sheet

    def to_file(self, filename):
        """ Save the spreadsheet to a file so it can be loaded later

        :param filename: ending in one of: pkl, pickle, yml, yaml, json

        The text formats keep the cell text, which is parsed again on load.
        """
        extension = self._filename_extension(filename)
        if extension is None:
            raise ValueError(f'Unknown file type: {filename}')

        self.log.info('Saving %s cells to %s', len(self.cell_map), filename)
        if extension[0] == 'p':
            with open(filename, 'wb') as f:
                pickle.dump(self, f)

        elif extension == 'json':
            with open(filename, 'w') as f:
                json.dump(self._to_dict(), f, indent=4)

        else:
            with open(filename, 'w') as f:
                ymlo = YAML()
                ymlo.width = 120
                ymlo.dump(self._to_dict(), f)

    @classmethod
    def from_file(cls, filename):
        """ Load the spreadsheet saved by `to_file`

        :param filename: filename to load from
        """
        extension = cls._filename_extension(filename)
        if extension is None:
            raise ValueError(f'Unrecognized file type: {filename}')

        if extension[0] == 'p':
            with open(filename, 'rb') as f:
                return pickle.load(f)

        with open(filename, 'r') as f:
            if extension == 'json':
                data = json.load(f)
            else:
                data = YAML().load(f)
        return cls._from_dict(data)


class _Cell:

    def __init__(self, address, text):
        self.address = AddressCell(address)
        self.text = text
        self.expression = parse(text)

    def __repr__(self):
        return "{} -> {}".format(self.address, self.text)

    __str__ = __repr__

    @property
    def needed_addresses(self):
        return self.expression.needed_addresses

    def __getstate__(self):
        # the tree is rebuilt from the text, deep trees do not pickle
        return dict(address=self.address, text=self.text)

    def __setstate__(self, d):
        self.__init__(d['address'], d['text'])
