# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

"""
    CsvWrapper : Rows of cell text from a headerless delimited text file
"""

import abc
import io
import os


class SheetWrapper(abc.ABC):

    def __init__(self, delimiter=','):
        self.delimiter = delimiter

    @abc.abstractmethod
    def rows(self):
        """Yield a list of cell texts for each row"""


class CsvWrapper(SheetWrapper):
    """ Plain text implementation for SheetWrapper interface

    Fields are split on the delimiter, there is no quoting.
    """

    def __init__(self, source, delimiter=','):
        super().__init__(delimiter=delimiter)
        if isinstance(source, (str, os.PathLike)):
            self.filename = os.path.abspath(source)
            self.stream = None
        else:
            self.filename = getattr(source, 'name', None)
            self.stream = source

    def rows(self):
        if self.stream is None:
            with open(self.filename, 'r', encoding='utf-8', newline='') as f:
                yield from self._split_lines(f)
        else:
            yield from self._split_lines(self.stream)

    def _split_lines(self, lines):
        for line in lines:
            yield line.rstrip('\r\n').split(self.delimiter)

    @classmethod
    def from_text(cls, text, delimiter=','):
        return cls(io.StringIO(text), delimiter=delimiter)


def write_rows(writer, rows, delimiter=','):
    """ Write rows of strings, one line per row

    :param writer: text stream, flushed when done
    :param rows: iterable of iterables of strings
    :param delimiter: placed between the columns
    """
    for row in rows:
        writer.write(delimiter.join(row))
        writer.write(os.linesep)
    writer.flush()
