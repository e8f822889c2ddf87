# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import os

import pytest

from sheetcalc.sheetcontext import Spreadsheet


EXAMPLE_CELLS = (
    ('A1', '1'),
    ('A2', '2.0'),
    ('B1', '1+2'),
    ('B2', 'B1+1'),
    ('C1', 'B2*A1'),
    ('C2', 'B1 - A1 - A2'),
    ('D1', '-9'),
    ('D2', 'A1-5'),
)


@pytest.fixture(scope='session')
def example_csv():
    return '1,1+2,B2*A1,-9\n2.0,B1+1,B1 - A1 - A2,A1-5\n'


@pytest.fixture(scope='session')
def example_printed():
    return os.linesep.join((
        '1.00,3.00,4.00,-9.00',
        '2.00,4.00,0.00,-4.00',
    )) + os.linesep


@pytest.fixture
def sheet():
    a_sheet = Spreadsheet()
    for address, text in EXAMPLE_CELLS:
        a_sheet.put(address, text)
    return a_sheet


@pytest.fixture
def empty_sheet():
    return Spreadsheet()


@pytest.fixture
def csv_path(tmpdir, example_csv):
    path = os.path.join(str(tmpdir), 'example.csv')
    with open(path, 'w') as f:
        f.write(example_csv)
    return path
