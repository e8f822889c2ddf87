# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

from .sheetcontext import Spreadsheet  # noqa: F401
from .sheetformula import (  # noqa: F401
    FormulaParserError,
    MalformedExpression,
    parse,
)
from .sheetutil import (  # noqa: F401
    AddressCell,
    AddressOutOfRange,
    CircularReference,
    ColumnCountMismatch,
    EmptyCellEvaluated,
    FormulaEvalError,
    GridPrintError,
    GridShapeError,
    SelfReference,
    SheetCalcException,
    TooManyColumns,
)
from .version import __version__  # noqa: F401
