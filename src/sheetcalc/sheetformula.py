# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

"""
Cell expressions and the parser which builds them from cell text.

Every cell holds one expression tree.  The leaves are numbers, references
to other cells and the blank cell.  The inner nodes are the four binary
operators.  The parser does not tokenize; it splits the text at the last
occurrence of the lowest precedence operator present, which gives the
usual precedence and left associativity for `+ - * /`.
"""

import collections
import operator
import re

import numpy as np

from sheetcalc.sheetutil import (
    AddressCell,
    AddressOutOfRange,
    DEFAULT_FORMAT,
    EmptyCellEvaluated,
    format_value,
    ReferenceTracker,
    SelfReference,
    SheetCalcException,
    uniqueify,
)


INTEGER_RE = re.compile(r'^-?[0-9]+$')
FLOAT_RE = re.compile(r'^-?[0-9]*\.[0-9]+$')
REFERENCE_RE = re.compile(r'^[A-Z][0-9]+$')

# an operator with at least one character on each side of it
ADD_SUBTRACT_RE = re.compile(r'.+[+\-].+', re.DOTALL)
MULTIPLY_DIVIDE_RE = re.compile(r'.+[*/].+', re.DOTALL)


class FormulaParserError(SheetCalcException):
    """Error during parsing"""


class MalformedExpression(FormulaParserError):
    """Cell text which does not match the cell grammar"""


def _divide(numerator, denominator):
    # x / 0 is inf or nan, as for any float
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


class _Expression:
    """Shared behavior of the expression variants

    The variants are immutable tuples, equal only to the same variant with
    equal contents.
    """

    needed_addresses = ()

    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    __hash__ = tuple.__hash__

    def __str__(self):
        return self.render()

    def eval(self, sheet=None, tracker=None):
        raise NotImplementedError

    def render(self):
        raise NotImplementedError

    def display_string(self, sheet=None, fmt=DEFAULT_FORMAT, tracker=None):
        """ The evaluated value as a string

        :param sheet: `Spreadsheet` used to dereference addresses
        :param fmt: format template for the value
        :param tracker: `ReferenceTracker` for this read
        """
        return format_value(self.eval(sheet, tracker), fmt)

    def step(self, sheet, tracker):
        """Value of a leaf, or the expression to continue with"""
        return self.eval(sheet, tracker)


class _Combine:
    """Marks where the two operand results of `operation` are complete"""

    __slots__ = ('operation', )

    def __init__(self, operation):
        self.operation = operation


def _fold(expression, leaf, combine):
    """ Post order walk of the tree on an explicit stack

    Deep trees and long reference chains do not use up the interpreter's
    stack.  The left operand is always finished before the right one starts.

    :param expression: root of the tree
    :param leaf: called with each leaf, returns its result or another
        expression to walk in its place
    :param combine: called with (operation, left result, right result)
    :return: the result for the root
    """
    results = []
    todo = [expression]
    while todo:
        node = todo.pop()
        if isinstance(node, _Combine):
            right = results.pop()
            results.append(combine(node.operation, results.pop(), right))

        elif isinstance(node, _BinaryOperation):
            todo.extend((_Combine(node), node.right, node.left))

        else:
            result = leaf(node)
            if isinstance(result, _Expression):
                todo.append(result)
            else:
                results.append(result)

    return results.pop()


def evaluate(expression, sheet=None, tracker=None):
    """ Evaluate an expression tree, following references into the sheet

    :param expression: root of the tree
    :param sheet: `Spreadsheet` used to dereference addresses
    :param tracker: `ReferenceTracker` for this read, a new one if None
    :return: float
    """
    if tracker is None:
        tracker = ReferenceTracker()
    return _fold(
        expression,
        lambda node: node.step(sheet, tracker),
        lambda operation, left, right: float(operation.operate(left, right)),
    )


class IntegerLeaf(_Expression, collections.namedtuple('IntegerLeaf', 'value')):

    def eval(self, sheet=None, tracker=None):
        return float(self.value)

    def render(self):
        return format_value(self.value)


class FloatLeaf(_Expression, collections.namedtuple('FloatLeaf', 'value')):

    def eval(self, sheet=None, tracker=None):
        return self.value

    def render(self):
        return format_value(self.value)


class NullLeaf(_Expression, collections.namedtuple('NullLeaf', '')):
    """A blank cell.  Prints as blank but has no value."""

    def eval(self, sheet=None, tracker=None):
        raise EmptyCellEvaluated('Blank cells can not be evaluated')

    def render(self):
        return ''

    def display_string(self, sheet=None, fmt=DEFAULT_FORMAT, tracker=None):
        # blank when printed at the top, but still fails inside an operation
        return ''


class CellReference(_Expression,
                    collections.namedtuple('CellReference', 'address')):
    """A reference to another cell in the sheet"""

    def __new__(cls, address):
        return super(CellReference, cls).__new__(cls, AddressCell(address))

    @property
    def needed_addresses(self):
        return (self.address, )

    def eval(self, sheet=None, tracker=None):
        return evaluate(self, sheet, tracker)

    def step(self, sheet, tracker):
        """ Check the reference and record it with the tracker

        :return: the expression stored in the referenced cell
        """
        address = self.address
        if (sheet is None or
                address.row > sheet.row_count or
                address.col_idx > sheet.column_count):
            raise AddressOutOfRange(
                f'{address} is outside of the sheet, '
                f'or there is no sheet to evaluate it in')

        contents = sheet.contents(address)
        if contents is self:
            raise SelfReference(f'Self referring cell address: {address}')

        tracker.visit(address)

        if contents is None:
            raise EmptyCellEvaluated(f'{address} is empty')

        sheet.log.debug('Dereferencing %s -> %s', address, contents)
        return contents

    def render(self):
        return self.address.address


class _BinaryOperation(_Expression):

    symbol = None

    @staticmethod
    def operate(left, right):
        raise NotImplementedError

    @property
    def needed_addresses(self):
        return _fold(
            self,
            lambda node: node.needed_addresses,
            lambda operation, left, right: uniqueify(left + right),
        )

    def eval(self, sheet=None, tracker=None):
        return evaluate(self, sheet, tracker)

    def render(self):
        return _fold(
            self,
            lambda node: node.render(),
            lambda operation, left, right: f'{left} {operation.symbol} {right}',
        )



class AddOperation(_BinaryOperation,
                   collections.namedtuple('AddOperation', 'left right')):
    symbol = '+'
    operate = staticmethod(operator.add)


class SubtractOperation(_BinaryOperation,
                        collections.namedtuple('SubtractOperation', 'left right')):
    symbol = '-'
    operate = staticmethod(operator.sub)


class MultiplyOperation(_BinaryOperation,
                        collections.namedtuple('MultiplyOperation', 'left right')):
    symbol = '*'
    operate = staticmethod(operator.mul)


class DivideOperation(_BinaryOperation,
                      collections.namedtuple('DivideOperation', 'left right')):
    symbol = '/'
    operate = staticmethod(_divide)


OPERATIONS = {
    op.symbol: op for op in (
        AddOperation, SubtractOperation, MultiplyOperation, DivideOperation)
}


def parse(text):
    """ Parse cell text into an expression tree

    `+` and `-` are split before `*` and `/` so they end up nearer the
    root.  Within a pair, `+` (`*`) is split before `-` (`/`).

    :param text: the text of one cell
    :return: expression tree
    """
    if not isinstance(text, str):
        raise MalformedExpression(f'Cell text must be a string: {text!r}')

    text = text.strip()

    if ADD_SUBTRACT_RE.match(text):
        return parse_binary(text, '+' if '+' in text[1:-1] else '-')

    if MULTIPLY_DIVIDE_RE.match(text):
        return parse_binary(text, '*' if '*' in text[1:-1] else '/')

    return parse_terminal(text)


def parse_binary(text, op):
    """ Split at every `op`, then fold the operands from the left

    This is the same tree as splitting at the last `op` and parsing
    everything before it again, without recursing once per operator.

    :param text: cell text containing `op`
    :param op: one of `+ - * /`
    :return: the binary operation
    """
    if not text or not text.strip():
        raise MalformedExpression('Binary expression can not be blank')
    if not op or op.strip() not in OPERATIONS:
        raise MalformedExpression(f'Unsupported operator: {op!r}')

    text = text.strip()
    op = op.strip()

    segments = text.split(op)
    if len(segments) == 1:
        raise MalformedExpression(f'Malformed cell text, no {op}: {text}')

    if op == '-' and segments[0] == '':
        # leading minus sign of the first operand
        segments[:2] = [op + segments[1]]

    if len(segments) == 1 or not all(segment.strip() for segment in segments):
        raise MalformedExpression(f'Missing operand for {op}: {text}')

    operation = OPERATIONS[op]
    expression = parse(segments[0])
    for segment in segments[1:]:
        expression = operation(expression, parse(segment))
    return expression


def parse_terminal(text):
    """ Parse text with no binary operator in it

    :param text: a number, a reference such as `B2`, or blank
    :return: the leaf expression
    """
    if not isinstance(text, str):
        raise MalformedExpression(f'Cell text must be a string: {text!r}')

    # surrounding whitespace is a common typo, all blank is an empty cell
    text = text.strip()

    if INTEGER_RE.match(text):
        try:
            value = int(text)
            float(value)
        except (OverflowError, ValueError) as exc:
            # beyond the float range, or too many digits to convert
            raise MalformedExpression(f'Integer out of range: {text}') from exc
        return IntegerLeaf(value)

    elif FLOAT_RE.match(text):
        return FloatLeaf(float(text))

    elif REFERENCE_RE.match(text):
        try:
            return CellReference(text)
        except ValueError as exc:
            raise MalformedExpression(f'Bad cell reference: {text}') from exc

    elif text == '':
        return NullLeaf()

    raise MalformedExpression(f'Unsupported terminal value: {text}')
