# -*- coding: UTF-8 -*-
#
# Copyright 2024 by the Sheetcalc Contributors
# All rights reserved.
# This file is part of the Sheetcalc Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import math
import pickle
import sys

import pytest

from sheetcalc.sheetformula import (
    AddOperation,
    CellReference,
    DivideOperation,
    FloatLeaf,
    IntegerLeaf,
    MalformedExpression,
    MultiplyOperation,
    NullLeaf,
    OPERATIONS,
    parse,
    parse_binary,
    parse_terminal,
    SubtractOperation,
)
from sheetcalc.sheetutil import (
    AddressCell,
    AddressOutOfRange,
    EmptyCellEvaluated,
    ReferenceTracker,
)


def test_parse_terminal():
    e = parse_terminal('1')
    assert isinstance(e, IntegerLeaf)
    assert '1.00' == e.render()
    assert 1 == e.eval(None)

    e = parse_terminal('B2')
    assert isinstance(e, CellReference)
    assert AddressCell('B2') == e.address

    e = parse_terminal('1.10000000003204343')
    assert isinstance(e, FloatLeaf)
    assert '1.10' == e.render()
    assert 1.1 == pytest.approx(e.eval(None))

    assert '' == parse_terminal('').render()
    assert '' == parse_terminal('    ').render()
    assert isinstance(parse_terminal('   '), NullLeaf)

    # surrounding whitespace
    assert 0 == parse_terminal(' 0   ').eval(None)
    assert 'B232' == parse_terminal('   B232  ').render()
    assert 0.9 == pytest.approx(parse_terminal(' 0.9 ').eval(None))


@pytest.mark.parametrize(
    'text, expected', (
        ('-9', IntegerLeaf(-9)),
        ('007', IntegerLeaf(7)),
        ('-0.25', FloatLeaf(-0.25)),
        ('12.5', FloatLeaf(12.5)),
        ('.5', FloatLeaf(0.5)),
        ('-.5', FloatLeaf(-0.5)),
        ('Z26', CellReference('Z26')),
        ('', NullLeaf()),
    )
)
def test_parse_terminal_types(text, expected):
    assert expected == parse_terminal(text)


@pytest.mark.parametrize(
    'text', (
        'junk', '1*3', 'b2', 'BB2', '1. 9', '.', '-.', '5.', '--9', '1e5',
        'A0', 'A', '+1', '(1)', None,
    )
)
def test_parse_terminal_errors(text):
    with pytest.raises(MalformedExpression):
        parse_terminal(text)


def test_blank_can_not_be_evaluated():
    with pytest.raises(EmptyCellEvaluated):
        parse_terminal('').eval(None)

    # but prints as a blank
    assert '' == parse_terminal('').display_string(None)


def test_parse_binary():
    assert 3 == parse_binary('1+2', '+').eval(None)
    assert 8 == parse_binary('10-2', '-').eval(None)
    assert 8 == parse('10-2').eval(None)
    assert 6 == parse_binary('1+2+3', '+').eval(None)
    assert 7 == parse_binary('1+2*3', '+').eval(None)
    assert 6 == parse_binary(' 2 * 3 ', ' * ').eval(None)
    assert -3 == parse_binary('-1-2', '-').eval(None)
    assert -6 == parse_binary('-1-2-3', '-').eval(None)


@pytest.mark.parametrize(
    'text, op', (
        (None, '+'),
        ('', ''),
        ('  ', '+'),
        ('1+2', ''),
        ('1+2', None),
        ('1@2', ''),
        ('1@2', '@'),
        ('1 ', ''),
        ('1 ', '+'),
        ('1+', '+'),
        ('+1', '+'),
        ('1++2', '+'),
        ('-1', '-'),
        ('--1-2', '-'),
        ('1--2', '-'),
    )
)
def test_parse_binary_errors(text, op):
    with pytest.raises(MalformedExpression):
        parse_binary(text, op)


@pytest.mark.parametrize(
    'text, expected', (
        ('10-2-1', 7),
        ('10-2-1+10-3', 14),
        ('10-2-1+10*8-3', 84),
        ('40/4/2', 5),
        ('64*3/2*8', 768),
        ('10-2-1+10*8-3/2*9/3', 82.5),
        ('10-2-20', -12),
        ('8/2*2', 8),
        ('2+3*4', 14),
        ('2*3+4', 10),
        ('1 + 2 * 3 - 4 / 2', 5),
        ('-9', -9),
        ('-9-2', -11),
        ('-9+2', -7),
        ('1+-2', -1),
        ('  0  ', 0),
        ('1.5*2', 3),
    )
)
def test_ordering_and_left_associativity(text, expected):
    assert expected == parse(text).eval(None)


def test_left_associative_tree():
    e = parse('10-2-1')
    assert SubtractOperation(
        SubtractOperation(IntegerLeaf(10), IntegerLeaf(2)),
        IntegerLeaf(1)) == e

    e = parse('A1+B2*3')
    assert AddOperation(
        CellReference('A1'),
        MultiplyOperation(CellReference('B2'), IntegerLeaf(3))) == e


@pytest.mark.parametrize(
    'text', (
        'junk', '1+junk', '1*', '2*-3', '5--3', '1+2+', 'b1+1', 'A1+AA1',
        '1 + 2 +', '1,2', '1^2', 'A0*2', '-2*-3',
    )
)
def test_parse_errors(text):
    with pytest.raises(MalformedExpression):
        parse(text)


def test_parse_not_a_string():
    with pytest.raises(MalformedExpression):
        parse(None)

    with pytest.raises(MalformedExpression):
        parse(12)


@pytest.mark.parametrize(
    'text, rendered', (
        ('1', '1.00'),
        ('2.5', '2.50'),
        ('  B232  ', 'B232'),
        ('', ''),
        ('1+2', '1.00 + 2.00'),
        ('B1 - A1 - A2', 'B1 - A1 - A2'),
        ('A1*2/B1', 'A1 * 2.00 / B1'),
    )
)
def test_render(text, rendered):
    e = parse(text)
    assert rendered == e.render()
    assert rendered == str(e)


def test_divide_by_zero():
    assert math.isinf(parse('1/0').eval(None))
    assert parse('1/0').eval(None) > 0
    assert parse('-1/0').eval(None) < 0
    assert math.isnan(parse('0/0').eval(None))
    assert 'inf' == parse('1/0').display_string(None)


def test_blank_inside_operation_fails():
    e = AddOperation(IntegerLeaf(1), NullLeaf())
    with pytest.raises(EmptyCellEvaluated):
        e.eval(None)

    with pytest.raises(EmptyCellEvaluated):
        e.display_string(None)


def test_reference_needs_a_sheet():
    with pytest.raises(AddressOutOfRange):
        parse('A1').eval(None)

    with pytest.raises(AddressOutOfRange):
        parse('1+A1').eval(None)


def test_reference_out_of_range(sheet):
    with pytest.raises(AddressOutOfRange):
        parse('E1').eval(sheet)

    with pytest.raises(AddressOutOfRange):
        parse('A3').eval(sheet)

    assert 4 == parse('C1').eval(sheet)
    assert 8 == parse('C1 * 2').eval(sheet, ReferenceTracker())


def test_display_string(sheet):
    assert '4.00' == parse('C1').display_string(sheet)
    assert '4.0' == parse('C1').display_string(sheet, '{:.1f}')
    assert '-4.00' == parse('D2').display_string(sheet)


def test_needed_addresses():
    assert () == parse('1+2').needed_addresses
    assert () == parse('').needed_addresses
    assert (AddressCell('B1'), ) == parse('B1').needed_addresses
    assert tuple(AddressCell(a) for a in ('B1', 'A1', 'A2')) == \
        parse('B1 - A1 - A2 * A1').needed_addresses


def test_variants_equality():
    assert AddOperation(IntegerLeaf(1), IntegerLeaf(2)) != \
        SubtractOperation(IntegerLeaf(1), IntegerLeaf(2))
    assert IntegerLeaf(1) != FloatLeaf(1.0)
    assert NullLeaf() == NullLeaf()
    assert parse('A1+2') == parse(' A1 + 2 ')
    assert len({parse('A1+2'), parse('A1 + 2'), parse('A1-2')}) == 2


def test_each_parse_is_a_fresh_tree():
    first = parse('A1+2')
    second = parse('A1+2')
    assert first == second
    assert first.left is not second.left


def test_operations_table():
    assert {
        '+': AddOperation,
        '-': SubtractOperation,
        '*': MultiplyOperation,
        '/': DivideOperation,
    } == OPERATIONS


def test_pickle_expression():
    e = parse('A1 + 2.5 * 3 / B2 - 1')
    assert e == pickle.loads(pickle.dumps(e))
    assert NullLeaf() == pickle.loads(pickle.dumps(NullLeaf()))


def test_integer_out_of_float_range():
    assert 10.0 ** 300 == parse('1' + '0' * 300).eval(None)

    for text in ('1' + '0' * 400, '-1' + '0' * 400, '9' * 5000):
        with pytest.raises(MalformedExpression, match='out of range'):
            parse(text)


def test_many_operators_in_one_cell():
    count = sys.getrecursionlimit() + 100

    e = parse('+'.join(['1'] * count))
    assert count == e.eval(None)
    assert ' + '.join(['1.00'] * count) == e.render()

    e = parse('-'.join(['-1'] + ['1'] * (count - 1)))
    assert -count == e.eval(None)

    e = parse(' * '.join(['2'] * 10 + ['0.5'] * 10))
    assert 1 == e.eval(None)

    e = parse('+'.join(f'A{row}' for row in range(1, count)) + '+A1')
    assert count - 1 == len(e.needed_addresses)
    assert AddressCell('A1') == e.needed_addresses[0]
