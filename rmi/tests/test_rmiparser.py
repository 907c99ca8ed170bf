#!/usr/bin/env python3

import unittest
import pyparsing as pp

import rmiast
import rmiparser

from rmiast import *
from typing import Any
from operator import attrgetter

class TestRmiParser(unittest.TestCase):
    def _test(self, parser: pp.ParserElement, input: str, type: type, field_values: dict[str, Any]):
        res, = parser.parse_string(input, parse_all=True)
        self.assertIsInstance(res, type)
        for field, value in field_values.items():
            self.assertEqual(attrgetter(field)(res), value)

    def _test_value(self, parser: pp.ParserElement, input: str, value, type: type):
        return self._test(parser, input, type, {'value' : value})

    def test_push(self):
        self._test_value(rmiparser.push, 'PUSH 12345', 12345, rmiast.Push)
        self._test_value(rmiparser.push, '  PUSH\t-7  ', -7, rmiast.Push)
        self._test_value(rmiparser.push, 'PUSH +3', 3, rmiast.Push)

    def test_push_bounds(self):
        self._test_value(rmiparser.push, 'PUSH 2147483647', I32_MAX, rmiast.Push)
        self._test_value(rmiparser.push, 'PUSH -2147483648', I32_MIN, rmiast.Push)
        with self.assertRaises(RMError):
            rmiparser.push.parse_string('PUSH 2147483648', parse_all=True)

    def test_push_invalid_literal(self):
        with self.assertRaises(RMError):
            rmiparser.translate_line('PUSH abc')
        with self.assertRaisesRegex(RMError, r'^3: error: invalid number `1.5`\nPUSH 1.5$'):
            rmiparser.translate_line('PUSH 1.5', 3)

    def test_set(self):
        self._test(rmiparser.set_, 'SET x 10', rmiast.Set, {'name': 'x', 'value': 10})
        with self.assertRaises(RMError):
            rmiparser.translate_line('SET x y')

    def test_get_input(self):
        self._test(rmiparser.get, 'GET counter', rmiast.Get, {'name': 'counter'})
        self._test(rmiparser.input_, 'Input n', rmiast.Input, {'name': 'n'})
        self.assertEqual(rmiparser.translate_line('INPUT n'), [])

    def test_print(self):
        self._test(rmiparser.print_, 'PRINT', rmiast.Print, {})

    def test_binary_operands(self):
        self._test(rmiparser.add, 'ADD 1 x', rmiast.Add, {'op1': IntOperand(1), 'op2': VarOperand('x')})
        self._test(rmiparser.sub, 'SUB a -2', rmiast.Sub, {'op1': VarOperand('a'), 'op2': IntOperand(-2)})
        self._test(rmiparser.mul, 'MUL 3 4', rmiast.Mul, {'op1.value': 3, 'op2.value': 4})
        self._test(rmiparser.div, 'DIV y z', rmiast.Div, {'op1.name': 'y', 'op2.name': 'z'})

    def test_debug_form_operands(self):
        self._test(rmiparser.add, 'ADD Var("x") Var("7")', rmiast.Add,
                   {'op1': VarOperand('x'), 'op2': IntOperand(7)})
        self.assertEqual(rmiparser.operand('Var("Var("y")")'), VarOperand('y'))

    def test_out_of_range_operand_is_variable(self):
        self.assertEqual(rmiparser.operand('4294967296'), VarOperand('4294967296'))

    def test_malformed_lines_dropped(self):
        for line in ['FOO 1 2', 'PUSH', 'PUSH 1 2', 'ADD 1', 'PRINT 3',
                     'push 1', 'PUSH5', '', '   ', 'ENDIF', 'GET a b']:
            with self.subTest(line=line):
                self.assertEqual(rmiparser.translate_line(line), [])

    def test_translate_line_records_location(self):
        inst, = rmiparser.translate_line('ADD 1 2', 9)
        self.assertEqual(inst.lineno, 9)
        self.assertEqual(inst.line, 'ADD 1 2')
        self.assertEqual(inst, Add(IntOperand(1), IntOperand(2)))

    def test_flat_program(self):
        prog = rmiparser.translate_program(['PUSH 1', 'FOO 1 2', 'PUSH 2', 'ADD 1 2', 'PRINT'])
        self.assertEqual(prog, (Push(1), Push(2), Add(IntOperand(1), IntOperand(2)), Print()))

    def test_if_block(self):
        prog = rmiparser.translate_program(['PUSH 1', 'IF', 'PUSH 42', 'PRINT', 'ENDIF', 'PRINT'])
        self.assertEqual(prog, (Push(1), If((Push(42), Print()), ()), Print()))
        self.assertEqual(prog[1].lineno, 2)

    def test_else_block_after_closed_if(self):
        lines = ['PUSH 0', 'IF', 'PUSH 1', 'ENDIF', 'ELSE', 'PUSH 99', 'PRINT', 'ENDIF']
        prog = rmiparser.translate_program(lines)
        self.assertEqual(prog, (Push(0), If((Push(1),), ()), Else((Push(99), Print()))))

    def test_else_inside_if_block_closes_as_else(self):
        lines = ['IF', 'PUSH 1', 'ELSE', 'PUSH 2', 'ENDIF']
        prog = rmiparser.translate_program(lines)
        self.assertEqual(prog, (Else((Push(2),)),))

    def test_else_accumulator_carried_into_if(self):
        lines = ['ELSE', 'PUSH 2', 'IF', 'PUSH 1', 'ENDIF']
        prog = rmiparser.translate_program(lines)
        self.assertEqual(prog, (If((Push(1),), (Push(2),)),))

    def test_nested_if_is_flattened(self):
        lines = ['IF', 'PUSH 1', 'IF', 'PUSH 2', 'ENDIF', 'PUSH 3', 'ENDIF']
        prog = rmiparser.translate_program(lines)
        self.assertEqual(prog, (If((Push(1), Push(2)), ()), Push(3)))

    def test_unterminated_block_dropped(self):
        prog = rmiparser.translate_program(['PUSH 1', 'IF', 'PUSH 2'])
        self.assertEqual(prog, (Push(1),))

    def test_keyword_line_with_extra_tokens(self):
        prog = rmiparser.translate_program(['IF x > 0', 'PRINT', 'ENDIF now'])
        self.assertEqual(prog, (If((Print(),), ()),))

    def test_invalid_literal_reports_line(self):
        with self.assertRaisesRegex(RMError, r'^2: error: invalid number `x`'):
            rmiparser.translate_program(['PRINT', 'PUSH x'])

    def test_trailing_newlines(self):
        prog = rmiparser.translate_program(['PUSH 1\n', 'PRINT\r\n'])
        self.assertEqual(prog, (Push(1), Print()))
        self.assertEqual(prog[1].line, 'PRINT')

    def test_unicode_whitespace_separates_tokens(self):
        prog = rmiparser.translate_program(['PUSH\u00a05', '\u3000PRINT', 'ADD x\u20031'])
        self.assertEqual(prog, (Push(5), Print(), Add(VarOperand('x'), IntOperand(1))))
        self.assertEqual(prog[0].line, 'PUSH\u00a05')

    def test_unicode_whitespace_around_block_keywords(self):
        prog = rmiparser.translate_program(['IF\u00a0', 'PUSH 1', 'ENDIF\u2028'])
        self.assertEqual(prog, (If((Push(1),), ()),))
