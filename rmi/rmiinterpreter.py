#!/usr/bin/env python3

import sys

from functools import singledispatchmethod
from typing import Optional, TextIO
from rmiast import *

import rmiparser

STACK_EMPTY = 'Stack is empty'
DEFAULT_MAX_DEPTH = 100

class Machine:
    def __init__(self):
        self.stack: list[int] = []
        self.vars: dict[str, int] = {}

    def top(self) -> Optional[int]:
        return self.stack[-1] if self.stack else None

def _trunc_div(x: int, y: int) -> int:
    q = abs(x) // abs(y)
    return q if (x < 0) == (y < 0) else -q

class Vm:
    """Walks instruction sequences against a shared `Machine`.

    `If` and `Else` bodies run by recursive re-entry into `run` with the
    same machine, so branches mutate the caller's stack and variables.
    Every fatal condition raises `RMError`.
    """

    __arith = {
        Add: lambda x, y: x + y,
        Sub: lambda x, y: x - y,
        Mul: lambda x, y: x * y,
        Div: _trunc_div,
    }

    def __init__(self, path: str,
                 input: Optional[TextIO] = None,
                 output: Optional[TextIO] = None,
                 trace: Optional[TextIO] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.path = path
        self.input = input if input is not None else sys.stdin
        self.output = output if output is not None else sys.stdout
        self.trace = trace
        self.max_depth = max_depth
        self.depth = 0

    def run(self, prog: tuple[Instruction, ...], machine: Machine):
        pc = 0
        length = len(prog)
        while pc < length:
            inst = prog[pc]
            if self.trace is not None:
                print(f'{self.depth:3d} {inst.lineno:04d} {inst}', file=self.trace)
            self.exec(inst, machine)
            pc += 1

    def enter(self, inst: Instruction, prog: tuple[Instruction, ...], machine: Machine):
        if self.depth >= self.max_depth:
            inst.error(f'maximum branch depth ({self.max_depth}) exceeded')
        self.depth += 1
        try:
            self.run(prog, machine)
        finally:
            self.depth -= 1

    def resolve(self, inst: Instruction, op: Operand, machine: Machine) -> int:
        if isinstance(op, IntOperand):
            return op.value
        assert isinstance(op, VarOperand)
        try:
            return machine.vars[op.name]
        except KeyError:
            inst.error(f'undefined variable `{op.name}`')

    def rescan(self, inst: Instruction) -> tuple[Instruction, ...]:
        try:
            return rmiparser.load_program(self.path)
        except OSError as os_err:
            inst.error(f'failed to open file: {self.path}: {os_err.strerror}')

    @singledispatchmethod
    def exec(self, inst: Instruction, machine: Machine):
        raise NotImplementedError

    @exec.register
    def _(self, inst: Push, machine: Machine):
        machine.stack.append(inst.value)

    @exec.register
    def _(self, inst: BinaryOp, machine: Machine):
        x = self.resolve(inst, inst.op1, machine)
        y = self.resolve(inst, inst.op2, machine)
        if isinstance(inst, Div) and y == 0:
            inst.error('division by zero')
        value = self.__arith[type(inst)](x, y)
        if not I32_MIN <= value <= I32_MAX:
            inst.error('integer overflow')
        machine.stack.append(value)

    @exec.register
    def _(self, inst: Print, machine: Machine):
        top = machine.top()
        print(STACK_EMPTY if top is None else top, file=self.output)

    @exec.register
    def _(self, inst: Set, machine: Machine):
        machine.vars[inst.name] = inst.value

    @exec.register
    def _(self, inst: Get, machine: Machine):
        try:
            machine.stack.append(machine.vars[inst.name])
        except KeyError:
            inst.error(f'undefined variable `{inst.name}`')

    @exec.register
    def _(self, inst: Input, machine: Machine):
        text = self.input.readline().strip()
        value = rmiparser.parse_int(text)
        if value is None:
            inst.error(f'invalid input `{text}`')
        machine.vars[inst.name] = value

    @exec.register
    def _(self, inst: If, machine: Machine):
        top = machine.top()
        if top is None:
            inst.error('stack is empty')
        if top != 0:
            self.enter(inst, inst.then_body, machine)
        elif inst.else_body:
            # the whole file is translated again and runs after the else body
            fresh = self.rescan(inst)
            self.enter(inst, inst.else_body + fresh, machine)

    @exec.register
    def _(self, inst: Else, machine: Machine):
        self.enter(inst, inst.body, machine)

def execute(prog: tuple[Instruction, ...], machine: Machine, path: str, **options):
    Vm(path, **options).run(prog, machine)
