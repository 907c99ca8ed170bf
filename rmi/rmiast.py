#!/usr/bin/env python3

import dataclasses

from abc import ABC
from dataclasses import dataclass, field
from operator import attrgetter
from typing import NoReturn

I32_MIN = -2**31
I32_MAX = 2**31 - 1

class RMError(RuntimeError):
    pass

@dataclass(frozen=True)
class Operand(ABC):
    pass

@dataclass(frozen=True)
class IntOperand(Operand):
    value: int

    def __str__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class VarOperand(Operand):
    name: str

    def __str__(self) -> str:
        return self.name

@dataclass(frozen=True, repr=False)
class Instruction(ABC):
    line: str = field(default='', compare=False, kw_only=True)
    lineno: int = field(default=0, compare=False, kw_only=True)

    def error(self, msg: str) -> NoReturn:
        if self.lineno == 0:
            raise RMError(msg)
        raise RMError(f'{self.lineno}: error: {msg}\n{self.line}')

    def __repr__(self) -> str:
        pairs = (((f.name, attrgetter(f.name)(self))
                  for f in dataclasses.fields(self)
                    if not f.name in {'line', 'lineno'}
                  ))
        as_str = ', '.join(f'{k}={repr(v)}' for k, v in pairs)
        return f'{self.__class__.__name__}({as_str})'

    def __str__(self) -> str:
        return self.__class__.__name__.upper()

@dataclass(frozen=True, repr=False)
class Push(Instruction):
    value: int

    def __str__(self) -> str:
        return f'PUSH {self.value}'

@dataclass(frozen=True, repr=False)
class BinaryOp(Instruction, ABC):
    op1: Operand
    op2: Operand

    def __str__(self) -> str:
        return f'{self.__class__.__name__.upper()} {self.op1} {self.op2}'

class Add(BinaryOp):
    pass

class Sub(BinaryOp):
    pass

class Mul(BinaryOp):
    pass

class Div(BinaryOp):
    pass

class Print(Instruction):
    pass

@dataclass(frozen=True, repr=False)
class Set(Instruction):
    name: str
    value: int

    def __str__(self) -> str:
        return f'SET {self.name} {self.value}'

@dataclass(frozen=True, repr=False)
class Get(Instruction):
    name: str

    def __str__(self) -> str:
        return f'GET {self.name}'

@dataclass(frozen=True, repr=False)
class Input(Instruction):
    name: str

    # the only mixed-case opcode of the language
    def __str__(self) -> str:
        return f'Input {self.name}'

@dataclass(frozen=True, repr=False)
class If(Instruction):
    then_body: tuple[Instruction, ...]
    else_body: tuple[Instruction, ...] = ()

    def __str__(self) -> str:
        return 'IF'

@dataclass(frozen=True, repr=False)
class Else(Instruction):
    body: tuple[Instruction, ...]

    def __str__(self) -> str:
        return 'ELSE'
