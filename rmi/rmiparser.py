#!/usr/bin/env python3

import dataclasses
import pyparsing as pp

from enum import Enum, auto, unique
from typing import Iterable, Optional
from rmiast import *

pp.ParserElement.enable_packrat()

# prefix/suffix of an operand written in its debug form, e.g. Var("x")
_var_prefix = 'Var("'
_var_suffix = '")'

int_text = pp.Regex(r'[+-]?[0-9]+')

def parse_int(text: str) -> Optional[int]:
    if not int_text.matches(text, parse_all=True):
        return None
    value = int(text)
    if not I32_MIN <= value <= I32_MAX:
        return None
    return value

def literal(text: str) -> int:
    value = parse_int(text)
    if value is None:
        raise RMError(f'invalid number `{text}`')
    return value

def strip_var(text: str) -> str:
    while text.startswith(_var_prefix):
        text = text[len(_var_prefix):]
    while text.endswith(_var_suffix):
        text = text[:-len(_var_suffix)]
    return text

def operand(text: str) -> Operand:
    text = strip_var(text)
    value = parse_int(text)
    if value is None:
        return VarOperand(text)
    return IntOperand(value)

def keyword(name: str) -> pp.ParserElement:
    return pp.Regex(rf'{name}(?!\S)').set_name(name)

def binary_ctor(cls: type[BinaryOp]):
    def ctor(src: str, loc: int, toks: pp.ParseResults) -> BinaryOp:
        _, op1, op2 = toks
        return cls(operand(op1), operand(op2), line=src)
    return ctor

token = pp.Regex(r'\S+')
end = pp.StringEnd()

push = keyword('PUSH') + token + end
push.set_parse_action(lambda s, loc, toks: Push(literal(toks[1]), line=s))
add = keyword('ADD') + token + token + end
add.set_parse_action(binary_ctor(Add))
sub = keyword('SUB') + token + token + end
sub.set_parse_action(binary_ctor(Sub))
mul = keyword('MUL') + token + token + end
mul.set_parse_action(binary_ctor(Mul))
div = keyword('DIV') + token + token + end
div.set_parse_action(binary_ctor(Div))
print_ = keyword('PRINT') + end
print_.set_parse_action(lambda s, loc, toks: Print(line=s))
set_ = keyword('SET') + token + token + end
set_.set_parse_action(lambda s, loc, toks: Set(toks[1], literal(toks[2]), line=s))
get = keyword('GET') + token + end
get.set_parse_action(lambda s, loc, toks: Get(toks[1], line=s))
input_ = keyword('Input') + token + end
input_.set_parse_action(lambda s, loc, toks: Input(toks[1], line=s))

instruction = push | add | sub | mul | div | print_ | set_ | get | input_
instruction.set_name('instruction')

@unique
class BlockMode(Enum):
    NONE = auto()
    IF = auto()
    ELSE = auto()

def first_token(line: str) -> Optional[str]:
    parts = line.split(maxsplit=1)
    return parts[0] if parts else None

def translate_line(line: str, lineno: int = 0) -> list[Instruction]:
    # tokens are split on the same whitespace as first_token
    text = ' '.join(line.split())
    try:
        toks = instruction.parse_string(text, parse_all=True)
    except pp.ParseBaseException:
        # unknown opcodes and wrong arities are dropped
        return []
    except RMError as e:
        if lineno == 0:
            raise
        raise RMError(f'{lineno}: error: {e.args[0]}\n{line}') from None
    return [dataclasses.replace(inst, line=line, lineno=lineno) for inst in toks]

def translate_program(lines: Iterable[str]) -> tuple[Instruction, ...]:
    """Translates program lines, folding IF/ELSE/ENDIF blocks.

    Blocks do not nest: IF and ELSE only switch the accumulator that
    following lines feed, and the first ENDIF emits `If` when the if
    accumulator is open or `Else` when the else accumulator is open.
    """
    prog: list[Instruction] = []
    if_block: list[Instruction] = []
    else_block: list[Instruction] = []
    mode = BlockMode.NONE
    block_line, block_lineno = '', 0
    for lineno, line in enumerate(lines, start=1):
        line = line.rstrip('\r\n')
        head = first_token(line)
        if head == 'IF':
            mode = BlockMode.IF
            block_line, block_lineno = line, lineno
            continue
        if head == 'ELSE':
            mode = BlockMode.ELSE
            block_line, block_lineno = line, lineno
            continue
        insts = translate_line(line, lineno)
        if mode == BlockMode.NONE:
            prog.extend(insts)
            continue
        block = if_block if mode == BlockMode.IF else else_block
        block.extend(insts)
        if head == 'ENDIF':
            if mode == BlockMode.IF:
                node = If(tuple(if_block), tuple(else_block),
                          line=block_line, lineno=block_lineno)
            else:
                node = Else(tuple(else_block), line=block_line, lineno=block_lineno)
            prog.append(node)
            if_block.clear()
            else_block.clear()
            mode = BlockMode.NONE
    return tuple(prog)

def load_program(path: str) -> tuple[Instruction, ...]:
    with open(path, 'r', encoding='utf-8') as f:
        return translate_program(f)
