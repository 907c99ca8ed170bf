#!/usr/bin/env python3

import rmiast
import rmiinterpreter
import rmiparser

import optparse
import sys

from typing import Iterator, Optional

def parse_args(argv: list[str]) -> tuple[optparse.Values, list[str]]:
    usage = 'usage: %prog [options] <program_file.rm>'
    p = optparse.OptionParser(usage=usage)
    p.add_option('--trace',
                 action='store_true',
                 default=False,
                 help='display executed instructions step by step'
                 )
    p.add_option('--dis',
                 action='store_true',
                 default=False,
                 help='print the translated program instead of running it'
                 )
    p.add_option('--max-depth',
                 metavar='N',
                 action='store',
                 type='int',
                 default=rmiinterpreter.DEFAULT_MAX_DEPTH,
                 dest='max_depth',
                 help='abort when branches nest deeper than N [default: %default]'
                 )
    return p.parse_args(argv)

def listing(prog: tuple[rmiast.Instruction, ...], indent: int = 0) -> Iterator[str]:
    pad = '  ' * indent
    for i, inst in enumerate(prog):
        yield f'{i:04x} {pad}{inst}'
        if isinstance(inst, rmiast.If):
            yield from listing(inst.then_body, indent + 1)
            if inst.else_body:
                yield f'     {pad}ELSE'
                yield from listing(inst.else_body, indent + 1)
            yield f'     {pad}ENDIF'
        elif isinstance(inst, rmiast.Else):
            yield from listing(inst.body, indent + 1)
            yield f'     {pad}ENDIF'

def dis(filename: str) -> Optional[int]:
    prog = rmiparser.load_program(filename)
    for line in listing(prog):
        print(line)

def run(filename: str, trace: bool, max_depth: int) -> Optional[int]:
    prog = rmiparser.load_program(filename)
    vm = rmiinterpreter.Vm(filename,
                           trace=sys.stderr if trace else None,
                           max_depth=max_depth)
    vm.run(prog, rmiinterpreter.Machine())
    print('Program executed successfully.')
    return 0

def main(argv: list[str]) -> Optional[int]:
    options, args = parse_args(argv)
    if len(args) != 2:
        print(f'Usage: {args[0] if args else "rmirun"} [options] <program_file.rm>', file=sys.stderr)
        return 1
    filename = args[1]
    if options.max_depth < 1:
        print('error: --max-depth must be at least 1', file=sys.stderr)
        return 1
    try:
        if options.dis:
            return dis(filename)
        return run(filename, options.trace, options.max_depth)
    except OSError as os_err:
        print(f'error: {os_err.filename}: {os_err.strerror}', file=sys.stderr)
        return 1
    except UnicodeDecodeError as ude:
        print(f'error: {filename}: {ude.reason}', file=sys.stderr)
        return 1
    except rmiast.RMError as e:
        print(f'{filename}:{e.args[0]}', file=sys.stderr)
        return 1
    except RecursionError:
        print(f'{filename}: error: branches nest too deeply, lower --max-depth', file=sys.stderr)
        return 1

if __name__ == '__main__':
    status = main(sys.argv)
    sys.exit(status)
