#!/usr/bin/env python3
"""
Command line front end for the stack machine.

Usage:
    python -m computador_pila run programa.asm --input 5 --budget 10000
    python -m computador_pila check programa.asm --listing
    python -m computador_pila help
"""
import argparse
import logging
import sys
from pathlib import Path

from computador_pila import constants
from computador_pila.controller.computer import Action, Data
from computador_pila.controller.terminal import TerminalIO
from computador_pila.model.errors import AsmSyntaxError
from computador_pila.model.ensamblador import assembler
from computador_pila.model.ensamblador.listing import listing
from computador_pila.model.isa import MNEMONIC_TABLE

logger = logging.getLogger("computador_pila")

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_SYNTAX = 2
EXIT_IO = 3


def _positive_int(text: str) -> int:
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not an integer") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, not {value}")
    return value


def cmd_run(args) -> int:
    try:
        program = Action.assemble_file(args.file)
    except AsmSyntaxError as e:
        print(f"Assembly error: {e}", file=sys.stderr)
        return EXIT_SYNTAX

    io = TerminalIO(' '.join(args.input))
    if args.stdin:
        io.push_input(sys.stdin.read())

    result = Action.execute_program(program, io, args.budget)
    sys.stdout.write(Action.format_result(result))

    if args.dump_memory:
        out = Path(args.dump_memory)
        if out.suffix == ".xlsx":
            Data.Memory_D.save_modified_memory(result.memory, out, args.mode)
        else:
            Data.Memory_D.save_memory_csv(result.memory, out, args.mode)
        logger.info("memory written to %s", out)

    return EXIT_FAULT if result.faulted else EXIT_OK


def cmd_check(args) -> int:
    source = Path(args.file).read_text(encoding='utf-8')
    errors = assembler.check(source)
    for e in errors:
        print(f"{args.file}:{e.line}: {e.kind.value}: {e.detail}")
    if errors:
        return EXIT_SYNTAX
    if args.listing:
        print(listing(assembler.assemble(source)))
    else:
        print(f"{args.file}: OK")
    return EXIT_OK


def cmd_help(args) -> int:
    print("Assembly Instructions:")
    for spec in MNEMONIC_TABLE.values():
        print(f"- {spec.usage():<16}: {spec.description}")
    print("\nLabels are written `name:` (`:name` is accepted too). `#` starts a comment.")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="computador-pila",
                                description="Stack machine assembler and interpreter")
    p.add_argument('-v', '--verbose', action='store_true', help="trace every instruction")
    sub = p.add_subparsers(dest='command', required=True)

    r = sub.add_parser('run', help="assemble and run a program")
    r.add_argument('file')
    r.add_argument('--input', nargs='*', default=[], help="integers served to `read`")
    r.add_argument('--stdin', action='store_true', help="also read integers from stdin")
    r.add_argument('--budget', type=_positive_int, default=constants.DEFAULT_STEP_BUDGET,
                   help="maximum number of executed instructions")
    r.add_argument('--dump-memory', metavar='PATH', help="write memory to .csv or .xlsx")
    r.add_argument('--mode', choices=constants.MEMORY_MODES, default='decimal')
    r.set_defaults(func=cmd_run)

    c = sub.add_parser('check', help="assemble without running")
    c.add_argument('file')
    c.add_argument('--listing', action='store_true')
    c.set_defaults(func=cmd_check)

    h = sub.add_parser('help', help="instruction reference")
    h.set_defaults(func=cmd_help)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SYNTAX
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_IO


if __name__ == '__main__':
    sys.exit(main())
