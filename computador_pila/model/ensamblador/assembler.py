"""Two-pass assembler for the stack machine.

Pass 1 binds every label to the address of the instruction that follows
it. Pass 2 encodes each instruction, resolving label operands through
the table built in pass 1. Nothing is executed here.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from computador_pila import constants
from computador_pila.model.errors import AsmSyntaxError, SyntaxErrorKind
from computador_pila.model.isa import (
    MNEMONIC_TABLE, Instruction, InstructionSpec, OperandKind, Program,
)
from computador_pila.model.ensamblador.lexer import Instr, Label, Record, Token, lex_source

logger = logging.getLogger(__name__)


def first_pass(records: List[Record], errors: Optional[list] = None) -> Dict[str, int]:
    """
    Build the label table. Labels do not take an address.
    If errors is given, duplicates are appended there instead of raised.
    """
    label_map: Dict[str, int] = {}
    instr_count = 0
    for rec in records:
        if isinstance(rec, Label):
            if rec.name in label_map:
                err = AsmSyntaxError(SyntaxErrorKind.DUPLICATE_LABEL, rec.line,
                                     f"label '{rec.name}' already defined")
                if errors is None:
                    raise err
                errors.append(err)
                continue
            label_map[rec.name] = instr_count
        else:
            instr_count += 1
    return label_map


def _literal(tok: Token) -> int:
    if tok.type != 'NUMBER':
        raise AsmSyntaxError(SyntaxErrorKind.MALFORMED_LITERAL, tok.line,
                             f"expected integer literal, got '{tok.text}'")
    if not (constants.WORD_MIN <= tok.value <= constants.WORD_MAX):
        raise AsmSyntaxError(SyntaxErrorKind.MALFORMED_LITERAL, tok.line,
                             f"literal {tok.text} does not fit in {constants.WORD_BITS} bits")
    return tok.value


def resolve_address(tok: Token, label_map: Dict[str, int]) -> int:
    """Literal address or label name -> absolute address."""
    if tok.type == 'NUMBER':
        return tok.value
    if tok.type == 'NAME':
        if tok.text not in label_map:
            raise AsmSyntaxError(SyntaxErrorKind.UNRESOLVED_LABEL, tok.line,
                                 f"label '{tok.text}' is not defined")
        return label_map[tok.text]
    raise AsmSyntaxError(SyntaxErrorKind.MALFORMED_LITERAL, tok.line,
                         f"expected address or label, got '{tok.text}'")


def lookup(mnemonic: str, line: int) -> InstructionSpec:
    spec = MNEMONIC_TABLE.get(mnemonic.lower())
    if spec is None:
        raise AsmSyntaxError(SyntaxErrorKind.UNKNOWN_INSTRUCTION, line,
                             f"unknown instruction '{mnemonic}'")
    return spec


def assemble_line(instr: Instr, label_map: Dict[str, int], program_len: int) -> Instruction:
    spec = lookup(instr.mnemonic, instr.line)

    if not spec.takes_operand:
        if instr.operands:
            raise AsmSyntaxError(SyntaxErrorKind.UNEXPECTED_OPERAND, instr.line,
                                 f"'{spec.mnemonic}' takes no operand")
        return Instruction(spec.opcode)

    if not instr.operands:
        raise AsmSyntaxError(SyntaxErrorKind.MISSING_OPERAND, instr.line,
                             f"'{spec.mnemonic}' expects one operand")
    if len(instr.operands) > 1:
        raise AsmSyntaxError(SyntaxErrorKind.UNEXPECTED_OPERAND, instr.line,
                             f"'{spec.mnemonic}' expects one operand, got {len(instr.operands)}")

    tok = instr.operands[0]
    if not spec.accepts_label:
        return Instruction(spec.opcode, _literal(tok))

    addr = resolve_address(tok, label_map)
    # Memory addresses are checked when executed, jump targets here.
    if spec.operand is OperandKind.TARGET and not (0 <= addr <= program_len):
        raise AsmSyntaxError(SyntaxErrorKind.INVALID_JUMP_TARGET, instr.line,
                             f"jump target {addr} outside program (0..{program_len})")
    return Instruction(spec.opcode, addr)


def _second_pass(records: List[Record], label_map: Dict[str, int],
                 errors: Optional[list] = None) -> Tuple[list, list]:
    instrs = [rec for rec in records if isinstance(rec, Instr)]
    insts = []
    lines = []
    for rec in instrs:
        try:
            insts.append(assemble_line(rec, label_map, len(instrs)))
        except AsmSyntaxError as err:
            if errors is None:
                raise
            errors.append(err)
            continue
        lines.append(rec.line)
    return insts, lines


def assemble(source: str) -> Program:
    """
    Assemble source text into a Program.
    Raises AsmSyntaxError on the first problem found.
    """
    records = lex_source(source)
    label_map = first_pass(records)
    insts, lines = _second_pass(records, label_map)
    logger.info("assembled %d instructions, %d labels", len(insts), len(label_map))
    return Program(tuple(insts), tuple(lines), label_map)


def assemble_file(path) -> Program:
    text = Path(path).read_text(encoding='utf-8')
    return assemble(text)


def check(source: str) -> List[AsmSyntaxError]:
    """Static validation: every error in the source, sorted by line."""
    errors: List[AsmSyntaxError] = []
    records = lex_source(source)
    label_map = first_pass(records, errors)
    _second_pass(records, label_map, errors)
    errors.sort(key=lambda e: e.line)
    return errors
