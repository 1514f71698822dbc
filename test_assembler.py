"""Tests del ensamblador de dos pasadas"""
import dataclasses

import pytest

from computador_pila import AsmSyntaxError, Instruction, Opcode, SyntaxErrorKind, assemble, check, listing


def _kind(source):
    with pytest.raises(AsmSyntaxError) as exc:
        assemble(source)
    return exc.value


def test_labels_resolve_to_next_instruction():
    prog = assemble("push 1\nloop:\ndup\njump loop\nfin:\n")
    assert prog.labels == {"loop": 1, "fin": 3}
    assert prog[2] == Instruction(Opcode.JUMP, 1)
    assert len(prog) == 3
    assert prog.lines == (1, 3, 4)


def test_forward_reference():
    prog = assemble("jump fin\npush 1\nfin: halt\n")
    assert prog[0] == Instruction(Opcode.JUMP, 2)


def test_mnemonics_are_case_insensitive():
    prog = assemble("PUSH 2\nPrint\n")
    assert [i.opcode for i in prog] == [Opcode.PUSH, Opcode.PRINT]


def test_every_mnemonic_assembles():
    src = """
    push 1
    pop
    add
    sub
    mul
    div
    mod
    dup
    swap
    load 3
    store 4
    jump 0
    jumpif 0
    jumpifz 0
    cmp
    print
    printchar
    read
    halt
    """
    prog = assemble(src)
    assert [i.opcode for i in prog] == list(Opcode)


def test_unknown_instruction():
    err = _kind("push 1\nfrob\n")
    assert err.kind is SyntaxErrorKind.UNKNOWN_INSTRUCTION
    assert err.line == 2


def test_missing_operand():
    err = _kind("push\n")
    assert err.kind is SyntaxErrorKind.MISSING_OPERAND
    assert err.line == 1


def test_unexpected_operand():
    assert _kind("add 3\n").kind is SyntaxErrorKind.UNEXPECTED_OPERAND
    assert _kind("push 1 2\n").kind is SyntaxErrorKind.UNEXPECTED_OPERAND


def test_malformed_literal():
    assert _kind("push abc\n").kind is SyntaxErrorKind.MALFORMED_LITERAL
    assert _kind("push 12abc\n").kind is SyntaxErrorKind.MALFORMED_LITERAL
    assert _kind("load 1.5\n").kind is SyntaxErrorKind.MALFORMED_LITERAL
    assert _kind("push 9223372036854775808\n").kind is SyntaxErrorKind.MALFORMED_LITERAL


def test_int64_bounds_are_accepted():
    prog = assemble("push 9223372036854775807\npush -9223372036854775808\n")
    assert prog[0].operand == 2 ** 63 - 1
    assert prog[1].operand == -2 ** 63


def test_duplicate_label():
    err = _kind("a:\npush 1\na:\nhalt\n")
    assert err.kind is SyntaxErrorKind.DUPLICATE_LABEL
    assert err.line == 3


def test_duplicate_label_across_both_spellings():
    assert _kind("a:\npush 1\n:a\n").kind is SyntaxErrorKind.DUPLICATE_LABEL


def test_unresolved_label():
    err = _kind("jump missing\n")
    assert err.kind is SyntaxErrorKind.UNRESOLVED_LABEL
    assert "missing" in err.detail


def test_jump_target_out_of_program():
    err = _kind("push 1\njump 5\n")
    assert err.kind is SyntaxErrorKind.INVALID_JUMP_TARGET
    assert err.line == 2
    # jumping right past the end is an implicit halt
    assert assemble("jump 1\n")[0].operand == 1


def test_memory_addresses_are_not_checked_at_assembly():
    prog = assemble("load 5000\nstore -1\n")
    assert prog[0].operand == 5000
    assert prog[1].operand == -1


def test_labels_may_be_memory_operands():
    prog = assemble("store dato\nhalt\ndato:\n")
    assert prog[0] == Instruction(Opcode.STORE, 2)


def test_check_reports_every_error():
    errors = check("frob\npush\njump nowhere\nx:\nx:\nadd\n")
    assert [(e.line, e.kind) for e in errors] == [
        (1, SyntaxErrorKind.UNKNOWN_INSTRUCTION),
        (2, SyntaxErrorKind.MISSING_OPERAND),
        (3, SyntaxErrorKind.UNRESOLVED_LABEL),
        (5, SyntaxErrorKind.DUPLICATE_LABEL),
    ]
    assert check("push 1\nprint\n") == []


def test_program_is_immutable():
    prog = assemble("a: push 1\n")
    with pytest.raises(dataclasses.FrozenInstanceError):
        prog.instructions = ()
    with pytest.raises(TypeError):
        prog.labels["b"] = 0
    with pytest.raises(TypeError):
        prog.instructions[0] = Instruction(Opcode.HALT)


def test_listing_shows_labels_and_targets():
    text = listing(assemble("push 3\nloop:\npush 1\nsub\ndup\njumpif loop\nend:\n"))
    lines = text.splitlines()
    assert lines[0].strip().startswith("0000  push 3")
    assert "loop:" in lines
    assert "end:" == lines[-1]
    assert "jumpif 1 (loop)" in text


def test_only_address_operands_take_labels():
    from computador_pila.model.isa import MNEMONIC_TABLE
    assert [m for m, s in MNEMONIC_TABLE.items() if s.accepts_label] == [
        "load", "store", "jump", "jumpif", "jumpifz",
    ]
    err = _kind("dato:\npush dato\n")
    assert err.kind is SyntaxErrorKind.MALFORMED_LITERAL
    assert assemble("dato:\nload dato\n")[0] == Instruction(Opcode.LOAD, 0)
