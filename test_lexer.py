"""Tests del lexer de ensamblador"""
from computador_pila.model.ensamblador.lexer import Instr, Label, lex_source, tokenize


def test_comments_and_blank_lines_are_skipped():
    recs = lex_source("# solo comentario\n\n   \npush 5 # cinco\n")
    assert len(recs) == 1
    assert isinstance(recs[0], Instr)
    assert recs[0].mnemonic == "push"
    assert recs[0].line == 4
    assert recs[0].operand.value == 5


def test_trailing_and_leading_colon_labels_are_equivalent():
    a = lex_source("loop:\njump loop\n")
    b = lex_source(":loop\njump loop\n")
    assert a[0] == Label("loop", 1)
    assert b[0] == Label("loop", 1)
    assert a[1].operand.text == b[1].operand.text == "loop"


def test_label_and_instruction_on_same_line():
    recs = lex_source("inicio: dup\n")
    assert recs[0] == Label("inicio", 1)
    assert isinstance(recs[1], Instr)
    assert recs[1].mnemonic == "dup"
    assert recs[1].operands == ()


def test_operand_token_types():
    recs = lex_source("push -12\npush 0x10\npush 0b101\njump fin\npush 12abc\n")
    kinds = [(r.operand.type, r.operand.value) for r in recs]
    assert kinds == [
        ("NUMBER", -12),
        ("NUMBER", 16),
        ("NUMBER", 5),
        ("NAME", "fin"),
        ("WORD", "12abc"),
    ]


def test_number_followed_by_comment_without_space():
    recs = lex_source("push 7# siete")
    assert recs[0].operand.type == "NUMBER"
    assert recs[0].operand.value == 7


def test_malformed_lines_are_not_rejected():
    recs = lex_source("frobnicate 1 2 3\n42\n")
    assert recs[0].mnemonic == "frobnicate"
    assert len(recs[0].operands) == 3
    assert recs[1].mnemonic == "42"


def test_tokenize_keeps_line_numbers():
    toks = tokenize("push 1\r\n\r\nadd\n")
    assert [(t.type, t.line) for t in toks] == [("NAME", 1), ("NUMBER", 1), ("NAME", 3)]
