"""
Lexer for stack machine assembly using PLY (lex).

Produces one record per label definition and one per instruction line.
Nothing is rejected here: a line that does not make sense is still
turned into an Instr record and the assembler reports it.
"""
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Tuple, Union

import ply.lex as lex

logger = logging.getLogger(__name__)

# Token names
tokens = (
    'LABEL',
    'COLONLABEL',
    'NUMBER',
    'NAME',
    'WORD',
)

LABEL_TOKENS = ('LABEL', 'COLONLABEL')

# Order matters in PLY! Function rules are tried in definition order,
# so WORD (catch-all) must stay last.

def t_COMMENT(t):
    r"\#[^\n]*"
    pass

def t_NUMBER(t):
    r"-?(?:0[xX][0-9A-Fa-f]+|0[bB][01]+|[0-9]+)(?=[\s\#]|\Z)"
    s = t.value
    sign = -1 if s.startswith('-') else 1
    digits = s.lstrip('-')
    if digits.startswith(('0x', '0X')):
        t.value = sign * int(digits[2:], 16)
    elif digits.startswith(('0b', '0B')):
        t.value = sign * int(digits[2:], 2)
    else:
        t.value = sign * int(digits, 10)
    return t

def t_LABEL(t):
    r"[A-Za-z_][A-Za-z_0-9]*:(?=[\s\#]|\Z)"
    t.value = t.value[:-1]
    return t

def t_COLONLABEL(t):
    r":[A-Za-z_][A-Za-z_0-9]*(?=[\s\#]|\Z)"
    t.value = t.value[1:]
    return t

def t_NAME(t):
    r"[A-Za-z_][A-Za-z_0-9]*(?=[\s\#]|\Z)"
    return t

def t_WORD(t):
    r"[^\s\#]+"
    return t

t_ignore = ' \t\r\f\v'

def t_newline(t):
    r"\n+"
    t.lexer.lineno += len(t.value)

def t_error(t):
    logger.warning("Skipping illegal character %r at line %d", t.value[0], t.lexer.lineno)
    t.lexer.skip(1)


_lexer = lex.lex()


def build_lexer():
    """Fresh lexer state sharing the compiled master regex."""
    lexer = _lexer.clone()
    lexer.lineno = 1
    return lexer


class Token(NamedTuple):
    type: str
    text: str
    value: Union[int, str]
    line: int


class Label(NamedTuple):
    name: str
    line: int


class Instr(NamedTuple):
    mnemonic: str
    operands: Tuple[Token, ...]
    line: int

    @property
    def operand(self) -> Optional[Token]:
        return self.operands[0] if self.operands else None


Record = Union[Label, Instr]


def tokenize(text: str) -> List[Token]:
    lexer = build_lexer()
    lexer.input(text)
    out = []
    while True:
        tok = lexer.token()
        if not tok:
            break
        raw = lexer.lexdata[tok.lexpos:lexer.lexpos]
        out.append(Token(tok.type, raw, tok.value, tok.lineno))
    return out


def _split_lines(toks: List[Token]) -> List[List[Token]]:
    groups: List[List[Token]] = []
    current_line = None
    for tok in toks:
        if tok.line != current_line:
            groups.append([])
            current_line = tok.line
        groups[-1].append(tok)
    return groups


def lex_source(text: str) -> List[Record]:
    """
    Turn source text into Label/Instr records in source order.

    Both `name:` and `:name` define a label. A label may share its line
    with an instruction (`loop: dup`).
    """
    records: List[Record] = []
    for group in _split_lines(tokenize(text)):
        i = 0
        while i < len(group) and group[i].type in LABEL_TOKENS:
            records.append(Label(group[i].value, group[i].line))
            i += 1
        if i < len(group):
            head = group[i]
            records.append(Instr(head.text, tuple(group[i + 1:]), head.line))
    logger.debug("lexed %d records", len(records))
    return records
