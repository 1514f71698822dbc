"""
Repertorio de instrucciones de la máquina de pila.

Define los opcodes, la tabla de mnemónicos (equivalente a ISA.json en
el ensamblador de registros) y los tipos que produce el ensamblador:
Instruction y Program.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


class Opcode(Enum):
    PUSH = auto()
    POP = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    DUP = auto()
    SWAP = auto()
    LOAD = auto()
    STORE = auto()
    JUMP = auto()
    JUMPIF = auto()
    JUMPIFZ = auto()
    CMP = auto()
    PRINT = auto()
    PRINTCHAR = auto()
    READ = auto()
    HALT = auto()


class OperandKind(Enum):
    NONE = auto()      # sin operando
    LITERAL = auto()   # entero con signo
    MEMORY = auto()    # dirección de memoria (literal o etiqueta)
    TARGET = auto()    # dirección de instrucción (literal o etiqueta)


@dataclass(frozen=True)
class InstructionSpec:
    opcode: Opcode
    mnemonic: str
    operand: OperandKind
    description: str

    @property
    def takes_operand(self) -> bool:
        return self.operand is not OperandKind.NONE

    @property
    def accepts_label(self) -> bool:
        return self.operand in (OperandKind.MEMORY, OperandKind.TARGET)

    def usage(self) -> str:
        if self.operand is OperandKind.LITERAL:
            return f"{self.mnemonic} <n>"
        if self.operand is OperandKind.MEMORY:
            return f"{self.mnemonic} <addr>"
        if self.operand is OperandKind.TARGET:
            return f"{self.mnemonic} <label>"
        return self.mnemonic


_SPECS = (
    InstructionSpec(Opcode.PUSH, 'push', OperandKind.LITERAL, 'Push value onto stack'),
    InstructionSpec(Opcode.POP, 'pop', OperandKind.NONE, 'Remove top value from stack'),
    InstructionSpec(Opcode.ADD, 'add', OperandKind.NONE, 'Add top two values'),
    InstructionSpec(Opcode.SUB, 'sub', OperandKind.NONE, 'Subtract (a-b where b is top of stack)'),
    InstructionSpec(Opcode.MUL, 'mul', OperandKind.NONE, 'Multiply top two values'),
    InstructionSpec(Opcode.DIV, 'div', OperandKind.NONE, 'Divide (a/b where b is top of stack)'),
    InstructionSpec(Opcode.MOD, 'mod', OperandKind.NONE, 'Modulo (a%b where b is top of stack)'),
    InstructionSpec(Opcode.DUP, 'dup', OperandKind.NONE, 'Duplicate top value'),
    InstructionSpec(Opcode.SWAP, 'swap', OperandKind.NONE, 'Swap top two values'),
    InstructionSpec(Opcode.LOAD, 'load', OperandKind.MEMORY, 'Load value from memory address'),
    InstructionSpec(Opcode.STORE, 'store', OperandKind.MEMORY, 'Store value to memory address'),
    InstructionSpec(Opcode.JUMP, 'jump', OperandKind.TARGET, 'Jump to instruction address'),
    InstructionSpec(Opcode.JUMPIF, 'jumpif', OperandKind.TARGET, 'Jump if top of stack is non-zero'),
    InstructionSpec(Opcode.JUMPIFZ, 'jumpifz', OperandKind.TARGET, 'Jump if top of stack is zero'),
    InstructionSpec(Opcode.CMP, 'cmp', OperandKind.NONE, 'Compare top two values (1 if a>b, 0 if a==b, -1 if a<b)'),
    InstructionSpec(Opcode.PRINT, 'print', OperandKind.NONE, 'Print top value as number'),
    InstructionSpec(Opcode.PRINTCHAR, 'printchar', OperandKind.NONE, 'Print top value as a character'),
    InstructionSpec(Opcode.READ, 'read', OperandKind.NONE, 'Read integer from input'),
    InstructionSpec(Opcode.HALT, 'halt', OperandKind.NONE, 'Stop execution'),
)

# mnemónico en minúsculas -> especificación
MNEMONIC_TABLE: Mapping[str, InstructionSpec] = MappingProxyType(
    {s.mnemonic: s for s in _SPECS})

OPCODE_TABLE: Mapping[Opcode, InstructionSpec] = MappingProxyType(
    {s.opcode: s for s in _SPECS})


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    operand: Optional[int] = None

    @property
    def spec(self) -> InstructionSpec:
        return OPCODE_TABLE[self.opcode]

    def __str__(self) -> str:
        if self.operand is None:
            return self.spec.mnemonic
        return f"{self.spec.mnemonic} {self.operand}"


@dataclass(frozen=True)
class Program:
    """
    Secuencia inmutable de instrucciones ya resueltas.

    lines[i] es la línea de código fuente (1-based) de instructions[i].
    labels se conserva sólo para diagnósticos y listados.
    """
    instructions: Tuple[Instruction, ...] = ()
    lines: Tuple[int, ...] = ()
    labels: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if len(self.instructions) != len(self.lines):
            raise ValueError("instructions y lines deben tener la misma longitud")
        object.__setattr__(self, 'instructions', tuple(self.instructions))
        object.__setattr__(self, 'lines', tuple(self.lines))
        object.__setattr__(self, 'labels', MappingProxyType(dict(self.labels)))

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def labels_at(self) -> Dict[int, list]:
        """Dirección -> nombres de etiquetas definidas ahí."""
        out: Dict[int, list] = {}
        for name, addr in self.labels.items():
            out.setdefault(addr, []).append(name)
        return out
