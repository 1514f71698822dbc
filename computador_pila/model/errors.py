"""
Errores del ensamblador y fallas de ejecución.

Son dos taxonomías disjuntas: AsmSyntaxError impide crear el programa,
VMFault termina la corrida en curso.
"""
from enum import Enum


class SyntaxErrorKind(Enum):
    UNKNOWN_INSTRUCTION = "UnknownInstruction"
    MISSING_OPERAND = "MissingOperand"
    UNEXPECTED_OPERAND = "UnexpectedOperand"
    MALFORMED_LITERAL = "MalformedLiteral"
    DUPLICATE_LABEL = "DuplicateLabel"
    UNRESOLVED_LABEL = "UnresolvedLabel"
    INVALID_JUMP_TARGET = "InvalidJumpTarget"


class FaultKind(Enum):
    STACK_UNDERFLOW = "StackUnderflow"
    DIVISION_BY_ZERO = "DivisionByZero"
    INVALID_ADDRESS = "InvalidAddress"
    INPUT_EXHAUSTED = "InputExhausted"
    EXECUTION_LIMIT_EXCEEDED = "ExecutionLimitExceeded"


class AsmSyntaxError(Exception):
    """Error de ensamblado en una línea del código fuente (1-based)."""

    def __init__(self, kind: SyntaxErrorKind, line: int, detail: str):
        self.kind = kind
        self.line = line
        self.detail = detail
        super().__init__(f"{kind.value} at line {line}: {detail}")


class VMFault(Exception):
    """Falla de ejecución en la instrucción pc."""

    def __init__(self, kind: FaultKind, pc: int, detail: str = ""):
        self.kind = kind
        self.pc = pc
        self.detail = detail
        msg = f"{kind.value} at pc {pc}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
