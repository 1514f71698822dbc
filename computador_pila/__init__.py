"""Assembler and interpreter for a small stack machine."""

from computador_pila.model.errors import AsmSyntaxError, FaultKind, SyntaxErrorKind, VMFault
from computador_pila.model.isa import Instruction, Opcode, Program
from computador_pila.model.ensamblador import assemble, assemble_file, check, listing
from computador_pila.model.procesador import BufferedIO, Maquina, RunResult, RunStatus, run

__version__ = "0.1.0"

__all__ = [
    "AsmSyntaxError", "FaultKind", "SyntaxErrorKind", "VMFault",
    "Instruction", "Opcode", "Program",
    "assemble", "assemble_file", "check", "listing",
    "BufferedIO", "Maquina", "RunResult", "RunStatus", "run",
]
