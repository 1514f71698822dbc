"""
CPU de la máquina de pila: ciclo fetch-decode-execute sobre un Program.

Cada corrida usa una Maquina nueva (pila, memoria y pc propios), así un
mismo Program puede ejecutarse en varias máquinas a la vez.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from computador_pila import constants
from computador_pila.model.errors import FaultKind, VMFault
from computador_pila.model.isa import Instruction, Opcode, Program
from computador_pila.model.procesador.memory import InvalidAddressError, Memory
from computador_pila.model.procesador.unidad_E_S import InputExhausted, NullIO
from computador_pila.utils import NumberConversion as NC

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    RUNNING = auto()
    HALTED = auto()
    FAULTED = auto()


@dataclass(frozen=True)
class RunResult:
    status: RunStatus
    output: str
    pc: int
    steps: int
    stack: Tuple[int, ...]
    memory: np.ndarray = field(compare=False)
    fault: Optional[VMFault] = None

    @property
    def halted(self) -> bool:
        return self.status is RunStatus.HALTED

    @property
    def faulted(self) -> bool:
        return self.status is RunStatus.FAULTED

    @property
    def fault_kind(self) -> Optional[FaultKind]:
        return self.fault.kind if self.fault else None

    def raise_for_fault(self) -> "RunResult":
        if self.fault is not None:
            raise self.fault
        return self


def _div_trunc(a: int, b: int) -> int:
    # Cociente truncado hacia cero
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _mod_trunc(a: int, b: int) -> int:
    # Resto con el signo del dividendo: a == b*q + r
    return a - b * _div_trunc(a, b)


def _char_for(code: int) -> str:
    if 0 <= code <= 0x10FFFF and not (0xD800 <= code <= 0xDFFF):
        return chr(code)
    return '?'


class Maquina:
    """
    Estado de una corrida: pila de operandos, memoria, pc y estado.

    :param program: Programa ya ensamblado (no se modifica).
    :param io: Objeto con read_int/write_int/write_char. NullIO si es None.
    :param step_budget: Máximo de instrucciones a ejecutar.
    """

    def __init__(self, program: Program, io=None,
                 step_budget: int = constants.DEFAULT_STEP_BUDGET):
        if isinstance(step_budget, bool) or not isinstance(step_budget, int) or step_budget <= 0:
            raise ValueError(f"step_budget debe ser un entero positivo, no {step_budget!r}")
        self.program = program
        self.io = io if io is not None else NullIO()
        self.step_budget = step_budget

        self.stack: list[int] = []
        self.memory = Memory()
        self.pc = 0
        self.steps = 0
        self.status = RunStatus.RUNNING
        self.fault: Optional[VMFault] = None
        self._output: list[str] = []

        self._dispatch: Dict[Opcode, Callable[[Instruction], Optional[int]]] = {
            Opcode.PUSH: self._op_push,
            Opcode.POP: self._op_pop,
            Opcode.ADD: self._binary(lambda a, b: a + b),
            Opcode.SUB: self._binary(lambda a, b: a - b),
            Opcode.MUL: self._binary(lambda a, b: a * b),
            Opcode.DIV: self._binary(_div_trunc, checks_zero=True),
            Opcode.MOD: self._binary(_mod_trunc, checks_zero=True),
            Opcode.DUP: self._op_dup,
            Opcode.SWAP: self._op_swap,
            Opcode.LOAD: self._op_load,
            Opcode.STORE: self._op_store,
            Opcode.JUMP: self._op_jump,
            Opcode.JUMPIF: self._op_jumpif,
            Opcode.JUMPIFZ: self._op_jumpifz,
            Opcode.CMP: self._binary(lambda a, b: (a > b) - (a < b)),
            Opcode.PRINT: self._op_print,
            Opcode.PRINTCHAR: self._op_printchar,
            Opcode.READ: self._op_read,
            Opcode.HALT: self._op_halt,
        }

    # -----------------------
    # Pila
    # -----------------------

    def _require(self, n: int) -> None:
        if len(self.stack) < n:
            raise VMFault(FaultKind.STACK_UNDERFLOW, self.pc,
                          f"needs {n} value(s), stack has {len(self.stack)}")

    def _pop(self) -> int:
        self._require(1)
        return self.stack.pop()

    def _push(self, value: int) -> None:
        self.stack.append(NC.wrap_word(value))

    # -----------------------
    # Instrucciones
    # -----------------------

    def _op_push(self, inst):
        self._push(inst.operand)

    def _op_pop(self, inst):
        self._pop()

    def _binary(self, fn, checks_zero: bool = False):
        def op(inst):
            self._require(2)
            if checks_zero and self.stack[-1] == 0:
                raise VMFault(FaultKind.DIVISION_BY_ZERO, self.pc,
                              f"{inst.spec.mnemonic} by zero")
            b = self.stack.pop()
            a = self.stack.pop()
            self._push(fn(a, b))
        return op

    def _op_dup(self, inst):
        self._require(1)
        self.stack.append(self.stack[-1])

    def _op_swap(self, inst):
        self._require(2)
        self.stack[-1], self.stack[-2] = self.stack[-2], self.stack[-1]

    def _memory_fault(self, err: InvalidAddressError) -> VMFault:
        return VMFault(FaultKind.INVALID_ADDRESS, self.pc,
                       f"address {err.direction} outside 0..{len(self.memory) - 1}")

    def _op_load(self, inst):
        try:
            value = self.memory.read(inst.operand)
        except InvalidAddressError as err:
            raise self._memory_fault(err) from err
        self.stack.append(value)

    def _op_store(self, inst):
        try:
            self.memory.check(inst.operand)
        except InvalidAddressError as err:
            raise self._memory_fault(err) from err
        self.memory.write(inst.operand, self._pop())

    def _op_jump(self, inst):
        return inst.operand

    def _op_jumpif(self, inst):
        if self._pop() != 0:
            return inst.operand
        return None

    def _op_jumpifz(self, inst):
        if self._pop() == 0:
            return inst.operand
        return None

    def _emit(self, text: str) -> None:
        self._output.append(text)

    def _op_print(self, inst):
        value = self._pop()
        self._emit(str(value))
        self.io.write_int(value)

    def _op_printchar(self, inst):
        char = _char_for(self._pop())
        self._emit(char)
        self.io.write_char(char)

    def _op_read(self, inst):
        try:
            value = self.io.read_int()
        except InputExhausted as err:
            raise VMFault(FaultKind.INPUT_EXHAUSTED, self.pc, "no more input") from err
        self._push(value)

    def _op_halt(self, inst):
        self.status = RunStatus.HALTED

    # -----------------------
    # Ciclo
    # -----------------------

    @property
    def output(self) -> str:
        return ''.join(self._output)

    def _set_fault(self, fault: VMFault) -> None:
        self.status = RunStatus.FAULTED
        self.fault = fault
        logger.info("fault %s at pc %d after %d steps", fault.kind.value, fault.pc, self.steps)

    def step(self) -> bool:
        """
        Ejecuta una instrucción.
        :return: True si la máquina sigue en ejecución.
        """
        if self.status is not RunStatus.RUNNING:
            return False

        # Salir del final del programa es un halt implícito
        if self.pc >= len(self.program):
            self.status = RunStatus.HALTED
            return False

        if self.steps >= self.step_budget:
            self._set_fault(VMFault(FaultKind.EXECUTION_LIMIT_EXCEEDED, self.pc,
                                    f"step budget of {self.step_budget} exhausted"))
            return False

        inst = self.program[self.pc]
        self.steps += 1
        logger.debug("pc=%04d %-16s depth=%d", self.pc, inst, len(self.stack))
        try:
            target = self._dispatch[inst.opcode](inst)
        except VMFault as fault:
            self._set_fault(fault)
            return False

        if self.status is RunStatus.HALTED:
            return False
        self.pc = self.pc + 1 if target is None else target
        return True

    def run(self) -> RunResult:
        while self.step():
            pass
        return self.result()

    def result(self) -> RunResult:
        return RunResult(
            status=self.status,
            output=self.output,
            pc=self.pc,
            steps=self.steps,
            stack=tuple(self.stack),
            memory=self.memory.snapshot(),
            fault=self.fault,
        )


def run(program: Program, io=None,
        step_budget: int = constants.DEFAULT_STEP_BUDGET) -> RunResult:
    """Ejecuta program en una máquina nueva hasta HALTED o FAULTED."""
    return Maquina(program, io, step_budget).run()
