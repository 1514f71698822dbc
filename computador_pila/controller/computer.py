import csv
import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from openpyxl import Workbook

from computador_pila import constants
from computador_pila.utils import NumberConversion as NC
from computador_pila.model.errors import VMFault
from computador_pila.model.isa import Program
from computador_pila.model.ensamblador import assembler
from computador_pila.model.ensamblador.listing import format_instruction
from computador_pila.model.procesador.cpu import Maquina, RunResult, RunStatus

logger = logging.getLogger(__name__)


# -----------------------
# Funciones de acción
# -----------------------

class Action:

    # Sesión de ejecución paso a paso
    _session: Optional[Maquina] = None

    @staticmethod
    def assemble_file(path) -> Program:
        """
        Ensambla un archivo de código fuente.
        Propaga AsmSyntaxError sin ejecutar nada.
        """
        program = assembler.assemble_file(path)
        logger.info("loaded %s (%d instructions)", path, len(program))
        return program

    @staticmethod
    def execute_program(program: Program, io=None,
                        step_budget: int = constants.DEFAULT_STEP_BUDGET) -> RunResult:
        """
        Ejecuta el programa completo en una máquina nueva.
        """
        return Maquina(program, io, step_budget).run()

    @staticmethod
    def start_stepping(program: Program, io=None,
                       step_budget: int = constants.DEFAULT_STEP_BUDGET) -> None:
        """
        Prepara una máquina nueva para ejecutar instrucción por instrucción.
        """
        Action._session = Maquina(program, io, step_budget)

    @staticmethod
    def step() -> Tuple[Optional[str], bool]:
        """
        Ejecuta exactamente un ciclo fetch-decode-execute.
        :return: (instrucción ejecutada, True si la máquina se detuvo)
        """
        if Action._session is None:
            raise RuntimeError("Stepping not started. Call start_stepping(program) first.")
        maquina = Action._session
        formatted = None
        if maquina.status is RunStatus.RUNNING and maquina.pc < len(maquina.program):
            formatted = format_instruction(maquina.program, maquina.pc)
        running = maquina.step()
        return formatted, not running

    @staticmethod
    def current_result() -> RunResult:
        if Action._session is None:
            raise RuntimeError("Stepping not started. Call start_stepping(program) first.")
        return Action._session.result()

    @staticmethod
    def stop_stepping() -> None:
        Action._session = None

    @staticmethod
    def is_stepping() -> bool:
        return Action._session is not None and Action._session.status is RunStatus.RUNNING

    @staticmethod
    def format_result(result: RunResult) -> str:
        """
        Texto para mostrar al usuario. Si el programa no imprimió nada
        se muestra la pila final.
        """
        text = result.output
        if not text:
            text = f"Final stack: {list(result.stack)}\n"
        if result.faulted:
            if not text.endswith('\n'):
                text += '\n'
            text += Action.format_fault(result.fault)
        return text

    @staticmethod
    def format_fault(fault: VMFault) -> str:
        msg = f"Error: {fault.kind.value} at pc {fault.pc}"
        if fault.detail:
            msg += f" ({fault.detail})"
        return msg + '\n'


# -----------------------
# Funciones de datos
# -----------------------

class Data:
    class Memory_D:

        @staticmethod
        def format_memory_value(val: int, mode: str) -> str:
            """
            Convierte el contenido de una celda al formato pedido
            :param val: contenido de una celda de memoria (int64)
            :param mode: ["bin", "hex", "decimal"]
            """
            if mode == "bin":
                return NC.int2bitarray(int(val)).to01()
            elif mode == "hex":
                return hex(int(val) & ((1 << constants.WORD_BITS) - 1))
            elif mode == "decimal":
                return str(int(val))
            else:
                raise ValueError(
                    f"Modo inválido: '{mode}'. "
                    f"Opciones válidas: {constants.MEMORY_MODES}")

        @staticmethod
        def save_memory_csv(memory: np.ndarray, path_csv, mode: str = "decimal") -> None:
            """
            Guarda toda la memoria en un CSV (dirección, contenido)
            :param memory: RunResult.memory
            :param mode: ('bin', 'hex', 'decimal').
            """
            if mode not in constants.MEMORY_MODES:
                raise ValueError(
                    f"Modo inválido: '{mode}'. "
                    f"Opciones válidas: {constants.MEMORY_MODES}")
            with open(path_csv, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(["Dirección", "Contenido"])
                for address, val in enumerate(memory):
                    writer.writerow([address, Data.Memory_D.format_memory_value(val, mode)])

        @staticmethod
        def save_modified_memory(memory: np.ndarray, path_xlsx, mode: str = "decimal") -> Path:
            """
            Guarda en un Excel sólo las celdas distintas de cero
            :param memory: RunResult.memory
            :param mode: ('bin', 'hex', 'decimal').
            """
            path_xlsx = Path(path_xlsx)
            if path_xlsx.suffix != ".xlsx":
                path_xlsx = path_xlsx.with_name(path_xlsx.name + ".xlsx")

            wb = Workbook()
            ws = wb.active
            ws.title = "Memoria Modificada"

            # Encabezados
            ws.append(["Dirección", "Contenido"])

            for address in np.flatnonzero(memory):
                content = Data.Memory_D.format_memory_value(memory[address], mode)
                ws.append([int(address), content])

            wb.save(path_xlsx)
            return path_xlsx

        @staticmethod
        def get_memory_range_content(memory: np.ndarray, start: int, end: int, mode: str) -> list[str]:
            """
            Devuelve el contenido de un rango de direcciones en el formato especificado.

            :param start: Dirección inicial del rango (inclusive).
            :param end: Dirección final del rango (inclusive).
            """
            if start > end:
                raise ValueError(
                    "La dirección inicial debe ser menor o "
                    "igual a la dirección final."
                )
            if start < 0:
                raise ValueError(f"Del rango {start} inválido. Debe ser mayor o igual a 0")
            if end >= len(memory):
                raise ValueError(
                    f"Del rango {end} inválido. "
                    f"Debe ser menor o igual a {len(memory) - 1}")

            return [Data.Memory_D.format_memory_value(memory[addr], mode)
                    for addr in range(start, end + 1)]
