"""Procesador package: memory, I/O unit and the stack CPU"""

from .cpu import Maquina, RunResult, RunStatus, run
from .memory import Memory
from .unidad_E_S import BufferedIO, InputExhausted, InputStream, NullIO, OutputSink

__all__ = [
    "Maquina", "RunResult", "RunStatus", "run", "Memory",
    "BufferedIO", "InputExhausted", "InputStream", "NullIO", "OutputSink",
]
