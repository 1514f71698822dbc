"""
Unidad de entrada/salida de la máquina.

La CPU sólo conoce estas dos interfaces: un InputStream que entrega un
entero por cada `read` y un OutputSink que recibe lo que emiten `print`
y `printchar`. El anfitrión decide de dónde vienen y a dónde van.
"""
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable

from computador_pila.utils import NumberConversion as NC


class InputExhausted(Exception):
    """No quedan enteros en la entrada."""
    pass


class InputStream(ABC):

    @abstractmethod
    def read_int(self) -> int:
        """Siguiente entero; InputExhausted si no hay más."""


class OutputSink(ABC):

    @abstractmethod
    def write_int(self, value: int) -> None:
        """Emite el entero en decimal."""

    @abstractmethod
    def write_char(self, char: str) -> None:
        """Emite un solo carácter."""


class BufferedIO(InputStream, OutputSink):
    """Entrada y salida en memoria, útil para pruebas y corridas sin terminal."""

    def __init__(self, inputs: Iterable[int] = ()):
        self._inputs = deque(NC.check_word(v) for v in inputs)
        self._out: list[str] = []

    def push_input(self, value: int) -> None:
        self._inputs.append(NC.check_word(value))

    def read_int(self) -> int:
        if not self._inputs:
            raise InputExhausted()
        return self._inputs.popleft()

    def write_int(self, value: int) -> None:
        self._out.append(str(value))

    def write_char(self, char: str) -> None:
        self._out.append(char)

    def getvalue(self) -> str:
        return ''.join(self._out)


class NullIO(InputStream, OutputSink):
    """Sin entrada; descarta la salida."""

    def read_int(self) -> int:
        raise InputExhausted()

    def write_int(self, value: int) -> None:
        pass

    def write_char(self, char: str) -> None:
        pass
