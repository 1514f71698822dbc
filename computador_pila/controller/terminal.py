"""Terminal bridge between the stack CPU I/O unit and the host.

The host pushes text into the input queue (one integer per `read`) and
registers a write callback that receives every fragment emitted by
`print` / `printchar`.
"""
import logging
from collections import deque
from typing import Callable, Optional

from computador_pila import constants
from computador_pila.model.procesador.unidad_E_S import InputExhausted, InputStream, OutputSink

logger = logging.getLogger(__name__)


def encode_input(text: str) -> list[int]:
    """Split text on whitespace and parse every piece as a signed 64-bit decimal integer."""
    values = []
    for piece in text.split():
        try:
            value = int(piece, 10)
        except ValueError:
            raise ValueError(f"Input '{piece}' is not an integer") from None
        if not (constants.WORD_MIN <= value <= constants.WORD_MAX):
            raise ValueError(f"Input '{piece}' does not fit in a signed {constants.WORD_BITS}-bit word")
        values.append(value)
    return values


class TerminalIO(InputStream, OutputSink):

    def __init__(self, text: str = ""):
        self._input_queue: deque[int] = deque()
        self._write_callback: Optional[Callable[[str], None]] = None
        self._transcript: list[str] = []
        if text:
            self.push_input(text)

    def register_write_callback(self, cb: Callable[[str], None]):
        """Register a function cb(text) called for every emitted fragment."""
        self._write_callback = cb

    def push_input(self, text: str):
        """Push whitespace separated integers into the input queue."""
        if text is None:
            return
        values = encode_input(text)
        self._input_queue.extend(values)
        logger.debug("queued %d input value(s)", len(values))

    def has_input(self) -> bool:
        return len(self._input_queue) > 0

    def read_int(self) -> int:
        if not self._input_queue:
            raise InputExhausted()
        return self._input_queue.popleft()

    def _notify(self, text: str):
        self._transcript.append(text)
        if self._write_callback:
            self._write_callback(text)

    def write_int(self, value: int) -> None:
        self._notify(str(value))

    def write_char(self, char: str) -> None:
        self._notify(char)

    @property
    def transcript(self) -> str:
        return ''.join(self._transcript)
