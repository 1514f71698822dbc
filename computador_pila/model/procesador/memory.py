import numpy as np

from computador_pila import constants


class InvalidAddressError(ValueError):
    """Dirección fuera de [0, MEMORY_SIZE)."""

    def __init__(self, direction: int):
        self.direction = direction
        super().__init__(f"Dirección de memoria fuera de rango: {direction}")


class Memory:
    """
    Memoria de datos de la máquina de pila.
    Array de MEMORY_SIZE palabras int64, inicializado en cero.
    Cada corrida crea su propia instancia.
    """

    def __init__(self, size: int = constants.MEMORY_SIZE):
        self.array: np.ndarray = np.zeros(size, dtype=np.int64)

    def __len__(self) -> int:
        return len(self.array)

    def check(self, direction: int) -> None:
        if not (0 <= direction < len(self.array)):
            raise InvalidAddressError(direction)

    def read(self, direction: int) -> int:
        """
        Devuelve la palabra almacenada en una dirección.
        :param direction: Dirección de memoria a leer.
        """
        self.check(direction)
        return int(self.array[direction])

    def write(self, direction: int, value: int):
        """
        Escribe una palabra en una dirección de memoria
        """
        self.check(direction)
        self.array[direction] = value

    def snapshot(self) -> np.ndarray:
        """Copia de sólo lectura del contenido actual."""
        copy = self.array.copy()
        copy.setflags(write=False)
        return copy
