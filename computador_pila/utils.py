from bitarray import bitarray
from bitarray.util import int2ba

from computador_pila import constants


class NumberConversion:

    @staticmethod
    def wrap_word(value: int) -> int:
        """
        Reduce un entero de Python a una palabra de WORD_BITS bits
        con signo (complemento a 2).
        """
        mask = (1 << constants.WORD_BITS) - 1
        value &= mask
        if value > constants.WORD_MAX:
            value -= 1 << constants.WORD_BITS
        return value

    @staticmethod
    def check_word(value: int) -> int:
        """Devuelve value si cabe en una palabra con signo; ValueError si no."""
        value = int(value)
        if not (constants.WORD_MIN <= value <= constants.WORD_MAX):
            raise ValueError(f"{value} is outside the signed {constants.WORD_BITS}-bit range")
        return value

    @staticmethod
    def int2bitarray(value: int) -> bitarray:
        """Palabra con signo -> bitarray de WORD_BITS bits (C2)."""
        return int2ba(int(value), length=constants.WORD_BITS, signed=True)

