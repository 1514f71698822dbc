"""
Constantes de la máquina de pila.
"""

# Memoria: celdas de 64 bits con signo
MEMORY_SIZE = 1024
WORD_BITS = 64
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1

# Máximo de instrucciones ejecutadas por corrida
DEFAULT_STEP_BUDGET = 1_000_000

# Formatos para exportar memoria
MEMORY_MODES = ["bin", "hex", "decimal"]
