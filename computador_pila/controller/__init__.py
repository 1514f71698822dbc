"""Controller package: host-side actions and the terminal bridge"""

from .computer import Action, Data
from .terminal import TerminalIO

__all__ = ["Action", "Data", "TerminalIO"]
