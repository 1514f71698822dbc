"""Ensamblador package: lexer, two-pass assembler and listings"""

from .assembler import assemble, assemble_file, check
from .lexer import lex_source
from .listing import listing

__all__ = ["assemble", "assemble_file", "check", "lex_source", "listing"]
