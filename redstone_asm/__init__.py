# -*- coding: utf-8 -*-
"""
Assembler e gerador de mundo para o computador redstone de 16 bits.
"""

from .assembler import (
    AddressOutOfRange,
    Assembler,
    AssemblerError,
    ConditionOutOfRange,
    ImmediateOutOfRange,
    NumberParseFailure,
    OffsetOutOfRange,
    OperandCountMismatch,
    RegisterOutOfRange,
    UnresolvedSymbol,
    assemble,
)
from .generator import GeneratorError, WorldGenerator, generate

__version__ = "0.1.0"
