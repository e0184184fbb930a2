# -*- coding: utf-8 -*-
"""
Tabelas fixas do conjunto de instruções de 16 bits.

Este módulo define os dados constantes usados pelo assembler: mnemônicos dos
opcodes, nomes dos registradores, apelidos de condição, portas de I/O e o
alfabeto dos literais de caractere. Tudo aqui é somente leitura e é
carregado uma única vez na importação.
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Dict, Tuple


# Opcodes (ocupam sempre os bits 12-15 da palavra)
class Opcode(IntEnum):
    NOP = 0
    HLT = 1
    ADD = 2
    SUB = 3
    NOR = 4
    AND = 5
    XOR = 6
    RSH = 7
    LDI = 8
    ADI = 9
    JMP = 10
    BRH = 11
    CAL = 12
    RET = 13
    LOD = 14
    STR = 15


# Nome de cada opcode, indexado pelo número
OPCODE_NAMES: Tuple[str, ...] = tuple(op.name.lower() for op in Opcode)

REGISTER_NAMES: Tuple[str, ...] = tuple(f"r{i}" for i in range(16))

# Quatro grupos de apelidos; a posição dentro do grupo é o código da condição
CONDITION_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("eq", "ne", "ge", "lt"),
    ("=", "!=", ">=", "<"),
    ("z", "nz", "c", "nc"),
    ("zero", "notzero", "carry", "notcarry"),
)

PORT_OFFSET = 240
PORT_NAMES: Tuple[str, ...] = (
    "pixel_x",
    "pixel_y",
    "draw_pixel",
    "clear_pixel",
    "load_pixel",
    "buffer_screen",
    "clear_screen_buffer",
    "write_char",
    "buffer_chars",
    "clear_chars_buffer",
    "show_number",
    "clear_number",
    "signed_mode",
    "unsigned_mode",
    "rng",
    "controller_input",
)

# Espaço vale 0
CHARACTER_ALPHABET = " abcdefghijklmnopqrstuvwxyz.!?"

# Limites dos campos
MAX_REGISTER = 1 << 4
MIN_IMMEDIATE = -128
MAX_IMMEDIATE = 255
MIN_OFFSET = -8
MAX_OFFSET = 7
MAX_ADDRESS = 1 << 10
MAX_CONDITION = 1 << 2

WORD_BITS = 16
MEMORY_WORDS = MAX_ADDRESS

# Quantidade de tokens (mnemônico incluído) esperada por opcode
OPERAND_COUNTS = MappingProxyType({
    Opcode.NOP: 1, Opcode.HLT: 1, Opcode.RET: 1,
    Opcode.JMP: 2, Opcode.CAL: 2,
    Opcode.RSH: 3, Opcode.LDI: 3, Opcode.ADI: 3, Opcode.BRH: 3,
    Opcode.ADD: 4, Opcode.SUB: 4, Opcode.NOR: 4, Opcode.AND: 4,
    Opcode.XOR: 4, Opcode.LOD: 4, Opcode.STR: 4,
})

# Classes de opcode por campo codificado
_ARITHMETIC = frozenset({Opcode.ADD, Opcode.SUB, Opcode.NOR, Opcode.AND, Opcode.XOR})
_MEMORY = frozenset({Opcode.LOD, Opcode.STR})

REG_A_OPCODES = _ARITHMETIC | _MEMORY | {Opcode.RSH, Opcode.LDI, Opcode.ADI}
REG_B_OPCODES = _ARITHMETIC | _MEMORY
REG_C_OPCODES = _ARITHMETIC | {Opcode.RSH}
IMMEDIATE_OPCODES = frozenset({Opcode.LDI, Opcode.ADI})
ADDRESS_OPCODES = frozenset({Opcode.JMP, Opcode.BRH, Opcode.CAL})
OFFSET_OPCODES = _MEMORY
CONDITION_OPCODES = frozenset({Opcode.BRH})


def opcode_name(opcode: int) -> str:
    """
    Obtém o mnemônico de um opcode numérico.

    Args:
        opcode: Número do opcode

    Returns:
        Mnemônico em minúsculas, ou '???' se o número não for um opcode
    """
    if 0 <= opcode < len(OPCODE_NAMES):
        return OPCODE_NAMES[opcode]
    return "???"


def expected_operand_count(opcode: int) -> int:
    """Quantidade de tokens esperada para o opcode (0 se desconhecido)."""
    return OPERAND_COUNTS.get(opcode, 0)


def build_seed_symbols() -> Dict[str, int]:
    """
    Monta a tabela inicial de símbolos.

    A ordem de inserção é: opcodes, registradores, condições, portas e
    literais de caractere. Entradas posteriores sobrescrevem as anteriores.

    Returns:
        Novo dicionário nome -> valor
    """
    symbols: Dict[str, int] = {}
    for number, name in enumerate(OPCODE_NAMES):
        symbols[name] = number
    for index, name in enumerate(REGISTER_NAMES):
        symbols[name] = index
    for group in CONDITION_GROUPS:
        for code, alias in enumerate(group):
            symbols[alias] = code
    for index, name in enumerate(PORT_NAMES):
        symbols[name] = index + PORT_OFFSET
    for index, char in enumerate(CHARACTER_ALPHABET):
        symbols[f'"{char}"'] = index
        symbols[f"'{char}'"] = index
    return symbols


SEED_SYMBOLS = MappingProxyType(build_seed_symbols())
