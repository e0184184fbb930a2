# -*- coding: utf-8 -*-
"""
Gerador de mundo para o computador redstone.

Recebe a lista de palavras binárias produzida pelo assembler e posiciona
cada bit da memória de programa no layout físico fixo do computador
(lã roxa = 0, repetidor = 1). Também gera os blocos que zeram o program
counter, a pilha de chamadas, as flags, a memória de dados e os
registradores. A saída é uma lista de comandos setblock (.mcfunction).
"""

import re
import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .assembler import AssemblerError
from .isa_table import MEMORY_WORDS, WORD_BITS

logger = logging.getLogger(__name__)

Position = Tuple[int, int, int]

EMPTY_WORD = "0" * WORD_BITS
WORD_PATTERN = re.compile(r"[01]{%d}" % WORD_BITS)

ZERO_BLOCK = "minecraft:purple_wool"
ONE_BLOCK = "minecraft:repeater[facing={face}]"
LOCKED_REPEATER = "minecraft:repeater[facing={face},locked=true,powered=false]"

# Origem de cada região do layout
PROGRAM_START = (-4, -1, 2)
PC_START = (-21, -1, -16)
PUSH_START = (-9, -1, -22)
PULL_START = (-8, -1, -21)
FLAG_START = (-26, -17, -60)
DATA_START = (-47, -3, -9)
REGISTER_START = (-35, -3, -12)

PC_BITS = 10
STACK_DEPTH = 16
DATA_BITS = 8
REGISTER_COUNT = 15
# Metade da memória fica de cada lado do barramento
EAST_WORDS = MEMORY_WORDS // 2


class GeneratorError(AssemblerError):
    """Código de máquina inválido para o gerador."""

    kind = "GeneratorError"


class BlockPlacement(NamedTuple):
    x: int
    y: int
    z: int
    block: str

    def to_command(self) -> str:
        return f"setblock {self.x} {self.y} {self.z} {self.block}"


def pad_machine_code(machine_code: Iterable[str]) -> List[str]:
    """
    Valida e completa o código de máquina até o tamanho da memória.

    Args:
        machine_code: Palavras de 16 caracteres '0'/'1'

    Returns:
        Lista com exatamente MEMORY_WORDS palavras

    Raises:
        GeneratorError: Se alguma palavra for inválida ou o programa não couber na memória
    """
    lines = []
    for index, word in enumerate(machine_code):
        word = word.strip()
        if not WORD_PATTERN.fullmatch(word):
            raise GeneratorError(f"Invalid machine code word '{word}'", index + 1, word)
        lines.append(word)

    if len(lines) > MEMORY_WORDS:
        raise GeneratorError(
            f"Program has {len(lines)} words but memory holds {MEMORY_WORDS}")

    lines.extend([EMPTY_WORD] * (MEMORY_WORDS - len(lines)))
    return lines


def program_positions() -> List[Position]:
    """
    Posição do bit mais alto de cada endereço da memória de programa.

    Duas colunas de 32 linhas; cada linha tem 16 palavras em zigue-zague.
    """
    positions = []
    for column in range(2):
        for row in range(32):
            x, y, z = PROGRAM_START
            if column == 1:
                x -= 2
            z += 2 * row
            if row >= 16:
                z += 4
            step = 1 if row < 16 else -1

            for k in range(16):
                positions.append((x, y, z))
                x -= 7
                z += step if k % 2 == 0 else -step
    return positions


def _column(start: Position, count: int, block: str, spacing: int = 2) -> List[BlockPlacement]:
    x, y, z = start
    return [BlockPlacement(x, y - spacing * i, z, block) for i in range(count)]


class WorldGenerator:
    """
    Converte o código de máquina em blocos do computador redstone.
    """

    def __init__(self):
        self.positions = program_positions()

    def program_placements(self, lines: List[str]) -> List[BlockPlacement]:
        """
        Blocos da memória de programa.

        Cada palavra desce em y de 2 em 2: os 8 bits altos, um espaço extra
        e os 8 bits baixos.
        """
        placements = []
        for address, word in enumerate(lines):
            face = "east" if address < EAST_WORDS else "west"
            x, y, z = self.positions[address]
            half = WORD_BITS // 2
            for i, bit in enumerate(word):
                if i == half:
                    y -= 2
                block = ZERO_BLOCK if bit == "0" else ONE_BLOCK.format(face=face)
                placements.append(BlockPlacement(x, y, z, block))
                y -= 2
        return placements

    def reset_placements(self) -> List[BlockPlacement]:
        """Blocos que zeram pc, pilha, flags, memória de dados e registradores."""
        placements = []

        # program counter
        placements += _column(PC_START, PC_BITS, LOCKED_REPEATER.format(face="north"))

        # pilha de chamadas
        for level in range(STACK_DEPTH):
            x, y, z = PUSH_START
            placements += _column((x, y - 3 * level, z), PC_BITS,
                                  LOCKED_REPEATER.format(face="south"))
        for level in range(STACK_DEPTH):
            x, y, z = PULL_START
            placements += _column((x, y - 3 * level, z), PC_BITS,
                                  LOCKED_REPEATER.format(face="north"))

        # flags
        x, y, z = FLAG_START
        flag = LOCKED_REPEATER.format(face="west")
        placements.append(BlockPlacement(x, y, z, flag))
        placements.append(BlockPlacement(x, y, z - 4, flag))

        # memória de dados
        north = LOCKED_REPEATER.format(face="north")
        for position in self._data_positions():
            placements += _column(position, DATA_BITS, north)

        # registradores
        east = LOCKED_REPEATER.format(face="east")
        west = LOCKED_REPEATER.format(face="west")
        for x, y, z in self._register_positions():
            placements += _column((x, y, z), DATA_BITS, east)
            placements += _column((x + 2, y, z), DATA_BITS, west)

        return placements

    @staticmethod
    def _data_positions() -> List[Position]:
        positions = []
        for bank in range(4):
            for dx, dy in ((0, 0), (-36, 1)):
                x, y, z = DATA_START
                x, y, z = x + dx, y + dy, z - 16 * bank
                for j in range(16):
                    positions.append((x, y, z))
                    x -= 2
                    z += 1 if j % 2 == 0 else -1
        return positions

    @staticmethod
    def _register_positions() -> List[Position]:
        positions = []
        x, y, z = REGISTER_START
        for i in range(REGISTER_COUNT):
            positions.append((x, y, z))
            x -= 2
            z += -1 if i % 2 == 0 else 1
        return positions

    def generate(self, machine_code: Iterable[str]) -> List[BlockPlacement]:
        """
        Gera todos os blocos para um programa.

        Args:
            machine_code: Palavras produzidas pelo assembler (no máximo 1024)

        Returns:
            Blocos da memória de programa seguidos dos blocos de reset

        Raises:
            GeneratorError: Se o código de máquina for inválido
        """
        lines = pad_machine_code(machine_code)
        placements = self.program_placements(lines) + self.reset_placements()
        logger.info("Generated %d block placements", len(placements))
        return placements


def write_function(placements: Iterable[BlockPlacement], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for placement in placements:
            f.write(placement.to_command() + "\n")


def generate(machine_code: Iterable[str], path: Optional[str] = None) -> List[BlockPlacement]:
    """Gera os blocos e, se `path` for informado, grava o .mcfunction."""
    placements = WorldGenerator().generate(machine_code)
    if path:
        write_function(placements, path)
        logger.info("Function written to %s", path)
    return placements
