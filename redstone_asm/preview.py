# -*- coding: utf-8 -*-
"""
Pré-visualização da memória de programa como imagem.

Cada endereço vira uma linha de pixels e cada bit uma coluna (bit 15 à
esquerda). Útil para conferir o programa antes de gerar o mundo.
"""

from typing import Iterable, Tuple

from PIL import Image

from .generator import pad_machine_code
from .isa_table import WORD_BITS

ONE_COLOR: Tuple[int, int, int] = (255, 64, 64)     # repetidor
ZERO_COLOR: Tuple[int, int, int] = (96, 32, 128)    # lã roxa


def render_memory(machine_code: Iterable[str], scale: int = 1) -> Image.Image:
    """
    Gera uma imagem RGB da memória de programa completa.

    Args:
        machine_code: Palavras produzidas pelo assembler
        scale: Fator inteiro de ampliação

    Returns:
        Imagem de tamanho (16 * scale, 1024 * scale)
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")

    lines = pad_machine_code(machine_code)
    image = Image.new("RGB", (WORD_BITS, len(lines)), ZERO_COLOR)
    pix = image.load()
    for address, word in enumerate(lines):
        for bit, char in enumerate(word):
            if char == "1":
                pix[bit, address] = ONE_COLOR

    if scale > 1:
        image = image.resize((WORD_BITS * scale, len(lines) * scale), Image.NEAREST)
    return image

