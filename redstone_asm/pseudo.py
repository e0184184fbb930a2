# -*- coding: utf-8 -*-
"""
Pseudo-instruções do assembler.

Cada pseudo-instrução é reescrita, de forma determinística, em exatamente
uma instrução real antes da resolução dos operandos. O conjunto é fechado:
as sete regras abaixo são as únicas existentes.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

QUOTES = ("'", '"')
SPACE_LITERAL = "' '"


class PseudoInstruction(Enum):
    """Regras de reescrita, uma por mnemônico (template usa {a} e {b})."""

    CMP = ("cmp", ("sub", "{a}", "{b}", "r0"))
    MOV = ("mov", ("add", "{a}", "r0", "{b}"))
    LSH = ("lsh", ("add", "{a}", "{a}", "{b}"))
    INC = ("inc", ("adi", "{a}", "1"))
    DEC = ("dec", ("adi", "{a}", "-1"))
    NOT = ("not", ("nor", "{a}", "r0", "{b}"))
    NEG = ("neg", ("sub", "r0", "{a}", "{b}"))

    def __init__(self, mnemonic: str, template: Tuple[str, ...]):
        self.mnemonic = mnemonic
        self.template = template

    @property
    def params(self) -> Tuple[str, ...]:
        return ("a", "b") if any("{b}" in t for t in self.template) else ("a",)

    @property
    def token_count(self) -> int:
        """Quantidade de tokens da forma escrita (mnemônico incluído)."""
        return len(self.params) + 1

    @classmethod
    def lookup(cls, mnemonic: str) -> Optional["PseudoInstruction"]:
        for rule in cls:
            if rule.mnemonic == mnemonic:
                return rule
        return None

    def expand(self, tokens: Sequence[str]) -> List[str]:
        """
        Expande a pseudo-instrução com os argumentos fornecidos.

        Args:
            tokens: Tokens da linha, começando pelo mnemônico

        Returns:
            Tokens da instrução real equivalente

        Raises:
            ValueError: Se a quantidade de argumentos não bater com a regra
        """
        args = list(tokens[1:])
        if len(args) != len(self.params):
            raise ValueError(
                f"Pseudo-instruction {self.mnemonic} expects {len(self.params)} arguments, got {len(args)}")
        substitutions = dict(zip(self.params, args))
        return [part.format(**substitutions) for part in self.template]


def expand_pseudo(tokens: Sequence[str]) -> List[str]:
    """Reescreve pseudo-instruções; outros mnemônicos passam inalterados."""
    rule = PseudoInstruction.lookup(tokens[0])
    if rule is None:
        return list(tokens)
    return rule.expand(tokens)


def apply_fixups(tokens: Sequence[str]) -> List[str]:
    """
    Ajustes aplicados depois da expansão e antes da resolução.

    - lod/str com 3 tokens recebem o offset implícito 0;
    - duas aspas soltas no final viram o literal de espaço (' ' é quebrado
      em dois tokens pela separação por espaços).
    """
    tokens = list(tokens)
    if tokens[0] in ("lod", "str") and len(tokens) == 3:
        tokens.append("0")

    if len(tokens) >= 2 and tokens[-1] in QUOTES and tokens[-2] in QUOTES:
        del tokens[-2:]
        tokens.append(SPACE_LITERAL)
    return tokens
