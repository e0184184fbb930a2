# -*- coding: utf-8 -*-
"""
Assembler de duas passagens para o processador redstone de 16 bits.

Este módulo traduz código assembly em palavras de máquina de 16 bits,
representadas como strings de '0' e '1' (bit mais significativo primeiro).

Fases:
    1. Normalização: remove comentários e linhas vazias, converte para minúsculas
    2. Primeira passagem: registra definições e labels, enfileira instruções
    3. Segunda passagem: expande pseudo-instruções, resolve e codifica operandos
"""

import re
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from .isa_table import (
    ADDRESS_OPCODES,
    CONDITION_OPCODES,
    IMMEDIATE_OPCODES,
    MAX_ADDRESS,
    MAX_CONDITION,
    MAX_IMMEDIATE,
    MAX_OFFSET,
    MAX_REGISTER,
    MIN_IMMEDIATE,
    MIN_OFFSET,
    OFFSET_OPCODES,
    REG_A_OPCODES,
    REG_B_OPCODES,
    REG_C_OPCODES,
    SEED_SYMBOLS,
    WORD_BITS,
    Opcode,
    expected_operand_count,
    opcode_name,
)
from .pseudo import PseudoInstruction, apply_fixups, expand_pseudo

logger = logging.getLogger(__name__)

COMMENT_PATTERN = re.compile(r"[/#;].*")
NUMERIC_START = re.compile(r"[-0-9]")

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1

_DIGIT_PATTERNS = {
    2: re.compile(r"[+-]?[01]+"),
    10: re.compile(r"[+-]?[0-9]+"),
    16: re.compile(r"[+-]?[0-9a-fA-F]+"),
}


class AssemblerError(Exception):
    """Exceção lançada quando ocorre um erro durante o assembly."""

    kind = "AssemblerError"

    def __init__(self, message: str, line: int = 0, text: Optional[str] = None):
        self.message = message
        self.line = line
        self.text = text
        super().__init__(f"Error at line {line}: {message}")


class UnresolvedSymbol(AssemblerError):
    kind = "UnresolvedSymbol"


class NumberParseFailure(AssemblerError):
    kind = "NumberParseFailure"


class OperandCountMismatch(AssemblerError):
    """Quantidade de tokens diferente da esperada pelo opcode."""

    kind = "OperandCountMismatch"

    def __init__(self, mnemonic: str, expected: int, actual: int,
                 line: int = 0, text: Optional[str] = None):
        self.mnemonic = mnemonic
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Incorrect number of operands for '{mnemonic}' (expected {expected}, got {actual})",
            line, text)


class RegisterOutOfRange(AssemblerError):
    kind = "RegisterOutOfRange"


class ImmediateOutOfRange(AssemblerError):
    kind = "ImmediateOutOfRange"


class AddressOutOfRange(AssemblerError):
    kind = "AddressOutOfRange"


class OffsetOutOfRange(AssemblerError):
    kind = "OffsetOutOfRange"


class ConditionOutOfRange(AssemblerError):
    kind = "ConditionOutOfRange"


class SourceLine(NamedTuple):
    """Linha limpa com o número (1-based) da linha original."""

    line: int
    text: str


class InstructionRecord(NamedTuple):
    """
    Instrução enfileirada na primeira passagem.

    `scope` guarda os símbolos fixos e as definições (define) visíveis na
    linha da instrução. Sem escopo, a resolução usa a tabela final.
    """

    source: SourceLine
    tokens: Tuple[str, ...]
    scope: Optional[Mapping[str, int]] = None


def normalize_source(source: Union[str, Iterable[str]]) -> List[SourceLine]:
    """
    Remove comentários e linhas vazias e converte o texto para minúsculas.

    Args:
        source: Código fonte completo ou sequência de linhas

    Returns:
        Lista de linhas limpas, preservando o número da linha original
    """
    if isinstance(source, str):
        source = source.splitlines()

    lines = []
    for number, raw in enumerate(source, 1):
        cleaned = COMMENT_PATTERN.sub("", raw).strip()
        if cleaned:
            lines.append(SourceLine(number, cleaned.lower()))
    return lines


def parse_int(digits: str, radix: int) -> int:
    """
    Converte uma string para inteiro de 32 bits com sinal.

    Aceita apenas um sinal opcional seguido de dígitos da base.

    Raises:
        ValueError: Se a string não for um número válido na base ou não couber em 32 bits
    """
    if not _DIGIT_PATTERNS[radix].fullmatch(digits):
        raise ValueError(f"invalid base-{radix} literal: {digits!r}")
    value = int(digits, radix)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"literal out of 32-bit range: {digits!r}")
    return value


def parse_define_value(token: str) -> int:
    """Valor de uma diretiva define: hexadecimal se contém '0x', senão decimal."""
    if "0x" in token:
        digits = token[2:] if token.startswith("0x") else token
        return parse_int(digits, 16)
    return parse_int(token, 10)


class SymbolTable:
    """
    Tabela de símbolos nome -> inteiro.

    Começa com os símbolos fixos do conjunto de instruções e recebe as
    definições e labels do programa. Uma nova definição sobrescreve a
    anterior com o mesmo nome.
    """

    def __init__(self):
        self._symbols: Dict[str, int] = dict(SEED_SYMBOLS)
        self.user_symbols: Dict[str, int] = {}
        self.labels: Dict[str, int] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __getitem__(self, name: str) -> int:
        return self._symbols[name]

    def __len__(self) -> int:
        return len(self._symbols)

    def get(self, name: str, default: Optional[int] = None) -> Optional[int]:
        return self._symbols.get(name, default)

    def define(self, name: str, value: int) -> None:
        if name in self._symbols and self._symbols[name] != value:
            logger.debug("Symbol '%s' redefined: %d -> %d", name, self._symbols[name], value)
        self._symbols[name] = value
        self.user_symbols[name] = value

    def define_label(self, name: str, value: int) -> None:
        """Registra um label. Labels valem para o programa inteiro."""
        self.define(name, value)
        self.labels[name] = value

    def resolve(self, token: str, source: Optional[SourceLine] = None,
                scope: Optional[Mapping[str, int]] = None) -> int:
        """
        Resolve um token para um valor inteiro.

        Tokens que começam com '-' ou dígito são literais numéricos
        (0x = hexadecimal, 0b = binário, senão decimal). Com um escopo, os
        demais são procurados no escopo da linha e depois nos labels; sem
        escopo, na tabela inteira.

        Args:
            token: Token a ser resolvido
            source: Linha de origem, usada nas mensagens de erro
            scope: Símbolos visíveis na linha (opcional)

        Returns:
            Valor numérico do token

        Raises:
            NumberParseFailure: Se o literal numérico for inválido
            UnresolvedSymbol: Se o símbolo não existir na tabela
        """
        line, text = source if source is not None else (0, None)

        if NUMERIC_START.match(token):
            if token.startswith("0x"):
                radix, digits = 16, token[2:]
            elif token.startswith("0b"):
                radix, digits = 2, token[2:]
            else:
                radix, digits = 10, token
            try:
                return parse_int(digits, radix)
            except ValueError:
                raise NumberParseFailure(f"Could not parse number '{token}'", line, text)

        if scope is not None:
            if token in scope:
                return scope[token]
            if token in self.labels:
                return self.labels[token]
            raise UnresolvedSymbol(f"Could not resolve symbol '{token}'", line, text)
        if token not in self._symbols:
            raise UnresolvedSymbol(f"Could not resolve symbol '{token}'", line, text)
        return self._symbols[token]


class Parser:
    """
    Primeira passagem: classifica cada linha e atribui o program counter.

    Definições vão direto para a tabela de símbolos, labels recebem o pc
    atual e as instruções são enfileiradas para a segunda passagem.
    """

    def __init__(self, lines: List[SourceLine], symbols: SymbolTable):
        self.lines = lines
        self.symbols = symbols
        self.pc = 0
        self.instructions: List[InstructionRecord] = []
        self.scope: Mapping[str, int] = SEED_SYMBOLS

    def parse(self) -> List[InstructionRecord]:
        self.pc = 0
        self.instructions = []
        self.scope = SEED_SYMBOLS
        for source in self.lines:
            tokens = source.text.split()
            if not tokens:
                continue
            if tokens[0] == "define":
                self._parse_definition(source, tokens)
            elif tokens[0].startswith("."):
                self.symbols.define_label(tokens[0], self.pc)
                if tokens[0] in self.scope:
                    self.scope = MappingProxyType(
                        {k: v for k, v in self.scope.items() if k != tokens[0]})
                logger.debug("Label %s = %d (line %d)", tokens[0], self.pc, source.line)
                if len(tokens) > 1:
                    self._queue(source, tokens[1:])
            else:
                self._queue(source, tokens)
        return self.instructions

    def _parse_definition(self, source: SourceLine, tokens: List[str]) -> None:
        if len(tokens) < 3:
            logger.warning("Line %d: incomplete define ignored: %s", source.line, source.text)
            return
        try:
            value = parse_define_value(tokens[2])
        except ValueError:
            logger.warning("Line %d: malformed define value '%s' ignored", source.line, tokens[2])
            return
        self.symbols.define(tokens[1], value)
        # Instruções já enfileiradas continuam vendo o escopo antigo
        self.scope = MappingProxyType({**self.scope, tokens[1]: value})
        logger.debug("Define %s = %d (line %d)", tokens[1], value, source.line)

    def _queue(self, source: SourceLine, tokens: List[str]) -> None:
        self.instructions.append(InstructionRecord(source, tuple(tokens), self.scope))
        self.pc += 1


class Encoder:
    """Segunda passagem: converte cada instrução enfileirada em uma palavra de 16 bits."""

    def __init__(self, symbols: SymbolTable):
        self.symbols = symbols

    def encode(self, record: InstructionRecord) -> int:
        """
        Codifica uma instrução.

        Args:
            record: Instrução enfileirada na primeira passagem

        Returns:
            Palavra de máquina (0 a 0xFFFF)

        Raises:
            AssemblerError: Se algum operando não puder ser resolvido ou estiver fora da faixa
        """
        source = record.source
        rule = PseudoInstruction.lookup(record.tokens[0])
        if rule is not None and len(record.tokens) != rule.token_count:
            raise OperandCountMismatch(rule.mnemonic, rule.token_count, len(record.tokens),
                                       *source)

        tokens = apply_fixups(expand_pseudo(record.tokens))
        values = [self.symbols.resolve(token, source, record.scope) for token in tokens]
        opcode = values[0]

        expected = expected_operand_count(opcode)
        if len(values) != expected:
            raise OperandCountMismatch(opcode_name(opcode), expected, len(values), *source)

        return self._build_word(Opcode(opcode), values, source)

    def _build_word(self, opcode: Opcode, words: List[int], source: SourceLine) -> int:
        name = opcode_name(opcode)
        code = opcode << 12

        if opcode in REG_A_OPCODES:
            code |= self._register(words[1], "A", name, source) << 8

        if opcode in REG_B_OPCODES:
            code |= self._register(words[2], "B", name, source) << 4

        if opcode in REG_C_OPCODES:
            code |= self._register(words[-1], "C", name, source)

        if opcode in IMMEDIATE_OPCODES:
            imm = words[2]
            if not MIN_IMMEDIATE <= imm <= MAX_IMMEDIATE:
                raise ImmediateOutOfRange(f"Invalid immediate value '{imm}'", *source)
            code |= imm & 0xFF

        if opcode in ADDRESS_OPCODES:
            addr = words[-1]
            if not 0 <= addr < MAX_ADDRESS:
                raise AddressOutOfRange(f"Invalid address '{addr}'", *source)
            code |= addr

        if opcode in OFFSET_OPCODES:
            offset = words[3]
            if not MIN_OFFSET <= offset <= MAX_OFFSET:
                raise OffsetOutOfRange(f"Invalid offset '{offset}'", *source)
            code |= offset & 0xF

        if opcode in CONDITION_OPCODES:
            cond = words[1]
            if not 0 <= cond < MAX_CONDITION:
                raise ConditionOutOfRange(f"Invalid condition for '{name}'", *source)
            code |= cond << 10

        return code

    @staticmethod
    def _register(value: int, slot: str, name: str, source: SourceLine) -> int:
        if not 0 <= value < MAX_REGISTER:
            raise RegisterOutOfRange(f"Invalid reg {slot} for '{name}'", *source)
        return value


def format_word(word: int) -> str:
    """Representação binária da palavra, bit mais significativo primeiro."""
    return format(word, f"0{WORD_BITS}b")


class Assembler:
    """
    Assembler para o processador redstone de 16 bits.

    Responsável por traduzir código assembly para a lista de palavras de máquina.
    A tabela de símbolos e a fila de instruções da última execução ficam
    disponíveis nos atributos `symbols` e `instructions`.
    """

    def __init__(self):
        self.lines: List[SourceLine] = []
        self.symbols = SymbolTable()
        self.instructions: List[InstructionRecord] = []
        self.machine_code: List[str] = []

    def assemble(self, source: Union[str, Iterable[str]]) -> List[str]:
        """
        Monta o código assembly e gera o código de máquina.

        Args:
            source: Código fonte assembly (texto completo ou lista de linhas)

        Returns:
            Lista de palavras de 16 caracteres '0'/'1'; o índice é o endereço

        Raises:
            AssemblerError: Se ocorrer um erro durante o assembly
        """
        # Cada execução começa do zero
        self.lines = normalize_source(source)
        self.symbols = SymbolTable()
        self.instructions = []
        self.machine_code = []

        try:
            self.instructions = Parser(self.lines, self.symbols).parse()
            logger.debug("Pass 1: %d instructions, %d user symbols",
                         len(self.instructions), len(self.symbols.user_symbols))

            encoder = Encoder(self.symbols)
            machine_code = []
            for pc, record in enumerate(self.instructions):
                word = format_word(encoder.encode(record))
                logger.debug("%04d  %s  %s", pc, word, " ".join(record.tokens))
                machine_code.append(word)
        except AssemblerError as e:
            logger.error("Assembly failed at line %d: %s", e.line, e.message)
            raise

        self.machine_code = machine_code
        return machine_code


def assemble(source: Union[str, Iterable[str]]) -> List[str]:
    """Monta o código fonte e retorna a lista de palavras binárias."""
    return Assembler().assemble(source)
