# -*- coding: utf-8 -*-
"""
Interface de linha de comando.

Modos:
    assemble  monta o arquivo assembly e grava o código de máquina (.mc)
    generate  lê um arquivo .mc e grava os comandos setblock (.mcfunction)
    full      as duas etapas em sequência
"""

import os
import sys
import logging
import argparse
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .assembler import Assembler, AssemblerError
from .diagnostics import print_error
from .generator import WorldGenerator, write_function
from .preview import render_memory

logger = logging.getLogger(__name__)

MODES = ("assemble", "generate", "full")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redstone-asm",
        description="Assembler e gerador de mundo para o computador redstone de 16 bits")
    parser.add_argument("mode", choices=MODES,
                        help="assemble, generate ou full (ambos)")
    parser.add_argument("file_name",
                        help="Arquivo de entrada (assembly, ou código de máquina no modo generate)")
    parser.add_argument("-o", "--output",
                        help="Arquivo de código de máquina (padrão: entrada com extensão .mc)")
    parser.add_argument("--function", dest="function_file",
                        help="Arquivo .mcfunction gerado (padrão: entrada com extensão .mcfunction)")
    parser.add_argument("--preview",
                        help="Grava uma imagem PNG da memória de programa")
    parser.add_argument("--scale", type=int, default=4,
                        help="Fator de ampliação da imagem de pré-visualização")
    parser.add_argument("--debug", action="store_true",
                        help="Ativa o modo de depuração")
    parser.add_argument("--no-color", action="store_true",
                        help="Desativa as cores na saída")
    return parser


def setup_logging(debug: bool, console: Console) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True)


def _with_suffix(path: str, suffix: str) -> str:
    return os.path.splitext(path)[0] + suffix


def read_lines(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def write_machine_code(machine_code: List[str], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for word in machine_code:
            f.write(word + "\n")


def run(args: argparse.Namespace) -> None:
    """
    Executa o modo escolhido.

    Nada é gravado se alguma etapa falhar.

    Raises:
        AssemblerError: Erro de assembly ou código de máquina inválido
        OSError: Falha ao ler ou gravar arquivos
    """
    source = read_lines(args.file_name)

    if args.mode in ("assemble", "full"):
        logger.info("Assembling %s", args.file_name)
        machine_code = Assembler().assemble(source)
    else:
        machine_code = [line for line in source if line.strip()]

    placements = None
    if args.mode in ("generate", "full"):
        placements = WorldGenerator().generate(machine_code)
    image = render_memory(machine_code, args.scale) if args.preview else None

    if args.mode in ("assemble", "full"):
        output = args.output or _with_suffix(args.file_name, ".mc")
        write_machine_code(machine_code, output)
        print(f"Assembly successful: {len(machine_code)} words generated")
        logger.info("Machine code written to %s", output)

    if placements is not None:
        function_file = args.function_file or _with_suffix(args.file_name, ".mcfunction")
        write_function(placements, function_file)
        logger.info("Function written to %s", function_file)

    if image is not None:
        image.save(args.preview)
        logger.info("Memory preview written to %s", args.preview)


def main(argv: Optional[List[str]] = None) -> int:
    """Função principal para uso via linha de comando."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.scale < 1:
        parser.error("--scale must be >= 1")
    console = Console(stderr=True, no_color=args.no_color)
    setup_logging(args.debug, console)

    logger.debug("mode: %s", args.mode)
    logger.debug("file: %s", args.file_name)

    try:
        run(args)
        return 0
    except FileNotFoundError as e:
        logger.error("File not found: %s", e.filename or args.file_name)
        return 1
    except AssemblerError as e:
        print_error(e, args.file_name, console)
        return 1
    except OSError as e:
        logger.error("I/O error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
