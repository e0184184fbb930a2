# -*- coding: utf-8 -*-
"""
Formatação de erros de assembly.

Gera a mensagem com o número da linha e o texto da linha de origem, em
texto simples (logs e testes) ou colorida no terminal via rich.
"""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .assembler import AssemblerError


def _gutter(error: AssemblerError) -> str:
    return " " * len(str(error.line))


def format_error(error: AssemblerError, file_name: str = "<source>") -> str:
    """
    Formata um erro em texto simples.

    Args:
        error: Erro lançado pelo assembler
        file_name: Nome do arquivo exibido na linha de localização

    Returns:
        Mensagem de várias linhas
    """
    lines = [f"Error: {error.message}"]
    if error.line:
        pad = _gutter(error)
        lines.append(f" --> {file_name} line {error.line}")
        if error.text is not None:
            lines.append(f"{pad} |")
            lines.append(f"{error.line} | {error.text}")
            lines.append(f"{pad} |")
    return "\n".join(lines)


def render_error(error: AssemblerError, file_name: str = "<source>") -> List[str]:
    """Mesma mensagem de format_error, com marcação de cores do rich."""
    lines = [f"[bold red]Error[/bold red] [dim]({error.kind})[/dim]: {escape(error.message)}"]
    if error.line:
        pad = _gutter(error)
        lines.append(f"[blue] --> [/blue]{escape(file_name)} [blue]line[/blue] {error.line}")
        if error.text is not None:
            lines.append(f"[blue]{pad} |[/blue]")
            lines.append(f"[blue]{error.line} |[/blue] {escape(error.text)}")
            lines.append(f"[blue]{pad} |[/blue]")
    return lines


def print_error(error: AssemblerError, file_name: str = "<source>",
                console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)
    for line in render_error(error, file_name):
        console.print(line, highlight=False)
