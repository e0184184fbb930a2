# -*- coding: utf-8 -*-
"""
Testes para a linha de comando e a formatação dos erros.
"""

import io
import logging
import os
import tempfile
import unittest

from rich.console import Console

from redstone_asm.assembler import UnresolvedSymbol, assemble
from redstone_asm.cli import main
from redstone_asm.diagnostics import format_error, print_error

PROGRAM = """\
// contador
define val 5
.start
ldi r1 val   ; carrega
add r1 r0 r1
jmp .start
"""


class TestDiagnostics(unittest.TestCase):

    def setUp(self):
        with self.assertRaises(UnresolvedSymbol) as ctx:
            assemble("\n".join(["nop"] * 11 + ["jmp .nowhere"]))
        self.error = ctx.exception

    def test_format_error(self):
        self.assertEqual(format_error(self.error, "prog.asm"), "\n".join([
            "Error: Could not resolve symbol '.nowhere'",
            " --> prog.asm line 12",
            "   |",
            "12 | jmp .nowhere",
            "   |",
        ]))

    def test_print_error(self):
        out = io.StringIO()
        print_error(self.error, "prog.asm", Console(file=out, no_color=True, width=120))
        text = out.getvalue()
        self.assertIn("Error (UnresolvedSymbol): Could not resolve symbol '.nowhere'", text)
        self.assertIn("--> prog.asm line 12", text)
        self.assertIn("12 | jmp .nowhere", text)


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.source = self._write("program.asm", PROGRAM)

    def _write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def _read(self, name):
        with open(os.path.join(self.tmp.name, name), encoding="utf-8") as f:
            return f.read().splitlines()

    def test_assemble(self):
        self.assertEqual(main(["assemble", self.source, "--no-color"]), 0)
        self.assertEqual(self._read("program.mc"), [
            "1000000100000101",
            "0010000100000001",
            "1010000000000000",
        ])
        self.assertFalse(os.path.exists(os.path.join(self.tmp.name, "program.mcfunction")))

    def test_assemble_custom_output(self):
        output = os.path.join(self.tmp.name, "out.txt")
        self.assertEqual(main(["assemble", self.source, "-o", output, "--no-color"]), 0)
        self.assertEqual(len(self._read("out.txt")), 3)

    def test_full(self):
        preview = os.path.join(self.tmp.name, "memory.png")
        self.assertEqual(main(["full", self.source, "--preview", preview, "--no-color"]), 0)
        self.assertEqual(len(self._read("program.mc")), 3)
        commands = self._read("program.mcfunction")
        self.assertEqual(len(commands), 1024 * 16 + 1596)
        self.assertTrue(os.path.exists(preview))

    def test_generate(self):
        machine_code = self._write("prog.mc", "0001000000000000\n\n")
        self.assertEqual(main(["generate", machine_code, "--no-color"]), 0)
        self.assertEqual(self._read("prog.mcfunction")[0],
                         "setblock -4 -1 2 minecraft:purple_wool")

    def test_assembly_error_writes_nothing(self):
        bad = self._write("bad.asm", "nop\njmp .nowhere\n")
        self.assertEqual(main(["full", bad, "--no-color"]), 1)
        self.assertFalse(os.path.exists(os.path.join(self.tmp.name, "bad.mc")))
        self.assertFalse(os.path.exists(os.path.join(self.tmp.name, "bad.mcfunction")))

    def test_generate_rejects_bad_machine_code(self):
        bad = self._write("bad.mc", "hello\n")
        self.assertEqual(main(["generate", bad, "--no-color"]), 1)

    def test_missing_file(self):
        missing = os.path.join(self.tmp.name, "missing.asm")
        with self.assertLogs("redstone_asm.cli", level="ERROR") as logs:
            self.assertEqual(main(["assemble", missing, "--no-color"]), 1)
        self.assertIn(missing, logs.output[0])

    def test_missing_output_directory_is_named(self):
        """O erro aponta o caminho de saída, não o arquivo de entrada."""
        output = os.path.join(self.tmp.name, "nowhere", "out.mc")
        with self.assertLogs("redstone_asm.cli", level="ERROR") as logs:
            self.assertEqual(main(["assemble", self.source, "-o", output, "--no-color"]), 1)
        self.assertIn(output, logs.output[0])
        self.assertNotIn(self.source, logs.output[0])

    def test_debug_flag_on_second_run(self):
        """Uma segunda chamada no mesmo processo reconfigura o logging."""
        root = logging.getLogger()
        self.addCleanup(root.setLevel, root.level)
        self.assertEqual(main(["assemble", self.source, "--no-color"]), 0)
        self.assertEqual(root.level, logging.INFO)
        self.assertEqual(main(["assemble", self.source, "--debug", "--no-color"]), 0)
        self.assertEqual(root.level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
