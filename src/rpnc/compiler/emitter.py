"""
Output Emitter
==============

Serializes generated instructions and the diagnostics block to a text
sink. This is the only place the line-oriented output format is written:

    int a b 3 DECL
    1 2 + a =
    ...

    Errors:
    Variable c not declared before use

The diagnostics block (a blank line, "Errors:", one message per line)
is written only when there is at least one diagnostic.
"""

from io import StringIO
from typing import Iterable, TextIO

from rpnc.compiler.instructions import Instruction


class Emitter:
    """
    Writes rendered instructions to a text stream, one per line.

    Example:
        with open("out.rpn", "w") as f:
            emitter = Emitter(f)
            emitter.write_instructions(instructions)
            emitter.write_errors(symbols.errors())
    """

    def __init__(self, sink: TextIO):
        self.sink = sink
        self.lines_written = 0

    def write_instruction(self, instruction: Instruction) -> None:
        self.sink.write(instruction.render() + "\n")
        self.lines_written += 1

    def write_instructions(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.write_instruction(instruction)

    def write_errors(self, errors: Iterable[str]) -> None:
        """Write the trailing diagnostics block, if there is anything to report."""
        errors = list(errors)
        if not errors:
            return
        self.sink.write("\nErrors:\n")
        for message in errors:
            self.sink.write(message + "\n")


def render_program(instructions: Iterable[Instruction], errors: Iterable[str] = ()) -> str:
    """Render instructions and diagnostics to the complete output text."""
    buffer = StringIO()
    emitter = Emitter(buffer)
    emitter.write_instructions(instructions)
    emitter.write_errors(errors)
    return buffer.getvalue()
