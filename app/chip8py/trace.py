from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from string import Template
from typing import TYPE_CHECKING, Final, Tuple

from rich.table import Table

if TYPE_CHECKING:
    from chip8py.emulator import Emulator

TEMPLATE: Final[Template] = Template(
    "${PC}: opcode: ${OP} | ${TEXT} | I: ${I} | SP: ${SP} | DT: ${DT} | ST: ${ST}"
)


class OperandKind(Enum):
    Register = 0
    Byte = 1
    Address = 2
    Nibble = 3
    Symbol = 4


@dataclass(frozen=True)
class Operand:
    kind: OperandKind
    value: int | str

    @classmethod
    def register(cls, index: int) -> "Operand":
        return cls(OperandKind.Register, index)

    @classmethod
    def byte(cls, value: int) -> "Operand":
        return cls(OperandKind.Byte, value)

    @classmethod
    def address(cls, value: int) -> "Operand":
        return cls(OperandKind.Address, value)

    @classmethod
    def nibble(cls, value: int) -> "Operand":
        return cls(OperandKind.Nibble, value)

    @classmethod
    def symbol(cls, name: str) -> "Operand":
        return cls(OperandKind.Symbol, name)

    def __str__(self) -> str:
        match self.kind:
            case OperandKind.Register:
                return f"V{{0x{self.value:X}}}"
            case OperandKind.Byte:
                return f"0x{self.value:02X}"
            case OperandKind.Address:
                return f"0x{self.value:04X}"
            case OperandKind.Nibble:
                return f"0x{self.value:X}"
            case _:
                return str(self.value)


@dataclass(frozen=True)
class Instruction:
    """Structured description of one executed instruction."""

    address: int
    opcode: int
    mnemonic: str
    operands: Tuple[Operand, ...] = ()

    @property
    def text(self) -> str:
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic} {', '.join(str(op) for op in self.operands)}"

    def __str__(self) -> str:
        return self.text


def trace_line(instruction: Instruction, emulator: "Emulator") -> str:
    return TEMPLATE.substitute(
        PC=f"{instruction.address:04X}",
        OP=f"{instruction.opcode:04X}",
        TEXT=instruction.text,
        I=f"{emulator.Architecture.I:04X}",
        SP=f"{emulator.stack.sp:X}",
        DT=f"{emulator.timers.delay:02X}",
        ST=f"{emulator.timers.sound:02X}",
    )


def state_table(emulator: "Emulator") -> Table:
    """Registers, index, timers and stack as a rich table."""
    arch = emulator.Architecture
    table = Table(title="CHIP-8 State", border_style="cyan")
    table.add_column("Register", justify="center")
    table.add_column("Value", justify="right")
    table.add_column("Stack", justify="center")
    table.add_column("Return", justify="right")

    stack = emulator.stack.snapshot()
    if stack:
        table.caption = f"RET -> 0x{emulator.stack.peek():04X}"
    specials = [
        ("PC", f"0x{arch.ProgramCounter:04X}"),
        ("I", f"0x{arch.I:04X}"),
        ("DT", f"0x{emulator.timers.delay:02X}"),
        ("ST", f"0x{emulator.timers.sound:02X}"),
    ]
    rows = [(f"V{i:X}", f"0x{int(arch.V[i]):02X}") for i in range(len(arch.V))] + specials
    for level, (name, value) in enumerate(rows):
        if level < len(stack):
            table.add_row(name, value, f"0x{level:X}", f"0x{stack[level]:04X}")
        else:
            table.add_row(name, value, "", "")
    return table
