from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Final, Optional

import numpy as np
from numpy.typing import NDArray

from chip8py.config import Quirks
from chip8py.display import Display
from chip8py.exception import EmulatorError, InvalidOpcode, OutOfBounds
from chip8py.keypad import Keypad
from chip8py.logger import log as _logger
from chip8py.memory import Memory
from chip8py.opcode import Opcode
from chip8py.rom import Rom
from chip8py.stack import CallStack
from chip8py.timers import TimerUnit
from chip8py.trace import Instruction, Operand, trace_line

R: Final = Operand.register
B: Final = Operand.byte
A: Final = Operand.address
N: Final = Operand.nibble
S: Final = Operand.symbol

VF: Final[int] = 0xF


@dataclass
class HaltOn:
    InvalidOpcode: bool = False


@dataclass
class Debug:
    Logging: bool = False
    HaltOn: HaltOn = field(default_factory=HaltOn)


@dataclass
class Architecture:
    V: NDArray[np.uint8] = field(default_factory=lambda: np.zeros(16, dtype=np.uint8))
    I: int = 0
    ProgramCounter: int = Memory.PROGRAM_START
    OpCode: Opcode = field(default_factory=lambda: Opcode(0))
    Cycles: int = 0
    Halted: bool = False


class Emulator:
    """
    CHIP-8 virtual machine.

    Owns memory, call stack, display, keypad and timers. An external driver calls
    `step_Cycle` at the CPU rate and `tick_Timers` at 60 Hz (or `run_Frame` which
    does both), feeds key events through `Input` between cycles and reads
    `display` to render.

    Events (register with `@emulator.on(name)`):
      - before_cycle(cycles), after_cycle(cycles)
      - instruction(Instruction)
      - sound(active: bool)
      - frame_complete(frame)
    """

    def __init__(
        self,
        quirks: Optional[Quirks] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        cycles_per_frame: int = 10,
    ) -> None:
        self.quirks: Quirks = Quirks() if quirks is None else quirks
        self.rng: np.random.Generator = np.random.default_rng(seed) if rng is None else rng
        self.cycles_per_frame: int = cycles_per_frame

        self.memory: Final[Memory] = Memory()
        self.stack: Final[CallStack] = CallStack()
        self.display: Final[Display] = Display()
        self.keypad: Final[Keypad] = Keypad()
        self.timers: Final[TimerUnit] = TimerUnit()
        self.Architecture: Architecture = Architecture()

        self.rom: Optional[Rom] = None
        self.debug: Debug = Debug()
        self.tracelog: deque[str] = deque(maxlen=2048)
        self.last_instruction: Optional[Instruction] = None
        self.frame_count: int = 0
        self._sound_active: bool = False
        self._events: Dict[str, deque[Callable[..., Any]]] = {}

    def __repr__(self) -> str:
        arch = self.Architecture
        return (
            f"<Emulator rom={self.rom!r} PC=0x{arch.ProgramCounter:04X} "
            f"I=0x{arch.I:04X} cycles={arch.Cycles} halted={arch.Halted}>"
        )

    # Events

    def on(self, event_name: str):
        def decorator(func: Callable):
            self._events.setdefault(event_name, deque()).append(func)
            return func

        return decorator

    def _emit(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        """Emit an event to all registered callbacks."""
        callbacks = self._events.get(event_name)
        if not callbacks:
            return

        for callback in callbacks:
            if not callable(callback):
                raise TypeError(f"Callback {callback} is not Callable")
            callback(*args, **kwargs)

    # Lifecycle

    def Reset(self) -> None:
        """Return to the power-on state, reloading the current ROM if there is one."""
        self.memory.reset()
        self.stack.reset()
        self.display.clear()
        self.keypad.reset()
        self.timers.reset()
        self.Architecture = Architecture()
        self.last_instruction = None
        self.tracelog.clear()
        self.frame_count = 0
        self._sync_sound()
        if self.rom is not None:
            self.memory.load_program(self.rom.data)
        _logger.info("Emulator reset")

    def Load(self, rom: Rom) -> None:
        if not isinstance(rom, Rom):
            raise EmulatorError(f"Invalid ROM object provided: {type(rom).__name__}")
        self.rom = rom
        self.Reset()
        _logger.info(f"Loaded ROM {rom.name} ({len(rom)} bytes)")

    def Halt(self) -> None:
        self.Architecture.Halted = True

    def Input(self, key: int, pressed: bool) -> None:
        """Update one logical key. Call between cycles only."""
        self.keypad.set_key(key, pressed)

    # Emulation cycle

    def step_Cycle(self) -> None:
        """Fetch, decode and execute one instruction."""
        arch = self.Architecture
        if arch.Halted:
            return

        self._emit("before_cycle", arch.Cycles)
        pc = arch.ProgramCounter
        try:
            arch.OpCode = self.memory.read_opcode(pc)
            arch.ProgramCounter = pc + 2
            instruction = self._do_execute_opcode(arch.OpCode, pc)
        except EmulatorError as e:
            if e.pc is None:
                e.pc = pc
            if isinstance(e, InvalidOpcode) and self.debug.HaltOn.InvalidOpcode:
                arch.Halted = True
            raise

        arch.Cycles += 1
        self.last_instruction = instruction
        self._sync_sound()

        if self.debug.Logging:
            line = trace_line(instruction, self)
            self.tracelog.append(line)
            _logger.debug(line)
        self._emit("instruction", instruction)
        self._emit("after_cycle", arch.Cycles)

    def tick_Timers(self) -> None:
        """One 60 Hz timer tick."""
        self.timers.tick()
        self._sync_sound()

    def run_Frame(self) -> None:
        """Run one display frame worth of cycles, then tick the timers once."""
        for _ in range(self.cycles_per_frame):
            if self.Architecture.Halted:
                break
            self.step_Cycle()
        self.tick_Timers()
        self.frame_count += 1
        self._emit("frame_complete", self.display.frame())

    def _sync_sound(self) -> None:
        active = self.timers.sound_active
        if active != self._sound_active:
            self._sound_active = active
            self._emit("sound", active)

    # Register helpers

    def _get(self, index: int) -> int:
        return int(self.Architecture.V[index])

    def _set(self, index: int, value: int) -> None:
        self.Architecture.V[index] = value & 0xFF

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.Architecture.ProgramCounter += 2

    def _make_instruction(self, pc: int, opcode: Opcode, mnemonic: str, *operands: Operand) -> Instruction:
        return Instruction(pc, opcode.word, mnemonic, operands)

    def _do_execute_opcode(self, opcode: Opcode, pc: int) -> Instruction:
        """
        Dispatch on the most significant nibble, then on the low nibble or byte
        for the 0x0, 0x8, 0xE and 0xF families.
        """
        x, y = opcode.x, opcode.y
        op = self._make_instruction

        match opcode.msq:
            case 0x0:
                match opcode.word:
                    case 0x00E0:
                        self._do_op_CLS()
                        return op(pc, opcode, "CLS")
                    case 0x00EE:
                        self._do_op_RET()
                        return op(pc, opcode, "RET")
                    case _:
                        raise InvalidOpcode(opcode.word, pc)

            case 0x1:  # JP addr
                self.Architecture.ProgramCounter = opcode.address()
                return op(pc, opcode, "JP", A(opcode.address()))

            case 0x2:  # CALL addr
                self.stack.call(self.Architecture.ProgramCounter)
                self.Architecture.ProgramCounter = opcode.address()
                return op(pc, opcode, "CALL", A(opcode.address()))

            case 0x3:  # SE Vx, byte
                self._skip_if(self._get(x) == opcode.immediate())
                return op(pc, opcode, "SE", R(x), B(opcode.immediate()))

            case 0x4:  # SNE Vx, byte
                self._skip_if(self._get(x) != opcode.immediate())
                return op(pc, opcode, "SNE", R(x), B(opcode.immediate()))

            case 0x5 if opcode.lsq == 0x0:  # SE Vx, Vy
                self._skip_if(self._get(x) == self._get(y))
                return op(pc, opcode, "SE", R(x), R(y))

            case 0x6:  # LD Vx, byte
                self._set(x, opcode.immediate())
                return op(pc, opcode, "LD", R(x), B(opcode.immediate()))

            case 0x7:  # ADD Vx, byte (no carry)
                self._set(x, self._get(x) + opcode.immediate())
                return op(pc, opcode, "ADD", R(x), B(opcode.immediate()))

            case 0x8:
                return op(pc, opcode, self._do_op_ALU(opcode), R(x), R(y))

            case 0x9 if opcode.lsq == 0x0:  # SNE Vx, Vy
                self._skip_if(self._get(x) != self._get(y))
                return op(pc, opcode, "SNE", R(x), R(y))

            case 0xA:  # LD I, addr
                self.Architecture.I = opcode.address()
                return op(pc, opcode, "LD", S("I"), A(opcode.address()))

            case 0xB:  # JP V0, addr
                self._do_op_JP_V0(opcode)
                return op(pc, opcode, "JP", S("V0"), A(opcode.address()))

            case 0xC:  # RND Vx, byte
                self._set(x, int(self.rng.integers(0, 256)) & opcode.immediate())
                return op(pc, opcode, "RND", R(x), B(opcode.immediate()))

            case 0xD:  # DRW Vx, Vy, nibble
                sprite = self.memory.read_sprite(self.Architecture.I, opcode.n)
                collided = self.display.draw_sprite(self._get(x), self._get(y), sprite)
                self._set(VF, int(collided))
                return op(pc, opcode, "DRW", R(x), R(y), N(opcode.n))

            case 0xE:
                match opcode.immediate():
                    case 0x9E:  # SKP Vx
                        self._skip_if(self.keypad.is_pressed(self._get(x) & 0xF))
                        return op(pc, opcode, "SKP", R(x))
                    case 0xA1:  # SKNP Vx
                        self._skip_if(not self.keypad.is_pressed(self._get(x) & 0xF))
                        return op(pc, opcode, "SKNP", R(x))
                    case _:
                        raise InvalidOpcode(opcode.word, pc)

            case 0xF:
                return self._do_op_misc(opcode, pc)

            case _:
                raise InvalidOpcode(opcode.word, pc)

    # Instructions

    def _do_op_CLS(self) -> None:
        self.display.clear()

    def _do_op_RET(self) -> None:
        self.Architecture.ProgramCounter = self.stack.ret()

    def _do_op_JP_V0(self, opcode: Opcode) -> None:
        target = self._get(0x0) + opcode.address()
        if self.quirks.jump_v0_checked:
            if not (Memory.is_program_address(target) and Memory.is_program_address(target + 1)):
                raise OutOfBounds(target, "is not a valid jump target")
        else:
            target &= 0x0FFF
        self.Architecture.ProgramCounter = target

    def _do_op_ALU(self, opcode: Opcode) -> str:
        """8XYN register arithmetic. Flag results are written to VF after Vx."""
        x, y = opcode.x, opcode.y
        vx, vy = self._get(x), self._get(y)

        match opcode.lsq:
            case 0x0:
                self._set(x, vy)
                return "LD"
            case 0x1:
                self._set(x, vx | vy)
                return "OR"
            case 0x2:
                self._set(x, vx & vy)
                return "AND"
            case 0x3:
                self._set(x, vx ^ vy)
                return "XOR"
            case 0x4:
                total = vx + vy
                self._set(x, total)
                self._set(VF, int(total > 0xFF))
                return "ADD"
            case 0x5:
                self._set(x, vx - vy)
                self._set(VF, int(vx >= vy))
                return "SUB"
            case 0x6:
                self._set(x, vx >> 1)
                self._set(VF, vx & 0x1)
                return "SHR"
            case 0x7:
                self._set(x, vy - vx)
                self._set(VF, int(vy >= vx))
                return "SUBN"
            case 0xE:
                self._set(x, vx << 1)
                self._set(VF, (vx >> 7) & 0x1)
                return "SHL"
            case _:
                raise InvalidOpcode(opcode.word)

    def _do_op_misc(self, opcode: Opcode, pc: int) -> Instruction:
        """FXKK timer, keypad, index and memory transfer instructions."""
        x = opcode.x
        arch = self.Architecture
        op = self._make_instruction

        match opcode.immediate():
            case 0x07:  # LD Vx, DT
                self._set(x, self.timers.delay)
                return op(pc, opcode, "LD", R(x), S("DT"))

            case 0x0A:  # LD Vx, K
                key = self.keypad.first_pressed()
                if key is None:
                    # re-execute this instruction next cycle
                    arch.ProgramCounter -= 2
                else:
                    self._set(x, key)
                return op(pc, opcode, "LD", R(x), S("KEY"))

            case 0x15:  # LD DT, Vx
                self.timers.set_delay(self._get(x))
                return op(pc, opcode, "LD", S("DT"), R(x))

            case 0x18:  # LD ST, Vx
                self.timers.set_sound(self._get(x))
                return op(pc, opcode, "LD", S("ST"), R(x))

            case 0x1E:  # ADD I, Vx
                arch.I = (arch.I + self._get(x)) & 0xFFFF
                return op(pc, opcode, "ADD", S("I"), R(x))

            case 0x29:  # LD F, Vx
                arch.I = Memory.font_address(self._get(x) & 0xF)
                return op(pc, opcode, "LD", S("F"), R(x))

            case 0x33:  # LD B, Vx
                value = self._get(x)
                for offset, digit in enumerate((value // 100, (value // 10) % 10, value % 10)):
                    self.memory.write_byte(arch.I + offset, digit)
                return op(pc, opcode, "LD", S("B"), R(x))

            case 0x55:  # LD [I], Vx
                for i in range(self._register_span(x)):
                    self.memory.write_byte(arch.I + i, self._get(i))
                return op(pc, opcode, "LD", S("[I]"), R(x))

            case 0x65:  # LD Vx, [I]
                for i in range(self._register_span(x)):
                    self._set(i, self.memory.read_byte(arch.I + i))
                return op(pc, opcode, "LD", R(x), S("[I]"))

            case _:
                raise InvalidOpcode(opcode.word, pc)

    def _register_span(self, x: int) -> int:
        return x + 1 if self.quirks.load_store_inclusive else x
