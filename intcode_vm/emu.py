"""
Intcode VM — Main Emulator Class

Integrates:
  - Execution state (regs.py)
  - Growable memory (memory.py)
  - Instruction decoder (decoder.py)
  - I/O boundary: console fallback or bound channels (periph/)

Execution model:
  1. Fetch the instruction word at PC
  2. Decode opcode + parameter modes
  3. Resolve parameters (each one consumes one word at PC)
  4. Execute: update memory, PC, relative base, or do I/O
  5. Repeat until HALT or a fault

States:
  RUNNING  → RUNNING | HALTED | FAULTED
  HALTED   terminal, opcode 99 reached
  FAULTED  terminal, the fault is kept in ``engine.fault`` and re-raised
           on any further step()/run()

Faults are never retried, and memory writes already made by the faulting
instruction stay in place.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, TextIO

from .cpu.regs import Registers
from .cpu.decoder import (
    Instruction, decode_instruction, format_instruction,
    POSITION, IMMEDIATE, RELATIVE,
)
from .errors import (
    BindingError, InputClosed, OutputClosed, UnrecognizedParameterMode,
)
from .loader import parse_program
from .mem.memory import Memory, to_address
from .periph.channel import Receiver, Sender
from .periph.io import (
    InputSource, OutputSink, ConsoleInput, ConsoleOutput,
    ChannelInput, ChannelOutput,
)

log = logging.getLogger(__name__)


class EngineState(Enum):
    RUNNING = 'RUNNING'
    HALTED = 'HALTED'
    FAULTED = 'FAULTED'


class IntcodeEmulator:
    """Intcode virtual machine.

    Usage:
        emu = IntcodeEmulator.load("3,0,4,0,99")
        tx, rx = channel()
        out_tx, out_rx = channel()
        emu.bind_input(rx)
        emu.bind_output(out_tx)
        tx.send(42)
        emu.run()
        out_rx.recv()     # 42

    Without bound channels, IN prompts on the console and OUT prints.
    """

    def __init__(self, program: Iterable[int] = (), *,
                 stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None,
                 trace: bool = False):
        self.regs = Registers()
        self.mem = Memory(program)

        self._stdin = stdin
        self._stdout = stdout
        self._input: InputSource = ConsoleInput(stdin=stdin)
        self._output: OutputSink = ConsoleOutput(stdout=stdout)
        self._receiver: Optional[Receiver] = None
        self._sender: Optional[Sender] = None

        self.state = EngineState.RUNNING
        self._started = False
        self.fault: Optional[Exception] = None

        self._trace = trace
        self.trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

    @classmethod
    def load(cls, text: str, **kwargs) -> "IntcodeEmulator":
        """Parse program text and build an engine from it.

        Raises ParseError for malformed text; nothing is executed.
        """
        program = parse_program(text)
        log.info("Loaded program: %d cells", len(program))
        return cls(program, **kwargs)

    def __repr__(self) -> str:
        return f"IntcodeEmulator({self.state.value}, {self.regs.display()})"

    # ══════════════════════════════════════════════
    # Memory access
    # ══════════════════════════════════════════════

    def get(self, address: int) -> int:
        return self.mem.get(address)

    def set(self, address: int, value: int):
        self.mem.set(address, value)

    @property
    def pc(self) -> int:
        return self.regs.pc

    @property
    def relative_base(self) -> int:
        return self.regs.rb

    @property
    def steps(self) -> int:
        return self.regs.steps

    # ══════════════════════════════════════════════
    # I/O binding
    # ══════════════════════════════════════════════

    def _check_unstarted(self, what: str):
        if self._started:
            raise BindingError(f"cannot bind {what} after execution has started")

    def bind_input(self, receiver: Receiver):
        """Read IN values from ``receiver`` instead of the console."""
        self._check_unstarted("input")
        self._receiver = receiver
        self._input = ChannelInput(receiver)

    def bind_output(self, sender: Sender):
        """Send OUT values to ``sender`` instead of printing them."""
        self._check_unstarted("output")
        self._sender = sender
        self._output = ChannelOutput(sender)

    def take_input(self) -> Optional[Receiver]:
        """Detach and return the bound input receiver, if any."""
        receiver, self._receiver = self._receiver, None
        self._input = ConsoleInput(stdin=self._stdin)
        return receiver

    def take_output(self) -> Optional[Sender]:
        """Detach and return the bound output sender, if any."""
        sender, self._sender = self._sender, None
        self._output = ConsoleOutput(stdout=self._stdout)
        return sender

    def clone_output(self) -> Optional[Sender]:
        """A second writer onto the bound output channel, if any."""
        if self._sender is None:
            return None
        return self._sender.clone()

    def close(self):
        """Close whatever endpoints are still bound."""
        self._input.close()
        self._output.close()

    def __enter__(self) -> "IntcodeEmulator":
        return self

    def __exit__(self, *exc):
        self.close()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> EngineState:
        """Execute one instruction and return the resulting state.

        Raises the error that faulted the engine, now or on an earlier
        call. Any exception escaping an instruction faults the engine.
        """
        if self.state is EngineState.HALTED:
            return self.state
        if self.state is EngineState.FAULTED:
            raise self.fault

        self._started = True
        pc = self.regs.pc
        try:
            insn, self.regs.pc = decode_instruction(self.mem, pc)

            if self._trace:
                line = f"{pc:06d}: {format_instruction(insn):16s} {self.regs.display()}"
                self.trace_output.append(line)
                log.debug(line)

            self._dispatch[insn.mnemonic](insn)
        except Exception as e:
            self.state = EngineState.FAULTED
            self.fault = e
            # hang-ups stay at DEBUG; EngineThread decides whether they matter
            level = logging.DEBUG if isinstance(e, (InputClosed, OutputClosed)) else logging.WARNING
            log.log(level, "Fault at %06d after %d steps: %s", pc, self.regs.steps, e)
            raise

        self.regs.steps += 1
        return self.state

    def run(self) -> EngineState:
        """Run until HALT. Faults are raised, see step()."""
        while self.step() is EngineState.RUNNING:
            pass
        log.debug("Halted after %d steps", self.regs.steps)
        return self.state

    # ══════════════════════════════════════════════
    # Parameter resolution
    # ══════════════════════════════════════════════

    def _fetch(self) -> int:
        """Immediate read of the word at PC, advance PC."""
        value = self.mem.get(self.regs.pc)
        self.regs.pc += 1
        return value

    def _read(self, mode: int) -> int:
        """Consume one parameter and resolve it to a value."""
        if mode == POSITION:
            return self.mem.get(self._fetch())
        elif mode == IMMEDIATE:
            return self._fetch()
        elif mode == RELATIVE:
            return self.mem.get(self.regs.rb + self._fetch())
        raise UnrecognizedParameterMode(mode)

    def _write(self, mode: int, value: int):
        """Consume one parameter as a destination address and store there.

        Immediate mode has no address to write to and is rejected.
        """
        if mode == POSITION:
            self.mem.set(self._fetch(), value)
        elif mode == RELATIVE:
            self.mem.set(self.regs.rb + self._fetch(), value)
        else:
            raise UnrecognizedParameterMode(mode)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> Dict[str, Callable[[Instruction], None]]:
        """Mnemonic → handler."""
        return {
            'ADD':  self._op_add,
            'MUL':  self._op_mul,
            'IN':   self._op_in,
            'OUT':  self._op_out,
            'JT':   self._op_jt,
            'JF':   self._op_jf,
            'LT':   self._op_lt,
            'EQ':   self._op_eq,
            'ARB':  self._op_arb,
            'HALT': self._op_halt,
        }

    def _op_add(self, insn: Instruction):
        a, b, r = insn.modes
        first = self._read(a)
        second = self._read(b)
        self._write(r, first + second)

    def _op_mul(self, insn: Instruction):
        a, b, r = insn.modes
        first = self._read(a)
        second = self._read(b)
        self._write(r, first * second)

    def _op_in(self, insn: Instruction):
        value = self._input.read()
        self._write(insn.modes[0], value)

    def _op_out(self, insn: Instruction):
        value = self._read(insn.modes[0])
        self._output.write(value)

    def _op_jt(self, insn: Instruction):
        a, b, _ = insn.modes
        condition = self._read(a)
        target = self._read(b)
        if condition != 0:
            self.regs.pc = to_address(target)

    def _op_jf(self, insn: Instruction):
        a, b, _ = insn.modes
        condition = self._read(a)
        target = self._read(b)
        if condition == 0:
            self.regs.pc = to_address(target)

    def _op_lt(self, insn: Instruction):
        a, b, r = insn.modes
        first = self._read(a)
        second = self._read(b)
        self._write(r, 1 if first < second else 0)

    def _op_eq(self, insn: Instruction):
        a, b, r = insn.modes
        first = self._read(a)
        second = self._read(b)
        self._write(r, 1 if first == second else 0)

    def _op_arb(self, insn: Instruction):
        offset = self._read(insn.modes[0])
        self.regs.rb = to_address(self.regs.rb + offset)

    def _op_halt(self, insn: Instruction):
        self.state = EngineState.HALTED
