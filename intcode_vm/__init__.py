"""
Intcode VM
==========
A small virtual machine for the Intcode instruction set, plus the
plumbing to run several of them at once.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────────┐
    │ Program  │───>│  Loader  │───>│  Memory  │<──>│   Emulator   │
    │ (text)   │    │ (parse)  │    │ (grows)  │    │ fetch/decode │
    └──────────┘    └──────────┘    └──────────┘    │   /execute   │
                                                    └──────┬───────┘
                                                      IN   │   OUT
                                               console or bound channel

    - loader.py:          text → list of ints
    - mem/memory.py:      auto-extending, zero-filled store
    - cpu/decoder.py:     opcode table, parameter modes
    - cpu/regs.py:        program counter, relative base
    - emu.py:             the execution engine
    - periph/channel.py:  thread-safe integer channels with hang-up
    - periph/io.py:       console / channel I/O strategies
    - harness/:           batch runs, engine threads, amplifier rings,
                          controller loops
"""

__version__ = "0.4.0"

from .errors import (
    IntcodeError, ParseError, BindingError, IntcodeRuntimeError,
    OutOfBounds, UnrecognizedOpcode, UnrecognizedParameterMode,
    InputError, InputClosed, OutputError, OutputClosed,
)
from .loader import parse_program, read_program_file
from .mem.memory import Memory
from .emu import IntcodeEmulator, EngineState
from .periph.channel import channel, Sender, Receiver, ChannelClosed, ChannelEmpty


def load(text: str, **kwargs) -> IntcodeEmulator:
    """Parse program text and return a ready-to-run engine."""
    return IntcodeEmulator.load(text, **kwargs)
