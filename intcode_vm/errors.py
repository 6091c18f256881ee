"""
Intcode VM — Error Taxonomy

Load-time problems (ParseError) are kept apart from execution faults
(IntcodeRuntimeError and its subclasses) so a caller can tell "this
program text is broken" from "this program did something illegal".

Runtime faults are terminal: once the engine raises one, it records it
and will not execute further.

    IntcodeError
    ├── ParseError
    ├── BindingError
    └── IntcodeRuntimeError
        ├── OutOfBounds
        ├── UnrecognizedOpcode
        ├── UnrecognizedParameterMode
        ├── InputError
        │   └── InputClosed
        └── OutputError
            └── OutputClosed
"""

from typing import Tuple


class IntcodeError(Exception):
    """Base class for everything raised by the VM."""


class ParseError(IntcodeError):
    """Program text is not a comma-separated list of integers."""
    def __init__(self, message: str, position: int = 0, text: str = ""):
        self.position = position
        self.text = text
        super().__init__(f"Parse error at offset {position}: {message}")


class BindingError(IntcodeError):
    """An I/O endpoint was bound after execution had started."""


class IntcodeRuntimeError(IntcodeError):
    """Base class for faults raised while executing a program."""


class OutOfBounds(IntcodeRuntimeError):
    def __init__(self, address):
        self.address = address
        super().__init__(f"Attempted to access out of bounds memory {address}")


class UnrecognizedOpcode(IntcodeRuntimeError):
    def __init__(self, digits: Tuple[int, int, int, int]):
        self.digits = tuple(digits)
        op, m1, m2, m3 = self.digits
        super().__init__(
            f"Unrecognized opcode {op}, with parameter modes {m1}, {m2}, {m3}")


class UnrecognizedParameterMode(IntcodeRuntimeError):
    def __init__(self, mode: int):
        self.mode = mode
        super().__init__(f"Unrecognized parameter mode {mode}")


class InputError(IntcodeRuntimeError):
    """Reading an input value failed."""
    def __init__(self, message: str = "Error reading input"):
        super().__init__(message)


class InputClosed(InputError):
    """Every sender feeding the input channel has gone away.

    Topologies that stop an engine by hanging up on it treat this as a
    normal shutdown rather than a fault.
    """
    def __init__(self):
        super().__init__("Error reading input: input channel closed")


class OutputError(IntcodeRuntimeError):
    """Writing an output value failed."""
    def __init__(self, message: str = "Error writing output"):
        super().__init__(message)


class OutputClosed(OutputError):
    """The receiver at the other end of the output channel has gone away."""
    def __init__(self):
        super().__init__("Error writing output: output channel closed")
