"""
Intcode VM — I/O Boundary

The IN and OUT opcodes talk to an InputSource and an OutputSink. Each has
two implementations:

  ConsoleInput / ConsoleOutput   interactive fallback (stdin / stdout)
  ChannelInput / ChannelOutput   bound channel endpoints

An engine starts with the console pair and swaps in the channel pair when
an endpoint is bound. The engine itself never checks which one it has.
"""

import re
import sys
from typing import Optional, TextIO

from ..config import INPUT_PROMPT
from ..errors import InputError, InputClosed, OutputClosed
from .channel import ChannelClosed, Receiver, Sender

# ASCII digits only; int() alone would take "1_000" or "\u0663"
_INTEGER = re.compile(r"-?[0-9]+")


class InputSource:
    """Where IN gets its values from."""

    def read(self) -> int:
        raise NotImplementedError

    def close(self):
        pass


class OutputSink:
    """Where OUT sends its values to."""

    def write(self, value: int):
        raise NotImplementedError

    def close(self):
        pass


# --- Console fallback ---

class ConsoleInput(InputSource):
    """Prompt on stderr, read one integer per line from stdin.

    Streams default to the process's own; tests pass StringIO objects.
    """

    def __init__(self, stdin: Optional[TextIO] = None,
                 prompt_stream: Optional[TextIO] = None,
                 prompt: str = INPUT_PROMPT):
        self._stdin = stdin
        self._prompt_stream = prompt_stream
        self.prompt = prompt

    def read(self) -> int:
        stdin = self._stdin if self._stdin is not None else sys.stdin
        prompt_stream = (self._prompt_stream if self._prompt_stream is not None
                         else sys.stderr)
        try:
            prompt_stream.write(self.prompt)
            prompt_stream.flush()
            line = stdin.readline()
        except (OSError, ValueError) as e:
            raise InputError(f"Error reading input: {e}") from e

        if not line:
            raise InputError("Error reading input: end of input")
        text = line.strip()
        if not _INTEGER.fullmatch(text):
            raise InputError(f"Error reading input: {text!r} is not an integer")
        return int(text)


class ConsoleOutput(OutputSink):
    """Print each value on its own line of stdout."""

    def __init__(self, stdout: Optional[TextIO] = None):
        self._stdout = stdout

    def write(self, value: int):
        stdout = self._stdout if self._stdout is not None else sys.stdout
        print(value, file=stdout)


# --- Channel-backed ---

class ChannelInput(InputSource):
    """Block on a channel receiver until a value arrives."""

    def __init__(self, receiver: Receiver):
        self.receiver = receiver

    def read(self) -> int:
        try:
            return self.receiver.recv()
        except ChannelClosed as e:
            raise InputClosed() from e

    def close(self):
        self.receiver.close()


class ChannelOutput(OutputSink):
    """Send each value down a channel."""

    def __init__(self, sender: Sender):
        self.sender = sender

    def write(self, value: int):
        try:
            self.sender.send(value)
        except ChannelClosed as e:
            raise OutputClosed() from e

    def close(self):
        self.sender.close()
