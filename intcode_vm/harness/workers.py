"""
Engine threads.

Any engine that is part of a multi-engine topology gets its own thread:
a blocking IN in one engine can only be satisfied by an OUT from another
engine that is running at the same time.

When the engine stops (halt or fault) the thread closes the engine's
output sender so whoever reads it sees end-of-stream, and closes its
input receiver unless ``keep_input`` is set (the feedback ring reads its
result from the first engine's input link afterwards).

Whether an InputClosed/OutputClosed is a normal way to stop is up to the
topology, not the VM: pass ``expect_closed_input`` / ``expect_closed_output``.
"""

import logging
import threading
from typing import Iterable, List, Optional

from ..config import JOIN_TIMEOUT
from ..emu import EngineState, IntcodeEmulator
from ..errors import InputClosed, OutputClosed

log = logging.getLogger(__name__)


class EngineThread(threading.Thread):
    """Runs one engine to completion on its own thread."""

    def __init__(self, engine: IntcodeEmulator, name: Optional[str] = None, *,
                 expect_closed_input: bool = False,
                 expect_closed_output: bool = False,
                 keep_input: bool = False):
        super().__init__(name=name or "intcode-engine", daemon=True)
        self.engine = engine
        self.expect_closed_input = expect_closed_input
        self.expect_closed_output = expect_closed_output
        self.keep_input = keep_input
        self.error: Optional[BaseException] = None

    def run(self):
        log.debug("%s: started", self.name)
        try:
            self.engine.run()
        except Exception as e:
            self.error = e
        finally:
            sender = self.engine.take_output()
            if sender is not None:
                sender.close()
            if not self.keep_input:
                receiver = self.engine.take_input()
                if receiver is not None:
                    receiver.close()
        log.debug("%s: finished %s after %d steps%s", self.name,
                  self.engine.state.value, self.engine.steps,
                  f" ({self.error})" if self.error else "")

    @property
    def expected_shutdown(self) -> bool:
        """True if the engine was stopped by a hang-up we were told to expect."""
        if isinstance(self.error, InputClosed):
            return self.expect_closed_input
        if isinstance(self.error, OutputClosed):
            return self.expect_closed_output
        return False

    def join_result(self, timeout: Optional[float] = JOIN_TIMEOUT) -> EngineState:
        """Join, then re-raise the engine's fault unless it was expected.

        Raises TimeoutError if the thread is still running after ``timeout``.
        """
        self.join(timeout)
        if self.is_alive():
            raise TimeoutError(f"{self.name} still running after {timeout}s")
        if self.error is not None:
            if not self.expected_shutdown:
                raise self.error
            log.debug("%s: expected shutdown: %s", self.name, self.error)
        return self.engine.state


def spawn(engine: IntcodeEmulator, name: Optional[str] = None, **kwargs) -> EngineThread:
    """Start ``engine`` on a new EngineThread and return the thread."""
    thread = EngineThread(engine, name, **kwargs)
    thread.start()
    return thread


def join_all(threads: Iterable[EngineThread],
             timeout: Optional[float] = JOIN_TIMEOUT) -> List[EngineState]:
    """Join every thread, then surface the most meaningful fault.

    A hang-up usually cascades from a real fault elsewhere in the
    topology, so a fault that is not InputClosed/OutputClosed wins over
    one that is.
    """
    threads = list(threads)
    for t in threads:
        t.join(timeout)
    stuck = [t.name for t in threads if t.is_alive()]
    if stuck:
        raise TimeoutError(f"still running after {timeout}s: {', '.join(stuck)}")

    unexpected = [t.error for t in threads
                  if t.error is not None and not t.expected_shutdown]
    genuine = [e for e in unexpected if not isinstance(e, (InputClosed, OutputClosed))]
    if genuine:
        raise genuine[0]
    if unexpected:
        raise unexpected[0]
    return [t.engine.state for t in threads]
