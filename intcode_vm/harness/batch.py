"""
Batch runs: one engine, run to completion on the caller's thread.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Union

from ..emu import IntcodeEmulator
from ..errors import IntcodeRuntimeError
from ..loader import parse_program
from ..periph.channel import channel

log = logging.getLogger(__name__)

Program = Union[str, Sequence[int]]


def program_image(program: Program) -> List[int]:
    """Accept program text or an already parsed image."""
    if isinstance(program, str):
        return parse_program(program)
    return list(program)


class BatchResult(NamedTuple):
    outputs: List[int]
    engine: IntcodeEmulator

    @property
    def memory(self) -> List[int]:
        return self.engine.mem.snapshot()


def run_batch(program: Program,
              inputs: Optional[Iterable[int]] = None,
              patches: Optional[Dict[int, int]] = None,
              trace: bool = False) -> BatchResult:
    """Load, patch and run a program to completion.

    With ``inputs=None`` the engine keeps its console fallback (IN prompts,
    OUT prints) and ``outputs`` comes back empty. Otherwise the inputs are
    pre-loaded into a channel, outputs are collected from another, and
    running out of inputs raises InputClosed.
    """
    engine = IntcodeEmulator(program_image(program), trace=trace)
    for address, value in (patches or {}).items():
        engine.set(address, value)

    if inputs is None:
        engine.run()
        return BatchResult([], engine)

    in_tx, in_rx = channel()
    out_tx, out_rx = channel()
    with in_tx:
        for value in inputs:
            in_tx.send(value)
    engine.bind_input(in_rx)
    engine.bind_output(out_tx)

    with engine:
        engine.run()
    return BatchResult(out_rx.drain(), engine)


def find_noun_verb(program: Program, target: int,
                   noun_range: Iterable[int] = range(100),
                   verb_range: Iterable[int] = range(100)) -> int:
    """Find (noun, verb) patched into addresses 1 and 2 that leave
    ``target`` at address 0. Returns ``100 * noun + verb``.

    Combinations that fault are skipped. Raises LookupError if none match.
    """
    image = program_image(program)
    verbs = list(verb_range)
    for noun in noun_range:
        for verb in verbs:
            try:
                result = run_batch(image, inputs=(), patches={1: noun, 2: verb})
            except IntcodeRuntimeError:
                continue
            if result.engine.get(0) == target:
                log.info("noun=%d verb=%d gives %d", noun, verb, target)
                return 100 * noun + verb
    raise LookupError(f"no noun/verb pair produces {target}")
