"""
Amplifier chains and feedback rings.

Open chain (one pass):

    seed → [A] → [B] → [C] → [D] → [E] → signal

  Each amplifier gets its phase setting as its first input and the
  previous amplifier's signal as its second. Nothing feeds back, so the
  amplifiers simply run one after another on the caller's thread.

Feedback ring:

    seed → [A] → [B] → [C] → [D] → [E] ─┐
            ^───────────────────────────┘

  E's output is A's input. Phases are queued on every link before anything
  starts, plus the seed on A's link. Running the engines one after another
  deadlocks as soon as A waits for E, so every engine gets its own thread.
  When all of them have halted, the last value E sent is still sitting in
  A's input link: that is the result.
"""

import logging
from itertools import permutations
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import (
    AMPLIFIER_SEED, CHAIN_PHASES, FEEDBACK_PHASES, JOIN_TIMEOUT,
)
from ..emu import IntcodeEmulator
from ..periph.channel import channel
from .batch import Program, program_image
from .workers import EngineThread, join_all

log = logging.getLogger(__name__)


def _last_signal(values: List[int]) -> int:
    if not values:
        raise ValueError("amplifiers produced no signal")
    return values[-1]


def _check_phases(phases: Sequence[int]):
    if not phases:
        raise ValueError("empty phase set")


def run_chain(program: Program, phases: Sequence[int],
              seed: int = AMPLIFIER_SEED) -> int:
    """Run an open amplifier chain and return the final signal."""
    _check_phases(phases)
    image = program_image(program)

    tx, rx = channel()
    with tx:
        tx.send(phases[0])
        tx.send(seed)

    for i in range(len(phases)):
        engine = IntcodeEmulator(image)
        engine.bind_input(rx)

        tx, rx = channel()
        if i + 1 < len(phases):
            tx.send(phases[i + 1])
        engine.bind_output(tx)

        with engine:
            engine.run()

    return _last_signal(rx.drain())


def run_feedback_ring(program: Program, phases: Sequence[int],
                      seed: int = AMPLIFIER_SEED,
                      timeout: Optional[float] = JOIN_TIMEOUT) -> int:
    """Run a feedback ring to completion and return the final signal.

    Raises the first genuine fault if any amplifier faults.
    """
    _check_phases(phases)
    image = program_image(program)
    n = len(phases)

    links = [channel() for _ in range(n)]
    for (tx, _), phase in zip(links, phases):
        tx.send(phase)
    links[0][0].send(seed)

    engines = []
    for i in range(n):
        engine = IntcodeEmulator(image)
        engine.bind_input(links[i][1])
        engine.bind_output(links[(i + 1) % n][0])
        engines.append(engine)

    threads = [
        EngineThread(engine, f"amp-{chr(ord('A') + i)}", keep_input=(i == 0))
        for i, engine in enumerate(engines)
    ]
    for t in threads:
        t.start()
    join_all(threads, timeout)

    receiver = engines[0].take_input()
    with receiver:
        return _last_signal(receiver.drain())


def max_signal(program: Program,
               phase_set: Optional[Iterable[int]] = None,
               feedback: bool = False) -> Tuple[int, Tuple[int, ...]]:
    """Try every ordering of ``phase_set``; return (best signal, its phases).

    ``phase_set`` defaults to 0-4 for an open chain and 5-9 for a ring.
    """
    image = program_image(program)
    if phase_set is None:
        phase_set = FEEDBACK_PHASES if feedback else CHAIN_PHASES
    phase_set = tuple(phase_set)
    _check_phases(phase_set)
    run = run_feedback_ring if feedback else run_chain

    best = None
    for phases in permutations(phase_set):
        signal = run(image, phases)
        if best is None or signal > best[0]:
            best = (signal, phases)

    log.info("Max %s signal %d from phases %s",
             "feedback" if feedback else "chain", best[0], best[1])
    return best
