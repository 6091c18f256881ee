"""
Sensor / actuator loops: one engine thread plus a controller.

    controller ──commands──▶ engine
    controller ◀──readings── engine

The engine runs on an EngineThread. The controller sits on the caller's
thread, groups readings ``readings_per_step`` at a time, and answers each
group with zero or more commands. The loop ends when the engine stops
(its output closes) or when the engine can no longer take commands.

Either way the controller then hangs up its command sender. An engine
still blocked on IN at that point stops with InputClosed, which here is
the normal way to shut it down, not a fault.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import (
    COLOR_BLACK, COLOR_WHITE, TURN_LEFT, TURN_RIGHT,
    TILE_BLOCK, TILE_PADDLE, TILE_BALL, TILE_CHARS, SCORE_POSITION,
    FREE_PLAY_ADDRESS, FREE_PLAY_VALUE, JOIN_TIMEOUT,
)
from ..emu import IntcodeEmulator
from ..periph.channel import ChannelClosed, Sender, channel
from .batch import Program, program_image
from .workers import EngineThread

log = logging.getLogger(__name__)

Point = Tuple[int, int]


class Controller:
    """Base class for a controller driving one engine.

    Subclasses override ``on_output`` (and optionally ``start`` and
    ``patches``).
    """

    readings_per_step = 1

    def __init__(self):
        self.engine: Optional[IntcodeEmulator] = None
        self.steps = 0

    def patches(self) -> Dict[int, int]:
        """Memory patches applied before the engine starts."""
        return {}

    def start(self) -> Iterable[int]:
        """Commands sent before the first reading."""
        return ()

    def on_output(self, *readings: int) -> Iterable[int]:
        raise NotImplementedError

    def run(self, program: Program, timeout: Optional[float] = JOIN_TIMEOUT):
        """Drive ``program`` until it stops. Returns self."""
        engine = IntcodeEmulator(program_image(program))
        for address, value in self.patches().items():
            engine.set(address, value)
        self.engine = engine

        cmd_tx, cmd_rx = channel()
        out_tx, out_rx = channel()
        engine.bind_input(cmd_rx)
        engine.bind_output(out_tx)

        worker = EngineThread(engine, f"{type(self).__name__}-engine",
                              expect_closed_input=True,
                              expect_closed_output=True)
        worker.start()
        try:
            if self._send(cmd_tx, self.start()):
                pending: List[int] = []
                for value in out_rx:
                    pending.append(value)
                    if len(pending) < self.readings_per_step:
                        continue
                    commands = self.on_output(*pending)
                    pending = []
                    self.steps += 1
                    if not self._send(cmd_tx, commands):
                        break
        finally:
            cmd_tx.close()
            out_rx.close()

        worker.join_result(timeout)
        log.info("%s: %d steps, engine %s", type(self).__name__,
                 self.steps, engine.state.value)
        return self

    @staticmethod
    def _send(tx: Sender, commands: Iterable[int]) -> bool:
        try:
            for command in commands:
                tx.send(command)
        except ChannelClosed:
            return False
        return True


# ══════════════════════════════════════════════
# Hull painting robot
# ══════════════════════════════════════════════

# (dx, dy) per heading, y grows upward; index + 1 turns right
_HEADINGS = [(0, 1), (1, 0), (0, -1), (-1, 0)]


class HullPaintingRobot(Controller):
    """Camera + motors for the hull painting robot.

    The engine reads the colour under the robot, then outputs the colour to
    paint and the direction to turn (0 = left, 1 = right); the robot moves
    one panel forward and reports the new panel's colour.
    """

    readings_per_step = 2

    def __init__(self, start_color: int = COLOR_BLACK):
        super().__init__()
        self.start_color = start_color
        self.panels: Dict[Point, int] = {}
        self.position: Point = (0, 0)
        self.heading = 0

    def start(self) -> Iterable[int]:
        return (self.start_color,)

    def color_at(self, position: Point) -> int:
        if position == (0, 0) and position not in self.panels:
            return self.start_color
        return self.panels.get(position, COLOR_BLACK)

    def on_output(self, color: int, turn: int) -> Iterable[int]:
        self.panels[self.position] = color

        if turn == TURN_LEFT:
            self.heading = (self.heading - 1) % 4
        elif turn == TURN_RIGHT:
            self.heading = (self.heading + 1) % 4
        else:
            raise ValueError(f"bad turn instruction {turn}")

        dx, dy = _HEADINGS[self.heading]
        x, y = self.position
        self.position = (x + dx, y + dy)
        return (self.color_at(self.position),)

    def render(self) -> List[str]:
        """Painted hull as text rows, top row first."""
        if not self.panels:
            return []
        xs = [x for x, _ in self.panels]
        ys = [y for _, y in self.panels]
        rows = []
        for y in range(max(ys), min(ys) - 1, -1):
            rows.append(''.join(
                '#' if self.panels.get((x, y)) == COLOR_WHITE else ' '
                for x in range(min(xs), max(xs) + 1)
            ).rstrip())
        return rows


# ══════════════════════════════════════════════
# Arcade cabinet
# ══════════════════════════════════════════════

def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class ArcadeCabinet(Controller):
    """Screen + joystick for the arcade game.

    Readings come in (x, y, tile) triples; (-1, 0, n) sets the score
    instead of drawing. With ``play=True`` the free-play patch is applied
    and the joystick steers the paddle toward the ball every time the
    ball moves.
    """

    readings_per_step = 3

    def __init__(self, play: bool = False):
        super().__init__()
        self.play = play
        self.tiles: Dict[Point, int] = {}
        self.score = 0
        self.paddle_x: Optional[int] = None
        self.ball_x: Optional[int] = None

    def patches(self) -> Dict[int, int]:
        if self.play:
            return {FREE_PLAY_ADDRESS: FREE_PLAY_VALUE}
        return {}

    def on_output(self, x: int, y: int, tile: int) -> Iterable[int]:
        if (x, y) == SCORE_POSITION:
            self.score = tile
            return ()

        self.tiles[(x, y)] = tile
        if tile == TILE_PADDLE:
            self.paddle_x = x
        elif tile == TILE_BALL:
            self.ball_x = x
            if self.play:
                if self.paddle_x is None:
                    return (0,)
                return (_sign(x - self.paddle_x),)
        return ()

    def block_count(self) -> int:
        return sum(1 for tile in self.tiles.values() if tile == TILE_BLOCK)

    def render(self) -> List[str]:
        if not self.tiles:
            return []
        width = max(x for x, _ in self.tiles) + 1
        height = max(y for _, y in self.tiles) + 1
        rows = [[' '] * width for _ in range(height)]
        for (x, y), tile in self.tiles.items():
            if x >= 0 and y >= 0:
                rows[y][x] = TILE_CHARS.get(tile, '?')
        return [''.join(row).rstrip() for row in rows]
