"""
Harness Tests — batch runs, engine threads, amplifier rings, controllers.

Threaded tests always join with a timeout so a deadlock fails the test
instead of hanging the run.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from intcode_vm import channel, IntcodeEmulator, EngineState
from intcode_vm.errors import InputClosed, UnrecognizedOpcode
from intcode_vm.harness import (
    EngineThread, spawn, join_all,
    run_batch, find_noun_verb, program_image,
    run_chain, run_feedback_ring, max_signal,
    HullPaintingRobot, ArcadeCabinet,
)

TIMEOUT = 10

CHAIN_43210 = "3,15,3,16,1002,16,10,16,1,16,15,15,4,15,99,0,0"
CHAIN_54321 = ("3,23,3,24,1002,24,10,24,1002,23,-1,23,"
               "101,5,23,23,1,24,23,23,4,23,99,0,0")
RING_139629729 = ("3,26,1001,26,-4,26,3,27,1002,27,2,27,1,27,26,"
                  "27,4,27,1001,28,-1,28,1005,28,6,99,0,0,5")


# ═══════════════════════════════════════════════
# Batch runs
# ═══════════════════════════════════════════════

class TestBatch:
    def test_program_image_accepts_text_or_list(self):
        assert program_image("1,2,3") == [1, 2, 3]
        assert program_image((4, 5)) == [4, 5]

    def test_fixed_inputs(self):
        result = run_batch("3,0,4,0,99", inputs=[7])
        assert result.outputs == [7]
        assert result.memory[0] == 7
        assert result.engine.state is EngineState.HALTED

    def test_patches(self):
        result = run_batch("1,0,0,0,99", inputs=[], patches={1: 4, 2: 4})
        assert result.memory[0] == 198

    def test_runs_out_of_inputs(self):
        with pytest.raises(InputClosed):
            run_batch("3,0,3,0,99", inputs=[1])

    def test_console_mode_collects_nothing(self):
        result = run_batch("1,0,0,0,99")
        assert result.outputs == []
        assert result.memory[0] == 2

    def test_noun_verb(self):
        assert find_noun_verb("1,0,0,0,99", 198) == 404

    def test_noun_verb_not_found(self):
        with pytest.raises(LookupError):
            find_noun_verb("1,0,0,0,99", -1, range(5), range(5))

    def test_noun_verb_skips_faults(self):
        """A noun that makes the run fault is skipped, not fatal."""
        assert find_noun_verb("1,0,0,0,99", 3, range(-1, 3), range(3)) == 2


# ═══════════════════════════════════════════════
# Engine threads
# ═══════════════════════════════════════════════

class TestEngineThread:
    def test_unexpected_fault_is_raised(self):
        t = spawn(IntcodeEmulator([42]), "bad")
        with pytest.raises(UnrecognizedOpcode):
            t.join_result(TIMEOUT)

    def test_expected_hang_up(self):
        tx, rx = channel()
        tx.close()
        emu = IntcodeEmulator([3, 0, 99])
        emu.bind_input(rx)
        t = spawn(emu, "hung-up", expect_closed_input=True)
        assert t.join_result(TIMEOUT) is EngineState.FAULTED
        assert t.expected_shutdown

    def test_closes_output_on_halt(self):
        tx, rx = channel()
        emu = IntcodeEmulator([104, 3, 99])
        emu.bind_output(tx)
        t = spawn(emu)
        assert list(rx) == [3]
        assert t.join_result(TIMEOUT) is EngineState.HALTED

    def test_join_timeout(self):
        tx, rx = channel()
        emu = IntcodeEmulator([3, 0, 99])
        emu.bind_input(rx)
        t = spawn(emu, "waiting", expect_closed_input=True)
        with pytest.raises(TimeoutError):
            t.join_result(0.05)
        tx.close()
        t.join_result(TIMEOUT)

    def test_join_all_prefers_genuine_fault(self):
        tx, rx = channel()
        tx.close()
        hung_up = IntcodeEmulator([3, 0, 99])
        hung_up.bind_input(rx)
        threads = [
            EngineThread(hung_up, "hung-up"),
            EngineThread(IntcodeEmulator([42]), "bad"),
        ]
        for t in threads:
            t.start()
        with pytest.raises(UnrecognizedOpcode):
            join_all(threads, TIMEOUT)

    def test_join_all_states(self):
        threads = [spawn(IntcodeEmulator([99])) for _ in range(3)]
        assert join_all(threads, TIMEOUT) == [EngineState.HALTED] * 3


# ═══════════════════════════════════════════════
# Amplifiers
# ═══════════════════════════════════════════════

class TestAmplifiers:
    def test_chain(self):
        assert run_chain(CHAIN_43210, [4, 3, 2, 1, 0]) == 43210
        assert run_chain(CHAIN_54321, [0, 1, 2, 3, 4]) == 54321

    def test_chain_max(self):
        assert max_signal(CHAIN_43210) == (43210, (4, 3, 2, 1, 0))

    def test_ring(self):
        assert run_feedback_ring(RING_139629729, [9, 8, 7, 6, 5],
                                 timeout=TIMEOUT) == 139629729

    def test_ring_max(self):
        assert max_signal(RING_139629729, feedback=True) == \
            (139629729, (9, 8, 7, 6, 5))

    def test_ring_fault_surfaces(self):
        with pytest.raises(UnrecognizedOpcode):
            run_feedback_ring("3,0,42", [5, 6, 7, 8, 9], timeout=TIMEOUT)

    def test_no_signal(self):
        with pytest.raises(ValueError):
            run_chain("3,0,3,0,99", [0])

    def test_empty_phase_set(self):
        with pytest.raises(ValueError):
            max_signal(CHAIN_43210, [])

    def test_empty_phases_rejected(self):
        with pytest.raises(ValueError):
            run_chain(CHAIN_43210, [])
        with pytest.raises(ValueError):
            run_feedback_ring(RING_139629729, [], timeout=TIMEOUT)


# ═══════════════════════════════════════════════
# Controllers
# ═══════════════════════════════════════════════

# Reads a colour, paints it back, turns right; four times, then one last
# read before halting.
ROBOT = "3,100,4,100,104,1," * 4 + "3,100,99"


class TestHullPaintingRobot:
    def test_square_walk(self):
        robot = HullPaintingRobot(start_color=1).run(ROBOT, timeout=TIMEOUT)
        assert len(robot.panels) == 4
        assert robot.panels[(0, 0)] == 1
        assert set(robot.panels) == {(0, 0), (1, 0), (1, -1), (0, -1)}
        assert robot.position == (0, 0)
        assert robot.steps == 4

    def test_render(self):
        robot = HullPaintingRobot(start_color=1).run(ROBOT, timeout=TIMEOUT)
        assert robot.render() == ["#", ""]

    def test_black_start(self):
        robot = HullPaintingRobot().run(ROBOT, timeout=TIMEOUT)
        assert len(robot.panels) == 4
        assert all(color == 0 for color in robot.panels.values())

    def test_bad_turn(self):
        with pytest.raises(ValueError):
            HullPaintingRobot().run("3,100,104,1,104,5,99", timeout=TIMEOUT)

    def test_halts_without_painting(self):
        robot = HullPaintingRobot().run("3,100,99", timeout=TIMEOUT)
        assert robot.panels == {}


BLOCKS = ("104,1,104,2,104,2,"
          "104,2,104,2,104,2,"
          "104,3,104,0,104,2,"
          "99")

# Draws a paddle at x=5 and a ball at x=3, reads the joystick, then
# reports score = joystick + 10.
GAME = ("1,0,0,100,"
        "104,5,104,0,104,3,"
        "104,3,104,0,104,4,"
        "3,200,"
        "1001,200,10,201,"
        "104,-1,104,0,4,201,"
        "99")


class TestArcadeCabinet:
    def test_block_count(self):
        cabinet = ArcadeCabinet().run(BLOCKS, timeout=TIMEOUT)
        assert cabinet.block_count() == 3

    def test_render(self):
        cabinet = ArcadeCabinet().run(BLOCKS, timeout=TIMEOUT)
        assert cabinet.render() == ["   #", "", " ##"]

    def test_play_steers_paddle(self):
        cabinet = ArcadeCabinet(play=True).run(GAME, timeout=TIMEOUT)
        assert cabinet.score == 9
        assert cabinet.engine.get(0) == 2
        assert cabinet.paddle_x == 5
        assert cabinet.ball_x == 3
