#!/usr/bin/env python3
"""
intcodekit — Intcode VM toolkit
===============================

One CLI for running Intcode programs:
    intcodekit run       — Run a program (console I/O, or fixed inputs)
    intcodekit amplify   — Best amplifier signal over all phase orders
    intcodekit paint     — Hull painting robot
    intcodekit arcade    — Arcade cabinet (count blocks / play for score)
    intcodekit nounverb  — Find the noun/verb pair giving a target value

Usage:
    python intcodekit.py <command> [options]
    python intcodekit.py --help

Examples:
    python intcodekit.py run gravity.txt --set 1=12 --set 2=2 --peek 0
    python intcodekit.py run diagnostics.txt --input 5
    python intcodekit.py amplify amps.txt --feedback
    python intcodekit.py paint robot.txt --start-color 1
    python intcodekit.py arcade game.txt --play
    python intcodekit.py nounverb gravity.txt 19690720
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from intcode_vm import __version__
from intcode_vm.errors import IntcodeError, IntcodeRuntimeError, ParseError
from intcode_vm.loader import read_program_file
from intcode_vm.log_setup import setup_logging
from intcode_vm.harness import (
    run_batch, find_noun_verb, max_signal, HullPaintingRobot, ArcadeCabinet,
)

log = logging.getLogger("intcode_vm.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcodekit",
        description="Intcode VM toolkit — run programs, amplifier rings, controllers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  run        Run a program to completion
  amplify    Maximum amplifier signal (open chain or feedback ring)
  paint      Run the hull painting robot
  arcade     Run the arcade cabinet
  nounverb   Search noun/verb patches for a target result
""",
    )
    parser.add_argument("--version", action="version", version=f"intcodekit {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase console log verbosity (-v, -vv)")
    parser.add_argument("--log-file", help="Also write a full debug log to this file")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a program to completion")
    p_run.add_argument("program", help="Program file (comma-separated integers)")
    p_run.add_argument("--set", dest="patches", action="append", default=[],
                       metavar="ADDR=VALUE", help="Patch memory before running")
    p_run.add_argument("--input", dest="inputs", action="append", type=int,
                       metavar="N", help="Feed N to IN instead of prompting (repeatable)")
    p_run.add_argument("--peek", action="append", type=int, default=[],
                       metavar="ADDR", help="Print memory at ADDR after halting")
    p_run.add_argument("--trace", action="store_true",
                       help="Log every executed instruction at DEBUG")

    # ── amplify ──────────────────────────────────────────────────────────
    p_amp = sub.add_parser("amplify", help="Maximum amplifier signal")
    p_amp.add_argument("program", help="Amplifier controller program file")
    p_amp.add_argument("--feedback", action="store_true",
                       help="Wire the amplifiers in a feedback ring")
    p_amp.add_argument("--phases", default=None,
                       help="Comma-separated phase set (default 0-4, or 5-9 with --feedback)")

    # ── paint ────────────────────────────────────────────────────────────
    p_paint = sub.add_parser("paint", help="Run the hull painting robot")
    p_paint.add_argument("program", help="Robot program file")
    p_paint.add_argument("--start-color", type=int, choices=[0, 1], default=0,
                         help="Colour of the starting panel (1 renders the hull)")

    # ── arcade ───────────────────────────────────────────────────────────
    p_arc = sub.add_parser("arcade", help="Run the arcade cabinet")
    p_arc.add_argument("program", help="Game program file")
    p_arc.add_argument("--play", action="store_true",
                       help="Insert quarters and play to the end; print the score")
    p_arc.add_argument("--show", action="store_true",
                       help="Print the final screen")

    # ── nounverb ─────────────────────────────────────────────────────────
    p_nv = sub.add_parser("nounverb", help="Search noun/verb patches for a target")
    p_nv.add_argument("program", help="Program file")
    p_nv.add_argument("target", type=int, help="Value wanted at address 0")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    console_level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    setup_logging(console_level=console_level, log_file=args.log_file)

    try:
        handler = COMMANDS[args.command]
        return handler(args)
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1
    except IntcodeRuntimeError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        return 1
    except IntcodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError, LookupError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        log.exception("Unhandled error in %s", args.command)
        return 2


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

def _parse_patch(text: str) -> Tuple[int, int]:
    """Parse ADDR=VALUE."""
    address, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"expected ADDR=VALUE, got {text!r}")
    return int(address), int(value)


# ── run ──────────────────────────────────────────────────────────────────
def cmd_run(args) -> int:
    program = read_program_file(args.program)
    patches = dict(_parse_patch(p) for p in args.patches)

    result = run_batch(program, inputs=args.inputs, patches=patches, trace=args.trace)
    for value in result.outputs:
        print(value)
    for address in args.peek:
        print(f"[{address}] = {result.engine.get(address)}")
    return 0


# ── amplify ──────────────────────────────────────────────────────────────
def cmd_amplify(args) -> int:
    program = read_program_file(args.program)
    phases = None
    if args.phases:
        phases = [int(p) for p in args.phases.split(",")]

    signal, order = max_signal(program, phases, feedback=args.feedback)
    print(f"{signal} (phases {','.join(str(p) for p in order)})")
    return 0


# ── paint ────────────────────────────────────────────────────────────────
def cmd_paint(args) -> int:
    robot = HullPaintingRobot(start_color=args.start_color).run(read_program_file(args.program))
    if args.start_color == 0:
        print(len(robot.panels))
    else:
        for row in robot.render():
            print(row)
    return 0


# ── arcade ───────────────────────────────────────────────────────────────
def cmd_arcade(args) -> int:
    cabinet = ArcadeCabinet(play=args.play).run(read_program_file(args.program))
    if args.show:
        for row in cabinet.render():
            print(row)
    print(cabinet.score if args.play else cabinet.block_count())
    return 0


# ── nounverb ─────────────────────────────────────────────────────────────
def cmd_nounverb(args) -> int:
    print(find_noun_verb(read_program_file(args.program), args.target))
    return 0


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND DISPATCH TABLE
# ═════════════════════════════════════════════════════════════════════════════

COMMANDS = {
    "run": cmd_run,
    "amplify": cmd_amplify,
    "paint": cmd_paint,
    "arcade": cmd_arcade,
    "nounverb": cmd_nounverb,
}


if __name__ == "__main__":
    sys.exit(main())
