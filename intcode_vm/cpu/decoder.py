"""
Intcode VM — Instruction Decoder / Opcode Table

An instruction word packs an opcode and up to three parameter modes into
one decimal integer:

    ABCDE
      1002   → DE = 02 (multiply), C = 0, B = 1, A = 0
    mode of parameter 1 = C, parameter 2 = B, parameter 3 = A

Missing leading digits are mode 0. Only the three mode digits above the
opcode are read; anything higher is ignored.

Parameter modes:
  POSITION   0  parameter is an address
  IMMEDIATE  1  parameter is the value itself
  RELATIVE   2  parameter is an offset from the relative base

An unknown mode digit is NOT rejected here; it is rejected when the
engine actually resolves that parameter. What the decoder does reject is
an opcode outside the table, or a non-zero mode digit for a parameter the
opcode does not have (e.g. 199 or 1104): both come back as
UnrecognizedOpcode with the full digit tuple.
"""

from typing import NamedTuple, Tuple

from ..errors import UnrecognizedOpcode

# ──────────────────────────────────────────────
# Parameter mode constants
# ──────────────────────────────────────────────

POSITION  = 0
IMMEDIATE = 1
RELATIVE  = 2

MODE_NAMES = {
    POSITION:  'POS',
    IMMEDIATE: 'IMM',
    RELATIVE:  'REL',
}

# ──────────────────────────────────────────────
# Opcode constants
# ──────────────────────────────────────────────

OP_ADD  = 1
OP_MUL  = 2
OP_IN   = 3
OP_OUT  = 4
OP_JT   = 5
OP_JF   = 6
OP_LT   = 7
OP_EQ   = 8
OP_ARB  = 9
OP_HALT = 99

# Format: opcode -> (mnemonic, parameter_count)
OPCODES = {
    OP_ADD:  ('ADD',  3),   # p3 = p1 + p2
    OP_MUL:  ('MUL',  3),   # p3 = p1 * p2
    OP_IN:   ('IN',   1),   # p1 = next input
    OP_OUT:  ('OUT',  1),   # emit p1
    OP_JT:   ('JT',   2),   # if p1 != 0: pc = p2
    OP_JF:   ('JF',   2),   # if p1 == 0: pc = p2
    OP_LT:   ('LT',   3),   # p3 = p1 < p2
    OP_EQ:   ('EQ',   3),   # p3 = p1 == p2
    OP_ARB:  ('ARB',  1),   # relative base += p1
    OP_HALT: ('HALT', 0),
}


class Instruction(NamedTuple):
    """One decoded instruction word."""
    opcode: int
    mnemonic: str
    modes: Tuple[int, int, int]

    @property
    def digits(self) -> Tuple[int, int, int, int]:
        return (self.opcode,) + self.modes


def _trunc_divmod(value: int, divisor: int) -> Tuple[int, int]:
    """divmod rounding toward zero, so negative words give negative digits."""
    q, r = divmod(abs(value), divisor)
    if value < 0:
        return -q, -r
    return q, r


def split_word(word: int) -> Tuple[int, int, int, int]:
    """Split an instruction word into (opcode, mode1, mode2, mode3)."""
    rest, opcode = _trunc_divmod(word, 100)
    modes = [0, 0, 0]
    for i in range(3):
        if rest == 0:
            break
        rest, modes[i] = _trunc_divmod(rest, 10)
    return (opcode, modes[0], modes[1], modes[2])


def decode_word(word: int) -> Instruction:
    """Decode an instruction word, rejecting unknown opcodes.

    Raises UnrecognizedOpcode for opcodes outside the table and for
    non-zero mode digits on parameters the opcode does not take.
    """
    digits = split_word(word)
    opcode, modes = digits[0], digits[1:]

    entry = OPCODES.get(opcode)
    if entry is None:
        raise UnrecognizedOpcode(digits)

    mnem, nparams = entry
    if any(modes[nparams:]):
        raise UnrecognizedOpcode(digits)

    return Instruction(opcode, mnem, modes)


def decode_instruction(memory, pc: int) -> Tuple[Instruction, int]:
    """Fetch and decode the instruction word at ``pc``.

    Returns: (instruction, new_pc)
    """
    word = memory.get(pc)
    return decode_word(word), pc + 1


def format_instruction(insn: Instruction) -> str:
    """Short human-readable form, e.g. 'ADD POS,IMM,REL'."""
    _, nparams = OPCODES[insn.opcode]
    modes = ','.join(MODE_NAMES.get(m, str(m)) for m in insn.modes[:nparams])
    return f"{insn.mnemonic:4s} {modes}".rstrip()
