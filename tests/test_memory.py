"""
Growable Memory + Decoder Tests
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from intcode_vm.mem.memory import Memory, to_address
from intcode_vm.cpu.decoder import (
    decode_word, decode_instruction, split_word, format_instruction,
    POSITION, IMMEDIATE, RELATIVE,
)
from intcode_vm.config import MAX_ADDRESS, DENSE_LIMIT
from intcode_vm.errors import OutOfBounds, UnrecognizedOpcode


# ═══════════════════════════════════════════════
# Memory
# ═══════════════════════════════════════════════

class TestMemory:
    def test_initial_image(self):
        mem = Memory([1, 2, 3])
        assert len(mem) == 3
        assert mem.get(2) == 3

    def test_read_past_end_zero_fills(self):
        """Reading beyond the image extends it with zeros."""
        mem = Memory([7])
        assert mem.get(10) == 0
        assert len(mem) == 11
        assert mem.snapshot() == [7] + [0] * 10

    def test_write_past_end_extends(self):
        mem = Memory()
        mem.set(4, 42)
        assert mem.snapshot() == [0, 0, 0, 0, 42]

    def test_negative_address(self):
        mem = Memory([1, 2, 3])
        with pytest.raises(OutOfBounds) as exc_info:
            mem.get(-1)
        assert exc_info.value.address == -1
        assert "out of bounds memory -1" in str(exc_info.value)

    def test_negative_write_leaves_memory_alone(self):
        mem = Memory([1, 2, 3])
        with pytest.raises(OutOfBounds):
            mem.set(-5, 9)
        assert mem.snapshot() == [1, 2, 3]

    def test_address_too_large(self):
        with pytest.raises(OutOfBounds):
            to_address(MAX_ADDRESS + 1)
        assert to_address(MAX_ADDRESS) == MAX_ADDRESS

    def test_non_integer_address(self):
        with pytest.raises(OutOfBounds):
            to_address(True)
        with pytest.raises(OutOfBounds):
            to_address(1.0)

    def test_far_address_is_sparse(self):
        """Cells above DENSE_LIMIT do not grow the flat list."""
        mem = Memory([1, 2])
        assert mem.get(2 ** 62) == 0
        mem.set(2 ** 62, 7)
        assert mem.get(2 ** 62) == 7
        assert mem.snapshot() == [1, 2]
        assert mem.sparse_cells() == {2 ** 62: 7}
        assert len(mem) == 2 ** 62 + 1

    def test_dense_limit_boundary(self):
        mem = Memory()
        mem.set(DENSE_LIMIT - 1, 5)
        mem.set(DENSE_LIMIT, 6)
        assert len(mem.snapshot()) == DENSE_LIMIT
        assert mem.sparse_cells() == {DENSE_LIMIT: 6}

    def test_largest_address(self):
        mem = Memory()
        mem.set(MAX_ADDRESS, -1)
        assert mem.get(MAX_ADDRESS) == -1

    def test_snapshot_is_a_copy(self):
        mem = Memory([1, 2])
        snap = mem.snapshot()
        snap[0] = 99
        assert mem.get(0) == 1

    def test_dump(self):
        mem = Memory(range(10))
        text = mem.dump(0, 10, width=8)
        lines = text.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("000000")
        assert lines[1].startswith("000008")


# ═══════════════════════════════════════════════
# Decoder
# ═══════════════════════════════════════════════

class TestDecoder:
    def test_split_word(self):
        assert split_word(1002) == (2, 0, 1, 0)
        assert split_word(21101) == (1, 1, 1, 2)
        assert split_word(99) == (99, 0, 0, 0)

    def test_extra_high_digits_ignored(self):
        """Only three mode digits are read."""
        assert split_word(901002) == (2, 0, 1, 0)

    def test_negative_word_gives_negative_digits(self):
        assert split_word(-1) == (-1, 0, 0, 0)
        assert split_word(-1101) == (-1, -1, -1, 0)

    def test_decode_add(self):
        insn = decode_word(1101)
        assert insn.mnemonic == 'ADD'
        assert insn.modes == (IMMEDIATE, IMMEDIATE, POSITION)

    def test_decode_relative(self):
        insn = decode_word(204)
        assert insn.mnemonic == 'OUT'
        assert insn.modes[0] == RELATIVE

    def test_unknown_mode_digit_is_deferred(self):
        """Mode 3 on a real parameter decodes; the engine rejects it later."""
        insn = decode_word(301)
        assert insn.modes == (3, 0, 0)

    @pytest.mark.parametrize("word, digits", [
        (0, (0, 0, 0, 0)),
        (42, (42, 0, 0, 0)),
        (199, (99, 1, 0, 0)),
        (1104, (4, 1, 1, 0)),
        (10005, (5, 0, 0, 1)),
        (-1, (-1, 0, 0, 0)),
    ])
    def test_unrecognized_opcode(self, word, digits):
        with pytest.raises(UnrecognizedOpcode) as exc_info:
            decode_word(word)
        assert exc_info.value.digits == digits

    def test_unrecognized_opcode_message(self):
        with pytest.raises(UnrecognizedOpcode) as exc_info:
            decode_word(12345)
        assert str(exc_info.value) == \
            "Unrecognized opcode 45, with parameter modes 3, 2, 1"

    def test_decode_instruction_advances_pc(self):
        mem = Memory([1, 0, 0, 0, 99])
        insn, pc = decode_instruction(mem, 4)
        assert insn.mnemonic == 'HALT'
        assert pc == 5

    def test_format_instruction(self):
        assert format_instruction(decode_word(1201)) == "ADD  REL,IMM,POS"
        assert format_instruction(decode_word(99)) == "HALT"
