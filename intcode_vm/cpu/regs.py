"""
Intcode VM — Execution State

  pc     — address of the next word to fetch (starts at 0)
  rb     — relative base, added to relative-mode parameters (starts at 0)
  steps  — instructions executed so far
"""


class Registers:
    """Engine-local execution state. Never shared between engines."""

    __slots__ = ('pc', 'rb', 'steps')

    def __init__(self):
        self.pc: int = 0
        self.rb: int = 0
        self.steps: int = 0

    def display(self) -> str:
        return f"PC={self.pc:06d} RB={self.rb:06d} N={self.steps}"

    def __repr__(self) -> str:
        return f"Registers({self.display()})"
