from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .config import MEMORY_SIZE


@dataclass
class MachineState:
    memory: np.ndarray = field(default_factory=lambda: np.zeros(MEMORY_SIZE, dtype=np.uint8))
    pointer: int = 0
    pc: int = 0
    steps: int = 0

    @classmethod
    def fresh(cls, memory_size: int = MEMORY_SIZE) -> 'MachineState':
        return cls(memory=np.zeros(memory_size, dtype=np.uint8))

    def reset(self) -> None:
        self.memory.fill(0)
        self.pointer = 0
        self.pc = 0
        self.steps = 0

    @property
    def cell(self) -> int:
        return int(self.memory[self.pointer])
