from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List


class Op(IntEnum):
    RIGHT = 0
    LEFT = 1
    INCREMENT = 2
    DECREMENT = 3
    OUTPUT = 4
    INPUT = 5
    JUMP_IF_ZERO = 6
    JUMP_IF_NOT_ZERO = 7
    ZERO = 8
    COPY = 9
    MOVE_HIGH = 10
    MOVE_LOW = 11


OPCODES: Dict[str, Op] = {
    '>': Op.RIGHT,
    '<': Op.LEFT,
    '+': Op.INCREMENT,
    '-': Op.DECREMENT,
    '.': Op.OUTPUT,
    ',': Op.INPUT,
    '[': Op.JUMP_IF_ZERO,
    ']': Op.JUMP_IF_NOT_ZERO,
    '#': Op.ZERO,
    '$': Op.COPY,
    '%': Op.MOVE_HIGH,
    '&': Op.MOVE_LOW,
}

INSTRUCTION_CHARS = ''.join(OPCODES)


@dataclass(frozen=True)
class Token:
    op: Op
    position: int  # character offset in the source
    line: int
    column: int

    @property
    def char(self) -> str:
        return INSTRUCTION_CHARS[self.op]


def tokenize(source: str) -> List[Token]:
    """Turn source text into instruction tokens.

    Any character that is not an instruction is a comment and is skipped.
    Line and column are 1-based, position is the 0-based character offset.
    """
    tokens: List[Token] = []
    line = 1
    line_start = 0
    for pos, ch in enumerate(source):
        op = OPCODES.get(ch)
        if op is not None:
            tokens.append(Token(op=op, position=pos, line=line, column=pos - line_start + 1))
        elif ch == '\n':
            line += 1
            line_start = pos + 1
    return tokens
