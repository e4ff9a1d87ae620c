from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import make_structural_error
from .lexer import Op, Token, tokenize


def match_brackets(tokens: Sequence[Token], *, source: Optional[str] = None) -> Tuple[int, ...]:
    """Pair every "[" with its "]" in a single left-to-right pass.

    Returns the jump table: for a bracket token the index of its partner,
    for every other token its own index. ``source`` is only used to render
    the error context.
    """
    jumps = list(range(len(tokens)))
    stack: List[int] = []

    for i, tok in enumerate(tokens):
        if tok.op == Op.JUMP_IF_ZERO:
            stack.append(i)
        elif tok.op == Op.JUMP_IF_NOT_ZERO:
            if not stack:
                raise make_structural_error(kind='close', source=source, position=tok.position,
                                            line=tok.line, column=tok.column)
            start = stack.pop()
            jumps[start] = i
            jumps[i] = start

    if stack:
        # oldest unpaired "["
        tok = tokens[stack[0]]
        raise make_structural_error(kind='open', source=source, position=tok.position,
                                    line=tok.line, column=tok.column)

    return tuple(jumps)


@dataclass(frozen=True)
class Program:
    tokens: Tuple[Token, ...]
    jumps: Tuple[int, ...]
    source: Optional[str] = field(default=None, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def code(self) -> str:
        return ''.join(t.char for t in self.tokens)

    def opcode_array(self) -> np.ndarray:
        return np.fromiter((int(t.op) for t in self.tokens), dtype=np.int32, count=len(self.tokens))

    def jump_array(self) -> np.ndarray:
        return np.asarray(self.jumps, dtype=np.int64)


def compile_tokens(tokens: Sequence[Token], *, source: Optional[str] = None) -> Program:
    tokens = tuple(tokens)
    return Program(tokens=tokens, jumps=match_brackets(tokens, source=source), source=source)


def compile_source(source: str) -> Program:
    return compile_tokens(tokenize(source), source=source)
