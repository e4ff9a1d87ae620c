from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


def _build_context(lines: List[str], line_no_1: int, column_1: int, *, context: int = 2) -> str:
    idx = max(1, min(line_no_1, len(lines)))
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"       | {' ' * max(0, column_1 - 1)}^")
    return "\n".join(out)


def _hint_for(kind: str) -> Optional[str]:
    if kind == 'open':
        return 'Every "[" needs a matching "]" later in the program.'
    if kind == 'close':
        return 'This "]" has no "[" before it. Remove it or add the missing "[".'
    return None


@dataclass
class DerstandError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(DerstandError):
    pass


@dataclass
class DerstandStructuralError(DerstandError):
    position: int
    line: int
    column: int
    context: str


@dataclass
class UnmatchedOpenDelimiter(DerstandStructuralError):
    pass


@dataclass
class UnmatchedCloseDelimiter(DerstandStructuralError):
    pass


@dataclass
class DerstandRuntimeError(DerstandError):
    pc: int
    pointer: int
    position: Optional[int] = None


@dataclass
class PointerOutOfRange(DerstandRuntimeError):
    pass


@dataclass
class EndOfInput(DerstandRuntimeError):
    pass


@dataclass
class InputError(DerstandRuntimeError):
    pass


@dataclass
class OutputError(DerstandRuntimeError):
    pass


@dataclass
class StepLimitExceeded(DerstandRuntimeError):
    pass


def make_structural_error(*, kind: str, source: Optional[str], position: int, line: int,
                          column: int) -> DerstandStructuralError:
    if kind == 'open':
        cls = UnmatchedOpenDelimiter
        what = "Unmatched opening bracket"
    else:
        cls = UnmatchedCloseDelimiter
        what = "Unmatched closing bracket"

    ctx = _build_context(source.split('\n'), line, column) if source is not None else ''
    hint = _hint_for(kind)
    ctx_block = f"\n{ctx}" if ctx else ""
    hint_block = f"\nHint: {hint}" if hint else ""
    return cls(
        message=f"{what} at position {position} (line {line}, column {column}){ctx_block}{hint_block}",
        position=position,
        line=line,
        column=column,
        context=ctx,
    )


def make_runtime_error(cls, *, message: str, pc: int, pointer: int,
                       position: Optional[int] = None) -> DerstandRuntimeError:
    where = f"pc {pc}, pointer {pointer}"
    if position is not None:
        where += f", source position {position}"
    return cls(message=f"{message} ({where})", pc=pc, pointer=pointer, position=position)
