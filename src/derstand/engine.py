from __future__ import annotations

from typing import Optional

from numba import njit

from .bridge import IOBridge, StreamIO
from .config import EngineConfig, EofPolicy, PointerPolicy
from .errors import (
    EndOfInput,
    InputError,
    OutputError,
    PointerOutOfRange,
    StepLimitExceeded,
    make_runtime_error,
)
from .lexer import Op
from .program import Program
from .state import MachineState

# Pointer modes as plain ints so numba can fold them as constants.
CLAMP = 0
WRAP = 1
FAULT = 2

POINTER_MODES = {
    PointerPolicy.CLAMP: CLAMP,
    PointerPolicy.WRAP: WRAP,
    PointerPolicy.ERROR: FAULT,
}

STOP_OUTPUT = 1
STOP_INPUT = 2
STOP_END = 3
STOP_BUDGET = 4
STOP_POINTER = 5

# Steps per kernel call when no step limit is set.
CHUNK_STEPS = 1 << 24

_RIGHT = int(Op.RIGHT)
_LEFT = int(Op.LEFT)
_INCREMENT = int(Op.INCREMENT)
_DECREMENT = int(Op.DECREMENT)
_OUTPUT = int(Op.OUTPUT)
_INPUT = int(Op.INPUT)
_JUMP_IF_ZERO = int(Op.JUMP_IF_ZERO)
_JUMP_IF_NOT_ZERO = int(Op.JUMP_IF_NOT_ZERO)
_ZERO = int(Op.ZERO)
_COPY = int(Op.COPY)
_MOVE_HIGH = int(Op.MOVE_HIGH)
_MOVE_LOW = int(Op.MOVE_LOW)


def shift_pointer(pointer, delta, size, mode):
    """Return the cell ``delta`` away from ``pointer``, or -1 if that is a fault."""
    target = pointer + delta
    if 0 <= target < size:
        return target
    if mode == CLAMP:
        return 0 if target < 0 else size - 1
    if mode == WRAP:
        return target % size
    return -1


_shift_pointer_jit = njit(cache=True)(shift_pointer)


@njit(cache=True)
def run_kernel(code, jumps, memory, pc, pointer, mode, budget):
    """
    Run instructions until the program ends, I/O is needed, a pointer fault
    happens or ``budget`` steps have been spent.

    I/O instructions are not executed here: the kernel stops in front of them
    and the caller services them through the bridge.
    """
    stop_reason = STOP_END
    mem_len = len(memory)
    prog_len = len(code)
    steps = 0

    while pc < prog_len:
        if steps >= budget:
            stop_reason = STOP_BUDGET
            break

        op = code[pc]

        if op == _INCREMENT:
            memory[pointer] = (memory[pointer] + 1) & 255
        elif op == _DECREMENT:
            memory[pointer] = (memory[pointer] - 1) & 255
        elif op == _RIGHT:
            target = _shift_pointer_jit(pointer, 1, mem_len, mode)
            if target < 0:
                stop_reason = STOP_POINTER
                break
            pointer = target
        elif op == _LEFT:
            target = _shift_pointer_jit(pointer, -1, mem_len, mode)
            if target < 0:
                stop_reason = STOP_POINTER
                break
            pointer = target
        elif op == _JUMP_IF_ZERO:
            if memory[pointer] == 0:
                pc = jumps[pc]
        elif op == _JUMP_IF_NOT_ZERO:
            if memory[pointer] != 0:
                pc = jumps[pc]
        elif op == _OUTPUT:
            stop_reason = STOP_OUTPUT
            break
        elif op == _INPUT:
            stop_reason = STOP_INPUT
            break
        elif op == _ZERO:
            memory[pointer] = 0
        elif op == _COPY:
            target = _shift_pointer_jit(pointer, 1, mem_len, mode)
            if target < 0:
                stop_reason = STOP_POINTER
                break
            if target != pointer:
                memory[target] = memory[pointer]
        elif op == _MOVE_HIGH:
            pointer = mem_len - 1
        elif op == _MOVE_LOW:
            pointer = 0

        pc += 1
        steps += 1

    return pc, pointer, stop_reason, steps


class Engine:
    """Executes one compiled program against a fresh tape.

    The engine owns the tape, pointer and program counter. It never logs and
    never swallows its own errors: structural problems were rejected when the
    Program was built, runtime faults are raised as DerstandRuntimeError.
    """

    def __init__(self, program: Program, io: Optional[IOBridge] = None,
                 config: Optional[EngineConfig] = None):
        self.program = program
        self.io = io if io is not None else StreamIO()
        self.config = config if config is not None else EngineConfig()
        self.state = MachineState.fresh(self.config.memory_size)
        self._mode = POINTER_MODES[self.config.pointer_policy]
        self._code = program.opcode_array()
        self._jumps = program.jump_array()

    @property
    def finished(self) -> bool:
        return self.state.pc >= len(self.program)

    def reset(self) -> None:
        self.state.reset()

    def run(self) -> MachineState:
        try:
            if self.config.jit:
                self._run_jit()
            else:
                while self.step():
                    pass
        finally:
            self._flush()
        return self.state

    def step(self) -> bool:
        """Execute a single instruction. Returns False once the program has ended."""
        st = self.state
        if st.pc >= len(self.program):
            return False
        self._check_budget()

        op = self.program.tokens[st.pc].op

        if op == Op.INCREMENT:
            st.memory[st.pointer] = (int(st.memory[st.pointer]) + 1) & 0xFF
        elif op == Op.DECREMENT:
            st.memory[st.pointer] = (int(st.memory[st.pointer]) - 1) & 0xFF
        elif op == Op.RIGHT:
            st.pointer = self._shift(1)
        elif op == Op.LEFT:
            st.pointer = self._shift(-1)
        elif op == Op.JUMP_IF_ZERO:
            if st.memory[st.pointer] == 0:
                st.pc = self.program.jumps[st.pc]
        elif op == Op.JUMP_IF_NOT_ZERO:
            if st.memory[st.pointer] != 0:
                st.pc = self.program.jumps[st.pc]
        elif op == Op.OUTPUT:
            self._output()
        elif op == Op.INPUT:
            self._input()
        elif op == Op.ZERO:
            st.memory[st.pointer] = 0
        elif op == Op.COPY:
            target = self._shift(1)
            if target != st.pointer:
                st.memory[target] = st.memory[st.pointer]
        elif op == Op.MOVE_HIGH:
            st.pointer = len(st.memory) - 1
        elif op == Op.MOVE_LOW:
            st.pointer = 0
        else:
            raise AssertionError(f"unhandled instruction {op!r}")

        st.pc += 1
        st.steps += 1
        return st.pc < len(self.program)

    def _run_jit(self) -> None:
        st = self.state
        max_steps = self.config.max_steps
        prog_len = len(self._code)

        while st.pc < prog_len:
            budget = CHUNK_STEPS
            if max_steps is not None:
                self._check_budget()
                budget = min(budget, max_steps - st.steps)

            pc, pointer, stop_reason, steps = run_kernel(
                self._code, self._jumps, st.memory, st.pc, st.pointer, self._mode, budget
            )
            st.pc = int(pc)
            st.pointer = int(pointer)
            st.steps += int(steps)

            if stop_reason == STOP_OUTPUT:
                self._output()
            elif stop_reason == STOP_INPUT:
                self._input()
            elif stop_reason == STOP_POINTER:
                raise self._pointer_fault()
            else:
                continue

            st.pc += 1
            st.steps += 1

    def _check_budget(self) -> None:
        st = self.state
        if self.config.max_steps is not None and st.steps >= self.config.max_steps:
            raise make_runtime_error(StepLimitExceeded,
                                     message=f"Step limit of {self.config.max_steps} exceeded",
                                     pc=st.pc, pointer=st.pointer, position=self._position())

    def _shift(self, delta: int) -> int:
        target = shift_pointer(self.state.pointer, delta, len(self.state.memory), self._mode)
        if target < 0:
            raise self._pointer_fault()
        return target

    def _pointer_fault(self) -> PointerOutOfRange:
        st = self.state
        op = self.program.tokens[st.pc].op
        if op == Op.COPY:
            message = f"Copy target right of cell {len(st.memory) - 1}"
        elif op == Op.LEFT:
            message = "Pointer moved left of cell 0"
        else:
            message = f"Pointer moved right of cell {len(st.memory) - 1}"
        return make_runtime_error(PointerOutOfRange, message=message,
                                  pc=st.pc, pointer=st.pointer, position=self._position())

    def _output(self) -> None:
        st = self.state
        try:
            self.io.write(int(st.memory[st.pointer]))
        except OSError as e:
            raise make_runtime_error(OutputError, message=f"Output error: {e}",
                                     pc=st.pc, pointer=st.pointer, position=self._position()) from e

    def _flush(self) -> None:
        st = self.state
        try:
            self.io.flush()
        except OSError as e:
            raise make_runtime_error(OutputError, message=f"Output error: {e}",
                                     pc=st.pc, pointer=st.pointer, position=self._position()) from e

    def _input(self) -> None:
        st = self.state
        try:
            value = self.io.read()
        except OSError as e:
            raise make_runtime_error(InputError, message=f"Input error: {e}",
                                     pc=st.pc, pointer=st.pointer, position=self._position()) from e

        if value is None:
            if self.config.eof_policy is EofPolicy.ERROR:
                raise make_runtime_error(EndOfInput, message="End of input",
                                         pc=st.pc, pointer=st.pointer, position=self._position())
            if self.config.eof_policy is EofPolicy.UNCHANGED:
                return
            value = 0

        st.memory[st.pointer] = value & 0xFF

    def _position(self) -> Optional[int]:
        if self.state.pc < len(self.program):
            return self.program.tokens[self.state.pc].position
        return None
