from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from .bridge import BufferedIO, IOBridge
from .config import EngineConfig
from .engine import Engine
from .program import Program, compile_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    output: bytes
    steps: int
    pointer: int
    elapsed: float
    tape: np.ndarray

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")


def compile_string(source: str) -> Program:
    program = compile_source(source)
    logger.debug("compiled %d instructions from %d characters", len(program), len(source))
    return program


def compile_file(path: str | Path, *, encoding: str = "utf-8") -> Program:
    with open(Path(path), "r", encoding=encoding, newline="") as f:
        return compile_string(f.read())


def run_program(program: Program, io: IOBridge, *, config: Optional[EngineConfig] = None) -> Engine:
    engine = Engine(program, io=io, config=config)
    start = time.perf_counter()
    engine.run()
    logger.debug("program finished after %d steps in %.3f ms",
                 engine.state.steps, (time.perf_counter() - start) * 1000)
    return engine


def run_string(source: str, *, input_data: bytes | str = b"",
               config: Optional[EngineConfig] = None) -> RunResult:
    program = compile_string(source)
    io = BufferedIO(input_data)
    start = time.perf_counter()
    engine = run_program(program, io, config=config)
    elapsed = time.perf_counter() - start
    return RunResult(
        output=bytes(io.output),
        steps=engine.state.steps,
        pointer=engine.state.pointer,
        elapsed=elapsed,
        tape=engine.state.memory.copy(),
    )


def run_file(path: str | Path, *, input_data: bytes | str = b"",
             config: Optional[EngineConfig] = None, encoding: str = "utf-8") -> RunResult:
    with open(Path(path), "r", encoding=encoding, newline="") as f:
        source = f.read()
    return run_string(source, input_data=input_data, config=config)
