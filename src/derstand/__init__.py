import logging

from .api import RunResult, compile_file, compile_string, run_file, run_program, run_string
from .bridge import BufferedIO, IOBridge, StreamIO
from .config import EngineConfig, EofPolicy, PointerPolicy
from .engine import Engine
from .errors import (
    ConfigError,
    DerstandError,
    DerstandRuntimeError,
    DerstandStructuralError,
    EndOfInput,
    InputError,
    OutputError,
    PointerOutOfRange,
    StepLimitExceeded,
    UnmatchedCloseDelimiter,
    UnmatchedOpenDelimiter,
)
from .lexer import Op, Token, tokenize
from .program import Program, match_brackets

__version__ = '0.1.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Engine',
    'EngineConfig',
    'EofPolicy',
    'PointerPolicy',
    'Program',
    'Op',
    'Token',
    'tokenize',
    'match_brackets',
    'IOBridge',
    'StreamIO',
    'BufferedIO',
    'RunResult',
    'compile_string',
    'compile_file',
    'run_program',
    'run_string',
    'run_file',
    'DerstandError',
    'ConfigError',
    'DerstandStructuralError',
    'UnmatchedOpenDelimiter',
    'UnmatchedCloseDelimiter',
    'DerstandRuntimeError',
    'PointerOutOfRange',
    'EndOfInput',
    'InputError',
    'OutputError',
    'StepLimitExceeded',
]
