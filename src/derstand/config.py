from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional

from .errors import ConfigError

MEMORY_SIZE = 30000


class PointerPolicy(Enum):
    CLAMP = 'clamp'
    WRAP = 'wrap'
    ERROR = 'error'


class EofPolicy(Enum):
    ZERO = 'zero'
    UNCHANGED = 'unchanged'
    ERROR = 'error'


def _parse_enum(enum_cls, name: str, value: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        choices = ', '.join(m.value for m in enum_cls)
        raise ConfigError(message=f"Invalid {name}: {value!r} (expected one of: {choices})") from None


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(message=f"Invalid {name}: {value!r} (expected an integer)") from None


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in {'1', 'true', 'yes', 'on'}:
        return True
    if v in {'0', 'false', 'no', 'off', ''}:
        return False
    raise ConfigError(message=f"Invalid {name}: {value!r} (expected a boolean)")


@dataclass(frozen=True)
class EngineConfig:
    memory_size: int = MEMORY_SIZE
    pointer_policy: PointerPolicy = PointerPolicy.CLAMP
    eof_policy: EofPolicy = EofPolicy.ZERO
    max_steps: Optional[int] = None
    jit: bool = True

    def __post_init__(self) -> None:
        if self.memory_size < 1:
            raise ConfigError(message=f"memory_size must be positive, got {self.memory_size}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ConfigError(message=f"max_steps must not be negative, got {self.max_steps}")
        # accept plain strings, e.g. straight from argparse
        if not isinstance(self.pointer_policy, PointerPolicy):
            object.__setattr__(self, 'pointer_policy',
                               _parse_enum(PointerPolicy, 'pointer policy', str(self.pointer_policy)))
        if not isinstance(self.eof_policy, EofPolicy):
            object.__setattr__(self, 'eof_policy',
                               _parse_enum(EofPolicy, 'EOF policy', str(self.eof_policy)))

    def with_overrides(self, **overrides) -> 'EngineConfig':
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'EngineConfig':
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get('DERSTAND_MEMORY_SIZE'):
            kwargs['memory_size'] = _parse_int('DERSTAND_MEMORY_SIZE', env['DERSTAND_MEMORY_SIZE'])
        if env.get('DERSTAND_POINTER_POLICY'):
            kwargs['pointer_policy'] = _parse_enum(PointerPolicy, 'DERSTAND_POINTER_POLICY',
                                                   env['DERSTAND_POINTER_POLICY'])
        if env.get('DERSTAND_EOF_POLICY'):
            kwargs['eof_policy'] = _parse_enum(EofPolicy, 'DERSTAND_EOF_POLICY', env['DERSTAND_EOF_POLICY'])
        if env.get('DERSTAND_MAX_STEPS'):
            kwargs['max_steps'] = _parse_int('DERSTAND_MAX_STEPS', env['DERSTAND_MAX_STEPS'])
        if 'DERSTAND_JIT' in env:
            kwargs['jit'] = _parse_bool('DERSTAND_JIT', env['DERSTAND_JIT'])
        return cls(**kwargs)
